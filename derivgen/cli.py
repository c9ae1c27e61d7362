"""
Command Line Interface for responsive image derivative generation.
"""

import argparse
import logging
import os
from typing import List, Optional, Tuple

from .config import InvalidSourcePolicy, PipelineConfig, discover_site_dir
from .derivative_encoder import DerivativeEncoder
from .errors import ManifestWriteFailure, SourceTreeError
from .generation_progress import GenerationProgress
from .generator import Generator
from .local_client import LocalClient
from .reporter import Reporter


def setup_logging(verbose: bool) -> logging.Logger:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO

    logging.basicConfig(
        level=level,
        format='%(asctime)s [%(levelname)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    logging.getLogger('PIL').setLevel(logging.WARNING)

    return logging.getLogger('derivgen')


def int_list(value: str) -> Tuple[int, ...]:
    """Parse a comma-separated list of integers."""
    try:
        return tuple(int(part) for part in value.split(',') if part.strip())
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected comma-separated integers, got {value!r}")


def str_list(value: str) -> Tuple[str, ...]:
    """Parse a comma-separated list of lowercase names."""
    return tuple(part.strip().lower() for part in value.split(',') if part.strip())


def get_config(args: argparse.Namespace) -> PipelineConfig:
    """Get pipeline configuration from environment and CLI overrides."""
    config = PipelineConfig.from_env()
    site_dir = args.site_dir or discover_site_dir()

    if args.source:
        config.source_root = args.source
    elif not config.source_root:
        config.source_root = os.path.join(site_dir, 'originals')

    if args.output:
        config.output_root = args.output
    elif not config.output_root:
        config.output_root = os.path.join(site_dir, 'public', 'images')

    if args.widths:
        config.target_widths = args.widths
    if args.max_width:
        config.max_full_width = args.max_width
    if args.formats:
        config.formats = args.formats
    if args.workers:
        config.workers = args.workers

    if args.fix_invalid:
        config.on_invalid_source = InvalidSourcePolicy.PLACEHOLDER
    config.verify_only = args.verify

    return config


def cmd_run(args: argparse.Namespace) -> int:
    """Execute a generation or verification run."""
    logger = setup_logging(args.verbose)

    try:
        config = get_config(args)
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1

    errors = config.validate()
    if errors:
        for error in errors:
            logger.error(error)
        return 1

    logger.info(f"Source: {config.source_root}")
    logger.info(f"Output: {config.output_root}")
    if config.verify_only:
        logger.info("Verify mode: no files will be written")
    else:
        logger.info(f"Widths: {', '.join(str(w) for w in config.target_widths)} "
                    f"(full size capped at {config.max_full_width})")
        logger.info(f"Formats: {', '.join(config.formats)}")
        logger.info(f"Invalid sources: {config.on_invalid_source.value}")

    if args.show_files:
        logger.info("Show-files mode: will print each file")

    generator = Generator(
        source_client=LocalClient(config.source_root, logger),
        output_client=LocalClient(config.output_root, logger),
        encoder=DerivativeEncoder(logger),
        config=config,
        logger=logger,
    )

    progress = None
    if not args.quiet:
        progress = GenerationProgress(show_files=args.show_files, logger=logger)

    try:
        stats = generator.run(progress)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except (SourceTreeError, ManifestWriteFailure) as e:
        logger.error(str(e))
        return 1
    except Exception as e:
        logger.exception(f"Run failed: {e}")
        return 1

    if args.quiet:
        if not config.verify_only:
            logger.info(stats.summary_line())
    else:
        print()
        reporter = Reporter()
        if config.verify_only:
            reporter.report_verification(stats)
        else:
            if args.list_entries and generator.manifest is not None:
                reporter.report_manifest(generator.manifest)
                print()
            reporter.report_run(stats, generator.manifest)

    return stats.exit_code


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog='derivgen',
        description='Responsive image derivatives and manifest for the portfolio site',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  Generate:      python -m derivgen
  Placeholders:  python -m derivgen --fix-invalid
  Verify:        python -m derivgen --verify

Defaults:
  Sources are read from <site>/originals and derivatives plus manifest.json
  are written to <site>/public/images. The site directory is the current
  directory or ./photography-portfolio, whichever holds public/images.
  DERIVGEN_* environment variables override defaults; flags override both.
"""
    )

    parser.add_argument('--verify', action='store_true',
                        help='Check that every source has a derivative; write nothing')
    parser.add_argument('--fix-invalid', '--placeholders', dest='fix_invalid', action='store_true',
                        help='Replace unreadable or corrupt sources with a flat placeholder')

    paths = parser.add_argument_group('Paths')
    paths.add_argument('--site-dir', metavar='PATH', help='Site directory (default: discovered)')
    paths.add_argument('--source', metavar='PATH', help='Source image directory')
    paths.add_argument('--output', metavar='PATH', help='Derivative output directory')

    encoding = parser.add_argument_group('Encoding')
    encoding.add_argument('--widths', type=int_list, metavar='W,W,...',
                          help='Responsive widths (default: 960,1440,1920)')
    encoding.add_argument('--max-width', type=int, metavar='N',
                          help='Full-size width cap (default: 1920)')
    encoding.add_argument('--formats', type=str_list, metavar='FMT,...',
                          help='Output formats (default: webp,jpg,avif)')
    encoding.add_argument('--workers', type=int, metavar='N',
                          help='Images processed concurrently (default: 1)')

    output = parser.add_argument_group('Output')
    output.add_argument('--show-files', action='store_true',
                        help='Print each file as processed with result')
    output.add_argument('--list-entries', action='store_true',
                        help='Print every manifest entry after generation')
    output.add_argument('-q', '--quiet', action='store_true', help='Suppress progress output')
    output.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')

    return parser


def main(args: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    parsed_args = parser.parse_args(args)
    return cmd_run(parsed_args)
