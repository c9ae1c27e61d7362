"""
PipelineConfig - Configuration for the derivative generator.
"""

import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from .derivative_encoder import DerivativeEncoder


class InvalidSourcePolicy(str, Enum):
    """What to do with a source that cannot be read, decoded or encoded."""
    FAIL = 'fail'
    PLACEHOLDER = 'placeholder'


DEFAULT_WIDTHS = (960, 1440, 1920)
DEFAULT_FORMATS = ('webp', 'jpg', 'avif')
DEFAULT_QUALITY = {'webp': 78, 'jpg': 82, 'avif': 50, 'png': 100}
DEFAULT_FALLBACK_QUALITY = {'webp': 60, 'jpg': 60, 'avif': 45, 'png': 100}

SITE_CANDIDATES = ('.', 'photography-portfolio')


def _parse_int_list(value: str) -> Tuple[int, ...]:
    return tuple(int(part) for part in value.split(',') if part.strip())


def _parse_str_list(value: str) -> Tuple[str, ...]:
    return tuple(part.strip().lower() for part in value.split(',') if part.strip())


def discover_site_dir(cwd: Optional[str] = None) -> str:
    """
    Find the site directory holding public/images.

    Checks the working directory, then a photography-portfolio
    subdirectory. Falls back to the working directory.
    """
    base = Path(cwd or os.getcwd())
    for candidate in SITE_CANDIDATES:
        site = (base / candidate).resolve()
        if (site / 'public' / 'images').is_dir():
            return str(site)
    return str(base.resolve())


@dataclass
class PipelineConfig:
    """
    Configuration for one generator run.

    Attributes:
        source_root: Directory scanned recursively for raster sources
        output_root: Directory receiving derivatives and the manifest
        target_widths: Responsive widths, in order
        max_full_width: Cap for the full-size derivative
        formats: Output encodings, in manifest order
        quality_by_format: Encoder quality (0-100) per format
        placeholder_width: Width of the inline blur preview
        placeholder_quality: JPEG quality of the blur preview
        fallback_size: Size of the flat image used for invalid sources
        fallback_color: RGB color of the flat image
        fallback_quality_by_format: Encoder quality for the flat image
        on_invalid_source: 'fail' or 'placeholder'
        verify_only: Check for existing derivatives without writing
        manifest_name: Manifest filename under output_root
        workers: Number of files processed concurrently
    """
    source_root: str = ''
    output_root: str = ''
    target_widths: Tuple[int, ...] = DEFAULT_WIDTHS
    max_full_width: int = 1920
    formats: Tuple[str, ...] = DEFAULT_FORMATS
    quality_by_format: Dict[str, int] = field(default_factory=lambda: dict(DEFAULT_QUALITY))
    placeholder_width: int = 24
    placeholder_quality: int = 40
    fallback_size: Tuple[int, int] = (8, 8)
    fallback_color: Tuple[int, int, int] = (230, 230, 230)
    fallback_quality_by_format: Dict[str, int] = field(
        default_factory=lambda: dict(DEFAULT_FALLBACK_QUALITY)
    )
    on_invalid_source: InvalidSourcePolicy = InvalidSourcePolicy.FAIL
    verify_only: bool = False
    manifest_name: str = 'manifest.json'
    workers: int = 1

    @classmethod
    def from_env(cls) -> 'PipelineConfig':
        """Create configuration from DERIVGEN_* environment variables."""
        config = cls(
            source_root=os.environ.get('DERIVGEN_SOURCE_ROOT', ''),
            output_root=os.environ.get('DERIVGEN_OUTPUT_ROOT', ''),
        )

        if os.environ.get('DERIVGEN_WIDTHS'):
            config.target_widths = _parse_int_list(os.environ['DERIVGEN_WIDTHS'])
        if os.environ.get('DERIVGEN_MAX_WIDTH'):
            config.max_full_width = int(os.environ['DERIVGEN_MAX_WIDTH'])
        if os.environ.get('DERIVGEN_FORMATS'):
            config.formats = _parse_str_list(os.environ['DERIVGEN_FORMATS'])
        if os.environ.get('DERIVGEN_WORKERS'):
            config.workers = int(os.environ['DERIVGEN_WORKERS'])

        for fmt in DerivativeEncoder.FORMATS:
            value = os.environ.get(f'DERIVGEN_QUALITY_{fmt.upper()}')
            if value:
                config.quality_by_format[fmt] = int(value)

        return config

    @property
    def manifest_path(self) -> str:
        """Full path of the manifest file."""
        return os.path.join(self.output_root, self.manifest_name)

    @property
    def fix_invalid(self) -> bool:
        """True when invalid sources are replaced with placeholders."""
        return self.on_invalid_source == InvalidSourcePolicy.PLACEHOLDER

    def quality_for(self, fmt: str) -> int:
        return self.quality_by_format.get(fmt, DEFAULT_QUALITY.get(fmt, 80))

    def fallback_quality_for(self, fmt: str) -> int:
        return self.fallback_quality_by_format.get(fmt, DEFAULT_FALLBACK_QUALITY.get(fmt, 60))

    def validate(self) -> List[str]:
        """
        Validate configuration.

        Returns:
            List of error messages (empty if valid)
        """
        errors = []

        if not self.source_root:
            errors.append("Source root is required (--source or DERIVGEN_SOURCE_ROOT)")
        elif not os.path.isdir(self.source_root):
            errors.append(f"Source root does not exist: {self.source_root}")

        if not self.output_root:
            errors.append("Output root is required (--output or DERIVGEN_OUTPUT_ROOT)")
        elif self.source_root:
            source = Path(self.source_root).resolve()
            output = Path(self.output_root).resolve()
            if output == source or source in output.parents:
                errors.append(
                    f"Output root must not be the source root or inside it: {self.output_root}"
                )

        if not self.target_widths:
            errors.append("At least one target width is required")
        elif any(w <= 0 for w in self.target_widths):
            errors.append(f"Target widths must be positive: {list(self.target_widths)}")

        if self.max_full_width <= 0:
            errors.append(f"Max full width must be positive: {self.max_full_width}")

        if not self.formats:
            errors.append("At least one output format is required")

        for fmt in self.formats:
            if fmt not in DerivativeEncoder.FORMATS:
                errors.append(
                    f"Unsupported format: {fmt} "
                    f"(choose from {', '.join(sorted(DerivativeEncoder.FORMATS))})"
                )
            elif not self.verify_only and not DerivativeEncoder.can_encode(fmt):
                errors.append(f"Installed Pillow cannot encode {fmt}")

        for fmt in self.formats:
            for quality in (self.quality_for(fmt), self.fallback_quality_for(fmt)):
                if not 0 <= quality <= 100:
                    errors.append(f"Quality for {fmt} must be between 0 and 100: {quality}")

        if not 0 <= self.placeholder_quality <= 100:
            errors.append(f"Placeholder quality must be between 0 and 100: {self.placeholder_quality}")

        if self.placeholder_width <= 0:
            errors.append(f"Placeholder width must be positive: {self.placeholder_width}")

        if min(self.fallback_size) <= 0:
            errors.append(f"Fallback size must be positive: {self.fallback_size}")

        if self.workers < 1:
            errors.append(f"Workers must be at least 1: {self.workers}")

        return errors
