"""
Generator - Builds responsive derivatives and the manifest for a source tree.
"""

import dataclasses
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Iterator, List, Optional, Tuple

from .config import PipelineConfig
from .derivative_encoder import DerivativeEncoder
from .errors import (
    DecodeFailure,
    DerivativeWriteFailure,
    EncodeFailure,
    SourceUnreadable,
)
from .file_result import FileResult, FileState
from .generation_progress import GenerationProgress
from .generation_stats import GenerationStats
from .local_client import LocalClient
from .manifest import Manifest
from .manifest_entry import DerivativeInfo, ManifestEntry
from .scanner import Scanner

# Errors the invalid-source policy applies to
POLICED_ERRORS = (SourceUnreadable, DecodeFailure, EncodeFailure)


class Generator:
    """
    Generates derivative sets for every raster source and writes the manifest.

    Each source is processed independently into an immutable FileResult;
    the manifest is folded from the results after every source has been
    attempted.
    """

    def __init__(
        self,
        source_client: LocalClient,
        output_client: LocalClient,
        encoder: DerivativeEncoder,
        config: PipelineConfig,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize generator.

        Args:
            source_client: Client rooted at the source tree (read only)
            output_client: Client rooted at the output tree
            encoder: Image codec
            config: Pipeline configuration
            logger: Optional logger instance
        """
        self.source = source_client
        self.output = output_client
        self.encoder = encoder
        self.config = config
        self.logger = logger or logging.getLogger(__name__)
        self.scanner = Scanner(source_client, self.logger)
        self.stats = GenerationStats()
        self.manifest: Optional[Manifest] = None

    def run(self, progress: Optional[GenerationProgress] = None) -> GenerationStats:
        """Generate, or verify when the config asks for it."""
        if self.config.verify_only:
            return self.verify(progress)
        return self.generate(progress)

    def generate(self, progress: Optional[GenerationProgress] = None) -> GenerationStats:
        """
        Build derivatives for every source and write the manifest.

        Args:
            progress: Optional progress tracker

        Returns:
            GenerationStats with results

        Raises:
            SourceTreeError: if the source root cannot be listed
            ManifestWriteFailure: if the manifest cannot be written
        """
        sources = self.scanner.scan()
        self.stats = GenerationStats(discovered=len(sources))

        if not sources:
            self.logger.info(f"No images found under {self.source.root_path}")

        policy = self.config.on_invalid_source.value
        self.logger.info(
            f"Starting generation: {len(sources)} images, "
            f"widths {list(self.config.target_widths)}, "
            f"formats {list(self.config.formats)}, invalid sources: {policy}"
        )

        results: List[FileResult] = []
        for index, result in enumerate(self._iter_results(sources), start=1):
            self._record(result)
            results.append(result)

            if progress:
                progress.on_file_processed(result, index, len(sources))
                progress.on_progress_update(self.stats)

        manifest = Manifest.from_results(results)
        self.stats.collisions = len(manifest.collisions)

        manifest.save(self.config.manifest_path)
        self.manifest = manifest
        self.stats.manifest_path = self.config.manifest_path

        self.logger.info(
            f"Generation complete: {self.stats.processed} written, "
            f"{self.stats.placeholders} placeholders, {self.stats.errors} errors, "
            f"{self.stats.files_written} files ({self.stats.elapsed_seconds:.1f}s)"
        )

        return self.stats

    def verify(self, progress: Optional[GenerationProgress] = None) -> GenerationStats:
        """
        Check that every source has a full-size derivative in at least one
        configured format. Writes nothing.

        Returns:
            GenerationStats with the missing sources listed
        """
        sources = self.scanner.scan()
        self.stats = GenerationStats(discovered=len(sources))

        for key in sources:
            base = Scanner.normalize_base_path(key)
            present = any(
                self.output.object_exists(Scanner.derivative_key(base, fmt))
                for fmt in self.config.formats
            )
            self.stats.verified += 1

            if not present:
                self.stats.missing.append(key)
                self.logger.warning(f"Derivative missing for: {key}")

            if progress:
                progress.on_file_verified(key, present)

        self.logger.info(
            f"Verification complete: {self.stats.verified} checked, "
            f"{len(self.stats.missing)} missing"
        )

        return self.stats

    def process_source(self, key: str) -> FileResult:
        """
        Process a single source into its terminal state.

        Per-file errors are logged and returned in the result, never raised.
        """
        try:
            return self._process_source(key)
        except Exception as e:
            self.logger.error(f"Failed: {key} - unexpected error: {e!r}")
            return FileResult(key=key, state=FileState.FAILED, error=f"unexpected error: {e!r}")

    def _process_source(self, key: str) -> FileResult:
        base = Scanner.normalize_base_path(key)
        state = FileState.DERIVATIVES_WRITTEN
        cause = None

        try:
            data = self._read_source(key)
            entry, outputs = self._render_derivatives(key, base, data)
        except POLICED_ERRORS as e:
            if not self.config.fix_invalid:
                self.logger.error(f"Failed: {key} - {e}")
                return FileResult(key=key, state=FileState.FAILED, error=str(e))

            self.logger.warning(f"Replacing {key} with placeholder: {e}")
            try:
                entry, outputs = self._render_placeholder(base)
            except EncodeFailure as pe:
                self.logger.error(f"Failed: {key} - placeholder: {pe}")
                return FileResult(key=key, state=FileState.FAILED, error=str(pe))
            state = FileState.PLACEHOLDER_WRITTEN
            cause = str(e)

        try:
            written = self._write_outputs(outputs)
        except DerivativeWriteFailure as e:
            self.logger.error(f"Failed: {key} - {e}")
            return FileResult(key=key, state=FileState.FAILED, error=str(e))

        return FileResult(key=key, state=state, entry=entry, outputs=written, error=cause)

    def responsive_widths(self, intrinsic_width: int) -> List[int]:
        """Target widths clamped to the source width, without duplicates."""
        widths: List[int] = []
        for width in self.config.target_widths:
            clamped = min(width, intrinsic_width)
            if clamped not in widths:
                widths.append(clamped)
        return widths

    def _iter_results(self, sources: List[str]) -> Iterator[FileResult]:
        """Process sources, in order, on a thread pool when workers > 1."""
        if self.config.workers > 1 and len(sources) > 1:
            with ThreadPoolExecutor(max_workers=self.config.workers) as executor:
                yield from executor.map(self.process_source, sources)
        else:
            for key in sources:
                yield self.process_source(key)

    def _record(self, result: FileResult) -> None:
        """Update run statistics from a file result."""
        if result.state == FileState.DERIVATIVES_WRITTEN:
            self.stats.processed += 1
        elif result.state == FileState.PLACEHOLDER_WRITTEN:
            self.stats.placeholders += 1
        else:
            self.stats.errors += 1
            self.stats.error_details.append(f"{result.key}: {result.error}")

        self.stats.files_written += len(result.outputs)
        self.stats.bytes_written += result.bytes_written

    def _read_source(self, key: str) -> bytes:
        try:
            return self.source.download_object(key)
        except OSError as e:
            raise SourceUnreadable(f"cannot read source: {e}", path=key) from e

    def _render_derivatives(
        self,
        key: str,
        base: str,
        data: bytes
    ) -> Tuple[ManifestEntry, Dict[str, bytes]]:
        """Encode every derivative of a source in memory."""
        decoded = self.encoder.decode(data, path=key)
        img = decoded.image
        formats = self.config.formats

        outputs: Dict[str, bytes] = {}
        derivatives: Dict[str, List[DerivativeInfo]] = {fmt: [] for fmt in formats}

        for width in self.responsive_widths(decoded.width):
            resized = self.encoder.resize(img, width)
            for fmt in formats:
                out_key = Scanner.derivative_key(base, fmt, width)
                outputs[out_key] = self.encoder.encode(resized, fmt, self.config.quality_for(fmt))
                derivatives[fmt].append(DerivativeInfo(width=width, path=out_key))

        full = self.encoder.resize(img, min(self.config.max_full_width, decoded.width))
        for fmt in formats:
            outputs[Scanner.derivative_key(base, fmt)] = self.encoder.encode(
                full, fmt, self.config.quality_for(fmt)
            )

        entry = ManifestEntry(
            base=base,
            width=decoded.width,
            height=decoded.height,
            derivatives=derivatives,
            blur_data_url=self.encoder.blur_data_url(
                img, self.config.placeholder_width, self.config.placeholder_quality
            ),
        )
        return entry, outputs

    def _render_placeholder(self, base: str) -> Tuple[ManifestEntry, Dict[str, bytes]]:
        """Encode a flat image at the bare base name for each format."""
        img = self.encoder.flat_image(self.config.fallback_size, self.config.fallback_color)

        outputs = {
            Scanner.derivative_key(base, fmt): self.encoder.encode(
                img, fmt, self.config.fallback_quality_for(fmt)
            )
            for fmt in self.config.formats
        }

        entry = ManifestEntry(
            base=base,
            width=img.size[0],
            height=img.size[1],
            derivatives={fmt: [] for fmt in self.config.formats},
            blur_data_url=self.encoder.blur_data_url(
                img, self.config.placeholder_width, self.config.placeholder_quality
            ),
            placeholder=True,
        )
        return entry, outputs

    def _write_outputs(self, outputs: Dict[str, bytes]) -> Tuple[Tuple[str, int], ...]:
        written = []
        for out_key, data in outputs.items():
            try:
                self.output.upload_object(out_key, data)
            except OSError as e:
                raise DerivativeWriteFailure(f"cannot write {out_key}: {e}", path=out_key) from e
            self.logger.debug(f"Wrote: {out_key} ({len(data)} bytes)")
            written.append((out_key, len(data)))
        return tuple(written)


def generate(
    source_root: str,
    config: PipelineConfig,
    progress: Optional[GenerationProgress] = None,
    logger: Optional[logging.Logger] = None
) -> GenerationStats:
    """
    Run the pipeline over a source tree.

    Args:
        source_root: Directory scanned recursively for raster sources
        config: Pipeline configuration (its output_root receives the results)
        progress: Optional progress tracker
        logger: Optional logger instance

    Returns:
        GenerationStats for the run
    """
    config = dataclasses.replace(config, source_root=source_root)
    generator = Generator(
        source_client=LocalClient(config.source_root, logger),
        output_client=LocalClient(config.output_root, logger),
        encoder=DerivativeEncoder(logger),
        config=config,
        logger=logger,
    )
    return generator.run(progress)
