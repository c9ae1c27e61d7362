"""
GenerationProgress - Per-file and periodic progress output for a run.
"""

import logging
from typing import Optional

from .file_result import FileResult, FileState
from .generation_stats import GenerationStats
from .reporter import format_bytes


class GenerationProgress:
    """
    Progress callbacks invoked by the Generator.

    With show_files, one line is printed per source; otherwise a progress
    line is logged every log_interval completed sources.
    """

    def __init__(
        self,
        show_files: bool = False,
        log_interval: int = 25,
        logger: Optional[logging.Logger] = None
    ):
        """
        Args:
            show_files: Print a line per source
            log_interval: Completed sources between progress log lines
            logger: Optional logger instance
        """
        self.show_files = show_files
        self.log_interval = log_interval
        self.logger = logger or logging.getLogger(__name__)
        self.last_logged = 0

    def on_file_processed(self, result: FileResult, index: int, total: int) -> None:
        """Report a source that reached its terminal state (index is 1-based)."""
        if not self.show_files:
            return

        counter = f"  [{index}/{total}]"
        if result.state == FileState.DERIVATIVES_WRITTEN:
            written = f"{len(result.outputs)} files ({format_bytes(result.bytes_written)})"
            print(f"{counter} [OK] {result.key} -> {written}")
        elif result.state == FileState.PLACEHOLDER_WRITTEN:
            print(f"{counter} [PLACEHOLDER] {result.key} -> {result.error or 'invalid source'}")
        else:
            print(f"{counter} [ERROR] {result.key} -> {result.error or 'failed'}")

    def on_file_verified(self, key: str, present: bool) -> None:
        if self.show_files:
            print(f"  [{'OK' if present else 'MISSING'}] {key}")

    def on_progress_update(self, stats: GenerationStats) -> None:
        """Log a progress line once log_interval more sources have completed."""
        if self.show_files:
            return

        done = stats.completed_count
        if done - self.last_logged < self.log_interval:
            return
        self.last_logged = done

        self.logger.info(
            f"Progress: {stats.processed} written, {stats.placeholders} placeholders, "
            f"{stats.errors} errors, {stats.remaining_count} left "
            f"({stats.rate_per_minute:.1f}/min, "
            f"~{stats.estimated_remaining_seconds / 60:.0f}m remaining)"
        )

    def __call__(self, stats: GenerationStats) -> None:
        self.on_progress_update(stats)
