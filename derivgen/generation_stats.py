"""
GenerationStats - Counts and timing for a generation or verification run.
"""

import time
from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class GenerationStats:
    """
    Run report returned by Generator.generate() and Generator.verify().

    Attributes:
        discovered: Raster sources found under the source root
        processed: Sources with a full derivative set written
        placeholders: Invalid sources replaced with a flat image
        errors: Sources that failed
        files_written: Derivative files written
        bytes_written: Total size of the derivative files written
        collisions: Manifest keys claimed by more than one source
        missing: Sources without a derivative (verify mode)
        verified: Sources checked (verify mode)
        manifest_path: Where the manifest was written (None in verify mode)
        start_time: time.time() when the run started
        error_details: "key: message" for every failed source
    """
    discovered: int = 0
    processed: int = 0
    placeholders: int = 0
    errors: int = 0
    files_written: int = 0
    bytes_written: int = 0
    collisions: int = 0
    missing: List[str] = field(default_factory=list)
    verified: int = 0
    manifest_path: Optional[str] = None
    start_time: float = field(default_factory=time.time)
    error_details: List[str] = field(default_factory=list)

    @property
    def elapsed_seconds(self) -> float:
        return time.time() - self.start_time

    @property
    def written_sets(self) -> int:
        """Sources that produced output, derivatives or placeholder."""
        return self.processed + self.placeholders

    @property
    def completed_count(self) -> int:
        return self.written_sets + self.errors

    @property
    def remaining_count(self) -> int:
        return self.discovered - self.completed_count

    @property
    def rate_per_second(self) -> float:
        """Completed sources per second."""
        elapsed = self.elapsed_seconds
        return self.completed_count / elapsed if elapsed > 0 else 0.0

    @property
    def rate_per_minute(self) -> float:
        return self.rate_per_second * 60

    @property
    def estimated_remaining_seconds(self) -> float:
        rate = self.rate_per_second
        return self.remaining_count / rate if rate > 0 else 0.0

    @property
    def exit_code(self) -> int:
        """1 if any source failed or lacks a derivative, else 0."""
        return 1 if self.errors or self.missing else 0

    def summary_line(self) -> str:
        """'Done. Processed N files, wrote/updated M sets. Manifest: <path>'"""
        line = (
            f"Done. Processed {self.discovered} files, "
            f"wrote/updated {self.written_sets} sets."
        )
        if self.manifest_path:
            line += f" Manifest: {self.manifest_path}"
        return line
