"""
FileResult - Outcome of processing a single source image.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from .manifest_entry import ManifestEntry


class FileState(str, Enum):
    """Terminal state of a source file."""
    DERIVATIVES_WRITTEN = 'derivatives-written'
    PLACEHOLDER_WRITTEN = 'placeholder-written'
    FAILED = 'failed'


@dataclass(frozen=True)
class FileResult:
    """
    Immutable result of processing one source.

    Attributes:
        key: Source path relative to the source root
        state: Terminal state
        entry: Manifest entry (None when failed)
        outputs: (path, size) of every file written
        error: Error message (failed, or the cause of a placeholder)
    """
    key: str
    state: FileState
    entry: Optional[ManifestEntry] = None
    outputs: Tuple[Tuple[str, int], ...] = ()
    error: Optional[str] = None

    @property
    def bytes_written(self) -> int:
        return sum(size for _path, size in self.outputs)
