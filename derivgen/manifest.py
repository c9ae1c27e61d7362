"""
Manifest - Mapping of normalized base paths to their derivative sets.
"""

import json
import logging
import os
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional

from .errors import ManifestWriteFailure
from .file_result import FileResult
from .manifest_entry import ManifestEntry

logger = logging.getLogger(__name__)


@dataclass
class Manifest:
    """
    Complete derivative manifest for one run.

    Serialized as a flat JSON object keyed by normalized base path, which
    is what the page-rendering layer reads.

    Attributes:
        created_at: ISO timestamp when the manifest was built (not serialized)
        entries: Dict mapping normalized base path -> ManifestEntry
        collisions: Base paths that were claimed by more than one source
    """
    created_at: str = field(default_factory=lambda: datetime.now().isoformat())
    entries: Dict[str, ManifestEntry] = field(default_factory=dict)
    collisions: List[str] = field(default_factory=list)

    def add_entry(self, entry: ManifestEntry, source: Optional[str] = None) -> None:
        """
        Add an entry. A later entry with the same base path replaces the
        earlier one; the collision is logged and recorded.
        """
        if entry.base in self.entries:
            self.collisions.append(entry.base)
            logger.warning(
                f"Manifest key collision: {entry.base} "
                f"(replaced by {source or 'later source'})"
            )
        self.entries[entry.base] = entry

    @classmethod
    def from_results(cls, results: Iterable[FileResult]) -> 'Manifest':
        """Fold per-file results into a manifest, in the order given."""
        manifest = cls()
        for result in results:
            if result.entry is not None:
                manifest.add_entry(result.entry, source=result.key)
        return manifest

    def lookup(self, base: str) -> Optional[ManifestEntry]:
        """
        Get the entry for a base path.

        None means no optimized derivative exists; callers fall back to
        the base file.
        """
        return self.entries.get(base)

    def __contains__(self, base: str) -> bool:
        return base in self.entries

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[ManifestEntry]:
        return iter(self.entries.values())

    @property
    def total_entries(self) -> int:
        return len(self.entries)

    @property
    def total_placeholders(self) -> int:
        return sum(1 for e in self.entries.values() if e.placeholder)

    @property
    def total_derivatives(self) -> int:
        """Responsive derivatives listed across all entries."""
        return sum(
            len(infos)
            for e in self.entries.values()
            for infos in e.derivatives.values()
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {base: entry.to_dict() for base, entry in self.entries.items()}

    @classmethod
    def from_dict(cls, data: dict) -> 'Manifest':
        """Create from dictionary."""
        manifest = cls()
        for base, entry_data in data.items():
            manifest.entries[base] = ManifestEntry.from_dict(entry_data)
        return manifest

    def save(self, filepath: str) -> None:
        """
        Save manifest to a JSON file, replacing any existing manifest.

        Raises:
            ManifestWriteFailure: if the file cannot be written
        """
        path = Path(filepath)
        # The previous manifest stays intact until the new one is complete
        tmp_path = path.with_name(f".{path.name}.tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, 'w') as f:
                json.dump(self.to_dict(), f, indent=2)
            os.replace(tmp_path, path)
        except (OSError, TypeError, ValueError) as e:
            if tmp_path.exists():
                tmp_path.unlink()
            raise ManifestWriteFailure(f"Cannot write manifest {filepath}: {e}", path=filepath) from e

        logger.debug(f"Manifest saved: {filepath} ({len(self.entries)} entries)")

    @classmethod
    def load(cls, filepath: str) -> 'Manifest':
        """Load manifest from JSON file."""
        with open(filepath, 'r') as f:
            data = json.load(f)
        return cls.from_dict(data)
