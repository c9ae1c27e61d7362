"""
LocalClient - Local filesystem operations for listing, reading, and writing files.
"""

import logging
import os
from pathlib import Path, PurePosixPath
from typing import Iterator, Optional, Set

from .errors import SourceTreeError


class LocalClient:
    """
    Filesystem access rooted at a directory.

    Keys are POSIX paths relative to the root, so manifests stay portable
    across platforms.
    """

    def __init__(self, root_path: str, logger: Optional[logging.Logger] = None):
        """
        Initialize local client.

        Args:
            root_path: Directory all keys are relative to
            logger: Optional logger instance
        """
        self.root_path = root_path
        self.logger = logger or logging.getLogger(__name__)

    def full_path(self, key: str) -> str:
        """Convert a relative key to a filesystem path."""
        return os.path.join(self.root_path, *PurePosixPath(key).parts)

    def list_files(self, extensions: Optional[Set[str]] = None) -> Iterator[str]:
        """
        List files under the root recursively.

        Args:
            extensions: Optional lowercase extensions to keep (e.g. {'.jpg'})

        Yields:
            Relative POSIX keys, sorted

        Raises:
            SourceTreeError: if the root is missing or cannot be listed
        """
        if not os.path.isdir(self.root_path):
            raise SourceTreeError(f"Directory not found: {self.root_path}", path=self.root_path)

        def on_error(err: OSError) -> None:
            if os.path.normpath(err.filename or '') == os.path.normpath(self.root_path):
                raise SourceTreeError(f"Cannot list {self.root_path}: {err}", path=self.root_path)
            self.logger.warning(f"Skipping unreadable directory {err.filename}: {err.strerror}")

        keys = []
        for dirpath, _dirnames, filenames in os.walk(self.root_path, onerror=on_error):
            rel_dir = Path(os.path.relpath(dirpath, self.root_path))
            for filename in filenames:
                if extensions is not None and os.path.splitext(filename)[1].lower() not in extensions:
                    continue
                keys.append((rel_dir / filename).as_posix())

        yield from sorted(keys)

    def download_object(self, key: str) -> bytes:
        """Read a file's content."""
        with open(self.full_path(key), 'rb') as f:
            return f.read()

    def upload_object(self, key: str, data: bytes) -> None:
        """Write a file, creating parent directories."""
        path = self.full_path(key)
        os.makedirs(os.path.dirname(path) or '.', exist_ok=True)
        with open(path, 'wb') as f:
            f.write(data)

    def object_exists(self, key: str) -> bool:
        return os.path.isfile(self.full_path(key))
