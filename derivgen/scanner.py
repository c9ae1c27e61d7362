"""
Scanner - Finds raster sources and names their derivatives.
"""

import logging
import posixpath
import re
import time
from typing import List, Optional

from .local_client import LocalClient


class Scanner:
    """
    Enumerates raster sources under a root and maps each to its
    normalized base path and derivative keys.
    """

    RASTER_EXTENSIONS = {'.jpg', '.jpeg', '.png'}

    # Pattern to match responsive derivative filenames: base-width.ext
    # Captures: (base, width, ext)
    DERIVATIVE_PATTERN = re.compile(r'^(.+)-(\d+)(\.[^.]+)$')

    def __init__(
        self,
        storage_client: LocalClient,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize scanner.

        Args:
            storage_client: Client rooted at the source tree
            logger: Optional logger instance
        """
        self.storage = storage_client
        self.logger = logger or logging.getLogger(__name__)
        self.scan_duration_seconds = 0.0

    def scan(self) -> List[str]:
        """
        List raster sources, sorted by relative path.

        Returns:
            Source keys relative to the source root

        Raises:
            SourceTreeError: if the source root cannot be listed
        """
        start_time = time.time()
        sources = list(self.storage.list_files(self.RASTER_EXTENSIONS))
        self.scan_duration_seconds = time.time() - start_time

        self._warn_derivative_lookalikes(sources)

        self.logger.info(
            f"Scan complete: {len(sources)} raster images under {self.storage.root_path} "
            f"({self.scan_duration_seconds:.1f}s)"
        )
        return sources

    @staticmethod
    def normalize_base_path(key: str) -> str:
        """
        Strip the extension from a source key.

        Converts: portraits/alex.JPG -> portraits/alex
        """
        return posixpath.splitext(key)[0]

    @staticmethod
    def derivative_key(base: str, fmt: str, width: Optional[int] = None) -> str:
        """
        Key of a derivative file.

        Responsive derivatives carry a width suffix (base-960.webp); the
        full-size derivative does not (base.webp).
        """
        if width is None:
            return f"{base}.{fmt}"
        return f"{base}-{width}.{fmt}"

    @classmethod
    def extract_derivative_info(cls, key: str) -> Optional[dict]:
        """
        Extract info from a responsive derivative key.

        Args:
            key: Derivative key such as 'portraits/alex-960.webp'

        Returns:
            Dict with 'base', 'width', 'format', or None if not a responsive derivative
        """
        dirname = posixpath.dirname(key)
        filename = posixpath.basename(key)

        match = cls.DERIVATIVE_PATTERN.match(filename)
        if match:
            base_part, width, ext = match.groups()
            return {
                'base': posixpath.join(dirname, base_part),
                'width': int(width),
                'format': ext[1:],
            }

        return None

    def _warn_derivative_lookalikes(self, sources: List[str]) -> None:
        """
        Warn about sources named like another source's responsive derivative.

        'photo-960.jpg' next to 'photo.jpg' would have its full-size output
        overwritten by photo's 960px derivative.
        """
        bases = {self.normalize_base_path(key) for key in sources}
        for key in sources:
            info = self.extract_derivative_info(key)
            if info and info['base'] in bases:
                self.logger.warning(
                    f"{key} is named like a derivative of {info['base']}; "
                    f"their outputs will overwrite each other"
                )
