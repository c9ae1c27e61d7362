"""
Errors raised while building image derivatives.

Per-file errors (SourceUnreadable, DecodeFailure, EncodeFailure,
DerivativeWriteFailure) are caught by the Generator and recorded in a
FileResult. SourceTreeError and ManifestWriteFailure abort the run.
"""

from typing import Optional


class DerivativeError(Exception):
    """Base class for derivative pipeline errors."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class SourceUnreadable(DerivativeError):
    """A source file could not be read."""


class DecodeFailure(DerivativeError):
    """A source file has a raster extension but is not a decodable image."""


class EncodeFailure(DerivativeError):
    """The codec rejected a resize or encode request."""


class DerivativeWriteFailure(DerivativeError):
    """A derivative file could not be written."""


class SourceTreeError(DerivativeError):
    """The source root is missing or cannot be enumerated."""


class ManifestWriteFailure(DerivativeError):
    """The manifest could not be written."""
