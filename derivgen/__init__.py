"""
Responsive image derivative generation for the photography portfolio.

For every JPEG/PNG under a source tree, writes resized derivatives in
several formats plus a full-size copy, and a manifest.json mapping each
image's base path to its derivatives and an inline blur placeholder.
"""

__version__ = "1.0.0"

from .errors import (
    DerivativeError,
    SourceUnreadable,
    DecodeFailure,
    EncodeFailure,
    DerivativeWriteFailure,
    SourceTreeError,
    ManifestWriteFailure,
)
from .derivative_encoder import DerivativeEncoder, DecodedImage
from .config import PipelineConfig, InvalidSourcePolicy, discover_site_dir
from .local_client import LocalClient
from .manifest_entry import ManifestEntry, DerivativeInfo
from .file_result import FileResult, FileState
from .manifest import Manifest
from .scanner import Scanner
from .generation_stats import GenerationStats
from .generation_progress import GenerationProgress
from .generator import Generator, generate
from .reporter import Reporter

__all__ = [
    "DerivativeError",
    "SourceUnreadable",
    "DecodeFailure",
    "EncodeFailure",
    "DerivativeWriteFailure",
    "SourceTreeError",
    "ManifestWriteFailure",
    "DerivativeEncoder",
    "DecodedImage",
    "PipelineConfig",
    "InvalidSourcePolicy",
    "discover_site_dir",
    "LocalClient",
    "ManifestEntry",
    "DerivativeInfo",
    "FileResult",
    "FileState",
    "Manifest",
    "Scanner",
    "GenerationStats",
    "GenerationProgress",
    "Generator",
    "generate",
    "Reporter",
]
