"""
ManifestEntry - Record for a single source image and its derivative set.
"""

from dataclasses import dataclass, field, asdict
from typing import Dict, List, Optional

RESERVED_KEYS = ('width', 'height', 'base', 'blurDataURL', 'placeholder')


@dataclass(frozen=True)
class DerivativeInfo:
    """
    One responsive derivative.

    Attributes:
        width: Pixel width of the derivative
        path: Path relative to the output root (e.g. 'portraits/alex-960.webp')
    """
    width: int
    path: str

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> 'DerivativeInfo':
        return cls(width=int(data['width']), path=data['path'])


@dataclass
class ManifestEntry:
    """
    Manifest record for one source image.

    Attributes:
        base: Normalized base path (relative, extension stripped)
        width: Intrinsic width of the source
        height: Intrinsic height of the source
        derivatives: Dict mapping format -> responsive derivatives, in width order
        blur_data_url: Inline LQIP data URI
        placeholder: True when the source was invalid and replaced with a flat image
    """
    base: str
    width: int
    height: int
    derivatives: Dict[str, List[DerivativeInfo]] = field(default_factory=dict)
    blur_data_url: str = ''
    placeholder: bool = False

    @property
    def formats(self) -> List[str]:
        return list(self.derivatives.keys())

    @property
    def widths(self) -> List[int]:
        """Widths of the responsive derivatives (same for every format)."""
        for infos in self.derivatives.values():
            return [info.width for info in infos]
        return []

    def full_path(self, fmt: str) -> str:
        """Path of the full-size derivative for a format."""
        return f"{self.base}.{fmt}"

    def srcset(self, fmt: str, prefix: str = '') -> str:
        """
        Render a srcset attribute value for one format.

        Args:
            fmt: Output format (e.g. 'webp')
            prefix: Optional URL prefix (e.g. '/images/')

        Returns:
            String like "/images/alex-960.webp 960w, /images/alex-1440.webp 1440w"
        """
        return ', '.join(
            f"{prefix}{info.path} {info.width}w"
            for info in self.derivatives.get(fmt, [])
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        data = {
            'width': self.width,
            'height': self.height,
            'base': self.base,
        }
        for fmt, infos in self.derivatives.items():
            data[fmt] = [info.to_dict() for info in infos]
        data['blurDataURL'] = self.blur_data_url
        if self.placeholder:
            data['placeholder'] = True
        return data

    @classmethod
    def from_dict(cls, data: dict) -> 'ManifestEntry':
        """Create from dictionary."""
        derivatives = {
            fmt: [DerivativeInfo.from_dict(item) for item in items]
            for fmt, items in data.items()
            if fmt not in RESERVED_KEYS and isinstance(items, list)
        }
        return cls(
            base=data['base'],
            width=data['width'],
            height=data['height'],
            derivatives=derivatives,
            blur_data_url=data.get('blurDataURL', ''),
            placeholder=data.get('placeholder', False),
        )

    def format_status(self) -> str:
        """
        Format a human-readable status string.

        Returns:
            Status string like "portraits/alex - 2400x1600 @960,1440,1920 (webp, jpg)"
        """
        if self.placeholder:
            return f"{self.base} - PLACEHOLDER {self.width}x{self.height}"
        widths = ','.join(str(w) for w in self.widths)
        return (
            f"{self.base} - {self.width}x{self.height} @{widths} "
            f"({', '.join(self.formats)})"
        )
