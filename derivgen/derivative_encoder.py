"""
DerivativeEncoder - Decodes source images and encodes resized derivatives.
"""

import base64
import io
import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from PIL import Image, ImageOps, UnidentifiedImageError, features

from .errors import DecodeFailure, EncodeFailure


@dataclass(frozen=True)
class DecodedImage:
    """
    A decoded source image.

    Attributes:
        image: Pillow image, EXIF orientation applied
        format: Sniffed Pillow format name ('JPEG' or 'PNG')
    """
    image: Image.Image
    format: str

    @property
    def width(self) -> int:
        return self.image.size[0]

    @property
    def height(self) -> int:
        return self.image.size[1]


class DerivativeEncoder:
    """
    Image codec for the derivative pipeline, using Pillow.
    """

    # output extension -> Pillow format
    FORMATS = {
        'jpg': 'JPEG',
        'webp': 'WEBP',
        'avif': 'AVIF',
        'png': 'PNG',
    }

    SOURCE_FORMATS = ('JPEG', 'PNG')

    MAGIC = (
        ('JPEG', b'\xff\xd8\xff'),
        ('PNG', b'\x89PNG\r\n\x1a\n'),
        ('PDF', b'%PDF'),
        ('HTML', b'<!DOCT'),
        ('ZIP/ARCHIVE', b'PK\x03\x04'),
    )

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)

    @classmethod
    def can_encode(cls, fmt: str) -> bool:
        """Check whether the installed Pillow build can write a format."""
        if fmt == 'webp':
            return features.check('webp')
        if fmt == 'avif':
            return features.check('avif')
        return fmt in cls.FORMATS

    @classmethod
    def sniff(cls, data: bytes) -> str:
        """Guess what a buffer contains from its leading bytes."""
        head = data[:16]
        for kind, magic in cls.MAGIC:
            if head.startswith(magic):
                return kind
        if head.startswith(b'RIFF') and head[8:12] == b'WEBP':
            return 'WEBP'
        return 'UNKNOWN'

    def decode(self, data: bytes, path: Optional[str] = None) -> DecodedImage:
        """
        Decode a JPEG or PNG source.

        The full pixel data is loaded so truncated files fail here rather
        than during encoding.

        Raises:
            DecodeFailure: if the buffer is not a decodable JPEG or PNG
        """
        try:
            img = Image.open(io.BytesIO(data))
            fmt = img.format
            img.load()
        except (UnidentifiedImageError, OSError, ValueError, SyntaxError,
                Image.DecompressionBombError) as e:
            raise DecodeFailure(
                f"cannot decode image (content looks like {self.sniff(data)}): {e}",
                path=path,
            ) from e

        if fmt not in self.SOURCE_FORMATS:
            raise DecodeFailure(f"unsupported source format: {fmt}", path=path)

        img = ImageOps.exif_transpose(img)
        self.logger.debug(f"Decoded {path or 'image'}: {fmt} {img.mode} {img.size[0]}x{img.size[1]}")
        return DecodedImage(image=img, format=fmt)

    @staticmethod
    def scaled_size(size: Tuple[int, int], width: int) -> Tuple[int, int]:
        """Size for a given width, keeping aspect ratio and never upscaling."""
        src_width, src_height = size
        width = min(width, src_width)
        height = max(1, round(src_height * width / src_width))
        return width, height

    def resize(self, img: Image.Image, width: int) -> Image.Image:
        """Resize to a width, preserving aspect ratio. Never enlarges."""
        target = self.scaled_size(img.size, width)
        if target == img.size:
            return img
        try:
            return img.resize(target, Image.Resampling.LANCZOS)
        except (OSError, ValueError) as e:
            raise EncodeFailure(f"cannot resize to {width}px: {e}") from e

    def encode(self, img: Image.Image, fmt: str, quality: int) -> bytes:
        """
        Encode an image.

        Args:
            img: Image to encode
            fmt: Output extension ('jpg', 'webp', 'avif', 'png')
            quality: Encoder quality, 0-100 (ignored for png)

        Returns:
            Encoded bytes
        """
        if fmt not in self.FORMATS:
            raise EncodeFailure(f"unsupported output format: {fmt}")

        pil_format = self.FORMATS[fmt]
        output = io.BytesIO()

        try:
            if pil_format == 'JPEG':
                self._convert_color_mode(img).save(
                    output, format='JPEG', quality=quality, optimize=True
                )
            elif pil_format == 'PNG':
                self._convert_for_alpha(img).save(output, format='PNG', optimize=True)
            else:
                self._convert_for_alpha(img).save(output, format=pil_format, quality=quality)
        except (OSError, ValueError, KeyError) as e:
            raise EncodeFailure(f"cannot encode {fmt}: {e}") from e

        return output.getvalue()

    def blur_data_url(self, img: Image.Image, width: int = 24, quality: int = 40) -> str:
        """Render a tiny JPEG preview as a data URI."""
        tiny = self.encode(self.resize(img, width), 'jpg', quality)
        return 'data:image/jpeg;base64,' + base64.b64encode(tiny).decode('ascii')

    @staticmethod
    def flat_image(size: Tuple[int, int], color: Tuple[int, int, int]) -> Image.Image:
        """A solid-color image used in place of an invalid source."""
        return Image.new('RGB', size, color)

    def _convert_color_mode(self, img: Image.Image) -> Image.Image:
        """Flatten to RGB on white for formats without alpha."""
        if img.mode in ('RGBA', 'LA'):
            background = Image.new('RGB', img.size, (255, 255, 255))
            if img.mode == 'LA':
                img = img.convert('RGBA')
            background.paste(img, mask=img.split()[-1])
            return background
        elif img.mode == 'P':
            img = img.convert('RGBA')
            background = Image.new('RGB', img.size, (255, 255, 255))
            background.paste(img, mask=img.split()[-1])
            return background
        elif img.mode != 'RGB':
            return img.convert('RGB')
        return img

    def _convert_for_alpha(self, img: Image.Image) -> Image.Image:
        """Convert to RGB or RGBA, keeping transparency when present."""
        if img.mode in ('RGB', 'RGBA'):
            return img
        if img.mode in ('LA', 'PA') or (img.mode == 'P' and 'transparency' in img.info):
            return img.convert('RGBA')
        return img.convert('RGB')
