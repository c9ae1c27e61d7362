"""
Image helpers shared by the derivgen tests.
"""

import io

from PIL import Image, features

HAS_AVIF = features.check('avif')
HAS_WEBP = features.check('webp')


def make_image_bytes(width=200, height=100, fmt='JPEG', mode='RGB', color='red'):
    """Encode a solid-color test image."""
    if mode == 'RGBA' and isinstance(color, str):
        color = (255, 0, 0, 128)
    img = Image.new(mode, (width, height), color=color)
    buffer = io.BytesIO()
    img.save(buffer, format=fmt)
    return buffer.getvalue()


def truncated_png_bytes():
    """A PNG whose pixel data is cut off halfway."""
    img = Image.effect_noise((128, 128), 64)
    buffer = io.BytesIO()
    img.save(buffer, format='PNG')
    data = buffer.getvalue()
    return data[:len(data) // 2]


def image_size(path):
    """Pixel size of an image file."""
    with Image.open(path) as img:
        return img.size
