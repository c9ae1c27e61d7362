"""
Pytest fixtures for derivgen tests.
"""

import logging

import pytest

from .helpers import make_image_bytes


@pytest.fixture
def logger():
    """Fixture providing a logger."""
    return logging.getLogger('test')


@pytest.fixture
def sample_jpeg_bytes():
    """Fixture providing a 200x100 JPEG."""
    return make_image_bytes(200, 100, 'JPEG')


@pytest.fixture
def sample_png_bytes():
    """Fixture providing a 200x100 PNG with transparency."""
    return make_image_bytes(200, 100, 'PNG', mode='RGBA')


@pytest.fixture
def source_root(tmp_path):
    """Fixture providing an empty source directory."""
    root = tmp_path / 'originals'
    root.mkdir()
    return root


@pytest.fixture
def output_root(tmp_path):
    """Fixture providing an (absent) output directory."""
    return tmp_path / 'public' / 'images'


@pytest.fixture
def config(source_root, output_root):
    """Fixture providing a small, fast pipeline configuration."""
    from derivgen.config import PipelineConfig

    return PipelineConfig(
        source_root=str(source_root),
        output_root=str(output_root),
        target_widths=(40, 80, 120),
        max_full_width=120,
        formats=('webp', 'jpg'),
    )


@pytest.fixture
def placeholder_config(config):
    """Fixture providing the small configuration with placeholders enabled."""
    from derivgen.config import InvalidSourcePolicy

    config.on_invalid_source = InvalidSourcePolicy.PLACEHOLDER
    return config


@pytest.fixture
def generator_factory(logger):
    """Fixture building a Generator from a configuration."""
    from derivgen.derivative_encoder import DerivativeEncoder
    from derivgen.generator import Generator
    from derivgen.local_client import LocalClient

    def build(config):
        return Generator(
            source_client=LocalClient(config.source_root, logger),
            output_client=LocalClient(config.output_root, logger),
            encoder=DerivativeEncoder(logger),
            config=config,
            logger=logger,
        )

    return build


@pytest.fixture
def sample_entry():
    """Fixture providing a manifest entry with two widths in two formats."""
    from derivgen.manifest_entry import DerivativeInfo, ManifestEntry

    return ManifestEntry(
        base='portraits/alex',
        width=2400,
        height=1600,
        derivatives={
            'webp': [
                DerivativeInfo(960, 'portraits/alex-960.webp'),
                DerivativeInfo(1440, 'portraits/alex-1440.webp'),
            ],
            'jpg': [
                DerivativeInfo(960, 'portraits/alex-960.jpg'),
                DerivativeInfo(1440, 'portraits/alex-1440.jpg'),
            ],
        },
        blur_data_url='data:image/jpeg;base64,AAAA',
    )


@pytest.fixture
def placeholder_entry():
    """Fixture providing a placeholder manifest entry."""
    from derivgen.manifest_entry import ManifestEntry

    return ManifestEntry(
        base='broken',
        width=8,
        height=8,
        derivatives={'webp': [], 'jpg': []},
        blur_data_url='data:image/jpeg;base64,BBBB',
        placeholder=True,
    )
