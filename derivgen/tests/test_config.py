"""Tests for PipelineConfig."""

import os

import pytest

from derivgen.config import InvalidSourcePolicy, PipelineConfig, discover_site_dir
from derivgen.derivative_encoder import DerivativeEncoder


class TestPipelineConfig:
    """Tests for PipelineConfig defaults and helpers."""

    def test_defaults(self):
        """Test defaults match the site's existing derivatives."""
        config = PipelineConfig()

        assert config.target_widths == (960, 1440, 1920)
        assert config.max_full_width == 1920
        assert config.formats == ('webp', 'jpg', 'avif')
        assert config.quality_for('webp') == 78
        assert config.quality_for('jpg') == 82
        assert config.quality_for('avif') == 50
        assert config.placeholder_width == 24
        assert config.placeholder_quality == 40
        assert config.fallback_size == (8, 8)
        assert config.fallback_color == (230, 230, 230)
        assert config.on_invalid_source == InvalidSourcePolicy.FAIL
        assert config.verify_only is False
        assert config.workers == 1

    def test_quality_dicts_not_shared(self):
        """Test each config gets its own quality mapping."""
        first = PipelineConfig()
        second = PipelineConfig()
        first.quality_by_format['jpg'] = 10

        assert second.quality_for('jpg') == 82

    def test_fix_invalid(self):
        config = PipelineConfig(on_invalid_source=InvalidSourcePolicy.PLACEHOLDER)
        assert config.fix_invalid is True
        assert PipelineConfig().fix_invalid is False

    def test_manifest_path(self, tmp_path):
        config = PipelineConfig(output_root=str(tmp_path))
        assert config.manifest_path == os.path.join(str(tmp_path), 'manifest.json')

    def test_policy_from_string(self):
        assert InvalidSourcePolicy('placeholder') == InvalidSourcePolicy.PLACEHOLDER


class TestFromEnv:
    """Tests for environment configuration."""

    def test_from_env(self, monkeypatch):
        """Test DERIVGEN_* variables are read."""
        monkeypatch.setenv('DERIVGEN_SOURCE_ROOT', '/src')
        monkeypatch.setenv('DERIVGEN_OUTPUT_ROOT', '/out')
        monkeypatch.setenv('DERIVGEN_WIDTHS', '320, 640')
        monkeypatch.setenv('DERIVGEN_MAX_WIDTH', '1280')
        monkeypatch.setenv('DERIVGEN_FORMATS', 'WEBP,jpg')
        monkeypatch.setenv('DERIVGEN_QUALITY_JPG', '70')
        monkeypatch.setenv('DERIVGEN_WORKERS', '4')

        config = PipelineConfig.from_env()

        assert config.source_root == '/src'
        assert config.output_root == '/out'
        assert config.target_widths == (320, 640)
        assert config.max_full_width == 1280
        assert config.formats == ('webp', 'jpg')
        assert config.quality_for('jpg') == 70
        assert config.workers == 4

    def test_from_env_defaults(self, monkeypatch):
        """Test unset variables leave defaults in place."""
        for name in list(os.environ):
            if name.startswith('DERIVGEN_'):
                monkeypatch.delenv(name)

        config = PipelineConfig.from_env()

        assert config.source_root == ''
        assert config.target_widths == (960, 1440, 1920)

    def test_from_env_invalid_number(self, monkeypatch):
        monkeypatch.setenv('DERIVGEN_MAX_WIDTH', 'wide')

        with pytest.raises(ValueError):
            PipelineConfig.from_env()


class TestValidate:
    """Tests for configuration validation."""

    def test_valid(self, config):
        assert config.validate() == []

    def test_missing_roots(self):
        errors = PipelineConfig().validate()

        assert any('Source root is required' in e for e in errors)
        assert any('Output root is required' in e for e in errors)

    def test_source_does_not_exist(self, config, tmp_path):
        config.source_root = str(tmp_path / 'nope')

        errors = config.validate()

        assert any('does not exist' in e for e in errors)

    def test_output_same_as_source(self, config):
        config.output_root = config.source_root

        errors = config.validate()

        assert any('must not be the source root' in e for e in errors)

    def test_output_inside_source(self, config):
        config.output_root = os.path.join(config.source_root, 'derived')

        errors = config.validate()

        assert any('must not be the source root' in e for e in errors)

    def test_bad_widths(self, config):
        config.target_widths = (960, 0)
        assert any('positive' in e for e in config.validate())

        config.target_widths = ()
        assert any('At least one target width' in e for e in config.validate())

    def test_unsupported_format(self, config):
        config.formats = ('webp', 'gif')

        errors = config.validate()

        assert any('Unsupported format: gif' in e for e in errors)

    def test_format_not_encodable(self, config, mocker):
        """Test formats missing from the Pillow build are reported."""
        mocker.patch.object(DerivativeEncoder, 'can_encode', return_value=False)

        errors = config.validate()

        assert any('cannot encode webp' in e for e in errors)

    def test_verify_skips_encoder_check(self, config, mocker):
        """Test verify mode does not need the output codecs."""
        mocker.patch.object(DerivativeEncoder, 'can_encode', return_value=False)
        config.verify_only = True

        assert config.validate() == []

    def test_bad_quality(self, config):
        config.quality_by_format['jpg'] = 150

        errors = config.validate()

        assert any('Quality for jpg' in e for e in errors)

    def test_bad_workers(self, config):
        config.workers = 0

        assert any('Workers' in e for e in config.validate())


class TestDiscoverSiteDir:
    """Tests for site directory discovery."""

    def test_current_directory(self, tmp_path):
        (tmp_path / 'public' / 'images').mkdir(parents=True)

        assert discover_site_dir(str(tmp_path)) == str(tmp_path.resolve())

    def test_portfolio_subdirectory(self, tmp_path):
        site = tmp_path / 'photography-portfolio'
        (site / 'public' / 'images').mkdir(parents=True)

        assert discover_site_dir(str(tmp_path)) == str(site.resolve())

    def test_fallback(self, tmp_path):
        assert discover_site_dir(str(tmp_path)) == str(tmp_path.resolve())
