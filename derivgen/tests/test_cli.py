"""Tests for CLI module."""

import json
import os

import pytest

from derivgen.cli import create_parser, get_config, int_list, main, str_list
from derivgen.config import InvalidSourcePolicy

from .helpers import make_image_bytes, truncated_png_bytes

ENV_VARS = (
    'DERIVGEN_SOURCE_ROOT', 'DERIVGEN_OUTPUT_ROOT', 'DERIVGEN_WIDTHS',
    'DERIVGEN_MAX_WIDTH', 'DERIVGEN_FORMATS', 'DERIVGEN_WORKERS',
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def run_args(source_root, output_root):
    """Arguments for a small, fast run over the test tree."""
    return [
        '--source', str(source_root),
        '--output', str(output_root),
        '--widths', '40,80',
        '--max-width', '80',
        '--formats', 'webp,jpg',
    ]


class TestCreateParser:
    """Tests for argument parser creation."""

    def test_defaults(self):
        args = create_parser().parse_args([])

        assert args.verify is False
        assert args.fix_invalid is False
        assert args.widths is None
        assert args.quiet is False

    def test_fix_invalid_alias(self):
        """Test --placeholders is an alias for --fix-invalid."""
        parser = create_parser()

        assert parser.parse_args(['--fix-invalid']).fix_invalid is True
        assert parser.parse_args(['--placeholders']).fix_invalid is True

    def test_encoding_options(self):
        args = create_parser().parse_args([
            '--widths', '320, 640', '--max-width', '1280', '--formats', 'WEBP,jpg',
            '--workers', '4',
        ])

        assert args.widths == (320, 640)
        assert args.max_width == 1280
        assert args.formats == ('webp', 'jpg')
        assert args.workers == 4

    def test_invalid_widths(self):
        with pytest.raises(SystemExit):
            create_parser().parse_args(['--widths', 'small,large'])

    def test_list_parsers(self):
        assert int_list('960,1440,') == (960, 1440)
        assert str_list(' avif , WebP') == ('avif', 'webp')


class TestGetConfig:
    """Tests for configuration layering."""

    def test_site_dir_defaults(self, tmp_path):
        args = create_parser().parse_args(['--site-dir', str(tmp_path)])

        config = get_config(args)

        assert config.source_root == os.path.join(str(tmp_path), 'originals')
        assert config.output_root == os.path.join(str(tmp_path), 'public', 'images')
        assert config.on_invalid_source == InvalidSourcePolicy.FAIL
        assert config.verify_only is False

    def test_environment_then_flags(self, monkeypatch, tmp_path):
        """Test flags override environment, which overrides defaults."""
        monkeypatch.setenv('DERIVGEN_SOURCE_ROOT', '/env/src')
        monkeypatch.setenv('DERIVGEN_WIDTHS', '100,200')
        monkeypatch.setenv('DERIVGEN_FORMATS', 'avif')
        args = create_parser().parse_args([
            '--site-dir', str(tmp_path), '--formats', 'jpg', '--fix-invalid', '--verify',
        ])

        config = get_config(args)

        assert config.source_root == '/env/src'
        assert config.output_root == os.path.join(str(tmp_path), 'public', 'images')
        assert config.target_widths == (100, 200)
        assert config.formats == ('jpg',)
        assert config.on_invalid_source == InvalidSourcePolicy.PLACEHOLDER
        assert config.verify_only is True


class TestMain:
    """Tests for main entry point."""

    def test_generate(self, run_args, source_root, output_root, capsys):
        """Test a run writes derivatives and the manifest."""
        (source_root / 'photo.jpg').write_bytes(make_image_bytes(200, 100))

        result = main(run_args)

        assert result == 0
        manifest = json.loads((output_root / 'manifest.json').read_text())
        assert [d['width'] for d in manifest['photo']['webp']] == [40, 80]
        out = capsys.readouterr().out
        assert 'IMAGE DERIVATIVE GENERATION SUMMARY' in out
        assert 'Done. Processed 1 files, wrote/updated 1 sets.' in out

    def test_list_entries(self, run_args, source_root, capsys):
        (source_root / 'photo.jpg').write_bytes(make_image_bytes(200, 100))

        main(run_args + ['--list-entries'])

        assert 'photo - 200x100 @40,80 (webp, jpg)' in capsys.readouterr().out

    def test_corrupt_source_fails(self, run_args, source_root):
        (source_root / 'corrupt.png').write_bytes(truncated_png_bytes())

        assert main(run_args + ['-q']) == 1

    def test_corrupt_source_fixed(self, run_args, source_root, output_root):
        (source_root / 'corrupt.png').write_bytes(truncated_png_bytes())

        assert main(run_args + ['-q', '--fix-invalid']) == 0
        assert (output_root / 'corrupt.webp').exists()

    def test_verify(self, run_args, source_root, output_root, capsys):
        """Test verify fails before generation and passes after it."""
        (source_root / 'photo.jpg').write_bytes(make_image_bytes(200, 100))

        assert main(run_args + ['--verify']) == 1
        assert not output_root.exists()
        assert 'photo.jpg' in capsys.readouterr().out

        assert main(run_args + ['-q']) == 0
        assert main(run_args + ['--verify']) == 0

    def test_missing_source(self, tmp_path):
        result = main(['--source', str(tmp_path / 'missing'), '--output', str(tmp_path / 'out')])

        assert result == 1

    def test_output_inside_source(self, source_root):
        result = main(['--source', str(source_root), '--output', str(source_root / 'out'),
                       '--formats', 'jpg'])

        assert result == 1

    def test_manifest_write_failure(self, run_args, source_root, mocker):
        from derivgen.errors import ManifestWriteFailure

        mocker.patch('derivgen.generator.Manifest.save',
                     side_effect=ManifestWriteFailure('read-only'))

        assert main(run_args + ['-q']) == 1

    def test_interrupted(self, run_args, mocker):
        mocker.patch('derivgen.cli.Generator.run', side_effect=KeyboardInterrupt)

        assert main(run_args + ['-q']) == 130
