"""Tests for the command line entry point."""

import logging
from unittest.mock import AsyncMock, patch

import pytest

from tilestitch import main as cli
from tilestitch.domain.models import StitchResult
from tilestitch.errors import CompositeError
from tilestitch.main import setup_logging as real_setup_logging
from tilestitch.tiles.coverage import plan_tiles

ARGS = ['40.70', '-74.02', '40.72', '-74.00', '15', 'http://x/{z}/{x}/{y}.png']


@pytest.fixture(autouse=True)
def _no_logging_setup():
    with patch.object(cli, 'setup_logging'):
        yield


def _result(settings) -> StitchResult:
    return StitchResult(
        plan=plan_tiles(settings.bbox, settings.zoom, settings.tile_size),
        output_path=str(settings.output),
        fetched=4,
        failed=0,
    )


class TestParser:
    """Tests for build_parser function."""

    def test_positional_and_defaults(self, tmp_path):
        args = cli.build_parser().parse_args(['-o', str(tmp_path / 'o.png'), *ARGS])
        assert args.minlat == 40.70
        assert args.zoom == 15
        assert args.tilesize is None
        assert args.plan_only is False

    def test_output_is_required(self):
        with pytest.raises(SystemExit) as exc:
            cli.build_parser().parse_args(ARGS)
        assert exc.value.code == 2


class TestResolveSettings:
    """Tests for resolve_settings function."""

    def test_command_line_overrides_config(self, tmp_path):
        config = tmp_path / 'c.toml'
        config.write_text('tile_size = 512\nconcurrency = 4\n', encoding='utf-8')
        args = cli.build_parser().parse_args(
            ['-o', 'o.png', '-c', str(config), '--concurrency', '9', *ARGS]
        )
        settings = cli.resolve_settings(args)
        assert settings.tile_size == 512
        assert settings.concurrency == 9
        assert settings.zoom == 15


class TestMain:
    """Tests for main function."""

    def test_plan_only_does_not_fetch(self, tmp_path):
        out = tmp_path / 'o.png'
        with patch.object(cli, 'stitch', new_callable=AsyncMock) as mock_stitch:
            code = cli.main(['-o', str(out), '--plan-only', *ARGS])
        assert code == 0
        mock_stitch.assert_not_called()
        assert not out.exists()

    def test_success(self, tmp_path):
        out = tmp_path / 'o.png'

        async def fake_stitch(settings):
            return _result(settings)

        with patch.object(cli, 'stitch', side_effect=fake_stitch) as mock_stitch:
            code = cli.main(['-o', str(out), '-t', '512', *ARGS])
        assert code == 0
        settings = mock_stitch.call_args.args[0]
        assert settings.tile_size == 512
        assert settings.output == out

    def test_composite_failure_exit_code(self, tmp_path):
        async def failing(settings):
            raise CompositeError('disk full')

        with patch.object(cli, 'stitch', side_effect=failing):
            code = cli.main(['-o', str(tmp_path / 'o.png'), *ARGS])
        assert code == 1

    def test_inverted_box_exit_code(self, tmp_path):
        args = ['40.72', '-74.02', '40.70', '-74.00', '15', 'http://x/{z}/{x}/{y}.png']
        code = cli.main(['-o', str(tmp_path / 'o.png'), '--plan-only', *args])
        assert code == 1

    def test_bad_template_exit_code(self, tmp_path):
        args = [*ARGS[:5], 'http://x/tile.png']
        code = cli.main(['-o', str(tmp_path / 'o.png'), *args])
        assert code == 2

    def test_missing_config_exit_code(self, tmp_path):
        code = cli.main(['-o', 'o.png', '-c', str(tmp_path / 'none.toml'), *ARGS])
        assert code == 2

    def test_save_config(self, tmp_path):
        saved = tmp_path / 'saved.toml'
        code = cli.main(
            ['-o', 'o.png', '--plan-only', '--save-config', str(saved), '-t', '512', *ARGS]
        )
        assert code == 0
        assert 'tile_size = 512' in saved.read_text(encoding='utf-8')

    def test_unwritable_save_config_exit_code(self, tmp_path):
        target = tmp_path / 'missing' / 'c.toml'
        code = cli.main(['-o', 'o.png', '--plan-only', '--save-config', str(target), *ARGS])
        assert code == 2
        assert not target.exists()

    def test_unusable_log_file_exit_code(self, tmp_path, capsys):
        blocker = tmp_path / 'blocker'
        blocker.write_text('', encoding='utf-8')
        log_file = blocker / 'tilestitch.log'
        with (
            patch.object(cli, 'setup_logging', real_setup_logging),
            patch.object(cli, 'stitch', new_callable=AsyncMock) as mock_stitch,
        ):
            code = cli.main(['-o', 'o.png', '--log-file', str(log_file), *ARGS])
        assert code == 2
        mock_stitch.assert_not_called()
        assert 'Cannot open log file' in capsys.readouterr().err


class TestSetupLogging:
    """Tests for the real setup_logging."""

    def test_log_file_created(self, tmp_path):
        root = logging.getLogger()
        saved_handlers, saved_level = root.handlers[:], root.level
        log_file = tmp_path / 'log' / 'tilestitch.log'
        try:
            real_setup_logging(verbose=True, log_file=log_file)
            logging.getLogger('tilestitch.test').debug('hello')
            for h in root.handlers:
                h.flush()
            assert root.level == logging.DEBUG
            assert 'hello' in log_file.read_text(encoding='utf-8')
        finally:
            for h in root.handlers:
                if h not in saved_handlers:
                    h.close()
            root.handlers[:] = saved_handlers
            root.setLevel(saved_level)

