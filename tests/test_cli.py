"""Tests for setlist.cli: entry point, argument parsing and config."""

import pytest

from setlist.cli import build_parser, main
from setlist.cli._run import SECRET_ENV, config_from_args


def _config(argv: list[str]):
    return config_from_args(build_parser().parse_args(["run", *argv]))


class TestCLIHelp:
    def test_help_exits_zero(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["--help"])
        assert exc_info.value.code == 0

    def test_run_help_exits_zero(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["run", "--help"])
        assert exc_info.value.code == 0

    def test_no_command_exits_zero(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code == 0
        assert "setlist" in capsys.readouterr().out

    def test_bad_server_choice(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["run", "--server", "cgi"])
        assert exc_info.value.code == 2


class TestConfigFromArgs:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv(SECRET_ENV, raising=False)
        config = _config([])
        assert config.host == "127.0.0.1"
        assert config.port == 8000
        assert config.server == "asgi"
        assert config.layout == "layout.html"
        assert config.secret_key == ""

    def test_overrides(self, tmp_path) -> None:
        data_file = str(tmp_path / "data.json")
        config = _config(
            [
                "--host", "0.0.0.0",
                "--port", "9000",
                "--server", "wsgi",
                "--data-file", data_file,
                "--log-level", "warning",
                "--secret-key", "cli-key",
            ]
        )
        assert config.host == "0.0.0.0"
        assert config.port == 9000
        assert config.server == "wsgi"
        assert config.data_file == data_file
        assert config.log_level == "warning"
        assert config.secret_key == "cli-key"

    def test_debug_enables_debug_logging(self) -> None:
        config = _config(["--debug"])
        assert config.debug is True
        assert config.log_level == "debug"

    def test_secret_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(SECRET_ENV, "env-key")
        assert _config([]).secret_key == "env-key"
        assert _config(["--secret-key", "flag-key"]).secret_key == "flag-key"


class TestRoutes:
    def test_lists_routes(self, capsys: pytest.CaptureFixture[str]) -> None:
        main(["routes"])
        out = capsys.readouterr().out
        assert "METHOD" in out
        assert "/playlists/:id" in out
        assert "show (playlist)" in out
