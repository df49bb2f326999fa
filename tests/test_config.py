"""Tests for sigmux.config (SigmuxConfig, SessionConfig, LayoutConfig)."""

from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from sigmux.config import LayoutConfig, SessionConfig, SigmuxConfig

_ENV_VARS = (
    "SIGMUX_SHELL",
    "SIGMUX_MAX_PANES",
    "SIGMUX_OUTPUT_CAP",
    "SIGMUX_DARK_MODE",
    "SIGMUX_LOG_FILE",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for var in _ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)


class TestDefaults:
    def test_layout_defaults(self) -> None:
        layout = LayoutConfig()
        assert layout.max_panes == 6
        assert layout.initial_hue == 180.0
        assert layout.hue_step == 55.0
        assert layout.initial_panes == 2
        assert layout.dark_mode is True

    def test_session_defaults(self) -> None:
        session = SessionConfig()
        assert session.cursor_blink_ms == 500
        assert session.output_cap > 0
        assert session.shell

    def test_shell_from_environment(self, monkeypatch) -> None:
        monkeypatch.setenv("SHELL", "/bin/zsh")
        assert SessionConfig().shell == ["/bin/zsh"]

    def test_invalid_values_rejected(self) -> None:
        with pytest.raises(ValidationError):
            SessionConfig(output_cap=0)
        with pytest.raises(ValidationError):
            LayoutConfig(max_panes=0)


class TestLoad:
    def test_load_defaults(self) -> None:
        config = SigmuxConfig.load()
        assert config.layout.max_panes == 6
        assert config.log_file is None

    def test_load_from_file(self, tmp_path) -> None:
        path = tmp_path / "sigmux.json"
        path.write_text(
            json.dumps(
                {
                    "session": {"shell": ["/bin/sh", "-l"], "output_cap": 500},
                    "layout": {"max_panes": 4},
                }
            )
        )
        config = SigmuxConfig.load(str(path))
        assert config.session.shell == ["/bin/sh", "-l"]
        assert config.session.output_cap == 500
        assert config.layout.max_panes == 4

    def test_missing_file_uses_defaults(self, tmp_path) -> None:
        config = SigmuxConfig.load(str(tmp_path / "nope.json"))
        assert config.layout.max_panes == 6

    def test_env_overrides_file(self, tmp_path, monkeypatch) -> None:
        path = tmp_path / "sigmux.json"
        path.write_text(json.dumps({"layout": {"max_panes": 4}}))
        monkeypatch.setenv("SIGMUX_MAX_PANES", "3")
        monkeypatch.setenv("SIGMUX_SHELL", "fish --private")
        monkeypatch.setenv("SIGMUX_OUTPUT_CAP", "2048")
        monkeypatch.setenv("SIGMUX_DARK_MODE", "false")
        monkeypatch.setenv("SIGMUX_LOG_FILE", "/tmp/sigmux.log")
        config = SigmuxConfig.load(str(path))
        assert config.layout.max_panes == 3
        assert config.session.shell == ["fish", "--private"]
        assert config.session.output_cap == 2048
        assert config.layout.dark_mode is False
        assert config.log_file == "/tmp/sigmux.log"
