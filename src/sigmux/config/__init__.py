"""Configuration — Pydantic models for sigmux settings."""

from __future__ import annotations

import json
import os
from typing import Any

from dotenv import load_dotenv
from pydantic import BaseModel, Field


def _default_shell() -> list[str]:
    return [os.environ.get("SHELL") or "/bin/bash"]


class SessionConfig(BaseModel):
    """Per-pane PTY session settings."""

    shell: list[str] = Field(
        default_factory=_default_shell,
        description="Command (and arguments) started in every new pane",
    )
    output_cap: int = Field(
        default=100_000,
        gt=0,
        description="Max characters kept in a pane's output buffer; oldest data is evicted",
    )
    cursor_blink_ms: int = Field(default=500, gt=0)
    max_reads_per_poll: int = Field(
        default=16,
        gt=0,
        description="Upper bound on non-blocking reads drained per render tick",
    )
    read_size: int = Field(default=4096, gt=0)
    chrome_rows: int = Field(
        default=2,
        ge=0,
        description="Rows of a pane taken by its titled border, not given to the pty",
    )
    terminate_grace: float = Field(
        default=1.0,
        ge=0,
        description="Seconds to wait after SIGHUP before escalating to SIGKILL",
    )


class LayoutConfig(BaseModel):
    """Pane arrangement settings."""

    max_panes: int = Field(default=6, gt=0)
    border_allowance: float = Field(
        default=2.0,
        ge=0,
        description="Width reserved per pane for its border",
    )
    initial_hue: float = Field(default=180.0)
    hue_step: float = Field(default=55.0)
    initial_panes: int = Field(default=2, ge=0)
    dark_mode: bool = Field(default=True)


class SigmuxConfig(BaseModel):
    """Top-level sigmux configuration."""

    session: SessionConfig = Field(default_factory=SessionConfig)
    layout: LayoutConfig = Field(default_factory=LayoutConfig)
    log_file: str | None = Field(
        default=None, description="Optional file that receives debug logs"
    )

    @classmethod
    def load(cls, config_path: str | None = None) -> SigmuxConfig:
        """Load config from file, env vars, or defaults.

        Priority: env vars > config file > defaults.

        Env vars:
            SIGMUX_SHELL       - Shell command line for new panes (split on whitespace)
            SIGMUX_MAX_PANES   - Override the pane limit
            SIGMUX_OUTPUT_CAP  - Override the per-pane output buffer cap
            SIGMUX_DARK_MODE   - "0"/"false" starts in light mode
            SIGMUX_LOG_FILE    - Write logs to this file
        """
        load_dotenv(override=True)

        config_data: dict[str, Any] = {}

        if config_path and os.path.exists(config_path):
            with open(config_path) as f:
                config_data = json.load(f)

        session = config_data.get("session", {})
        layout = config_data.get("layout", {})

        env_shell = os.environ.get("SIGMUX_SHELL")
        if env_shell:
            session["shell"] = env_shell.split()

        env_output_cap = os.environ.get("SIGMUX_OUTPUT_CAP")
        if env_output_cap:
            session["output_cap"] = int(env_output_cap)

        env_max_panes = os.environ.get("SIGMUX_MAX_PANES")
        if env_max_panes:
            layout["max_panes"] = int(env_max_panes)

        env_dark_mode = os.environ.get("SIGMUX_DARK_MODE")
        if env_dark_mode:
            layout["dark_mode"] = env_dark_mode.lower() not in ("0", "false", "no", "off")

        env_log_file = os.environ.get("SIGMUX_LOG_FILE")
        if env_log_file:
            config_data["log_file"] = env_log_file

        if session:
            config_data["session"] = session
        if layout:
            config_data["layout"] = layout

        return cls.model_validate(config_data)
