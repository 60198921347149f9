"""Configuration — Pydantic models for polaris settings."""

from __future__ import annotations

import os
from typing import Any, Literal

from pydantic import BaseModel, Field


class TerminalConfig(BaseModel):
    """Terminal session configuration.

    ``backend`` selects the platform session variant:
        "auto" - pseudo-terminal where available, piped process otherwise
        "pty"  - always a pseudo-terminal (POSIX only)
        "pipe" - always a piped child process (no resize support)
    """

    shell: str | None = Field(
        default=None, description="Shell to spawn when none is given (default: platform shell)"
    )
    backend: Literal["auto", "pty", "pipe"] = Field(default="auto")
    term: str = Field(default="xterm-256color", description="TERM value for pty sessions")
    rows: int = Field(default=24, ge=1, le=65535)
    cols: int = Field(default=80, ge=1, le=65535)
    read_chunk_size: int = Field(default=8192, ge=1, description="Max bytes per output chunk")
    read_poll_interval: float = Field(
        default=0.1,
        gt=0,
        description="Seconds a read waits for output before reporting no data",
    )
    idle_sleep: float = Field(
        default=0.01, ge=0, description="Pause after an empty read before polling again"
    )
    read_retries: int = Field(
        default=5, ge=1, description="Attempts for a read failing with a transient error"
    )
    kill_timeout: float = Field(
        default=2.0, gt=0, description="Seconds to wait for a shell to exit on kill"
    )
    carry_partial_utf8: bool = Field(
        default=True,
        description=(
            "Hold back a UTF-8 sequence split across two reads and decode it with "
            "the next chunk. When False each chunk is decoded on its own and a "
            "split character shows up as replacement characters."
        ),
    )


class RunnerConfig(BaseModel):
    """One-shot command runner configuration."""

    timeout: float | None = Field(
        default=None, description="Seconds before a one-shot command is killed (None: no limit)"
    )


class PolarisConfig(BaseModel):
    """Top-level polaris configuration."""

    terminal: TerminalConfig = Field(default_factory=TerminalConfig)
    runner: RunnerConfig = Field(default_factory=RunnerConfig)

    @classmethod
    def load(cls, config_path: str | None = None) -> PolarisConfig:
        """Load config from file, env vars, or defaults.

        Priority: env vars > config file > defaults.

        Env vars:
            POLARIS_SHELL           - Shell to spawn for new sessions
            POLARIS_BACKEND         - Terminal backend (auto/pty/pipe)
            POLARIS_TERM            - TERM value for pty sessions
            POLARIS_ROWS            - Initial terminal rows
            POLARIS_COLS            - Initial terminal columns
            POLARIS_RUNNER_TIMEOUT  - Timeout in seconds for one-shot commands
        """
        try:
            from dotenv import load_dotenv

            load_dotenv()
        except ImportError:
            pass

        config_data: dict[str, Any] = {}

        if config_path and os.path.exists(config_path):
            import json

            with open(config_path) as f:
                config_data = json.load(f)

        terminal = config_data.get("terminal", {})

        env_shell = os.environ.get("POLARIS_SHELL")
        if env_shell:
            terminal["shell"] = env_shell

        env_backend = os.environ.get("POLARIS_BACKEND")
        if env_backend:
            terminal["backend"] = env_backend.lower()

        env_term = os.environ.get("POLARIS_TERM")
        if env_term:
            terminal["term"] = env_term

        env_rows = os.environ.get("POLARIS_ROWS")
        if env_rows:
            terminal["rows"] = int(env_rows)

        env_cols = os.environ.get("POLARIS_COLS")
        if env_cols:
            terminal["cols"] = int(env_cols)

        if terminal:
            config_data["terminal"] = terminal

        env_runner_timeout = os.environ.get("POLARIS_RUNNER_TIMEOUT")
        if env_runner_timeout:
            runner = config_data.get("runner", {})
            runner["timeout"] = float(env_runner_timeout)
            config_data["runner"] = runner

        return cls.model_validate(config_data)
