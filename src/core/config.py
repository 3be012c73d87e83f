"""Core configuration.

Settings come from `HOSTRESOLVE_*` environment variables and two .env files
(project, then user). The CLI reads them once per invocation; adapters get
their knobs from the resulting `AppSettings`.
"""

from __future__ import annotations

import os
import sys
from enum import Enum
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

APP_DIR_NAME = "hostresolve"
_ENV_HEADER = "# hostresolve user config (.env)"

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class ResolverBackend(str, Enum):
    """Which name resolution primitive each execution context uses."""

    SYSTEM = "system"
    DNSPYTHON = "dnspython"


def get_user_config_dir() -> Path:
    """Per-user configuration directory: %APPDATA%, Application Support or XDG."""

    home = Path.home()
    if sys.platform.startswith("win"):
        return Path(os.environ.get("APPDATA") or home) / APP_DIR_NAME
    if sys.platform == "darwin":
        return home / "Library" / "Application Support" / APP_DIR_NAME
    return Path(os.environ.get("XDG_CONFIG_HOME") or home / ".config") / APP_DIR_NAME


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


def _split_env_line(raw_line: str) -> tuple[str, str] | None:
    """`KEY=value` -> (key, unquoted value); comments, blanks and junk -> None."""

    line = raw_line.strip()
    if not line or line.startswith("#") or "=" not in line:
        return None
    key, value = line.split("=", 1)
    key = key.strip()
    if not key:
        return None
    return key, value.strip().strip('"').strip("'")


def _parse_env_lines(text: str) -> dict[str, str]:
    pairs = (_split_env_line(line) for line in text.splitlines())
    return dict(pair for pair in pairs if pair is not None)


def write_user_env_vars(values: dict[str, str | None], *, env_path: Path | None = None) -> Path:
    """Set variables in the user's .env and leave every other line alone.

    Keys already in the file are rewritten where they stand (every occurrence);
    new keys are appended. Comments, blank lines and unrelated keys are kept.
    `None` values are ignored.
    """

    env_path = env_path or get_user_env_file()
    env_path.parent.mkdir(parents=True, exist_ok=True)

    updates = {key: value for key, value in values.items() if value is not None}
    if env_path.exists():
        lines = env_path.read_text(encoding="utf-8").splitlines()
    else:
        lines = [_ENV_HEADER]

    written: set[str] = set()
    for index, raw_line in enumerate(lines):
        pair = _split_env_line(raw_line)
        if pair is None or pair[0] not in updates:
            continue
        key = pair[0]
        lines[index] = f"{key}={updates[key]}"
        written.add(key)

    lines.extend(f"{key}={value}" for key, value in updates.items() if key not in written)
    env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return env_path


class AppSettings(BaseSettings):
    """Central application settings.

    CLI flags override these for a single run; everything else comes from
    `HOSTRESOLVE_*` environment variables or the .env files below.
    """

    model_config = SettingsConfigDict(
        env_prefix="HOSTRESOLVE_",
        extra="ignore",
        case_sensitive=False,
        # Project .env first (dev), then the user's global config.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    lookup_timeout_seconds: float | None = Field(
        default=30.0,
        gt=0,
        description="Upper bound for a single lookup (seconds). None disables it.",
    )
    default_workers: int = Field(
        default=0,
        ge=0,
        le=1024,
        description="Worker contexts used when --workers is not given (0 = synchronous).",
    )
    resolver_backend: ResolverBackend = Field(
        default=ResolverBackend.SYSTEM,
        description="Resolution primitive: OS resolver (getaddrinfo) or dnspython.",
    )
    nameservers: list[str] = Field(
        default_factory=list,
        description="Explicit nameservers for the dnspython backend (system config if empty).",
    )
    log_level: LogLevel = Field(
        default="WARNING",
        description="Logging level for diagnostics written to stderr.",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().upper()
        return value
