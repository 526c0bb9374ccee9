"""Runtime settings and forge configuration for labctl."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from labctl import __version__

DEFAULT_HOST = "https://gitlab.com"
DEFAULT_REMOTE = "origin"


class ConfigError(RuntimeError):
    """Raised when the forge configuration is missing or invalid."""


@dataclass(frozen=True)
class RuntimeSettings:
    home_dir: Path
    config_file: Path
    log_dir: Path
    cli_version: str = __version__


@dataclass(frozen=True)
class ForgeConfig:
    host: str = DEFAULT_HOST
    token: str | None = None
    token_env: str | None = "GITLAB_TOKEN"
    default_remote: str = DEFAULT_REMOTE

    @property
    def api_url(self) -> str:
        return self.host.rstrip("/") + "/api/v4"

    def resolve_token(self) -> str:
        if self.token:
            return self.token
        if not self.token_env:
            raise ConfigError("forge token missing; set 'token' or 'token_env' in the config file")
        token = os.environ.get(self.token_env)
        if not token:
            raise ConfigError(
                f"forge token missing in environment variable '{self.token_env}'"
            )
        return token


def _default_home_dir() -> Path:
    override = os.environ.get("LABCTL_HOME")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".labctl"


def load_settings() -> RuntimeSettings:
    base = _default_home_dir()
    return RuntimeSettings(
        home_dir=base,
        config_file=base / "config.yaml",
        log_dir=base / "logs",
    )


def load_forge_config(settings: RuntimeSettings) -> ForgeConfig:
    """Read the YAML config file (if any) and apply environment overrides."""

    payload: dict[str, Any] = {}
    path = settings.config_file
    if path.exists():
        try:
            raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"invalid config file {path}: {exc}") from exc
        if not isinstance(raw, dict):
            raise ConfigError(f"config file {path} must contain a mapping")
        payload = raw

    host = os.environ.get("LABCTL_HOST") or payload.get("host") or DEFAULT_HOST
    token = os.environ.get("LABCTL_TOKEN") or payload.get("token")
    token_env = payload.get("token_env", "GITLAB_TOKEN")
    default_remote = payload.get("default_remote") or DEFAULT_REMOTE
    for key, value in (("host", host), ("default_remote", default_remote)):
        if not isinstance(value, str) or not value.strip():
            raise ConfigError(f"config option '{key}' must be a non-empty string")
    return ForgeConfig(
        host=host.strip(),
        token=str(token) if token else None,
        token_env=str(token_env) if token_env else None,
        default_remote=default_remote.strip(),
    )


SETTINGS = load_settings()
