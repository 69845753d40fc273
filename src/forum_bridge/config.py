"""Configuration loading for the forum bridge."""

from __future__ import annotations

from collections.abc import Mapping, MutableMapping
from dataclasses import dataclass, fields, replace
from pathlib import Path

import yaml

from .logging_config import parse_log_level
from .transport import DEFAULT_TIMEOUT, DISCORD_API_BASE

DEFAULT_ENVIRONMENT = "development"


class ConfigError(ValueError):
    """Required settings are missing or invalid."""


@dataclass(slots=True)
class BridgeConfig:
    """Top level configuration for the forum bridge.

    ``None`` means "not set", so a loaded config can be layered over another
    with ``merge_config``. ``require()`` fills in the defaults.
    """

    discord_token: str | None = None
    forum_channel_id: str | None = None
    api_base: str | None = None
    timeout: float | None = None
    environment: str | None = None
    log_level: str | None = None

    def with_defaults(self) -> BridgeConfig:
        return replace(
            self,
            api_base=self.api_base or DISCORD_API_BASE,
            timeout=DEFAULT_TIMEOUT if self.timeout is None else self.timeout,
            environment=self.environment or DEFAULT_ENVIRONMENT,
        )

    def require(self) -> BridgeConfig:
        missing = []
        if not self.discord_token:
            missing.append("DISCORD_BOT_TOKEN")
        if not self.forum_channel_id:
            missing.append("DISCORD_FORUM_CHANNEL_ID")
        if missing:
            raise ConfigError(f"Missing required settings: {', '.join(missing)}")
        if self.log_level is not None:
            try:
                parse_log_level(self.log_level)
            except ValueError as e:
                raise ConfigError(f"Invalid LOG_LEVEL: {e}") from e
        return self.with_defaults()


def _str_or_none(value: object) -> str | None:
    # YAML reads unquoted snowflakes and numeric levels as ints
    return str(value) if value is not None else None


def load_from_env(env: Mapping[str, str]) -> BridgeConfig:
    return BridgeConfig(
        discord_token=env.get("DISCORD_BOT_TOKEN") or None,
        forum_channel_id=env.get("DISCORD_FORUM_CHANNEL_ID") or None,
        api_base=env.get("DISCORD_API_BASE") or None,
        timeout=float(env["DISCORD_TIMEOUT"]) if env.get("DISCORD_TIMEOUT") else None,
        environment=env.get("ENVIRONMENT") or None,
        log_level=env.get("LOG_LEVEL") or None,
    )


def load_config_file(path: Path) -> BridgeConfig:
    data = yaml.safe_load(path.read_text()) if path.exists() else {}
    data = data or {}
    if not isinstance(data, MutableMapping):
        raise ValueError("Config file must contain a mapping")
    discord = data.get("discord") or {}
    if not isinstance(discord, MutableMapping):
        raise ValueError("'discord' section must be a mapping")
    timeout = discord.get("timeout")
    return BridgeConfig(
        discord_token=_str_or_none(discord.get("token")),
        forum_channel_id=_str_or_none(discord.get("forum_channel_id")),
        api_base=_str_or_none(discord.get("api_base")),
        timeout=float(timeout) if timeout is not None else None,
        environment=_str_or_none(data.get("environment")),
        log_level=_str_or_none(data.get("log_level")),
    )


def merge_config(base: BridgeConfig, override: BridgeConfig | None) -> BridgeConfig:
    """Overlay every field the override sets."""
    if override is None:
        return base
    merged = {}
    for f in fields(BridgeConfig):
        value = getattr(override, f.name)
        merged[f.name] = value if value is not None else getattr(base, f.name)
    return BridgeConfig(**merged)


__all__ = ["BridgeConfig", "ConfigError", "load_from_env", "load_config_file", "merge_config"]
