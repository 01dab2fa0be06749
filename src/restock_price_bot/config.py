"""
Configuration for restock-price-bot.
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

CONFIG_SECTION = "restock_price_bot"


class ConfigError(Exception):
    """Configuration is missing a required value or is invalid."""


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() != "false"


def _parse_channels(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        items = value.split(",")
    else:
        items = value
    return [str(item).strip() for item in items if str(item).strip()]


@dataclass
class CatalogConfig:
    """tcgcsv.com catalog, cache and matching configuration."""

    base_url: str = "https://tcgcsv.com"
    vertical: str = "tcgplayer"
    category_id: int = 3  # Pokemon
    timeout_seconds: float = 30.0
    cache_validity_hours: float = 6.0
    recency_years: int = 2
    pacing_seconds: float = 0.1  # Delay between groups during a rebuild
    fuzzy_threshold: float = 0.4  # 0 = exact only, 1 = match anything
    min_match_char_length: int = 3
    search_limit: int = 5

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CatalogConfig":
        """Create catalog config from a dictionary."""
        defaults = cls()
        return cls(
            base_url=data.get("base_url", defaults.base_url),
            vertical=data.get("vertical", defaults.vertical),
            category_id=int(data.get("category_id", defaults.category_id)),
            timeout_seconds=float(data.get("timeout_seconds", defaults.timeout_seconds)),
            cache_validity_hours=float(
                data.get("cache_validity_hours", defaults.cache_validity_hours)
            ),
            recency_years=int(data.get("recency_years", defaults.recency_years)),
            pacing_seconds=float(data.get("pacing_seconds", defaults.pacing_seconds)),
            fuzzy_threshold=float(data.get("fuzzy_threshold", defaults.fuzzy_threshold)),
            min_match_char_length=int(
                data.get("min_match_char_length", defaults.min_match_char_length)
            ),
            search_limit=int(data.get("search_limit", defaults.search_limit)),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "base_url": self.base_url,
            "vertical": self.vertical,
            "category_id": self.category_id,
            "timeout_seconds": self.timeout_seconds,
            "cache_validity_hours": self.cache_validity_hours,
            "recency_years": self.recency_years,
            "pacing_seconds": self.pacing_seconds,
            "fuzzy_threshold": self.fuzzy_threshold,
            "min_match_char_length": self.min_match_char_length,
            "search_limit": self.search_limit,
        }


@dataclass
class BotConfig:
    """Complete restock-price-bot configuration."""

    token: str | None = None
    monitored_channels: list[str] = field(default_factory=list)
    command_prefix: str = "!price"
    auto_respond: bool = True
    bot_user_id: str | None = None  # Messages from this author are ignored

    catalog: CatalogConfig = field(default_factory=CatalogConfig)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BotConfig":
        """Create config from a dictionary (e.g., from YAML)."""
        config = cls()

        if "token" in data:
            config.token = data["token"]
        if "monitored_channels" in data:
            config.monitored_channels = _parse_channels(data["monitored_channels"])
        if "command_prefix" in data:
            config.command_prefix = data["command_prefix"]
        if "auto_respond" in data:
            config.auto_respond = _parse_bool(data["auto_respond"])
        if "bot_user_id" in data:
            config.bot_user_id = data["bot_user_id"]

        if "catalog" in data:
            config.catalog = CatalogConfig.from_dict(data["catalog"] or {})

        return config

    @classmethod
    def from_yaml(cls, path: Path) -> "BotConfig":
        """Load config from a YAML file. A missing file yields defaults."""
        if not path.exists():
            return cls()

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        return cls.from_dict(data.get(CONFIG_SECTION, {}) or {})

    def apply_env(self, environ: Mapping[str, str] | None = None) -> "BotConfig":
        """
        Override settings from environment variables.

        Recognized: DISCORD_TOKEN, MONITORED_CHANNEL_IDS (comma separated),
        COMMAND_PREFIX, AUTO_RESPOND (only "false" disables).
        """
        env = os.environ if environ is None else environ

        if env.get("DISCORD_TOKEN"):
            self.token = env["DISCORD_TOKEN"]
        if "MONITORED_CHANNEL_IDS" in env:
            self.monitored_channels = _parse_channels(env["MONITORED_CHANNEL_IDS"])
        if env.get("COMMAND_PREFIX"):
            self.command_prefix = env["COMMAND_PREFIX"]
        if "AUTO_RESPOND" in env:
            self.auto_respond = _parse_bool(env["AUTO_RESPOND"])

        return self

    def validate(self, require_token: bool = True) -> None:
        """
        Raise ConfigError when a required setting is missing.

        The token is only needed to connect to Discord; one-shot CLI modes
        pass require_token=False.
        """
        if require_token and not self.token:
            raise ConfigError("DISCORD_TOKEN is required")
        if not self.command_prefix:
            raise ConfigError("command_prefix must not be empty")
        if not 0.0 <= self.catalog.fuzzy_threshold <= 1.0:
            raise ConfigError("catalog.fuzzy_threshold must be between 0 and 1")

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary for JSON serialization (token redacted)."""
        return {
            "token": "***" if self.token else None,
            "monitored_channels": list(self.monitored_channels),
            "command_prefix": self.command_prefix,
            "auto_respond": self.auto_respond,
            "bot_user_id": self.bot_user_id,
            "catalog": self.catalog.to_dict(),
        }
