"""
Configuration for domdecode.

All tunable parameters in one place. Loaded from:
1. Defaults (this file)
2. Config file (~/.config/domdecode/config.toml) if exists
3. Environment variables (DOMDECODE_*) override file
4. CLI flags override everything
"""

from __future__ import annotations

import contextlib
import logging
import os
import tomllib  # stdlib in 3.11+
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass
class WalkConfig:
    """Limits for the recursive walks (ancestor search, child enumeration, offset walk)."""
    max_depth: int = 10_000  # steps before a walk gives up with DepthExceeded


@dataclass
class CliConfig:
    """Output settings for the domdecode command."""
    indent: int = 2


@dataclass
class Config:
    """Root config with all settings."""
    walk: WalkConfig = field(default_factory=WalkConfig)
    cli: CliConfig = field(default_factory=CliConfig)


def get_config_path() -> Path:
    """Get config file path, respecting XDG."""
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "domdecode" / "config.toml"
    return Path.home() / ".config" / "domdecode" / "config.toml"


def load_config() -> Config:
    """Load config from file if exists, else return defaults."""
    config = Config()
    path = get_config_path()

    if path.exists():
        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
            config = _apply_toml(config, data)
        except (OSError, tomllib.TOMLDecodeError, ValueError, TypeError) as e:
            logger.warning("Ignoring unreadable config file %s: %s", path, e)

    # env var overrides
    config = _apply_env(config)

    return config


def _apply_toml(config: Config, data: dict) -> Config:
    """Apply toml data to config."""
    if "walk" in data:
        w = data["walk"]
        if "max_depth" in w:
            config.walk.max_depth = int(w["max_depth"])

    if "cli" in data:
        c = data["cli"]
        if "indent" in c:
            config.cli.indent = int(c["indent"])

    return config


def _apply_env(config: Config) -> Config:
    """Apply environment variable overrides."""
    env_map: dict[str, tuple[str, str, type]] = {
        "DOMDECODE_MAX_DEPTH": ("walk", "max_depth", int),
        "DOMDECODE_INDENT": ("cli", "indent", int),
    }

    for env_key, (section, attr, conv) in env_map.items():
        val = os.environ.get(env_key)
        if val is not None:
            with contextlib.suppress(ValueError, AttributeError):
                setattr(getattr(config, section), attr, conv(val))

    return config


# Module-level config instance, loaded once on first use
_config: Config | None = None


def get_config() -> Config:
    """Get the global config instance."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reset_config() -> None:
    """Drop the cached config so the next get_config() reloads it."""
    global _config
    _config = None
