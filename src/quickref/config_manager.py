"""Configuration management module.

This module handles persistent configuration storage using TOML format.
Stores display preferences: page styles and whether to use a pager.

Config file (~/.quickref/config.toml):

    [display]
    use_pager = false

    [style.example_description]
    foreground = "green"
    bold = false
    underline = false
"""

import dataclasses
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import tomli
import tomlkit

from quickref.errors import ConfigError
from quickref.page.style import COLOR_NAMES, Style, StyleSheet

logger = logging.getLogger(__name__)

CACHE_DIR_ENV_VAR = "QUICKREF_CACHE_DIR"
STYLE_KEYS = ("heading", "description", "example_description", "command_template", "placeholder")
STYLE_FIELDS = ("foreground", "bold", "underline")
DEFAULT_COLOR = "default"


def default_cache_dir() -> Path:
    """Cache directory: $QUICKREF_CACHE_DIR or ~/.quickref/cache."""
    override = os.environ.get(CACHE_DIR_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return ConfigManager.DEFAULT_CONFIG_DIR / "cache"


def _parse_bool(section: str, key: str, value: Any) -> bool:
    if not isinstance(value, bool):
        raise ConfigError(f"{section}.{key} must be true or false, got {value!r}")
    return value


def _parse_style(name: str, data: Any, default: Style) -> Style:
    """Build a Style from a [style.<name>] table; missing fields keep the default."""
    section = f"style.{name}"
    if not isinstance(data, dict):
        raise ConfigError(f"[{section}] must be a table")

    unknown = sorted(set(data) - set(STYLE_FIELDS))
    if unknown:
        raise ConfigError(f"Unknown keys in [{section}]: {', '.join(unknown)}")

    changes: dict[str, Any] = {}
    if "foreground" in data:
        color = data["foreground"]
        if color == DEFAULT_COLOR:
            changes["foreground"] = None
        elif color in COLOR_NAMES:
            changes["foreground"] = color
        else:
            raise ConfigError(
                f"{section}.foreground: unknown color {color!r} "
                f"(expected '{DEFAULT_COLOR}' or one of: {', '.join(COLOR_NAMES)})"
            )
    for key in ("bold", "underline"):
        if key in data:
            changes[key] = _parse_bool(section, key, data[key])

    return dataclasses.replace(default, **changes)


@dataclass
class QuickrefConfig:
    """quickref configuration data."""

    style: StyleSheet = field(default_factory=StyleSheet)
    use_pager: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary in config file layout."""
        styles = {}
        for name in STYLE_KEYS:
            style: Style = getattr(self.style, name)
            styles[name] = {
                "foreground": style.foreground or DEFAULT_COLOR,
                "bold": style.bold,
                "underline": style.underline,
            }
        return {"display": {"use_pager": self.use_pager}, "style": styles}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "QuickrefConfig":
        """Create from dictionary.

        Raises:
            ConfigError: If the data has unknown keys or invalid values
        """
        unknown = sorted(set(data) - {"display", "style"})
        if unknown:
            raise ConfigError(f"Unknown config sections: {', '.join(unknown)}")

        display = data.get("display", {})
        if not isinstance(display, dict):
            raise ConfigError("[display] must be a table")
        unknown = sorted(set(display) - {"use_pager"})
        if unknown:
            raise ConfigError(f"Unknown keys in [display]: {', '.join(unknown)}")
        use_pager = _parse_bool("display", "use_pager", display.get("use_pager", False))

        styles = data.get("style", {})
        if not isinstance(styles, dict):
            raise ConfigError("[style] must be a table")
        unknown = sorted(set(styles) - set(STYLE_KEYS))
        if unknown:
            raise ConfigError(f"Unknown style names: {', '.join(unknown)}")

        defaults = StyleSheet()
        parsed = {}
        for name in STYLE_KEYS:
            default = getattr(defaults, name)
            parsed[name] = _parse_style(name, styles[name], default) if name in styles else default
        return cls(style=StyleSheet(**parsed), use_pager=use_pager)


class ConfigManager:
    """Manage quickref configuration file.

    Configuration is stored at ~/.quickref/config.toml, or wherever
    $QUICKREF_CONFIG points.
    """

    DEFAULT_CONFIG_DIR = Path.home() / ".quickref"
    DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.toml"
    CONFIG_ENV_VAR = "QUICKREF_CONFIG"

    @classmethod
    def get_config_path(cls, custom_path: str | None = None) -> Path:
        """Get configuration file path.

        Args:
            custom_path: Custom config file path (optional)

        Returns:
            Path to config file; it may not exist yet
        """
        if custom_path:
            return Path(custom_path).expanduser()

        override = os.environ.get(cls.CONFIG_ENV_VAR)
        if override:
            return Path(override).expanduser()

        return cls.DEFAULT_CONFIG_FILE

    @classmethod
    def load_config(cls, custom_path: str | None = None) -> QuickrefConfig:
        """Load configuration from file.

        Args:
            custom_path: Custom config file path (optional)

        Returns:
            QuickrefConfig object, defaults if the file does not exist

        Raises:
            ConfigError: If the file cannot be read or is invalid
        """
        config_path = cls.get_config_path(custom_path)

        if not config_path.exists():
            logger.debug("Config file not found, using defaults")
            return QuickrefConfig()

        try:
            with open(config_path, "rb") as f:
                data = tomli.load(f)
        except tomli.TOMLDecodeError as e:
            raise ConfigError(f"Invalid TOML in {config_path}: {e}") from e
        except OSError as e:
            raise ConfigError(f"Failed to read config {config_path}: {e}") from e

        config = QuickrefConfig.from_dict(data)
        logger.debug(f"Loaded config from: {config_path}")
        return config

    @classmethod
    def seed_config(cls, custom_path: str | None = None) -> Path:
        """Write a config file containing the default settings.

        Args:
            custom_path: Custom config file path (optional)

        Returns:
            Path of the written config file

        Raises:
            ConfigError: If the file already exists or cannot be written
        """
        config_path = cls.get_config_path(custom_path)
        if config_path.exists():
            raise ConfigError(f"A config file already exists at {config_path}")

        doc = tomlkit.document()
        doc.add(tomlkit.comment("quickref configuration"))
        doc.add(tomlkit.comment(f"Colors: {DEFAULT_COLOR}, {', '.join(COLOR_NAMES)}"))
        for key, value in QuickrefConfig().to_dict().items():
            doc[key] = value

        # Use temporary file and atomic rename for safety
        temp_path = config_path.with_suffix(".tmp")
        try:
            config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(temp_path, "w") as f:
                tomlkit.dump(doc, f)
            os.chmod(temp_path, 0o600)
            temp_path.replace(config_path)
        except OSError as e:
            if temp_path.exists():
                temp_path.unlink()
            raise ConfigError(f"Failed to write config {config_path}: {e}") from e

        logger.debug(f"Seeded config at: {config_path}")
        return config_path
