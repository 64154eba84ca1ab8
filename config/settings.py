"""
Configuration management for 1cmdcc.

Loads settings from ~/.1cmdcc/config.toml with fallback to defaults.
"""
import logging
from pathlib import Path
from typing import Dict, Any, Optional
from dataclasses import dataclass, asdict

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("~") / ".1cmdcc" / "config.toml"

# Default configuration values
DEFAULT_CONFIG = {
    "notes": {
        "path": "~/notes/1cmdcc"
    },
    "ui": {
        "verbose": False,
        "quiet": False
    },
    "logging": {
        "file": "~/.1cmdcc/1cmdcc.log"
    }
}


@dataclass
class ClipperConfig:
    """Main configuration class for 1cmdcc."""
    notes: Dict[str, Any]
    ui: Dict[str, Any]
    logging: Dict[str, Any]

    @classmethod
    def load(cls, config_path: Optional[str] = None) -> 'ClipperConfig':
        """
        Load configuration from file with fallback to defaults.

        Args:
            config_path: Path to config file (defaults to ~/.1cmdcc/config.toml)

        Returns:
            ClipperConfig instance with merged settings
        """
        config_path = _resolve_config_path(config_path)

        config_data = _deep_merge(DEFAULT_CONFIG, {})

        if config_path.exists():
            try:
                import tomllib  # Python 3.11+
                with open(config_path, "rb") as f:
                    user_config = tomllib.load(f)

                config_data = _deep_merge(config_data, user_config)
                logger.info(f"Loaded configuration from {config_path}")

            except (OSError, ValueError) as e:
                # tomllib.TOMLDecodeError is a ValueError
                logger.warning(f"Failed to load config from {config_path}: {e}")
                logger.info("Using default configuration")
        else:
            logger.info(f"Config file not found at {config_path}, using defaults")

            try:
                config_path.parent.mkdir(parents=True, exist_ok=True)
                _create_example_config(config_path)
            except OSError as e:
                logger.warning(f"Could not create example config: {e}")

        known = {}
        for table, defaults in DEFAULT_CONFIG.items():
            value = config_data.get(table)
            if not isinstance(value, dict):
                logger.warning(f"Ignoring [{table}] in {config_path}: not a table")
                value = dict(defaults)
            known[table] = value
        return cls(**known)

    @property
    def notes_path(self) -> Path:
        """Notes directory with ``~`` expanded."""
        return Path(str(self.notes["path"])).expanduser()

    @property
    def log_path(self) -> Optional[Path]:
        """Log file path, or None when file logging is disabled."""
        value = self.logging.get("file")
        if not value:
            return None
        return Path(str(value)).expanduser()

    def save(self, config_path: Optional[str] = None) -> bool:
        """
        Save current configuration to file.

        Returns:
            True if saved successfully, False otherwise
        """
        config_path = _resolve_config_path(config_path)

        try:
            config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(config_path, "w", encoding="utf-8") as f:
                f.write(_dict_to_toml(asdict(self)))

            logger.info(f"Configuration saved to {config_path}")
            return True

        except OSError as e:
            logger.error(f"Failed to save config to {config_path}: {e}")
            return False


def _resolve_config_path(config_path: Optional[str]) -> Path:
    if config_path is None:
        return DEFAULT_CONFIG_PATH.expanduser()
    return Path(config_path).expanduser()


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Deep merge two dictionaries without mutating either."""
    result = {k: (dict(v) if isinstance(v, dict) else v) for k, v in base.items()}

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def _create_example_config(config_path: Path) -> None:
    """Create an example configuration file."""
    header = """# 1cmdcc configuration
# This file was auto-generated with default values.
# The --path command line flag overrides notes.path.

"""

    with open(config_path, "w", encoding="utf-8") as f:
        f.write(header + _dict_to_toml(DEFAULT_CONFIG))

    logger.info(f"Created example config at {config_path}")


def _toml_string(value: str) -> str:
    return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'


def _dict_to_toml(data: Dict[str, Any]) -> str:
    """Convert a two-level dictionary to TOML (tables of scalars only)."""
    lines = []

    for table, values in data.items():
        lines.append(f"[{table}]")
        for key, value in values.items():
            if isinstance(value, bool):
                lines.append(f"{key} = {str(value).lower()}")
            elif isinstance(value, (int, float)):
                lines.append(f"{key} = {value}")
            else:
                lines.append(f"{key} = {_toml_string(str(value))}")
        lines.append("")

    return "\n".join(lines)


# Convenience function
def load_config(config_path: Optional[str] = None) -> ClipperConfig:
    """Load 1cmdcc configuration from file or defaults."""
    return ClipperConfig.load(config_path)
