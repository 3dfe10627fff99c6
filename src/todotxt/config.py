"""Configuration management for todotxt."""

import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import List, Optional

import yaml

from .errors import ConfigError
from .parser import DuplicateKeyBehavior, KeyHandler, ParserOptions
from .todo_list import SortKey
from .utils.datetime import is_iso_date_text

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "TODOTXT_CONFIG"
DEFAULT_CONFIG_PATH = "~/.todotxt/config.yaml"


@dataclass
class ConfigModel:
    """Global configuration model for todotxt."""

    # Parsing
    duplicate_key_behavior: str = DuplicateKeyBehavior.OVERWRITE.value
    date_keys: List[str] = field(default_factory=list)  # keys whose values must be YYYY-MM-DD

    # Display preferences
    default_sort: Optional[str] = None  # priority, due, creation, completion
    show_completed: bool = True
    due_soon_days: int = 7
    no_color: bool = False

    def __post_init__(self):
        """Validate values loaded from YAML."""
        self._check_types()
        try:
            DuplicateKeyBehavior(self.duplicate_key_behavior)
        except ValueError:
            raise ConfigError(
                f"Invalid duplicate_key_behavior: {self.duplicate_key_behavior!r}"
            ) from None
        if self.default_sort is not None:
            try:
                SortKey(self.default_sort)
            except ValueError:
                raise ConfigError(f"Invalid default_sort: {self.default_sort!r}") from None
        if self.due_soon_days < 0:
            raise ConfigError("due_soon_days must not be negative")

    def _check_types(self) -> None:
        if not isinstance(self.duplicate_key_behavior, str):
            raise ConfigError("duplicate_key_behavior must be a string")
        if not isinstance(self.date_keys, list) or not all(
            isinstance(key, str) for key in self.date_keys
        ):
            raise ConfigError("date_keys must be a list of strings")
        if self.default_sort is not None and not isinstance(self.default_sort, str):
            raise ConfigError("default_sort must be a string")
        # bool is an int subclass, so rule it out explicitly
        if isinstance(self.due_soon_days, bool) or not isinstance(self.due_soon_days, int):
            raise ConfigError("due_soon_days must be an integer")
        for name in ("show_completed", "no_color"):
            if not isinstance(getattr(self, name), bool):
                raise ConfigError(f"{name} must be true or false")

    def parser_options(self) -> ParserOptions:
        """Build parser options; every date key gets an ISO date validator."""
        return ParserOptions(
            duplicate_key_behavior=self.duplicate_key_behavior,
            custom_key_handlers=[
                KeyHandler(key=key, validate=is_iso_date_text) for key in self.date_keys
            ],
        )

    def to_yaml(self) -> str:
        """Serialize config to YAML."""
        data = {
            "duplicate_key_behavior": self.duplicate_key_behavior,
            "date_keys": list(self.date_keys),
            "default_sort": self.default_sort,
            "show_completed": self.show_completed,
            "due_soon_days": self.due_soon_days,
            "no_color": self.no_color,
        }
        return yaml.dump(data, default_flow_style=False)

    @classmethod
    def from_yaml(cls, yaml_str: str) -> "ConfigModel":
        """Deserialize config from YAML.

        Raises:
            ConfigError: If the document is not a mapping of known keys
        """
        try:
            data = yaml.safe_load(yaml_str)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML: {e}") from e

        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ConfigError("Configuration must be a mapping")

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}")

        return cls(**data)


def default_config_path() -> Path:
    """Config file location, overridable with $TODOTXT_CONFIG."""
    return Path(os.path.expanduser(os.environ.get(CONFIG_ENV_VAR, DEFAULT_CONFIG_PATH)))


class Config:
    """Configuration manager for todotxt."""

    _instance: Optional[ConfigModel] = None

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> ConfigModel:
        """Load configuration from file, falling back to defaults.

        A missing file is not an error; the defaults are used and nothing is
        written to disk.
        """
        if config_path is None:
            config_path = default_config_path()

        if config_path.exists():
            with open(config_path, "r", encoding="utf-8") as f:
                config = ConfigModel.from_yaml(f.read())
            logger.debug("Loaded configuration from %s", config_path)
        else:
            logger.debug("No configuration at %s, using defaults", config_path)
            config = ConfigModel()

        cls._instance = config
        return config

    @classmethod
    def get(cls) -> ConfigModel:
        """Get the current configuration instance."""
        if cls._instance is None:
            cls._instance = cls.load()
        return cls._instance

    @classmethod
    def reload(cls) -> ConfigModel:
        """Reload configuration from file."""
        cls._instance = None
        return cls.load()


def get_config() -> ConfigModel:
    """Get the current configuration."""
    return Config.get()


def load_config(config_path: Optional[Path] = None) -> ConfigModel:
    """Load configuration from file."""
    return Config.load(config_path)
