"""
Config system - Layered typed configuration with validation.

Sources merge with precedence (later overrides earlier):
config files (JSON/YAML) < .env file < environment variables < overrides
"""

from typing import Any, Dict, Optional, Tuple, Type, get_type_hints, get_origin, get_args
from dataclasses import dataclass, fields, is_dataclass, MISSING
from pathlib import Path
import json
import logging
import os

from dotenv import dotenv_values

logger = logging.getLogger("attrkit.config")

__all__ = ["AttrkitConfig", "ConfigError", "ConfigLoader", "DEFAULT_CONFIG"]


class ConfigError(Exception):
    """Raised when configuration validation fails."""
    pass


@dataclass(frozen=True)
class AttrkitConfig:
    """
    Tunables for attribute resolution and value encoding.

    Attributes:
        association_separator: Joins association name and display field
            (``role__name``). Any attribute name containing it is
            treated as association-shaped.
        display_candidates: Field names probed, in order, on an
            association's target type before falling back to the
            foreign-key column name.
        datetime_format: ``strftime`` pattern for timezone-aware datetimes.
        default_attr_type: Type given to attributes no source typed.
        cache_resolved: Cache resolved descriptor lists once the
            registry is frozen.
    """

    association_separator: str = "__"
    display_candidates: Tuple[str, ...] = ("name", "title", "label")
    datetime_format: str = "%Y-%m-%d %H:%M:%S"
    default_attr_type: str = "string"
    cache_resolved: bool = True

    def __post_init__(self):
        if not self.association_separator:
            raise ConfigError("association_separator must not be empty")


DEFAULT_CONFIG = AttrkitConfig()


class ConfigLoader:
    """
    Loads and merges configuration from multiple sources with precedence:
    overrides > environment variables > .env file > config files > defaults

    Environment keys use the prefix and double underscores for nesting:
    ``ATTRKIT_RESOLVER__DATETIME_FORMAT`` → ``resolver.datetime_format``.
    """

    def __init__(self, env_prefix: str = "ATTRKIT_"):
        self.env_prefix = env_prefix
        self.config_data: Dict[str, Any] = {}

    @classmethod
    def load(
        cls,
        paths: Optional[list[str]] = None,
        env_prefix: str = "ATTRKIT_",
        env_file: Optional[str] = None,
        overrides: Optional[Dict[str, Any]] = None,
    ) -> "ConfigLoader":
        """
        Load configuration from multiple sources with proper merge strategy.

        Args:
            paths: List of config file paths (glob patterns supported)
            env_prefix: Prefix for environment variables
            env_file: Path to .env file
            overrides: Manual overrides (highest precedence)

        Returns:
            Configured ConfigLoader instance
        """
        loader = cls(env_prefix=env_prefix)

        for pattern in paths or []:
            loader._load_from_files(pattern)

        if env_file:
            loader._load_env_file(env_file)

        loader._load_from_env()

        if overrides:
            loader._merge_dict(loader.config_data, overrides)

        return loader

    def _load_from_files(self, pattern: str):
        """Load config from JSON or YAML files."""
        from glob import glob

        for path_str in sorted(glob(pattern)):
            path = Path(path_str)
            if path.suffix == ".json":
                self._load_json_file(path)
            elif path.suffix in (".yaml", ".yml"):
                self._load_yaml_file(path)
            else:
                logger.warning("Ignoring config file with unknown suffix: %s", path)

    def _load_json_file(self, path: Path):
        """Load config from JSON file."""
        with open(path) as f:
            data = json.load(f)
            self._merge_dict(self.config_data, data)

    def _load_yaml_file(self, path: Path):
        """Load config from YAML file."""
        import yaml
        with open(path) as f:
            data = yaml.safe_load(f)
            if data:
                self._merge_dict(self.config_data, data)

    def _load_env_file(self, path: str):
        """Load prefixed keys from a .env file."""
        env_path = Path(path)
        if not env_path.exists():
            logger.debug("No .env file at %s", env_path)
            return

        for key, value in dotenv_values(env_path).items():
            if value is not None and key.startswith(self.env_prefix):
                self._set_nested(key, value)

    def _load_from_env(self):
        """Load config from environment variables."""
        for key, value in os.environ.items():
            if key.startswith(self.env_prefix):
                self._set_nested(key, value)

    def _set_nested(self, key: str, value: str):
        """Convert ATTRKIT_RESOLVER__CACHE_RESOLVED to nested dict."""
        key = key[len(self.env_prefix):]

        # Split by double underscore for nested keys
        parts = key.lower().split("__")

        current = self.config_data
        for part in parts[:-1]:
            if part not in current or not isinstance(current[part], dict):
                current[part] = {}
            current = current[part]

        current[parts[-1]] = self._parse_value(value)

    def _parse_value(self, value: str) -> Any:
        """Parse string value to appropriate type."""
        # Boolean
        if value.lower() in ("true", "yes"):
            return True
        if value.lower() in ("false", "no"):
            return False

        # Number
        try:
            if "." in value:
                return float(value)
            return int(value)
        except ValueError:
            pass

        # JSON
        if value.startswith(("{", "[")):
            try:
                return json.loads(value)
            except json.JSONDecodeError:
                pass

        return value

    def _merge_dict(self, target: dict, source: dict):
        """Deep merge source into target."""
        for key, value in source.items():
            if key in target and isinstance(target[key], dict) and isinstance(value, dict):
                self._merge_dict(target[key], value)
            else:
                target[key] = value

    def get(self, path: str, default: Any = None) -> Any:
        """Get config value by dot-separated path."""
        parts = path.split(".")
        current = self.config_data

        for part in parts:
            if isinstance(current, dict) and part in current:
                current = current[part]
            else:
                return default

        return current

    def resolver_config(self, section: str = "resolver") -> AttrkitConfig:
        """Build the resolver config from the ``resolver`` section."""
        return self._instantiate_dataclass(AttrkitConfig, self.get(section, {}) or {})

    def _instantiate_dataclass(self, config_class: Type, data: dict):
        """Instantiate dataclass config with validation."""
        hints = get_type_hints(config_class)
        kwargs = {}

        for field_info in fields(config_class):
            field_name = field_info.name
            field_type = hints.get(field_name, Any)

            if field_name in data:
                value = data[field_name]

                if get_origin(field_type) is tuple and isinstance(value, list):
                    value = tuple(value)

                if not self._check_type(value, field_type):
                    raise ConfigError(
                        f"Config field '{field_name}' expected {field_type}, "
                        f"got {type(value).__name__}"
                    )

                kwargs[field_name] = value
            elif field_info.default is not MISSING:
                kwargs[field_name] = field_info.default
            elif field_info.default_factory is not MISSING:
                kwargs[field_name] = field_info.default_factory()
            else:
                raise ConfigError(
                    f"Required config field '{field_name}' not provided"
                )

        unknown = set(data) - {f.name for f in fields(config_class)}
        if unknown:
            logger.warning("Ignoring unknown config keys: %s", sorted(unknown))

        return config_class(**kwargs)

    def _check_type(self, value: Any, expected_type: Type) -> bool:
        """Basic type checking."""
        origin = get_origin(expected_type)

        if origin is tuple:
            if not isinstance(value, tuple):
                return False
            args = [a for a in get_args(expected_type) if a is not Ellipsis]
            if args:
                return all(self._check_type(item, args[0]) for item in value)
            return True

        if origin:
            return isinstance(value, origin)

        if expected_type is bool:
            return isinstance(value, bool)

        try:
            return isinstance(value, expected_type)
        except TypeError:
            # For complex types, skip validation
            return True

    def to_dict(self) -> dict:
        """Export all config as dictionary."""
        return self.config_data.copy()
