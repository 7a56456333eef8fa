"""
Runtime configuration for the robot DSL.

Options are resolved from, lowest to highest precedence:
- built-in defaults
- a YAML file (explicit path, or the ROBOT_DSL_CONFIG environment variable)
- ROBOT_DSL_* environment variables
- explicit overrides (the CLI flags)

Example file:

    scoping: merge
    value_storage: text
    error_policy: continue
    integer_literals: true
"""

import logging
import os
from dataclasses import dataclass, fields, replace
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "ROBOT_DSL_CONFIG"
ENV_PREFIX = "ROBOT_DSL_"


class ConfigError(ValueError):
    """Raised for unknown configuration keys or invalid values."""
    pass


class ScopeMode(Enum):
    """How block scopes interact with their enclosing scope."""
    LEXICAL = "lexical"
    MERGE = "merge"


class StorageMode(Enum):
    """How values are stored once bound."""
    TAGGED = "tagged"   # Numbers stay numbers
    TEXT = "text"       # Everything is stored as its display text


class ErrorPolicy(Enum):
    """What the driver does when a root statement fails."""
    ABORT = "abort"
    CONTINUE = "continue"


_TRUE_WORDS = {"1", "true", "yes", "on"}
_FALSE_WORDS = {"0", "false", "no", "off"}


def _parse_bool(key: str, raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    text = str(raw).strip().lower()
    if text in _TRUE_WORDS:
        return True
    if text in _FALSE_WORDS:
        return False
    raise ConfigError(f"{key}: expected a boolean, got {raw!r}")


def _parse_enum(key: str, enum_cls, raw: Any):
    if isinstance(raw, enum_cls):
        return raw
    try:
        return enum_cls(str(raw).strip().lower())
    except ValueError:
        choices = ", ".join(m.value for m in enum_cls)
        raise ConfigError(f"{key}: expected one of {choices}, got {raw!r}") from None


@dataclass(frozen=True)
class RuntimeConfig:
    """Options controlling tokenizing and evaluation."""
    scoping: ScopeMode = ScopeMode.LEXICAL
    value_storage: StorageMode = StorageMode.TAGGED
    error_policy: ErrorPolicy = ErrorPolicy.ABORT
    integer_literals: bool = True

    @classmethod
    def legacy(cls) -> "RuntimeConfig":
        """Scope merging and text storage, matching the first release."""
        return cls(scoping=ScopeMode.MERGE, value_storage=StorageMode.TEXT)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RuntimeConfig":
        """Build a config from a mapping of option names to raw values.

        Raises:
            ConfigError: on an unknown key or an invalid value
        """
        return cls().merged(data)

    def merged(self, data: Mapping[str, Any]) -> "RuntimeConfig":
        """Return a copy with the given raw options applied on top."""
        known = {f.name for f in fields(self)}
        changes: Dict[str, Any] = {}
        for key, raw in data.items():
            if key not in known:
                raise ConfigError(f"unknown configuration key {key!r}")
            if raw is None:
                continue
            if key == "scoping":
                changes[key] = _parse_enum(key, ScopeMode, raw)
            elif key == "value_storage":
                changes[key] = _parse_enum(key, StorageMode, raw)
            elif key == "error_policy":
                changes[key] = _parse_enum(key, ErrorPolicy, raw)
            else:
                changes[key] = _parse_bool(key, raw)
        return replace(self, **changes)

    @classmethod
    def load(cls, path: Union[str, Path]) -> "RuntimeConfig":
        """Read a YAML config file.

        Raises:
            ConfigError: if the file is not a mapping or holds bad options
            FileNotFoundError: if the file does not exist
        """
        return cls().merged(_read_yaml(Path(path)))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "scoping": self.scoping.value,
            "value_storage": self.value_storage.value,
            "error_policy": self.error_policy.value,
            "integer_literals": self.integer_literals,
        }


def _read_yaml(path: Path) -> Dict[str, Any]:
    import yaml  # local import, only needed when a config file is used

    with path.open("r", encoding="utf-8") as fp:
        try:
            data = yaml.safe_load(fp) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"{path}: invalid YAML: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: top level must be a mapping")
    logger.debug("loaded config from %s", path)
    return data


def env_overrides(env: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
    """Collect ROBOT_DSL_<KEY> variables for the known option names."""
    env = os.environ if env is None else env
    overrides = {}
    for f in fields(RuntimeConfig):
        name = ENV_PREFIX + f.name.upper()
        if name in env:
            overrides[f.name] = env[name]
    return overrides


def load_config(path: Optional[Union[str, Path]] = None,
                env: Optional[Mapping[str, str]] = None,
                base: Optional[RuntimeConfig] = None,
                **overrides: Any) -> RuntimeConfig:
    """
    Resolve the runtime configuration from every source.

    Args:
        path: YAML file to read; falls back to $ROBOT_DSL_CONFIG
        env: Environment mapping (defaults to os.environ)
        base: Starting point instead of the defaults (e.g. legacy())
        **overrides: Highest-precedence options; None values are ignored

    Raises:
        ConfigError: on an unknown key or an invalid value
    """
    env = os.environ if env is None else env
    config = base or RuntimeConfig()

    if path is None and env.get(CONFIG_ENV_VAR):
        path = env[CONFIG_ENV_VAR]
    if path is not None:
        config = config.merged(_read_yaml(Path(path)))

    config = config.merged(env_overrides(env))
    return config.merged(overrides)
