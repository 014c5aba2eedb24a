"""
Config base — dataclass configs populated from environment variables.

Each config is a dataclass subclassing ``BaseConfig`` and declaring an
``_ENV_MAP`` (field name → environment variable). Registered configs
are reachable by name through ``get_config``.
"""

from __future__ import annotations

import os
from dataclasses import MISSING, Field, asdict, dataclass, fields
from enum import Enum
from logging import getLogger
from typing import Any, Dict, List, Optional, Type, TypeVar

logger = getLogger(__name__)

C = TypeVar("C", bound="BaseConfig")


class FieldType(str, Enum):
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    PATH = "path"


@dataclass
class ConfigField:
    """Describes one config field for settings screens."""
    name: str
    field_type: FieldType
    label: str
    description: str = ""
    default: Any = None
    min_value: Optional[float] = None
    max_value: Optional[float] = None
    group: str = "general"

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["field_type"] = self.field_type.value
        return data


_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _parse_env_value(raw: str, field: Field) -> Any:
    """Convert a raw env string to the field's type.

    Types are taken from the field default, or from the annotation
    text when the default is ``None``.
    """
    default = field.default if field.default is not MISSING else None
    type_text = str(field.type)

    if isinstance(default, bool) or type_text == "bool":
        lowered = raw.strip().lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
        raise ValueError(f"not a boolean: {raw!r}")
    if isinstance(default, int) or "int" in type_text:
        return int(raw)
    if isinstance(default, float) or "float" in type_text:
        return float(raw)
    return raw


def read_env_defaults(
    env_map: Dict[str, str],
    dataclass_fields: Dict[str, Field],
) -> Dict[str, Any]:
    """Collect constructor kwargs from the environment.

    Unset variables are skipped so the dataclass default applies.
    Unparseable values are logged and skipped as well.
    """
    values: Dict[str, Any] = {}
    for field_name, env_name in env_map.items():
        raw = os.environ.get(env_name)
        if raw is None or raw == "":
            continue
        field = dataclass_fields.get(field_name)
        if field is None:
            continue
        try:
            values[field_name] = _parse_env_value(raw, field)
        except ValueError as e:
            logger.warning(
                f"Ignoring invalid value for {env_name}: {e}; using default"
            )
    return values


@dataclass
class BaseConfig:
    """Common behaviour of all config dataclasses."""

    _ENV_MAP = {}

    @classmethod
    def get_default_instance(cls: Type[C]) -> C:
        defaults = read_env_defaults(cls._ENV_MAP, cls.__dataclass_fields__)
        return cls(**defaults)

    @classmethod
    def get_config_name(cls) -> str:
        raise NotImplementedError

    @classmethod
    def get_display_name(cls) -> str:
        return cls.get_config_name().title()

    @classmethod
    def get_description(cls) -> str:
        return ""

    @classmethod
    def get_fields_metadata(cls) -> List[ConfigField]:
        return []

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


# ── Registry ──

_CONFIG_CLASSES: Dict[str, Type[BaseConfig]] = {}


def register_config(cls: Type[C]) -> Type[C]:
    """Class decorator: make a config reachable through ``get_config``."""
    _CONFIG_CLASSES[cls.get_config_name()] = cls
    return cls


def get_config(name: str) -> BaseConfig:
    """Build a fresh instance of the named config from the environment."""
    try:
        cls = _CONFIG_CLASSES[name]
    except KeyError:
        raise KeyError(f"Unknown config: {name}") from None
    return cls.get_default_instance()


def list_config_names() -> List[str]:
    return sorted(_CONFIG_CLASSES)
