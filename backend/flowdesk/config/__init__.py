"""
Configuration package.

Dataclass configs read from ``FLOWDESK_*`` environment variables.
"""

from flowdesk.config.base import (
    BaseConfig,
    ConfigField,
    FieldType,
    get_config,
    list_config_names,
    read_env_defaults,
    register_config,
)
from flowdesk.config.sub_config import EditorConfig, SimulatorConfig

__all__ = [
    "BaseConfig",
    "ConfigField",
    "FieldType",
    "get_config",
    "list_config_names",
    "read_env_defaults",
    "register_config",
    "EditorConfig",
    "SimulatorConfig",
]
