"""
Simulator Configuration.

Controls the delays between pipeline stages and the seed of the
user-record generator.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from flowdesk.config.base import BaseConfig, ConfigField, FieldType, register_config


@register_config
@dataclass
class SimulatorConfig(BaseConfig):
    """Registration pipeline simulator settings (delays in seconds)."""

    submit_delay: float = 0.4
    validation_delay: float = 0.6
    region_delay: float = 0.7
    seed: Optional[int] = None

    _ENV_MAP = {
        "submit_delay": "FLOWDESK_SIM_SUBMIT_DELAY",
        "validation_delay": "FLOWDESK_SIM_VALIDATION_DELAY",
        "region_delay": "FLOWDESK_SIM_REGION_DELAY",
        "seed": "FLOWDESK_SIM_SEED",
    }

    @classmethod
    def instant(cls, seed: Optional[int] = None) -> "SimulatorConfig":
        """A config without stage delays."""
        return cls(submit_delay=0, validation_delay=0, region_delay=0, seed=seed)

    @classmethod
    def get_config_name(cls) -> str:
        return "simulator"

    @classmethod
    def get_display_name(cls) -> str:
        return "Execution Simulator"

    @classmethod
    def get_description(cls) -> str:
        return "Animation delays between stages and the user generator seed."

    @classmethod
    def get_fields_metadata(cls) -> List[ConfigField]:
        return [
            ConfigField(
                name="submit_delay",
                field_type=FieldType.NUMBER,
                label="Submit → Validate Delay",
                description="Seconds between registration and validation",
                default=0.4,
                min_value=0,
                group="timing",
            ),
            ConfigField(
                name="validation_delay",
                field_type=FieldType.NUMBER,
                label="Validate → Branch Delay",
                description="Seconds between validation and the branch stage",
                default=0.6,
                min_value=0,
                group="timing",
            ),
            ConfigField(
                name="region_delay",
                field_type=FieldType.NUMBER,
                label="Region → Email Delay",
                description="Seconds between region processing and the welcome email",
                default=0.7,
                min_value=0,
                group="timing",
            ),
            ConfigField(
                name="seed",
                field_type=FieldType.NUMBER,
                label="Generator Seed",
                description="Seed for synthesized user records (empty = random)",
                group="generator",
            ),
        ]
