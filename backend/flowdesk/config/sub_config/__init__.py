"""Concrete config dataclasses. Importing this package registers them."""

from flowdesk.config.sub_config.editor_config import EditorConfig
from flowdesk.config.sub_config.simulator_config import SimulatorConfig

__all__ = ["EditorConfig", "SimulatorConfig"]
