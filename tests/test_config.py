"""Tests for environment-driven configuration."""

import pytest

from flowdesk.config import (
    EditorConfig,
    SimulatorConfig,
    get_config,
    list_config_names,
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for cls in (EditorConfig, SimulatorConfig):
        for env_name in cls._ENV_MAP.values():
            monkeypatch.delenv(env_name, raising=False)


class TestSimulatorConfig:
    def test_defaults(self):
        config = SimulatorConfig.get_default_instance()
        assert config.submit_delay == 0.4
        assert config.validation_delay == 0.6
        assert config.region_delay == 0.7
        assert config.seed is None

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("FLOWDESK_SIM_SUBMIT_DELAY", "0.05")
        monkeypatch.setenv("FLOWDESK_SIM_SEED", "42")
        config = SimulatorConfig.get_default_instance()
        assert config.submit_delay == 0.05
        assert config.seed == 42

    def test_invalid_value_falls_back(self, monkeypatch):
        monkeypatch.setenv("FLOWDESK_SIM_REGION_DELAY", "slow")
        monkeypatch.setenv("FLOWDESK_SIM_SEED", "abc")
        config = SimulatorConfig.get_default_instance()
        assert config.region_delay == 0.7
        assert config.seed is None

    def test_instant(self):
        config = SimulatorConfig.instant(seed=3)
        assert (config.submit_delay, config.validation_delay, config.region_delay) == (0, 0, 0)
        assert config.seed == 3


class TestEditorConfig:
    def test_env_overrides(self, monkeypatch, tmp_path):
        monkeypatch.setenv("FLOWDESK_WORKFLOW_DIR", str(tmp_path))
        monkeypatch.setenv("FLOWDESK_JSON_INDENT", "4")
        config = EditorConfig.get_default_instance()
        assert config.workflow_dir == str(tmp_path)
        assert config.json_indent == 4
        assert config.node_id_prefix == "n"

    def test_empty_value_is_unset(self, monkeypatch):
        monkeypatch.setenv("FLOWDESK_EDGE_ID_PREFIX", "")
        assert EditorConfig.get_default_instance().edge_id_prefix == "e"

    def test_fields_metadata(self):
        names = [f.name for f in EditorConfig.get_fields_metadata()]
        assert names == list(EditorConfig().to_dict())
        field = EditorConfig.get_fields_metadata()[-1].to_dict()
        assert field["field_type"] == "number"
        assert field["max_value"] == 8


class TestRegistry:
    def test_known_configs(self):
        assert {"editor", "simulator"} <= set(list_config_names())

    def test_get_config_by_name(self, monkeypatch):
        monkeypatch.setenv("FLOWDESK_NODE_ID_PREFIX", "node-")
        config = get_config("editor")
        assert isinstance(config, EditorConfig)
        assert config.node_id_prefix == "node-"

    def test_unknown_config(self):
        with pytest.raises(KeyError):
            get_config("nope")
