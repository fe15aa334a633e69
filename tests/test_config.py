"""
Tests for the configuration manager
"""

import pytest

from gesture_vision.modules.utils.config import DEFAULTS, Config


@pytest.fixture(autouse=True)
def fresh_config():
    Config.reset()
    yield
    Config.reset()


class TestConfig:

    def test_singleton(self):
        assert Config() is Config()

    def test_defaults_before_load(self):
        config = Config()
        assert config.get("scheduler.interval_ms") == 150
        assert config.get("fusion.confidence_gate") == 0.5
        assert config.get("detection.motion.weight") == 0.4

    def test_missing_file_falls_back_to_defaults(self, tmp_path):
        config = Config().load(str(tmp_path / "absent.yaml"))
        assert config.data == DEFAULTS

    def test_partial_yaml_merged_over_defaults(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("session:\n  settle_delay_ms: 250\ndetection:\n  motion:\n    min_area: 800\n")

        config = Config().load(str(path))

        assert config.session["settle_delay_ms"] == 250
        assert config.session["read_failure_limit"] == 3
        assert config.get("detection.motion.min_area") == 800
        assert config.get("detection.motion.diff_threshold") == 25

    def test_non_mapping_root_ignored(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("- just\n- a list\n")

        config = Config().load(str(path))

        assert config.data == DEFAULTS

    def test_empty_file_uses_defaults(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("")
        assert Config().load(str(path)).data == DEFAULTS

    def test_load_dict_overrides(self):
        config = Config().load_dict({"scheduler": {"max_workers": 8}})
        assert config.scheduler == {"interval_ms": 150, "max_workers": 8}

    def test_validation_reports_wrong_types(self):
        config = Config()
        config.load_dict({"camera": {"width": "wide"}, "fusion": {"confidence_gate": 1}})
        warnings = config._validate()

        assert len(warnings) == 1
        assert "camera.width" in warnings[0]

    def test_get_missing_key_returns_default(self):
        assert Config().get("nope.nothing", "fallback") == "fallback"
        assert Config().get_section("nope") == {}

    def test_reset_restores_defaults(self):
        Config().load_dict({"session": {"settle_delay_ms": 5}})
        Config.reset()
        assert Config().get("session.settle_delay_ms") == 1000

    def test_defaults_not_mutated_by_overrides(self):
        Config().load_dict({"detection": {"color": {"min_area": 1}}})
        assert DEFAULTS["detection"]["color"]["min_area"] == 1000

    def test_shipped_config_file_loads(self):
        config = Config().load()
        assert config.get("scheduler.interval_ms") == 150
        assert config._validate() == []


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
