"""
Tests for observatory configuration loading and validation.
"""

import pytest

from observatory.core import ConfigurationError
from observatory.core.config import (
    ComponentSpec,
    ObservatoryConfig,
    load_config,
    save_config,
)


class TestDefaults:

    def test_default_values(self):
        config = ObservatoryConfig()
        assert config.orchestrator.history_size == 1000
        assert config.orchestrator.distance_floor == 0.01
        assert config.metrics.buffer_size == 1000
        assert config.explainability.confidence_thresholds == {}
        assert [c.id for c in config.session.components] == ["scanner", "processor", "researcher"]

    def test_default_config_validates(self):
        ObservatoryConfig().validate()


class TestValidate:
    """Rejecting unusable values."""

    def test_non_positive_buffer(self):
        config = ObservatoryConfig()
        config.metrics.buffer_size = 0
        with pytest.raises(ConfigurationError):
            config.validate()

    def test_negative_resource(self):
        config = ObservatoryConfig()
        config.session.resources["compute"] = -1.0
        with pytest.raises(ConfigurationError):
            config.validate()

    def test_negative_mass(self):
        config = ObservatoryConfig()
        config.session.components.append(ComponentSpec("bad", mass=-2.0))
        with pytest.raises(ConfigurationError):
            config.validate()


class TestYaml:
    """Save and load through YAML."""

    def test_round_trip(self, tmp_path, session_config):
        session_config.explainability.confidence_thresholds = {"coupling": 0.4}
        path = save_config(session_config, tmp_path / "nested" / "observatory.yaml")

        loaded = load_config(path)
        assert loaded.to_dict() == session_config.to_dict()
        assert loaded.session.interactions[0].source == "alpha"

    def test_partial_file(self, tmp_path):
        path = tmp_path / "observatory.yaml"
        path.write_text("metrics:\n  buffer_size: 50\n", encoding="utf-8")

        loaded = load_config(path)
        assert loaded.metrics.buffer_size == 50
        assert loaded.orchestrator.history_size == 1000

    def test_broken_file_falls_back(self, tmp_path):
        path = tmp_path / "observatory.yaml"
        path.write_text("orchestrator: [unclosed\n", encoding="utf-8")
        assert load_config(path).to_dict() == ObservatoryConfig().to_dict()

    def test_wrong_shape_falls_back(self, tmp_path):
        path = tmp_path / "observatory.yaml"
        path.write_text("orchestrator: 5\n", encoding="utf-8")
        assert load_config(path).orchestrator.history_size == 1000

    def test_missing_file(self, tmp_path):
        assert load_config(tmp_path / "nope.yaml").metrics.buffer_size == 1000
