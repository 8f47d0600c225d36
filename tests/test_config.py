"""Tests for activation / learning settings and config loading."""

import json
import sys
import os

import numpy as np
import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
from selnet_config import (
    ActivationSettings,
    LearningSettings,
    ReactivationThreshold,
    SelNetConfig,
    load_selnet_config,
)
from selnet_errors import ConfigurationError


class TestDefaults:
    """Published model constants."""

    def test_activation_defaults(self):
        a = ActivationSettings()
        assert a.temporal_summation == 0.1
        assert a.decay_rate == 0.1
        assert a.logistic_mean == 0.5
        assert a.logistic_standard_deviation == 0.1
        assert a.reactivation_threshold.mean == 0.2
        assert a.reactivation_threshold.standard_deviation == 0.15

    def test_learning_defaults(self):
        lr = LearningSettings()
        assert lr.excitation_gain_rate == 0.5
        assert lr.excitation_loss_rate == 0.1
        assert lr.inhibition_gain_rate == 0.5
        assert lr.inhibition_loss_rate == 0.1
        assert lr.weight_gain_threshold == 0.05

    def test_default_config_validates(self):
        cfg = SelNetConfig()
        assert cfg.validate() is cfg
        assert cfg.seed is None


class TestReactivationThreshold:
    """Gaussian draws truncated to ±3 standard deviations."""

    def test_limits(self):
        t = ReactivationThreshold()
        assert t.lowest_value == pytest.approx(-0.25)
        assert t.highest_value == pytest.approx(0.65)

    def test_draws_stay_within_limits(self):
        t = ReactivationThreshold()
        rng = np.random.default_rng(3)
        draws = [t.draw(rng) for _ in range(2000)]
        assert min(draws) >= t.lowest_value
        assert max(draws) <= t.highest_value
        assert np.mean(draws) == pytest.approx(0.2, abs=0.02)

    def test_not_random_returns_mean(self):
        t = ReactivationThreshold(mean=0.3, is_random=False)
        rng = np.random.default_rng(0)
        assert all(t.draw(rng) == 0.3 for _ in range(10))


class TestLoadConfig:
    """Defaults, JSON file and dict overrides are layered in that order."""

    def test_no_arguments(self):
        cfg = load_selnet_config()
        assert cfg.learning.excitation_gain_rate == 0.5

    def test_dict_overrides(self):
        cfg = load_selnet_config({
            "learning": {"excitation_gain_rate": 0.4},
            "activation": {"reactivation_threshold": {"is_random": False}},
            "seed": 7,
        })
        assert cfg.learning.excitation_gain_rate == 0.4
        assert cfg.activation.reactivation_threshold.is_random is False
        assert cfg.activation.reactivation_threshold.mean == 0.2
        assert cfg.seed == 7

    def test_unknown_keys_ignored(self):
        cfg = load_selnet_config({"learning": {"no_such_rate": 1.0}, "extra": {}})
        assert not hasattr(cfg.learning, "no_such_rate")

    def test_json_file_then_dict(self, tmp_path):
        path = tmp_path / "selnet.json"
        path.write_text(json.dumps({
            "activation": {"decay_rate": 0.2, "temporal_summation": 0.3},
            "seed": 1,
        }))
        cfg = load_selnet_config({"activation": {"decay_rate": 0.25}}, config_path=str(path))
        assert cfg.activation.decay_rate == 0.25
        assert cfg.activation.temporal_summation == 0.3
        assert cfg.seed == 1

    def test_missing_file_uses_defaults(self, tmp_path):
        cfg = load_selnet_config(config_path=str(tmp_path / "absent.json"))
        assert cfg.activation.decay_rate == 0.1

    def test_unreadable_file_logs_and_keeps_defaults(self, tmp_path, caplog):
        path = tmp_path / "broken.json"
        path.write_text("{not json")
        with caplog.at_level("WARNING", logger="selnet.config"):
            cfg = load_selnet_config(config_path=str(path))
        assert cfg.activation.decay_rate == 0.1
        assert "Failed to load SelNet config" in caplog.text

    def test_overrides_do_not_leak_between_configs(self):
        load_selnet_config({"learning": {"excitation_gain_rate": 0.3}})
        assert load_selnet_config().learning.excitation_gain_rate == 0.5


class TestValidation:
    """Unusable rates raise ConfigurationError."""

    @pytest.mark.parametrize("overrides", [
        {"learning": {"excitation_gain_rate": 1.5}},
        {"learning": {"inhibition_loss_rate": -0.1}},
        {"activation": {"decay_rate": 2.0}},
        {"activation": {"logistic_standard_deviation": 0.0}},
        {"activation": {"reactivation_threshold": {"standard_deviation": -1.0}}},
    ])
    def test_invalid(self, overrides):
        with pytest.raises(ConfigurationError):
            load_selnet_config(overrides)

    def test_configuration_error_is_value_error(self):
        with pytest.raises(ValueError):
            SelNetConfig(learning=LearningSettings(weight_gain_threshold=3.0)).validate()

    def test_to_dict_round_trip(self):
        cfg = load_selnet_config({"seed": 5, "learning": {"excitation_loss_rate": 0.2}})
        again = load_selnet_config(cfg.to_dict())
        assert again == cfg
