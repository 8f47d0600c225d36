"""
SelNet Configuration — activation and learning settings for the network.

Provides dataclass sections for the two numeric rule sets of the engine plus
a top-level ``SelNetConfig`` that the ``Network`` reads at construction.
Configuration can be loaded from a dict of overrides, a JSON file, or left at
the published Burgos & García-Leal (2015) defaults.

Usage::

    from selnet_config import load_selnet_config

    # Defaults
    cfg = load_selnet_config()

    # With overrides
    cfg = load_selnet_config({"learning": {"excitation_gain_rate": 0.4}, "seed": 7})

    # From JSON file
    cfg = load_selnet_config(config_path="~/.selnet/config.json")
"""

from __future__ import annotations

import copy
import json
import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional

import numpy as np

from selnet_errors import ConfigurationError

logger = logging.getLogger("selnet.config")


# ── Section dataclasses ────────────────────────────────────────────────


@dataclass
class ReactivationThreshold:
    """Source of the reactivation threshold θ used by operant activation.

    When ``is_random`` is set, each draw is Gaussian around ``mean`` and
    truncated to ±3 standard deviations; otherwise θ is ``mean``.
    """

    mean: float = 0.2
    standard_deviation: float = 0.15
    is_random: bool = True

    @property
    def lowest_value(self) -> float:
        return self.mean - 3.0 * self.standard_deviation

    @property
    def highest_value(self) -> float:
        return self.mean + 3.0 * self.standard_deviation

    def draw(self, rng: np.random.Generator) -> float:
        if not self.is_random:
            return self.mean
        value = rng.normal(self.mean, self.standard_deviation)
        return float(np.clip(value, self.lowest_value, self.highest_value))


@dataclass
class ActivationSettings:
    """Activation rule parameters.

    Attributes:
        temporal_summation: τ, weight of the previous step's excitation
            during reactivation.
        decay_rate: κ, rate at which activation decays below threshold.
        logistic_mean: μ of the logistic squashing function.
        logistic_standard_deviation: σ of the logistic squashing function.
        reactivation_threshold: θ generator.
    """

    temporal_summation: float = 0.1
    decay_rate: float = 0.1
    logistic_mean: float = 0.5
    logistic_standard_deviation: float = 0.1
    reactivation_threshold: ReactivationThreshold = field(default_factory=ReactivationThreshold)


@dataclass
class LearningSettings:
    """Learning rule parameters.

    Attributes:
        excitation_gain_rate: α for excitatory connections.
        excitation_loss_rate: β for excitatory connections.
        inhibition_gain_rate: α for inhibitory connections.
        inhibition_loss_rate: β for inhibitory connections.
        weight_gain_threshold: Discrepancy at or above which weights grow;
            below it they shrink.
    """

    excitation_gain_rate: float = 0.5
    excitation_loss_rate: float = 0.1
    inhibition_gain_rate: float = 0.5
    inhibition_loss_rate: float = 0.1
    weight_gain_threshold: float = 0.05


# ── Top-level config ───────────────────────────────────────────────────


@dataclass
class SelNetConfig:
    """Top-level network configuration.

    ``seed`` feeds the network's random generator (reactivation thresholds);
    ``None`` draws fresh entropy.
    """

    activation: ActivationSettings = field(default_factory=ActivationSettings)
    learning: LearningSettings = field(default_factory=LearningSettings)
    seed: Optional[int] = None

    def validate(self) -> "SelNetConfig":
        """Raise ``ConfigurationError`` if any rate is unusable."""
        rates = {
            "activation.temporal_summation": self.activation.temporal_summation,
            "activation.decay_rate": self.activation.decay_rate,
            "learning.excitation_gain_rate": self.learning.excitation_gain_rate,
            "learning.excitation_loss_rate": self.learning.excitation_loss_rate,
            "learning.inhibition_gain_rate": self.learning.inhibition_gain_rate,
            "learning.inhibition_loss_rate": self.learning.inhibition_loss_rate,
            "learning.weight_gain_threshold": self.learning.weight_gain_threshold,
            "activation.reactivation_threshold.mean": self.activation.reactivation_threshold.mean,
        }
        for name, value in rates.items():
            if not 0.0 <= value <= 1.0:
                raise ConfigurationError(f"{name}={value!r} must lie in [0, 1]")
        if self.activation.logistic_standard_deviation <= 0.0:
            raise ConfigurationError("activation.logistic_standard_deviation must be positive")
        if self.activation.reactivation_threshold.standard_deviation <= 0.0:
            raise ConfigurationError(
                "activation.reactivation_threshold.standard_deviation must be positive"
            )
        return self

    def to_dict(self) -> Dict[str, Any]:
        return {
            "activation": {
                **{f.name: getattr(self.activation, f.name)
                   for f in fields(self.activation) if f.name != "reactivation_threshold"},
                "reactivation_threshold": {
                    f.name: getattr(self.activation.reactivation_threshold, f.name)
                    for f in fields(self.activation.reactivation_threshold)
                },
            },
            "learning": {f.name: getattr(self.learning, f.name) for f in fields(self.learning)},
            "seed": self.seed,
        }


# ── Factory ────────────────────────────────────────────────────────────


def _apply_overrides(obj: Any, overrides: Dict[str, Any]) -> None:
    """Apply a dict of overrides to a dataclass instance (in-place)."""
    for key, value in overrides.items():
        if not hasattr(obj, key):
            continue
        current = getattr(obj, key)
        if isinstance(value, dict) and hasattr(current, "__dataclass_fields__"):
            _apply_overrides(current, value)
        else:
            setattr(obj, key, value)


def _apply_sections(cfg: SelNetConfig, data: Dict[str, Any]) -> None:
    for section in ("activation", "learning"):
        if section in data:
            _apply_overrides(getattr(cfg, section), data[section])
    if "seed" in data:
        cfg.seed = data["seed"]


def load_selnet_config(
    overrides: Optional[Dict[str, Any]] = None,
    config_path: Optional[str] = None,
) -> SelNetConfig:
    """Create a ``SelNetConfig`` with defaults, optionally overridden.

    Override precedence (highest wins):
        1. ``overrides`` dict argument
        2. ``config_path`` JSON file
        3. Built-in defaults

    Args:
        overrides: Dict keyed by section name (``activation``, ``learning``)
            whose values are dicts of field→value pairs, plus an optional
            top-level ``seed``.
        config_path: Path to a JSON file with the same structure as
            ``overrides``.

    Returns:
        Validated ``SelNetConfig``.

    Raises:
        ConfigurationError: if the merged values are out of range.
    """
    cfg = SelNetConfig()

    # Layer 1: JSON file
    if config_path is not None:
        p = Path(config_path).expanduser()
        if p.exists():
            try:
                with open(p) as f:
                    file_data = json.load(f)
                _apply_sections(cfg, file_data)
            except (OSError, ValueError) as exc:
                logger.warning("Failed to load SelNet config from %s: %s", p, exc)

    # Layer 2: dict overrides (win over file)
    if overrides is not None:
        _apply_sections(cfg, copy.deepcopy(overrides))

    return cfg.validate()
