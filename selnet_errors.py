"""
SelNet errors — typed exception hierarchy for the selectionist engine.

Every failure the engine raises is a caller or construction defect, so the
classes below are raised at the point of call before any state is mutated.
Each class also derives from the closest builtin so callers that only know
``ValueError``/``KeyError``/``RuntimeError`` still catch them.

Exception Hierarchy::

    SelNetError
    ├── OutOfRangeError (ValueError)
    │   └── WeightOutOfRangeError
    │       └── SumOfWeightsOverflowError
    ├── InvalidIdentifierError (ValueError)
    ├── TopologyError
    │   ├── DuplicateIdentifierError (ValueError)
    │   ├── MissingIdentifierError (ValueError)
    │   ├── StructureLockedError (RuntimeError)
    │   └── WiringError (RuntimeError)
    ├── NodeNotFoundError (KeyError)
    ├── UpdateInProgressError (RuntimeError)
    └── ConfigurationError (ValueError)
"""

from __future__ import annotations


class SelNetError(Exception):
    """Base exception for all SelNet errors."""


# ---------------------------------------------------------------------------
# Range violations
# ---------------------------------------------------------------------------

class OutOfRangeError(SelNetError, ValueError):
    """A value meant to lie in [0, 1] was outside that interval."""


class WeightOutOfRangeError(OutOfRangeError):
    """A connection weight assignment was outside [0, 1]."""


class SumOfWeightsOverflowError(WeightOutOfRangeError):
    """A bulk weight assignment would push a neuron's summed weights past 1.0."""


class InvalidIdentifierError(SelNetError, ValueError):
    """Text that cannot be used as an identifier."""


# ---------------------------------------------------------------------------
# Topology violations
# ---------------------------------------------------------------------------

class TopologyError(SelNetError):
    """Base class for network construction errors."""


class DuplicateIdentifierError(TopologyError, ValueError):
    """A node with the same identifier is already registered."""


class MissingIdentifierError(TopologyError, ValueError):
    """Registration was attempted for a node without an identifier."""


class StructureLockedError(TopologyError, RuntimeError):
    """Topology mutation was attempted after the structure was locked."""


class WiringError(TopologyError, RuntimeError):
    """Invalid connection: rebinding a sensor/effector or wiring a neuron to itself."""


# ---------------------------------------------------------------------------
# Runtime misuse
# ---------------------------------------------------------------------------

class NodeNotFoundError(SelNetError, KeyError):
    """No node is registered under the requested identifier."""


class UpdateInProgressError(SelNetError, RuntimeError):
    """``update()`` or ``inter_trial_interval()`` was called re-entrantly."""


class ConfigurationError(SelNetError, ValueError):
    """Invalid activation or learning settings."""
