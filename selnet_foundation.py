"""
SelNet Foundation - Core Selectionist Neuron Engine

Implements the neuron-level half of the selectionist network model of
Burgos & García-Leal (2015): weighted presynaptic connections, the
two-phase (prepare / commit) activation cycle, the discrepancy-driven
learning rule, the dopaminergic and hippocampal discrepancy producers, and
the sensors / effectors that connect a network to its environment.

Design principles:
    - Two-phase activation: prepare computes a pending level that no other
      neuron can see until commit publishes it
    - Composition over inheritance: every concrete neuron is a thin wrapper
      around a shared ``OperantNeuronBody``
    - Capability classes (Axon, Neuron, OperantNeuron, RespondentNeuron)
      describe what a neuron can do; abstract members raise NotImplementedError
    - Fail fast: weights and levels are validated before any mutation
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
from enum import Enum, auto
from typing import (
    TYPE_CHECKING,
    Iterator,
    List,
    Optional,
    Sequence,
    Union,
)

import numpy as np

from selnet_config import ActivationSettings, LearningSettings
from selnet_errors import (
    SumOfWeightsOverflowError,
    WeightOutOfRangeError,
    WiringError,
)
from selnet_primitives import (
    Identifier,
    SegmentedIdentifier,
    UnitScalar,
    check_unit,
    logistic,
)

if TYPE_CHECKING:
    from selnet_network import Network

IdentifierLike = Union[None, str, Identifier]

# Rounding slack for weight lists produced by learning.
WEIGHT_SUM_TOLERANCE = 1e-9


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class ConnectionKind(Enum):
    """Sign of a presynaptic connection."""
    EXCITATORY = auto()
    INHIBITORY = auto()


class ConnectionClass(Enum):
    """Whether a connection is learned (operant) or fixed (respondent)."""
    OPERANT = auto()
    RESPONDENT = auto()


# ---------------------------------------------------------------------------
# Node base
# ---------------------------------------------------------------------------

@dataclass
class NodeInfo:
    """Display metadata attached to a named node.

    Attributes:
        identifier: Node the info describes.
        name: Short label.
        title: One-line description.
        explanation: Longer free text.
    """

    identifier: Identifier
    name: str = ""
    title: str = ""
    explanation: str = ""


class Node:
    """Any addressable element of a network.

    A node knows its optional identifier, its structural parent
    (``environment``) and, through the parent chain, its ``Network``.
    Activation and learning settings are inherited from the environment
    unless overridden on the node itself.
    """

    def __init__(self, identifier: IdentifierLike = None, environment: Optional["Node"] = None):
        self._identifier: Optional[Identifier] = Identifier.coerce(identifier)
        self._environment = environment
        self._activation_settings: Optional[ActivationSettings] = None
        self._learning_settings: Optional[LearningSettings] = None

    @property
    def identifier(self) -> Optional[Identifier]:
        return self._identifier

    @property
    def has_identifier(self) -> bool:
        return self._identifier is not None

    @property
    def environment(self) -> Optional["Node"]:
        return self._environment

    @property
    def is_attached(self) -> bool:
        return self._environment is not None

    def attach(self, environment: "Node") -> None:
        """Place a standalone node (sensor, effector) into a container."""
        if self._environment is not None:
            raise WiringError(f"{self!r} already belongs to {self._environment!r}")
        self._environment = environment

    @property
    def network(self) -> "Network":
        if self._environment is None:
            raise WiringError(f"{self!r} is not attached to a network")
        return self._environment.network

    @property
    def qualified_identifier(self) -> Optional[SegmentedIdentifier]:
        """Dotted path of the identified ancestors down to this node."""
        parts: List[Identifier] = []
        node: Optional[Node] = self
        while node is not None:
            if node.identifier is not None:
                parts.append(node.identifier)
            node = node.environment
        if not parts:
            return None
        return SegmentedIdentifier(reversed(parts))

    # --- Settings (own override, else inherited) ---

    @property
    def activation_settings(self) -> ActivationSettings:
        if self._activation_settings is not None:
            return self._activation_settings
        if self._environment is None:
            return _DEFAULT_ACTIVATION_SETTINGS
        return self._environment.activation_settings

    @activation_settings.setter
    def activation_settings(self, value: Optional[ActivationSettings]) -> None:
        self._activation_settings = copy.deepcopy(value)

    @property
    def learning_settings(self) -> LearningSettings:
        if self._learning_settings is not None:
            return self._learning_settings
        if self._environment is None:
            return _DEFAULT_LEARNING_SETTINGS
        return self._environment.learning_settings

    @learning_settings.setter
    def learning_settings(self, value: Optional[LearningSettings]) -> None:
        self._learning_settings = copy.deepcopy(value)

    def __repr__(self) -> str:
        name = str(self._identifier) if self._identifier is not None else "?"
        return f"{type(self).__name__}({name})"


_DEFAULT_ACTIVATION_SETTINGS = ActivationSettings()
_DEFAULT_LEARNING_SETTINGS = LearningSettings()


# ---------------------------------------------------------------------------
# Connections
# ---------------------------------------------------------------------------

class Connection:
    """One presynaptic link stored on the postsynaptic neuron.

    Attributes:
        axon: Presynaptic source (non-owning reference).
        kind: EXCITATORY or INHIBITORY.
        connection_class: OPERANT (learned weight) or RESPONDENT (fixed 1.0).
        weight: Connection strength in [0, 1].
    """

    __slots__ = ("axon", "kind", "connection_class", "_weight")

    def __init__(
        self,
        axon: "Axon",
        kind: ConnectionKind,
        connection_class: ConnectionClass = ConnectionClass.OPERANT,
        weight: float = 0.0,
    ):
        self.axon = axon
        self.kind = kind
        self.connection_class = connection_class
        if connection_class is ConnectionClass.RESPONDENT:
            weight = 1.0
        self._weight = check_unit(weight, WeightOutOfRangeError, "weight")

    @property
    def weight(self) -> float:
        return self._weight

    @weight.setter
    def weight(self, value: float) -> None:
        if self.connection_class is ConnectionClass.RESPONDENT:
            raise WiringError("respondent connections have a fixed weight of 1.0")
        self._weight = check_unit(value, WeightOutOfRangeError, "weight")

    @property
    def presynaptic_identifier(self) -> Optional[Identifier]:
        return self.axon.neuron.identifier

    def __repr__(self) -> str:
        return (
            f"Connection({self.axon!r}, {self.kind.name}, "
            f"{self.connection_class.name}, weight={self._weight:.4f})"
        )


class _ConnectionList:
    """Ordered connections of one kind with identifier queries."""

    connection_class = ConnectionClass.OPERANT

    def __init__(self, kind: ConnectionKind):
        self.kind = kind
        self._connections: List[Connection] = []

    def append(self, axon: "Axon") -> Connection:
        conn = Connection(axon, self.kind, self.connection_class)
        self._connections.append(conn)
        return conn

    def __len__(self) -> int:
        return len(self._connections)

    def __iter__(self) -> Iterator[Connection]:
        return iter(self._connections)

    def __bool__(self) -> bool:
        return bool(self._connections)

    @property
    def axons(self) -> List["Axon"]:
        return [c.axon for c in self._connections]

    @property
    def presynaptic_activation_levels(self) -> List[float]:
        return [float(c.axon.activation_level) for c in self._connections]

    def find(self, identifier: IdentifierLike) -> Optional["Axon"]:
        if identifier is None:
            return None
        for conn in self._connections:
            if conn.presynaptic_identifier == identifier:
                return conn.axon.neuron
        return None

    def contains(self, identifier: IdentifierLike) -> bool:
        return self.find(identifier) is not None


class WeightedConnections(_ConnectionList):
    """Operant connections of one kind; weights are learned.

    New connections start at weight 0.0 and must be given a working weight
    with ``set_weights`` before they can learn.
    """

    @property
    def weights(self) -> List[float]:
        return [c.weight for c in self._connections]

    @property
    def sum_of_weights(self) -> float:
        return float(sum(self.weights))

    @property
    def excitation(self) -> float:
        """Weighted presynaptic input Σ aᵢ·wᵢ."""
        if not self._connections:
            return 0.0
        levels = np.asarray(self.presynaptic_activation_levels, dtype=float)
        weights = np.asarray(self.weights, dtype=float)
        return float(np.dot(levels, weights))

    def check_weights(self, value: float) -> float:
        """Validate a bulk weight without mutating anything."""
        weight = check_unit(value, WeightOutOfRangeError, "weight")
        if weight * len(self._connections) > 1.0:
            raise SumOfWeightsOverflowError(
                f"weight {weight} x {len(self._connections)} connections exceeds 1.0"
            )
        return weight

    def set_weights(self, value: float) -> None:
        """Set every connection to ``value``; all-or-nothing."""
        weight = self.check_weights(value)
        for conn in self._connections:
            conn._weight = weight

    def check_weight_list(self, weights: Sequence[float]) -> List[float]:
        """Validate one weight per connection without mutating anything."""
        if len(weights) != len(self._connections):
            raise WiringError(
                f"expected {len(self._connections)} weights, got {len(weights)}"
            )
        checked = [check_unit(w, WeightOutOfRangeError, "weight") for w in weights]
        total = sum(checked)
        if total > 1.0 + WEIGHT_SUM_TOLERANCE:
            raise SumOfWeightsOverflowError(f"weights sum to {total}, more than 1.0")
        return checked

    def load_weights(self, weights: Sequence[float]) -> None:
        """Assign one weight per connection, in connection order."""
        checked = self.check_weight_list(weights)
        for conn, w in zip(self._connections, checked):
            conn._weight = w

    def learn(
        self,
        neuron_activation: float,
        discrepancy: float,
        gain_rate: float,
        loss_rate: float,
        gain_threshold: float,
    ) -> None:
        """Adjust weights from the neuron's activation and a discrepancy signal.

        Strengthen (discrepancy d ≥ gain_threshold):
            r = 1 − Σw
            pᵢ = aᵢ·wᵢ / Σ(a·w)
            Δwᵢ = α × aⱼ × d × r × pᵢ

        Weaken (d < gain_threshold):
            Δwᵢ = −β × aⱼ × wᵢ × aᵢ

        Weights are clamped to [0, 1] afterwards.
        """
        if not self._connections:
            return

        levels = np.asarray(self.presynaptic_activation_levels, dtype=float)
        weights = np.asarray(self.weights, dtype=float)

        if discrepancy >= gain_threshold:
            contributions = levels * weights
            total = contributions.sum()
            remaining = 1.0 - weights.sum()
            common = gain_rate * neuron_activation * discrepancy * remaining
            if total > 0.0:
                proportions = contributions / total
            else:
                proportions = np.zeros_like(weights)
            weights = weights + common * proportions
        else:
            weights = weights - loss_rate * neuron_activation * weights * levels

        weights = np.clip(weights, 0.0, 1.0)
        for conn, w in zip(self._connections, weights):
            conn._weight = float(w)

    def unlearn(self) -> None:
        for conn in self._connections:
            conn._weight = 0.0


class UnweightedConnections(_ConnectionList):
    """Respondent connections; fixed weight 1.0, never learned."""

    connection_class = ConnectionClass.RESPONDENT

    @property
    def max_activation(self) -> float:
        levels = self.presynaptic_activation_levels
        return max(levels) if levels else 0.0


# ---------------------------------------------------------------------------
# Neuron bodies
# ---------------------------------------------------------------------------

class OperantNeuronBody:
    """Numeric state machine shared by every learning neuron.

    Activation (Burgos & García-Leal 2015):
        exc = L(Σ excitatory aᵢ·wᵢ), inh = L(Σ inhibitory aᵢ·wᵢ)

        if there is no inhibition or exc > inh:
            reactivation, exc ≥ θ:
                a(t) = exc + τ·exc(t−1)·(1 − exc) − inh
            decay, exc < θ:
                a(t) = a(t−1) − κ·a(t−1)·(1 − a(t−1))
        otherwise a(t) = a(t−1)
    """

    def __init__(self):
        self.excitatory = WeightedConnections(ConnectionKind.EXCITATORY)
        self.inhibitory = WeightedConnections(ConnectionKind.INHIBITORY)
        self.activation: float = 0.0
        self.previous_excitation: float = 0.0

    @staticmethod
    def squash(x: float, settings: ActivationSettings) -> float:
        return logistic(x, settings.logistic_mean, settings.logistic_standard_deviation)

    def activate(self, settings: ActivationSettings, rng: np.random.Generator) -> float:
        current_excitation = 0.0
        current_inhibition = 0.0
        if self.excitatory:
            current_excitation = self.squash(self.excitatory.excitation, settings)
        has_inhibition = bool(self.inhibitory)
        if has_inhibition:
            current_inhibition = self.squash(self.inhibitory.excitation, settings)

        previous_excitation = self.previous_excitation
        self.previous_excitation = current_excitation

        if not has_inhibition or current_excitation > current_inhibition:
            threshold = settings.reactivation_threshold.draw(rng)
            if current_excitation >= threshold:
                carried = settings.temporal_summation * previous_excitation * (1.0 - current_excitation)
                self.activation = current_excitation + carried - current_inhibition
            else:
                a = self.activation
                self.activation = a - settings.decay_rate * a * (1.0 - a)

        self.activation = float(UnitScalar.clamp(self.activation))
        return self.activation

    def reset_activation(self, settings: ActivationSettings) -> float:
        resting = self.squash(0.0, settings)
        self.previous_excitation = resting
        self.activation = resting
        return self.activation

    def respondent_override(self, raw_excitation: float, settings: ActivationSettings) -> float:
        level = self.squash(raw_excitation, settings)
        self.previous_excitation = level
        self.activation = level
        return self.activation

    def learn(self, discrepancy: float, settings: LearningSettings) -> None:
        self.excitatory.learn(
            self.activation,
            discrepancy,
            settings.excitation_gain_rate,
            settings.excitation_loss_rate,
            settings.weight_gain_threshold,
        )
        self.inhibitory.learn(
            self.activation,
            discrepancy,
            settings.inhibition_gain_rate,
            settings.inhibition_loss_rate,
            settings.weight_gain_threshold,
        )

    def unlearn(self) -> None:
        self.excitatory.unlearn()
        self.inhibitory.unlearn()


class RespondentNeuronBody(OperantNeuronBody):
    """Operant body plus fixed-weight respondent (unconditioned) inputs.

    Respondent activation is max(excitatory levels) − max(inhibitory
    levels).  While it is positive the neuron publishes it unchanged and the
    body carries L(r) into the next operant step.
    """

    def __init__(self):
        super().__init__()
        self.respondent_excitatory = UnweightedConnections(ConnectionKind.EXCITATORY)
        self.respondent_inhibitory = UnweightedConnections(ConnectionKind.INHIBITORY)

    @property
    def respondent_activation(self) -> float:
        net = self.respondent_excitatory.max_activation - self.respondent_inhibitory.max_activation
        return max(net, 0.0)

    def activate(self, settings: ActivationSettings, rng: np.random.Generator) -> float:
        respondent = self.respondent_activation
        if respondent > 0.0:
            self.respondent_override(respondent, settings)
            return respondent
        return super().activate(settings, rng)


# ---------------------------------------------------------------------------
# Capability classes
# ---------------------------------------------------------------------------

class Axon(Node):
    """Anything that publishes an activation level for others to read."""

    def __init__(self, identifier: IdentifierLike = None, environment: Optional[Node] = None):
        super().__init__(identifier, environment)
        self._activation_level: float = 0.0
        self._pending_level: float = 0.0
        self._previous_level: float = 0.0

    @property
    def activation_level(self) -> float:
        """Published level; the only value other nodes may read."""
        return self._activation_level

    @property
    def pending_activation_level(self) -> float:
        return self._pending_level

    @property
    def previous_activation_level(self) -> float:
        return self._previous_level

    @property
    def neuron(self) -> "Axon":
        return self

    def prepare_activation(self) -> None:
        raise NotImplementedError

    def commit_activation(self) -> None:
        self._previous_level = self._activation_level
        self._activation_level = self._pending_level

    def reset_activation(self) -> None:
        raise NotImplementedError

    def load_levels(
        self,
        published: float,
        pending: Optional[float] = None,
        previous: Optional[float] = None,
    ) -> None:
        """Overwrite levels from saved state; all values are validated first."""
        published = check_unit(published, what="published level")
        pending = published if pending is None else check_unit(pending, what="pending level")
        previous = published if previous is None else check_unit(previous, what="previous level")
        self._activation_level = published
        self._pending_level = pending
        self._previous_level = previous


class Neuron(Axon):
    """An axon with presynaptic connections that can be queried by identifier."""

    def iter_presynaptic(self, kind: Optional[ConnectionKind] = None) -> Iterator["Axon"]:
        raise NotImplementedError

    def find_presynaptic_connection(self, identifier: IdentifierLike) -> Optional["Axon"]:
        return self._find(identifier, None)

    def find_excitatory_presynaptic_connection(self, identifier: IdentifierLike) -> Optional["Axon"]:
        return self._find(identifier, ConnectionKind.EXCITATORY)

    def find_inhibitory_presynaptic_connection(self, identifier: IdentifierLike) -> Optional["Axon"]:
        return self._find(identifier, ConnectionKind.INHIBITORY)

    def contains_presynaptic_connection(self, identifier: IdentifierLike) -> bool:
        return self.find_presynaptic_connection(identifier) is not None

    def contains_excitatory_presynaptic_connection(self, identifier: IdentifierLike) -> bool:
        return self.find_excitatory_presynaptic_connection(identifier) is not None

    def contains_inhibitory_presynaptic_connection(self, identifier: IdentifierLike) -> bool:
        return self.find_inhibitory_presynaptic_connection(identifier) is not None

    def is_back_connection_to(self, neuron: "Axon") -> bool:
        """True when ``neuron`` is one of this neuron's presynaptic sources."""
        if neuron.identifier is None:
            return False
        return self.contains_presynaptic_connection(neuron.identifier)

    def is_forward_connection_to(self, neuron: "Neuron") -> bool:
        return neuron.is_back_connection_to(self)

    def _find(self, identifier: IdentifierLike, kind: Optional[ConnectionKind]) -> Optional["Axon"]:
        if identifier is None:
            return None
        for axon in self.iter_presynaptic(kind):
            source = axon.neuron
            if source.identifier is not None and source.identifier == identifier:
                return source
        return None


class OperantNeuron(Neuron):
    """A neuron that runs the two-phase activation cycle and learns.

    Subclasses pick the broadcast signal their weights learn from by
    overriding ``learning_signal``.
    """

    body_class = OperantNeuronBody

    def __init__(self, identifier: IdentifierLike = None, environment: Optional[Node] = None):
        super().__init__(identifier, environment)
        self._body = self.body_class()

    @property
    def body(self) -> OperantNeuronBody:
        return self._body

    @property
    def learning_signal(self) -> float:
        raise NotImplementedError

    # --- Wiring ---

    def receive_excitation(self, axon: Axon) -> Connection:
        self._check_source(axon)
        return self._body.excitatory.append(axon)

    def receive_inhibition(self, axon: Axon) -> Connection:
        self._check_source(axon)
        return self._body.inhibitory.append(axon)

    def send_excitation(self, postsynaptic: "OperantNeuron") -> Connection:
        return postsynaptic.receive_excitation(self)

    def send_inhibition(self, postsynaptic: "OperantNeuron") -> Connection:
        return postsynaptic.receive_inhibition(self)

    def _check_source(self, axon: Axon) -> None:
        if axon.neuron is self:
            raise WiringError(f"{self!r} cannot connect to itself")

    def iter_presynaptic(self, kind: Optional[ConnectionKind] = None) -> Iterator[Axon]:
        if kind in (None, ConnectionKind.EXCITATORY):
            yield from self._body.excitatory.axons
        if kind in (None, ConnectionKind.INHIBITORY):
            yield from self._body.inhibitory.axons

    # --- Activation cycle ---

    def prepare_activation(self) -> None:
        self._pending_level = self._body.activate(self.activation_settings, self.network.rng)

    def reset_activation(self) -> None:
        self._pending_level = self._body.reset_activation(self.activation_settings)

    # --- Learning ---

    def learn(self) -> None:
        self._body.learn(self.learning_signal, self.learning_settings)

    def unlearn(self) -> None:
        self._body.unlearn()

    def check_excitatory_weights(self, value: float) -> float:
        return self._body.excitatory.check_weights(value)

    def check_inhibitory_weights(self, value: float) -> float:
        return self._body.inhibitory.check_weights(value)

    def set_excitatory_weights(self, value: float) -> None:
        self._body.excitatory.set_weights(value)

    def set_inhibitory_weights(self, value: float) -> None:
        self._body.inhibitory.set_weights(value)

    def set_connection_weights(self, value: float) -> None:
        self.check_excitatory_weights(value)
        self.check_inhibitory_weights(value)
        self.set_excitatory_weights(value)
        self.set_inhibitory_weights(value)

    # --- Read API ---

    @property
    def excitatory_weights(self) -> List[float]:
        return self._body.excitatory.weights

    @property
    def inhibitory_weights(self) -> List[float]:
        return self._body.inhibitory.weights

    @property
    def presynaptic_excitatory_levels(self) -> List[float]:
        return self._body.excitatory.presynaptic_activation_levels

    @property
    def presynaptic_inhibitory_levels(self) -> List[float]:
        return self._body.inhibitory.presynaptic_activation_levels

    @property
    def previous_excitation(self) -> float:
        return self._body.previous_excitation

    @property
    def connection_count(self) -> int:
        return len(self._body.excitatory) + len(self._body.inhibitory)


class RespondentNeuron(OperantNeuron):
    """Operant neuron that also accepts fixed-weight respondent input."""

    body_class = RespondentNeuronBody

    def receive_respondent_excitation(self, axon: Axon) -> Connection:
        self._check_source(axon)
        return self._body.respondent_excitatory.append(axon)

    def receive_respondent_inhibition(self, axon: Axon) -> Connection:
        self._check_source(axon)
        return self._body.respondent_inhibitory.append(axon)

    def iter_presynaptic(self, kind: Optional[ConnectionKind] = None) -> Iterator[Axon]:
        yield from super().iter_presynaptic(kind)
        if kind in (None, ConnectionKind.EXCITATORY):
            yield from self._body.respondent_excitatory.axons
        if kind in (None, ConnectionKind.INHIBITORY):
            yield from self._body.respondent_inhibitory.axons

    @property
    def respondent_activation(self) -> float:
        return self._body.respondent_activation


# ---------------------------------------------------------------------------
# Concrete neuron kinds
# ---------------------------------------------------------------------------

class SensoryInterneuron(OperantNeuron):
    """Sensory association neuron; learns from the hippocampal signal."""

    @property
    def learning_signal(self) -> float:
        return self.network.hippocampal_signal


class MotorInterneuron(OperantNeuron):
    """Motor association neuron; learns from the dopaminergic signal."""

    @property
    def learning_signal(self) -> float:
        return self.network.dopaminergic_signal


class MotorOutputNeuron(OperantNeuron):
    """Motor output neuron; learns from the dopaminergic signal."""

    @property
    def learning_signal(self) -> float:
        return self.network.dopaminergic_signal


# ---------------------------------------------------------------------------
# Discrepancy producers
# ---------------------------------------------------------------------------

class DopaminergicUnit(RespondentNeuron):
    """VTA unit whose activation change is the reward-prediction error.

    discrepancy = a(t) − a(t−1), computed on every prepare.
    """

    def __init__(self, identifier: IdentifierLike = None, environment: Optional[Node] = None):
        super().__init__(identifier, environment)
        self._discrepancy_signal = 0.0

    @property
    def discrepancy_signal(self) -> float:
        return self._discrepancy_signal

    @property
    def learning_signal(self) -> float:
        return self.network.dopaminergic_signal

    def prepare_activation(self) -> None:
        super().prepare_activation()
        self._discrepancy_signal = self._pending_level - self._activation_level

    def reset_activation(self) -> None:
        super().reset_activation()
        self._discrepancy_signal = 0.0

    def load_discrepancy(self, value: float) -> None:
        self._discrepancy_signal = float(value)


class HippocampalUnit(OperantNeuron):
    """Hippocampal unit producing the sensory discrepancy signal.

    discrepancy = |a(t) − a(t−1)| + dopaminergic × (1 − previous discrepancy)
    """

    def __init__(self, identifier: IdentifierLike = None, environment: Optional[Node] = None):
        super().__init__(identifier, environment)
        self._discrepancy_signal = 0.0

    @property
    def discrepancy_signal(self) -> float:
        return self._discrepancy_signal

    @property
    def learning_signal(self) -> float:
        return self.network.hippocampal_signal

    def prepare_activation(self) -> None:
        super().prepare_activation()
        delta = abs(self._pending_level - self._activation_level)
        dopaminergic = self.network.dopaminergic_signal
        self._discrepancy_signal = delta + dopaminergic * (1.0 - self._discrepancy_signal)

    def reset_activation(self) -> None:
        super().reset_activation()
        self._discrepancy_signal = 0.0

    def load_discrepancy(self, value: float) -> None:
        self._discrepancy_signal = float(value)


# ---------------------------------------------------------------------------
# Sensors and sensory input neurons
# ---------------------------------------------------------------------------

class Sensor(Axon):
    """Source of external input; feeds exactly one sensory input neuron."""

    def __init__(self, identifier: IdentifierLike = None):
        super().__init__(identifier)
        self._input_level: float = 0.0
        self._target: Optional["SensoryInputNeuron"] = None

    @property
    def input_level(self) -> float:
        return self._input_level

    @input_level.setter
    def input_level(self, value: float) -> None:
        self._input_level = check_unit(value, what="sensor input")

    @property
    def target(self) -> Optional["SensoryInputNeuron"]:
        return self._target

    def send_to(self, input_neuron: "SensoryInputNeuron") -> None:
        if self._target is not None:
            raise WiringError(f"{self!r} already sends to {self._target!r}")
        input_neuron.bind_sensor(self)
        self._target = input_neuron

    def prepare_activation(self) -> None:
        self._pending_level = self._input_level

    def reset_activation(self) -> None:
        self._input_level = 0.0
        self._pending_level = 0.0


class SimpleBinarySensor(Sensor):
    """On/off sensor: on reads 1.0, off reads 0.0."""

    ON_THRESHOLD = 0.5

    @property
    def is_on(self) -> bool:
        return self._input_level >= self.ON_THRESHOLD

    @is_on.setter
    def is_on(self, value: bool) -> None:
        self._input_level = 1.0 if value else 0.0


class SensoryInputNeuron(Neuron):
    """Relays one sensor's published level into the network.

    prepare latches the sensor level, commit publishes it; reset clears the
    latch to 0.0.
    """

    def __init__(self, identifier: IdentifierLike = None, environment: Optional[Node] = None):
        super().__init__(identifier, environment)
        self._sensor: Optional[Sensor] = None

    @property
    def sensor(self) -> Optional[Sensor]:
        return self._sensor

    def bind_sensor(self, sensor: Sensor) -> None:
        if self._sensor is not None:
            raise WiringError(f"{self!r} is already fed by {self._sensor!r}")
        self._sensor = sensor

    def iter_presynaptic(self, kind: Optional[ConnectionKind] = None) -> Iterator[Axon]:
        if self._sensor is not None and kind in (None, ConnectionKind.EXCITATORY):
            yield self._sensor

    def prepare_activation(self) -> None:
        self._pending_level = self._sensor.activation_level if self._sensor is not None else 0.0

    def reset_activation(self) -> None:
        self._pending_level = 0.0

    def send_excitation(self, postsynaptic: OperantNeuron) -> Connection:
        return postsynaptic.receive_excitation(self)

    def send_inhibition(self, postsynaptic: OperantNeuron) -> Connection:
        return postsynaptic.receive_inhibition(self)


class RespondentSensoryInputNeuron(SensoryInputNeuron):
    """Sensory input that can drive respondent (unconditioned) pathways."""

    def send_respondent_excitation(self, postsynaptic: RespondentNeuron) -> Connection:
        return postsynaptic.receive_respondent_excitation(self)

    def send_respondent_inhibition(self, postsynaptic: RespondentNeuron) -> Connection:
        return postsynaptic.receive_respondent_inhibition(self)


# ---------------------------------------------------------------------------
# Effectors
# ---------------------------------------------------------------------------

class Effector(Axon):
    """Reads one motor output and exposes it to the outside world."""

    def __init__(self, identifier: IdentifierLike = None):
        super().__init__(identifier)
        self._source: Optional[Axon] = None

    @property
    def source(self) -> Optional[Axon]:
        return self._source

    def receive_from(self, axon: Axon) -> None:
        if self._source is not None:
            raise WiringError(f"{self!r} already receives from {self._source!r}")
        self._source = axon

    def prepare_activation(self) -> None:
        self._pending_level = self._source.activation_level if self._source is not None else 0.0

    def reset_activation(self) -> None:
        self._pending_level = 0.0


class SimpleBinaryEffector(Effector):
    """Responds (is on) when its source is at or above 0.5."""

    ON_THRESHOLD = 0.5

    @property
    def is_on(self) -> bool:
        return self._activation_level >= self.ON_THRESHOLD
