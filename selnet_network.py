"""
SelNet Network - registry, structure lock, broadcast signals and the
timestep driver.

A ``Network`` owns six pathway regions (sensors → sensory input → sensory
association → motor association → motor output → effectors) and two
feedback areas (hippocampus, ventral tegmental area).  One call to
``update()`` advances the whole network by one timestep:

    1. sensors and sensory inputs latch and publish their levels
    2. the VTA and hippocampus update, and their mean discrepancies are
       latched as the network-wide dopaminergic / hippocampal signals
    3. the updater strategy runs the operant neurons
    4. if learning is enabled, every learning neuron adjusts its weights
    5. effectors read the motor outputs

Usage::

    from selnet_network import Network, RandomizedContinuousPropagationUpdater

    net = Network("Demo")
    s = net.create_sensory_interneuron("S")
    ...
    net.updater = RandomizedContinuousPropagationUpdater(seed=1)
    net.is_learning_enabled = True
    result = net.update()
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Union

import numpy as np

from selnet_config import SelNetConfig
from selnet_containers import (
    EffectorRegion,
    Hippocampus,
    MotorAssociationRegion,
    MotorOutputRegion,
    NeuralContainer,
    SensorRegion,
    SensoryAssociationRegion,
    SensoryInputRegion,
    VentralTegmentalArea,
)
from selnet_errors import (
    DuplicateIdentifierError,
    MissingIdentifierError,
    NodeNotFoundError,
    StructureLockedError,
    UpdateInProgressError,
)
from selnet_foundation import (
    Axon,
    Connection,
    DopaminergicUnit,
    Effector,
    HippocampalUnit,
    IdentifierLike,
    MotorInterneuron,
    MotorOutputNeuron,
    Neuron,
    Node,
    NodeInfo,
    OperantNeuron,
    RespondentNeuron,
    RespondentSensoryInputNeuron,
    Sensor,
    SensoryInputNeuron,
    SensoryInterneuron,
)
from selnet_primitives import Identifier

logger = logging.getLogger("selnet.network")

NodeRef = Union[str, Identifier, Axon]


# ---------------------------------------------------------------------------
# Step Result
# ---------------------------------------------------------------------------

@dataclass
class StepResult:
    """Result returned from Network.update().

    Attributes:
        timestep: Timestep count after this update.
        dopaminergic_signal: Latched dopaminergic signal used for learning.
        hippocampal_signal: Latched hippocampal signal used for learning.
        learned: Whether weights were updated this step.
        responding_effectors: Identifiers of effectors at or above 0.5.
    """

    timestep: int = 0
    dopaminergic_signal: float = 0.0
    hippocampal_signal: float = 0.0
    learned: bool = False
    responding_effectors: List[str] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Telemetry
# ---------------------------------------------------------------------------

@dataclass
class Telemetry:
    """Network statistics snapshot.

    Attributes:
        timestep: Number of completed updates.
        total_nodes: Registered (named) nodes.
        total_connections: Operant connections across all learning neurons.
        mean_weight: Mean operant connection weight.
        std_weight: Standard deviation of operant connection weights.
        mean_activation: Mean published level of the learning neurons.
        dopaminergic_signal: Currently latched dopaminergic signal.
        hippocampal_signal: Currently latched hippocampal signal.
    """

    timestep: int = 0
    total_nodes: int = 0
    total_connections: int = 0
    mean_weight: float = 0.0
    std_weight: float = 0.0
    mean_activation: float = 0.0
    dopaminergic_signal: float = 0.0
    hippocampal_signal: float = 0.0


# ---------------------------------------------------------------------------
# Update strategies
# ---------------------------------------------------------------------------

class NetworkUpdater:
    """Base class for operant-phase update orderings."""

    def update(self, network: "Network") -> None:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class NaturalUpdater(NetworkUpdater):
    """Prepare every operant neuron, then commit every one.

    Every neuron sees only the previous timestep's published levels, so
    the result does not depend on iteration order.
    """

    def update(self, network: "Network") -> None:
        neurons = network.get_operant_neurons()
        for neuron in neurons:
            neuron.prepare_activation()
        for neuron in neurons:
            neuron.commit_activation()


class RandomizedContinuousPropagationUpdater(NetworkUpdater):
    """Visit operant neurons in a fresh random order each timestep.

    Each neuron is prepared and immediately committed, so later neurons in
    the order see levels published earlier in the same timestep.
    """

    def __init__(self, seed: Optional[int] = None):
        self.rng = np.random.default_rng(seed)
        self._network: Optional["Network"] = None
        self._neurons: List[OperantNeuron] = []

    def update(self, network: "Network") -> None:
        if self._network is not network:
            self._network = network
            self._neurons = network.get_operant_neurons()
        order = self.rng.permutation(len(self._neurons))
        for i in order:
            neuron = self._neurons[i]
            neuron.prepare_activation()
            neuron.commit_activation()


# ---------------------------------------------------------------------------
# Network
# ---------------------------------------------------------------------------

class Network(Node):
    """Root of a selectionist neural network.

    Args:
        identifier: Optional name; used as the first segment of every
            qualified identifier.
        config: Activation/learning settings and RNG seed.  Defaults to
            ``SelNetConfig()``.
    """

    def __init__(self, identifier: IdentifierLike = None, config: Optional[SelNetConfig] = None):
        super().__init__(identifier, None)
        self.config = config if config is not None else SelNetConfig()
        self._activation_settings = self.config.activation
        self._learning_settings = self.config.learning
        self.rng = np.random.default_rng(self.config.seed)

        self._registry: Dict[Identifier, Axon] = {}
        self._node_info: Dict[Identifier, NodeInfo] = {}
        self._structure_locked = False
        self._is_updating = False
        self._updater: NetworkUpdater = NaturalUpdater()
        self._event_handlers: Dict[str, List[Callable]] = {}

        self._dopaminergic_signal = 0.0
        self._hippocampal_signal = 0.0
        self._dopaminergic_signal_forced = False
        self._hippocampal_signal_forced = False

        self.is_learning_enabled = False
        self.timestep = 0

        self.sensor_region = SensorRegion("SensorRegion", self)
        self.sensory_input_region = SensoryInputRegion("SensoryInputRegion", self)
        self.sensory_association_region = SensoryAssociationRegion("SensoryAssociationRegion", self)
        self.motor_association_region = MotorAssociationRegion("MotorAssociationRegion", self)
        self.motor_output_region = MotorOutputRegion("MotorOutputRegion", self)
        self.effector_region = EffectorRegion("EffectorRegion", self)
        self.hippocampus = Hippocampus("Hippocampus", self)
        self.ventral_tegmental_area = VentralTegmentalArea("VentralTegmentalArea", self)

    @property
    def network(self) -> "Network":
        return self

    @property
    def regions(self) -> List[NeuralContainer]:
        """Pathway regions in signal-flow order."""
        return [
            self.sensor_region,
            self.sensory_input_region,
            self.sensory_association_region,
            self.motor_association_region,
            self.motor_output_region,
            self.effector_region,
        ]

    @property
    def feedback_areas(self) -> List[NeuralContainer]:
        return [self.hippocampus, self.ventral_tegmental_area]

    # -----------------------------------------------------------------------
    # Registry
    # -----------------------------------------------------------------------

    def register_node(self, node: Axon) -> None:
        """Add a named node to the identifier registry.

        Raises:
            MissingIdentifierError: the node has no identifier.
            DuplicateIdentifierError: the identifier is already registered.
            StructureLockedError: the structure is locked.
        """
        if node.identifier is None:
            raise MissingIdentifierError(f"cannot register unnamed {type(node).__name__}")
        if node.identifier in self._registry:
            raise DuplicateIdentifierError(f"{node.identifier} is already registered")
        if self.is_structure_locked:
            raise StructureLockedError(f"cannot register {node.identifier}: structure is locked")
        self._registry[node.identifier] = node
        logger.debug("Registered %s as %s", type(node).__name__, node.identifier)

    def unregister_node(self, identifier: IdentifierLike) -> Axon:
        key = Identifier.coerce(identifier)
        if key not in self._registry:
            raise NodeNotFoundError(identifier)
        if self.is_structure_locked:
            raise StructureLockedError(f"cannot unregister {key}: structure is locked")
        return self._registry.pop(key)

    def is_registered_node(self, identifier: IdentifierLike) -> bool:
        if identifier is None:
            return False
        return Identifier.coerce(identifier) in self._registry

    def find_node(self, identifier: IdentifierLike) -> Optional[Axon]:
        if identifier is None:
            return None
        return self._registry.get(Identifier.coerce(identifier))

    def registered_identifiers(self) -> List[Identifier]:
        return list(self._registry)

    def registered_nodes(self) -> List[Axon]:
        return list(self._registry.values())

    def _find_typed(self, identifier: IdentifierLike, kind: type) -> Optional[Any]:
        node = self.find_node(identifier)
        return node if isinstance(node, kind) else None

    def find_neuron(self, identifier: IdentifierLike) -> Optional[Neuron]:
        return self._find_typed(identifier, Neuron)

    def find_operant_neuron(self, identifier: IdentifierLike) -> Optional[OperantNeuron]:
        return self._find_typed(identifier, OperantNeuron)

    def find_sensor(self, identifier: IdentifierLike) -> Optional[Sensor]:
        return self._find_typed(identifier, Sensor)

    def find_effector(self, identifier: IdentifierLike) -> Optional[Effector]:
        return self._find_typed(identifier, Effector)

    def find_sensory_input_neuron(self, identifier: IdentifierLike) -> Optional[SensoryInputNeuron]:
        return self._find_typed(identifier, SensoryInputNeuron)

    def find_sensory_interneuron(self, identifier: IdentifierLike) -> Optional[SensoryInterneuron]:
        return self._find_typed(identifier, SensoryInterneuron)

    def find_motor_interneuron(self, identifier: IdentifierLike) -> Optional[MotorInterneuron]:
        return self._find_typed(identifier, MotorInterneuron)

    def find_motor_output_neuron(self, identifier: IdentifierLike) -> Optional[MotorOutputNeuron]:
        return self._find_typed(identifier, MotorOutputNeuron)

    def find_dopaminergic_unit(self, identifier: IdentifierLike) -> Optional[DopaminergicUnit]:
        return self._find_typed(identifier, DopaminergicUnit)

    def find_hippocampal_unit(self, identifier: IdentifierLike) -> Optional[HippocampalUnit]:
        return self._find_typed(identifier, HippocampalUnit)

    def _resolve(self, ref: NodeRef) -> Axon:
        if isinstance(ref, Axon):
            return ref
        node = self.find_node(ref)
        if node is None:
            raise NodeNotFoundError(ref)
        return node

    # --- Node info ---

    def set_info_for_node(self, info: NodeInfo) -> None:
        info.identifier = Identifier(info.identifier)
        self._node_info[info.identifier] = info

    def info_for_node(self, identifier: IdentifierLike) -> Optional[NodeInfo]:
        if identifier is None:
            return None
        return self._node_info.get(Identifier.coerce(identifier))

    # -----------------------------------------------------------------------
    # Structure lock
    # -----------------------------------------------------------------------

    @property
    def is_structure_locked(self) -> bool:
        return self._structure_locked or self._is_updating

    def lock_structure(self) -> None:
        """Freeze the topology; activations and weights stay mutable."""
        if self._structure_locked:
            return
        self._structure_locked = True
        logger.info(
            "Locked structure of %s with %d registered nodes",
            self.identifier or "network",
            len(self._registry),
        )

    @property
    def updater(self) -> NetworkUpdater:
        return self._updater

    @updater.setter
    def updater(self, updater: NetworkUpdater) -> None:
        self.lock_structure()
        self._updater = updater
        logger.debug("Updater set to %r", updater)

    # -----------------------------------------------------------------------
    # Construction
    # -----------------------------------------------------------------------

    def create_sensory_input_neuron(
        self, identifier: IdentifierLike = None, area_index: int = 0
    ) -> SensoryInputNeuron:
        return self.sensory_input_region.create(identifier, area_index)

    def create_respondent_sensory_input_neuron(
        self, identifier: IdentifierLike = None, area_index: int = 0
    ) -> RespondentSensoryInputNeuron:
        return self.sensory_input_region.create_respondent(identifier, area_index)

    def create_sensory_interneuron(
        self, identifier: IdentifierLike = None, area_index: int = 0, layer_index: int = 0
    ) -> SensoryInterneuron:
        return self.sensory_association_region.create(identifier, area_index, layer_index)

    def create_motor_interneuron(
        self, identifier: IdentifierLike = None, area_index: int = 0, layer_index: int = 0
    ) -> MotorInterneuron:
        return self.motor_association_region.create(identifier, area_index, layer_index)

    def create_motor_output_neuron(
        self, identifier: IdentifierLike = None, area_index: int = 0
    ) -> MotorOutputNeuron:
        return self.motor_output_region.create(identifier, area_index)

    def create_dopaminergic_unit(self, identifier: IdentifierLike = None) -> DopaminergicUnit:
        return self.ventral_tegmental_area.create(identifier)

    def create_hippocampal_unit(self, identifier: IdentifierLike = None) -> HippocampalUnit:
        return self.hippocampus.create(identifier)

    def append_sensor(self, sensor: Sensor, area_index: int = 0) -> Sensor:
        return self.sensor_region.append(sensor, area_index)

    def append_effector(self, effector: Effector, area_index: int = 0) -> Effector:
        return self.effector_region.append(effector, area_index)

    # --- Wiring by node or identifier ---

    def send_excitation(self, presynaptic: NodeRef, postsynaptic: NodeRef) -> Connection:
        post = self._resolve(postsynaptic)
        return post.receive_excitation(self._resolve(presynaptic))

    def send_inhibition(self, presynaptic: NodeRef, postsynaptic: NodeRef) -> Connection:
        post = self._resolve(postsynaptic)
        return post.receive_inhibition(self._resolve(presynaptic))

    def send_respondent_excitation(self, presynaptic: NodeRef, postsynaptic: NodeRef) -> Connection:
        post: RespondentNeuron = self._resolve(postsynaptic)
        return post.receive_respondent_excitation(self._resolve(presynaptic))

    def send_respondent_inhibition(self, presynaptic: NodeRef, postsynaptic: NodeRef) -> Connection:
        post: RespondentNeuron = self._resolve(postsynaptic)
        return post.receive_respondent_inhibition(self._resolve(presynaptic))

    def is_back_connection_from(self, postsynaptic: IdentifierLike, presynaptic: IdentifierLike) -> bool:
        """True when ``presynaptic`` feeds the neuron named ``postsynaptic``."""
        neuron = self.find_neuron(postsynaptic)
        if neuron is None:
            return False
        return neuron.contains_presynaptic_connection(presynaptic)

    def is_forward_connection_from(self, presynaptic: IdentifierLike, postsynaptic: IdentifierLike) -> bool:
        return self.is_back_connection_from(postsynaptic, presynaptic)

    # -----------------------------------------------------------------------
    # Weights
    # -----------------------------------------------------------------------

    def get_operant_neurons(self, out: Optional[List[OperantNeuron]] = None) -> List[OperantNeuron]:
        """Sensory association, motor association and motor output neurons."""
        if out is None:
            out = []
        self.sensory_association_region.get_operant_neurons(out)
        self.motor_association_region.get_operant_neurons(out)
        self.motor_output_region.get_operant_neurons(out)
        return out

    def get_learning_neurons(self) -> List[OperantNeuron]:
        """Operant neurons plus the VTA and hippocampal units."""
        out = self.get_operant_neurons()
        self.ventral_tegmental_area.get_operant_neurons(out)
        self.hippocampus.get_operant_neurons(out)
        return out

    def set_excitatory_weights(self, value: float) -> None:
        neurons = self.get_learning_neurons()
        for neuron in neurons:
            neuron.check_excitatory_weights(value)
        for neuron in neurons:
            neuron.set_excitatory_weights(value)

    def set_inhibitory_weights(self, value: float) -> None:
        neurons = self.get_learning_neurons()
        for neuron in neurons:
            neuron.check_inhibitory_weights(value)
        for neuron in neurons:
            neuron.set_inhibitory_weights(value)

    def set_connection_weights(self, value: float) -> None:
        neurons = self.get_learning_neurons()
        for neuron in neurons:
            neuron.check_excitatory_weights(value)
            neuron.check_inhibitory_weights(value)
        for neuron in neurons:
            neuron.set_excitatory_weights(value)
            neuron.set_inhibitory_weights(value)

    def unlearn(self) -> None:
        for neuron in self.get_learning_neurons():
            neuron.unlearn()

    # -----------------------------------------------------------------------
    # Broadcast signals
    # -----------------------------------------------------------------------

    @property
    def dopaminergic_signal(self) -> float:
        return self._dopaminergic_signal

    @property
    def hippocampal_signal(self) -> float:
        return self._hippocampal_signal

    def force_dopaminergic_signal(self, value: float) -> None:
        """Pin the dopaminergic signal until ``unforce_dopaminergic_signal``."""
        self._dopaminergic_signal = float(value)
        self._dopaminergic_signal_forced = True

    def unforce_dopaminergic_signal(self) -> None:
        self._dopaminergic_signal_forced = False

    def is_dopaminergic_signal_forced(self) -> bool:
        return self._dopaminergic_signal_forced

    def force_hippocampal_signal(self, value: float) -> None:
        """Pin the hippocampal signal until ``unforce_hippocampal_signal``."""
        self._hippocampal_signal = float(value)
        self._hippocampal_signal_forced = True

    def unforce_hippocampal_signal(self) -> None:
        self._hippocampal_signal_forced = False

    def is_hippocampal_signal_forced(self) -> bool:
        return self._hippocampal_signal_forced

    def load_signals(
        self,
        dopaminergic: float,
        hippocampal: float,
        dopaminergic_forced: bool = False,
        hippocampal_forced: bool = False,
    ) -> None:
        """Set both latched signals and their forced flags from saved state."""
        self._dopaminergic_signal = float(dopaminergic)
        self._hippocampal_signal = float(hippocampal)
        self._dopaminergic_signal_forced = dopaminergic_forced
        self._hippocampal_signal_forced = hippocampal_forced

    def _latch_dopaminergic_signal(self) -> None:
        if not self._dopaminergic_signal_forced:
            self._dopaminergic_signal = self.ventral_tegmental_area.dopaminergic_signal

    def _latch_hippocampal_signal(self) -> None:
        if not self._hippocampal_signal_forced:
            self._hippocampal_signal = self.hippocampus.hippocampal_signal

    # -----------------------------------------------------------------------
    # Timestep driver
    # -----------------------------------------------------------------------

    def update(self) -> StepResult:
        """Advance the network by one timestep.

        Returns:
            StepResult for the completed timestep.

        Raises:
            UpdateInProgressError: called while an update is running.
        """
        if self._is_updating:
            raise UpdateInProgressError("update() called re-entrantly")
        self.lock_structure()
        self._is_updating = True
        try:
            self.sensor_region.activate()
            self.sensory_input_region.activate()

            self.ventral_tegmental_area.activate()
            self._latch_dopaminergic_signal()
            self.hippocampus.activate()
            self._latch_hippocampal_signal()

            self._updater.update(self)

            learned = self.is_learning_enabled
            if learned:
                for neuron in self.get_operant_neurons():
                    neuron.learn()
                self.ventral_tegmental_area.learn()
                self.hippocampus.learn()

            self.effector_region.activate()
            self.timestep += 1

            result = StepResult(
                timestep=self.timestep,
                dopaminergic_signal=self._dopaminergic_signal,
                hippocampal_signal=self._hippocampal_signal,
                learned=learned,
                responding_effectors=[
                    str(e.identifier)
                    for e in self.effector_region.iter_nodes()
                    if e.activation_level >= 0.5 and e.identifier is not None
                ],
            )
            logger.debug(
                "Timestep %d: dopaminergic=%.4f hippocampal=%.4f",
                self.timestep, result.dopaminergic_signal, result.hippocampal_signal,
            )
            self._emit("update", result=result)
            return result
        finally:
            self._is_updating = False

    def inter_trial_interval(self) -> None:
        """Return every level to rest without learning or advancing time."""
        if self._is_updating:
            raise UpdateInProgressError("inter_trial_interval() called re-entrantly")
        self._is_updating = True
        try:
            self.ventral_tegmental_area.reset_activation()
            self._latch_dopaminergic_signal()
            self.hippocampus.reset_activation()
            self._latch_hippocampal_signal()

            self.sensor_region.reset_activation()
            self.sensory_input_region.reset_activation()
            neurons = self.get_operant_neurons()
            for neuron in neurons:
                neuron.reset_activation()
            for neuron in neurons:
                neuron.commit_activation()
            self.effector_region.reset_activation()

            self._emit("inter_trial_interval", timestep=self.timestep)
        finally:
            self._is_updating = False

    # -----------------------------------------------------------------------
    # Shape
    # -----------------------------------------------------------------------

    @property
    def max_layer_depth(self) -> int:
        return sum(region.layer_depth for region in self.regions)

    @property
    def max_node_width(self) -> int:
        return max(region.node_width for region in self.regions)

    @property
    def max_feedback_layer_depth(self) -> int:
        return max(area.layer_depth for area in self.feedback_areas)

    @property
    def max_feedback_node_width(self) -> int:
        return max(area.node_width for area in self.feedback_areas)

    # -----------------------------------------------------------------------
    # Telemetry & events
    # -----------------------------------------------------------------------

    def get_telemetry(self) -> Telemetry:
        neurons = self.get_learning_neurons()
        weights = [w for n in neurons for w in n.excitatory_weights + n.inhibitory_weights]
        levels = [n.activation_level for n in neurons]
        return Telemetry(
            timestep=self.timestep,
            total_nodes=len(self._registry),
            total_connections=len(weights),
            mean_weight=float(np.mean(weights)) if weights else 0.0,
            std_weight=float(np.std(weights)) if weights else 0.0,
            mean_activation=float(np.mean(levels)) if levels else 0.0,
            dopaminergic_signal=self._dopaminergic_signal,
            hippocampal_signal=self._hippocampal_signal,
        )

    def register_event_handler(self, event_type: str, callback: Callable) -> None:
        """Subscribe to ``"update"`` or ``"inter_trial_interval"``."""
        self._event_handlers.setdefault(event_type, []).append(callback)

    def _emit(self, event_type: str, **kwargs: Any) -> None:
        for cb in self._event_handlers.get(event_type, []):
            cb(**kwargs)

    # -----------------------------------------------------------------------
    # Persistence
    # -----------------------------------------------------------------------

    def checkpoint(self, path: str) -> None:
        """Save levels, weights and signals (extension picks json or msgpack)."""
        from selnet_persistence import save_state

        save_state(self, path)

    def restore(self, path: str) -> None:
        """Load a snapshot written by ``checkpoint`` into this network."""
        from selnet_persistence import load_state

        load_state(self, path)
