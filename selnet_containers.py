"""
SelNet Containers - layers, areas and regions.

Containers own their children and forward every activation-cycle and
learning operation to them in order.  A container of containers grows
lazily: indexing one position past the end creates the missing children
with automatic identifiers (``SensoryAssociationLayer_0`` ...) for as long
as the network structure is unlocked.

Hierarchy::

    NeuralRegion ──► NeuralArea ──► NeuralLayer ──► neurons
                 └─► SingleLayerArea ──────────────► neurons / sensors / effectors
"""

from __future__ import annotations

import logging
from typing import Iterator, List, Optional

import numpy as np

from selnet_errors import StructureLockedError
from selnet_foundation import (
    Axon,
    DopaminergicUnit,
    Effector,
    HippocampalUnit,
    IdentifierLike,
    MotorInterneuron,
    MotorOutputNeuron,
    Node,
    OperantNeuron,
    RespondentSensoryInputNeuron,
    Sensor,
    SensoryInputNeuron,
    SensoryInterneuron,
)
from selnet_primitives import Identifier

logger = logging.getLogger("selnet.containers")


# ---------------------------------------------------------------------------
# Generic container
# ---------------------------------------------------------------------------

class NeuralContainer(Node):
    """Ordered, owning sequence of child nodes.

    Subclasses that hold other containers set ``child_class`` and
    ``child_prefix``; ``ensure_len`` then builds children named
    ``{child_prefix}_{index}``.
    """

    child_class: Optional[type] = None
    child_prefix: str = ""

    def __init__(self, identifier: IdentifierLike = None, environment: Optional[Node] = None):
        super().__init__(identifier, environment)
        self._children: List[Node] = []

    # --- Sequence protocol ---

    def __len__(self) -> int:
        return len(self._children)

    def __iter__(self) -> Iterator[Node]:
        return iter(self._children)

    def __getitem__(self, index: int) -> Node:
        if self.child_class is not None and index >= len(self._children):
            self.ensure_len(index + 1)
        return self._children[index]

    @property
    def children(self) -> List[Node]:
        return list(self._children)

    def ensure_len(self, length: int) -> None:
        """Grow to at least ``length`` children; a no-op if already long enough."""
        if len(self._children) >= length:
            return
        self._check_unlocked()
        while len(self._children) < length:
            index = len(self._children)
            child = self.child_class(Identifier(f"{self.child_prefix}_{index}"), self)
            self._children.append(child)
            logger.debug("Grew %s with %s", self.identifier, child.identifier)

    def _check_unlocked(self) -> None:
        if self.network.is_structure_locked:
            raise StructureLockedError(f"cannot grow {self!r}: network structure is locked")

    # --- Traversal ---

    def iter_nodes(self) -> Iterator[Axon]:
        """Leaf nodes of the subtree in child order."""
        for child in self._children:
            if isinstance(child, NeuralContainer):
                yield from child.iter_nodes()
            else:
                yield child

    def get_operant_neurons(self, out: Optional[List[OperantNeuron]] = None) -> List[OperantNeuron]:
        if out is None:
            out = []
        out.extend(n for n in self.iter_nodes() if isinstance(n, OperantNeuron))
        return out

    # --- Activation fan-out ---

    def prepare_activation(self) -> None:
        for node in self.iter_nodes():
            node.prepare_activation()

    def commit_activation(self) -> None:
        for node in self.iter_nodes():
            node.commit_activation()

    def activate(self, auto_propagate: bool = True) -> None:
        self.prepare_activation()
        if auto_propagate:
            self.commit_activation()

    def reset_activation(self, auto_propagate: bool = True) -> None:
        nodes = list(self.iter_nodes())
        for node in nodes:
            node.reset_activation()
        if auto_propagate:
            for node in nodes:
                node.commit_activation()

    def learn(self) -> None:
        for neuron in self.get_operant_neurons():
            neuron.learn()

    def unlearn(self) -> None:
        for neuron in self.get_operant_neurons():
            neuron.unlearn()

    # --- Weights (validated across the whole subtree before any change) ---

    def set_excitatory_weights(self, value: float) -> None:
        neurons = self.get_operant_neurons()
        for neuron in neurons:
            neuron.check_excitatory_weights(value)
        for neuron in neurons:
            neuron.set_excitatory_weights(value)

    def set_inhibitory_weights(self, value: float) -> None:
        neurons = self.get_operant_neurons()
        for neuron in neurons:
            neuron.check_inhibitory_weights(value)
        for neuron in neurons:
            neuron.set_inhibitory_weights(value)

    def set_connection_weights(self, value: float) -> None:
        neurons = self.get_operant_neurons()
        for neuron in neurons:
            neuron.check_excitatory_weights(value)
            neuron.check_inhibitory_weights(value)
        for neuron in neurons:
            neuron.set_excitatory_weights(value)
            neuron.set_inhibitory_weights(value)

    # --- Shape ---

    @property
    def layer_depth(self) -> int:
        raise NotImplementedError

    @property
    def node_width(self) -> int:
        raise NotImplementedError


class _NodeSequence(NeuralContainer):
    """Container whose children are leaf nodes."""

    node_class: Optional[type] = None

    def _create_node(self, node_class: type, identifier: IdentifierLike) -> Axon:
        self._check_unlocked()
        node = node_class(identifier, self)
        if node.has_identifier:
            self.network.register_node(node)
        self._children.append(node)
        return node

    def create(self, identifier: IdentifierLike = None) -> Axon:
        return self._create_node(self.node_class, identifier)

    @property
    def layer_depth(self) -> int:
        return 1

    @property
    def node_width(self) -> int:
        return len(self._children)


class NeuralLayer(_NodeSequence):
    """A layer of neurons."""


class SingleLayerArea(_NodeSequence):
    """An area that holds its nodes directly rather than in layers."""


class NeuralArea(NeuralContainer):
    """An area made of layers."""

    def create(self, identifier: IdentifierLike = None, layer_index: int = 0) -> Axon:
        return self[layer_index].create(identifier)

    @property
    def layer_depth(self) -> int:
        return len(self._children)

    @property
    def node_width(self) -> int:
        return max((layer.node_width for layer in self._children), default=0)


class NeuralRegion(NeuralContainer):
    """A region made of areas."""

    def create(self, identifier: IdentifierLike = None, area_index: int = 0, *indices: int) -> Axon:
        return self[area_index].create(identifier, *indices)

    @property
    def layer_depth(self) -> int:
        return max((area.layer_depth for area in self._children), default=0)

    @property
    def node_width(self) -> int:
        return max((area.node_width for area in self._children), default=0)


# ---------------------------------------------------------------------------
# Sensors and effectors
# ---------------------------------------------------------------------------

class _AppendableArea(SingleLayerArea):
    """Area that adopts externally built sensors or effectors."""

    accepts: type = Axon

    def append(self, node: Axon) -> Axon:
        if not isinstance(node, self.accepts):
            raise TypeError(f"{type(self).__name__} holds {self.accepts.__name__} nodes")
        self._check_unlocked()
        node.attach(self)
        if node.has_identifier:
            self.network.register_node(node)
        self._children.append(node)
        return node


class SensorArea(_AppendableArea):
    accepts = Sensor


class SensorRegion(NeuralRegion):
    child_class = SensorArea
    child_prefix = "SensorArea"

    def append(self, sensor: Sensor, area_index: int = 0) -> Sensor:
        return self[area_index].append(sensor)


class EffectorArea(_AppendableArea):
    accepts = Effector


class EffectorRegion(NeuralRegion):
    child_class = EffectorArea
    child_prefix = "EffectorArea"

    def append(self, effector: Effector, area_index: int = 0) -> Effector:
        return self[area_index].append(effector)


# ---------------------------------------------------------------------------
# Sensory side
# ---------------------------------------------------------------------------

class SensoryInputArea(SingleLayerArea):
    node_class = SensoryInputNeuron

    def create_respondent(self, identifier: IdentifierLike = None) -> RespondentSensoryInputNeuron:
        return self._create_node(RespondentSensoryInputNeuron, identifier)


class SensoryInputRegion(NeuralRegion):
    child_class = SensoryInputArea
    child_prefix = "SensoryInputArea"

    def create_respondent(
        self, identifier: IdentifierLike = None, area_index: int = 0
    ) -> RespondentSensoryInputNeuron:
        return self[area_index].create_respondent(identifier)


class SensoryAssociationLayer(NeuralLayer):
    node_class = SensoryInterneuron


class SensoryAssociationArea(NeuralArea):
    child_class = SensoryAssociationLayer
    child_prefix = "SensoryAssociationLayer"


class SensoryAssociationRegion(NeuralRegion):
    child_class = SensoryAssociationArea
    child_prefix = "SensoryAssociationArea"


# ---------------------------------------------------------------------------
# Motor side
# ---------------------------------------------------------------------------

class MotorAssociationLayer(NeuralLayer):
    node_class = MotorInterneuron


class MotorAssociationArea(NeuralArea):
    child_class = MotorAssociationLayer
    child_prefix = "MotorAssociationLayer"


class MotorAssociationRegion(NeuralRegion):
    child_class = MotorAssociationArea
    child_prefix = "MotorAssociationArea"


class MotorOutputArea(SingleLayerArea):
    node_class = MotorOutputNeuron


class MotorOutputRegion(NeuralRegion):
    child_class = MotorOutputArea
    child_prefix = "MotorOutputArea"


# ---------------------------------------------------------------------------
# Feedback areas
# ---------------------------------------------------------------------------

class Hippocampus(SingleLayerArea):
    """Hippocampal units; their mean discrepancy teaches sensory association."""

    node_class = HippocampalUnit

    @property
    def hippocampal_signal(self) -> float:
        if not self._children:
            return 0.0
        return float(np.mean([unit.discrepancy_signal for unit in self._children]))


class VentralTegmentalArea(SingleLayerArea):
    """Dopaminergic units; their mean discrepancy teaches the motor side."""

    node_class = DopaminergicUnit

    @property
    def dopaminergic_signal(self) -> float:
        if not self._children:
            return 0.0
        return float(np.mean([unit.discrepancy_signal for unit in self._children]))
