"""
SelNet Persistence - save and restore the numeric state of a network.

A snapshot holds plain numbers only: per named node the published, pending
and previous activation levels, the body activation and previous
excitation, connection weights and discrepancy signals, plus the network
signals, forced flags, learning flag and timestep.  Topology is not
stored; a snapshot is loaded into a network built the same way as the one
it was taken from.

Usage::

    from selnet_persistence import save_state, load_state
    save_state(net, "/tmp/session.msgpack")
    # ... later, on an identically constructed network ...
    load_state(net, "/tmp/session.msgpack")

The file extension picks the format: ``.msgpack`` uses msgpack, anything
else is written as JSON.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any, Dict, List, Tuple

try:
    import msgpack
except ImportError:
    msgpack = None

from selnet_errors import WiringError
from selnet_foundation import (
    Axon,
    DopaminergicUnit,
    HippocampalUnit,
    OperantNeuron,
    Sensor,
)
from selnet_primitives import check_unit

if TYPE_CHECKING:
    from selnet_network import Network

logger = logging.getLogger("selnet.persistence")

FORMAT_VERSION = "1.0"


# ── Capture ────────────────────────────────────────────────────────────


def _capture_node(node: Axon) -> Dict[str, Any]:
    entry: Dict[str, Any] = {
        "kind": type(node).__name__,
        "published": node.activation_level,
        "pending": node.pending_activation_level,
        "previous": node.previous_activation_level,
    }
    if isinstance(node, Sensor):
        entry["input"] = node.input_level
    if isinstance(node, OperantNeuron):
        entry["body_activation"] = node.body.activation
        entry["previous_excitation"] = node.body.previous_excitation
        entry["excitatory_weights"] = node.excitatory_weights
        entry["inhibitory_weights"] = node.inhibitory_weights
    if isinstance(node, (DopaminergicUnit, HippocampalUnit)):
        entry["discrepancy"] = node.discrepancy_signal
    return entry


def capture_state(network: "Network") -> Dict[str, Any]:
    """Snapshot every registered node and the network-wide signals."""
    return {
        "version": FORMAT_VERSION,
        "network": str(network.identifier) if network.identifier is not None else None,
        "timestep": network.timestep,
        "is_learning_enabled": network.is_learning_enabled,
        "signals": {
            "dopaminergic": network.dopaminergic_signal,
            "hippocampal": network.hippocampal_signal,
            "dopaminergic_forced": network.is_dopaminergic_signal_forced(),
            "hippocampal_forced": network.is_hippocampal_signal_forced(),
        },
        "nodes": {
            str(identifier): _capture_node(node)
            for identifier, node in zip(network.registered_identifiers(), network.registered_nodes())
        },
    }


# ── Apply ──────────────────────────────────────────────────────────────


def _validate_entry(node: Axon, entry: Dict[str, Any]) -> Dict[str, Any]:
    """Return a converted copy of ``entry``; raise before anything is applied."""
    if "published" not in entry:
        raise WiringError(f"{node.identifier}: saved entry has no published level")
    checked: Dict[str, Any] = {}
    for key in ("published", "pending", "previous", "input", "body_activation", "previous_excitation"):
        if entry.get(key) is not None:
            checked[key] = check_unit(entry[key], what=key)
    if isinstance(node, OperantNeuron):
        for key, connections in (
            ("excitatory_weights", node.body.excitatory),
            ("inhibitory_weights", node.body.inhibitory),
        ):
            if key in entry:
                checked[key] = connections.check_weight_list(entry[key])
    if isinstance(node, (DopaminergicUnit, HippocampalUnit)) and "discrepancy" in entry:
        checked["discrepancy"] = float(entry["discrepancy"])
    return checked


def _apply_entry(node: Axon, entry: Dict[str, Any]) -> None:
    node.load_levels(entry["published"], entry.get("pending"), entry.get("previous"))
    if isinstance(node, Sensor) and "input" in entry:
        node.input_level = entry["input"]
    if isinstance(node, OperantNeuron):
        if "body_activation" in entry:
            node.body.activation = entry["body_activation"]
        if "previous_excitation" in entry:
            node.body.previous_excitation = entry["previous_excitation"]
        if "excitatory_weights" in entry:
            node.body.excitatory.load_weights(entry["excitatory_weights"])
        if "inhibitory_weights" in entry:
            node.body.inhibitory.load_weights(entry["inhibitory_weights"])
    if isinstance(node, (DopaminergicUnit, HippocampalUnit)) and "discrepancy" in entry:
        node.load_discrepancy(entry["discrepancy"])


def apply_state(network: "Network", data: Dict[str, Any]) -> int:
    """Load a snapshot into ``network``.

    Every entry is validated before anything is changed, so a bad weight
    or level leaves the network untouched.  Identifiers that the network
    does not know are skipped with a warning.

    Args:
        network: Network with the same topology as the captured one.
        data: Dict produced by ``capture_state``.

    Returns:
        Number of nodes restored.
    """
    matched: List[Tuple[Axon, Dict[str, Any]]] = []
    for identifier, entry in data.get("nodes", {}).items():
        node = network.find_node(identifier)
        if node is None:
            logger.warning("Skipping unknown node %s in saved state", identifier)
            continue
        matched.append((node, _validate_entry(node, entry)))

    timestep = int(data.get("timestep", network.timestep))
    is_learning_enabled = bool(data.get("is_learning_enabled", network.is_learning_enabled))
    signals = data.get("signals", {})
    dopaminergic = float(signals.get("dopaminergic", 0.0))
    hippocampal = float(signals.get("hippocampal", 0.0))

    for node, entry in matched:
        _apply_entry(node, entry)

    network.timestep = timestep
    network.is_learning_enabled = is_learning_enabled
    network.load_signals(
        dopaminergic,
        hippocampal,
        dopaminergic_forced=bool(signals.get("dopaminergic_forced", False)),
        hippocampal_forced=bool(signals.get("hippocampal_forced", False)),
    )

    logger.info("Restored %d/%d nodes at timestep %d", len(matched), len(data.get("nodes", {})), network.timestep)
    return len(matched)


# ── Files ──────────────────────────────────────────────────────────────


def save_state(network: "Network", path: str) -> None:
    """Write ``capture_state(network)`` to ``path``."""
    data = capture_state(network)
    path = str(path)
    if path.endswith(".msgpack"):
        if msgpack is None:
            raise ImportError("msgpack required for .msgpack serialization")
        with open(path, "wb") as f:
            msgpack.pack(data, f, use_bin_type=True)
    else:
        with open(path, "w") as f:
            json.dump(data, f, indent=2)
    logger.info("Saved %d nodes to %s", len(data["nodes"]), path)


def load_state(network: "Network", path: str) -> int:
    """Read a snapshot from ``path`` and apply it to ``network``."""
    path = str(path)
    if path.endswith(".msgpack"):
        if msgpack is None:
            raise ImportError("msgpack required for .msgpack deserialization")
        with open(path, "rb") as f:
            data = msgpack.unpack(f, raw=False)
    else:
        with open(path, "r") as f:
            data = json.load(f)
    return apply_state(network, data)
