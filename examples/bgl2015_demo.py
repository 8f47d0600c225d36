"""BGL2015 choice experiment demo.

Builds the two-path network, trains it on X/Y trials, runs the choice
phase and prints the summary, telemetry and a state checkpoint.
"""

import logging
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from selnet_bgl2015 import Organism, TrialSchedule, TrialsLooper, create_bgl2015_network
from selnet_network import Network


def main():
    logging.basicConfig(level=logging.INFO, format="%(name)s: %(message)s")

    organism = Organism("BGL2015Demo", seed=2015)
    brain = organism.brain

    print("=== Network ===")
    print(f"Named nodes: {len(brain.registered_identifiers())}")
    print(f"Max layer depth: {brain.max_layer_depth}")
    print(f"Max node width: {brain.max_node_width}")
    for name in ("X", "Y", "Sr"):
        info = brain.info_for_node(name)
        print(f"  {info.name}: {info.title}")

    print("\n=== Initial weights ===")
    print(f"S\"1-M\"1: {organism.m_prime_prime_1.excitatory_weights[0]:.3f}")
    print(f"S\"2-M\"2: {organism.m_prime_prime_2.excitatory_weights[0]:.3f}")

    # Count reinforced steps as they happen
    reinforced = []
    brain.register_event_handler(
        "update",
        lambda result: reinforced.append(result.timestep) if organism.sr else None,
    )

    print("\n=== Training (200 X, 200 Y) and choice (20 X+Y) trials ===")
    looper = TrialsLooper(organism, TrialSchedule(), seed=2015)
    summary = looper.run_trials()
    print(f"Recorded steps: {len(looper.step_data)}")
    print(f"Reinforced steps: {len(reinforced)}")

    print("\n=== Choice summary ===")
    print(f"Mean S\"1-M\"1 weight: {summary.m_prime_prime_1_weight:.3f}")
    print(f"Mean S\"2-M\"2 weight: {summary.m_prime_prime_2_weight:.3f} (should be higher)")
    print(f"Mean M'1 activation: {summary.m_prime_1_activation:.3f}")
    print(f"Mean M'2 activation: {summary.m_prime_2_activation:.3f} (should be higher)")
    print(f"R1: {summary.r1_count}  R2: {summary.r2_count}")

    print("\n=== Telemetry ===")
    tel = brain.get_telemetry()
    print(f"Timestep: {tel.timestep}")
    print(f"Connections: {tel.total_connections}")
    print(f"Mean weight: {tel.mean_weight:.3f} (std {tel.std_weight:.3f})")
    print(f"Dopaminergic signal: {tel.dopaminergic_signal:.4f}")

    print("\n=== Checkpoint ===")
    brain.checkpoint("/tmp/selnet_bgl2015.json")
    print("Saved to /tmp/selnet_bgl2015.json")

    fresh: Network = create_bgl2015_network("BGL2015Demo")
    fresh.restore("/tmp/selnet_bgl2015.json")
    print(f"Restored at timestep {fresh.timestep}, "
          f"S\"2-M\"2 weight {fresh.find_motor_interneuron('M_Prime_Prime_2').excitatory_weights[0]:.3f}")


if __name__ == "__main__":
    main()
