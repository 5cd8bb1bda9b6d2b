"""Example: Grover search and teleportation with qtimeline.

Builds an oracle that marks one bit pattern, runs Grover's algorithm over
four data qubits and reads the most likely answer. A second example
teleports a single qubit and round-trips the circuit through JSON.
"""

from __future__ import annotations

import qtimeline as qt
from qtimeline.algorithms import bit_pattern_oracle


def example_grover_search(pattern: str = "0111") -> None:
    """Search 2**len(pattern) basis states for ``pattern``."""
    print("=" * 60)
    print("Example 1: Grover search")
    print("=" * 60)

    grover = qt.GroverCircuit(bit_pattern_oracle(pattern))
    print(f"Circuit: {grover.name} on {grover.n_inputs} qubits, {grover.iterations} iterations")

    probabilities = qt.Measurer(grover.evaluate()).probabilistic_map()
    # The last qubit is the oracle ancilla
    found = sum(p for key, p in probabilities.items() if key[: len(pattern)] == pattern)
    print(f"Probability of measuring {pattern}: {found:.4f}")
    print()


def example_teleportation() -> None:
    """Teleport 0.6|0⟩ + 0.8|1⟩ and serialize the circuit."""
    print("=" * 60)
    print("Example 2: Teleportation")
    print("=" * 60)

    circuit = qt.TeleportationCircuit()
    print(circuit.to_text())

    received = circuit.teleported_qubit(qt.Qubit(0.6, 0.8))
    print(f"Received qubit: {received}")

    restored = qt.deserialize(qt.serialize(circuit))
    print(f"JSON round trip preserved the circuit: {restored == circuit}")
    print()


def main() -> None:
    example_grover_search()
    example_teleportation()


if __name__ == "__main__":
    main()
