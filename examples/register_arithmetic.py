"""Example: reversible arithmetic on qubit registers.

Adds and subtracts three-bit registers with ripple circuits built from
Toffoli and CNOT gates, and counts with an incrementer.
"""

from __future__ import annotations

import qtimeline as qt


def example_ripple_adder() -> None:
    """5 + 6 on three qubits overflows into the carry."""
    print("=" * 60)
    print("Example 1: Ripple-carry addition")
    print("=" * 60)

    adder = qt.AdderCircuit(3)
    left = qt.Register.from_int(5, min_qubits=3)
    right = qt.Register.from_int(6, min_qubits=3)
    result, carry = adder.add(left, right)
    print(f"5 + 6 = {result.to_int()} (carry {1 if carry.is_excited else 0})")
    print()


def example_ripple_subtractor() -> None:
    """2 - 5 on three qubits borrows."""
    print("=" * 60)
    print("Example 2: Ripple-borrow subtraction")
    print("=" * 60)

    subtractor = qt.SubtractorCircuit.from_modulus(8)
    result, borrow = subtractor.subtract(
        qt.Register.from_int(2, min_qubits=3), qt.Register.from_int(5, min_qubits=3)
    )
    print(f"2 - 5 = {result.to_int()} (borrow {1 if borrow.is_excited else 0})")
    print()


def example_counter() -> None:
    """Count modulo 8 with an incrementer."""
    print("=" * 60)
    print("Example 3: Counting modulo 8")
    print("=" * 60)

    incrementer = qt.IncrementerCircuit.from_modulus(8)
    register = qt.Register.from_int(5, min_qubits=3)
    values = []
    for _ in range(5):
        register = incrementer.increment(register)
        values.append(register.to_int())
    print(f"Counter values: {values}")
    print()


def main() -> None:
    example_ripple_adder()
    example_ripple_subtractor()
    example_counter()


if __name__ == "__main__":
    main()
