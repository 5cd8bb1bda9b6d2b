"""Gates built from other transformers.

Constructors that cannot produce a meaningful gate for the given operands
return ``None`` instead of raising.
"""

from __future__ import annotations

from typing import Optional, Sequence

from qtimeline.diagnostics.core import assert_unitary
from qtimeline.diagnostics.debug_mode import is_debug_enabled
from qtimeline.gates.base import Gate, GateKind, Transformer, is_self_adjoint, qubit_count
from qtimeline.maths.matrix import AmplitudeMatrix, adjoint, matrix_power, multiply


def _embed_lower_right(matrix: AmplitudeMatrix) -> AmplitudeMatrix:
    """Place ``matrix`` in the lower-right block of an identity twice its size."""
    size = matrix.rows
    embedded = AmplitudeMatrix.identity(2 * size)
    for r in range(size):
        for c in range(size):
            embedded[size + r, size + c] = matrix[r, c]
    return embedded


def controlled_gate(gate: Transformer) -> Optional[Gate]:
    """Single-control version of a one-qubit gate, named ``|C-<name>|``."""
    if gate.n_inputs != 1:
        return None
    return Gate(
        kind=GateKind.CONTROLLED,
        name=f"|C-{gate.name.strip('|')}|",
        matrix=_embed_lower_right(gate.matrix),
        n_inputs=2,
        n_outputs=2,
        operands=(gate,),
    )


def double_controlled_gate(gate: Transformer) -> Optional[Gate]:
    """Two-control version of a one-qubit gate, named ``|CC-<name>|``."""
    if gate.n_inputs != 1:
        return None
    return Gate(
        kind=GateKind.CONTROLLED,
        name=f"|CC-{gate.name.strip('|')}|",
        matrix=_embed_lower_right(_embed_lower_right(gate.matrix)),
        n_inputs=3,
        n_outputs=3,
        operands=(gate,),
    )


def multi_controlled_gate(n_controls: int, target: Transformer) -> Optional[Gate]:
    """
    Controlled version of an arbitrary transformer (gate or circuit).

    The target matrix is doubled into the lower-right block of an identity
    once per control, so the target acts only when every control is excited.
    Controls come first in the index list.
    """
    if n_controls < 1:
        return None
    matrix = target.matrix
    for _ in range(n_controls):
        matrix = _embed_lower_right(matrix)
    prefix = "C-" * n_controls
    return Gate(
        kind=GateKind.MULTI_CONTROLLED,
        name=f"|{prefix}{target.name.strip('|')}|",
        matrix=matrix,
        n_inputs=target.n_inputs + n_controls,
        n_outputs=target.n_outputs + n_controls,
        operands=(target,),
    )


def powered_gate(gate: Transformer, exponent: int) -> Optional[Gate]:
    """``gate`` applied ``exponent`` times, as one matrix."""
    if exponent < 0:
        return None
    return Gate(
        kind=GateKind.POWERED,
        name=f"|({gate.name.strip('|')})^{exponent}|",
        matrix=matrix_power(gate.matrix, exponent),
        n_inputs=gate.n_inputs,
        n_outputs=gate.n_outputs,
        parameter=float(exponent),
        operands=(gate,),
    )


def compiled_gate(name: str, gates: Sequence[Transformer]) -> Optional[Gate]:
    """
    Fixed macro-operation whose matrix is ``gates[0] @ gates[1] @ ...``.

    Returns None for an empty list or when the gates differ in arity.
    """
    if not gates:
        return None
    n_inputs = gates[0].n_inputs
    if any(g.n_inputs != n_inputs for g in gates):
        return None

    matrix = gates[0].matrix
    for gate in gates[1:]:
        matrix = multiply(matrix, gate.matrix)
    return Gate(
        kind=GateKind.COMPILED,
        name=f"|{name.strip('|')}|",
        matrix=matrix,
        n_inputs=n_inputs,
        n_outputs=gates[0].n_outputs,
        operands=tuple(gates),
    )


def universal_gate(
    matrix: AmplitudeMatrix,
    name: str,
    n_inputs: Optional[int] = None,
    n_outputs: Optional[int] = None,
) -> Gate:
    """
    Gate with an arbitrary matrix, e.g. rebuilt from serialized data.

    Raises
    ------
    InvalidShapeError
        If the matrix is not square with a power-of-two size matching
        ``n_inputs``.
    """
    inferred = qubit_count(matrix)
    if n_inputs is None:
        n_inputs = inferred
    if is_debug_enabled():
        assert_unitary(matrix.to_tensor())
    return Gate(
        kind=GateKind.UNIVERSAL,
        name=name,
        matrix=matrix,
        n_inputs=n_inputs,
        n_outputs=n_inputs if n_outputs is None else n_outputs,
    )


def adjoint_gate(gate: Transformer) -> Transformer:
    """
    Inverse of a unitary gate.

    Self-adjoint gates are returned unchanged so their names stay stable.
    """
    if is_self_adjoint(gate):
        return gate
    return Gate(
        kind=GateKind.UNIVERSAL,
        name=f"|{gate.name.strip('|')}†|",
        matrix=adjoint(gate.matrix),
        n_inputs=gate.n_inputs,
        n_outputs=gate.n_outputs,
        operands=(gate,),
    )


__all__ = [
    "controlled_gate",
    "double_controlled_gate",
    "multi_controlled_gate",
    "powered_gate",
    "compiled_gate",
    "universal_gate",
    "adjoint_gate",
]
