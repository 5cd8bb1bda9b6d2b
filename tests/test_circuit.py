"""Tests for circuit timelines and evaluation."""

import cmath
import math

import numpy as np
import pytest

from qtimeline.circuit import Circuit
from qtimeline.config import config_context
from qtimeline.errors import (
    ArityMismatchError,
    DimensionMismatchError,
    IndexOutOfRangeError,
    TimelineCollisionError,
)
from qtimeline.gates import GateKind, Transformer
from qtimeline.gates import standard
from qtimeline.maths.matrix import AmplitudeMatrix
from qtimeline.state import Register


def _flat(matrix: AmplitudeMatrix) -> np.ndarray:
    return matrix.to_tensor().numpy().reshape(-1)


def test_cnot_circuit_truth_table() -> None:
    """A one-gate CNOT circuit flips the second qubit when the first is set."""
    circuit = Circuit("|CNOT|", 2).append(standard.CNOT(), 0, [0, 1])
    assert np.allclose(_flat(circuit.transform(Register.from_bits("01"))), [0, 1, 0, 0])
    assert np.allclose(_flat(circuit.transform(Register.from_bits("11"))), [0, 0, 1, 0])
    assert circuit.kind is GateKind.CIRCUIT
    assert isinstance(circuit, Transformer)


def test_y_y_swap_and_phase_shifts() -> None:
    """Y, Y, SWAP then two π/4 phase shifts take |01⟩ to e^{iπ/4}|01⟩."""
    circuit = Circuit("|Test|", 2)
    circuit.extend(
        [
            (standard.Y(), 0, 0),
            (standard.Y(), 0, 1),
            (standard.SWAP(), 1, [0, 1]),
            (standard.phase_shift(math.pi / 4), 2, 0),
            (standard.phase_shift(math.pi / 4), 2, 1),
        ]
    )
    output = _flat(circuit.transform(Register.from_bits("01")))
    assert np.allclose(output, [0, cmath.exp(1j * math.pi / 4), 0, 0])
    assert circuit.count_gates() == 5
    assert circuit.count_steps() == 3


def test_total_matrix_is_time_ordered_product() -> None:
    """Later steps multiply on the left."""
    circuit = Circuit("|Order|", 1)
    circuit.append(standard.X(), 0, 0)
    circuit.append(standard.Z(), 1, 0)
    expected = standard.Z().matrix.to_tensor().numpy() @ standard.X().matrix.to_tensor().numpy()
    assert np.allclose(circuit.matrix.to_tensor().numpy(), expected)


def test_collision_at_same_time() -> None:
    """Overlapping qubits at the same time step are rejected."""
    circuit = Circuit("|Busy|", 3).append(standard.CNOT(), 0, [0, 1])
    with pytest.raises(TimelineCollisionError, match="already used at time 0"):
        circuit.append(standard.H(), 0, 1)
    circuit.append(standard.H(), 0, 2)
    circuit.append(standard.H(), 1, 1)
    assert circuit.count_gates() == 3


def test_repeated_indices_rejected() -> None:
    """One entry cannot target the same qubit twice."""
    with pytest.raises(TimelineCollisionError, match="repeat"):
        Circuit("|Rep|", 2).append(standard.CNOT(), 0, [1, 1])


def test_append_validates_indices_and_arity() -> None:
    """Indices must address the circuit and match the arity."""
    circuit = Circuit("|Small|", 2)
    with pytest.raises(IndexOutOfRangeError, match="out of range"):
        circuit.append(standard.H(), 0, 2)
    with pytest.raises(IndexOutOfRangeError):
        circuit.append(standard.H(), 0, -1)
    with pytest.raises(ArityMismatchError, match="takes 2 inputs"):
        circuit.append(standard.CNOT(), 0, [0])


def test_circuit_size_limits() -> None:
    """Circuits need between one and max_qubits inputs."""
    with pytest.raises(ValueError, match="n_inputs"):
        Circuit("|Empty|", 0)
    with config_context(max_qubits=4):
        with pytest.raises(ValueError, match="n_inputs <= 4"):
            Circuit("|Wide|", 5)


def test_circuit_cannot_contain_itself() -> None:
    """Appending a circuit to itself is rejected."""
    circuit = Circuit("|Self|", 1)
    with pytest.raises(ValueError, match="cannot contain itself"):
        circuit.append(circuit, 0, 0)


def test_transform_dimension_mismatch() -> None:
    """Inputs must encode exactly n_inputs qubits."""
    circuit = Circuit("|Two|", 2).append(standard.H(), 0, 0)
    with pytest.raises(DimensionMismatchError, match="acts on 2 qubits"):
        circuit.transform(Register.from_bits("101"))
    with pytest.raises(DimensionMismatchError):
        circuit.transform(AmplitudeMatrix(3, 1))


def test_matrix_cache_invalidated_on_change() -> None:
    """The cached matrix is rebuilt after appending or removing entries."""
    circuit = Circuit("|Cache|", 1).append(standard.X(), 0, 0)
    assert circuit.matrix == standard.X().matrix
    circuit.append(standard.X(), 1, 0)
    assert circuit.matrix == AmplitudeMatrix.identity(2)
    removed = circuit.remove(1, 0)
    assert removed.transformer == standard.X()
    assert circuit.matrix == standard.X().matrix
    with pytest.raises(KeyError):
        circuit.remove(5, 0)


def test_partial_transform_applies_step_range() -> None:
    """from_step and up_to_step select positions in the sorted step list."""
    circuit = Circuit("|Steps|", 1)
    circuit.append(standard.X(), 0, 0)
    circuit.append(standard.H(), 10, 0)
    circuit.append(standard.Z(), 20, 0)

    only_first = circuit.transform(Register.from_bits("0"), up_to_step=0)
    assert np.allclose(_flat(only_first), [0, 1])

    last_two = circuit.transform(Register.from_bits("1"), from_step=1)
    h = standard.H().matrix.to_tensor().numpy()
    z = standard.Z().matrix.to_tensor().numpy()
    assert np.allclose(_flat(last_two), z @ h @ np.array([0, 1]))


def test_evolve_matches_transform() -> None:
    """The statevector path agrees with the total matrix."""
    circuit = Circuit("|Mix|", 3)
    circuit.extend(
        [
            (standard.H(), 0, 0),
            (standard.CNOT(), 1, [0, 2]),
            (standard.RY(0.4), 1, 1),
            (standard.TOFFOLI(), 2, [2, 1, 0]),
            (standard.SWAP(), 3, [0, 1]),
        ]
    )
    register = Register.from_bits("010")
    assert np.allclose(_flat(circuit.evolve(register)), _flat(circuit.transform(register)))
    assert np.allclose(
        _flat(circuit.evolve(register, from_step=1, up_to_step=2)),
        _flat(circuit.transform(register, from_step=1, up_to_step=2)),
    )


def test_nested_circuit_acts_on_its_indices() -> None:
    """A nested circuit is lifted onto the indices it is scheduled on."""
    inner = Circuit("|Bell|", 2).extend([(standard.H(), 0, 0), (standard.CNOT(), 1, [0, 1])])
    outer = Circuit("|Outer|", 3).append(inner, 0, [2, 0])
    output = _flat(outer.transform(Register.from_bits("000")))
    expected = np.zeros(8, dtype=complex)
    expected[0b000] = expected[0b101] = 1 / math.sqrt(2)
    assert np.allclose(output, expected)
    assert np.allclose(_flat(outer.evolve(Register.from_bits("000"))), expected)


def test_inverse_undoes_circuit() -> None:
    """A circuit followed by its inverse is the identity."""
    circuit = Circuit("|Fwd|", 2)
    circuit.extend(
        [
            (standard.H(), 0, 0),
            (standard.phase_shift(0.3), 1, 1),
            (standard.CNOT(), 2, [0, 1]),
            (standard.RX(1.2), 3, 1),
        ]
    )
    inverse = circuit.inverse()
    assert inverse.name == "|Inv Fwd|"
    assert inverse.count_gates() == circuit.count_gates()
    assert (inverse.matrix @ circuit.matrix) == AmplitudeMatrix.identity(4)

    first_time, first_entry = next(inverse.entries())
    assert first_time == 0
    assert first_entry.transformer.name == "|Rx 1.20†|"


def test_clear_gates_drops_entries_touching_qubit() -> None:
    """clear_gates removes every entry using the qubit."""
    circuit = Circuit("|Clear|", 3)
    circuit.extend(
        [
            (standard.H(), 0, 0),
            (standard.CNOT(), 1, [0, 1]),
            (standard.X(), 1, 2),
            (standard.H(), 2, 1),
        ]
    )
    circuit.clear_gates(1)
    remaining = [(time, entry.transformer.name) for time, entry in circuit.entries()]
    assert remaining == [(0, "|H|"), (1, "|X|")]


def test_all_transformers_flattens_nested_circuits() -> None:
    """Leaf transformers are collected recursively and deduplicated by name."""
    inner = Circuit("|Inner|", 2).extend([(standard.H(), 0, 0), (standard.CNOT(), 1, [0, 1])])
    outer = Circuit("|Outer|", 3)
    outer.extend([(standard.H(), 0, 2), (inner, 1, [0, 1]), (standard.X(), 2, 2)])
    names = sorted(t.name for t in outer.all_transformers())
    assert names == ["|C-NOT|", "|H|", "|X|"]


def test_copy_and_equality() -> None:
    """Copies share the schedule but not the timeline container."""
    circuit = Circuit("|Orig|", 1).append(standard.H(), 0, 0)
    clone = circuit.copy()
    assert clone == circuit
    clone.append(standard.X(), 1, 0)
    assert clone != circuit
    assert circuit.count_gates() == 1
    assert circuit.copy("|Renamed|") != circuit


def test_text_rendering() -> None:
    """to_text lists one line per step."""
    circuit = Circuit("|Txt|", 2).append(standard.CNOT(), 3, [1, 0])
    assert circuit.to_text() == "|Txt| (2 qubits)\n  t=3: |C-NOT|[1, 0]"


def test_transformation_matrix_is_a_copy() -> None:
    """Writing to the returned matrix leaves the cached product intact."""
    circuit = Circuit("|Had|", 1).append(standard.H(), 0, 0)
    exposed = circuit.matrix
    exposed[0, 0] = 5.0
    assert circuit.matrix == standard.H().matrix
    assert circuit.transformation_matrix[0, 0] == pytest.approx(2 ** -0.5)
    output = circuit.transform(Register.from_bits("0")).flat()
    assert output[0] == pytest.approx(2 ** -0.5)
