"""Tests for measurement statistics."""

import math
from collections import Counter

import pytest
import torch

from qtimeline.errors import InvalidShapeError
from qtimeline.gates import standard
from qtimeline.maths.matrix import AmplitudeMatrix
from qtimeline.measurement import AmplitudeEntry, Measurer
from qtimeline.state import Outcome, Qubit, Register


def _column(values) -> AmplitudeMatrix:
    return AmplitudeMatrix.from_rows([[v] for v in values])


def test_probabilities_sum_to_one(rng) -> None:
    """The probability map of a normalized vector sums to 1."""
    raw = rng.normal(size=16) + 1j * rng.normal(size=16)
    raw = raw / math.sqrt(float((abs(raw) ** 2).sum()))
    probabilities = Measurer(_column(raw.tolist())).probabilistic_map()
    assert sum(probabilities.values()) == pytest.approx(1.0)
    assert all(len(key) == 4 for key in probabilities)


def test_certain_state_short_circuits() -> None:
    """A state with probability ~1 is returned alone."""
    vector = _column([0, 0, 1, 0])
    assert Measurer(vector).probabilistic_map() == {"10": 1.0}


def test_include_impossible_states() -> None:
    """Zero-probability states are listed only on request."""
    vector = _column([1 / math.sqrt(2), 0, 0, 1 / math.sqrt(2)])
    measurer = Measurer(vector)
    assert set(measurer.probabilistic_map()) == {"00", "11"}
    full = measurer.probabilistic_map(include_impossible_states=True)
    assert full == {"00": pytest.approx(0.5), "01": 0.0, "10": 0.0, "11": pytest.approx(0.5)}


def test_row_vectors_and_registers_are_accepted() -> None:
    """Rows, columns and registers all describe the same vector."""
    row = AmplitudeMatrix.from_rows([[0, 1, 0, 0]])
    assert Measurer(row).probabilistic_map() == {"01": 1.0}
    assert Measurer(Register.from_bits("01")).probabilistic_map() == {"01": 1.0}


def test_non_vector_rejected() -> None:
    """Matrices with several rows and columns cannot be measured."""
    with pytest.raises(InvalidShapeError, match="single row or column"):
        Measurer(AmplitudeMatrix.identity(2))
    with pytest.raises(InvalidShapeError, match="power-of-two"):
        Measurer(AmplitudeMatrix(3, 1))


def test_most_probable_states_with_marginals() -> None:
    """The winning basis state is reported qubit by qubit with marginals."""
    vector = _column([0, math.sqrt(0.2), 0, math.sqrt(0.8)])
    states, probability = Measurer(vector).most_probable_states()
    assert probability == pytest.approx(0.8)
    assert [s.outcome for s in states] == [Outcome.EXCITED, Outcome.EXCITED]
    assert states[0].probability == pytest.approx(0.8)
    assert states[1].probability == 1.0


def test_most_probable_qubits_and_register() -> None:
    """Winning states convert to pure qubits and registers."""
    measurer = Measurer(standard.CNOT().apply(Qubit.excited(), Qubit.grounded()))
    qubits, probability = measurer.most_probable_qubits()
    assert probability == 1.0
    assert qubits == [Qubit.excited(), Qubit.excited()]
    assert measurer.most_probable_register_output() == Register.from_bits("11")
    assert measurer.most_probable_integer_value() == (3, 1.0)


def test_most_probable_state_of_one_qubit() -> None:
    """most_probable_state indexes into the winning basis state."""
    measurer = Measurer(Register.from_bits("100"))
    assert measurer.most_probable_state(0).outcome is Outcome.EXCITED
    assert measurer.most_probable_state(2).outcome is Outcome.GROUNDED
    with pytest.raises(IndexError):
        measurer.most_probable_state(3)


def test_ties_break_uniformly(torch_rng: torch.Generator) -> None:
    """Equally likely winners are all chosen over many draws."""
    measurer = Measurer(Register.hadamard(2), generator=torch_rng)
    counts = Counter(measurer.most_probable_integer_value()[0] for _ in range(400))
    assert set(counts) == {0, 1, 2, 3}
    assert all(count > 50 for count in counts.values())


def test_ties_are_reproducible_with_seed() -> None:
    """The same seed selects the same winners."""
    picks = []
    for _ in range(2):
        generator = torch.Generator().manual_seed(99)
        measurer = Measurer(Register.hadamard(3), generator=generator)
        picks.append([measurer.most_probable_integer_value()[0] for _ in range(10)])
    assert picks[0] == picks[1]


def test_entangled_qubits_of_product_state() -> None:
    """A product state reduces back to its factors."""
    qubits = Measurer(Register([Qubit(0.6, 0.8), Qubit.excited()])).entangled_qubits()
    assert qubits[0] == Qubit(0.6, 0.8)
    assert qubits[1] == Qubit.excited()


def test_entangled_qubits_zero_pair_falls_back() -> None:
    """Cancelling amplitudes yield the equal superposition."""
    vector = _column([0.5, -0.5, 0.5, -0.5])
    first, second = Measurer(vector).entangled_qubits()
    assert first.ground_amplitude == pytest.approx(1 / math.sqrt(2))
    assert first.excited_amplitude == pytest.approx(1 / math.sqrt(2))
    assert second == Qubit(1 / math.sqrt(2), -1 / math.sqrt(2))


def test_amplitudes_map() -> None:
    """Each reported state carries its raw amplitude."""
    vector = _column([0.6j, 0, 0, -0.8])
    entries = Measurer(vector).amplitudes_map()
    assert entries[0] == AmplitudeEntry(state="00", amplitude=0.6j, probability=pytest.approx(0.36))
    assert [e.state for e in entries] == ["00", "11"]
    best = Measurer(vector).most_probable_amplitude()
    assert best.state == "11"
    assert best.amplitude == -0.8


def test_all_zero_vector_has_no_most_probable_state() -> None:
    """Most-probable queries on a zero vector raise a typed error."""
    measurer = Measurer(AmplitudeMatrix(4, 1))
    assert measurer.probabilistic_map() == {}
    with pytest.raises(InvalidShapeError, match="non-negligible probability"):
        measurer.most_probable_states()
    with pytest.raises(InvalidShapeError, match="non-negligible probability"):
        measurer.most_probable_integer_value()
    with pytest.raises(InvalidShapeError, match="non-negligible probability"):
        measurer.most_probable_amplitude()


def test_negligible_amplitudes_count_as_zero() -> None:
    """Probabilities below the absolute tolerance leave nothing to choose."""
    tiny = AmplitudeMatrix.column_vector([1e-7, 1e-7, 1e-7, 1e-7])
    with pytest.raises(InvalidShapeError, match="non-negligible probability"):
        Measurer(tiny).most_probable_qubits()
