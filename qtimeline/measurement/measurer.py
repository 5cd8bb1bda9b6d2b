"""Turning amplitude vectors into classical outcomes.

Bitstring keys list qubit 0 first, matching the register convention: in an
``n``-qubit vector, index ``i`` is keyed by ``format(i, "0{n}b")``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple, Union

import torch

from qtimeline.errors import InvalidShapeError
from qtimeline.maths.approx import approx_equal, approx_zero, snap_probability
from qtimeline.maths.matrix import AmplitudeMatrix
from qtimeline.state.qubit import Qubit, QubitState
from qtimeline.state.register import Register


@dataclass(frozen=True)
class AmplitudeEntry:
    """A basis state with its raw amplitude and probability."""

    state: str
    amplitude: complex
    probability: float


def _infer_num_qubits(length: int) -> int:
    if length < 1 or length & (length - 1):
        raise InvalidShapeError(
            f"An amplitude vector needs a power-of-two length, got {length}."
        )
    return length.bit_length() - 1


class Measurer:
    """
    Measurement statistics of one amplitude vector.

    Parameters
    ----------
    source:
        A single-row or single-column amplitude matrix, or a register.
    generator:
        Random source for tie-breaking; None uses torch's global generator.

    Raises
    ------
    InvalidShapeError
        If the matrix is not a vector of power-of-two length.
    """

    def __init__(
        self,
        source: Union[AmplitudeMatrix, Register],
        generator: Optional[torch.Generator] = None,
    ) -> None:
        if isinstance(source, Register):
            source = source.matrix_representation()
        if not source.is_vector:
            raise InvalidShapeError(
                f"Measurer needs a single row or column, got a "
                f"{source.rows}x{source.columns} matrix."
            )
        self._amplitudes: List[complex] = source.flat()
        self._n_qubits = _infer_num_qubits(len(self._amplitudes))
        self._generator = generator

    @property
    def n_qubits(self) -> int:
        return self._n_qubits

    def _key(self, index: int) -> str:
        return format(index, f"0{self._n_qubits}b") if self._n_qubits else ""

    def probabilistic_map(self, include_impossible_states: bool = False) -> Dict[str, float]:
        """
        Probability of each basis state, keyed by bitstring.

        A state whose probability is approximately 1 is returned alone unless
        ``include_impossible_states`` is set; approximately-zero states are
        dropped unless it is set. Remaining values within ``snap_tol`` of 0
        or 1 are snapped.
        """
        result: Dict[str, float] = {}
        for index, amplitude in enumerate(self._amplitudes):
            probability = abs(amplitude) ** 2
            key = self._key(index)
            if probability > 0.0 and approx_equal(probability, 1.0):
                if not include_impossible_states:
                    return {key: 1.0}
                result[key] = probability
            elif not approx_zero(probability):
                result[key] = probability
            elif include_impossible_states:
                result[key] = 0.0

        return {key: snap_probability(p) for key, p in result.items()}

    def _possible_states(self) -> Dict[str, float]:
        probabilities = self.probabilistic_map()
        if not probabilities:
            raise InvalidShapeError(
                f"Measurer over {self._n_qubits} qubits has no basis state with "
                f"a non-negligible probability; the amplitudes are all zero."
            )
        return probabilities

    def _choose_most_probable(self) -> Tuple[str, float, Dict[str, float]]:
        probabilities = self._possible_states()
        best = max(probabilities.values())
        tied = [key for key, p in probabilities.items() if approx_equal(p, best)]
        if len(tied) == 1:
            return tied[0], best, probabilities
        choice = int(torch.randint(len(tied), (1,), generator=self._generator).item())
        return tied[choice], best, probabilities

    def most_probable_states(self) -> Tuple[List[QubitState], float]:
        """
        Per-qubit outcome of the most probable basis state.

        Ties on the maximum probability are broken uniformly at random. Each
        returned state carries its marginal probability, the summed
        probability of every basis state agreeing on that qubit.

        Returns
        -------
        states:
            One outcome per qubit, qubit 0 first.
        probability:
            Probability of the chosen basis state.
        """
        key, best, probabilities = self._choose_most_probable()
        states: List[QubitState] = []
        for position, bit in enumerate(key):
            marginal = sum(p for k, p in probabilities.items() if k[position] == bit)
            marginal = snap_probability(marginal)
            if bit == "0":
                states.append(QubitState.grounded(marginal))
            else:
                states.append(QubitState.excited(marginal))
        return states, best

    def most_probable_qubits(self) -> Tuple[List[Qubit], float]:
        states, probability = self.most_probable_states()
        return [state.to_qubit() for state in states], probability

    def most_probable_register_output(self) -> Register:
        qubits, _ = self.most_probable_qubits()
        return Register(qubits)

    def most_probable_state(self, qubit_index: int) -> QubitState:
        """Outcome of one qubit within the most probable basis state."""
        if not 0 <= qubit_index < self._n_qubits:
            raise IndexError(
                f"Qubit {qubit_index} is out of range for {self._n_qubits} qubits."
            )
        states, _ = self.most_probable_states()
        return states[qubit_index]

    def most_probable_integer_value(self) -> Tuple[int, float]:
        """The most probable basis state as an integer, with its probability."""
        key, best, _ = self._choose_most_probable()
        return (int(key, 2) if key else 0), best

    def entangled_qubits(self) -> List[Qubit]:
        """
        Approximate single-qubit view of every qubit.

        For each qubit, the amplitudes of basis states with that bit 0 and 1
        are summed and the pair renormalized. This is a diagnostic reduction,
        not a partial trace; a zero pair falls back to the equal superposition.
        """
        qubits: List[Qubit] = []
        for position in range(self._n_qubits):
            shift = self._n_qubits - 1 - position
            alpha = 0j
            beta = 0j
            for index, amplitude in enumerate(self._amplitudes):
                if (index >> shift) & 1:
                    beta += amplitude
                else:
                    alpha += amplitude
            norm = math.sqrt(abs(alpha) ** 2 + abs(beta) ** 2)
            if approx_zero(norm):
                qubits.append(Qubit.superposed())
            else:
                qubits.append(Qubit(alpha / norm, beta / norm))
        return qubits

    def amplitudes_map(self) -> List[AmplitudeEntry]:
        """Raw amplitude and probability of each state in the probability map."""
        probabilities = self.probabilistic_map()
        return [
            AmplitudeEntry(state=key, amplitude=self._amplitudes[int(key, 2) if key else 0], probability=p)
            for key, p in probabilities.items()
        ]

    def most_probable_amplitude(self) -> AmplitudeEntry:
        self._possible_states()
        return max(self.amplitudes_map(), key=lambda entry: entry.probability)


__all__ = ["AmplitudeEntry", "Measurer"]
