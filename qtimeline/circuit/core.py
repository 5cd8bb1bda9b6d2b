"""Circuit timelines and their evaluation."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple, Union

from qtimeline.config import get_config
from qtimeline.diagnostics.core import assert_normalized
from qtimeline.diagnostics.debug_mode import is_debug_enabled
from qtimeline.errors import (
    ArityMismatchError,
    DimensionMismatchError,
    IndexOutOfRangeError,
    TimelineCollisionError,
)
from qtimeline.gates.base import GateKind, Transformer, TransformerMixin, TransformInput, as_column
from qtimeline.gates.derived import adjoint_gate
from qtimeline.logging import get_logger
from qtimeline.maths.matrix import AmplitudeMatrix, multiply
from qtimeline.circuit.expansion import apply_to_state, expand_matrix

logger = get_logger(__name__)


@dataclass(frozen=True)
class TimelineEntry:
    """
    One scheduled application of a transformer.

    Attributes
    ----------
    transformer:
        Gate or nested circuit.
    indices:
        Target qubits; their order maps onto the transformer's inputs.
    """

    transformer: Transformer
    indices: Tuple[int, ...]


class Circuit(TransformerMixin):
    """
    A named set of gate applications scheduled on integer time steps.

    Entries sharing a time step must act on disjoint qubits. The total
    transformation matrix is the product of every lifted entry in ascending
    time order; it is cached and rebuilt after any change to the timeline.
    """

    def __init__(self, name: str, n_inputs: int, n_outputs: Optional[int] = None) -> None:
        """Initialize an empty circuit on ``n_inputs`` qubits."""
        max_qubits = get_config().max_qubits
        if n_inputs < 1 or n_inputs > max_qubits:
            raise ValueError(
                f"Circuit requires 1 <= n_inputs <= {max_qubits}, got {n_inputs}."
            )
        self._name = name
        self._n_inputs = int(n_inputs)
        self._n_outputs = int(n_inputs if n_outputs is None else n_outputs)
        self._timeline: Dict[int, List[TimelineEntry]] = {}
        self._matrix_cache: Optional[AmplitudeMatrix] = None

    @property
    def name(self) -> str:
        return self._name

    @property
    def n_inputs(self) -> int:
        return self._n_inputs

    @property
    def n_outputs(self) -> int:
        return self._n_outputs

    @property
    def kind(self) -> GateKind:
        return GateKind.CIRCUIT

    @property
    def timeline(self) -> Dict[int, Tuple[TimelineEntry, ...]]:
        """Read-only snapshot of the schedule, keyed by time step."""
        return {time: tuple(entries) for time, entries in sorted(self._timeline.items())}

    def _invalidate(self) -> None:
        self._matrix_cache = None

    def append(
        self,
        transformer: Transformer,
        time: int,
        indices: Union[int, Sequence[int]],
    ) -> "Circuit":
        """
        Schedule ``transformer`` on ``indices`` at step ``time``.

        Raises
        ------
        IndexOutOfRangeError
            If an index does not address a qubit of this circuit.
        ArityMismatchError
            If the number of indices differs from the transformer's inputs.
        TimelineCollisionError
            If the indices repeat or overlap another entry at ``time``.
        """
        targets = (int(indices),) if isinstance(indices, int) else tuple(int(q) for q in indices)
        for q in targets:
            if q < 0 or q >= self._n_inputs:
                raise IndexOutOfRangeError(
                    f"Qubit index {q} is out of range for circuit {self._name} "
                    f"(n_inputs={self._n_inputs})."
                )
        if len(targets) != transformer.n_inputs:
            raise ArityMismatchError(
                f"{transformer.name} takes {transformer.n_inputs} inputs, "
                f"got indices {list(targets)}."
            )
        if len(set(targets)) != len(targets):
            raise TimelineCollisionError(
                f"Indices {list(targets)} for {transformer.name} repeat a qubit."
            )
        if transformer is self:
            raise ValueError(f"Circuit {self._name} cannot contain itself.")

        scheduled = self._timeline.setdefault(int(time), [])
        busy = {q for entry in scheduled for q in entry.indices}
        overlap = busy.intersection(targets)
        if overlap:
            raise TimelineCollisionError(
                f"Qubits {sorted(overlap)} are already used at time {time} "
                f"in circuit {self._name}."
            )

        scheduled.append(TimelineEntry(transformer=transformer, indices=targets))
        self._invalidate()
        return self

    def extend(
        self, entries: Iterable[Tuple[Transformer, int, Union[int, Sequence[int]]]]
    ) -> "Circuit":
        """Append several ``(transformer, time, indices)`` entries."""
        for transformer, time, indices in entries:
            self.append(transformer, time, indices)
        return self

    def remove(self, time: int, position: int) -> TimelineEntry:
        """Remove and return the entry at ``position`` within step ``time``."""
        if time not in self._timeline:
            raise KeyError(f"No entries at time {time} in circuit {self._name}.")
        scheduled = self._timeline[time]
        entry = scheduled.pop(position)
        if not scheduled:
            del self._timeline[time]
        self._invalidate()
        return entry

    def clear_gates(self, index: int) -> "Circuit":
        """Remove every entry acting on qubit ``index``."""
        for time in list(self._timeline):
            kept = [e for e in self._timeline[time] if index not in e.indices]
            if kept:
                self._timeline[time] = kept
            else:
                del self._timeline[time]
        self._invalidate()
        return self

    def entries(self) -> Iterator[Tuple[int, TimelineEntry]]:
        """Every entry with its time, in ascending time order."""
        for time in sorted(self._timeline):
            for entry in self._timeline[time]:
                yield time, entry

    def __len__(self) -> int:
        return self.count_gates()

    def count_gates(self) -> int:
        return sum(len(entries) for entries in self._timeline.values())

    def count_steps(self) -> int:
        return len(self._timeline)

    @property
    def matrix(self) -> AmplitudeMatrix:
        return self.transformation_matrix

    @property
    def transformation_matrix(self) -> AmplitudeMatrix:
        """
        Product of all lifted entries.

        Returns a copy; writing to it leaves the circuit unchanged.
        """
        return self._total_matrix().copy()

    def _total_matrix(self) -> AmplitudeMatrix:
        """The cached product, built on first use after a change."""
        if self._matrix_cache is None:
            logger.debug(
                "building %dx%d matrix of circuit %s",
                1 << self._n_inputs,
                1 << self._n_inputs,
                self._name,
            )
            total = AmplitudeMatrix.identity(1 << self._n_inputs, compressed=False)
            for _, entry in self.entries():
                lifted = expand_matrix(self._n_inputs, entry.transformer.matrix, entry.indices)
                total = multiply(lifted, total)
            self._matrix_cache = total
        return self._matrix_cache

    def _input_vector(self, input: TransformInput) -> AmplitudeMatrix:
        vector = as_column(input)
        if vector.columns != 1 or vector.rows < 2 or vector.rows % 2:
            raise DimensionMismatchError(
                f"Circuit {self._name} expects a column of 2**{self._n_inputs} "
                f"amplitudes, got a {vector.rows}x{vector.columns} matrix."
            )
        n_qubits = int(math.log2(vector.rows))
        if n_qubits != self._n_inputs or 1 << n_qubits != vector.rows:
            raise DimensionMismatchError(
                f"Circuit {self._name} acts on {self._n_inputs} qubits, "
                f"the input encodes {math.log2(vector.rows):g}."
            )
        return vector

    def transform(
        self,
        input: TransformInput,
        from_step: int = 0,
        up_to_step: Optional[int] = None,
    ) -> AmplitudeMatrix:
        """
        Evolve an amplitude vector through the circuit.

        Parameters
        ----------
        input:
            Register, qubit, or amplitude row/column of ``2**n_inputs`` entries.
        from_step, up_to_step:
            Positions (not time values) of the first and last steps to apply,
            counted over the sorted time steps. The default applies all of
            them using the cached total matrix; any other range is applied
            entry by entry without building the full matrix.

        Raises
        ------
        DimensionMismatchError
            If the input does not encode ``n_inputs`` qubits.
        """
        vector = self._input_vector(input)
        last_step = self.count_steps() - 1
        if up_to_step is None:
            up_to_step = last_step

        if from_step <= 0 and up_to_step >= last_step:
            output = multiply(self._total_matrix(), vector)
        else:
            output = self._evolve_vector(vector, from_step, up_to_step)

        if is_debug_enabled():
            assert_normalized(output.to_tensor())
        return output

    def evolve(
        self,
        input: TransformInput,
        from_step: int = 0,
        up_to_step: Optional[int] = None,
    ) -> AmplitudeMatrix:
        """
        Like :meth:`transform`, but always applies entries one at a time to
        the state vector, so the ``2**n x 2**n`` matrix is never built.
        """
        vector = self._input_vector(input)
        if up_to_step is None:
            up_to_step = self.count_steps() - 1
        output = self._evolve_vector(vector, from_step, up_to_step)
        if is_debug_enabled():
            assert_normalized(output.to_tensor())
        return output

    def _evolve_vector(
        self, vector: AmplitudeMatrix, from_step: int, up_to_step: int
    ) -> AmplitudeMatrix:
        state = vector.to_tensor().reshape(-1)
        for position, time in enumerate(sorted(self._timeline)):
            if position < from_step or position > up_to_step:
                continue
            for entry in self._timeline[time]:
                gate = entry.transformer.matrix.to_tensor()
                state = apply_to_state(state, gate, entry.indices, self._n_inputs)
        return AmplitudeMatrix.from_tensor(state)

    def all_transformers(self) -> List[Transformer]:
        """Leaf transformers used anywhere in the circuit, unique by name."""
        seen: Dict[str, Transformer] = {}
        self._collect_leaves(seen)
        return list(seen.values())

    def _collect_leaves(self, seen: Dict[str, Transformer]) -> None:
        for _, entry in self.entries():
            transformer = entry.transformer
            if isinstance(transformer, Circuit):
                transformer._collect_leaves(seen)
            elif transformer.name not in seen:
                seen[transformer.name] = transformer

    def copy(self, name: Optional[str] = None) -> "Circuit":
        """Shallow copy of the timeline under an optional new name."""
        clone = Circuit(name or self._name, self._n_inputs, self._n_outputs)
        clone._timeline = {time: list(entries) for time, entries in self._timeline.items()}
        clone._matrix_cache = self._matrix_cache
        return clone

    def inverse(self) -> "Circuit":
        """
        The circuit undoing this one: steps in reverse order, each entry
        replaced by its adjoint.
        """
        inverted = Circuit(f"|Inv {self._name.strip('|')}|", self._n_inputs, self._n_outputs)
        if not self._timeline:
            return inverted
        last = max(self._timeline)
        first = min(self._timeline)
        for time, entries in self._timeline.items():
            for entry in entries:
                transformer = entry.transformer
                if isinstance(transformer, Circuit):
                    transformer = transformer.inverse()
                else:
                    transformer = adjoint_gate(transformer)
                inverted.append(transformer, last + first - time, entry.indices)
        return inverted

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Circuit):
            return NotImplemented
        return (
            self._name == other._name
            and self._n_inputs == other._n_inputs
            and self._n_outputs == other._n_outputs
            and self._total_matrix() == other._total_matrix()
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return (
            f"Circuit({self._name!r}, n_inputs={self._n_inputs}, "
            f"gates={self.count_gates()}, steps={self.count_steps()})"
        )

    def to_text(self) -> str:
        """One line per time step listing its entries."""
        lines = [f"{self._name} ({self._n_inputs} qubits)"]
        for time in sorted(self._timeline):
            cells = ", ".join(
                f"{entry.transformer.name}{list(entry.indices)}"
                for entry in self._timeline[time]
            )
            lines.append(f"  t={time}: {cells}")
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.to_text()


__all__ = ["TimelineEntry", "Circuit"]
