"""Default-plus-exceptions storage for mostly uniform amplitude grids."""

from __future__ import annotations

from collections import Counter
from typing import Dict, Iterable, Iterator, List


class SparseArray:
    """
    Fixed-length sequence stored as a default value plus explicit entries.

    Only cells whose value differs from ``default`` live in ``entries``.
    Writing the default into a cell removes its entry, so the mapping never
    holds redundant values.
    """

    __slots__ = ("_count", "_default", "_entries")

    def __init__(self, count: int, default: complex = 0j) -> None:
        if count < 0:
            raise ValueError(f"SparseArray length must be >= 0, got {count}.")
        self._count = int(count)
        self._default = complex(default)
        self._entries: Dict[int, complex] = {}

    @classmethod
    def from_values(cls, values: Iterable[complex]) -> "SparseArray":
        """Build an array from explicit values, choosing the most common default."""
        items = [complex(v) for v in values]
        array = cls(len(items), items[0] if items else 0j)
        for index, value in enumerate(items):
            if value != array._default:
                array._entries[index] = value
        array.recompress()
        return array

    @property
    def default(self) -> complex:
        return self._default

    @property
    def entries(self) -> Dict[int, complex]:
        """Read-only view of the explicit cells (do not mutate)."""
        return self._entries

    @property
    def explicit_count(self) -> int:
        return len(self._entries)

    @property
    def fill_ratio(self) -> float:
        if self._count == 0:
            return 0.0
        return len(self._entries) / self._count

    def __len__(self) -> int:
        return self._count

    def _check_index(self, index: int) -> None:
        if index < 0 or index >= self._count:
            raise IndexError(
                f"Index {index} is out of range for SparseArray of length {self._count}."
            )

    def __getitem__(self, index: int) -> complex:
        self._check_index(index)
        return self._entries.get(index, self._default)

    def __setitem__(self, index: int, value: complex) -> None:
        self._check_index(index)
        value = complex(value)
        if value == self._default:
            self._entries.pop(index, None)
        else:
            self._entries[index] = value

    def __iter__(self) -> Iterator[complex]:
        for index in range(self._count):
            yield self._entries.get(index, self._default)

    def to_list(self) -> List[complex]:
        return list(self)

    def should_recompress(self) -> bool:
        """True when more than half of the cells are explicit."""
        return len(self._entries) * 2 > self._count

    def recompress(self) -> None:
        """Make the most frequent value the default and drop redundant entries."""
        if not self._entries:
            return

        frequencies = Counter(self._entries.values())
        candidate, occurrences = frequencies.most_common(1)[0]
        default_occurrences = self._count - len(self._entries)
        if occurrences <= default_occurrences:
            return

        old_default = self._default
        rebuilt: Dict[int, complex] = {}
        for index in range(self._count):
            value = self._entries.get(index, old_default)
            if value != candidate:
                rebuilt[index] = value
        self._default = candidate
        self._entries = rebuilt

    def copy(self) -> "SparseArray":
        clone = SparseArray(self._count, self._default)
        clone._entries = dict(self._entries)
        return clone

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SparseArray):
            return NotImplemented
        return self._count == other._count and self.to_list() == other.to_list()

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return (
            f"SparseArray(count={self._count}, default={self._default!r}, "
            f"explicit={len(self._entries)})"
        )


__all__ = ["SparseArray"]
