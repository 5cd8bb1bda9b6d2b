"""Complex amplitude matrices with switchable dense and sparse storage.

A matrix is either *dense* (a flat ``torch.complex128`` tensor in row-major
order) or *compressed* (a :class:`SparseArray` holding a default value and
the cells that differ from it). Both backings denote the same logical matrix
and every operation accepts either; conversions are lossless.

Products take a sparse path when both operands are compressed, the product of
their defaults is zero and one operand is mostly default-valued. Output rows
are then computed independently by a thread pool and merged by the caller.
All other products are delegated to ``torch.matmul``.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Iterator, List, Optional, Sequence, Tuple, Union

import torch

from qtimeline.config import get_config
from qtimeline.core.device import default_device
from qtimeline.errors import DimensionMismatchError, InvalidShapeError
from qtimeline.logging import get_logger
from qtimeline.maths.approx import approx_equal_tensors
from qtimeline.maths.sparse import SparseArray

logger = get_logger(__name__)

# Output cells below which the sparse product runs on the calling thread.
_PARALLEL_THRESHOLD = 4096

Index = Union[int, Tuple[int, int]]


def _complex_dtype() -> torch.dtype:
    return default_device().complex_dtype


def _torch_device() -> torch.device:
    return default_device().as_torch_device()


def format_amplitude(value: complex, digits: int = 4) -> str:
    """Compact text for an amplitude: ``0``, ``0.7071``, ``-1i``, ``0.5+0.5i``."""
    re = 0.0 if abs(value.real) < 1e-12 else value.real
    im = 0.0 if abs(value.imag) < 1e-12 else value.imag
    if im == 0.0:
        return f"{re:.{digits}g}"
    if re == 0.0:
        return f"{im:.{digits}g}i"
    sign = "+" if im > 0 else "-"
    return f"{re:.{digits}g}{sign}{abs(im):.{digits}g}i"


class AmplitudeMatrix:
    """
    Rectangular grid of complex amplitudes.

    Parameters
    ----------
    rows, columns:
        Positive dimensions.
    fill:
        Value of every cell.
    compressed:
        Use sparse storage (default) or a dense tensor.
    """

    __slots__ = ("_rows", "_columns", "_dense", "_sparse")

    def __init__(
        self,
        rows: int,
        columns: int,
        fill: complex = 0j,
        compressed: bool = True,
    ) -> None:
        if rows < 1 or columns < 1:
            raise InvalidShapeError(
                f"Matrix dimensions must be positive, got {rows}x{columns}."
            )
        self._rows = int(rows)
        self._columns = int(columns)
        self._dense: Optional[torch.Tensor] = None
        self._sparse: Optional[SparseArray] = None
        if compressed:
            self._sparse = SparseArray(self._rows * self._columns, fill)
        else:
            self._dense = torch.full(
                (self._rows * self._columns,),
                complex(fill),
                dtype=_complex_dtype(),
                device=_torch_device(),
            )

    @classmethod
    def _wrap(
        cls,
        rows: int,
        columns: int,
        dense: Optional[torch.Tensor] = None,
        sparse: Optional[SparseArray] = None,
    ) -> "AmplitudeMatrix":
        matrix = cls.__new__(cls)
        matrix._rows = rows
        matrix._columns = columns
        matrix._dense = dense
        matrix._sparse = sparse
        return matrix

    @classmethod
    def from_rows(
        cls, grid: Sequence[Sequence[complex]], compressed: bool = True
    ) -> "AmplitudeMatrix":
        """Build a matrix from a nested row-major literal."""
        if not grid or not grid[0]:
            raise InvalidShapeError("Cannot build a matrix from an empty grid.")
        columns = len(grid[0])
        flat: List[complex] = []
        for r, row in enumerate(grid):
            if len(row) != columns:
                raise InvalidShapeError(
                    f"Row {r} has {len(row)} entries, expected {columns}."
                )
            flat.extend(complex(v) for v in row)

        if compressed:
            return cls._wrap(len(grid), columns, sparse=SparseArray.from_values(flat))
        dense = torch.tensor(flat, dtype=_complex_dtype(), device=_torch_device())
        return cls._wrap(len(grid), columns, dense=dense)

    @classmethod
    def from_tensor(
        cls, tensor: torch.Tensor, compressed: bool = False
    ) -> "AmplitudeMatrix":
        """Wrap a 2D tensor (a 1D tensor becomes a column vector)."""
        if tensor.dim() == 1:
            tensor = tensor.reshape(-1, 1)
        if tensor.dim() != 2:
            raise InvalidShapeError(
                f"Expected a 1D or 2D tensor, got shape {tuple(tensor.shape)}."
            )
        rows, columns = int(tensor.shape[0]), int(tensor.shape[1])
        flat = tensor.to(dtype=_complex_dtype(), device=_torch_device()).reshape(-1)
        matrix = cls._wrap(rows, columns, dense=flat.clone())
        return matrix.compressed() if compressed else matrix

    @classmethod
    def column_vector(
        cls, values: Sequence[complex], compressed: bool = False
    ) -> "AmplitudeMatrix":
        return cls.from_rows([[v] for v in values], compressed=compressed)

    @classmethod
    def identity(cls, size: int, compressed: bool = True) -> "AmplitudeMatrix":
        if compressed:
            matrix = cls(size, size, 0j, compressed=True)
            for k in range(size):
                matrix._sparse[k * size + k] = 1.0
            return matrix
        eye = torch.eye(size, dtype=_complex_dtype(), device=_torch_device())
        return cls._wrap(size, size, dense=eye.reshape(-1))

    @property
    def rows(self) -> int:
        return self._rows

    @property
    def columns(self) -> int:
        return self._columns

    @property
    def shape(self) -> Tuple[int, int]:
        return (self._rows, self._columns)

    @property
    def size(self) -> int:
        return self._rows * self._columns

    @property
    def is_compressed(self) -> bool:
        return self._sparse is not None

    @property
    def is_square(self) -> bool:
        return self._rows == self._columns

    @property
    def is_vector(self) -> bool:
        return self._rows == 1 or self._columns == 1

    @property
    def default(self) -> complex:
        """Default value of a compressed matrix; 0 for dense storage."""
        return self._sparse.default if self._sparse is not None else 0j

    @property
    def fill_ratio(self) -> float:
        """Fraction of explicitly stored cells (1.0 for dense storage)."""
        return self._sparse.fill_ratio if self._sparse is not None else 1.0

    def compressed(self) -> "AmplitudeMatrix":
        """Return a sparse copy of this matrix."""
        if self._sparse is not None:
            return self._wrap(self._rows, self._columns, sparse=self._sparse.copy())
        sparse = SparseArray.from_values(self._dense.tolist())
        return self._wrap(self._rows, self._columns, sparse=sparse)

    def uncompressed(self) -> "AmplitudeMatrix":
        """Return a dense copy of this matrix."""
        return self._wrap(self._rows, self._columns, dense=self._flat_tensor().clone())

    def copy(self) -> "AmplitudeMatrix":
        if self._sparse is not None:
            return self._wrap(self._rows, self._columns, sparse=self._sparse.copy())
        return self._wrap(self._rows, self._columns, dense=self._dense.clone())

    def _flat_tensor(self) -> torch.Tensor:
        if self._dense is not None:
            return self._dense
        flat = torch.full(
            (self.size,),
            self._sparse.default,
            dtype=_complex_dtype(),
            device=_torch_device(),
        )
        entries = self._sparse.entries
        if entries:
            index = torch.tensor(list(entries.keys()), dtype=torch.long)
            values = torch.tensor(
                list(entries.values()), dtype=_complex_dtype(), device=_torch_device()
            )
            flat[index] = values
        return flat

    def _matrix_tensor(self) -> torch.Tensor:
        """2D view of the amplitudes; shares memory with dense storage."""
        return self._flat_tensor().view(self._rows, self._columns)

    def to_tensor(self) -> torch.Tensor:
        """Return the amplitudes as a fresh ``(rows, columns)`` tensor."""
        return self._matrix_tensor().clone()

    def flat(self) -> List[complex]:
        """Row-major list of all amplitudes."""
        if self._sparse is not None:
            return self._sparse.to_list()
        return self._dense.tolist()

    def tolist(self) -> List[List[complex]]:
        return list(self)

    def _linear_index(self, key: Index) -> int:
        if isinstance(key, tuple):
            row, column = key
            if not (0 <= row < self._rows and 0 <= column < self._columns):
                raise IndexError(
                    f"Cell ({row}, {column}) is out of range for a "
                    f"{self._rows}x{self._columns} matrix."
                )
            return row * self._columns + column
        if not 0 <= key < self.size:
            raise IndexError(
                f"Raw index {key} is out of range for a matrix of {self.size} cells."
            )
        return key

    def __getitem__(self, key: Index) -> complex:
        index = self._linear_index(key)
        if self._sparse is not None:
            return self._sparse[index]
        return complex(self._dense[index].item())

    def __setitem__(self, key: Index, value: complex) -> None:
        index = self._linear_index(key)
        if self._sparse is not None:
            self._sparse[index] = value
        else:
            self._dense[index] = complex(value)

    def row(self, index: int) -> List[complex]:
        if not 0 <= index < self._rows:
            raise IndexError(f"Row {index} is out of range (rows={self._rows}).")
        start = index * self._columns
        return [self[start + c] for c in range(self._columns)]

    def column(self, index: int) -> List[complex]:
        if not 0 <= index < self._columns:
            raise IndexError(
                f"Column {index} is out of range (columns={self._columns})."
            )
        return [self[r * self._columns + index] for r in range(self._rows)]

    def set_row(self, index: int, values: Sequence[complex]) -> None:
        if len(values) != self._columns:
            raise DimensionMismatchError(
                f"Row needs {self._columns} values, got {len(values)}."
            )
        for c, value in enumerate(values):
            self[index, c] = value

    def set_column(self, index: int, values: Sequence[complex]) -> None:
        if len(values) != self._rows:
            raise DimensionMismatchError(
                f"Column needs {self._rows} values, got {len(values)}."
            )
        for r, value in enumerate(values):
            self[r, index] = value

    def __iter__(self) -> Iterator[List[complex]]:
        for r in range(self._rows):
            yield self.row(r)

    def __matmul__(self, other: "AmplitudeMatrix") -> "AmplitudeMatrix":
        if not isinstance(other, AmplitudeMatrix):
            return NotImplemented
        return multiply(self, other)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AmplitudeMatrix):
            return NotImplemented
        if self.shape != other.shape:
            return False
        return approx_equal_tensors(self._flat_tensor(), other._flat_tensor())

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        storage = "compressed" if self.is_compressed else "dense"
        return f"AmplitudeMatrix({self._rows}x{self._columns}, {storage})"

    def __str__(self) -> str:
        cells = [[format_amplitude(v) for v in row] for row in self]
        width = max(len(cell) for row in cells for cell in row)
        lines = []
        for r, row in enumerate(cells):
            if self._rows == 1:
                left, right = "(", ")"
            elif r == 0:
                left, right = "⎛", "⎞"
            elif r == self._rows - 1:
                left, right = "⎝", "⎠"
            else:
                left, right = "⎜", "⎟"
            body = "  ".join(cell.rjust(width) for cell in row)
            lines.append(f"{left} {body} {right}")
        return "\n".join(lines)


def _use_sparse_path(left: AmplitudeMatrix, right: AmplitudeMatrix) -> bool:
    if not (left.is_compressed and right.is_compressed):
        return False
    if left.default * right.default != 0:
        return False
    ratio = get_config().sparse_fill_ratio
    return left.fill_ratio <= ratio or right.fill_ratio <= ratio


def _sparse_multiply(left: AmplitudeMatrix, right: AmplitudeMatrix) -> AmplitudeMatrix:
    left_default = left.default
    right_default = right.default

    left_rows: List[Dict[int, complex]] = [{} for _ in range(left.rows)]
    for index, value in left._sparse.entries.items():
        r, c = divmod(index, left.columns)
        left_rows[r][c] = value

    right_columns: List[Dict[int, complex]] = [{} for _ in range(right.columns)]
    for index, value in right._sparse.entries.items():
        r, c = divmod(index, right.columns)
        right_columns[c][r] = value

    def row_product(i: int) -> Dict[int, complex]:
        row = left_rows[i]
        if left_default == 0 and not row:
            return {}
        cells: Dict[int, complex] = {}
        for j, column in enumerate(right_columns):
            if right_default == 0 and not column:
                continue
            # One of the defaults is zero, so summing over the explicit
            # entries of that side covers every non-zero term.
            if left_default == 0 and (right_default != 0 or len(row) <= len(column)):
                total = sum(v * column.get(k, right_default) for k, v in row.items())
            else:
                total = sum(row.get(k, left_default) * v for k, v in column.items())
            if total != 0:
                cells[j] = complex(total)
        return cells

    if left.rows * right.columns < _PARALLEL_THRESHOLD:
        row_results = [row_product(i) for i in range(left.rows)]
    else:
        with ThreadPoolExecutor(max_workers=get_config().max_workers) as executor:
            row_results = list(executor.map(row_product, range(left.rows)))

    result = SparseArray(left.rows * right.columns, 0j)
    for i, cells in enumerate(row_results):
        base = i * right.columns
        for j, value in cells.items():
            result[base + j] = value
    if result.should_recompress():
        result.recompress()

    return AmplitudeMatrix._wrap(left.rows, right.columns, sparse=result)


def multiply(left: AmplitudeMatrix, right: AmplitudeMatrix) -> AmplitudeMatrix:
    """
    Matrix product ``left @ right``.

    Raises
    ------
    DimensionMismatchError
        If ``left.columns != right.rows``.
    """
    if left.columns != right.rows:
        raise DimensionMismatchError(
            f"Cannot multiply a {left.rows}x{left.columns} matrix by a "
            f"{right.rows}x{right.columns} matrix."
        )

    if _use_sparse_path(left, right):
        logger.debug(
            "sparse product %dx%d @ %dx%d", left.rows, left.columns, right.rows, right.columns
        )
        return _sparse_multiply(left, right)

    product = torch.matmul(left._matrix_tensor(), right._matrix_tensor())
    return AmplitudeMatrix._wrap(left.rows, right.columns, dense=product.reshape(-1))


def transpose(matrix: AmplitudeMatrix) -> AmplitudeMatrix:
    """Swap rows and columns, keeping the storage kind."""
    rows, columns = matrix.rows, matrix.columns
    if matrix.is_compressed:
        result = SparseArray(matrix.size, matrix.default)
        for index, value in matrix._sparse.entries.items():
            r, c = divmod(index, columns)
            result[c * rows + r] = value
        return AmplitudeMatrix._wrap(columns, rows, sparse=result)
    flipped = matrix._matrix_tensor().transpose(0, 1).contiguous().reshape(-1)
    return AmplitudeMatrix._wrap(columns, rows, dense=flipped)


def adjoint(matrix: AmplitudeMatrix) -> AmplitudeMatrix:
    """Conjugate transpose, keeping the storage kind."""
    flipped = transpose(matrix)
    if flipped.is_compressed:
        result = SparseArray(flipped.size, flipped.default.conjugate())
        for index, value in flipped._sparse.entries.items():
            result[index] = value.conjugate()
        return AmplitudeMatrix._wrap(flipped.rows, flipped.columns, sparse=result)
    return AmplitudeMatrix._wrap(
        flipped.rows, flipped.columns, dense=flipped._dense.conj().resolve_conj()
    )


def tensor_product(left: AmplitudeMatrix, right: AmplitudeMatrix) -> AmplitudeMatrix:
    """
    Kronecker product: cell ``(p*r+v, q*s+w)`` is ``left[r, s] * right[v, w]``
    for ``p x q = right.shape``.
    """
    product = torch.kron(left._matrix_tensor(), right._matrix_tensor())
    result = AmplitudeMatrix._wrap(
        left.rows * right.rows, left.columns * right.columns, dense=product.reshape(-1)
    )
    if left.is_compressed and right.is_compressed:
        return result.compressed()
    return result


def matrix_power(matrix: AmplitudeMatrix, exponent: int) -> AmplitudeMatrix:
    """
    Raise a square matrix to a non-negative integer power by repeated squaring.

    Raises
    ------
    InvalidShapeError
        If the matrix is not square.
    ValueError
        If the exponent is negative.
    """
    if not matrix.is_square:
        raise InvalidShapeError(
            f"matrix_power requires a square matrix, got {matrix.rows}x{matrix.columns}."
        )
    if exponent < 0:
        raise ValueError(f"Exponent must be >= 0, got {exponent}.")
    if exponent == 0:
        return AmplitudeMatrix.identity(matrix.rows, compressed=matrix.is_compressed)
    if exponent == 1:
        return matrix.copy()

    result: Optional[AmplitudeMatrix] = None
    base = matrix
    remaining = exponent
    while remaining > 0:
        if remaining & 1:
            result = base if result is None else multiply(result, base)
        remaining >>= 1
        if remaining:
            base = multiply(base, base)
    return result


__all__ = [
    "AmplitudeMatrix",
    "format_amplitude",
    "multiply",
    "transpose",
    "adjoint",
    "tensor_product",
    "matrix_power",
]
