"""Schema definition and validation for serialized circuits.

Schema Structure:
    {
        "name": <string>,
        "inputs": <integer>,
        "outputs": <integer>,
        "timeline": [
            {"name": <string>, "indices": [<integer>, ...], "time": <integer>},
            {"name": <string>, "inputs": <integer>, "outputs": <integer>,
             "implementation": <nested circuit object>,
             "indices": [<integer>, ...], "time": <integer>},
            ...
        ],
        "transformers": [
            {"name": <string>, "inputs": <integer>, "outputs": <integer>,
             "matrix": {"rows": <integer>, "columns": <integer>,
                        "contents": [{"re": <float>, "im": <float>}, ...]}},
            ...
        ]
    }

``transformers`` is required at the top level and lists every leaf gate used
anywhere in the circuit, nested implementations included. Nested
implementations may omit it. Matrix contents are row-major.
"""

from __future__ import annotations

from typing import Any, Optional

from qtimeline.errors import CircuitFormatError


def circuit_format_schema() -> dict:
    """
    Return a structural description of the serialized circuit format.

    This is not a full JSON Schema document; it lists fields, their types
    and whether they are required.

    Returns
    -------
    dict
        Field definitions keyed by field name.
    """
    matrix = {
        "rows": {"type": "integer", "required": True, "min": 1},
        "columns": {"type": "integer", "required": True, "min": 1},
        "contents": {
            "type": "list",
            "required": True,
            "description": "rows*columns entries in row-major order",
            "items": {
                "re": {"type": "number", "required": True},
                "im": {"type": "number", "required": True},
            },
        },
    }
    return {
        "name": {"type": "string", "required": True},
        "inputs": {"type": "integer", "required": True, "min": 1},
        "outputs": {"type": "integer", "required": True, "min": 1},
        "timeline": {
            "type": "list",
            "required": True,
            "items": {
                "name": {"type": "string", "required": True},
                "indices": {"type": "list", "required": True, "items": {"type": "integer", "min": 0}},
                "time": {"type": "integer", "required": True},
                "inputs": {"type": "integer", "required": False},
                "outputs": {"type": "integer", "required": False},
                "implementation": {
                    "type": "dict",
                    "required": False,
                    "description": "Nested circuit object of the same shape",
                },
            },
        },
        "transformers": {
            "type": "list",
            "required": True,
            "description": "Every distinct leaf gate, keyed by unique name",
            "items": {
                "name": {"type": "string", "required": True},
                "inputs": {"type": "integer", "required": True, "min": 1},
                "outputs": {"type": "integer", "required": True, "min": 1},
                "matrix": {"type": "dict", "required": True, "fields": matrix},
            },
        },
    }


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _require(obj: dict, field: str, where: str) -> Any:
    if field not in obj:
        raise CircuitFormatError(f"{where} is missing required field '{field}'.")
    return obj[field]


def _require_int(obj: dict, field: str, where: str, minimum: Optional[int] = 1) -> int:
    value = _require(obj, field, where)
    if not _is_int(value):
        raise CircuitFormatError(
            f"{where}: field '{field}' must be an integer, got {type(value).__name__}."
        )
    if minimum is not None and value < minimum:
        raise CircuitFormatError(f"{where}: field '{field}' must be >= {minimum}, got {value}.")
    return value


def _require_str(obj: dict, field: str, where: str) -> str:
    value = _require(obj, field, where)
    if not isinstance(value, str):
        raise CircuitFormatError(f"{where}: field '{field}' must be a string.")
    return value


def _require_list(obj: dict, field: str, where: str) -> list:
    value = _require(obj, field, where)
    if not isinstance(value, list):
        raise CircuitFormatError(f"{where}: field '{field}' must be a list.")
    return value


def validate_matrix_dict(obj: Any, where: str = "matrix") -> None:
    """Check a serialized matrix: positive dimensions and ``rows*columns`` entries."""
    if not isinstance(obj, dict):
        raise CircuitFormatError(f"{where} must be a dictionary object.")
    rows = _require_int(obj, "rows", where)
    columns = _require_int(obj, "columns", where)
    contents = _require_list(obj, "contents", where)
    if len(contents) != rows * columns:
        raise CircuitFormatError(
            f"{where}: expected {rows * columns} entries for a {rows}x{columns} "
            f"matrix, got {len(contents)}."
        )
    for i, entry in enumerate(contents):
        if not isinstance(entry, dict):
            raise CircuitFormatError(f"{where}: contents[{i}] must be a dictionary object.")
        for part in ("re", "im"):
            value = _require(entry, part, f"{where}: contents[{i}]")
            if not _is_number(value):
                raise CircuitFormatError(
                    f"{where}: contents[{i}].{part} must be a number, "
                    f"got {type(value).__name__}."
                )


def validate_transformer_dict(obj: Any, where: str = "transformer") -> None:
    """Check one entry of the ``transformers`` list."""
    if not isinstance(obj, dict):
        raise CircuitFormatError(f"{where} must be a dictionary object.")
    name = _require_str(obj, "name", where)
    where = f"{where} {name!r}"
    n_inputs = _require_int(obj, "inputs", where)
    _require_int(obj, "outputs", where)
    matrix = _require(obj, "matrix", where)
    validate_matrix_dict(matrix, f"{where} matrix")
    if matrix["rows"] != 1 << n_inputs:
        raise CircuitFormatError(
            f"{where}: a gate on {n_inputs} qubits needs {1 << n_inputs} rows, "
            f"got {matrix['rows']}."
        )


def validate_circuit_dict(obj: Any, nested: bool = False, where: str = "circuit") -> None:
    """
    Validate a serialized circuit against the schema.

    Nested implementations are validated recursively. Index ranges and
    arities are checked here; whether every name resolves to a transformer
    is checked when the circuit is rebuilt.

    Parameters
    ----------
    obj : dict
        Decoded circuit object.
    nested : bool
        True for an ``implementation`` object, which may omit ``transformers``.

    Raises
    ------
    CircuitFormatError
        If the object does not conform to the schema.
    """
    if not isinstance(obj, dict):
        raise CircuitFormatError(f"{where} must be a dictionary object.")

    _require_str(obj, "name", where)
    n_inputs = _require_int(obj, "inputs", where)
    _require_int(obj, "outputs", where)
    timeline = _require_list(obj, "timeline", where)

    for i, entry in enumerate(timeline):
        entry_where = f"{where}: timeline[{i}]"
        if not isinstance(entry, dict):
            raise CircuitFormatError(f"{entry_where} must be a dictionary object.")
        _require_str(entry, "name", entry_where)
        _require_int(entry, "time", entry_where, minimum=None)
        indices = _require_list(entry, "indices", entry_where)
        for j, q in enumerate(indices):
            if not _is_int(q):
                raise CircuitFormatError(
                    f"{entry_where}: indices[{j}] must be an integer, got {type(q).__name__}."
                )
            if q < 0 or q >= n_inputs:
                raise CircuitFormatError(
                    f"{entry_where}: indices[{j}] = {q} is out of range [0, {n_inputs})."
                )

        if "implementation" in entry:
            entry_inputs = _require_int(entry, "inputs", entry_where)
            _require_int(entry, "outputs", entry_where)
            if entry_inputs != len(indices):
                raise CircuitFormatError(
                    f"{entry_where}: {len(indices)} indices for a circuit of "
                    f"{entry_inputs} inputs."
                )
            validate_circuit_dict(
                entry["implementation"], nested=True, where=f"{entry_where} implementation"
            )
            if entry["implementation"]["inputs"] != entry_inputs:
                raise CircuitFormatError(
                    f"{entry_where}: implementation has "
                    f"{entry['implementation']['inputs']} inputs, entry declares {entry_inputs}."
                )

    if "transformers" in obj or not nested:
        transformers = _require_list(obj, "transformers", where)
        for i, transformer in enumerate(transformers):
            validate_transformer_dict(transformer, f"{where}: transformers[{i}]")


__all__ = [
    "circuit_format_schema",
    "validate_circuit_dict",
    "validate_matrix_dict",
    "validate_transformer_dict",
]
