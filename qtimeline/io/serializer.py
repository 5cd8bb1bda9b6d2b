"""Circuit import and export in the JSON circuit format.

Nested circuits are written inline as ``implementation`` objects. Every
distinct leaf gate appears once in the top-level ``transformers`` list, keyed
by its name (suffixed when another matrix already holds the name), and is
rebuilt as a universal gate on load, so no gate registry is needed.

See schema.py for the format.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List

from qtimeline.circuit.core import Circuit
from qtimeline.errors import CircuitFormatError, QTimelineError
from qtimeline.gates.base import Transformer
from qtimeline.gates.derived import universal_gate
from qtimeline.logging import get_logger
from qtimeline.maths.matrix import AmplitudeMatrix

from .schema import validate_circuit_dict

logger = get_logger(__name__)


def matrix_to_dict(matrix: AmplitudeMatrix) -> dict:
    """Row-major ``{rows, columns, contents}`` form of a matrix."""
    return {
        "rows": matrix.rows,
        "columns": matrix.columns,
        "contents": [{"re": value.real, "im": value.imag} for value in matrix.flat()],
    }


def dict_to_matrix(obj: dict) -> AmplitudeMatrix:
    rows = obj["rows"]
    columns = obj["columns"]
    values = [complex(entry["re"], entry["im"]) for entry in obj["contents"]]
    grid = [values[r * columns:(r + 1) * columns] for r in range(rows)]
    return AmplitudeMatrix.from_rows(grid)


class _LeafTable:
    """
    Serialization keys of leaf gates, one per distinct matrix.

    A gate keeps its own name as key unless that key already belongs to a
    different matrix, as happens with parameterized names rounded to two
    decimals; it then gets the first free ``name#k`` key.
    """

    def __init__(self) -> None:
        self.gates: Dict[str, Transformer] = {}
        self._keys_by_name: Dict[str, List[str]] = {}

    def key_for(self, transformer: Transformer) -> str:
        keys = self._keys_by_name.setdefault(transformer.name, [])
        for key in keys:
            known = self.gates[key]
            if known is transformer or known.matrix == transformer.matrix:
                return key

        key = transformer.name
        suffix = 1
        while key in self.gates:
            suffix += 1
            key = f"{transformer.name}#{suffix}"
        if suffix > 1:
            logger.debug(
                "gate name %s is shared by different matrices; writing it as %s",
                transformer.name,
                key,
            )
        keys.append(key)
        self.gates[key] = transformer
        return key


def _timeline_to_list(circuit: Circuit, leaves: _LeafTable) -> List[dict]:
    timeline: List[dict] = []
    for time, entry in circuit.entries():
        transformer = entry.transformer
        if isinstance(transformer, Circuit):
            item: Dict[str, Any] = {
                "name": transformer.name,
                "inputs": transformer.n_inputs,
                "outputs": transformer.n_outputs,
                "implementation": _circuit_body(transformer, leaves),
            }
        else:
            item = {"name": leaves.key_for(transformer)}
        item["indices"] = list(entry.indices)
        item["time"] = time
        timeline.append(item)
    return timeline


def _circuit_body(circuit: Circuit, leaves: _LeafTable) -> dict:
    return {
        "name": circuit.name,
        "inputs": circuit.n_inputs,
        "outputs": circuit.n_outputs,
        "timeline": _timeline_to_list(circuit, leaves),
    }


def circuit_to_dict(circuit: Circuit) -> dict:
    """
    Convert a circuit to the serialized circuit format.

    Parameters
    ----------
    circuit : Circuit
        Circuit to convert; nested circuits are written inline.

    Returns
    -------
    dict
        JSON-compatible object following the schema defined in schema.py.
        Leaf gates sharing a name but not a matrix are listed under
        distinct ``name#k`` keys.
    """
    leaves = _LeafTable()
    result = _circuit_body(circuit, leaves)
    result["transformers"] = [
        {
            "name": key,
            "inputs": gate.n_inputs,
            "outputs": gate.n_outputs,
            "matrix": matrix_to_dict(gate.matrix),
        }
        for key, gate in leaves.gates.items()
    ]
    return result


def _build_gate_table(transformers: List[dict]) -> Dict[str, Transformer]:
    table: Dict[str, Transformer] = {}
    for obj in transformers:
        name = obj["name"]
        matrix = dict_to_matrix(obj["matrix"])
        if name in table:
            if table[name].matrix != matrix:
                raise CircuitFormatError(
                    f"Transformer {name!r} is listed twice with different matrices."
                )
            continue
        try:
            table[name] = universal_gate(matrix, name, obj["inputs"], obj["outputs"])
        except QTimelineError as exc:
            raise CircuitFormatError(f"Transformer {name!r} is invalid: {exc}") from exc
    return table


def _build_circuit(obj: dict, table: Dict[str, Transformer]) -> Circuit:
    circuit = Circuit(obj["name"], obj["inputs"], obj["outputs"])
    for entry in obj["timeline"]:
        name = entry["name"]
        if "implementation" in entry:
            transformer: Transformer = _build_circuit(entry["implementation"], table)
        elif name in table:
            transformer = table[name]
        else:
            raise CircuitFormatError(
                f"Circuit {obj['name']!r} uses unknown transformer {name!r}."
            )
        try:
            circuit.append(transformer, entry["time"], entry["indices"])
        except QTimelineError as exc:
            raise CircuitFormatError(
                f"Entry {name!r} at time {entry['time']} of circuit "
                f"{obj['name']!r} is invalid: {exc}"
            ) from exc
    return circuit


def dict_to_circuit(obj: dict) -> Circuit:
    """
    Rebuild a circuit from the serialized circuit format.

    Parameters
    ----------
    obj : dict
        Object following the schema defined in schema.py.

    Returns
    -------
    Circuit
        Reconstructed circuit, leaf gates rebuilt as universal gates.

    Raises
    ------
    CircuitFormatError
        If the object is malformed, names an unknown transformer or places
        an entry on invalid indices.
    """
    validate_circuit_dict(obj)
    table = _build_gate_table(obj["transformers"])
    logger.debug(
        "deserializing circuit %s with %d transformers", obj["name"], len(table)
    )
    try:
        return _build_circuit(obj, table)
    except CircuitFormatError:
        raise
    except ValueError as exc:
        raise CircuitFormatError(f"Circuit {obj['name']!r} is invalid: {exc}") from exc


def serialize(circuit: Circuit, indent: int = 2) -> str:
    """Circuit as JSON text; floats are written with their exact repr."""
    return json.dumps(circuit_to_dict(circuit), indent=indent, ensure_ascii=False)


def deserialize(text: str) -> Circuit:
    """Circuit from JSON text; invalid JSON raises :class:`CircuitFormatError`."""
    try:
        obj = json.loads(text)
    except json.JSONDecodeError as exc:
        raise CircuitFormatError(f"Invalid JSON circuit: {exc}") from exc
    return dict_to_circuit(obj)


def dump_circuit(circuit: Circuit, path: str) -> None:
    """
    Write a circuit to a JSON file.

    Parameters
    ----------
    circuit : Circuit
        Circuit to write.
    path : str
        Path to output JSON file.
    """
    with open(path, "w", encoding="utf-8") as f:
        json.dump(circuit_to_dict(circuit), f, indent=2, ensure_ascii=False)


def load_circuit(path: str) -> Circuit:
    """
    Load a circuit from a JSON file.

    Raises
    ------
    CircuitFormatError
        If the file is not valid JSON or not a valid circuit.
    FileNotFoundError
        If the file does not exist.
    """
    with open(path, "r", encoding="utf-8") as f:
        text = f.read()
    return deserialize(text)


__all__ = [
    "circuit_to_dict",
    "dict_to_circuit",
    "serialize",
    "deserialize",
    "dump_circuit",
    "load_circuit",
    "matrix_to_dict",
    "dict_to_matrix",
]
