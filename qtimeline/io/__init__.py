"""JSON circuit format import and export."""

from .schema import circuit_format_schema, validate_circuit_dict
from .serializer import (
    circuit_to_dict,
    deserialize,
    dict_to_circuit,
    dump_circuit,
    load_circuit,
    serialize,
)

__all__ = [
    "circuit_to_dict",
    "dict_to_circuit",
    "serialize",
    "deserialize",
    "dump_circuit",
    "load_circuit",
    "circuit_format_schema",
    "validate_circuit_dict",
]
