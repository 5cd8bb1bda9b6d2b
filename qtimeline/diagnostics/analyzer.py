"""Truth tables of transformers over the computational basis."""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict

from qtimeline.state.register import Register

if TYPE_CHECKING:
    from qtimeline.gates.base import Transformer


def truth_table(transformer: "Transformer") -> Dict[str, Dict[str, float]]:
    """
    Map every basis input bitstring to the output probability map.

    Example
    -------
    >>> from qtimeline.gates.standard import CNOT
    >>> truth_table(CNOT())["11"]
    {'10': 1.0}
    """
    from qtimeline.measurement.measurer import Measurer

    n_inputs = transformer.n_inputs
    table: Dict[str, Dict[str, float]] = {}
    for value in range(1 << n_inputs):
        bits = format(value, f"0{n_inputs}b")
        output = transformer.transform(Register.from_bits(bits))
        table[bits] = Measurer(output).probabilistic_map()
    return table


__all__ = ["truth_table"]
