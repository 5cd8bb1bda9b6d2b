"""Algorithm circuits built from the gate library."""

from .arithmetic import (
    AdderCircuit,
    DecrementerCircuit,
    FullAdderCircuit,
    FullSubtractorCircuit,
    HalfAdderCircuit,
    HalfSubtractorCircuit,
    IncrementerCircuit,
    SubtractorCircuit,
    add_registers,
    subtract_registers,
)
from .grover import GroverCircuit, bit_pattern_oracle, diffusion_circuit, optimal_iterations
from .implementations import swap_circuit, x_circuit, z_circuit
from .phase_estimation import PhaseEstimationCircuit, counting_qubits
from .qft import FlipCircuit, qft_circuit
from .teleportation import TeleportationCircuit

__all__ = [
    "FlipCircuit",
    "qft_circuit",
    "swap_circuit",
    "x_circuit",
    "z_circuit",
    "GroverCircuit",
    "bit_pattern_oracle",
    "diffusion_circuit",
    "optimal_iterations",
    "PhaseEstimationCircuit",
    "counting_qubits",
    "TeleportationCircuit",
    "IncrementerCircuit",
    "DecrementerCircuit",
    "HalfAdderCircuit",
    "HalfSubtractorCircuit",
    "FullAdderCircuit",
    "FullSubtractorCircuit",
    "AdderCircuit",
    "SubtractorCircuit",
    "add_registers",
    "subtract_registers",
]
