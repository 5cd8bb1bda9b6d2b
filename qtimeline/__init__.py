"""qtimeline - a PyTorch-backed simulator of timeline-scheduled quantum circuits."""

__version__ = "0.1.0"

# Algorithm circuits
from .algorithms import (
    AdderCircuit,
    DecrementerCircuit,
    FlipCircuit,
    FullAdderCircuit,
    FullSubtractorCircuit,
    GroverCircuit,
    HalfAdderCircuit,
    HalfSubtractorCircuit,
    IncrementerCircuit,
    PhaseEstimationCircuit,
    SubtractorCircuit,
    TeleportationCircuit,
    qft_circuit,
)

# Circuit timeline
from .circuit import Circuit, TimelineEntry, apply_to_state, expand_matrix
from .config import SimulationConfig, config_context, get_config, set_config
from .core import Device, default_device, device

# Diagnostics
from .diagnostics import (
    assert_normalized,
    assert_unitary,
    bloch_sphere_coordinates,
    bloch_vector,
    debug_context,
    is_debug_enabled,
    is_unitary,
    set_debug_enabled,
    state_norm,
    truth_table,
)
from .errors import (
    ArityMismatchError,
    CircuitFormatError,
    DimensionMismatchError,
    IndexOutOfRangeError,
    InvalidShapeError,
    QTimelineError,
    TimelineCollisionError,
)

# Gates
from .gates import (
    Gate,
    GateKind,
    Transformer,
    adjoint_gate,
    compiled_gate,
    controlled_gate,
    double_controlled_gate,
    multi_controlled_gate,
    powered_gate,
    universal_gate,
)
from .gates import standard

# Serialization
from .io import (
    circuit_to_dict,
    deserialize,
    dict_to_circuit,
    dump_circuit,
    load_circuit,
    serialize,
)
from .logging import configure_logging, get_logger, set_log_level

# Amplitude matrices
from .maths import (
    AmplitudeMatrix,
    SparseArray,
    adjoint,
    approx_equal,
    matrix_power,
    multiply,
    tensor_product,
    transpose,
)
from .measurement import AmplitudeEntry, Measurer
from .state import Outcome, Qubit, QubitState, Register

__all__ = [
    "__version__",
    # Amplitude matrices
    "AmplitudeMatrix",
    "SparseArray",
    "multiply",
    "transpose",
    "adjoint",
    "tensor_product",
    "matrix_power",
    "approx_equal",
    # State
    "Qubit",
    "QubitState",
    "Outcome",
    "Register",
    # Gates
    "Gate",
    "GateKind",
    "Transformer",
    "standard",
    "controlled_gate",
    "double_controlled_gate",
    "multi_controlled_gate",
    "powered_gate",
    "compiled_gate",
    "universal_gate",
    "adjoint_gate",
    # Circuits
    "Circuit",
    "TimelineEntry",
    "expand_matrix",
    "apply_to_state",
    # Measurement
    "Measurer",
    "AmplitudeEntry",
    # Algorithms
    "FlipCircuit",
    "qft_circuit",
    "GroverCircuit",
    "PhaseEstimationCircuit",
    "TeleportationCircuit",
    "IncrementerCircuit",
    "DecrementerCircuit",
    "HalfAdderCircuit",
    "HalfSubtractorCircuit",
    "FullAdderCircuit",
    "FullSubtractorCircuit",
    "AdderCircuit",
    "SubtractorCircuit",
    # Serialization
    "circuit_to_dict",
    "dict_to_circuit",
    "serialize",
    "deserialize",
    "dump_circuit",
    "load_circuit",
    # Errors
    "QTimelineError",
    "DimensionMismatchError",
    "IndexOutOfRangeError",
    "ArityMismatchError",
    "InvalidShapeError",
    "TimelineCollisionError",
    "CircuitFormatError",
    # Configuration
    "SimulationConfig",
    "get_config",
    "set_config",
    "config_context",
    "Device",
    "device",
    "default_device",
    # Diagnostics
    "state_norm",
    "assert_normalized",
    "is_unitary",
    "assert_unitary",
    "bloch_vector",
    "bloch_sphere_coordinates",
    "truth_table",
    "is_debug_enabled",
    "set_debug_enabled",
    "debug_context",
    # Logging
    "get_logger",
    "set_log_level",
    "configure_logging",
]
