"""
Gate matrices used by the MC-VQE circuits.

All gates are unitary numpy arrays. Parameterized gates are factories
returning a matrix for a given angle.

Gate set:
    - Single-qubit: I, X, Y, Z, H
    - Rotations: Rx, Ry, Rz (standard exp(-iθP/2) convention)
    - Two-qubit: CNOT/CX, CZ
"""

from __future__ import annotations

import numpy as np
from numpy import ndarray

Matrix = ndarray

_SQRT2_INV = 1.0 / np.sqrt(2.0)

# ---------------------------------------------------------------------------
# Single-qubit fixed gates
# ---------------------------------------------------------------------------

I = np.eye(2, dtype=np.complex128)
"""Identity gate."""

X = np.array([[0, 1], [1, 0]], dtype=np.complex128)
"""Pauli-X (NOT) gate."""

Y = np.array([[0, -1j], [1j, 0]], dtype=np.complex128)
"""Pauli-Y gate."""

Z = np.array([[1, 0], [0, -1]], dtype=np.complex128)
"""Pauli-Z gate."""

H = np.array([[1, 1], [1, -1]], dtype=np.complex128) * _SQRT2_INV
"""Hadamard gate."""

Sdg = np.array([[1, 0], [0, -1j]], dtype=np.complex128)
"""S-dagger gate, used to measure in the Y basis."""

# ---------------------------------------------------------------------------
# Rotations
# ---------------------------------------------------------------------------

def Rx(theta: float) -> Matrix:
    """Rotation around X-axis by angle theta."""
    c = np.cos(theta / 2)
    s = np.sin(theta / 2)
    return np.array([[c, -1j * s], [-1j * s, c]], dtype=np.complex128)


def Ry(theta: float) -> Matrix:
    """Rotation around Y-axis by angle theta (real-valued)."""
    c = np.cos(theta / 2)
    s = np.sin(theta / 2)
    return np.array([[c, -s], [s, c]], dtype=np.complex128)


def Rz(phi: float) -> Matrix:
    """Rotation around Z-axis by angle phi."""
    return np.array(
        [[np.exp(-1j * phi / 2), 0], [0, np.exp(1j * phi / 2)]],
        dtype=np.complex128,
    )


# ---------------------------------------------------------------------------
# Two-qubit fixed gates (4x4, first qubit is the control)
# ---------------------------------------------------------------------------

CNOT = np.array(
    [[1, 0, 0, 0], [0, 1, 0, 0], [0, 0, 0, 1], [0, 0, 1, 0]],
    dtype=np.complex128,
)
"""Controlled-NOT (CX) gate."""
CX = CNOT

CZ = np.diag([1, 1, 1, -1]).astype(np.complex128)
"""Controlled-Z gate."""

# ---------------------------------------------------------------------------
# Gate metadata registry
# ---------------------------------------------------------------------------

GATE_REGISTRY: dict[str, dict] = {
    "i": {"matrix": I, "n_qubits": 1, "n_params": 0},
    "x": {"matrix": X, "n_qubits": 1, "n_params": 0},
    "y": {"matrix": Y, "n_qubits": 1, "n_params": 0},
    "z": {"matrix": Z, "n_qubits": 1, "n_params": 0},
    "h": {"matrix": H, "n_qubits": 1, "n_params": 0},
    "sdg": {"matrix": Sdg, "n_qubits": 1, "n_params": 0},
    "rx": {"factory": Rx, "n_qubits": 1, "n_params": 1},
    "ry": {"factory": Ry, "n_qubits": 1, "n_params": 1},
    "rz": {"factory": Rz, "n_qubits": 1, "n_params": 1},
    "cx": {"matrix": CNOT, "n_qubits": 2, "n_params": 0},
    "cz": {"matrix": CZ, "n_qubits": 2, "n_params": 0},
}

# Rotation gates whose single parameter obeys the two-term shift rule.
ROTATION_GATES = frozenset({"rx", "ry", "rz"})


def get_matrix(name: str, params: tuple[float, ...] = ()) -> Matrix:
    """
    Look up a gate matrix by name, with optional parameters.

    Raises
    ------
    KeyError
        If gate name is not found.
    ValueError
        If wrong number of parameters provided.
    """
    key = name.lower()
    if key not in GATE_REGISTRY:
        raise KeyError(f"Unknown gate: '{name}'. Available: {sorted(GATE_REGISTRY.keys())}")

    info = GATE_REGISTRY[key]
    n_params = info["n_params"]

    if n_params == 0:
        if params:
            raise ValueError(f"Gate '{name}' takes no parameters, got {len(params)}")
        return info["matrix"]
    if len(params) != n_params:
        raise ValueError(
            f"Gate '{name}' requires {n_params} parameter(s), got {len(params)}"
        )
    return info["factory"](*params)


def is_unitary(m: Matrix, tol: float = 1e-9) -> bool:
    """Check ``m @ m†`` is the identity within ``tol``."""
    product = m @ m.conj().T
    return bool(np.allclose(product, np.eye(len(m)), atol=tol))
