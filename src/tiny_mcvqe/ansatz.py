"""
MC-VQE circuits: reference-state preparation and the shared entangler.

Every reference state is prepared by its own fixed circuit, after which the
same parameterized entangler U(x) is applied::

    |ψ_s(x)⟩ = U(x) · P(θ_s) |0…0⟩

Qubit ``i`` is chromophore ``i``; ``|0⟩`` is the ground and ``|1⟩`` the
excited state. ``P(θ)`` writes the reference vector ``c`` as a cascade of
rotations that produces a "thermometer" state (the first k qubits excited
with amplitude ``c[k]``), and a wall of CNOTs turns it into the
single-excitation basis, so that ``P(θ)|0…0⟩ = c[0]|0…0⟩ + Σ_A c[A+1]|A⟩``.

Usage:
    entangler = entangler_circuit(4)
    circuit = mcvqe_circuit(model.angles[:, 0], entangler)
    energy = backend.expectation(model.hamiltonian, circuit, x)
"""

from __future__ import annotations

import numpy as np

from tiny_mcvqe.circuit import Circuit, Parameter


def state_preparation_circuit(angles: np.ndarray, n_sites: int) -> Circuit:
    """
    Fixed circuit preparing one reference state from its angles.

    Parameters
    ----------
    angles : np.ndarray
        ``n_sites`` angles from :func:`~tiny_mcvqe.chemistry.column_angles`.
    n_sites : int
        Number of chromophores (qubits).

    Returns
    -------
    Circuit
        Unparameterized circuit acting on ``|0…0⟩``.
    """
    angles = np.asarray(angles, dtype=float).ravel()
    if angles.shape[0] != n_sites:
        raise ValueError(f"Expected {n_sites} angles, got {angles.shape[0]}")

    qc = Circuit(n_sites, name="state_prep")

    # The cascade angles are defined for exp(-iθY); Ry(φ) is exp(-iφY/2).
    qc.ry(2.0 * angles[0], 0)

    # Controlled rotation Ry(-θ) · CZ · Ry(θ): identity if the control is
    # |0⟩, Ry(2θ) if it is |1⟩.
    for i in range(1, n_sites):
        qc.ry(-angles[i], i)
        qc.h(i)
        qc.cx(i - 1, i)
        qc.h(i)
        qc.ry(angles[i], i)

    for i in range(n_sites - 2, -1, -1):
        for j in range(n_sites - 1, i, -1):
            qc.cx(j, i)

    return qc


def _entangler_pairs(n_sites: int, cyclic: bool) -> list[tuple[int, int]]:
    """Two-site blocks in application order: two brick-wall layers, then the wrap."""
    pairs = []
    for layer in range(2):
        for i in range(layer, n_sites - 1, 2):
            pairs.append((i, i + 1))
    if cyclic and n_sites > 1:
        pairs.append((n_sites - 1, 0))
    return pairs


def n_entangler_params(n_sites: int, cyclic: bool = False) -> int:
    """Number of variational parameters in :func:`entangler_circuit`."""
    return n_sites + 4 * len(_entangler_pairs(n_sites, cyclic))


def entangler_circuit(n_sites: int, cyclic: bool = False) -> Circuit:
    """
    Parameterized entangler shared by every reference state.

    One ``Ry`` per site followed by two-site blocks
    ``CNOT · Ry ⊗ Ry · CNOT · Ry ⊗ Ry`` on neighboring sites. With all
    parameters at zero the circuit is the identity.
    """
    qc = Circuit(n_sites, name="entangler")
    counter = 0

    def next_param() -> Parameter:
        nonlocal counter
        p = Parameter(f"x{counter}")
        counter += 1
        return p

    for i in range(n_sites):
        qc.ry(next_param(), i)

    for control, target in _entangler_pairs(n_sites, cyclic):
        qc.cx(control, target)
        qc.ry(next_param(), control)
        qc.ry(next_param(), target)
        qc.cx(control, target)
        qc.ry(next_param(), control)
        qc.ry(next_param(), target)

    return qc


def mcvqe_circuit(angles: np.ndarray, entangler: Circuit) -> Circuit:
    """State preparation for ``angles`` followed by the shared ``entangler``.

    The returned circuit reuses the entangler's :class:`Parameter` objects,
    so ``circuit.parameters`` matches ``entangler.parameters``.
    """
    qc = state_preparation_circuit(angles, entangler.n_qubits)
    qc.name = "mcvqe"
    return qc.compose(entangler)
