"""
Pauli-sum observables.

A Hamiltonian is a weighted sum of Pauli strings:
    H = c₀ I + c₁ P₁ + c₂ P₂ + ... + cₙ Pₙ

where each Pᵢ is a tensor product of {I, X, Y, Z}, one character per
site, and the all-identity string carries the scalar offset. The AIEM
Hamiltonian of a chromophore chain is built incrementally with
:meth:`PauliHamiltonian.add_term`, e.g. ``add_term({0: "X", 1: "Z"}, 0.01)``.
"""

from __future__ import annotations

from typing import Dict, Mapping, Tuple

import numpy as np

_I = np.eye(2, dtype=complex)
_X = np.array([[0, 1], [1, 0]], dtype=complex)
_Y = np.array([[0, -1j], [1j, 0]], dtype=complex)
_Z = np.array([[1, 0], [0, -1]], dtype=complex)

PAULI_MAP = {"I": _I, "X": _X, "Y": _Y, "Z": _Z}

_ZERO_TOL = 1e-15


class PauliHamiltonian:
    """
    Pauli-string Hamiltonian on a fixed number of sites.

    Parameters
    ----------
    n_qubits : int
        Number of sites (qubits) the operator acts on.
    terms : dict, optional
        Initial mapping of Pauli strings to real coefficients,
        e.g. ``{"ZI": -0.5, "XX": 0.01}``.
    """

    def __init__(self, n_qubits: int, terms: Mapping[str, float] | None = None):
        if n_qubits < 1:
            raise ValueError(f"Need at least 1 qubit, got {n_qubits}")
        self._n_qubits = n_qubits
        self._terms: Dict[str, float] = {}
        for pauli_str, coeff in (terms or {}).items():
            self._accumulate(self._validate(pauli_str), coeff)

    # -- Construction -------------------------------------------------------

    def _validate(self, pauli_str: str) -> str:
        pauli_str = pauli_str.upper()
        if len(pauli_str) != self._n_qubits:
            raise ValueError(
                f"Pauli string '{pauli_str}' has length {len(pauli_str)}, "
                f"expected {self._n_qubits}"
            )
        if not all(c in "IXYZ" for c in pauli_str):
            raise ValueError(
                f"Invalid Pauli string '{pauli_str}': only I, X, Y, Z allowed"
            )
        return pauli_str

    def _accumulate(self, pauli_str: str, coeff: float) -> None:
        total = self._terms.get(pauli_str, 0.0) + float(coeff)
        if abs(total) > _ZERO_TOL:
            self._terms[pauli_str] = total
        else:
            self._terms.pop(pauli_str, None)

    def add_term(self, ops: Mapping[int, str], coeff: float) -> PauliHamiltonian:
        """
        Add ``coeff`` times the product of single-site Paulis in ``ops``.

        An empty ``ops`` adds to the scalar offset. Repeated strings
        accumulate. Returns self for chaining.
        """
        chars = ["I"] * self._n_qubits
        for site, op in ops.items():
            if not 0 <= site < self._n_qubits:
                raise ValueError(
                    f"Site {site} out of range for {self._n_qubits}-site operator"
                )
            if chars[site] != "I":
                raise ValueError(f"Site {site} appears twice in {dict(ops)}")
            chars[site] = op
        self._accumulate(self._validate("".join(chars)), coeff)
        return self

    def add_constant(self, value: float) -> PauliHamiltonian:
        return self.add_term({}, value)

    # -- Properties ---------------------------------------------------------

    @property
    def terms(self) -> Dict[str, float]:
        """Return copy of Pauli string → coefficient mapping."""
        return dict(self._terms)

    @property
    def n_qubits(self) -> int:
        return self._n_qubits

    @property
    def n_terms(self) -> int:
        """Number of non-zero Pauli terms, offset included."""
        return len(self._terms)

    @property
    def constant(self) -> float:
        """Coefficient of the identity string."""
        return self._terms.get("I" * self._n_qubits, 0.0)

    def coefficient(self, ops: Mapping[int, str]) -> float:
        chars = ["I"] * self._n_qubits
        for site, op in ops.items():
            chars[site] = op.upper()
        return self._terms.get("".join(chars), 0.0)

    # -- Evaluation ---------------------------------------------------------

    def expectation(self, statevector: np.ndarray) -> float:
        """
        Compute ⟨ψ|H|ψ⟩ without building the full matrix.

        Cost is O(n_terms × 2^n) instead of O(2^2n).
        """
        sv = self._as_statevector(statevector)
        total = 0.0
        for pauli_str, coeff in self._terms.items():
            total += coeff * np.real(np.vdot(sv, apply_pauli_string(sv, pauli_str)))
        return float(total)

    def term_expectations(self, statevector: np.ndarray) -> Dict[str, float]:
        """⟨ψ|P|ψ⟩ for every Pauli string P (coefficients not applied)."""
        sv = self._as_statevector(statevector)
        return {
            p: float(np.real(np.vdot(sv, apply_pauli_string(sv, p))))
            for p in self._terms
        }

    def matrix(self) -> np.ndarray:
        """Full 2^n × 2^n matrix, for small systems and validation."""
        dim = 2 ** self._n_qubits
        H = np.zeros((dim, dim), dtype=complex)
        for pauli_str, coeff in self._terms.items():
            H += coeff * pauli_string_matrix(pauli_str)
        return H

    def ground_state_energy(self) -> float:
        """Minimum eigenvalue of H by exact diagonalization."""
        return float(np.linalg.eigvalsh(self.matrix())[0])

    def _as_statevector(self, statevector: np.ndarray) -> np.ndarray:
        sv = np.asarray(statevector, dtype=complex).ravel()
        expected_dim = 2 ** self._n_qubits
        if sv.shape[0] != expected_dim:
            raise ValueError(
                f"Statevector dimension {sv.shape[0]} doesn't match "
                f"{self._n_qubits}-qubit Hamiltonian (expected {expected_dim})"
            )
        return sv

    # -- Comparison / display -----------------------------------------------

    def allclose(self, other: PauliHamiltonian, atol: float = 1e-12) -> bool:
        if self._n_qubits != other._n_qubits:
            return False
        keys = set(self._terms) | set(other._terms)
        return all(
            abs(self._terms.get(k, 0.0) - other._terms.get(k, 0.0)) <= atol
            for k in keys
        )

    def __repr__(self) -> str:
        return f"PauliHamiltonian({self._n_qubits}q, {self.n_terms} terms)"

    def __str__(self) -> str:
        lines = [f"Hamiltonian on {self._n_qubits} qubits ({self.n_terms} terms):"]
        for pauli_str, coeff in sorted(self._terms.items()):
            lines.append(f"  {coeff:+14.10f}  {pauli_str}")
        return "\n".join(lines)


# ─── Internal utilities ──────────────────────────────────────────────

def apply_pauli_string(sv: np.ndarray, pauli_str: str) -> np.ndarray:
    """
    Apply a Pauli string to a statevector, qubit by qubit.

    Qubit 0 is the most significant bit of the basis-state index.
    """
    n_qubits = len(pauli_str)
    result = sv.copy()
    for qubit_idx, pauli_char in enumerate(pauli_str):
        if pauli_char == "I":
            continue
        result = result.reshape([2] * n_qubits)
        result = np.tensordot(PAULI_MAP[pauli_char], result, axes=([1], [qubit_idx]))
        result = np.moveaxis(result, 0, qubit_idx).reshape(-1)
    return result


def pauli_string_matrix(pauli_str: str) -> np.ndarray:
    """Build the full tensor product matrix for a Pauli string."""
    result = PAULI_MAP[pauli_str[0]]
    for char in pauli_str[1:]:
        result = np.kron(result, PAULI_MAP[char])
    return result


def split_terms(hamiltonian: PauliHamiltonian) -> Tuple[float, Dict[str, float]]:
    """Separate the identity offset from the measurable terms."""
    identity = "I" * hamiltonian.n_qubits
    terms = hamiltonian.terms
    offset = terms.pop(identity, 0.0)
    return offset, terms
