"""
Statevector execution backend.

Applies gates via tensor reshaping (O(2^n) per gate rather than O(2^2n)
for a full matrix multiply) and evaluates Pauli-sum observables either
exactly from the final statevector or, with ``shots > 0``, by rotating
each term into the computational basis and sampling.

Memory: ~16 bytes * 2^n (complex128) per state.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Sequence

import numpy as np
from numpy import ndarray

from tiny_mcvqe import gates as g
from tiny_mcvqe.backends.base import Backend
from tiny_mcvqe.circuit import Circuit
from tiny_mcvqe.exceptions import BackendError
from tiny_mcvqe.hamiltonian import PauliHamiltonian, split_terms

_LETTERS = "abcdefghijklmnopqrst"


@dataclass
class SimulationResult:
    """
    Result of a statevector simulation.

    Attributes
    ----------
    statevector : ndarray
        Final state vector (complex128, length 2^n).
    n_qubits : int
        Number of qubits.
    """

    statevector: ndarray
    n_qubits: int

    def probabilities(self) -> ndarray:
        """Probability of every computational basis state."""
        return np.abs(self.statevector) ** 2


class StatevectorBackend(Backend):
    """
    Statevector simulator with exact or shot-sampled expectation values.

    Parameters
    ----------
    shots : int
        Samples per Pauli term. 0 (default) returns exact expectations.
    seed : int | None
        Random seed for sampling.

    Example
    -------
    >>> from tiny_mcvqe import Circuit, StatevectorBackend, PauliHamiltonian
    >>> qc = Circuit(2).h(0).cx(0, 1)
    >>> H = PauliHamiltonian(2, {"ZZ": 1.0})
    >>> round(StatevectorBackend().expectation(H, qc), 6)
    1.0
    """

    def __init__(self, shots: int = 0, seed: int | None = None) -> None:
        if shots < 0:
            raise ValueError(f"Shots must be non-negative. Got {shots}.")
        self.shots = shots
        self._rng = np.random.default_rng(seed)
        self._rng_lock = threading.Lock()

    # -- Simulation ---------------------------------------------------------

    def run(self, circuit: Circuit, initial_state: ndarray | None = None) -> SimulationResult:
        """
        Simulate a fully bound circuit.

        Parameters
        ----------
        circuit : Circuit
            Circuit to simulate. Must not have unbound parameters.
        initial_state : ndarray, optional
            Initial state vector. Defaults to |0...0⟩.
        """
        n = circuit.n_qubits
        if n > len(_LETTERS):
            raise BackendError(f"{n} qubits exceeds the simulator limit of {len(_LETTERS)}")

        if initial_state is not None:
            state = np.array(initial_state, dtype=np.complex128).copy()
            if state.shape != (2**n,):
                raise BackendError(
                    f"Initial state shape {state.shape} != expected ({2**n},)"
                )
        else:
            state = np.zeros(2**n, dtype=np.complex128)
            state[0] = 1.0

        for inst in circuit.instructions:
            try:
                matrix = inst.matrix()
            except ValueError as exc:
                raise BackendError(str(exc)) from exc
            state = self._apply_gate(state, matrix, inst.qubits, n)

        return SimulationResult(statevector=state, n_qubits=n)

    def statevector(self, circuit: Circuit) -> ndarray:
        """Convenience: run circuit and return just the state vector."""
        return self.run(circuit).statevector

    # -- Backend contract ---------------------------------------------------

    def expectation(
        self,
        observable: PauliHamiltonian,
        circuit: Circuit,
        params: Sequence[float] | ndarray | None = None,
    ) -> float:
        if params is not None and circuit.is_parameterized:
            circuit = circuit.bind(params)
        if observable.n_qubits != circuit.n_qubits:
            raise BackendError(
                f"Observable acts on {observable.n_qubits} qubits, "
                f"circuit has {circuit.n_qubits}"
            )
        state = self.run(circuit).statevector
        if self.shots == 0:
            return observable.expectation(state)
        return self._sampled_expectation(observable, state)

    # -- Sampling -----------------------------------------------------------

    def _sampled_expectation(self, observable: PauliHamiltonian, state: ndarray) -> float:
        """Estimate ⟨H⟩ term by term from ``shots`` computational-basis samples."""
        n = observable.n_qubits
        offset, terms = split_terms(observable)
        total = offset
        for pauli_str, coeff in terms.items():
            rotated = state
            for q, p in enumerate(pauli_str):
                if p == "X":
                    rotated = self._apply_single_qubit_gate(rotated, g.H, q, n)
                elif p == "Y":
                    rotated = self._apply_single_qubit_gate(rotated, g.Sdg, q, n)
                    rotated = self._apply_single_qubit_gate(rotated, g.H, q, n)
            outcomes = self._sample(rotated, self.shots)
            support = [q for q, p in enumerate(pauli_str) if p != "I"]
            mask = sum(1 << (n - 1 - q) for q in support)
            parity = np.array([bin(int(o) & mask).count("1") % 2 for o in outcomes])
            total += coeff * float(np.mean(1 - 2 * parity))
        return float(total)

    def _sample(self, state: ndarray, shots: int) -> ndarray:
        probs = np.abs(state) ** 2
        probs /= probs.sum()
        with self._rng_lock:
            return self._rng.choice(len(state), size=shots, p=probs)

    # -- Gate application ---------------------------------------------------

    def _apply_gate(
        self,
        state: ndarray,
        gate_matrix: ndarray,
        qubits: tuple[int, ...],
        n_qubits: int,
    ) -> ndarray:
        """
        Apply a gate to specific qubits via tensor contraction.

        Reshape the state into a rank-n tensor (2×2×...×2), contract the
        gate along the target axes, and reshape back.
        """
        if len(qubits) == 1:
            return self._apply_single_qubit_gate(state, gate_matrix, qubits[0], n_qubits)
        if len(qubits) == 2:
            return self._apply_two_qubit_gate(state, gate_matrix, qubits, n_qubits)
        raise BackendError(f"Gates on {len(qubits)} qubits are not supported")

    @staticmethod
    def _apply_single_qubit_gate(state: ndarray, gate: ndarray, qubit: int, n: int) -> ndarray:
        state = state.reshape([2] * n)
        state_indices = list(_LETTERS[:n])
        result_indices = state_indices.copy()
        result_indices[qubit] = "z"
        einsum_str = (
            f"z{state_indices[qubit]},{''.join(state_indices)}->{''.join(result_indices)}"
        )
        return np.einsum(einsum_str, gate, state).reshape(2**n)

    @staticmethod
    def _apply_two_qubit_gate(
        state: ndarray, gate: ndarray, qubits: tuple[int, ...], n: int
    ) -> ndarray:
        q0, q1 = qubits
        gate_tensor = gate.reshape(2, 2, 2, 2)  # [out0, out1, in0, in1]
        state = state.reshape([2] * n)

        state_indices = list(_LETTERS[:n])
        in0, in1 = state_indices[q0], state_indices[q1]
        result_indices = state_indices.copy()
        result_indices[q0] = "y"
        result_indices[q1] = "z"

        einsum_str = (
            f"yz{in0}{in1},{''.join(state_indices)}->{''.join(result_indices)}"
        )
        return np.einsum(einsum_str, gate_tensor, state).reshape(2**n)

    # -- Utility methods ----------------------------------------------------

    @staticmethod
    def fidelity(state1: ndarray, state2: ndarray) -> float:
        """Compute state fidelity |⟨ψ₁|ψ₂⟩|²."""
        return float(np.abs(np.vdot(state1, state2)) ** 2)
