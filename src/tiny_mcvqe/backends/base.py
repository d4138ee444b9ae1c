"""Execution backend contract."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

import numpy as np

from tiny_mcvqe.circuit import Circuit
from tiny_mcvqe.hamiltonian import PauliHamiltonian


class Backend(ABC):
    """
    Anything that can return Hamiltonian expectation values for circuits.

    Implementations must be safe to call from several threads at once;
    MC-VQE may evaluate reference states concurrently.
    """

    @abstractmethod
    def expectation(
        self,
        observable: PauliHamiltonian,
        circuit: Circuit,
        params: Sequence[float] | np.ndarray | None = None,
    ) -> float:
        """⟨ψ(params)|observable|ψ(params)⟩ for a parameterized circuit.

        ``params`` is matched against ``circuit.parameters`` in order.
        """

    def execute(
        self, observable: PauliHamiltonian, circuits: Sequence[Circuit]
    ) -> list[float]:
        """Evaluate a batch of fully bound circuits, preserving order."""
        return [self.expectation(observable, circuit) for circuit in circuits]
