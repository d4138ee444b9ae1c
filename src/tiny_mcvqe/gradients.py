"""
Gradient strategies for the averaged-energy objective.

A strategy turns one parameterized circuit into a batch of bound circuits
whose energies, returned by a backend, combine into ∂⟨H⟩/∂θ:

1. **Parameter-shift rule** (exact for Pauli rotations, hardware-compatible):
   ∂f/∂θᵢ = [f(θᵢ + s) − f(θᵢ − s)] / (2 sin s), with s = π/2 by default.

2. **Finite-difference** (universal fallback):
   ∂f/∂θᵢ ≈ [f(θᵢ + ε) − f(θᵢ − ε)] / (2ε)

Both cost 2P circuit evaluations for P parameters. Circuits are ordered
``[+0, −0, +1, −1, ...]`` and ``compute_gradient`` expects results in
that order.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

import numpy as np

from tiny_mcvqe.circuit import Circuit
from tiny_mcvqe.gates import ROTATION_GATES


class GradientStrategy(ABC):
    """Produces gradient circuits and folds their results into a gradient."""

    name: str = ""

    @abstractmethod
    def gradient_circuits(self, circuit: Circuit, params: np.ndarray) -> list[Circuit]:
        """Bound circuits to execute for the gradient at ``params``."""

    @abstractmethod
    def compute_gradient(self, results: Sequence[float]) -> np.ndarray:
        """Gradient vector from backend results of :meth:`gradient_circuits`."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class _CentralDifference(GradientStrategy):
    """Shared ± shift bookkeeping; subclasses define the step and the divisor."""

    step: float

    def gradient_circuits(self, circuit: Circuit, params: np.ndarray) -> list[Circuit]:
        params = np.asarray(params, dtype=float)
        if params.shape[0] != circuit.n_parameters:
            raise ValueError(
                f"Circuit has {circuit.n_parameters} parameters, got {params.shape[0]}"
            )
        circuits = []
        for i in range(params.shape[0]):
            params_plus = params.copy()
            params_plus[i] += self.step
            params_minus = params.copy()
            params_minus[i] -= self.step
            circuits.append(circuit.bind(params_plus))
            circuits.append(circuit.bind(params_minus))
        return circuits

    def compute_gradient(self, results: Sequence[float]) -> np.ndarray:
        results = np.asarray(results, dtype=float)
        if results.shape[0] % 2:
            raise ValueError(f"Expected an even number of results, got {results.shape[0]}")
        f_plus, f_minus = results[0::2], results[1::2]
        return (f_plus - f_minus) / self._divisor()

    @abstractmethod
    def _divisor(self) -> float:
        """Denominator of the central difference."""


class ParameterShift(_CentralDifference):
    """
    Exact analytic gradient via the parameter-shift rule.

    Valid when every parameter drives a single Pauli rotation, which is
    how the MC-VQE entangler is built.
    """

    name = "parameter-shift"

    def __init__(self, shift: float = np.pi / 2) -> None:
        if np.isclose(np.sin(shift), 0.0):
            raise ValueError(f"Shift {shift} makes sin(shift) vanish")
        self.step = shift

    def gradient_circuits(self, circuit: Circuit, params: np.ndarray) -> list[Circuit]:
        for inst in circuit.instructions:
            if inst.is_parameterized and inst.name not in ROTATION_GATES:
                raise ValueError(
                    f"Parameter-shift rule does not apply to gate '{inst.name}'"
                )
        return super().gradient_circuits(circuit, params)

    def _divisor(self) -> float:
        return 2 * np.sin(self.step)

    def __repr__(self) -> str:
        return f"ParameterShift(shift={self.step})"


class FiniteDifference(_CentralDifference):
    """Central finite-difference gradient (O(ε²) error)."""

    name = "finite-difference"

    def __init__(self, epsilon: float = 1e-7) -> None:
        if epsilon <= 0:
            raise ValueError(f"epsilon must be positive, got {epsilon}")
        self.step = epsilon

    def _divisor(self) -> float:
        return 2 * self.step

    def __repr__(self) -> str:
        return f"FiniteDifference(epsilon={self.step})"


GRADIENT_STRATEGIES = {
    "parameter-shift": ParameterShift,
    "param_shift": ParameterShift,
    "finite-difference": FiniteDifference,
    "finite_diff": FiniteDifference,
}


def get_gradient_strategy(name: str, **kwargs) -> GradientStrategy:
    """Instantiate a gradient strategy by name."""
    key = name.lower()
    if key not in GRADIENT_STRATEGIES:
        raise ValueError(
            f"Unknown gradient strategy '{name}'. "
            f"Choose from: {sorted(GRADIENT_STRATEGIES)}"
        )
    return GRADIENT_STRATEGIES[key](**kwargs)
