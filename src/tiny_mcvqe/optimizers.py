"""
Classical optimizers driving the averaged-energy objective.

An optimizer only needs ``optimize(objective, n_params)`` returning the best
value and parameters it found. Objectives are callables ``f(x) -> float``;
those that can also produce gradients expose ``value_and_gradient(x)`` and
``has_gradient``.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Callable, Sequence

import numpy as np
from scipy.optimize import minimize

from tiny_mcvqe.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# scipy.optimize.minimize methods that consume a Jacobian.
GRADIENT_METHODS = frozenset(
    {"BFGS", "L-BFGS-B", "CG", "SLSQP", "TNC", "NEWTON-CG", "TRUST-CONSTR"}
)
GRADIENT_FREE_METHODS = frozenset({"COBYLA", "NELDER-MEAD", "POWELL"})


class Optimizer(ABC):
    """Minimizes a scalar objective over ``n_params`` real parameters."""

    @abstractmethod
    def optimize(
        self, objective: Callable[[np.ndarray], float], n_params: int
    ) -> tuple[float, np.ndarray]:
        """Return ``(best_value, best_params)``."""


class ScipyOptimizer(Optimizer):
    """
    Wrapper around :func:`scipy.optimize.minimize`.

    Parameters
    ----------
    method : str
        Any local method accepted by scipy. Gradient methods receive
        ``objective.value_and_gradient`` as ``jac=True`` when the objective
        has a gradient strategy; otherwise scipy estimates gradients itself.
    maxiter : int
        Iteration cap passed as ``options={"maxiter": ...}``.
    initial_params : array-like, optional
        Starting point. Defaults to zeros, or a small random point if
        ``seed`` is given.
    seed : int, optional
        Seed for the random starting point.
    tol : float, optional
        Tolerance forwarded to scipy.
    """

    def __init__(
        self,
        method: str = "COBYLA",
        maxiter: int = 200,
        initial_params: Sequence[float] | np.ndarray | None = None,
        seed: int | None = None,
        tol: float | None = None,
    ) -> None:
        if method.upper() not in GRADIENT_METHODS | GRADIENT_FREE_METHODS:
            raise ConfigurationError(f"Unsupported optimizer method '{method}'")
        if maxiter < 1:
            raise ConfigurationError(f"maxiter must be positive, got {maxiter}")
        self.method = method
        self.maxiter = maxiter
        self.initial_params = (
            None if initial_params is None else np.asarray(initial_params, dtype=float)
        )
        self.seed = seed
        self.tol = tol
        self.last_result = None

    @property
    def uses_gradient(self) -> bool:
        return self.method.upper() in GRADIENT_METHODS

    def initial_point(self, n_params: int) -> np.ndarray:
        if self.initial_params is not None:
            if self.initial_params.shape != (n_params,):
                raise ConfigurationError(
                    f"initial_params has shape {self.initial_params.shape}, "
                    f"expected ({n_params},)"
                )
            return self.initial_params.copy()
        if self.seed is None:
            return np.zeros(n_params)
        rng = np.random.default_rng(self.seed)
        return rng.uniform(-0.1, 0.1, n_params)

    def optimize(self, objective, n_params):
        x0 = self.initial_point(n_params)

        if self.uses_gradient and getattr(objective, "has_gradient", False):
            fun, jac = objective.value_and_gradient, True
        else:
            fun, jac = objective, None

        result = minimize(
            fun,
            x0,
            method=self.method,
            jac=jac,
            tol=self.tol,
            options={"maxiter": self.maxiter},
        )
        self.last_result = result

        if not result.success:
            logger.warning(
                "%s did not converge after %d evaluations: %s",
                self.method,
                result.nfev,
                result.message,
            )
        else:
            logger.info("%s converged in %d evaluations", self.method, result.nfev)

        return float(result.fun), np.asarray(result.x, dtype=float)

    def __repr__(self) -> str:
        return f"ScipyOptimizer(method={self.method!r}, maxiter={self.maxiter})"


class GridSearchOptimizer(Optimizer):
    """
    Exhaustive search over a fixed list of candidates.

    ``grid`` is either a sequence of full parameter vectors, or a 1-D
    sequence of scalars, each broadcast to every parameter.
    """

    def __init__(self, grid: Sequence) -> None:
        self.grid = [np.asarray(g, dtype=float) for g in grid]
        if not self.grid:
            raise ConfigurationError("GridSearchOptimizer needs at least one candidate")

    def candidates(self, n_params: int) -> list[np.ndarray]:
        points = []
        for g in self.grid:
            if g.ndim == 0:
                points.append(np.full(n_params, float(g)))
            elif g.shape == (n_params,):
                points.append(g.copy())
            else:
                raise ConfigurationError(
                    f"Grid point of shape {g.shape} does not match {n_params} parameters"
                )
        return points

    def optimize(self, objective, n_params):
        best_value, best_params = np.inf, None
        for point in self.candidates(n_params):
            value = float(objective(point))
            logger.debug("grid point %s -> %.9f", point, value)
            if best_params is None or value < best_value:
                best_value, best_params = value, point
        return best_value, best_params

    def __repr__(self) -> str:
        return f"GridSearchOptimizer(n_points={len(self.grid)})"
