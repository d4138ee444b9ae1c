"""
Multi-Configurational VQE for chains and rings of chromophores.

MC-VQE (Parrish et al., PRL 122, 230401) finds several low-lying states at
once. Every reference state from the CIS problem gets its own fixed
state-preparation circuit, and one entangler U(x) is shared by all of
them. The optimizer minimizes the *average* energy over the references;
afterwards the entangled Hamiltonian

    H̃_ab = ⟨ψ_a(x)|H|ψ_b(x)⟩

is filled from interference measurements and diagonalized, giving the
corrected spectrum.

Usage:
    from tiny_mcvqe import MCVQE, MCVQEConfig

    config = MCVQEConfig(n_sites=4, data_path="datafile.txt")
    result = MCVQE(config).run()
    print(result.spectrum_report())
"""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Optional, Sequence

import numpy as np

from tiny_mcvqe.ansatz import entangler_circuit, mcvqe_circuit
from tiny_mcvqe.backends import Backend, StatevectorBackend
from tiny_mcvqe.chemistry import build_aiem, load_sites, sites_from_records
from tiny_mcvqe.circuit import Circuit
from tiny_mcvqe.config import MCVQEConfig
from tiny_mcvqe.exceptions import BackendError, MCVQEError
from tiny_mcvqe.gradients import GradientStrategy, get_gradient_strategy
from tiny_mcvqe.hamiltonian import PauliHamiltonian
from tiny_mcvqe.optimizers import Optimizer, ScipyOptimizer
from tiny_mcvqe.qlogger import enable_logging

logger = logging.getLogger(__name__)

_SQRT2 = np.sqrt(2.0)


# ═══════════════════════════════════════════════════════════════
# Accumulators
# ═══════════════════════════════════════════════════════════════

@dataclass
class EvaluationStats:
    """Run metadata collected while the objective is evaluated."""

    n_evaluations: int = 0
    circuit_depth: int = 0
    n_gates: int = 0
    history: list[float] = field(default_factory=list)
    _lock: threading.Lock = field(
        default_factory=threading.Lock, init=False, repr=False, compare=False
    )

    def record(self, average: float, circuit: Circuit) -> None:
        with self._lock:
            self.n_evaluations += 1
            self.circuit_depth = circuit.depth
            self.n_gates = circuit.num_gates
            self.history.append(average)



class BestEnergyTracker:
    """
    Lowest average energy seen so far, with its per-state energies.

    The average and the per-state snapshot are replaced together, only
    when a strictly lower average arrives, and under a lock so readers
    never see one without the other.
    """

    def __init__(self, n_states: int) -> None:
        self._lock = threading.Lock()
        self._energy = np.inf
        self._diagonal = np.full(n_states, np.nan)
        self._params: Optional[np.ndarray] = None

    def update(
        self, average: float, energies: Sequence[float], params: np.ndarray | None = None
    ) -> bool:
        """Record ``energies`` if ``average`` beats the best so far. Returns True if it did."""
        energies = np.array(energies, dtype=float)
        with self._lock:
            if not average < self._energy:
                return False
            self._energy = float(average)
            self._diagonal = energies
            self._params = None if params is None else np.array(params, dtype=float)
            return True

    def snapshot(self) -> tuple[float, np.ndarray]:
        """``(best_average, per_state_energies)`` as one consistent pair."""
        with self._lock:
            return self._energy, self._diagonal.copy()

    @property
    def best_energy(self) -> float:
        return self.snapshot()[0]

    @property
    def diagonal(self) -> np.ndarray:
        return self.snapshot()[1]

    @property
    def best_params(self) -> Optional[np.ndarray]:
        with self._lock:
            return None if self._params is None else self._params.copy()


# ═══════════════════════════════════════════════════════════════
# Objective
# ═══════════════════════════════════════════════════════════════

class AveragedEnergyObjective:
    """
    Mean energy of all reference states under one shared entangler.

    Parameters
    ----------
    hamiltonian : PauliHamiltonian
        Observable measured on every state.
    angles : np.ndarray
        ``n_sites × n_states`` state-preparation angles. A 1-D array is
        taken as a single state.
    entangler : Circuit
        Parameterized circuit shared by all states.
    backend : Backend
        Evaluates expectation values.
    gradient_strategy : GradientStrategy, optional
        Needed for :meth:`value_and_gradient`.
    max_workers : int
        Evaluate states concurrently when greater than 1.
    tracker : BestEnergyTracker, optional
        Best-so-far accumulator; a fresh one is created if omitted.
    """

    def __init__(
        self,
        hamiltonian: PauliHamiltonian,
        angles: np.ndarray,
        entangler: Circuit,
        backend: Backend,
        gradient_strategy: Optional[GradientStrategy] = None,
        max_workers: int = 1,
        tracker: Optional[BestEnergyTracker] = None,
    ) -> None:
        self.hamiltonian = hamiltonian
        angles = np.asarray(angles, dtype=float)
        if angles.ndim == 1:
            angles = angles.reshape(-1, 1)
        if angles.ndim != 2 or angles.shape[0] != entangler.n_qubits:
            raise ValueError(
                f"Expected angles of shape ({entangler.n_qubits}, n_states), got {angles.shape}"
            )
        self.angles = angles

        self.entangler = entangler
        self.backend = backend
        self.gradient_strategy = gradient_strategy
        self.max_workers = max_workers
        self.n_states = self.angles.shape[1]
        self.tracker = tracker if tracker is not None else BestEnergyTracker(self.n_states)
        self.stats = EvaluationStats()
        self.circuits = [
            mcvqe_circuit(self.angles[:, s], entangler) for s in range(self.n_states)
        ]

    @property
    def n_params(self) -> int:
        return self.entangler.n_parameters

    @property
    def has_gradient(self) -> bool:
        return self.gradient_strategy is not None

    def __call__(self, x: np.ndarray) -> float:
        return self.evaluate(x, with_gradient=False)[0]

    def value_and_gradient(self, x: np.ndarray) -> tuple[float, np.ndarray]:
        if self.gradient_strategy is None:
            raise MCVQEError("value_and_gradient requires a gradient strategy")
        average, _, gradient = self.evaluate(x, with_gradient=True)
        return average, gradient

    def evaluate(
        self, x: np.ndarray, with_gradient: bool = False
    ) -> tuple[float, np.ndarray, Optional[np.ndarray]]:
        """
        Evaluate every state at ``x``.

        Returns
        -------
        tuple
            ``(average, per_state_energies, average_gradient or None)``.
        """
        x = np.asarray(x, dtype=float).ravel()
        if x.shape[0] != self.n_params:
            raise ValueError(f"Expected {self.n_params} parameters, got {x.shape[0]}")

        def run_state(s):
            return self._state_energy(s, x, with_gradient)

        if self.max_workers > 1 and self.n_states > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
                outcomes = list(pool.map(run_state, range(self.n_states)))
        else:
            outcomes = [run_state(s) for s in range(self.n_states)]

        energies = np.array([energy for energy, _ in outcomes])
        average = float(np.mean(energies))

        gradient = None
        if with_gradient:
            gradient = np.zeros(self.n_params)
            for _, state_gradient in outcomes:
                gradient += state_gradient / self.n_states

        if self.tracker.update(average, energies, x):
            logger.debug("New best average energy %.12f", average)
        self.stats.record(average, self.circuits[-1])
        logger.debug("Evaluation %d: energies %s, average %.12f",
                     self.stats.n_evaluations, energies, average)

        return average, energies, gradient

    def _state_energy(self, s: int, x: np.ndarray, with_gradient: bool):
        circuit = self.circuits[s]
        try:
            energy = self.backend.expectation(self.hamiltonian, circuit, x)
            gradient = None
            if with_gradient:
                gradient_circuits = self.gradient_strategy.gradient_circuits(circuit, x)
                results = self.backend.execute(self.hamiltonian, gradient_circuits)
                gradient = self.gradient_strategy.compute_gradient(results)
        except MCVQEError:
            raise
        except Exception as exc:
            raise BackendError(f"Backend failed while evaluating state {s}") from exc
        return float(energy), gradient


# ═══════════════════════════════════════════════════════════════
# Result
# ═══════════════════════════════════════════════════════════════

@dataclass
class MCVQEResult:
    """
    Outcome of an MC-VQE run.

    ``spectrum`` and ``eigenvectors`` are set only when the interference
    stage ran.
    """

    energy: float
    params: np.ndarray
    diagonal: np.ndarray
    reference_energies: np.ndarray
    circuit_depth: int
    n_gates: int
    n_evaluations: int = 0
    history: list[float] = field(default_factory=list)
    entangled_hamiltonian: Optional[np.ndarray] = None
    spectrum: Optional[np.ndarray] = None
    eigenvectors: Optional[np.ndarray] = None
    timings: dict[str, float] = field(default_factory=dict)

    @property
    def n_states(self) -> int:
        return len(self.diagonal)

    def excitation_energies(self) -> np.ndarray:
        """Spectrum relative to its lowest level (diagonal if no interference)."""
        levels = self.spectrum if self.spectrum is not None else np.sort(self.diagonal)
        return levels - levels[0]

    def spectrum_report(self) -> str:
        """Text block listing the corrected energies, one per line."""
        if self.spectrum is None:
            return "MC-VQE energy spectrum: not computed (interference disabled)"
        lines = ["MC-VQE energy spectrum"]
        lines.extend(f"{e:.9g}" for e in self.spectrum)
        return "\n".join(lines)

    def __str__(self) -> str:
        return (
            f"MCVQEResult(energy={self.energy:.9f}, n_states={self.n_states}, "
            f"depth={self.circuit_depth}, gates={self.n_gates})"
        )


# ═══════════════════════════════════════════════════════════════
# Driver
# ═══════════════════════════════════════════════════════════════

class MCVQE:
    """
    MC-VQE driver.

    Parameters
    ----------
    config : MCVQEConfig or sequence of site records
        Run options. A bare sequence of sites is wrapped in a config, with
        ``options`` forwarded to :class:`MCVQEConfig`.
    backend : Backend, optional
        Defaults to an exact :class:`StatevectorBackend` (or a sampling
        one if ``config.shots > 0``).
    optimizer : Optimizer, optional
        Defaults to :class:`ScipyOptimizer` with ``config.optimizer``.
    gradient_strategy : GradientStrategy, optional
        Defaults to the strategy named by ``config.gradient_strategy``.

    Example
    -------
    >>> result = MCVQE(sites, cyclic=False).run()
    >>> result.spectrum
    """

    def __init__(
        self,
        config,
        backend: Optional[Backend] = None,
        optimizer: Optional[Optimizer] = None,
        gradient_strategy: Optional[GradientStrategy] = None,
        **options,
    ) -> None:
        if not isinstance(config, MCVQEConfig):
            sites = list(config)
            config = MCVQEConfig(n_sites=len(sites), sites=sites, **options)
        elif options:
            raise TypeError("Extra options are only accepted together with a site list")
        self.config = config

        if config.log_level > 0:
            enable_logging(config.logging_level)

        start = time.perf_counter()
        if config.data_path is not None:
            sites = load_sites(config.data_path, config.n_sites)
        else:
            sites = sites_from_records(config.sites)
        self.model = build_aiem(sites, cyclic=config.cyclic)
        self.angles = self.model.angles[:, : config.n_states]
        self.entangler = entangler_circuit(config.n_sites, config.cyclic)
        self.preprocessing_time = time.perf_counter() - start
        logger.info(
            "AIEM Hamiltonian and state preparation parameters [%.3f s]",
            self.preprocessing_time,
        )
        logger.debug("Entangler circuit:\n%s", self.entangler.draw())

        self.backend = backend or StatevectorBackend(shots=config.shots, seed=config.seed)
        if gradient_strategy is None and config.gradient_strategy is not None:
            gradient_strategy = get_gradient_strategy(config.gradient_strategy)
        self.gradient_strategy = gradient_strategy
        self.optimizer = optimizer or ScipyOptimizer(
            method=config.optimizer, maxiter=config.max_iterations, seed=config.seed
        )

    @property
    def hamiltonian(self) -> PauliHamiltonian:
        return self.model.hamiltonian

    @property
    def n_states(self) -> int:
        return self.angles.shape[1]

    @property
    def n_params(self) -> int:
        return self.entangler.n_parameters

    def objective(self) -> AveragedEnergyObjective:
        """Fresh averaged-energy objective with its own best-so-far tracker."""
        return AveragedEnergyObjective(
            self.hamiltonian,
            self.angles,
            self.entangler,
            self.backend,
            gradient_strategy=self.gradient_strategy,
            max_workers=self.config.max_workers,
        )

    def run(self) -> MCVQEResult:
        """Optimize the shared entangler, then (optionally) correct the spectrum."""
        objective = self.objective()

        start = time.perf_counter()
        _, params = self.optimizer.optimize(objective, self.n_params)
        energy, diagonal = objective.tracker.snapshot()
        elapsed = time.perf_counter() - start
        logger.info(
            "Optimization finished after %d evaluations: average energy %.12f [%.3f s]",
            objective.stats.n_evaluations,
            energy,
            elapsed,
        )
        return self._finish(objective, energy, diagonal, params, optimization=elapsed)

    def evaluate(self, params: Sequence[float] | np.ndarray) -> MCVQEResult:
        """Single pass at fixed ``params``: no optimization."""
        params = np.asarray(params, dtype=float).ravel()
        objective = self.objective()
        start = time.perf_counter()
        energy, diagonal, _ = objective.evaluate(params)
        return self._finish(
            objective, energy, diagonal, params, evaluation=time.perf_counter() - start
        )

    def _finish(self, objective, energy, diagonal, params, **timings) -> MCVQEResult:
        result = MCVQEResult(
            energy=float(energy),
            params=np.asarray(params, dtype=float),
            diagonal=diagonal,
            reference_energies=self.model.reference_energies[: self.n_states],
            circuit_depth=objective.stats.circuit_depth,
            n_gates=objective.stats.n_gates,
            n_evaluations=objective.stats.n_evaluations,
            history=list(objective.stats.history),
            timings={"preprocessing": self.preprocessing_time, **timings},
        )
        if self.config.interference:
            start = time.perf_counter()
            result.entangled_hamiltonian = self.entangled_hamiltonian(diagonal, params)
            result.timings["interference"] = time.perf_counter() - start
            result.spectrum, result.eigenvectors = np.linalg.eigh(
                result.entangled_hamiltonian
            )
            logger.info("%s", result.spectrum_report())
        return result

    # -- Interference -------------------------------------------------------

    def interference(self, params: Sequence[float] | np.ndarray) -> np.ndarray:
        """
        Off-diagonal entangled-Hamiltonian elements at fixed ``params``.

        For each pair ``a < b`` the superposition angles
        ``(θ_a ± θ_b)/√2`` are prepared (not renormalized), the entangler
        is appended, and ``H̃_ab = (E₊ − E₋)/√2``. The diagonal of the
        returned matrix is zero.
        """
        params = np.asarray(params, dtype=float).ravel()
        start = time.perf_counter()
        pairs = [(a, b) for a in range(self.n_states) for b in range(a + 1, self.n_states)]

        def pair_element(pair):
            a, b = pair
            plus = mcvqe_circuit((self.angles[:, a] + self.angles[:, b]) / _SQRT2, self.entangler)
            minus = mcvqe_circuit((self.angles[:, a] - self.angles[:, b]) / _SQRT2, self.entangler)
            try:
                e_plus = self.backend.expectation(self.hamiltonian, plus, params)
                e_minus = self.backend.expectation(self.hamiltonian, minus, params)
            except MCVQEError:
                raise
            except Exception as exc:
                raise BackendError(
                    f"Backend failed while evaluating interference pair ({a}, {b})"
                ) from exc
            return (e_plus - e_minus) / _SQRT2

        if self.config.max_workers > 1 and len(pairs) > 1:
            with ThreadPoolExecutor(max_workers=self.config.max_workers) as pool:
                elements = list(pool.map(pair_element, pairs))
        else:
            elements = [pair_element(pair) for pair in pairs]

        matrix = np.zeros((self.n_states, self.n_states))
        for (a, b), value in zip(pairs, elements):
            matrix[a, b] = matrix[b, a] = value

        logger.info("Interference matrix computed [%.3f s]", time.perf_counter() - start)
        logger.debug("Interference matrix:\n%s", matrix)
        return matrix

    def entangled_hamiltonian(
        self, diagonal: Sequence[float] | np.ndarray, params: Sequence[float] | np.ndarray
    ) -> np.ndarray:
        """Symmetric matrix with ``diagonal`` and interference off-diagonals."""
        matrix = self.interference(params)
        np.fill_diagonal(matrix, np.asarray(diagonal, dtype=float))
        return matrix
