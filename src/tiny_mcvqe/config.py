"""
Run configuration for MC-VQE.

Options are validated once, when :class:`MCVQEConfig` is created, so that
every configuration problem surfaces before any circuit is built.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping, Sequence

from tiny_mcvqe.exceptions import ConfigurationError
from tiny_mcvqe.gradients import GRADIENT_STRATEGIES
from tiny_mcvqe.optimizers import GRADIENT_FREE_METHODS, GRADIENT_METHODS

# Hyphenated/camel-case option names accepted by ``from_dict``.
_ALIASES = {
    "nChromophores": "n_sites",
    "n-chromophores": "n_sites",
    "data-path": "data_path",
    "n-states": "n_states",
    "log-level": "log_level",
    "gradient-strategy": "gradient_strategy",
    "max-iterations": "max_iterations",
    "max-workers": "max_workers",
}


@dataclass
class MCVQEConfig:
    """
    Options of one MC-VQE run.

    Attributes
    ----------
    n_sites : int
        Number of chromophores (qubits).
    data_path : str or Path, optional
        Block-format site data file; exclusive with ``sites``.
    sites : sequence, optional
        In-memory :class:`~tiny_mcvqe.chemistry.SiteRecord` objects or
        mappings; exclusive with ``data_path``.
    cyclic : bool
        Ring instead of open chain.
    n_states : int, optional
        Number of reference states to average over (default ``n_sites + 1``).
    interference : bool
        Run the interference stage and diagonalize the entangled Hamiltonian.
    log_level : int
        0 → WARNING, 1 → INFO, 2 or more → DEBUG.
    gradient_strategy : str, optional
        ``"parameter-shift"`` or ``"finite-difference"``.
    optimizer : str
        ``scipy.optimize.minimize`` method name.
    max_iterations : int
        Optimizer iteration cap.
    shots : int
        0 for exact expectation values.
    seed : int, optional
        Seed for sampling and random starting points.
    max_workers : int
        Threads used to evaluate reference states concurrently.
    """

    n_sites: int
    data_path: str | Path | None = None
    sites: Sequence[Any] | None = None
    cyclic: bool = False
    n_states: int | None = None
    interference: bool = True
    log_level: int = 0
    gradient_strategy: str | None = None
    optimizer: str = "COBYLA"
    max_iterations: int = 200
    shots: int = 0
    seed: int | None = None
    max_workers: int = 1

    def __post_init__(self):
        if isinstance(self.n_sites, bool) or not isinstance(self.n_sites, int):
            raise ConfigurationError(f"n_sites must be an integer, got {self.n_sites!r}")
        if self.n_sites < 1:
            raise ConfigurationError(f"n_sites must be positive, got {self.n_sites}")

        if (self.data_path is None) == (self.sites is None):
            raise ConfigurationError("Exactly one of data_path or sites is required")
        if self.data_path is not None:
            self.data_path = Path(self.data_path)
        elif len(self.sites) != self.n_sites:
            raise ConfigurationError(
                f"Expected {self.n_sites} site records, got {len(self.sites)}"
            )

        if self.n_states is None:
            self.n_states = self.n_sites + 1
        elif not 1 <= self.n_states <= self.n_sites + 1:
            raise ConfigurationError(
                f"n_states must be between 1 and {self.n_sites + 1}, got {self.n_states}"
            )

        if self.log_level < 0:
            raise ConfigurationError(f"log_level must be non-negative, got {self.log_level}")
        strategy = self.gradient_strategy
        if strategy is not None and strategy.lower() not in GRADIENT_STRATEGIES:
            raise ConfigurationError(
                f"Unknown gradient strategy '{self.gradient_strategy}'. "
                f"Available: {sorted(GRADIENT_STRATEGIES)}"
            )
        if self.optimizer.upper() not in GRADIENT_METHODS | GRADIENT_FREE_METHODS:
            raise ConfigurationError(f"Unsupported optimizer method '{self.optimizer}'")
        if self.max_iterations < 1:
            raise ConfigurationError(
                f"max_iterations must be positive, got {self.max_iterations}"
            )
        if self.shots < 0:
            raise ConfigurationError(f"shots must be non-negative, got {self.shots}")
        if self.max_workers < 1:
            raise ConfigurationError(f"max_workers must be positive, got {self.max_workers}")

    @property
    def logging_level(self) -> int:
        """:mod:`logging` level matching ``log_level``."""
        if self.log_level == 0:
            return logging.WARNING
        if self.log_level == 1:
            return logging.INFO
        return logging.DEBUG

    @classmethod
    def from_dict(cls, options: Mapping[str, Any]) -> MCVQEConfig:
        """Build a config from a mapping, accepting hyphenated option names."""
        known = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in options.items():
            name = _ALIASES.get(key, key.replace("-", "_"))
            if name not in known:
                raise ConfigurationError(f"Unknown option '{key}'")
            kwargs[name] = value
        if "n_sites" not in kwargs:
            raise ConfigurationError("Missing required option 'nChromophores'")
        if kwargs.get("data_path") == "":
            raise ConfigurationError("Missing required option 'data-path'")
        return cls(**kwargs)
