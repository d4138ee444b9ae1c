"""
tiny-mcvqe: Multi-Configurational VQE for chains and rings of chromophores.

Features:
- AIEM Hamiltonian and CIS reference states from per-site spectroscopic data
- Exact state preparation of every reference, shared brick-wall entangler
- Averaged-energy optimization with scipy, optional parameter-shift gradients
- Interference stage and corrected excited-state spectrum

Quick Start:
    >>> from tiny_mcvqe import MCVQE, MCVQEConfig
    >>> config = MCVQEConfig(n_sites=4, data_path="datafile.txt")
    >>> result = MCVQE(config).run()
    >>> print(result.spectrum_report())
"""
__version__ = "0.1.0"

from .circuit import Circuit, Parameter
from .hamiltonian import PauliHamiltonian
from .backends import Backend, StatevectorBackend
from .chemistry import SiteRecord, build_aiem, load_sites, sites_from_records
from .ansatz import entangler_circuit, mcvqe_circuit, n_entangler_params, state_preparation_circuit
from .gradients import FiniteDifference, GradientStrategy, ParameterShift, get_gradient_strategy
from .optimizers import GridSearchOptimizer, Optimizer, ScipyOptimizer
from .config import MCVQEConfig
from .exceptions import BackendError, ConfigurationError, DegenerateGeometryError, MCVQEError
from .mcvqe import (
    MCVQE,
    AveragedEnergyObjective,
    BestEnergyTracker,
    EvaluationStats,
    MCVQEResult,
)
from .qlogger import disable_logging, enable_logging

__all__ = [
    'MCVQE',
    'MCVQEConfig',
    'MCVQEResult',
    'AveragedEnergyObjective',
    'BestEnergyTracker',
    'EvaluationStats',
    'Circuit',
    'Parameter',
    'PauliHamiltonian',
    'Backend',
    'StatevectorBackend',
    'SiteRecord',
    'build_aiem',
    'load_sites',
    'sites_from_records',
    'state_preparation_circuit',
    'entangler_circuit',
    'mcvqe_circuit',
    'n_entangler_params',
    'GradientStrategy',
    'ParameterShift',
    'FiniteDifference',
    'get_gradient_strategy',
    'Optimizer',
    'ScipyOptimizer',
    'GridSearchOptimizer',
    'MCVQEError',
    'ConfigurationError',
    'DegenerateGeometryError',
    'BackendError',
    'enable_logging',
    'disable_logging',
]
