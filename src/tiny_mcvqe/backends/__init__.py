"""Execution backends for tiny-mcvqe."""

from tiny_mcvqe.backends.base import Backend
from tiny_mcvqe.backends.statevector import SimulationResult, StatevectorBackend

__all__ = ["Backend", "SimulationResult", "StatevectorBackend"]
