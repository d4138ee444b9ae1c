"""
Chromophore chemistry: site data, the AIEM Hamiltonian and state-preparation angles.

Example
-------
>>> from tiny_mcvqe.chemistry import load_sites, build_aiem
>>> model = build_aiem(load_sites("datafile.txt", 4), cyclic=False)
>>> model.reference_energies          # CIS energies, ascending
"""

from tiny_mcvqe.chemistry.aiem import (
    ANGSTROM_TO_BOHR,
    DEBYE_TO_AU,
    AIEMModel,
    build_aiem,
    dipole_coupling,
    neighbors,
)
from tiny_mcvqe.chemistry.angles import (
    column_angles,
    reference_amplitudes,
    state_preparation_angles,
)
from tiny_mcvqe.chemistry.sites import SiteRecord, dump_sites, load_sites, sites_from_records

__all__ = [
    "AIEMModel",
    "ANGSTROM_TO_BOHR",
    "DEBYE_TO_AU",
    "SiteRecord",
    "build_aiem",
    "column_angles",
    "dipole_coupling",
    "dump_sites",
    "load_sites",
    "neighbors",
    "reference_amplitudes",
    "sites_from_records",
    "state_preparation_angles",
]
