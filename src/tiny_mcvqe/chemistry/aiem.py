"""
Ab initio exciton model (AIEM) Hamiltonian and CIS reference states.

Each chromophore A is a two-level system (|0⟩ ground, |1⟩ excited). With

    S_A = (E_gs + E_es)/2        D_A = (E_gs − E_es)/2
    μ⁺_A = (μ_gs + μ_es)/2       μ⁻_A = (μ_gs − μ_es)/2       μᵀ_A transition

and the classical point-dipole interaction

    J(μ_A, μ_B, r_AB) = (μ_A·μ_B − 3 (μ_A·n̂)(μ_B·n̂)) / |r_AB|³

the Hamiltonian reads

    H = E + Σ_A (Z_A Ẑ_A + X_A X̂_A)
          + Σ_{A<B} (XX_AB X̂X̂ + XZ_AB X̂Ẑ + ZX_AB ẐX̂ + ZZ_AB ẐẐ)

with couplings restricted to neighboring chromophores. Σ S_A is dropped
since it only shifts the spectrum.

The reference (CIS) matrix is H projected onto |0…0⟩ and the N single
excitations; its eigenvectors are the reference states MC-VQE starts
from, and :func:`~tiny_mcvqe.chemistry.angles.state_preparation_angles`
turns them into circuit angles.

References: Parrish et al., PRL 122, 230401 (2019) and its Supplemental
Material; arXiv:1906.08728.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Sequence

import numpy as np

from tiny_mcvqe.chemistry.angles import state_preparation_angles
from tiny_mcvqe.chemistry.sites import SiteRecord
from tiny_mcvqe.exceptions import ConfigurationError, DegenerateGeometryError
from tiny_mcvqe.hamiltonian import PauliHamiltonian

logger = logging.getLogger(__name__)

ANGSTROM_TO_BOHR = 1.8897259886
DEBYE_TO_AU = 0.393430307


def neighbors(n_sites: int, cyclic: bool = False) -> list[tuple[int, ...]]:
    """
    Coupled neighbors of every site.

    Linear chains couple ``A−1`` and ``A+1`` where they exist; rings wrap
    around. Duplicates (a two-site ring) are removed.
    """
    if n_sites < 1:
        raise ConfigurationError(f"n_sites must be positive, got {n_sites}")
    pairs = []
    for a in range(n_sites):
        if cyclic:
            candidates = {(a - 1) % n_sites, (a + 1) % n_sites}
        else:
            candidates = {b for b in (a - 1, a + 1) if 0 <= b < n_sites}
        candidates.discard(a)
        pairs.append(tuple(sorted(candidates)))
    return pairs


def dipole_coupling(mu_a: np.ndarray, mu_b: np.ndarray, r_ab: np.ndarray) -> float:
    """Point-dipole interaction energy of ``mu_a`` and ``mu_b`` separated by ``r_ab``."""
    d_ab = np.linalg.norm(r_ab)
    if d_ab == 0.0:
        raise ZeroDivisionError("zero inter-site distance")
    n_ab = r_ab / d_ab
    return float(
        (np.dot(mu_a, mu_b) - 3.0 * np.dot(mu_a, n_ab) * np.dot(mu_b, n_ab)) / d_ab**3
    )


@dataclass(frozen=True)
class AIEMModel:
    """
    Preprocessed chromophore system.

    Attributes
    ----------
    hamiltonian : PauliHamiltonian
        AIEM Hamiltonian on ``n_sites`` qubits.
    reference_matrix : np.ndarray
        Symmetric ``(n_sites + 1) × (n_sites + 1)`` CIS matrix.
    reference_energies : np.ndarray
        Ascending eigenvalues of the reference matrix.
    reference_states : np.ndarray
        Orthonormal eigenvectors (columns) of the reference matrix.
    angles : np.ndarray
        ``n_sites × (n_sites + 1)`` state-preparation angles.
    """

    n_sites: int
    cyclic: bool
    neighbors: list[tuple[int, ...]]
    hamiltonian: PauliHamiltonian
    reference_matrix: np.ndarray = field(repr=False)
    reference_energies: np.ndarray = field(repr=False)
    reference_states: np.ndarray = field(repr=False)
    angles: np.ndarray = field(repr=False)
    one_body: dict = field(repr=False, default_factory=dict)
    two_body: dict = field(repr=False, default_factory=dict)

    @property
    def n_states(self) -> int:
        return self.n_sites + 1

    def excitation_energies(self) -> np.ndarray:
        """Reference excitation energies relative to the lowest reference."""
        return self.reference_energies - self.reference_energies[0]


def build_aiem(sites: Sequence[SiteRecord], cyclic: bool = False) -> AIEMModel:
    """
    Build the AIEM Hamiltonian, the reference matrix and its eigenbasis.

    Parameters
    ----------
    sites : sequence of SiteRecord
        One record per chromophore, in chain order.
    cyclic : bool
        Couple the last chromophore back to the first.

    Raises
    ------
    ConfigurationError
        If ``sites`` is empty.
    DegenerateGeometryError
        If two coupled chromophores share a center of mass.
    """
    n = len(sites)
    if n == 0:
        raise ConfigurationError("At least one chromophore is required")

    energies_gs = np.array([s.ground_energy for s in sites])
    energies_es = np.array([s.excited_energy for s in sites])
    com = np.array([s.center_of_mass for s in sites]) * ANGSTROM_TO_BOHR
    dipole_gs = np.array([s.ground_dipole for s in sites]) * DEBYE_TO_AU
    dipole_es = np.array([s.excited_dipole for s in sites]) * DEBYE_TO_AU
    dipole_t = np.array([s.transition_dipole for s in sites])

    d_a = (energies_gs - energies_es) / 2.0
    dipole_sum = (dipole_gs + dipole_es) / 2.0
    dipole_diff = (dipole_gs - dipole_es) / 2.0

    pairs = neighbors(n, cyclic)

    def coupling(mu_a, mu_b, a, b):
        try:
            return dipole_coupling(mu_a, mu_b, com[a] - com[b])
        except ZeroDivisionError:
            raise DegenerateGeometryError(min(a, b), max(a, b)) from None

    z_a = d_a.copy()
    x_a = np.zeros(n)
    xx = np.zeros((n, n))
    xz = np.zeros((n, n))
    zx = np.zeros((n, n))
    zz = np.zeros((n, n))
    offset = 0.0

    for a in range(n):
        for b in pairs[a]:
            offset += 0.5 * coupling(dipole_sum[a], dipole_sum[b], a, b)
            x_a[a] += 0.5 * coupling(dipole_t[a], dipole_sum[b], a, b)
            x_a[a] += 0.5 * coupling(dipole_sum[b], dipole_t[a], b, a)
            z_a[a] += 0.5 * coupling(dipole_sum[a], dipole_diff[b], a, b)
            z_a[a] += 0.5 * coupling(dipole_diff[b], dipole_sum[a], b, a)

            xx[a, b] = coupling(dipole_t[a], dipole_t[b], a, b)
            xz[a, b] = coupling(dipole_t[a], dipole_diff[b], a, b)
            zx[a, b] = coupling(dipole_diff[a], dipole_t[b], a, b)
            zz[a, b] = coupling(dipole_diff[a], dipole_diff[b], a, b)

    hamiltonian = PauliHamiltonian(n)
    for a in range(n):
        # Every directed pair carries half the coupling so that each
        # unordered pair ends up with both directions' contributions.
        for b in pairs[a]:
            hamiltonian.add_term({a: "X", b: "X"}, 0.5 * xx[a, b])
            hamiltonian.add_term({a: "X", b: "Z"}, 0.5 * xz[a, b])
            hamiltonian.add_term({a: "Z", b: "X"}, 0.5 * zx[a, b])
            hamiltonian.add_term({a: "Z", b: "Z"}, 0.5 * zz[a, b])
        hamiltonian.add_term({a: "Z"}, z_a[a])
        hamiltonian.add_term({a: "X"}, x_a[a])
    hamiltonian.add_constant(offset)

    reference_matrix = _reference_matrix(offset, z_a, x_a, xx, xz, zx, zz, pairs)
    reference_energies, reference_states = np.linalg.eigh(reference_matrix)
    angles = state_preparation_angles(reference_states, n)

    logger.debug("AIEM Hamiltonian:\n%s", hamiltonian)
    logger.debug("Reference energies: %s", reference_energies)

    return AIEMModel(
        n_sites=n,
        cyclic=cyclic,
        neighbors=pairs,
        hamiltonian=hamiltonian,
        reference_matrix=reference_matrix,
        reference_energies=reference_energies,
        reference_states=reference_states,
        angles=angles,
        one_body={"E": offset, "Z": z_a, "X": x_a},
        two_body={"XX": xx, "XZ": xz, "ZX": zx, "ZZ": zz},
    )


def _reference_matrix(offset, z_a, x_a, xx, xz, zx, zz, pairs) -> np.ndarray:
    """CIS matrix in the basis (|0…0⟩, |1⟩_0, …, |1⟩_{N−1})."""
    n = len(z_a)
    cis = np.zeros((n + 1, n + 1))

    e_ref = offset + z_a.sum() + 0.5 * zz.sum()
    cis[0, 0] = e_ref

    for a in range(n):
        cis[a + 1, a + 1] = e_ref - 2.0 * z_a[a]
        cis[a + 1, 0] = x_a[a]
        for b in pairs[a]:
            cis[a + 1, a + 1] -= zz[a, b] + zz[b, a]
            cis[a + 1, 0] += 0.5 * (xz[a, b] + zx[b, a])
            cis[a + 1, b + 1] = xx[a, b]
        cis[0, a + 1] = cis[a + 1, 0]

    return cis
