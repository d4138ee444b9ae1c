"""Tests for the AIEM Hamiltonian builder and its reference matrix."""

from dataclasses import replace

import numpy as np
import pytest

from conftest import embed_reference, make_sites
from tiny_mcvqe.chemistry import (
    ANGSTROM_TO_BOHR,
    DEBYE_TO_AU,
    build_aiem,
    dipole_coupling,
    neighbors,
)
from tiny_mcvqe.exceptions import ConfigurationError, DegenerateGeometryError


def cis_projector(n_sites):
    """Columns are |0…0⟩ and the single excitations, in the 2^n basis."""
    P = np.zeros((2 ** n_sites, n_sites + 1))
    for k in range(n_sites + 1):
        unit = np.zeros(n_sites + 1)
        unit[k] = 1.0
        P[:, k] = embed_reference(unit, n_sites)
    return P


# ═══════════════════════════════════════════════════════════════════════
# Topology and coupling
# ═══════════════════════════════════════════════════════════════════════

class TestNeighbors:

    def test_linear(self):
        assert neighbors(4) == [(1,), (0, 2), (1, 3), (2,)]

    def test_cyclic(self):
        assert neighbors(4, cyclic=True) == [(1, 3), (0, 2), (1, 3), (0, 2)]

    def test_two_site_ring_deduplicated(self):
        assert neighbors(2, cyclic=True) == [(1,), (0,)]

    def test_single_site(self):
        assert neighbors(1) == [()]
        assert neighbors(1, cyclic=True) == [()]

    def test_invalid(self):
        with pytest.raises(ConfigurationError):
            neighbors(0)


class TestDipoleCoupling:

    def test_parallel_side_by_side(self):
        """Dipoles perpendicular to the separation: J = μ²/r³."""
        mu = np.array([0.0, 0.0, 1.0])
        r = np.array([2.0, 0.0, 0.0])
        assert dipole_coupling(mu, mu, r) == pytest.approx(1.0 / 8.0)

    def test_head_to_tail(self):
        """Dipoles along the separation: J = −2μ²/r³."""
        mu = np.array([1.0, 0.0, 0.0])
        r = np.array([2.0, 0.0, 0.0])
        assert dipole_coupling(mu, mu, r) == pytest.approx(-2.0 / 8.0)

    def test_symmetric_in_direction(self):
        rng = np.random.default_rng(4)
        a, b, r = rng.normal(size=(3, 3))
        assert dipole_coupling(a, b, r) == pytest.approx(dipole_coupling(b, a, -r))

    def test_zero_distance(self):
        with pytest.raises(ZeroDivisionError):
            dipole_coupling(np.ones(3), np.ones(3), np.zeros(3))


# ═══════════════════════════════════════════════════════════════════════
# Hamiltonian
# ═══════════════════════════════════════════════════════════════════════

class TestHamiltonian:

    def test_single_site(self):
        (site,) = make_sites(1)
        model = build_aiem([site])
        half_gap = (site.ground_energy - site.excited_energy) / 2
        assert model.hamiltonian.terms == pytest.approx({"Z": half_gap})

    def test_single_site_spectrum(self):
        """One isolated site: the two reference energies are ±(E_gs − E_es)/2."""
        (site,) = make_sites(1)
        model = build_aiem([site])
        half_gap = abs(site.ground_energy - site.excited_energy) / 2
        np.testing.assert_allclose(model.reference_energies, [-half_gap, half_gap])

    def test_two_site_coupling_terms(self, two_sites):
        model = build_aiem(two_sites)
        com = np.array([s.center_of_mass for s in two_sites]) * ANGSTROM_TO_BOHR
        mu_t = [s.transition_dipole for s in two_sites]
        mu_diff = [
            (s.ground_dipole - s.excited_dipole) * DEBYE_TO_AU / 2 for s in two_sites
        ]
        r = com[0] - com[1]
        H = model.hamiltonian
        assert H.coefficient({0: "X", 1: "X"}) == pytest.approx(
            dipole_coupling(mu_t[0], mu_t[1], r)
        )
        assert H.coefficient({0: "X", 1: "Z"}) == pytest.approx(
            dipole_coupling(mu_t[0], mu_diff[1], r)
        )
        assert H.coefficient({0: "Z", 1: "Z"}) == pytest.approx(
            dipole_coupling(mu_diff[0], mu_diff[1], r)
        )

    def test_no_coupling_beyond_neighbors(self, four_sites):
        H = build_aiem(four_sites).hamiltonian
        assert H.coefficient({0: "X", 2: "X"}) == 0.0
        assert H.coefficient({0: "Z", 3: "Z"}) == 0.0

    def test_cyclic_couples_ends(self, four_sites):
        linear = build_aiem(four_sites).hamiltonian
        ring = build_aiem(four_sites, cyclic=True).hamiltonian
        assert linear.coefficient({0: "X", 3: "X"}) == 0.0
        assert ring.coefficient({0: "X", 3: "X"}) != 0.0

    def test_idempotent(self, three_sites):
        a = build_aiem(three_sites, cyclic=True)
        b = build_aiem(three_sites, cyclic=True)
        assert a.hamiltonian.allclose(b.hamiltonian, atol=0.0)
        np.testing.assert_array_equal(a.reference_matrix, b.reference_matrix)
        np.testing.assert_array_equal(a.angles, b.angles)


# ═══════════════════════════════════════════════════════════════════════
# Reference matrix
# ═══════════════════════════════════════════════════════════════════════

class TestReferenceMatrix:

    @pytest.mark.parametrize("n_sites,cyclic", [(1, False), (2, False), (3, False), (3, True), (4, True)])
    def test_is_hamiltonian_projection(self, n_sites, cyclic):
        model = build_aiem(make_sites(n_sites), cyclic=cyclic)
        P = cis_projector(n_sites)
        projected = P.T @ np.real(model.hamiltonian.matrix()) @ P
        np.testing.assert_allclose(model.reference_matrix, projected, atol=1e-12)

    def test_shape_and_symmetry(self, four_sites):
        R = build_aiem(four_sites).reference_matrix
        assert R.shape == (5, 5)
        np.testing.assert_allclose(R, R.T)

    def test_eigenbasis(self, four_sites):
        model = build_aiem(four_sites)
        V = model.reference_states
        np.testing.assert_allclose(V.T @ V, np.eye(5), atol=1e-12)
        np.testing.assert_allclose(
            model.reference_matrix @ V, V * model.reference_energies, atol=1e-12
        )
        assert np.all(np.diff(model.reference_energies) >= 0)

    def test_reference_energy_from_coefficients(self, four_sites):
        model = build_aiem(four_sites, cyclic=True)
        z, zz = model.one_body["Z"], model.two_body["ZZ"]
        e_ref = model.one_body["E"] + z.sum() + 0.5 * zz.sum()
        assert model.reference_matrix[0, 0] == pytest.approx(e_ref)
        np.testing.assert_allclose(zz, zz.T)

    def test_angle_matrix_shape(self, four_sites):
        assert build_aiem(four_sites).angles.shape == (4, 5)

    def test_excitation_energies(self, three_sites):
        model = build_aiem(three_sites)
        exc = model.excitation_energies()
        assert exc[0] == 0.0
        assert np.all(exc[1:] > 0)


# ═══════════════════════════════════════════════════════════════════════
# Errors
# ═══════════════════════════════════════════════════════════════════════

class TestErrors:

    def test_empty(self):
        with pytest.raises(ConfigurationError):
            build_aiem([])

    def test_degenerate_geometry(self):
        sites = make_sites(3)
        sites[2] = replace(sites[2], center_of_mass=sites[1].center_of_mass)
        with pytest.raises(DegenerateGeometryError) as info:
            build_aiem(sites)
        assert (info.value.site_a, info.value.site_b) == (1, 2)

    def test_degenerate_geometry_is_configuration_error(self):
        first, second = make_sites(2)
        second = replace(second, center_of_mass=first.center_of_mass)
        with pytest.raises(ConfigurationError, match="zero distance"):
            build_aiem([first, second])

    def test_non_neighbors_may_overlap(self):
        """Only coupled pairs need distinct positions."""
        sites = make_sites(3)
        sites[2] = replace(sites[2], center_of_mass=sites[0].center_of_mass)
        model = build_aiem(sites, cyclic=False)
        assert np.all(np.isfinite(model.reference_energies))
