"""Shared fixtures: small chromophore systems and an exact backend."""

import numpy as np
import pytest

from tiny_mcvqe import SiteRecord, StatevectorBackend
from tiny_mcvqe.chemistry import dump_sites


def make_sites(n_sites, spacing=5.0):
    """Chain of slightly different chromophores along x, ``spacing`` Å apart."""
    sites = []
    for a in range(n_sites):
        sites.append(
            SiteRecord(
                ground_energy=-0.5 - 0.01 * a,
                excited_energy=-0.32 - 0.005 * a,
                center_of_mass=[spacing * a, 0.3 * a, 0.0],
                ground_dipole=[0.4, 0.1 * a, 0.2],
                excited_dipole=[1.1, -0.2, 0.05 * a],
                transition_dipole=[0.9, 0.3 - 0.1 * a, 0.1],
            )
        )
    return sites


@pytest.fixture
def two_sites():
    return make_sites(2)


@pytest.fixture
def three_sites():
    return make_sites(3)


@pytest.fixture
def four_sites():
    return make_sites(4)


@pytest.fixture
def exact_backend():
    return StatevectorBackend()


@pytest.fixture
def data_file(tmp_path, four_sites):
    path = tmp_path / "datafile.txt"
    dump_sites(four_sites, path)
    return path


def embed_reference(vector, n_sites):
    """Place a (reference + singles) vector into the 2^n computational basis."""
    full = np.zeros(2 ** n_sites)
    full[0] = vector[0]
    for a in range(n_sites):
        full[1 << (n_sites - 1 - a)] = vector[a + 1]
    return full
