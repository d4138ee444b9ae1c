"""Tests for PauliHamiltonian."""

import numpy as np
import pytest

from tiny_mcvqe import PauliHamiltonian
from tiny_mcvqe.hamiltonian import apply_pauli_string, pauli_string_matrix, split_terms


class TestConstruction:

    def test_add_term_by_site(self):
        H = PauliHamiltonian(3)
        H.add_term({0: "X", 2: "Z"}, 0.5)
        assert H.terms == {"XIZ": 0.5}

    def test_terms_accumulate(self):
        H = PauliHamiltonian(2)
        H.add_term({0: "Z"}, 0.25).add_term({0: "Z"}, 0.5)
        assert H.coefficient({0: "Z"}) == pytest.approx(0.75)

    def test_cancelling_terms_dropped(self):
        H = PauliHamiltonian(2)
        H.add_term({1: "X"}, 0.3).add_term({1: "X"}, -0.3)
        assert H.n_terms == 0

    def test_tiny_coefficients_dropped(self):
        H = PauliHamiltonian(1)
        H.add_term({0: "Z"}, 1e-17)
        assert H.terms == {}

    def test_constant(self):
        H = PauliHamiltonian(2).add_constant(-1.5)
        assert H.constant == -1.5
        assert H.terms == {"II": -1.5}

    def test_invalid_site(self):
        with pytest.raises(ValueError):
            PauliHamiltonian(2).add_term({2: "X"}, 1.0)

    def test_invalid_pauli(self):
        with pytest.raises(ValueError):
            PauliHamiltonian(2, {"XQ": 1.0})

    def test_wrong_length(self):
        with pytest.raises(ValueError):
            PauliHamiltonian(2, {"XXX": 1.0})

    def test_allclose(self):
        a = PauliHamiltonian(2, {"XX": 0.1, "ZI": 0.2})
        b = PauliHamiltonian(2, {"ZI": 0.2, "XX": 0.1 + 1e-14})
        assert a.allclose(b)
        assert not a.allclose(PauliHamiltonian(2, {"XX": 0.1}))


class TestEvaluation:

    def test_expectation_matches_matrix(self):
        H = PauliHamiltonian(3, {"XZI": 0.4, "IZZ": -0.3, "YYI": 0.2, "III": 1.0})
        rng = np.random.default_rng(0)
        sv = rng.normal(size=8) + 1j * rng.normal(size=8)
        sv /= np.linalg.norm(sv)
        expected = np.real(np.vdot(sv, H.matrix() @ sv))
        assert H.expectation(sv) == pytest.approx(expected)

    def test_term_expectations(self):
        H = PauliHamiltonian(2, {"ZI": 1.0, "IZ": 1.0})
        sv = np.array([0, 0, 1, 0], dtype=complex)  # |10⟩
        assert H.term_expectations(sv) == pytest.approx({"ZI": -1.0, "IZ": 1.0})

    def test_ground_state_energy(self):
        H = PauliHamiltonian(1, {"Z": 1.0, "X": 1.0})
        assert H.ground_state_energy() == pytest.approx(-np.sqrt(2))

    def test_matrix_hermitian(self):
        H = PauliHamiltonian(2, {"XY": 0.3, "ZZ": 0.1})
        M = H.matrix()
        np.testing.assert_allclose(M, M.conj().T)

    def test_dimension_mismatch(self):
        with pytest.raises(ValueError):
            PauliHamiltonian(2, {"ZZ": 1.0}).expectation(np.ones(2))


class TestHelpers:

    def test_apply_matches_matrix(self):
        sv = np.arange(8, dtype=complex)
        np.testing.assert_allclose(
            apply_pauli_string(sv, "XIZ"), pauli_string_matrix("XIZ") @ sv
        )

    def test_split_terms(self):
        H = PauliHamiltonian(2, {"II": -2.0, "XZ": 0.5})
        offset, terms = split_terms(H)
        assert offset == -2.0
        assert terms == {"XZ": 0.5}
        assert H.constant == -2.0
