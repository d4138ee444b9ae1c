"""Tests for circuits, parameters and gate matrices."""

import numpy as np
import pytest

from tiny_mcvqe import Circuit, Parameter
from tiny_mcvqe import gates as g
from tiny_mcvqe.circuit import Instruction


# ═══════════════════════════════════════════════════════════════════════
# Gates
# ═══════════════════════════════════════════════════════════════════════

class TestGates:

    @pytest.mark.parametrize("name", ["i", "x", "y", "z", "h", "sdg", "cx", "cz"])
    def test_fixed_gates_unitary(self, name):
        assert g.is_unitary(g.get_matrix(name))

    @pytest.mark.parametrize("theta", [0.0, 0.3, np.pi, -1.7])
    def test_rotations_unitary(self, theta):
        for name in ("rx", "ry", "rz"):
            assert g.is_unitary(g.get_matrix(name, (theta,)))

    def test_ry_is_real_rotation(self):
        m = g.Ry(np.pi / 2)
        expected = np.array([[1, -1], [1, 1]]) / np.sqrt(2)
        np.testing.assert_allclose(m, expected, atol=1e-12)

    def test_ry_zero_is_identity(self):
        np.testing.assert_allclose(g.Ry(0.0), np.eye(2), atol=1e-15)

    def test_h_cx_h_is_cz(self):
        hh = np.kron(np.eye(2), g.H)
        np.testing.assert_allclose(hh @ g.CNOT @ hh, g.CZ, atol=1e-12)

    def test_unknown_gate(self):
        with pytest.raises(KeyError):
            g.get_matrix("toffoli")

    def test_wrong_param_count(self):
        with pytest.raises(ValueError):
            g.get_matrix("ry", ())


# ═══════════════════════════════════════════════════════════════════════
# Parameters
# ═══════════════════════════════════════════════════════════════════════

class TestParameter:

    def test_identity_equality(self):
        a, b = Parameter("x0"), Parameter("x0")
        assert a == a
        assert a != b
        assert len({a, b}) == 2

    def test_instruction_bind(self):
        theta = Parameter("theta")
        inst = Instruction("ry", (0,), (theta,))
        bound = inst.bind({theta: 0.25})
        assert bound.params == (0.25,)
        assert not bound.is_parameterized

    def test_unbound_matrix_raises(self):
        inst = Instruction("ry", (0,), (Parameter("t"),))
        with pytest.raises(ValueError, match="unbound"):
            inst.matrix()


# ═══════════════════════════════════════════════════════════════════════
# Circuit construction
# ═══════════════════════════════════════════════════════════════════════

class TestCircuit:

    def test_chaining(self):
        qc = Circuit(2).h(0).cx(0, 1).ry(0.1, 1)
        assert qc.num_gates == 3
        assert [inst.name for inst in qc.instructions] == ["h", "cx", "ry"]

    def test_depth(self):
        qc = Circuit(3).h(0).h(1).cx(0, 1).x(2)
        assert qc.depth == 2

    def test_empty_circuit(self):
        qc = Circuit(2)
        assert qc.depth == 0
        assert qc.num_gates == 0
        assert not qc.is_parameterized

    def test_invalid_qubit(self):
        with pytest.raises(ValueError):
            Circuit(2).h(2)

    def test_duplicate_qubits(self):
        with pytest.raises(ValueError):
            Circuit(2).cx(1, 1)

    def test_zero_qubits(self):
        with pytest.raises(ValueError):
            Circuit(0)

    def test_parameters_first_use_order(self):
        a, b = Parameter("a"), Parameter("b")
        qc = Circuit(2).ry(b, 0).ry(a, 1).ry(b, 1)
        assert qc.parameters == [b, a]
        assert qc.n_parameters == 2

    def test_bind_sequence(self):
        a, b = Parameter("a"), Parameter("b")
        qc = Circuit(2).ry(a, 0).ry(b, 1)
        bound = qc.bind([0.1, 0.2])
        assert not bound.is_parameterized
        assert [inst.params for inst in bound.instructions] == [(0.1,), (0.2,)]
        assert qc.is_parameterized  # source circuit untouched

    def test_bind_wrong_length(self):
        qc = Circuit(1).ry(Parameter("a"), 0)
        with pytest.raises(ValueError):
            qc.bind([0.1, 0.2])

    def test_partial_bind(self):
        a, b = Parameter("a"), Parameter("b")
        qc = Circuit(2).ry(a, 0).ry(b, 1)
        bound = qc.bind({a: 0.5})
        assert bound.parameters == [b]

    def test_compose_shares_parameters(self):
        theta = Parameter("theta")
        tail = Circuit(2).ry(theta, 1)
        head = Circuit(2).h(0)
        head.compose(tail)
        assert head.num_gates == 2
        assert head.parameters == [theta]

    def test_compose_too_wide(self):
        with pytest.raises(ValueError):
            Circuit(1).compose(Circuit(2))


# ═══════════════════════════════════════════════════════════════════════
# Display / export
# ═══════════════════════════════════════════════════════════════════════

class TestExport:

    def test_draw_has_one_line_per_qubit(self):
        art = Circuit(3).h(0).cx(0, 2).draw()
        assert len(art.splitlines()) == 3
        assert "[H]" in art

    def test_repr(self):
        assert "params=1" in repr(Circuit(1).ry(Parameter("a"), 0))
