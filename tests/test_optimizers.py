"""Tests for the optimizer wrappers."""

import logging

import numpy as np
import pytest

from tiny_mcvqe.exceptions import ConfigurationError
from tiny_mcvqe.optimizers import GridSearchOptimizer, ScipyOptimizer


class Quadratic:
    """f(x) = Σ (x − 1)², with an optional analytic gradient."""

    def __init__(self, has_gradient=False):
        self.has_gradient = has_gradient
        self.calls = 0
        self.gradient_calls = 0

    def __call__(self, x):
        self.calls += 1
        return float(np.sum((x - 1.0) ** 2))

    def value_and_gradient(self, x):
        self.gradient_calls += 1
        return float(np.sum((x - 1.0) ** 2)), 2.0 * (x - 1.0)


class TestScipyOptimizer:

    def test_cobyla_converges(self):
        value, params = ScipyOptimizer("COBYLA", maxiter=500, tol=1e-8).optimize(Quadratic(), 2)
        assert value == pytest.approx(0.0, abs=1e-6)
        np.testing.assert_allclose(params, [1.0, 1.0], atol=1e-3)

    def test_gradient_method_uses_value_and_gradient(self):
        objective = Quadratic(has_gradient=True)
        value, params = ScipyOptimizer("L-BFGS-B").optimize(objective, 3)
        assert objective.gradient_calls > 0
        assert objective.calls == 0
        np.testing.assert_allclose(params, np.ones(3), atol=1e-6)

    def test_gradient_method_without_strategy(self):
        objective = Quadratic(has_gradient=False)
        ScipyOptimizer("BFGS").optimize(objective, 2)
        assert objective.gradient_calls == 0
        assert objective.calls > 0

    def test_gradient_free_ignores_gradient(self):
        objective = Quadratic(has_gradient=True)
        ScipyOptimizer("Nelder-Mead", maxiter=50).optimize(objective, 2)
        assert objective.gradient_calls == 0

    def test_initial_point_defaults_to_zero(self):
        np.testing.assert_array_equal(ScipyOptimizer().initial_point(4), np.zeros(4))

    def test_seeded_initial_point(self):
        a = ScipyOptimizer(seed=5).initial_point(6)
        b = ScipyOptimizer(seed=5).initial_point(6)
        np.testing.assert_array_equal(a, b)
        assert np.all(np.abs(a) <= 0.1)

    def test_explicit_initial_params(self):
        opt = ScipyOptimizer(initial_params=[0.5, -0.5])
        np.testing.assert_array_equal(opt.initial_point(2), [0.5, -0.5])
        with pytest.raises(ConfigurationError):
            opt.initial_point(3)

    def test_non_convergence_is_logged_not_raised(self, caplog):
        with caplog.at_level(logging.WARNING, logger="tiny_mcvqe.optimizers"):
            value, params = ScipyOptimizer("Nelder-Mead", maxiter=2).optimize(Quadratic(), 4)
        assert np.isfinite(value)
        assert params.shape == (4,)
        assert any("did not converge" in r.message for r in caplog.records)

    def test_unsupported_method(self):
        with pytest.raises(ConfigurationError):
            ScipyOptimizer("annealing")

    def test_invalid_maxiter(self):
        with pytest.raises(ConfigurationError):
            ScipyOptimizer(maxiter=0)


class TestGridSearchOptimizer:

    def test_scalar_grid(self):
        objective = Quadratic()
        value, params = GridSearchOptimizer([0.0, 0.5, 1.0, 1.5]).optimize(objective, 3)
        assert value == 0.0
        np.testing.assert_array_equal(params, np.ones(3))
        assert objective.calls == 4

    def test_vector_grid(self):
        grid = [[0.0, 0.0], [1.0, 0.9], [1.0, 1.0]]
        value, params = GridSearchOptimizer(grid).optimize(Quadratic(), 2)
        np.testing.assert_array_equal(params, [1.0, 1.0])

    def test_first_of_equal_values_kept(self):
        value, params = GridSearchOptimizer([0.0, 2.0]).optimize(Quadratic(), 1)
        np.testing.assert_array_equal(params, [0.0])

    def test_shape_mismatch(self):
        with pytest.raises(ConfigurationError):
            GridSearchOptimizer([[0.0, 1.0]]).optimize(Quadratic(), 3)

    def test_empty_grid(self):
        with pytest.raises(ConfigurationError):
            GridSearchOptimizer([])
