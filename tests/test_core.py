"""
Tests for the likelihood evaluators.

Run with: python -m pytest tests/ -v
"""

import pytest
import numpy as np
from scipy import integrate, stats

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from ar1_ssm.exceptions import (
    DomainError,
    EmptySequence,
    InvalidObservation,
    InvalidScale,
    NonStationaryCoefficient,
)
from ar1_ssm.likelihood import (
    conditional_mode,
    covariance_marginal_nll,
    joint_hessian_banded,
    kalman_filter,
    kalman_marginal_nll,
    kalman_marginal_nll_log,
    laplace_marginal_nll,
    log_density,
    log_density_var,
    state_augmented_nll,
    state_augmented_nll_log,
)
from ar1_ssm.models import AR1Model, AR1Params


Y_SCENARIO = [0.5, 0.3, -0.1, 0.4]

PARAM_GRID = [
    (0.7, 1.0, 0.5),
    (-0.4, 0.3, 2.0),
    (0.95, 0.1, 0.05),
    (0.0, 1.0, 1.0),
]


def _simulated(a, q, r, n=60, seed=0):
    _, y = AR1Model(AR1Params(a=a, q=q, r=r)).simulate(n, seed=seed)
    return y[0]


class TestGaussianDensity:
    """Tests for the scalar normal log-density."""

    def test_integrates_to_one(self):
        total, _ = integrate.quad(lambda x: np.exp(log_density(x, 1.3, 0.7)), -np.inf, np.inf)
        assert total == pytest.approx(1.0, abs=1e-8)

    def test_matches_scipy(self):
        x = np.linspace(-4.0, 4.0, 17)
        expected = stats.norm.logpdf(x, loc=0.5, scale=2.0)
        np.testing.assert_allclose(log_density(x, 0.5, 2.0), expected, rtol=1e-12)

    def test_variance_form(self):
        assert log_density_var(0.3, -0.2, 2.5) == pytest.approx(
            log_density(0.3, -0.2, np.sqrt(2.5)), rel=1e-12
        )

    @pytest.mark.parametrize("sd", [0.0, -1.0, np.nan])
    def test_invalid_scale(self, sd):
        with pytest.raises(InvalidScale):
            log_density(0.0, 0.0, sd)
        with pytest.raises(InvalidScale):
            log_density_var(0.0, 0.0, sd)


class TestStateAugmentedLikelihood:
    """Tests for the joint NLL of states and observations."""

    def test_matches_direct_sum(self):
        a, q, r = 0.7, 1.0, 0.5
        y = np.array(Y_SCENARIO)
        x = np.array([0.4, 0.2, 0.0, 0.3])

        expected = -stats.norm.logpdf(x[0], 0.0, np.sqrt(q / (1 - a * a)))
        for t in range(1, len(y)):
            expected -= stats.norm.logpdf(x[t], a * x[t - 1], np.sqrt(q))
        for t in range(len(y)):
            expected -= stats.norm.logpdf(y[t], x[t], np.sqrt(r))

        assert state_augmented_nll(y, a, q, r, x) == pytest.approx(expected, rel=1e-12)

    def test_single_observation(self):
        a, q, r = 0.5, 2.0, 0.3
        expected = -log_density(1.0, 0.8, np.sqrt(r)) - log_density(0.8, 0.0, np.sqrt(q / 0.75))
        assert state_augmented_nll([1.0], a, q, r, [0.8]) == pytest.approx(expected)

    def test_log_variance_variant(self):
        x = [0.4, 0.2, 0.0, 0.3]
        direct = state_augmented_nll(Y_SCENARIO, 0.7, 1.3, 0.5, x)
        via_log = state_augmented_nll_log(Y_SCENARIO, 0.7, np.log(1.3), np.log(0.5), x)
        assert via_log == pytest.approx(direct, rel=1e-12)

    def test_length_mismatch(self):
        with pytest.raises(ValueError):
            state_augmented_nll(Y_SCENARIO, 0.7, 1.0, 0.5, [0.0, 0.0])

    def test_inputs_not_mutated(self):
        y = np.array(Y_SCENARIO)
        x = np.array([0.4, 0.2, 0.0, 0.3])
        state_augmented_nll(y, 0.7, 1.0, 0.5, x)
        np.testing.assert_array_equal(y, Y_SCENARIO)
        np.testing.assert_array_equal(x, [0.4, 0.2, 0.0, 0.3])


class TestKalmanMarginalLikelihood:
    """Tests for the Kalman filter NLL."""

    def test_single_observation(self):
        a, q, r = 0.6, 1.5, 0.4
        expected = -log_density(0.9, 0.0, np.sqrt(q / (1 - a * a) + r))
        assert kalman_marginal_nll([0.9], a, q, r) == pytest.approx(expected, rel=1e-12)

    @pytest.mark.parametrize("a,q,r", PARAM_GRID)
    def test_matches_dense_covariance(self, a, q, r):
        y = _simulated(a, q, r)
        assert kalman_marginal_nll(y, a, q, r) == pytest.approx(
            covariance_marginal_nll(y, a, q, r), rel=1e-6
        )

    def test_log_variance_variant(self):
        direct = kalman_marginal_nll(Y_SCENARIO, 0.7, 1.0, 0.5)
        via_log = kalman_marginal_nll_log(Y_SCENARIO, 0.7, 0.0, np.log(0.5))
        assert via_log == pytest.approx(direct, rel=1e-12)

    def test_filter_outputs(self):
        params = AR1Params(a=0.8, q=0.2, r=0.1)
        y = _simulated(params.a, params.q, params.r, n=100)
        nll, x_filt, x_pred, P_filt, P_pred = kalman_filter(y, params)

        assert x_filt.shape == (100,)
        assert x_pred[0] == 0.0
        assert P_pred[0] == pytest.approx(params.stationary_variance)
        assert np.all(P_filt < P_pred)
        assert np.std(x_filt) < np.std(y)
        assert nll == kalman_marginal_nll(y, params.a, params.q, params.r)


class TestMarginalization:
    """The joint density integrated over the states equals the Kalman NLL."""

    @pytest.mark.parametrize("a,q,r", PARAM_GRID)
    def test_laplace_equals_kalman(self, a, q, r):
        y = _simulated(a, q, r, seed=3)
        assert laplace_marginal_nll(y, a, q, r) == pytest.approx(
            kalman_marginal_nll(y, a, q, r), rel=1e-6
        )

    def test_laplace_single_observation(self):
        assert laplace_marginal_nll([0.9], 0.6, 1.5, 0.4) == pytest.approx(
            kalman_marginal_nll([0.9], 0.6, 1.5, 0.4), rel=1e-9
        )

    def test_hessian_matches_finite_differences(self):
        a, q, r = 0.7, 1.0, 0.5
        y = np.array(Y_SCENARIO + [0.2])
        n = len(y)
        ab = joint_hessian_banded(n, a, q, r)
        dense = np.diag(ab[1]) + np.diag(ab[0, 1:], 1) + np.diag(ab[0, 1:], -1)

        h = 1e-3
        x0 = np.zeros(n)
        f0 = state_augmented_nll(y, a, q, r, x0)
        numeric = np.zeros((n, n))
        for i in range(n):
            for j in range(n):
                ei = np.eye(n)[i] * h
                ej = np.eye(n)[j] * h
                numeric[i, j] = (
                    state_augmented_nll(y, a, q, r, x0 + ei + ej)
                    - state_augmented_nll(y, a, q, r, x0 + ei)
                    - state_augmented_nll(y, a, q, r, x0 + ej)
                    + f0
                ) / h**2
        np.testing.assert_allclose(dense, numeric, atol=1e-4)

    def test_conditional_mode_minimizes_joint(self):
        a, q, r = 0.7, 1.0, 0.5
        x_hat = conditional_mode(Y_SCENARIO, a, q, r)
        best = state_augmented_nll(Y_SCENARIO, a, q, r, x_hat)
        for i in range(len(x_hat)):
            for step in (-1e-3, 1e-3):
                x = x_hat.copy()
                x[i] += step
                assert state_augmented_nll(Y_SCENARIO, a, q, r, x) > best


class TestScenario:
    """y = [0.5, 0.3, -0.1, 0.4], a=0.7, q=1.0, r=0.5."""

    def test_both_evaluators_finite_and_comparable(self):
        a, q, r = 0.7, 1.0, 0.5
        marginal, x_filt, _, _, _ = kalman_filter(Y_SCENARIO, AR1Params(a=a, q=q, r=r))
        joint = state_augmented_nll(Y_SCENARIO, a, q, r, x_filt)

        assert np.isfinite(marginal)
        assert np.isfinite(joint)
        assert 0.1 < joint / marginal < 10.0

        # Mode of the joint cannot score worse than the filtered path
        x_hat = conditional_mode(Y_SCENARIO, a, q, r)
        assert state_augmented_nll(Y_SCENARIO, a, q, r, x_hat) <= joint

    def test_deterministic(self):
        x = [0.4, 0.2, 0.0, 0.3]
        assert kalman_marginal_nll(Y_SCENARIO, 0.7, 1.0, 0.5) == kalman_marginal_nll(
            Y_SCENARIO, 0.7, 1.0, 0.5
        )
        assert state_augmented_nll(Y_SCENARIO, 0.7, 1.0, 0.5, x) == state_augmented_nll(
            Y_SCENARIO, 0.7, 1.0, 0.5, x
        )


H_COMPLEX = 1e-20
H_CENTRAL = 1e-6


def _central_difference(f, theta, h=H_CENTRAL):
    return (f(theta + h) - f(theta - h)) / (2.0 * h)


def _complex_step(f, theta, h=H_COMPLEX):
    return np.imag(f(theta + 1j * h)) / h


class TestComplexStep:
    """Evaluators accept complex input, so f'(θ) = Im f(θ + ih) / h."""

    Y = _simulated(0.7, 1.0, 0.5, n=40, seed=3)

    @pytest.mark.parametrize("argnum", [0, 1, 2])
    def test_kalman_gradient(self, argnum):
        theta0 = np.array([0.3, 1.4, 0.8])

        def f(value):
            theta = theta0.astype(complex) if np.iscomplexobj(value) else theta0.copy()
            theta[argnum] = value
            return kalman_marginal_nll(self.Y, *theta)

        expected = _central_difference(f, theta0[argnum])
        assert _complex_step(f, theta0[argnum]) == pytest.approx(expected, rel=1e-6, abs=1e-6)

    def test_joint_gradient_in_a(self):
        x = conditional_mode(self.Y, 0.7, 1.0, 0.5)

        def f(a):
            return state_augmented_nll(self.Y, a, 1.0, 0.5, x)

        expected = _central_difference(f, 0.3)
        assert _complex_step(f, 0.3) == pytest.approx(expected, rel=1e-6, abs=1e-6)

    def test_joint_gradient_in_state(self):
        x0 = np.linspace(-0.5, 0.5, len(self.Y))
        k = 7

        def f(value):
            x = x0.astype(complex) if np.iscomplexobj(value) else x0.copy()
            x[k] = value
            return state_augmented_nll(self.Y, 0.7, 1.0, 0.5, x)

        expected = _central_difference(f, x0[k])
        assert _complex_step(f, x0[k]) == pytest.approx(expected, rel=1e-6, abs=1e-6)

    def test_imaginary_part_propagates(self):
        x = [0.4, 0.2, 0.0, 0.3]
        value = state_augmented_nll(Y_SCENARIO, 0.7 + 1j * H_COMPLEX, 1.0, 0.5, x)
        assert np.imag(value) != 0.0
        assert np.real(value) == pytest.approx(state_augmented_nll(Y_SCENARIO, 0.7, 1.0, 0.5, x))

        value = kalman_marginal_nll(Y_SCENARIO, 0.7 + 1j * H_COMPLEX, 1.0, 0.5)
        assert np.imag(value) != 0.0
        assert np.real(value) == pytest.approx(kalman_marginal_nll(Y_SCENARIO, 0.7, 1.0, 0.5))

    def test_complex_perturbation_of_valid_point_accepted(self):
        # Domain checks look at the real part only
        kalman_marginal_nll(Y_SCENARIO, 0.7, 1.0 + 1j * H_COMPLEX, 0.5)
        with pytest.raises(NonStationaryCoefficient):
            kalman_marginal_nll(Y_SCENARIO, 1.0 + 1j * H_COMPLEX, 1.0, 0.5)


def _joint(y, a, q, r):
    return state_augmented_nll(y, a, q, r, np.zeros(len(y)))


EVALUATORS = [
    kalman_marginal_nll,
    _joint,
    laplace_marginal_nll,
    covariance_marginal_nll,
]


class TestDomainErrors:
    """Typed failures for invalid inputs."""

    @pytest.mark.parametrize("evaluate", EVALUATORS)
    @pytest.mark.parametrize("a", [1.0, -1.0, 1.5, np.nan])
    def test_non_stationary(self, evaluate, a):
        with pytest.raises(NonStationaryCoefficient):
            evaluate(Y_SCENARIO, a, 1.0, 0.5)

    @pytest.mark.parametrize("evaluate", EVALUATORS)
    @pytest.mark.parametrize("q,r", [(0.0, 0.5), (-1.0, 0.5), (1.0, 0.0), (1.0, -0.2)])
    def test_invalid_scale(self, evaluate, q, r):
        with pytest.raises(InvalidScale):
            evaluate(Y_SCENARIO, 0.7, q, r)

    @pytest.mark.parametrize("evaluate", EVALUATORS)
    def test_empty_sequence(self, evaluate):
        with pytest.raises(EmptySequence):
            evaluate([], 0.7, 1.0, 0.5)

    @pytest.mark.parametrize("evaluate", EVALUATORS)
    @pytest.mark.parametrize("bad", [np.nan, np.inf, -np.inf])
    def test_non_finite_observation(self, evaluate, bad):
        y = [0.5, bad, -0.1, 0.4]
        with pytest.raises(InvalidObservation):
            evaluate(y, 0.7, 1.0, 0.5)

    def test_errors_share_base(self):
        for cls in (InvalidScale, NonStationaryCoefficient, EmptySequence, InvalidObservation):
            assert issubclass(cls, DomainError)
            assert issubclass(cls, ValueError)


class TestModel:
    """Tests for parameters and simulation."""

    def test_params(self):
        params = AR1Params.from_log(0.5, np.log(0.75), 0.0)
        assert params.q == pytest.approx(0.75)
        assert params.r == pytest.approx(1.0)
        assert params.stationary_variance == pytest.approx(1.0)
        assert AR1Params.from_dict(params.to_dict()) == params

        with pytest.raises(NonStationaryCoefficient):
            AR1Params(a=1.2).validate()
        with pytest.raises(InvalidScale):
            AR1Params(q=-1.0).validate()

    def test_simulate(self):
        model = AR1Model(AR1Params(a=0.9, q=0.5, r=0.1))
        x, y = model.simulate(300, n_paths=4, seed=7)
        x2, y2 = model.simulate(300, n_paths=4, seed=7)

        assert x.shape == (4, 300)
        assert y.shape == (4, 300)
        np.testing.assert_array_equal(y, y2)
        # Stationary variance q / (1 - a²) ≈ 2.63
        assert 1.0 < np.var(x) < 5.0

    def test_pack_unpack(self):
        model = AR1Model(AR1Params(a=-0.3, q=0.2, r=4.0))
        params = AR1Model.unpack_params(model.pack_params())
        assert params.a == pytest.approx(-0.3)
        assert params.q == pytest.approx(0.2)
        assert params.r == pytest.approx(4.0)

        known = AR1Model.unpack_params(model.pack_params(known_variance=True), q=1.0, r=2.0)
        assert known.to_dict() == pytest.approx({"a": -0.3, "q": 1.0, "r": 2.0})

        with pytest.raises(ValueError):
            AR1Model.unpack_params(np.array([0.1]))

    def test_initial_params_are_valid(self):
        y = _simulated(0.7, 1.0, 0.5, n=500)
        params = AR1Model.get_initial_params(y)
        params.validate()
        assert params.a > 0.0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
