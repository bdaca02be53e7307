"""
Unit tests for the closed-form densities
"""

import numpy as np
import pytest
from scipy import stats
from scipy.integrate import quad

from quake_weibull.distributions import (
    weibull_pdf, weibull_logpdf, weibull_cdf, weibull_mean, exponential_logpdf
)


PARAM_GRID = [(0.5, 1.0), (0.916, 17.363), (1.0, 10.0), (2.0, 3.0), (5.0, 0.5)]


class TestWeibullDensity:
    """Test the Weibull density against its defining properties."""

    @pytest.mark.parametrize("k,lam", PARAM_GRID)
    def test_non_negative(self, k, lam):
        """Density is >= 0 everywhere on the support."""
        x = np.linspace(1e-6, 10 * lam, 500)
        assert np.all(weibull_pdf(x, k, lam) >= 0)

    @pytest.mark.parametrize("k,lam", PARAM_GRID)
    def test_integrates_to_one(self, k, lam):
        """Numerical integral over (0, inf) equals 1."""
        f = lambda t: float(weibull_pdf(t, k, lam))
        head, _ = quad(f, 0, lam, limit=200)
        tail, _ = quad(f, lam, np.inf, limit=200)
        assert head + tail == pytest.approx(1.0, abs=1e-6)

    @pytest.mark.parametrize("k,lam", PARAM_GRID)
    def test_matches_scipy(self, k, lam):
        """Density and log-density agree with scipy.stats.weibull_min."""
        x = np.linspace(0.01, 5 * lam, 100)
        expected = stats.weibull_min.logpdf(x, c=k, scale=lam)
        np.testing.assert_allclose(weibull_logpdf(x, k, lam), expected, rtol=1e-10, atol=1e-12)
        np.testing.assert_allclose(weibull_pdf(x, k, lam), np.exp(expected), rtol=1e-10, atol=1e-300)

    def test_zero_outside_support(self):
        """x <= 0 has zero density and -inf log-density."""
        x = np.array([-5.0, -1e-9, 0.0])
        assert np.all(weibull_pdf(x, 1.5, 2.0) == 0.0)
        assert np.all(np.isneginf(weibull_logpdf(x, 1.5, 2.0)))

    @pytest.mark.parametrize("k,lam", [(0.0, 1.0), (-1.0, 1.0), (1.0, 0.0), (1.0, -2.0),
                                       (np.nan, 1.0)])
    def test_invalid_parameters_give_zero(self, k, lam):
        """Non-positive parameters give zero density instead of raising."""
        x = np.array([0.5, 1.0, 2.0])
        assert np.all(weibull_pdf(x, k, lam) == 0.0)

    def test_exponential_special_case(self):
        """k = 1 reduces to Exponential(1/lambda)."""
        x = np.linspace(0.1, 30, 50)
        np.testing.assert_allclose(weibull_pdf(x, 1.0, 10.0), np.exp(-x / 10.0) / 10.0)

    def test_scalar_input(self):
        assert float(weibull_pdf(10.0, 1.0, 10.0)) == pytest.approx(np.exp(-1.0) / 10.0)


class TestWeibullCdfAndMean:
    """Test CDF and mean."""

    @pytest.mark.parametrize("k,lam", PARAM_GRID)
    def test_cdf_matches_scipy(self, k, lam):
        x = np.linspace(0.0, 5 * lam, 60)
        np.testing.assert_allclose(weibull_cdf(x, k, lam),
                                   stats.weibull_min.cdf(x, c=k, scale=lam), atol=1e-12)

    def test_cdf_zero_below_support(self):
        assert np.all(weibull_cdf(np.array([-1.0, 0.0]), 2.0, 1.0) == 0.0)

    @pytest.mark.parametrize("k,lam", PARAM_GRID)
    def test_mean_matches_scipy(self, k, lam):
        assert weibull_mean(k, lam) == pytest.approx(stats.weibull_min.mean(c=k, scale=lam))

    def test_mean_invalid(self):
        assert np.isnan(weibull_mean(-1.0, 2.0))


class TestExponentialLogpdf:
    """Test the prior density."""

    def test_matches_scipy(self):
        x = np.array([0.0, 0.5, 10.0, 250.0])
        np.testing.assert_allclose(exponential_logpdf(x, 0.01),
                                   stats.expon.logpdf(x, scale=100.0))

    def test_negative_values(self):
        assert np.isneginf(exponential_logpdf(np.array([-1.0]), 0.01)).all()
