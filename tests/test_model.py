"""
Unit tests for the model specification and priors
"""

import numpy as np
import pytest
from scipy import stats

from quake_weibull.distributions import exponential_logpdf
from quake_weibull.model import PriorSpec, WeibullModelSpec, get_default_priors


class TestPriorSpecifications:
    """Test prior distribution specifications."""

    def test_default_priors(self):
        """Defaults are Exponential(rate=0.01) on k and lambda."""
        priors = get_default_priors()
        assert [p.name for p in priors] == ['k', 'lambda']
        for prior in priors:
            assert prior.distribution == 'exponential'
            assert prior.params == {'rate': 0.01}

    def test_unknown_distribution(self):
        with pytest.raises(ValueError, match="Unknown distribution"):
            PriorSpec('k', 'normal', {'mu': 1.0, 'sigma': 1.0})

    def test_missing_params(self):
        with pytest.raises(ValueError, match="missing params"):
            PriorSpec('k', 'gamma', {'alpha': 2.0})

    def test_uniform_must_be_positive(self):
        with pytest.raises(ValueError):
            PriorSpec('k', 'uniform', {'lower': -1.0, 'upper': 5.0})

    @pytest.mark.parametrize("prior,expected", [
        (PriorSpec('k', 'exponential', {'rate': 0.01}), stats.expon(scale=100.0)),
        (PriorSpec('k', 'halfnormal', {'sigma': 2.0}), stats.halfnorm(scale=2.0)),
        (PriorSpec('k', 'gamma', {'alpha': 2.0, 'beta': 0.5}), stats.gamma(a=2.0, scale=2.0)),
        (PriorSpec('k', 'lognormal', {'mu': 0.0, 'sigma': 1.0}), stats.lognorm(s=1.0)),
        (PriorSpec('k', 'uniform', {'lower': 0.0, 'upper': 4.0}), stats.uniform(0.0, 4.0)),
    ])
    def test_scipy_dist(self, prior, expected):
        x = np.array([0.3, 1.0, 2.5])
        np.testing.assert_allclose(prior.scipy_dist().logpdf(x), expected.logpdf(x))


class TestWeibullModelSpec:
    """Test the declared log-posterior."""

    @pytest.fixture
    def spec(self):
        return WeibullModelSpec()

    @pytest.fixture
    def gaps(self):
        return np.array([3.0, 12.5, 40.0, 0.8, 22.1])

    def test_parameter_names(self, spec):
        assert spec.parameter_names == ['k', 'lambda']

    def test_log_prior_value(self, spec):
        """log p(k) + log p(lambda) with Exponential(0.01) priors."""
        expected = 2 * np.log(0.01) - 0.01 * (0.9 + 17.0)
        assert spec.log_prior(0.9, 17.0) == pytest.approx(expected)

    def test_exponential_prior_uses_closed_form(self, spec):
        expected = exponential_logpdf(0.9, 0.01) + exponential_logpdf(17.0, 0.01)
        assert spec.log_prior(0.9, 17.0) == pytest.approx(float(expected))

    def test_other_priors_use_scipy(self):
        spec = WeibullModelSpec([
            PriorSpec('k', 'halfnormal', {'sigma': 2.0}),
            PriorSpec('lambda', 'exponential', {'rate': 0.05}),
        ])
        expected = stats.halfnorm.logpdf(1.5, scale=2.0) + stats.expon.logpdf(12.0, scale=20.0)
        assert spec.log_prior(1.5, 12.0) == pytest.approx(expected)

    def test_log_likelihood_matches_scipy(self, spec, gaps):
        expected = stats.weibull_min.logpdf(gaps, c=0.9, scale=17.0).sum()
        assert spec.log_likelihood(0.9, 17.0, gaps) == pytest.approx(expected)

    def test_log_posterior_is_sum(self, spec, gaps):
        lp = spec.log_posterior(1.2, 15.0, gaps)
        assert lp == pytest.approx(spec.log_prior(1.2, 15.0) + spec.log_likelihood(1.2, 15.0, gaps))

    @pytest.mark.parametrize("k,lam", [(0.0, 10.0), (-1.0, 10.0), (1.0, 0.0), (1.0, -5.0)])
    def test_non_positive_parameters(self, spec, gaps, k, lam):
        assert spec.log_posterior(k, lam, gaps) == -np.inf

    def test_empty_data_gives_prior(self, spec):
        assert spec.log_posterior(0.9, 17.0, np.array([])) == pytest.approx(spec.log_prior(0.9, 17.0))

    def test_posterior_peaks_near_mle(self, spec):
        """With many observations the log-posterior prefers the generating values."""
        rng = np.random.default_rng(0)
        x = 10.0 * rng.weibull(1.0, size=2000)
        assert spec.log_posterior(1.0, 10.0, x) > spec.log_posterior(1.5, 10.0, x)
        assert spec.log_posterior(1.0, 10.0, x) > spec.log_posterior(1.0, 20.0, x)

    def test_priors_must_cover_parameters(self):
        with pytest.raises(ValueError, match="No prior"):
            WeibullModelSpec([PriorSpec('k', 'exponential', {'rate': 0.01})])

    def test_unknown_prior_name(self):
        priors = get_default_priors() + [PriorSpec('sigma', 'halfnormal', {'sigma': 1.0})]
        with pytest.raises(ValueError, match="unknown parameters"):
            WeibullModelSpec(priors)

    def test_declaration_blocks(self, spec):
        text = spec.declaration()
        for block in ('data {', 'parameters {', 'model {'):
            assert block in text
        assert 'real<lower=0> k;' in text
        assert 'k ~ exponential(0.01);' in text
        assert 'x ~ weibull(k, lambda);' in text

    def test_key_changes_with_priors(self, spec):
        other = WeibullModelSpec([
            PriorSpec('k', 'exponential', {'rate': 0.1}),
            PriorSpec('lambda', 'exponential', {'rate': 0.01}),
        ])
        assert spec.key() != other.key()


class TestPyMCModel:
    """Test the PyMC rendition of the model."""

    @pytest.fixture
    def spec(self):
        return WeibullModelSpec()

    def test_variables(self, spec):
        model = spec.build_pymc_model(np.array([1.0, 2.0, 3.0]))
        names = {rv.name for rv in model.free_RVs}
        assert names == {'k', 'lambda'}
        assert [rv.name for rv in model.observed_RVs] == ['x_obs']

    def test_logp_matches_log_posterior(self, spec):
        """PyMC's log density (without the log-transform Jacobian) equals log_posterior."""
        x = np.array([3.0, 12.5, 40.0, 0.8, 22.1])
        model = spec.build_pymc_model(x)
        logp = model.compile_logp(jacobian=False)

        point = {}
        for name, value in (('k', 0.9), ('lambda', 17.0)):
            value_var = model.rvs_to_values[model[name]]
            point[value_var.name] = np.log(value)

        assert float(logp(point)) == pytest.approx(spec.log_posterior(0.9, 17.0, x), rel=1e-8)

    def test_data_container_can_be_replaced(self, spec):
        import pymc as pm

        model = spec.build_pymc_model()
        with model:
            pm.set_data({'x': np.array([2.0, 4.0, 6.0, 8.0])})
        assert model['x'].get_value().shape == (4,)
