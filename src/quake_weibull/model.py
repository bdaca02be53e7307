"""
Quake Weibull - Model Specification
===================================
Declares the generative model fitted to earthquake inter-event times.

Model:
    data:        n >= 0, x[1..n] > 0
    parameters:  k > 0 (shape), lambda > 0 (scale)
    model:       k      ~ Exponential(0.01)
                 lambda ~ Exponential(0.01)
                 x[i]   ~ Weibull(k, lambda)   i.i.d.

The same declaration is exposed two ways:
- as an unnormalised log-posterior in numpy/scipy (``log_posterior``),
  evaluable at arbitrary (k, lambda)
- as a ``pymc.Model`` (``build_pymc_model``) for the sampler, where the
  positivity constraints are handled by PyMC's log transform

Usage:
    from quake_weibull.model import WeibullModelSpec

    spec = WeibullModelSpec()
    print(spec.declaration())
    lp = spec.log_posterior(0.9, 17.0, gaps)
"""

import numpy as np
from dataclasses import dataclass
from typing import Dict, List, Optional
from scipy import stats

import pymc as pm

from .distributions import exponential_logpdf, weibull_logpdf


PARAMETER_NAMES = ('k', 'lambda')


# ═══════════════════════════════════════════════════════════════
# Priors
# ═══════════════════════════════════════════════════════════════

@dataclass
class PriorSpec:
    """Specification for a single parameter prior distribution."""
    name: str
    distribution: str  # 'exponential', 'halfnormal', 'gamma', 'lognormal', 'uniform'
    params: Dict       # Distribution parameters (e.g., {'rate': 0.01})

    def __post_init__(self):
        required = {
            'exponential': ('rate',),
            'halfnormal': ('sigma',),
            'gamma': ('alpha', 'beta'),
            'lognormal': ('mu', 'sigma'),
            'uniform': ('lower', 'upper'),
        }
        if self.distribution not in required:
            raise ValueError(f"Unknown distribution: {self.distribution}")
        missing = [p for p in required[self.distribution] if p not in self.params]
        if missing:
            raise ValueError(f"Prior '{self.name}' ({self.distribution}) missing params: {missing}")
        if self.distribution == 'uniform':
            lower, upper = self.params['lower'], self.params['upper']
            if lower < 0 or upper <= lower:
                raise ValueError(
                    f"Uniform prior for '{self.name}' must satisfy 0 <= lower < upper, "
                    f"got ({lower}, {upper})"
                )

    def scipy_dist(self):
        """Frozen scipy.stats distribution with the same density."""
        p = self.params
        if self.distribution == 'exponential':
            return stats.expon(scale=1.0 / p['rate'])
        if self.distribution == 'halfnormal':
            return stats.halfnorm(scale=p['sigma'])
        if self.distribution == 'gamma':
            return stats.gamma(a=p['alpha'], scale=1.0 / p['beta'])
        if self.distribution == 'lognormal':
            return stats.lognorm(s=p['sigma'], scale=np.exp(p['mu']))
        return stats.uniform(loc=p['lower'], scale=p['upper'] - p['lower'])

    def pymc_dist(self):
        """Create the matching PyMC random variable (inside a model context)."""
        p = self.params
        if self.distribution == 'exponential':
            return pm.Exponential(self.name, lam=p['rate'])
        if self.distribution == 'halfnormal':
            return pm.HalfNormal(self.name, sigma=p['sigma'])
        if self.distribution == 'gamma':
            return pm.Gamma(self.name, alpha=p['alpha'], beta=p['beta'])
        if self.distribution == 'lognormal':
            return pm.LogNormal(self.name, mu=p['mu'], sigma=p['sigma'])
        return pm.Uniform(self.name, lower=p['lower'], upper=p['upper'])

    def describe(self) -> str:
        args = ', '.join(f"{v:g}" for v in self.params.values())
        return f"{self.name} ~ {self.distribution}({args})"


def get_default_priors() -> List[PriorSpec]:
    """Independent, weakly informative Exponential(rate=0.01) priors (mean 100)."""
    return [
        PriorSpec(name='k', distribution='exponential', params={'rate': 0.01}),
        PriorSpec(name='lambda', distribution='exponential', params={'rate': 0.01}),
    ]


# ═══════════════════════════════════════════════════════════════
# Model
# ═══════════════════════════════════════════════════════════════

class WeibullModelSpec:
    """Two-parameter Weibull likelihood with independent positive priors."""

    def __init__(self, priors: Optional[List[PriorSpec]] = None):
        priors = priors or get_default_priors()
        by_name = {p.name: p for p in priors}
        missing = [name for name in PARAMETER_NAMES if name not in by_name]
        if missing:
            raise ValueError(f"No prior given for parameters: {missing}")
        extra = sorted(set(by_name) - set(PARAMETER_NAMES))
        if extra:
            raise ValueError(f"Priors given for unknown parameters: {extra}")

        self.priors = [by_name[name] for name in PARAMETER_NAMES]
        self._prior_dists = {p.name: p.scipy_dist() for p in self.priors}
        self._priors_by_name = {p.name: p for p in self.priors}

    @property
    def parameter_names(self) -> List[str]:
        return list(PARAMETER_NAMES)

    def key(self) -> str:
        """Stable text identity of the declared priors (used for caching)."""
        return ';'.join(p.describe() for p in self.priors)

    def declaration(self) -> str:
        """Render the data / parameters / model blocks."""
        prior_lines = '\n'.join(f"  {p.describe()};" for p in self.priors)
        return (
            "data {\n"
            "  int<lower=0> n;\n"
            "  vector[n] x;\n"
            "}\n"
            "parameters {\n"
            "  real<lower=0> k;\n"
            "  real<lower=0> lambda;\n"
            "}\n"
            "model {\n"
            f"{prior_lines}\n"
            "  x ~ weibull(k, lambda);\n"
            "}\n"
        )

    # ── density ─────────────────────────────────────────────────

    def log_prior(self, k: float, lam: float) -> float:
        if k <= 0 or lam <= 0:
            return -np.inf
        return self._prior_logpdf('k', k) + self._prior_logpdf('lambda', lam)

    def _prior_logpdf(self, name: str, value: float) -> float:
        prior = self._priors_by_name[name]
        if prior.distribution == 'exponential':
            return float(exponential_logpdf(value, prior.params['rate']))
        return float(self._prior_dists[name].logpdf(value))

    def log_likelihood(self, k: float, lam: float, x) -> float:
        if k <= 0 or lam <= 0:
            return -np.inf
        return float(np.sum(weibull_logpdf(x, k, lam)))

    def log_posterior(self, k: float, lam: float, x) -> float:
        """Unnormalised log-posterior log p(k, lam) + sum_i log f(x_i | k, lam)."""
        lp = self.log_prior(k, lam)
        if not np.isfinite(lp):
            return -np.inf
        return lp + self.log_likelihood(k, lam, x)

    # ── PyMC ────────────────────────────────────────────────────

    def build_pymc_model(self, x=None) -> pm.Model:
        """Build the PyMC model.

        The observations live in a ``pm.Data`` container named ``x``, so a
        model built once can be re-used for new data with ``pm.set_data``.

        Args:
            x: initial observations (a single placeholder value if None)
        """
        x = np.ones(1) if x is None else np.asarray(x, dtype=np.float64)

        with pm.Model() as model:
            x_data = pm.Data('x', x)
            params = {p.name: p.pymc_dist() for p in self.priors}
            pm.Weibull(
                'x_obs',
                alpha=params['k'],
                beta=params['lambda'],
                observed=x_data,
                shape=x_data.shape,
            )

        return model
