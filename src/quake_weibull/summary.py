"""
Quake Weibull - Posterior Summaries
===================================
Point estimates, credible intervals and mixing diagnostics computed from
pooled post-burn-in draws.

- mean:               arithmetic mean of the pooled draws
- credible interval:  empirical (2.5%, 97.5%) quantiles for 95% mass, with
                      linear interpolation between order statistics
                      (numpy ``method="linear"``, the same rule as R's
                      default type 7), so bounds are reproducible to the
                      reported 3 decimals
- ESS:                ArviZ bulk effective sample size over the
                      (chains, draws) array, capped at the nominal count
- autocorrelation:    lag-k correlation within a chain

Supplementary checks:
- ``compare_with_mle``: maximum likelihood fit (scipy) vs. credible interval
- ``posterior_predictive_check``: replicate datasets from posterior draws
"""

import numpy as np
import pandas as pd
from dataclasses import dataclass, asdict
from typing import Dict, Optional, Sequence, Tuple
import warnings

import arviz as az
from scipy import stats

from .sampling import PosteriorDraws


@dataclass(frozen=True)
class ParameterSummary:
    """Posterior summary for one parameter."""
    name: str
    mean: float
    median: float
    std: float
    ci_lower: float
    ci_upper: float
    credible_mass: float
    ess: float
    rhat: float
    lag1_autocorr: float
    n_draws: int

    @property
    def credible_interval(self) -> Tuple[float, float]:
        return (self.ci_lower, self.ci_upper)

    def to_dict(self) -> Dict:
        return asdict(self)


# ═══════════════════════════════════════════════════════════════
# Scalar summaries
# ═══════════════════════════════════════════════════════════════

def posterior_mean(draws) -> float:
    draws = np.asarray(draws, dtype=np.float64)
    if draws.size == 0:
        raise ValueError("Cannot summarise an empty set of draws")
    return float(np.mean(draws))


def credible_interval(draws, mass: float = 0.95) -> Tuple[float, float]:
    """Equal-tailed empirical credible interval.

    Args:
        draws: pooled posterior draws
        mass: posterior probability inside the interval (0.95 -> 2.5%/97.5%)

    Returns:
        (lower, upper)
    """
    if not 0.0 < mass < 1.0:
        raise ValueError(f"Credible mass must be in (0, 1), got {mass}")
    draws = np.asarray(draws, dtype=np.float64).reshape(-1)
    if draws.size == 0:
        raise ValueError("Cannot summarise an empty set of draws")

    tail = (1.0 - mass) / 2.0
    lower, upper = np.quantile(draws, [tail, 1.0 - tail], method='linear')
    return float(lower), float(upper)


def effective_sample_size(chains) -> float:
    """Bulk effective sample size of a (chains, draws) array.

    Anti-correlated chains can give an estimate above the nominal number of
    draws; the result is capped at chains x draws.
    """
    chains = np.atleast_2d(np.asarray(chains, dtype=np.float64))
    n_total = chains.size
    # ArviZ needs at least 4 draws per chain
    if np.ptp(chains) == 0 or chains.shape[1] < 4:
        ess = np.nan
    else:
        ess = float(az.ess(chains, method='bulk'))

    if not np.isfinite(ess):
        warnings.warn("Effective sample size undefined (constant or too short chain)")
        return ess
    return min(ess, float(n_total))


def lag_autocorrelation(chain, lag: int = 1) -> float:
    """Pearson correlation between a chain and itself shifted by ``lag``."""
    chain = np.asarray(chain, dtype=np.float64)
    if lag < 1 or lag >= chain.size - 1:
        raise ValueError(f"lag must be in [1, {chain.size - 2}], got {lag}")
    return float(np.corrcoef(chain[:-lag], chain[lag:])[0, 1])


def autocorrelation(chain, max_lag: int = 50) -> np.ndarray:
    """Autocorrelation function of a chain for lags 0..max_lag (ArviZ estimator)."""
    acf = az.autocorr(np.asarray(chain, dtype=np.float64))
    return acf[:max_lag + 1]


# ═══════════════════════════════════════════════════════════════
# Parameter summaries
# ═══════════════════════════════════════════════════════════════

def summarize_parameter(name: str, chains, mass: float = 0.95) -> ParameterSummary:
    """Summarise one parameter from its (chains, draws) array."""
    chains = np.atleast_2d(np.asarray(chains, dtype=np.float64))
    pooled = chains.reshape(-1)
    lower, upper = credible_interval(pooled, mass)

    rhat = float(az.rhat(chains)) if chains.shape[0] > 1 and chains.shape[1] >= 4 else np.nan
    # Lag-1 pairs need at least 3 draws per chain
    if chains.shape[1] < 3:
        lag1 = np.nan
    else:
        lag1 = float(np.mean([lag_autocorrelation(c, 1) for c in chains]))

    return ParameterSummary(
        name=name,
        mean=posterior_mean(pooled),
        median=float(np.median(pooled)),
        std=float(np.std(pooled, ddof=1)),
        ci_lower=lower,
        ci_upper=upper,
        credible_mass=mass,
        ess=effective_sample_size(chains),
        rhat=rhat,
        lag1_autocorr=lag1,
        n_draws=int(pooled.size),
    )


def summarize_posterior(draws: PosteriorDraws,
                        mass: float = 0.95) -> Dict[str, ParameterSummary]:
    """Summarise every parameter of a posterior sample.

    Returns:
        {parameter name: ParameterSummary}
    """
    return {name: summarize_parameter(name, draws.samples[name], mass)
            for name in draws.parameter_names}


def summary_table(summaries: Dict[str, ParameterSummary]) -> pd.DataFrame:
    """Summaries as a DataFrame indexed by parameter name."""
    rows = [s.to_dict() for s in summaries.values()]
    return pd.DataFrame(rows).set_index('name')


def format_summary(summaries: Dict[str, ParameterSummary]) -> str:
    """Fixed-width table of the summaries, 3 decimals."""
    any_summary = next(iter(summaries.values()))
    pct = f"{any_summary.credible_mass:.0%} CI"
    lines = [
        f"{'Parameter':<10} {'Mean':>10} {'Median':>10} {'SD':>10} {pct:>22} {'ESS':>8} {'R-hat':>7}",
        "-" * 83,
    ]
    for s in summaries.values():
        ci = f"({s.ci_lower:.3f}, {s.ci_upper:.3f})"
        rhat = "n/a" if np.isnan(s.rhat) else f"{s.rhat:.3f}"
        lines.append(
            f"{s.name:<10} {s.mean:>10.3f} {s.median:>10.3f} {s.std:>10.3f} "
            f"{ci:>22} {s.ess:>8.0f} {rhat:>7}"
        )
    return "\n".join(lines)


# ═══════════════════════════════════════════════════════════════
# Supplementary checks
# ═══════════════════════════════════════════════════════════════

def compare_with_mle(x, summaries: Dict[str, ParameterSummary]) -> Dict:
    """Compare posterior summaries with the maximum likelihood Weibull fit.

    The location is fixed at 0 so the fit has the same two parameters as
    the model. With flat-ish priors and many observations the MLE should
    sit inside the credible interval. With fewer than two observations
    there is nothing to fit and the result is empty.
    """
    x = np.asarray(x, dtype=np.float64)
    if x.size < 2:
        return {}
    shape_mle, _, scale_mle = stats.weibull_min.fit(x, floc=0)
    mle = {'k': float(shape_mle), 'lambda': float(scale_mle)}

    comparison = {}
    for name, estimate in mle.items():
        if name not in summaries:
            continue
        s = summaries[name]
        in_ci = s.ci_lower <= estimate <= s.ci_upper
        comparison[name] = {
            'posterior_mean': s.mean,
            'credible_interval': s.credible_interval,
            'mle': estimate,
            'relative_difference': (s.mean - estimate) / estimate,
            'mle_in_ci': in_ci,
            'agreement': 'Good' if in_ci else 'Discrepancy',
        }
    return comparison


def posterior_predictive_check(x, draws: PosteriorDraws,
                               n_replicates: int = 200,
                               seed: Optional[int] = None,
                               statistics: Sequence[str] = ('mean', 'median', 'max')) -> Dict:
    """Posterior predictive check on summary statistics.

    For ``n_replicates`` pooled draws (k, lambda), simulate a dataset of the
    observed size and compute each statistic. The Bayesian p-value is the
    share of replicates whose statistic is at least the observed one;
    values near 0 or 1 flag misfit.
    """
    funcs = {'mean': np.mean, 'median': np.median, 'max': np.max,
             'min': np.min, 'std': np.std}
    unknown = [s for s in statistics if s not in funcs]
    if unknown:
        raise ValueError(f"Unknown statistics: {unknown}")

    x = np.asarray(x, dtype=np.float64)
    if x.size == 0:
        raise ValueError("Posterior predictive check needs at least one observation")
    rng = np.random.default_rng(seed)
    k_all = draws.pooled('k')
    lam_all = draws.pooled('lambda')
    idx = rng.choice(k_all.size, size=n_replicates, replace=n_replicates > k_all.size)

    replicated = {s: np.empty(n_replicates) for s in statistics}
    for j, i in enumerate(idx):
        x_rep = lam_all[i] * rng.weibull(k_all[i], size=x.size)
        for s in statistics:
            replicated[s][j] = funcs[s](x_rep)

    result = {}
    for s in statistics:
        observed = float(funcs[s](x))
        result[s] = {
            'observed': observed,
            'replicated_mean': float(replicated[s].mean()),
            'p_value': float(np.mean(replicated[s] >= observed)),
            'replicated': replicated[s],
        }
    return result
