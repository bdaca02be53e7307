"""
Quake Weibull - Density Functions
=================================
Closed-form densities used by the model, the plots and the tests.

Weibull(k, lambda), shape k > 0, scale lambda > 0:

    f(x | k, lambda) = (k / lambda) * (x / lambda)^(k-1) * exp(-(x / lambda)^k),  x > 0
    F(x | k, lambda) = 1 - exp(-(x / lambda)^k)

Outside the support (x <= 0) or for non-positive parameters the density is 0
and the log-density is -inf. These functions never raise on bad parameters so
they can be evaluated anywhere a sampler might wander.
"""

import numpy as np
from scipy.special import gamma as gamma_fn


def _valid_params(k: float, lam: float) -> bool:
    return np.isfinite(k) and np.isfinite(lam) and k > 0 and lam > 0


def weibull_logpdf(x, k: float, lam: float) -> np.ndarray:
    """Log-density of Weibull(k, lam), vectorised over x."""
    x = np.asarray(x, dtype=np.float64)
    out = np.full(x.shape, -np.inf)
    if not _valid_params(k, lam):
        return out

    pos = x > 0
    z = x[pos] / lam
    out[pos] = np.log(k / lam) + (k - 1.0) * np.log(z) - z ** k
    return out


def weibull_pdf(x, k: float, lam: float) -> np.ndarray:
    """Density of Weibull(k, lam), vectorised over x."""
    return np.exp(weibull_logpdf(x, k, lam))


def weibull_cdf(x, k: float, lam: float) -> np.ndarray:
    """Cumulative distribution function of Weibull(k, lam)."""
    x = np.asarray(x, dtype=np.float64)
    out = np.zeros(x.shape)
    if not _valid_params(k, lam):
        return np.full(x.shape, np.nan)

    pos = x > 0
    out[pos] = -np.expm1(-(x[pos] / lam) ** k)
    return out


def weibull_mean(k: float, lam: float) -> float:
    """Mean of Weibull(k, lam): lam * Gamma(1 + 1/k)."""
    if not _valid_params(k, lam):
        return np.nan
    return float(lam * gamma_fn(1.0 + 1.0 / k))


def exponential_logpdf(x, rate: float) -> np.ndarray:
    """Log-density of Exponential(rate) (rate parameterisation, mean 1/rate)."""
    x = np.asarray(x, dtype=np.float64)
    out = np.full(x.shape, -np.inf)
    if not (np.isfinite(rate) and rate > 0):
        return out

    nonneg = x >= 0
    out[nonneg] = np.log(rate) - rate * x[nonneg]
    return out
