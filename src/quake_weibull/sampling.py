"""
Quake Weibull - Sampler Invocation
==================================
Runs MCMC for the Weibull model and collects the post-burn-in draws.

The sampler sits behind ``SamplerBackend`` (``compile`` then ``sample``) so
the summarizer and the plots only ever see ``PosteriorDraws``, never the
engine. ``PyMCBackend`` is the default engine.

Burn-in:
    ``SamplerConfig.n_iter`` counts every iteration of a chain, burn-in
    included. The first ``burn_in_fraction`` of them (50% by default) are
    PyMC tuning steps: they adapt the sampler and are discarded. With the
    defaults, 4 chains x 1000 iterations keep 4 x 500 = 2000 draws.

Usage:
    from quake_weibull.model import WeibullModelSpec
    from quake_weibull.sampling import PyMCBackend, SamplerConfig

    backend = PyMCBackend()
    backend.compile(WeibullModelSpec())
    draws = backend.sample({'n': len(gaps), 'x': gaps}, SamplerConfig())
    print(draws.pooled('k').mean())
"""

import numpy as np
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, List, Optional

import arviz as az
import pymc as pm

from .model import WeibullModelSpec


# ═══════════════════════════════════════════════════════════════
# Configuration
# ═══════════════════════════════════════════════════════════════

@dataclass
class SamplerConfig:
    """Configuration for MCMC sampling."""
    n_chains: int = 4               # Independent chains
    n_iter: int = 1000              # Iterations per chain, burn-in included
    burn_in_fraction: float = 0.5   # Leading share of each chain discarded
    sampler: str = 'NUTS'           # 'NUTS', 'Metropolis', 'Slice'
    target_accept: float = 0.8      # NUTS only
    cores: int = 1                  # Chains run in parallel when > 1
    random_seed: Optional[int] = 42
    progressbar: bool = False

    def __post_init__(self):
        if self.n_chains < 1:
            raise ValueError(f"n_chains must be >= 1, got {self.n_chains}")
        if not 0.0 <= self.burn_in_fraction < 1.0:
            raise ValueError(f"burn_in_fraction must be in [0, 1), got {self.burn_in_fraction}")
        if self.sampler not in ('NUTS', 'Metropolis', 'Slice'):
            raise ValueError(f"Unknown sampler: {self.sampler}")
        if self.n_draws < 1:
            raise ValueError(
                f"n_iter={self.n_iter} leaves no draws after "
                f"{self.burn_in_fraction:.0%} burn-in"
            )

    @property
    def n_tune(self) -> int:
        """Burn-in iterations per chain."""
        return int(self.n_iter * self.burn_in_fraction)

    @property
    def n_draws(self) -> int:
        """Retained iterations per chain."""
        return self.n_iter - self.n_tune

    def key(self) -> str:
        return (f"{self.sampler}|chains={self.n_chains}|iter={self.n_iter}|"
                f"burn={self.burn_in_fraction}|accept={self.target_accept}|"
                f"seed={self.random_seed}")


# ═══════════════════════════════════════════════════════════════
# Posterior draws
# ═══════════════════════════════════════════════════════════════

class PosteriorDraws:
    """Post-burn-in draws, one (chains, draws) array per parameter.

    Draws within a chain are serially correlated; draws of different
    chains are exchangeable and may be pooled.
    """

    def __init__(self, samples: Dict[str, np.ndarray],
                 inference_data: Optional['az.InferenceData'] = None):
        if not samples:
            raise ValueError("No parameters in posterior samples")

        arrays = {}
        shape = None
        for name, values in samples.items():
            arr = np.atleast_2d(np.asarray(values, dtype=np.float64))
            if arr.ndim != 2:
                raise ValueError(f"Draws for '{name}' must be (chains, draws), got {arr.shape}")
            if shape is not None and arr.shape != shape:
                raise ValueError(f"Draws for '{name}' have shape {arr.shape}, expected {shape}")
            shape = arr.shape
            arrays[name] = arr

        self.samples = arrays
        self._inference_data = inference_data

    @classmethod
    def from_inference_data(cls, idata: 'az.InferenceData',
                            var_names: Optional[List[str]] = None) -> 'PosteriorDraws':
        posterior = idata.posterior
        var_names = var_names or list(posterior.data_vars)
        samples = {name: posterior[name].values for name in var_names}
        return cls(samples, inference_data=idata)

    def to_inference_data(self) -> 'az.InferenceData':
        if self._inference_data is None:
            self._inference_data = az.from_dict(posterior=self.samples)
        return self._inference_data

    @property
    def parameter_names(self) -> List[str]:
        return list(self.samples)

    @property
    def n_chains(self) -> int:
        return next(iter(self.samples.values())).shape[0]

    @property
    def n_draws(self) -> int:
        return next(iter(self.samples.values())).shape[1]

    @property
    def n_total(self) -> int:
        return self.n_chains * self.n_draws

    def pooled(self, name: str) -> np.ndarray:
        """All draws of one parameter, chain after chain."""
        return self.samples[name].reshape(-1)

    def chain(self, name: str, index: int) -> np.ndarray:
        return self.samples[name][index]

    def __repr__(self):
        return (f"PosteriorDraws(params={self.parameter_names}, "
                f"chains={self.n_chains}, draws={self.n_draws})")


# ═══════════════════════════════════════════════════════════════
# Backends
# ═══════════════════════════════════════════════════════════════

class SamplerBackend(ABC):
    """MCMC engine seam: compile a model once, sample it for given data."""

    def __init__(self, verbose: bool = True):
        self.verbose = verbose
        self.spec: Optional[WeibullModelSpec] = None

    @property
    def is_compiled(self) -> bool:
        return self.spec is not None

    @abstractmethod
    def compile(self, spec: WeibullModelSpec) -> 'SamplerBackend':
        """Prepare the engine for ``spec``; returns self."""

    @abstractmethod
    def sample(self, data: Dict, config: SamplerConfig) -> PosteriorDraws:
        """Draw from the posterior given ``data`` = {'n': ..., 'x': ...}."""

    def _check_ready(self, data: Dict) -> np.ndarray:
        if not self.is_compiled:
            raise RuntimeError("Model not compiled. Call compile(spec) first.")
        x = np.asarray(data['x'], dtype=np.float64)
        if 'n' in data and int(data['n']) != x.size:
            raise ValueError(f"Data block mismatch: n={data['n']} but len(x)={x.size}")
        return x


class PyMCBackend(SamplerBackend):
    """Sample with PyMC (NUTS by default)."""

    def __init__(self, verbose: bool = True):
        super().__init__(verbose)
        self.model: Optional[pm.Model] = None

    def compile(self, spec: WeibullModelSpec) -> 'PyMCBackend':
        self.spec = spec
        self.model = spec.build_pymc_model()
        if self.verbose:
            print(f"[Sampler] Compiled PyMC model: {', '.join(p.describe() for p in spec.priors)}")
        return self

    def _step(self, config: SamplerConfig):
        if config.sampler == 'NUTS':
            return pm.NUTS(target_accept=config.target_accept)
        if config.sampler == 'Metropolis':
            return pm.Metropolis()
        return pm.Slice()

    def sample(self, data: Dict, config: SamplerConfig) -> PosteriorDraws:
        x = self._check_ready(data)

        with self.model:
            pm.set_data({'x': x})

            if self.verbose:
                print(f"[Sampler] Starting MCMC sampling ({config.sampler})...")
                print(f"  Observations: {x.size}")
                print(f"  Chains: {config.n_chains}")
                print(f"  Iterations per chain: {config.n_iter} "
                      f"({config.n_tune} burn-in, {config.n_draws} kept)")

            idata = pm.sample(
                draws=config.n_draws,
                tune=config.n_tune,
                chains=config.n_chains,
                cores=config.cores,
                step=self._step(config),
                random_seed=config.random_seed,
                progressbar=config.progressbar,
                return_inferencedata=True,
                discard_tuned_samples=True,
            )

        draws = PosteriorDraws.from_inference_data(idata, var_names=self.spec.parameter_names)
        if self.verbose:
            print(f"[Sampler] Sampling complete: {draws.n_chains} x {draws.n_draws} "
                  f"= {draws.n_total} draws")
        return draws


# ═══════════════════════════════════════════════════════════════
# Diagnostics
# ═══════════════════════════════════════════════════════════════

def check_convergence(draws: PosteriorDraws,
                      rhat_threshold: float = 1.01,
                      min_ess_ratio: float = 0.1,
                      verbose: bool = True) -> Dict[str, bool]:
    """Report R-hat and effective sample size for each parameter.

    Non-convergence is only reported; callers decide what to do with it.

    Returns:
        {parameter: True if R-hat and ESS both pass}
    """
    from .summary import effective_sample_size

    if verbose:
        print("\n[Sampler] Convergence Diagnostics:")

    status = {}
    for name in draws.parameter_names:
        chains = draws.samples[name]
        rhat = float(az.rhat(chains)) if draws.n_chains > 1 and draws.n_draws >= 4 else np.nan
        ess = effective_sample_size(chains)
        ess_ratio = ess / draws.n_total

        rhat_ok = np.isnan(rhat) or rhat < rhat_threshold
        ess_ok = ess_ratio > min_ess_ratio
        status[name] = bool(rhat_ok and ess_ok)

        if verbose:
            rhat_txt = "n/a" if np.isnan(rhat) else f"{rhat:.4f}"
            flag = "✓" if status[name] else "⚠ WARNING"
            print(f"    {name}: R-hat {rhat_txt}, ESS {ess:.0f} "
                  f"({ess_ratio:.1%} of {draws.n_total}) {flag}")

    return status
