"""
Pytest configuration and fixtures for reproducible testing.

This file provides centralized test configuration including:
- Random seed management for reproducibility
- Non-interactive matplotlib backend
- A stand-in sampler backend so summaries and plots can be tested
  without running PyMC
- Shared fixtures
"""
import matplotlib
matplotlib.use("Agg")

import matplotlib.pyplot as plt
import numpy as np
import pytest

from quake_weibull.sampling import PosteriorDraws, SamplerBackend, SamplerConfig


def pytest_configure(config):
    config.addinivalue_line("markers", "slow: runs PyMC sampling (deselect with -m 'not slow')")


@pytest.fixture(scope="session", autouse=True)
def set_random_seeds():
    """Set random seeds at the start of test session for reproducibility."""
    np.random.seed(42)
    yield


@pytest.fixture(autouse=True)
def close_figures():
    """Close figures created by a test."""
    yield
    plt.close('all')


def ar1_chains(center: float, scale: float, n_chains: int, n_draws: int,
               phi: float = 0.5, seed: int = 0) -> np.ndarray:
    """Autocorrelated (chains, draws) array around ``center``, kept positive."""
    rng = np.random.default_rng(seed)
    out = np.empty((n_chains, n_draws))
    for c in range(n_chains):
        z = rng.normal()
        for i in range(n_draws):
            z = phi * z + np.sqrt(1 - phi ** 2) * rng.normal()
            out[c, i] = z
    return np.abs(center + scale * out)


class FakeBackend(SamplerBackend):
    """Returns AR(1) draws around fixed values instead of running MCMC."""

    def __init__(self, k: float = 0.92, lam: float = 17.4, seed: int = 0):
        super().__init__(verbose=False)
        self.k = k
        self.lam = lam
        self.seed = seed
        self.compile_calls = 0
        self.sample_calls = 0

    def compile(self, spec):
        self.spec = spec
        self.compile_calls += 1
        return self

    def sample(self, data, config: SamplerConfig) -> PosteriorDraws:
        self._check_ready(data)
        self.sample_calls += 1
        return PosteriorDraws({
            'k': ar1_chains(self.k, 0.02, config.n_chains, config.n_draws, seed=self.seed),
            'lambda': ar1_chains(self.lam, 0.3, config.n_chains, config.n_draws,
                                 seed=self.seed + 1),
        })


@pytest.fixture
def fake_backend():
    return FakeBackend()


@pytest.fixture
def fake_draws():
    """4 chains x 500 draws, like the default run."""
    return PosteriorDraws({
        'k': ar1_chains(0.92, 0.02, 4, 500, seed=1),
        'lambda': ar1_chains(17.4, 0.3, 4, 500, seed=2),
    })


@pytest.fixture
def synthetic_gaps():
    """300 gaps from Weibull(0.92, 17.4)."""
    rng = np.random.default_rng(7)
    return 17.4 * rng.weibull(0.92, size=300)
