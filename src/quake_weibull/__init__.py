"""
Quake Weibull - Bayesian Weibull Fit of Earthquake Inter-Event Times

Fits a two-parameter Weibull distribution to the times between successive
earthquakes with MCMC, then inspects the posterior: means, credible
intervals, effective sample size, autocorrelation and plots.
"""

__version__ = "0.1.0"

# Densities
from .distributions import (
    weibull_pdf,
    weibull_logpdf,
    weibull_cdf,
    weibull_mean,
)

# Data loading
from .data import (
    GapData,
    GapDataLoader,
    validate_gaps,
    generate_synthetic_gaps,
    create_sample_gap_csv,
)

# Model and sampling
from .model import PriorSpec, WeibullModelSpec, get_default_priors
from .sampling import (
    SamplerConfig,
    SamplerBackend,
    PyMCBackend,
    PosteriorDraws,
    check_convergence,
)

# Summaries and plots
from .summary import (
    ParameterSummary,
    credible_interval,
    effective_sample_size,
    summarize_posterior,
)
from .plotting import PlotConfig

# Workflow
from .trace_cache import TraceCache
from .workflow import AnalysisConfig, WeibullAnalysis, run_analysis

__all__ = [
    "weibull_pdf",
    "weibull_logpdf",
    "weibull_cdf",
    "weibull_mean",
    "GapData",
    "GapDataLoader",
    "validate_gaps",
    "generate_synthetic_gaps",
    "create_sample_gap_csv",
    "PriorSpec",
    "WeibullModelSpec",
    "get_default_priors",
    "SamplerConfig",
    "SamplerBackend",
    "PyMCBackend",
    "PosteriorDraws",
    "check_convergence",
    "ParameterSummary",
    "credible_interval",
    "effective_sample_size",
    "summarize_posterior",
    "PlotConfig",
    "TraceCache",
    "AnalysisConfig",
    "WeibullAnalysis",
    "run_analysis",
]
