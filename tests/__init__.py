"""
Quake Weibull - Test Suite
==========================

Test modules:
- test_distributions.py: Weibull / Exponential densities
- test_data.py: gap loading and validation
- test_model.py: priors, log-posterior, PyMC model
- test_sampling.py: sampler config, posterior draws, PyMC backend
- test_summary.py: credible intervals, ESS, autocorrelation
- test_plotting.py: figures
- test_trace_cache.py: on-disk trace cache
- test_workflow.py: end-to-end analysis
"""
