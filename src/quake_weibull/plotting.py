"""
Quake Weibull - Visualisation
=============================
Plots of the observations, the posterior and the chain behaviour.

Creates:
1. Histogram of the observed gaps
2. Posterior histograms per parameter, with mean and credible interval
3. Observed histogram overlaid with Weibull densities at the posterior
   mean, lower and upper credible bounds
4. Trace plot of one parameter, one facet per chain
5. Lag-1 scatter (value at i-1 vs. value at i) with a fitted trend line
6. ArviZ trace and posterior panels

Theme settings travel in ``PlotConfig`` and are applied in a seaborn style
context for each figure; nothing here changes global matplotlib state.
"""

import numpy as np
import pandas as pd
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Tuple

import arviz as az
import matplotlib.pyplot as plt
import seaborn as sns
from matplotlib.figure import Figure

from .distributions import weibull_pdf
from .sampling import PosteriorDraws
from .summary import ParameterSummary


@dataclass
class PlotConfig:
    """Figure styling and output options."""
    style: str = 'whitegrid'
    palette: str = 'deep'
    context: str = 'notebook'
    figsize: Tuple[float, float] = (8.0, 5.0)
    dpi: int = 150
    bins: int = 30
    save_dir: Optional[str] = None   # Save PNGs here when set
    show: bool = False               # Call plt.show() after each figure


def _finish(fig: Figure, config: PlotConfig, name: str) -> Figure:
    fig.tight_layout()
    if config.save_dir:
        out = Path(config.save_dir)
        out.mkdir(parents=True, exist_ok=True)
        path = out / f"{name}.png"
        fig.savefig(path, dpi=config.dpi, bbox_inches='tight')
        print(f"[Plot] Saved {path}")
    if config.show:
        plt.show()
    return fig


@contextmanager
def _themed(config: PlotConfig):
    """Apply a PlotConfig's seaborn theme for the duration of a block."""
    with sns.axes_style(config.style), \
            sns.plotting_context(config.context), \
            sns.color_palette(config.palette):
        yield


# ═══════════════════════════════════════════════════════════════
# Data and posterior histograms
# ═══════════════════════════════════════════════════════════════

def plot_data_histogram(x, config: Optional[PlotConfig] = None,
                        xlabel: str = 'Time between earthquakes') -> Figure:
    """Density histogram of the observed gaps."""
    config = config or PlotConfig()
    with _themed(config):
        fig, ax = plt.subplots(figsize=config.figsize)
        sns.histplot(np.asarray(x), bins=config.bins, stat='density', ax=ax)
        ax.set_xlabel(xlabel)
        ax.set_ylabel('Density')
        ax.set_title(f'Observed gaps (n = {len(x)})')
    return _finish(fig, config, 'data_histogram')


def plot_posterior_histograms(draws: PosteriorDraws,
                              summaries: Dict[str, ParameterSummary],
                              config: Optional[PlotConfig] = None) -> Figure:
    """One panel per parameter: pooled draws, mean and credible bounds."""
    config = config or PlotConfig()
    names = draws.parameter_names
    with _themed(config):
        fig, axes = plt.subplots(1, len(names), figsize=(config.figsize[0] * len(names) / 1.5,
                                                         config.figsize[1]),
                                 squeeze=False)
        for ax, name in zip(axes[0], names):
            s = summaries[name]
            sns.histplot(draws.pooled(name), bins=config.bins, stat='density', ax=ax)
            ax.axvline(s.mean, color='black', lw=2, label=f'mean {s.mean:.3f}')
            ax.axvline(s.ci_lower, color='black', ls='--', lw=1,
                       label=f'{s.credible_mass:.0%} CI')
            ax.axvline(s.ci_upper, color='black', ls='--', lw=1)
            ax.set_xlabel(name)
            ax.set_title(f'Posterior of {name}')
            ax.legend()
    return _finish(fig, config, 'posterior_histograms')


def plot_fitted_densities(x, summaries: Dict[str, ParameterSummary],
                          config: Optional[PlotConfig] = None,
                          n_points: int = 400) -> Figure:
    """Observed histogram with Weibull densities at mean, lower and upper estimates."""
    config = config or PlotConfig()
    k, lam = summaries['k'], summaries['lambda']
    curves = {
        'mean': (k.mean, lam.mean),
        'lower': (k.ci_lower, lam.ci_lower),
        'upper': (k.ci_upper, lam.ci_upper),
    }
    x = np.asarray(x)
    grid = np.linspace(x.max() / n_points, x.max(), n_points)

    with _themed(config):
        fig, ax = plt.subplots(figsize=config.figsize)
        sns.histplot(x, bins=config.bins, stat='density', alpha=0.4, ax=ax)
        for (label, (k_val, lam_val)), ls in zip(curves.items(), ('-', '--', ':')):
            ax.plot(grid, weibull_pdf(grid, k_val, lam_val), ls=ls, lw=2,
                    label=f'{label}: k={k_val:.3f}, λ={lam_val:.3f}')
        ax.set_xlabel('Time between earthquakes')
        ax.set_ylabel('Density')
        ax.set_title('Fitted Weibull densities')
        ax.legend()
    return _finish(fig, config, 'fitted_densities')


# ═══════════════════════════════════════════════════════════════
# Chain behaviour
# ═══════════════════════════════════════════════════════════════

def plot_trace(draws: PosteriorDraws, param: str = 'k',
               config: Optional[PlotConfig] = None) -> Figure:
    """Iteration vs. value, one facet per chain."""
    config = config or PlotConfig()
    colors = sns.color_palette(config.palette, draws.n_chains)
    with _themed(config):
        fig, axes = plt.subplots(draws.n_chains, 1, sharex=True, sharey=True,
                                 figsize=(config.figsize[0], 1.6 * draws.n_chains + 1),
                                 squeeze=False)
        iterations = np.arange(1, draws.n_draws + 1)
        for i, ax in enumerate(axes[:, 0]):
            ax.plot(iterations, draws.chain(param, i), lw=0.7, color=colors[i])
            ax.set_ylabel(param)
            ax.set_title(f'Chain {i + 1}', fontsize='small')
        axes[-1, 0].set_xlabel('Iteration (after burn-in)')
    return _finish(fig, config, f'trace_{param}')


def lag_pairs(draws: PosteriorDraws, param: str = 'k', lag: int = 1) -> pd.DataFrame:
    """Pairs (value at i-lag, value at i) within each chain, never across chains."""
    frames = []
    for i in range(draws.n_chains):
        c = draws.chain(param, i)
        frames.append(pd.DataFrame({'previous': c[:-lag], 'current': c[lag:], 'chain': i + 1}))
    return pd.concat(frames, ignore_index=True)


def plot_lag_scatter(draws: PosteriorDraws, param: str = 'k', lag: int = 1,
                     config: Optional[PlotConfig] = None) -> Figure:
    """Scatter of each draw against the draw ``lag`` steps earlier, with a linear fit."""
    config = config or PlotConfig()
    pairs = lag_pairs(draws, param, lag)
    with _themed(config):
        fig, ax = plt.subplots(figsize=config.figsize)
        sns.regplot(data=pairs, x='previous', y='current', ax=ax,
                    scatter_kws={'s': 8, 'alpha': 0.4},
                    line_kws={'color': 'black'})
        r = np.corrcoef(pairs['previous'], pairs['current'])[0, 1]
        ax.set_xlabel(f'{param} at iteration i-{lag}')
        ax.set_ylabel(f'{param} at iteration i')
        ax.set_title(f'Lag-{lag} scatter of {param} (r = {r:.3f})')
    return _finish(fig, config, f'lag{lag}_{param}')


def plot_arviz_diagnostics(draws: PosteriorDraws,
                           config: Optional[PlotConfig] = None,
                           credible_mass: float = 0.95) -> Tuple[Figure, Figure]:
    """ArviZ trace panels and posterior densities with HDI."""
    config = config or PlotConfig()
    idata = draws.to_inference_data()
    with _themed(config):
        axes = az.plot_trace(idata, var_names=draws.parameter_names, compact=True)
        trace_fig = np.atleast_1d(axes).flat[0].figure
        _finish(trace_fig, config, 'arviz_trace')

        axes = az.plot_posterior(idata, var_names=draws.parameter_names,
                                 hdi_prob=credible_mass)
        post_fig = np.atleast_1d(axes).flat[0].figure
        _finish(post_fig, config, 'arviz_posterior')
    return trace_fig, post_fig


def plot_all(x, draws: PosteriorDraws, summaries: Dict[str, ParameterSummary],
             config: Optional[PlotConfig] = None) -> Dict[str, Figure]:
    """Every figure of the analysis, keyed by name."""
    config = config or PlotConfig()
    figures = {}
    # Data panels are skipped for an empty observation set
    if len(x):
        figures['data_histogram'] = plot_data_histogram(x, config)
    figures['posterior_histograms'] = plot_posterior_histograms(draws, summaries, config)
    if len(x):
        figures['fitted_densities'] = plot_fitted_densities(x, summaries, config)
    for name in draws.parameter_names:
        figures[f'trace_{name}'] = plot_trace(draws, name, config)
        figures[f'lag1_{name}'] = plot_lag_scatter(draws, name, 1, config)
    return figures
