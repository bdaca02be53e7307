"""
Quake Weibull - Complete Earthquake Gap Workflow
================================================
Walks through the exercise step by step.

Workflow:
1. Load the inter-earthquake gaps (CSV path or URL given on the command line;
   a synthetic sample file is written and used otherwise)
2. Declare the model and compile it for PyMC
3. Sample 4 chains x 1000 iterations, first 500 of each discarded
4. Posterior means, 95% credible intervals, ESS, R-hat
5. Plots: data histogram, posterior histograms, fitted densities,
   trace and lag-1 scatter of k

Usage:
    python examples/earthquake_weibull_workflow.py [CSV path or URL] [column]
"""

import sys
import os

import numpy as np

from quake_weibull import (AnalysisConfig, GapDataLoader, PlotConfig,
                           SamplerConfig, WeibullAnalysis, create_sample_gap_csv)


def step1_load_data(source: str = None, column: str = None):
    """Step 1: Load observed gaps."""
    print("\n" + "="*70)
    print("STEP 1: Load inter-earthquake gaps")
    print("="*70)

    if source is None:
        source = str(create_sample_gap_csv('data/sample_gaps.csv', k=0.92, lam=17.4, n=300))
        print(f"[Data] No source given, using synthetic sample: {source}")

    loader = GapDataLoader(data_dir='.')
    return loader.load_csv(source, column=column)


def step2_fit(data, output_dir: str):
    """Step 2-3: Declare, compile and sample the model."""
    print("\n" + "="*70)
    print("STEP 2: Model declaration and MCMC sampling")
    print("="*70)

    config = AnalysisConfig(
        sampler=SamplerConfig(n_chains=4, n_iter=1000, burn_in_fraction=0.5),
        plot=PlotConfig(save_dir=output_dir),
    )
    analysis = WeibullAnalysis(config)
    print(analysis.spec.declaration())

    analysis.fit(data)
    return analysis


def step3_summarize(analysis: WeibullAnalysis):
    """Step 4: Posterior summaries and sanity checks."""
    print("\n" + "="*70)
    print("STEP 3: Posterior summary")
    print("="*70)

    summaries = analysis.summarize()
    analysis.compare_with_mle()

    ppc = analysis.posterior_predictive_check(n_replicates=200, seed=1)
    print("\n[Summary] Posterior predictive p-values:")
    for stat, row in ppc.items():
        print(f"  {stat:<7} observed {row['observed']:8.3f}  "
              f"replicated {row['replicated_mean']:8.3f}  p = {row['p_value']:.2f}")

    k = summaries['k']
    print("\n" + "─" * 70)
    if k.ci_upper < 1.0:
        print(f"  k < 1 with {k.credible_mass:.0%} probability: the hazard of the next")
        print("  earthquake decreases with the time since the last one (clustering).")
    elif k.ci_lower > 1.0:
        print("  k > 1: the hazard grows with elapsed time (quasi-periodic behaviour).")
    else:
        print("  k is compatible with 1: gaps consistent with a Poisson process.")
    print(f"  Lag-1 autocorrelation of k draws: {k.lag1_autocorr:.3f}, "
          f"ESS {k.ess:.0f} of {k.n_draws}")
    print("─" * 70)
    return summaries


def step4_plots(analysis: WeibullAnalysis):
    """Step 5: Figures."""
    print("\n" + "="*70)
    print("STEP 4: Plots")
    print("="*70)
    figures = analysis.plot(include_arviz=True)
    print(f"[Plot] {len(figures)} figures created")
    return figures


def main():
    """Run complete workflow."""
    print("╔══════════════════════════════════════════════════════════════╗")
    print("║  Quake Weibull - Earthquake Gap Analysis Workflow            ║")
    print("╚══════════════════════════════════════════════════════════════╝")

    source = sys.argv[1] if len(sys.argv) > 1 else None
    column = sys.argv[2] if len(sys.argv) > 2 else None
    output_dir = os.path.join('results', 'figures')

    data = step1_load_data(source, column)
    analysis = step2_fit(data, output_dir)
    step3_summarize(analysis)
    step4_plots(analysis)

    analysis.save_trace(os.path.join('results', 'posterior.nc'))
    print(f"\n[OK] Mean gap in data: {np.mean(data.x):.3f}")
    print("\n✓ Workflow complete!")


if __name__ == '__main__':
    main()
