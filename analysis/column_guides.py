"""
Column guide documentation for all tables in the report.
"""

# =============================================================================
# DATA AND REGISTRY TABLES
# =============================================================================

COLGUIDE_OBSERVED = {
    "condition": "Experimental condition of the demonstrator.",
    "trial": "Trial within dog.",
    "n_rows": "Number of observations in this cell.",
    "n_dogs": "Number of distinct dogs in this cell.",
    "total_yawns": "Sum of observed yawns.",
    "prop_yawned": "Share of observations with at least one yawn.",
    "yawns_per_min": "Total yawns divided by total exposure, in yawns per minute.",
}

COLGUIDE_REGISTRY = {
    "model": "Model name m&lt;family&gt;.&lt;formula&gt;.",
    "family": "Response distribution.",
    "formula": "Count model; offset(log(secs)) turns it into a rate per second.",
    "secondary": "Linear predictor of the zero-inflation (zi) or hurdle (hu) probability.",
}

COLGUIDE_PRIORS = {
    "class": "Coefficient class the prior applies to.",
    "prior": "Prior distribution and its parameters.",
}

# =============================================================================
# POSTERIOR TABLES
# =============================================================================

COLGUIDE_COEFS = {
    "param": "Fixed-effect coefficient (b_zi_* / b_hu_* belong to the secondary part).",
    "mean": "Posterior mean on the link scale (log for rates, logit for zi / hu).",
    "sd": "Posterior SD.",
    "hdi_2.5%": "Lower bound of the 95% HDI.",
    "hdi_97.5%": "Upper bound of the 95% HDI.",
    "r_hat": "Convergence diagnostic; values near 1 indicate mixed chains.",
    "ess_bulk": "Bulk effective sample size.",
}

COLGUIDE_CELLS = {
    "condition": "Condition of the cell.",
    "trial": "Trial of the cell.",
    "median": "Posterior median on the natural scale.",
    "lo": "Lower bound of the 95% equal-tailed interval.",
    "hi": "Upper bound of the 95% equal-tailed interval.",
}

COLGUIDE_CONTRASTS = {
    "trial": "Trial within which conditions are compared.",
    "condition": "Condition within which trials are compared.",
    "scope": "Marginal or interaction contrast.",
    "contrast": "Per-draw difference being summarised.",
    "median": "Posterior median of the difference.",
    "mean": "Posterior mean of the difference.",
    "lo": "Lower bound of the 95% interval.",
    "hi": "Upper bound of the 95% interval.",
    "Pr(>0)": "Share of draws with a positive difference.",
    "Pr(<0)": "Share of draws with a negative difference.",
    "Pr(=0)": "Share of draws with an exactly zero difference.",
}

# =============================================================================
# COMPARISON TABLES
# =============================================================================

COLGUIDE_RANKING = {
    "rank": "Rank by expected log predictive density (1 = best).",
    "model": "Model name.",
    "elpd": "Estimated expected log predictive density.",
    "se": "Standard error of elpd.",
    "p_loo": "Effective number of parameters (LOO).",
    "p_waic": "Effective number of parameters (WAIC).",
    "elpd_diff": "elpd of the best model minus elpd of this model (≥ 0).",
    "dse": "Standard error of the difference.",
    "weight": "Stacking weight from az.compare.",
    "warning": "Whether ArviZ flagged the estimate as unreliable.",
}

COLGUIDE_BASELINE = {
    "model": "Compared model.",
    "baseline": "Reference model.",
    "elpd_diff": "elpd(model) − elpd(baseline).",
    "se_diff": "Standard error of the difference.",
    "lo": "elpd_diff − 1.96 × se_diff.",
    "hi": "elpd_diff + 1.96 × se_diff.",
    "credible_difference": "Whether the approximate 95% interval excludes 0.",
}

COLGUIDE_EXCLUDED = {
    "model": "Model left out of the comparison.",
    "reason": "Why it was excluded (sampling failure or non-convergence).",
}
