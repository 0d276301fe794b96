"""
Posterior post-processing: link-scale draws to yawns per minute and
probability of yawning, per condition × trial cell.
"""

from typing import Dict

import arviz as az
import numpy as np
import pandas as pd
from scipy.special import expit

from config import (
    CONDITION_LABELS,
    TRIAL_LABELS,
    SECONDS_PER_MINUTE,
    HDI_PROB,
)
from model_specs import ModelSpec
from statistical_utils import (
    _extract_draws_1d,
    _pick_hdi_columns,
    _summarize_draws,
    n_samples,
)


def _coefficient_name(part: str, term: str) -> str:
    return f"b_{term}" if part == "mu" else f"b_{part}_{term}"


def linear_predictor_draws(
    idata: az.InferenceData,
    condition: int,
    trial: int,
    part: str = "mu",
) -> np.ndarray:
    """
    Fixed-effect linear predictor for one cell, per draw.

    Intercept, plus the condition coefficient if condition=1, plus the trial
    coefficient if trial=1, plus the interaction if both. Terms missing from
    the model contribute zero.

    Parameters
    ----------
    idata : az.InferenceData
        Fitted model
    condition : int
        0 (antisocial) or 1 (prosocial)
    trial : int
        0 (first) or 1 (second)
    part : str
        'mu' for the log-rate, or the secondary parameter ('zi' / 'hu')

    Returns
    -------
    np.ndarray
        Link-scale draws
    """
    active = ["Intercept"]
    if condition:
        active.append("condition")
    if trial:
        active.append("trial")
    if condition and trial:
        active.append("condition:trial")

    intercept = _coefficient_name(part, "Intercept")
    if intercept not in idata.posterior:
        raise KeyError(f"Posterior has no '{intercept}'; the model has no '{part}' part")

    eta = np.zeros(n_samples(idata))
    for term in active:
        var = _coefficient_name(part, term)
        if var in idata.posterior:
            eta = eta + _extract_draws_1d(idata, "posterior", var)
    return eta


def rate_per_minute(eta: np.ndarray) -> np.ndarray:
    """Log-rate per second to yawns per minute, per draw."""
    return np.exp(np.asarray(eta, dtype=float)) * SECONDS_PER_MINUTE


def probability_of_yawning(eta: np.ndarray) -> np.ndarray:
    """Logit of 'no yawning process' (hu / zi) to probability of yawning, per draw."""
    return 1.0 - expit(np.asarray(eta, dtype=float))


def cell_draws(idata: az.InferenceData, part: str = "mu") -> np.ndarray:
    """
    Natural-scale draws for every condition × trial cell.

    Parameters
    ----------
    idata : az.InferenceData
        Fitted model
    part : str
        'mu' gives yawns per minute; a secondary part gives probability of
        yawning

    Returns
    -------
    np.ndarray
        Shape (samples, conditions, trials)
    """
    transform = rate_per_minute if part == "mu" else probability_of_yawning
    cells = np.zeros((n_samples(idata), len(CONDITION_LABELS), len(TRIAL_LABELS)))
    for ci in range(len(CONDITION_LABELS)):
        for ti in range(len(TRIAL_LABELS)):
            cells[:, ci, ti] = transform(linear_predictor_draws(idata, ci, ti, part))
    return cells


def cell_table(cells: np.ndarray, hdi_prob: float = HDI_PROB) -> pd.DataFrame:
    """
    Median and interval per cell, rounded for reporting.

    Parameters
    ----------
    cells : np.ndarray
        Shape (samples, conditions, trials)
    hdi_prob : float
        Interval probability

    Returns
    -------
    pd.DataFrame
        One row per cell
    """
    rows = []
    for ci, c_label in enumerate(CONDITION_LABELS):
        for ti, t_label in enumerate(TRIAL_LABELS):
            s = _summarize_draws(cells[:, ci, ti], hdi_prob=hdi_prob)
            rows.append({
                "condition": c_label,
                "trial": t_label,
                "median": s["median"],
                "lo": s["lo"],
                "hi": s["hi"],
            })
    return pd.DataFrame(rows)


def derived_quantities(idata: az.InferenceData, spec: ModelSpec) -> Dict[str, np.ndarray]:
    """
    All cell arrays available for a model.

    Returns
    -------
    Dict[str, np.ndarray]
        'rate' always; 'prob_yawn' for two-part families
    """
    out = {"rate": cell_draws(idata, "mu")}
    if spec.secondary is not None:
        out["prob_yawn"] = cell_draws(idata, spec.secondary)
    return out


def coefficient_table(
    idata: az.InferenceData,
    spec: ModelSpec,
    hdi_prob: float = HDI_PROB,
) -> pd.DataFrame:
    """
    ArviZ summary of the fixed-effect coefficients on the link scale.

    Parameters
    ----------
    idata : az.InferenceData
        Fitted model
    spec : ModelSpec
        Its specification
    hdi_prob : float
        HDI probability

    Returns
    -------
    pd.DataFrame
        param, mean, sd, HDI bounds, r_hat, ess_bulk
    """
    var_names = [v for v in spec.coefficient_names() if v in idata.posterior]
    summ = (
        az.summary(idata, var_names=var_names, hdi_prob=hdi_prob, round_to="none")
        .reset_index()
        .rename(columns={"index": "param"})
    )
    hdi_lo_col, hdi_hi_col = _pick_hdi_columns(summ)
    cols = ["param", "mean", "sd", hdi_lo_col, hdi_hi_col]
    cols += [c for c in ("r_hat", "ess_bulk") if c in summ.columns]
    return summ.loc[:, cols]
