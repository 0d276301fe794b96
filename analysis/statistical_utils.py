"""
Core statistical utilities for posterior draws.
"""

from typing import Dict, Optional, Tuple

import arviz as az
import numpy as np
import pandas as pd

from config import ROUND_DIGITS


def _summarize_draws(
    draws: np.ndarray,
    hdi_prob: float,
    digits: Optional[int] = ROUND_DIGITS,
) -> Dict[str, float]:
    """
    Summarize posterior draws with median, mean and an equal-tailed interval.

    Parameters
    ----------
    draws : np.ndarray
        Posterior draws
    hdi_prob : float
        Interval probability (e.g., 0.95)
    digits : Optional[int]
        Rounding for reporting; None keeps full precision

    Returns
    -------
    Dict[str, float]
        Dictionary with 'median', 'mean', 'lo', 'hi'
    """
    draws = np.asarray(draws, dtype=float).ravel()
    lo_q = (1.0 - hdi_prob) / 2.0
    hi_q = 1.0 - lo_q
    out = {
        "median": float(np.median(draws)),
        "mean": float(np.mean(draws)),
        "lo": float(np.quantile(draws, lo_q)),
        "hi": float(np.quantile(draws, hi_q)),
    }
    if digits is not None:
        out = {k: round(v, digits) for k, v in out.items()}
    return out


def _pick_hdi_columns(summary_df: pd.DataFrame) -> Tuple[str, str]:
    """
    Identify HDI column names from ArviZ summary.

    Parameters
    ----------
    summary_df : pd.DataFrame
        ArviZ summary DataFrame

    Returns
    -------
    Tuple[str, str]
        (lower_hdi_col, upper_hdi_col)
    """
    hdi_cols = [
        c for c in summary_df.columns if c.startswith("hdi_") and c.endswith("%")
    ]
    if len(hdi_cols) < 2:
        raise ValueError(f"Could not find HDI columns in: {list(summary_df.columns)}")

    def _as_float(col: str) -> float:
        return float(col.replace("hdi_", "").replace("%", ""))

    hdi_cols_sorted = sorted(hdi_cols, key=_as_float)
    return hdi_cols_sorted[0], hdi_cols_sorted[-1]


def _extract_draws_1d(
    idata: az.InferenceData,
    group: str,
    var_name: str,
    sel: Optional[Dict[str, str]] = None,
) -> np.ndarray:
    """
    Extraction of 1D draws from InferenceData.

    Stacks (chain, draw) dimensions into a single sample dimension, so
    draws of different variables stay paired by index.

    Parameters
    ----------
    idata : az.InferenceData
        Inference data object
    group : str
        Group name (e.g., 'posterior', 'prior')
    var_name : str
        Variable name
    sel : Optional[Dict[str, str]]
        Selection dictionary for coordinates

    Returns
    -------
    np.ndarray
        1D array of draws
    """
    grp = getattr(idata, group)
    da = grp[var_name]
    if sel:
        da = da.sel(sel)
    if "chain" in da.dims and "draw" in da.dims:
        da = da.stack(sample=("chain", "draw"))
        return da.to_numpy().ravel()
    return da.to_numpy().ravel()


def n_samples(idata: az.InferenceData) -> int:
    """Number of stacked posterior samples (chains × draws)."""
    post = idata.posterior
    return int(post.sizes["chain"] * post.sizes["draw"])


def paired_difference(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """
    Per-draw difference a[i] - b[i].

    Both inputs must come from the same posterior so index i refers to the
    same draw.
    """
    a = np.asarray(a, dtype=float).ravel()
    b = np.asarray(b, dtype=float).ravel()
    if a.shape != b.shape:
        raise ValueError(
            f"Paired difference needs equal-length draws, got {a.shape[0]} and {b.shape[0]}"
        )
    return a - b


def interaction_contrast(
    a: np.ndarray,
    b: np.ndarray,
    c: np.ndarray,
    d: np.ndarray,
) -> np.ndarray:
    """Difference of differences (a - b) - (c - d), per draw."""
    return paired_difference(paired_difference(a, b), paired_difference(c, d))


def directional_probability(delta: np.ndarray, direction: str = "<") -> float:
    """
    Fraction of draws on one side of zero.

    Parameters
    ----------
    delta : np.ndarray
        Draws of a difference
    direction : str
        '<' for Pr(delta < 0), '>' for Pr(delta > 0)

    Returns
    -------
    float
        Posterior probability in [0, 1]
    """
    delta = np.asarray(delta, dtype=float).ravel()
    if direction == "<":
        return float((delta < 0).mean())
    if direction == ">":
        return float((delta > 0).mean())
    raise ValueError(f"direction must be '<' or '>', got {direction!r}")


def summarize_contrast(delta: np.ndarray, hdi_prob: float) -> Dict[str, float]:
    """
    Summarize a per-draw contrast.

    Parameters
    ----------
    delta : np.ndarray
        Contrast draws on the natural scale
    hdi_prob : float
        Interval probability

    Returns
    -------
    Dict[str, float]
        Median, mean, interval, Pr(>0), Pr(<0), Pr(=0)
    """
    delta = np.asarray(delta, dtype=float).ravel()
    s = _summarize_draws(delta, hdi_prob=hdi_prob)
    pr_gt = directional_probability(delta, ">")
    pr_lt = directional_probability(delta, "<")

    return {
        "median": s["median"],
        "mean": s["mean"],
        "lo": s["lo"],
        "hi": s["hi"],
        "Pr(>0)": pr_gt,
        "Pr(<0)": pr_lt,
        "Pr(=0)": float((delta == 0).mean()),
    }
