"""
Model comparison by expected log predictive density (LOO or WAIC).
"""

from typing import Dict, Optional, Tuple

import arviz as az
import numpy as np
import pandas as pd

from config import INFORMATION_CRITERION, BASELINE_MODEL, ROUND_DIGITS, Z_95
from statistical_utils import n_samples

PARETO_K_BAD = 0.7


def information_criterion(idata: az.InferenceData, ic: str = INFORMATION_CRITERION):
    """
    Pointwise LOO or WAIC estimate for one fitted model.

    Parameters
    ----------
    idata : az.InferenceData
        Fitted model with a log_likelihood group
    ic : str
        'loo' or 'waic'

    Returns
    -------
    az.ELPDData
        ArviZ result with pointwise values
    """
    if ic == "loo":
        return az.loo(idata, pointwise=True)
    if ic == "waic":
        return az.waic(idata, pointwise=True)
    raise ValueError(f"ic must be 'loo' or 'waic', got {ic!r}")


def pointwise_elpd(elpd_data, ic: str = INFORMATION_CRITERION) -> np.ndarray:
    """Per-observation ELPD contributions as a flat array."""
    return np.asarray(elpd_data[f"{ic}_i"], dtype=float).ravel()


def elpd_se(pointwise: np.ndarray) -> float:
    """Standard error of a summed ELPD."""
    pointwise = np.asarray(pointwise, dtype=float).ravel()
    return float(np.sqrt(len(pointwise) * np.var(pointwise)))


def elpd_difference(pointwise_a: np.ndarray, pointwise_b: np.ndarray) -> Tuple[float, float]:
    """
    ELPD difference a − b and its standard error.

    The SE comes from the pointwise differences, so it accounts for the
    correlation between the two models' predictions.

    Parameters
    ----------
    pointwise_a, pointwise_b : np.ndarray
        Pointwise ELPD of two models on the same observations

    Returns
    -------
    Tuple[float, float]
        (difference, standard error)
    """
    a = np.asarray(pointwise_a, dtype=float).ravel()
    b = np.asarray(pointwise_b, dtype=float).ravel()
    if a.shape != b.shape:
        raise ValueError(
            f"Models were evaluated on different observations ({a.shape[0]} vs {b.shape[0]})"
        )
    diff_i = a - b
    return float(diff_i.sum()), elpd_se(diff_i)


def approx_interval(diff: float, se: float, z: float = Z_95) -> Tuple[float, float]:
    """Normal-approximation interval diff ± z·se."""
    return diff - z * se, diff + z * se


def credible_difference(lo: float, hi: float) -> bool:
    """True if the interval excludes zero."""
    return lo > 0 or hi < 0


def rank_models(elpds: Dict, ic: str = INFORMATION_CRITERION) -> pd.DataFrame:
    """
    Rank models by ELPD with ``az.compare``, best first.

    Parameters
    ----------
    elpds : Dict
        Model name -> InferenceData or ELPDData (from ``information_criterion``)
    ic : str
        'loo' or 'waic'

    Returns
    -------
    pd.DataFrame
        rank (1 = best), model, elpd, se, p_<ic>, elpd_diff (best minus this
        model, ≥ 0), dse, weight, warning
    """
    cmp = az.compare(elpds, ic=ic)
    table = cmp.rename(columns={f"elpd_{ic}": "elpd"})
    table.insert(0, "model", cmp.index)
    table = table.reset_index(drop=True)
    table["rank"] = table["rank"].astype(int) + 1

    num_cols = ["elpd", "se", f"p_{ic}", "elpd_diff", "dse", "weight"]
    table[num_cols] = table[num_cols].astype(float).round(ROUND_DIGITS)
    table["warning"] = table["warning"].astype(bool)
    return table.loc[:, ["rank", "model"] + num_cols + ["warning"]]


def compare_to_baseline(
    pointwise: Dict[str, np.ndarray],
    baseline: str,
    z: float = Z_95,
) -> pd.DataFrame:
    """
    ELPD difference of every model relative to a baseline.

    Parameters
    ----------
    pointwise : Dict[str, np.ndarray]
        Pointwise ELPD by model name
    baseline : str
        Reference model
    z : float
        Normal quantile for the interval

    Returns
    -------
    pd.DataFrame
        model, elpd_diff (model − baseline), se_diff, lo, hi,
        credible_difference
    """
    if baseline not in pointwise:
        raise KeyError(f"Baseline model '{baseline}' is not among the compared models")

    order = sorted(pointwise, key=lambda m: float(np.sum(pointwise[m])), reverse=True)
    rows = []
    for m in order:
        if m == baseline:
            continue
        diff, se = elpd_difference(pointwise[m], pointwise[baseline])
        lo, hi = approx_interval(diff, se, z)
        rows.append({
            "model": m,
            "baseline": baseline,
            "elpd_diff": round(diff, ROUND_DIGITS),
            "se_diff": round(se, ROUND_DIGITS),
            "lo": round(lo, ROUND_DIGITS),
            "hi": round(hi, ROUND_DIGITS),
            "credible_difference": credible_difference(lo, hi),
        })
    return pd.DataFrame(rows)


def compare_models(
    fitted: Dict[str, az.InferenceData],
    baseline: str = BASELINE_MODEL,
    ic: str = INFORMATION_CRITERION,
) -> Tuple[pd.DataFrame, Optional[pd.DataFrame]]:
    """
    Rank fitted models and compare them with a baseline.

    Parameters
    ----------
    fitted : Dict[str, az.InferenceData]
        Converged models fitted to the same observations
    baseline : str
        Reference model for the interval table
    ic : str
        'loo' or 'waic'

    Returns
    -------
    Tuple[pd.DataFrame, Optional[pd.DataFrame]]
        (ranking, baseline table or None if the baseline was not fitted)
    """
    if len(fitted) < 2:
        raise ValueError(f"Need at least two fitted models to compare, got {len(fitted)}")

    sample_counts = {m: n_samples(idata) for m, idata in fitted.items()}
    if len(set(sample_counts.values())) > 1:
        raise ValueError(f"Models have different numbers of draws: {sample_counts}")

    elpds = {}
    pointwise = {}
    for name, idata in fitted.items():
        res = information_criterion(idata, ic)
        elpds[name] = res
        pointwise[name] = pointwise_elpd(res, ic)
        if ic == "loo":
            n_bad = int((np.asarray(res["pareto_k"]) > PARETO_K_BAD).sum())
            if n_bad:
                print(f"Warning: {name} has {n_bad} observations with Pareto k > {PARETO_K_BAD}")

    ranking = rank_models(elpds, ic)

    if baseline not in pointwise:
        print(f"Warning: baseline {baseline} was not fitted or was excluded; no baseline table.")
        return ranking, None
    return ranking, compare_to_baseline(pointwise, baseline)
