"""
Contrast computation for the condition × trial design.

All functions take cell draws of shape (samples, conditions, trials) and
difference them per draw.
"""

from typing import Sequence

import numpy as np
import pandas as pd

from config import CONDITION_LABELS, TRIAL_LABELS, HDI_PROB
from statistical_utils import (
    interaction_contrast,
    paired_difference,
    summarize_contrast,
)


def contrasts_within_each_trial(
    cells: np.ndarray,
    conditions: Sequence[str] = CONDITION_LABELS,
    trials: Sequence[str] = TRIAL_LABELS,
    hdi_prob: float = HDI_PROB,
) -> pd.DataFrame:
    """
    Condition contrast (Pro-Social − Anti-Social) within each trial.

    Parameters
    ----------
    cells : np.ndarray
        Cell draws, shape (samples, conditions, trials)
    conditions : Sequence[str]
        Condition labels (index 0 is the baseline)
    trials : Sequence[str]
        Trial labels
    hdi_prob : float
        Interval probability

    Returns
    -------
    pd.DataFrame
        Contrast results
    """
    rows = []
    for ti, t in enumerate(trials):
        base = cells[:, 0, ti]
        for ci in range(1, len(conditions)):
            delta = paired_difference(cells[:, ci, ti], base)
            stats = summarize_contrast(delta, hdi_prob)
            rows.append({"trial": t, "contrast": f"{conditions[ci]} − {conditions[0]}", **stats})
    return pd.DataFrame(rows)


def contrasts_within_each_condition(
    cells: np.ndarray,
    conditions: Sequence[str] = CONDITION_LABELS,
    trials: Sequence[str] = TRIAL_LABELS,
    hdi_prob: float = HDI_PROB,
) -> pd.DataFrame:
    """
    Trial contrast (Trial 2 − Trial 1) within each condition.

    Parameters
    ----------
    cells : np.ndarray
        Cell draws, shape (samples, conditions, trials)
    conditions : Sequence[str]
        Condition labels
    trials : Sequence[str]
        Trial labels (index 0 is the baseline)
    hdi_prob : float
        Interval probability

    Returns
    -------
    pd.DataFrame
        Contrast results
    """
    rows = []
    for ci, c in enumerate(conditions):
        base = cells[:, ci, 0]
        for ti in range(1, len(trials)):
            delta = paired_difference(cells[:, ci, ti], base)
            stats = summarize_contrast(delta, hdi_prob)
            rows.append({"condition": c, "contrast": f"{trials[ti]} − {trials[0]}", **stats})
    return pd.DataFrame(rows)


def contrast_condition_overall(
    cells: np.ndarray,
    conditions: Sequence[str] = CONDITION_LABELS,
    hdi_prob: float = HDI_PROB,
) -> pd.DataFrame:
    """Condition contrast averaged over trials."""
    marg = cells.mean(axis=2)  # (samples, condition)
    rows = []
    for ci in range(1, len(conditions)):
        delta = paired_difference(marg[:, ci], marg[:, 0])
        stats = summarize_contrast(delta, hdi_prob)
        rows.append({
            "scope": "Overall (avg over trials)",
            "contrast": f"{conditions[ci]} − {conditions[0]}",
            **stats,
        })
    return pd.DataFrame(rows)


def contrast_trial_overall(
    cells: np.ndarray,
    trials: Sequence[str] = TRIAL_LABELS,
    hdi_prob: float = HDI_PROB,
) -> pd.DataFrame:
    """Trial contrast averaged over conditions."""
    marg = cells.mean(axis=1)  # (samples, trial)
    rows = []
    for ti in range(1, len(trials)):
        delta = paired_difference(marg[:, ti], marg[:, 0])
        stats = summarize_contrast(delta, hdi_prob)
        rows.append({
            "scope": "Overall (avg over conditions)",
            "contrast": f"{trials[ti]} − {trials[0]}",
            **stats,
        })
    return pd.DataFrame(rows)


def contrast_interaction(
    cells: np.ndarray,
    conditions: Sequence[str] = CONDITION_LABELS,
    trials: Sequence[str] = TRIAL_LABELS,
    hdi_prob: float = HDI_PROB,
) -> pd.DataFrame:
    """
    Difference of differences: does the condition effect change between trials?

    (Pro, T2 − Anti, T2) − (Pro, T1 − Anti, T1), per draw.
    """
    delta = interaction_contrast(
        cells[:, 1, 1], cells[:, 0, 1],
        cells[:, 1, 0], cells[:, 0, 0],
    )
    stats = summarize_contrast(delta, hdi_prob)
    label = (
        f"({conditions[1]} − {conditions[0]} | {trials[1]}) − "
        f"({conditions[1]} − {conditions[0]} | {trials[0]})"
    )
    return pd.DataFrame([{"scope": "Interaction", "contrast": label, **stats}])


def all_contrasts(cells: np.ndarray, hdi_prob: float = HDI_PROB) -> dict:
    """Every contrast family for one cell array, keyed by family."""
    return {
        "condition_within_trial": contrasts_within_each_trial(cells, hdi_prob=hdi_prob),
        "trial_within_condition": contrasts_within_each_condition(cells, hdi_prob=hdi_prob),
        "condition_overall": contrast_condition_overall(cells, hdi_prob=hdi_prob),
        "trial_overall": contrast_trial_overall(cells, hdi_prob=hdi_prob),
        "interaction": contrast_interaction(cells, hdi_prob=hdi_prob),
    }
