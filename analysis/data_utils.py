"""
Data loading and recoding utilities.
"""

import os
from typing import List

import numpy as np
import pandas as pd

from config import (
    ID_COL,
    CONDITION_COL,
    TRIAL_COL,
    COUNT_COL,
    SECS_COL,
    LOG_SECS_COL,
    REQUIRED_COLUMNS,
    CONDITION_REFERENCE_LABEL,
    TRIAL_REFERENCE_VALUE,
    CONDITION_LABELS,
    TRIAL_LABELS,
    STRICT_LEVELS,
    SECONDS_PER_MINUTE,
    ROUND_DIGITS,
    RANDOM_SEED,
)


def _is_binary_coded(values: pd.Series) -> bool:
    """True if a column already holds 0/1 indicators (0 must be present)."""
    if not pd.api.types.is_numeric_dtype(values):
        return False
    levels = set(pd.unique(values))
    return levels <= {0, 1} and 0 in levels


def _check_two_levels(column: str, other_levels: List, strict: bool) -> None:
    """
    Enforce the two-level assumption behind the 0/1 recoding.

    Parameters
    ----------
    column : str
        Column being recoded
    other_levels : List
        Distinct levels other than the reference level
    strict : bool
        Raise on a third level instead of folding it into level 1
    """
    if len(other_levels) <= 1:
        return
    msg = (
        f"Column '{column}' must have exactly two levels; "
        f"found non-reference levels {other_levels}"
    )
    if strict:
        raise ValueError(msg)
    print(f"Warning: {msg}. Folding them all into level 1.")


def recode_condition(values: pd.Series, strict: bool = STRICT_LEVELS) -> pd.Series:
    """
    Recode the condition label into a 0/1 indicator.

    "Anti-Social" becomes 0 and the other label becomes 1. Columns that
    already hold 0/1 indicators are returned unchanged.

    Parameters
    ----------
    values : pd.Series
        Raw condition column
    strict : bool
        Reject a third label

    Returns
    -------
    pd.Series
        Integer indicator (0 = antisocial, 1 = prosocial)
    """
    if _is_binary_coded(values):
        return values.astype(int)

    labels = values.astype(str)
    others = sorted(set(labels) - {CONDITION_REFERENCE_LABEL})
    _check_two_levels(CONDITION_COL, others, strict)
    return (labels != CONDITION_REFERENCE_LABEL).astype(int)


def recode_trial(values: pd.Series, strict: bool = STRICT_LEVELS) -> pd.Series:
    """
    Recode the trial number into a 0/1 indicator.

    Trial 1 becomes 0 and the other trial becomes 1. Columns that already
    hold 0/1 indicators are returned unchanged.

    Parameters
    ----------
    values : pd.Series
        Raw trial column (integer)
    strict : bool
        Reject a third trial value

    Returns
    -------
    pd.Series
        Integer indicator (0 = first trial, 1 = second trial)
    """
    values = pd.to_numeric(values)
    if _is_binary_coded(values):
        return values.astype(int)

    others = sorted(set(pd.unique(values)) - {TRIAL_REFERENCE_VALUE})
    _check_two_levels(TRIAL_COL, others, strict)
    return (values != TRIAL_REFERENCE_VALUE).astype(int)


def prepare_observations(df: pd.DataFrame, strict: bool = STRICT_LEVELS) -> pd.DataFrame:
    """
    Validate and recode a raw observation table.

    Parameters
    ----------
    df : pd.DataFrame
        Raw table with ID, condition, trial, numberYawns and secs columns
    strict : bool
        Reject a third condition / trial level

    Returns
    -------
    pd.DataFrame
        New table with 0/1 condition and trial, integer counts, float
        exposure and a log_secs offset column
    """
    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"Missing required columns: {missing}")

    na_cols = [c for c in REQUIRED_COLUMNS if df[c].isna().any()]
    if na_cols:
        raise ValueError(f"Missing values in required columns: {na_cols}")

    out = df.copy()
    out[CONDITION_COL] = recode_condition(out[CONDITION_COL], strict=strict)
    out[TRIAL_COL] = recode_trial(out[TRIAL_COL], strict=strict)

    counts = pd.to_numeric(out[COUNT_COL])
    secs = pd.to_numeric(out[SECS_COL]).astype(float)

    if (counts < 0).any() or not np.all(np.mod(counts, 1) == 0):
        raise ValueError(f"'{COUNT_COL}' must contain non-negative integers")
    if (secs <= 0).any():
        raise ValueError(f"'{SECS_COL}' must be strictly positive (used as a log offset)")

    out[COUNT_COL] = counts.astype(int)
    out[SECS_COL] = secs
    out[LOG_SECS_COL] = np.log(secs)
    out[ID_COL] = pd.Categorical(out[ID_COL].astype(str))
    return out.reset_index(drop=True)


def load_yawn_data(path, strict: bool = STRICT_LEVELS) -> pd.DataFrame:
    """
    Read the per-trial yawn CSV and recode it.

    Parameters
    ----------
    path : str or Path
        CSV path
    strict : bool
        Reject a third condition / trial level

    Returns
    -------
    pd.DataFrame
        Prepared observation table
    """
    if not os.path.exists(path):
        raise FileNotFoundError(f"Data file {path} does not exist")
    return prepare_observations(pd.read_csv(path), strict=strict)


def generate_test_data(n_dogs: int = 24, seed: int = RANDOM_SEED) -> pd.DataFrame:
    """
    Generate synthetic raw data with a hurdle structure.

    Condition is assigned per dog (alternating) and every dog contributes
    two trials. The output uses the raw labels, so it goes through the same
    recoding as the CSV.

    Parameters
    ----------
    n_dogs : int
        Number of dogs
    seed : int
        Random seed

    Returns
    -------
    pd.DataFrame
        Raw synthetic table
    """
    rng = np.random.default_rng(seed)

    p_yawn = {CONDITION_LABELS[0]: 0.35, CONDITION_LABELS[1]: 0.55}
    rate_per_sec = {CONDITION_LABELS[0]: 0.006, CONDITION_LABELS[1]: 0.010}
    trial_shift = {1: 0.0, 2: -0.1}

    rows = []
    for i in range(n_dogs):
        dog = f"dog{i + 1:02d}"
        condition = CONDITION_LABELS[i % 2]
        dog_shift = rng.normal(0.0, 0.3)
        for trial in (1, 2):
            secs = float(rng.uniform(240.0, 360.0))
            logit_p = np.log(p_yawn[condition] / (1 - p_yawn[condition])) + dog_shift
            p = 1.0 / (1.0 + np.exp(-(logit_p + trial_shift[trial])))
            yawns = 0
            if rng.random() < p:
                yawns = 1 + int(rng.poisson(rate_per_sec[condition] * secs))
            rows.append({
                ID_COL: dog,
                CONDITION_COL: condition,
                TRIAL_COL: trial,
                COUNT_COL: yawns,
                SECS_COL: round(secs, 1),
            })

    return pd.DataFrame(rows)


def summarize_observations(data: pd.DataFrame) -> pd.DataFrame:
    """
    Descriptive statistics per condition × trial cell.

    Parameters
    ----------
    data : pd.DataFrame
        Prepared observation table

    Returns
    -------
    pd.DataFrame
        One row per cell with counts, proportion yawning and observed rate
    """
    rows = []
    for c_code, c_label in enumerate(CONDITION_LABELS):
        for t_code, t_label in enumerate(TRIAL_LABELS):
            cell = data[(data[CONDITION_COL] == c_code) & (data[TRIAL_COL] == t_code)]
            if cell.empty:
                continue
            total_secs = cell[SECS_COL].sum()
            rows.append({
                "condition": c_label,
                "trial": t_label,
                "n_rows": int(len(cell)),
                "n_dogs": int(cell[ID_COL].nunique()),
                "total_yawns": int(cell[COUNT_COL].sum()),
                "prop_yawned": round(float((cell[COUNT_COL] > 0).mean()), ROUND_DIGITS),
                "yawns_per_min": round(
                    float(cell[COUNT_COL].sum() / total_secs * SECONDS_PER_MINUTE),
                    ROUND_DIGITS,
                ),
            })
    return pd.DataFrame(rows)
