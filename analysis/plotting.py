"""
Plotting utilities for the yawning analysis.

Every figure is written as a vector (PDF) and a raster (PNG) file.
"""

from pathlib import Path
from typing import List, Optional

import matplotlib

# Non-interactive backend so the report can be built headless
matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
import matplotlib.patches as mpatches  # noqa: E402
import numpy as np  # noqa: E402
import pandas as pd  # noqa: E402
import pymc as pm  # noqa: E402
import seaborn as sns  # noqa: E402

from config import (  # noqa: E402
    PLOT_STYLE,
    CONDITION_COL,
    TRIAL_COL,
    COUNT_COL,
    SECS_COL,
    CONDITION_LABELS,
    TRIAL_LABELS,
    CONDITION_COLORS,
    TRIAL_COLORS,
    FAMILY_COLORS,
    FIGURE_FORMATS,
    SECONDS_PER_MINUTE,
    RANDOM_SEED,
)
from model_specs import ModelSpec  # noqa: E402
from posterior import rate_per_minute, probability_of_yawning  # noqa: E402

matplotlib.rcParams.update(PLOT_STYLE)
sns.set_style("white")


def _save_fig(fig: plt.Figure, out_path: Path) -> List[Path]:
    """
    Save figure in every configured format and close it.

    Parameters
    ----------
    fig : plt.Figure
        Matplotlib figure
    out_path : Path
        Output path; the suffix is replaced per format

    Returns
    -------
    List[Path]
        Written files
    """
    out_path = Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    fig.tight_layout()
    written = []
    for fmt in FIGURE_FORMATS:
        path = out_path.with_suffix(f".{fmt}")
        fig.savefig(path, dpi=300, bbox_inches="tight")
        written.append(path)
    plt.close(fig)
    return written


def apply_reference_styling(ax: plt.Axes) -> None:
    """Consistent spines, grid and tick sizes."""
    for spine in ax.spines.values():
        spine.set_linewidth(0.8)
        spine.set_color("black")
    ax.grid(True, axis="x", alpha=0.25, linestyle="--", linewidth=0.4)
    ax.set_axisbelow(True)
    ax.tick_params(axis="x", labelsize=6.5, pad=2)
    ax.tick_params(axis="y", labelsize=7, pad=2)


def plot_yawn_distribution(data: pd.DataFrame, out_path: Path) -> List[Path]:
    """
    Observed yawns per minute per condition × trial cell.

    Parameters
    ----------
    data : pd.DataFrame
        Prepared observation table
    out_path : Path
        Output path
    """
    df = pd.DataFrame({
        "condition": [CONDITION_LABELS[c] for c in data[CONDITION_COL]],
        "trial": [TRIAL_LABELS[t] for t in data[TRIAL_COL]],
        "yawns_per_min": data[COUNT_COL] / data[SECS_COL] * SECONDS_PER_MINUTE,
    })

    fig, ax = plt.subplots(figsize=(7, 4))
    sns.boxplot(
        data=df, x="condition", y="yawns_per_min", hue="trial",
        order=CONDITION_LABELS, hue_order=TRIAL_LABELS,
        palette=TRIAL_COLORS, fliersize=0, linewidth=0.8, ax=ax,
    )
    sns.stripplot(
        data=df, x="condition", y="yawns_per_min", hue="trial",
        order=CONDITION_LABELS, hue_order=TRIAL_LABELS,
        dodge=True, color="black", size=2.5, alpha=0.6, legend=False, ax=ax,
    )
    ax.set_xlabel("Condition", fontsize=8, fontweight="bold")
    ax.set_ylabel("Yawns per minute", fontsize=8, fontweight="bold")
    ax.set_title("Observed yawning rate", fontsize=10, fontweight="bold", pad=12)
    ax.legend(fontsize=7, frameon=True, title="Trial", title_fontsize=8)

    apply_reference_styling(ax)
    return _save_fig(fig, out_path)


def plot_cell_estimates(
    cell_df: pd.DataFrame,
    quantity: str,
    out_path: Path,
    model_name: str = "",
) -> List[Path]:
    """
    Posterior median and interval per cell, drawn as boxes.

    Parameters
    ----------
    cell_df : pd.DataFrame
        Output of posterior.cell_table
    quantity : str
        Axis label (e.g. 'Yawns per minute')
    out_path : Path
        Output path
    model_name : str
        Shown in the title
    """
    df = cell_df.reset_index(drop=True)
    labels = [f"{r.condition} | {r.trial}" for r in df.itertuples(index=False)]
    colors = [CONDITION_COLORS.get(c, "#999999") for c in df["condition"]]

    fig, ax = plt.subplots(figsize=(7, max(3.0, 0.6 * len(df))))
    box_height = 0.6
    for i, r in enumerate(df.itertuples(index=False)):
        ax.add_patch(mpatches.Rectangle(
            (r.lo, i - box_height / 2), r.hi - r.lo, box_height,
            facecolor=colors[i], edgecolor="black", linewidth=0.8, alpha=0.75, zorder=2,
        ))
        ax.plot([r.median, r.median], [i - box_height / 2, i + box_height / 2],
                color="black", linewidth=1.5, zorder=3)
        ax.text(r.hi, i, f"  {r.median:.2f} [{r.lo:.2f}, {r.hi:.2f}]",
                va="center", ha="left", fontsize=6)

    span = float(df["hi"].max() - df["lo"].min()) or 1.0
    ax.set_xlim(float(df["lo"].min()) - 0.05 * span, float(df["hi"].max()) + 0.45 * span)
    ax.set_ylim(-0.6, len(df) - 0.4)
    ax.set_yticks(np.arange(len(df)))
    ax.set_yticklabels(labels, fontsize=7)
    ax.invert_yaxis()
    ax.set_xlabel(quantity, fontsize=8, fontweight="bold")
    title = f"{quantity} by cell"
    if model_name:
        title += f" ({model_name})"
    ax.set_title(title, fontsize=10, fontweight="bold", pad=12)

    apply_reference_styling(ax)
    return _save_fig(fig, out_path)


def plot_contrasts(
    contrast_df: pd.DataFrame,
    quantity: str,
    out_path: Path,
    title_suffix: str = "",
) -> Optional[List[Path]]:
    """
    Contrast medians and intervals with Pr(>0) labels.

    Parameters
    ----------
    contrast_df : pd.DataFrame
        Contrast results from contrasts.py
    quantity : str
        Quantity name
    out_path : Path
        Output file path
    title_suffix : str
        Additional title text
    """
    if contrast_df.empty:
        return None

    df = contrast_df.reset_index(drop=True)
    if "trial" in df.columns:
        labels = [f"{r.trial}: {r.contrast}" for r in df.itertuples(index=False)]
        colors = [TRIAL_COLORS.get(t, "#999999") for t in df["trial"]]
    elif "condition" in df.columns:
        labels = [f"{r.condition}: {r.contrast}" for r in df.itertuples(index=False)]
        colors = [CONDITION_COLORS.get(c, "#999999") for c in df["condition"]]
    else:
        labels = list(df["contrast"])
        colors = ["#9575CD"] * len(df)

    fig, ax = plt.subplots(figsize=(9, max(2.5, 0.6 * len(df))))
    box_height = 0.6
    for i in range(len(df)):
        lo, hi, med = df.loc[i, "lo"], df.loc[i, "hi"], df.loc[i, "median"]
        ax.add_patch(mpatches.Rectangle(
            (lo, i - box_height / 2), hi - lo, box_height,
            facecolor=colors[i], edgecolor="black", linewidth=0.8, alpha=0.75, zorder=2,
        ))
        ax.plot([med, med], [i - box_height / 2, i + box_height / 2],
                color="black", linewidth=1.5, zorder=3)
        pr_pos = df.loc[i, "Pr(>0)"]
        ax.text(med, i, f"{med:.2f}\n(Pr>0={pr_pos:.2f})",
                va="center", ha="left" if med > 0 else "right", fontsize=6,
                bbox=dict(boxstyle="round,pad=0.3", facecolor="white", edgecolor="none", alpha=0.8))

    ax.axvline(0, linestyle="--", linewidth=1, color="black", alpha=0.5, zorder=1)
    lo_all = min(float(df["lo"].min()), 0.0)
    hi_all = max(float(df["hi"].max()), 0.0)
    pad = 0.15 * ((hi_all - lo_all) or 1.0)
    ax.set_xlim(lo_all - pad, hi_all + pad)
    ax.set_ylim(-0.6, len(df) - 0.4)
    ax.set_yticks(np.arange(len(df)))
    ax.set_yticklabels(labels, fontsize=7)
    ax.invert_yaxis()
    ax.set_xlabel(f"Contrast (change in {quantity})", fontsize=8, fontweight="bold")

    title = f"Contrasts: {quantity}"
    if title_suffix:
        title += f" - {title_suffix}"
    ax.set_title(title, fontsize=10, fontweight="bold", pad=12)

    apply_reference_styling(ax)
    return _save_fig(fig, out_path)


def plot_model_comparison(
    baseline_df: pd.DataFrame,
    out_path: Path,
    families: Optional[dict] = None,
) -> Optional[List[Path]]:
    """
    ELPD differences to the baseline with ±1.96 SE intervals.

    Parameters
    ----------
    baseline_df : pd.DataFrame
        Output of comparison.compare_to_baseline
    out_path : Path
        Output file path
    families : Optional[dict]
        Model name -> family, for colouring
    """
    if baseline_df is None or baseline_df.empty:
        return None

    df = baseline_df.reset_index(drop=True)
    families = families or {}
    colors = [FAMILY_COLORS.get(families.get(m, ""), "#999999") for m in df["model"]]
    y = np.arange(len(df))

    fig, ax = plt.subplots(figsize=(7, max(3.0, 0.35 * len(df))))
    for i, r in enumerate(df.itertuples(index=False)):
        ax.plot([r.lo, r.hi], [i, i], color=colors[i], linewidth=2.0, zorder=2)
        face = "black" if r.credible_difference else "white"
        ax.plot(r.elpd_diff, i, marker="o", markerfacecolor=face,
                markeredgecolor="black", markersize=5, zorder=3)

    ax.axvline(0, linestyle="--", linewidth=1, color="black", alpha=0.5, zorder=1)
    ax.set_yticks(y)
    ax.set_yticklabels(df["model"], fontsize=7)
    ax.invert_yaxis()
    baseline = df["baseline"].iloc[0]
    ax.set_xlabel(f"ELPD difference to {baseline}", fontsize=8, fontweight="bold")
    ax.set_title("Model comparison (filled: interval excludes 0)",
                 fontsize=10, fontweight="bold", pad=12)

    if families:
        present = []
        for m in df["model"]:
            fam = families.get(m)
            if fam and fam not in present:
                present.append(fam)
        handles = [
            mpatches.Patch(facecolor=FAMILY_COLORS.get(f, "#999999"), edgecolor="black",
                           label=f, linewidth=0.8)
            for f in present
        ]
        ax.legend(handles=handles, loc="best", frameon=True, fontsize=6,
                  title="Family", title_fontsize=7)

    apply_reference_styling(ax)
    return _save_fig(fig, out_path)


def plot_prior_predictive_check(
    spec: ModelSpec,
    out_path: Path,
    n_samples: int = 2000,
    seed: int = RANDOM_SEED,
) -> List[Path]:
    """
    What the intercept priors imply on the natural scale.

    Left: baseline yawns per minute. Right (two-part families): baseline
    probability of yawning.

    Parameters
    ----------
    spec : ModelSpec
        Model specification
    out_path : Path
        Output file path
    n_samples : int
        Number of prior draws
    seed : int
        Random seed
    """
    intercept = pm.draw(spec.priors["Intercept"].dist_obj(), draws=n_samples, random_seed=seed)
    rate = rate_per_minute(intercept)

    n_panels = 2 if spec.secondary is not None else 1
    fig, axes = plt.subplots(1, n_panels, figsize=(6 * n_panels, 4), squeeze=False)

    ax1 = axes[0, 0]
    log_rate = np.log10(np.clip(rate, 1e-6, None))
    ax1.hist(log_rate, bins=50, alpha=0.7, density=True,
             color="#667eea", edgecolor="black", linewidth=0.8)
    ax1.set_xlabel("log10(yawns per minute)", fontsize=8, fontweight="bold")
    ax1.set_ylabel("Density", fontsize=8, fontweight="bold")
    ax1.set_title(f"Prior: baseline rate ({spec.priors['Intercept'].describe()})",
                  fontsize=10, fontweight="bold", pad=12)
    apply_reference_styling(ax1)

    if spec.secondary is not None:
        key = f"{spec.secondary}_Intercept"
        sec = pm.draw(spec.priors[key].dist_obj(), draws=n_samples, random_seed=seed)
        ax2 = axes[0, 1]
        ax2.hist(probability_of_yawning(sec), bins=50, alpha=0.7, density=True,
                 color="#764ba2", edgecolor="black", linewidth=0.8)
        ax2.set_xlim(0, 1)
        ax2.set_xlabel("Probability of yawning", fontsize=8, fontweight="bold")
        ax2.set_ylabel("Density", fontsize=8, fontweight="bold")
        ax2.set_title(f"Prior: baseline probability ({spec.priors[key].describe()})",
                      fontsize=10, fontweight="bold", pad=12)
        apply_reference_styling(ax2)

    return _save_fig(fig, out_path)
