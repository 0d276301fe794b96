"""
Per-model report sections: specification, posterior summaries, cell
estimates, contrasts and figures.
"""

from pathlib import Path

import arviz as az

from config import HDI_PROB
from column_guides import (
    COLGUIDE_PRIORS,
    COLGUIDE_COEFS,
    COLGUIDE_CELLS,
    COLGUIDE_CONTRASTS,
)
from html_report import HtmlReport, add_table_with_column_guide, _safe_slug
from model_specs import ModelSpec
from posterior import coefficient_table, derived_quantities, cell_table
from contrasts import all_contrasts
from plotting import (
    plot_cell_estimates,
    plot_contrasts,
    plot_prior_predictive_check,
)

QUANTITY_LABELS = {
    "rate": "Yawns per minute",
    "prob_yawn": "Probability of yawning",
}

CONTRAST_TITLES = {
    "condition_within_trial": "Condition within trial",
    "trial_within_condition": "Trial within condition",
    "condition_overall": "Overall condition effect",
    "trial_overall": "Overall trial effect",
    "interaction": "Condition × trial interaction",
}


def model_tab_id(name: str) -> str:
    return f"tab-{_safe_slug(name)}"


def add_model_analysis(
    report: HtmlReport,
    spec: ModelSpec,
    idata: az.InferenceData,
    assets_dir: Path,
    hdi_prob: float = HDI_PROB,
) -> None:
    """
    Add the complete analysis of one fitted model to the report.

    Parameters
    ----------
    report : HtmlReport
        Report instance
    spec : ModelSpec
        Model specification
    idata : az.InferenceData
        Fitted model
    assets_dir : Path
        Directory for figures
    hdi_prob : float
        Interval probability
    """
    slug = _safe_slug(spec.name)
    report.open_tab_content(model_tab_id(spec.name))

    report.add_card_start()
    report.add_h2(f"Model {spec.name}: {spec.family}, {spec.formula_label}")
    report.add_paragraph(f"<code>{spec.formula()}</code>")
    if spec.secondary is not None:
        report.add_paragraph(f"<code>{spec.secondary_formula()}</code>")
    report.add_h3("Priors")
    add_table_with_column_guide(report, spec.prior_table(), COLGUIDE_PRIORS)

    prior_name = f"prior_{slug}.png"
    plot_prior_predictive_check(spec, assets_dir / prior_name)
    report.add_image(f"{assets_dir.name}/{prior_name}", alt=f"Prior check for {spec.name}")
    report.add_card_end()

    report.add_card_start()
    report.add_h3("Coefficients (link scale)")
    add_table_with_column_guide(report, coefficient_table(idata, spec, hdi_prob), COLGUIDE_COEFS)
    report.add_card_end()

    for key, cells in derived_quantities(idata, spec).items():
        quantity = QUANTITY_LABELS[key]
        print(f"  {spec.name}: {quantity}")

        report.add_card_start()
        report.add_h3(f"{quantity} by condition and trial")
        table = cell_table(cells, hdi_prob=hdi_prob)
        add_table_with_column_guide(report, table, COLGUIDE_CELLS)

        cells_name = f"cells_{key}_{slug}.png"
        plot_cell_estimates(table, quantity, assets_dir / cells_name, model_name=spec.name)
        report.add_image(f"{assets_dir.name}/{cells_name}", alt=f"{quantity} for {spec.name}")

        for family, contrast_df in all_contrasts(cells, hdi_prob=hdi_prob).items():
            title = CONTRAST_TITLES[family]
            report.add_h3(f"{title}: {quantity.lower()}")
            add_table_with_column_guide(report, contrast_df, COLGUIDE_CONTRASTS)

            plot_name = f"contrast_{family}_{key}_{slug}.png"
            if plot_contrasts(contrast_df, quantity, assets_dir / plot_name, title_suffix=title):
                report.add_image(f"{assets_dir.name}/{plot_name}", alt=f"{title} for {spec.name}")
        report.add_card_end()

    report.add_footnote(
        "Reading these numbers",
        """
<ul>
  <li>Cell values add the relevant coefficient draws per draw, then transform:
      yawns per minute = exp(eta) × 60; probability of yawning = 1 − invlogit(eta).</li>
  <li>Contrasts are differences computed within each draw; Pr(&lt;0) and Pr(&gt;0) count draws.</li>
  <li>Values are posterior medians rounded to two decimals; draws are never rounded.</li>
</ul>
""",
    )
    report.close_tab_content()
