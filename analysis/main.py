"""
Main script for the contagious yawning GLMM analysis.

Usage:
    python main.py [--test] [--section all|models|comparison] [--models m2.5 ...]
"""

import argparse
from pathlib import Path
from typing import Dict, List

import pandas as pd
import pymc as pm

import config
from config import (
    YAWN_DATA_CSV,
    MODELS_DIR,
    BASELINE_MODEL,
    INFORMATION_CRITERION,
    get_output_paths,
)
from column_guides import (
    COLGUIDE_OBSERVED,
    COLGUIDE_REGISTRY,
    COLGUIDE_RANKING,
    COLGUIDE_BASELINE,
    COLGUIDE_EXCLUDED,
)
from html_report import HtmlReport, add_table_with_column_guide
from data_utils import load_yawn_data, generate_test_data, prepare_observations, summarize_observations
from model_specs import ModelSpec, get_spec, list_specs, registry_table
from model_store import ModelStore
from models import PymcSampler, fit_models
from comparison import compare_models
from plotting import plot_yawn_distribution, plot_model_comparison
from report_builder import add_model_analysis, model_tab_id

SECTIONS = ("all", "models", "comparison")


def add_overview_tab(
    report: HtmlReport,
    data: pd.DataFrame,
    specs: List[ModelSpec],
    assets_dir: Path,
) -> None:
    """
    Add overview tab with data summary and the model registry.

    Parameters
    ----------
    report : HtmlReport
        Report instance
    data : pd.DataFrame
        Prepared observations
    specs : List[ModelSpec]
        Specifications in this run
    assets_dir : Path
        Assets directory
    """
    report.open_tab_content("tab-overview")

    report.add_card_start()
    report.add_h2("Data summary")
    report.add_paragraph(
        f"{len(data)} observations from {data[config.ID_COL].nunique()} dogs."
    )
    add_table_with_column_guide(report, summarize_observations(data), COLGUIDE_OBSERVED)

    dist_name = "observed_rates.png"
    plot_yawn_distribution(data, assets_dir / dist_name)
    report.add_image(f"{assets_dir.name}/{dist_name}", alt="Observed yawning rates")
    report.add_card_end()

    report.add_card_start()
    report.add_h2("Models")
    add_table_with_column_guide(report, registry_table(specs), COLGUIDE_REGISTRY)
    report.add_card_end()

    report.close_tab_content()


def add_comparison_tab(
    report: HtmlReport,
    fitted: Dict,
    excluded: Dict[str, str],
    specs: List[ModelSpec],
    assets_dir: Path,
    baseline: str,
    ic: str,
) -> None:
    """
    Add the model comparison tab.

    Parameters
    ----------
    report : HtmlReport
        Report instance
    fitted : Dict
        Converged fitted models by name
    excluded : Dict[str, str]
        Exclusion reasons by name
    specs : List[ModelSpec]
        Specifications in this run
    assets_dir : Path
        Assets directory
    baseline : str
        Reference model
    ic : str
        'loo' or 'waic'
    """
    report.open_tab_content("tab-comparison")
    report.add_card_start()
    report.add_h2(f"Model comparison ({ic.upper()})")

    if len(fitted) < 2:
        report.add_paragraph("Fewer than two converged models; nothing to compare.")
    else:
        ranking, baseline_df = compare_models(fitted, baseline=baseline, ic=ic)
        report.add_h3("Ranking")
        add_table_with_column_guide(report, ranking, COLGUIDE_RANKING)

        if baseline_df is not None:
            report.add_h3(f"Differences to {baseline}")
            add_table_with_column_guide(report, baseline_df, COLGUIDE_BASELINE)

            plot_name = "model_comparison.png"
            families = {s.name: s.family for s in specs}
            plot_model_comparison(baseline_df, assets_dir / plot_name, families=families)
            report.add_image(f"{assets_dir.name}/{plot_name}", alt="Model comparison")
        else:
            report.add_paragraph(f"Baseline {baseline} is not available.")

        report.add_footnote(
            "Interpreting the comparison",
            """
<ul>
  <li>Intervals are elpd_diff ± 1.96 × SE, a normal approximation.</li>
  <li>An interval that overlaps 0 means no credible difference in predictive accuracy.</li>
  <li>No model is selected automatically.</li>
</ul>
""",
        )

    if excluded:
        report.add_h3("Excluded models")
        excl_df = pd.DataFrame(
            [{"model": m, "reason": r} for m, r in excluded.items()]
        )
        add_table_with_column_guide(report, excl_df, COLGUIDE_EXCLUDED)

    report.add_card_end()
    report.close_tab_content()


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Bayesian GLMM analysis of contagious yawning in dogs."
    )
    parser.add_argument("--csv", type=Path, default=YAWN_DATA_CSV, help="Per-trial yawn CSV.")
    parser.add_argument("--models-dir", type=Path, default=MODELS_DIR,
                        help="Directory of cached fitted models (.nc).")
    parser.add_argument("--out-dir", type=Path, default=None, help="Report output directory.")
    parser.add_argument("--section", choices=SECTIONS, default="all",
                        help="Which part of the report to render.")
    parser.add_argument("--models", nargs="+", default=None,
                        help="Model names to include (default: all registered models).")
    parser.add_argument("--baseline", default=BASELINE_MODEL, help="Reference model for comparison.")
    parser.add_argument("--ic", choices=("loo", "waic"), default=INFORMATION_CRITERION,
                        help="Information criterion.")
    parser.add_argument("--refit", action="store_true", help="Ignore cached fits.")
    parser.add_argument("--test", action="store_true", help="Use synthetic data.")
    parser.add_argument("--lenient-levels", action="store_true",
                        help="Fold unexpected condition/trial levels into level 1 instead of failing.")
    return parser.parse_args(argv)


def main(argv=None):
    """Main execution function."""
    args = parse_args(argv)
    test_mode = args.test or config.TEST
    strict = not args.lenient_levels

    print("=" * 80)
    print("Contagious Yawning GLMM Analysis")
    print("=" * 80)
    print(f"Running with PyMC version: {pm.__version__}")

    paths = get_output_paths(args.out_dir)
    assets_dir = paths["assets_dir"]
    report_path = paths["report_path"]
    assets_dir.mkdir(parents=True, exist_ok=True)

    print("\nLoading data...")
    if test_mode:
        print("TEST MODE: Generating synthetic data...")
        data = prepare_observations(generate_test_data(), strict=strict)
        models_dir = args.models_dir / "test"
    else:
        data = load_yawn_data(args.csv, strict=strict)
        models_dir = args.models_dir
    print(f"Loaded {len(data)} rows")

    specs = [get_spec(n) for n in args.models] if args.models else list_specs()
    store = ModelStore(models_dir)

    print(f"\nFitting / loading {len(specs)} models...")
    fitted, excluded = fit_models(specs, data, PymcSampler(), store, refit=args.refit)
    print(f"{len(fitted)} models usable, {len(excluded)} excluded")

    report = HtmlReport(report_path, title="Contagious Yawning in Dogs: Bayesian GLMMs")
    report.add_html('<div class="topbar">')
    report.add_html(f'<span class="badge">PyMC {pm.__version__}</span>')
    report.add_html(f'<span class="badge">{args.ic.upper()} comparison</span>')
    if test_mode:
        report.add_html('<span class="badge warning">TESTMODE</span>')
    report.add_html("</div>")

    tab_list = [("tab-overview", "Overview")]
    if args.section in ("all", "models"):
        tab_list += [(model_tab_id(s.name), s.name) for s in specs if s.name in fitted]
    if args.section in ("all", "comparison"):
        tab_list.append(("tab-comparison", "Comparison"))
    report.start_tabs(tab_list, default_tab_id="tab-overview")

    print("\nGenerating overview tab...")
    add_overview_tab(report, data, specs, assets_dir)

    if args.section in ("all", "models"):
        for spec in specs:
            if spec.name not in fitted:
                continue
            print(f"\nProcessing model: {spec.name}")
            add_model_analysis(report, spec, fitted[spec.name], assets_dir)

    if args.section in ("all", "comparison"):
        print("\nGenerating comparison tab...")
        add_comparison_tab(report, fitted, excluded, specs, assets_dir, args.baseline, args.ic)

    report.close()

    print("\n" + "=" * 80)
    print(f"Report written to: {report_path}")
    print(f"Assets saved to: {assets_dir}")
    print("=" * 80)


if __name__ == "__main__":
    main()
