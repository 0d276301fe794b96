import pandas as pd

from html_report import HtmlReport, _df_to_html_table, _safe_slug, add_table_with_column_guide
from main import add_comparison_tab, add_overview_tab, parse_args
from model_specs import get_spec
from model_store import ModelStore
from models import fit_models
from report_builder import add_model_analysis, model_tab_id

from conftest import StubSampler


def test_table_formatting():
    df = pd.DataFrame({"x": [1.234, float("nan")], "ok": [True, False]})
    out = _df_to_html_table(df)
    assert "1.23" in out
    assert "yes" in out and "no" in out


def test_r_hat_keeps_three_decimals():
    df = pd.DataFrame({"param": ["b_Intercept"], "mean": [-3.14159], "r_hat": [1.049]})
    out = _df_to_html_table(df)
    assert "1.049" in out
    assert "-3.14" in out and "-3.142" not in out


def test_safe_slug():
    assert _safe_slug("m2.5") == "m2-5"
    assert model_tab_id("m2.5") == "tab-m2-5"


def test_column_guide_only_lists_present_columns(tmp_path):
    report = HtmlReport(tmp_path / "r.html", title="T")
    add_table_with_column_guide(report, pd.DataFrame({"a": [1]}), {"a": "Alpha", "b": "Beta"})
    report.close()
    text = (tmp_path / "r.html").read_text(encoding="utf-8")
    assert "Alpha" in text
    assert "Beta" not in text


def test_full_report_with_stub_fits(tmp_path, data):
    assets = tmp_path / "yawn_report_assets"
    specs = [get_spec(n) for n in ("m1.1", "m2.5", "m3.2")]
    sampler = StubSampler(fail=["m3.2"])
    fitted, excluded = fit_models(specs, data, sampler, ModelStore(tmp_path / "fits"))

    report = HtmlReport(tmp_path / "yawn_report.html", title="Yawns")
    tabs = [("tab-overview", "Overview")] + [(model_tab_id(n), n) for n in fitted]
    tabs.append(("tab-comparison", "Comparison"))
    report.start_tabs(tabs, default_tab_id="tab-overview")
    add_overview_tab(report, data, specs, assets)
    for spec in specs:
        if spec.name in fitted:
            add_model_analysis(report, spec, fitted[spec.name], assets)
    add_comparison_tab(report, fitted, excluded, specs, assets, "m1.1", "loo")
    report.close()

    text = (tmp_path / "yawn_report.html").read_text(encoding="utf-8")
    assert 'id="tab-m2-5"' in text
    assert "Probability of yawning" in text
    assert "Excluded models" in text
    assert "sampling failed" in text
    assert (assets / "model_comparison.pdf").exists()
    assert (assets / "cells_prob_yawn_m2-5.png").exists()
    assert (assets / "observed_rates.png").exists()


def test_parse_args_defaults_and_overrides(tmp_path):
    args = parse_args([])
    assert args.section == "all"
    assert args.ic == "loo"
    assert args.baseline == "m1.1"
    assert not args.lenient_levels

    args = parse_args(["--test", "--models", "m2.5", "m3.1", "--ic", "waic",
                       "--out-dir", str(tmp_path), "--lenient-levels"])
    assert args.test
    assert args.models == ["m2.5", "m3.1"]
    assert args.ic == "waic"
    assert args.lenient_levels
