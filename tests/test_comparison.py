import numpy as np
import pytest

from comparison import (
    approx_interval,
    compare_models,
    compare_to_baseline,
    credible_difference,
    elpd_difference,
    elpd_se,
    information_criterion,
    rank_models,
)

from conftest import make_idata


def test_interval_excluding_zero_is_credible():
    lo, hi = approx_interval(-3.2, 1.5)
    assert lo == pytest.approx(-6.14)
    assert hi == pytest.approx(-0.26)
    assert credible_difference(lo, hi)


def test_interval_overlapping_zero_is_not_credible():
    lo, hi = approx_interval(-1.0, 1.5)
    assert not credible_difference(lo, hi)


def test_elpd_difference_uses_pointwise_variance():
    diff, se = elpd_difference(np.array([1.0, 2.0, 3.0]), np.zeros(3))
    assert diff == pytest.approx(6.0)
    assert se == pytest.approx(np.sqrt(2.0))


def test_elpd_difference_rejects_different_observations():
    with pytest.raises(ValueError):
        elpd_difference(np.zeros(3), np.zeros(4))


def test_elpd_se_of_constant_is_zero():
    assert elpd_se(np.full(10, -1.3)) == pytest.approx(0.0, abs=1e-12)


@pytest.fixture
def pointwise():
    return {
        "m1.1": np.full(5, -2.0),
        "m2.5": np.array([-1.0, -1.5, -1.2, -1.1, -1.3]),
        "m3.1": np.full(5, -2.5),
    }


def test_rank_models_best_first():
    fitted = {
        "m1.1": _fitted(seed=1, shift=-0.5),
        "m2.5": _fitted(seed=2),
        "m3.1": _fitted(seed=3, shift=-1.0),
    }
    table = rank_models(fitted, ic="loo")
    assert list(table["model"]) == ["m2.5", "m1.1", "m3.1"]
    assert list(table["rank"]) == [1, 2, 3]
    assert table["elpd_diff"].iloc[0] == 0.0
    assert (table["elpd_diff"].iloc[1:] > 0).all()
    assert table["weight"].sum() == pytest.approx(1.0, abs=0.05)
    assert list(table.columns) == [
        "rank", "model", "elpd", "se", "p_loo", "elpd_diff", "dse", "weight", "warning",
    ]


def test_rank_models_accepts_elpd_results():
    elpds = {m: information_criterion(_fitted(seed=i, shift=-0.3 * i), "waic")
             for i, m in enumerate(["m4.2", "m5.2"])}
    table = rank_models(elpds, ic="waic")
    assert list(table["model"]) == ["m4.2", "m5.2"]
    assert "p_waic" in table.columns


def test_compare_to_baseline(pointwise):
    table = compare_to_baseline(pointwise, "m1.1")
    assert "m1.1" not in set(table["model"])
    row = table[table["model"] == "m2.5"].iloc[0]
    assert row["elpd_diff"] == pytest.approx(3.9)
    assert row["credible_difference"]
    row = table[table["model"] == "m3.1"].iloc[0]
    assert row["elpd_diff"] == pytest.approx(-2.5)
    assert row["se_diff"] == 0.0


def test_unknown_baseline_raises(pointwise):
    with pytest.raises(KeyError):
        compare_to_baseline(pointwise, "m9.9")


def _fitted(n_draws=50, n_obs=8, seed=0, shift=0.0):
    rng = np.random.default_rng(seed)
    log_lik = rng.normal(-1.0 + shift, 0.05, size=(4, n_draws, n_obs))
    return make_idata({"b_Intercept": -3.0}, n_draws=n_draws, log_lik=log_lik, seed=seed)


def test_compare_models_returns_both_tables():
    fitted = {"m1.1": _fitted(seed=1), "m3.1": _fitted(seed=2, shift=-0.5)}
    ranking, baseline = compare_models(fitted, baseline="m1.1", ic="loo")
    assert list(ranking["model"]) == ["m1.1", "m3.1"]
    assert "p_loo" in ranking.columns
    assert list(baseline["model"]) == ["m3.1"]
    assert baseline["elpd_diff"].iloc[0] < 0


def test_compare_models_waic():
    fitted = {"m1.1": _fitted(seed=1), "m3.1": _fitted(seed=2)}
    ranking, _ = compare_models(fitted, baseline="m1.1", ic="waic")
    assert "p_waic" in ranking.columns


def test_compare_models_without_baseline(capsys):
    fitted = {"m2.1": _fitted(seed=1), "m3.1": _fitted(seed=2)}
    ranking, baseline = compare_models(fitted, baseline="m1.1")
    assert baseline is None
    assert len(ranking) == 2
    assert "Warning" in capsys.readouterr().out


def test_compare_models_needs_two_models():
    with pytest.raises(ValueError):
        compare_models({"m1.1": _fitted()})


def test_compare_models_rejects_different_draw_counts():
    fitted = {"m1.1": _fitted(n_draws=50), "m3.1": _fitted(n_draws=60)}
    with pytest.raises(ValueError, match="draws"):
        compare_models(fitted)


def test_unknown_information_criterion_raises():
    fitted = {"m1.1": _fitted(seed=1), "m3.1": _fitted(seed=2)}
    with pytest.raises(ValueError):
        compare_models(fitted, ic="aic")
