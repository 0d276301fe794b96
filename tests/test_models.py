import numpy as np
import pymc as pm
import pytest

from model_specs import get_spec
from model_store import ModelStore
from models import build_model, check_convergence, design_matrix, fit_models

from conftest import StubSampler, make_idata


def test_design_matrix_columns(data):
    X = design_matrix(data, ("Intercept", "condition", "trial", "condition:trial"))
    assert X.shape == (len(data), 4)
    assert np.all(X[:, 0] == 1.0)
    assert np.array_equal(X[:, 3], data["condition"].to_numpy() * data["trial"].to_numpy())


def test_build_hurdle_interaction_model(data):
    model = build_model(get_spec("m2.5"), data)
    assert isinstance(model, pm.Model)
    names = set(model.named_vars)
    for var in ("b_Intercept", "b_condition", "b_trial", "b_condition:trial",
                "b_hu_Intercept", "b_hu_condition:trial",
                "sd_ID", "r_ID", "sd_ID_hu", "r_ID_hu", "numberYawns"):
        assert var in names
    assert "shape" not in names
    assert model.coords["ID"] == ("d1", "d2", "d3", "d4")


def test_build_negbinomial_intercept_model(data):
    model = build_model(get_spec("m4.1"), data)
    names = set(model.named_vars)
    assert {"b_Intercept", "shape", "sd_ID", "numberYawns"} <= names
    assert not any(n.startswith("L_ID") for n in names)
    # initial point must have a finite log density
    logp = model.compile_logp()(model.initial_point())
    assert np.isfinite(logp)


def test_check_convergence_flags_stuck_chains():
    good = make_idata({"b_Intercept": np.random.default_rng(0).normal(size=(4, 100))})
    ok, reason = check_convergence(good, ["b_Intercept"])
    assert ok and reason == ""

    stuck = make_idata({"b_Intercept": np.arange(4)[:, None] * 5.0 + np.zeros((4, 100))})
    ok, reason = check_convergence(stuck, ["b_Intercept"])
    assert not ok
    assert "R-hat" in reason


def test_fit_models_excludes_failures(tmp_path, data, capsys):
    sampler = StubSampler(bad=["m3.2"], fail=["m2.1"])
    specs = [get_spec(n) for n in ("m1.1", "m2.1", "m3.2", "m4.2")]
    fitted, excluded = fit_models(specs, data, sampler, ModelStore(tmp_path))

    assert set(fitted) == {"m1.1", "m4.2"}
    assert set(excluded) == {"m2.1", "m3.2"}
    assert "sampling failed" in excluded["m2.1"]
    assert "R-hat" in excluded["m3.2"]
    # excluded models are not retried
    assert sampler.calls.count("m2.1") == 1
    assert "Warning" in capsys.readouterr().out


def test_fitted_models_carry_their_name(tmp_path, data, stub_sampler):
    fitted, _ = fit_models([get_spec("m1.3")], data, stub_sampler, ModelStore(tmp_path))
    assert fitted["m1.3"].posterior.attrs["model_name"] == "m1.3"


@pytest.mark.parametrize("name", ["m1.5", "m3.3", "m5.4"])
def test_build_model_for_each_likelihood(data, name):
    model = build_model(get_spec(name), data)
    assert model["numberYawns"] is not None
