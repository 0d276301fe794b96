import numpy as np
import pytest

from model_specs import get_spec
from model_store import ModelStore

from conftest import make_idata


def test_save_and_load_round_trip(tmp_path):
    store = ModelStore(tmp_path / "fits")
    idata = make_idata({"b_Intercept": -3.0})
    path = store.save("m3.1", idata)
    assert path.name == "m3.1.nc"
    assert store.exists("m3.1")

    loaded = store.load("m3.1")
    assert np.allclose(
        loaded.posterior["b_Intercept"].values, idata.posterior["b_Intercept"].values
    )


def test_missing_artifact_raises(tmp_path):
    with pytest.raises(FileNotFoundError, match="m2.5"):
        ModelStore(tmp_path).load("m2.5")


def test_fit_or_load_uses_cache(tmp_path, data, stub_sampler):
    store = ModelStore(tmp_path)
    spec = get_spec("m3.2")
    store.fit_or_load(spec, data, stub_sampler)
    store.fit_or_load(spec, data, stub_sampler)
    assert stub_sampler.calls == ["m3.2"]

    store.fit_or_load(spec, data, stub_sampler, refit=True)
    assert stub_sampler.calls == ["m3.2", "m3.2"]
