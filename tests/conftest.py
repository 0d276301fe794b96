import arviz as az
import numpy as np
import pandas as pd
import pytest

from data_utils import prepare_observations


def make_idata(coefs, n_chains=4, n_draws=50, log_lik=None, seed=0, attrs=None):
    """
    InferenceData from fixed coefficient values.

    Each entry of ``coefs`` is either a scalar (draws jittered around it by
    1e-3 so R-hat is defined) or an array of shape (chains, draws).
    """
    rng = np.random.default_rng(seed)
    posterior = {}
    for name, value in coefs.items():
        value = np.asarray(value, dtype=float)
        if value.ndim == 0:
            posterior[name] = value + rng.normal(0.0, 1e-3, size=(n_chains, n_draws))
        else:
            posterior[name] = value
    kwargs = {"posterior": posterior}
    if log_lik is not None:
        kwargs["log_likelihood"] = {"numberYawns": log_lik}
        kwargs["dims"] = {"numberYawns": ["obs"]}
    idata = az.from_dict(**kwargs)
    if attrs:
        idata.posterior.attrs.update(attrs)
    return idata


class StubSampler:
    """Deterministic stand-in for PymcSampler: one fixed draw set per spec."""

    def __init__(self, n_chains=4, n_draws=200, bad=(), fail=()):
        self.n_chains = n_chains
        self.n_draws = n_draws
        self.bad = set(bad)
        self.fail = set(fail)
        self.calls = []

    def fit(self, spec, data):
        from pymc.exceptions import SamplingError

        self.calls.append(spec.name)
        if spec.name in self.fail:
            raise SamplingError("Initial evaluation of model at starting point failed!")

        rng = np.random.default_rng(len(self.calls))
        coefs = {}
        for name in spec.coefficient_names():
            draws = rng.normal(0.0, 0.1, size=(self.n_chains, self.n_draws))
            if spec.name in self.bad:
                # chains stuck at different values
                draws = draws + np.arange(self.n_chains)[:, None] * 5.0
            coefs[name] = draws
        log_lik = rng.normal(-1.0, 0.1, size=(self.n_chains, self.n_draws, len(data)))
        return make_idata(
            coefs,
            n_chains=self.n_chains,
            n_draws=self.n_draws,
            log_lik=log_lik,
            attrs={"model_name": spec.name, "family": spec.family},
        )


@pytest.fixture
def raw_data():
    return pd.DataFrame({
        "ID": ["d1", "d1", "d2", "d2", "d3", "d3", "d4", "d4"],
        "condition": ["Anti-Social", "Anti-Social", "Pro-Social", "Pro-Social",
                      "Anti-Social", "Anti-Social", "Pro-Social", "Pro-Social"],
        "trial": [1, 2, 1, 2, 1, 2, 1, 2],
        "numberYawns": [0, 2, 3, 0, 0, 0, 1, 4],
        "secs": [300.0, 280.0, 310.0, 295.0, 300.0, 300.0, 290.0, 305.0],
    })


@pytest.fixture
def data(raw_data):
    return prepare_observations(raw_data)


@pytest.fixture
def stub_sampler():
    return StubSampler()
