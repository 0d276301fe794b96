"""
Bayesian GLMMs for the yawning data, built and sampled with PyMC.
"""

from typing import Dict, List, Sequence, Tuple

import arviz as az
import numpy as np
import pandas as pd
import pymc as pm
from pymc.exceptions import SamplingError

from config import (
    COUNT_COL,
    CONDITION_COL,
    TRIAL_COL,
    SECS_COL,
    LOG_SECS_COL,
    LKJ_ETA,
    DRAWS,
    TUNE,
    CHAINS,
    TARGET_ACCEPT,
    RANDOM_SEED,
    RHAT_MAX,
)
from model_specs import ModelSpec

LIKELIHOODS = {
    "poisson": pm.Poisson,
    "negbinomial": pm.NegativeBinomial,
    "zero_inflated_poisson": pm.ZeroInflatedPoisson,
    "hurdle_poisson": pm.HurdlePoisson,
    "zero_inflated_negbinomial": pm.ZeroInflatedNegativeBinomial,
}


def design_matrix(data: pd.DataFrame, terms: Sequence[str]) -> np.ndarray:
    """
    Fixed-effect design matrix for a term set.

    Parameters
    ----------
    data : pd.DataFrame
        Prepared observations (0/1 condition and trial)
    terms : Sequence[str]
        Terms among Intercept, condition, trial, condition:trial

    Returns
    -------
    np.ndarray
        Matrix of shape (n_obs, n_terms)
    """
    cols = []
    for term in terms:
        if term == "Intercept":
            cols.append(np.ones(len(data)))
        elif term == "condition:trial":
            cols.append(data[CONDITION_COL].to_numpy() * data[TRIAL_COL].to_numpy())
        else:
            cols.append(data[term].to_numpy())
    return np.column_stack(cols).astype(float)


def _random_effects(spec: ModelSpec, suffix: str, term_dim: str, k: int, X, dog_idx):
    """
    Non-centred per-dog effects for every term of one linear predictor.

    A single term gets an independent SD; several terms get an LKJ
    Cholesky covariance so the per-dog effects are correlated.
    """
    group = spec.group
    sd_prior = spec.priors["sd"]

    if k == 1:
        sd = sd_prior.to_pymc(f"sd_{group}{suffix}", dims=term_dim)
        z = pm.Normal(f"z_{group}{suffix}", 0.0, 1.0, dims=(group, term_dim))
        r = z * sd
    else:
        chol, _, sds = pm.LKJCholeskyCov(
            f"L_{group}{suffix}",
            n=k,
            eta=LKJ_ETA,
            sd_dist=sd_prior.dist_obj(size=k),
            compute_corr=True,
        )
        pm.Deterministic(f"sd_{group}{suffix}", sds, dims=term_dim)
        z = pm.Normal(f"z_{group}{suffix}", 0.0, 1.0, dims=(group, term_dim))
        r = pm.math.dot(z, chol.T)

    r = pm.Deterministic(f"r_{group}{suffix}", r, dims=(group, term_dim))
    return (r[dog_idx] * X).sum(axis=1)


def _linear_predictor(spec: ModelSpec, part: str, X, dog_idx):
    """
    Fixed plus per-dog effects for the mean ('mu') or the secondary part.

    Coefficients are registered as ``b_<term>`` for the mean and
    ``b_<part>_<term>`` for the secondary parameter.
    """
    if part == "mu":
        terms, prefix, suffix = spec.terms, "", ""
    else:
        terms, prefix, suffix = spec.secondary_terms, f"{part}_", f"_{part}"

    eta = 0.0
    for j, term in enumerate(terms):
        prior_key = f"{prefix}Intercept" if term == "Intercept" else f"{prefix}b"
        coef = spec.priors[prior_key].to_pymc(f"b_{prefix}{term}")
        eta = eta + coef * X[:, j]

    return eta + _random_effects(spec, suffix, f"term{suffix}", len(terms), X, dog_idx)


def build_model(spec: ModelSpec, data: pd.DataFrame) -> pm.Model:
    """
    Build the PyMC model for a specification.

    The mean is exp(eta + log(secs)), so coefficients act on the log-rate
    per second. Two-part families enter their secondary probability as
    psi = 1 - invlogit(eta_secondary).

    Parameters
    ----------
    spec : ModelSpec
        Model specification
    data : pd.DataFrame
        Prepared observation table

    Returns
    -------
    pm.Model
        Unsampled model
    """
    if spec.family not in LIKELIHOODS:
        raise ValueError(f"Unsupported family: {spec.family}")

    dogs = pd.Categorical(data[spec.group])
    X = design_matrix(data, spec.terms)
    y = data[COUNT_COL].to_numpy()
    if LOG_SECS_COL in data.columns:
        log_secs = data[LOG_SECS_COL].to_numpy(dtype=float)
    else:
        log_secs = np.log(data[SECS_COL].to_numpy(dtype=float))

    coords = {
        spec.group: list(dogs.categories),
        "obs": np.arange(len(data)),
        "term": list(spec.terms),
    }
    if spec.secondary is not None:
        coords[f"term_{spec.secondary}"] = list(spec.secondary_terms)

    with pm.Model(coords=coords) as model:
        dog_idx = pm.Data("dog_idx", dogs.codes.astype("int64"), dims="obs")
        offset = pm.Data("log_secs", log_secs, dims="obs")

        eta = offset + _linear_predictor(spec, "mu", X, dog_idx)
        kwargs = {"mu": pm.math.exp(eta)}

        if spec.has_shape:
            kwargs["alpha"] = spec.priors["shape"].to_pymc("shape")

        if spec.secondary is not None:
            eta_2 = _linear_predictor(spec, spec.secondary, X, dog_idx)
            kwargs["psi"] = 1.0 - pm.math.invlogit(eta_2)

        LIKELIHOODS[spec.family](COUNT_COL, observed=y, dims="obs", **kwargs)

    return model


class PymcSampler:
    """Inference delegate: fit(spec, data) -> InferenceData via NUTS."""

    def __init__(
        self,
        draws: int = DRAWS,
        tune: int = TUNE,
        chains: int = CHAINS,
        target_accept: float = TARGET_ACCEPT,
        seed: int = RANDOM_SEED,
        progressbar: bool = True,
    ):
        self.draws = draws
        self.tune = tune
        self.chains = chains
        self.target_accept = target_accept
        self.seed = seed
        self.progressbar = progressbar

    def fit(self, spec: ModelSpec, data: pd.DataFrame) -> az.InferenceData:
        print(f"Fitting {spec.name} [{spec.family}]: {spec.formula()}")
        if spec.secondary is not None:
            print(f"  {spec.secondary_formula()}")

        model = build_model(spec, data)
        with model:
            idata = pm.sample(
                draws=self.draws,
                tune=self.tune,
                chains=self.chains,
                target_accept=self.target_accept,
                random_seed=self.seed,
                return_inferencedata=True,
                idata_kwargs={"log_likelihood": True},
                progressbar=self.progressbar,
            )

        idata.posterior.attrs["model_name"] = spec.name
        idata.posterior.attrs["family"] = spec.family
        return idata


def check_convergence(
    idata: az.InferenceData,
    var_names: List[str],
    rhat_max: float = RHAT_MAX,
) -> Tuple[bool, str]:
    """
    Screen a fit for non-convergence.

    Parameters
    ----------
    idata : az.InferenceData
        Fitted model
    var_names : List[str]
        Coefficients to check
    rhat_max : float
        Largest acceptable R-hat

    Returns
    -------
    Tuple[bool, str]
        (converged, reason); divergences only produce a warning
    """
    rhat = az.rhat(idata, var_names=var_names)
    max_rhat = max(float(rhat[v].max()) for v in rhat.data_vars)
    if not np.isfinite(max_rhat) or max_rhat > rhat_max:
        return False, f"max R-hat {max_rhat:.3f} exceeds {rhat_max}"

    if "sample_stats" in idata.groups() and "diverging" in idata.sample_stats:
        n_div = int(idata.sample_stats["diverging"].sum())
        if n_div:
            print(f"Warning: {n_div} divergent transitions")
    return True, ""


def fit_models(
    specs: Sequence[ModelSpec],
    data: pd.DataFrame,
    sampler,
    store,
    refit: bool = False,
    rhat_max: float = RHAT_MAX,
) -> Tuple[Dict[str, az.InferenceData], Dict[str, str]]:
    """
    Fit (or load) every specification and screen the results.

    Models that fail to sample or to converge are excluded, not retried.

    Parameters
    ----------
    specs : Sequence[ModelSpec]
        Specifications to fit
    data : pd.DataFrame
        Prepared observation table
    sampler : object
        Anything with fit(spec, data) -> InferenceData
    store : ModelStore
        Artifact cache
    refit : bool
        Ignore cached artifacts
    rhat_max : float
        Convergence threshold

    Returns
    -------
    Tuple[Dict[str, az.InferenceData], Dict[str, str]]
        (fitted models by name, exclusion reason by name)
    """
    fitted = {}
    excluded = {}
    for spec in specs:
        try:
            idata = store.fit_or_load(spec, data, sampler, refit=refit)
        except SamplingError as err:
            print(f"Warning: {spec.name} failed to sample ({err}); excluded.")
            excluded[spec.name] = f"sampling failed: {err}"
            continue

        ok, reason = check_convergence(idata, spec.coefficient_names(), rhat_max)
        if not ok:
            print(f"Warning: {spec.name} did not converge ({reason}); excluded.")
            excluded[spec.name] = reason
            continue
        fitted[spec.name] = idata

    return fitted, excluded
