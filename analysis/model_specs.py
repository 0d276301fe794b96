"""
Model specification registry: response family × formula × priors.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple

import pandas as pd
import pymc as pm

from config import (
    COUNT_COL,
    ID_COL,
    SECS_COL,
    PRIOR_INTERCEPT,
    PRIOR_SLOPE,
    PRIOR_SECONDARY_INTERCEPT,
    PRIOR_SECONDARY_SLOPE,
    PRIOR_RANDOM_SD,
    PRIOR_SHAPE,
    LKJ_ETA,
)

# =============================================================================
# CHOICE TABLES
# =============================================================================

# (family number, family, secondary parameter or None)
FAMILY_TABLE = [
    (1, "zero_inflated_poisson", "zi"),
    (2, "hurdle_poisson", "hu"),
    (3, "poisson", None),
    (4, "negbinomial", None),
    (5, "zero_inflated_negbinomial", "zi"),
]

# (formula number, label, terms)
FORMULA_TABLE = [
    (1, "intercept only", ("Intercept",)),
    (2, "condition", ("Intercept", "condition")),
    (3, "trial", ("Intercept", "trial")),
    (4, "condition + trial", ("Intercept", "condition", "trial")),
    (5, "condition * trial", ("Intercept", "condition", "trial", "condition:trial")),
]

NEGBINOMIAL_FAMILIES = {"negbinomial", "zero_inflated_negbinomial"}

# name -> (pymc distribution, parameter names in order)
_PRIOR_DISTRIBUTIONS = {
    "normal": (pm.Normal, ("mu", "sigma")),
    "student_t": (pm.StudentT, ("nu", "mu", "sigma")),
    "logistic": (pm.Logistic, ("mu", "s")),
    "half_student_t": (pm.HalfStudentT, ("nu", "sigma")),
    "gamma": (pm.Gamma, ("alpha", "beta")),
}


@dataclass(frozen=True)
class PriorSpec:
    """A named prior distribution with fixed parameters."""

    dist: str
    params: Tuple[float, ...]

    @classmethod
    def from_tuple(cls, spec: Tuple) -> "PriorSpec":
        if spec[0] not in _PRIOR_DISTRIBUTIONS:
            raise ValueError(f"Unknown prior distribution: {spec[0]}")
        return cls(spec[0], tuple(float(p) for p in spec[1:]))

    def _kwargs(self) -> Dict[str, float]:
        _, names = _PRIOR_DISTRIBUTIONS[self.dist]
        return dict(zip(names, self.params))

    def to_pymc(self, name: str, **kwargs):
        """Register the prior as a named random variable in the current model."""
        cls, _ = _PRIOR_DISTRIBUTIONS[self.dist]
        return cls(name, **self._kwargs(), **kwargs)

    def dist_obj(self, **kwargs):
        """Unnamed distribution, for LKJ sd_dist and prior draws."""
        cls, _ = _PRIOR_DISTRIBUTIONS[self.dist]
        return cls.dist(**self._kwargs(), **kwargs)

    def describe(self) -> str:
        args = ", ".join(f"{p:g}" for p in self.params)
        return f"{self.dist}({args})"


def default_priors(secondary: Optional[str], family: str) -> Dict[str, PriorSpec]:
    """
    Prior set keyed by prior class.

    Classes: ``Intercept``, ``b`` (slopes), ``sd`` (random-effect SDs),
    ``<secondary>_Intercept`` / ``<secondary>_b`` for two-part families and
    ``shape`` for negative-binomial families.
    """
    priors = {
        "Intercept": PriorSpec.from_tuple(PRIOR_INTERCEPT),
        "b": PriorSpec.from_tuple(PRIOR_SLOPE),
        "sd": PriorSpec.from_tuple(PRIOR_RANDOM_SD),
    }
    if secondary is not None:
        priors[f"{secondary}_Intercept"] = PriorSpec.from_tuple(PRIOR_SECONDARY_INTERCEPT)
        priors[f"{secondary}_b"] = PriorSpec.from_tuple(PRIOR_SECONDARY_SLOPE)
    if family in NEGBINOMIAL_FAMILIES:
        priors["shape"] = PriorSpec.from_tuple(PRIOR_SHAPE)
    return priors


def _rhs(terms: Tuple[str, ...]) -> str:
    """Formula right-hand side for a term set (without the intercept)."""
    slopes = [t for t in terms if t != "Intercept"]
    if not slopes:
        return "1"
    if "condition:trial" in slopes:
        return "condition * trial"
    return " + ".join(slopes)


@dataclass(frozen=True)
class ModelSpec:
    """
    Declarative description of one GLMM.

    Every fixed term is mirrored in the per-dog random effects, and for
    two-part families the same terms drive the secondary (zi / hu)
    predictor.
    """

    name: str
    family: str
    formula_label: str
    terms: Tuple[str, ...]
    secondary: Optional[str] = None
    priors: Mapping[str, PriorSpec] = field(default_factory=dict, compare=False, hash=False)
    group: str = ID_COL

    def __post_init__(self):
        # priors are read-only once the spec exists
        object.__setattr__(self, "priors", MappingProxyType(dict(self.priors)))

    @property
    def secondary_terms(self) -> Tuple[str, ...]:
        return self.terms if self.secondary is not None else ()

    @property
    def has_shape(self) -> bool:
        return self.family in NEGBINOMIAL_FAMILIES

    def coefficient_names(self) -> List[str]:
        """Posterior variable names of all fixed-effect coefficients."""
        names = [f"b_{t}" for t in self.terms]
        names += [f"b_{self.secondary}_{t}" for t in self.secondary_terms]
        return names

    def formula(self) -> str:
        rhs = _rhs(self.terms)
        re_rhs = "1" if rhs == "1" else f"1 + {rhs}"
        fixed = "1" if rhs == "1" else rhs
        return (
            f"{COUNT_COL} ~ {fixed} + offset(log({SECS_COL})) + ({re_rhs} | {self.group})"
        )

    def secondary_formula(self) -> Optional[str]:
        if self.secondary is None:
            return None
        rhs = _rhs(self.secondary_terms)
        re_rhs = "1" if rhs == "1" else f"1 + {rhs}"
        return f"{self.secondary} ~ {rhs} + ({re_rhs} | {self.group})"

    def prior_table(self) -> pd.DataFrame:
        rows = [{"class": k, "prior": v.describe()} for k, v in self.priors.items()]
        if len(self.terms) > 1:
            rows.append({"class": "cor", "prior": f"lkj({LKJ_ETA:g})"})
        return pd.DataFrame(rows)


def build_registry() -> Dict[str, ModelSpec]:
    """
    Build the full family × formula registry.

    Returns
    -------
    Dict[str, ModelSpec]
        Specifications keyed by name ``m<family>.<formula>``, in table order
    """
    registry = {}
    for f_num, family, secondary in FAMILY_TABLE:
        for x_num, label, terms in FORMULA_TABLE:
            name = f"m{f_num}.{x_num}"
            registry[name] = ModelSpec(
                name=name,
                family=family,
                formula_label=label,
                terms=terms,
                secondary=secondary,
                priors=default_priors(secondary, family),
            )
    return registry


REGISTRY = build_registry()


def get_spec(name: str) -> ModelSpec:
    """Look up a specification by model name."""
    if name not in REGISTRY:
        raise KeyError(f"Unknown model '{name}'. Known models: {list(REGISTRY)}")
    return REGISTRY[name]


def list_specs(family: Optional[str] = None) -> List[ModelSpec]:
    """All specifications, optionally restricted to one response family."""
    return [s for s in REGISTRY.values() if family is None or s.family == family]


def registry_table(specs: Optional[List[ModelSpec]] = None) -> pd.DataFrame:
    """Tabular view of the registry for the report."""
    if specs is None:
        specs = list_specs()
    return pd.DataFrame([
        {
            "model": s.name,
            "family": s.family,
            "formula": s.formula(),
            "secondary": s.secondary_formula() or "",
        }
        for s in specs
    ])
