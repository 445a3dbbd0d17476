"""
Default priors.

Weakly informative priors whose scales adapt to the data, in the style of
rstanarm's defaults:

- Gaussian family
    Intercept (predictors centered) ~ Normal(mean(y), 2.5 * sd(y))
    beta_k                          ~ Normal(0, 2.5 * sd(y) / sd(x_k))
    sigma                           ~ Exponential(1 / sd(y))
- Binomial family (logit link)
    Intercept (predictors centered) ~ Normal(0, 2.5)
    beta_k                          ~ Normal(0, 2.5 / sd(x_k))
- Group-level standard deviation
    sigma_group ~ Exponential(1 / sd(y))   (Gaussian)
    sigma_group ~ Exponential(1)           (binomial)
"""

from dataclasses import dataclass, field
from typing import Dict, Optional, Union

import numpy as np
import pandas as pd
import pymc as pm

FAMILIES = ("gaussian", "binomial")
PRIOR_SCALE = 2.5


@dataclass
class Prior:
    distribution: str
    params: Dict[str, Union[float, np.ndarray]]
    note: str = ""
    dims: Optional[str] = None

    def to_pymc(self, name: str, **kwargs):
        """Create the PyMC random variable inside the active model context."""
        dist = getattr(pm, self.distribution)
        if self.dims is not None:
            kwargs.setdefault("dims", self.dims)
        return dist(name, **self.params, **kwargs)

    def describe(self) -> str:
        parts = []
        for key, value in self.params.items():
            arr = np.atleast_1d(value)
            parts.append(
                f"{key}={float(arr[0]):.3g}"
                if arr.size == 1
                else f"{key}=[{', '.join(f'{v:.3g}' for v in arr)}]"
            )
        return f"{self.distribution}({', '.join(parts)})"


@dataclass
class PriorSpec:
    family: str
    priors: Dict[str, Prior] = field(default_factory=dict)
    coef_names: tuple = ()

    def __getitem__(self, name: str) -> Prior:
        return self.priors[name]

    def __contains__(self, name: str) -> bool:
        return name in self.priors


def _sd(values) -> float:
    sd = float(np.std(np.asarray(values, dtype=float), ddof=1))
    if not np.isfinite(sd) or sd == 0:
        raise ValueError("Cannot autoscale a prior on a column with zero spread")
    return sd


def default_priors(
    y,
    X: pd.DataFrame,
    family: str = "gaussian",
    group: Optional[str] = None,
) -> PriorSpec:
    """
    Default priors for a model with response ``y`` and predictors ``X``.

    For the binomial family ``y`` is ignored apart from its length, so a
    proportion or a 0/1 vector both work.
    """
    if family not in FAMILIES:
        raise ValueError(f"family must be one of {FAMILIES}. Got {family!r}")

    coef_names = tuple(X.columns)
    x_sd = np.array([_sd(X[col]) for col in coef_names])
    spec = PriorSpec(family=family, coef_names=coef_names)

    if family == "gaussian":
        y_sd = _sd(y)
        spec.priors["Intercept"] = Prior(
            "Normal",
            {"mu": float(np.mean(y)), "sigma": PRIOR_SCALE * y_sd},
            note="after predictors centered",
        )
        if coef_names:
            spec.priors["beta"] = Prior(
                "Normal",
                {"mu": np.zeros(len(coef_names)), "sigma": PRIOR_SCALE * y_sd / x_sd},
                note="autoscaled",
                dims="coef",
            )
        spec.priors["sigma"] = Prior("Exponential", {"lam": 1.0 / y_sd}, note="autoscaled")
        group_lam = 1.0 / y_sd
    else:
        spec.priors["Intercept"] = Prior(
            "Normal", {"mu": 0.0, "sigma": PRIOR_SCALE}, note="after predictors centered"
        )
        if coef_names:
            spec.priors["beta"] = Prior(
                "Normal",
                {"mu": np.zeros(len(coef_names)), "sigma": PRIOR_SCALE / x_sd},
                note="autoscaled",
                dims="coef",
            )
        group_lam = 1.0

    if group is not None:
        spec.priors["sigma_group"] = Prior(
            "Exponential", {"lam": group_lam}, note=f"sd of {group} intercepts"
        )
    return spec


def prior_summary(priors) -> pd.DataFrame:
    """
    Tabulate priors, one row per parameter (coefficients expanded).

    Accepts a ``PriorSpec`` or anything with a ``priors`` attribute holding
    one, such as a fitted model.
    """
    spec = priors if isinstance(priors, PriorSpec) else priors.priors
    rows = []
    for name, prior in spec.priors.items():
        if name == "beta":
            for i, coef in enumerate(spec.coef_names):
                params = {k: np.atleast_1d(v)[i] for k, v in prior.params.items()}
                rows.append(
                    {
                        "parameter": coef,
                        "distribution": prior.distribution,
                        "params": Prior(prior.distribution, params).describe(),
                        "note": prior.note,
                    }
                )
        else:
            rows.append(
                {
                    "parameter": name,
                    "distribution": prior.distribution,
                    "params": prior.describe(),
                    "note": prior.note,
                }
            )
    return pd.DataFrame(rows).set_index("parameter")
