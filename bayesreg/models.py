"""
PyMC model definitions for the four model families used in the tutorial.

All models share one parameterization so that the summaries, plots and
derived quantities work on any of them:

- ``intercept_c``: intercept with predictors centered (the sampled one)
- ``Intercept``:   intercept on the original predictor scale (deterministic)
- ``beta``:        coefficients, dim ``coef``
- ``sigma``:       residual sd (Gaussian only)
- ``sigma_group``, ``group_effect``: group-level intercepts (mixed models)
- ``mu`` / ``p``:  mean / success probability per observation, dim ``obs``
- ``y``:           the likelihood
"""

from dataclasses import dataclass, field
from typing import Optional, Sequence

import numpy as np
import pandas as pd
import pymc as pm
import pytensor.tensor as pt

from bayesreg.data import require_columns
from bayesreg.design import design_matrix, formula_text, group_index
from bayesreg.priors import PriorSpec, default_priors


@dataclass
class ModelSpec:
    model: pm.Model
    priors: PriorSpec
    formula: str
    response: str
    family: str
    coef_names: tuple
    group: Optional[str] = None
    levels: dict = field(default_factory=dict)


def initialize_model(
    X: pd.DataFrame, group_codes=None, group_levels=None
) -> pm.Model:
    coords = {"obs": np.arange(len(X)), "coef": list(X.columns)}
    if group_levels is not None:
        coords["group"] = list(group_levels)
    with pm.Model(coords=coords) as model:
        if X.shape[1]:
            pm.Data("X", X.to_numpy(dtype=float), dims=("obs", "coef"))
            pm.Data("x_mean", X.mean().to_numpy(dtype=float), dims="coef")
        if group_codes is not None:
            pm.Data("group_idx", group_codes, dims="obs")
    return model


def _linear_predictor(model: pm.Model, priors: PriorSpec):
    intercept_c = priors["Intercept"].to_pymc("intercept_c")
    if "beta" in priors:
        beta = priors["beta"].to_pymc("beta")
        eta = intercept_c + pt.dot(model["X"] - model["x_mean"], beta)
        pm.Deterministic("Intercept", intercept_c - pt.dot(model["x_mean"], beta))
    else:
        eta = intercept_c + pt.zeros(len(model.coords["obs"]))
        pm.Deterministic("Intercept", intercept_c)

    if "sigma_group" in priors:
        sigma_group = priors["sigma_group"].to_pymc("sigma_group")
        z_group = pm.Normal("z_group", 0.0, 1.0, dims="group")
        group_effect = pm.Deterministic(
            "group_effect", z_group * sigma_group, dims="group"
        )
        eta = eta + group_effect[model["group_idx"]]
    return eta


def _prepare(df, response_cols, predictors, group):
    require_columns(df, list(response_cols) + ([group] if group else []))
    X = design_matrix(df, predictors)
    codes, levels = group_index(df, group) if group else (None, None)
    return X, codes, levels


def define_linear_model(
    df: pd.DataFrame,
    response: str,
    predictors: Sequence[str],
    priors: Optional[PriorSpec] = None,
) -> ModelSpec:
    """Gaussian linear regression ``response ~ predictors``."""
    X, _, _ = _prepare(df, [response], predictors, None)
    y = df[response].to_numpy(dtype=float)
    priors = priors or default_priors(y, X, "gaussian")

    with initialize_model(X) as model:
        y_obs = pm.Data("y_obs", y, dims="obs")
        mu = pm.Deterministic("mu", _linear_predictor(model, priors), dims="obs")
        sigma = priors["sigma"].to_pymc("sigma")
        pm.Normal("y", mu=mu, sigma=sigma, observed=y_obs, dims="obs")

    return ModelSpec(
        model=model,
        priors=priors,
        formula=formula_text(response, predictors),
        response=response,
        family="gaussian",
        coef_names=tuple(X.columns),
        levels=X.attrs["levels"],
    )


def define_logistic_model(
    df: pd.DataFrame,
    response: str,
    predictors: Sequence[str],
    trials: Optional[str] = None,
    priors: Optional[PriorSpec] = None,
) -> ModelSpec:
    """
    Logistic regression.

    ``response`` holds 0/1 outcomes, or success counts when ``trials`` names
    a column with the number of attempts.
    """
    X, _, _ = _prepare(df, [response] + ([trials] if trials else []), predictors, None)
    successes = df[response].to_numpy(dtype="int64")
    n = df[trials].to_numpy(dtype="int64") if trials else np.ones_like(successes)
    if ((successes < 0) | (successes > n)).any():
        raise ValueError(f"{response!r} must lie between 0 and the number of trials")
    priors = priors or default_priors(successes / n, X, "binomial")

    with initialize_model(X) as model:
        n_data = pm.Data("trials", n, dims="obs")
        y_obs = pm.Data("successes", successes, dims="obs")
        p = pm.Deterministic(
            "p", pm.math.invlogit(_linear_predictor(model, priors)), dims="obs"
        )
        pm.Binomial("y", n=n_data, p=p, observed=y_obs, dims="obs")

    return ModelSpec(
        model=model,
        priors=priors,
        formula=formula_text(response, predictors),
        response=response,
        family="binomial",
        coef_names=tuple(X.columns),
        levels=X.attrs["levels"],
    )


def define_mixed_model(
    df: pd.DataFrame,
    response: str,
    predictors: Sequence[str],
    group: str,
    priors: Optional[PriorSpec] = None,
) -> ModelSpec:
    """Gaussian model with a random intercept per level of ``group``."""
    X, codes, levels = _prepare(df, [response], predictors, group)
    y = df[response].to_numpy(dtype=float)
    priors = priors or default_priors(y, X, "gaussian", group=group)

    with initialize_model(X, codes, levels) as model:
        y_obs = pm.Data("y_obs", y, dims="obs")
        mu = pm.Deterministic("mu", _linear_predictor(model, priors), dims="obs")
        sigma = priors["sigma"].to_pymc("sigma")
        pm.Normal("y", mu=mu, sigma=sigma, observed=y_obs, dims="obs")

    return ModelSpec(
        model=model,
        priors=priors,
        formula=formula_text(response, predictors, group),
        response=response,
        family="gaussian",
        coef_names=tuple(X.columns),
        levels=X.attrs["levels"],
        group=group,
    )


def define_binomial_glmm(
    df: pd.DataFrame,
    successes: str,
    trials: str,
    predictors: Sequence[str],
    group: str,
    priors: Optional[PriorSpec] = None,
) -> ModelSpec:
    """
    Binomial regression with a random intercept per ``group``.

    With one group per row this is an observation-level random effect, the
    usual way of absorbing overdispersion.
    """
    X, codes, levels = _prepare(df, [successes, trials], predictors, group)
    k = df[successes].to_numpy(dtype="int64")
    n = df[trials].to_numpy(dtype="int64")
    if ((k < 0) | (k > n)).any():
        raise ValueError(f"{successes!r} must lie between 0 and {trials!r}")
    priors = priors or default_priors(k / n, X, "binomial", group=group)

    with initialize_model(X, codes, levels) as model:
        n_data = pm.Data("trials", n, dims="obs")
        y_obs = pm.Data("successes", k, dims="obs")
        p = pm.Deterministic(
            "p", pm.math.invlogit(_linear_predictor(model, priors)), dims="obs"
        )
        pm.Binomial("y", n=n_data, p=p, observed=y_obs, dims="obs")

    return ModelSpec(
        model=model,
        priors=priors,
        formula=formula_text(f"cbind({successes}, {trials} - {successes})", predictors, group),
        response=successes,
        family="binomial",
        coef_names=tuple(X.columns),
        levels=X.attrs["levels"],
        group=group,
    )
