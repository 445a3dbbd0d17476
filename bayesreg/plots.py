"""
Plotting helpers. Each returns the matplotlib ``Axes`` (or array of axes)
so the notebook can keep decorating it.
"""

from typing import Optional, Sequence

import arviz as az
import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import scipy.stats as st
import xarray as xr
from matplotlib.axes import Axes
from scipy.special import expit

from bayesreg.sampling import BayesFit


def format_percentage(ax: Axes) -> Axes:
    ax.yaxis.set_major_formatter(plt.FuncFormatter(lambda x, _: f"{int(x * 100)}%"))
    ax.set_yticks(np.arange(0, 1.0001, 0.05), minor=True)
    return ax


def plot_trace(fit: BayesFit):
    return az.plot_trace(fit.idata, var_names=fit.param_names(), compact=True)


def plot_posterior(fit: BayesFit, hdi_prob: float = 0.95):
    return az.plot_posterior(fit.idata, var_names=fit.param_names(), hdi_prob=hdi_prob)


def plot_prior_posterior(
    fit: BayesFit,
    prior: az.InferenceData,
    var: str = "Intercept",
    coef: Optional[str] = None,
    ax: Optional[Axes] = None,
) -> Axes:
    """Overlay prior and posterior densities of one parameter."""
    ax = ax or plt.gca()
    prior_draws = prior.prior[var]
    posterior_draws = fit.idata.posterior[var]
    if coef is not None:
        prior_draws = prior_draws.sel(coef=coef)
        posterior_draws = posterior_draws.sel(coef=coef)
    az.plot_dist(prior_draws.values.ravel(), ax=ax, label="prior", color="C0")
    az.plot_dist(posterior_draws.values.ravel(), ax=ax, label="posterior", color="C1")
    ax.set_title(coef or var)
    ax.legend()
    return ax


def _predictions(fit: BayesFit, x: str, grid: np.ndarray, terms: Sequence[str]):
    post = fit.idata.posterior
    grid_da = xr.DataArray(grid, dims="x_grid", coords={"x_grid": grid})
    eta = post["Intercept"] + post["beta"].sel(coef=x) * grid_da
    for term in terms:
        eta = eta + post["beta"].sel(coef=term)
    mu = xr.apply_ufunc(expit, eta) if fit.family == "binomial" else eta
    mu.name = "mu"
    return mu


def plot_hdi(predictions: xr.DataArray, ax: Axes, hdi_prob: float = 0.68) -> Axes:
    hdi = az.hdi(predictions, hdi_prob=hdi_prob)[predictions.name]
    ax.fill_between(
        predictions["x_grid"],
        hdi.sel(hdi="lower"),
        hdi.sel(hdi="higher"),
        alpha=0.3,
        label=f"{int(hdi_prob * 100)}% HDI",
        color="C1",
    )
    return ax


def plot_regression(
    df: pd.DataFrame,
    x: str,
    y: str,
    fit: BayesFit,
    terms: Sequence[str] = (),
    ax: Optional[Axes] = None,
    jitter: float = 0.0,
) -> Axes:
    """
    Data with the posterior mean curve and 94%/68% HDI bands against one
    numeric predictor. ``terms`` adds fixed coefficient columns, e.g. a
    dummy for the level being drawn.
    """
    if ax is None:
        _, ax = plt.subplots()
    grid = np.linspace(df[x].min(), df[x].max(), 100)
    mu = _predictions(fit, x, grid, terms)

    y_values = df[y].astype(float)
    if jitter:
        y_values = y_values + np.random.uniform(-jitter, jitter, size=len(y_values))
    ax.plot(df[x], y_values, "o", mfc=ax.get_facecolor(), mec="C0", label=None)

    plot_hdi(mu, ax=ax, hdi_prob=0.94)
    plot_hdi(mu, ax=ax, hdi_prob=0.68)
    ax.plot(grid, mu.mean(("chain", "draw")), color="C1", label="posterior mean")
    ax.set_xlabel(x)
    ax.set_ylabel(y)
    ax.legend()
    return ax


def plot_derived(draws: pd.Series, hdi_prob: float = 0.95, ax: Optional[Axes] = None):
    ax = np.ravel(az.plot_posterior(np.asarray(draws), hdi_prob=hdi_prob, ax=ax))[0]
    ax.set_title(draws.name or "")
    return ax


def plot_proportions(
    df: pd.DataFrame,
    successes: str,
    trials: str,
    by: str,
    ax: Optional[Axes] = None,
    color: str = "C0",
) -> Axes:
    """Observed proportions per row with 68% beta intervals, grouped by ``by``."""
    if ax is None:
        _, ax = plt.subplots()
    bg_color = ax.get_facecolor()
    labels = df[by].astype(str)
    positions = {label: i for i, label in enumerate(sorted(labels.unique()))}
    x = labels.map(positions).to_numpy() + np.linspace(-0.2, 0.2, len(df))

    rv = st.beta(df[successes] + 0.5, df[trials] - df[successes] + 0.5)
    ax.vlines(x, *rv.interval(0.68), label=None, color=color)
    ax.plot(x, df[successes] / df[trials], "o", mec=color, mfc=bg_color, label=None)
    ax.set_xticks(list(positions.values()), list(positions.keys()))
    ax.set_xlabel(by)
    ax.set_ylabel("Proportion")
    ax.set_ylim(bottom=0, top=1)
    format_percentage(ax)
    ax.grid(True, axis="y", alpha=0.7)
    return ax
