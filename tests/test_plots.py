"""
Smoke tests for the plotting helpers on a non-interactive backend.
"""

import matplotlib

matplotlib.use("Agg")

import arviz as az
import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import pytest
from matplotlib.axes import Axes

from bayesreg.data import read_meat, read_overdispersion
from bayesreg.plots import (
    format_percentage,
    plot_derived,
    plot_posterior,
    plot_prior_posterior,
    plot_proportions,
    plot_regression,
    plot_trace,
)


@pytest.fixture(autouse=True)
def close_figures():
    yield
    plt.close("all")


class TestPlots:

    def test_regression_band(self, linear_fit) -> None:
        ax = plot_regression(read_meat(), "log_time", "pH", linear_fit)
        labels = [t.get_text() for t in ax.get_legend().get_texts()]
        assert "94% HDI" in labels
        assert "68% HDI" in labels
        assert "posterior mean" in labels

    def test_trace(self, linear_fit) -> None:
        axes = plot_trace(linear_fit)
        assert axes.shape == (3, 2)

    def test_posterior_panels(self, linear_fit) -> None:
        axes = np.ravel(plot_posterior(linear_fit))
        assert len(axes) == 3
        assert all(isinstance(ax, Axes) for ax in axes)

    def test_prior_posterior_overlay(self, linear_fit, rng) -> None:
        prior = az.from_dict(
            prior={"beta": rng.normal(0.0, 2.5, size=(1, 500, 1))},
            coords={"coef": ["log_time"]},
            dims={"beta": ["coef"]},
        )
        ax = plot_prior_posterior(linear_fit, prior, var="beta", coef="log_time")
        assert ax.get_title() == "log_time"
        labels = [t.get_text() for t in ax.get_legend().get_texts()]
        assert {"prior", "posterior"} <= set(labels)

    def test_derived(self, linear_fit) -> None:
        draws = pd.Series(linear_fit.idata.posterior["sigma"].values.ravel(), name="sigma")
        ax = plot_derived(draws)
        assert isinstance(ax, Axes)
        assert ax.get_title() == "sigma"

    def test_proportions(self) -> None:
        ax = plot_proportions(read_overdispersion(), "germinated", "total", by="extract")
        assert [t.get_text() for t in ax.get_xticklabels()] == ["bean", "cucumber"]
        assert ax.get_ylim() == (0.0, 1.0)

    def test_format_percentage(self) -> None:
        _, ax = plt.subplots()
        format_percentage(ax)
        assert ax.yaxis.get_major_formatter()(0.25, 0) == "25%"
