"""
Tests for fitting and convergence checks.

Convergence tests use synthetic chains. The tests marked ``slow`` run the
real sampler on small settings (a few seconds each).
"""

import logging

import numpy as np
import pytest

from bayesreg.classical import fit_logit, fit_ols
from bayesreg.config import SamplerConfig
from bayesreg.data import read_donner, read_meat
from bayesreg.models import define_linear_model, define_logistic_model
from bayesreg.posterior import as_matrix, time_to_ph
from bayesreg.sampling import (
    ConvergenceError,
    check_convergence,
    fit_bayes,
    sample_prior_predictive,
)
from tests.helpers import make_fit


class TestCheckConvergence:

    def test_well_mixed_chains_pass(self, linear_fit) -> None:
        diagnostics = check_convergence(linear_fit, strict=True)
        assert diagnostics.ok
        assert diagnostics.max_rhat < 1.01
        assert diagnostics.min_ess_bulk > 400
        assert diagnostics.divergences == 0
        assert diagnostics.problems() == []

    def test_separated_chains_flagged(self, rng, caplog) -> None:
        intercept = np.stack([rng.normal(-5, 1, 500), rng.normal(5, 1, 500)])
        fit = make_fit({"Intercept": intercept})
        with caplog.at_level(logging.WARNING, logger="bayesreg.sampling"):
            diagnostics = check_convergence(fit)
        assert not diagnostics.ok
        assert diagnostics.max_rhat > 1.05
        assert any("Rhat" in record.message for record in caplog.records)

    def test_strict_raises(self, rng) -> None:
        intercept = np.stack([rng.normal(-5, 1, 500), rng.normal(5, 1, 500)])
        fit = make_fit({"Intercept": intercept})
        with pytest.raises(ConvergenceError, match="Rhat"):
            check_convergence(fit, strict=True)

    def test_low_ess_flagged_with_good_rhat(self, rng) -> None:
        # Identical, slowly moving chains: they agree, but carry little information
        block = np.repeat(rng.normal(size=10), 50)
        chain = np.concatenate([block, block])
        fit = make_fit({"Intercept": np.tile(chain, (4, 1))})
        diagnostics = check_convergence(fit)
        assert diagnostics.max_rhat < 1.01
        assert diagnostics.min_ess_bulk < 400
        assert not diagnostics.ok
        problems = diagnostics.problems()
        assert problems
        assert all("ESS" in problem for problem in problems)

    def test_divergences_counted(self, rng) -> None:
        shape = (2, 1000)
        diverging = np.zeros(shape, dtype=bool)
        diverging[0, :20] = True
        fit = make_fit(
            {"Intercept": rng.normal(size=shape)},
            sample_stats={"diverging": diverging},
        )
        diagnostics = check_convergence(fit)
        assert diagnostics.divergences == 20
        assert diagnostics.divergence_rate == pytest.approx(0.01)
        assert not diagnostics.ok

    def test_convergence_error_is_runtime_error(self) -> None:
        assert issubclass(ConvergenceError, RuntimeError)


class TestBayesFit:

    def test_param_names(self, linear_fit) -> None:
        assert linear_fit.param_names() == ["Intercept", "beta", "sigma"]
        assert linear_fit.n_chains == 2
        assert linear_fit.n_draws == 1000

    def test_repr(self, linear_fit) -> None:
        assert "chains=2" in repr(linear_fit)


@pytest.mark.slow
class TestSampling:

    config = SamplerConfig(draws=300, tune=300, chains=2, cores=1, random_seed=1)

    def test_linear_posterior_close_to_ols(self) -> None:
        meat = read_meat()
        fit = fit_bayes(define_linear_model(meat, "pH", ["log_time"]), self.config)
        ols = fit_ols(meat, "pH ~ log_time")

        assert fit.n_chains == 2
        assert fit.n_draws == 300
        matrix = as_matrix(fit)
        assert len(matrix) == 600
        assert matrix["Intercept"].mean() == pytest.approx(ols.params["Intercept"], abs=0.1)
        assert matrix["log_time"].mean() == pytest.approx(ols.params["log_time"], abs=0.1)

        hours = time_to_ph(matrix, target=5.7)
        assert 3 < hours.median() < 10

    def test_overrides_replace_config_fields(self) -> None:
        spec = define_linear_model(read_meat(), "pH", ["log_time"])
        fit = fit_bayes(spec, self.config, draws=100)
        assert fit.config.draws == 100
        assert fit.config.chains == 2
        assert fit.n_draws == 100

    def test_logistic_signs_match_glm(self) -> None:
        donner = read_donner()
        fit = fit_bayes(define_logistic_model(donner, "survived", ["age", "sex"]), self.config)
        glm = fit_logit(donner, "survived ~ age + sex")
        matrix = as_matrix(fit)
        assert np.sign(matrix["age"].mean()) == np.sign(glm.params["age"])
        assert np.sign(matrix["sex[T.Male]"].mean()) == np.sign(glm.params["sex[T.Male]"])

    def test_prior_predictive(self) -> None:
        spec = define_linear_model(read_meat(), "pH", ["log_time"])
        prior = sample_prior_predictive(spec, draws=100, random_seed=2)
        assert prior.prior["Intercept"].sizes["draw"] == 100
        assert "y" in prior.prior_predictive
