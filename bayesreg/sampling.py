"""
Fitting the Bayesian models and checking the chains.

``fit_bayes`` is a single call into ``pm.sample``; chains and cores are
handed to PyMC untouched. Anything that goes wrong while sampling is raised
by PyMC as-is. ``check_convergence`` reports the usual diagnostics:

- Rhat < 1.01 for every reported parameter
- bulk and tail ESS > 400
- no divergent transitions
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Optional

import arviz as az
import pymc as pm

from bayesreg.config import (
    DIVERGENCE_RATE_THRESHOLD,
    ESS_THRESHOLD,
    RHAT_THRESHOLD,
    SamplerConfig,
)
from bayesreg.models import ModelSpec
from bayesreg.priors import PriorSpec

logger = logging.getLogger(__name__)


class ConvergenceError(RuntimeError):
    """Raised by ``check_convergence(..., strict=True)`` when chains look unhealthy."""


@dataclass
class BayesFit:
    model: pm.Model
    idata: az.InferenceData
    priors: PriorSpec
    formula: str
    response: str
    family: str
    coef_names: tuple
    config: SamplerConfig
    group: Optional[str] = None
    levels: dict = field(default_factory=dict)
    sampling_time: float = 0.0

    @property
    def n_chains(self) -> int:
        return self.idata.posterior.sizes["chain"]

    @property
    def n_draws(self) -> int:
        return self.idata.posterior.sizes["draw"]

    def param_names(self) -> list:
        """Reported parameters, in the order summaries list them."""
        names = ["Intercept"]
        if self.coef_names:
            names.append("beta")
        for name in ("sigma", "sigma_group"):
            if name in self.idata.posterior:
                names.append(name)
        return names

    def __repr__(self) -> str:
        return (
            f"BayesFit({self.formula!r}, family={self.family}, "
            f"chains={self.n_chains}, draws={self.n_draws}, "
            f"time={self.sampling_time:.1f}s)"
        )


@dataclass
class Diagnostics:
    max_rhat: float
    min_ess_bulk: float
    min_ess_tail: float
    divergences: int
    divergence_rate: float

    @property
    def ok(self) -> bool:
        return (
            self.max_rhat < RHAT_THRESHOLD
            and self.min_ess_bulk > ESS_THRESHOLD
            and self.min_ess_tail > ESS_THRESHOLD
            and self.divergence_rate <= DIVERGENCE_RATE_THRESHOLD
        )

    def problems(self) -> list:
        found = []
        if not self.max_rhat < RHAT_THRESHOLD:
            found.append(f"Rhat up to {self.max_rhat:.3f} (want < {RHAT_THRESHOLD})")
        if not self.min_ess_bulk > ESS_THRESHOLD:
            found.append(f"bulk ESS down to {self.min_ess_bulk:.0f} (want > {ESS_THRESHOLD})")
        if not self.min_ess_tail > ESS_THRESHOLD:
            found.append(f"tail ESS down to {self.min_ess_tail:.0f} (want > {ESS_THRESHOLD})")
        if self.divergence_rate > DIVERGENCE_RATE_THRESHOLD:
            found.append(
                f"{self.divergences} divergent transitions ({self.divergence_rate:.1%})"
            )
        return found


def fit_bayes(
    spec: ModelSpec, config: Optional[SamplerConfig] = None, **overrides
) -> BayesFit:
    """
    Sample the posterior of ``spec.model``.

    ``overrides`` replace individual ``SamplerConfig`` fields, e.g.
    ``fit_bayes(spec, chains=4, cores=2)``.
    """
    config = config or SamplerConfig()
    if overrides:
        config = SamplerConfig(**{**config.sample_kwargs(), **overrides})

    logger.info(
        f"Sampling {spec.formula} ({spec.family}): {config.chains} chains x "
        f"{config.draws} draws on {config.cores} cores with {config.nuts_sampler}"
    )
    start = time.time()
    idata = pm.sample(model=spec.model, progressbar=False, **config.sample_kwargs())
    elapsed = time.time() - start
    logger.info(f"Finished sampling {spec.formula} in {elapsed:.1f}s")

    return BayesFit(
        model=spec.model,
        idata=idata,
        priors=spec.priors,
        formula=spec.formula,
        response=spec.response,
        family=spec.family,
        coef_names=spec.coef_names,
        config=config,
        group=spec.group,
        levels=spec.levels,
        sampling_time=elapsed,
    )


def sample_prior_predictive(
    spec: ModelSpec, draws: int = 500, random_seed: Optional[int] = None
) -> az.InferenceData:
    """Draws from the priors, for checking what they imply about the data."""
    return pm.sample_prior_predictive(
        draws=draws, model=spec.model, random_seed=random_seed
    )


def check_convergence(fit: BayesFit, strict: bool = False) -> Diagnostics:
    posterior = fit.idata.posterior[fit.param_names()]
    rhat = az.rhat(posterior)
    ess_bulk = az.ess(posterior, method="bulk")
    ess_tail = az.ess(posterior, method="tail")

    if hasattr(fit.idata, "sample_stats") and "diverging" in fit.idata.sample_stats:
        divergences = int(fit.idata.sample_stats["diverging"].sum().item())
    else:
        divergences = 0
    n_total = fit.n_chains * fit.n_draws

    diagnostics = Diagnostics(
        max_rhat=float(rhat.to_array().max().item()),
        min_ess_bulk=float(ess_bulk.to_array().min().item()),
        min_ess_tail=float(ess_tail.to_array().min().item()),
        divergences=divergences,
        divergence_rate=divergences / n_total,
    )

    problems = diagnostics.problems()
    for problem in problems:
        logger.warning(f"{fit.formula}: {problem}")
    if strict and problems:
        raise ConvergenceError(f"{fit.formula} did not converge: " + "; ".join(problems))
    return diagnostics
