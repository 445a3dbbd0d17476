import arviz as az

from bayesreg.config import SamplerConfig
from bayesreg.sampling import BayesFit


def make_fit(
    posterior, coef_names=(), family="gaussian", group_levels=None, sample_stats=None, levels=None
):
    """BayesFit around hand-made draws, no sampling involved."""
    coords = {"coef": list(coef_names)}
    dims = {"beta": ["coef"]}
    if group_levels is not None:
        coords["group"] = list(group_levels)
        dims["group_effect"] = ["group"]
    idata = az.from_dict(
        posterior=posterior, sample_stats=sample_stats, coords=coords, dims=dims
    )
    return BayesFit(
        model=None,
        idata=idata,
        priors=None,
        formula="y ~ x",
        response="y",
        family=family,
        coef_names=tuple(coef_names),
        config=SamplerConfig(chains=2, cores=1),
        group="g" if group_levels is not None else None,
        levels=dict(levels or {}),
    )
