"""
Helpers behind the Bayesian regression tutorial notebook.

**Usage:**
```python
from bayesreg import read_meat, define_linear_model, fit_bayes, as_matrix, time_to_ph

meat = read_meat()
spec = define_linear_model(meat, "pH", ["log_time"])
fit = fit_bayes(spec, chains=4, cores=4)
time_to_ph(as_matrix(fit), target=5.7).describe()
```
"""

from bayesreg.classical import (
    coefficient_table,
    fit_logit,
    fit_mixed,
    fit_ols,
    fit_quasibinomial,
)
from bayesreg.config import SamplerConfig
from bayesreg.data import (
    add_log_column,
    read_donner,
    read_incomplete_block,
    read_meat,
    read_overdispersion,
    read_table,
)
from bayesreg.models import (
    ModelSpec,
    define_binomial_glmm,
    define_linear_model,
    define_logistic_model,
    define_mixed_model,
)
from bayesreg.posterior import (
    age_at_even_odds,
    as_matrix,
    cell_probability,
    compare_estimates,
    credible_interval,
    derived_quantity,
    posterior_summary,
    summarize_draws,
    time_to_ph,
    treatment_difference,
)
from bayesreg.priors import PriorSpec, default_priors, prior_summary
from bayesreg.sampling import (
    BayesFit,
    ConvergenceError,
    check_convergence,
    fit_bayes,
    sample_prior_predictive,
)

__version__ = "0.1.0"

__all__ = [
    "BayesFit",
    "ConvergenceError",
    "ModelSpec",
    "PriorSpec",
    "SamplerConfig",
    "add_log_column",
    "age_at_even_odds",
    "as_matrix",
    "cell_probability",
    "check_convergence",
    "coefficient_table",
    "compare_estimates",
    "credible_interval",
    "default_priors",
    "define_binomial_glmm",
    "define_linear_model",
    "define_logistic_model",
    "define_mixed_model",
    "derived_quantity",
    "fit_bayes",
    "fit_logit",
    "fit_mixed",
    "fit_ols",
    "fit_quasibinomial",
    "posterior_summary",
    "prior_summary",
    "read_donner",
    "read_incomplete_block",
    "read_meat",
    "read_overdispersion",
    "read_table",
    "sample_prior_predictive",
    "summarize_draws",
    "time_to_ph",
    "treatment_difference",
]
