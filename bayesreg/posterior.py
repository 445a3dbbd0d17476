"""
Posterior sample matrices, summaries and derived quantities.
"""

from typing import Callable, Iterable, Optional, Sequence, Tuple

import arviz as az
import numpy as np
import pandas as pd
from scipy.special import expit

from bayesreg.sampling import BayesFit


def as_matrix(fit: BayesFit, var_names: Optional[Sequence[str]] = None) -> pd.DataFrame:
    """
    Posterior draws as a DataFrame with one row per draw (chains stacked).

    Coefficients get one column each, named like the design matrix columns;
    group effects are named ``group_effect[<level>]``.
    """
    var_names = list(var_names or fit.param_names())
    stacked = az.extract(fit.idata, var_names=var_names, keep_dataset=True)

    columns = {}
    for name in var_names:
        da = stacked[name]
        if "coef" in da.dims:
            for coef in da["coef"].values:
                columns[str(coef)] = da.sel(coef=coef).values
        elif "group" in da.dims:
            for level in da["group"].values:
                columns[f"{name}[{level}]"] = da.sel(group=level).values
        else:
            columns[name] = da.values
    matrix = pd.DataFrame(columns)
    matrix.attrs["levels"] = dict(fit.levels)
    return matrix


def _readable(label: str) -> str:
    if label.startswith("beta[") and label.endswith("]"):
        return label[len("beta[") : -1]
    return label


def posterior_summary(fit: BayesFit, hdi_prob: float = 0.95) -> pd.DataFrame:
    """``az.summary`` of the reported parameters, Rhat and ESS included."""
    summary = az.summary(fit.idata, var_names=fit.param_names(), hdi_prob=hdi_prob)
    return summary.rename(index=_readable)


def credible_interval(draws, prob: float = 0.95) -> Tuple[float, float]:
    """Equal-tailed credible interval."""
    if not (0.0 < prob < 1.0):
        raise ValueError(f"prob must be in (0, 1). Got {prob}")
    tail = (1.0 - prob) / 2.0
    lower, upper = np.quantile(np.asarray(draws, dtype=float), [tail, 1.0 - tail])
    return float(lower), float(upper)


def summarize_draws(draws, prob: float = 0.95) -> pd.Series:
    values = np.asarray(draws, dtype=float)
    lower, upper = credible_interval(values, prob)
    return pd.Series(
        {
            "mean": values.mean(),
            "sd": values.std(ddof=1),
            "median": np.median(values),
            "lower": lower,
            "upper": upper,
            "prob_positive": (values > 0).mean(),
        },
        name=getattr(draws, "name", None),
    )


def derived_quantity(
    matrix: pd.DataFrame,
    func: Callable[[pd.DataFrame], Iterable[float]],
    name: str = "derived",
) -> pd.Series:
    """Apply ``func`` to the columns of the sample matrix, draw by draw."""
    return pd.Series(np.asarray(func(matrix), dtype=float), index=matrix.index, name=name)


def _effect(matrix: pd.DataFrame, factor: str, level: str) -> pd.Series:
    """
    Coefficient draws for one level of a treatment-coded factor.

    The baseline level has no column and contributes zero. It is taken from
    ``matrix.attrs["levels"]`` when the matrix came from ``as_matrix``;
    otherwise it must sort before every coded level.
    """
    column = f"{factor}[T.{level}]"
    if column in matrix:
        return matrix[column]

    prefix = f"{factor}[T."
    coded = [
        col[len(prefix) : -1]
        for col in matrix.columns
        if col.startswith(prefix) and col.endswith("]") and ":" not in col
    ]
    known = matrix.attrs.get("levels", {}).get(factor)
    if known is not None:
        is_baseline = level == known[0]
    else:
        is_baseline = bool(coded) and all(level < other for other in coded)
    if not is_baseline:
        raise ValueError(
            f"Unknown level {level!r} of {factor!r}; coded levels are {coded}"
        )
    return pd.Series(0.0, index=matrix.index)


def time_to_ph(
    matrix: pd.DataFrame, target: float = 5.7, slope: str = "log_time"
) -> pd.Series:
    """Time at which the fitted pH ~ log(time) line reaches ``target``."""
    return derived_quantity(
        matrix,
        lambda m: np.exp((target - m["Intercept"]) / m[slope]),
        name=f"time_to_pH_{target}",
    )


def age_at_even_odds(
    matrix: pd.DataFrame,
    sex: Optional[str] = None,
    age: str = "age",
    sex_column: str = "sex",
) -> pd.Series:
    """
    Age at which the fitted survival probability is one half.

    ``sex=None`` uses the baseline level; otherwise the ``sex[T.<level>]``
    coefficient is added to the intercept.
    """
    offset = _effect(matrix, sex_column, sex) if sex else 0.0
    return derived_quantity(
        matrix,
        lambda m: -(m["Intercept"] + offset) / m[age],
        name=f"age_at_even_odds_{sex or 'baseline'}",
    )


def treatment_difference(
    matrix: pd.DataFrame, a: str, b: str, factor: str = "treatment"
) -> pd.Series:
    """Difference between the effects of levels ``a`` and ``b`` of ``factor``."""
    return derived_quantity(
        matrix,
        lambda m: _effect(m, factor, a) - _effect(m, factor, b),
        name=f"{factor}_{a}_minus_{b}",
    )


def cell_probability(matrix: pd.DataFrame, terms: Sequence[str] = ()) -> pd.Series:
    """Inverse-logit of the intercept plus the named coefficient columns."""
    missing = [t for t in terms if t not in matrix]
    if missing:
        raise ValueError(f"Unknown coefficient(s): {missing}")
    return derived_quantity(
        matrix,
        lambda m: expit(m["Intercept"] + sum((m[t] for t in terms), 0.0)),
        name="p[" + (" + ".join(terms) or "baseline") + "]",
    )


def compare_estimates(
    classical_table: pd.DataFrame, fit: BayesFit, prob: float = 0.95
) -> pd.DataFrame:
    """Classical estimates next to posterior means and credible intervals."""
    matrix = as_matrix(fit, ["Intercept", "beta"] if fit.coef_names else ["Intercept"])
    bayes = pd.DataFrame(
        {col: summarize_draws(matrix[col], prob) for col in matrix.columns}
    ).T[["mean", "lower", "upper"]]
    bayes.columns = ["post_mean", "post_lower", "post_upper"]
    classical = classical_table[["estimate", "lower", "upper"]]
    return classical.join(bayes, how="inner")
