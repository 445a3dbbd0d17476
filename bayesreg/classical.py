"""
Classical (frequentist) fits used as a point of comparison for each
Bayesian model.
"""

import logging

import pandas as pd
import statsmodels.api as sm
import statsmodels.formula.api as smf

from bayesreg.data import require_columns

logger = logging.getLogger(__name__)


def fit_ols(df: pd.DataFrame, formula: str):
    logger.info(f"Fitting OLS: {formula}")
    return smf.ols(formula, data=df).fit()


def fit_logit(df: pd.DataFrame, formula: str):
    """Logistic regression as a binomial GLM."""
    logger.info(f"Fitting binomial GLM: {formula}")
    return smf.glm(formula, data=df, family=sm.families.Binomial()).fit()


def fit_mixed(df: pd.DataFrame, formula: str, group: str):
    """Linear mixed model with a random intercept for ``group``, fitted by REML."""
    require_columns(df, [group])
    logger.info(f"Fitting linear mixed model: {formula} + (1 | {group})")
    return smf.mixedlm(formula, data=df, groups=df[group]).fit(reml=True)


def fit_quasibinomial(df: pd.DataFrame, rhs: str, successes: str, trials: str):
    """
    Binomial GLM on the observed proportions with the dispersion estimated
    from the Pearson chi-square (quasi-binomial). ``result.scale`` is the
    dispersion; values well above 1 indicate overdispersion.
    """
    require_columns(df, [successes, trials])
    data = df.assign(_proportion=df[successes] / df[trials])
    logger.info(f"Fitting quasi-binomial GLM: {successes}/{trials} ~ {rhs}")
    result = smf.glm(
        f"_proportion ~ {rhs}",
        data=data,
        family=sm.families.Binomial(),
        var_weights=data[trials],
    ).fit(scale="X2")
    logger.info(f"Estimated dispersion: {result.scale:.2f}")
    return result


def coefficient_table(result, alpha: float = 0.05) -> pd.DataFrame:
    """Estimates, standard errors and confidence limits of a statsmodels fit."""
    ci = result.conf_int(alpha=alpha)
    table = pd.DataFrame(
        {
            "estimate": result.params,
            "std_err": result.bse,
            "lower": ci[0],
            "upper": ci[1],
        }
    )
    return table.rename(index={"Group Var": "group_var"})
