"""
Design matrices for the Bayesian models.

Terms are expanded by patsy, the formula engine behind
``statsmodels.formula.api``, so column names (``sex[T.Male]``,
``a[T.x]:b[T.y]``) and level coding match the classical fits exactly and
the two coefficient tables can be joined on their index.
"""

from typing import List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
import patsy

from bayesreg.data import require_columns


def is_categorical(series: pd.Series) -> bool:
    return not pd.api.types.is_numeric_dtype(series) or pd.api.types.is_bool_dtype(
        series
    )


def design_matrix(df: pd.DataFrame, predictors: Sequence[str]) -> pd.DataFrame:
    """
    Build the predictor matrix (without intercept).

    ``predictors`` holds right-hand-side terms as statsmodels formulas take
    them: column names, interactions written ``"a:b"``, or patsy
    expressions. The levels of every categorical factor, baseline first, are
    kept in ``X.attrs["levels"]``.
    """
    for term in predictors:
        names = [part for part in term.split(":") if part.isidentifier()]
        require_columns(df, names)
        for name in names:
            if is_categorical(df[name]) and df[name].nunique() < 2:
                raise ValueError(f"Categorical predictor {name!r} has a single level")

    rhs = " + ".join(predictors) if predictors else "1"
    full = patsy.dmatrix(rhs, df, NA_action="raise", return_type="dataframe")
    levels = {
        factor.name(): [str(level) for level in info.categories]
        for factor, info in full.design_info.factor_infos.items()
        if info.type == "categorical"
    }

    X = full.drop(columns="Intercept")
    constant = [col for col in X.columns if X[col].std() == 0]
    if constant:
        raise ValueError(f"Predictor column(s) are constant: {constant}")
    X.attrs["levels"] = levels
    return X


def group_index(df: pd.DataFrame, column: str) -> Tuple[np.ndarray, List[str]]:
    """Integer codes for a grouping column and the sorted level labels."""
    require_columns(df, [column])
    values = df[column].astype(str)
    levels = sorted(values.unique(), key=_natural_key)
    lookup = {level: i for i, level in enumerate(levels)}
    return values.map(lookup).to_numpy(dtype="int64"), levels


def _natural_key(level: str):
    return (0, int(level), "") if level.isdigit() else (1, 0, level)


def formula_text(
    response: str, predictors: Sequence[str], group: Optional[str] = None
) -> str:
    rhs = " + ".join(predictors) if predictors else "1"
    if group is not None:
        rhs += f" + (1 | {group})"
    return f"{response} ~ {rhs}"
