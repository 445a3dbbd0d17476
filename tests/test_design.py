"""
Unit tests for design matrices and grouping codes.
"""

import numpy as np
import pandas as pd
import pytest
import statsmodels.formula.api as smf
from numpy.testing import assert_array_equal

from bayesreg.design import design_matrix, formula_text, group_index


@pytest.fixture
def frame() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "age": [20.0, 30.0, 40.0, 50.0],
            "sex": ["Male", "Female", "Male", "Female"],
            "extract": ["bean", "bean", "cucumber", "cucumber"],
        }
    )


class TestDesignMatrix:

    def test_numeric_column_kept(self, frame) -> None:
        X = design_matrix(frame, ["age"])
        assert list(X.columns) == ["age"]
        assert_array_equal(X["age"], frame["age"])

    def test_categorical_uses_first_sorted_level_as_baseline(self, frame) -> None:
        X = design_matrix(frame, ["age", "sex"])
        # Categorical-only terms come first, as in statsmodels
        assert list(X.columns) == ["sex[T.Male]", "age"]
        assert_array_equal(X["sex[T.Male]"], [1.0, 0.0, 1.0, 0.0])
        assert X.attrs["levels"] == {"sex": ["Female", "Male"]}

    def test_ordered_categorical_keeps_its_level_order(self, frame) -> None:
        frame["dose"] = pd.Categorical(
            ["low", "high", "mid", "low"], categories=["low", "mid", "high"], ordered=True
        )
        X = design_matrix(frame, ["dose"])
        assert list(X.columns) == ["dose[T.mid]", "dose[T.high]"]
        assert X.attrs["levels"] == {"dose": ["low", "mid", "high"]}

    def test_interaction_without_main_effect_matches_statsmodels(self, frame) -> None:
        frame["y"] = [1.0, 2.5, 2.0, 4.0]
        X = design_matrix(frame, ["age:sex"])
        params = smf.ols("y ~ age:sex", data=frame).fit().params
        assert list(X.columns) == list(params.index.drop("Intercept"))
        assert list(X.columns) == ["age:sex[Female]", "age:sex[Male]"]

    def test_interaction_names_match_statsmodels(self, frame) -> None:
        X = design_matrix(frame, ["sex", "extract", "sex:extract"])
        assert list(X.columns) == [
            "sex[T.Male]",
            "extract[T.cucumber]",
            "sex[T.Male]:extract[T.cucumber]",
        ]
        assert_array_equal(X["sex[T.Male]:extract[T.cucumber]"], [0.0, 0.0, 1.0, 0.0])

    def test_constant_column_rejected(self, frame) -> None:
        frame["flat"] = 1.0
        with pytest.raises(ValueError, match="constant"):
            design_matrix(frame, ["flat"])

    def test_single_level_categorical_rejected(self, frame) -> None:
        frame["site"] = "north"
        with pytest.raises(ValueError, match="single level"):
            design_matrix(frame, ["site"])

    def test_unknown_column_rejected(self, frame) -> None:
        with pytest.raises(ValueError, match="missing"):
            design_matrix(frame, ["height"])

    def test_no_predictors(self, frame) -> None:
        X = design_matrix(frame, [])
        assert X.shape == (4, 0)


class TestGroupIndex:

    def test_numeric_labels_sorted_naturally(self) -> None:
        df = pd.DataFrame({"block": ["10", "2", "1", "2"]})
        codes, levels = group_index(df, "block")
        assert levels == ["1", "2", "10"]
        assert_array_equal(codes, [2, 1, 0, 1])
        assert codes.dtype == np.int64

    def test_text_labels(self) -> None:
        codes, levels = group_index(pd.DataFrame({"g": ["b", "a"]}), "g")
        assert levels == ["a", "b"]
        assert_array_equal(codes, [1, 0])


class TestFormulaText:

    def test_fixed_effects(self) -> None:
        assert formula_text("pH", ["log_time"]) == "pH ~ log_time"

    def test_group_term(self) -> None:
        assert formula_text("y", ["t"], group="block") == "y ~ t + (1 | block)"

    def test_intercept_only(self) -> None:
        assert formula_text("y", []) == "y ~ 1"
