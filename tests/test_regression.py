import numpy as np
import pandas as pd

import pytest

from gdp_decomposer_src.errors import InsufficientDataError, SchemaError, SingularDesignError
from gdp_decomposer_src.regression_utils import ALL_OTHER_NUMERIC, fit, resolve_predictors


def _table(n=10):
    x1 = np.arange(1.0, n + 1)
    x2 = np.array([3.0, 1.0, 4.0, 1.0, 5.0, 9.0, 2.0, 6.0, 5.0, 3.0, 5.0, 8.0][:n])
    return pd.DataFrame({
        "date": pd.date_range("2000-03-31", periods=n, freq="QE"),
        "y": 3.0 + 2.0 * x1 - 0.5 * x2,
        "x1": x1,
        "x2": x2,
    })


def test_recovers_exact_linear_relationship():
    model = fit(_table(), "y", ["x1", "x2"])

    assert model.intercept == pytest.approx(3.0, abs=1e-8)
    assert model.coefficients["x1"] == pytest.approx(2.0, abs=1e-8)
    assert model.coefficients["x2"] == pytest.approx(-0.5, abs=1e-8)
    assert model.r_squared == pytest.approx(1.0)
    assert model.n_obs == 10
    assert model.excluded_rows == 0
    assert model.predictors == ("x1", "x2")
    assert np.max(np.abs(model.residuals.to_numpy())) < 1e-8


def test_complete_case_exclusion_counts_dropped_rows():
    table = _table()
    table.loc[4, "x2"] = np.nan

    model = fit(table, "y", ["x1", "x2"])

    assert model.excluded_rows == 1
    assert model.n_obs == 9
    assert pd.Timestamp(table.loc[4, "date"]) not in model.residuals.index
    assert model.coefficients["x1"] == pytest.approx(2.0, abs=1e-8)


def test_residuals_are_indexed_by_date():
    model = fit(_table(), "y", ["x1", "x2"])

    assert model.residuals.index.name == "date"
    assert model.residuals.index[0] == pd.Timestamp("2000-03-31")
    assert model.fitted_values.index.equals(model.residuals.index)


def test_all_other_numeric_excludes_keys_target_and_non_numeric():
    table = _table()
    table["year"] = table["date"].dt.year
    table["quarter"] = table["date"].dt.quarter
    table["label"] = "BEA"
    table["flag"] = True

    selected, left_out = resolve_predictors(table, "y", ALL_OTHER_NUMERIC)

    assert selected == ["x1", "x2"]
    assert set(left_out) == {"date", "year", "quarter", "label", "flag"}


def test_all_other_numeric_honours_exclusions():
    table = _table()
    table["y_trend"] = table["y"] * 0.9

    model = fit(table, "y", ALL_OTHER_NUMERIC, exclude=["y_trend"])

    assert model.predictors == ("x1", "x2")
    assert "y_trend" in model.excluded_columns


def test_explicit_predictor_errors():
    table = _table()
    with pytest.raises(SchemaError) as exc:
        fit(table, "y", ["x1", "x3"])
    assert exc.value.columns == ("x3",)
    with pytest.raises(SchemaError):
        fit(table, "y", ["x1", "y"])
    with pytest.raises(SchemaError):
        fit(table, "missing", ["x1"])
    with pytest.raises(ValueError):
        fit(table, "y", "everything")


def test_collinear_predictors_are_rejected_with_their_names():
    table = _table()
    table["x3"] = 2.0 * table["x1"]

    with pytest.raises(SingularDesignError) as exc:
        fit(table, "y", ["x1", "x2", "x3"])
    assert "x1" in exc.value.columns
    assert "x3" in exc.value.columns
    assert "x2" not in exc.value.columns


def test_constant_predictor_collides_with_intercept():
    table = _table()
    table["level"] = 5.0

    with pytest.raises(SingularDesignError) as exc:
        fit(table, "y", ["x1", "level"])
    assert "level" in exc.value.columns


def test_too_few_complete_rows():
    table = _table(n=5)
    table.loc[0:1, "x1"] = np.nan

    with pytest.raises(InsufficientDataError) as exc:
        fit(table, "y", ["x1", "x2"])
    assert exc.value.required == 4
    assert exc.value.available == 3


def test_coefficient_table_and_summary():
    rng = np.random.default_rng(3)
    table = _table()
    table["y"] = table["y"] + rng.normal(0, 0.1, len(table))

    model = fit(table, "y", ["x1", "x2"])
    coefs = model.coefficient_table()

    assert coefs.index.tolist() == ["const", "x1", "x2"]
    assert coefs.columns.tolist() == ["coef", "std_err", "t", "p_value", "ci_lower", "ci_upper"]
    assert (coefs["ci_lower"] < coefs["coef"]).all()
    assert (coefs["coef"] < coefs["ci_upper"]).all()

    summary = model.summary_dict()
    assert summary["target"] == "y"
    assert summary["n_obs"] == 10
    assert 0.9 < summary["r_squared"] <= 1.0


def test_input_table_is_not_modified():
    table = _table()
    table.loc[2, "x1"] = np.nan
    before = table.copy()

    fit(table, "y", ["x1", "x2"])

    pd.testing.assert_frame_equal(table, before)


def test_fitted_values_cannot_be_changed_through_the_model():
    model = fit(_table(), "y", ["x1", "x2"])

    model.coefficients["x1"] = 100.0
    model.residuals.iloc[:] = 5.0

    assert model.coefficients["x1"] == pytest.approx(2.0, abs=1e-8)
    assert np.max(np.abs(model.residuals.to_numpy())) < 1e-8
