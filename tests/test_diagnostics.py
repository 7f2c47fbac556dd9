"""Tests for residual diagnostics on fitted driver models."""

import numpy as np
import pandas as pd

import pytest

from diagnostics import DiagnosticTest, ResidualDiagnostics, run_model_diagnostics
from gdp_decomposer_src.regression_utils import fit


def _index(n):
    return pd.date_range("2000-03-31", periods=n, freq="QE", name="date")


def create_autocorrelated_residuals(n=200, phi=0.9, seed=42):
    """AR(1) residuals with strong positive autocorrelation."""
    rng = np.random.default_rng(seed)
    e = rng.normal(0, 1, n)
    resid = np.zeros(n)
    for t in range(1, n):
        resid[t] = phi * resid[t - 1] + e[t]
    return pd.Series(resid, index=_index(n), name="residual")


def test_ljung_box_and_durbin_watson_detect_autocorrelation():
    resid = create_autocorrelated_residuals()
    diag = ResidualDiagnostics(significance_level=0.05)

    lb = diag.ljung_box_test(resid)
    dw = diag.durbin_watson_statistic(resid)

    assert lb.test_type == DiagnosticTest.LJUNG_BOX
    assert lb.is_significant
    assert lb.interpretation == "Serial correlation detected in residuals"
    assert dw.test_statistic < 1.0
    assert "Positive autocorrelation" in dw.interpretation
    assert not dw.is_significant  # no p-value for DW


def test_normality_tests_reject_skewed_residuals():
    rng = np.random.default_rng(1)
    resid = pd.Series(rng.exponential(1.0, 200) - 1.0, index=_index(200))
    diag = ResidualDiagnostics()

    jb = diag.jarque_bera_test(resid)
    sw = diag.shapiro_wilk_test(resid)

    assert jb.is_significant
    assert sw.is_significant
    assert jb.additional_stats["skewness"] > 1.0
    assert sw.interpretation == "Residuals not normally distributed"


def test_breusch_pagan_detects_variance_growing_with_regressor():
    rng = np.random.default_rng(5)
    n = 200
    x = np.linspace(0, 10, n)
    resid = pd.Series(rng.normal(0, 1, n) * (0.1 + x), index=_index(n))
    exog = pd.DataFrame({"const": 1.0, "x": x}, index=resid.index)

    bp = ResidualDiagnostics().breusch_pagan_test(resid, exog)

    assert bp.is_significant
    assert bp.degrees_of_freedom == 1


def test_ljung_box_lags_capped_for_short_samples():
    resid = pd.Series([0.5, -0.2, 0.1, -0.4, 0.3], index=_index(5))

    lb = ResidualDiagnostics(ljung_box_lags=8).ljung_box_test(resid)

    assert lb.degrees_of_freedom == 3
    assert np.isfinite(lb.test_statistic)


def test_run_all_skips_tiny_samples():
    resid = pd.Series([0.1, -0.1], index=_index(2))
    assert ResidualDiagnostics().run_all(resid) == {}


def test_run_model_diagnostics_on_fitted_model():
    rng = np.random.default_rng(9)
    n = 40
    x1 = rng.normal(0, 1, n)
    x2 = rng.normal(0, 1, n)
    table = pd.DataFrame({
        "date": _index(n),
        "gdp": 1.0 + 0.5 * x1 + 0.2 * x2 + rng.normal(0, 0.3, n),
        "cons": x1,
        "inv": x2,
    })
    model = fit(table, "gdp", ["cons", "inv"])

    results = run_model_diagnostics(model, table)

    assert set(results) == {"ljung_box", "jarque_bera", "shapiro_wilk", "durbin_watson", "breusch_pagan"}
    assert results["breusch_pagan"].degrees_of_freedom == 2
    for result in results.values():
        assert np.isfinite(result.test_statistic)

    without_table = run_model_diagnostics(model)
    assert "breusch_pagan" not in without_table


@pytest.mark.parametrize("alpha", [0.01, 0.10])
def test_significance_level_is_carried_into_results(alpha):
    resid = create_autocorrelated_residuals(n=60)
    result = ResidualDiagnostics(significance_level=alpha).ljung_box_test(resid)
    assert result.significance_level == alpha
