"""Residual diagnostics for fitted OLS driver models.

This module runs the standard model checks on the residuals of a
``RegressionModel`` and reports them as structured results, without altering
the model.

Features:
- Ljung-Box test for serial correlation
- Jarque-Bera and Shapiro-Wilk tests for normality
- Breusch-Pagan test for heteroskedasticity against the model's predictors
- Durbin-Watson statistic
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional

import numpy as np
import pandas as pd
from scipy import stats
from statsmodels.stats.diagnostic import acorr_ljungbox, het_breuschpagan
from statsmodels.stats.stattools import durbin_watson, jarque_bera

from gdp_decomposer_src.config_utils import get_config_value

logger = logging.getLogger(__name__)


class DiagnosticTest(Enum):
    """Types of residual diagnostic tests."""
    LJUNG_BOX = "ljung_box"
    JARQUE_BERA = "jarque_bera"
    SHAPIRO_WILK = "shapiro_wilk"
    BREUSCH_PAGAN = "breusch_pagan"
    DURBIN_WATSON = "durbin_watson"


@dataclass
class DiagnosticResult:
    """Results from a single diagnostic test."""

    test_name: str
    test_type: DiagnosticTest
    test_statistic: float
    p_value: float
    significance_level: float = 0.05
    degrees_of_freedom: Optional[int] = None

    test_description: Optional[str] = None
    additional_stats: Dict[str, float] = field(default_factory=dict)

    @property
    def is_significant(self) -> bool:
        """Check if test rejects null hypothesis."""
        return bool(np.isfinite(self.p_value) and self.p_value < self.significance_level)

    @property
    def interpretation(self) -> str:
        """Get interpretation of test result."""
        if self.test_type == DiagnosticTest.LJUNG_BOX:
            if self.is_significant:
                return "Serial correlation detected in residuals"
            return "No significant serial correlation in residuals"
        elif self.test_type in (DiagnosticTest.JARQUE_BERA, DiagnosticTest.SHAPIRO_WILK):
            if self.is_significant:
                return "Residuals not normally distributed"
            return "Residuals appear normally distributed"
        elif self.test_type == DiagnosticTest.BREUSCH_PAGAN:
            if self.is_significant:
                return "Heteroskedasticity detected in residuals"
            return "No significant heteroskedasticity in residuals"
        elif self.test_type == DiagnosticTest.DURBIN_WATSON:
            dw = self.test_statistic
            if dw < 1.5:
                return f"Positive autocorrelation suggested (DW={dw:.2f})"
            if dw > 2.5:
                return f"Negative autocorrelation suggested (DW={dw:.2f})"
            return f"No strong first-order autocorrelation (DW={dw:.2f})"
        if self.is_significant:
            return f"Null hypothesis rejected (p={self.p_value:.4f})"
        return f"Null hypothesis not rejected (p={self.p_value:.4f})"


class ResidualDiagnostics:
    """Residual diagnostic testing for regression models."""

    def __init__(self, significance_level: Optional[float] = None, ljung_box_lags: Optional[int] = None):
        """Initialize residual diagnostics.

        Parameters
        ----------
        significance_level : float, optional
            Significance level for all tests (default from config, 0.05)
        ljung_box_lags : int, optional
            Lags for the Ljung-Box test (default from config, one year of quarters)
        """
        self.significance_level = float(
            significance_level if significance_level is not None
            else get_config_value('diagnostics.significance_level', 0.05)
        )
        self.ljung_box_lags = int(
            ljung_box_lags if ljung_box_lags is not None
            else get_config_value('diagnostics.ljung_box_lags', 4)
        )

    def ljung_box_test(self, residuals: pd.Series, lags: Optional[int] = None) -> DiagnosticResult:
        """Ljung-Box test for serial correlation in residuals.

        The lag count is capped below the sample size so short samples still
        produce a result.
        """
        if lags is None:
            lags = self.ljung_box_lags
        lags = max(1, min(lags, len(residuals) - 2))

        logger.debug("Running Ljung-Box test with %d lags", lags)
        lb_result = acorr_ljungbox(residuals, lags=[lags], return_df=True)
        test_stat = lb_result['lb_stat'].iloc[-1]
        p_value = lb_result['lb_pvalue'].iloc[-1]

        return DiagnosticResult(
            test_name="Ljung-Box Test",
            test_type=DiagnosticTest.LJUNG_BOX,
            test_statistic=float(test_stat),
            p_value=float(p_value),
            degrees_of_freedom=lags,
            significance_level=self.significance_level,
            test_description=f"Test for serial correlation in residuals (H0: No serial correlation, lags={lags})"
        )

    def jarque_bera_test(self, residuals: pd.Series) -> DiagnosticResult:
        """Jarque-Bera test for normality of residuals."""
        logger.debug("Running Jarque-Bera normality test")
        jb_stat, jb_pval, skew, kurtosis = jarque_bera(residuals)

        return DiagnosticResult(
            test_name="Jarque-Bera Test",
            test_type=DiagnosticTest.JARQUE_BERA,
            test_statistic=float(jb_stat),
            p_value=float(jb_pval),
            degrees_of_freedom=2,
            significance_level=self.significance_level,
            test_description="Test for normality of residuals (H0: Residuals are normally distributed)",
            additional_stats={'skewness': float(skew), 'kurtosis': float(kurtosis)}
        )

    def shapiro_wilk_test(self, residuals: pd.Series) -> DiagnosticResult:
        """Shapiro-Wilk test for normality (suited to the small samples typical of quarterly data)."""
        logger.debug("Running Shapiro-Wilk normality test")
        sw_stat, sw_pval = stats.shapiro(residuals.dropna())

        return DiagnosticResult(
            test_name="Shapiro-Wilk Test",
            test_type=DiagnosticTest.SHAPIRO_WILK,
            test_statistic=float(sw_stat),
            p_value=float(sw_pval),
            significance_level=self.significance_level,
            test_description="Test for normality of residuals (H0: Residuals are normally distributed)"
        )

    def breusch_pagan_test(self, residuals: pd.Series, exog: pd.DataFrame) -> DiagnosticResult:
        """Breusch-Pagan test of residual variance against the regressors.

        Parameters
        ----------
        residuals : pd.Series
            Model residuals
        exog : pd.DataFrame
            Regressors including the constant column
        """
        logger.debug("Running Breusch-Pagan test on %d regressors", exog.shape[1])
        lm_stat, lm_pval, f_stat, f_pval = het_breuschpagan(residuals.to_numpy(), exog.to_numpy())

        return DiagnosticResult(
            test_name="Breusch-Pagan Test",
            test_type=DiagnosticTest.BREUSCH_PAGAN,
            test_statistic=float(lm_stat),
            p_value=float(lm_pval),
            degrees_of_freedom=exog.shape[1] - 1,
            significance_level=self.significance_level,
            test_description="Test for heteroskedasticity (H0: Homoskedasticity)",
            additional_stats={'f_statistic': float(f_stat), 'f_pvalue': float(f_pval)}
        )

    def durbin_watson_statistic(self, residuals: pd.Series) -> DiagnosticResult:
        dw = float(durbin_watson(residuals.to_numpy()))
        return DiagnosticResult(
            test_name="Durbin-Watson",
            test_type=DiagnosticTest.DURBIN_WATSON,
            test_statistic=dw,
            p_value=float("nan"),
            significance_level=self.significance_level,
            test_description="First-order autocorrelation statistic (2 = none)"
        )

    def run_all(self, residuals: pd.Series, exog: Optional[pd.DataFrame] = None) -> Dict[str, DiagnosticResult]:
        """Run every applicable test and return results keyed by test type value."""
        resid = pd.Series(residuals).dropna()
        results: Dict[str, DiagnosticResult] = {}

        if len(resid) < 3:
            logger.warning("Residual diagnostics skipped: only %d residuals", len(resid))
            return results

        results[DiagnosticTest.LJUNG_BOX.value] = self.ljung_box_test(resid)
        results[DiagnosticTest.JARQUE_BERA.value] = self.jarque_bera_test(resid)
        results[DiagnosticTest.SHAPIRO_WILK.value] = self.shapiro_wilk_test(resid)
        results[DiagnosticTest.DURBIN_WATSON.value] = self.durbin_watson_statistic(resid)
        if exog is not None:
            results[DiagnosticTest.BREUSCH_PAGAN.value] = self.breusch_pagan_test(resid, exog.loc[resid.index])

        for result in results.values():
            logger.debug("%s: %s", result.test_name, result.interpretation)
        return results


def run_model_diagnostics(model, table: Optional[pd.DataFrame] = None,
                          significance_level: Optional[float] = None) -> Dict[str, DiagnosticResult]:
    """Run residual diagnostics for a fitted ``RegressionModel``.

    Parameters
    ----------
    model : RegressionModel
        Fitted model; its residuals are tested.
    table : pd.DataFrame, optional
        The aligned table the model was fitted on. When given, the
        Breusch-Pagan test is run against the model's predictors.
    significance_level : float, optional
        Overrides the configured significance level.

    Returns
    -------
    dict
        Results keyed by test name ('ljung_box', 'jarque_bera', ...).
    """
    exog = None
    if table is not None:
        key = model.residuals.index.name
        frame = table.set_index(key) if key in table.columns else table
        regressors = frame.loc[model.residuals.index, list(model.predictors)].astype(float)
        regressors.insert(0, 'const', 1.0)
        exog = regressors

    diagnostics = ResidualDiagnostics(significance_level=significance_level)
    return diagnostics.run_all(model.residuals, exog)
