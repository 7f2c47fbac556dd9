"""Residual diagnostics for GDP decomposer driver models.

This package provides model checks on the residuals of fitted OLS
models:
- Serial correlation (Ljung-Box, Durbin-Watson)
- Normality (Jarque-Bera, Shapiro-Wilk)
- Heteroskedasticity against the regressors (Breusch-Pagan)
"""

from .residual_diagnostics import (
    ResidualDiagnostics,
    DiagnosticResult,
    DiagnosticTest,
    run_model_diagnostics
)

__all__ = [
    'ResidualDiagnostics',
    'DiagnosticResult',
    'DiagnosticTest',
    'run_model_diagnostics'
]

# Version info
__version__ = '1.0.0'
