# gdp_decomposer_src/regression_utils.py

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd
import statsmodels.api as sm
from pandas.api.types import is_numeric_dtype

from .config_utils import get_config_value
from .errors import InsufficientDataError, SchemaError, SingularDesignError

logger = logging.getLogger(__name__)

ALL_OTHER_NUMERIC = "all_other_numeric"
DEFAULT_KEY_COLUMNS = ("date", "timestamp", "year", "quarter")
CONST = "const"


@dataclass(frozen=True)
class RegressionModel:
    """
    Fitted OLS model of one target column against an explicit predictor list.

    Coefficient, interval and residual accessors return copies.
    """

    target: str
    predictors: Tuple[str, ...]
    excluded_columns: Tuple[str, ...]
    _coefficients: pd.Series = field(repr=False)
    _std_errors: pd.Series = field(repr=False)
    _t_values: pd.Series = field(repr=False)
    _p_values: pd.Series = field(repr=False)
    _conf_int: pd.DataFrame = field(repr=False)
    r_squared: float
    adj_r_squared: float
    f_statistic: float
    f_pvalue: float
    aic: float
    bic: float
    n_obs: int
    excluded_rows: int
    df_resid: float
    condition_number: float
    _residuals: pd.Series = field(repr=False)
    _fitted_values: pd.Series = field(repr=False)

    @property
    def coefficients(self) -> pd.Series:
        return self._coefficients.copy()

    @property
    def std_errors(self) -> pd.Series:
        return self._std_errors.copy()

    @property
    def t_values(self) -> pd.Series:
        return self._t_values.copy()

    @property
    def p_values(self) -> pd.Series:
        return self._p_values.copy()

    @property
    def conf_int(self) -> pd.DataFrame:
        return self._conf_int.copy()

    @property
    def residuals(self) -> pd.Series:
        return self._residuals.copy()

    @property
    def fitted_values(self) -> pd.Series:
        return self._fitted_values.copy()

    @property
    def intercept(self) -> float:
        return float(self.coefficients[CONST])

    def coefficient_table(self) -> pd.DataFrame:
        """Coefficient, standard error, t, p and 95% interval per term (intercept first)."""
        return pd.DataFrame({
            "coef": self.coefficients,
            "std_err": self.std_errors,
            "t": self.t_values,
            "p_value": self.p_values,
            "ci_lower": self.conf_int["lower"],
            "ci_upper": self.conf_int["upper"],
        })

    def summary_dict(self) -> Dict[str, Any]:
        return {
            "target": self.target,
            "predictors": list(self.predictors),
            "n_obs": self.n_obs,
            "excluded_rows": self.excluded_rows,
            "r_squared": self.r_squared,
            "adj_r_squared": self.adj_r_squared,
            "f_statistic": self.f_statistic,
            "f_pvalue": self.f_pvalue,
            "aic": self.aic,
            "bic": self.bic,
            "condition_number": self.condition_number,
        }


def resolve_predictors(table: pd.DataFrame,
                       target: str,
                       predictors: Union[str, Sequence[str]] = ALL_OTHER_NUMERIC,
                       exclude: Iterable[str] = (),
                       key_columns: Optional[Sequence[str]] = None) -> Tuple[List[str], List[str]]:
    """
    Turn a predictor selection into a concrete, ordered column list.

    Parameters
    ----------
    table : pd.DataFrame
        Aligned table.
    target : str
        Target column.
    predictors : 'all_other_numeric' or Sequence[str]
        Either an explicit list (validated, order kept) or 'all_other_numeric':
        every numeric column except the target, key/identifier columns and
        anything in ``exclude``, in table order.
    exclude : Iterable[str]
        Extra columns never selected by 'all_other_numeric'.
    key_columns : Sequence[str], optional
        Key/identifier columns (default from ``regression.key_columns``).

    Returns
    -------
    Tuple[List[str], List[str]]
        (selected predictors, columns left out of the selection and why they
        were not considered, i.e. keys, exclusions and non-numeric columns)
    """
    if key_columns is None:
        key_columns = get_config_value("regression.key_columns", list(DEFAULT_KEY_COLUMNS))
    keys = set(key_columns)
    exclude = set(exclude)

    if target not in table.columns:
        raise SchemaError(f"Target column '{target}' is not in the table", columns=(target,))
    if not is_numeric_dtype(table[target]):
        raise SchemaError(f"Target column '{target}' is not numeric", columns=(target,))

    if isinstance(predictors, str):
        if predictors != ALL_OTHER_NUMERIC:
            raise ValueError(f"predictors must be a list of columns or '{ALL_OTHER_NUMERIC}', got '{predictors}'")
        selected, left_out = [], []
        for col in table.columns:
            if col == target:
                continue
            if col in keys or col in exclude or not is_numeric_dtype(table[col]) or table[col].dtype == bool:
                left_out.append(col)
            else:
                selected.append(col)
    else:
        selected = list(predictors)
        missing = [c for c in selected if c not in table.columns]
        if missing:
            raise SchemaError(f"Predictor column(s) not in the table: {missing}", columns=missing)
        if target in selected:
            raise SchemaError(f"Target '{target}' cannot also be a predictor", columns=(target,))
        if len(set(selected)) != len(selected):
            raise SchemaError(f"Predictor list has duplicates: {selected}", columns=selected)
        non_numeric = [c for c in selected if not is_numeric_dtype(table[c]) or table[c].dtype == bool]
        if non_numeric:
            raise SchemaError(f"Predictor column(s) are not numeric: {non_numeric}", columns=non_numeric)
        left_out = [c for c in table.columns if c != target and c not in selected]

    if not selected:
        raise ValueError(f"No predictor columns remain for target '{target}'")

    return selected, left_out


def _check_design_rank(design: pd.DataFrame, max_condition: float) -> float:
    """
    Reject rank-deficient or nearly collinear designs.

    Columns are scaled to unit length before the SVD so that the rank
    tolerance and condition number do not depend on the units of each series.
    Returns the scaled condition number.
    """
    X = design.to_numpy(dtype=float)
    norms = np.linalg.norm(X, axis=0)
    zero_cols = [design.columns[i] for i in np.flatnonzero(norms == 0)]
    if zero_cols:
        raise SingularDesignError(
            f"Design has all-zero column(s) {zero_cols}", columns=zero_cols, condition_number=float("inf"),
        )

    scaled = X / norms
    singular_values = np.linalg.svd(scaled, compute_uv=False)
    rank = np.linalg.matrix_rank(scaled)
    cond = float(singular_values[0] / singular_values[-1]) if singular_values[-1] > 0 else float("inf")

    if rank < X.shape[1] or cond > max_condition:
        # Columns carrying weight in the weakest direction are the collinear ones
        _, _, vt = np.linalg.svd(scaled, full_matrices=False)
        weakest = np.abs(vt[-1])
        involved = [design.columns[i] for i in np.flatnonzero(weakest > 0.1 * weakest.max())]
        raise SingularDesignError(
            f"Predictor matrix (with intercept) is rank-deficient or nearly collinear "
            f"(rank {rank} of {X.shape[1]}, scaled condition number {cond:.3g}); "
            f"collinear columns: {involved}",
            columns=involved,
            condition_number=cond,
        )
    return cond


def fit(table: pd.DataFrame,
        target: str,
        predictors: Union[str, Sequence[str]] = ALL_OTHER_NUMERIC,
        exclude: Iterable[str] = (),
        key_columns: Optional[Sequence[str]] = None,
        key: Optional[str] = None) -> RegressionModel:
    """
    Fit an ordinary-least-squares model of ``target`` on the selected predictors.

    A straight linear fit with an intercept: no transformations, interactions
    or regularisation. Rows with a missing target or predictor value are
    excluded (complete-case analysis) and counted.

    Parameters
    ----------
    table : pd.DataFrame
        Aligned table (one row per timestamp).
    target : str
        Column to explain.
    predictors : 'all_other_numeric' or Sequence[str], default 'all_other_numeric'
        Explicit predictor list, or every remaining numeric column except keys
        and ``exclude``; the selection is resolved once and recorded.
    exclude : Iterable[str]
        Columns never picked up by 'all_other_numeric'.
    key_columns : Sequence[str], optional
        Key/identifier columns excluded by convention.
    key : str, optional
        Timestamp column used to index residuals (default from ``alignment.key``).

    Returns
    -------
    RegressionModel

    Raises
    ------
    SchemaError
        Missing or non-numeric target/predictor columns.
    InsufficientDataError
        Fewer complete rows than parameters + 1.
    SingularDesignError
        Rank-deficient or nearly collinear design (intercept included).
    """
    key = key or get_config_value("alignment.key", "date")
    selected, left_out = resolve_predictors(table, target, predictors, exclude, key_columns)
    logger.info("Regressing '%s' on %d predictor(s): %s", target, len(selected), selected)
    if left_out:
        logger.debug("Columns not used as predictors: %s", left_out)

    used = table[[target] + selected]
    complete = used.notna().all(axis=1)
    excluded_rows = int((~complete).sum())
    data = used.loc[complete]

    n_params = len(selected) + 1
    if len(data) < n_params + 1:
        raise InsufficientDataError(
            f"Only {len(data)} complete rows for {n_params} parameters "
            f"({excluded_rows} row(s) excluded for missing values)",
            required=n_params + 1,
            available=len(data),
        )

    if key in table.columns:
        row_index = pd.Index(table.loc[complete, key], name=key)
    else:
        row_index = data.index

    y = pd.Series(data[target].to_numpy(dtype=float), index=row_index, name=target)
    X = pd.DataFrame(data[selected].to_numpy(dtype=float), index=row_index, columns=selected)
    design = sm.add_constant(X, has_constant="add")

    max_condition = float(get_config_value("regression.max_condition_number", 1e10))
    cond = _check_design_rank(design, max_condition)

    results = sm.OLS(y, design).fit()
    ci = results.conf_int()
    ci.columns = ["lower", "upper"]

    model = RegressionModel(
        target=target,
        predictors=tuple(selected),
        excluded_columns=tuple(left_out),
        _coefficients=results.params.copy(),
        _std_errors=results.bse.copy(),
        _t_values=results.tvalues.copy(),
        _p_values=results.pvalues.copy(),
        _conf_int=ci,
        r_squared=float(results.rsquared),
        adj_r_squared=float(results.rsquared_adj),
        f_statistic=float(results.fvalue),
        f_pvalue=float(results.f_pvalue),
        aic=float(results.aic),
        bic=float(results.bic),
        n_obs=int(results.nobs),
        excluded_rows=excluded_rows,
        df_resid=float(results.df_resid),
        condition_number=cond,
        _residuals=results.resid.rename("residual"),
        _fitted_values=results.fittedvalues.rename("fitted"),
    )

    logger.info(
        "OLS fit for '%s': n=%d (excluded %d), R2=%.4f, adj R2=%.4f",
        target, model.n_obs, excluded_rows, model.r_squared, model.adj_r_squared,
    )
    return model
