# gdp_decomposer_src/decomposition_utils.py

import logging
from dataclasses import dataclass, field
from typing import Optional, Union

import numpy as np
import pandas as pd
from statsmodels.tsa.seasonal import STL

from .config_utils import get_config_value
from .errors import GapError, InsufficientDataError
from .series_utils import find_internal_gaps, trim_missing, validate_series

logger = logging.getLogger(__name__)

PERIODIC = "periodic"


@dataclass(frozen=True)
class DecompositionResult:
    """
    Seasonal-trend decomposition of one series.

    All four series share the index of the trimmed, gap-free input, so that
    ``seasonal + trend + remainder == observed`` holds index by index.
    The component accessors return copies; writing into one leaves the
    result unchanged.
    """

    name: str
    _observed: pd.Series = field(repr=False)
    _seasonal: pd.Series = field(repr=False)
    _trend: pd.Series = field(repr=False)
    _remainder: pd.Series = field(repr=False)
    frequency: int
    seasonal_window: Union[str, int]
    robust: bool
    inner_iter: int

    @property
    def observed(self) -> pd.Series:
        return self._observed.copy()

    @property
    def seasonal(self) -> pd.Series:
        return self._seasonal.copy()

    @property
    def trend(self) -> pd.Series:
        return self._trend.copy()

    @property
    def remainder(self) -> pd.Series:
        return self._remainder.copy()

    @property
    def index(self) -> pd.DatetimeIndex:
        return self._observed.index

    def __len__(self) -> int:
        return len(self._observed)

    def identity_error(self) -> float:
        """Largest absolute deviation of ``seasonal + trend + remainder`` from the input."""
        recon = self.seasonal + self.trend + self.remainder
        return float(np.max(np.abs(recon.to_numpy() - self.observed.to_numpy())))

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame({
            "observed": self.observed,
            "seasonal": self.seasonal,
            "trend": self.trend,
            "remainder": self.remainder,
        })


def _resolve_seasonal_window(seasonal_window: Union[str, int], nobs: int):
    """
    Map the seasonal window option onto STL's (seasonal, seasonal_deg).

    'periodic' uses a window far wider than the data with degree-0 loess, which
    makes each cycle-subseries smoother a (weighted) mean.
    """
    if seasonal_window == PERIODIC:
        return 10 * nobs + 1, 0

    try:
        window = int(seasonal_window)
    except (TypeError, ValueError):
        raise ValueError(f"seasonal_window must be '{PERIODIC}' or an odd integer >= 3, got {seasonal_window!r}")
    if window < 3 or window % 2 == 0:
        raise ValueError(f"seasonal_window must be an odd integer >= 3, got {window}")
    return window, int(get_config_value("decomposition.seasonal_degree", 1))


def _periodic_means(seasonal: np.ndarray, frequency: int) -> np.ndarray:
    """Replace each value by the mean of its phase so the pattern repeats exactly."""
    phase = np.arange(len(seasonal)) % frequency
    means = pd.Series(seasonal).groupby(phase).mean().to_numpy()
    return means[phase]


def _fit_until_stable(values: np.ndarray, frequency: int, seasonal: int, seasonal_deg: int,
                      robust: bool, inner_iter: int, max_inner_iter: int, tol: float):
    """
    Refit STL with doubling inner iterations until trend and seasonal settle.

    Returns the last STL result and the inner iteration count it used.
    """
    scale = max(float(np.max(np.abs(values))), 1.0)
    outer_iter = 15 if robust else 0
    previous = None
    current = inner_iter

    while True:
        res = STL(
            values,
            period=frequency,
            seasonal=seasonal,
            seasonal_deg=seasonal_deg,
            robust=robust,
        ).fit(inner_iter=current, outer_iter=outer_iter)

        if previous is not None:
            delta = max(
                float(np.max(np.abs(res.trend - previous.trend))),
                float(np.max(np.abs(res.seasonal - previous.seasonal))),
            )
            logger.debug("STL inner_iter=%d: max change %.3e", current, delta)
            if delta <= tol * scale:
                return res, current

        if current >= max_inner_iter:
            logger.warning(
                "STL did not stabilise within %d inner iterations (tolerance %.1e); using last estimate",
                current, tol,
            )
            return res, current

        previous = res
        current = min(current * 2, max_inner_iter)


def decompose(series: pd.Series,
              frequency: Optional[int] = None,
              seasonal_window: Optional[Union[str, int]] = None,
              robust: Optional[bool] = None) -> DecompositionResult:
    """
    Split a series into seasonal, trend and remainder components with STL.

    The decomposition is loess based: a smooth trend and a per-phase seasonal
    pattern are estimated alternately until both stop changing. In 'periodic'
    mode the seasonal shape is one constant pattern per phase across the whole
    span; the remainder is ``value - trend - seasonal``.

    Parameters
    ----------
    series : pd.Series
        Time-indexed numeric series. Leading/trailing NaN are trimmed; NaN or
        missing periods inside the observed span are rejected.
    frequency : int, optional
        Observations per seasonal cycle (default from config, 4 = quarterly).
    seasonal_window : 'periodic' or odd int, optional
        Seasonal smoother span; 'periodic' fixes the pattern (default from config).
    robust : bool, optional
        Use robustness weights against outliers (default from config, False).

    Returns
    -------
    DecompositionResult
        Components indexed like the trimmed input.

    Raises
    ------
    ValueError
        If ``frequency`` < 2 or ``seasonal_window`` is invalid.
    GapError
        If the series has gaps inside its observed span.
    InsufficientDataError
        If fewer than two full seasonal cycles are available.

    Examples
    --------
    >>> idx = pd.date_range("2000-03-31", periods=8, freq="QE")
    >>> s = pd.Series([2., 1., 4., 3., 6., 5., 8., 7.], index=idx, name="gdp")
    >>> decompose(s, 4).seasonal.round(3).tolist()  # doctest: +SKIP
    [1.0, -1.0, 1.0, -1.0, 1.0, -1.0, 1.0, -1.0]
    """
    frequency = int(frequency if frequency is not None else get_config_value("decomposition.frequency", 4))
    if seasonal_window is None:
        seasonal_window = get_config_value("decomposition.seasonal_window", PERIODIC)
    if robust is None:
        robust = bool(get_config_value("decomposition.robust", False))
    if frequency < 2:
        raise ValueError(f"frequency must be >= 2 for seasonal decomposition, got {frequency}")

    validate_series(series)
    name = str(series.name)

    gaps = find_internal_gaps(series, frequency)
    if gaps:
        shown = [g.date().isoformat() for g in gaps[:5]]
        raise GapError(
            f"Series '{name}' has {len(gaps)} gap(s) inside its observed span (first: {shown}); "
            "decomposition needs a contiguous block",
            series=name,
            gaps=gaps,
        )

    observed = trim_missing(series).astype(float)
    if len(observed) < len(series):
        logger.debug("Trimmed %d leading/trailing missing values from '%s'", len(series) - len(observed), name)

    required = 2 * frequency
    if len(observed) < required:
        raise InsufficientDataError(
            f"Series '{name}' has {len(observed)} observations; at least {required} "
            f"(two full cycles of {frequency}) are required",
            required=required,
            available=len(observed),
        )

    values = observed.to_numpy()
    seasonal_span, seasonal_deg = _resolve_seasonal_window(seasonal_window, len(values))

    res, used_iter = _fit_until_stable(
        values,
        frequency,
        seasonal_span,
        seasonal_deg,
        robust,
        inner_iter=int(get_config_value("decomposition.inner_iter", 5)),
        max_inner_iter=int(get_config_value("decomposition.max_inner_iter", 640)),
        tol=float(get_config_value("decomposition.convergence_tol", 1e-9)),
    )

    trend = np.asarray(res.trend, dtype=float)
    seasonal = np.asarray(res.seasonal, dtype=float)
    if seasonal_window == PERIODIC:
        seasonal = _periodic_means(seasonal, frequency)
    remainder = values - trend - seasonal

    idx = observed.index
    result = DecompositionResult(
        name=name,
        _observed=observed.copy(),
        _seasonal=pd.Series(seasonal, index=idx, name=f"{name}_seasonal"),
        _trend=pd.Series(trend, index=idx, name=f"{name}_trend"),
        _remainder=pd.Series(remainder, index=idx, name=f"{name}_remainder"),
        frequency=frequency,
        seasonal_window=seasonal_window,
        robust=robust,
        inner_iter=used_iter,
    )

    logger.info(
        "Decomposed '%s' (%d obs, frequency=%d, seasonal=%s, inner_iter=%d)",
        name, len(idx), frequency, seasonal_window, used_iter,
    )
    return result
