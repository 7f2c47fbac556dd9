# gdp_decomposer_src/parsing_utils.py

from typing import List, Optional, Union
import logging

from .regression_utils import ALL_OTHER_NUMERIC
from .decomposition_utils import PERIODIC

logger = logging.getLogger(__name__)


def parse_predictors_arg(s: Optional[str]) -> Union[str, List[str]]:
    """
    Parse a CLI predictor argument into an explicit list or the 'all_other_numeric' marker.

    Parameters
    ----------
    s : str, optional
        Comma-separated column names, or 'all_other_numeric'. Empty means the marker.

    Returns
    -------
    Union[str, List[str]]
        The marker string or a list of unique column names in given order

    Examples
    --------
    >>> parse_predictors_arg("realcons, realinv")
    ['realcons', 'realinv']
    >>> parse_predictors_arg(None)
    'all_other_numeric'
    """
    txt = (s or "").strip()
    if not txt or txt.lower() == ALL_OTHER_NUMERIC:
        return ALL_OTHER_NUMERIC
    out: List[str] = []
    for part in txt.split(","):
        name = part.strip()
        if name and name not in out:
            out.append(name)
    return out or ALL_OTHER_NUMERIC


def parse_seasonal_window(s: Optional[Union[str, int]]) -> Optional[Union[str, int]]:
    """
    Parse the seasonal smoothing window: 'periodic' or an odd integer >= 3.

    Raises
    ------
    ValueError
        If the value is neither 'periodic' nor a valid odd integer
    """
    if s is None:
        return None
    if isinstance(s, int):
        value = s
    else:
        txt = str(s).strip().lower()
        if txt == PERIODIC:
            return PERIODIC
        try:
            value = int(txt)
        except ValueError:
            raise ValueError(f"Invalid seasonal window '{s}'. Use '{PERIODIC}' or an odd integer >= 3")
    if value < 3 or value % 2 == 0:
        raise ValueError(f"Seasonal window must be an odd integer >= 3, got {value}")
    return value


def validate_log_level(log_level: str) -> str:
    """
    Validate and normalize a logging level name.

    Parameters
    ----------
    log_level : str
        Logging level to validate

    Returns
    -------
    str
        Validated logging level

    Raises
    ------
    ValueError
        If the logging level is not supported
    """
    valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    level_upper = log_level.upper()
    if level_upper not in valid_levels:
        raise ValueError(f"Invalid log level '{log_level}'. Must be one of: {valid_levels}")
    return level_upper
