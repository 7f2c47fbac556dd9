import numpy as np
import pandas as pd

import pytest

from gdp_decomposer_src.adjustment_utils import adjust, component_columns, components_table
from gdp_decomposer_src.decomposition_utils import decompose
from gdp_decomposer_src.errors import AlignmentError


@pytest.fixture
def gdp():
    rng = np.random.default_rng(11)
    t = np.arange(24)
    values = 50 + 0.8 * t + np.array([2.0, -1.0, -2.0, 1.0])[t % 4] + rng.normal(0, 0.3, 24)
    idx = pd.date_range("1990-03-31", periods=24, freq="QE", name="date")
    return pd.Series(values, index=idx, name="gdp")


def test_detrended_is_seasonal_plus_remainder(gdp):
    res = decompose(gdp, 4)

    detrended = adjust(gdp, res, "trend")

    assert detrended.name == "gdp_detrended"
    np.testing.assert_allclose(detrended.to_numpy(), (res.seasonal + res.remainder).to_numpy(), atol=1e-9)


def test_random_is_remainder(gdp):
    res = decompose(gdp, 4)

    random = adjust(gdp, res, "trend_and_seasonal")

    assert random.name == "gdp_random"
    pd.testing.assert_series_equal(random, adjust(gdp, res, "trend") - res.seasonal, check_names=False, check_freq=False)
    np.testing.assert_allclose(random.to_numpy(), res.remainder.to_numpy(), atol=1e-9)
    assert random.index.equals(gdp.index)


def test_unknown_mode_is_rejected(gdp):
    res = decompose(gdp, 4)
    with pytest.raises(ValueError):
        adjust(gdp, res, "seasonal")


def test_misaligned_series_is_rejected(gdp):
    res = decompose(gdp, 4)

    with pytest.raises(AlignmentError) as exc:
        adjust(gdp.iloc[:-1], res, "trend")
    assert exc.value.expected == 24
    assert exc.value.actual == 23

    shifted = gdp.copy()
    shifted.index = shifted.index + pd.offsets.QuarterEnd(1)
    with pytest.raises(AlignmentError):
        adjust(shifted, res, "trend")


def test_components_table_layout(gdp):
    res = decompose(gdp, 4)

    table = components_table(gdp, res)

    assert table.columns.tolist() == ["date", "gdp"] + component_columns("gdp")
    assert component_columns("gdp") == [
        "gdp_seasonal", "gdp_trend", "gdp_remainder", "gdp_detrended", "gdp_random"
    ]
    assert len(table) == 24
    assert table["date"].tolist() == list(gdp.index)
    np.testing.assert_allclose(
        (table["gdp_seasonal"] + table["gdp_trend"] + table["gdp_remainder"]).to_numpy(),
        table["gdp"].to_numpy(),
        atol=1e-9,
    )
    np.testing.assert_allclose(table["gdp_random"].to_numpy(), table["gdp_remainder"].to_numpy(), atol=1e-9)
