import numpy as np
import pandas as pd

import pytest

from gdp_decomposer_src.errors import EmptyInputError, SchemaError
from gdp_decomposer_src.series_utils import (
    find_internal_gaps, first_valid_timestamp, make_series, series_from_frame, series_summary,
    trim_missing
)


def test_make_series_builds_float_series_with_date_index():
    s = make_series([1, 2, None], ["2000-03-31", "2000-06-30", "2000-09-30"], "gdp")

    assert s.name == "gdp"
    assert s.dtype == float
    assert s.index.name == "date"
    assert isinstance(s.index, pd.DatetimeIndex)
    assert np.isnan(s.iloc[2])


def test_make_series_rejects_bad_inputs():
    with pytest.raises(EmptyInputError):
        make_series([], [], "gdp")
    with pytest.raises(SchemaError):
        make_series([1.0, 2.0], ["2000-03-31"], "gdp")
    with pytest.raises(SchemaError, match="duplicate"):
        make_series([1.0, 2.0], ["2000-03-31", "2000-03-31"], "gdp")
    with pytest.raises(SchemaError, match="not increasing"):
        make_series([1.0, 2.0], ["2000-06-30", "2000-03-31"], "gdp")
    with pytest.raises(SchemaError, match="non-numeric"):
        make_series(["a", 2.0], ["2000-03-31", "2000-06-30"], "gdp")


def test_series_from_frame_infers_single_value_column():
    df = pd.DataFrame({"date": ["2000-03-31", "2000-06-30"], "cons": [1.0, 2.0]})
    s = series_from_frame(df)
    assert s.name == "cons"
    assert s.tolist() == [1.0, 2.0]

    df["inv"] = [3.0, 4.0]
    with pytest.raises(SchemaError):
        series_from_frame(df)
    assert series_from_frame(df, value_column="inv", name="investment").name == "investment"


def test_trim_missing_keeps_interior_nan():
    idx = pd.date_range("2000-03-31", periods=5, freq="QE")
    s = pd.Series([np.nan, 1.0, np.nan, 2.0, np.nan], index=idx, name="gdp")

    out = trim_missing(s)

    assert len(out) == 3
    assert out.index[0] == idx[1]
    assert np.isnan(out.iloc[1])


def test_find_internal_gaps_reports_nan_and_absent_quarters():
    idx = pd.DatetimeIndex(["2000-03-31", "2000-06-30", "2000-12-31", "2001-03-31"])
    s = pd.Series([1.0, np.nan, 3.0, 4.0], index=idx, name="gdp")

    gaps = find_internal_gaps(s, frequency=4)

    assert gaps == [pd.Timestamp("2000-06-30"), pd.Timestamp("2000-09-30")]
    # Without a calendar frequency only NaN are reported
    assert find_internal_gaps(s) == [pd.Timestamp("2000-06-30")]


def test_series_summary():
    s = make_series([1.0, 3.0, None], pd.date_range("2000-03-31", periods=3, freq="QE"), "gdp")
    summary = series_summary(s)
    assert summary["rows"] == 3
    assert summary["missing"] == 1
    assert summary["start"] == "2000-03-31"
    assert summary["mean"] == pytest.approx(2.0)


def test_first_valid_timestamp_skips_leading_missing():
    s = make_series([None, None, 4.0], pd.date_range("2000-03-31", periods=3, freq="QE"), "gdp")
    assert first_valid_timestamp(s) == pd.Timestamp("2000-09-30")
    assert first_valid_timestamp(make_series([None], ["2000-03-31"], "gdp")) is None
