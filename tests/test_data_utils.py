import numpy as np
import pandas as pd

import pytest

from gdp_decomposer_src.data_utils import (
    load_macro_data, load_monthly_series_csv, load_series_csv, macro_series
)


def test_load_series_csv_restamps_to_quarter_end(tmp_path):
    path = tmp_path / "gdp.csv"
    path.write_text("date,gdp\n2020-01-01,100\n2020-04-01,\n2020-07-01,102.5\n", encoding="utf-8")

    s = load_series_csv(path)

    assert s.name == "gdp"
    assert list(s.index) == list(pd.date_range("2020-03-31", periods=3, freq="QE"))
    assert s.index.name == "date"
    # Empty cells stay as missing values
    assert np.isnan(s.iloc[1])
    assert s.iloc[2] == pytest.approx(102.5)


def test_load_series_csv_sorts_and_drops_unparseable_dates(tmp_path):
    path = tmp_path / "cons.csv"
    path.write_text("date,value\n2020-06-30,2\nnot-a-date,9\n2020-03-31,1\n", encoding="utf-8")

    s = load_series_csv(path, name="cons", quarter_end=False)

    assert s.name == "cons"
    assert s.tolist() == [1.0, 2.0]


def test_load_series_csv_errors(tmp_path):
    with pytest.raises(SystemExit):
        load_series_csv(tmp_path / "absent.csv")

    wide = tmp_path / "wide.csv"
    wide.write_text("date,a,b\n2020-03-31,1,2\n", encoding="utf-8")
    with pytest.raises(SystemExit):
        load_series_csv(wide)
    assert load_series_csv(wide, value_column="b").tolist() == [2.0]

    nodate = tmp_path / "nodate.csv"
    nodate.write_text("when,a\n2020-03-31,1\n", encoding="utf-8")
    with pytest.raises(SystemExit):
        load_series_csv(nodate)


def test_load_monthly_series_csv_averages_quarters(tmp_path):
    path = tmp_path / "pmi.csv"
    rows = ["date,pmi"] + [f"2021-{m:02d}-01,{v}" for m, v in zip(range(1, 7), [50, 52, 54, 48, 48, 51])]
    path.write_text("\n".join(rows) + "\n", encoding="utf-8")

    s = load_monthly_series_csv(path)

    assert s.name == "pmi"
    assert list(s.index) == [pd.Timestamp("2021-03-31"), pd.Timestamp("2021-06-30")]
    assert s.tolist() == pytest.approx([52.0, 49.0])


def test_macro_series_from_statsmodels_dataset(tmp_path):
    cache = tmp_path / "data" / "us_macro_quarterly.csv"
    df = load_macro_data(cache)

    assert cache.is_file()
    s = macro_series(df, "realgdp")

    assert len(s) == 203
    assert s.index[0] == pd.Timestamp("1959-03-31")
    assert s.index[-1] == pd.Timestamp("2009-09-30")
    # Second call reads the cached CSV
    assert len(load_macro_data(cache)) == 203

    with pytest.raises(SystemExit):
        macro_series(df, "no_such_column")
