import numpy as np
import pandas as pd

import pytest

from gdp_decomposer_src.adjustment_utils import component_columns
from gdp_decomposer_src.data_utils import default_macro_inputs
from gdp_decomposer_src.errors import GapError, SchemaError
from gdp_decomposer_src.workflow_utils import align_with_drivers, run_decomposition_workflow


def _quarterly(values, name, start):
    idx = pd.date_range(start, periods=len(values), freq="QE", name="date")
    return pd.Series(values, index=idx, name=name, dtype=float)


@pytest.fixture
def inputs():
    rng = np.random.default_rng(2024)
    t = np.arange(44)
    # cons starts a year before gdp; inv ends a year early
    cons = _quarterly(60 + 0.3 * t + rng.normal(0, 0.5, 44), "cons", "1999-03-31")
    inv = _quarterly(20 + rng.normal(0, 1.0, 36), "inv", "2000-03-31")
    seasonal = np.array([1.5, -0.5, -1.5, 0.5])
    g = np.arange(40)
    gdp = _quarterly(
        10 + 1.2 * cons.to_numpy()[4:] + 0.4 * np.r_[inv.to_numpy(), np.zeros(4)]
        + seasonal[g % 4] + rng.normal(0, 0.2, 40),
        "gdp", "2000-03-31",
    )
    return gdp, [inv, cons]


def test_workflow_end_to_end(inputs):
    gdp, drivers = inputs

    result = run_decomposition_workflow(gdp, drivers)

    # Outer first merge with the earliest driver (cons) spans 1999Q1..2009Q4
    assert len(result.aligned) == 44
    assert result.aligned["date"].iloc[0] == pd.Timestamp("1999-03-31")
    assert result.aligned["gdp"].isna().sum() == 4
    assert result.aligned["inv"].isna().sum() == 8

    model = result.model
    assert model.target == "gdp"
    assert set(model.predictors) == {"cons", "inv"}
    assert set(component_columns("gdp")) <= set(model.excluded_columns)
    assert model.n_obs == 36
    assert model.excluded_rows == 8
    assert model.coefficients["cons"] == pytest.approx(1.2, abs=0.2)

    assert len(result.components) == 40
    assert result.decomposition.identity_error() < 1e-9
    assert "breusch_pagan" in result.diagnostics
    assert result.validation.is_valid


def test_workflow_can_explain_the_random_component(inputs):
    gdp, drivers = inputs

    result = run_decomposition_workflow(gdp, drivers, target="gdp_random", run_diagnostics=False)

    assert result.model.target == "gdp_random"
    assert set(result.model.predictors) == {"cons", "inv"}
    assert result.diagnostics == {}


def test_workflow_with_explicit_predictors(inputs):
    gdp, drivers = inputs

    result = run_decomposition_workflow(gdp, drivers, predictors=["cons"])

    assert result.model.predictors == ("cons",)
    assert result.model.n_obs == 40


def test_driver_led_alignment_keeps_driver_range(inputs):
    gdp, drivers = inputs
    result = run_decomposition_workflow(gdp, drivers, run_diagnostics=False)

    aligned = align_with_drivers(result.components, drivers, first_how="left")

    assert len(aligned) == 44
    assert aligned.columns.tolist() == ["date", "gdp"] + component_columns("gdp") + ["cons", "inv"]


def test_inner_first_merge_restricts_to_common_range(inputs):
    gdp, drivers = inputs
    result = run_decomposition_workflow(gdp, drivers, run_diagnostics=False)

    aligned = align_with_drivers(result.components, drivers, first_how="inner")

    assert len(aligned) == 40


def test_workflow_rejects_gaps_in_primary(inputs):
    gdp, drivers = inputs
    gdp = gdp.copy()
    gdp.iloc[10] = np.nan

    with pytest.raises(GapError):
        run_decomposition_workflow(gdp, drivers)


def test_workflow_rejects_clashing_driver_name(inputs):
    gdp, drivers = inputs
    clash = drivers[1].rename("gdp_trend")

    with pytest.raises(SchemaError) as exc:
        run_decomposition_workflow(gdp, [drivers[0], clash])
    assert "gdp_trend" in exc.value.columns


def test_workflow_requires_drivers(inputs):
    gdp, _ = inputs
    with pytest.raises(ValueError):
        run_decomposition_workflow(gdp, [])


def test_workflow_on_us_macro_data():
    primary, drivers = default_macro_inputs()

    result = run_decomposition_workflow(primary, drivers)

    assert len(result.aligned) == 203
    assert result.model.n_obs == 203
    assert set(result.model.predictors) == {"realcons", "realinv", "realgovt", "unemp"}
    assert result.model.r_squared > 0.99
