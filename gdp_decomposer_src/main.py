# gdp_decomposer_src/main.py

"""
Seasonal-trend decomposition of quarterly GDP and regression against drivers.

Purpose
-------
- Load a primary quarterly series (from CSV, or realgdp from statsmodels.macrodata)
- Split it into seasonal, trend and remainder components with STL
- Align the components with exogenous driver series on the date key
- Fit an OLS model of the target column against the drivers and run residual diagnostics
- Write components, the aligned table and the coefficient table as CSV

Configuration-Driven Workflow
-----------------------------
Decomposition, alignment and regression settings are managed via YAML
configuration files in the config/ directory. CLI arguments override
configuration values where applicable.
"""

import argparse
import logging
import sys
import warnings
from pathlib import Path
from typing import List, Optional

import pandas as pd

from .config_utils import initialize_config, get_config_value
from .data_utils import default_macro_inputs, load_monthly_series_csv, load_series_csv
from .errors import DecompositionPipelineError
from .file_utils import resolve_path, write_coefficients_csv, write_summary_json, write_table_csv
from .parsing_utils import parse_predictors_arg, parse_seasonal_window, validate_log_level
from .workflow_utils import WorkflowResult, run_decomposition_workflow

logger = logging.getLogger(__name__)


def export_results(result: WorkflowResult, out_dir: Path) -> None:
    """
    Write the workflow outputs to ``out_dir``.

    Files
    -----
    components.csv, aligned.csv, coefficients.csv, model_summary.json
    """
    key = get_config_value("alignment.key", "date")
    write_table_csv(result.components, out_dir / "components.csv", key=key)
    write_table_csv(result.aligned, out_dir / "aligned.csv", key=key)
    write_coefficients_csv(result.model, out_dir / "coefficients.csv")

    summary = result.model.summary_dict()
    summary["diagnostics"] = {
        name: {"statistic": d.test_statistic, "p_value": d.p_value, "interpretation": d.interpretation}
        for name, d in result.diagnostics.items()
    }
    summary["validation"] = result.validation.summary()
    write_summary_json(summary, out_dir / "model_summary.json")


def log_model(result: WorkflowResult) -> None:
    model = result.model
    logger.info("Target '%s' on %s: n=%d (excluded %d rows), R^2=%.3f, adj. R^2=%.3f",
                model.target, list(model.predictors), model.n_obs, model.excluded_rows,
                model.r_squared, model.adj_r_squared)
    for term, row in model.coefficient_table().iterrows():
        logger.info("  %-20s coef=% .4f  se=%.4f  p=%.3f", term, row["coef"], row["std_err"], row["p_value"])
    for name, diag in result.diagnostics.items():
        logger.info("  %s: %s", name, diag.interpretation)


def load_inputs(args: argparse.Namespace, base_dir: Path):
    """
    Build the primary series and driver list from CLI arguments.

    Without --primary-csv (or with --default-run) the macro dataset supplies
    the primary series and the configured driver columns.
    """
    date_column = get_config_value("data.date_column", "date")

    if args.default_run or not args.primary_csv:
        primary_name = get_config_value("data.default_primary", "realgdp")
        driver_names = get_config_value("data.default_drivers", ["realcons", "realinv", "realgovt", "unemp"])
        data_path = resolve_path(args.data, base_dir) if args.data else None
        primary, drivers = default_macro_inputs(primary_name, list(driver_names), data_path)
        logger.info("Default run on macro dataset: primary '%s', drivers %s", primary_name, driver_names)
    else:
        primary = load_series_csv(resolve_path(args.primary_csv, base_dir), date_column=date_column)
        drivers = []

    drivers = list(drivers)
    for path in args.driver_csv or []:
        drivers.append(load_series_csv(resolve_path(path, base_dir), date_column=date_column))
    for path in args.monthly_driver_csv or []:
        drivers.append(load_monthly_series_csv(resolve_path(path, base_dir), date_column=date_column))

    if not drivers:
        raise SystemExit("No driver series given; pass --driver-csv or --monthly-driver-csv.")
    return primary, drivers


def setup_cli_parser() -> argparse.ArgumentParser:
    """
    Set up the command-line argument parser.

    Returns
    -------
    argparse.ArgumentParser
        Configured argument parser
    """
    parser = argparse.ArgumentParser(
        description="STL decomposition of a quarterly series and OLS regression against driver series."
    )

    # Inputs
    parser.add_argument(
        "--primary-csv", type=str, default=None,
        help="CSV with columns 'date' and one value column: the series to decompose."
    )
    parser.add_argument(
        "--driver-csv", type=str, action="append", default=None,
        help="Quarterly driver CSV ('date' + one value column). Repeatable."
    )
    parser.add_argument(
        "--monthly-driver-csv", type=str, action="append", default=None,
        help="Monthly driver CSV, averaged to quarters before alignment. Repeatable."
    )
    parser.add_argument(
        "--data", type=str, default=None,
        help="Macro dataset CSV for --default-run. If missing, it is created from statsmodels.macrodata."
    )
    parser.add_argument(
        "--default-run", action="store_true",
        help="Decompose realgdp from statsmodels.macrodata and regress it on the configured drivers."
    )
    parser.add_argument(
        "--config", type=str, default=None,
        help="YAML file overriding config/defaults.yaml."
    )

    # Decomposition
    parser.add_argument(
        "--frequency", type=int, default=None,
        help="Observations per seasonal cycle. Uses config default (4) if not specified."
    )
    parser.add_argument(
        "--seasonal-window", type=str, default=None,
        help="'periodic' or an odd integer seasonal smoother span. Uses config default if not specified."
    )
    parser.add_argument(
        "--robust", action="store_true", default=None,
        help="Use robust STL fitting (downweights outliers)."
    )

    # Regression
    parser.add_argument(
        "--target", type=str, default=None,
        help="Column to explain, e.g. 'realgdp' or 'realgdp_random'. Defaults to the primary series."
    )
    parser.add_argument(
        "--predictors", type=str, default=None,
        help="Comma-separated predictor columns, or 'all_other_numeric' (default)."
    )

    # Output
    parser.add_argument(
        "--out-dir", type=str, default=None,
        help="Directory to write components.csv, aligned.csv and coefficients.csv."
    )
    parser.add_argument(
        "--log-level", type=str, default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging verbosity level."
    )

    return parser


def setup_logging(log_level: str) -> None:
    """
    Configure logging with specified level and warning filters.

    Parameters
    ----------
    log_level : str
        Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    level = validate_log_level(log_level)
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format=get_config_value("logging.format", "%(asctime)s %(levelname)s %(name)s - %(message)s"),
        datefmt=get_config_value("logging.datefmt", "%H:%M:%S"),
    )

    # Configure warnings based on log level
    if level == "DEBUG":
        warnings.resetwarnings()
        warnings.filterwarnings("default")
    else:
        from statsmodels.tools.sm_exceptions import ConvergenceWarning
        warnings.filterwarnings("ignore", category=ConvergenceWarning)
        warnings.filterwarnings("ignore", category=FutureWarning)
        warnings.filterwarnings("ignore", category=UserWarning, module="statsmodels")


def main(argv: Optional[List[str]] = None) -> None:
    """
    Main entry point for the GDP decomposer.

    Exits with status 1 when the pipeline rejects its inputs.
    """
    parser = setup_cli_parser()
    args = parser.parse_args(argv)

    # Initialize configuration before logging so the log format can come from it
    initialize_config(args.config)
    setup_logging(args.log_level)

    base_dir = Path.cwd()
    frequency = int(get_config_value("decomposition.frequency", 4, args, "frequency"))
    robust = bool(get_config_value("decomposition.robust", False, args, "robust"))
    predictors = parse_predictors_arg(args.predictors)

    try:
        seasonal_window = parse_seasonal_window(
            get_config_value("decomposition.seasonal_window", "periodic", args, "seasonal_window")
        )
        primary, drivers = load_inputs(args, base_dir)
        result = run_decomposition_workflow(
            primary,
            drivers,
            frequency=frequency,
            target=args.target,
            predictors=predictors,
            seasonal_window=seasonal_window,
            robust=robust,
        )
    except (DecompositionPipelineError, ValueError) as e:
        logger.error("%s: %s", type(e).__name__, e)
        sys.exit(1)

    log_model(result)
    if args.out_dir:
        out_dir = resolve_path(args.out_dir, base_dir)
        export_results(result, out_dir)
        logger.info("Results written to %s", out_dir)

    with pd.option_context("display.width", 120):
        logger.debug("Aligned table head:\n%s", result.aligned.head())


if __name__ == "__main__":
    main()
