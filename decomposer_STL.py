#!/usr/bin/env python3
"""
STL decomposition of US quarterly GDP and OLS regression against driver series.

Usage
-----
    python decomposer_STL.py --help
    python decomposer_STL.py --default-run --out-dir results
    python decomposer_STL.py --primary-csv data/gdp.csv --driver-csv data/cons.csv --driver-csv data/inv.csv

The implementation lives in gdp_decomposer_src/; see gdp_decomposer_src/main.py.
"""

if __name__ == "__main__":
    from gdp_decomposer_src.main import main
    main()
