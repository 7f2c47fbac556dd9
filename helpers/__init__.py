"""Calendar helpers for quarterly macro series."""

from .temporal import monthly_to_quarterly_avg, quarter_end_index, to_quarter_end

__all__ = ["monthly_to_quarterly_avg", "quarter_end_index", "to_quarter_end"]
