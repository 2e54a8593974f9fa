"""survey_benchmarks package.

Aggregates compensation-survey rows from independent survey providers into
filterable, percentile-based benchmarking statistics.

Architecture:
- Rows → Indexes → Filtered rows → Simple / weighted summaries
- Pydantic models describe rows, metrics, filter criteria and summaries
- Dask is used only to read and validate large row exports in partitions
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
