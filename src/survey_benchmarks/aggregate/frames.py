"""Tabular views of summary records for the presentation layer.

Summaries are small, so they are materialized eagerly as pandas DataFrames
with one row per (group, variable, kind).
"""
from __future__ import annotations

from collections.abc import Mapping

import numpy as np
import pandas as pd

from survey_benchmarks.models import PERCENTILE_BANDS, SummaryRecord
from survey_benchmarks.normalize.names import variable_display_name

METRIC_COLUMNS: list[str] = ["n_orgs", "n_incumbents", *PERCENTILE_BANDS]
SUMMARY_COLUMNS: list[str] = ["group", "variable", "label", "kind", *METRIC_COLUMNS]
SUMMARY_KINDS: tuple[str, ...] = ("simple", "weighted")


def summary_to_frame(record: SummaryRecord, group: str | None = None) -> pd.DataFrame:
    """Return one summary record as a DataFrame.

    Args:
        record: Simple/weighted summary for a set of variables.
        group: Optional group label copied into the `group` column.

    Returns:
        DataFrame with columns `group`, `variable`, `label`, `kind`,
        `n_orgs`, `n_incumbents`, `p25`..`p90`. Variables without data are
        kept with NaN metrics.
    """
    rows: list[dict[str, object]] = []
    for variable in record.simple:
        for kind in SUMMARY_KINDS:
            metrics = getattr(record, kind).get(variable)
            row: dict[str, object] = {
                "group": group,
                "variable": variable,
                "label": variable_display_name(variable),
                "kind": kind,
            }
            if metrics is None:
                row.update({col: np.nan for col in METRIC_COLUMNS})
            else:
                row.update(metrics.model_dump())
            rows.append(row)

    return pd.DataFrame(rows, columns=SUMMARY_COLUMNS)


def grouped_to_frame(records: Mapping[str, SummaryRecord]) -> pd.DataFrame:
    """Concatenate per-group summaries into a single DataFrame."""
    frames = [summary_to_frame(record, group) for group, record in records.items()]
    if not frames:
        return pd.DataFrame(columns=SUMMARY_COLUMNS)
    return pd.concat(frames, ignore_index=True)
