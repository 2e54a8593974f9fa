"""Simple and incumbent-weighted percentile summaries.

Expectations:
- Input: survey rows (dynamic or legacy shape) plus selected variable names.
- Output: a `SummaryRecord` whose `simple` and `weighted` entries hold one
  `Metrics` per variable, or ``None`` when no row reported a p50.

Each percentile band is averaged only over the rows that reported that band,
so a row with a p50 but no p25 never drags the p25 average toward zero.
"""
from __future__ import annotations

import logging
import math
from collections.abc import Callable, Iterable
from typing import Any

import numpy as np

from survey_benchmarks.aggregate.indexes import infer_data_category
from survey_benchmarks.models import (
    PERCENTILE_BANDS,
    Metrics,
    SummaryRecord,
    SurveyRow,
    coerce_rows,
)
from survey_benchmarks.normalize.variables import resolve

log = logging.getLogger(__name__)

UNKNOWN_GROUP = "Unknown"

GROUP_KEYS: dict[str, Callable[[SurveyRow], str | None]] = {
    "specialty": lambda r: r.survey_specialty or r.standardized_name,
    "standardized_name": lambda r: r.standardized_name,
    "survey_source": lambda r: r.survey_source,
    "geographic_region": lambda r: r.geographic_region,
    "provider_type": lambda r: r.provider_type,
    "survey_year": lambda r: r.survey_year,
    "data_category": lambda r: infer_data_category(r).value,
}


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def summarize_variable(
    rows: Iterable[SurveyRow],
    variable_name: str,
) -> tuple[Metrics | None, Metrics | None]:
    """Aggregate one variable across `rows`.

    Args:
        rows: Survey rows to aggregate.
        variable_name: Variable to resolve on every row.

    Returns:
        `(simple, weighted)` metrics, or `(None, None)` when no row has a p50.
        Simple counts are the totals divided by the number of p50 contributors;
        weighted counts are the raw totals.
    """
    total_orgs = 0
    total_incumbents = 0
    values: dict[str, list[float]] = {band: [] for band in PERCENTILE_BANDS}
    weights: dict[str, list[int]] = {band: [] for band in PERCENTILE_BANDS}

    for row in rows:
        metrics = resolve(row, variable_name)
        if metrics is None:
            continue
        total_orgs += metrics.n_orgs
        total_incumbents += metrics.n_incumbents
        weight = metrics.n_incumbents or 1
        for band in PERCENTILE_BANDS:
            value = metrics.band(band)
            if value is None:
                continue
            values[band].append(value)
            weights[band].append(weight)

    contributors = len(values["p50"])
    if contributors == 0:
        return None, None

    simple = Metrics(
        n_orgs=_round_half_up(total_orgs / contributors),
        n_incumbents=_round_half_up(total_incumbents / contributors),
        **{
            band: float(np.mean(values[band])) if values[band] else 0.0
            for band in PERCENTILE_BANDS
        },
    )
    weighted = Metrics(
        n_orgs=total_orgs,
        n_incumbents=total_incumbents,
        **{
            band: float(np.average(values[band], weights=weights[band])) if values[band] else 0.0
            for band in PERCENTILE_BANDS
        },
    )
    return simple, weighted


def summarize(rows: Iterable[Any], variable_names: Iterable[str]) -> SummaryRecord:
    """Compute simple and weighted summaries for each selected variable.

    Args:
        rows: Row collection (rows or mappings).
        variable_names: Selected variables; duplicates are ignored.

    Returns:
        `SummaryRecord` keyed by the variable names as given.

    Raises:
        TypeError: if `rows` is not an iterable of rows.
    """
    if isinstance(variable_names, str):
        variable_names = [variable_names]
    materialized = coerce_rows(rows)
    simple: dict[str, Metrics | None] = {}
    weighted: dict[str, Metrics | None] = {}

    for name in dict.fromkeys(variable_names):
        simple[name], weighted[name] = summarize_variable(materialized, name)
        if simple[name] is None:
            log.debug("No p50 data for variable %r across %d rows", name, len(materialized))

    return SummaryRecord(simple=simple, weighted=weighted)


def group_rows(rows: Iterable[Any], group_by: str = "specialty") -> dict[str, list[SurveyRow]]:
    """Bucket rows by a grouping dimension, sorted by group name.

    Raises:
        ValueError: if `group_by` is not a supported dimension.
    """
    if group_by not in GROUP_KEYS:
        raise ValueError(
            f"Unsupported group_by {group_by!r}; expected one of {sorted(GROUP_KEYS)}"
        )
    key_of = GROUP_KEYS[group_by]

    groups: dict[str, list[SurveyRow]] = {}
    for row in coerce_rows(rows):
        key = key_of(row) or UNKNOWN_GROUP
        groups.setdefault(key, []).append(row)
    return {key: groups[key] for key in sorted(groups)}


def summarize_by_group(
    rows: Iterable[Any],
    variable_names: Iterable[str],
    group_by: str = "specialty",
) -> dict[str, SummaryRecord]:
    """Summarize each group of rows independently (grouped display mode)."""
    if isinstance(variable_names, str):
        variable_names = [variable_names]
    selected = list(dict.fromkeys(variable_names))
    grouped = {
        key: summarize(members, selected)
        for key, members in group_rows(rows, group_by).items()
    }
    log.info("Summarized %d %s groups for %d variables", len(grouped), group_by, len(selected))
    return grouped
