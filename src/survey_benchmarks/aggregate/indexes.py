"""Multi-dimensional lookup indexes over a survey row collection.

Rows are referenced by their position in the indexed tuple (the row id), so
filtering works on plain integer sets rather than object identity.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Iterable

from survey_benchmarks.models import DataCategory, SurveyRow, coerce_rows
from survey_benchmarks.normalize.names import fold_provider_type, normalize

log = logging.getLogger(__name__)


def infer_data_category(row: SurveyRow) -> DataCategory:
    """Return the row's explicit category, or infer it from `survey_source`.

    Older rows predate the category field; their source name tells Call Pay
    and Moonlighting surveys apart from plain compensation surveys.
    """
    if row.data_category is not None:
        return row.data_category
    source = row.survey_source.lower()
    if "call pay" in source:
        return DataCategory.CALL_PAY
    if "moonlighting" in source:
        return DataCategory.MOONLIGHTING
    return DataCategory.COMPENSATION


def specialty_key(row: SurveyRow) -> str:
    """Normalized specialty key (standardized name, else the survey's own label)."""
    return normalize(row.standardized_name or row.survey_specialty)


@dataclass(frozen=True)
class Indexes:
    """Row-id buckets per dimension value for one row collection.

    Attributes:
        rows: The indexed rows; a row id is a position in this tuple.
        categories: Effective data category per row id.
        specialty: Normalized specialty key -> row ids.
        survey_source: Source name -> row ids.
        geographic_region: Region -> row ids.
        provider_type: Title-case folded provider type -> row ids.
        survey_year: Year -> row ids.
        data_category: Effective category -> row ids.
    """
    rows: tuple[SurveyRow, ...]
    categories: tuple[DataCategory, ...]
    specialty: dict[str, list[int]]
    survey_source: dict[str, list[int]]
    geographic_region: dict[str, list[int]]
    provider_type: dict[str, list[int]]
    survey_year: dict[str, list[int]]
    data_category: dict[DataCategory, list[int]]

    def __len__(self) -> int:
        return len(self.rows)

    def all_ids(self) -> set[int]:
        return set(range(len(self.rows)))

    def lookup(self, dimension: str, value: Any) -> list[int]:
        """Row ids stored under `value` for `dimension` (empty when unknown)."""
        bucket: dict[Any, list[int]] = getattr(self, dimension)
        return bucket.get(value, [])

    def take(self, ids: Iterable[int]) -> list[SurveyRow]:
        """Rows for `ids`, in original collection order."""
        return [self.rows[i] for i in sorted(ids)]


def build_indexes(rows: Iterable[Any]) -> Indexes:
    """Index `rows` along every filterable dimension in a single pass.

    Args:
        rows: `SurveyRow` instances or mappings that validate as one.

    Returns:
        `Indexes` over the materialized rows.

    Raises:
        TypeError: if `rows` is not an iterable of rows.
    """
    materialized = coerce_rows(rows)

    specialty: defaultdict[str, list[int]] = defaultdict(list)
    source: defaultdict[str, list[int]] = defaultdict(list)
    region: defaultdict[str, list[int]] = defaultdict(list)
    provider: defaultdict[str, list[int]] = defaultdict(list)
    year: defaultdict[str, list[int]] = defaultdict(list)
    category: defaultdict[DataCategory, list[int]] = defaultdict(list)
    categories: list[DataCategory] = []

    for row_id, row in enumerate(materialized):
        key = specialty_key(row)
        if key:
            specialty[key].append(row_id)
        if row.survey_source:
            source[row.survey_source].append(row_id)
        if row.geographic_region:
            region[row.geographic_region].append(row_id)
        if row.provider_type:
            provider[fold_provider_type(row.provider_type)].append(row_id)
        if row.survey_year:
            year[row.survey_year].append(row_id)

        effective = infer_data_category(row)
        categories.append(effective)
        category[effective].append(row_id)

    log.info(
        "Indexed %d rows: %d specialties, %d sources, %d regions",
        len(materialized),
        len(specialty),
        len(source),
        len(region),
    )

    return Indexes(
        rows=materialized,
        categories=tuple(categories),
        specialty=dict(specialty),
        survey_source=dict(source),
        geographic_region=dict(region),
        provider_type=dict(provider),
        survey_year=dict(year),
        data_category=dict(category),
    )
