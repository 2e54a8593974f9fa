"""Index-backed multi-dimensional filtering of survey rows.

Filters are applied as set intersections over row ids in a fixed order
(specialty, source, region, provider type, category, year) and stop as soon
as nothing is left. Unknown filter values produce an empty result rather
than an error.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any, Iterable

from survey_benchmarks.aggregate.indexes import Indexes, build_indexes
from survey_benchmarks.models import DataCategory, FilterCriteria, SurveyRow
from survey_benchmarks.normalize.names import (
    MIN_TOKEN_LENGTH,
    fold_provider_type,
    matches,
    normalize,
)

log = logging.getLogger(__name__)

PHYSICIAN_PROVIDER_TYPES = frozenset({"staff physician", "physician"})

# Substrings that mark a provider type as an advanced practice provider
APP_SIGNATURES: tuple[str, ...] = (
    "advanced practice provider",
    "app",
    "nurse practitioner",
    "np",
    "physician assistant",
    "pa",
    "crna",
)


def is_app_provider_type(provider_type: str | None) -> bool:
    """Return True if `provider_type` carries an APP signature."""
    text = (provider_type or "").lower()
    return any(signature in text for signature in APP_SIGNATURES)


def as_criteria(criteria: FilterCriteria | Mapping[str, Any] | None) -> FilterCriteria:
    """Accept a `FilterCriteria`, a plain mapping, or ``None`` (no constraints)."""
    if criteria is None:
        return FilterCriteria()
    if isinstance(criteria, FilterCriteria):
        return criteria
    return FilterCriteria.model_validate(criteria)


def _specialty_ids(indexes: Indexes, value: str, min_token_length: int) -> set[int]:
    exact = indexes.lookup("specialty", normalize(value))
    if exact:
        return set(exact)

    ids: set[int] = set()
    for key, bucket in indexes.specialty.items():
        if matches(value, key, min_token_length):
            ids.update(bucket)
    return ids


def _provider_type_ids(indexes: Indexes, value: str) -> set[int]:
    ids = set(indexes.lookup("provider_type", fold_provider_type(value)))
    if normalize(value) not in PHYSICIAN_PROVIDER_TYPES:
        return ids

    # Call Pay rows rarely carry a real provider type; they count as physician
    # data unless explicitly tagged as APP.
    for row_id in indexes.lookup("data_category", DataCategory.CALL_PAY):
        if not is_app_provider_type(indexes.rows[row_id].provider_type):
            ids.add(row_id)
    return ids


def _category_ids(indexes: Indexes, value: str) -> set[int]:
    category = DataCategory.from_label(value)
    if category is None:
        log.debug("Unknown data category %r; no rows match", value)
        return set()
    return set(indexes.lookup("data_category", category))


def filter_ids(
    indexes: Indexes,
    criteria: FilterCriteria | Mapping[str, Any] | None,
    min_token_length: int = MIN_TOKEN_LENGTH,
) -> set[int]:
    """Return the ids of indexed rows satisfying every constrained dimension.

    Args:
        indexes: Indexes built over the row collection.
        criteria: Filter criteria; unconstrained fields are skipped.
        min_token_length: Shortest token used by fuzzy specialty matching.

    Returns:
        Set of matching row ids.
    """
    crit = as_criteria(criteria)

    steps: list[tuple[str, Callable[[str], Iterable[int]]]] = [
        ("specialty", lambda v: _specialty_ids(indexes, v, min_token_length)),
        ("survey_source", lambda v: indexes.lookup("survey_source", v)),
        ("geographic_region", lambda v: indexes.lookup("geographic_region", v)),
        ("provider_type", lambda v: _provider_type_ids(indexes, v)),
        ("data_category", lambda v: _category_ids(indexes, v)),
        ("year", lambda v: indexes.lookup("survey_year", v)),
    ]

    selected = indexes.all_ids()
    for field, lookup in steps:
        value = crit.constraint(field)
        if value is None:
            continue
        selected &= set(lookup(value))
        if not selected:
            log.debug("Filter %s=%r left no rows", field, value)
            break

    return selected


def filter_rows(
    rows: Iterable[Any],
    criteria: FilterCriteria | Mapping[str, Any] | None = None,
    *,
    indexes: Indexes | None = None,
    min_token_length: int = MIN_TOKEN_LENGTH,
) -> list[SurveyRow]:
    """Filter a row collection by `criteria`, preserving input order.

    Args:
        rows: Row collection (ignored when prebuilt `indexes` are given).
        criteria: Filter criteria, mapping, or ``None``.
        indexes: Optional indexes already built over `rows`.
        min_token_length: Shortest token used by fuzzy specialty matching.

    Returns:
        List of matching `SurveyRow`s; empty when nothing matches.
    """
    if indexes is None:
        indexes = build_indexes(rows)
    return indexes.take(filter_ids(indexes, criteria, min_token_length))
