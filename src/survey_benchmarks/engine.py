"""Benchmark engine facade.

`BenchmarkEngine` indexes a row collection once and serves filter results,
flat and grouped summaries, filter options and variable discovery on top of
it, memoizing filter and summary results in an injectable `ResultCache`.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Callable, Iterable, Mapping
from enum import Enum
from typing import Any, TypeVar

from survey_benchmarks.aggregate.cache import ResultCache, fingerprint_rows, make_key
from survey_benchmarks.aggregate.filters import as_criteria, filter_ids
from survey_benchmarks.aggregate.indexes import Indexes, build_indexes, infer_data_category
from survey_benchmarks.aggregate.summary import summarize, summarize_by_group
from survey_benchmarks.config import Settings, get_settings
from survey_benchmarks.models import FilterCriteria, SummaryRecord, SurveyRow
from survey_benchmarks.normalize.variables import available_variables

log = logging.getLogger(__name__)

T = TypeVar("T")

Criteria = FilterCriteria | Mapping[str, Any] | None


class CacheInvalidationEvent(str, Enum):
    """Events after which cached results may be stale."""
    NEW_SURVEY_UPLOADED = "new_survey_uploaded"
    SURVEY_DELETED = "survey_deleted"
    MAPPING_CHANGED = "mapping_changed"
    VARIABLE_SELECTION_CHANGED = "variable_selection_changed"
    FILTER_CHANGED = "filter_changed"
    DATA_CLEARED = "data_cleared"


# Operations cleared per event; None clears everything
_INVALIDATES: dict[CacheInvalidationEvent, tuple[str, ...] | None] = {
    CacheInvalidationEvent.NEW_SURVEY_UPLOADED: None,
    CacheInvalidationEvent.DATA_CLEARED: None,
    CacheInvalidationEvent.SURVEY_DELETED: ("summary", "grouped"),
    CacheInvalidationEvent.MAPPING_CHANGED: ("summary", "grouped"),
    CacheInvalidationEvent.VARIABLE_SELECTION_CHANGED: ("summary", "grouped"),
    CacheInvalidationEvent.FILTER_CHANGED: ("filter",),
}


def _selected(variables: Iterable[str] | str) -> list[str]:
    if isinstance(variables, str):
        return [variables]
    return list(dict.fromkeys(variables))


class BenchmarkEngine:
    """Filtering and aggregation over one immutable row collection.

    Args:
        rows: `SurveyRow`s or mappings that validate as one.
        cache: Cache to use; shared caches let several engines be invalidated
            together. Defaults to a private cache, or none when caching is
            disabled in `settings`.
        settings: Engine settings; read from the environment when omitted.
    """

    def __init__(
        self,
        rows: Iterable[Any],
        cache: ResultCache | None = None,
        settings: Settings | None = None,
    ) -> None:
        settings = settings or get_settings()
        self._indexes: Indexes = build_indexes(rows)
        self._fingerprint = fingerprint_rows(self._indexes.rows)
        self.min_token_length = settings.fuzzy_min_token_length
        if cache is not None:
            self.cache: ResultCache | None = cache
        else:
            self.cache = ResultCache() if settings.cache_enabled else None

    @property
    def rows(self) -> tuple[SurveyRow, ...]:
        return self._indexes.rows

    @property
    def indexes(self) -> Indexes:
        return self._indexes

    def _cached(self, operation: str, params: Any, compute: Callable[[], T]) -> T:
        if self.cache is None:
            return compute()
        key = make_key(operation, self._fingerprint, params)
        hit = self.cache.get(key)
        if hit is not None:
            log.debug("Cache hit for %s", key)
            return hit
        value = compute()
        self.cache.set(key, value)
        return value

    def _key_params(self, crit: FilterCriteria, **extra: Any) -> dict[str, Any]:
        # fuzzy specialty results depend on the token length
        return {"criteria": crit.params(), "min_token_length": self.min_token_length, **extra}

    def filter(self, criteria: Criteria = None) -> list[SurveyRow]:
        """Rows matching `criteria`, in collection order."""
        crit = as_criteria(criteria)
        ids = self._cached(
            "filter",
            self._key_params(crit),
            lambda: tuple(sorted(filter_ids(self._indexes, crit, self.min_token_length))),
        )
        return self._indexes.take(ids)

    def summarize(self, variables: Iterable[str] | str, criteria: Criteria = None) -> SummaryRecord:
        """Engine-wide (flat) summary of `variables` over the filtered rows."""
        crit = as_criteria(criteria)
        selected = _selected(variables)
        return self._cached(
            "summary",
            self._key_params(crit, variables=selected),
            lambda: summarize(self.filter(crit), selected),
        )

    def summarize_by_group(
        self,
        variables: Iterable[str] | str,
        criteria: Criteria = None,
        group_by: str = "specialty",
    ) -> dict[str, SummaryRecord]:
        """Per-group summaries of `variables` over the filtered rows."""
        crit = as_criteria(criteria)
        selected = _selected(variables)
        grouped = self._cached(
            "grouped",
            self._key_params(crit, variables=selected, group_by=group_by),
            lambda: summarize_by_group(self.filter(crit), selected, group_by),
        )
        # callers get their own mapping; the cached one is never handed out
        return dict(grouped)

    def filter_options(self, criteria: Criteria = None) -> dict[str, list[str]]:
        """Distinct values per dimension among rows matching `criteria`.

        Lets a caller offer only the choices that still return data after the
        current selections (cascading filters).
        """
        rows = self.filter(criteria)
        return {
            "survey_source": sorted({r.survey_source for r in rows if r.survey_source}),
            "survey_year": sorted({r.survey_year for r in rows if r.survey_year}),
            "geographic_region": sorted({r.geographic_region for r in rows if r.geographic_region}),
            "provider_type": sorted({r.provider_type for r in rows if r.provider_type}),
            "specialty": sorted(
                {r.survey_specialty or r.standardized_name for r in rows}
                - {""}
            ),
            "data_category": sorted({infer_data_category(r).label for r in rows}),
        }

    def discover_variables(self) -> dict[str, int]:
        """Canonical variable name -> number of rows reporting it, most common first."""
        counts: Counter[str] = Counter()
        for row in self._indexes.rows:
            counts.update(available_variables(row))
        return dict(sorted(counts.items(), key=lambda item: (-item[1], item[0])))

    def invalidate(self, event: CacheInvalidationEvent | str) -> int:
        """Drop cached results made stale by `event`; returns entries removed."""
        event = CacheInvalidationEvent(event)
        if self.cache is None:
            return 0

        operations = _INVALIDATES[event]
        if operations is None:
            removed = self.cache.clear()
        else:
            removed = sum(self.cache.clear(op) for op in operations)
        log.info("Cache invalidation %s removed %d entries", event.value, removed)
        return removed
