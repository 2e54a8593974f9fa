"""
ResultCache - memoization of filter and aggregation results.

Keys combine a fingerprint of the row collection's identifying fields with
the operation parameters, so identical inputs always map to the same key.
Entries never expire; callers clear the cache when mappings or data change.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass
from typing import Any, Iterable

from survey_benchmarks.aggregate.indexes import infer_data_category
from survey_benchmarks.models import SurveyRow


@dataclass(frozen=True)
class CacheStats:
    """Hit/miss counters for a `ResultCache`."""

    hits: int
    misses: int
    size: int

    @property
    def hit_rate(self) -> float:
        lookups = self.hits + self.misses
        return self.hits / lookups if lookups else 0.0


def fingerprint_rows(rows: Iterable[SurveyRow]) -> str:
    """
    Stable digest of the identifying fields of every row.

    Args:
        rows: Row collection, in order

    Returns:
        Hex digest; equal for collections with the same identifying fields
    """
    identity = [
        [
            row.standardized_name,
            row.survey_specialty,
            row.survey_source,
            row.geographic_region,
            row.provider_type,
            row.survey_year,
            infer_data_category(row).value,
        ]
        for row in rows
    ]
    payload = json.dumps(identity, separators=(",", ":"))
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def make_key(operation: str, rows_fingerprint: str, params: Any = None) -> str:
    """
    Build a cache key for `operation` over a fingerprinted row collection.

    Args:
        operation: Operation name, used as the key prefix (e.g. "filter")
        rows_fingerprint: Result of `fingerprint_rows`
        params: JSON-serializable parameters (filter criteria, variables, ...)

    Returns:
        Key of the form "<operation>:<hash>"
    """
    canonical_params = json.dumps(params, sort_keys=True, default=str)
    hash_input = f"{rows_fingerprint}|{canonical_params}"
    return f"{operation}:{hashlib.sha256(hash_input.encode('utf-8')).hexdigest()[:16]}"


class ResultCache:
    """
    Process-local memoization map with explicit invalidation.

    Pure Python, single-threaded; no locking.
    """

    def __init__(self) -> None:
        self._entries: dict[str, Any] = {}
        self._hits = 0
        self._misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def get(self, key: str) -> Any | None:
        """
        Get cached value for key.

        Returns:
            Cached value if present, None otherwise
        """
        if key in self._entries:
            self._hits += 1
            return self._entries[key]
        self._misses += 1
        return None

    def set(self, key: str, value: Any) -> None:
        """Store `value` under `key`, replacing any previous entry."""
        self._entries[key] = value

    def clear(self, operation: str | None = None) -> int:
        """
        Clear entries for one operation prefix, or everything.

        Args:
            operation: Operation whose keys to drop, or None to clear all

        Returns:
            Number of entries removed
        """
        if operation is None:
            removed = len(self._entries)
            self._entries = {}
            return removed

        prefix = f"{operation}:"
        stale = [key for key in self._entries if key.startswith(prefix)]
        for key in stale:
            del self._entries[key]
        return len(stale)

    def stats(self) -> CacheStats:
        return CacheStats(hits=self._hits, misses=self._misses, size=len(self._entries))
