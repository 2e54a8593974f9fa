from __future__ import annotations

from survey_benchmarks.aggregate.cache import ResultCache, fingerprint_rows, make_key
from survey_benchmarks.models import SurveyRow


def test_fingerprint_depends_on_identifying_fields_only() -> None:
    a = [SurveyRow(survey_source="MGMA", tcc_p50=1)]
    b = [SurveyRow(survey_source="MGMA", tcc_p50=2)]
    c = [SurveyRow(survey_source="Gallagher")]
    assert fingerprint_rows(a) == fingerprint_rows(b)
    assert fingerprint_rows(a) != fingerprint_rows(c)


def test_fingerprint_includes_effective_category() -> None:
    plain = [SurveyRow(survey_source="MGMA")]
    tagged = [SurveyRow(survey_source="MGMA", data_category="Call Pay")]
    assert fingerprint_rows(plain) != fingerprint_rows(tagged)


def test_make_key_is_stable_and_order_insensitive() -> None:
    fp = fingerprint_rows([])
    k1 = make_key("filter", fp, {"specialty": "Cardiology", "year": "2024"})
    k2 = make_key("filter", fp, {"year": "2024", "specialty": "Cardiology"})
    assert k1 == k2
    assert k1.startswith("filter:")
    assert len(k1.split(":", 1)[1]) == 16
    assert make_key("summary", fp, {"year": "2024"}) != make_key("summary", fp, {"year": "2023"})


def test_get_set_and_stats() -> None:
    cache = ResultCache()
    assert cache.get("filter:x") is None
    cache.set("filter:x", (1, 2))
    assert cache.get("filter:x") == (1, 2)
    assert "filter:x" in cache

    stats = cache.stats()
    assert (stats.hits, stats.misses, stats.size) == (1, 1, 1)
    assert stats.hit_rate == 0.5


def test_clear_by_operation_prefix() -> None:
    cache = ResultCache()
    cache.set("filter:a", 1)
    cache.set("summary:b", 2)
    cache.set("summary:c", 3)

    assert cache.clear("summary") == 2
    assert len(cache) == 1
    assert cache.clear() == 1
    assert len(cache) == 0


def test_empty_stats_hit_rate_is_zero() -> None:
    assert ResultCache().stats().hit_rate == 0.0
