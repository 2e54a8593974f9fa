"""Variable resolution across dynamic and legacy row shapes.

Newer rows carry a `variables` bag keyed by canonical variable name. Older
rows expose flat columns per variable family (`tcc_p50`, `wrvu_n_orgs`,
`cf_p90`, ...). `resolve` hides that difference and always returns a
`Metrics` record, or ``None`` when the row has no usable data.
"""

from __future__ import annotations

from survey_benchmarks.models import PERCENTILE_BANDS, Metrics, SurveyRow, as_count, as_number
from survey_benchmarks.normalize.names import normalize_variable_name

# Canonical variable name -> flat column prefix used by legacy rows
LEGACY_PREFIXES: dict[str, str] = {
    "tcc": "tcc",
    "work_rvus": "wrvu",
    "tcc_per_work_rvu": "cf",
    "on_call_compensation": "on_call",
}


def _from_legacy_fields(row: SurveyRow, prefix: str) -> Metrics | None:
    fields = row.legacy_fields
    if f"{prefix}_p50" not in fields:
        return None
    return Metrics(
        n_orgs=as_count(fields.get(f"{prefix}_n_orgs")),
        n_incumbents=as_count(fields.get(f"{prefix}_n_incumbents")),
        **{band: as_number(fields.get(f"{prefix}_{band}")) for band in PERCENTILE_BANDS},
    )


def resolve(row: SurveyRow, variable_name: str) -> Metrics | None:
    """Return the metrics a row reports for `variable_name`.

    The dynamic `variables` bag is consulted first; when it has no usable p50
    the legacy flat columns are read instead.

    Args:
        row: Survey row in either shape.
        variable_name: Any spelling of the variable ("wRVUs", "work_rvus", ...).

    Returns:
        `Metrics` with a positive p50, or ``None`` when neither shape has data.
        ``None`` means "no data", never "zero compensation".
    """
    canonical = normalize_variable_name(variable_name)
    if not canonical:
        return None

    dynamic = row.variables.get(canonical)
    if dynamic is not None and dynamic.has_data:
        return dynamic

    legacy = _from_legacy_fields(row, LEGACY_PREFIXES.get(canonical, canonical))
    if legacy is not None and legacy.has_data:
        return legacy
    return None


def available_variables(row: SurveyRow) -> set[str]:
    """Canonical names of every variable this row reports with a p50."""
    found = {name for name, metrics in row.variables.items() if metrics.has_data}
    by_prefix = {prefix: name for name, prefix in LEGACY_PREFIXES.items()}
    for field in row.legacy_fields:
        if not field.endswith("_p50"):
            continue
        prefix = field[: -len("_p50")]
        name = by_prefix.get(prefix, normalize_variable_name(prefix))
        if resolve(row, name) is not None:
            found.add(name)
    return found
