"""Pydantic models shared by the engine.

These models define the normalized survey row handed over by the data-access
layer, the per-variable `Metrics` shape, the filter criteria record and the
simple/weighted `SummaryRecord` returned to the presentation layer.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from survey_benchmarks.normalize.names import normalize_variable_name

PERCENTILE_BANDS: tuple[str, ...] = ("p25", "p50", "p75", "p90")


class DataCategory(str, Enum):
    """Kind of survey data a row carries."""
    COMPENSATION = "COMPENSATION"
    CALL_PAY = "CALL_PAY"
    MOONLIGHTING = "MOONLIGHTING"
    CUSTOM = "CUSTOM"

    @classmethod
    def from_label(cls, value: Any) -> "DataCategory | None":
        """Translate an enum value or a display label ("Call Pay") to a category.

        Returns:
            The matching `DataCategory`, or ``None`` for empty/unknown input.
        """
        if value is None:
            return None
        if isinstance(value, DataCategory):
            return value
        key = " ".join(str(value).replace("_", " ").split()).lower()
        return _CATEGORY_LABELS.get(key)

    @property
    def label(self) -> str:
        return _CATEGORY_DISPLAY[self]


_CATEGORY_LABELS = {
    "compensation": DataCategory.COMPENSATION,
    "call pay": DataCategory.CALL_PAY,
    "moonlighting": DataCategory.MOONLIGHTING,
    "custom": DataCategory.CUSTOM,
}

_CATEGORY_DISPLAY = {
    DataCategory.COMPENSATION: "Compensation",
    DataCategory.CALL_PAY: "Call Pay",
    DataCategory.MOONLIGHTING: "Moonlighting",
    DataCategory.CUSTOM: "Custom",
}


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return isinstance(value, str) and not value.strip()


def as_number(value: Any) -> float:
    """Survey cell as a float; blank, non-numeric and non-finite cells are 0."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def as_count(value: Any) -> int:
    """Survey cell as a non-negative whole count."""
    return max(0, int(as_number(value)))


class Metrics(BaseModel):
    """Percentile benchmarks for one variable of one survey row.

    A band value of 0 (or less) means the source reported no data for that
    percentile; it is never treated as a real zero. Unparseable cells read as
    missing and counts are clamped to whole non-negative numbers, so a dirty
    survey cell never rejects the row.
    """
    model_config = ConfigDict(extra="ignore", frozen=True)
    n_orgs: int = Field(0, ge=0)
    n_incumbents: int = Field(0, ge=0)
    p25: float = 0.0
    p50: float = 0.0
    p75: float = 0.0
    p90: float = 0.0

    @field_validator("p25", "p50", "p75", "p90", mode="before")
    @classmethod
    def _band_as_number(cls, value: Any) -> float:
        return as_number(value)

    @field_validator("n_orgs", "n_incumbents", mode="before")
    @classmethod
    def _count_as_whole(cls, value: Any) -> int:
        return as_count(value)

    def band(self, name: str) -> float | None:
        """Return the value of percentile band `name`, or ``None`` when missing."""
        value = getattr(self, name)
        return value if value > 0 else None

    @property
    def has_data(self) -> bool:
        return self.p50 > 0


class SurveyRow(BaseModel):
    """One normalized survey data point (specialty x source x region x year).

    Accepts the camelCase names used on the wire as well as the field names.
    Legacy flat columns such as `tcc_p50` or `wrvu_n_orgs` are kept as extras
    and read by `survey_benchmarks.normalize.variables.resolve`.

    Attributes:
        standardized_name: Canonical specialty key after specialty mapping.
        survey_specialty: Specialty text as reported by the survey source.
        survey_source: Survey provider identifier (e.g. "MGMA").
        geographic_region: Reported region, if any.
        provider_type: Reported provider type, if any.
        survey_year: Survey year as a string.
        data_category: Explicit data category; inferred later when absent.
        variables: Canonical variable name -> `Metrics`.
    """
    model_config = ConfigDict(
        extra="allow",
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )
    standardized_name: str = ""
    survey_specialty: str = ""
    survey_source: str = ""
    geographic_region: str | None = None
    provider_type: str | None = None
    survey_year: str | None = None
    data_category: DataCategory | None = None
    variables: dict[str, Metrics] = Field(default_factory=dict)

    @field_validator("standardized_name", "survey_specialty", "survey_source", mode="before")
    @classmethod
    def _text_or_empty(cls, value: Any) -> Any:
        return "" if _is_blank(value) else str(value).strip()

    @field_validator("geographic_region", "provider_type", mode="before")
    @classmethod
    def _text_or_none(cls, value: Any) -> Any:
        return None if _is_blank(value) else str(value).strip()

    @field_validator("survey_year", mode="before")
    @classmethod
    def _year_as_text(cls, value: Any) -> Any:
        if _is_blank(value):
            return None
        if isinstance(value, float) and value.is_integer():
            value = int(value)
        return str(value).strip()

    @field_validator("data_category", mode="before")
    @classmethod
    def _category_from_label(cls, value: Any) -> Any:
        return None if _is_blank(value) else DataCategory.from_label(value)

    @field_validator("variables", mode="before")
    @classmethod
    def _canonical_variable_names(cls, value: Any) -> Any:
        if _is_blank(value):
            return {}
        if not isinstance(value, Mapping):
            return value
        canonical: dict[str, Any] = {}
        for name, metrics in value.items():
            # first spelling wins when two source columns share a canonical name
            canonical.setdefault(normalize_variable_name(str(name)), metrics)
        return canonical

    @property
    def legacy_fields(self) -> dict[str, Any]:
        """Flat per-variable columns carried by legacy rows."""
        return dict(self.model_extra or {})


def is_unconstrained(value: Any) -> bool:
    """Return True when a filter value means "no constraint on this dimension".

    Empty values, the strings "null"/"undefined" and "All ..." sentinels such as
    "All Sources" or "All Categories" all bypass their filter.
    """
    if _is_blank(value):
        return True
    text = str(value).strip().lower()
    return text in {"null", "undefined", "all"} or text.startswith("all ")


class FilterCriteria(BaseModel):
    """Optional per-dimension constraints applied by the filter engine."""
    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )
    specialty: str | None = None
    survey_source: str | None = None
    geographic_region: str | None = None
    provider_type: str | None = None
    year: str | None = None
    data_category: str | None = None

    @field_validator("year", mode="before")
    @classmethod
    def _year_as_text(cls, value: Any) -> Any:
        if value is None or isinstance(value, str):
            return value
        return str(value)

    def constraint(self, field: str) -> str | None:
        """Return the stripped value of `field`, or ``None`` when unconstrained."""
        value = getattr(self, field)
        if is_unconstrained(value):
            return None
        return str(value).strip()

    def params(self) -> dict[str, str | None]:
        """Effective constraints keyed by field name (used for cache keys)."""
        return {name: self.constraint(name) for name in type(self).model_fields}


class SummaryRecord(BaseModel):
    """Simple and incumbent-weighted aggregates for a set of variables.

    A variable maps to ``None`` when no contributing row reported a p50.
    """
    model_config = ConfigDict(frozen=True)
    simple: dict[str, Metrics | None] = Field(default_factory=dict)
    weighted: dict[str, Metrics | None] = Field(default_factory=dict)


def coerce_rows(rows: Iterable[Any]) -> tuple[SurveyRow, ...]:
    """Materialize `rows` as a tuple of `SurveyRow`, validating plain mappings.

    Raises:
        TypeError: if `rows` is not an iterable collection of rows or mappings.
        pydantic.ValidationError: if a mapping violates the row shape.
    """
    if isinstance(rows, (str, bytes, Mapping)) or not isinstance(rows, Iterable):
        raise TypeError(
            f"rows must be an iterable of SurveyRow or mappings, got {type(rows).__name__}"
        )

    out: list[SurveyRow] = []
    for position, row in enumerate(rows):
        if isinstance(row, SurveyRow):
            out.append(row)
        elif isinstance(row, Mapping):
            out.append(SurveyRow.model_validate(row))
        else:
            raise TypeError(
                f"row {position} must be a SurveyRow or mapping, got {type(row).__name__}"
            )
    return tuple(out)
