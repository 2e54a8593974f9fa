"""Canonical keys for specialty names, provider types and variable names.

Survey providers label the same specialty and the same metric in different
ways ("Pediatrics (General)" vs "General Pediatrics", "wRVUs" vs
"Work RVUs"). Everything that compares names goes through this module so
that indexing, filtering and variable lookup agree on one canonical form.
"""

from __future__ import annotations

import re

MIN_TOKEN_LENGTH = 2

_PUNCT_RE = re.compile(r"[():]")
_NON_ALNUM_RE = re.compile(r"[^a-z0-9]+")

# Canonical variable names keyed by their snake_case spellings across sources
VARIABLE_ALIASES: dict[str, str] = {
    # TCC
    "total_cash_compensation": "tcc",
    "total_compensation": "tcc",
    "total_cash_comp": "tcc",
    "cash_compensation": "tcc",
    "total_comp": "tcc",
    "tcc_excluding": "tcc_excluding_premium",
    # work RVUs
    "work_rvu": "work_rvus",
    "wrvu": "work_rvus",
    "wrvus": "work_rvus",
    "work_relative_value_units": "work_rvus",
    # conversion factor (TCC per wRVU)
    "tcc_per_work_rvus": "tcc_per_work_rvu",
    "tcc_per_wrvu": "tcc_per_work_rvu",
    "conversion_factor": "tcc_per_work_rvu",
    "cf": "tcc_per_work_rvu",
    "cfs": "tcc_per_work_rvu",
    "comp_per_wrvu": "tcc_per_work_rvu",
    "compensation_per_wrvu": "tcc_per_work_rvu",
    "total_cash_compensation_per_work_rvus": "tcc_per_work_rvu",
    "total_cash_compensation_per_work_rvu": "tcc_per_work_rvu",
    "compensation_to_work_rvus": "tcc_per_work_rvu",
    "compensation_to_work_rvu": "tcc_per_work_rvu",
    "compensation_to_wrvu": "tcc_per_work_rvu",
    "compensation_to_wrvus": "tcc_per_work_rvu",
    "comp_to_work_rvu": "tcc_per_work_rvu",
    "comp_to_work_rvus": "tcc_per_work_rvu",
    "comp_to_wrvu": "tcc_per_work_rvu",
    "total_compensation_to_work_rvus": "tcc_per_work_rvu",
    "total_comp_to_work_rvus": "tcc_per_work_rvu",
    "tcc_to_work_rvu": "tcc_per_work_rvu",
    "compensation_to_work_rvus_ratio": "tcc_per_work_rvu",
    "compensation_work_rvus_ratio": "tcc_per_work_rvu",
    # base pay
    "base_compensation": "base_salary",
    "base_comp": "base_salary",
    "salary": "base_salary",
    "hourly_rate": "base_pay_hourly_rate",
    "base_pay_hourly": "base_pay_hourly_rate",
    # productivity
    "asa": "asa_units",
    "asa_unit": "asa_units",
    "panel": "panel_size",
    "patient_panel": "panel_size",
    "patient_panel_size": "panel_size",
    "encounters": "total_encounters",
    "patient_encounters": "total_encounters",
    "total_visits": "total_encounters",
    # ratios
    "comp_per_encounter": "tcc_per_encounter",
    "compensation_per_encounter": "tcc_per_encounter",
    "collections": "net_collections",
    "net_collection": "net_collections",
    "tcc_to_collections": "tcc_to_net_collections",
    "comp_to_collections": "tcc_to_net_collections",
    "tcc_per_asa": "tcc_per_asa_unit",
    "comp_per_asa": "tcc_per_asa_unit",
    # on-call
    "oncall_compensation": "on_call_compensation",
    "daily_rate_on_call": "on_call_compensation",
    "daily_rate_oncall": "on_call_compensation",
    "daily_rate_on_call_compensation": "on_call_compensation",
    "daily_rate_oncall_compensation": "on_call_compensation",
    "on_call_rate": "on_call_compensation",
    "oncall_rate": "on_call_compensation",
    "on_call": "on_call_compensation",
    "oncall": "on_call_compensation",
    "daily_on_call": "on_call_compensation",
    "daily_oncall": "on_call_compensation",
}

_ON_CALL_KEYWORDS = ("rate", "compensation", "comp", "pay", "daily")

VARIABLE_DISPLAY_NAMES: dict[str, str] = {
    "tcc": "TCC (Total Cash Compensation)",
    "tcc_excluding_premium": "TCC Excluding Premium",
    "work_rvus": "Work RVUs",
    "tcc_per_work_rvu": "TCC per wRVUs (CFs)",
    "base_salary": "Base Salary",
    "base_pay_hourly_rate": "Base Pay Hourly Rate",
    "asa_units": "ASA Units",
    "panel_size": "Panel Size",
    "total_encounters": "Total Encounters",
    "tcc_per_encounter": "TCC per Encounter",
    "net_collections": "Net Collections",
    "tcc_to_net_collections": "TCC to Net Collections",
    "tcc_per_asa_unit": "TCC per ASA Unit",
    "on_call_compensation": "Daily Rate On-Call Compensation",
}

_ABBREVIATIONS = {"tcc": "TCC", "rvu": "RVU", "rvus": "RVUs", "asa": "ASA", "cf": "CF"}


def normalize(text: str | None) -> str:
    """Return the comparison key for a free-text specialty or variable name.

    Lowercases, turns parentheses and colons into spaces, drops the
    conjunction "and" between two words and collapses whitespace.

    Examples:
        >>> normalize("Pediatrics: General")
        'pediatrics general'
        >>> normalize("Allergy and Immunology")
        'allergy immunology'
    """
    if not text:
        return ""
    tokens = _PUNCT_RE.sub(" ", str(text).lower()).split()
    if len(tokens) > 2:
        tokens = [tokens[0], *(t for t in tokens[1:-1] if t != "and"), tokens[-1]]
    return " ".join(tokens)


def _significant_tokens(key: str, min_length: int) -> list[str]:
    return [token for token in key.split() if len(token) >= min_length]


def matches(
    filter_specialty: str | None,
    row_specialty: str | None,
    min_token_length: int = MIN_TOKEN_LENGTH,
) -> bool:
    """Fuzzy specialty comparison used by the filter engine.

    Exact equality after `normalize` wins outright. Otherwise every filter
    token (of at least `min_token_length` characters) must be contained in,
    or contain, some token of the row specialty, in any order. A filter
    without qualifying tokens matches nothing.
    """
    wanted = normalize(filter_specialty)
    if not wanted:
        return False
    candidate = normalize(row_specialty)
    if wanted == candidate:
        return True

    filter_tokens = _significant_tokens(wanted, min_token_length)
    row_tokens = _significant_tokens(candidate, min_token_length)
    if not filter_tokens or not row_tokens:
        return False

    return all(
        any(rt in ft or ft in rt for rt in row_tokens)
        for ft in filter_tokens
    )


def fold_provider_type(text: str | None) -> str:
    """Fold a provider type to Title Case words (" staff  PHYSICIAN" -> "Staff Physician")."""
    if not text:
        return ""
    return " ".join(word.capitalize() for word in str(text).split())


def normalize_variable_name(name: str | None) -> str:
    """Return the canonical snake_case name for a survey variable.

    Known spellings map to one canonical name (`wRVUs` -> `work_rvus`,
    `CFs` -> `tcc_per_work_rvu`); unknown on-call style names fold into
    `on_call_compensation`; anything else keeps its snake_case form.
    """
    snake = _NON_ALNUM_RE.sub("_", normalize(name)).strip("_")
    if not snake:
        return ""
    if snake in VARIABLE_ALIASES:
        return VARIABLE_ALIASES[snake]
    if "on" in snake and "call" in snake and any(k in snake for k in _ON_CALL_KEYWORDS):
        return "on_call_compensation"
    return snake


def variable_display_name(name: str) -> str:
    """Human-readable label for a variable name."""
    canonical = normalize_variable_name(name)
    if canonical in VARIABLE_DISPLAY_NAMES:
        return VARIABLE_DISPLAY_NAMES[canonical]
    words = canonical.split("_")
    return " ".join(_ABBREVIATIONS.get(w, w.capitalize()) for w in words if w)
