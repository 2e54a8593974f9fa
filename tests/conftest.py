from __future__ import annotations

import logging
from collections.abc import Iterator

import pytest

from survey_benchmarks.models import SurveyRow


@pytest.fixture
def survey_rows() -> list[SurveyRow]:
    return [
        SurveyRow.model_validate({
            "standardizedName": "Pediatrics (General)",
            "surveySource": "MGMA",
            "geographicRegion": "National",
            "providerType": "Staff Physician",
            "surveyYear": "2024",
            "tcc_p50": 250000,
            "tcc_n_incumbents": 40,
            "tcc_n_orgs": 10,
        }),
        SurveyRow.model_validate({
            "standardizedName": "Cardiology",
            "surveySource": "SullivanCotter",
            "geographicRegion": "Northeast",
            "providerType": "staff physician",
            "surveyYear": 2024,
            "variables": {"TCC": {"n_orgs": 5, "n_incumbents": 20, "p50": 300000}},
        }),
        SurveyRow.model_validate({
            "standardizedName": "Cardiology",
            "surveySource": "MGMA Call Pay",
            "providerType": "CALL",
            "surveyYear": "2024",
            "on_call_p50": 1500,
            "on_call_n_incumbents": 12,
        }),
        SurveyRow.model_validate({
            "standardizedName": "Cardiology",
            "surveySource": "MGMA Call Pay",
            "providerType": "Nurse Practitioner",
            "surveyYear": "2024",
            "on_call_p50": 400,
        }),
        SurveyRow.model_validate({
            "standardizedName": "Family Medicine",
            "surveySource": "Gallagher",
            "geographicRegion": "National",
            "providerType": "Nurse Practitioner",
            "surveyYear": "2023",
            "dataCategory": "Moonlighting",
            "variables": {"Daily Rate On-Call": {"p50": 900}},
        }),
    ]


@pytest.fixture
def restore_root_logging() -> Iterator[None]:
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
