from __future__ import annotations

import pytest

from survey_benchmarks.aggregate.indexes import build_indexes, infer_data_category, specialty_key
from survey_benchmarks.models import DataCategory, SurveyRow


def test_infer_data_category_from_source_name() -> None:
    assert infer_data_category(SurveyRow(survey_source="MGMA Call Pay")) is DataCategory.CALL_PAY
    assert infer_data_category(SurveyRow(survey_source="Moonlighting 2024")) is DataCategory.MOONLIGHTING
    assert infer_data_category(SurveyRow(survey_source="MGMA")) is DataCategory.COMPENSATION


def test_explicit_category_wins_over_source_name() -> None:
    row = SurveyRow(survey_source="MGMA Call Pay", data_category="Custom")
    assert infer_data_category(row) is DataCategory.CUSTOM


def test_specialty_key_falls_back_to_survey_label() -> None:
    assert specialty_key(SurveyRow(survey_specialty="Allergy and Immunology")) == "allergy immunology"
    assert specialty_key(SurveyRow(standardized_name="Cardiology", survey_specialty="Cardio")) == "cardiology"
    assert specialty_key(SurveyRow()) == ""


def test_build_indexes_buckets_every_dimension(survey_rows: list[SurveyRow]) -> None:
    idx = build_indexes(survey_rows)

    assert len(idx) == 5
    assert idx.lookup("specialty", "cardiology") == [1, 2, 3]
    assert idx.lookup("specialty", "pediatrics general") == [0]
    assert idx.lookup("survey_source", "MGMA Call Pay") == [2, 3]
    assert idx.lookup("geographic_region", "National") == [0, 4]
    assert idx.lookup("provider_type", "Staff Physician") == [0, 1]
    assert idx.lookup("survey_year", "2024") == [0, 1, 2, 3]
    assert idx.lookup("data_category", DataCategory.CALL_PAY) == [2, 3]
    assert idx.lookup("data_category", DataCategory.MOONLIGHTING) == [4]
    assert idx.categories[0] is DataCategory.COMPENSATION


def test_lookup_unknown_value_is_empty(survey_rows: list[SurveyRow]) -> None:
    idx = build_indexes(survey_rows)
    assert idx.lookup("survey_source", "Nope") == []


def test_rows_without_optional_values_stay_out_of_buckets() -> None:
    idx = build_indexes([{"surveySource": "MGMA"}])
    assert idx.geographic_region == {}
    assert idx.provider_type == {}
    assert idx.survey_year == {}
    assert idx.all_ids() == {0}


def test_take_returns_rows_in_collection_order(survey_rows: list[SurveyRow]) -> None:
    idx = build_indexes(survey_rows)
    assert idx.take({4, 0, 2}) == [survey_rows[0], survey_rows[2], survey_rows[4]]


def test_build_indexes_rejects_non_collections() -> None:
    with pytest.raises(TypeError):
        build_indexes(None)  # type: ignore[arg-type]
