from __future__ import annotations

import pandas as pd

from survey_benchmarks.aggregate.frames import SUMMARY_COLUMNS, grouped_to_frame, summary_to_frame
from survey_benchmarks.aggregate.summary import summarize, summarize_by_group
from survey_benchmarks.models import SurveyRow


def test_summary_to_frame_rows_per_variable_and_kind(survey_rows: list[SurveyRow]) -> None:
    frame = summary_to_frame(summarize(survey_rows, ["tcc", "work_rvus"]))

    assert list(frame.columns) == SUMMARY_COLUMNS
    assert len(frame) == 4
    assert list(frame["kind"]) == ["simple", "weighted", "simple", "weighted"]

    tcc = frame[(frame["variable"] == "tcc") & (frame["kind"] == "weighted")].iloc[0]
    assert tcc["n_incumbents"] == 60
    assert tcc["label"] == "TCC (Total Cash Compensation)"
    assert frame[frame["variable"] == "work_rvus"]["p50"].isna().all()


def test_grouped_to_frame_labels_groups(survey_rows: list[SurveyRow]) -> None:
    frame = grouped_to_frame(summarize_by_group(survey_rows, ["tcc"], "survey_year"))
    assert sorted(frame["group"].unique()) == ["2023", "2024"]
    assert len(frame) == 4


def test_grouped_to_frame_empty() -> None:
    frame = grouped_to_frame({})
    assert isinstance(frame, pd.DataFrame)
    assert frame.empty
    assert list(frame.columns) == SUMMARY_COLUMNS
