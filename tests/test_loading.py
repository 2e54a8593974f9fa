from __future__ import annotations

import json
from pathlib import Path

import numpy as np
import pandas as pd
import dask.dataframe as dd
import pytest

from survey_benchmarks.ingest.load_rows import (
    read_rows,
    rows_from_ddf,
    rows_from_frame,
    rows_from_records,
)
from survey_benchmarks.normalize.variables import resolve


def test_rows_from_records_counts_invalid_records() -> None:
    rows, bad = rows_from_records([
        {"surveySource": "MGMA", "variables": {"tcc": {"p50": 1}}},
        {"surveySource": "MGMA", "variables": {"tcc": {"p50": 1, "n_incumbents": -5}}},
        {"surveySource": "MGMA", "variables": 5},
        {"surveySource": "MGMA", "variables": {"tcc": 7}},
    ])
    assert len(rows) == 2
    assert rows[1].variables["tcc"].n_incumbents == 0
    assert bad == 2


def test_rows_from_frame_turns_missing_cells_into_none() -> None:
    pdf = pd.DataFrame([
        {"standardizedName": "Cardiology", "surveySource": "MGMA", "geographicRegion": np.nan, "surveyYear": 2024, "tcc_p50": 300000.0},
        {"standardizedName": "Neurology", "surveySource": "MGMA", "geographicRegion": "West", "surveyYear": 2023, "tcc_p50": np.nan},
    ])
    rows, bad = rows_from_frame(pdf)

    assert bad == 0
    assert rows[0].geographic_region is None
    assert rows[0].survey_year == "2024"
    assert resolve(rows[0], "tcc").p50 == 300000
    assert resolve(rows[1], "tcc") is None


def test_rows_from_frame_empty() -> None:
    assert rows_from_frame(pd.DataFrame()) == ([], 0)


def test_rows_from_ddf_keeps_partition_order() -> None:
    pdf = pd.DataFrame({"surveySource": [f"S{i}" for i in range(6)], "tcc_p50": [100.0 * (i + 1) for i in range(6)]})
    ddf = dd.from_pandas(pdf, npartitions=3)

    rows, bad = rows_from_ddf(ddf)
    assert bad == 0
    assert [r.survey_source for r in rows] == [f"S{i}" for i in range(6)]


def test_read_rows_csv(tmp_path: Path) -> None:
    path = tmp_path / "rows.csv"
    path.write_text(
        "standardizedName,surveySource,surveyYear,providerType,tcc_p50,tcc_n_incumbents\n"
        "Cardiology,MGMA,2024,Staff Physician,300000,20\n"
        "Cardiology,Gallagher,2024,,330000,10\n",
        encoding="utf-8",
    )
    rows, bad = read_rows(path)

    assert bad == 0
    assert [r.survey_source for r in rows] == ["MGMA", "Gallagher"]
    assert rows[1].provider_type is None
    assert resolve(rows[0], "tcc").n_incumbents == 20


def test_read_rows_json_list_and_wrapped(tmp_path: Path) -> None:
    records = [{"surveySource": "MGMA", "variables": {"TCC": {"p50": 1}}}, {"variables": "bad"}]
    listed = tmp_path / "rows.json"
    listed.write_text(json.dumps(records), encoding="utf-8")
    wrapped = tmp_path / "wrapped.json"
    wrapped.write_text(json.dumps({"rows": records}), encoding="utf-8")

    for path in (listed, wrapped):
        rows, bad = read_rows(path)
        assert len(rows) == 1
        assert bad == 1
        assert "tcc" in rows[0].variables


def test_read_rows_rejects_bad_payloads(tmp_path: Path) -> None:
    not_rows = tmp_path / "rows.json"
    not_rows.write_text(json.dumps({"data": []}), encoding="utf-8")
    with pytest.raises(ValueError):
        read_rows(not_rows)

    other = tmp_path / "rows.parquet"
    other.write_bytes(b"")
    with pytest.raises(ValueError):
        read_rows(other)
