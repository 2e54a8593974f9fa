"""Turn tabular survey exports into validated `SurveyRow`s.

Module notes:
- Records that fail `SurveyRow` validation are counted as bad, not raised.
- Dask partitions are validated independently as delayed tasks and
  concatenated in partition order.
- Missing cells (NaN / NA) become ``None`` before validation.
"""
from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any, cast

import pandas as pd
import dask.dataframe as dd
from dask import delayed, compute  # type: ignore[attr-defined]
from pydantic import ValidationError

from survey_benchmarks.models import SurveyRow

log = logging.getLogger(__name__)


def rows_from_records(records: Iterable[Any]) -> tuple[list[SurveyRow], int]:
    """Validate row mappings with `SurveyRow.model_validate`.

    Args:
        records: Iterable of row mappings.

    Returns:
        A tuple of (list_of_valid_rows, bad_count).
    """
    good: list[SurveyRow] = []
    bad = 0

    for rec in records:
        try:
            good.append(SurveyRow.model_validate(rec))
        except ValidationError:
            bad += 1

    return good, bad


def rows_from_frame(pdf: pd.DataFrame) -> tuple[list[SurveyRow], int]:
    """Validate every record of a pandas DataFrame.

    Args:
        pdf: Pandas DataFrame with one survey row per record.

    Returns:
        A tuple of (list_of_valid_rows, bad_count).
    """
    if pdf is None or len(pdf) == 0:
        return [], 0

    cleaned = pdf.astype(object).where(pd.notna(pdf), None)
    return rows_from_records(cleaned.to_dict(orient="records"))


def rows_from_ddf(ddf: Any) -> tuple[list[SurveyRow], int]:
    """Validate a Dask DataFrame partition by partition.

    Uses `to_delayed()` so each partition is converted as a plain pandas
    frame, without Dask metadata inference over `SurveyRow` objects.

    Returns:
        A tuple of (list_of_valid_rows, bad_count) in partition order.
    """
    delayed_parts = ddf.to_delayed()
    tasks = [delayed(rows_from_frame)(part) for part in delayed_parts]

    # `compute` is untyped in our environment; cast to Any before calling
    results = cast(Any, compute)(*tasks)

    rows = [row for part_rows, _ in results for row in part_rows]
    bad_total = sum(b for _, b in results)

    log.info("Loaded %d survey rows from %d partitions (bad=%d)", len(rows), len(tasks), bad_total)
    if bad_total:
        log.warning("%d records failed SurveyRow validation and were skipped", bad_total)
    return rows, int(bad_total)


def read_rows(path: Path, blocksize: int | str | None = None) -> tuple[list[SurveyRow], int]:
    """Read a survey row export from disk.

    Args:
        path: `.csv` file (flat legacy columns) or `.json` file holding a list
            of row objects.
        blocksize: Optional Dask CSV block size to control partitioning.

    Returns:
        A tuple of (list_of_valid_rows, bad_count).

    Raises:
        ValueError: for unsupported file types or a JSON payload that is not
            a list of rows.
    """
    suffix = path.suffix.lower()

    if suffix == ".csv":
        kwargs: dict[str, Any] = {"dtype": str}
        if blocksize is not None:
            kwargs["blocksize"] = blocksize
        dd_mod = cast(Any, dd)
        return rows_from_ddf(dd_mod.read_csv(str(path), **kwargs))

    if suffix == ".json":
        payload = json.loads(path.read_text(encoding="utf-8"))
        if isinstance(payload, Mapping):
            payload = payload.get("rows")
        if not isinstance(payload, list):
            raise ValueError(f"{path} must contain a JSON list of survey rows")
        rows, bad = rows_from_records(payload)
        log.info("Loaded %d survey rows from %s (bad=%d)", len(rows), path, bad)
        if bad:
            log.warning("%d records failed SurveyRow validation and were skipped", bad)
        return rows, bad

    raise ValueError(f"Unsupported survey row file type: {path.suffix or path.name}")
