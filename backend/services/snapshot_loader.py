"""
Metrics snapshot ingestion — CSV text → SubmissionInput list.

The caller exports a snapshot of current engagement metrics (from its own
store or a fresh scrape) as CSV. Fetching that snapshot is not done here.

Expected columns (header row required, order does not matter):
  submission_id, creator_id, views, likes, shares          (required)
  confirmed_earnings, confirmed_share_percent              (optional)

Blank metric cells are read as 0. Non-numeric, infinite or fractional values
raise ValueError. Negative counts are rejected by the SubmissionInput model.
"""

import io
import math
import logging
from decimal import Decimal, InvalidOperation

import pandas as pd
from pydantic import ValidationError

from models.schemas import SubmissionInput

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ["submission_id", "creator_id", "views", "likes", "shares"]
COUNT_COLUMNS = ["views", "likes", "shares"]
OPTIONAL_DECIMAL_COLUMNS = ["confirmed_earnings", "confirmed_share_percent"]


def load_submissions_csv(csv_text: str) -> list[SubmissionInput]:
    """
    Parse a metrics snapshot CSV.

    Raises:
        ValueError: If the CSV cannot be parsed, required columns are missing,
                    or a row fails validation.
    """
    try:
        df = pd.read_csv(
            io.StringIO(csv_text),
            dtype={"submission_id": str, "creator_id": str},
            keep_default_na=True,
        )
    except (pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise ValueError(f"Could not parse metrics snapshot: {e}") from e

    df.columns = [str(c).strip().lower() for c in df.columns]

    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"Metrics snapshot is missing columns: {', '.join(missing)}")

    submissions: list[SubmissionInput] = []
    skipped_no_id = 0

    for row_idx, row in df.iterrows():
        submission_id = _clean_string(row["submission_id"])
        creator_id = _clean_string(row["creator_id"])
        if not submission_id or not creator_id:
            skipped_no_id += 1
            continue

        fields = {
            "submission_id": submission_id,
            "creator_id": creator_id,
        }
        for col in COUNT_COLUMNS:
            fields[col] = _to_count(row[col])
        for col in OPTIONAL_DECIMAL_COLUMNS:
            if col in df.columns and not pd.isna(row[col]):
                fields[col] = _to_decimal(row[col])

        try:
            submissions.append(SubmissionInput(**fields))
        except ValidationError as e:
            raise ValueError(f"Invalid snapshot row {row_idx + 2}: {e}") from e

    logger.info(
        f"Metrics snapshot loaded: {len(submissions)} submissions, "
        f"{skipped_no_id} rows skipped (missing id)"
    )
    return submissions


def _to_count(raw_value) -> int:
    """Whole, finite, numeric counts only. Fractions are rejected, not truncated."""
    if pd.isna(raw_value):
        return 0
    try:
        value = float(raw_value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid metric value: {raw_value!r}") from e
    if not math.isfinite(value) or not value.is_integer():
        raise ValueError(f"Invalid metric value: {raw_value!r}")
    return int(value)


def _to_decimal(raw_value) -> Decimal:
    try:
        value = Decimal(str(raw_value).strip())
    except InvalidOperation as e:
        raise ValueError(f"Invalid metric value: {raw_value!r}") from e
    if not value.is_finite():
        raise ValueError(f"Invalid metric value: {raw_value!r}")
    return value


def _clean_string(raw_value):
    if pd.isna(raw_value):
        return None
    cleaned = str(raw_value).strip()
    return cleaned if cleaned else None
