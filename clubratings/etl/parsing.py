"""Tabular (CSV) parsing into ordered rows keyed by header name."""

import csv
import io
import logging
from typing import Sequence

from clubratings.etl.base import RawRow
from clubratings.etl.errors import MalformedInput

logger = logging.getLogger(__name__)

RATING_COLUMNS = ["Rank", "Club", "Country", "Level", "Elo", "From", "To"]

FIXTURE_COLUMNS = [
    "Date", "HomeTeam", "AwayTeam", "Country", "Competition",
    "HomeLevel", "AwayLevel", "HomeElo", "AwayElo",
    "HomeProbW", "ProbD", "AwayProbW",
]


def _is_blank(fields: list[str]) -> bool:
    # An empty or whitespace-only line; ",,," is a record of empty fields
    return not fields or (len(fields) == 1 and not fields[0].strip())


def parse_rows(raw_text: str, expected_columns: Sequence[str]) -> list[RawRow]:
    """
    Parse CSV text into a list of rows.

    The first non-blank line is the header. Every record must have exactly
    as many fields as the header; blank lines are skipped and every field is
    trimmed. A header-only payload yields an empty list.

    Args:
        raw_text: Response body from the source.
        expected_columns: Columns that must be present in the header.

    Returns:
        Rows in input order, each a dict in header order.

    Raises:
        MalformedInput: On broken CSV syntax, a record length mismatch, or a
            header missing expected columns. No partial result is returned.
    """
    if not raw_text or not raw_text.strip():
        return []

    reader = csv.reader(io.StringIO(raw_text, newline=""), strict=True, skipinitialspace=True)
    header: list[str] = []
    rows: list[RawRow] = []

    try:
        for fields in reader:
            if _is_blank(fields):
                continue

            if not header:
                header = [f.strip() for f in fields]
                missing = [c for c in expected_columns if c not in header]
                if missing:
                    raise MalformedInput(
                        f"CSV header missing columns {missing} (got {header})"
                    )
                continue

            if len(fields) != len(header):
                raise MalformedInput(
                    f"Invalid record length on line {reader.line_num}: "
                    f"expected {len(header)} fields, got {len(fields)}"
                )

            rows.append({name: value.strip() for name, value in zip(header, fields)})
    except csv.Error as e:
        raise MalformedInput(f"Failed to parse CSV on line {reader.line_num}: {e}") from e

    logger.debug(f"Parsed {len(rows)} rows from CSV")
    return rows
