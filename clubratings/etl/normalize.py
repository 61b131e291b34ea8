"""
Field-level validation and normalization of parsed source rows.

Every function here either returns a typed record or raises
RowValidationFailure; the batch importer decides what to do with it.

Club names are only trimmed. Names differing by case or punctuation
("Bodo/Glimt" vs "Bodo Glimt") become distinct clubs.
"""

import math
import re
from datetime import date
from typing import Optional

from clubratings.etl.base import FixtureRecord, RatingRecord, RawRow
from clubratings.etl.errors import RowValidationFailure

# Published in the Rank column for clubs outside the ranking
NO_RANK_SENTINEL = "None"

_ISO_DATE_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
_US_DATE_RE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")


def club_identity_key(name: str) -> str:
    return name.strip()


def parse_source_date(value: str) -> date:
    """
    Parse a source date in YYYY-MM-DD or M/D/YYYY form.

    A '/' anywhere in the value selects the M/D/YYYY form.
    """
    raw = (value or "").strip()
    if "/" in raw:
        match = _US_DATE_RE.match(raw)
        if match:
            month, day, year = (int(g) for g in match.groups())
        else:
            raise RowValidationFailure(f"Invalid date {raw!r}", value=raw)
    else:
        match = _ISO_DATE_RE.match(raw)
        if match:
            year, month, day = (int(g) for g in match.groups())
        else:
            raise RowValidationFailure(f"Invalid date {raw!r}", value=raw)

    try:
        return date(year, month, day)
    except ValueError as e:
        raise RowValidationFailure(f"Invalid date {raw!r}: {e}", value=raw) from e


def _required_int(row: RawRow, field: str, minimum: Optional[int] = None) -> int:
    raw = row.get(field, "").strip()
    try:
        value = int(raw)
    except ValueError:
        raise RowValidationFailure(f"{field} is not an integer: {raw!r}", field, raw) from None
    if minimum is not None and value < minimum:
        raise RowValidationFailure(f"{field} must be >= {minimum}: {raw!r}", field, raw)
    return value


def _required_float(row: RawRow, field: str) -> float:
    raw = row.get(field, "").strip()
    try:
        value = float(raw)
    except ValueError:
        raise RowValidationFailure(f"{field} is not a number: {raw!r}", field, raw) from None
    if not math.isfinite(value):
        raise RowValidationFailure(f"{field} is not finite: {raw!r}", field, raw)
    return value


def _optional_float(row: RawRow, field: str) -> Optional[float]:
    """Empty means absent; anything else must be a finite number."""
    raw = row.get(field, "").strip()
    if not raw:
        return None
    return _required_float(row, field)


def _parse_rank(raw: str) -> Optional[int]:
    raw = raw.strip()
    if raw in (NO_RANK_SENTINEL, ""):
        return None
    try:
        rank = int(raw)
    except ValueError:
        raise RowValidationFailure(f"Rank is not an integer: {raw!r}", "Rank", raw) from None
    if rank < 1:
        raise RowValidationFailure(f"Rank must be >= 1: {raw!r}", "Rank", raw)
    return rank


def normalize_rating_row(row: RawRow) -> RatingRecord:
    """Validate a Rank/Club/Country/Level/Elo/From/To row."""
    name = club_identity_key(row.get("Club", ""))
    if not name:
        raise RowValidationFailure("Club name is empty", "Club", row.get("Club"))

    level = _required_int(row, "Level", minimum=1)
    rating = _required_float(row, "Elo")
    rank = _parse_rank(row.get("Rank", ""))

    valid_from = parse_source_date(row["From"]) if row.get("From") else None
    valid_to = parse_source_date(row["To"]) if row.get("To") else None

    return RatingRecord(
        club_key=name,
        display_name=name,
        country=row.get("Country", "").strip(),
        level=level,
        rank=rank,
        rating=rating,
        valid_from=valid_from,
        valid_to=valid_to,
    )


def normalize_fixture_row(row: RawRow) -> FixtureRecord:
    """
    Validate a fixture row.

    Both ratings and levels are required. Each probability may be empty
    (stored as NULL), but a present value that is not a finite number
    rejects the whole row.
    """
    home = club_identity_key(row.get("HomeTeam", ""))
    away = club_identity_key(row.get("AwayTeam", ""))
    if not home or not away:
        raise RowValidationFailure(
            f"Fixture is missing a club: {row.get('HomeTeam')!r} vs {row.get('AwayTeam')!r}"
        )

    return FixtureRecord(
        match_date=parse_source_date(row.get("Date", "")),
        country=row.get("Country", "").strip(),
        competition=row.get("Competition", "").strip(),
        home_club_key=home,
        away_club_key=away,
        home_level=_required_int(row, "HomeLevel", minimum=1),
        away_level=_required_int(row, "AwayLevel", minimum=1),
        home_rating=_required_float(row, "HomeElo"),
        away_rating=_required_float(row, "AwayElo"),
        home_win_prob=_optional_float(row, "HomeProbW"),
        draw_prob=_optional_float(row, "ProbD"),
        away_win_prob=_optional_float(row, "AwayProbW"),
    )
