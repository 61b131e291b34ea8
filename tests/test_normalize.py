"""Tests for row normalization."""

from datetime import date

import pytest

from clubratings.etl.errors import RowValidationFailure
from clubratings.etl.normalize import (
    club_identity_key,
    normalize_fixture_row,
    normalize_rating_row,
    parse_source_date,
)


class TestParseSourceDate:
    """Both source date forms map to the same calendar date."""

    def test_iso_and_us_forms_agree(self):
        assert parse_source_date("2025-11-18") == date(2025, 11, 18)
        assert parse_source_date("11/18/2025") == date(2025, 11, 18)

    def test_single_digit_us_form(self):
        assert parse_source_date("1/2/2025") == date(2025, 1, 2)

    def test_surrounding_whitespace(self):
        assert parse_source_date(" 2025-11-18 ") == date(2025, 11, 18)

    @pytest.mark.parametrize(
        "value",
        [
            "",
            "2025-13-01",
            "2025-02-30",
            "13/01/2025",
            "2025/11/18",
            "18.11.2025",
            "yesterday",
        ],
    )
    def test_invalid_dates_rejected(self, value):
        with pytest.raises(RowValidationFailure):
            parse_source_date(value)


class TestClubIdentityKey:
    def test_trims_only(self):
        assert club_identity_key("  Man City ") == "Man City"
        assert club_identity_key("Bodo/Glimt") != club_identity_key("Bodo Glimt")
        assert club_identity_key("mancity") != club_identity_key("ManCity")


class TestNormalizeRatingRow:
    def test_valid_row(self, rating_row):
        record = normalize_rating_row(rating_row())

        assert record.club_key == "ManCity"
        assert record.display_name == "ManCity"
        assert record.country == "ENG"
        assert record.level == 1
        assert record.rank == 1
        assert record.rating == 2050.5
        assert record.valid_from == date(1894, 1, 1)
        assert record.valid_to == date(2099, 6, 6)

    def test_club_identity_from_record(self, rating_row):
        identity = normalize_rating_row(rating_row(Club=" ManCity ")).club
        assert identity.identity_key == "ManCity"
        assert identity.level == 1

    @pytest.mark.parametrize("rank", ["None", ""])
    def test_missing_rank_is_null(self, rating_row, rank):
        assert normalize_rating_row(rating_row(Rank=rank)).rank is None

    @pytest.mark.parametrize("rank", ["abc", "0", "-3", "1.5"])
    def test_bad_rank_rejected(self, rating_row, rank):
        with pytest.raises(RowValidationFailure) as exc_info:
            normalize_rating_row(rating_row(Rank=rank))
        assert exc_info.value.field == "Rank"

    @pytest.mark.parametrize("elo", ["abc", "", "nan", "inf"])
    def test_bad_rating_rejected(self, rating_row, elo):
        with pytest.raises(RowValidationFailure) as exc_info:
            normalize_rating_row(rating_row(Elo=elo))
        assert exc_info.value.field == "Elo"

    @pytest.mark.parametrize("level", ["", "x", "0"])
    def test_bad_level_rejected(self, rating_row, level):
        with pytest.raises(RowValidationFailure):
            normalize_rating_row(rating_row(Level=level))

    def test_empty_club_rejected(self, rating_row):
        with pytest.raises(RowValidationFailure):
            normalize_rating_row(rating_row(Club="   "))

    def test_us_dates(self, rating_row):
        record = normalize_rating_row(rating_row(From="11/18/2025", To="11/19/2025"))
        assert record.valid_from == date(2025, 11, 18)
        assert record.valid_to == date(2025, 11, 19)

    def test_empty_validity_dates_allowed(self, rating_row):
        record = normalize_rating_row(rating_row(From="", To=""))
        assert record.valid_from is None
        assert record.valid_to is None


class TestNormalizeFixtureRow:
    def test_valid_row(self, fixture_row):
        record = normalize_fixture_row(fixture_row())

        assert record.match_date == date(2025, 11, 22)
        assert record.home_club_key == "Arsenal"
        assert record.away_club_key == "Tottenham"
        assert record.competition == "Premier League"
        assert (record.home_level, record.away_level) == (1, 1)
        assert record.home_rating == pytest.approx(2010.3)
        assert record.away_rating == pytest.approx(1820.7)
        assert record.home_win_prob == pytest.approx(0.62)
        assert record.draw_prob == pytest.approx(0.22)
        assert record.away_win_prob == pytest.approx(0.16)

    def test_clubs_carry_their_own_level(self, fixture_row):
        record = normalize_fixture_row(fixture_row(AwayLevel="2"))
        assert record.home_club.level == 1
        assert record.away_club.level == 2
        assert record.away_club.country == "ENG"

    def test_empty_probabilities_are_null(self, fixture_row):
        record = normalize_fixture_row(fixture_row(HomeProbW="", ProbD="", AwayProbW=""))
        assert record.home_win_prob is None
        assert record.draw_prob is None
        assert record.away_win_prob is None

    def test_unparseable_probability_rejects_row(self, fixture_row):
        with pytest.raises(RowValidationFailure) as exc_info:
            normalize_fixture_row(fixture_row(ProbD="n/a"))
        assert exc_info.value.field == "ProbD"

    @pytest.mark.parametrize("field", ["HomeElo", "AwayElo"])
    def test_ratings_required(self, fixture_row, field):
        with pytest.raises(RowValidationFailure):
            normalize_fixture_row(fixture_row(**{field: ""}))

    @pytest.mark.parametrize("field", ["HomeLevel", "AwayLevel"])
    def test_levels_required(self, fixture_row, field):
        with pytest.raises(RowValidationFailure):
            normalize_fixture_row(fixture_row(**{field: ""}))

    def test_missing_club_rejected(self, fixture_row):
        with pytest.raises(RowValidationFailure):
            normalize_fixture_row(fixture_row(AwayTeam=""))

    def test_us_match_date(self, fixture_row):
        assert normalize_fixture_row(fixture_row(Date="11/22/2025")).match_date == date(2025, 11, 22)

    def test_bad_match_date_rejected(self, fixture_row):
        with pytest.raises(RowValidationFailure):
            normalize_fixture_row(fixture_row(Date="2025-22-11"))
