"""Club rankings by date."""

from clubratings.rankings.service import NoRatingData, get_latest_rating_date, get_rankings

__all__ = ["NoRatingData", "get_latest_rating_date", "get_rankings"]
