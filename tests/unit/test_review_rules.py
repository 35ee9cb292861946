from decimal import Decimal

from sew4mi.models.enums.review_status import ModerationStatus
from sew4mi.services.reviews.review_service import auto_moderate, calculate_category_average


def test_clean_review_is_approved():
    assert auto_moderate("Great fit and lovely stitching.") == (ModerationStatus.APPROVED, None)
    assert auto_moderate(None) == (ModerationStatus.APPROVED, None)


def test_too_many_links_flagged():
    text = "See http://a.com and https://b.com and www.c.com"
    status, reason = auto_moderate(text)
    assert status == ModerationStatus.FLAGGED
    assert reason == "Contains too many links"


def test_shouting_flagged():
    status, reason = auto_moderate("THIS IS TERRIBLE WORK")
    assert status == ModerationStatus.FLAGGED
    assert reason == "Excessive capital letters"


def test_short_caps_allowed():
    assert auto_moderate("OK GOOD")[0] == ModerationStatus.APPROVED


def test_category_average():
    ratings = {
        "fit_rating": 5,
        "quality_rating": 4,
        "communication_rating": None,
        "timeliness_rating": 4,
    }
    assert calculate_category_average(ratings) == Decimal("4.33")
    assert calculate_category_average({"fit_rating": None}) is None
