"""Tests for the heuristic text scorers."""

import pytest

from crisislens.models.crisis_event import SocialMetrics
from crisislens.services.processing.scoring import (
    UNKNOWN_LOCATION,
    clamp_urgency,
    classify_crisis_type,
    compute_urgency,
    extract_location,
    is_crisis_related,
)


class TestClassifyCrisisType:
    """Keyword classification of report text."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("Massive earthquake hits the capital", "earthquake"),
            ("Forest fire spreading toward the valley", "wildfire"),
            ("Thunderstorm warnings issued tonight", "storm"),
            ("Mudslide buries mountain road", "landslide"),
            ("Ash cloud grounds flights", "volcanic"),
        ],
    )
    def test_keyword_match(self, text, expected):
        assert classify_crisis_type(text) == expected

    def test_first_type_in_order_wins(self):
        """Earthquake is checked before tsunami."""
        assert classify_crisis_type("Tsunami warning after undersea earthquake") == "earthquake"

    def test_no_match_is_other(self):
        assert classify_crisis_type("Heavy traffic on the bridge today") == "other"
        assert classify_crisis_type("") == "other"


class TestExtractLocation:
    """Place extraction from free text."""

    def test_place_with_region(self):
        assert extract_location("Major earthquake near Tokyo, Japan this morning") == "Tokyo, Japan"

    def test_preposition_place(self):
        assert extract_location("Severe flooding in Kerala after heavy rains") == "Kerala"

    def test_place_before_impact_verb(self):
        assert extract_location("Manila hit by strong typhoon overnight") == "Manila"

    def test_gazetteer_fallback(self):
        assert extract_location("flooding reported across mumbai suburbs") == "Mumbai"

    def test_unknown(self):
        assert extract_location("the river is rising fast in the city") == UNKNOWN_LOCATION
        assert extract_location("") == UNKNOWN_LOCATION


class TestComputeUrgency:
    """Urgency scoring on the 1-10 scale."""

    def test_base_by_type(self):
        assert compute_urgency("Minor tremor felt", "earthquake") == 8
        assert compute_urgency("Dry conditions continue", "drought") == 5

    def test_unknown_type_uses_default_base(self):
        assert compute_urgency("Something happened", "alien_invasion") == 5

    def test_terms_are_additive_and_clamped(self):
        text = "Critical emergency: casualties reported, people trapped"
        assert compute_urgency(text, "other") == 10

    def test_social_boost_is_capped(self):
        social = SocialMetrics(shares=5000, likes=4000, comments=10)
        assert compute_urgency("Something happened", "other", social) == 8

    def test_small_social_boost_rounds(self):
        social = SocialMetrics(shares=0, likes=1000)
        # 5 + 0.5 rounds half up
        assert compute_urgency("Something happened", "other", social) == 6

    @pytest.mark.parametrize("value,expected", [(0.2, 1), (7.5, 8), (7.49, 7), (11, 10), (-3, 1)])
    def test_clamp(self, value, expected):
        assert clamp_urgency(value) == expected


class TestIsCrisisRelated:
    def test_two_categories_required(self):
        assert is_crisis_related("Emergency evacuation underway after earthquake")
        assert not is_crisis_related("Emergency crisis disaster catastrophe")

    def test_unrelated(self):
        assert not is_crisis_related("Local bakery wins regional award")
        assert not is_crisis_related("")
