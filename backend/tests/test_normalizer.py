import json
from urllib.parse import quote

import pytest

from backend.errors import InvalidCardinalityError, MalformedResponseError
from backend.recommendations.config import CardinalityPolicy
from backend.recommendations.models import UserLocation
from backend.recommendations.normalizer import (
    check_cardinality,
    haversine_km,
    normalize_place,
    normalize_response,
    parse_places,
    strip_code_fence,
)

PLACES = [
    {
        "name": f"Place {i}",
        "description": f"Description {i}",
        "distance": f"{i} km",
        "fare": "Free",
        "rating": 4.5,
        "latitude": 12.97 + i / 100,
        "longitude": 77.59,
    }
    for i in range(8)
]


# ── Fence stripping / parsing ────────────────────────────────────────────


class TestFenceStripping:
    def test_json_fence_parses_like_plain_json(self):
        plain = json.dumps(PLACES)
        fenced = f"```json\n{plain}\n```"
        assert parse_places(fenced) == parse_places(plain)

    def test_bare_fence_without_language_tag(self):
        assert strip_code_fence("```\n[1, 2]\n```") == "[1, 2]"

    def test_uppercase_tag_on_one_line(self):
        assert strip_code_fence("```JSON [1]```") == "[1]"

    def test_idempotent(self):
        once = strip_code_fence("```json\n[1]\n```")
        assert strip_code_fence(once) == once

    def test_unfenced_text_is_untouched(self):
        text = json.dumps(PLACES)
        assert strip_code_fence(text) == text

    def test_invalid_json_raises_malformed(self):
        with pytest.raises(MalformedResponseError):
            parse_places("Here are some places: Cubbon Park, Lalbagh")

    def test_integer_over_digit_limit_raises_malformed(self):
        with pytest.raises(MalformedResponseError):
            parse_places("[" + "9" * 5000 + "]")

    def test_deeply_nested_array_raises_malformed(self):
        with pytest.raises(MalformedResponseError):
            parse_places("[" * 200000 + "]" * 200000)


# ── Cardinality ──────────────────────────────────────────────────────────


class TestCardinality:
    def test_at_least_six_accepts_eight(self):
        assert check_cardinality(PLACES, CardinalityPolicy.at_least6) == PLACES

    def test_at_least_six_rejects_five(self):
        with pytest.raises(InvalidCardinalityError):
            check_cardinality(PLACES[:5], CardinalityPolicy.at_least6)

    def test_exact_four_rejects_three_and_five(self):
        with pytest.raises(InvalidCardinalityError):
            check_cardinality(PLACES[:3], CardinalityPolicy.exact4)
        with pytest.raises(InvalidCardinalityError):
            check_cardinality(PLACES[:5], CardinalityPolicy.exact4)

    def test_object_instead_of_array_is_rejected(self):
        with pytest.raises(InvalidCardinalityError):
            check_cardinality({"places": PLACES}, CardinalityPolicy.at_least6)


# ── Field coercion ───────────────────────────────────────────────────────


class TestNormalizePlace:
    def test_missing_rating_becomes_question_mark(self):
        raw = dict(PLACES[0])
        del raw["rating"]
        assert normalize_place(raw, "Bengaluru").rating == "?"

    def test_empty_record_gets_every_default(self):
        place = normalize_place({}, "Bengaluru")
        assert place.name == "Unknown"
        assert place.description == "No description"
        assert place.distance == "?"
        assert place.fare == "?"
        assert place.rating == "?"
        assert place.latitude == 0
        assert place.longitude == 0
        assert place.coordinates == "0.0,0.0"

    def test_non_object_record_gets_defaults(self):
        assert normalize_place("Cubbon Park", "Bengaluru").name == "Unknown"

    def test_non_numeric_coordinates_become_zero(self):
        place = normalize_place({"latitude": "north", "longitude": None}, "Bengaluru")
        assert (place.latitude, place.longitude) == (0.0, 0.0)

    def test_numeric_string_coordinates_are_accepted(self):
        place = normalize_place({"latitude": "12.5", "longitude": "77.25"}, "Bengaluru")
        assert place.coordinates == "12.5,77.25"

    def test_oversized_numbers_fall_back_to_defaults(self):
        place = normalize_place({"latitude": 10**400, "rating": 10**400}, "Bengaluru")
        assert place.latitude == 0.0
        assert place.rating == "?"

    def test_wrong_typed_labels_become_question_mark(self):
        place = normalize_place({"distance": True, "fare": ["10"], "rating": ""}, "Bengaluru")
        assert (place.distance, place.fare, place.rating) == ("?", "?", "?")

    def test_numeric_labels_are_kept(self):
        place = normalize_place({"distance": 3, "fare": 0, "rating": 4.2}, "Bengaluru")
        assert (place.distance, place.fare, place.rating) == (3, 0, 4.2)

    def test_map_url_encodes_name_and_city(self):
        place = normalize_place({"name": "Tipu Sultan's Palace"}, "New Delhi")
        assert quote("New Delhi", safe="") in place.map_url
        assert quote("Tipu Sultan's Palace", safe="") in place.map_url
        assert place.map_url.startswith("https://www.google.com/maps/search/")

    def test_distance_from_user_only_with_location(self):
        raw = {"latitude": 12.9507, "longitude": 77.5848}
        assert normalize_place(raw, "Bengaluru").distance_from_user is None

        user = UserLocation(lat=12.9716, lng=77.5946)
        place = normalize_place(raw, "Bengaluru", user)
        assert place.distance_from_user == round(haversine_km(12.9716, 77.5946, 12.9507, 77.5848), 2)

    def test_serialises_with_camel_case_aliases(self):
        body = normalize_place(PLACES[0], "Bengaluru").model_dump(by_alias=True, exclude_none=True)
        assert "mapUrl" in body
        assert "distanceFromUser" not in body


# ── Haversine ────────────────────────────────────────────────────────────


def test_haversine_known_pair():
    assert haversine_km(12.9716, 77.5946, 12.9507, 77.5848) == pytest.approx(2.56, abs=0.1)


def test_haversine_same_point_is_zero():
    assert haversine_km(12.9716, 77.5946, 12.9716, 77.5946) == 0


# ── Full pipeline ────────────────────────────────────────────────────────


def test_normalize_response_keeps_count_order_and_enrichment():
    places = normalize_response(json.dumps(PLACES), "Bengaluru", CardinalityPolicy.at_least6)

    assert [p.name for p in places] == [p["name"] for p in PLACES]
    for place in places:
        assert place.coordinates
        assert place.map_url
        assert quote("Bengaluru") in place.map_url


def test_normalize_response_fenced_equals_unfenced():
    plain = normalize_response(json.dumps(PLACES), "Bengaluru", CardinalityPolicy.at_least6)
    fenced = normalize_response(
        "```json\n" + json.dumps(PLACES) + "\n```", "Bengaluru", CardinalityPolicy.at_least6,
    )
    assert fenced == plain
