from __future__ import annotations

from socorro.extraction import extract_location_mentions, extract_place_names


def test_mentions_follow_street_then_preposition_order() -> None:
    text = "Flooding on Oak Street near Lower East Side, need help in Brooklyn"

    assert extract_location_mentions(text) == ["Oak Street", "Lower East Side", "Brooklyn"]


def test_lowercase_names_after_prepositions_are_ignored() -> None:
    assert extract_location_mentions("we are stuck in the basement") == []


def test_place_names_include_common_cities() -> None:
    places = extract_place_names("Shelter needed in Miami, FL after storm in manhattan")

    assert places[0] == "Miami"
    assert "Manhattan, NYC" in places
    assert "Miami, FL" in places


def test_empty_text_has_no_places() -> None:
    assert extract_place_names("") == []
    assert extract_location_mentions("") == []
