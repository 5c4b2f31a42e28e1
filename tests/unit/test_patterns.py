"""Tests for the heuristic pattern tables."""

import pytest

from market_scout.agent.patterns import (
    TierIndicators,
    contains_any,
    extract_generation_token,
    extract_year_bounds,
    extract_year_range,
    match_color,
)


class TestGenerationToken:
    @pytest.mark.parametrize(
        "text,expected",
        [
            ("986.2 Boxster S only", "986.2"),
            ("any 996 Carrera", "996"),
            ("BMW E92 M3 coupe", "E92"),
            ("Audi b7 S4 avant", "B7"),
        ],
    )
    def test_families(self, text: str, expected: str) -> None:
        assert extract_generation_token(text) == expected

    def test_dotted_token_wins_over_plain(self) -> None:
        assert extract_generation_token("996 or 997.2") == "997.2"

    def test_no_token(self) -> None:
        assert extract_generation_token("manual transmission, under 100k") is None

    def test_year_is_not_a_generation(self) -> None:
        assert extract_generation_token("2004 only") is None


class TestYearRange:
    def test_hyphen(self) -> None:
        assert extract_year_range("2003-2004 only") == "2003-2004"

    def test_en_dash_with_spaces(self) -> None:
        assert extract_year_range("years 2003 – 2004") == "2003-2004"

    def test_to_form(self) -> None:
        assert extract_year_bounds("2001 to 2005 is fine") == (2001, 2005)

    def test_none(self) -> None:
        assert extract_year_range("no years mentioned") is None


class TestMatchColor:
    def test_multi_word_phrase_beats_its_suffix(self) -> None:
        assert match_color("speed yellow preferred") == "speed yellow"

    def test_earliest_mention_wins(self) -> None:
        assert match_color("silver or black") == "silver"
        assert match_color("black or silver") == "black"

    def test_unknown_color(self) -> None:
        assert match_color("fuchsia paint") is None


class TestIndicators:
    def test_word_boundaries(self) -> None:
        indicators = TierIndicators()
        assert indicators.hard.search("manual only")
        assert not indicators.hard.search("mustang convertible")
        assert indicators.preference.search("ok with 100k")
        assert not indicators.preference.search("bespoke interior")

    def test_contains_any(self) -> None:
        assert contains_any("no salt road cars", ("salt road", "rust"))
        assert not contains_any("florida car", ("salt road", "rust"))
