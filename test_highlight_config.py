"""Tests for the highlight configuration model and tag allow-list."""

import pytest

from searchlight.highlighting.style import inline_color_css
from searchlight.highlighting.tags import ALLOWED_TAGS, closing_tag, opening_tag, validate_tag
from searchlight.schema.highlighting import HighlightConfig, MatchClause, QueryContext


@pytest.mark.parametrize("tag", ALLOWED_TAGS)
def test_allowed_tags_are_kept(tag):
    """Tags in the allow-list pass through unchanged."""
    assert validate_tag(tag) == tag
    assert HighlightConfig(tag=tag).tag == tag


@pytest.mark.parametrize("tag", ["div", "script", "MARK", "", " mark", None, 3])
def test_unknown_tags_fall_back_to_mark(tag):
    assert validate_tag(tag) == "mark"
    assert HighlightConfig(tag=tag).tag == "mark"


def test_tag_markup():
    assert opening_tag("span") == '<span class="ep-highlight">'
    assert closing_tag("span") == "</span>"
    assert opening_tag("blink") == '<mark class="ep-highlight">'


def test_empty_option_uses_defaults():
    """A store that was never populated yields mark, no color, excerpt disabled."""
    for raw in (None, {}, "garbage", []):
        config = HighlightConfig.from_option(raw)
        assert config.tag == "mark"
        assert config.color == ""
        assert config.excerpt_enabled is False


def test_excerpt_enabled_only_for_literal_on():
    assert HighlightConfig.from_option({"highlight_excerpt": "on"}).excerpt_enabled is True
    assert HighlightConfig.from_option({"highlight_excerpt": "off"}).excerpt_enabled is False
    assert HighlightConfig.from_option({"highlight_excerpt": "ON"}).excerpt_enabled is False
    assert HighlightConfig.from_option({"highlight_excerpt": "1"}).excerpt_enabled is False


def test_option_round_trip_shape():
    config = HighlightConfig.from_option(
        {"highlight_tag": "strong", "highlight_color": "#ff0", "highlight_excerpt": "on"}
    )
    assert config.to_option() == {
        "highlight_tag": "strong",
        "highlight_color": "#ff0",
        "highlight_excerpt": "on",
    }


def test_config_is_immutable():
    config = HighlightConfig()
    with pytest.raises(Exception):
        config.tag = "span"


def test_match_clause_reads_multi_match_fields():
    clause = {"multi_match": {"query": "cats", "fields": ["title", "content"]}}
    assert MatchClause.from_query_clause(clause).fields == ["title", "content"]
    assert MatchClause.from_query_clause({"match": {"title": "cats"}}).fields == []
    assert MatchClause.from_query_clause("not a clause").fields == []


def test_query_context_from_document_without_should():
    context = QueryContext.from_query_document("cats", {"query": {"match_all": {}}})
    assert context.search_term == "cats"
    assert context.fallback_clauses == []


def test_inline_color_css():
    assert inline_color_css(HighlightConfig(color="#f00")) == ":root{--highlight-color: #f00;}"
    assert inline_color_css(HighlightConfig()) == ""
