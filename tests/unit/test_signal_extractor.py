"""
Tests for signal extraction from AI responses.

Pure functions only, no network.
"""

import pytest

from utils.signals import (
    count_mentions,
    extract_brand_name,
    extract_mentioned_domains,
    extract_response_signals,
    find_mention_position,
    is_brand_mentioned,
    is_domain_in_citations,
    is_domain_in_text,
    is_negative_mention,
    split_compound_brand,
)


@pytest.mark.parametrize("domain,brand", [
    ("producthunt.com", "producthunt"),
    ("app.notion.so", "notion"),
    ("example.co.uk", "example"),
    ("acme.fi", "acme"),
    ("my-brand.io", "my-brand"),
])
def test_extract_brand_name(domain, brand):
    assert extract_brand_name(domain) == brand


def test_long_hyphenated_name_returns_domain():
    domain = "best-cheap-flights-deals-online.com"
    assert extract_brand_name(domain) == domain


@pytest.mark.parametrize("brand,parts", [
    ("producthunt", ("product", "hunt")),
    ("stackoverflow", ("stack", "overflow")),
    ("mailchimp", ("mail", "chimp")),
    ("acme", None),
    ("zz", None),
])
def test_split_compound_brand(brand, parts):
    assert split_compound_brand(brand) == parts


@pytest.mark.parametrize("text", [
    "Product Hunt is a great place to launch.",
    "Try product-hunt for launches.",
    "ProductHunt lists new startups daily.",
    "Launch on producthunt.com today.",
])
def test_compound_brand_variants_match(text):
    assert is_brand_mentioned(text, "producthunt.com")


def test_hyphenated_brand_matches_spaced_form():
    assert is_brand_mentioned("My Brand is a newsletter tool.", "my-brand.io")


def test_brand_requires_word_boundary():
    assert not is_brand_mentioned("Acmeville is a town.", "acme.com")
    assert is_brand_mentioned("Acme sells anvils.", "acme.com")


def test_negative_phrases_detected():
    assert is_negative_mention("I'm not aware of a company called Acme.")
    assert is_negative_mention("I’m not aware of that brand.")
    assert is_negative_mention("There is no information available about it.")
    assert not is_negative_mention("Acme is a leading anvil maker.")


def test_negative_mention_guard_on_domain():
    text = "I'm not aware of example.com."
    assert not is_brand_mentioned(text, "example.com")
    assert not is_domain_in_text(text, "example.com")
    assert count_mentions(text, "example.com") == 0
    assert find_mention_position(text, "example.com") == -1


def test_negative_guard_is_per_sentence():
    text = "I'm not aware of Acme. However, Acme Corp sells anvils."
    assert is_brand_mentioned(text, "acme.com")
    assert count_mentions(text, "acme.com") == 1
    assert find_mention_position(text, "acme.com") == text.index("Acme Corp") / len(text)


@pytest.mark.parametrize("text,expected", [
    ("Visit example.com for details.", True),
    ("The docs at docs.example.com help.", True),
    ("It ends with example.com.", True),
    ("Try notexample.com instead.", False),
    ("See example.com.au for Australia.", False),
    ("Example is a company.", False),
])
def test_domain_in_text(text, expected):
    assert is_domain_in_text(text, "example.com") is expected


@pytest.mark.parametrize("citations,expected", [
    (["https://www.example.com/page"], True),
    (["https://blog.example.com/post"], True),
    (["example.com"], True),
    (["https://notexample.com/"], False),
    (["https://example.com.evil.io/"], False),
    ([], False),
])
def test_domain_in_citations(citations, expected):
    assert is_domain_in_citations(citations, "example.com") is expected


def test_extract_mentioned_domains_orders_citations_first():
    domains = extract_mentioned_domains(
        "Try Asana.com or monday.com, or asana.com again.",
        ["https://www.g2.com/categories/pm"]
    )
    assert domains == ["g2.com", "asana.com", "monday.com"]


def test_mention_position_and_count():
    assert find_mention_position("Acme is great", "acme.com") == 0.0
    assert find_mention_position("The best is Acme", "acme.com") == 12 / 16
    assert find_mention_position("", "acme.com") == -1
    assert count_mentions("Acme makes anvils. Acme also sells rockets. See acme.com", "acme.com") == 3


def test_response_signals_keep_citation_despite_hedging():
    signals = extract_response_signals(
        "I'm not aware of example.com.",
        ["https://example.com/about"],
        "example.com"
    )
    assert signals.in_citations
    assert signals.negative
    assert not signals.domain_in_text
    assert not signals.brand_mentioned
    assert signals.positive


def test_response_signals_for_plain_mention():
    signals = extract_response_signals(
        "For anvils, Acme is the usual pick; see acme.com or roadrunner.io.",
        [],
        "acme.com"
    )
    assert signals.brand_mentioned
    assert signals.domain_in_text
    assert not signals.in_citations
    assert signals.mention_count == 2
    assert 0 < signals.mention_position < 1
    assert signals.mentioned_domains == ["acme.com", "roadrunner.io"]


@pytest.mark.parametrize("text,domain", [
    ("I don't know anything about that site.", "t.co"),
    ("Multiply 3 x 4 to get the area.", "x.com"),
])
def test_single_letter_brand_never_matches(text, domain):
    signals = extract_response_signals(text, [], domain)
    assert not signals.brand_mentioned
    assert signals.mention_count == 0
    assert signals.mention_position == -1
    assert not signals.positive


def test_single_letter_brand_still_counts_domain_and_citations():
    signals = extract_response_signals("Posts on x.com often go viral.", ["https://x.com/home"], "x.com")
    assert signals.domain_in_text
    assert signals.in_citations
    assert not signals.brand_mentioned
