"""Tests for message categorization and price extraction."""

import pytest

from automation_dashboard.core.classifier import categorize, extract_price_range
from automation_dashboard.core.types import Domain, MessageType


class TestCategorize:
    def test_website_inquiry(self):
        result = categorize("I need a website")
        assert result.domain == Domain.WEBSITES
        assert result.type == MessageType.PRODUCT_INQUIRY
        assert result.intent == "pricing"

    def test_greeting_has_no_domain(self):
        result = categorize("hello")
        assert result.type == MessageType.GREETING
        assert result.domain is None
        assert result.intent is None

    def test_unmatched_text_is_question(self):
        result = categorize("asdf")
        assert result.type == MessageType.QUESTION
        assert result.domain is None
        assert result.intent is None

    @pytest.mark.parametrize(
        "text, domain, intent",
        [
            ("Can I see your portfolio?", Domain.PORTFOLIOS, "examples"),
            ("Any examples of past work?", Domain.PORTFOLIOS, "examples"),
            ("I have a college project", Domain.PROJECTS, "inquiry"),
            ("Can you build an app?", Domain.PROJECTS, "inquiry"),
            ("I want a chatbot", Domain.CUSTOM_PROJECTS, "custom_quote"),
        ],
    )
    def test_domains(self, text, domain, intent):
        result = categorize(text)
        assert result.domain == domain
        assert result.intent == intent
        assert result.type == MessageType.PRODUCT_INQUIRY

    def test_case_insensitive(self):
        assert categorize("WEBSITE PRICES").domain == Domain.WEBSITES

    def test_earlier_rule_wins(self):
        # Mentions both a custom chatbot and a website: website rule is evaluated first.
        assert categorize("custom chatbot for my website").domain == Domain.WEBSITES

    def test_greeting_after_product_rules(self):
        assert categorize("hey, portfolio prices?").domain == Domain.PORTFOLIOS


class TestExtractPriceRange:
    def test_range_with_plus(self):
        assert extract_price_range("Prices range from ₹800 to ₹2000+") == "₹800 to ₹2000+"

    def test_no_price(self):
        assert extract_price_range("no price here") is None

    def test_first_match_only(self):
        text = "Portfolios are ₹400 to ₹800, websites ₹800 to ₹2000+"
        assert extract_price_range(text) == "₹400 to ₹800"

    def test_grouped_digits(self):
        assert extract_price_range("about ₹1,200 to ₹2,500") == "₹1,200 to ₹2,500"

    def test_single_amount_with_plus(self):
        assert extract_price_range("starting at $50+ per page") == "$50+"

    def test_dash_range_matches_first_amount(self):
        assert extract_price_range("we charge ₹1200-₹2000") == "₹1200"
