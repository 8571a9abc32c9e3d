"""Keyword classifier for inbound WhatsApp messages and price extraction for replies."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from automation_dashboard.core.types import Domain, MessageType


@dataclass(frozen=True, slots=True)
class Categorization:
    type: MessageType
    domain: Optional[Domain] = None
    intent: Optional[str] = None


# Evaluated top to bottom; the first rule with a matching keyword wins.
_RULES: tuple[tuple[tuple[str, ...], Categorization], ...] = (
    (
        ("website", "site", "web"),
        Categorization(MessageType.PRODUCT_INQUIRY, Domain.WEBSITES, "pricing"),
    ),
    (
        ("portfolio", "showcase", "examples"),
        Categorization(MessageType.PRODUCT_INQUIRY, Domain.PORTFOLIOS, "examples"),
    ),
    (
        ("project", "development", "build"),
        Categorization(MessageType.PRODUCT_INQUIRY, Domain.PROJECTS, "inquiry"),
    ),
    (
        ("custom", "ai", "chatbot", "specific"),
        Categorization(MessageType.PRODUCT_INQUIRY, Domain.CUSTOM_PROJECTS, "custom_quote"),
    ),
    (
        ("hello", "hi", "hey"),
        Categorization(MessageType.GREETING),
    ),
)

_DEFAULT = Categorization(MessageType.QUESTION)

_AMOUNT = r"[₹$€£]\d+(?:,\d+)*"
PRICE_PATTERN = re.compile(rf"{_AMOUNT}(?:\s*to\s*{_AMOUNT})?\+?")


def categorize(text: str) -> Categorization:
    """Classify a message by substring keywords over its lower-cased text."""
    lowered = text.lower()
    for keywords, result in _RULES:
        if any(keyword in lowered for keyword in keywords):
            return result
    return _DEFAULT


def extract_price_range(text: str) -> Optional[str]:
    """Return the first price or price range quoted in *text*, e.g. "₹800 to ₹2000+"."""
    match = PRICE_PATTERN.search(text)
    return match.group(0) if match else None
