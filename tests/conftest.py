"""Shared fixtures: an in-memory stand-in for the Anthropic client."""

import base64
import json
from types import SimpleNamespace

import pytest

from mungercompass.config import Settings


class FakeMessages:
    def __init__(self, replies):
        self.replies = list(replies)
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        reply = self.replies.pop(0) if len(self.replies) > 1 else self.replies[0]
        if isinstance(reply, BaseException):
            raise reply
        if not isinstance(reply, str):
            reply = json.dumps(reply)
        return SimpleNamespace(content=[SimpleNamespace(type="text", text=reply)])


class FakeAnthropicClient:
    """Replies with the given values in order; the last one repeats."""

    def __init__(self, *replies):
        self.messages = FakeMessages(replies or ("",))

    @property
    def calls(self):
        return self.messages.calls


@pytest.fixture
def fake_client():
    return FakeAnthropicClient


@pytest.fixture
def settings():
    return Settings(api_key=None, model="test-model", max_tokens=500, temperature=0.0)


@pytest.fixture
def photo_uri():
    return "data:image/png;base64," + base64.b64encode(b"\x89PNG\r\n\x1a\nfake").decode("ascii")


@pytest.fixture
def recommendation_reply():
    return {
        "recommendation": "Buy",
        "reasoning": "You will use it every working day for years.",
        "opportunityCost": "$500 in an index fund compounds to roughly $1,900 in 20 years.",
        "alternatives": "A used desk from an office clearance sale.",
        "financialImpact": "Under 10% of one month's income; no debt required.",
        "keyInsights": "Beware of the premium-feature anchor on the top model.",
    }


@pytest.fixture
def image_recommendation_reply():
    return {
        "itemDescription": "A chrome dual-boiler espresso machine.",
        "recommendation": "Don't Buy",
        "reasoning": "A $40 moka pot covers the need.",
        "opportunityCost": "The price is two months of emergency savings.",
        "alternatives": ["Moka pot", "Manual lever press"],
        "financialImpact": {
            "shortTerm": "Drains this month's discretionary budget.",
            "longTerm": "Little effect once paid off, but maintenance adds up.",
        },
        "keyInsights": "Café envy is a classic social-proof trap.",
    }


@pytest.fixture
def alternatives_reply():
    return {
        "alternatives": [
            {"name": "Seiko Presage", "url": "https://shop.example.com/seiko-presage", "price": 425.0},
            {"name": "Orient Bambino", "url": "https://shop.example.com/orient-bambino", "price": 180.5},
            {"name": "Tissot PRX", "url": "https://watches.example.org/tissot-prx?ref=1", "price": 650.0},
        ]
    }
