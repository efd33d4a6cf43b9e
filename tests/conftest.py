"""
Shared fixtures for MediClear tests.

Environment is pinned before the app package is imported so the cached
settings pick it up.
"""

import os

os.environ["GEMINI_API_KEY"] = "test-api-key"
os.environ["RATE_LIMIT_ENABLED"] = "false"

import pytest

from app.core.errors import ConfigurationError
from app.models.schemas import SimplifiedReport


CANNED_REPORT = {
    "summary": "S",
    "keyPoints": ["A", "B"],
    "glossary": [{"term": "T", "definition": "D"}],
    "disclaimer": "Disc",
}

TRANSLATED_REPORT = {
    "summary": "एस",
    "keyPoints": ["ए", "बी"],
    "glossary": [{"term": "टी", "definition": "डी"}],
    "disclaimer": "अस्वीकरण",
}


class FakeEngine:
    """
    Stand-in for LLMEngine.

    Returns queued payloads in order (None once exhausted) and records
    every call. If error is set, each call raises it instead.
    """

    def __init__(self, responses=None, error=None, configured=True):
        self.responses = list(responses or [])
        self.error = error
        self.configured = configured
        self.calls = []

    @property
    def is_configured(self):
        return self.configured

    def require_client(self):
        if not self.configured:
            raise ConfigurationError("The report service is not configured.")
        return object()

    async def generate_structured(self, parts, response_schema, system_instruction=None):
        self.require_client()
        self.calls.append({
            "parts": parts,
            "response_schema": response_schema,
            "system_instruction": system_instruction,
        })
        if self.error is not None:
            raise self.error
        return self.responses.pop(0) if self.responses else None

    def get_status(self):
        return {"provider": "fake", "model": "fake", "configured": self.configured}


@pytest.fixture
def canned_report():
    """The canned analysis result as a model."""
    return SimplifiedReport.model_validate(CANNED_REPORT)


@pytest.fixture
def translated_report():
    """The canned translation as a model."""
    return SimplifiedReport.model_validate(TRANSLATED_REPORT)


@pytest.fixture
def make_engine():
    """Factory for fake engines."""
    return FakeEngine
