"""Shared fixtures for ttsaver tests."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from ttsaver.core.config import Settings, get_settings
from ttsaver.main import app
from ttsaver.services.extractor import Extractor, get_extractor


class FakeExtractor(Extractor):
    """Returns a canned result, or raises a canned exception, and records calls."""

    def __init__(self, result=None, exc: Exception | None = None):
        self.result = result
        self.exc = exc
        self.calls: list[str] = []

    async def fetch(self, video_url: str):
        self.calls.append(video_url)
        if self.exc is not None:
            raise self.exc
        return self.result


def make_settings(**overrides) -> Settings:
    values = {
        "rapidapi_key": "test-key",
        "rapidapi_host": "provider.example",
        "provider_url": "https://provider.example/media",
        "session_error_messages": ("Invalid Session",),
        "validate_urls": True,
        "cors_origins": ("http://localhost:3000",),
        "log_level": "INFO",
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def fake_extractor():
    return FakeExtractor()


@pytest.fixture
def test_settings():
    return make_settings()


@pytest.fixture
def client(fake_extractor, test_settings):
    app.dependency_overrides[get_extractor] = lambda: fake_extractor
    app.dependency_overrides[get_settings] = lambda: test_settings
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
