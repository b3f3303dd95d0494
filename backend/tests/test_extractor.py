"""Tests for the extraction provider client.

Verifies:
1. Payload interpretation (success, provider error, absent payload, missing URL)
2. Outbound request shape (query parameter, credential headers)
3. Error message extraction from HTTP and transport failures
4. Session-error matching against configured literals
"""

from __future__ import annotations

import asyncio

import httpx
import pytest

from tests.conftest import make_settings
from ttsaver.services.extractor import (
    MediaResult,
    ProviderError,
    ProviderFailure,
    RapidApiExtractor,
    extract_error_message,
    is_session_error,
    parse_provider_payload,
)


def _extractor(handler, **overrides) -> RapidApiExtractor:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return RapidApiExtractor(make_settings(**overrides), client=client)


class TestParseProviderPayload:
    def test_media_payload(self):
        result = parse_provider_payload(
            {"downloadUrl": "https://cdn/x.mp4", "coverUrl": "https://cdn/x.jpg", "extra": 1}
        )
        assert result == MediaResult(download_url="https://cdn/x.mp4", cover_url="https://cdn/x.jpg")

    def test_cover_is_optional(self):
        assert parse_provider_payload({"downloadUrl": "https://cdn/x.mp4"}).cover_url is None

    def test_error_field(self):
        assert parse_provider_payload({"error": "bad video"}) == ProviderFailure(error="bad video")

    def test_non_string_error_is_stringified(self):
        assert parse_provider_payload({"error": {"code": 7}}) == ProviderFailure(error="{'code': 7}")

    @pytest.mark.parametrize("payload", [None, [], "oops", 3])
    def test_absent_payload(self, payload):
        assert parse_provider_payload(payload) == ProviderFailure()

    def test_missing_download_url(self):
        assert parse_provider_payload({}) == MediaResult(download_url=None)
        assert parse_provider_payload({"downloadUrl": 12}).download_url is None


class TestFetch:
    def test_sends_video_url_and_credentials(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["request"] = request
            return httpx.Response(200, json={"downloadUrl": "https://cdn/x.mp4"})

        extractor = _extractor(handler, rapidapi_key="secret", rapidapi_host="provider.example")
        result = asyncio.run(extractor.fetch("https://www.tiktok.com/@u/video/1"))

        request = seen["request"]
        assert request.method == "GET"
        assert request.url.host == "provider.example"
        assert request.url.path == "/media"
        assert request.url.params["videoUrl"] == "https://www.tiktok.com/@u/video/1"
        assert request.headers["x-rapidapi-key"] == "secret"
        assert request.headers["x-rapidapi-host"] == "provider.example"
        assert result == MediaResult(download_url="https://cdn/x.mp4")

    def test_provider_error_payload_is_returned_not_raised(self):
        extractor = _extractor(lambda r: httpx.Response(200, json={"error": "bad video"}))
        assert asyncio.run(extractor.fetch("tiktok.com/x")) == ProviderFailure(error="bad video")

    def test_http_error_uses_nested_message(self):
        extractor = _extractor(lambda r: httpx.Response(403, json={"message": "Invalid Session"}))
        with pytest.raises(ProviderError) as exc_info:
            asyncio.run(extractor.fetch("tiktok.com/x"))
        assert exc_info.value.message == "Invalid Session"

    def test_http_error_without_body_uses_exception_text(self):
        extractor = _extractor(lambda r: httpx.Response(502, text="bad gateway"))
        with pytest.raises(ProviderError) as exc_info:
            asyncio.run(extractor.fetch("tiktok.com/x"))
        assert "502" in exc_info.value.message

    def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(ProviderError) as exc_info:
            asyncio.run(_extractor(handler).fetch("tiktok.com/x"))
        assert exc_info.value.message == "connection refused"

    def test_non_json_body(self):
        extractor = _extractor(lambda r: httpx.Response(200, text="<html>"))
        with pytest.raises(ProviderError):
            asyncio.run(extractor.fetch("tiktok.com/x"))


class TestExtractErrorMessage:
    def test_plain_exception(self):
        assert extract_error_message(RuntimeError("boom")) == "boom"

    def test_status_error_with_empty_message_falls_back(self):
        request = httpx.Request("GET", "https://provider.example/media")
        response = httpx.Response(500, json={"message": ""}, request=request)
        exc = httpx.HTTPStatusError("server error", request=request, response=response)
        assert extract_error_message(exc) == "server error"


class TestIsSessionError:
    def test_default_literal(self):
        cfg = make_settings()
        assert is_session_error("Invalid Session", cfg)
        assert not is_session_error("invalid session", cfg)
        assert not is_session_error(None, cfg)

    def test_configured_literals(self):
        cfg = make_settings(session_error_messages=("Token expired", "Invalid Session"))
        assert is_session_error("Token expired", cfg)
