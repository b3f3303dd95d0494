# ttsaver/services/extractor.py
import logging
from dataclasses import dataclass
from typing import Any, Optional, Union

import httpx

from ttsaver.core.config import Settings, settings

logger = logging.getLogger(__name__)


class ProviderError(Exception):
    """The provider call failed before a usable payload came back."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


@dataclass(frozen=True)
class MediaResult:
    download_url: Optional[str]
    cover_url: Optional[str] = None


@dataclass(frozen=True)
class ProviderFailure:
    error: Optional[str] = None


ProviderResult = Union[MediaResult, ProviderFailure]


def _text(value: Any) -> Optional[str]:
    if isinstance(value, str) and value:
        return value
    return None


def parse_provider_payload(payload: Any) -> ProviderResult:
    """
    Turns the provider's loosely typed JSON into a MediaResult or ProviderFailure.
    Only presence is checked; URLs are passed through untouched.
    """
    if not isinstance(payload, dict):
        return ProviderFailure()
    if payload.get("error"):
        error = payload["error"]
        return ProviderFailure(error=error if isinstance(error, str) else str(error))
    return MediaResult(
        download_url=_text(payload.get("downloadUrl")),
        cover_url=_text(payload.get("coverUrl")),
    )


def extract_error_message(exc: BaseException) -> str:
    # prefer the provider's own {"message": ...} body over httpx's status text
    if isinstance(exc, httpx.HTTPStatusError):
        try:
            body = exc.response.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and _text(body.get("message")):
            return body["message"]
    return str(exc)


def is_session_error(message: Optional[str], cfg: Settings = settings) -> bool:
    return message is not None and message in cfg.session_error_messages


class Extractor:
    async def fetch(self, video_url: str) -> ProviderResult:
        raise NotImplementedError


class RapidApiExtractor(Extractor):
    def __init__(self, cfg: Settings = settings, client: Optional[httpx.AsyncClient] = None):
        self.cfg = cfg
        self.client = client

    def _headers(self) -> dict:
        return {
            "x-rapidapi-key": self.cfg.rapidapi_key,
            "x-rapidapi-host": self.cfg.rapidapi_host,
        }

    async def _get(self, client: httpx.AsyncClient, video_url: str) -> httpx.Response:
        return await client.get(
            self.cfg.provider_url,
            params={"videoUrl": video_url},
            headers=self._headers(),
        )

    async def fetch(self, video_url: str) -> ProviderResult:
        logger.debug("GET %s videoUrl=%s", self.cfg.provider_url, video_url)
        try:
            if self.client is not None:
                r = await self._get(self.client, video_url)
            else:
                async with httpx.AsyncClient() as client:
                    r = await self._get(client, video_url)
            r.raise_for_status()
            payload = r.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise ProviderError(extract_error_message(exc)) from exc

        if isinstance(payload, dict):
            logger.debug("provider responded with keys %s", sorted(payload))
        return parse_provider_payload(payload)


def get_extractor() -> Extractor:
    return RapidApiExtractor(settings)
