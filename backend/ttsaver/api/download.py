import json
import logging

from fastapi import APIRouter, Depends, Request

from ttsaver.api.errors import DownloadError
from ttsaver.api.schemas import DownloadResponse
from ttsaver.core.config import Settings, get_settings
from ttsaver.services.extractor import (
    Extractor,
    ProviderError,
    ProviderFailure,
    get_extractor,
    is_session_error,
)
from ttsaver.services.tiktok_url import is_tiktok_url

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["download"])

DEFAULT_FAILURE = "Failed to download video"
SESSION_EXPIRED = "The download session has expired. Please try again with a fresh TikTok URL."


async def _read_payload(request: Request) -> dict:
    # an unreadable body is treated as an empty one, never as a 4xx on its own
    try:
        payload = json.loads(await request.body())
    except ValueError:
        return {}
    return payload if isinstance(payload, dict) else {}


@router.post(
    "/download",
    response_model=DownloadResponse,
    response_model_exclude_none=True,
)
async def download(
    request: Request,
    extractor: Extractor = Depends(get_extractor),
    cfg: Settings = Depends(get_settings),
):
    payload = await _read_payload(request)
    url = payload.get("url")
    logger.info("download requested for %r", url)

    if not url or not isinstance(url, str):
        raise DownloadError(400, "TikTok URL is required")
    if cfg.validate_urls and not is_tiktok_url(url):
        raise DownloadError(400, "Invalid TikTok URL format")

    try:
        result = await extractor.fetch(url)
    except ProviderError as e:
        logger.warning("provider call failed for %r: %s", url, e.message)
        message = e.message
    except Exception as e:
        logger.exception("unexpected failure downloading %r", url)
        message = str(e)
    else:
        if isinstance(result, ProviderFailure):
            raise DownloadError(400, result.error or DEFAULT_FAILURE)
        if not result.download_url:
            raise DownloadError(500, "Failed to get download URL")
        return DownloadResponse(downloadUrl=result.download_url, coverUrl=result.cover_url)

    if is_session_error(message, cfg):
        raise DownloadError(403, SESSION_EXPIRED, success=False, is_session_error=True)
    raise DownloadError(500, message or DEFAULT_FAILURE, success=False)
