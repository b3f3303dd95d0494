"""
Form controller for the download page.

Holds the page state (input text, loading flag, error line, session-error
flag, extracted video, download flag, configuration warning) and drives one
request/response cycle against ``POST /api/download`` through an
``httpx.Client``. The browser page in ``ttsaver/static`` follows the same
transitions.

Example:
    >>> with httpx.Client(base_url="http://localhost:8000") as http:
    ...     form = DownloadFormController(http)
    ...     form.set_url("vm.tiktok.com/ZMabc123/")
    ...     if form.submit():
    ...         form.download()
"""
import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

import httpx

from ttsaver.services.tiktok_url import is_tiktok_url, normalize_tiktok_url

logger = logging.getLogger(__name__)

DOWNLOAD_FILENAME = "tiktok-video.mp4"
# the browser gives no completion signal, the flag is cosmetic
DOWNLOAD_RESET_SECONDS = 2.0

MSG_BLANK = "Please enter a TikTok URL"
MSG_INVALID = "Please enter a valid TikTok URL"
MSG_CLIPBOARD_INVALID = "Clipboard content is not a valid TikTok URL"
MSG_CLIPBOARD_FAILED = "Failed to read from clipboard. Please paste the URL manually."
MSG_NO_DOWNLOAD_URL = "No download URL returned"
MSG_UNPARSEABLE = "Failed to parse response"
MSG_GENERIC = "An error occurred while downloading the video"
MSG_SAVE_FAILED = "Failed to download video. Please try again."


@dataclass(frozen=True)
class VideoData:
    download_url: str
    cover_url: Optional[str] = None
    success: bool = True


class _RequestFailed(Exception):
    pass


def save_to_file(url: str, filename: str, client: Optional[httpx.Client] = None) -> Path:
    """Streams the media at ``url`` into ``filename`` in the working directory."""
    target = Path(filename)
    http = client or httpx.Client(follow_redirects=True)
    try:
        with http.stream("GET", url) as r:
            r.raise_for_status()
            with open(target, "wb") as f:
                for chunk in r.iter_bytes():
                    f.write(chunk)
    finally:
        if client is None:
            http.close()
    logger.info("saved %s to %s", url, target)
    return target


def start_timer(delay: float, callback: Callable[[], None]) -> None:
    timer = threading.Timer(delay, callback)
    timer.daemon = True
    timer.start()


class DownloadFormController:
    def __init__(
        self,
        client: httpx.Client,
        save: Callable[[str, str], object] = save_to_file,
        schedule: Callable[[float, Callable[[], None]], None] = start_timer,
    ):
        self.client = client
        self.save = save
        self.schedule = schedule

        self.url = ""
        self.loading = False
        self.error = ""
        self.is_session_error = False
        self.video_data: Optional[VideoData] = None
        self.is_downloading = False
        self.api_key_warning = False

    @property
    def phase(self) -> str:
        if self.loading:
            return "loading"
        if self.is_downloading:
            return "downloading"
        if self.video_data is not None:
            return "ready"
        return "idle"

    def set_url(self, text: str) -> None:
        self.url = text
        if self.is_session_error:
            self.is_session_error = False

    def paste_from_clipboard(self, read_clipboard: Callable[[], str]) -> None:
        try:
            text = read_clipboard()
        except Exception:
            logger.debug("clipboard read failed", exc_info=True)
            self.error = MSG_CLIPBOARD_FAILED
            return

        if isinstance(text, str) and is_tiktok_url(text, loose=True):
            self.url = text
            self.error = ""
            self.is_session_error = False
        else:
            self.error = MSG_CLIPBOARD_INVALID

    def submit(self) -> bool:
        """Returns True when a download URL is ready. Blank or foreign input never hits the network."""
        if not self.url.strip():
            self.error = MSG_BLANK
            return False
        if not is_tiktok_url(self.url, loose=True):
            self.error = MSG_INVALID
            return False

        normalized = normalize_tiktok_url(self.url)
        self.loading = True
        self.error = ""
        self.is_session_error = False
        self.video_data = None

        try:
            self.video_data = self._request(normalized)
        except _RequestFailed as e:
            self.error = str(e)
        except httpx.HTTPError as e:
            logger.warning("download request failed: %s", e)
            self.error = str(e) or MSG_GENERIC
        finally:
            self.loading = False
        return self.video_data is not None

    def _request(self, url: str) -> VideoData:
        logger.debug("sending request with URL %s", url)
        r = self.client.post(
            "/api/download",
            json={"url": url},
            headers={"Accept": "application/json"},
        )
        try:
            data = r.json()
        except ValueError:
            data = {"message": MSG_UNPARSEABLE}
        if not isinstance(data, dict):
            data = {}

        if not r.is_success:
            if data.get("isSessionError"):
                self.is_session_error = True
            raise _RequestFailed(data.get("message") or f"Request failed with status {r.status_code}")

        download_url = data.get("downloadUrl")
        if not download_url or not isinstance(download_url, str):
            raise _RequestFailed(MSG_NO_DOWNLOAD_URL)
        cover_url = data.get("coverUrl")
        return VideoData(
            download_url=download_url,
            cover_url=cover_url if isinstance(cover_url, str) else None,
            success=bool(data.get("success", True)),
        )

    def download(self) -> None:
        if self.video_data is None:
            return
        self.is_downloading = True
        try:
            self.save(self.video_data.download_url, DOWNLOAD_FILENAME)
        except (OSError, httpx.HTTPError):
            logger.exception("saving %s failed", self.video_data.download_url)
            self.error = MSG_SAVE_FAILED
            self.is_downloading = False
            return
        self.schedule(DOWNLOAD_RESET_SECONDS, self._download_finished)

    def _download_finished(self) -> None:
        self.is_downloading = False

    def refresh_url(self) -> None:
        self.url = ""
        self.error = ""
        self.is_session_error = False

    def check_configuration(self) -> None:
        try:
            data = self.client.get("/health").json()
        except (httpx.HTTPError, ValueError):
            return
        if isinstance(data, dict) and data.get("providerConfigured") is False:
            self.api_key_warning = True

    def dismiss_api_key_warning(self) -> None:
        self.api_key_warning = False
