"""
TikTok URL rules shared by the download endpoint and the form controller.

Both functions are pure and total: malformed input never raises, it either
falls back to a substring search (validation) or comes back unchanged
(normalisation). Parsing and serialisation go through pydantic's URL type,
which follows the WHATWG rules a browser's ``new URL()`` uses.
"""
from typing import Optional, Tuple

from pydantic import AnyUrl, TypeAdapter, ValidationError

TIKTOK_DOMAINS: Tuple[str, ...] = (
    "tiktok.com",
    "www.tiktok.com",
    "m.tiktok.com",
    "vm.tiktok.com",
    "vt.tiktok.com",
)
# the browser form also accepts any host that merely mentions tiktok
LOOSE_TOKEN = "tiktok"

_url_adapter = TypeAdapter(AnyUrl)


def _with_scheme(url: str) -> str:
    url = url.strip()
    if "://" not in url:
        url = "https://" + url
    return url


def _parse(url: str) -> Optional[AnyUrl]:
    try:
        parsed = _url_adapter.validate_python(_with_scheme(url))
    except ValidationError:
        return None
    return parsed if parsed.host else None


def is_tiktok_url(url: str, loose: bool = False) -> bool:
    if not isinstance(url, str):
        return False
    domains = TIKTOK_DOMAINS + ((LOOSE_TOKEN,) if loose else ())

    parsed = _parse(url)
    if parsed is None:
        lowered = url.lower()
        return any(domain in lowered for domain in domains)

    host = parsed.host.lower()
    return any(domain in host for domain in domains)


def normalize_tiktok_url(url: str) -> str:
    """
    Absolute, canonical form of ``url`` (https assumed when no scheme is given).
    Returns the input unchanged when it cannot be parsed.
    """
    parsed = _parse(url)
    if parsed is None:
        return url
    return str(parsed)
