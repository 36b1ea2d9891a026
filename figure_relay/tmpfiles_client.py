import json
import logging
import re
from collections.abc import Callable
from typing import Any

import httpx

from figure_relay import http_client
from figure_relay.config import settings
from figure_relay.http_client import UpstreamError
from figure_relay.uploads import UploadedImage

logger = logging.getLogger(__name__)

_HOST_SEGMENT = "/tmpfiles.org/"
_DIRECT_SEGMENT = "/tmpfiles.org/dl/"
_DIRECT_BASE = "https://tmpfiles.org/dl/"
# tmpfiles.org page URLs look like https://tmpfiles.org/<numeric id>/<filename>.
_HOSTED_URL_PATTERN = re.compile(r"https?://tmpfiles\.org/(\d+/[A-Za-z0-9._-]+)")

UrlStrategy = Callable[[Any, str], str | None]


def _from_data_url(payload: Any, raw_text: str) -> str | None:
    data = payload.get("data") if isinstance(payload, dict) else None
    url = data.get("url") if isinstance(data, dict) else None
    if not isinstance(url, str) or not url:
        return None
    return url.replace(_HOST_SEGMENT, _DIRECT_SEGMENT, 1)


def _from_url_pattern(payload: Any, raw_text: str) -> str | None:
    # Re-serialised JSON has no escaped slashes, unlike some raw bodies.
    text = raw_text if payload is None else json.dumps(payload, ensure_ascii=False)
    match = _HOSTED_URL_PATTERN.search(text)
    if match is None:
        return None
    return f"{_DIRECT_BASE}{match.group(1)}"


URL_STRATEGIES: tuple[UrlStrategy, ...] = (_from_data_url, _from_url_pattern)


def extract_direct_url(payload: Any, raw_text: str = "") -> str | None:
    """Derive the direct-download URL from an upload response.

    Strategies run in order and the first one that yields a URL wins:
    the documented ``data.url`` field, then a scan for anything shaped
    like a tmpfiles.org page URL.
    """
    for strategy in URL_STRATEGIES:
        url = strategy(payload, raw_text)
        if url:
            return url
    return None


async def upload_image(image: UploadedImage) -> str:
    files = {"file": (image.filename, image.content, image.content_type)}
    try:
        async with http_client.new_client() as client:
            response = await client.post(settings.upload_host_url, files=files)
    except httpx.HTTPError as exc:
        raise UpstreamError("Failed to upload image to tmpfiles.org") from exc

    if not response.is_success:
        logger.warning(
            "hosted_upload_rejected",
            extra={"upstream_status": response.status_code},
        )
        raise UpstreamError(
            "Failed to upload image to tmpfiles.org",
            status_code=response.status_code,
        )

    raw_text = response.text
    try:
        payload = response.json()
    except ValueError:
        payload = None

    file_url = extract_direct_url(payload, raw_text)
    if not file_url:
        raise UpstreamError("Failed to get file URL from tmpfiles.org")

    logger.info("hosted_file_uploaded", extra={"file_url": file_url})
    return file_url
