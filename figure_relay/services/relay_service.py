import logging
import time
from collections.abc import AsyncIterator
from dataclasses import dataclass
from urllib.parse import quote, urlsplit

import httpx

from figure_relay import http_client
from figure_relay.config import settings
from figure_relay.http_client import UpstreamError

logger = logging.getLogger(__name__)

DEFAULT_IMAGE_TYPE = "image/jpeg"
DEFAULT_EXTENSION = ".jpg"


@dataclass(frozen=True)
class RelayedImage:
    content: bytes
    content_type: str


@dataclass
class ImageStream:
    """An open upstream response whose body is sent on to the caller."""

    response: httpx.Response
    client: httpx.AsyncClient

    async def iter_bytes(self) -> AsyncIterator[bytes]:
        async for chunk in self.response.aiter_bytes():
            yield chunk

    async def aclose(self) -> None:
        await self.response.aclose()
        await self.client.aclose()


def _relay_headers() -> dict[str, str]:
    return {"User-Agent": settings.relay_user_agent}


async def fetch_image(url: str) -> RelayedImage:
    try:
        async with http_client.new_client() as client:
            response = await client.get(url, headers=_relay_headers())
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        raise UpstreamError(f"fetch failed: {exc}") from exc

    if not response.is_success:
        raise UpstreamError(
            f"upstream returned status {response.status_code}",
            status_code=response.status_code,
        )
    return RelayedImage(
        content=response.content,
        content_type=response.headers.get("content-type") or DEFAULT_IMAGE_TYPE,
    )


async def open_image_stream(url: str) -> ImageStream:
    """Start streaming ``url``; the caller owns the stream and must close it."""
    client = http_client.new_client()
    try:
        request = client.build_request("GET", url, headers=_relay_headers())
        response = await client.send(request, stream=True)
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        await client.aclose()
        raise UpstreamError(f"fetch failed: {exc}") from exc
    except Exception:
        await client.aclose()
        raise

    stream = ImageStream(response=response, client=client)
    if not response.is_success:
        await stream.aclose()
        raise UpstreamError(
            f"upstream returned status {response.status_code}",
            status_code=response.status_code,
        )
    return stream


def download_filename(url: str, now_ms: int | None = None) -> str:
    try:
        path = urlsplit(url).path
    except ValueError:
        path = url.split("?", 1)[0].split("#", 1)[0]
    name = path.rsplit("/", 1)[-1].replace('"', "")
    if not name:
        stamp = int(time.time() * 1000) if now_ms is None else now_ms
        return f"figure_art_{stamp}{DEFAULT_EXTENSION}"
    if not name.isascii():
        name = quote(name)
    if "." not in name:
        name = f"{name}{DEFAULT_EXTENSION}"
    return name
