import logging

import httpx

from figure_relay import http_client
from figure_relay.config import settings
from figure_relay.http_client import UpstreamError

logger = logging.getLogger(__name__)


async def request_figure(image_url: str) -> str:
    headers = {"User-Agent": settings.figure_user_agent}
    try:
        async with http_client.new_client() as client:
            response = await client.get(
                settings.figure_api_url,
                params={"imageUrl": image_url},
                headers=headers,
            )
    except httpx.HTTPError as exc:
        raise UpstreamError("Failed to generate figure from API") from exc

    if not response.is_success:
        logger.warning(
            "figure_api_rejected",
            extra={"file_url": image_url, "upstream_status": response.status_code},
        )
        raise UpstreamError(
            "Failed to generate figure from API",
            status_code=response.status_code,
        )

    try:
        data = response.json()
    except ValueError as exc:
        raise UpstreamError("API did not return a result") from exc

    result = data.get("result") if isinstance(data, dict) else None
    if not isinstance(result, str) or not result.strip():
        raise UpstreamError("API did not return a result")
    return result
