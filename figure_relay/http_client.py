import httpx

from figure_relay.config import settings


class UpstreamError(RuntimeError):
    """A third-party call failed or answered with something unusable."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def new_client() -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=settings.upstream_timeout_s, follow_redirects=True)
