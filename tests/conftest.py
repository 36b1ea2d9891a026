import os
from collections.abc import Callable

import httpx
import pytest

# Pin upstream endpoints before the app reads its settings; tests never hit the network.
os.environ["UPLOAD_HOST_URL"] = "https://tmpfiles.test/api/v1/upload"
os.environ["FIGURE_API_URL"] = "https://figure.test/tools/convert/tofigure"
os.environ["LOG_JSON"] = "false"


@pytest.fixture
def upstream(monkeypatch) -> Callable[[Callable[[httpx.Request], httpx.Response]], list[httpx.Request]]:
    """Route every outbound call through ``handler``; returns the list of seen requests."""

    def install(handler: Callable[[httpx.Request], httpx.Response]) -> list[httpx.Request]:
        seen: list[httpx.Request] = []

        def _record(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return handler(request)

        monkeypatch.setattr(
            "figure_relay.http_client.new_client",
            lambda: httpx.AsyncClient(transport=httpx.MockTransport(_record), follow_redirects=True),
        )
        return seen

    return install
