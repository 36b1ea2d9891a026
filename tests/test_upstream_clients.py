import httpx
import pytest

from figure_relay.figure_client import request_figure
from figure_relay.http_client import UpstreamError
from figure_relay.tmpfiles_client import upload_image
from figure_relay.uploads import InvalidUploadError, UploadedImage, validate_image


@pytest.mark.asyncio
async def test_upload_image_scans_non_json_body(upstream) -> None:
    upstream(lambda request: httpx.Response(200, text="ok -> https://tmpfiles.org/8/a.jpg"))

    url = await upload_image(UploadedImage(content=b"jpg", content_type="image/jpeg"))

    assert url == "https://tmpfiles.org/dl/8/a.jpg"


@pytest.mark.asyncio
async def test_upload_image_sends_default_filename(upstream) -> None:
    seen = upstream(
        lambda request: httpx.Response(200, json={"data": {"url": "https://tmpfiles.org/8/image.jpg"}})
    )

    await upload_image(UploadedImage(content=b"jpg", content_type="image/jpeg"))

    assert b'filename="image.jpg"' in seen[0].content
    assert b"Content-Type: image/jpeg" in seen[0].content


@pytest.mark.asyncio
async def test_request_figure_rejects_blank_result(upstream) -> None:
    upstream(lambda request: httpx.Response(200, json={"result": "  "}))

    with pytest.raises(UpstreamError, match="API did not return a result"):
        await request_figure("https://tmpfiles.org/dl/8/a.jpg")


@pytest.mark.asyncio
async def test_request_figure_rejects_non_json(upstream) -> None:
    upstream(lambda request: httpx.Response(200, text="<html>oops</html>"))

    with pytest.raises(UpstreamError, match="API did not return a result"):
        await request_figure("https://tmpfiles.org/dl/8/a.jpg")


@pytest.mark.asyncio
async def test_request_figure_keeps_status_on_rejection(upstream) -> None:
    upstream(lambda request: httpx.Response(429, json={"message": "slow down"}))

    with pytest.raises(UpstreamError) as excinfo:
        await request_figure("https://tmpfiles.org/dl/8/a.jpg")

    assert excinfo.value.status_code == 429


def test_validate_image_accepts_limit_exactly() -> None:
    validate_image(UploadedImage(content=b"x" * 16, content_type="image/png"), max_bytes=16)


def test_validate_image_rejects_over_limit() -> None:
    with pytest.raises(InvalidUploadError) as excinfo:
        validate_image(
            UploadedImage(content=b"x" * (2 * 1024 * 1024 + 1), content_type="image/png"),
            max_bytes=2 * 1024 * 1024,
        )

    assert excinfo.value.status_code == 413
    assert str(excinfo.value) == "Ukuran file harus kurang dari 2MB"


def test_validate_image_rejects_non_image_type() -> None:
    with pytest.raises(InvalidUploadError, match="Mohon pilih file gambar"):
        validate_image(UploadedImage(content=b"%PDF", content_type="application/pdf"))
