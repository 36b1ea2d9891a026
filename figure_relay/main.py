import logging
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.responses import FileResponse, JSONResponse, PlainTextResponse, Response, StreamingResponse
from fastapi.staticfiles import StaticFiles
from starlette.background import BackgroundTask
from starlette.datastructures import UploadFile
from starlette.exceptions import HTTPException as StarletteHTTPException

from figure_relay.http_client import UpstreamError
from figure_relay.observability import RequestLoggingMiddleware, configure_logging
from figure_relay.schemas import ErrorResponse, GenerateResponse, HealthResponse
from figure_relay.services.generate_service import generate_figure
from figure_relay.services.relay_service import download_filename, fetch_image, open_image_stream
from figure_relay.uploads import DEFAULT_FILENAME, InvalidUploadError, UploadedImage

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="Figure Relay", version="0.1.0")
app.add_middleware(RequestLoggingMiddleware)

ROOT_DIR = Path(__file__).resolve().parent.parent
FRONTEND_DIR = ROOT_DIR / "frontend"
STATIC_DIR = FRONTEND_DIR / "static"

app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}
DISPLAY_HEADERS = {
    "Cache-Control": "public, max-age=31536000",
    "Access-Control-Allow-Origin": "*",
}
DOWNLOAD_HEADERS = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}


def _generate_error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse(
        ErrorResponse(error=message).model_dump(),
        status_code=status_code,
        headers=CORS_HEADERS,
    )


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse(status="ok", service="figure-relay")


@app.get("/", include_in_schema=False)
def index_page() -> FileResponse:
    return FileResponse(FRONTEND_DIR / "index.html")


@app.options("/api/generate", include_in_schema=False)
def generate_preflight() -> Response:
    return Response(status_code=204, headers=CORS_HEADERS)


@app.api_route(
    "/api/generate",
    methods=["GET", "PUT", "PATCH", "DELETE"],
    include_in_schema=False,
)
def generate_method_not_allowed() -> JSONResponse:
    return _generate_error("Method not allowed", 405)


@app.post("/api/generate", response_model=GenerateResponse)
async def generate(request: Request) -> JSONResponse:
    try:
        form = await request.form()
        upload = form.get("image")
        if not isinstance(upload, UploadFile):
            return _generate_error("No image provided", 400)
        content = await upload.read()
        if not content:
            return _generate_error("No image provided", 400)

        image = UploadedImage(
            content=content,
            content_type=upload.content_type or "application/octet-stream",
            filename=upload.filename or DEFAULT_FILENAME,
        )
        result = await generate_figure(image)
    except StarletteHTTPException as exc:
        return _generate_error(str(exc.detail), exc.status_code)
    except InvalidUploadError as exc:
        return _generate_error(str(exc), exc.status_code)
    except UpstreamError as exc:
        logger.warning("generate_upstream_failed: %s", exc, extra={"upstream_status": exc.status_code})
        return _generate_error(str(exc), 500)
    except Exception:  # noqa: BLE001
        logger.exception("generate_failed")
        return _generate_error("Internal server error", 500)

    return JSONResponse(GenerateResponse(result=result).model_dump(), headers=CORS_HEADERS)


@app.get("/api/proxy-image")
async def proxy_image(url: str | None = None) -> Response:
    if not url:
        return PlainTextResponse("URL tidak ditemukan", status_code=400)

    try:
        image = await fetch_image(url)
    except UpstreamError as exc:
        logger.warning("proxy_image_failed: %s", exc, extra={"target_url": url})
        return PlainTextResponse("Gagal memuat gambar", status_code=500)
    except Exception:  # noqa: BLE001
        logger.exception("proxy_image_failed", extra={"target_url": url})
        return PlainTextResponse("Gagal memuat gambar", status_code=500)

    return Response(content=image.content, media_type=image.content_type, headers=DISPLAY_HEADERS)


@app.get("/api/download")
async def download(url: str | None = None) -> Response:
    if not url:
        return PlainTextResponse("URL gambar tidak ditemukan.", status_code=400)

    try:
        stream = await open_image_stream(url)
    except UpstreamError as exc:
        if exc.status_code is not None:
            return PlainTextResponse(
                f"Gagal mengunduh file. Status: {exc.status_code}",
                status_code=exc.status_code,
            )
        logger.warning("download_failed: %s", exc, extra={"target_url": url})
        return PlainTextResponse("Terjadi kesalahan saat mengunduh gambar.", status_code=500)
    except Exception:  # noqa: BLE001
        logger.exception("download_failed", extra={"target_url": url})
        return PlainTextResponse("Terjadi kesalahan saat mengunduh gambar.", status_code=500)

    filename = download_filename(url)
    headers = {**DOWNLOAD_HEADERS, "Content-Disposition": f'attachment; filename="{filename}"'}
    return StreamingResponse(
        stream.iter_bytes(),
        media_type="image/jpeg",
        headers=headers,
        background=BackgroundTask(stream.aclose),
    )
