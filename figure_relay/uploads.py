from dataclasses import dataclass

from figure_relay.config import settings

DEFAULT_FILENAME = "image.jpg"


@dataclass(frozen=True)
class UploadedImage:
    content: bytes
    content_type: str
    filename: str = DEFAULT_FILENAME


class InvalidUploadError(ValueError):
    def __init__(self, message: str, status_code: int = 400) -> None:
        super().__init__(message)
        self.status_code = status_code


def validate_image(image: UploadedImage, max_bytes: int | None = None) -> None:
    limit = settings.max_upload_bytes if max_bytes is None else max_bytes
    if not image.content_type.startswith("image/"):
        raise InvalidUploadError("Mohon pilih file gambar")
    if len(image.content) > limit:
        raise InvalidUploadError(
            f"Ukuran file harus kurang dari {limit // (1024 * 1024)}MB",
            status_code=413,
        )
