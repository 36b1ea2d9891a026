import logging

from figure_relay.figure_client import request_figure
from figure_relay.tmpfiles_client import upload_image
from figure_relay.uploads import UploadedImage, validate_image

logger = logging.getLogger(__name__)


async def generate_figure(image: UploadedImage) -> str:
    """Validate, host, then transform one image; returns the figure URL."""
    validate_image(image)
    file_url = await upload_image(image)
    result = await request_figure(file_url)
    logger.info("figure_generated", extra={"file_url": file_url, "target_url": result})
    return result
