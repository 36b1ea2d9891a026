import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class Settings:
    upload_host_url: str = os.getenv("UPLOAD_HOST_URL", "https://tmpfiles.org/api/v1/upload")
    figure_api_url: str = os.getenv(
        "FIGURE_API_URL", "https://api.nekolabs.my.id/tools/convert/tofigure"
    )
    figure_user_agent: str = os.getenv(
        "FIGURE_USER_AGENT",
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36",
    )
    relay_user_agent: str = os.getenv("RELAY_USER_AGENT", "Mozilla/5.0")
    upstream_timeout_s: float = float(os.getenv("UPSTREAM_TIMEOUT_S", "120"))
    max_upload_bytes: int = int(os.getenv("MAX_UPLOAD_BYTES", str(10 * 1024 * 1024)))
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_json: bool = os.getenv("LOG_JSON", "true").lower() == "true"


settings = Settings()
