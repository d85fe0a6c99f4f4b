import os

import uvicorn

from citydash.config import settings
from utils.logging_utils import get_tagged_logger, mask_secret, setup_logging

logger = get_tagged_logger(__name__, tag="server")


def log_provider_status() -> None:
    """
    Report which data path weather and air quality will use. Controlled by:
    - CITYDASH_DATA_SOURCE=offline to skip the live provider entirely
    - OPENWEATHER_API_KEY (or CITYDASH_OPENWEATHER_API_KEY) for live data.
    """
    if settings.data_source.lower() == "offline":
        logger.info("Live provider disabled (CITYDASH_DATA_SOURCE=offline); serving synthetic data")
        return
    if not settings.openweather_api_key:
        logger.warning("OPENWEATHER_API_KEY not set; weather and air quality will be synthetic")
        return
    logger.info(f"Live provider enabled with key {mask_secret(settings.openweather_api_key)}")


if __name__ == "__main__":
    setup_logging(level=settings.log_level, job_name="citydash_api")
    log_provider_status()

    uvicorn.run(
        "citydash.main:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", 8000)),
        reload=False,
    )
