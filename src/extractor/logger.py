import sys
from datetime import datetime, timezone

from loguru import logger

from src.extractor._config import ExtractorSettings


def setup_extractor_logger(settings: ExtractorSettings, pipeline: str):

    def patch_record(record):
        record["extra"]["service"] = 'extractor'
        record["extra"]["pipeline"] = pipeline
        record["extra"]["timestamp"] = datetime.now(timezone.utc).isoformat()
        return True

    logger.remove()
    logger.add(
        settings.LOG_FILE,
        rotation="500 MB",
        format="{time:YYYY-MM-DD HH:mm:ss} | {level} | {message} | {extra}",
        level=settings.LOG_LEVEL,
        filter=patch_record
    )

    logger.add(
        sys.stdout,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level}</level> | <blue>{message}</blue> | {extra}",
        level=settings.LOG_LEVEL,
        filter=patch_record
    )
