"""Process-wide logging setup."""

import logging

from academy_cms.core.config import LoggingSettings


def configure_logging(settings: LoggingSettings) -> None:
    logging.basicConfig(level=settings.level.upper(), format=settings.format)
    # Access logs carry reset tokens in the request path.
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
