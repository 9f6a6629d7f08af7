import logging
import os
from logging.handlers import RotatingFileHandler

from portal.config import settings

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(log_dir: str | None = None, level: str | None = None) -> logging.Logger:
    """Consola + archivo rotativo sobre el logger ``portal``.

    Se puede llamar varias veces: los handlers solo se agregan la primera vez.
    """
    logger = logging.getLogger("portal")
    logger.setLevel(level or settings.LOG_LEVEL)

    formatter = logging.Formatter(LOG_FORMAT)

    if not any(isinstance(h, logging.StreamHandler) and not isinstance(h, RotatingFileHandler)
               for h in logger.handlers):
        console = logging.StreamHandler()
        console.setFormatter(formatter)
        logger.addHandler(console)

    if not any(isinstance(h, RotatingFileHandler) for h in logger.handlers):
        log_dir = log_dir or settings.LOG_DIR
        os.makedirs(log_dir, exist_ok=True)
        file_handler = RotatingFileHandler(
            os.path.join(log_dir, "portal.log"),
            maxBytes=2_000_000,
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger
