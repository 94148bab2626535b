import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(level: str = "WARNING") -> logging.Logger:
    """Attach a single stream handler to the package logger.

    Calling it again only changes the level.
    """
    logger = logging.getLogger("photoalbum")
    logger.setLevel(getattr(logging, str(level).upper(), logging.WARNING))
    if not any(getattr(h, "_photoalbum", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._photoalbum = True
        logger.addHandler(handler)
    return logger
