import logging

from rich.logging import RichHandler

_LOGGER_NAME = "signalroom"


def _build_logger(level: str = "INFO") -> logging.Logger:
    log = logging.getLogger(_LOGGER_NAME)
    if not log.handlers:
        handler = RichHandler(rich_tracebacks=True, show_path=False)
        handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
        log.addHandler(handler)
    log.setLevel(level.upper())
    log.propagate = False
    return log


def set_log_level(level: str) -> None:
    """Change the level of the shared signalroom logger."""
    logger.setLevel(level.upper())


logger = _build_logger()
