import logging
import sys

LOGGER_NAMES = ("tiltmaze", "session", "level", "layout", "physics", "world")


def setup_logging(level: int = logging.INFO, log_file: str | None = None) -> None:
    """Attach a console handler (and optionally a file handler) to the game's loggers.

    Handlers are replaced, not stacked, so calling this again after a restart
    does not duplicate lines.
    """
    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    )
    handlers: list[logging.Handler] = []

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    handlers.append(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="w", encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    for name in LOGGER_NAMES:
        logger = logging.getLogger(name)
        logger.setLevel(level)
        if logger.hasHandlers():
            logger.handlers.clear()
        for handler in handlers:
            logger.addHandler(handler)
        logger.propagate = False

    logging.getLogger("tiltmaze").info("Logging initialized.")
