import logging
from typing import Optional

LOGGER_NAME = "surface_descent"

FILE_FORMAT = "%(asctime)s - %(levelname)s - %(module)s - %(message)s"
CONSOLE_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


def _file_handler(log_file: str, level: int) -> Optional[logging.Handler]:
    try:
        handler = logging.FileHandler(log_file, mode="w")
    except OSError as exc:
        print(f"[logging] Could not open log file '{log_file}': {exc}")
        return None
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(FILE_FORMAT))
    return handler


def setup_logging(
    log_file: Optional[str],
    *,
    quiet: bool = False,
    debug: bool = False,
) -> logging.Logger:
    """Configure the shared ``surface_descent`` logger and return it.

    Handlers from a previous call are closed first, so the CLI and tests can
    call this repeatedly. The file log (only written when ``log_file`` is
    given) records at the chosen level; the console shows INFO and above
    unless ``quiet``.
    """
    logger = logging.getLogger(LOGGER_NAME)
    level = logging.DEBUG if debug else logging.INFO
    logger.setLevel(level)
    # caplog listens on the root logger
    logger.propagate = True

    while logger.handlers:
        old = logger.handlers[0]
        logger.removeHandler(old)
        old.close()

    if log_file:
        handler = _file_handler(log_file, level)
        if handler is not None:
            logger.addHandler(handler)

    if not quiet:
        console = logging.StreamHandler()
        console.setLevel(logging.INFO)
        console.setFormatter(logging.Formatter(CONSOLE_FORMAT))
        logger.addHandler(console)

    return logger
