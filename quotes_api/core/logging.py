import logging
from colorlog import ColoredFormatter

LOG_COLORS = {
    "DEBUG": "cyan",
    "INFO": "white",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "bold_red,bg_white",
}

# Chatty libraries held at WARNING; request lines come from request_logger
QUIET_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "google.auth", "urllib3")


def setup_logger(level_name: str = "INFO") -> logging.Logger:
    """Colored console output on the root logger; every module logger inherits it."""
    level = logging.getLevelName(level_name.upper())
    if not isinstance(level, int):
        level = logging.INFO

    root = logging.getLogger()
    root.setLevel(level)

    # Re-running (uvicorn --reload, tests) must not stack handlers
    for handler in list(root.handlers):
        if getattr(handler, "_quotes_api", False):
            root.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(ColoredFormatter(
        "%(log_color)s%(levelname)-8s%(reset)s | "
        "%(blue)s%(asctime)s%(reset)s | "
        "%(green)s%(name)s%(reset)s | "
        "%(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        log_colors=LOG_COLORS,
    ))
    handler._quotes_api = True
    root.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    return root
