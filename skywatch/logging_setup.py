import logging

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def init_logging(level: str | None) -> None:
    """Configure root logging; library modules only ever log, never configure."""
    if not level:
        return
    logging.basicConfig(level=_LEVELS.get(level.lower(), logging.INFO))
