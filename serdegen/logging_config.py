"""Logging setup shared by the serdegen modules.

Library modules only ask for a named logger; handlers are attached by
the command-line entry point through :func:`configure_logging`.
"""

import logging

from rich.logging import RichHandler

LOGGER_NAME = "serdegen"

logging.getLogger(LOGGER_NAME).addHandler(logging.NullHandler())


def get_logger(name: str) -> logging.Logger:
    """Return a logger living under the ``serdegen`` namespace.

    Args:
        name: Usually ``__name__`` of the calling module.

    Returns:
        Logger instance.
    """
    if name != LOGGER_NAME and not name.startswith(LOGGER_NAME + "."):
        name = f"{LOGGER_NAME}.{name}"
    return logging.getLogger(name)


def configure_logging(level: int | str = logging.WARNING) -> None:
    """Route serdegen log records to the terminal through rich.

    Args:
        level: Logging level name or number.
    """
    root = logging.getLogger(LOGGER_NAME)
    root.setLevel(level)

    for handler in list(root.handlers):
        if isinstance(handler, RichHandler):
            root.removeHandler(handler)

    handler = RichHandler(show_path=False, rich_tracebacks=True)
    handler.setFormatter(logging.Formatter("%(message)s"))
    root.addHandler(handler)
