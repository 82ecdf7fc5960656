import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

default_console = Console(stderr=True)


def configure_logging(level: int = logging.INFO, console: Optional[Console] = None) -> None:
    """Route ``sfcwire`` log records through a RichHandler.

    Meant for tools that embed the compiler; the library itself never
    configures logging on import.
    """
    handler = RichHandler(console=console or default_console, show_path=False)
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))

    logger = logging.getLogger("sfcwire")
    for existing in list(logger.handlers):
        if isinstance(existing, RichHandler):
            logger.removeHandler(existing)
    logger.addHandler(handler)
    logger.setLevel(level)
