import os
import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.traceback import install

# ignore errors from these libs
import tomlkit, websockets, zeroconf

console = Console()

# libraries that are chatty at INFO (websockets logs every handshake)
NOISY_LOGGERS = ("websockets", "zeroconf", "asyncio")


def setup_logging(level: Optional[str] = None):
    level = (level or os.environ.get("LOGLEVEL", "INFO")).upper()
    logging_handler = RichHandler(
        level=level,
        console=console,
        rich_tracebacks=True,
        tracebacks_suppress=[tomlkit, websockets, zeroconf],
        show_path=level == "DEBUG",
    )

    logging.basicConfig(
        level="NOTSET", format="%(message)s", datefmt="[%X]", handlers=[logging_handler]
    )

    if level != "DEBUG":
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    install(
        console=console
    )
