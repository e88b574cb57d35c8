"""Log setup for the navigation layer.

Console output follows ``--verbose``; the log file always records DEBUG so a
user report carries the full key dispatch and search trace.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_FILE = Path.home() / ".access_nav.log"
LOG_FORMAT = "%(asctime)s  %(levelname)-8s  %(name)s: %(message)s"
PACKAGE_LOGGER = "access_nav"


def setup(
    level: int = logging.INFO,
    log_file: str | Path | None = LOG_FILE,
    *,
    file_level: int = logging.DEBUG,
) -> list[logging.Handler]:
    """Install console and file handlers on the root logger.

    ``log_file=None`` disables the file. Returns the installed handlers.
    """
    # stderr, so console speech on stdout stays one utterance per line
    console = logging.StreamHandler(sys.stderr)
    console.setLevel(level)
    handlers: list[logging.Handler] = [console]

    if log_file is not None:
        try:
            to_file = logging.FileHandler(Path(log_file), encoding="utf-8")
        except OSError as exc:
            print(f"access_nav: cannot open log file {log_file} ({exc})", file=sys.stderr)
        else:
            to_file.setLevel(file_level)
            handlers.append(to_file)

    logging.basicConfig(
        level=min(h.level for h in handlers),
        format=LOG_FORMAT,
        datefmt="%H:%M:%S",
        handlers=handlers,
        force=True,
    )

    def _excepthook(exc_type, exc, tb) -> None:
        logging.getLogger(PACKAGE_LOGGER).critical(
            "Unhandled exception", exc_info=(exc_type, exc, tb)
        )

    sys.excepthook = _excepthook
    return handlers
