from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional, Union

_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"


class _ThirdPartyNoiseFilter(logging.Filter):
    """
    Keep console output focused on the application:
    - all tasklist logs pass
    - uvicorn access/error logs pass at INFO and above
    - any other library only at WARNING and above
    """

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name
        if name == "tasklist" or name.startswith("tasklist."):
            return True
        if name.startswith("uvicorn"):
            return record.levelno >= logging.INFO
        return record.levelno >= logging.WARNING


# PUBLIC_INTERFACE
def setup_logging(
    *,
    level: Union[int, str] = logging.INFO,
    log_file: Optional[Union[str, Path]] = None,
) -> None:
    """
    Configure the root logger with a console handler on stderr and, when
    `log_file` is given, a file handler receiving everything at DEBUG.

    Safe to call more than once: existing handlers are replaced.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root = logging.getLogger()
    root.setLevel(logging.DEBUG if log_file else level)

    # Remove any pre-existing handlers to avoid duplicates.
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(fmt=_FORMAT, datefmt=_DATEFMT)

    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(level)
    ch.setFormatter(fmt)
    ch.addFilter(_ThirdPartyNoiseFilter())
    root.addHandler(ch)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(str(path), encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(fmt)
        root.addHandler(fh)

    # Route warnings.warn(...) into logging as 'py.warnings'
    logging.captureWarnings(True)
