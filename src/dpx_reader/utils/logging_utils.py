from __future__ import annotations

import logging
from pathlib import Path

PACKAGE_LOGGER = "dpx_reader"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

# each -v lowers the package threshold one step
_VERBOSE_STEPS = (logging.INFO, logging.DEBUG)


def resolve_level(level: str, verbose: int = 0) -> int:
    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        resolved = logging.INFO
    for step in _VERBOSE_STEPS[: max(verbose, 0)]:
        resolved = min(resolved, step)
    return resolved


def configure_logging(level: str, log_file: Path | None = None, verbose: int = 0) -> None:
    """Send package records at ``level`` (and third-party warnings) to stderr and ``log_file``."""
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    logging.basicConfig(level=logging.WARNING, format=LOG_FORMAT, handlers=handlers, force=True)
    logging.getLogger(PACKAGE_LOGGER).setLevel(resolve_level(level, verbose))
