import logging
import sys
import time
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Union

LOGGER_NAMESPACE = "flash_sqlz"
LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


class SQLFormatter(logging.Formatter):
    """
    Formatter with UTC ISO-8601 timestamps that flattens multi-line SQL
    onto a single log line.
    """

    def __init__(self, fmt: str | None = None, datefmt: str | None = None):
        super().__init__(fmt, datefmt)
        self.converter = time.gmtime

    def formatTime(self, record, datefmt=None):  # noqa: N802
        ct = self.converter(record.created)
        if datefmt:
            return time.strftime(datefmt, ct)
        t = time.strftime("%Y-%m-%d %H:%M:%S", ct)
        return "%s.%03dZ" % (t, record.msecs)

    def format(self, record: logging.LogRecord) -> str:
        return " ".join(super().format(record).splitlines())


def get_logger(name: str) -> logging.Logger:
    """
    Return a logger below the package namespace.

    >>> logger = get_logger(__name__)
    """
    return logging.getLogger(name)


def _level_number(level: Union[int, str, None]) -> int:
    if level is None:
        from .config import sqlz_settings

        level = sqlz_settings.LOG_LEVEL
    if isinstance(level, int):
        return level
    return logging.getLevelNamesMapping().get(level.upper(), logging.INFO)


def _rotating_file(
    log_file: Union[str, Path], max_bytes: int, backup_count: int
) -> Optional[logging.Handler]:
    path = Path(log_file).resolve()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        return RotatingFileHandler(
            path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
        )
    except OSError as e:
        sys.stderr.write(f"Failed to setup log file: {e}\n")
        return None


def setup_logging(
    level: Union[int, str, None] = None,
    log_file: Optional[Union[str, Path]] = None,
    max_bytes: int = 10_485_760,
    backup_count: int = 5,
    capture_roots: bool = False,
    module_name: str = LOGGER_NAMESPACE,
) -> logging.Logger:
    """
    Configure logging for flash_sqlz.

    Args:
        level: Logging level name or number. Defaults to ``SQLZ_LOG_LEVEL``.
            ``DEBUG`` logs every rendered statement with its arguments.
        log_file: Optional path of a rotating log file. An unwritable path
            is reported on stderr and skipped.
        capture_roots: Configure the root logger instead of the
            ``flash_sqlz`` namespace only.
        module_name: Namespace configured when ``capture_roots`` is False.

    Returns:
        The configured logger. Calling this again replaces its handlers.
    """
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        file_handler = _rotating_file(log_file, max_bytes, backup_count)
        if file_handler is not None:
            handlers.append(file_handler)

    formatter = SQLFormatter(LOG_FORMAT)
    logger = logging.getLogger() if capture_roots else logging.getLogger(module_name)
    logger.handlers.clear()
    logger.setLevel(_level_number(level))
    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    if not capture_roots:
        # Namespace output would otherwise be printed again by the root.
        logger.propagate = False
    return logger
