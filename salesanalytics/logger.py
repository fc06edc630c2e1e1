"""JSON logging to stdout and a size-rotated log file."""

from __future__ import annotations

import gzip
import json
import logging
import shutil
import sys
import tempfile
import time
from collections.abc import Mapping
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOGGER_NAME = "salesanalytics"
DEFAULT_MAX_SIZE_MB = 100
_MEGABYTE = 1024 * 1024
_DAY = 24 * 60 * 60

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "FATAL": logging.CRITICAL,
}
_LEVEL_NAMES = {level: name.lower() for name, level in _LEVELS.items()}


def parse_level(name):
    """Map a configured level name to a logging level; unknown names give INFO."""
    return _LEVELS.get(name, logging.INFO)


class JsonFormatter(logging.Formatter):
    """Formats records as one JSON object per line."""

    def format(self, record):
        moment = datetime.fromtimestamp(record.created).astimezone()
        offset = moment.strftime("%z")
        entry = {
            "level": _LEVEL_NAMES.get(record.levelno, record.levelname.lower()),
            "ts": f"{moment:%Y-%m-%dT%H:%M:%S}.{moment.microsecond // 1000:03d}"
            + ("Z" if offset == "+0000" else offset),
            "caller": f"{record.filename}:{record.lineno}",
            "msg": record.getMessage(),
        }
        fields = getattr(record, "fields", None)
        if isinstance(fields, Mapping):
            entry.update(fields)
        if record.exc_info:
            entry["stacktrace"] = self.formatException(record.exc_info)
        elif record.stack_info:
            entry["stacktrace"] = record.stack_info
        return json.dumps(entry, default=str)


class _RotatingFileHandler(RotatingFileHandler):
    """Rotates into timestamped backups, optionally gzipped and pruned."""

    def __init__(self, filename, max_bytes, max_backups, max_age_days, compress):
        super().__init__(filename, maxBytes=max_bytes, backupCount=0, encoding="utf-8", delay=True)
        self.max_backups = max_backups
        self.max_age_days = max_age_days
        self.compress = compress

    def _backup_path(self, current: Path) -> Path:
        stamp = datetime.now().strftime("%Y-%m-%dT%H-%M-%S.%f")[:-3]
        candidate, counter = current.with_name(f"{current.stem}-{stamp}{current.suffix}"), 1
        while candidate.exists() or Path(f"{candidate}.gz").exists():
            candidate = current.with_name(f"{current.stem}-{stamp}-{counter}{current.suffix}")
            counter += 1
        return candidate

    def _prune(self, current: Path) -> None:
        backups = sorted(
            (
                path
                for path in current.parent.iterdir()
                if path.is_file()
                and path != current
                and path.name.startswith(f"{current.stem}-")
                and path.name.endswith((current.suffix, f"{current.suffix}.gz"))
            ),
            key=lambda path: path.stat().st_mtime_ns,
            reverse=True,
        )
        doomed = set(backups[self.max_backups:]) if self.max_backups > 0 else set()
        if self.max_age_days > 0:
            cutoff = time.time() - self.max_age_days * _DAY
            doomed.update(path for path in backups if path.stat().st_mtime < cutoff)
        for path in doomed:
            path.unlink(missing_ok=True)

    def doRollover(self):
        if self.stream:
            self.stream.close()
            self.stream = None
        current = Path(self.baseFilename)
        if current.exists() and current.stat().st_size > 0:
            backup = self._backup_path(current)
            current.replace(backup)
            if self.compress:
                with backup.open("rb") as source, gzip.open(f"{backup}.gz", "wb") as target:
                    shutil.copyfileobj(source, target)
                backup.unlink()
        self._prune(current)
        if not self.delay:
            self.stream = self._open()


def init_logger(file_name, max_size, max_backups, max_age, compress, level):
    """Configure the package logger to write JSON to stdout and a rotating file."""
    if file_name:
        path = Path(file_name)
    else:
        program = Path(sys.argv[0]).name if sys.argv and sys.argv[0] else LOGGER_NAME
        path = Path(tempfile.gettempdir()) / f"{program}-lumberjack.log"
    path.parent.mkdir(parents=True, exist_ok=True)
    max_bytes = (max_size if max_size > 0 else DEFAULT_MAX_SIZE_MB) * _MEGABYTE

    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = JsonFormatter()
    for handler in (
        logging.StreamHandler(sys.stdout),
        _RotatingFileHandler(str(path), max_bytes, max_backups, max_age, compress),
    ):
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    logger.setLevel(parse_level(level))
    logger.propagate = False

    logger.info(
        "Logger initialized",
        extra={
            "fields": {
                "fileName": file_name,
                "maxSize(MB)": max_size,
                "maxBackups": max_backups,
                "maxAge(days)": max_age,
                "compress": compress,
                "logLevel": level,
            }
        },
    )
    return logger