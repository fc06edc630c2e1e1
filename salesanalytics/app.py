"""Service entry point: configuration, logging, database, scheduler and HTTP server."""

from __future__ import annotations

import argparse
import logging
import signal
import threading
from datetime import datetime, timedelta
from functools import partial
from socketserver import ThreadingMixIn
from wsgiref.simple_server import WSGIRequestHandler, WSGIServer, make_server

from .database import connect
from .dataloader import load_sales_data
from .logger import LOGGER_NAME, init_logger
from .router import create_app
from .settings import ConfigError, load_config

_log = logging.getLogger(LOGGER_NAME)


def _next_run(now: datetime, hour: int, minute: int) -> datetime:
    target = now.replace(hour=hour, minute=minute, second=0, microsecond=0)
    return target if target > now else target + timedelta(days=1)


def seconds_until_next_run(now, hour=0, minute=0):
    """Seconds from now to the next hour:minute strictly after it."""
    return (_next_run(now, hour, minute) - now).total_seconds()


class DailyScheduler:
    """Runs a job in its own thread once a day at a fixed local time."""

    def __init__(self, job, hour=0, minute=0):
        if not 0 <= hour < 24:
            raise ValueError(f"hour out of range: {hour}")
        if not 0 <= minute < 60:
            raise ValueError(f"minute out of range: {minute}")
        self.job = job
        self.hour = hour
        self.minute = minute
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self):
        """Start the scheduling thread."""
        if self.running:
            raise RuntimeError("scheduler already running")
        self._stop.clear()
        self._thread = threading.Thread(target=self._loop, name="daily-scheduler", daemon=True)
        self._thread.start()

    def stop(self):
        """Stop scheduling and wait for the scheduling thread to end."""
        self._stop.set()
        if self._thread is not None:
            self._thread.join()
            self._thread = None

    def _loop(self) -> None:
        while True:
            target = _next_run(datetime.now(), self.hour, self.minute)
            while (remaining := (target - datetime.now()).total_seconds()) > 0:
                if self._stop.wait(remaining):
                    return
            if self._stop.is_set():
                return
            threading.Thread(target=self._run_job, name="scheduled-job", daemon=True).start()

    def _run_job(self) -> None:
        try:
            self.job()
        except Exception:
            _log.exception("Scheduled job failed")


class _ThreadingWSGIServer(ThreadingMixIn, WSGIServer):
    daemon_threads = True


class _LoggingHandler(WSGIRequestHandler):
    def log_message(self, format, *args):
        _log.debug(format % args)


def main(argv=None):
    """Run the service until SIGINT or SIGTERM; return the exit status."""
    argparse.ArgumentParser(prog="salesanalytics", description="Sales analytics HTTP service.").parse_args(argv)

    try:
        config = load_config()
    except ConfigError as exc:
        print(f"Not able to get config files: {exc}")
        return 1

    log = init_logger(
        config.logger.file_name,
        config.logger.file_size,
        config.logger.max_log_file,
        config.logger.max_retention,
        config.logger.compress_log,
        config.logger.level,
    )
    log.info("Logger Initialized")

    try:
        db = connect(config)
    except ConnectionError as exc:
        log.critical(f"Failed to connect to MongoDB: {exc}")
        return 1

    with db:
        log.info("MongoDB Initialized")
        app = create_app(db)
        log.info("Router Initialized")

        try:
            port = int(config.app_port) if config.app_port else 0
            if not 0 <= port <= 65535:
                raise ValueError(f"invalid port {config.app_port!r}")
            server = make_server(
                "", port, app, server_class=_ThreadingWSGIServer, handler_class=_LoggingHandler
            )
        except (ValueError, OSError) as exc:
            log.critical(f"Failed to start server: {exc}")
            return 1

        scheduler = DailyScheduler(partial(load_sales_data, db))
        scheduler.start()
        quit_event = threading.Event()
        previous = {}
        try:
            for signum in (signal.SIGINT, signal.SIGTERM):
                previous[signum] = signal.signal(signum, lambda *_: quit_event.set())
        except ValueError:
            pass
        serving = threading.Thread(target=server.serve_forever, name="http-server", daemon=True)
        serving.start()
        try:
            while not quit_event.wait(0.5):
                pass
        except KeyboardInterrupt:
            pass
        finally:
            for signum, handler in previous.items():
                signal.signal(signum, handler)
            log.info("Shutting down server...")
            server.shutdown()
            server.server_close()
            serving.join()
            scheduler.stop()
            log.info("Server gracefully stopped.")
    return 0