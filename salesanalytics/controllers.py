"""Request handlers for the analytics, data loading and health endpoints."""

from __future__ import annotations

import logging
import threading

from flask import Response, current_app, jsonify, request
from pymongo.errors import PyMongoError

from . import repo
from .dates import DateRangeError, parse_date_range
from .logger import LOGGER_NAME
from .response import error_body, success_body

EXTENSION_KEY = "salesanalytics"
HEALTH_MESSAGE = "This sales analytics service is up!"
LOAD_MESSAGE = "Data start loading in run in background"
REVENUE_FAILED = "Failed to calculate total revenue"

_log = logging.getLogger(LOGGER_NAME)


def _services():
    return current_app.extensions[EXTENSION_KEY]


def _original_url() -> str:
    query = request.query_string.decode("utf-8", errors="replace")
    return f"{request.path}?{query}" if query else request.path


def _error(status: int, message: str, error=None):
    return jsonify(error_body(_original_url(), status, message, error)), status


def _success(status: int, message: str, data=None):
    return jsonify(success_body(status, message, data)), status


def _run_in_background(job) -> None:
    def runner():
        try:
            job()
        except Exception:
            _log.exception("Data loading failed")

    threading.Thread(target=runner, name="sales-data-loader", daemon=True).start()


def health_check():
    """Plain-text liveness answer."""
    return Response(HEALTH_MESSAGE, status=200, mimetype="text/plain")


def load_data():
    """Start loading the sales data in the background and answer at once."""
    _log.info(LOAD_MESSAGE)
    _run_in_background(_services()["loader"])
    return _success(200, LOAD_MESSAGE)


def get_total_revenue():
    """Total revenue between the 'start' and 'end' query dates."""
    try:
        start, end = parse_date_range(request.args)
    except DateRangeError as exc:
        return _error(400, "Invalid date range", exc)
    try:
        total = repo.get_total_revenue(_services()["db"].orders, start, end)
    except PyMongoError as exc:
        return _error(500, REVENUE_FAILED, exc)
    return _success(200, "Total revenue retrieved successfully", {"total_revenue": total})


def _grouped(group_field: str, message: str):
    try:
        start, end = parse_date_range(request.args)
    except DateRangeError as exc:
        return jsonify({"error": str(exc)}), 400
    try:
        revenue = repo.grouped_revenue(_services()["db"].orders, start, end, group_field)
    except PyMongoError as exc:
        return _error(500, REVENUE_FAILED, exc)
    return _success(200, message, {"total_revenue": revenue})


def get_revenue_by_product():
    """Revenue per product between the 'start' and 'end' query dates."""
    return _grouped("product_id", "Total revenue by product")


def get_revenue_by_category():
    """Revenue per category between the 'start' and 'end' query dates."""
    return _grouped("category", "Total revenue by category")


def get_revenue_by_region():
    """Revenue per region between the 'start' and 'end' query dates."""
    return _grouped("region", "Total revenue by region")