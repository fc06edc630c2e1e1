"""The Flask application with CORS, request logging and the API routes."""

from __future__ import annotations

import logging
import time
from datetime import datetime
from functools import partial

from bson import ObjectId
from flask import Flask, Response, g, request
from flask.json.provider import DefaultJSONProvider

from . import controllers
from .controllers import EXTENSION_KEY
from .dataloader import load_sales_data
from .logger import LOGGER_NAME

CORS_ALLOW_METHODS = "GET,POST,HEAD,PUT,DELETE,PATCH"

_log = logging.getLogger(LOGGER_NAME)

_ANALYTICS_ROUTES = (
    ("total-revenue", controllers.get_total_revenue),
    ("total-revenue-by-category", controllers.get_revenue_by_category),
    ("total-revenue-by-product", controllers.get_revenue_by_product),
    ("total-revenue-by-region", controllers.get_revenue_by_region),
)


class _JSONProvider(DefaultJSONProvider):
    sort_keys = False

    @staticmethod
    def default(o):
        if isinstance(o, ObjectId):
            return str(o)
        if isinstance(o, datetime):
            return o.isoformat()
        return DefaultJSONProvider.default(o)


def _before():
    g.request_started = time.perf_counter()
    headers = request.headers
    if not (
        request.method == "OPTIONS"
        and headers.get("Origin")
        and headers.get("Access-Control-Request-Method")
    ):
        return None
    response = Response(status=204)
    response.headers["Access-Control-Allow-Origin"] = "*"
    response.headers["Access-Control-Allow-Methods"] = CORS_ALLOW_METHODS
    if headers.get("Access-Control-Request-Headers"):
        response.headers["Access-Control-Allow-Headers"] = headers["Access-Control-Request-Headers"]
    response.vary.update(
        ("Origin", "Access-Control-Request-Method", "Access-Control-Request-Headers")
    )
    return response


def _after(response):
    response.vary.add("Origin")
    if request.headers.get("Origin"):
        response.headers["Access-Control-Allow-Origin"] = "*"
    latency = time.perf_counter() - g.get("request_started", time.perf_counter())
    _log.info(
        f"{response.status_code} - {request.method} {request.path}",
        extra={
            "fields": {
                "status": response.status_code,
                "latency": f"{latency * 1000:.3f}ms",
                "ip": request.remote_addr,
                "method": request.method,
                "path": request.path,
            }
        },
    )
    return response


def create_app(db, loader=None):
    """Build the application serving the data loading and analytics routes."""
    app = Flask(__name__)
    app.json = _JSONProvider(app)
    app.extensions[EXTENSION_KEY] = {
        "db": db,
        "loader": loader if loader is not None else partial(load_sales_data, db),
    }
    app.before_request(_before)
    app.after_request(_after)

    app.add_url_rule(
        "/load-data/", "load_data", controllers.load_data, methods=["GET"], strict_slashes=False
    )
    for path, view in _ANALYTICS_ROUTES:
        app.add_url_rule(f"/analytics/{path}", view.__name__, view, methods=["GET"])
    return app