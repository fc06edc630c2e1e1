"""JSON bodies for success and error API responses."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

USER_ALREADY_EXISTS = "User already exists"
DOMAIN_NAME_ALREADY_EXISTS = "Domain name already exists"
ORGANIZATION_NAME_ALREADY_EXISTS = "Organization name already exists"


def _now() -> datetime:
    return datetime.now().astimezone()


def _rfc3339(moment: datetime) -> str:
    if moment.tzinfo is None:
        moment = moment.astimezone()
    text = moment.strftime("%Y-%m-%dT%H:%M:%S")
    if moment.microsecond:
        text += "." + f"{moment.microsecond:06d}".rstrip("0")
    offset = moment.utcoffset()
    if not offset:
        return text + "Z"
    seconds = int(offset.total_seconds())
    sign = "+" if seconds >= 0 else "-"
    seconds = abs(seconds)
    return f"{text}{sign}{seconds // 3600:02d}:{seconds % 3600 // 60:02d}"


@dataclass
class ErrorResponse:
    """Body of an error response."""

    api_path: str
    error_code: int
    error_message: str
    error_time: datetime = field(default_factory=_now)

    def to_dict(self):
        """Return the JSON-ready body."""
        return {
            "apiPath": self.api_path,
            "errorCode": self.error_code,
            "errorMessage": self.error_message,
            "errorTime": _rfc3339(self.error_time),
        }


@dataclass
class SuccessResponse:
    """Body of a success response."""

    status_code: int
    status_message: str
    data: Any = None

    def to_dict(self):
        """Return the JSON-ready body."""
        return {
            "statusCode": self.status_code,
            "statusMessage": self.status_message,
            "data": self.data,
        }


def format_error_message(message, error):
    """Append the error's text to the message when there is an error."""
    if error is not None:
        return f"{message}: {error}"
    return message


def error_body(path, status_code, message, error=None):
    """Build the standard error body for a request path."""
    return ErrorResponse(path, status_code, format_error_message(message, error)).to_dict()


def success_body(status_code, message, data=None):
    """Build the standard success body."""
    return SuccessResponse(status_code, message, data).to_dict()