"""
Client layer models for report backend communication.

This module defines the request payloads, responses, and error
handling used when talking to the reporting service.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ItemType(str, Enum):
    """Kinds of report items."""
    SUITE = "SUITE"
    TEST = "TEST"
    STEP = "STEP"


class LogLevel(str, Enum):
    """Log levels understood by the backend."""
    TRACE = "TRACE"
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"
    FATAL = "FATAL"


class APIErrorCode(str, Enum):
    """Client-side classification of failed calls."""
    HTTP_ERROR = "http_error"
    CONNECTION_ERROR = "connection_error"
    TIMEOUT_ERROR = "timeout_error"
    INVALID_RESPONSE = "invalid_response"
    NOT_CONNECTED = "not_connected"
    UNEXPECTED = "unexpected"


@dataclass
class APIError:
    """Represents a failed call to the reporting service."""
    code: APIErrorCode
    message: str
    data: Any = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "code": self.code.value,
            "message": self.message,
        }
        if self.data is not None:
            result["data"] = self.data
        return result

    @classmethod
    def connection_error(cls, message: str, data: Any = None) -> APIError:
        return cls(APIErrorCode.CONNECTION_ERROR, message, data)

    @classmethod
    def timeout_error(cls, message: str, data: Any = None) -> APIError:
        return cls(APIErrorCode.TIMEOUT_ERROR, message, data)

    @classmethod
    def http_error(cls, message: str, data: Any = None) -> APIError:
        return cls(APIErrorCode.HTTP_ERROR, message, data)

    @classmethod
    def invalid_response(cls, message: str, data: Any = None) -> APIError:
        return cls(APIErrorCode.INVALID_RESPONSE, message, data)


class ReportClientError(Exception):
    """Raised when a call to the reporting service fails."""

    def __init__(self, error: APIError):
        super().__init__(error.message)
        self.error = error


@dataclass
class APIResponse:
    """Represents the result of a backend call."""
    success: bool
    result: Any = None
    error: APIError | None = None
    status: int | None = None

    def raise_for_error(self) -> None:
        """Raise ReportClientError if the call failed."""
        if not self.success:
            raise ReportClientError(
                self.error or APIError(APIErrorCode.UNEXPECTED, "Unknown error")
            )

    @classmethod
    def from_error(cls, error: APIError, status: int | None = None) -> APIResponse:
        """Create a response from a transport-level error."""
        return cls(success=False, error=error, status=status)


# ─────────────────────────────────────────────────────────────────────────────
# Request payloads
# ─────────────────────────────────────────────────────────────────────────────

@dataclass
class LaunchOptions:
    """Options for opening a launch."""
    name: str
    description: str = ""
    attributes: list[dict[str, Any]] = field(default_factory=list)
    rerun: bool = False
    rerun_of: str | None = None
    start_time: int | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "name": self.name,
            "description": self.description,
            "attributes": self.attributes,
            "startTime": self.start_time,
        }
        if self.rerun:
            payload["rerun"] = True
        if self.rerun_of:
            payload["rerunOf"] = self.rerun_of
        return payload


@dataclass
class ItemDescriptor:
    """Describes a report item to start."""
    name: str
    type: ItemType
    start_time: int | None = None

    @property
    def has_stats(self) -> bool:
        return self.type != ItemType.STEP

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "type": self.type.value,
            "hasStats": self.has_stats,
            "startTime": self.start_time,
        }


@dataclass
class FinishOptions:
    """Completion data for an item or launch."""
    status: str
    end_time: int | None = None

    def to_dict(self) -> dict[str, Any]:
        status = self.status.value if isinstance(self.status, Enum) else self.status
        return {"status": status, "endTime": self.end_time}


@dataclass
class LogEntry:
    """A log line attached to a report item."""
    level: LogLevel | str
    message: str
    time: int | None = None

    @property
    def level_name(self) -> str:
        level = self.level.value if isinstance(self.level, LogLevel) else str(self.level)
        return level.upper()


@dataclass
class Attachment:
    """A named binary blob uploaded alongside a log entry."""
    name: str
    mime_type: str
    content: bytes

    def __repr__(self) -> str:
        return f"Attachment(name={self.name!r}, mime_type={self.mime_type!r}, size={len(self.content)})"


@dataclass
class LaunchResult:
    """What the backend returns when a launch is finished."""
    launch_id: str
    link: str | None = None
    raw_response: dict[str, Any] | None = None
