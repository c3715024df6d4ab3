"""Normalized error types and serialization helpers.

Every backend and locator failure is mapped onto one closed set of kinds
before it reaches a tool. Messages must never include tokens.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from mcp.types import INTERNAL_ERROR, INVALID_PARAMS


class ErrorKind(str, Enum):
    """Closed error taxonomy observed by tools."""

    AUTHENTICATION_FAILED = "AuthenticationFailed"
    NOT_FOUND = "NotFound"
    API_FAILURE = "ApiFailure"
    MISSING_PARAMETER = "MissingParameter"
    REPOSITORY_RESOLUTION_FAILED = "RepositoryResolutionFailed"
    TRANSPORT_FAILURE = "TransportFailure"


# Kinds the caller can fix by changing its input.
_INVALID_PARAMS_KINDS = frozenset(
    {
        ErrorKind.MISSING_PARAMETER,
        ErrorKind.NOT_FOUND,
        ErrorKind.AUTHENTICATION_FAILED,
    }
)


@dataclass(frozen=True, slots=True)
class GitxError(Exception):
    """An error safe to expose to agents.

    `location` is set for NotFound (the effective request URL) and
    `status_code` for HTTP-derived failures.
    """

    kind: ErrorKind
    message: str
    status_code: int | None = None
    location: str | None = None

    def __str__(self) -> str:
        return self.message

    @property
    def is_invalid_params(self) -> bool:
        return self.kind in _INVALID_PARAMS_KINDS


def auth_failed(*, status_code: int | None = None) -> GitxError:
    """401/403 from either backend. The response body is discarded."""
    return GitxError(
        kind=ErrorKind.AUTHENTICATION_FAILED,
        message="Authentication failed: check the configured access token",
        status_code=status_code,
    )


def not_found(url: str) -> GitxError:
    return GitxError(
        kind=ErrorKind.NOT_FOUND,
        message=f"Resource not found: {url}",
        status_code=404,
        location=url,
    )


def api_failure(status_code: int, body: str) -> GitxError:
    return GitxError(
        kind=ErrorKind.API_FAILURE,
        message=f"API request failed: HTTP {status_code}: {body}",
        status_code=status_code,
    )


def missing_parameter(detail: str) -> GitxError:
    return GitxError(kind=ErrorKind.MISSING_PARAMETER, message=f"Missing required parameter: {detail}")


def repo_resolution_failed(detail: str) -> GitxError:
    return GitxError(
        kind=ErrorKind.REPOSITORY_RESOLUTION_FAILED,
        message=f"Could not resolve repository from directory: {detail}",
    )


def transport_failure(detail: str) -> GitxError:
    return GitxError(kind=ErrorKind.TRANSPORT_FAILURE, message=f"HTTP error: {detail}")


def gitx_error_to_result(err: GitxError) -> dict[str, Any]:
    """Convert a GitxError into the standard tool envelope."""
    if err.is_invalid_params:
        return to_error_result(code="InvalidParams", message=err.message, error_code=INVALID_PARAMS, kind=err.kind)
    return to_error_result(code="Internal", message=err.message, error_code=INTERNAL_ERROR, kind=err.kind)


def to_error_result(
    *,
    code: str,
    message: str,
    error_code: int = INTERNAL_ERROR,
    kind: ErrorKind | None = None,
) -> dict[str, Any]:
    """Build a standard tool error envelope."""
    out: dict[str, Any] = {"ok": False, "code": code, "error_code": error_code, "message": message}
    if kind is not None:
        out["kind"] = kind.value
    return out


def internal_error(message: str = "Internal error") -> dict[str, Any]:
    """Error for unexpected failures."""
    return to_error_result(code="Internal", message=message)
