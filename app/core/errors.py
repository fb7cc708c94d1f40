"""
Integration error types and upstream (Vercel / GitHub) error parsing.

Upstream failures are reduced to a single `UpstreamError` value so callers can
branch on `kind` instead of poking at response bodies.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

import httpx

ENV_CONFLICT_CODE = "ENV_CONFLICT"


class UpstreamErrorKind(str, Enum):
    CONFLICT = "conflict"
    VALIDATION = "validation"
    UPSTREAM = "upstream"
    NETWORK = "network"


@dataclass(frozen=True)
class UpstreamError:
    kind: UpstreamErrorKind
    message: str
    status_code: Optional[int] = None
    code: Optional[str] = None

    @property
    def is_conflict(self) -> bool:
        return self.kind == UpstreamErrorKind.CONFLICT


class IntegrationError(Exception):
    """Base class for failures talking to the deployment platform or source host."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class PlatformAPIError(IntegrationError):
    def __init__(self, error: UpstreamError):
        super().__init__(error.message)
        self.error = error


class NoProjectsError(IntegrationError):
    pass


class RepositoryLookupError(IntegrationError):
    pass


class EnvironmentVariableError(IntegrationError):
    """One or more environment variables could not be created."""

    def __init__(self, message: str, keys: List[str]):
        super().__init__(message)
        self.keys = keys


class EnvironmentVariableConflictError(EnvironmentVariableError):
    """Variables with the same names already exist on the target project."""


def extract_error_message(payload: Any) -> Optional[str]:
    """Best-effort human readable message from an upstream error body."""
    if isinstance(payload, str):
        return payload.strip() or None
    if not isinstance(payload, dict):
        return None

    message = payload.get("message")
    if isinstance(message, str) and message:
        return message

    error = payload.get("error")
    if isinstance(error, str) and error:
        return error
    if isinstance(error, dict):
        nested = error.get("message")
        if isinstance(nested, str) and nested:
            return nested

    description = payload.get("error_description")
    if isinstance(description, str) and description:
        return description

    errors = payload.get("errors")
    if isinstance(errors, list):
        messages = []
        for item in errors:
            if isinstance(item, str):
                messages.append(item)
            elif isinstance(item, dict):
                text = item.get("message") or item.get("error")
                if isinstance(text, str) and text:
                    messages.append(text)
        if messages:
            return "; ".join(messages)

    return None


def _response_payload(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


def _error_code(payload: Any) -> Optional[str]:
    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, dict) and isinstance(error.get("code"), str):
            return error["code"]
        if isinstance(payload.get("code"), str):
            return payload["code"]
    return None


def _nested_error_message(payload: Any) -> str:
    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, dict) and isinstance(error.get("message"), str):
            return error["message"]
    return ""


def _is_conflict_message(payload: Any, message: str) -> bool:
    return "already exists" in message or "already exists" in _nested_error_message(payload)


def parse_upstream_error(exc: BaseException) -> UpstreamError:
    if isinstance(exc, PlatformAPIError):
        return exc.error

    if isinstance(exc, httpx.HTTPStatusError):
        status_code = exc.response.status_code
        payload = _response_payload(exc.response)
        message = extract_error_message(payload) or f"HTTP {status_code} error"
        code = _error_code(payload)

        if status_code == 409:
            kind = UpstreamErrorKind.CONFLICT
        elif status_code == 400 and (code == ENV_CONFLICT_CODE or _is_conflict_message(payload, message)):
            kind = UpstreamErrorKind.CONFLICT
        elif status_code in (400, 422):
            kind = UpstreamErrorKind.VALIDATION
        else:
            kind = UpstreamErrorKind.UPSTREAM
        return UpstreamError(kind=kind, message=message, status_code=status_code, code=code)

    if isinstance(exc, httpx.RequestError):
        return UpstreamError(kind=UpstreamErrorKind.NETWORK, message=str(exc) or type(exc).__name__)

    return UpstreamError(kind=UpstreamErrorKind.UPSTREAM, message=str(exc) or "Unknown error")


def format_validation_errors(errors: Iterable[Dict[str, Any]]) -> List[str]:
    """Flatten pydantic error dicts into "loc.path: message" strings."""
    formatted = []
    for error in errors:
        loc = [str(part) for part in error.get("loc", ()) if part != "body"]
        message = error.get("msg", "Invalid value")
        formatted.append(f"{'.'.join(loc)}: {message}" if loc else message)
    return formatted
