"""Error taxonomy for a sync run.

Only configuration and connectivity errors abort a batch. Everything derived
from :class:`RowError` is caught per row and recorded on the result.
"""

from __future__ import annotations

import json


class SyncError(RuntimeError):
    """Base class for errors raised by the sync pipeline."""


class ConnectivityError(SyncError):
    """The remote API is unreachable, rejects the credentials or is disabled."""


class RowSourceError(SyncError):
    """The tabular source could not be read."""


class RowError(SyncError):
    """A failure isolated to a single row."""


class MissingFieldError(RowError):
    def __init__(self, field_name: str) -> None:
        super().__init__(f"Missing required field: {field_name}")
        self.field_name = field_name


class DuplicateResourceError(RowError):
    def __init__(self, title: str, resource_id: int) -> None:
        super().__init__(
            f'Post with title "{title}" already exists (ID: {resource_id}). '
            "Duplicate posts are not allowed."
        )
        self.title = title
        self.resource_id = resource_id


class RemoteAPIError(RowError):
    """Raised for any non-2xx response from the remote API."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        payload: object | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload

    @property
    def code(self) -> str | None:
        """The server's machine-readable error code, when it sent one."""
        if isinstance(self.payload, dict):
            code = self.payload.get("code")
            return code if isinstance(code, str) else None
        return None

    def describe(self) -> str:
        if self.payload is None or self.payload == "":
            return str(self)
        if isinstance(self.payload, str):
            return f"{self}: {self.payload}"
        return f"{self}: {json.dumps(self.payload, ensure_ascii=False)}"


def describe_error(exc: BaseException) -> str:
    """Render ``exc`` for a result record, including remote payloads."""

    if isinstance(exc, RemoteAPIError):
        return exc.describe()
    return str(exc) or type(exc).__name__
