"""Error hierarchy for lexpatch.

The core engine (codec, normalizer, section parser, differ, patch engine,
version history) never raises.  Errors come only from the layers around
it: persistence, the document repository and patch payload decoding.

Every error inherits from :class:`LexpatchError` and carries a
machine-readable ``code`` (from :class:`ErrorCode`), a human-readable
``message``, an optional structured ``context`` dict and an optional
``cause``.  Each subclass fixes its code through ``default_code``.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, ClassVar

# ---------------------------------------------------------------------------
# Error code enum
# ---------------------------------------------------------------------------

class ErrorCode(str, Enum):
    """Machine-readable error codes."""

    INTERNAL = "INTERNAL"
    STORAGE_ERROR = "STORAGE_ERROR"
    STORAGE_DECODE_ERROR = "STORAGE_DECODE_ERROR"
    SCHEMA_VERSION = "SCHEMA_VERSION"
    NETWORK_ERROR = "NETWORK_ERROR"
    RETRY_EXHAUSTED = "RETRY_EXHAUSTED"
    INVALID_PATCH = "INVALID_PATCH"
    NO_DOCUMENT_SELECTED = "NO_DOCUMENT_SELECTED"
    PENDING_PATCH = "PENDING_PATCH"
    VERSION_NOT_FOUND = "VERSION_NOT_FOUND"


# ---------------------------------------------------------------------------
# Base error
# ---------------------------------------------------------------------------

class LexpatchError(Exception):
    """Base exception for all lexpatch errors.

    Parameters
    ----------
    message:
        A developer-friendly description of what went wrong.
    context:
        Structured diagnostic data.  Keys are documented per subclass.
    cause:
        The underlying exception, if this error wraps another.
    code:
        Overrides the class's ``default_code``.
    """

    default_code: ClassVar[ErrorCode] = ErrorCode.INTERNAL
    default_message: ClassVar[str | None] = None

    def __init__(
        self,
        message: str | None = None,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
        *,
        code: str | None = None,
    ) -> None:
        resolved = message or self.default_message or type(self).__name__
        self.code: str = code or self.default_code
        self.message: str = resolved
        self.context: dict[str, Any] = context or {}
        self.cause: Exception | None = cause
        super().__init__(resolved)
        if cause is not None:
            self.__cause__ = cause

    def __repr__(self) -> str:
        ctx = f", context={self.context!r}" if self.context else ""
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r}{ctx})"


# ---------------------------------------------------------------------------
# Storage errors
# ---------------------------------------------------------------------------

class StorageError(LexpatchError):
    """The blob store rejected a request.

    Context keys: ``key``, ``operation``, ``status_code``.
    """

    default_code = ErrorCode.STORAGE_ERROR


class StorageDecodeError(StorageError):
    """A persisted payload could not be decoded.

    Context keys: ``path``.
    """

    default_code = ErrorCode.STORAGE_DECODE_ERROR


class SchemaVersionError(StorageError):
    """A persisted payload was written by a newer schema.

    Context keys: ``found``, ``supported``.
    """

    default_code = ErrorCode.SCHEMA_VERSION


class NetworkError(StorageError):
    """A transport-level failure (timeout, DNS, connection reset).

    Context keys: ``url``, ``attempt``.
    """

    default_code = ErrorCode.NETWORK_ERROR


class RetryExhaustedError(StorageError):
    """Every attempt of a retryable request failed.

    Context keys: ``attempts``, ``last_status_code``.
    """

    default_code = ErrorCode.RETRY_EXHAUSTED


# ---------------------------------------------------------------------------
# Patch payload errors
# ---------------------------------------------------------------------------

class InvalidPatchError(LexpatchError):
    """A patch payload does not describe a valid operation list.

    Context keys: ``index``, ``op``, ``reason``.
    """

    default_code = ErrorCode.INVALID_PATCH


# ---------------------------------------------------------------------------
# Repository errors
# ---------------------------------------------------------------------------

class NoDocumentSelectedError(LexpatchError):
    """An editing operation was issued while no document is open.

    Context keys: ``operation``.
    """

    default_code = ErrorCode.NO_DOCUMENT_SELECTED
    default_message = "No document is selected"


class PendingPatchError(LexpatchError):
    """A second patch was staged, or none is staged when applying.

    Context keys: ``file_id``, ``pending_ops``.
    """

    default_code = ErrorCode.PENDING_PATCH


class VersionNotFoundError(LexpatchError):
    """No history entry has the requested id.

    Context keys: ``file_id``, ``version_id``.
    """

    default_code = ErrorCode.VERSION_NOT_FOUND
