"""Configuration for lexpatch.

:class:`LexpatchConfig` captures every tuneable knob used by the document
repository and the persistence adapters.  The only value with meaning
outside this package is ``version_history_limit``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

DEFAULT_STORAGE_KEY = "lexdraft_documents"
"""Blob-store key under which the document map is persisted."""

SCHEMA_VERSION = 2
"""Envelope version written by the serializer."""


@dataclass
class LexpatchConfig:
    """Complete configuration for a document repository.

    Parameters
    ----------
    version_history_limit:
        Maximum number of history entries kept per document.
    debounce_seconds:
        Quiet period a host should wait before committing editor input.
    storage_key:
        Blob-store key of the persisted document map.
    schema_version:
        Envelope version written on save.  Payloads with a higher version
        are refused on load.
    default_content:
        Initial text of documents created for unknown file ids.
    blob_base_url:
        Root URL of the HTTP blob store, when one is used.
    timeout_seconds:
        HTTP request timeout in seconds.
    retry_max_attempts:
        Total attempts per HTTP request (including the first).
    retry_base_delay:
        Base delay (seconds) for exponential backoff.
    retry_max_delay:
        Upper cap (seconds) on computed backoff delay.
    retry_jitter:
        Randomly scale backoff delays to 50-100 %.
    metrics:
        Optional :class:`~lexpatch.observability.MetricsHook`.
    debug_dump_diff:
        Write diff summaries to *stderr*.
    debug_dump_payload:
        Write persisted payload sizes and keys to *stderr*.
    """

    # ── History ─────────────────────────────────────────────────────────
    version_history_limit: int = 10

    # ── Editor ──────────────────────────────────────────────────────────
    debounce_seconds: float = 0.5

    default_content: str = ""

    # ── Storage ─────────────────────────────────────────────────────────
    storage_key: str = DEFAULT_STORAGE_KEY

    schema_version: int = SCHEMA_VERSION

    blob_base_url: str | None = None

    # ── HTTP ────────────────────────────────────────────────────────────
    timeout_seconds: float = 30.0

    retry_max_attempts: int = 3

    retry_base_delay: float = 0.5

    retry_max_delay: float = 10.0

    retry_jitter: bool = True

    # ── Observability ───────────────────────────────────────────────────
    metrics: Any | None = None

    # ── Debug ───────────────────────────────────────────────────────────
    debug_dump_diff: bool = False

    debug_dump_payload: bool = False

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if self.version_history_limit < 1:
            raise ValueError(
                f"version_history_limit must be >= 1, got {self.version_history_limit}"
            )
        if self.debounce_seconds < 0:
            raise ValueError(f"debounce_seconds must be >= 0, got {self.debounce_seconds}")
        if not self.storage_key:
            raise ValueError("storage_key must not be empty")
        if self.schema_version < 1:
            raise ValueError(f"schema_version must be >= 1, got {self.schema_version}")
        if self.timeout_seconds <= 0:
            raise ValueError(f"timeout_seconds must be > 0, got {self.timeout_seconds}")
        if self.retry_max_attempts < 1:
            raise ValueError(f"retry_max_attempts must be >= 1, got {self.retry_max_attempts}")
        if self.retry_base_delay < 0:
            raise ValueError(f"retry_base_delay must be >= 0, got {self.retry_base_delay}")
        if self.retry_max_delay < 0:
            raise ValueError(f"retry_max_delay must be >= 0, got {self.retry_max_delay}")
