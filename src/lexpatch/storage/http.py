"""Key/value blob store over HTTP.

``GET {base_url}/{key}`` loads a blob (``404`` means absent) and
``PUT {base_url}/{key}`` stores one.  Keys are percent-encoded into a
single path segment.

Failure handling per request:

* ``429``, ``5xx`` and network errors are retried per :class:`RetryPolicy`;
* any other non-2xx status raises :class:`StorageError` at once;
* a network error on the last attempt raises :class:`NetworkError`;
* a retryable status on the last attempt raises :class:`RetryExhaustedError`.
"""

from __future__ import annotations

import math
import time
from collections.abc import Callable
from typing import Any
from urllib.parse import quote

import httpx

from lexpatch.config import LexpatchConfig
from lexpatch.errors import NetworkError, RetryExhaustedError, StorageError
from lexpatch.observability import get_logger, resolve_metrics

from .retries import RETRYABLE_EXCEPTIONS, RetryPolicy

log = get_logger("lexpatch.storage.http")


def _parse_retry_after(response: httpx.Response) -> float | None:
    """Return ``Retry-After`` in seconds, or ``None`` if absent, not numeric or not finite."""
    raw = response.headers.get("retry-after")
    if raw is None:
        return None
    try:
        value = float(raw)
    except ValueError:
        return None
    return value if math.isfinite(value) else None


class HttpBlobStore:
    """Synchronous HTTP :class:`~lexpatch.storage.base.BlobStore`.

    Parameters
    ----------
    config:
        Supplies ``blob_base_url``, the timeout, the retry settings and the
        metrics hook.
    headers:
        Extra headers sent with every request (e.g. authorization).
    transport:
        Optional httpx transport, mainly for tests.
    sleep:
        Called with the backoff delay between attempts.
    """

    def __init__(
        self,
        config: LexpatchConfig,
        *,
        headers: dict[str, str] | None = None,
        transport: httpx.BaseTransport | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if not config.blob_base_url:
            raise ValueError("HttpBlobStore requires config.blob_base_url")
        self._policy = RetryPolicy.from_config(config)
        self._metrics = resolve_metrics(config.metrics)
        self._sleep = sleep
        self._client = httpx.Client(
            base_url=config.blob_base_url,
            headers=headers or {},
            timeout=httpx.Timeout(config.timeout_seconds),
            transport=transport,
        )

    def load(self, key: str) -> bytes | None:
        response = self._send("GET", key)
        if response.status_code == 404:
            return None
        return response.content

    def save(self, key: str, data: bytes) -> None:
        response = self._send(
            "PUT",
            key,
            content=bytes(data),
            headers={"Content-Type": "application/octet-stream"},
        )
        if response.status_code == 404:
            raise self._rejected("PUT", key, response)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> HttpBlobStore:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    # ------------------------------------------------------------------

    def _send(self, method: str, key: str, **kwargs: Any) -> httpx.Response:
        """Run the attempt loop; returns a 2xx or 404 response."""
        path = f"/{quote(key, safe='')}"
        policy = self._policy
        response: httpx.Response | None = None

        for attempt in range(policy.max_attempts):
            started = time.monotonic()
            try:
                response = self._client.request(method, path, **kwargs)
            except RETRYABLE_EXCEPTIONS as exc:
                self._metrics.increment(
                    "lexpatch.requests_total", tags={"method": method, "status": "error"}
                )
                log.warning(
                    "Blob store unreachable",
                    extra={
                        "extra_fields": {
                            "op": method.lower(),
                            "key": key,
                            "attempt": attempt + 1,
                            "error": str(exc),
                        }
                    },
                )
                if not policy.should_retry(attempt, exception=exc):
                    raise NetworkError(
                        message=f"{method} {path} failed: {exc}",
                        context={"url": path, "attempt": attempt + 1},
                        cause=exc,
                    ) from exc
                self._back_off(attempt, method, exception=exc)
                continue

            status = response.status_code
            tags = {"method": method, "status": str(status)}
            self._metrics.increment("lexpatch.requests_total", tags=tags)
            self._metrics.timing(
                "lexpatch.request_duration_ms", (time.monotonic() - started) * 1000, tags=tags
            )

            if 200 <= status < 300 or status == 404:
                return response
            if policy.reason(status_code=status) is None:
                raise self._rejected(method, key, response)
            if not policy.should_retry(attempt, status_code=status):
                break
            self._back_off(attempt, method, response=response)

        last_status = response.status_code if response is not None else None
        raise RetryExhaustedError(
            message=(
                f"{method} {path} still failing after {policy.max_attempts} attempts "
                f"(last status: {last_status})"
            ),
            context={"attempts": policy.max_attempts, "last_status_code": last_status},
        )

    def _back_off(
        self,
        attempt: int,
        method: str,
        *,
        response: httpx.Response | None = None,
        exception: Exception | None = None,
    ) -> None:
        status = response.status_code if response is not None else None
        reason = self._policy.reason(status_code=status, exception=exception)
        retry_after = _parse_retry_after(response) if response is not None else None
        self._metrics.increment(
            "lexpatch.retries_total", tags={"method": method, "reason": reason or "unknown"}
        )
        self._sleep(self._policy.delay(attempt, retry_after))

    @staticmethod
    def _rejected(method: str, key: str, response: httpx.Response) -> StorageError:
        return StorageError(
            message=f"Blob store rejected {method} {key!r} with status {response.status_code}",
            context={"key": key, "operation": method, "status_code": response.status_code},
        )

