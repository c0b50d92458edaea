"""Persistence adapter protocol.

The repository only needs a key/value blob store.  It serializes the
document map itself (see :mod:`lexpatch.storage.serializer`).
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class BlobStore(Protocol):
    """Minimal key/value store of opaque byte blobs."""

    def load(self, key: str) -> bytes | None:
        """Return the blob stored under *key*, or ``None`` when absent."""
        ...

    def save(self, key: str, data: bytes) -> None:
        """Store *data* under *key*, replacing any previous value."""
        ...
