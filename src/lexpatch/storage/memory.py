"""In-process blob store."""

from __future__ import annotations


class InMemoryBlobStore:
    """Dict-backed :class:`~lexpatch.storage.base.BlobStore`.

    Stored values are copied to ``bytes`` so later mutation of a caller's
    buffer cannot change what was saved.
    """

    def __init__(self, initial: dict[str, bytes] | None = None) -> None:
        self._blobs: dict[str, bytes] = {k: bytes(v) for k, v in (initial or {}).items()}
        self.save_count = 0

    def load(self, key: str) -> bytes | None:
        return self._blobs.get(key)

    def save(self, key: str, data: bytes) -> None:
        self._blobs[key] = bytes(data)
        self.save_count += 1

    def keys(self) -> list[str]:
        return list(self._blobs)
