from .hashing import fingerprint, new_id, to_base36

__all__ = [
    "fingerprint",
    "new_id",
    "to_base36",
]
