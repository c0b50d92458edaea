"""Persistence adapters and serialization.

Exports
-------
BlobStore
    Protocol of the key/value persistence adapter.
InMemoryBlobStore
    Dict-backed adapter.
HttpBlobStore
    Adapter backed by an HTTP key/value service.
encode_documents, decode_documents
    Versioned JSON envelope for the document map.
decode_patch_ops
    JSON op lists from suggestion producers.
"""

from .base import BlobStore
from .http import HttpBlobStore
from .memory import InMemoryBlobStore
from .serializer import (
    decode_documents,
    decode_patch_ops,
    document_from_dict,
    document_to_dict,
    encode_documents,
    patch_op_to_dict,
)

__all__ = [
    "BlobStore",
    "HttpBlobStore",
    "InMemoryBlobStore",
    "decode_documents",
    "decode_patch_ops",
    "document_from_dict",
    "document_to_dict",
    "encode_documents",
    "patch_op_to_dict",
]
