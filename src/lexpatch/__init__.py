"""lexpatch: document patch and versioning engine for a legal drafting editor.

Public re-exports
-----------------

* **Repository:** :class:`DocumentRepository`
* **Engine:** block codec, normalizer, section parser, differ, patch
  engine and version history functions
* **Configuration:** :class:`LexpatchConfig`
* **Errors:** Every :class:`LexpatchError` subclass and :class:`ErrorCode`
* **Models:** All dataclasses and enums

Usage::

    from lexpatch import DocumentRepository, InMemoryBlobStore

    repo = DocumentRepository(InMemoryBlobStore())
    repo.open("contract-1")
    doc = repo.set_markdown("# Terms\\n\\nThe parties agree...")
"""

from __future__ import annotations

# ── Configuration ───────────────────────────────────────────────────────
from lexpatch.config import LexpatchConfig

# ── Engine ──────────────────────────────────────────────────────────────
from lexpatch.converter import (
    blocks_to_text,
    create_block,
    enforce_heading_hierarchy,
    normalize,
    parse_sections,
    render_html,
    render_outline,
    sanitize,
    text_to_blocks,
)
from lexpatch.debounce import Debouncer
from lexpatch.diff import diff_markdown

# ── Errors ──────────────────────────────────────────────────────────────
from lexpatch.errors import (
    ErrorCode,
    InvalidPatchError,
    LexpatchError,
    NetworkError,
    NoDocumentSelectedError,
    PendingPatchError,
    RetryExhaustedError,
    SchemaVersionError,
    StorageDecodeError,
    StorageError,
    VersionNotFoundError,
)

# ── Models ──────────────────────────────────────────────────────────────
from lexpatch.models import (
    Block,
    BlockType,
    DeleteBlock,
    Document,
    DocumentSnapshot,
    DocumentVersion,
    InsertAfter,
    MarkdownDiff,
    MarkdownSection,
    OpOutcome,
    PatchOp,
    PatchOpType,
    PatchReport,
    PendingPatch,
    ReplaceBlock,
    SectionChange,
    SectionType,
)
from lexpatch.patch import apply_patch, apply_patch_with_report, create_document

# ── Repository & storage ────────────────────────────────────────────────
from lexpatch.repository import DocumentRepository
from lexpatch.storage import BlobStore, HttpBlobStore, InMemoryBlobStore, decode_patch_ops
from lexpatch.utils import fingerprint, new_id
from lexpatch.versioning import (
    MAX_VERSION_HISTORY,
    add_version_snapshot,
    create_snapshot,
    restore_version,
)

# ── Public surface ──────────────────────────────────────────────────────

__all__ = [
    # Repository & storage
    "DocumentRepository",
    "BlobStore",
    "InMemoryBlobStore",
    "HttpBlobStore",
    "decode_patch_ops",
    "Debouncer",
    # Configuration
    "LexpatchConfig",
    # Engine
    "fingerprint",
    "new_id",
    "text_to_blocks",
    "blocks_to_text",
    "create_block",
    "sanitize",
    "enforce_heading_hierarchy",
    "normalize",
    "parse_sections",
    "render_html",
    "render_outline",
    "diff_markdown",
    "apply_patch",
    "apply_patch_with_report",
    "create_document",
    "create_snapshot",
    "add_version_snapshot",
    "restore_version",
    "MAX_VERSION_HISTORY",
    # Errors
    "LexpatchError",
    "ErrorCode",
    "StorageError",
    "StorageDecodeError",
    "SchemaVersionError",
    "NetworkError",
    "RetryExhaustedError",
    "InvalidPatchError",
    "NoDocumentSelectedError",
    "PendingPatchError",
    "VersionNotFoundError",
    # Models
    "Block",
    "BlockType",
    "MarkdownSection",
    "SectionType",
    "Document",
    "DocumentSnapshot",
    "DocumentVersion",
    "MarkdownDiff",
    "SectionChange",
    "PatchOp",
    "PatchOpType",
    "ReplaceBlock",
    "InsertAfter",
    "DeleteBlock",
    "PendingPatch",
    "OpOutcome",
    "PatchReport",
]
