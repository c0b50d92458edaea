"""Document repository: the single owner of live documents.

:class:`DocumentRepository` keeps one :class:`Document` per file id, tracks
which one is selected, stages at most one pending patch, and persists the
whole map through an injected :class:`BlobStore` after every change.

Every edit goes through the same commit path:

1. Build the new block list (through :func:`apply_patch` for block edits).
2. Normalize the resulting text; if it equals the current text nothing
   changes and the current document is returned as is.
3. Re-derive sections, bump the version by one, record a history entry.
4. Store the document, drop any pending patch, persist.

Only one writer is expected per repository.  The class does no locking.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Sequence

from lexpatch.config import LexpatchConfig
from lexpatch.converter.block_codec import blocks_to_text, create_block, text_to_blocks
from lexpatch.converter.normalizer import normalize
from lexpatch.converter.sections import parse_sections
from lexpatch.diff.differ import diff_markdown
from lexpatch.errors import NoDocumentSelectedError, PendingPatchError, VersionNotFoundError
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
    PendingPatch,
    ReplaceBlock,
    utc_now,
)
from lexpatch.observability import get_logger, resolve_metrics
from lexpatch.patch.engine import apply_patch_with_report, create_document
from lexpatch.storage.base import BlobStore
from lexpatch.storage.serializer import decode_documents, encode_documents
from lexpatch.versioning.history import add_version_snapshot, create_snapshot, restore_version

log = get_logger("lexpatch.repository")


def _rederive_keeping_ids(blocks: Sequence[Block], normalized: str) -> list[Block]:
    """Rebuild blocks from *normalized*, reusing ids position by position.

    Fresh ids are only issued when normalization changed the line count.
    """
    derived = text_to_blocks(normalized)
    if len(derived) != len(blocks):
        return derived
    return [
        Block(id=old.id, type=new.type, content=new.content)
        for old, new in zip(blocks, derived)
    ]


class DocumentRepository:
    """Owns the open documents of one editing session.

    Parameters
    ----------
    store:
        Persistence adapter.  The document map is saved under
        ``config.storage_key``.
    config:
        Repository configuration.  Defaults to :class:`LexpatchConfig()`.
    """

    def __init__(self, store: BlobStore, config: LexpatchConfig | None = None) -> None:
        self._store = store
        self._config = config or LexpatchConfig()
        self._metrics = resolve_metrics(self._config.metrics)
        self._documents: dict[str, Document] = {}
        self._selected: str | None = None
        self._pending: PendingPatch | None = None

    # -- state --------------------------------------------------------------

    @property
    def config(self) -> LexpatchConfig:
        return self._config

    @property
    def documents(self) -> dict[str, Document]:
        return dict(self._documents)

    @property
    def selected_file_id(self) -> str | None:
        return self._selected

    @property
    def document(self) -> Document | None:
        if self._selected is None:
            return None
        return self._documents.get(self._selected)

    @property
    def pending_patch(self) -> PendingPatch | None:
        return self._pending

    @property
    def versions(self) -> list[DocumentVersion]:
        doc = self.document
        return list(doc.versions) if doc is not None else []

    def get(self, file_id: str) -> Document | None:
        return self._documents.get(file_id)

    # -- persistence --------------------------------------------------------

    def load(self) -> int:
        """Load and hydrate every stored document.  Returns how many were loaded.

        Raises
        ------
        SchemaVersionError, StorageDecodeError
            When the stored payload cannot be used.
        """
        data = self._store.load(self._config.storage_key)
        if data is None:
            log.debug(
                "No stored documents",
                extra={"extra_fields": {"op": "load", "key": self._config.storage_key}},
            )
            return 0

        stored = decode_documents(data, self._config.schema_version)
        self._documents = {
            file_id: self._hydrate(doc, file_id) for file_id, doc in stored.items()
        }
        log.info(
            "Documents loaded",
            extra={"extra_fields": {"op": "load", "documents": len(self._documents)}},
        )
        return len(self._documents)

    def save(self) -> None:
        """Persist the whole document map."""
        payload = encode_documents(self._documents, self._config.schema_version)
        self._store.save(self._config.storage_key, payload)
        if self._config.debug_dump_payload:
            log.debug(
                "Documents saved",
                extra={
                    "extra_fields": {
                        "op": "save",
                        "key": self._config.storage_key,
                        "bytes": len(payload),
                        "documents": sorted(self._documents),
                    }
                },
            )

    # -- selection ----------------------------------------------------------

    def open(self, file_id: str) -> Document:
        """Select *file_id*, creating its document on first use.

        Any pending patch on the previously selected document is dropped.
        """
        doc = self._documents.get(file_id)
        if doc is None:
            doc = self._hydrate(doc, file_id)
            self._documents[file_id] = doc
        self._selected = file_id
        self._pending = None
        self.save()
        log.info(
            "Document opened",
            extra={"extra_fields": {"op": "open", "file_id": file_id, "version": doc.version}},
        )
        return doc

    def close(self) -> None:
        """Persist and deselect the current document."""
        self.save()
        self._selected = None
        self._pending = None

    # -- text edits ---------------------------------------------------------

    def get_markdown(self) -> str:
        doc = self.document
        return doc.markdown if doc is not None else ""

    def set_markdown(self, markdown: str) -> Document:
        """Replace the selected document's content with *markdown*."""
        doc = self._require_document("set_markdown")
        return self._commit(doc, markdown, None, "set_markdown")

    # -- block edits --------------------------------------------------------

    def update_block(self, block_id: str, content: str) -> Document:
        doc = self._require_document("update_block")
        current = next((b for b in doc.blocks if b.id == block_id), None)
        if current is None:
            self._report_skipped("update_block", [0])
            return doc
        return self._apply_ops(
            doc, [ReplaceBlock(block_id=block_id, block=current.with_content(content))],
            "update_block",
        )

    def add_block(
        self,
        after_block_id: str | None,
        block_type: BlockType | str,
        content: str,
    ) -> Document:
        """Insert a new block after *after_block_id* (or at the end)."""
        doc = self._require_document("add_block")
        block = create_block(block_type, content)
        return self._apply_ops(
            doc, [InsertAfter(block_id=after_block_id, block=block)], "add_block"
        )

    def delete_block(self, block_id: str) -> Document:
        doc = self._require_document("delete_block")
        return self._apply_ops(doc, [DeleteBlock(block_id=block_id)], "delete_block")

    # -- pending patches ----------------------------------------------------

    def set_pending_patch(self, ops: Sequence[PatchOp]) -> PendingPatch:
        """Stage *ops* for review.

        Raises
        ------
        PendingPatchError
            When another patch is already staged.
        """
        self._require_document("set_pending_patch")
        if self._pending is not None:
            raise PendingPatchError(
                message="A patch is already pending; apply or discard it first",
                context={"file_id": self._selected, "pending_ops": len(self._pending.ops)},
            )
        self._pending = PendingPatch(ops=tuple(ops))
        return self._pending

    def discard_pending_patch(self) -> PendingPatch | None:
        pending, self._pending = self._pending, None
        return pending

    def apply_pending_patch(self) -> Document:
        """Apply the staged patch to the selected document.

        Raises
        ------
        PendingPatchError
            When no patch is staged.
        """
        doc = self._require_document("apply_pending_patch")
        if self._pending is None:
            raise PendingPatchError(
                message="No pending patch to apply",
                context={"file_id": self._selected},
            )
        ops = list(self._pending.ops)
        self._pending = None
        return self._apply_ops(doc, ops, "apply_pending_patch")

    # -- history ------------------------------------------------------------

    def snapshot(self) -> DocumentSnapshot:
        return create_snapshot(self._require_document("snapshot"))

    def restore_version(self, version_id: str) -> Document:
        """Bring back the history entry *version_id* as the live state.

        The document adopts the entry's text, sections and version number;
        blocks are re-derived from the text.

        Raises
        ------
        VersionNotFoundError
            When no history entry has that id.
        """
        doc = self._require_document("restore_version")
        entry = restore_version(doc.versions, version_id)
        if entry is None:
            raise VersionNotFoundError(
                message=f"No version {version_id!r} in history",
                context={"file_id": doc.file_id, "version_id": version_id},
            )
        return self._adopt(
            doc,
            blocks=text_to_blocks(entry.markdown),
            markdown=entry.markdown,
            sections=list(entry.sections),
            version=entry.version,
            operation="restore_version",
        )

    def reset_to_snapshot(self, snapshot: DocumentSnapshot) -> Document:
        """Make *snapshot* the live state, keeping its block ids."""
        doc = self._require_document("reset_to_snapshot")
        return self._adopt(
            doc,
            blocks=list(snapshot.blocks),
            markdown=snapshot.markdown,
            sections=list(snapshot.sections),
            version=snapshot.version,
            operation="reset_to_snapshot",
        )

    def diff_with_version(self, version_id: str) -> MarkdownDiff:
        """Diff the history entry *version_id* (old) against the live text (new)."""
        doc = self._require_document("diff_with_version")
        entry = restore_version(doc.versions, version_id)
        if entry is None:
            raise VersionNotFoundError(
                message=f"No version {version_id!r} in history",
                context={"file_id": doc.file_id, "version_id": version_id},
            )
        return diff_markdown(
            entry.markdown, doc.markdown, debug_dump=self._config.debug_dump_diff
        )

    # -- internals ----------------------------------------------------------

    def _require_document(self, operation: str) -> Document:
        doc = self.document
        if doc is None:
            raise NoDocumentSelectedError(context={"operation": operation})
        return doc

    def _hydrate(self, doc: Document | None, file_id: str) -> Document:
        """Fill in derived state and record the current text in history."""
        base = doc or create_document(file_id, self._config.default_content or None)
        if base.markdown:
            source = base.markdown
        elif base.blocks:
            source = blocks_to_text(base.blocks)
        else:
            source = self._config.default_content
        markdown = normalize(source)
        sections = parse_sections(markdown)
        limit = self._config.version_history_limit
        version = base.version or 1
        versions = add_version_snapshot(
            base.versions[-limit:], markdown, sections, limit, version
        )
        return dataclasses.replace(
            base,
            file_id=base.file_id or file_id,
            blocks=list(base.blocks) if base.blocks else text_to_blocks(markdown),
            markdown=markdown,
            sections=sections,
            version=version,
            versions=versions,
        )

    def _apply_ops(self, doc: Document, ops: list[PatchOp], operation: str) -> Document:
        report = apply_patch_with_report(doc, ops)
        self._metrics.increment(
            "lexpatch.patch_ops_total", len(ops), tags={"operation": operation}
        )
        skipped = [i for i, o in enumerate(report.outcomes) if o is OpOutcome.NOT_FOUND]
        if skipped:
            self._report_skipped(operation, skipped)
        if ops and report.applied_count == 0:
            return doc
        return self._commit(doc, report.document.markdown, report.document.blocks, operation)

    def _report_skipped(self, operation: str, indices: list[int]) -> None:
        self._metrics.increment(
            "lexpatch.patch_ops_skipped_total", len(indices), tags={"operation": operation}
        )
        log.warning(
            "Patch ops referenced unknown blocks",
            extra={
                "extra_fields": {
                    "op": operation,
                    "file_id": self._selected,
                    "skipped": indices,
                }
            },
        )

    def _commit(
        self,
        doc: Document,
        markdown: str,
        blocks: list[Block] | None,
        operation: str,
    ) -> Document:
        normalized = normalize(markdown)
        if normalized == doc.markdown:
            return doc
        if blocks is None:
            blocks = text_to_blocks(normalized)
        elif blocks_to_text(blocks) != normalized:
            blocks = _rederive_keeping_ids(blocks, normalized)
        return self._adopt(
            doc,
            blocks=list(blocks),
            markdown=normalized,
            sections=parse_sections(normalized),
            version=doc.version + 1,
            operation=operation,
        )

    def _adopt(
        self,
        doc: Document,
        *,
        blocks: list[Block],
        markdown: str,
        sections: list[MarkdownSection],
        version: int,
        operation: str,
    ) -> Document:
        limit = self._config.version_history_limit
        versions = add_version_snapshot(doc.versions, markdown, sections, limit, version)
        updated = dataclasses.replace(
            doc,
            blocks=blocks,
            markdown=markdown,
            sections=sections,
            version=version,
            versions=versions,
            updated_at=utc_now(),
        )
        recorded = not doc.versions or versions[-1].id != doc.versions[-1].id
        if recorded:
            self._metrics.increment(
                "lexpatch.versions_recorded_total", tags={"operation": operation}
            )

        self._documents[self._selected or updated.file_id] = updated
        self._pending = None
        self.save()
        log.info(
            "Document updated",
            extra={
                "extra_fields": {
                    "op": operation,
                    "file_id": updated.file_id,
                    "version": updated.version,
                    "blocks": len(updated.blocks),
                }
            },
        )
        return updated
