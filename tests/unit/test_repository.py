"""Tests for DocumentRepository: selection, edits, pending patches, history, persistence."""

from __future__ import annotations

import json

import pytest

from lexpatch.config import DEFAULT_STORAGE_KEY, LexpatchConfig
from lexpatch.converter.block_codec import create_block
from lexpatch.errors import (
    NoDocumentSelectedError,
    PendingPatchError,
    SchemaVersionError,
    VersionNotFoundError,
)
from lexpatch.models import BlockType, DeleteBlock, InsertAfter
from lexpatch.repository import DocumentRepository
from lexpatch.storage.memory import InMemoryBlobStore


class RecordingMetrics:
    def __init__(self):
        self.counters: list[tuple[str, int, dict]] = []

    def increment(self, name, value=1, tags=None):
        self.counters.append((name, value, tags or {}))

    def timing(self, name, ms, tags=None):
        pass

    def names(self) -> list[str]:
        return [name for name, _, _ in self.counters]


# ---------------------------------------------------------------------------
# Selection
# ---------------------------------------------------------------------------


class TestOpen:
    def test_first_open_creates_document(self, repo):
        doc = repo.document
        assert doc is not None
        assert doc.file_id == "file-1"
        assert doc.version == 1
        assert len(doc.versions) == 1
        assert repo.selected_file_id == "file-1"

    def test_open_persists(self, repo, store):
        assert store.load(DEFAULT_STORAGE_KEY) is not None

    def test_reopen_keeps_existing_document(self, repo):
        repo.set_markdown("Body")
        repo.open("file-2")
        doc = repo.open("file-1")
        assert doc.markdown == "Body"
        assert doc.version == 2

    def test_default_content_for_new_documents(self, store):
        repository = DocumentRepository(store, LexpatchConfig(default_content="# Untitled"))
        doc = repository.open("fresh")
        assert doc.markdown == "# Untitled"
        assert doc.blocks[0].type is BlockType.HEADING

    def test_close_deselects(self, repo):
        repo.close()
        assert repo.document is None
        assert repo.get("file-1") is not None


class TestNoSelection:
    def test_get_markdown_is_empty(self, store):
        assert DocumentRepository(store).get_markdown() == ""

    @pytest.mark.parametrize(
        "call",
        [
            lambda r: r.set_markdown("x"),
            lambda r: r.update_block("b", "x"),
            lambda r: r.add_block(None, "paragraph", "x"),
            lambda r: r.delete_block("b"),
            lambda r: r.set_pending_patch([]),
            lambda r: r.apply_pending_patch(),
            lambda r: r.snapshot(),
            lambda r: r.restore_version("v"),
        ],
    )
    def test_edits_require_selection(self, store, call):
        with pytest.raises(NoDocumentSelectedError):
            call(DocumentRepository(store))

    def test_versions_empty(self, store):
        assert DocumentRepository(store).versions == []


# ---------------------------------------------------------------------------
# Text and block edits
# ---------------------------------------------------------------------------


class TestSetMarkdown:
    def test_commit_normalizes_and_bumps_version(self, repo):
        doc = repo.set_markdown("### Title\n\n<b>Body</b>")
        assert doc.markdown == "# Title\n\nBody"
        assert doc.version == 2
        assert [s.type.value for s in doc.sections] == ["heading", "paragraph"]
        assert len(doc.versions) == 2

    def test_script_regions_removed(self, repo):
        doc = repo.set_markdown("Safe<script>alert(1)</script> text")
        assert doc.markdown == "Safe text"

    def test_same_text_is_a_no_op(self, repo):
        first = repo.set_markdown("Body")
        again = repo.set_markdown("Body")
        assert again is first
        assert again.version == 2
        assert len(again.versions) == 2

    def test_text_equal_after_normalization_is_a_no_op(self, repo):
        first = repo.set_markdown("# Title")
        again = repo.set_markdown("## Title")
        assert again is first

    def test_blocks_follow_text(self, repo):
        doc = repo.set_markdown("# T\n- a\n> q")
        assert [b.type for b in doc.blocks] == [
            BlockType.HEADING,
            BlockType.LIST_ITEM,
            BlockType.QUOTE,
        ]

    def test_input_document_not_mutated(self, repo):
        before = repo.document
        repo.set_markdown("changed")
        assert before.markdown == ""
        assert before.version == 1


class TestBlockEdits:
    def test_update_block_keeps_id(self, repo):
        doc = repo.set_markdown("# Title\n\nBody")
        body = doc.blocks[2]
        updated = repo.update_block(body.id, "New body")
        assert updated.markdown == "# Title\n\nNew body"
        assert updated.blocks[2].id == body.id
        assert updated.version == 3

    def test_update_unknown_block_changes_nothing(self, store):
        metrics = RecordingMetrics()
        repository = DocumentRepository(store, LexpatchConfig(metrics=metrics))
        doc = repository.open("f")
        assert repository.update_block("missing", "x") is doc
        assert "lexpatch.patch_ops_skipped_total" in metrics.names()

    def test_add_block_after_anchor(self, repo):
        doc = repo.set_markdown("one\nthree")
        updated = repo.add_block(doc.blocks[0].id, "paragraph", "two")
        assert updated.markdown == "one\ntwo\nthree"

    def test_add_block_without_anchor_appends(self, repo):
        repo.set_markdown("one")
        updated = repo.add_block(None, BlockType.LIST_ITEM, "item")
        assert updated.markdown == "one\n- item"

    def test_delete_block(self, repo):
        doc = repo.set_markdown("keep\ndrop")
        updated = repo.delete_block(doc.blocks[1].id)
        assert updated.markdown == "keep"

    def test_delete_unknown_block_changes_nothing(self, repo):
        doc = repo.set_markdown("keep")
        assert repo.delete_block("missing") is doc

    def test_block_edit_renders_headings_at_top_level(self, repo):
        doc = repo.set_markdown("# A\n## B")
        updated = repo.update_block(doc.blocks[0].id, "A2")
        assert updated.markdown == "# A2\n# B"

    def test_normalized_edit_keeps_every_block_id(self, repo):
        doc = repo.set_markdown("# A\n\nfirst\n\nsecond")
        before = [block.id for block in doc.blocks]
        updated = repo.update_block(doc.blocks[2].id, "first <b>bold</b>")
        assert updated.markdown == "# A\n\nfirst bold\n\nsecond"
        assert [block.id for block in updated.blocks] == before
        assert updated.blocks[2].content == "first bold"

    def test_heading_edit_with_padding_keeps_ids(self, repo):
        doc = repo.set_markdown("# A\n\nbody")
        before = [block.id for block in doc.blocks]
        updated = repo.update_block(doc.blocks[0].id, "  Title  ")
        assert updated.markdown == "# Title\n\nbody"
        assert [block.id for block in updated.blocks] == before
        assert updated.blocks[0].content == "Title"

    def test_old_ids_still_resolve_after_normalized_edit(self, repo):
        doc = repo.set_markdown("# A\n\nfirst\n\nsecond")
        last = doc.blocks[4]
        repo.update_block(doc.blocks[2].id, "<i>first</i> again")
        updated = repo.delete_block(last.id)
        assert updated.markdown == "# A\n\nfirst again\n"


# ---------------------------------------------------------------------------
# Pending patches
# ---------------------------------------------------------------------------


class TestPendingPatch:
    def test_staging_does_not_touch_document(self, repo):
        before = repo.document
        pending = repo.set_pending_patch([InsertAfter(None, create_block("paragraph", "x"))])
        assert repo.pending_patch is pending
        assert repo.document is before

    def test_second_patch_rejected(self, repo):
        repo.set_pending_patch([])
        with pytest.raises(PendingPatchError):
            repo.set_pending_patch([])

    def test_apply_commits_and_clears(self, repo):
        repo.set_markdown("first")
        repo.set_pending_patch([InsertAfter(None, create_block("paragraph", "second"))])
        doc = repo.apply_pending_patch()
        assert doc.markdown == "first\nsecond"
        assert repo.pending_patch is None

    def test_apply_without_pending(self, repo):
        with pytest.raises(PendingPatchError):
            repo.apply_pending_patch()

    def test_apply_of_dead_ops_clears_pending(self, repo):
        doc = repo.set_markdown("x")
        repo.set_pending_patch([DeleteBlock("gone")])
        assert repo.apply_pending_patch() is doc
        assert repo.pending_patch is None

    def test_discard(self, repo):
        staged = repo.set_pending_patch([])
        assert repo.discard_pending_patch() is staged
        assert repo.pending_patch is None

    def test_edit_clears_pending(self, repo):
        repo.set_pending_patch([DeleteBlock("b")])
        repo.set_markdown("typed")
        assert repo.pending_patch is None

    def test_open_clears_pending(self, repo):
        repo.set_pending_patch([DeleteBlock("b")])
        repo.open("file-2")
        assert repo.pending_patch is None


# ---------------------------------------------------------------------------
# History
# ---------------------------------------------------------------------------


class TestHistory:
    def test_history_is_bounded(self, store):
        repository = DocumentRepository(store, LexpatchConfig(version_history_limit=3))
        repository.open("f")
        for i in range(5):
            repository.set_markdown(f"text {i}")
        assert [v.markdown for v in repository.versions] == ["text 2", "text 3", "text 4"]

    def test_restore_version(self, repo):
        repo.set_markdown("# A")
        repo.set_markdown("# A\n\nbody")
        target = repo.versions[1]
        doc = repo.restore_version(target.id)
        assert doc.markdown == "# A"
        assert doc.version == target.version
        assert doc.versions[-1].markdown == "# A"
        assert len(doc.versions) == 4

    def test_restore_unknown_version(self, repo):
        with pytest.raises(VersionNotFoundError) as exc_info:
            repo.restore_version("nope")
        assert exc_info.value.context["version_id"] == "nope"

    def test_diff_with_version(self, repo):
        repo.set_markdown("# A")
        old = repo.versions[-1]
        repo.set_markdown("# A\n\nbody")
        diff = repo.diff_with_version(old.id)
        assert [s.content for s in diff.added] == ["body"]
        assert diff.removed == []
        assert diff.modified == []

    def test_diff_with_unknown_version(self, repo):
        with pytest.raises(VersionNotFoundError):
            repo.diff_with_version("nope")

    def test_snapshot_and_reset(self, repo):
        repo.set_markdown("original\ntext")
        snap = repo.snapshot()
        repo.set_markdown("replaced")
        doc = repo.reset_to_snapshot(snap)
        assert doc.markdown == "original\ntext"
        assert [b.id for b in doc.blocks] == [b.id for b in snap.blocks]
        assert doc.version == snap.version

    def test_versions_recorded_metric(self, store):
        metrics = RecordingMetrics()
        repository = DocumentRepository(store, LexpatchConfig(metrics=metrics))
        repository.open("f")
        repository.set_markdown("a")
        repository.set_markdown("a")
        assert metrics.names().count("lexpatch.versions_recorded_total") == 1


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------


class TestPersistence:
    def test_load_empty_store(self, store):
        assert DocumentRepository(store).load() == 0

    def test_documents_survive_reload(self, repo, store, config):
        repo.set_markdown("# Saved\n\ntext")
        saved = repo.document

        reloaded = DocumentRepository(store, config)
        assert reloaded.load() == 1
        doc = reloaded.get("file-1")
        assert doc.markdown == saved.markdown
        assert [b.id for b in doc.blocks] == [b.id for b in saved.blocks]
        assert len(doc.versions) == len(saved.versions)
        assert doc.version == saved.version

    def test_newer_schema_refused(self):
        store = InMemoryBlobStore(
            {DEFAULT_STORAGE_KEY: json.dumps({"version": 99, "documents": {}}).encode()}
        )
        with pytest.raises(SchemaVersionError):
            DocumentRepository(store).load()

    def test_custom_storage_key(self):
        store = InMemoryBlobStore()
        repository = DocumentRepository(store, LexpatchConfig(storage_key="other"))
        repository.open("f")
        assert store.keys() == ["other"]

    def test_documents_property_is_a_copy(self, repo):
        repo.documents.clear()
        assert repo.get("file-1") is not None
