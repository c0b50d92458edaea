"""Tests for the patch engine."""

import dataclasses
from datetime import datetime, timedelta, timezone

from lexpatch.converter.block_codec import create_block
from lexpatch.models import (
    BlockType,
    DeleteBlock,
    InsertAfter,
    OpOutcome,
    ReplaceBlock,
    SectionType,
)
from lexpatch.patch.engine import apply_patch, apply_patch_with_report, create_document


def _doc(text="# Title\nFirst\nSecond"):
    doc = create_document("file-1", text)
    past = datetime(2020, 1, 1, tzinfo=timezone.utc)
    return dataclasses.replace(doc, updated_at=past)


def _contents(doc):
    return [b.content for b in doc.blocks]


class TestCreateDocument:
    def test_version_starts_at_one(self):
        doc = create_document("f")
        assert doc.version == 1
        assert doc.file_id == "f"
        assert doc.versions == []

    def test_empty_document_has_one_empty_paragraph(self):
        doc = create_document("f")
        assert [(b.type, b.content) for b in doc.blocks] == [(BlockType.PARAGRAPH, "")]
        assert doc.markdown == ""

    def test_derived_state_from_content(self):
        doc = create_document("f", "# H\nbody")
        assert doc.markdown == "# H\nbody"
        assert [s.type for s in doc.sections] == [SectionType.HEADING, SectionType.PARAGRAPH]


class TestReplaceBlock:
    def test_replaces_in_place(self):
        doc = _doc()
        target = doc.blocks[1]
        new = create_block(BlockType.QUOTE, "Quoted")
        result = apply_patch(doc, [ReplaceBlock(block_id=target.id, block=new)])
        assert _contents(result) == ["Title", "Quoted", "Second"]
        assert result.blocks[1].id == new.id
        assert result.markdown == "# Title\n> Quoted\nSecond"

    def test_unknown_id_is_noop(self):
        doc = _doc()
        result = apply_patch(doc, [ReplaceBlock(block_id="missing", block=create_block("paragraph", "x"))])
        assert _contents(result) == _contents(doc)


class TestInsertAfter:
    def test_inserts_after_anchor(self):
        doc = _doc()
        new = create_block(BlockType.LIST_ITEM, "item")
        result = apply_patch(doc, [InsertAfter(block_id=doc.blocks[0].id, block=new)])
        assert _contents(result) == ["Title", "item", "First", "Second"]

    def test_empty_anchor_appends(self):
        doc = _doc()
        result = apply_patch(doc, [InsertAfter(block_id="", block=create_block("paragraph", "end"))])
        assert _contents(result)[-1] == "end"

    def test_none_anchor_appends(self):
        doc = _doc()
        result = apply_patch(doc, [InsertAfter(block_id=None, block=create_block("paragraph", "end"))])
        assert _contents(result)[-1] == "end"

    def test_unknown_anchor_appends(self):
        doc = _doc()
        result = apply_patch(doc, [InsertAfter(block_id="gone", block=create_block("paragraph", "end"))])
        assert _contents(result) == ["Title", "First", "Second", "end"]


class TestDeleteBlock:
    def test_deletes(self):
        doc = _doc()
        result = apply_patch(doc, [DeleteBlock(block_id=doc.blocks[1].id)])
        assert _contents(result) == ["Title", "Second"]

    def test_unknown_id_is_noop(self):
        doc = _doc()
        result = apply_patch(doc, [DeleteBlock(block_id="missing")])
        assert _contents(result) == _contents(doc)


class TestOrderingAndState:
    def test_ops_see_earlier_results(self):
        doc = _doc()
        new = create_block(BlockType.PARAGRAPH, "inserted")
        ops = [
            InsertAfter(block_id=doc.blocks[0].id, block=new),
            ReplaceBlock(block_id=new.id, block=new.with_content("edited")),
            DeleteBlock(block_id=doc.blocks[2].id),
        ]
        result = apply_patch(doc, ops)
        assert _contents(result) == ["Title", "edited", "First"]

    def test_delete_then_replace_same_id_skips_replace(self):
        doc = _doc()
        target = doc.blocks[1].id
        report = apply_patch_with_report(
            doc,
            [
                DeleteBlock(block_id=target),
                ReplaceBlock(block_id=target, block=create_block("paragraph", "x")),
            ],
        )
        assert report.outcomes == [OpOutcome.APPLIED, OpOutcome.NOT_FOUND]
        assert _contents(report.document) == ["Title", "Second"]

    def test_version_increments_by_exactly_one(self):
        doc = _doc()
        ops = [InsertAfter(block_id=None, block=create_block("paragraph", str(i))) for i in range(5)]
        assert apply_patch(doc, ops).version == doc.version + 1
        assert apply_patch(doc, []).version == doc.version + 1

    def test_updated_at_refreshed(self):
        doc = _doc()
        result = apply_patch(doc, [])
        assert result.updated_at > doc.updated_at
        assert result.updated_at - doc.updated_at > timedelta(days=1)

    def test_sections_recomputed(self):
        doc = _doc()
        new = create_block(BlockType.HEADING, "Added")
        result = apply_patch(doc, [InsertAfter(block_id=None, block=new)])
        assert [s.title for s in result.sections if s.type is SectionType.HEADING] == ["Title", "Added"]

    def test_input_document_not_mutated(self):
        doc = _doc()
        before = list(doc.blocks)
        apply_patch(doc, [DeleteBlock(block_id=doc.blocks[0].id)])
        assert doc.blocks == before
        assert doc.version == 1


class TestReport:
    def test_outcome_per_op(self):
        doc = _doc()
        report = apply_patch_with_report(
            doc,
            [
                DeleteBlock(block_id="nope"),
                InsertAfter(block_id="nope", block=create_block("paragraph", "x")),
                ReplaceBlock(block_id=doc.blocks[0].id, block=create_block("heading", "T")),
            ],
        )
        assert report.outcomes == [OpOutcome.NOT_FOUND, OpOutcome.APPLIED, OpOutcome.APPLIED]
        assert report.applied_count == 2
        assert not report.all_applied

    def test_same_document_as_permissive_variant(self):
        doc = _doc()
        ops = [DeleteBlock(block_id=doc.blocks[2].id)]
        assert _contents(apply_patch_with_report(doc, ops).document) == _contents(apply_patch(doc, ops))
