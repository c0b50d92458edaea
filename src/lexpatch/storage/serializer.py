"""JSON encoding of documents and patch payloads.

The persisted form is an envelope::

    {"version": 2, "documents": {"<file id>": {...document...}}}

Document fields use the camelCase keys of the stored schema (``fileId``,
``createdAt``, ...).  Encoding is lossless: block order, ids and content
round-trip exactly.  Block hashes are written for readers of the raw
payload but recomputed on decode.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any

from lexpatch.errors import InvalidPatchError, SchemaVersionError, StorageDecodeError
from lexpatch.models import (
    Block,
    BlockType,
    DeleteBlock,
    Document,
    DocumentVersion,
    InsertAfter,
    MarkdownSection,
    PatchOp,
    PatchOpType,
    ReplaceBlock,
    SectionType,
    utc_now,
)
from lexpatch.utils.hashing import new_id

# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------

def block_to_dict(block: Block) -> dict[str, Any]:
    return {
        "id": block.id,
        "type": block.type.value,
        "content": block.content,
        "hash": block.hash,
    }


def section_to_dict(section: MarkdownSection) -> dict[str, Any]:
    data: dict[str, Any] = {
        "id": section.id,
        "type": section.type.value,
        "content": section.content,
        "startLine": section.start_line,
        "endLine": section.end_line,
    }
    if section.level is not None:
        data["level"] = section.level
    if section.title is not None:
        data["title"] = section.title
    return data


def version_to_dict(entry: DocumentVersion) -> dict[str, Any]:
    return {
        "id": entry.id,
        "markdown": entry.markdown,
        "sections": [section_to_dict(s) for s in entry.sections],
        "version": entry.version,
        "timestamp": entry.timestamp.isoformat(),
    }


def document_to_dict(document: Document) -> dict[str, Any]:
    return {
        "id": document.id,
        "fileId": document.file_id,
        "blocks": [block_to_dict(b) for b in document.blocks],
        "markdown": document.markdown,
        "sections": [section_to_dict(s) for s in document.sections],
        "versions": [version_to_dict(v) for v in document.versions],
        "version": document.version,
        "createdAt": document.created_at.isoformat(),
        "updatedAt": document.updated_at.isoformat(),
    }


def encode_documents(documents: dict[str, Document], schema_version: int) -> bytes:
    """Serialize the document map into a versioned UTF-8 JSON envelope."""
    payload = {
        "version": schema_version,
        "documents": {
            file_id: document_to_dict(doc) for file_id, doc in documents.items()
        },
    }
    return json.dumps(payload, ensure_ascii=False).encode("utf-8")


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------

def _parse_timestamp(raw: Any) -> datetime:
    if not raw:
        return utc_now()
    parsed = datetime.fromisoformat(str(raw).replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def block_from_dict(data: dict[str, Any]) -> Block:
    return Block(
        id=str(data.get("id") or new_id()),
        type=BlockType(data.get("type", BlockType.PARAGRAPH.value)),
        content=str(data.get("content", "")),
    )


def section_from_dict(data: dict[str, Any]) -> MarkdownSection:
    return MarkdownSection(
        id=str(data["id"]),
        type=SectionType(data["type"]),
        content=str(data.get("content", "")),
        start_line=int(data["startLine"]),
        end_line=int(data["endLine"]),
        level=data.get("level"),
        title=data.get("title"),
    )


def version_from_dict(data: dict[str, Any]) -> DocumentVersion:
    return DocumentVersion(
        id=str(data["id"]),
        markdown=str(data.get("markdown", "")),
        sections=tuple(section_from_dict(s) for s in data.get("sections", [])),
        version=int(data["version"]),
        timestamp=_parse_timestamp(data.get("timestamp")),
    )


def document_from_dict(data: dict[str, Any], file_id: str = "") -> Document:
    """Rebuild a :class:`Document`; missing optional fields get defaults."""
    return Document(
        id=str(data.get("id") or new_id()),
        file_id=str(data.get("fileId") or file_id),
        blocks=[block_from_dict(b) for b in data.get("blocks") or []],
        markdown=str(data.get("markdown") or ""),
        sections=[section_from_dict(s) for s in data.get("sections") or []],
        versions=[version_from_dict(v) for v in data.get("versions") or []],
        version=int(data.get("version") or 1),
        created_at=_parse_timestamp(data.get("createdAt")),
        updated_at=_parse_timestamp(data.get("updatedAt")),
    )


def decode_documents(data: bytes, schema_version: int) -> dict[str, Document]:
    """Parse an envelope produced by :func:`encode_documents`.

    Raises
    ------
    SchemaVersionError
        The envelope was written by a newer schema than *schema_version*.
    StorageDecodeError
        The payload is not valid JSON or does not have the expected shape.
    """
    try:
        payload = json.loads(data.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise StorageDecodeError(
            message=f"Stored documents are not valid JSON: {exc}",
            cause=exc,
        ) from exc

    if not isinstance(payload, dict):
        raise StorageDecodeError(
            message="Stored documents envelope must be a JSON object",
            context={"path": "$"},
        )

    found = payload.get("version")
    if isinstance(found, int) and found > schema_version:
        raise SchemaVersionError(
            message=(
                f"Stored documents use schema version {found}; "
                f"this build supports up to {schema_version}"
            ),
            context={"found": found, "supported": schema_version},
        )

    raw_documents = payload.get("documents") or {}
    if not isinstance(raw_documents, dict):
        raise StorageDecodeError(
            message="'documents' must be a JSON object keyed by file id",
            context={"path": "$.documents"},
        )

    documents: dict[str, Document] = {}
    for file_id, raw in raw_documents.items():
        try:
            documents[file_id] = document_from_dict(raw, file_id)
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise StorageDecodeError(
                message=f"Stored document {file_id!r} is malformed: {exc}",
                context={"path": f"$.documents.{file_id}"},
                cause=exc,
            ) from exc
    return documents


# ---------------------------------------------------------------------------
# Patch payloads
# ---------------------------------------------------------------------------

def patch_op_to_dict(op: PatchOp) -> dict[str, Any]:
    data: dict[str, Any] = {"op": op.op_type.value, "blockId": op.block_id or ""}
    if isinstance(op, (ReplaceBlock, InsertAfter)):
        data["block"] = block_to_dict(op.block)
    return data


def decode_patch_ops(payload: list[dict[str, Any]]) -> list[PatchOp]:
    """Turn a JSON op list (as sent by a suggestion producer) into ops.

    Each item looks like ``{"op": "insert_after", "blockId": "...",
    "block": {"type": "paragraph", "content": "..."}}``.  A block without
    an ``id`` gets a fresh one.

    Raises
    ------
    InvalidPatchError
        On an unknown op tag, a missing ``block`` for replace/insert, or a
        missing ``blockId`` for replace/delete.
    """
    if not isinstance(payload, list):
        raise InvalidPatchError(
            message="Patch payload must be a list of operations",
            context={"reason": "not_a_list"},
        )

    ops: list[PatchOp] = []
    for index, item in enumerate(payload):
        if not isinstance(item, dict):
            raise InvalidPatchError(
                message=f"Patch op #{index} must be an object",
                context={"index": index, "reason": "not_an_object"},
            )
        raw_op = item.get("op")
        try:
            op_type = PatchOpType(raw_op)
        except ValueError as exc:
            raise InvalidPatchError(
                message=f"Patch op #{index} has unknown type {raw_op!r}",
                context={"index": index, "op": raw_op, "reason": "unknown_op"},
                cause=exc,
            ) from exc

        block_id = item.get("blockId") or ""
        if op_type is not PatchOpType.INSERT_AFTER and not block_id:
            raise InvalidPatchError(
                message=f"Patch op #{index} ({op_type.value}) needs a blockId",
                context={"index": index, "op": op_type.value, "reason": "missing_block_id"},
            )

        if op_type is PatchOpType.DELETE_BLOCK:
            ops.append(DeleteBlock(block_id=block_id))
            continue

        raw_block = item.get("block")
        if not isinstance(raw_block, dict):
            raise InvalidPatchError(
                message=f"Patch op #{index} ({op_type.value}) needs a block",
                context={"index": index, "op": op_type.value, "reason": "missing_block"},
            )
        try:
            block = block_from_dict(raw_block)
        except ValueError as exc:
            raise InvalidPatchError(
                message=f"Patch op #{index} has an invalid block: {exc}",
                context={"index": index, "op": op_type.value, "reason": "invalid_block"},
                cause=exc,
            ) from exc

        if op_type is PatchOpType.REPLACE_BLOCK:
            ops.append(ReplaceBlock(block_id=block_id, block=block))
        else:
            ops.append(InsertAfter(block_id=block_id or None, block=block))
    return ops
