"""Convert documents, blocks, and settings to and from JSON-compatible data.

Field names follow the stored format (camelCase, ``type`` tags ``text`` and
``image``, image references under ``url``) so existing snapshots load unchanged.
"""

from dataclasses import asdict
from typing import Any

from zenscript.config import DEFAULT_GRID_ALIGN, DEFAULT_GRID_WIDTH
from zenscript.core.tree.hierarchy import would_create_cycle
from zenscript.errors import SnapshotFormatError
from zenscript.models.block import ALIGNMENTS, Block, ImageData, ImageGridBlock, TextBlock
from zenscript.models.document import Document, EditorSettings

_SETTINGS_KEYS = {
    "theme_id": "themeId",
    "font_family": "fontFamily",
    "font_size": "fontSize",
    "is_focus_mode": "isFocusMode",
    "editor_width": "editorWidth",
    "sidebar_visible": "sidebarVisible",
}


def image_to_data(image: ImageData) -> dict[str, Any]:
    data: dict[str, Any] = {"id": image.id, "url": image.source_ref}
    if image.caption is not None:
        data["caption"] = image.caption
    if image.width is not None:
        data["width"] = image.width
    return data


def block_to_data(block: Block) -> dict[str, Any]:
    if isinstance(block, TextBlock):
        return {"id": block.id, "type": "text", "content": block.content}
    return {
        "id": block.id,
        "type": "image",
        "images": [image_to_data(img) for img in block.images],
        "align": block.align,
        "width": block.width,
    }


def document_to_data(doc: Document) -> dict[str, Any]:
    data: dict[str, Any] = {
        "id": doc.id,
        "title": doc.title,
        "blocks": [block_to_data(b) for b in doc.blocks],
        "lastModified": doc.last_modified,
        "isOpened": doc.is_opened,
    }
    if doc.parent_id is not None:
        data["parentId"] = doc.parent_id
    return data


def documents_to_data(documents: tuple[Document, ...]) -> list[dict[str, Any]]:
    return [document_to_data(d) for d in documents]


def parse_block(data: dict[str, Any]) -> Block:
    """Parse one stored block.

    Raises:
        SnapshotFormatError: On a missing id or an unknown block type.
    """
    try:
        block_id = data["id"]
        block_type = data["type"]
    except (KeyError, TypeError) as e:
        msg = f"Malformed block: {data!r}"
        raise SnapshotFormatError(msg) from e

    if block_type == "text":
        return TextBlock(id=block_id, content=data.get("content", ""))
    if block_type == "image":
        align = data.get("align", DEFAULT_GRID_ALIGN)
        if align not in ALIGNMENTS:
            msg = f"Block {block_id!r} has unknown alignment {align!r}"
            raise SnapshotFormatError(msg)
        try:
            images = tuple(
                ImageData(
                    id=img["id"],
                    source_ref=img["url"],
                    caption=img.get("caption"),
                    width=img.get("width"),
                )
                for img in data.get("images", [])
            )
        except (KeyError, TypeError) as e:
            msg = f"Malformed image in block {block_id!r}"
            raise SnapshotFormatError(msg) from e
        return ImageGridBlock(
            id=block_id,
            images=images,
            align=align,
            width=data.get("width", DEFAULT_GRID_WIDTH),
        )
    msg = f"Block {block_id!r} has unknown type {block_type!r}"
    raise SnapshotFormatError(msg)


def parse_document(data: dict[str, Any]) -> Document:
    """Parse one stored document.

    Raises:
        SnapshotFormatError: If required fields are missing.
    """
    try:
        return Document(
            id=data["id"],
            parent_id=data.get("parentId"),
            title=data.get("title", ""),
            blocks=tuple(parse_block(b) for b in data.get("blocks", [])),
            last_modified=data["lastModified"],
            is_opened=data.get("isOpened", False),
        )
    except (KeyError, TypeError) as e:
        msg = f"Malformed document: {str(data)[:80]}"
        raise SnapshotFormatError(msg) from e


def parse_documents(data: Any) -> tuple[Document, ...]:
    """Parse the stored document list, rejecting duplicate ids and parent cycles."""
    if not isinstance(data, list):
        msg = f"Expected a list of documents, got {type(data).__name__}"
        raise SnapshotFormatError(msg)
    documents = tuple(parse_document(d) for d in data)
    ids = [d.id for d in documents]
    if len(ids) != len(set(ids)):
        msg = "Duplicate document ids in snapshot"
        raise SnapshotFormatError(msg)
    for doc in documents:
        if doc.parent_id is not None and would_create_cycle(documents, doc.id, doc.parent_id):
            msg = f"Document {doc.id!r} is its own ancestor in snapshot"
            raise SnapshotFormatError(msg)
    return documents


def settings_to_data(settings: EditorSettings) -> dict[str, Any]:
    return {_SETTINGS_KEYS[k]: v for k, v in asdict(settings).items()}


def parse_settings(data: dict[str, Any] | None) -> EditorSettings:
    """Merge stored settings over the defaults; unknown keys are ignored."""
    if not data:
        return EditorSettings()
    values = {name: data[stored] for name, stored in _SETTINGS_KEYS.items() if stored in data}
    return EditorSettings(**values)
