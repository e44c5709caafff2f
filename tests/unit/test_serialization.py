"""Tests for converting documents and settings to and from stored JSON data."""

import pytest

from tests.unit.fakes import make_doc, make_grid
from zenscript.core.serialization import (
    block_to_data,
    document_to_data,
    documents_to_data,
    parse_block,
    parse_documents,
    parse_settings,
    settings_to_data,
)
from zenscript.errors import SnapshotFormatError
from zenscript.models.block import ImageData, ImageGridBlock, TextBlock
from zenscript.models.document import Document, EditorSettings


def test_text_block_data() -> None:
    assert block_to_data(TextBlock(id="t", content="<i>x</i>")) == {
        "id": "t",
        "type": "text",
        "content": "<i>x</i>",
    }


def test_image_block_data_uses_url_key() -> None:
    grid = ImageGridBlock(
        id="g",
        images=(ImageData(id="i", source_ref="https://x/y.png", caption="Y"),),
        align="left",
        width=50,
    )
    assert block_to_data(grid) == {
        "id": "g",
        "type": "image",
        "images": [{"id": "i", "url": "https://x/y.png", "caption": "Y"}],
        "align": "left",
        "width": 50,
    }


def test_document_data_omits_missing_parent() -> None:
    data = document_to_data(make_doc("r"))
    assert "parentId" not in data
    assert data["lastModified"] == 1000
    assert data["isOpened"] is True

    assert document_to_data(make_doc("a", "r"))["parentId"] == "r"


def test_documents_round_trip(tree_docs: tuple) -> None:
    last = Document(
        id="c",
        title="",
        blocks=(TextBlock(id="t", content="hi"), make_grid("g", "i1", "i2")),
        last_modified=5,
        is_opened=False,
    )
    docs = (*tree_docs[:-1], last)
    assert parse_documents(documents_to_data(docs)) == docs


def test_parse_stored_document_with_defaults() -> None:
    stored = [
        {
            "id": "abc",
            "lastModified": 1,
            "blocks": [{"id": "b1", "type": "image", "images": [{"id": "i", "url": "u"}]}],
        }
    ]

    (doc,) = parse_documents(stored)

    assert doc.title == ""
    assert doc.parent_id is None
    assert not doc.is_opened
    grid = doc.blocks[0]
    assert grid.align == "center"
    assert grid.width == 80
    assert grid.images[0].source_ref == "u"


@pytest.mark.parametrize(
    "block",
    [
        {"type": "text"},
        {"id": "x", "type": "video"},
        {"id": "x", "type": "image", "align": "justify"},
        {"id": "x", "type": "image", "images": [{"id": "i"}]},
        "not a dict",
    ],
)
def test_parse_block_rejects_malformed(block: object) -> None:
    with pytest.raises(SnapshotFormatError):
        parse_block(block)  # type: ignore[arg-type]


def test_parse_documents_rejects_duplicates_and_non_lists() -> None:
    data = documents_to_data((make_doc("x"), make_doc("x")))
    with pytest.raises(SnapshotFormatError, match="Duplicate"):
        parse_documents(data)
    with pytest.raises(SnapshotFormatError):
        parse_documents({"id": "x"})
    with pytest.raises(SnapshotFormatError):
        parse_documents([{"id": "x"}])


@pytest.mark.parametrize(
    "parents",
    [
        [("x", "y"), ("y", "x")],
        [("x", "x")],
        [("r", None), ("x", "z"), ("y", "x"), ("z", "y")],
    ],
)
def test_parse_documents_rejects_parent_cycles(parents: list) -> None:
    data = documents_to_data(tuple(make_doc(doc_id, parent) for doc_id, parent in parents))
    with pytest.raises(SnapshotFormatError, match="own ancestor"):
        parse_documents(data)


def test_settings_use_camel_case_keys() -> None:
    data = settings_to_data(EditorSettings())
    assert data == {
        "themeId": "zen-classic",
        "fontFamily": "sans",
        "fontSize": 18,
        "isFocusMode": False,
        "editorWidth": 900,
        "sidebarVisible": True,
    }


def test_parse_settings_merges_over_defaults() -> None:
    settings = parse_settings({"themeId": "soft-sepia", "unknown": 1})
    assert settings == EditorSettings(theme_id="soft-sepia")
    assert parse_settings(None) == EditorSettings()
