"""Tests for MCP tool core functions."""

import asyncio
from pathlib import Path

from tests.unit.fakes import make_grid
from zenscript.core.workspace import Workspace
from zenscript.mcp.server import (
    mcp_server,
    zenscript_add_images,
    zenscript_append_text,
    zenscript_create_document,
    zenscript_delete_document,
    zenscript_drop_block,
    zenscript_list_documents,
    zenscript_move_document,
    zenscript_read_document,
    zenscript_rename_document,
)
from zenscript.models.block import TextBlock


def test_list_documents_returns_all_docs(workspace: Workspace) -> None:
    result = zenscript_list_documents(workspace)

    assert result["count"] == 4
    by_id = {d["id"]: d for d in result["documents"]}
    assert by_id["r"]["is_active"]
    assert by_id["r"]["child_count"] == 1
    assert by_id["b"]["parent_id"] == "a"
    assert "- R (id=r) *" in result["outline"]


def test_read_document_markdown_with_breadcrumbs(workspace: Workspace) -> None:
    workspace.update_text("b", "b-t1", "deep text")

    result = zenscript_read_document(workspace, document="B")

    assert "error" not in result
    assert result["breadcrumbs"] == "R > A"
    assert "deep text" in result["content"]
    assert result["char_count"] == len("deep text")


def test_read_document_json_lists_blocks(workspace: Workspace) -> None:
    workspace.apply_blocks("c", lambda b: (*b, make_grid("g", "i1")))

    result = zenscript_read_document(workspace, document="c", output_format="json")

    assert [b["type"] for b in result["blocks"]] == ["text", "image"]
    assert result["blocks"][1]["images"][0]["id"] == "i1"


def test_unknown_document_reports_error(workspace: Workspace) -> None:
    result = zenscript_read_document(workspace, document="nope")
    assert result["success"] is False
    assert "not found" in result["error"]


def test_create_document_with_parent_and_content(workspace: Workspace) -> None:
    result = zenscript_create_document(workspace, title="Notes", parent="A", content="first")

    assert result["success"]
    doc = workspace.get(result["document_id"])
    assert doc.parent_id == "a"
    assert doc.blocks[0] == TextBlock(id=doc.blocks[0].id, content="first")
    assert workspace.active_id == doc.id


def test_create_document_with_unknown_parent_fails(workspace: Workspace) -> None:
    result = zenscript_create_document(workspace, title="Notes", parent="ghost")
    assert result["success"] is False
    assert len(workspace.documents) == 4


def test_rename_document(workspace: Workspace) -> None:
    assert zenscript_rename_document(workspace, document="c", title="Ideas")["success"]
    assert workspace.get("c").title == "Ideas"


def test_move_document_rejects_cycle(workspace: Workspace) -> None:
    result = zenscript_move_document(workspace, document="r", parent="b")

    assert result["success"] is False
    assert "itself" in result["error"]


def test_move_document_to_root(workspace: Workspace) -> None:
    result = zenscript_move_document(workspace, document="a")

    assert result == {"success": True, "document_id": "a", "parent_id": None}
    assert workspace.get("a").parent_id is None


def test_delete_document_cascades(workspace: Workspace) -> None:
    result = zenscript_delete_document(workspace, document="r")

    assert result["deleted"] == ["a", "b", "r"]
    assert result["active_id"] == "c"


def test_append_text_after_block(workspace: Workspace) -> None:
    result = zenscript_append_text(workspace, document="a", content="next", after_block="a-t1")

    assert result["success"]
    assert [b.id for b in workspace.get("a").blocks] == ["a-t1", result["block_id"]]


def test_drop_block_rejects_unknown_intent(workspace: Workspace) -> None:
    result = zenscript_drop_block(
        workspace, document="a", source_block="x", target_block="y", intent="sideways"
    )
    assert result["success"] is False


def test_drop_block_reorders(workspace: Workspace) -> None:
    new_id = workspace.insert_text_after("a", "a-t1", "second")

    result = zenscript_drop_block(
        workspace, document="a", source_block=new_id, target_block="a-t1", intent="before"
    )

    assert result == {"success": True, "changed": True}
    assert [b.id for b in workspace.get("a").blocks] == [new_id, "a-t1"]


def test_add_images_appends_grid_at_end(workspace: Workspace, tmp_path: Path) -> None:
    image = tmp_path / "pic.png"
    image.write_bytes(b"png")

    result = asyncio.run(zenscript_add_images(workspace, document="a", paths=[str(image)]))

    assert result["success"]
    blocks = workspace.get("a").blocks
    assert blocks[1].id == result["block_id"]
    assert len(blocks) == 3


def test_add_images_reports_missing_files(workspace: Workspace, tmp_path: Path) -> None:
    result = asyncio.run(
        zenscript_add_images(workspace, document="a", paths=[str(tmp_path / "missing.png")])
    )
    assert result["success"] is False
    assert "missing.png" in result["error"]


def test_server_registers_tools() -> None:
    tools = asyncio.run(mcp_server.list_tools())

    names = {tool.name for tool in tools}
    assert "zenscript_list_documents_tool" in names
    assert "zenscript_drop_block_tool" in names
    assert "zenscript_add_images_tool" in names
