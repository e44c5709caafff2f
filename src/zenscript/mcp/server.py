"""MCP server exposing the zenscript document tree and block editing tools."""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from loguru import logger
from mcp.server.fastmcp import Context, FastMCP

from zenscript.config import resolve_data_directory
from zenscript.core.blocks.engine import character_count
from zenscript.core.blocks.intent import DropIntent
from zenscript.core.serialization import block_to_data
from zenscript.core.tree.hierarchy import ancestors, children
from zenscript.core.tree.outline import render_document_as_markdown, render_tree_as_markdown
from zenscript.core.workspace import Workspace, open_workspace
from zenscript.models.document import Document
from zenscript.store import JsonStore


def _not_found(document: str) -> dict[str, Any]:
    return {"success": False, "error": f"Document '{document}' not found."}


def _summary(workspace: Workspace, doc: Document) -> dict[str, Any]:
    return {
        "id": doc.id,
        "title": doc.display_title,
        "parent_id": doc.parent_id,
        "is_opened": doc.is_opened,
        "is_active": doc.id == workspace.active_id,
        "child_count": len(children(workspace.documents, doc.id)),
        "modified": datetime.fromtimestamp(doc.last_modified / 1000, tz=UTC).isoformat(),
    }


# --- Core functions (testable without MCP context) ---


def zenscript_list_documents(workspace: Workspace) -> dict[str, Any]:
    """List all documents with their tree position, plus an outline of the tree."""
    docs = [_summary(workspace, d) for d in workspace.documents]
    return {
        "documents": docs,
        "count": len(docs),
        "outline": render_tree_as_markdown(workspace.documents, active_id=workspace.active_id),
    }


def zenscript_read_document(
    workspace: Workspace,
    *,
    document: str,
    output_format: str = "markdown",
) -> dict[str, Any]:
    """Read a document as markdown or as structured blocks.

    Args:
        document: Document id or title.
        output_format: "markdown" (human-readable) or "json" (blocks with ids).
    """
    doc = workspace.resolve(document)
    if doc is None:
        return _not_found(document)

    output = _summary(workspace, doc)
    crumbs = ancestors(workspace.documents, doc.id)
    output["breadcrumbs"] = " > ".join(a.display_title for a in crumbs)
    output["char_count"] = character_count(doc.blocks)
    if output_format == "json":
        output["blocks"] = [block_to_data(b) for b in doc.blocks]
    else:
        output["content"] = render_document_as_markdown(doc)
    return output


def zenscript_create_document(
    workspace: Workspace,
    *,
    title: str,
    parent: str | None = None,
    content: str | None = None,
) -> dict[str, Any]:
    """Create a document, optionally under a parent and with initial text."""
    parent_id: str | None = None
    if parent:
        parent_doc = workspace.resolve(parent)
        if parent_doc is None:
            return _not_found(parent)
        parent_id = parent_doc.id

    doc = workspace.create(parent_id, title=title)
    if content:
        workspace.update_text(doc.id, doc.blocks[0].id, content)
    return {"success": True, "document_id": doc.id}


def zenscript_rename_document(workspace: Workspace, *, document: str, title: str) -> dict[str, Any]:
    doc = workspace.resolve(document)
    if doc is None:
        return _not_found(document)
    workspace.rename(doc.id, title)
    return {"success": True, "document_id": doc.id}


def zenscript_move_document(
    workspace: Workspace,
    *,
    document: str,
    parent: str | None = None,
) -> dict[str, Any]:
    """Move a document under ``parent`` (None = root level)."""
    doc = workspace.resolve(document)
    if doc is None:
        return _not_found(document)
    parent_id: str | None = None
    if parent:
        parent_doc = workspace.resolve(parent)
        if parent_doc is None:
            return _not_found(parent)
        parent_id = parent_doc.id

    if not workspace.move(doc.id, parent_id):
        return {
            "success": False,
            "error": "Cannot move a document into itself or one of its sub-pages.",
        }
    return {"success": True, "document_id": doc.id, "parent_id": parent_id}


def zenscript_delete_document(workspace: Workspace, *, document: str) -> dict[str, Any]:
    doc = workspace.resolve(document)
    if doc is None:
        return _not_found(document)
    removed = workspace.delete(doc.id)
    return {"success": True, "deleted": sorted(removed), "active_id": workspace.active_id}


def zenscript_append_text(
    workspace: Workspace,
    *,
    document: str,
    content: str,
    after_block: str | None = None,
) -> dict[str, Any]:
    """Insert a text block after ``after_block`` (default: at the end)."""
    doc = workspace.resolve(document)
    if doc is None:
        return _not_found(document)
    block_id = workspace.insert_text_after(doc.id, after_block, content)
    return {"success": True, "block_id": block_id}


def zenscript_drop_block(
    workspace: Workspace,
    *,
    document: str,
    source_block: str,
    target_block: str,
    intent: str = "before",
) -> dict[str, Any]:
    """Move a block before/after another one, or merge two image grids."""
    doc = workspace.resolve(document)
    if doc is None:
        return _not_found(document)
    try:
        drop_intent = DropIntent(intent)
    except ValueError:
        return {"success": False, "error": f"Unknown intent {intent!r}."}
    changed = workspace.drop_block(doc.id, source_block, target_block, drop_intent)
    return {"success": True, "changed": changed}


async def zenscript_add_images(
    workspace: Workspace,
    *,
    document: str,
    paths: list[str],
    target_block: str | None = None,
    into_grid: bool = False,
) -> dict[str, Any]:
    """Insert image files as a new grid, or append them to the grid ``target_block``."""
    doc = workspace.resolve(document)
    if doc is None:
        return _not_found(document)
    missing = [p for p in paths if not Path(p).is_file()]
    if missing:
        return {"success": False, "error": f"Files not found: {missing!r}"}
    if target_block is None and doc.blocks:
        target_block = doc.blocks[-1].id

    grid_id = await workspace.add_images(
        doc.id, [Path(p) for p in paths], target_id=target_block, into_grid=into_grid
    )
    if grid_id is None:
        return {"success": False, "error": "No images added."}
    return {"success": True, "block_id": grid_id}


# --- MCP Server Setup ---


@dataclass
class ServerContext:
    """Shared resources for the MCP server lifetime."""

    workspace: Workspace
    data_dir: Path
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)


@asynccontextmanager
async def server_lifespan(_server: FastMCP) -> AsyncIterator[ServerContext]:
    """Load the workspace on startup."""
    data_dir = resolve_data_directory()
    workspace = open_workspace(JsonStore(data_dir))
    logger.info("Serving {} document(s) from {}", len(workspace.documents), data_dir)
    yield ServerContext(workspace=workspace, data_dir=data_dir)


mcp_server = FastMCP(
    "zenscript",
    instructions="""\
zenscript documents are ordered lists of blocks (text or image grids), arranged
in a tree of pages and sub-pages.

1. Use zenscript_list_documents_tool to see the tree and document ids.
2. Read a document with zenscript_read_document_tool; use output_format="json"
   to get block ids for editing.
3. Text block content is markup and is stored verbatim.
""",
    lifespan=server_lifespan,
)


def _ctx(mcp_ctx: Context) -> ServerContext:
    return mcp_ctx.request_context.lifespan_context  # type: ignore[return-value]


# --- MCP Tool Wrappers ---


@mcp_server.tool()
async def zenscript_list_documents_tool(ctx: Context) -> dict[str, Any]:
    """List all documents with their place in the page tree."""
    async with _ctx(ctx).lock:
        return zenscript_list_documents(_ctx(ctx).workspace)


@mcp_server.tool()
async def zenscript_read_document_tool(
    ctx: Context,
    document: str,
    output_format: str = "markdown",
) -> dict[str, Any]:
    """Read a document.

    Args:
        document: Document id or title.
        output_format: "markdown" (human-readable) or "json" (blocks with ids).
    """
    async with _ctx(ctx).lock:
        return zenscript_read_document(
            _ctx(ctx).workspace, document=document, output_format=output_format
        )


@mcp_server.tool()
async def zenscript_create_document_tool(
    ctx: Context,
    title: str,
    parent: str | None = None,
    content: str | None = None,
) -> dict[str, Any]:
    """Create a document.

    Args:
        title: Title of the new document.
        parent: Parent document id or title (None = root level).
        content: Optional initial text.
    """
    async with _ctx(ctx).lock:
        return zenscript_create_document(
            _ctx(ctx).workspace, title=title, parent=parent, content=content
        )


@mcp_server.tool()
async def zenscript_rename_document_tool(ctx: Context, document: str, title: str) -> dict[str, Any]:
    """Rename a document."""
    async with _ctx(ctx).lock:
        return zenscript_rename_document(_ctx(ctx).workspace, document=document, title=title)


@mcp_server.tool()
async def zenscript_move_document_tool(
    ctx: Context,
    document: str,
    parent: str | None = None,
) -> dict[str, Any]:
    """Move a document under another one (parent=None moves it to the root level)."""
    async with _ctx(ctx).lock:
        return zenscript_move_document(_ctx(ctx).workspace, document=document, parent=parent)


@mcp_server.tool()
async def zenscript_delete_document_tool(ctx: Context, document: str) -> dict[str, Any]:
    """Delete a document together with all of its sub-pages."""
    async with _ctx(ctx).lock:
        return zenscript_delete_document(_ctx(ctx).workspace, document=document)


@mcp_server.tool()
async def zenscript_append_text_tool(
    ctx: Context,
    document: str,
    content: str,
    after_block: str | None = None,
) -> dict[str, Any]:
    """Add a text block.

    Args:
        document: Document id or title.
        content: Text (markup) for the new block.
        after_block: Insert after this block id (default: at the end).
    """
    async with _ctx(ctx).lock:
        return zenscript_append_text(
            _ctx(ctx).workspace, document=document, content=content, after_block=after_block
        )


@mcp_server.tool()
async def zenscript_drop_block_tool(
    ctx: Context,
    document: str,
    source_block: str,
    target_block: str,
    intent: str = "before",
) -> dict[str, Any]:
    """Move a block next to another one, or merge two image grids.

    Args:
        document: Document id or title.
        source_block: Id of the block being moved.
        target_block: Id of the block it is dropped on.
        intent: "before", "after", or "merge" (image grids only).
    """
    async with _ctx(ctx).lock:
        return zenscript_drop_block(
            _ctx(ctx).workspace,
            document=document,
            source_block=source_block,
            target_block=target_block,
            intent=intent,
        )


@mcp_server.tool()
async def zenscript_add_images_tool(
    ctx: Context,
    document: str,
    paths: list[str],
    target_block: str | None = None,
    into_grid: bool = False,
) -> dict[str, Any]:
    """Insert local image files into a document.

    Args:
        document: Document id or title.
        paths: Image file paths, in display order.
        target_block: Block to insert after, or the grid to extend with into_grid.
        into_grid: Append to the image grid target_block instead of creating a grid.
    """
    async with _ctx(ctx).lock:
        return await zenscript_add_images(
            _ctx(ctx).workspace,
            document=document,
            paths=paths,
            target_block=target_block,
            into_grid=into_grid,
        )


def run_mcp_server() -> None:
    """Run the MCP server with stdio transport."""
    from zenscript.logging_config import configure_logging

    configure_logging(verbose=False)
    mcp_server.run(transport="stdio")
