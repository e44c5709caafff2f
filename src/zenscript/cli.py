"""CLI for zenscript: manage the document tree and edit document blocks."""

import asyncio
import json
from pathlib import Path
from typing import Annotated

import requests
import typer
from loguru import logger

from zenscript.config import FONTS, THEMES, resolve_data_directory
from zenscript.core.blocks.engine import character_count
from zenscript.core.blocks.intent import DropIntent
from zenscript.core.serialization import document_to_data, settings_to_data
from zenscript.core.tree.outline import render_document_as_markdown, render_tree_as_markdown
from zenscript.core.workspace import Workspace, open_workspace
from zenscript.errors import SnapshotFormatError
from zenscript.images import fetch_image, load_image_files
from zenscript.logging_config import configure_logging
from zenscript.models.document import Document
from zenscript.store import JsonStore

app = typer.Typer(help="zenscript: a minimalist block-based document editor.")

DataDirOption = Annotated[
    Path | None,
    typer.Option("--data-dir", "-d", help="Directory holding files.json and settings.json"),
]


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    log_file: Annotated[
        Path | None,
        typer.Option("--log-file", help="Also write debug logs to this file"),
    ] = None,
) -> None:
    configure_logging(verbose=verbose, log_file=log_file)


def _open(data_dir: Path | None) -> Workspace:
    """Open the workspace stored in ``data_dir`` (default: the resolved data directory)."""
    store = JsonStore(data_dir or resolve_data_directory())
    try:
        return open_workspace(store)
    except (SnapshotFormatError, json.JSONDecodeError) as e:
        logger.error("Cannot read stored documents in {}: {}", store.datadir, e)
        raise typer.Exit(1) from e


def _resolve(workspace: Workspace, document: str) -> Document:
    """Resolve a document id or exact title; exit if not found."""
    doc = workspace.resolve(document)
    if doc is None:
        typer.echo(f"Document '{document}' not found.")
        raise typer.Exit(1)
    return doc


@app.command()
def new(
    title: Annotated[str, typer.Argument(help="Title of the new document")] = "New Page",
    parent: Annotated[
        str | None,
        typer.Option("--parent", "-p", help="Create as a sub-page of this document"),
    ] = None,
    data_dir: DataDirOption = None,
) -> None:
    """Create a document and open it."""
    workspace = _open(data_dir)
    parent_id = _resolve(workspace, parent).id if parent else None
    doc = workspace.create(parent_id, title=title)
    typer.echo(f"Created '{doc.display_title}' [id={doc.id}]")


@app.command()
def tree(
    below: Annotated[
        str | None,
        typer.Option("--below", "-b", help="Only show documents below this one"),
    ] = None,
    max_depth: Annotated[
        int | None,
        typer.Option("--max-depth", "-m", help="Max depth levels to render"),
    ] = None,
    data_dir: DataDirOption = None,
) -> None:
    """Show the document tree. The active document is marked with '*'."""
    workspace = _open(data_dir)
    root_id = _resolve(workspace, below).id if below else None
    md = render_tree_as_markdown(
        workspace.documents, root_id=root_id, max_depth=max_depth, active_id=workspace.active_id
    )
    typer.echo(md or "No documents.")


@app.command()
def tabs(data_dir: DataDirOption = None) -> None:
    """List open documents."""
    workspace = _open(data_dir)
    for doc in workspace.open_documents:
        marker = "*" if doc.id == workspace.active_id else " "
        typer.echo(f"{marker} {doc.display_title}  [id={doc.id}]")


@app.command()
def show(
    document: Annotated[str | None, typer.Argument(help="Document id or title")] = None,
    output_json: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
    data_dir: DataDirOption = None,
) -> None:
    """Print a document (default: the active one) as markdown."""
    workspace = _open(data_dir)
    if document:
        doc = _resolve(workspace, document)
    else:
        doc = workspace.active_document
        if doc is None:
            typer.echo("No active document.")
            raise typer.Exit(1)
    if output_json:
        typer.echo(json.dumps(document_to_data(doc), indent=2))
        return
    typer.echo(render_document_as_markdown(doc))
    typer.echo(f"{character_count(doc.blocks)} chars")


@app.command(name="open")
def open_cmd(
    document: Annotated[str, typer.Argument(help="Document id or title")],
    data_dir: DataDirOption = None,
) -> None:
    """Open a document in a tab and make it active."""
    workspace = _open(data_dir)
    workspace.open(_resolve(workspace, document).id)


@app.command()
def close(
    document: Annotated[str, typer.Argument(help="Document id or title")],
    data_dir: DataDirOption = None,
) -> None:
    """Close a document's tab."""
    workspace = _open(data_dir)
    workspace.close(_resolve(workspace, document).id)
    active = workspace.active_document
    typer.echo(f"Active: {active.display_title if active else '(none)'}")


@app.command()
def rename(
    document: Annotated[str, typer.Argument(help="Document id or title")],
    title: Annotated[str, typer.Argument(help="New title (may be empty)")],
    data_dir: DataDirOption = None,
) -> None:
    """Rename a document."""
    workspace = _open(data_dir)
    workspace.rename(_resolve(workspace, document).id, title)


@app.command()
def move(
    document: Annotated[str, typer.Argument(help="Document id or title")],
    parent: Annotated[
        str | None,
        typer.Option("--to", "-t", help="New parent (omit to move to the root level)"),
    ] = None,
    data_dir: DataDirOption = None,
) -> None:
    """Move a document under another document, or to the root level."""
    workspace = _open(data_dir)
    doc = _resolve(workspace, document)
    parent_id = _resolve(workspace, parent).id if parent else None
    if not workspace.move(doc.id, parent_id):
        typer.echo("Cannot move a document into itself or one of its sub-pages.")
        raise typer.Exit(1)


@app.command()
def delete(
    document: Annotated[str, typer.Argument(help="Document id or title")],
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
    data_dir: DataDirOption = None,
) -> None:
    """Delete a document and all of its sub-pages."""
    workspace = _open(data_dir)
    doc = _resolve(workspace, document)
    if not yes:
        typer.confirm(f"Delete '{doc.display_title}' and its children?", abort=True)
    removed = workspace.delete(doc.id)
    typer.echo(f"Deleted {len(removed)} document(s)")


@app.command()
def write(
    document: Annotated[str, typer.Argument(help="Document id or title")],
    text: Annotated[str, typer.Argument(help="Content of the new text block")],
    after: Annotated[
        str | None,
        typer.Option("--after", "-a", help="Insert after this block id (default: at the end)"),
    ] = None,
    data_dir: DataDirOption = None,
) -> None:
    """Add a text block to a document."""
    workspace = _open(data_dir)
    doc = _resolve(workspace, document)
    block_id = workspace.insert_text_after(doc.id, after, text)
    typer.echo(f"Added block {block_id}")


@app.command(name="add-images")
def add_images(
    document: Annotated[str, typer.Argument(help="Document id or title")],
    paths: Annotated[list[Path] | None, typer.Argument(help="Image files")] = None,
    url: Annotated[
        list[str] | None,
        typer.Option("--url", "-u", help="Image URL to download (repeatable)"),
    ] = None,
    after: Annotated[
        str | None,
        typer.Option("--after", "-a", help="Insert the new grid after this block id"),
    ] = None,
    into: Annotated[
        str | None,
        typer.Option("--into", "-i", help="Append to this existing image grid instead"),
    ] = None,
    data_dir: DataDirOption = None,
) -> None:
    """Insert images as a new grid, or append them to an existing grid."""
    workspace = _open(data_dir)
    doc = _resolve(workspace, document)
    target_id = into or after
    if not target_id and doc.blocks:
        target_id = doc.blocks[-1].id

    images = asyncio.run(load_image_files(paths or []))
    try:
        with requests.Session() as session:
            images += [fetch_image(u, session=session) for u in url or []]
    except (requests.RequestException, ValueError) as e:
        logger.error("Cannot fetch image: {}", e)
        raise typer.Exit(1) from e

    grid_id = workspace.insert_images(
        doc.id, images, target_id=target_id, into_grid=into is not None
    )
    if grid_id is None:
        typer.echo("No images added.")
        raise typer.Exit(1)
    typer.echo(f"Images in grid {grid_id}")


@app.command()
def drop(
    document: Annotated[str, typer.Argument(help="Document id or title")],
    source: Annotated[str, typer.Argument(help="Id of the dragged block")],
    target: Annotated[str, typer.Argument(help="Id of the block it is dropped on")],
    intent: DropIntent = typer.Option(DropIntent.BEFORE, "--intent", help="Where to drop"),
    data_dir: DataDirOption = None,
) -> None:
    """Move a block before/after another block, or merge two image grids."""
    workspace = _open(data_dir)
    doc = _resolve(workspace, document)
    if not workspace.drop_block(doc.id, source, target, intent):
        typer.echo("Nothing changed.")


@app.command()
def settings(
    theme: Annotated[str | None, typer.Option("--theme", help="Theme id")] = None,
    font: Annotated[str | None, typer.Option("--font", help="Font family")] = None,
    font_size: Annotated[int | None, typer.Option("--font-size")] = None,
    width: Annotated[int | None, typer.Option("--width", help="Editor width in px")] = None,
    focus: Annotated[bool | None, typer.Option("--focus/--no-focus")] = None,
    sidebar: Annotated[bool | None, typer.Option("--sidebar/--no-sidebar")] = None,
    data_dir: DataDirOption = None,
) -> None:
    """Show editor settings, or update the given ones."""
    workspace = _open(data_dir)
    if theme is not None and theme not in {t.id for t in THEMES}:
        typer.echo(f"Unknown theme '{theme}'. Choose from: {', '.join(t.id for t in THEMES)}")
        raise typer.Exit(1)
    if font is not None and font not in FONTS:
        typer.echo(f"Unknown font '{font}'. Choose from: {', '.join(FONTS)}")
        raise typer.Exit(1)

    changes = {
        "theme_id": theme,
        "font_family": font,
        "font_size": font_size,
        "editor_width": width,
        "is_focus_mode": focus,
        "sidebar_visible": sidebar,
    }
    changes = {k: v for k, v in changes.items() if v is not None}
    if changes:
        workspace.set_settings(**changes)
    typer.echo(json.dumps(settings_to_data(workspace.settings), indent=2))


@app.command()
def serve() -> None:
    """Start the MCP server (stdio transport)."""
    from zenscript.mcp.server import run_mcp_server

    run_mcp_server()
