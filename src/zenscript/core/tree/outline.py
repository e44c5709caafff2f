"""Render the document tree and individual documents as markdown."""

import io
from collections.abc import Sequence

from zenscript.core.tree.hierarchy import children, find_document
from zenscript.models.block import ImageGridBlock, TextBlock
from zenscript.models.document import Document


def render_tree_as_markdown(
    documents: Sequence[Document],
    *,
    root_id: str | None = None,
    max_depth: int | None = None,
    active_id: str | None = None,
) -> str:
    """Render the document tree as an indented bullet list.

    Args:
        documents: The document collection.
        root_id: Start below this document (None = whole tree).
        max_depth: Max levels to include (None = unlimited).
        active_id: Document to mark with a trailing ``*``.

    Returns:
        Markdown string with one bullet per document.
    """
    out = io.StringIO()

    def walk(parent_id: str | None, depth: int) -> None:
        for doc in children(documents, parent_id):
            indent = "    " * depth
            marker = " *" if doc.id == active_id else ""
            out.write(f"{indent}- {doc.display_title} (id={doc.id}){marker}\n")

            child_count = len(children(documents, doc.id))
            # Truncation indicator when children are cut off by max_depth
            if max_depth is not None and depth + 1 >= max_depth:
                if child_count:
                    noun = "child" if child_count == 1 else "children"
                    out.write(f"{indent}    - ... ({child_count} more {noun})\n")
                continue
            walk(doc.id, depth + 1)

    if root_id is not None and find_document(documents, root_id) is None:
        return ""
    walk(root_id, 0)
    return out.getvalue()


def render_document_as_markdown(document: Document, *, inline_images: bool = False) -> str:
    """Render a document: title heading, text blocks verbatim, grids as image links.

    Embedded ``data:`` references are shortened to their header unless
    ``inline_images`` is set.
    """
    out = io.StringIO()
    out.write(f"# {document.display_title}\n\n")
    for block in document.blocks:
        if isinstance(block, TextBlock):
            out.write(f"{block.content}\n\n")
        elif isinstance(block, ImageGridBlock):
            for image in block.images:
                alt = image.caption or image.id
                ref = image.source_ref
                if not inline_images and ref.startswith("data:"):
                    ref = ref.split(",", 1)[0] + ",..."
                out.write(f"![{alt}]({ref})\n")
            out.write("\n")
    return out.getvalue()
