"""Workspace: the open-tabs / active-document coordinator above the tree and block engine."""

from collections.abc import Callable, Sequence
from dataclasses import replace
from pathlib import Path

from loguru import logger

from zenscript.config import DEFAULT_DOCUMENT_TITLE, LEGACY_DOCUMENT_TITLE
from zenscript.core.blocks import engine
from zenscript.core.blocks.engine import Blocks
from zenscript.core.blocks.intent import DropIntent
from zenscript.core.tree import hierarchy
from zenscript.core.tree.hierarchy import Documents
from zenscript.errors import IllegalCycleError
from zenscript.images import load_image_files
from zenscript.models.block import Align, ImageData, ImageGridBlock, TextBlock, is_blank
from zenscript.models.document import Document, EditorSettings, WorkspaceSnapshot, now_ms
from zenscript.protocols import ImageSourceProtocol, StoreProtocol

Listener = Callable[[WorkspaceSnapshot], None]

_UNSET = object()


class Workspace:
    """Own the document collection, the active document, and editor settings.

    Every change replaces the collection with a new tuple and notifies the
    registered listeners with a fresh snapshot (persistence is one of them).
    Operations naming an unknown document are silent no-ops.
    """

    def __init__(
        self,
        documents: Sequence[Document] = (),
        *,
        active_id: str | None = None,
        settings: EditorSettings | None = None,
    ) -> None:
        self._documents: Documents = tuple(documents)
        self._settings = settings or EditorSettings()
        self._listeners: list[Listener] = []
        self._active_id: str | None = None
        if hierarchy.find_document(self._documents, active_id) is not None:
            self._active_id = active_id
        elif self._documents:
            self._active_id = self._documents[0].id

    @classmethod
    def from_snapshot(cls, snapshot: WorkspaceSnapshot) -> "Workspace":
        return cls(snapshot.documents, active_id=snapshot.active_id, settings=snapshot.settings)

    # --- State access ---

    @property
    def documents(self) -> Documents:
        return self._documents

    @property
    def active_id(self) -> str | None:
        return self._active_id

    @property
    def active_document(self) -> Document | None:
        return hierarchy.find_document(self._documents, self._active_id)

    @property
    def settings(self) -> EditorSettings:
        return self._settings

    @property
    def open_documents(self) -> Documents:
        """Documents that currently have a tab, in collection order."""
        return tuple(d for d in self._documents if d.is_opened)

    def get(self, document_id: str) -> Document | None:
        return hierarchy.find_document(self._documents, document_id)

    def resolve(self, reference: str) -> Document | None:
        """Find a document by id, else by exact title (first match)."""
        doc = self.get(reference)
        if doc is None:
            doc = next((d for d in self._documents if d.title == reference), None)
        return doc

    def snapshot(self) -> WorkspaceSnapshot:
        return WorkspaceSnapshot(
            documents=self._documents, settings=self._settings, active_id=self._active_id
        )

    def subscribe(self, listener: Listener) -> None:
        """Call ``listener`` with a snapshot after every state change."""
        self._listeners.append(listener)

    def _commit(
        self,
        documents: Documents | None = None,
        *,
        active_id: str | None | object = _UNSET,
    ) -> None:
        if documents is not None:
            self._documents = documents
        if active_id is not _UNSET:
            self._active_id = active_id  # type: ignore[assignment]
        snapshot = self.snapshot()
        for listener in self._listeners:
            listener(snapshot)

    def _replace_document(self, document_id: str, **changes: object) -> Documents:
        return tuple(
            replace(d, **changes) if d.id == document_id else d  # type: ignore[arg-type]
            for d in self._documents
        )

    # --- Document lifecycle ---

    def create(
        self,
        parent_id: str | None = None,
        *,
        title: str = DEFAULT_DOCUMENT_TITLE,
    ) -> Document:
        """Create a document (optionally under ``parent_id``) and make it active.

        An unknown ``parent_id`` creates the document at the root level.
        """
        if parent_id is not None and self.get(parent_id) is None:
            logger.warning("Parent {} not found, creating at the root level", parent_id)
            parent_id = None
        doc = hierarchy.create_document(parent_id, title=title)
        logger.debug("Created document {} under {}", doc.id, parent_id)
        self._commit((*self._documents, doc), active_id=doc.id)
        return doc

    def open(self, document_id: str) -> None:
        """Give the document a tab and make it active."""
        if self.get(document_id) is None:
            logger.debug("open: unknown document {}", document_id)
            return
        self._commit(self._replace_document(document_id, is_opened=True), active_id=document_id)

    def activate(self, document_id: str) -> None:
        """Make an already-tabbed document active; same as open for a closed one."""
        self.open(document_id)

    def close(self, document_id: str) -> None:
        """Close the document's tab; an active tab hands over to the first other open one."""
        if self.get(document_id) is None:
            logger.debug("close: unknown document {}", document_id)
            return
        documents = self._replace_document(document_id, is_opened=False)
        if self._active_id != document_id:
            self._commit(documents)
            return
        other = next((d for d in documents if d.is_opened and d.id != document_id), None)
        self._commit(documents, active_id=other.id if other else None)

    def rename(self, document_id: str, new_title: str) -> None:
        """Change the title. Counts as a modification."""
        if self.get(document_id) is None:
            logger.debug("rename: unknown document {}", document_id)
            return
        self._commit(self._replace_document(document_id, title=new_title, last_modified=now_ms()))

    def move(self, document_id: str, new_parent_id: str | None) -> bool:
        """Re-parent a document. Returns False if the move would create a cycle."""
        try:
            documents = hierarchy.move_document(self._documents, document_id, new_parent_id)
        except IllegalCycleError as e:
            logger.warning("{}", e)
            return False
        if documents != self._documents:
            self._commit(documents)
        return True

    def delete(self, document_id: str) -> frozenset[str]:
        """Delete a document and its descendants. Returns the removed ids."""
        documents, removed = hierarchy.delete_document(self._documents, document_id)
        if not removed:
            return removed
        logger.info("Deleted {} document(s)", len(removed))
        if self._active_id in removed:
            self._commit(documents, active_id=documents[0].id if documents else None)
        else:
            self._commit(documents)
        return removed

    # --- Block content ---

    def apply_blocks(self, document_id: str, fn: Callable[[Blocks], Blocks]) -> bool:
        """Run a block-engine operation on one document and store the result.

        Returns True if the blocks changed (``last_modified`` is bumped then).
        """
        doc = self.get(document_id)
        if doc is None:
            logger.debug("apply_blocks: unknown document {}", document_id)
            return False
        blocks = fn(doc.blocks)
        if blocks == doc.blocks:
            return False
        self._commit(self._replace_document(document_id, blocks=blocks, last_modified=now_ms()))
        return True

    def ensure_non_empty(self, document_id: str) -> str | None:
        """Handle a click on the empty space below the last block.

        Seeds an empty text block into an empty document, appends one after a
        text block with content or after an image grid, and otherwise just
        focuses the trailing empty text block.

        Returns:
            Id of the block that should receive focus, or None for unknown ids.
        """
        doc = self.get(document_id)
        if doc is None:
            return None
        if not doc.blocks:
            seed = TextBlock.new()
            self.apply_blocks(document_id, lambda _: (seed,))
            return seed.id
        last = doc.blocks[-1]
        if isinstance(last, ImageGridBlock) or not is_blank(last):
            return self.insert_text_after(document_id, last.id)
        return last.id

    def insert_text_after(
        self,
        document_id: str,
        after_id: str | None,
        content: str = "",
    ) -> str | None:
        """Insert a text block (the "enter" key). Returns the new block's id."""
        new_id: str | None = None

        def op(blocks: Blocks) -> Blocks:
            nonlocal new_id
            result, new_id = engine.insert_text_after(blocks, after_id, content)
            return result

        self.apply_blocks(document_id, op)
        return new_id

    def update_text(self, document_id: str, block_id: str, content: str) -> None:
        self.apply_blocks(document_id, lambda b: engine.update_text(b, block_id, content))

    def remove_block(self, document_id: str, block_id: str) -> str | None:
        """Remove a block. Returns the focus hint (the predecessor's id)."""
        focus_id: str | None = None

        def op(blocks: Blocks) -> Blocks:
            nonlocal focus_id
            result, focus_id = engine.remove_block(blocks, block_id)
            return result

        self.apply_blocks(document_id, op)
        return focus_id

    def backspace(self, document_id: str, block_id: str) -> str | None:
        """Backspace on an empty text block. Returns the focus hint."""
        focus_id: str | None = None

        def op(blocks: Blocks) -> Blocks:
            nonlocal focus_id
            result, focus_id = engine.backspace_on_empty(blocks, block_id)
            return result

        self.apply_blocks(document_id, op)
        return focus_id

    def drop_block(
        self,
        document_id: str,
        source_id: str,
        target_id: str,
        intent: DropIntent | str,
    ) -> bool:
        """Apply a block drag-and-drop. Returns True if anything changed."""
        return self.apply_blocks(
            document_id, lambda b: engine.reorder_or_merge(b, source_id, target_id, intent)
        )

    def insert_images(
        self,
        document_id: str,
        images: Sequence[ImageData],
        *,
        target_id: str | None = None,
        into_grid: bool = False,
    ) -> str | None:
        """Add images either into an existing grid or as a new grid after ``target_id``.

        Returns:
            Id of the grid that received the images, or None if nothing changed.
        """
        if not images:
            return None
        if into_grid and target_id is not None:
            changed = self.apply_blocks(
                document_id, lambda b: engine.append_images_to_grid(b, target_id, images)
            )
            return target_id if changed else None

        grid_id: str | None = None

        def op(blocks: Blocks) -> Blocks:
            nonlocal grid_id
            result, grid_id = engine.insert_image_grid(blocks, target_id, images)
            return result

        if not self.apply_blocks(document_id, op):
            return None
        return grid_id

    async def add_images(
        self,
        document_id: str,
        paths: Sequence[Path],
        *,
        target_id: str | None = None,
        into_grid: bool = False,
        source: ImageSourceProtocol | None = None,
    ) -> str | None:
        """Convert image files, then insert them like ``insert_images``.

        Nothing is mutated until every file has been converted.
        """
        images = await load_image_files(paths, source)
        return self.insert_images(document_id, images, target_id=target_id, into_grid=into_grid)

    def update_image_grid(
        self,
        document_id: str,
        block_id: str,
        *,
        align: Align | str | None = None,
        width: float | None = None,
    ) -> None:
        self.apply_blocks(
            document_id, lambda b: engine.update_image_grid(b, block_id, align=align, width=width)
        )

    def remove_image(self, document_id: str, block_id: str, image_id: str) -> None:
        self.apply_blocks(
            document_id, lambda b: engine.remove_image_from_grid(b, block_id, image_id)[0]
        )

    # --- Settings ---

    def set_settings(self, **changes: object) -> EditorSettings:
        """Update editor settings.

        Raises:
            TypeError: On an unknown setting name.
        """
        self._settings = replace(self._settings, **changes)  # type: ignore[arg-type]
        self._commit()
        return self._settings


def open_workspace(store: StoreProtocol) -> Workspace:
    """Load the stored workspace (or start one with a single draft) and autosave to ``store``."""
    snapshot = store.load()
    if snapshot is None:
        logger.info("No stored documents, starting with an empty draft")
        workspace = Workspace((hierarchy.create_document(title=LEGACY_DOCUMENT_TITLE),))
    else:
        workspace = Workspace.from_snapshot(snapshot)
    workspace.subscribe(store.save)
    return workspace
