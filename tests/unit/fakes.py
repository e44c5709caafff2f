"""Fake collaborators and sample data for tests."""

from zenscript.models.block import ImageData, ImageGridBlock, TextBlock
from zenscript.models.document import Document, WorkspaceSnapshot


def make_grid(block_id: str, *image_ids: str) -> ImageGridBlock:
    """An image grid whose images have the given ids."""
    return ImageGridBlock(
        id=block_id,
        images=tuple(ImageData(id=i, source_ref=f"data:image/png;base64,{i}") for i in image_ids),
    )


def make_doc(doc_id: str, parent_id: str | None = None, *, title: str | None = None) -> Document:
    """An opened document holding one empty text block with id ``<doc_id>-t1``."""
    return Document(
        id=doc_id,
        parent_id=parent_id,
        title=title if title is not None else doc_id.upper(),
        blocks=(TextBlock(id=f"{doc_id}-t1", content=""),),
        last_modified=1000,
        is_opened=True,
    )


class FakeStore:
    """In-memory fake for JsonStore.

    Returns a predefined snapshot from load() and records every save.
    """

    def __init__(self, initial: WorkspaceSnapshot | None = None) -> None:
        self.initial = initial
        self.saved: list[WorkspaceSnapshot] = []

    def save(self, snapshot: WorkspaceSnapshot) -> None:
        """Record the snapshot."""
        self.saved.append(snapshot)

    def load(self) -> WorkspaceSnapshot | None:
        """Return the predefined snapshot."""
        return self.initial


class FakeImageSource:
    """Image source producing readable references, recording each conversion."""

    def __init__(self) -> None:
        self.calls: list[tuple[bytes, str]] = []

    def to_reference(self, data: bytes, media_type: str) -> str:
        """Return ``ref:<media type>:<decoded bytes>``."""
        self.calls.append((data, media_type))
        return f"ref:{media_type}:{data.decode()}"
