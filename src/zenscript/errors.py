"""Exceptions raised by the zenscript core."""


class ZenscriptError(Exception):
    """Base class for zenscript errors."""


class IllegalCycleError(ZenscriptError):
    """A tree move would make a document its own ancestor."""

    def __init__(self, document_id: str, new_parent_id: str) -> None:
        self.document_id = document_id
        self.new_parent_id = new_parent_id
        super().__init__(
            f"Cannot move {document_id!r} under {new_parent_id!r}: it would become its own ancestor"
        )


class SnapshotFormatError(ZenscriptError, ValueError):
    """Persisted data does not match the document/block shapes."""
