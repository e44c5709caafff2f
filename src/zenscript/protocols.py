"""Protocols for the collaborators the workspace talks to."""

from typing import Protocol, runtime_checkable

from zenscript.models.document import WorkspaceSnapshot


@runtime_checkable
class StoreProtocol(Protocol):
    """Protocol for persistence backends."""

    def save(self, snapshot: WorkspaceSnapshot) -> None:
        """Store the document collection and settings, replacing what was there."""
        ...

    def load(self) -> WorkspaceSnapshot | None:
        """Return the stored snapshot, or None if nothing was stored yet."""
        ...


@runtime_checkable
class ImageSourceProtocol(Protocol):
    """Protocol for turning raw image bytes into an embeddable reference."""

    def to_reference(self, data: bytes, media_type: str) -> str:
        """Return an opaque reference string, stored verbatim by the core."""
        ...
