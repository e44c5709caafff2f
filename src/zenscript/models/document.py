"""Document and settings models."""

import time
from dataclasses import dataclass
from typing import Literal

from zenscript.models.block import Block

FontFamily = Literal["sans", "serif", "mono", "hand"]


def now_ms() -> int:
    """Current time as epoch milliseconds."""
    return int(time.time() * 1000)


@dataclass(frozen=True)
class Document:
    """A titled, ordered sequence of blocks, optionally parented to another document."""

    id: str
    title: str
    blocks: tuple[Block, ...]
    last_modified: int
    parent_id: str | None = None
    is_opened: bool = True

    @property
    def display_title(self) -> str:
        return self.title or "Untitled"


@dataclass(frozen=True)
class EditorSettings:
    """User preferences persisted alongside the document collection."""

    theme_id: str = "zen-classic"
    font_family: FontFamily = "sans"
    font_size: int = 18
    is_focus_mode: bool = False
    editor_width: int = 900
    sidebar_visible: bool = True


@dataclass(frozen=True)
class WorkspaceSnapshot:
    """Everything the persistence layer stores. The active id is runtime-only."""

    documents: tuple[Document, ...]
    settings: EditorSettings = EditorSettings()
    active_id: str | None = None


@dataclass(frozen=True)
class Theme:
    """A named color palette."""

    id: str
    name: str
    bg_main: str
    bg_paper: str
    text_main: str
    text_muted: str
    cursor: str
    selection: str
    border: str
