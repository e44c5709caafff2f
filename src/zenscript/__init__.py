"""zenscript: a minimalist block-based document editor core."""

from zenscript.core.blocks.intent import DropIntent
from zenscript.core.workspace import Workspace, open_workspace
from zenscript.images import DataUriImageSource
from zenscript.protocols import ImageSourceProtocol, StoreProtocol
from zenscript.store import JsonStore

__all__ = [
    "DataUriImageSource",
    "DropIntent",
    "ImageSourceProtocol",
    "JsonStore",
    "StoreProtocol",
    "Workspace",
    "open_workspace",
]
