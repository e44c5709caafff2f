"""Block models: the atomic content units of a document."""

import secrets
import string
from dataclasses import dataclass
from typing import Literal

Align = Literal["left", "center", "right"]

ALIGNMENTS: tuple[Align, ...] = ("left", "center", "right")

_ID_ALPHABET = string.ascii_lowercase + string.digits


def generate_id() -> str:
    """Return a fresh 9-character identifier."""
    return "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))


@dataclass(frozen=True)
class TextBlock:
    """A block of rich text. Content is markup, stored verbatim."""

    id: str
    content: str = ""

    @classmethod
    def new(cls, content: str = "") -> "TextBlock":
        return cls(id=generate_id(), content=content)


@dataclass(frozen=True)
class ImageData:
    """A single image inside an image grid."""

    id: str
    source_ref: str
    caption: str | None = None
    width: float | None = None

    @classmethod
    def new(cls, source_ref: str, *, caption: str | None = None) -> "ImageData":
        return cls(id=generate_id(), source_ref=source_ref, caption=caption)


@dataclass(frozen=True)
class ImageGridBlock:
    """An ordered grid of images with alignment and a width percentage."""

    id: str
    images: tuple[ImageData, ...] = ()
    align: Align = "center"
    width: float = 80


Block = TextBlock | ImageGridBlock


def is_blank(block: Block) -> bool:
    """True for a text block whose content is empty or whitespace only."""
    return isinstance(block, TextBlock) and not block.content.strip()
