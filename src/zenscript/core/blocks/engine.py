"""Block engine: insert, remove, reorder, and merge blocks within one document.

Every operation takes a block sequence and returns a new tuple; the input is never
mutated, so callers can persist or render the old and new sequences side by side.
Ids that do not resolve are treated as a harmless race with the caller and leave
the sequence unchanged.
"""

from collections.abc import Sequence
from dataclasses import replace

from loguru import logger

from zenscript.config import (
    DEFAULT_GRID_ALIGN,
    DEFAULT_GRID_WIDTH,
    MAX_GRID_WIDTH,
    MIN_GRID_WIDTH,
)
from zenscript.core.blocks.intent import DropIntent
from zenscript.models.block import (
    ALIGNMENTS,
    Align,
    Block,
    ImageData,
    ImageGridBlock,
    TextBlock,
    generate_id,
)

Blocks = tuple[Block, ...]


def _index_of(blocks: Sequence[Block], block_id: str | None) -> int:
    if block_id is None:
        return -1
    for i, block in enumerate(blocks):
        if block.id == block_id:
            return i
    return -1


def _insert_after(blocks: Sequence[Block], after_id: str | None, *new: Block) -> Blocks:
    index = _index_of(blocks, after_id)
    if index == -1:
        return (*blocks, *new)
    return (*blocks[: index + 1], *new, *blocks[index + 1 :])


def find_block(blocks: Sequence[Block], block_id: str) -> Block | None:
    index = _index_of(blocks, block_id)
    return blocks[index] if index != -1 else None


def insert_text_after(
    blocks: Sequence[Block],
    after_id: str | None,
    content: str = "",
) -> tuple[Blocks, str]:
    """Insert a fresh text block right after ``after_id``, or at the end.

    Returns:
        Tuple of (new blocks, id of the inserted block) so the caller can focus it.
    """
    block = TextBlock.new(content)
    return _insert_after(blocks, after_id, block), block.id


def remove_block(blocks: Sequence[Block], block_id: str) -> tuple[Blocks, str | None]:
    """Remove a block.

    Removing the last block leaves the sequence empty; re-seeding is the caller's job.

    Returns:
        Tuple of (new blocks, id of the preceding block or None).
    """
    index = _index_of(blocks, block_id)
    if index == -1:
        logger.debug("remove_block: unknown block {}", block_id)
        return tuple(blocks), None
    focus_id = blocks[index - 1].id if index > 0 else None
    return (*blocks[:index], *blocks[index + 1 :]), focus_id


def insert_image_grid(
    blocks: Sequence[Block],
    after_id: str | None,
    images: Sequence[ImageData],
) -> tuple[Blocks, str]:
    """Insert a new image grid after ``after_id`` (or at the end), followed by an empty text block.

    Returns:
        Tuple of (new blocks, id of the grid block).
    """
    grid = ImageGridBlock(
        id=generate_id(),
        images=tuple(images),
        align=DEFAULT_GRID_ALIGN,
        width=DEFAULT_GRID_WIDTH,
    )
    return _insert_after(blocks, after_id, grid, TextBlock.new()), grid.id


def append_images_to_grid(
    blocks: Sequence[Block],
    target_id: str,
    images: Sequence[ImageData],
) -> Blocks:
    """Append images to the grid at ``target_id``; no-op unless it is an image grid."""
    index = _index_of(blocks, target_id)
    if index == -1 or not isinstance(blocks[index], ImageGridBlock):
        logger.debug("append_images_to_grid: {} is not an image grid", target_id)
        return tuple(blocks)
    grid = blocks[index]
    updated = replace(grid, images=(*grid.images, *images))
    return (*blocks[:index], updated, *blocks[index + 1 :])


def reorder_or_merge(
    blocks: Sequence[Block],
    source_id: str,
    target_id: str,
    intent: DropIntent | str,
) -> Blocks:
    """Resolve a block drag-and-drop.

    ``merge`` folds the source grid's images onto the end of the target grid and
    drops the source block; it applies only when both blocks are image grids.
    ``before``/``after`` move the source next to the target's position as it is
    once the source has been taken out.
    """
    intent = DropIntent(intent)
    if source_id == target_id:
        return tuple(blocks)

    source_index = _index_of(blocks, source_id)
    target_index = _index_of(blocks, target_id)
    if source_index == -1 or target_index == -1:
        logger.debug("reorder_or_merge: unknown source {} or target {}", source_id, target_id)
        return tuple(blocks)

    source = blocks[source_index]
    target = blocks[target_index]
    remaining = (*blocks[:source_index], *blocks[source_index + 1 :])

    if intent is DropIntent.MERGE:
        if not (isinstance(source, ImageGridBlock) and isinstance(target, ImageGridBlock)):
            logger.debug("reorder_or_merge: cannot merge {} into {}", source_id, target_id)
            return tuple(blocks)
        merged = replace(target, images=(*target.images, *source.images))
        return tuple(merged if b.id == target_id else b for b in remaining)

    insert_at = _index_of(remaining, target_id)
    if intent is DropIntent.AFTER:
        insert_at += 1
    return (*remaining[:insert_at], source, *remaining[insert_at:])


def update_text(blocks: Sequence[Block], block_id: str, content: str) -> Blocks:
    """Replace the content of a text block."""
    index = _index_of(blocks, block_id)
    if index == -1 or not isinstance(blocks[index], TextBlock):
        return tuple(blocks)
    return (*blocks[:index], replace(blocks[index], content=content), *blocks[index + 1 :])


def clamp_width(width: float) -> float:
    return min(MAX_GRID_WIDTH, max(MIN_GRID_WIDTH, width))


def update_image_grid(
    blocks: Sequence[Block],
    block_id: str,
    *,
    align: Align | str | None = None,
    width: float | None = None,
) -> Blocks:
    """Re-align and/or resize an image grid. Width is clamped into the allowed range."""
    index = _index_of(blocks, block_id)
    if index == -1 or not isinstance(blocks[index], ImageGridBlock):
        return tuple(blocks)
    grid = blocks[index]
    if align is not None:
        if align not in ALIGNMENTS:
            logger.debug("update_image_grid: ignoring alignment {!r}", align)
        else:
            grid = replace(grid, align=align)
    if width is not None:
        grid = replace(grid, width=clamp_width(width))
    return (*blocks[:index], grid, *blocks[index + 1 :])


def remove_image_from_grid(
    blocks: Sequence[Block],
    block_id: str,
    image_id: str,
) -> tuple[Blocks, str | None]:
    """Remove one image from a grid; an emptied grid is removed as a whole block.

    Returns:
        Tuple of (new blocks, focus hint as from remove_block, else None).
    """
    index = _index_of(blocks, block_id)
    if index == -1 or not isinstance(blocks[index], ImageGridBlock):
        return tuple(blocks), None
    grid = blocks[index]
    images = tuple(img for img in grid.images if img.id != image_id)
    if len(images) == len(grid.images):
        return tuple(blocks), None
    if not images:
        return remove_block(blocks, block_id)
    return (*blocks[:index], replace(grid, images=images), *blocks[index + 1 :]), None


# Markup a rich-text editor leaves behind in a text block the user has emptied.
_EMPTY_MARKUP = ("", "<br>")


def backspace_on_empty(blocks: Sequence[Block], block_id: str) -> tuple[Blocks, str | None]:
    """Backspace in an empty text block removes it, unless it is the only block."""
    block = find_block(blocks, block_id)
    if (
        not isinstance(block, TextBlock)
        or block.content.strip() not in _EMPTY_MARKUP
        or len(blocks) <= 1
    ):
        return tuple(blocks), None
    return remove_block(blocks, block_id)


def character_count(blocks: Sequence[Block]) -> int:
    """Total length of all text block content."""
    return sum(len(b.content) for b in blocks if isinstance(b, TextBlock))
