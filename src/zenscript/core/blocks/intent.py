"""Translate a pointer position over a block into a drop intent."""

from enum import StrEnum

from zenscript.config import MERGE_BAND_MARGIN
from zenscript.models.block import Block, ImageGridBlock


class DropIntent(StrEnum):
    """Where a dragged block should land relative to the target block."""

    BEFORE = "before"
    AFTER = "after"
    MERGE = "merge"


def resolve_drop_intent(
    source: Block | None,
    target: Block | None,
    *,
    offset_y: float,
    height: float,
) -> DropIntent:
    """Derive the intent for a drop at ``offset_y`` within a target ``height`` units tall.

    Image onto image in the middle band of the target means merge; otherwise the
    top half means before and the bottom half means after.
    """
    if isinstance(source, ImageGridBlock) and isinstance(target, ImageGridBlock):
        low = height * MERGE_BAND_MARGIN
        high = height * (1 - MERGE_BAND_MARGIN)
        if low < offset_y < high:
            return DropIntent.MERGE
    if offset_y < height / 2:
        return DropIntent.BEFORE
    return DropIntent.AFTER
