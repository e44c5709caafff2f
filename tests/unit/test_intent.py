"""Tests for drop intent resolution from pointer position."""

import pytest

from tests.unit.fakes import make_grid
from zenscript.core.blocks.intent import DropIntent, resolve_drop_intent
from zenscript.models.block import TextBlock


@pytest.mark.parametrize(
    ("offset_y", "expected"),
    [
        (10, DropIntent.BEFORE),
        (24, DropIntent.BEFORE),
        (26, DropIntent.MERGE),
        (50, DropIntent.MERGE),
        (74, DropIntent.MERGE),
        (76, DropIntent.AFTER),
        (95, DropIntent.AFTER),
    ],
)
def test_grid_onto_grid_has_merge_band(offset_y: float, expected: DropIntent) -> None:
    source = make_grid("s", "a")
    target = make_grid("t", "b")
    assert resolve_drop_intent(source, target, offset_y=offset_y, height=100) is expected


@pytest.mark.parametrize(
    ("offset_y", "expected"),
    [(10, DropIntent.BEFORE), (49, DropIntent.BEFORE), (50, DropIntent.AFTER)],
)
def test_text_target_only_splits_in_halves(offset_y: float, expected: DropIntent) -> None:
    source = make_grid("s", "a")
    target = TextBlock(id="t", content="x")
    assert resolve_drop_intent(source, target, offset_y=offset_y, height=100) is expected


def test_text_onto_grid_never_merges() -> None:
    source = TextBlock(id="s")
    target = make_grid("t", "b")
    assert resolve_drop_intent(source, target, offset_y=50, height=100) is DropIntent.AFTER


def test_intent_values_match_wire_strings() -> None:
    assert DropIntent("before") is DropIntent.BEFORE
    assert DropIntent("merge") == "merge"
    with pytest.raises(ValueError):
        DropIntent("sideways")
