"""Tests for block and document models."""

import dataclasses

import pytest

from zenscript.models.block import ImageData, ImageGridBlock, TextBlock, generate_id, is_blank
from zenscript.models.document import Document, EditorSettings


def test_generate_id_shape() -> None:
    block_id = generate_id()
    assert len(block_id) == 9
    assert block_id.isalnum()
    assert block_id == block_id.lower()


def test_text_block_new_assigns_fresh_id() -> None:
    a = TextBlock.new("x")
    b = TextBlock.new("x")
    assert a.content == b.content == "x"
    assert a.id != b.id


def test_image_grid_defaults() -> None:
    grid = ImageGridBlock(id="g")
    assert grid.images == ()
    assert grid.align == "center"
    assert grid.width == 80


def test_image_new_keeps_caption() -> None:
    image = ImageData.new("https://example.com/a.png", caption="A")
    assert image.caption == "A"
    assert image.width is None


def test_models_are_frozen() -> None:
    block = TextBlock(id="t", content="x")
    with pytest.raises(dataclasses.FrozenInstanceError):
        block.content = "y"  # type: ignore[misc]


@pytest.mark.parametrize(
    ("block", "expected"),
    [
        (TextBlock(id="t", content=""), True),
        (TextBlock(id="t", content="  \n"), True),
        (TextBlock(id="t", content="x"), False),
        (ImageGridBlock(id="g"), False),
    ],
)
def test_is_blank(block: TextBlock | ImageGridBlock, expected: bool) -> None:
    assert is_blank(block) is expected


def test_display_title_falls_back_to_untitled() -> None:
    doc = Document(id="d", title="", blocks=(), last_modified=0)
    assert doc.display_title == "Untitled"
    assert dataclasses.replace(doc, title="Plan").display_title == "Plan"


def test_editor_settings_defaults() -> None:
    settings = EditorSettings()
    assert settings.theme_id == "zen-classic"
    assert settings.font_family == "sans"
    assert settings.font_size == 18
    assert settings.editor_width == 900
    assert not settings.is_focus_mode
    assert settings.sidebar_visible
