"""Shared test fixtures."""

import pytest

from tests.unit.fakes import make_doc, make_grid
from zenscript.core.workspace import Workspace
from zenscript.models.block import Block, TextBlock
from zenscript.models.document import Document


@pytest.fixture
def mixed_blocks() -> tuple[Block, ...]:
    """[Text("a"), Image(g1), Text("")]."""
    return (
        TextBlock(id="t1", content="a"),
        make_grid("g1", "i1"),
        TextBlock(id="t2", content=""),
    )


@pytest.fixture
def tree_docs() -> tuple[Document, ...]:
    """Root r with child a and grandchild b, plus an unrelated root c.

    r
    └── a
        └── b
    c
    """
    return (
        make_doc("r"),
        make_doc("a", "r"),
        make_doc("b", "a"),
        make_doc("c"),
    )


@pytest.fixture
def workspace(tree_docs: tuple[Document, ...]) -> Workspace:
    return Workspace(tree_docs, active_id="r")
