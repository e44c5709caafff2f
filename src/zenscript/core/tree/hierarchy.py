"""Document tree: parent/child relation over a flat document collection.

Documents keep a back-reference to their parent; children are recomputed by
filtering the collection on each query. Every operation returns a new tuple.
"""

from collections.abc import Sequence
from dataclasses import replace

from loguru import logger

from zenscript.config import DEFAULT_DOCUMENT_TITLE
from zenscript.errors import IllegalCycleError
from zenscript.models.block import TextBlock, generate_id
from zenscript.models.document import Document, now_ms

Documents = tuple[Document, ...]


def find_document(documents: Sequence[Document], document_id: str | None) -> Document | None:
    if document_id is None:
        return None
    for doc in documents:
        if doc.id == document_id:
            return doc
    return None


def create_document(
    parent_id: str | None = None,
    *,
    title: str = DEFAULT_DOCUMENT_TITLE,
    now: int | None = None,
) -> Document:
    """Build a new opened document holding a single empty text block."""
    return Document(
        id=generate_id(),
        parent_id=parent_id,
        title=title,
        blocks=(TextBlock.new(),),
        last_modified=now if now is not None else now_ms(),
        is_opened=True,
    )


def children(documents: Sequence[Document], parent_id: str | None) -> Documents:
    """Direct children of ``parent_id`` (root-level documents for None), in collection order."""
    return tuple(doc for doc in documents if doc.parent_id == parent_id)


def ancestors(documents: Sequence[Document], document_id: str) -> Documents:
    """Ancestor chain from the root down to the immediate parent (excludes the document)."""
    by_id = {doc.id: doc for doc in documents}
    chain: list[Document] = []
    seen = {document_id}
    current = by_id.get(document_id)
    while current is not None and current.parent_id is not None:
        if current.parent_id in seen:
            break
        seen.add(current.parent_id)
        parent = by_id.get(current.parent_id)
        if parent is None:
            break
        chain.append(parent)
        current = parent
    return tuple(reversed(chain))


def would_create_cycle(
    documents: Sequence[Document],
    document_id: str,
    new_parent_id: str | None,
) -> bool:
    """True if making ``new_parent_id`` the parent of ``document_id`` closes a cycle.

    Walks the parent chain upward from ``new_parent_id``; meeting ``document_id``
    before reaching a root means the document would become its own ancestor.
    """
    by_id = {doc.id: doc for doc in documents}
    seen: set[str] = set()
    current = new_parent_id
    while current is not None and current not in seen:
        if current == document_id:
            return True
        seen.add(current)
        parent = by_id.get(current)
        current = parent.parent_id if parent is not None else None
    return False


def move_document(
    documents: Sequence[Document],
    document_id: str,
    new_parent_id: str | None,
) -> Documents:
    """Re-parent a document (None moves it to the root level).

    An unknown document or an unknown new parent leaves the collection unchanged.

    Raises:
        IllegalCycleError: If the document would become its own ancestor,
            including moving a document under itself. Nothing is changed.
    """
    if find_document(documents, document_id) is None:
        logger.debug("move_document: unknown document {}", document_id)
        return tuple(documents)
    if new_parent_id is not None and find_document(documents, new_parent_id) is None:
        logger.debug("move_document: unknown parent {}", new_parent_id)
        return tuple(documents)
    if new_parent_id is not None and would_create_cycle(documents, document_id, new_parent_id):
        raise IllegalCycleError(document_id, new_parent_id)
    return tuple(
        replace(doc, parent_id=new_parent_id) if doc.id == document_id else doc
        for doc in documents
    )


def descendant_ids(documents: Sequence[Document], document_id: str) -> list[str]:
    """Depth-first closure of ``document_id`` over the parent relation, root first."""
    result: list[str] = []
    seen: set[str] = set()
    todo = [document_id]
    while todo:
        current = todo.pop()
        if current in seen:
            continue
        seen.add(current)
        result.append(current)
        # Reverse so children are visited in collection order.
        todo.extend(reversed([doc.id for doc in children(documents, current)]))
    return result


def delete_document(
    documents: Sequence[Document],
    document_id: str,
) -> tuple[Documents, frozenset[str]]:
    """Remove a document together with all of its descendants.

    Returns:
        Tuple of (remaining documents, ids that were removed).
    """
    if find_document(documents, document_id) is None:
        logger.debug("delete_document: unknown document {}", document_id)
        return tuple(documents), frozenset()
    doomed = frozenset(descendant_ids(documents, document_id))
    return tuple(doc for doc in documents if doc.id not in doomed), doomed
