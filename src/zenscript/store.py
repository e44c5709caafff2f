"""JSON snapshot store for the document collection and editor settings."""

import json
from dataclasses import replace
from pathlib import Path
from typing import Any

from loguru import logger

from zenscript.config import (
    FILES_FILENAME,
    LEGACY_CONTENT_FILENAME,
    LEGACY_DOCUMENT_TITLE,
    SETTINGS_FILENAME,
)
from zenscript.core.serialization import (
    documents_to_data,
    parse_documents,
    parse_settings,
    settings_to_data,
)
from zenscript.core.tree.hierarchy import create_document
from zenscript.models.block import TextBlock
from zenscript.models.document import WorkspaceSnapshot


class JsonStore:
    """Persist workspace snapshots as JSON files in a data directory.

    - Do not rewrite files whose contents are the same.
    - In dry-run mode, log what would be written instead of writing.

    Every save replaces the previous snapshot as a whole; last write wins.
    """

    def __init__(self, datadir: str | Path, *, dry_run: bool = False, create: bool = True) -> None:
        self.datadir = Path(datadir).expanduser().resolve()
        self.dry_run = dry_run

        if not self.datadir.is_dir():
            if create and not dry_run:
                self.datadir.mkdir(parents=True, exist_ok=True)
            elif not dry_run:
                msg = f"Data directory {str(self.datadir)!r} not found"
                raise ValueError(msg)

        logger.debug("Store ready, datadir {!r}, dry_run {!r}", str(self.datadir), dry_run)
        self.num_same = 0
        self.num_changed = 0

    def _path(self, fname_rel: str) -> Path:
        if Path(fname_rel).is_absolute():
            msg = f"must be relative: {fname_rel!r}"
            raise ValueError(msg)
        path = self.datadir / fname_rel
        if self.datadir not in path.resolve().parents:
            msg = f"Path escapes datadir: {str(path)!r}"
            raise ValueError(msg)
        return path

    def write_json(self, fname_rel: str, data: Any) -> bool:
        """Serialize ``data`` to a file relative to the data directory.

        Returns:
            True if the file was (or in dry-run, would be) created or updated.
        """
        contents = json.dumps(data, indent=2, ensure_ascii=False) + "\n"
        path = self._path(fname_rel)

        action = "create"
        try:
            if path.read_text(encoding="utf-8") == contents:
                self.num_same += 1
                return False
            action = "update"
        except (FileNotFoundError, UnicodeDecodeError):
            pass
        self.num_changed += 1

        if self.dry_run:
            logger.info("dry-run: would {} {!r}", action, str(path))
        else:
            logger.debug("Writing ({}) {!r}", action, str(path))
            tmp = path.with_suffix(path.suffix + ".tmp")
            tmp.write_text(contents, encoding="utf-8")
            tmp.replace(path)
        return True

    def try_read_json(self, fname_rel: str) -> Any | None:
        """Try to read json from given relative path.

        Returns:
            Json contents if file is found, None if file is not found.
            Raises on all other errors.
        """
        try:
            contents = self._path(fname_rel).read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        rj = json.loads(contents)
        # A stored null would be ambiguous with "file not found".
        if rj is None:
            msg = f"try_read_json found None object in {fname_rel!r}"
            raise ValueError(msg)
        return rj

    def save(self, snapshot: WorkspaceSnapshot) -> None:
        """Write the document collection and the settings."""
        changed = self.write_json(FILES_FILENAME, documents_to_data(snapshot.documents))
        changed |= self.write_json(SETTINGS_FILENAME, settings_to_data(snapshot.settings))
        if changed:
            logger.debug("Saved {} document(s)", len(snapshot.documents))

    def load(self) -> WorkspaceSnapshot | None:
        """Read the stored snapshot.

        Falls back to the single-document legacy format when no collection is
        stored. Returns None if there is nothing at all.

        Raises:
            SnapshotFormatError: If a stored file does not match the expected shapes.
        """
        settings = parse_settings(self.try_read_json(SETTINGS_FILENAME))
        raw_files = self.try_read_json(FILES_FILENAME)
        if raw_files is not None:
            return WorkspaceSnapshot(documents=parse_documents(raw_files), settings=settings)

        legacy = self.datadir / LEGACY_CONTENT_FILENAME
        if legacy.is_file():
            logger.info("Migrating legacy {} into a document", LEGACY_CONTENT_FILENAME)
            doc = replace(
                create_document(title=LEGACY_DOCUMENT_TITLE),
                blocks=(TextBlock.new(legacy.read_text(encoding="utf-8")),),
            )
            return WorkspaceSnapshot(documents=(doc,), settings=settings)
        return None
