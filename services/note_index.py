# services/note_index.py
import logging
from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from db import atomic, storage_guard, utc_now
from models.folder import Folder
from models.note import TITLE_MAX_LENGTH, Note
from services.subtree import SubtreeResolver
from services.tree_builder import TreeNode, iter_postorder
from services.write_lock import serialized
from utils.exceptions import FolderNotFoundError, InvalidInputError, NotFoundError

logger = logging.getLogger(__name__)

UNSET = object()


def clean_title(title) -> str:
    if not isinstance(title, str) or not title.strip():
        raise InvalidInputError('Field "title" is required and must be a non-empty string.')
    title = title.strip()
    if len(title) > TITLE_MAX_LENGTH:
        raise InvalidInputError(f"Note titles are limited to {TITLE_MAX_LENGTH} characters.")
    return title


def clean_flag(flag) -> int:
    # bool is an int subclass; True/False are not accepted as flags
    if isinstance(flag, bool) or flag not in (0, 1):
        raise InvalidInputError("flag must be 0 or 1.")
    return int(flag)


class NoteIndex:
    """Note membership in folders, shallow/deep listing and per-folder counts."""

    def __init__(self, db: Session):
        self.db = db
        self.resolver = SubtreeResolver(db)

    def _require_folder(self, folder_id: int) -> None:
        if self.db.get(Folder, folder_id) is None:
            raise FolderNotFoundError(folder_id)

    @storage_guard
    def get(self, note_id: int) -> Note:
        note = self.db.get(Note, note_id)
        if note is None:
            raise NotFoundError(f"Note {note_id} not found.")
        return note

    @serialized
    @storage_guard
    def create(self, folder_id: int, title: str, body: Optional[str] = "") -> Note:
        title = clean_title(title)
        self._require_folder(folder_id)

        now = utc_now()
        note = Note(
            folder_id=folder_id,
            title=title,
            body=body or "",
            flag=0,
            created_at=now,
            updated_at=now,
        )
        with atomic(self.db):
            self.db.add(note)
        self.db.refresh(note)
        logger.info(f"Created note {note.id} in folder {folder_id}")
        return note

    @serialized
    @storage_guard
    def edit(self, note_id: int, title=UNSET, body=UNSET, folder_id=UNSET, flag=UNSET) -> Note:
        note = self.get(note_id)
        changes = {}
        if title is not UNSET:
            changes["title"] = clean_title(title)
        if body is not UNSET:
            changes["body"] = body or ""
        if folder_id is not UNSET:
            if folder_id is None:
                raise InvalidInputError("folderId must reference a folder.")
            self._require_folder(folder_id)
            changes["folder_id"] = folder_id
        if flag is not UNSET:
            changes["flag"] = clean_flag(flag)

        if not changes:
            return note

        with atomic(self.db):
            for field, value in changes.items():
                setattr(note, field, value)
            note.updated_at = utc_now()
        self.db.refresh(note)
        logger.info(f"Updated note {note.id}: {sorted(changes)}")
        return note

    def move(self, note_id: int, folder_id: int) -> Note:
        return self.edit(note_id, folder_id=folder_id)

    @serialized
    @storage_guard
    def delete(self, note_id: int) -> None:
        note = self.get(note_id)
        with atomic(self.db):
            self.db.delete(note)
        logger.info(f"Deleted note {note_id}")

    @storage_guard
    def list_by_folder(self, folder_id: Optional[int] = None, deep: bool = False) -> List[Note]:
        """
        • no folder_id: every note
        • deep=False: notes stored directly in folder_id
        • deep=True: notes anywhere in folder_id's subtree
        Newest first (descending id).
        """
        query = self.db.query(Note)
        if folder_id is not None:
            if deep:
                subtree = self.resolver.descendants(folder_id)
                query = query.filter(Note.folder_id.in_(list(subtree)))
            else:
                query = query.filter(Note.folder_id == folder_id)
        return query.order_by(Note.id.desc()).all()

    @storage_guard
    def direct_counts(self) -> Dict[int, int]:
        rows = (
            self.db.query(Note.folder_id, func.count(Note.id))
            .group_by(Note.folder_id)
            .all()
        )
        return {folder_id: count for folder_id, count in rows}

    def aggregated_counts(self, tree: List[TreeNode], direct: Optional[Dict[int, int]] = None) -> Dict[int, int]:
        """Each folder's own note count plus the aggregated counts of its children."""
        if direct is None:
            direct = self.direct_counts()
        totals: Dict[int, int] = {}
        for node in iter_postorder(tree):
            totals[node["id"]] = direct.get(node["id"], 0) + sum(
                totals[child["id"]] for child in node["children"]
            )
        return totals
