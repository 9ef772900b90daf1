# services/folder_store.py
import logging
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from db import atomic, storage_guard, utc_now
from models.folder import NAME_MAX_LENGTH, Folder
from services.cascade import CascadeDeleter
from services.subtree import CorruptHierarchy, SubtreeResolver, would_create_cycle
from services.tree_builder import TreeNode, build_tree
from services.write_lock import serialized
from utils.exceptions import (
    CycleDetectedError,
    FolderNotEmptyError,
    InvalidInputError,
    NotFoundError,
    ParentNotFoundError,
)

logger = logging.getLogger(__name__)

# sentinel for "field not supplied", distinct from parent_id=None (move to root)
UNSET = object()


def clean_name(name) -> str:
    if not isinstance(name, str) or not name.strip():
        raise InvalidInputError('Field "name" is required and must be a non-empty string.')
    name = name.strip()
    if len(name) > NAME_MAX_LENGTH:
        raise InvalidInputError(f"Folder names are limited to {NAME_MAX_LENGTH} characters.")
    return name


class FolderStore:
    """
    Validated mutations of folder records.

    Every check runs before the first write, and checks plus write happen
    under the single-writer lock inside one transaction.
    """

    def __init__(self, db: Session):
        self.db = db
        self.resolver = SubtreeResolver(db)

    # ─────────────────────────────────────────────
    # reads
    # ─────────────────────────────────────────────
    @storage_guard
    def get(self, folder_id: int) -> Folder:
        folder = self.db.get(Folder, folder_id)
        if folder is None:
            raise NotFoundError(f"Folder {folder_id} not found.")
        return folder

    @storage_guard
    def list(self) -> List[Folder]:
        return self.db.query(Folder).order_by(Folder.name, Folder.id).all()

    def tree(self) -> List[TreeNode]:
        return build_tree(self.list())

    @storage_guard
    def path(self, folder_id: int) -> List[Folder]:
        """Folders from the root down to folder_id, for breadcrumbs."""
        folder = self.get(folder_id)
        try:
            ancestor_ids = self.resolver.ancestors(folder_id)
        except CorruptHierarchy as e:
            logger.error(str(e))
            raise CycleDetectedError(f"Folder {folder_id} sits on a corrupt ancestor chain.") from e
        if not ancestor_ids:
            return [folder]
        by_id = {f.id: f for f in self.db.query(Folder).filter(Folder.id.in_(ancestor_ids))}
        return [by_id[i] for i in reversed(ancestor_ids)] + [folder]

    # ─────────────────────────────────────────────
    # validation
    # ─────────────────────────────────────────────
    def _require_parent(self, parent_id: int) -> None:
        if self.db.get(Folder, parent_id) is None:
            raise ParentNotFoundError(parent_id)

    def _check_move(self, folder_id: int, new_parent_id: Optional[int]) -> None:
        if new_parent_id is None:
            return
        if new_parent_id == folder_id:
            raise CycleDetectedError("A folder cannot be moved into itself.")
        self._require_parent(new_parent_id)
        parent_of = self.resolver.parent_map()
        try:
            cycle = would_create_cycle(parent_of, folder_id, new_parent_id)
        except CorruptHierarchy as e:
            logger.error(f"Refusing to move folder {folder_id}: {e}")
            raise CycleDetectedError(
                f"Folder {new_parent_id} sits on a corrupt ancestor chain."
            ) from e
        if cycle:
            raise CycleDetectedError("Cannot move a folder into its own descendant.")

    # ─────────────────────────────────────────────
    # mutations
    # ─────────────────────────────────────────────
    @serialized
    @storage_guard
    def create(self, name: str, parent_id: Optional[int] = None) -> Folder:
        name = clean_name(name)
        if parent_id is not None:
            self._require_parent(parent_id)

        now = utc_now()
        folder = Folder(name=name, parent_id=parent_id, created_at=now, updated_at=now)
        with atomic(self.db):
            self.db.add(folder)
        self.db.refresh(folder)
        logger.info(f"Created folder {folder.id} ({folder.name!r}) under {parent_id}")
        return folder

    @serialized
    @storage_guard
    def update(self, folder_id: int, name=UNSET, parent_id=UNSET) -> Folder:
        """Rename and/or move in one unit. Nothing supplied returns the folder as is."""
        folder = self.get(folder_id)
        if name is UNSET and parent_id is UNSET:
            return folder

        if name is not UNSET:
            name = clean_name(name)
        if parent_id is not UNSET:
            self._check_move(folder_id, parent_id)

        with atomic(self.db):
            if name is not UNSET:
                folder.name = name
            if parent_id is not UNSET:
                folder.parent_id = parent_id
            folder.updated_at = utc_now()
        self.db.refresh(folder)
        logger.info(f"Updated folder {folder.id}: name={folder.name!r} parent_id={folder.parent_id}")
        return folder

    def rename(self, folder_id: int, name=UNSET) -> Folder:
        return self.update(folder_id, name=name)

    def move(self, folder_id: int, parent_id: Optional[int]) -> Folder:
        return self.update(folder_id, parent_id=parent_id)

    @serialized
    @storage_guard
    def delete(self, folder_id: int, cascade: bool = False) -> Dict[str, bool]:
        folder = self.get(folder_id)

        if cascade:
            CascadeDeleter(self.db, self.resolver).delete_subtree(folder_id)
            return {"deleted": True, "cascade": True}

        stats = self.resolver.stats(folder_id)
        if not stats.is_empty:
            raise FolderNotEmptyError(folder_id, stats.nested_folders, stats.nested_notes)

        with atomic(self.db):
            self.db.delete(folder)
        logger.info(f"Deleted empty folder {folder_id}")
        return {"deleted": True, "cascade": False}
