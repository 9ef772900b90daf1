# services/subtree.py
"""
Graph traversal over the folder forest.

The folder set is handled as an id-indexed mapping ``{folder_id: parent_id}``;
the parent -> children adjacency is derived from it once per call. The pure
helpers below never assume the forest invariant actually holds: every walk is
bounded by the number of folders and keeps a visited set.
"""
import logging
from collections import defaultdict, deque
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Set, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from db import storage_guard
from models.folder import Folder
from models.note import Note

logger = logging.getLogger(__name__)

ParentMap = Mapping[int, Optional[int]]


class CorruptHierarchy(Exception):
    """The ancestor chain revisits a folder or exceeds the folder count."""

    def __init__(self, start_id: int, chain: List[int]):
        self.start_id = start_id
        self.chain = chain
        super().__init__(f"Ancestor chain of folder {start_id} does not terminate: {chain}")


def children_map(parent_of: ParentMap) -> Dict[Optional[int], List[int]]:
    children: Dict[Optional[int], List[int]] = defaultdict(list)
    for folder_id, parent_id in parent_of.items():
        children[parent_id].append(folder_id)
    return children


def collect_descendants(parent_of: ParentMap, root_id: int) -> Set[int]:
    """Breadth-first walk downward from root_id. The result includes root_id."""
    children = children_map(parent_of)
    seen = {root_id}
    queue = deque([root_id])
    while queue:
        current = queue.popleft()
        for child in children.get(current, ()):
            if child in seen:
                continue
            seen.add(child)
            queue.append(child)
    return seen


def walk_ancestors(parent_of: ParentMap, start_id: int) -> List[int]:
    """
    Follow parent links upward from start_id (exclusive) toward a root.

    Returns the ancestor ids nearest first. A parent id that is not in the
    mapping ends the walk (dangling reference). Raises CorruptHierarchy when a
    folder is revisited or the walk takes more steps than there are folders.
    """
    chain: List[int] = []
    seen = {start_id}
    current = parent_of.get(start_id)
    limit = len(parent_of)
    while current is not None and current in parent_of:
        if current in seen or len(chain) >= limit:
            raise CorruptHierarchy(start_id, chain + [current])
        chain.append(current)
        seen.add(current)
        current = parent_of[current]
    return chain


def would_create_cycle(parent_of: ParentMap, folder_id: int, new_parent_id: int) -> bool:
    """True when making new_parent_id the parent of folder_id closes a loop."""
    if new_parent_id == folder_id:
        return True
    try:
        chain = walk_ancestors(parent_of, new_parent_id)
    except CorruptHierarchy as e:
        if folder_id in e.chain:
            return True
        raise
    return folder_id in chain


@dataclass(frozen=True)
class SubtreeStats:
    nested_folders: int
    nested_notes: int

    @property
    def is_empty(self) -> bool:
        return self.nested_folders == 0 and self.nested_notes == 0

    def to_dict(self) -> Dict[str, int]:
        return {"nestedFolders": self.nested_folders, "nestedNotes": self.nested_notes}


class SubtreeResolver:
    """Descendant sets, ancestor chains and subtree statistics from the store."""

    def __init__(self, db: Session):
        self.db = db

    @storage_guard
    def parent_map(self) -> Dict[int, Optional[int]]:
        rows: Iterable[Tuple[int, Optional[int]]] = self.db.query(Folder.id, Folder.parent_id).all()
        return {folder_id: parent_id for folder_id, parent_id in rows}

    def descendants(self, folder_id: int) -> Set[int]:
        return collect_descendants(self.parent_map(), folder_id)

    def ancestors(self, folder_id: int) -> List[int]:
        return walk_ancestors(self.parent_map(), folder_id)

    @storage_guard
    def count_notes(self, folder_ids: Iterable[int]) -> int:
        ids = list(folder_ids)
        if not ids:
            return 0
        return (
            self.db.query(func.count(Note.id))
            .filter(Note.folder_id.in_(ids))
            .scalar()
        ) or 0

    def stats(self, folder_id: int) -> SubtreeStats:
        subtree = self.descendants(folder_id)
        stats = SubtreeStats(
            nested_folders=len(subtree) - 1,
            nested_notes=self.count_notes(subtree),
        )
        logger.debug(f"Subtree stats for folder {folder_id}: {stats}")
        return stats
