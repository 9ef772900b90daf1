from .folder_store import FolderStore
from .note_index import NoteIndex
from .subtree import SubtreeResolver, SubtreeStats
from .cascade import CascadeDeleter
from .tree_builder import build_tree, iter_postorder

__all__ = [
    "FolderStore",
    "NoteIndex",
    "SubtreeResolver",
    "SubtreeStats",
    "CascadeDeleter",
    "build_tree",
    "iter_postorder",
]
