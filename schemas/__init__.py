# schemas/__init__.py

from .folder import (
    FolderCreate, FolderUpdate,
    FolderResponse, FolderTreeNode,
    FolderDeleteResponse, SubtreeStatsResponse,
    FolderCountsResponse,
)

from .note import (
    NoteCreate,
    NoteUpdate,
    NoteResponse,
)
