# routers/folder.py

from typing import List

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from db import get_db
from schemas.common import ErrorResponse
from schemas.folder import (
    FolderCountsResponse,
    FolderCreate,
    FolderDeleteResponse,
    FolderResponse,
    FolderTreeNode,
    FolderUpdate,
    SubtreeStatsResponse,
)
from services.folder_store import UNSET, FolderStore
from services.note_index import NoteIndex
from services.subtree import SubtreeResolver
from services.tree_builder import build_tree

router = APIRouter(
    prefix="/api/v1",
    tags=["Folders"],
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)


@router.get(
    "/folders",
    response_model=None,
    summary="All folders, flat or as a tree"
)
def list_folders(
    tree: bool = Query(default=False, description="1 returns nested roots with children"),
    db: Session = Depends(get_db),
):
    """
    • tree=0: flat list ordered by name
    • tree=1: root folders with their children nested, siblings alphabetical;
      folders under a missing parent are left out
    """
    folders = FolderStore(db).list()
    if not tree:
        return [FolderResponse.model_validate(f) for f in folders]
    return [FolderTreeNode.model_validate(node) for node in build_tree(folders)]


@router.get(
    "/folders/counts",
    response_model=FolderCountsResponse,
    summary="Note counts per folder, direct and aggregated over subtrees"
)
def folder_counts(db: Session = Depends(get_db)):
    index = NoteIndex(db)
    direct = index.direct_counts()
    tree = FolderStore(db).tree()
    return FolderCountsResponse(direct=direct, aggregated=index.aggregated_counts(tree, direct))


@router.get("/folders/{folder_id}", response_model=FolderResponse)
def get_folder(folder_id: int, db: Session = Depends(get_db)):
    return FolderStore(db).get(folder_id)


@router.get(
    "/folders/{folder_id}/path",
    response_model=List[FolderResponse],
    summary="Folders from the root down to this one (breadcrumbs)"
)
def folder_path(folder_id: int, db: Session = Depends(get_db)):
    return FolderStore(db).path(folder_id)


@router.get(
    "/folders/{folder_id}/stats",
    response_model=SubtreeStatsResponse,
    summary="Nested folder and note counts below a folder"
)
def folder_stats(folder_id: int, db: Session = Depends(get_db)):
    FolderStore(db).get(folder_id)
    stats = SubtreeResolver(db).stats(folder_id)
    return SubtreeStatsResponse(nested_folders=stats.nested_folders, nested_notes=stats.nested_notes)


@router.post(
    "/folders",
    response_model=FolderResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a folder"
)
def create_folder(req: FolderCreate, db: Session = Depends(get_db)):
    """
    • req.name (string, required, trimmed)
    • req.parent_id (int or null) - null creates a root folder
    """
    return FolderStore(db).create(req.name, req.parent_id)


@router.patch(
    "/folders/{folder_id}",
    response_model=FolderResponse,
    summary="Rename and/or move a folder"
)
def update_folder(folder_id: int, req: FolderUpdate, db: Session = Depends(get_db)):
    """
    ● name present: rename
    ● parentId present: move (null = to the root); moving a folder into
      itself or its own subtree is rejected with 409
    ● empty body: the folder is returned unchanged
    """
    sent = req.model_fields_set
    return FolderStore(db).update(
        folder_id,
        name=req.name if "name" in sent else UNSET,
        parent_id=req.parent_id if "parent_id" in sent else UNSET,
    )


@router.delete(
    "/folders/{folder_id}",
    response_model=FolderDeleteResponse,
    summary="Delete a folder; cascade=1 removes its subtree and notes"
)
def delete_folder(
    folder_id: int,
    cascade: bool = Query(default=False),
    db: Session = Depends(get_db),
):
    """
    1) without cascade the folder must be empty (409 with nested counts otherwise)
    2) with cascade, every descendant folder and every note inside them is
       removed in one transaction
    """
    return FolderStore(db).delete(folder_id, cascade=cascade)
