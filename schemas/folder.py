# schemas/folder.py

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import field_validator

from schemas.common import CamelModel, coerce_id


class FolderCreate(CamelModel):
    name: str
    parent_id: Optional[int] = None

    @field_validator("parent_id", mode="before")
    @classmethod
    def normalize_parent_id(cls, v):
        return coerce_id(v)


class FolderUpdate(CamelModel):
    """Fields left out of the body are left alone; parentId: null moves to the root."""

    name: Optional[str] = None
    parent_id: Optional[int] = None

    @field_validator("parent_id", mode="before")
    @classmethod
    def normalize_parent_id(cls, v):
        return coerce_id(v)


class FolderResponse(CamelModel):
    id: int
    name: str
    parent_id: Optional[int]
    created_at: datetime
    updated_at: datetime


class FolderTreeNode(FolderResponse):
    children: List["FolderTreeNode"] = []


FolderTreeNode.model_rebuild()


class FolderDeleteResponse(CamelModel):
    deleted: bool
    cascade: bool


class SubtreeStatsResponse(CamelModel):
    nested_folders: int
    nested_notes: int


class FolderCountsResponse(CamelModel):
    direct: Dict[int, int]
    aggregated: Dict[int, int]
