from datetime import datetime
from typing import Optional

from pydantic import field_validator

from schemas.common import CamelModel, coerce_id


class NoteCreate(CamelModel):
    folder_id: int
    title: str
    body: Optional[str] = ""

    @field_validator("folder_id", mode="before")
    @classmethod
    def normalize_folder_id(cls, v):
        return coerce_id(v)


class NoteUpdate(CamelModel):
    title: Optional[str] = None
    body: Optional[str] = None
    folder_id: Optional[int] = None
    # range is checked by NoteIndex so a bad flag is reported like any other invalid input
    flag: Optional[int] = None

    @field_validator("folder_id", mode="before")
    @classmethod
    def normalize_folder_id(cls, v):
        return coerce_id(v)


class NoteResponse(CamelModel):
    id: int
    folder_id: int
    title: str
    body: str
    flag: int
    created_at: datetime
    updated_at: datetime
