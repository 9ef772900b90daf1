from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from db import get_db
from schemas.common import ErrorResponse
from schemas.note import NoteCreate, NoteResponse, NoteUpdate
from services.note_index import UNSET, NoteIndex

router = APIRouter(
    prefix="/api/v1",
    tags=["Notes"],
    responses={404: {"model": ErrorResponse}},
)


# ─────────────────────────────────────────────
# list / CRUD
# ─────────────────────────────────────────────
@router.get("/notes", response_model=List[NoteResponse])
def list_notes(
    folder_id: Optional[int] = Query(default=None, alias="folderId"),
    deep: bool = Query(default=False, description="1 includes notes of all descendant folders"),
    db: Session = Depends(get_db),
):
    return NoteIndex(db).list_by_folder(folder_id, deep=deep)


@router.get("/notes/{note_id}", response_model=NoteResponse)
def get_note(note_id: int, db: Session = Depends(get_db)):
    return NoteIndex(db).get(note_id)


@router.post("/notes", response_model=NoteResponse, status_code=status.HTTP_201_CREATED)
def create_note(req: NoteCreate, db: Session = Depends(get_db)):
    return NoteIndex(db).create(req.folder_id, req.title, req.body)


@router.patch("/notes/{note_id}", response_model=NoteResponse)
def update_note(note_id: int, req: NoteUpdate, db: Session = Depends(get_db)):
    sent = req.model_fields_set
    patch = {
        field: getattr(req, field)
        for field in ("title", "body", "folder_id", "flag")
        if field in sent
    }
    return NoteIndex(db).edit(note_id, **patch)


@router.delete("/notes/{note_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_note(note_id: int, db: Session = Depends(get_db)):
    NoteIndex(db).delete(note_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
