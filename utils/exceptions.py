# utils/exceptions.py
"""
Domain errors raised by the folder/note services and the FastAPI handlers
that turn them into `{error, message, details?}` JSON responses.
"""
import logging
from typing import Any, Dict, Optional

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class NoteTreeError(Exception):
    """Base class for every error the core reports to the API layer."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "internal-error"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"error": self.code, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class InvalidInputError(NoteTreeError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "invalid-input"


class NotFoundError(NoteTreeError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not-found"


class ParentNotFoundError(NoteTreeError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "parent-not-found"

    def __init__(self, parent_id: int):
        self.parent_id = parent_id
        super().__init__(f"Parent folder {parent_id} does not exist.")


class FolderNotFoundError(NoteTreeError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "folder-not-found"

    def __init__(self, folder_id: int):
        self.folder_id = folder_id
        super().__init__(f"Folder {folder_id} does not exist.")


class CycleDetectedError(NoteTreeError):
    status_code = status.HTTP_409_CONFLICT
    code = "cycle-detected"


class FolderNotEmptyError(NoteTreeError):
    status_code = status.HTTP_409_CONFLICT
    code = "folder-not-empty"

    def __init__(self, folder_id: int, nested_folders: int, nested_notes: int):
        self.folder_id = folder_id
        self.nested_folders = nested_folders
        self.nested_notes = nested_notes
        super().__init__(
            "Folder is not empty; use ?cascade=1 to delete with contents.",
            details={"nestedFolders": nested_folders, "nestedNotes": nested_notes},
        )


class StorageError(NoteTreeError):
    """The record store failed (connectivity, constraint violation, ...)."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "storage-failure"


class CascadeIncompleteError(StorageError):
    """
    A cascade delete failed after its note deletion was issued.

    Never retried automatically: the subtree may be partially mutated and a
    blind retry could delete the wrong scope.
    """

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "cascade-incomplete"


async def app_exception_handler(request: Request, exc: NoteTreeError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Malformed request fields are reported as invalid input."""
    errors = []
    for error in exc.errors():
        field = ".".join(str(loc) for loc in error["loc"])
        errors.append(f"{field}: {error['msg']}")

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": InvalidInputError.code,
            "message": "Request contains invalid fields.",
            "details": {"errors": errors},
        },
    )


async def storage_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Driver/ORM failures that escaped the services answer like StorageError."""
    logger.error(f"Record store failure on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=StorageError.status_code,
        content={"error": StorageError.code, "message": "The record store is unavailable."},
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unexpected error: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": NoteTreeError.code, "message": "Internal server error."},
    )
