# services/cascade.py
import logging
from typing import Dict

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from models.folder import Folder
from models.note import Note
from services.subtree import SubtreeResolver
from utils.exceptions import CascadeIncompleteError, StorageError

logger = logging.getLogger(__name__)


class CascadeDeleter:
    """Removes a folder, every folder beneath it and all of their notes as one unit."""

    def __init__(self, db: Session, resolver: SubtreeResolver = None):
        self.db = db
        self.resolver = resolver or SubtreeResolver(db)

    def delete_subtree(self, folder_id: int) -> Dict[str, int]:
        """
        1) collect the descendant folder ids (folder_id included)
        2) delete the notes owned by those folders
        3) delete the folders themselves
        4) commit once

        Any failure rolls the transaction back. A failure after step 2 was
        issued is raised as CascadeIncompleteError and must not be retried.
        """
        folder_ids = sorted(self.resolver.descendants(folder_id))
        notes_issued = False
        try:
            deleted_notes = (
                self.db.query(Note)
                .filter(Note.folder_id.in_(folder_ids))
                .delete(synchronize_session=False)
            )
            notes_issued = True
            deleted_folders = (
                self.db.query(Folder)
                .filter(Folder.id.in_(folder_ids))
                .delete(synchronize_session=False)
            )
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            if notes_issued:
                logger.critical(
                    f"Cascade delete of folder {folder_id} failed after its notes were deleted; "
                    f"rolled back, subtree={folder_ids}: {e}"
                )
                raise CascadeIncompleteError(
                    f"Cascade delete of folder {folder_id} did not complete; "
                    "inspect the subtree before retrying.",
                    details={"folderIds": folder_ids},
                ) from e
            logger.error(f"Cascade delete of folder {folder_id} failed before any write: {e}")
            raise StorageError("The record store rejected the cascade delete.") from e

        self.db.expire_all()
        logger.info(
            f"Deleted folder {folder_id} with {deleted_folders - 1} subfolders "
            f"and {deleted_notes} notes"
        )
        return {"folders": deleted_folders, "notes": deleted_notes}
