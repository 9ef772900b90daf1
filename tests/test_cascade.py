"""
Tests for CascadeDeleter, including store failures in the middle of a cascade.
"""
import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from models.folder import Folder
from models.note import Note
from services.cascade import CascadeDeleter
from services.folder_store import FolderStore
from utils.exceptions import CascadeIncompleteError, StorageError


def disk_error(*args, **kwargs):
    raise OperationalError("DELETE", {}, Exception("disk I/O error"))


class TestCascadeDeleter:

    def test_delete_subtree_counts(self, sample_tree, db: Session):
        result = CascadeDeleter(db).delete_subtree(sample_tree["inbox"])
        assert result == {"folders": 4, "notes": 3}
        assert [f.name for f in db.query(Folder)] == ["Personal"]
        assert [n.title for n in db.query(Note)] == ["Diary"]

    def test_leaf_folder(self, sample_tree, db: Session):
        result = CascadeDeleter(db).delete_subtree(sample_tree["personal"])
        assert result == {"folders": 1, "notes": 1}
        assert db.query(Folder).count() == 4

    def test_no_orphaned_notes_after_cascade(self, sample_tree, db: Session):
        CascadeDeleter(db).delete_subtree(sample_tree["archive"])
        folder_ids = {f.id for f in db.query(Folder)}
        assert all(n.folder_id in folder_ids for n in db.query(Note))


class TestCascadeFailures:

    def test_failure_after_notes_issued_is_fatal_and_rolled_back(
        self, sample_tree, db: Session, monkeypatch
    ):
        monkeypatch.setattr(db, "commit", disk_error)

        with pytest.raises(CascadeIncompleteError) as exc_info:
            CascadeDeleter(db).delete_subtree(sample_tree["inbox"])

        assert exc_info.value.status_code == 500
        assert sample_tree["inbox"] in exc_info.value.details["folderIds"]
        assert db.query(Folder).count() == 5
        assert db.query(Note).count() == 4

    def test_failure_before_any_write(self, sample_tree, db: Session, monkeypatch):
        deleter = CascadeDeleter(db)
        monkeypatch.setattr(deleter.resolver, "descendants", lambda folder_id: {folder_id})
        monkeypatch.setattr(db, "query", disk_error)

        with pytest.raises(StorageError) as exc_info:
            deleter.delete_subtree(sample_tree["work"])

        assert not isinstance(exc_info.value, CascadeIncompleteError)

    def test_folder_store_surfaces_incomplete_cascade(self, sample_tree, folders: FolderStore,
                                                      db: Session, monkeypatch):
        monkeypatch.setattr(db, "commit", disk_error)
        with pytest.raises(CascadeIncompleteError):
            folders.delete(sample_tree["work"], cascade=True)
