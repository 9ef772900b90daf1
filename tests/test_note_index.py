"""
Tests for NoteIndex: membership validation, listing and counts.
"""
import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from services.folder_store import FolderStore
from services.note_index import NoteIndex
from services.subtree import SubtreeResolver
from services.tree_builder import build_tree, iter_postorder
from utils.exceptions import FolderNotFoundError, InvalidInputError, NotFoundError, StorageError


class TestCreateNote:

    def test_create(self, folders: FolderStore, notes: NoteIndex):
        folder = folders.create("Inbox")
        note = notes.create(folder.id, "  Draft ", "hello")
        assert note.title == "Draft"
        assert note.body == "hello"
        assert note.flag == 0
        assert note.folder_id == folder.id

    def test_body_defaults_to_empty(self, folders: FolderStore, notes: NoteIndex):
        folder = folders.create("Inbox")
        assert notes.create(folder.id, "Draft").body == ""

    def test_empty_title(self, folders: FolderStore, notes: NoteIndex):
        folder = folders.create("Inbox")
        with pytest.raises(InvalidInputError):
            notes.create(folder.id, "   ")

    def test_title_length_limit(self, folders: FolderStore, notes: NoteIndex):
        folder = folders.create("Inbox")
        assert len(notes.create(folder.id, "t" * 255).title) == 255
        with pytest.raises(InvalidInputError):
            notes.create(folder.id, "t" * 256)

    def test_unknown_folder(self, notes: NoteIndex):
        with pytest.raises(FolderNotFoundError):
            notes.create(12, "Draft")


class TestEditNote:

    @pytest.fixture
    def note(self, folders: FolderStore, notes: NoteIndex):
        folder = folders.create("Inbox")
        return notes.create(folder.id, "Draft")

    def test_edit_fields(self, notes: NoteIndex, note):
        edited = notes.edit(note.id, title="Final", body="text", flag=1)
        assert (edited.title, edited.body, edited.flag) == ("Final", "text", 1)

    def test_move_to_other_folder(self, folders: FolderStore, notes: NoteIndex, note):
        other = folders.create("Other")
        assert notes.move(note.id, other.id).folder_id == other.id

    def test_move_to_missing_folder(self, notes: NoteIndex, note):
        with pytest.raises(FolderNotFoundError):
            notes.move(note.id, 999)
        assert notes.get(note.id).folder_id == note.folder_id

    @pytest.mark.parametrize("flag", [2, -1, "1", True])
    def test_flag_must_be_zero_or_one(self, notes: NoteIndex, note, flag):
        with pytest.raises(InvalidInputError):
            notes.edit(note.id, flag=flag)
        assert notes.get(note.id).flag == 0

    def test_invalid_flag_blocks_whole_patch(self, notes: NoteIndex, note):
        with pytest.raises(InvalidInputError):
            notes.edit(note.id, title="Changed", flag=5)
        assert notes.get(note.id).title == "Draft"

    def test_unknown_note(self, notes: NoteIndex):
        with pytest.raises(NotFoundError):
            notes.edit(1, title="x")

    def test_empty_patch(self, notes: NoteIndex, note):
        assert notes.edit(note.id).title == "Draft"

    def test_delete(self, notes: NoteIndex, note):
        notes.delete(note.id)
        with pytest.raises(NotFoundError):
            notes.get(note.id)
        with pytest.raises(NotFoundError):
            notes.delete(note.id)


class TestListing:

    def test_all_notes_newest_first(self, sample_tree, notes: NoteIndex):
        listed = notes.list_by_folder()
        assert [n.title for n in listed] == ["Diary", "Old", "Plan", "Draft"]

    def test_shallow(self, sample_tree, notes: NoteIndex):
        assert [n.title for n in notes.list_by_folder(sample_tree["work"])] == ["Plan", "Draft"]
        assert notes.list_by_folder(sample_tree["inbox"]) == []

    def test_deep(self, sample_tree, notes: NoteIndex):
        deep = notes.list_by_folder(sample_tree["inbox"], deep=True)
        assert [n.title for n in deep] == ["Old", "Plan", "Draft"]

    def test_unknown_folder_lists_nothing(self, sample_tree, notes: NoteIndex):
        assert notes.list_by_folder(999, deep=True) == []


class TestCounts:

    def test_direct_counts(self, sample_tree, notes: NoteIndex):
        assert notes.direct_counts() == {
            sample_tree["work"]: 2,
            sample_tree["2023"]: 1,
            sample_tree["personal"]: 1,
        }

    def test_aggregated_counts(self, sample_tree, folders: FolderStore, notes: NoteIndex):
        totals = notes.aggregated_counts(build_tree(folders.list()))
        assert totals == {
            sample_tree["inbox"]: 3,
            sample_tree["work"]: 2,
            sample_tree["archive"]: 1,
            sample_tree["2023"]: 1,
            sample_tree["personal"]: 1,
        }

    def test_aggregated_equals_sum_over_descendants(self, sample_tree, folders: FolderStore,
                                                     notes: NoteIndex, db: Session):
        direct = notes.direct_counts()
        tree = build_tree(folders.list())
        totals = notes.aggregated_counts(tree, direct)
        resolver = SubtreeResolver(db)
        for node in iter_postorder(tree):
            expected = sum(direct.get(i, 0) for i in resolver.descendants(node["id"]))
            assert totals[node["id"]] == expected


class TestStorageFailures:

    @staticmethod
    def connection_lost(*args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("connection lost"))

    def test_deep_listing_failure(self, sample_tree, notes: NoteIndex, db: Session, monkeypatch):
        monkeypatch.setattr(db, "query", self.connection_lost)
        with pytest.raises(StorageError):
            notes.list_by_folder(sample_tree["inbox"], deep=True)

    def test_folder_lookup_failure_on_create(self, sample_tree, notes: NoteIndex, db: Session,
                                             monkeypatch):
        monkeypatch.setattr(db, "get", self.connection_lost)
        with pytest.raises(StorageError):
            notes.create(sample_tree["work"], "Draft")
