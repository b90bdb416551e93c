"""
test_exec_rename.py

Tests for committing rename previews to disk: two-phase execution, per-item
failure isolation, conflicts and collection updates.
"""

import errno
import json
from pathlib import Path
from unittest.mock import Mock

import pytest

from core.collection import IndexedCollection
from core.errors import (
    AccessDeniedError, ConflictError, IOFailureError, NotFoundError, SessionClosedError,
)
from core.exec_rename import apply_async, apply_renames, rename_entry
from core.fs_ops import rename_file
from core.models_fs import ItemStatus
from core.plan_rename import RenameSession, SessionState
from core.transforms import AddAppendage


def make_files(folder: Path, *names) -> IndexedCollection:
    paths = []
    for name in names:
        path = folder / name
        path.write_text(name)
        paths.append(path)
    return IndexedCollection.build(paths)


def commit(session, collection, **kwargs):
    kwargs.setdefault("case_insensitive", False)
    return apply_renames(session, collection, **kwargs)


def leftover_temp_files(folder: Path):
    return [p for p in folder.iterdir() if p.name.startswith(".__tmp_rename__")]


class TestApplyRenames:
    def test_renames_and_keeps_ids(self, tmp_path):
        collection = make_files(tmp_path, "a.png", "b.png")
        session = RenameSession.open(collection)
        session.apply_transform(AddAppendage("_x"))

        result = commit(session, collection)

        assert result.success_count == 2
        assert collection.get(0) == tmp_path / "a_x.png"
        assert collection.get(1) == tmp_path / "b_x.png"
        assert (tmp_path / "a_x.png").read_text() == "a.png"
        assert not (tmp_path / "a.png").exists()
        assert all(i.status == ItemStatus.SUCCESS for i in session.items)
        assert session.state == SessionState.COMMITTED
        assert leftover_temp_files(tmp_path) == []

    def test_partial_failure_is_isolated(self, tmp_path):
        collection = make_files(tmp_path, "a.png", "b.png", "c.png")
        session = RenameSession.open(collection)
        session.apply_transform(AddAppendage("_x"))

        def flaky(src, dst):
            if Path(src).name == "b.png":
                raise OSError(errno.EIO, "Input/output error")
            return rename_file(src, dst)

        result = commit(session, collection, rename=flaky)

        assert result.success_count == 2
        assert result.failed_count == 1
        failed = session.get_item(1)
        assert failed.status == ItemStatus.FAILED
        assert isinstance(failed.error, IOFailureError)
        assert collection.get(1) == tmp_path / "b.png"
        assert (tmp_path / "b.png").exists()
        assert collection.get(0) == tmp_path / "a_x.png"
        assert collection.get(2) == tmp_path / "c_x.png"
        assert session.state == SessionState.OPEN
        assert leftover_temp_files(tmp_path) == []

    def test_unexpected_error_in_first_pass_is_isolated(self, tmp_path):
        collection = make_files(tmp_path, "a.png", "b.png")
        session = RenameSession.open(collection)
        session.apply_transform(AddAppendage("_x"))

        def broken(src, dst):
            if Path(src).name == "a.png":
                raise RuntimeError("driver bug")
            return rename_file(src, dst)

        result = commit(session, collection, rename=broken)

        assert result.success_count == 1
        error = session.get_item(0).error
        assert isinstance(error, IOFailureError)
        assert isinstance(error.__cause__, RuntimeError)
        assert (tmp_path / "a.png").exists()
        assert collection.get(1) == tmp_path / "b_x.png"
        assert leftover_temp_files(tmp_path) == []

    def test_unexpected_error_in_second_pass_restores_source(self, tmp_path):
        collection = make_files(tmp_path, "a.png", "b.png")
        session = RenameSession.open(collection)
        session.apply_transform(AddAppendage("_x"))

        def broken(src, dst):
            if Path(dst).name == "b_x.png":
                raise RuntimeError("driver bug")
            return rename_file(src, dst)

        result = commit(session, collection, rename=broken)

        assert [i.id for i in result.success] == [0]
        assert isinstance(session.get_item(1).error, IOFailureError)
        assert (tmp_path / "b.png").read_text() == "b.png"
        assert collection.get(1) == tmp_path / "b.png"
        assert leftover_temp_files(tmp_path) == []

    def test_failing_progress_callback_does_not_abort(self, tmp_path):
        collection = make_files(tmp_path, "a.png", "b.png")
        session = RenameSession.open(collection)
        session.apply_transform(AddAppendage("_x"))

        result = commit(session, collection, progress_callback=Mock(side_effect=ValueError("closed")))

        assert result.success_count == 2
        assert leftover_temp_files(tmp_path) == []

    def test_retry_only_touches_unfinished_items(self, tmp_path):
        collection = make_files(tmp_path, "a.png", "b.png")
        session = RenameSession.open(collection)
        session.apply_transform(AddAppendage("_x"))

        def fail_b(src, dst):
            if Path(src).name == "b.png":
                raise OSError(errno.EIO, "Input/output error")
            return rename_file(src, dst)

        commit(session, collection, rename=fail_b)
        spy = Mock(side_effect=rename_file)
        result = commit(session, collection, rename=spy)

        assert [i.id for i in result.success] == [1]
        moved = {Path(call.args[0]).name for call in spy.call_args_list}
        assert "a_x.png" not in moved
        assert collection.get(1) == tmp_path / "b_x.png"
        assert session.state == SessionState.COMMITTED

    def test_second_commit_is_a_no_op(self, tmp_path):
        collection = make_files(tmp_path, "a.png")
        session = RenameSession.open(collection)
        session.apply_transform(AddAppendage("_x"))
        commit(session, collection)

        result = commit(session, collection)

        assert (result.success_count, result.failed_count, result.skipped_count) == (0, 0, 0)
        assert (tmp_path / "a_x.png").exists()

    def test_missing_source_fails(self, tmp_path):
        collection = make_files(tmp_path, "a.png", "b.png")
        session = RenameSession.open(collection)
        session.apply_transform(AddAppendage("_x"))
        (tmp_path / "a.png").unlink()

        result = commit(session, collection)

        assert isinstance(session.get_item(0).error, NotFoundError)
        assert result.success_count == 1

    def test_duplicate_targets_in_batch(self, tmp_path):
        collection = make_files(tmp_path, "a.png", "b.png")
        session = RenameSession.open(collection)
        session.items[0].candidate_name = "same.png"
        session.items[1].candidate_name = "same.png"

        result = commit(session, collection)

        assert [i.id for i in result.success] == [0]
        assert isinstance(session.get_item(1).error, ConflictError)
        assert (tmp_path / "same.png").read_text() == "a.png"
        assert (tmp_path / "b.png").exists()

    def test_swap_needs_no_confirmation(self, tmp_path):
        collection = make_files(tmp_path, "a.png", "b.png")
        session = RenameSession.open(collection)
        session.items[0].candidate_name = "b.png"
        session.items[1].candidate_name = "a.png"
        confirm = Mock(return_value=False)

        result = commit(session, collection, confirm_overwrite=confirm)

        assert result.success_count == 2
        confirm.assert_not_called()
        assert (tmp_path / "a.png").read_text() == "b.png"
        assert (tmp_path / "b.png").read_text() == "a.png"
        assert collection.get(0) == tmp_path / "b.png"

    def test_discarded_session(self, tmp_path):
        collection = make_files(tmp_path, "a.png")
        session = RenameSession.open(collection)
        session.discard()

        with pytest.raises(SessionClosedError):
            commit(session, collection)

    def test_progress_reports_both_phases(self, tmp_path):
        collection = make_files(tmp_path, "a.png", "b.png")
        session = RenameSession.open(collection)
        session.apply_transform(AddAppendage("_x"))
        progress = Mock()

        commit(session, collection, progress_callback=progress)

        assert progress.call_count == 4
        assert all(call.args[1] == 4 for call in progress.call_args_list)

    def test_result_log(self, tmp_path):
        folder = tmp_path / "images"
        folder.mkdir()
        collection = make_files(folder, "a.png")
        session = RenameSession.open(collection)
        session.apply_transform(AddAppendage("_x"))

        commit(session, collection, log_dir=tmp_path / "logs")

        logs = list((tmp_path / "logs").glob("rename_result_*.json"))
        assert len(logs) == 1
        data = json.loads(logs[0].read_text(encoding="utf-8"))
        assert data["success_count"] == 1
        assert data["success"][0]["path"] == str(folder / "a_x.png")

    def test_summary_lists_failures(self, tmp_path):
        collection = make_files(tmp_path, "a.png")
        session = RenameSession.open(collection)
        session.items[0].candidate_name = "b.png"
        (tmp_path / "a.png").unlink()

        result = commit(session, collection)

        assert "Failed: 1" in result.summary()
        assert "a.png -> b.png" in result.summary()


class TestOverwrite:
    @pytest.fixture
    def occupied(self, tmp_path):
        """a.png is browsed and would be renamed onto b.png, which exists but is not browsed"""
        collection = make_files(tmp_path, "a.png")
        (tmp_path / "b.png").write_text("existing")
        session = RenameSession.open(collection)
        session.items[0].candidate_name = "b.png"
        return collection, session

    def test_declined_by_default(self, tmp_path, occupied):
        collection, session = occupied

        result = commit(session, collection)

        assert result.skipped_count == 1
        assert session.items[0].status == ItemStatus.PENDING
        assert (tmp_path / "a.png").read_text() == "a.png"
        assert (tmp_path / "b.png").read_text() == "existing"

    def test_declined_by_prompt(self, tmp_path, occupied):
        collection, session = occupied
        confirm = Mock(return_value=False)

        result = commit(session, collection, confirm_overwrite=confirm)

        confirm.assert_called_once_with(tmp_path / "b.png")
        assert result.skipped_count == 1
        assert collection.get(0) == tmp_path / "a.png"

    def test_accepted(self, tmp_path, occupied):
        collection, session = occupied

        result = commit(session, collection, confirm_overwrite=lambda path: True)

        assert result.success_count == 1
        assert (tmp_path / "b.png").read_text() == "a.png"
        assert not (tmp_path / "a.png").exists()
        assert collection.get(0) == tmp_path / "b.png"


class TestApplyAsync:
    def test_returns_future(self, tmp_path):
        collection = make_files(tmp_path, "a.png")
        session = RenameSession.open(collection)
        session.apply_transform(AddAppendage("_x"))

        result = apply_async(session, collection, case_insensitive=False).result(timeout=10)

        assert result.success_count == 1
        assert collection.get(0) == tmp_path / "a_x.png"


class TestRenameEntry:
    def test_keeps_id(self, tmp_path):
        collection = make_files(tmp_path, "a.png", "b.png")

        new_path = rename_entry(collection, 1, "z.png", case_insensitive=False)

        assert new_path == tmp_path / "z.png"
        assert collection.get(1) == new_path
        assert collection.ids() == [0, 1]

    def test_same_name_is_a_no_op(self, tmp_path):
        collection = make_files(tmp_path, "a.png")
        rename = Mock()

        assert rename_entry(collection, 0, "a.png", rename=rename) == tmp_path / "a.png"
        rename.assert_not_called()

    def test_invalid_name(self, tmp_path):
        collection = make_files(tmp_path, "a.png")

        with pytest.raises(ValueError):
            rename_entry(collection, 0, "../escape.png")

    def test_unknown_id(self, tmp_path):
        collection = make_files(tmp_path, "a.png")

        with pytest.raises(NotFoundError):
            rename_entry(collection, 3, "b.png")

    def test_declined_overwrite(self, tmp_path):
        collection = make_files(tmp_path, "a.png", "b.png")

        with pytest.raises(ConflictError):
            rename_entry(collection, 0, "b.png", confirm_overwrite=lambda path: False, case_insensitive=False)
        assert collection.get(0) == tmp_path / "a.png"

    def test_failure_raises_item_error(self, tmp_path):
        collection = make_files(tmp_path, "a.png")
        rename = Mock(side_effect=PermissionError(errno.EACCES, "Permission denied"))

        with pytest.raises(AccessDeniedError):
            rename_entry(collection, 0, "b.png", rename=rename, case_insensitive=False)
        assert collection.get(0) == tmp_path / "a.png"
