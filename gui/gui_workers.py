"""
gui_workers.py - GUI Worker Threads

Provides background execution of long tasks to avoid blocking UI, and the
bridge that turns BrowseSession change flags into Qt signals.
"""

from pathlib import Path
from typing import Iterable, Optional
import logging

from PySide6.QtCore import QObject, QThread, Signal

from core import (
    DEFAULT_EXTENSIONS, BrowseError, BrowseSession, Change, RenameSession,
    scan_catalog,
)
from core.exec_rename import ConfirmOverwrite

logger = logging.getLogger(__name__)


class ScanWorker(QThread):
    """File scanning worker thread"""

    # Signals
    finished = Signal(list)         # Complete, returns sorted path list
    error = Signal(str)             # Error message

    def __init__(
        self,
        directory: Path,
        extensions: Iterable[str] = DEFAULT_EXTENSIONS,
        recursive: bool = False,
        include_hidden: bool = False,
        parent: Optional[QObject] = None
    ):
        super().__init__(parent)
        self.directory = Path(directory)
        self.extensions = set(extensions)
        self.recursive = recursive
        self.include_hidden = include_hidden
        self._cancelled = False

    def cancel(self):
        """Cancel scan, the result is dropped"""
        self._cancelled = True

    def run(self):
        try:
            files = scan_catalog(
                self.directory,
                self.extensions,
                recursive=self.recursive,
                include_hidden=self.include_hidden,
            )
        except (BrowseError, ValueError) as e:
            self.error.emit(str(e))
            return

        if not self._cancelled:
            self.finished.emit(files)


class CommitWorker(QThread):
    """Batch rename commit worker thread"""

    # Signals
    progress = Signal(int, int, str)    # current, total, message
    finished = Signal(object)           # RenameResult
    error = Signal(str)                 # Error message

    def __init__(
        self,
        session: BrowseSession,
        rename_session: RenameSession,
        confirm_overwrite: Optional[ConfirmOverwrite] = None,
        parent: Optional[QObject] = None
    ):
        """
        Args:
            session: Browse session owning the collection
            rename_session: Preview to commit
            confirm_overwrite: Called on the worker thread; None declines
                               every overwrite
            parent: Qt parent
        """
        super().__init__(parent)
        self.session = session
        self.rename_session = rename_session
        self.confirm_overwrite = confirm_overwrite

    def run(self):
        def progress_callback(current: int, total: int, msg: str):
            self.progress.emit(current, total, msg)

        try:
            result, _ = self.session.commit_rename(
                self.rename_session,
                confirm_overwrite=self.confirm_overwrite,
                progress_callback=progress_callback,
            )
        except BrowseError as e:
            self.error.emit(str(e))
            return

        self.finished.emit(result)


class SessionBridge(QObject):
    """
    Qt face of a BrowseSession

    Forwards calls to the session and emits one signal per Change flag the
    call returned. Materializations finish on a pool thread; their result
    is delivered back to the bridge's thread through a queued signal.
    """

    # Signals
    collectionChanged = Signal()
    cursorChanged = Signal(int)         # New current id (-1 for none)
    batchStatusChanged = Signal(object) # RenameResult
    error = Signal(str)

    _loaded = Signal(object)            # MaterializeResult, from a pool thread

    def __init__(self, session: BrowseSession, parent: Optional[QObject] = None):
        super().__init__(parent)
        self.session = session
        self._commit_worker: Optional[CommitWorker] = None
        self._loaded.connect(self._on_loaded)

    def _emit(self, change: Change, result=None) -> Change:
        if Change.COLLECTION in change:
            self.collectionChanged.emit()
        if Change.CURSOR in change:
            self.cursorChanged.emit(self.session.cursor.current_id)
        if Change.BATCH_STATUS in change:
            self.batchStatusChanged.emit(result)
        return change

    def _forward_loaded(self, future) -> None:
        # Runs on the materializer thread
        if future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            logger.error("Materialization crashed: %s", exc, exc_info=exc)
            return
        self._loaded.emit(future.result())

    def _on_loaded(self, result) -> None:
        if result.applied:
            self._emit(Change.COLLECTION | Change.CURSOR)
        elif result.error is not None and result.generation == self.session.materializer.generation:
            self.session.last_error = result.error
            self.error.emit(str(result.error))

    def open_folder(self, folder, select=None) -> Change:
        try:
            change = self.session.open_folder(folder, select=select)
        except BrowseError as e:
            self.error.emit(str(e))
            return Change.NONE

        if self.session.materializer is not None and self.session.pending is not None:
            self.session.pending.add_done_callback(self._forward_loaded)
        return self._emit(change)

    def refresh(self) -> Change:
        if self.session.folder is None:
            return Change.NONE
        return self.open_folder(self.session.folder, select=self.session.current_path())

    def select(self, item_id: int) -> Change:
        try:
            return self._emit(self.session.select(item_id))
        except BrowseError as e:
            self.error.emit(str(e))
            return Change.NONE

    def next(self) -> Change:
        return self._emit(self.session.next())

    def previous(self) -> Change:
        return self._emit(self.session.previous())

    def delete_current(self) -> Change:
        change = self.session.delete_current()
        if change == Change.NONE and self.session.current_path() is not None:
            self.error.emit(f"Could not delete {self.session.current_path().name}")
        return self._emit(change)

    def rename_current(self, new_name: str, confirm_overwrite: Optional[ConfirmOverwrite] = None) -> Change:
        try:
            change = self.session.rename_current(new_name, confirm_overwrite=confirm_overwrite)
        except (BrowseError, ValueError) as e:
            self.error.emit(str(e))
            return Change.NONE
        return self._emit(change)

    def commit(self, rename_session: RenameSession, confirm_overwrite: Optional[ConfirmOverwrite] = None) -> CommitWorker:
        """
        Commit a batch rename preview on a worker thread

        batchStatusChanged (and collectionChanged when something was renamed)
        is emitted once the worker finishes.
        """
        worker = CommitWorker(self.session, rename_session, confirm_overwrite, parent=self)
        worker.finished.connect(self._on_committed)
        worker.error.connect(self.error)
        self._commit_worker = worker
        worker.start()
        return worker

    def _on_committed(self, result) -> None:
        change = Change.BATCH_STATUS
        if result.success:
            change |= Change.COLLECTION
        self._emit(change, result)
