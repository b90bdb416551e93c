"""
session.py - Browse Session

Explicit context object owning the browsed folder, options, collection,
cursor and thumbnail materializer. Operations return the Change flags
describing what changed; notifying the UI is left to the adapter.
"""

from concurrent.futures import Future
from pathlib import Path
from typing import List, Optional, Tuple, Union
import logging
import shutil
import threading

from .collection import IndexedCollection
from .errors import BrowseError, NotFoundError
from .exec_rename import ConfirmOverwrite, RenameFunc, RenameResult, apply_renames, rename_entry
from .fs_ops import delete_file, rename_file, unpack_archive
from .models_fs import BrowseOptions, Change, ThumbnailEntry, ThumbnailStatus
from .navigation import NO_SELECTION, NavigationCursor, compute_edge_flags
from .plan_rename import RenameSession
from .scan_files import scan_catalog
from .thumbnails import MaterializeResult, ThumbnailMaterializer, Thumbnails

logger = logging.getLogger(__name__)


class BrowseSession:
    """State of one browsing view"""

    def __init__(self, options: Optional[BrowseOptions] = None, materializer: Optional[ThumbnailMaterializer] = None):
        self.options = options or BrowseOptions()
        self.folder: Optional[Path] = None
        self._folder_recursive = self.options.recursive
        self.collection = IndexedCollection()
        self.cursor = NavigationCursor()
        self.thumbnails: Thumbnails = {}
        self.last_error: Optional[BaseException] = None
        self.pending: Optional["Future[MaterializeResult]"] = None

        self._temp_dirs: List[Path] = []
        # Serialises collection writers (materializer install, commit, delete)
        self._write_lock = threading.RLock()

        self.materializer: Optional[ThumbnailMaterializer] = None
        if self.options.thumbnails:
            self.materializer = materializer or ThumbnailMaterializer(
                self._install,
                thumbnail_size=self.options.thumbnail_size,
                max_workers=self.options.max_workers,
            )

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    @property
    def status(self) -> ThumbnailStatus:
        if self.materializer is None:
            return ThumbnailStatus.IDLE
        return self.materializer.status

    def _scan(self, folder: Path, recursive: bool) -> List[Path]:
        return scan_catalog(
            folder,
            self.options.extensions,
            recursive=recursive,
            include_hidden=self.options.include_hidden,
        )

    def _replace_collection(self, collection: IndexedCollection, select: Optional[Path]) -> None:
        with self._write_lock:
            self.collection = collection
            self.cursor.reset(len(collection))
            if select is not None:
                item_id = collection.find(select)
                if item_id is not None:
                    self.cursor.select(item_id, collection.ids())

    def _install(self, result: MaterializeResult) -> bool:
        """
        Materializer callback: the latest result replaces collection,
        thumbnails and folder together

        The generation is checked again under the write lock, so a run
        superseded while waiting for a commit or delete installs nothing.
        """
        folder, recursive, select = result.context
        with self._write_lock:
            if not self.materializer.is_current(result.generation):
                return False
            self._replace_collection(result.collection, select)
            self.thumbnails = result.thumbnails
            self.folder = folder
            self._folder_recursive = recursive
            self.last_error = None
        return True

    def open_folder(
        self,
        folder: Union[str, Path],
        select: Optional[Union[str, Path]] = None,
        recursive: Optional[bool] = None,
    ) -> Change:
        """
        Browse a folder

        With thumbnails disabled the folder is scanned synchronously. With
        thumbnails enabled a materialization is started and `pending` holds
        its Future; the collection changes once it is installed.

        Args:
            folder: Folder to browse
            select: Path to select once loaded (None clears the selection)
            recursive: Override options.recursive for this folder

        Returns:
            Change flags (NONE while a materialization is pending)

        Raises:
            NotFoundError / AccessDeniedError: Synchronous scan failed; the
            previous collection is kept
        """
        folder = Path(folder)
        select_path = Path(select) if select is not None else None
        if recursive is None:
            recursive = self.options.recursive

        if self.materializer is not None:
            self.pending = self.materializer.materialize(
                lambda: self._scan(folder, recursive),
                context=(folder, recursive, select_path),
            )
            return Change.NONE

        try:
            paths = self._scan(folder, recursive)
        except BrowseError as e:
            self.last_error = e
            logger.error("Cannot open %s: %s", folder, e)
            raise

        self.folder = folder
        self._folder_recursive = recursive
        self.last_error = None
        self._replace_collection(IndexedCollection.build(paths), select_path)
        logger.info("Opened %s: %d files", folder, len(paths))
        return Change.COLLECTION | Change.CURSOR

    def refresh(self) -> Change:
        """Re-scan the current folder keeping the current file selected"""
        if self.folder is None:
            return Change.NONE
        return self.open_folder(self.folder, select=self.current_path(), recursive=self._folder_recursive)

    def open_archive(self, archive: Union[str, Path]) -> Change:
        """
        Unpack an archive to a temp directory and browse it recursively

        The directory is removed on the next archive or on close().
        """
        target = unpack_archive(archive)
        self._cleanup_temp_dirs()
        self._temp_dirs.append(target)
        return self.open_folder(target, recursive=True)

    def wait(self, timeout: Optional[float] = None) -> Optional[MaterializeResult]:
        """Block until the pending materialization is done (tests, CLI)"""
        if self.pending is None:
            return None
        result = self.pending.result(timeout=timeout)
        if result.error is not None and self.materializer.generation == result.generation:
            self.last_error = result.error
        return result

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def ids(self) -> List[int]:
        return self.collection.ids()

    def current_path(self) -> Optional[Path]:
        if self.cursor.current_id == NO_SELECTION:
            return None
        return self.collection.get(self.cursor.current_id)

    def current_thumbnail(self) -> Optional[ThumbnailEntry]:
        return self.thumbnails.get(self.cursor.current_id)

    def select(self, item_id: int) -> Change:
        before = self.cursor.current_id
        self.cursor.select(item_id, self.ids())
        return Change.CURSOR if before != item_id else Change.NONE

    def next(self) -> Change:
        before = self.cursor.current_id
        return Change.CURSOR if self.cursor.next(self.ids()) != before else Change.NONE

    def previous(self) -> Change:
        before = self.cursor.current_id
        return Change.CURSOR if self.cursor.previous(self.ids()) != before else Change.NONE

    def edge_flags(self) -> Tuple[bool, bool]:
        """(has_previous, has_next) for the current position"""
        return compute_edge_flags(self.cursor.current_id, self.ids())

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def delete(self, item_id: int) -> Change:
        """
        Send one entry to the trash and drop its id

        Returns:
            Change flags; NONE when the file could not be deleted
        """
        with self._write_lock:
            path = self.collection.get(item_id)
            if not delete_file(path) and path.exists():
                return Change.NONE

            ids_before = self.ids()
            self.collection.remove(item_id)
            self.thumbnails.pop(item_id, None)
            change = Change.COLLECTION
            if self.cursor.current_id == item_id:
                self.cursor.fallback_after_removal(item_id, ids_before)
                change |= Change.CURSOR
            else:
                self.cursor.total = len(self.collection)
            return change

    def delete_current(self) -> Change:
        if self.cursor.current_id == NO_SELECTION:
            return Change.NONE
        return self.delete(self.cursor.current_id)

    def rename_current(
        self,
        new_name: str,
        confirm_overwrite: Optional[ConfirmOverwrite] = None,
        rename: RenameFunc = rename_file,
    ) -> Change:
        """Rename the current file; its id (and the selection) is kept"""
        if self.cursor.current_id == NO_SELECTION:
            raise NotFoundError("No file selected")
        with self._write_lock:
            rename_entry(
                self.collection, self.cursor.current_id, new_name,
                confirm_overwrite=confirm_overwrite,
                rename=rename,
                case_insensitive=self.options.case_insensitive_detect,
            )
            entry = self.thumbnails.get(self.cursor.current_id)
            if entry is not None:
                entry.path = self.collection.get(self.cursor.current_id)
        return Change.COLLECTION

    def begin_rename(self) -> RenameSession:
        """Open a batch rename preview over the current collection"""
        return RenameSession.open(self.collection)

    def commit_rename(
        self,
        rename_session: RenameSession,
        confirm_overwrite: Optional[ConfirmOverwrite] = None,
        **kwargs,
    ) -> Tuple[RenameResult, Change]:
        """
        Commit a batch rename preview to disk and into the collection

        Returns:
            (result, change flags)
        """
        with self._write_lock:
            result = apply_renames(
                rename_session, self.collection,
                confirm_overwrite=confirm_overwrite,
                max_workers=self.options.max_workers,
                case_insensitive=self.options.case_insensitive_detect,
                log_dir=self.options.log_dir,
                **kwargs,
            )
            for item in result.success:
                entry = self.thumbnails.get(item.id)
                if entry is not None:
                    entry.path = item.original_path

        change = Change.BATCH_STATUS
        if result.success:
            change |= Change.COLLECTION
        return result, change

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------

    def _cleanup_temp_dirs(self) -> None:
        for path in self._temp_dirs:
            shutil.rmtree(path, ignore_errors=True)
        self._temp_dirs.clear()

    def close(self) -> None:
        if self.materializer is not None:
            self.materializer.shutdown(wait=False)
        self._cleanup_temp_dirs()

    def __enter__(self) -> "BrowseSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
