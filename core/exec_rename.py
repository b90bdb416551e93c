"""
exec_rename.py - Rename Execution Module

Responsibilities:
- Conflict detection and overwrite confirmation
- Two-phase execution (first rename to temporary name, then to final name)
- Per-item status, collection updates for succeeded items only
- Result logging
"""

from concurrent.futures import Executor, Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, List, Optional
import json
import logging
import platform
import threading
import uuid

from .collection import IndexedCollection
from .errors import BrowseError, ConflictError, IOFailureError, NotFoundError, error_from_os, unexpected_error
from .fs_ops import rename_file, replace_file
from .models_fs import ItemStatus, RenamePreviewItem
from .plan_rename import RenameSession
from .safety_checks import check_rename_op, is_same_file
from .text_match import is_valid_filename

logger = logging.getLogger(__name__)

ConfirmOverwrite = Callable[[Path], bool]
RenameFunc = Callable[[Path, Path], bool]
ProgressCallback = Callable[[int, int, str], None]


@dataclass
class RenameResult:
    """Rename execution result"""
    success: List[RenamePreviewItem] = field(default_factory=list)
    failed: List[RenamePreviewItem] = field(default_factory=list)
    skipped: List[RenamePreviewItem] = field(default_factory=list)   # Overwrite declined

    @property
    def success_count(self) -> int:
        return len(self.success)

    @property
    def failed_count(self) -> int:
        return len(self.failed)

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)

    def summary(self) -> str:
        """Generate summary"""
        lines = [
            f"Execution Result:",
            f"  - Success: {self.success_count}",
            f"  - Failed: {self.failed_count}",
            f"  - Skipped: {self.skipped_count}",
        ]
        if self.failed:
            lines.append("Failure Details:")
            for item in self.failed[:10]:  # Show at most 10
                lines.append(f"  - {item.original_name} -> {item.candidate_name}: {item.error}")
            if len(self.failed) > 10:
                lines.append(f"  ... and {len(self.failed) - 10} more failures")
        return "\n".join(lines)


@dataclass
class _Op:
    item: RenamePreviewItem
    src: Path
    dst: Path
    overwrite: bool = False
    temp: Optional[Path] = None


def _generate_temp_name(original: Path) -> Path:
    """Generate temporary filename"""
    unique_id = uuid.uuid4().hex[:8]
    temp_name = f".__tmp_rename__{unique_id}__{original.name}"
    return original.parent / temp_name


def _key(path: Path, case_insensitive: bool) -> str:
    return str(path).casefold() if case_insensitive else str(path)


def _plan_ops(
    items: List[RenamePreviewItem],
    result: RenameResult,
    confirm_overwrite: Optional[ConfirmOverwrite],
    case_insensitive: bool,
) -> List[_Op]:
    """Pre-flight checks, duplicate targets and overwrite decisions"""
    ops: List[_Op] = []
    claimed = set()

    for item in items:
        src, dst = item.original_path, item.target_path

        error = check_rename_op(src, dst)
        if error is not None:
            item.mark_failed(error)
            result.failed.append(item)
            continue

        dst_key = _key(dst, case_insensitive)
        if dst_key in claimed:
            item.mark_failed(ConflictError("Another item of this batch is renamed to the same name", dst))
            result.failed.append(item)
            continue

        claimed.add(dst_key)
        ops.append(_Op(item=item, src=src, dst=dst))

    # Targets occupied on disk need a decision, unless another op of this
    # batch moves that file away. Declining an op keeps its source in place,
    # which can turn another target into a conflict: repeat until stable.
    decisions: Dict[str, bool] = {}
    while True:
        vacated = {_key(op.src, case_insensitive) for op in ops}
        declined = None

        for op in ops:
            if op.overwrite or not op.dst.exists() or is_same_file(op.src, op.dst):
                continue
            dst_key = _key(op.dst, case_insensitive)
            if dst_key in vacated:
                continue

            if dst_key not in decisions:
                accepted = bool(confirm_overwrite(op.dst)) if confirm_overwrite else False
                decisions[dst_key] = accepted
            if decisions[dst_key]:
                op.overwrite = True
            else:
                declined = op
                break

        if declined is None:
            break

        ops.remove(declined)
        result.skipped.append(declined.item)
        logger.info("Skipped %s: %s already exists", declined.src.name, declined.dst.name)

    return ops


def apply_renames(
    session: RenameSession,
    collection: IndexedCollection,
    confirm_overwrite: Optional[ConfirmOverwrite] = None,
    rename: RenameFunc = rename_file,
    replace: RenameFunc = replace_file,
    max_workers: int = 4,
    case_insensitive: Optional[bool] = None,
    progress_callback: Optional[ProgressCallback] = None,
    log_dir: Optional[Path] = None,
) -> RenameResult:
    """
    Commit the preview to disk (two-phase)

    Only items that changed and are not SUCCESS yet are processed. A failed
    item never aborts the batch; its error is stored on the item.

    Args:
        session: Rename session holding the preview items
        collection: Collection to update for succeeded items
        confirm_overwrite: Asked with the target path when it is already
                           occupied; None declines every overwrite
        rename: Rename primitive
        replace: Rename primitive used when an overwrite was accepted
        max_workers: Concurrent renames
        case_insensitive: Compare names case-insensitively (platform default)
        progress_callback: Progress callback (current, total, message)
        log_dir: Log directory (for saving execution logs)

    Returns:
        Execution result
    """
    session.check_usable()
    if case_insensitive is None:
        case_insensitive = platform.system() in ("Windows", "Darwin")

    result = RenameResult()
    items = session.pending_items()
    if not items:
        session.mark_committed_if_settled()
        return result

    for item in items:
        item.status = ItemStatus.PENDING
        item.error = None

    ops = _plan_ops(items, result, confirm_overwrite, case_insensitive)
    total = len(ops)
    lock = threading.Lock()
    done = [0]

    def report(msg: str) -> None:
        if progress_callback:
            with lock:
                done[0] += 1
                current = done[0]
            try:
                progress_callback(current, total * 2, msg)
            except Exception:
                logger.exception("Progress callback failed")

    def fail(op: _Op, error: BrowseError) -> None:
        op.item.mark_failed(error)
        with lock:
            result.failed.append(op.item)
        logger.warning("Rename failed %s -> %s: %s", op.src.name, op.dst.name, error)

    # Phase 1: Rename all to temporary names
    def phase1(op: _Op) -> None:
        temp_path = _generate_temp_name(op.src)
        try:
            if rename(op.src, temp_path) is False:
                raise IOFailureError("Rename was refused", op.src)
            op.temp = temp_path
        except OSError as e:
            fail(op, error_from_os(e, op.src))
        except BrowseError as e:
            fail(op, e)
        except Exception as e:
            fail(op, unexpected_error(e, op.src))
        report(f"[Phase 1] {op.src.name} -> temp name")

    # Phase 2: Rename from temporary names to final names
    def phase2(op: _Op) -> None:
        try:
            if not op.overwrite and op.dst.exists():
                raise ConflictError("Target already exists", op.dst)
            move = replace if op.overwrite else rename
            if move(op.temp, op.dst) is False:
                raise IOFailureError("Rename was refused", op.dst)
        except Exception as e:
            if isinstance(e, BrowseError):
                error = e
            elif isinstance(e, OSError):
                error = error_from_os(e, op.dst)
            else:
                error = unexpected_error(e, op.dst)
            # Try to restore
            try:
                rename(op.temp, op.src)
            except Exception as e2:
                logger.error("Could not restore %s from %s: %s", op.src, op.temp, e2)
                error = IOFailureError(f"{error.message} (restore also failed: {e2})", op.dst)
            fail(op, error)
            report(f"[Phase 2] failed {op.dst.name}")
            return

        with lock:
            try:
                collection.update(op.item.id, op.dst)
            except NotFoundError:
                # Entry was removed while the batch was running
                logger.warning("Id %d no longer in collection, renamed %s anyway", op.item.id, op.dst)
            op.item.mark_success(op.dst)
            result.success.append(op.item)
        report(f"[Phase 2] temp name -> {op.dst.name}")

    if ops:
        with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="rename") as pool:
            list(pool.map(phase1, ops))
            list(pool.map(phase2, [op for op in ops if op.temp is not None]))

    session.mark_committed_if_settled()
    logger.info("Rename batch done: %d succeeded, %d failed, %d skipped",
                result.success_count, result.failed_count, result.skipped_count)

    # Save execution result log
    if log_dir:
        save_result_log(result, log_dir)

    return result


def apply_async(
    session: RenameSession,
    collection: IndexedCollection,
    executor: Optional[Executor] = None,
    **kwargs,
) -> "Future[RenameResult]":
    """
    Run apply_renames() without blocking the caller

    Args:
        session: Rename session
        collection: Collection to update
        executor: Executor to run on (a private one-thread pool if None)
        **kwargs: Passed to apply_renames()

    Returns:
        Future resolving to the RenameResult
    """
    if executor is not None:
        return executor.submit(apply_renames, session, collection, **kwargs)

    own = ThreadPoolExecutor(max_workers=1, thread_name_prefix="rename-batch")
    future = own.submit(apply_renames, session, collection, **kwargs)
    own.shutdown(wait=False)
    return future


def rename_entry(
    collection: IndexedCollection,
    item_id: int,
    new_name: str,
    confirm_overwrite: Optional[ConfirmOverwrite] = None,
    rename: RenameFunc = rename_file,
    case_insensitive: Optional[bool] = None,
) -> Path:
    """
    Rename a single collection entry

    Args:
        collection: Collection holding the entry
        item_id: Id to rename (keeps its id)
        new_name: New file name, same directory
        confirm_overwrite: Asked when the target is occupied
        rename: Rename primitive
        case_insensitive: Compare names case-insensitively (platform default)

    Returns:
        New path

    Raises:
        NotFoundError: Id not in collection
        ValueError: new_name is not a valid file name
        ConflictError: Target occupied and overwrite declined
        BrowseError: Rename failed
    """
    valid, error = is_valid_filename(new_name)
    if not valid:
        raise ValueError(error)

    path = collection.get(item_id)
    item = RenamePreviewItem.from_path(item_id, path)
    item.candidate_name = new_name
    if not item.is_changed:
        return path

    session = RenameSession(items=[item])
    result = apply_renames(
        session, collection,
        confirm_overwrite=confirm_overwrite,
        rename=rename,
        max_workers=1,
        case_insensitive=case_insensitive,
    )
    if result.skipped:
        raise ConflictError("Target already exists", item.target_path)
    if item.status == ItemStatus.FAILED:
        raise item.error
    return item.original_path


def save_result_log(result: RenameResult, log_dir: Path) -> Path:
    """Save execution result log"""
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = log_dir / f"rename_result_{timestamp}_{uuid.uuid4().hex[:6]}.json"

    data = {
        "timestamp": timestamp,
        "success_count": result.success_count,
        "failed_count": result.failed_count,
        "skipped_count": result.skipped_count,
        "success": [
            {"id": item.id, "path": str(item.original_path)}
            for item in result.success
        ],
        "failed": [
            {"id": item.id, "src": str(item.original_path), "dst": item.candidate_name, "error": str(item.error)}
            for item in result.failed
        ],
        "skipped": [
            {"id": item.id, "src": str(item.original_path), "dst": item.candidate_name}
            for item in result.skipped
        ]
    }

    with open(log_file, 'w', encoding='utf-8') as f:
        json.dump(data, f, ensure_ascii=False, indent=2)

    return log_file
