"""
thumbnails.py - Thumbnail Materializer

Builds the collection and its thumbnail entries off the calling thread and
installs both atomically. Newer requests supersede older ones: a result
whose generation is stale is dropped.
"""

from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple
import logging
import threading

from PIL import Image, UnidentifiedImageError

from .collection import IndexedCollection
from .errors import BrowseError
from .models_fs import ThumbnailEntry, ThumbnailStatus

logger = logging.getLogger(__name__)

Thumbnails = Dict[int, ThumbnailEntry]
InstallFunc = Callable[["MaterializeResult"], bool]
DecodeFunc = Callable[[int, Path, Tuple[int, int]], ThumbnailEntry]


def decode_thumbnail(item_id: int, path: Path, size: Tuple[int, int]) -> ThumbnailEntry:
    """
    Decode a preview of the image at path

    Args:
        item_id: Collection id of the image
        path: Image file
        size: Bounding box (width, height) of the preview

    Returns:
        ThumbnailEntry; decode failures are stored in its error field
    """
    try:
        with Image.open(path) as img:
            img.thumbnail(size)
            return ThumbnailEntry(id=item_id, path=path, size=img.size)
    except (OSError, UnidentifiedImageError, Image.DecompressionBombError, ValueError) as e:
        logger.debug("Cannot decode %s: %s", path, e)
        return ThumbnailEntry(id=item_id, path=path, error=str(e) or e.__class__.__name__)


@dataclass
class MaterializeResult:
    """Outcome of one materialization run"""
    generation: int
    applied: bool = False                 # False when superseded or failed
    collection: Optional[IndexedCollection] = None
    thumbnails: Thumbnails = field(default_factory=dict)
    error: Optional[BaseException] = None
    context: Any = None                   # Caller data passed to materialize()


class ThumbnailMaterializer:
    """
    Asynchronous batch builder for collection + thumbnails

    Status is coarse (one flag for the whole batch). On failure the previous
    state is kept and the status becomes ERROR. The internal lock is only
    held for counter and status updates, never across loading or install.
    """

    def __init__(
        self,
        install: InstallFunc,
        thumbnail_size: Tuple[int, int] = (128, 128),
        max_workers: int = 4,
        decode: DecodeFunc = decode_thumbnail,
    ):
        """
        Args:
            install: Called with the MaterializeResult of a run that was
                     current when it finished; returns False when it found
                     the run superseded (see is_current) and installed nothing
            thumbnail_size: Preview bounding box
            max_workers: Decoder threads
            decode: Decode primitive (item_id, path, size) -> ThumbnailEntry
        """
        self._install = install
        self.thumbnail_size = thumbnail_size
        self._decode = decode
        # Batches may overlap (a new one starts while an old one still scans);
        # the decoder pool is shared by all of them
        self._runner = ThreadPoolExecutor(max_workers=2, thread_name_prefix="materialize")
        self._decoders = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="thumb")
        self._lock = threading.Lock()
        self._generation = 0
        self._status = ThumbnailStatus.IDLE
        self.last_error: Optional[BaseException] = None

    @property
    def status(self) -> ThumbnailStatus:
        with self._lock:
            return self._status

    @property
    def generation(self) -> int:
        with self._lock:
            return self._generation

    @property
    def busy(self) -> bool:
        return self.status == ThumbnailStatus.LOADING

    def is_current(self, generation: int) -> bool:
        """True while no newer run (or invalidate) has been started"""
        with self._lock:
            return generation == self._generation

    def materialize(self, load_paths: Callable[[], Sequence[Path]], context: Any = None) -> "Future[MaterializeResult]":
        """
        Start a new run; any run still in flight is superseded

        Args:
            load_paths: Blocking step producing the ordered paths (a scan)
            context: Stored on the result and handed to install with it

        Returns:
            Future resolving to the MaterializeResult of this run
        """
        with self._lock:
            self._generation += 1
            generation = self._generation
            self._status = ThumbnailStatus.LOADING

        logger.debug("Materialization %d started", generation)
        return self._runner.submit(self._run, generation, load_paths, context)

    def materialize_paths(self, paths: Sequence[Path], context: Any = None) -> "Future[MaterializeResult]":
        """Start a run over a fixed path list"""
        paths = [Path(p) for p in paths]
        return self.materialize(lambda: paths, context)

    def _fail(self, result: MaterializeResult, error: BaseException) -> MaterializeResult:
        result.error = error
        with self._lock:
            if result.generation == self._generation:
                self._status = ThumbnailStatus.ERROR
                self.last_error = error
        return result

    def _run(self, generation: int, load_paths: Callable[[], Sequence[Path]], context: Any) -> MaterializeResult:
        result = MaterializeResult(generation=generation, context=context)
        try:
            paths = list(load_paths())
            if not self.is_current(generation):
                logger.debug("Materialization %d superseded before decoding", generation)
                return result

            collection = IndexedCollection.build(paths)
            items = collection.items()
            entries: List[ThumbnailEntry] = list(self._decoders.map(
                lambda pair: self._decode(pair[0], pair[1], self.thumbnail_size), items
            ))
            result.collection = collection
            result.thumbnails = {entry.id: entry for entry in entries}
        except (BrowseError, OSError) as e:
            logger.warning("Materialization %d failed: %s", generation, e)
            return self._fail(result, e)
        except Exception as e:
            logger.exception("Materialization %d crashed", generation)
            return self._fail(result, e)

        # Stale results never overwrite newer state
        if not self.is_current(generation):
            logger.debug("Materialization %d superseded, result discarded", generation)
            return result

        try:
            installed = self._install(result)
        except Exception as e:
            logger.exception("Materialization %d could not be installed", generation)
            return self._fail(result, e)
        if not installed:
            logger.debug("Materialization %d superseded during install", generation)
            return result

        result.applied = True
        with self._lock:
            if generation == self._generation:
                self._status = ThumbnailStatus.READY
                self.last_error = None

        logger.debug("Materialization %d installed: %d entries", generation, len(result.thumbnails))
        return result

    def invalidate(self) -> None:
        """Supersede any run in flight without starting a new one"""
        with self._lock:
            self._generation += 1
            if self._status == ThumbnailStatus.LOADING:
                self._status = ThumbnailStatus.IDLE

    def shutdown(self, wait: bool = True) -> None:
        self.invalidate()
        self._runner.shutdown(wait=wait)
        self._decoders.shutdown(wait=wait)
