"""Stream file access: listing, reading and validating the per-episode JSON files."""

import json
import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from threading import Lock
from typing import List, Optional, Tuple

from pydantic import ValidationError

from ..constants.paths import STREAM_FILENAME_PATTERN, STREAM_PLACEHOLDER_FILENAME
from ..errors import StreamDirectoryError
from ..models.episode import AggregatedEpisode, RawRecord
from ..processors.episodes import aggregate

logger = logging.getLogger(__name__)

# (filename, mtime_ns, size) for every stream file
Snapshot = Tuple[Tuple[str, int, int], ...]


def is_stream_filename(name: str) -> bool:
    """Check whether a filename follows the nine-digit ``NNNNNNNNN.json`` scheme."""
    return name != STREAM_PLACEHOLDER_FILENAME and bool(STREAM_FILENAME_PATTERN.match(name))


def list_stream_files(stream_dir: Path) -> List[Path]:
    """
    List stream files in lexicographic filename order.

    Args:
        stream_dir: Directory holding the stream files

    Returns:
        Sorted list of stream file paths

    Raises:
        StreamDirectoryError: If the directory cannot be listed
    """
    try:
        names = [entry.name for entry in stream_dir.iterdir() if entry.is_file()]
    except OSError as e:
        logger.error("Error reading stream directory %s: %s", stream_dir, e, exc_info=True)
        raise StreamDirectoryError("Failed to read JSON files directory") from e

    return [stream_dir / name for name in sorted(names) if is_stream_filename(name)]


def read_stream_file(path: Path) -> List[RawRecord]:
    """
    Read one stream file holding a record object or a list of records.

    A file that cannot be read or parsed yields no records. Records that fail
    validation are dropped individually. Both cases are logged.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.warning("Error reading file %s: %s", path.name, e)
        return []

    if isinstance(data, dict):
        items = [data]
    elif isinstance(data, list):
        items = data
    else:
        logger.warning("Error reading file %s: expected an object or a list, got %s", path.name, type(data).__name__)
        return []

    records: List[RawRecord] = []
    for position, item in enumerate(items):
        try:
            records.append(RawRecord.model_validate(item))
        except ValidationError as e:
            logger.warning("Skipping record %d in %s: %s", position, path.name, e.errors()[0]["msg"])
    return records


class StreamStore:
    """
    Loads and aggregates the stream files of one directory.

    Every call re-reads the directory. With ``cache`` enabled the aggregated
    episodes are reused for as long as no stream file has been added, removed
    or changed in size or modification time.
    """

    def __init__(self, stream_dir: Path, read_workers: int = 8, cache: bool = False):
        self.stream_dir = Path(stream_dir)
        self.read_workers = read_workers
        self.cache = cache
        self._lock = Lock()
        self._snapshot: Optional[Snapshot] = None
        self._episodes: List[AggregatedEpisode] = []

    def load_records(self, paths: Optional[List[Path]] = None) -> List[RawRecord]:
        """Read every stream file and flatten the records, keeping filename order."""
        if paths is None:
            paths = list_stream_files(self.stream_dir)
        if not paths:
            return []

        with ThreadPoolExecutor(max_workers=min(self.read_workers, len(paths))) as executor:
            per_file = list(executor.map(read_stream_file, paths))

        return [record for records in per_file for record in records]

    def episodes(self) -> List[AggregatedEpisode]:
        """Return the aggregated episodes of the directory."""
        paths = list_stream_files(self.stream_dir)

        if not self.cache:
            return aggregate(self.load_records(paths))

        snapshot = self._take_snapshot(paths)
        with self._lock:
            if snapshot == self._snapshot:
                logger.debug("Stream directory unchanged, reusing %d episodes", len(self._episodes))
                return self._episodes

            episodes = aggregate(self.load_records(paths))
            self._snapshot = snapshot
            self._episodes = episodes
            return episodes

    def _take_snapshot(self, paths: List[Path]) -> Snapshot:
        entries = []
        for path in paths:
            try:
                stat = path.stat()
            except OSError:
                # Vanished between listing and stat; the next read will skip it too
                continue
            entries.append((path.name, stat.st_mtime_ns, stat.st_size))
        return tuple(entries)
