"""Snapshot persistence: load and atomically save the zstd-compressed JSON post store"""

import json
import logging
import os
from pathlib import Path

import zstandard as zstd

from postsync.core.errors import SnapshotCorrupt, SnapshotError, SnapshotWriteFailure
from postsync.core.models import Snapshot
from postsync.crud.store import PostStore


logger = logging.getLogger(__name__)

TMP_SUFFIX = ".tmp"
DEFAULT_LEVEL = 19


def temp_path(path: Path) -> Path:
    """Sibling temp file the next snapshot is staged in before the rename."""
    return path.with_name(path.name + TMP_SUFFIX)


def dump_snapshot(store: PostStore) -> str:
    """Return the store as indented JSON, the same encoding that is compressed to disk."""
    with store.lock:
        data = store.to_snapshot().model_dump(mode="json")
    return json.dumps(data, indent=2, ensure_ascii=False)


def load_snapshot(path: Path) -> PostStore:
    """Load the store from path; a missing file yields an empty store.

    Raises SnapshotCorrupt if the file fails to decompress or decode, so a run never
    proceeds with an empty store over existing data.
    """
    try:
        compressed = path.read_bytes()
    except FileNotFoundError:
        logger.info("snapshot %s does not exist, starting with an empty store", path)
        return PostStore()
    except OSError as e:
        raise SnapshotError(path, f"failed to read snapshot: {e}") from e

    try:
        # decompressobj also accepts frames written without a content size
        payload = zstd.ZstdDecompressor().decompressobj().decompress(compressed)
    except zstd.ZstdError as e:
        raise SnapshotCorrupt(path, f"failed to decompress snapshot: {e}") from e

    try:
        data = json.loads(payload)
        snapshot = Snapshot.model_validate({} if data is None else data)
    except ValueError as e:
        raise SnapshotCorrupt(path, f"failed to decode snapshot: {e}") from e

    store = PostStore.from_snapshot(snapshot)
    logger.info("loaded %d post(s) from snapshot %s", len(store), path)
    return store


def save_snapshot(store: PostStore, path: Path, level: int = DEFAULT_LEVEL) -> None:
    """Write the store to a fresh temp file beside path, then rename it over path.

    The temp file is created exclusively; a leftover from a crashed or concurrent run
    raises SnapshotWriteFailure instead of being overwritten. A crash before the rename
    leaves the previous snapshot intact.
    """
    tmp = temp_path(path)
    compressed = zstd.ZstdCompressor(level=level).compress(dump_snapshot(store).encode("utf-8"))

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(tmp, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o644)
    except FileExistsError as e:
        raise SnapshotWriteFailure(
            path, f"temporary file {tmp} already exists; another run is in progress or a previous run crashed"
        ) from e
    except OSError as e:
        raise SnapshotWriteFailure(path, f"failed to create temporary file {tmp}: {e}") from e

    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(compressed)
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(tmp, path)
    except OSError as e:
        tmp.unlink(missing_ok=True)
        raise SnapshotWriteFailure(path, f"failed to write snapshot: {e}") from e

    logger.info("snapshot %s updated (%d post(s))", path, len(store))
