"""Synchronization pipeline: parse, normalize, hash and merge source files into the post store"""

import logging
import secrets
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional

from postsync.core.errors import IOFailure, SyncError
from postsync.core.models import Document
from postsync.core.normalize import Clock, normalize_document, utc_now
from postsync.core.parse import MD_EXTENSIONS, discover_files, parse_source
from postsync.core.utils.hashing import hash_document
from postsync.core.utils.slug import Entropy
from postsync.crud.store import PostStore


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SyncOptions:
    """Path rules, parser preset, and the injectable clock and entropy source."""
    route_prefix: str = "/blog/posts"
    root_dir: str = "root"
    suffix_bytes: int = 4
    parser_config: str = "gfm-like"
    clock: Clock = utc_now
    entropy: Entropy = secrets.token_bytes


@dataclass(frozen=True)
class SyncResult:
    document: Document
    status: str                     # created, updated or unchanged


@dataclass
class SyncReport:
    """Outcome of a tree sync: per-status counts, changed files, and isolated failures."""
    counts: dict[str, int] = field(default_factory=lambda: {"created": 0, "updated": 0, "unchanged": 0})
    changes: list[tuple[str, str]] = field(default_factory=list)
    failures: list[tuple[str, SyncError]] = field(default_factory=list)

    @property
    def total(self) -> int:
        return sum(self.counts.values()) + len(self.failures)


def sync_document(
    store: PostStore,
    path: Path,
    raw: bytes,
    options: SyncOptions = SyncOptions(),
    ) -> SyncResult:
    """Merge one source file into the store, keyed by its metadata id.

    file_path, url_path and main always take the freshly parsed values; updated_at
    advances only when the document digest differs from the stored one.
    Raises ParseFailure, InvalidSourceFormat or IOFailure; the store is untouched then.
    """
    logger.debug("rendering markdown file %s (%d bytes)", path, len(raw))
    document = parse_source(path, raw, options.parser_config)
    normalize_document(
        path, document, options.clock, options.entropy,
        options.route_prefix, options.root_dir, options.suffix_bytes,
    )
    digest = hash_document(document)
    now = options.clock()

    with store.lock:
        post, created = store.get_or_create(document.metadata.id, now)
        post.file_path = str(path)
        post.url_path = document.metadata.path
        post.main = document
        if post.content_hash == digest:
            status = "unchanged"
        else:
            post.content_hash = digest
            post.updated_at = now
            status = "created" if created else "updated"

    logger.debug("merged %s into post %s (%s)", path, post.id, status)
    return SyncResult(document=document, status=status)


def sync_file(store: PostStore, path: Path, options: SyncOptions = SyncOptions()) -> SyncResult:
    """Read path from disk and sync it. Raises IOFailure when the file cannot be read."""
    try:
        raw = path.read_bytes()
    except OSError as e:
        raise IOFailure(path, f"failed to read source: {e}") from e
    return sync_document(store, path, raw, options)


def _attempt(store: PostStore, path: Path, options: SyncOptions) -> tuple[Path, Optional[SyncResult], Optional[SyncError]]:
    try:
        return path, sync_file(store, path, options), None
    except SyncError as e:
        return path, None, e


def sync_tree(
    store: PostStore,
    root: Path,
    options: SyncOptions = SyncOptions(),
    extensions: Iterable[str] = MD_EXTENSIONS,
    max_workers: int = 1,
    ) -> SyncReport:
    """Sync every source file under root. Per-file failures are collected, never raised.

    With max_workers > 1 files are processed on a thread pool; the store lock
    serializes the merge step.
    """
    files = discover_files(root, extensions)
    logger.info("synchronizing %d source file(s) under %s", len(files), root)

    if max_workers > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            outcomes = list(pool.map(lambda p: _attempt(store, p, options), files))
    else:
        outcomes = [_attempt(store, p, options) for p in files]

    report = SyncReport()
    for path, result, error in outcomes:
        if error is not None:
            logger.error("failed to process %s: %s", path, error.message)
            report.failures.append((str(path), error))
            continue
        report.counts[result.status] += 1
        if result.status != "unchanged":
            report.changes.append((result.status, str(path)))

    logger.info(
        "sync complete: %d created, %d updated, %d unchanged, %d failed",
        report.counts["created"], report.counts["updated"], report.counts["unchanged"], len(report.failures),
    )
    return report
