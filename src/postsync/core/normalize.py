"""Metadata normalization: assign missing id/date/path and write the front matter back"""

import logging
import os
import secrets
import stat
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable

import yaml

from postsync.core.errors import InvalidSourceFormat, IOFailure
from postsync.core.models import Document, DocumentType, Metadata
from postsync.core.parse import load_frontmatter, split_frontmatter
from postsync.core.utils.slug import Entropy, generate_path


logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

ID_BYTES = 16
TMP_SUFFIX = ".tmp"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def random_id(entropy: Entropy = secrets.token_bytes) -> str:
    """Return a fresh opaque post identifier (32 hex chars)."""
    return entropy(ID_BYTES).hex()


def fill_metadata(
    metadata: Metadata,
    clock: Clock = utc_now,
    entropy: Entropy = secrets.token_bytes,
    route_prefix: str = "/blog/posts",
    root_dir: str = "root",
    suffix_bytes: int = 4,
    ) -> list[str]:
    """Assign id, date and path where missing. Returns the names of the fields assigned.

    Present values are never replaced, so once all three are set this is a no-op.
    """
    filled = []
    if not metadata.id:
        metadata.id = random_id(entropy)
        filled.append("id")
    if metadata.date is None:
        metadata.date = clock().astimezone(timezone.utc).replace(microsecond=0)
        filled.append("date")
    if not metadata.path:
        metadata.path = generate_path(metadata.title, route_prefix, root_dir, suffix_bytes, entropy)
        filled.append("path")
    return filled


def rewrite_frontmatter(source: str, metadata: Metadata) -> str:
    """Replace the front matter of source with metadata, keeping the body byte-for-byte.

    Keys the Metadata model does not know are carried over after the known fields.
    Raises ValueError if source does not open with a delimited front matter block.
    """
    block, body = split_frontmatter(source)
    if block is None:
        raise ValueError("front matter delimiters '---' not found")
    known = Metadata.field_keys()
    extra = {k: v for k, v in load_frontmatter(block).items() if k not in known}
    fields = {**metadata.model_dump(), **extra}
    header = yaml.safe_dump(fields, default_flow_style=False, allow_unicode=True, sort_keys=False)
    return f"---\n{header}---\n{body}"


def write_back(path: Path, document: Document) -> None:
    """Rewrite the source file at path with the document's metadata, preserving its mode bits.

    The new text is staged in a sibling temp file and renamed over path, so a failed
    write leaves the source untouched. On success document.raw_source is updated to
    the bytes now on disk.
    """
    try:
        updated = rewrite_frontmatter(document.raw_source, document.metadata)
    except ValueError as e:
        raise InvalidSourceFormat(path, str(e)) from e

    path = Path(path)
    tmp = path.with_name(path.name + TMP_SUFFIX)
    try:
        mode = stat.S_IMODE(os.stat(path).st_mode)
        fd = os.open(tmp, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o600)
    except FileExistsError as e:
        raise IOFailure(path, f"temporary file {tmp} already exists") from e
    except OSError as e:
        raise IOFailure(path, f"failed to write metadata back: {e}") from e

    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(updated.encode("utf-8"))
            fh.flush()
            os.fsync(fh.fileno())
        os.chmod(tmp, mode)
        os.replace(tmp, path)
    except OSError as e:
        tmp.unlink(missing_ok=True)
        raise IOFailure(path, f"failed to write metadata back: {e}") from e

    document.raw_source = updated
    logger.debug("saved updated document %s", path)


def normalize_document(
    path: Path,
    document: Document,
    clock: Clock = utc_now,
    entropy: Entropy = secrets.token_bytes,
    route_prefix: str = "/blog/posts",
    root_dir: str = "root",
    suffix_bytes: int = 4,
    ) -> bool:
    """Fill missing metadata and persist it to the source file. Returns True if anything changed.

    Only markdown documents are written back; other types keep the change in memory.
    """
    filled = fill_metadata(document.metadata, clock, entropy, route_prefix, root_dir, suffix_bytes)
    if not filled:
        return False

    logger.debug("assigned %s to document %s", ", ".join(filled), path)
    if document.type is DocumentType.markdown:
        write_back(path, document)
    else:
        logger.debug("skipping write-back for %s document %s", document.type.value, path)
    return True
