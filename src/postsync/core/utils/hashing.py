"""SHA-256 content digests for document change detection"""

import hashlib
from datetime import datetime, timezone
from typing import Optional

from postsync.core.models import Document, Metadata


DATE_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def _digest(*fields: str) -> str:
    """Hex SHA-256 over length-prefixed UTF-8 fields, so field boundaries cannot shift."""
    h = hashlib.sha256()
    for value in fields:
        data = value.encode("utf-8")
        h.update(len(data).to_bytes(8, "big"))
        h.update(data)
    return h.hexdigest()


def format_date(value: Optional[datetime]) -> str:
    """RFC 3339 UTC timestamp at second precision; empty string for a missing date."""
    if value is None:
        return ""
    return value.astimezone(timezone.utc).strftime(DATE_FORMAT)


def hash_metadata(metadata: Metadata) -> str:
    return _digest(
        metadata.id,
        metadata.title,
        metadata.author,
        metadata.description,
        format_date(metadata.date),
        metadata.path,
        metadata.package_ref,
        metadata.canonical,
        "true" if metadata.hidden else "false",
    )


def hash_document(document: Document) -> str:
    """Digest of (type, raw source, rendered HTML, metadata digest). Matches a 64-char hex column."""
    return _digest(
        document.type.value,
        document.raw_source,
        document.rendered_html,
        hash_metadata(document.metadata),
    )
