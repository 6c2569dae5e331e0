"""Error taxonomy: per-file sync failures and fatal snapshot failures"""

from pathlib import Path
from typing import Union


PathLike = Union[str, Path]


class SyncError(Exception):
    """A single source file could not be synchronized. The run continues with the next file."""

    def __init__(self, path: PathLike, message: str):
        self.path = str(path)
        self.message = message
        super().__init__(f"{self.path}: {message}")


class ParseFailure(SyncError):
    """The content parser rejected the source."""


class InvalidSourceFormat(SyncError):
    """Front matter delimiters are missing or malformed, so metadata cannot be written back."""


class IOFailure(SyncError):
    """Reading, stat-ing or writing a source file failed."""


class SnapshotError(Exception):
    """The persisted snapshot could not be read or written. Always fatal."""

    def __init__(self, path: PathLike, message: str):
        self.path = str(path)
        self.message = message
        super().__init__(f"{self.path}: {message}")


class SnapshotCorrupt(SnapshotError):
    """The snapshot exists but fails to decompress or decode."""


class SnapshotWriteFailure(SnapshotError):
    """The temporary file could not be created, written or renamed over the snapshot."""
