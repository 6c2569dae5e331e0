"""Unit tests for crud/snapshot.py"""

import json
import os

import pytest
import zstandard as zstd

from postsync.core.errors import SnapshotCorrupt, SnapshotWriteFailure
from postsync.crud.snapshot import dump_snapshot, load_snapshot, save_snapshot, temp_path
from postsync.crud.store import PostStore


class SimulatedCrash(BaseException):
    """Stands in for the process being killed; not caught by save_snapshot."""


def _write_raw(path, payload: bytes, **compressor_kwargs):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(zstd.ZstdCompressor(**compressor_kwargs).compress(payload))


# --- load ---

def test_load_missing_snapshot_is_empty(db_file):
    store = load_snapshot(db_file)
    assert len(store) == 0
    assert not db_file.exists()


@pytest.mark.parametrize("payload", [b"{}", b'{"posts": null}', b'{"posts": {}}', b"null"])
def test_load_empty_posts_normalized(db_file, payload):
    _write_raw(db_file, payload)
    assert load_snapshot(db_file).posts == {}


def test_load_streaming_frame_without_content_size(db_file):
    """Frames written by a streaming encoder carry no content size."""
    _write_raw(db_file, b'{"posts": {"x": {"id": "x"}}}', write_content_size=False)
    assert "x" in load_snapshot(db_file)


@pytest.mark.parametrize("raw", [b"", b"not zstd at all", zstd.ZstdCompressor().compress(b"{broken json")])
def test_load_corrupt_snapshot_is_fatal(db_file, raw):
    db_file.parent.mkdir(parents=True)
    db_file.write_bytes(raw)
    with pytest.raises(SnapshotCorrupt):
        load_snapshot(db_file)


def test_load_invalid_structure_is_corrupt(db_file):
    _write_raw(db_file, b'{"posts": {"x": {"title": "missing id"}}}')
    with pytest.raises(SnapshotCorrupt):
        load_snapshot(db_file)


# --- save ---

def test_save_then_load_round_trip(store, post, db_file):
    save_snapshot(store, db_file)
    restored = load_snapshot(db_file)
    assert restored.get(post.id) == post
    assert not temp_path(db_file).exists()


def test_saved_payload_is_indented_json_without_empty_fields(store, db_file):
    save_snapshot(store, db_file, level=3)
    payload = zstd.ZstdDecompressor().decompressobj().decompress(db_file.read_bytes())
    assert payload.decode("utf-8") == dump_snapshot(store)
    data = json.loads(payload)
    entry = data["posts"]["p1"]
    assert set(entry) == {"id", "file_path", "url_path", "content_hash", "created_at", "updated_at", "main"}
    assert "author" not in entry["main"]["metadata"]
    assert entry["main"]["type"] == "markdown"


def test_save_empty_store(db_file):
    save_snapshot(PostStore(), db_file)
    assert json.loads(zstd.ZstdDecompressor().decompressobj().decompress(db_file.read_bytes())) == {"posts": {}}


def test_save_refuses_existing_temp_file(store, db_file):
    save_snapshot(PostStore(), db_file)
    before = db_file.read_bytes()
    temp_path(db_file).write_bytes(b"in progress")

    with pytest.raises(SnapshotWriteFailure, match="already exists"):
        save_snapshot(store, db_file)
    assert db_file.read_bytes() == before
    assert temp_path(db_file).read_bytes() == b"in progress"


def test_crash_before_rename_keeps_previous_snapshot(store, db_file, monkeypatch):
    save_snapshot(PostStore(), db_file)
    before = db_file.read_bytes()

    def crash(src, dst):
        raise SimulatedCrash()

    monkeypatch.setattr(os, "replace", crash)
    with pytest.raises(SimulatedCrash):
        save_snapshot(store, db_file)
    monkeypatch.undo()

    assert db_file.read_bytes() == before
    assert len(load_snapshot(db_file)) == 0
    # the orphaned temp file blocks the next save instead of being overwritten
    assert temp_path(db_file).exists()
    with pytest.raises(SnapshotWriteFailure):
        save_snapshot(store, db_file)


def test_crash_after_rename_leaves_new_snapshot(store, post, db_file):
    save_snapshot(PostStore(), db_file)
    save_snapshot(store, db_file)
    assert load_snapshot(db_file).get(post.id) == post


def test_rename_failure_cleans_temp_file(store, db_file, monkeypatch):
    save_snapshot(PostStore(), db_file)
    before = db_file.read_bytes()

    def fail(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr(os, "replace", fail)
    with pytest.raises(SnapshotWriteFailure, match="disk full"):
        save_snapshot(store, db_file)
    monkeypatch.undo()

    assert db_file.read_bytes() == before
    assert not temp_path(db_file).exists()
