import re
from pathlib import Path

from postsync.core.parse import parse_markdown
from postsync.core.pipeline import sync_file
from postsync.crud.snapshot import load_snapshot, save_snapshot
from postsync.crud.store import PostStore


def test_incremental_sync_across_runs(tmp_path: Path, options):
    """Each run loads the snapshot, syncs the file, and saves; identity and dates hold across runs."""
    source = tmp_path / "root" / "first.md"
    source.parent.mkdir()
    source.write_text("---\ntitle: My First Post\n---\n# H\nHello\n", encoding="utf-8")
    db_file = tmp_path / "zdata" / "data.json.zstd"

    def run():
        store = load_snapshot(db_file)
        result = sync_file(store, source, options)
        save_snapshot(store, db_file)
        return result, store.get(result.document.metadata.id)

    # new post -> created
    result1, post1 = run()
    assert result1.status == "created"
    assert post1.created_at == post1.updated_at
    assert re.fullmatch(r"/blog/posts/my-first-post-[0-9a-f]{8}", result1.document.metadata.path)
    assert parse_markdown(source.read_text(encoding="utf-8")).metadata.id == post1.id

    # same content -> unchanged
    result2, post2 = run()
    assert result2.status == "unchanged"
    assert post2.id == post1.id
    assert post2.content_hash == post1.content_hash
    assert post2.updated_at == post1.updated_at

    # changed body -> updated
    source.write_text(source.read_text(encoding="utf-8") + "\nMore\n", encoding="utf-8")
    result3, post3 = run()
    assert result3.status == "updated"
    assert post3.id == post1.id
    assert post3.content_hash != post1.content_hash
    assert post3.updated_at > post1.updated_at
    assert post3.created_at == post1.created_at
    assert len(load_snapshot(db_file)) == 1
