"""Shared fixtures for crud unit tests"""

from datetime import datetime, timezone

import pytest

from postsync.core.models import Document, DocumentType, Metadata, Post
from postsync.crud.store import PostStore


NOW = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture(name="post")
def post_fixture():
    """A fully populated Post as produced by a sync."""
    meta = Metadata(id="p1", title="Hello", date=NOW, path="/blog/posts/hello-00000000")
    return Post(
        id="p1",
        file_path="root/hello.md",
        url_path=meta.path,
        content_hash="a" * 64,
        created_at=NOW,
        updated_at=NOW,
        main=Document(type=DocumentType.markdown, raw_source="---\nid: p1\n---\nHi\n",
                      rendered_html="<p>Hi</p>\n", metadata=meta),
    )


@pytest.fixture(name="store")
def store_fixture(post):
    return PostStore(posts={post.id: post})


@pytest.fixture(name="db_file")
def db_file_fixture(tmp_path):
    return tmp_path / "zdata" / "data.json.zstd"
