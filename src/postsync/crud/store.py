"""In-memory post store keyed by post id"""

import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterator

from postsync.core.models import Post, Snapshot


@dataclass
class PostStore:
    """Mapping from post id to Post. Lookups are by id only.

    lock guards the read-modify-insert sequence when files are synced concurrently.
    """
    posts: dict[str, Post] = field(default_factory=dict)
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def __len__(self) -> int:
        return len(self.posts)

    def __contains__(self, post_id: str) -> bool:
        return post_id in self.posts

    def __iter__(self) -> Iterator[Post]:
        return iter(self.posts.values())

    def get(self, post_id: str) -> Post | None:
        return self.posts.get(post_id)

    def get_or_create(self, post_id: str, now: datetime) -> tuple[Post, bool]:
        """Return (post, created). A new post starts with created_at == updated_at == now."""
        post = self.posts.get(post_id)
        if post is not None:
            return post, False
        post = Post(id=post_id, created_at=now, updated_at=now)
        self.posts[post_id] = post
        return post, True

    def to_snapshot(self) -> Snapshot:
        return Snapshot(posts=self.posts)

    @classmethod
    def from_snapshot(cls, snapshot: Snapshot) -> "PostStore":
        return cls(posts=dict(snapshot.posts))
