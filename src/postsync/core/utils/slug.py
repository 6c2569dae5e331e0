"""URL path generation for posts"""

import re
import secrets
from typing import Callable


Entropy = Callable[[int], bytes]

UNSAFE_RE = re.compile(r"[\s{}|\\^~\[\]'\"`/]")
HYPHEN_RUN_RE = re.compile(r"-{2,}")


def slugify(title: str, root_dir: str = "root") -> str:
    """Convert a title to a lowercase slug with URL-unsafe characters folded into single hyphens."""
    text = title
    if root_dir and (text == root_dir or text.startswith(root_dir + "/")):
        text = text[len(root_dir):]
    text = text.lstrip("/").lower()
    text = UNSAFE_RE.sub("-", text)
    return HYPHEN_RUN_RE.sub("-", text).strip("-")


def generate_path(
    title: str,
    prefix: str = "/blog/posts",
    root_dir: str = "root",
    suffix_bytes: int = 4,
    entropy: Entropy = secrets.token_bytes,
    ) -> str:
    """Return '<prefix>/<slug>-<hex>'; the random hex suffix keeps identical titles apart.

    An empty slug yields '<prefix>/<hex>'. Never raises for any title.
    """
    slug = slugify(title, root_dir)
    suffix = entropy(suffix_bytes).hex()
    name = f"{slug}-{suffix}" if slug else suffix
    return f"{prefix.rstrip('/')}/{name}"
