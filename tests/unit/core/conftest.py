"""Shared sources for core unit tests"""

import pytest


FULL_MD = """\
---
id: 5f0c6b7e9a8d4c3b2a1f0e9d8c7b6a59
title: Complete Post
date: 2024-01-02T03:04:05Z
path: /blog/posts/complete-post-0a0b0c0d
---

# Complete

Body with a horizontal rule below.

---

Footer paragraph.
"""

PARTIAL_MD = """\
---
title: My First Post
author: Jane
tags: [a, b]
---
# Heading

Body text.
"""

PLAIN_MD = """\
# No Front Matter

Just text.
"""


@pytest.fixture(name="full_md")
def full_md_fixture():
    return FULL_MD


@pytest.fixture(name="partial_md")
def partial_md_fixture():
    return PARTIAL_MD


@pytest.fixture(name="plain_md")
def plain_md_fixture():
    return PLAIN_MD


@pytest.fixture(name="write_source")
def write_source_fixture(tmp_path):
    """Write text to tmp_path/<name> and return the path."""
    def _write(text: str, name: str = "post.md"):
        path = tmp_path / name
        path.write_bytes(text.encode("utf-8"))
        return path
    return _write
