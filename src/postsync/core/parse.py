"""Source discovery, front matter extraction, and markdown-it rendering"""

import re
from pathlib import Path
from typing import Any, Iterable, Optional

import yaml
from markdown_it import MarkdownIt
from pydantic import ValidationError

from postsync.core.errors import ParseFailure
from postsync.core.models import Document, DocumentType, Metadata


FRONTMATTER_RE = re.compile(r'\A---[ \t]*\r?\n(.*?)^---[ \t]*(?:\r?\n|\Z)', re.DOTALL | re.MULTILINE)
MD_EXTENSIONS = ('.md', '.markdown')


def _make_parser(preset: str) -> MarkdownIt:
    """Build a MarkdownIt instance for the given preset name."""
    return MarkdownIt(preset, options_update={"linkify": False})


def split_frontmatter(text: str) -> tuple[Optional[str], str]:
    """Return (frontmatter_block, body). The block is None when text has no delimited header.

    The body is everything after the closing delimiter line, untouched.
    """
    m = FRONTMATTER_RE.match(text)
    if m is None:
        return None, text
    return m.group(1), text[m.end():]


def load_frontmatter(block: str) -> dict[str, Any]:
    """Parse a YAML front matter block into a mapping. Raises ValueError when malformed."""
    if not block.strip():
        return {}
    try:
        fm = yaml.safe_load(block)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML frontmatter: {e}") from e
    if fm is None:
        return {}
    if not isinstance(fm, dict):
        raise ValueError(f"Invalid YAML frontmatter: expected a mapping, got {type(fm).__name__}")
    return fm


def discover_files(root: Path, extensions: Iterable[str] = MD_EXTENSIONS) -> list[Path]:
    """Return sorted source files under root, or [root] if it is a matching file."""
    exts = {e.lower() for e in extensions}
    if root.is_file():
        return [root] if root.suffix.lower() in exts else []
    return sorted(p for p in root.rglob('*') if p.is_file() and p.suffix.lower() in exts)


def parse_markdown(text: str, path: str = "<string>", parser_config: str = 'gfm-like') -> Document:
    """Parse a markdown source into a Document.

    raw_source keeps the full text, front matter included, so a later write-back
    can replace the header and preserve the body byte-for-byte.
    """
    block, body = split_frontmatter(text)
    try:
        fm = load_frontmatter(block) if block is not None else {}
        metadata = Metadata.model_validate(fm)
    except ValidationError as e:
        raise ParseFailure(path, f"invalid metadata: {e}") from e
    except ValueError as e:
        raise ParseFailure(path, str(e)) from e

    return Document(
        type=DocumentType.markdown,
        raw_source=text,
        rendered_html=_make_parser(parser_config).render(body),
        metadata=metadata,
    )


def parse_source(path: Path, raw: bytes, parser_config: str = 'gfm-like') -> Document:
    """Decode raw bytes as UTF-8 and parse them as a markdown source."""
    try:
        text = raw.decode('utf-8')
    except UnicodeDecodeError as e:
        raise ParseFailure(path, f"not valid UTF-8: {e}") from e
    return parse_markdown(text, str(path), parser_config)
