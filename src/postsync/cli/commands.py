"""CLI command implementations"""

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer

from postsync.config import Settings, load_config
from postsync.core.errors import SnapshotError
from postsync.core.pipeline import SyncOptions, SyncReport, sync_tree
from postsync.crud.snapshot import dump_snapshot, load_snapshot, save_snapshot
from postsync.crud.store import PostStore
from postsync.util.fs import stage_assets


LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _settings(overrides: dict = None) -> Settings:
    """Load config with standard CLI error handling and configure logging from it."""
    try:
        settings = load_config(overrides=overrides)
    except ValueError as e:
        _fail(str(e))
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT, datefmt=LOG_DATEFMT)
    return settings


def _load(settings: Settings) -> PostStore:
    """Load the snapshot; a corrupt or unreadable snapshot aborts the command."""
    try:
        return load_snapshot(Path(settings.db_file))
    except SnapshotError as e:
        _fail("Cannot load snapshot", e)


def _echo_report(report: SyncReport) -> None:
    """Print per-file sync status, failures to stderr, and a summary line."""
    for status, path in report.changes:
        typer.echo(f"  {status}: {path}")
    for path, error in report.failures:
        typer.echo(f"  failed: {path}: {error.message}", err=True)
    typer.echo(
        f"Sync complete - "
        f"{report.counts['created']} created, "
        f"{report.counts['updated']} updated, "
        f"{report.counts['unchanged']} unchanged, "
        f"{len(report.failures)} failed"
    )


def build_cmd(
    root: Annotated[Optional[str], typer.Argument(help="Source tree to synchronize")] = None,
    db_file: Annotated[Optional[str], typer.Option("--db-file", help="Snapshot file")] = None,
    dist: Annotated[Optional[str], typer.Option("--dist-dir", help="Output directory")] = None,
    public: Annotated[Optional[str], typer.Option("--public-dir", help="Static asset directory")] = None,
    workers: Annotated[Optional[int], typer.Option("--workers", help="Source files processed concurrently")] = None,
    log_level: Annotated[Optional[str], typer.Option("--log-level", help="DEBUG, INFO, WARNING or ERROR")] = None,
    dump: Annotated[bool, typer.Option("--dump", help="Print the store as JSON when done")] = False,
    ):
    """Run a full build: load snapshot -> stage assets -> sync sources -> save snapshot."""
    settings = _settings(overrides={
        "root_dir": root, "db_file": db_file, "dist_dir": dist,
        "public_dir": public, "max_workers": workers, "log_level": log_level,
    })
    store = _load(settings)

    # --- assets ---
    try:
        copied = stage_assets(Path(settings.public_dir), Path(settings.dist_dir))
    except OSError as e:
        _fail("Asset staging failed", e)
    typer.echo(f"Staged {copied} static file(s) to {settings.dist_dir}/")

    # --- sync ---
    root_dir = Path(settings.root_dir)
    if not root_dir.exists():
        _fail(f"Source path not found: {root_dir}")
    options = SyncOptions(
        route_prefix=settings.route_prefix,
        root_dir=root_dir.name,
        suffix_bytes=settings.suffix_bytes,
        parser_config=settings.parser_config,
    )
    report = sync_tree(store, root_dir, options, settings.extensions, settings.max_workers)
    _echo_report(report)

    # --- save ---
    try:
        save_snapshot(store, Path(settings.db_file), settings.compression_level)
    except SnapshotError as e:
        _fail("Cannot save snapshot", e)
    typer.echo(f"Snapshot saved to {settings.db_file} ({len(store)} post(s))")

    if dump:
        typer.echo(dump_snapshot(store))


def list_cmd(
    db_file: Annotated[Optional[str], typer.Option("--db-file", help="Snapshot file")] = None,
    ):
    """List stored posts: id, URL path, title."""
    settings = _settings(overrides={"db_file": db_file})
    store = _load(settings)
    if not len(store):
        typer.echo("No posts found in snapshot.")
        raise typer.Exit(1)
    for post in sorted(store, key=lambda p: (p.created_at is None, p.created_at, p.id)):
        meta = post.main.metadata if post.main else None
        title = meta.title if meta else ""
        hidden = " (hidden)" if meta and meta.hidden else ""
        typer.echo(f"{post.id}  {post.url_path}  {title}{hidden}")


def dump_cmd(
    db_file: Annotated[Optional[str], typer.Option("--db-file", help="Snapshot file")] = None,
    ):
    """Print the decompressed snapshot as JSON."""
    settings = _settings(overrides={"db_file": db_file})
    typer.echo(dump_snapshot(_load(settings)))


def init_cmd(
    db_file: Annotated[Optional[str], typer.Option("--db-file", help="Snapshot file")] = None,
    ):
    """Create an empty snapshot if none exists."""
    settings = _settings(overrides={"db_file": db_file})
    path = Path(settings.db_file)
    if path.exists():
        typer.echo(f"Snapshot already exists at: {path}")
        return
    try:
        save_snapshot(PostStore(), path, settings.compression_level)
    except SnapshotError as e:
        _fail("Cannot create snapshot", e)
    typer.echo(f"Snapshot initialized at: {path}")
