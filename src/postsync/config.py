"""Application configuration: settings schema and postsync.yaml loader"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator


CONFIG_FILE = "postsync.yaml"


class Settings(BaseModel):
    root_dir:     str = Field(default="root",   description="Source tree of post files")
    public_dir:   str = Field(default="public", description="Static assets copied into dist_dir")
    dist_dir:     str = Field(default="dist",   description="Output directory, recreated on every build")
    db_file:      str = Field(default="zdata/data.json.zstd", description="Compressed snapshot of the post store")
    route_prefix: str = Field(default="/blog/posts", description="URL namespace for generated post paths")
    suffix_bytes: int = Field(default=4,  ge=1, description="Random bytes in the generated path suffix")
    compression_level: int = Field(default=19, ge=1, le=22, description="zstd level for the snapshot")
    max_workers:  int = Field(default=1,  ge=1, description="Source files processed concurrently")
    extensions:   list[str] = Field(default=[".md", ".markdown"], description="Source file suffixes")
    parser_config: str = Field(default="gfm-like", description="MarkdownIt parser preset name")
    log_level:    str = Field(default="INFO", pattern="^(DEBUG|INFO|WARNING|ERROR)$")

    @field_validator("extensions", mode="before")
    @classmethod
    def _split_extensions(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [e.strip() for e in value.split(",") if e.strip()]
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_level(cls, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value


def load_config(overrides: dict[str, Any] = None) -> Settings:
    """Load Settings from postsync.yaml, then POSTSYNC_<FIELD> env vars, then non-None CLI overrides."""
    data: dict[str, Any] = {}
    if Path(CONFIG_FILE).exists():
        try:
            data = yaml.safe_load(Path(CONFIG_FILE).read_text()) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid {CONFIG_FILE}: {e}") from e

    for name in Settings.model_fields:
        if val := os.getenv(f"POSTSYNC_{name.upper()}"):
            data[name] = val

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**data)
