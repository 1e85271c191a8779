"""Configuration models for Logquartz."""

import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator

MAX_DEFAULT_WORKERS = 8


def default_workers() -> int:
    """CPU count capped at eight."""
    return max(1, min(os.cpu_count() or 1, MAX_DEFAULT_WORKERS))


class SiteConfig(BaseModel):
    """Site-level overrides for values otherwise read from logseq/config.edn."""

    home_page: Optional[str] = Field(
        default=None,
        description="Page copied to index.md (default: :default-home page)"
    )

    title: Optional[str] = Field(
        default=None,
        description="Site title (default: :meta/title, then the home page name)"
    )

    favorites: Optional[list[str]] = Field(
        default=None,
        description="Favorite page names (default: :favorites list)"
    )

    model_config = {"frozen": True}


class PublishConfig(BaseModel):
    """Root configuration for one publishing run."""

    graph_path: Path = Field(
        ...,
        description="Path to Logseq graph directory"
    )

    output_dir: Path = Field(
        default=Path("quartz-content"),
        description="Quartz content directory to write"
    )

    include_private: bool = Field(
        default=False,
        description="Publish pages marked private:: true"
    )

    create_stubs: bool = Field(
        default=False,
        description="Write placeholder pages for links without a target"
    )

    workers: int = Field(
        default_factory=default_workers,
        ge=1,
        le=64,
        description="Number of threads transforming pages"
    )

    journals_prefix: str = Field(
        default="journals",
        min_length=1,
        description="Name prefix of journal entries in the index and output"
    )

    site: SiteConfig = Field(default_factory=SiteConfig, description="Site overrides")

    @field_validator("graph_path")
    @classmethod
    def validate_graph_path(cls, v: Path) -> Path:
        """Validate graph path exists and is a directory."""
        path = Path(v).expanduser()
        if not path.exists():
            raise ValueError(
                f"Graph path does not exist: {path}\n"
                f"Please create the directory or update config.yaml"
            )
        if not path.is_dir():
            raise ValueError(
                f"Graph path is not a directory: {path}\n"
                f"Please provide a valid directory path"
            )
        return path

    @field_validator("output_dir")
    @classmethod
    def expand_output_dir(cls, v: Path) -> Path:
        return Path(v).expanduser()

    @field_validator("journals_prefix")
    @classmethod
    def strip_prefix_slashes(cls, v: str) -> str:
        v = v.strip("/")
        if not v:
            raise ValueError("journals_prefix must not be empty")
        return v

    model_config = {"frozen": True}
