"""Pydantic data models for Logquartz."""

from logquartz.models.config import PublishConfig, SiteConfig

__all__ = ["PublishConfig", "SiteConfig"]
