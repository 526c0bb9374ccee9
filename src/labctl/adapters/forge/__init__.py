"""Forge API adapters."""

from .gitlab_client import GitLabClient

__all__ = ["GitLabClient"]
