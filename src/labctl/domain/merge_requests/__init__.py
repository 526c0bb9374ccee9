"""Merge request domain exports."""

from .models import ForgeProject, MergeRequest

__all__ = ["ForgeProject", "MergeRequest"]
