"""Merge request inspection."""

from .service import MergeRequestService, MergeRequestServiceError, MergeRequestView

__all__ = ["MergeRequestService", "MergeRequestServiceError", "MergeRequestView"]
