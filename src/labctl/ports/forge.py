"""Port for the remote forge API."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List

from labctl.domain.merge_requests import ForgeProject, MergeRequest
from labctl.domain.notes import ContainerKind, Discussion


class ForgeClient(ABC):
    """Abstract forge client; ``project`` is the ``group/project`` path."""

    @abstractmethod
    def list_discussions(self, project: str, kind: ContainerKind, iid: int) -> List[Discussion]:
        """Return discussions of an issue or merge request in remote order."""

    @abstractmethod
    def create_note(self, project: str, kind: ContainerKind, iid: int, body: str) -> str:
        """Create a top-level note and return its web URL."""

    @abstractmethod
    def create_discussion_reply(
        self,
        project: str,
        kind: ContainerKind,
        iid: int,
        discussion_id: str,
        body: str,
    ) -> str:
        """Reply inside an existing discussion and return the note's web URL."""

    @abstractmethod
    def get_merge_request(self, project: str, iid: int) -> MergeRequest:
        """Fetch a single merge request."""

    @abstractmethod
    def get_project(self, project: str | int) -> ForgeProject:
        """Fetch project metadata by path or numeric id."""


class ForgeClientError(RuntimeError):
    """Raised when the forge API request fails."""
