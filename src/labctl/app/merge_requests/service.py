"""Application service behind ``mr show``."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, List

from labctl.domain.merge_requests import MergeRequest
from labctl.domain.notes import ContainerKind, Discussion
from labctl.ports.forge import ForgeClient, ForgeClientError
from labctl.ports.vcs import VersionControl, VersionControlError


class MergeRequestServiceError(RuntimeError):
    """Raised when a merge request cannot be shown."""


@dataclass(frozen=True)
class MergeRequestView:
    project: str
    merge_request: MergeRequest
    discussions: List[Discussion] = field(default_factory=list)


def discussions_since(discussions: Iterable[Discussion], since: datetime) -> List[Discussion]:
    """Keep only notes created after ``since``; drop discussions left empty."""

    kept: List[Discussion] = []
    for discussion in discussions:
        notes = tuple(
            note for note in discussion.notes if note.created_at is not None and note.created_at > since
        )
        if notes:
            starts_thread = discussion.starts_thread and notes[0] == discussion.notes[0]
            kept.append(Discussion(id=discussion.id, notes=notes, starts_thread=starts_thread))
    return kept


class MergeRequestService:
    def __init__(self, client: ForgeClient, vcs: VersionControl) -> None:
        self._client = client
        self._vcs = vcs

    def show(
        self,
        remote: str,
        iid: int,
        *,
        comments: bool = False,
        since: datetime | None = None,
    ) -> MergeRequestView:
        try:
            project = self._vcs.remote_project(remote)
            merge_request = self._client.get_merge_request(project, iid)
            discussions: List[Discussion] = []
            if comments:
                discussions = self._client.list_discussions(project, ContainerKind.MERGE_REQUEST, iid)
        except (ForgeClientError, VersionControlError) as exc:
            raise MergeRequestServiceError(str(exc)) from exc
        if since is not None:
            discussions = discussions_since(discussions, since)
        return MergeRequestView(project=project, merge_request=merge_request, discussions=discussions)

    def show_patch(self, merge_request: MergeRequest, remote: str | None, *, reverse: bool = False) -> str:
        """Fetch the merge request head and page its patches; return the remote used."""

        try:
            if remote is None:
                remote = self.find_local_remote(merge_request.target_project_id)
            self._vcs.fetch(remote, merge_request.sha)
            self._vcs.show(f"{remote}/{merge_request.target_branch}", merge_request.sha, reverse=reverse)
        except (ForgeClientError, VersionControlError) as exc:
            raise MergeRequestServiceError(str(exc)) from exc
        return remote

    def find_local_remote(self, project_id: int) -> str:
        project = self._client.get_project(project_id)
        for name, url in self._vcs.local_remotes():
            if url == project.ssh_url_to_repo:
                return name
        raise MergeRequestServiceError(
            f"remote for {project.ssh_url_to_repo} not found in local remotes"
        )


__all__ = [
    "MergeRequestService",
    "MergeRequestServiceError",
    "MergeRequestView",
    "discussions_since",
]
