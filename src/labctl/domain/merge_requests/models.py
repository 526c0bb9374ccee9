"""Merge request and project models returned by the forge."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

_STATE_LABELS = {
    "opened": "Open",
    "closed": "Closed",
    "merged": "Merged",
}


@dataclass(frozen=True)
class ForgeProject:
    id: int
    path_with_namespace: str
    ssh_url_to_repo: str
    http_url_to_repo: str = ""
    web_url: str = ""


@dataclass(frozen=True)
class MergeRequest:
    iid: int
    title: str
    description: str
    state: str
    source_branch: str
    target_branch: str
    sha: str
    author: str
    web_url: str
    target_project_id: int
    assignee: str | None = None
    milestone: str | None = None
    labels: List[str] = field(default_factory=list)

    @property
    def state_label(self) -> str:
        return _STATE_LABELS.get(self.state, self.state.capitalize())

    def summary_fields(self, project: str) -> list[tuple[str, str]]:
        return [
            ("Project", project),
            ("Branches", f"{self.source_branch}->{self.target_branch}"),
            ("Status", self.state_label),
            ("Assignee", self.assignee or "None"),
            ("Author", self.author),
            ("Milestone", self.milestone or "None"),
            ("Labels", ", ".join(self.labels) if self.labels else "None"),
            ("WebURL", self.web_url),
        ]
