from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import List, Tuple

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
SANDBOX_HOME = ROOT / ".test_place" / "labctl-home"
os.environ.setdefault("LABCTL_HOME", str(SANDBOX_HOME))
SANDBOX_HOME.mkdir(parents=True, exist_ok=True)
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from labctl.domain.merge_requests import ForgeProject, MergeRequest  # noqa: E402
from labctl.domain.notes import ContainerKind, Discussion, strip_comments  # noqa: E402
from labctl.ports.forge import ForgeClient, ForgeClientError  # noqa: E402
from labctl.ports.vcs import VersionControl  # noqa: E402

WEB_ROOT = "https://gitlab.example.com"


class FakeForgeClient(ForgeClient):
    def __init__(self) -> None:
        self.discussions: List[Discussion] = []
        self.merge_request: MergeRequest | None = None
        self.project: ForgeProject | None = None
        self.error: ForgeClientError | None = None
        self.calls: List[tuple] = []

    def _check(self) -> None:
        if self.error is not None:
            raise self.error

    def list_discussions(self, project: str, kind: ContainerKind, iid: int) -> List[Discussion]:
        self.calls.append(("list_discussions", project, kind, iid))
        self._check()
        return list(self.discussions)

    def create_note(self, project: str, kind: ContainerKind, iid: int, body: str) -> str:
        self.calls.append(("create_note", project, kind, iid, body))
        self._check()
        return f"{WEB_ROOT}/{project}/-/{kind.api_segment}/{iid}#note_100"

    def create_discussion_reply(
        self,
        project: str,
        kind: ContainerKind,
        iid: int,
        discussion_id: str,
        body: str,
    ) -> str:
        self.calls.append(("create_discussion_reply", project, kind, iid, discussion_id, body))
        self._check()
        return f"{WEB_ROOT}/{project}/-/{kind.api_segment}/{iid}#note_200"

    def get_merge_request(self, project: str, iid: int) -> MergeRequest:
        self.calls.append(("get_merge_request", project, iid))
        self._check()
        assert self.merge_request is not None
        return self.merge_request

    def get_project(self, project: str | int) -> ForgeProject:
        self.calls.append(("get_project", project))
        self._check()
        assert self.project is not None
        return self.project

    @property
    def submissions(self) -> List[tuple]:
        return [call for call in self.calls if call[0] in {"create_note", "create_discussion_reply"}]


class FakeVersionControl(VersionControl):
    """Stands in for git; the "editor" saves the buffer unchanged unless ``edited`` is set."""

    def __init__(self) -> None:
        self.edited: str | None = None
        self.edits: List[Tuple[str, str]] = []
        self.remotes: List[Tuple[str, str]] = []
        self.fetched: List[Tuple[str, str]] = []
        self.shown: List[Tuple[str, str, bool]] = []

    def comment_char(self) -> str:
        return "#"

    def edit_file(self, prefix: str, text: str) -> str:
        self.edits.append((prefix, text))
        if self.edited is not None:
            return self.edited
        return strip_comments(text, "#")

    def remote_project(self, remote: str) -> str:
        return f"group/{remote}"

    def local_remotes(self) -> List[Tuple[str, str]]:
        return list(self.remotes)

    def fetch(self, remote: str, ref: str) -> None:
        self.fetched.append((remote, ref))

    def show(self, base: str, head: str, *, reverse: bool = False) -> None:
        self.shown.append((base, head, reverse))


@pytest.fixture()
def forge_client() -> FakeForgeClient:
    return FakeForgeClient()


@pytest.fixture()
def fake_vcs() -> FakeVersionControl:
    return FakeVersionControl()
