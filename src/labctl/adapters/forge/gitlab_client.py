"""GitLab REST v4 client."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Iterable, List
from urllib.parse import quote

import requests

from labctl.domain.merge_requests import ForgeProject, MergeRequest
from labctl.domain.notes import ContainerKind, Discussion, Note
from labctl.ports.forge import ForgeClient, ForgeClientError

DEFAULT_TIMEOUT = 30
PAGE_SIZE = 100


class GitLabClient(ForgeClient):
    def __init__(self, api_url: str, token: str, session: requests.Session | None = None) -> None:
        self._api_url = api_url.rstrip("/")
        self._headers = {
            "Accept": "application/json",
            "PRIVATE-TOKEN": token,
        }
        self._session = session or requests.Session()

    def list_discussions(self, project: str, kind: ContainerKind, iid: int) -> List[Discussion]:
        url = self._container_url(project, kind, iid) + "/discussions"
        params: Dict[str, Any] = {"per_page": PAGE_SIZE}
        discussions: List[Discussion] = []
        while url:
            response = self._request("get", url, params=params)
            params = {}  # subsequent pages use link headers only
            page_items = _json(response)
            if isinstance(page_items, list):
                discussions.extend(_parse_discussion(item) for item in page_items if isinstance(item, dict))
            url = _next_link(response.headers.get("Link"))
        return discussions

    def create_note(self, project: str, kind: ContainerKind, iid: int, body: str) -> str:
        container_url = self._container_url(project, kind, iid)
        web_url = self._web_url(container_url)
        response = self._request("post", container_url + "/notes", json={"body": body})
        return _note_url(web_url, _json(response))

    def create_discussion_reply(
        self,
        project: str,
        kind: ContainerKind,
        iid: int,
        discussion_id: str,
        body: str,
    ) -> str:
        container_url = self._container_url(project, kind, iid)
        web_url = self._web_url(container_url)
        url = f"{container_url}/discussions/{quote(discussion_id, safe='')}/notes"
        response = self._request("post", url, json={"body": body})
        return _note_url(web_url, _json(response))

    def get_merge_request(self, project: str, iid: int) -> MergeRequest:
        url = self._container_url(project, ContainerKind.MERGE_REQUEST, iid)
        payload = _json(self._request("get", url))
        return _parse_merge_request(payload)

    def get_project(self, project: str | int) -> ForgeProject:
        payload = _json(self._request("get", self._project_url(project)))
        try:
            return ForgeProject(
                id=int(payload["id"]),
                path_with_namespace=str(payload.get("path_with_namespace", "")),
                ssh_url_to_repo=str(payload.get("ssh_url_to_repo", "")),
                http_url_to_repo=str(payload.get("http_url_to_repo", "")),
                web_url=str(payload.get("web_url", "")),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise ForgeClientError(f"unexpected project payload: {exc}") from exc

    def _project_url(self, project: str | int) -> str:
        return f"{self._api_url}/projects/{quote(str(project), safe='')}"

    def _container_url(self, project: str, kind: ContainerKind, iid: int) -> str:
        return f"{self._project_url(project)}/{kind.api_segment}/{iid}"

    def _web_url(self, container_url: str) -> str:
        # resolved before any note is posted so a failure here creates nothing
        container = _json(self._request("get", container_url))
        web_url = container.get("web_url") if isinstance(container, dict) else None
        if not web_url:
            raise ForgeClientError("forge did not return a web_url for the note container")
        return str(web_url)

    def _request(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        try:
            response = getattr(self._session, method)(
                url,
                headers=self._headers,
                timeout=DEFAULT_TIMEOUT,
                **kwargs,
            )
        except requests.RequestException as exc:
            raise ForgeClientError(f"forge request failed: {exc}") from exc
        if response.status_code >= 400:
            raise ForgeClientError(
                f"forge request failed: {response.status_code} {response.text}"
            )
        return response


def _json(response: requests.Response) -> Any:
    try:
        return response.json()
    except ValueError as exc:
        raise ForgeClientError(
            f"forge returned a non-JSON response ({response.status_code}): {response.text[:200]}"
        ) from exc


def _note_url(web_url: str, note: Any) -> str:
    if not isinstance(note, dict) or "id" not in note:
        raise ForgeClientError("forge did not return the created note")
    return f"{web_url}#note_{note['id']}"


def _parse_time(raw: Any) -> datetime | None:
    if not isinstance(raw, str) or not raw:
        return None
    try:
        return datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        return None


def _parse_note(payload: Dict[str, Any]) -> Note:
    author = payload.get("author")
    return Note(
        id=int(payload["id"]),
        body=str(payload.get("body") or ""),
        system=bool(payload.get("system", False)),
        author=str(author.get("username", "")) if isinstance(author, dict) else "",
        created_at=_parse_time(payload.get("created_at")),
    )


def _parse_discussion(payload: Dict[str, Any]) -> Discussion:
    notes: Iterable[Any] = payload.get("notes") or []
    try:
        return Discussion(
            id=str(payload["id"]),
            notes=tuple(_parse_note(note) for note in notes if isinstance(note, dict)),
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise ForgeClientError(f"unexpected discussion payload: {exc}") from exc


def _parse_merge_request(payload: Any) -> MergeRequest:
    if not isinstance(payload, dict):
        raise ForgeClientError("unexpected merge request payload")
    assignee = payload.get("assignee")
    milestone = payload.get("milestone")
    author = payload.get("author")
    try:
        return MergeRequest(
            iid=int(payload["iid"]),
            title=str(payload.get("title", "")),
            description=str(payload.get("description") or ""),
            state=str(payload.get("state", "")),
            source_branch=str(payload.get("source_branch", "")),
            target_branch=str(payload.get("target_branch", "")),
            sha=str(payload.get("sha") or ""),
            author=str(author.get("username", "")) if isinstance(author, dict) else "",
            web_url=str(payload.get("web_url", "")),
            target_project_id=int(payload.get("target_project_id") or payload.get("project_id") or 0),
            assignee=(assignee.get("username") or None) if isinstance(assignee, dict) else None,
            milestone=(milestone.get("title") or None) if isinstance(milestone, dict) else None,
            labels=[str(label) for label in payload.get("labels") or []],
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise ForgeClientError(f"unexpected merge request payload: {exc}") from exc


def _next_link(link_header: str | None) -> str | None:
    if not link_header:
        return None
    parts = [part.strip() for part in link_header.split(",")]
    for part in parts:
        if "rel=\"next\"" in part:
            url_part, _ = part.split(";", 1)
            return url_part.strip(" <>")
    return None


__all__ = ["GitLabClient"]
