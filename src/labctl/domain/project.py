"""Mapping between git remote URLs and forge project paths."""

from __future__ import annotations

from urllib.parse import urlparse


class RemoteURLError(ValueError):
    """Raised when a remote URL does not point at a forge project."""


def project_path_from_url(url: str) -> str:
    """Return ``group/project`` for an SSH, scp-like or HTTP(S) remote URL.

    >>> project_path_from_url("git@gitlab.com:group/sub/project.git")
    'group/sub/project'
    >>> project_path_from_url("https://gitlab.com/group/project")
    'group/project'
    """

    value = url.strip()
    if not value:
        raise RemoteURLError("remote URL is empty")
    if "://" in value:
        path = urlparse(value).path
    elif ":" in value:
        # scp-like syntax: [user@]host:path
        path = value.split(":", 1)[1]
    else:
        raise RemoteURLError(f"unsupported remote URL '{url}'")
    path = path.strip("/")
    if path.endswith(".git"):
        path = path[: -len(".git")]
    if "/" not in path:
        raise RemoteURLError(f"remote URL '{url}' has no project namespace")
    return path
