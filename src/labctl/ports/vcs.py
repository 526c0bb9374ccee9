"""Port for the local version-control tool."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Tuple


class VersionControl(ABC):
    @abstractmethod
    def comment_char(self) -> str:
        """Character marking discardable lines in edit buffers."""

    @abstractmethod
    def edit_file(self, prefix: str, text: str) -> str:
        """Let the user edit ``text``; return it without comment lines."""

    @abstractmethod
    def remote_project(self, remote: str) -> str:
        """Return the forge project path behind ``remote``."""

    @abstractmethod
    def local_remotes(self) -> List[Tuple[str, str]]:
        """Return ``(name, fetch_url)`` pairs of the configured remotes."""

    @abstractmethod
    def fetch(self, remote: str, ref: str) -> None:
        ...

    @abstractmethod
    def show(self, base: str, head: str, *, reverse: bool = False) -> None:
        ...


class VersionControlError(RuntimeError):
    """Raised when a git invocation fails."""
