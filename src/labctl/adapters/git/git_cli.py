"""``git`` command-line adapter."""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import List, Tuple

from labctl.domain.notes import strip_comments
from labctl.domain.project import RemoteURLError, project_path_from_url
from labctl.ports.vcs import VersionControl, VersionControlError

DEFAULT_COMMENT_CHAR = "#"


class GitCLI(VersionControl):
    """Runs ``git`` in ``cwd`` (the current directory by default)."""

    def __init__(self, cwd: Path | None = None) -> None:
        self._cwd = cwd

    def comment_char(self) -> str:
        value = self._run("config", "--default", DEFAULT_COMMENT_CHAR, "core.commentchar").strip()
        if not value or value == "auto":
            return DEFAULT_COMMENT_CHAR
        return value

    def edit_file(self, prefix: str, text: str) -> str:
        path = self._git_dir() / f"{prefix}_EDITMSG"
        comment_char = self.comment_char()
        editor = self._run("var", "GIT_EDITOR").strip()
        try:
            path.write_text(text, encoding="utf-8")
            # editor strings may carry arguments, as with git itself
            subprocess.run(
                ["sh", "-c", f'{editor} "$@"', editor, str(path)],
                cwd=self._cwd,
                check=True,
            )
            raw = path.read_text(encoding="utf-8")
        except subprocess.CalledProcessError as exc:
            raise VersionControlError(f"editor '{editor}' exited with status {exc.returncode}") from exc
        except OSError as exc:
            raise VersionControlError(f"cannot edit {path}: {exc}") from exc
        finally:
            path.unlink(missing_ok=True)
        return strip_comments(raw, comment_char)

    def remote_project(self, remote: str) -> str:
        url = self._run("remote", "get-url", remote).strip()
        try:
            return project_path_from_url(url)
        except RemoteURLError as exc:
            raise VersionControlError(str(exc)) from exc

    def local_remotes(self) -> List[Tuple[str, str]]:
        remotes: List[Tuple[str, str]] = []
        for line in self._run("remote", "-v").splitlines():
            # fetch entries only
            if not line.endswith(" (fetch)"):
                continue
            name, _, url = line[: -len(" (fetch)")].partition("\t")
            remotes.append((name, url.strip()))
        return remotes

    def fetch(self, remote: str, ref: str) -> None:
        self._run("fetch", remote, ref)

    def show(self, base: str, head: str, *, reverse: bool = False) -> None:
        cmd = ["git", "log", "-p"]
        if reverse:
            cmd.append("--reverse")
        cmd.append(f"{base}..{head}")
        try:
            subprocess.run(cmd, cwd=self._cwd, check=True)
        except (subprocess.CalledProcessError, FileNotFoundError) as exc:
            raise VersionControlError(f"git log failed for {base}..{head}: {exc}") from exc

    def _git_dir(self) -> Path:
        git_dir = Path(self._run("rev-parse", "--git-dir").strip())
        if git_dir.is_absolute():
            return git_dir
        return (self._cwd or Path.cwd()) / git_dir

    def _run(self, *args: str) -> str:
        try:
            result = subprocess.run(
                ["git", *args],
                cwd=self._cwd,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                check=True,
                text=True,
            )
        except FileNotFoundError as exc:
            raise VersionControlError("git executable not found") from exc
        except subprocess.CalledProcessError as exc:
            detail = (exc.stderr or "").strip() or f"exit status {exc.returncode}"
            raise VersionControlError(f"git {' '.join(args)} failed: {detail}") from exc
        return result.stdout


__all__ = ["GitCLI"]
