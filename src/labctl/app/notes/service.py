"""Application service that composes and submits notes."""

from __future__ import annotations

from labctl.domain.notes import (
    ComposedBody,
    NoteOptions,
    NoteResult,
    ReplyTarget,
    TargetRef,
    compose_body,
    locate_note,
    quote_note,
)
from labctl.ports.forge import ForgeClient, ForgeClientError
from labctl.ports.vcs import VersionControl, VersionControlError

from .message import MessageSourceResolver


class NoteServiceError(RuntimeError):
    """Raised when reading the message or talking to the forge fails."""


class NoteService:
    """Creates top-level notes or threaded replies on issues and merge requests.

    Input problems surface as ``NoteInputError``, a missing reply target as
    ``NoteNotFoundError``; IO, editor and forge failures are wrapped in
    ``NoteServiceError``. Nothing is sent to the forge unless the composed
    body is non-empty.
    """

    def __init__(self, client: ForgeClient, vcs: VersionControl) -> None:
        self._client = client
        self._vcs = vcs
        self._resolver = MessageSourceResolver(vcs)

    def submit(
        self,
        target: TargetRef,
        reply: ReplyTarget | None,
        options: NoteOptions,
    ) -> NoteResult:
        project = self._project_for(target)
        if reply is None:
            return self._create(project, target, options)
        return self._reply(project, target, reply, options)

    def _create(self, project: str, target: TargetRef, options: NoteOptions) -> NoteResult:
        body = self._compose(target, options, seed="")
        try:
            url = self._client.create_note(project, target.kind, target.primary_id, body.text)
        except ForgeClientError as exc:
            raise NoteServiceError(str(exc)) from exc
        return NoteResult(url=url, body=body)

    def _reply(
        self,
        project: str,
        target: TargetRef,
        reply: ReplyTarget,
        options: NoteOptions,
    ) -> NoteResult:
        try:
            discussions = self._client.list_discussions(project, target.kind, target.primary_id)
        except ForgeClientError as exc:
            raise NoteServiceError(str(exc)) from exc
        location = locate_note(discussions, reply.note_id)

        seed = quote_note(location.note.body) if options.quote else ""
        body = self._compose(target, options, seed=seed)
        try:
            url = self._client.create_discussion_reply(
                project,
                target.kind,
                target.primary_id,
                location.discussion.id,
                body.text,
            )
        except ForgeClientError as exc:
            raise NoteServiceError(str(exc)) from exc
        return NoteResult(url=url, body=body, discussion_id=location.discussion.id)

    def _compose(self, target: TargetRef, options: NoteOptions, *, seed: str) -> ComposedBody:
        if options.file is not None:
            # file content is used verbatim, never through the edit template
            try:
                text = options.file.read_text(encoding="utf-8")
            except OSError as exc:
                raise NoteServiceError(f"cannot read message file {options.file}: {exc}") from exc
        else:
            try:
                text = self._resolver.resolve(options.messages, seed, target.kind)
            except VersionControlError as exc:
                raise NoteServiceError(str(exc)) from exc
        return compose_body(text, force_linebreak=options.force_linebreak)

    def _project_for(self, target: TargetRef) -> str:
        try:
            return self._vcs.remote_project(target.remote)
        except VersionControlError as exc:
            raise NoteServiceError(str(exc)) from exc


__all__ = ["NoteService", "NoteServiceError"]
