"""Domain models for notes, discussions and their containers."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Tuple

EMPTY_NOTE_MESSAGE = "aborting note due to empty note message"


class NoteInputError(ValueError):
    """Raised when user input cannot produce a note."""


class EmptyNoteError(NoteInputError):
    """Raised when the composed note body is empty."""

    def __init__(self, message: str = EMPTY_NOTE_MESSAGE) -> None:
        super().__init__(message)


class MalformedIdentifierError(NoteInputError):
    """Raised when an ``<id>[:<note_id>]`` token cannot be parsed."""

    def __init__(self, token: str, reason: str) -> None:
        self.token = token
        self.reason = reason
        super().__init__(f"malformed id '{token}': {reason}")


class NoteNotFoundError(LookupError):
    """Raised when the reply target is not among the fetched discussions."""

    def __init__(self, note_id: int) -> None:
        self.note_id = note_id
        super().__init__(f"note {note_id} not found in any discussion")


class ContainerKind(str, Enum):
    ISSUE = "issue"
    MERGE_REQUEST = "mr"

    @property
    def api_segment(self) -> str:
        return "issues" if self is ContainerKind.ISSUE else "merge_requests"

    @property
    def edit_prefix(self) -> str:
        # distinct buffer names keep issue and MR edits apart
        return "ISSUE_NOTE" if self is ContainerKind.ISSUE else "MR_NOTE"


@dataclass(frozen=True)
class ReplyTarget:
    note_id: int


@dataclass(frozen=True)
class TargetRef:
    kind: ContainerKind
    remote: str
    primary_id: int


@dataclass(frozen=True)
class Note:
    id: int
    body: str
    system: bool = False
    author: str = ""
    created_at: datetime | None = None


@dataclass(frozen=True)
class Discussion:
    id: str
    notes: Tuple[Note, ...] = field(default_factory=tuple)
    # false when notes[0] is a reply whose thread opener was filtered out
    starts_thread: bool = True


@dataclass(frozen=True)
class NoteLocation:
    discussion: Discussion
    note: Note


@dataclass(frozen=True)
class ComposedBody:
    text: str

    def __post_init__(self) -> None:
        if not self.text:
            raise EmptyNoteError()


@dataclass(frozen=True)
class NoteOptions:
    """Flags of a single note invocation."""

    messages: Tuple[str, ...] = ()
    file: Path | None = None
    force_linebreak: bool = False
    quote: bool = False


@dataclass(frozen=True)
class NoteResult:
    url: str
    body: ComposedBody
    discussion_id: str | None = None

    @property
    def is_reply(self) -> bool:
        return self.discussion_id is not None
