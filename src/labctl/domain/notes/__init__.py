"""Note domain exports."""

from .compose import (
    compose_body,
    force_linebreaks,
    join_messages,
    locate_note,
    note_template,
    quote_note,
    strip_comments,
)
from .identifiers import parse_target_id
from .models import (
    ComposedBody,
    ContainerKind,
    Discussion,
    EmptyNoteError,
    MalformedIdentifierError,
    Note,
    NoteInputError,
    NoteLocation,
    NoteNotFoundError,
    NoteOptions,
    NoteResult,
    ReplyTarget,
    TargetRef,
)

__all__ = [
    "ComposedBody",
    "ContainerKind",
    "Discussion",
    "EmptyNoteError",
    "MalformedIdentifierError",
    "Note",
    "NoteInputError",
    "NoteLocation",
    "NoteNotFoundError",
    "NoteOptions",
    "NoteResult",
    "ReplyTarget",
    "TargetRef",
    "compose_body",
    "force_linebreaks",
    "join_messages",
    "locate_note",
    "note_template",
    "parse_target_id",
    "quote_note",
    "strip_comments",
]
