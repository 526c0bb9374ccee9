"""Text transforms and discussion lookup used to compose notes."""

from __future__ import annotations

from typing import Iterable, Sequence

from .models import ComposedBody, Discussion, NoteLocation, NoteNotFoundError

PARAGRAPH_SEPARATOR = "\n\n"
QUOTE_PREFIX = ">"
HARD_BREAK = "  "
EDIT_INSTRUCTIONS = "Write a message for this note. Commented lines are discarded."


def join_messages(messages: Sequence[str]) -> str:
    """Each ``-m`` value becomes one paragraph."""

    return PARAGRAPH_SEPARATOR.join(messages)


def note_template(seed: str, comment_char: str) -> str:
    return f"{seed}\n{comment_char} {EDIT_INSTRUCTIONS}"


def strip_comments(text: str, comment_char: str) -> str:
    """Drop lines starting with ``comment_char`` and trim the result."""

    kept = [line for line in text.split("\n") if not line.startswith(comment_char)]
    return "\n".join(kept).strip()


def quote_note(body: str) -> str:
    """Blockquote every line of ``body`` and leave a blank line after it."""

    return QUOTE_PREFIX + body.replace("\n", "\n" + QUOTE_PREFIX) + "\n"


def force_linebreaks(text: str) -> str:
    """Append two spaces to every line so markdown renders hard breaks."""

    return "\n".join(line + HARD_BREAK for line in text.split("\n"))


def compose_body(text: str, *, force_linebreak: bool = False) -> ComposedBody:
    # emptiness is checked on the raw text, before any padding is added
    if text and force_linebreak:
        text = force_linebreaks(text)
    return ComposedBody(text)


def locate_note(discussions: Iterable[Discussion], note_id: int) -> NoteLocation:
    """Return the first non-system note with ``note_id``, in remote order."""

    for discussion in discussions:
        for note in discussion.notes:
            if note.system:
                continue
            if note.id == note_id:
                return NoteLocation(discussion=discussion, note=note)
    raise NoteNotFoundError(note_id)


__all__ = [
    "EDIT_INSTRUCTIONS",
    "compose_body",
    "force_linebreaks",
    "join_messages",
    "locate_note",
    "note_template",
    "quote_note",
    "strip_comments",
]
