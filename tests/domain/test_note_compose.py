from __future__ import annotations

import pytest

from labctl.domain.notes import (
    ComposedBody,
    Discussion,
    EmptyNoteError,
    Note,
    NoteNotFoundError,
    compose_body,
    force_linebreaks,
    join_messages,
    locate_note,
    note_template,
    quote_note,
    strip_comments,
)


def test_join_messages_uses_blank_line_between_paragraphs() -> None:
    assert join_messages(["p1", "p2", "p3"]) == "p1\n\np2\n\np3"
    assert join_messages(["only"]) == "only"


def test_quote_note_prefixes_every_line() -> None:
    assert quote_note("line1\nline2") == ">line1\n>line2\n"
    assert quote_note("orig") == ">orig\n"


def test_force_linebreaks_pads_every_line() -> None:
    assert force_linebreaks("a\nb") == "a  \nb  "
    assert force_linebreaks("a\n\nb") == "a  \n  \nb  "


def test_note_template_appends_instruction_comment() -> None:
    template = note_template(">orig\n", ";")
    assert template == ">orig\n\n; Write a message for this note. Commented lines are discarded."


def test_strip_comments_drops_comment_lines_and_trims() -> None:
    text = "\nhello\n# drop me\nworld\n\n# Write a message"
    assert strip_comments(text, "#") == "hello\nworld"


def test_compose_body_rejects_empty_text() -> None:
    with pytest.raises(EmptyNoteError, match="aborting note due to empty note message"):
        compose_body("", force_linebreak=True)
    with pytest.raises(EmptyNoteError):
        ComposedBody("")


def test_compose_body_applies_linebreaks_when_requested() -> None:
    assert compose_body("a\nb").text == "a\nb"
    assert compose_body("a\nb", force_linebreak=True).text == "a  \nb  "


def _discussions() -> list[Discussion]:
    return [
        Discussion(
            id="d-1",
            notes=(Note(id=1, body="changed the label", system=True), Note(id=2, body="first")),
        ),
        Discussion(id="d-2", notes=(Note(id=3, body="second"), Note(id=4, body="reply"))),
    ]


def test_locate_note_finds_note_and_its_discussion() -> None:
    location = locate_note(_discussions(), 4)
    assert location.discussion.id == "d-2"
    assert location.note.body == "reply"

    location = locate_note(_discussions(), 2)
    assert location.discussion.id == "d-1"
    assert location.note.id == 2


def test_locate_note_skips_system_notes() -> None:
    with pytest.raises(NoteNotFoundError) as excinfo:
        locate_note(_discussions(), 1)
    assert excinfo.value.note_id == 1


def test_locate_note_first_match_wins() -> None:
    discussions = [
        Discussion(id="a", notes=(Note(id=9, body="one"),)),
        Discussion(id="b", notes=(Note(id=9, body="two"),)),
    ]
    assert locate_note(discussions, 9).discussion.id == "a"


def test_locate_note_missing_raises() -> None:
    with pytest.raises(NoteNotFoundError):
        locate_note([], 5)
