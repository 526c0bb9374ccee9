"""Resolution of note bodies from flags or an interactive edit session."""

from __future__ import annotations

from typing import Sequence

from labctl.domain.notes import ContainerKind, join_messages, note_template
from labctl.ports.vcs import VersionControl


class MessageSourceResolver:
    def __init__(self, editor: VersionControl) -> None:
        self._editor = editor

    def resolve(self, messages: Sequence[str], seed: str, kind: ContainerKind) -> str:
        """Join explicit messages, or open the editor on a template seeded with ``seed``.

        Errors from the editor propagate as ``VersionControlError``.
        """

        if messages:
            return join_messages(messages)
        template = note_template(seed, self._editor.comment_char())
        return self._editor.edit_file(kind.edit_prefix, template)


__all__ = ["MessageSourceResolver"]
