"""Parsing of ``<id>[:<note_id>]`` positional arguments."""

from __future__ import annotations

import re

from .models import MalformedIdentifierError, ReplyTarget

SEPARATOR = ":"

_NUMBER_RE = re.compile(r"\d+", re.ASCII)


def _parse_number(token: str, segment: str, label: str) -> int:
    value = segment.strip()
    if not _NUMBER_RE.fullmatch(value):
        raise MalformedIdentifierError(token, f"{label} must be a non-negative integer, got '{segment}'")
    return int(value)


def parse_target_id(token: str) -> tuple[int, ReplyTarget | None]:
    """Split ``token`` into the container id and an optional reply target.

    A reply segment of ``0`` means "no reply", matching the forge's use of
    zero as an unset note id.
    """

    if SEPARATOR not in token:
        primary = _parse_number(token, token, "id")
        reply_id = 0
    else:
        left, right = token.split(SEPARATOR, 1)
        primary = _parse_number(token, left, "id")
        reply_id = _parse_number(token, right, "note id")
    if primary == 0:
        raise MalformedIdentifierError(token, "id must be greater than zero")
    if reply_id == 0:
        return primary, None
    return primary, ReplyTarget(note_id=reply_id)


__all__ = ["SEPARATOR", "parse_target_id"]
