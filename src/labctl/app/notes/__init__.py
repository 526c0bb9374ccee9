"""Note composition and submission."""

from .message import MessageSourceResolver
from .service import NoteService, NoteServiceError

__all__ = ["MessageSourceResolver", "NoteService", "NoteServiceError"]
