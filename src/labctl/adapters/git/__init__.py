"""Local git adapters."""

from .git_cli import GitCLI

__all__ = ["GitCLI"]
