"""labctl: command-line client for GitLab issues, merge requests and notes."""

__version__ = "0.1.0"
