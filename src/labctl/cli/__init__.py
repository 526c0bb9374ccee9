"""Command-line interface for labctl."""
