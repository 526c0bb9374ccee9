"""Packaged resources for labctl."""
