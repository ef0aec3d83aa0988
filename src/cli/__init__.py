"""Codex command line interface."""
