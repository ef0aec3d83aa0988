"""Input validation layer.

This package rejects unsafe identifiers, queries, paths, and hosts.
It performs no I/O and runs before any source touches external systems.
"""
