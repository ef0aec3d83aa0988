"""Record sources.

This package reads file trees, delimited files, and relational tables
and normalizes them into ordered path/content records.
"""
