"""Rendering and persistence of ingested records."""
