"""Core errors, configuration, constants, logging, and shared types."""
