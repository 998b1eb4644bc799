"""Data store and snapshot persistence."""
