"""Spaces module - rooms, windows, outdoor zones and plant membership."""
