"""Guided care routine."""
