"""Application settings API."""
