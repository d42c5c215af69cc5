"""Bundled data files (default settings, sample seed)."""
