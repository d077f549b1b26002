"""Symmetric user matches with per-match metadata."""
