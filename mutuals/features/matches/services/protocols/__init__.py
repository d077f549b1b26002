"""Service protocols for the matches feature."""

from .matcher import Matcher

__all__ = [
    "Matcher",
]
