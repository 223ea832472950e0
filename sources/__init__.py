"""Candidate feed sources."""

from .feed import FeedSource

__all__ = ["FeedSource"]
