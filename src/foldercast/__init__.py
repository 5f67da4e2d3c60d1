"""Generate podcast RSS feeds from a tree of audio folders."""

__version__ = "0.3.0"
