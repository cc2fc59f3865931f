"""Split-storage note store: metadata and content kept apart, merged on read."""

__version__ = "0.1.0"
