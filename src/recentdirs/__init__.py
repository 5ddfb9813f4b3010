"""recentdirs: track recently used directories and jump back to them."""

__version__ = "0.1.0"
