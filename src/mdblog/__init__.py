"""mdblog: markdown blog content store and sync engine."""

__version__ = "0.3.0"
