"""Multi-signal commit clustering."""

__version__ = "0.1.0"
