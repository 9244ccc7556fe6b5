"""Data structures and parsers for files of the Linux procfs pseudo-filesystem."""

__version__ = "0.1.0"