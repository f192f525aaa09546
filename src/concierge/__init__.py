"""Retrieval-augmented reply engine for hotel guest messaging."""

__version__ = "0.1.0"
