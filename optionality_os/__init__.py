"""Optionality OS: decision-scoring engine and its HTTP service."""

__version__ = "2.0.0"
