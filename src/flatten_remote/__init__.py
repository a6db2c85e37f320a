"""Flatten a remote GitHub repository into a single text artifact."""

__version__ = "0.1.0"
