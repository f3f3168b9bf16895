"""Flatten posterior samples into tidy tables for plotting."""

__version__ = "0.1.0"
