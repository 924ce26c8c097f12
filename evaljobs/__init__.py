"""Discover the jobs of a release expression for continuous integration."""

__version__ = "0.1.0"
