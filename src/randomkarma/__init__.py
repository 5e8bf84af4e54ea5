"""Randomized multi-subset selection around a target duration."""

__version__ = "0.1.0"
