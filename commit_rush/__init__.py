"""Animated particle visualization of a repository's commit history."""

__version__ = "0.1.0"
