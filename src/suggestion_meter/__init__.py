"""Capture AI-suggested insertions from an editing session and estimate their energy cost."""

__version__ = "0.1.0"
