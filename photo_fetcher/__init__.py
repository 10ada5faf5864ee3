"""Resumable, manifest-driven product photo downloader."""

__version__ = "0.1.0"
