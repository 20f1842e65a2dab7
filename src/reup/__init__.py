"""Reup: download, re-encode and re-publish video batches."""

__version__ = "0.1.0"
