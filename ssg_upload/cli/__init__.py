"""Command line interface (``python -m ssg_upload.cli``)."""

from .__main__ import main

__all__ = ["main"]
