"""Spreadsheet -> SSG training API bulk upload pipeline."""

__version__ = "0.1.0"
