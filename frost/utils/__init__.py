"""Utility modules for the Frost harness."""

from .output import OutputStream, get_output, write_stdout

__all__ = ["OutputStream", "get_output", "write_stdout"]
