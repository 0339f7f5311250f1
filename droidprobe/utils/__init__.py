"""Utility functions for droidprobe.

This sub-package provides file and path helpers shared by the discovery
core, the report writer and the suite generator.
"""

from .file_utils import (
    ensure_directory,
    load_json,
    safe_name,
    save_json,
    save_text,
    timestamped_filename,
)

__all__ = [
    "ensure_directory",
    "load_json",
    "safe_name",
    "save_json",
    "save_text",
    "timestamped_filename",
]
