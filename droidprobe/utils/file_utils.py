"""File utility functions for droidprobe."""

from __future__ import annotations

import json
import os
import re
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from loguru import logger


def ensure_directory(directory_path: str) -> str:
    """Ensure a directory exists, creating it if necessary.

    Args:
        directory_path: Path to the directory.

    Returns:
        Absolute path to the directory.
    """
    path = Path(directory_path).resolve()
    path.mkdir(parents=True, exist_ok=True)
    return str(path)


def safe_name(name: str, max_length: int = 60) -> str:
    """Reduce ``name`` to characters safe in a file name."""
    cleaned = re.sub(r"[^A-Za-z0-9_-]+", "_", name.strip()).strip("_")
    return cleaned[:max_length] or "unnamed"


def timestamped_filename(name: str, extension: str) -> str:
    """Return ``<name>_<timestamp>.<extension>`` with millisecond precision."""
    stamp = datetime.now().strftime("%Y-%m-%dT%H-%M-%S-%f")[:-3]
    return f"{safe_name(name)}_{stamp}.{extension.lstrip('.')}"


def save_json(data: Any, filepath: str, indent: int = 2) -> bool:
    """Save data to a JSON file.

    Args:
        data: Data to save.
        filepath: Path to the JSON file.
        indent: JSON indentation level.

    Returns:
        True if save successful, False otherwise.
    """
    try:
        directory = os.path.dirname(filepath)
        if directory:
            ensure_directory(directory)

        with open(filepath, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=indent, ensure_ascii=False, default=str)

        logger.debug(f"Data saved to {filepath}")
        return True

    except Exception as e:
        logger.error(f"Failed to save JSON to {filepath}: {e}")
        return False


def load_json(filepath: str) -> Optional[Any]:
    """Load data from a JSON file.

    Args:
        filepath: Path to the JSON file.

    Returns:
        Loaded data or None if failed.
    """
    try:
        if not os.path.exists(filepath):
            logger.warning(f"JSON file not found: {filepath}")
            return None

        with open(filepath, 'r', encoding='utf-8') as f:
            data = json.load(f)

        logger.debug(f"Data loaded from {filepath}")
        return data

    except Exception as e:
        logger.error(f"Failed to load JSON from {filepath}: {e}")
        return None


def save_text(content: str, filepath: str) -> bool:
    """Save text content (HTML, XML, generated code) to a file."""
    try:
        directory = os.path.dirname(filepath)
        if directory:
            ensure_directory(directory)

        with open(filepath, 'w', encoding='utf-8') as f:
            f.write(content)

        logger.debug(f"Text saved to {filepath}")
        return True

    except Exception as e:
        logger.error(f"Failed to save text to {filepath}: {e}")
        return False
