"""Utility functions for loading schema files.

This module reads the commented JSON schema files shipped in the Firefox
source tree, with proper error handling and validation.
"""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any, Iterable

from .logging_config import get_logger

logger = get_logger(__name__)

# Strings are matched first so comment markers inside them survive
_COMMENT_RE = re.compile(r'"(?:\\.|[^"\\])*"|//[^\n]*|/\*.*?\*/', re.DOTALL)


class SchemaLoaderError(Exception):
    """Custom exception for schema loading errors."""

    pass


def strip_json_comments(text: str) -> str:
    """Remove ``//`` and ``/* */`` comments outside of JSON strings.

    Block comments are replaced by their newlines so that decode errors
    still point at the right line.
    """

    def replace(match: re.Match) -> str:
        token = match.group(0)
        if token.startswith('"'):
            return token
        return "\n" * token.count("\n")

    return _COMMENT_RE.sub(replace, text)


def load_schema_file(file_path: str | Path) -> list[dict[str, Any]]:
    """Load the namespace records of one schema file.

    Args:
        file_path: Path to the schema file.

    Returns:
        List of namespace records.

    Raises:
        SchemaLoaderError: If the file cannot be read, is not valid JSON
            or does not contain a list.
    """
    file_path = Path(file_path)
    logger.debug(f"Loading schema file: {file_path}")

    try:
        text = file_path.read_text(encoding="utf-8")
    except OSError as e:
        logger.error(f"Error reading file {file_path}: {e}")
        raise SchemaLoaderError(f"Error reading file {file_path}: {e}") from e

    try:
        data = json.loads(strip_json_comments(text))
    except json.JSONDecodeError as e:
        logger.error(f"Invalid JSON in file {file_path}: {e}")
        raise SchemaLoaderError(f"Invalid JSON in file {file_path}: {e}") from e

    if not isinstance(data, list):
        raise SchemaLoaderError(f"Schema file must contain a list of namespaces: {file_path}")

    return data


def collect_schemas(folders: Iterable[str | Path]) -> list[tuple[str, list[dict[str, Any]]]]:
    """Load every ``.json`` file of the given folders.

    Files are read folder by folder, sorted by name inside each folder,
    so merge order does not depend on the file system.

    Args:
        folders: Schema folders, in priority order.

    Returns:
        List of (file name, namespace records).

    Raises:
        SchemaLoaderError: If a folder does not exist or a file fails to load.
    """
    fragments = []
    for folder in folders:
        folder = Path(folder)
        if not folder.is_dir():
            logger.error(f"Schema folder not found: {folder}")
            raise SchemaLoaderError(f"Schema folder not found: {folder}")

        for path in sorted(folder.iterdir(), key=lambda p: p.name):
            if path.suffix == ".json" and path.is_file():
                fragments.append((path.name, load_schema_file(path)))

    logger.info(f"Loaded {len(fragments)} schema files")
    return fragments
