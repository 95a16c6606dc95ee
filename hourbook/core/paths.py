"""
Path utilities for Hourbook.

Directory creation and export file resolution.
"""

from pathlib import Path
from typing import Optional

from hourbook.core.config import HOURBOOK_PATHS


def ensure_directory(path: Path) -> Path:
    """Ensure a directory exists, creating if necessary. Returns path for chaining."""
    path.mkdir(parents=True, exist_ok=True)
    return path


def resolve_export_path(filename: str, output_dir: Optional[Path] = None) -> Path:
    """
    Build the destination path for an export file.

    Args:
        filename: Workbook file name (e.g., "Projects-All Data.xlsx")
        output_dir: Directory override; defaults to HOURBOOK_PATHS.exports

    Returns:
        Path inside an existing directory
    """
    directory = Path(output_dir) if output_dir else HOURBOOK_PATHS.exports
    return ensure_directory(directory) / filename
