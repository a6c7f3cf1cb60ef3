"""Local bundle discovery and output directory management."""

from __future__ import annotations

from pathlib import Path

from core.constants import HOUSEKEEPING_ENTRIES
from core.errors import UnpackConfigError


def list_bundle_files(input_dir: Path) -> list[str]:
    """List bundle file names in the input directory.

    Args:
        input_dir: Directory holding downloaded bundles.

    Returns:
        Sorted file names, excluding housekeeping and hidden entries.

    Raises:
        UnpackConfigError: If the input path exists but is not a directory.
    """
    if not input_dir.exists():
        return []
    if not input_dir.is_dir():
        raise UnpackConfigError(
            f"Bundle input path {input_dir} is not a directory. "
            "Point UNPACK_INPUT_DIR or --input-dir at a folder of bundle files."
        )
    return sorted(
        entry.name
        for entry in input_dir.iterdir()
        if entry.is_file() and not _is_housekeeping_entry(entry.name)
    )


def ensure_directory(path: Path) -> Path:
    """Create a directory and its parents if missing."""
    path.mkdir(parents=True, exist_ok=True)
    return path


def _is_housekeeping_entry(name: str) -> bool:
    return name in HOUSEKEEPING_ENTRIES or name.startswith(".")
