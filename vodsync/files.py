"""Directory helpers for the frame-staging and clip directories."""

from pathlib import Path


def list_files(directory: Path) -> list[Path]:
    """Return the regular files directly inside *directory*, sorted by name."""
    return sorted(p for p in Path(directory).iterdir() if p.is_file())


def delete_files(directory: Path) -> None:
    """Delete every regular file directly inside *directory*."""
    for path in list_files(directory):
        path.unlink()
