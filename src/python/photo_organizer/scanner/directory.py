"""
Directory scanning for the files to organize and for existing destinations.
"""

from pathlib import Path
from typing import Iterable, List, Set

from photo_organizer.conflicts import ExistingNames


def collect_files(
    directory: Path,
    recursive: bool = True,
    include_hidden: bool = False,
    exclude: Iterable[Path] = (),
) -> List[Path]:
    """
    Collect the files to organize from a directory.

    Every regular file is returned, not only recognised photos: files that
    carry no date metadata are planned into the unsorted directory.

    Args:
        directory: Directory to scan
        recursive: If True, scan subdirectories recursively
        include_hidden: If True, include dot-files and files in dot-directories
        exclude: Directories whose contents are skipped (e.g. the output directory)

    Returns:
        File paths, sorted so that planning order is reproducible

    Raises:
        FileNotFoundError: If directory does not exist
        NotADirectoryError: If directory is not a directory
    """
    if not directory.exists():
        raise FileNotFoundError(f"Directory not found: {directory}")

    if not directory.is_dir():
        raise NotADirectoryError(f"Not a directory: {directory}")

    excluded = [Path(path).resolve() for path in exclude]

    files = []

    iterator = directory.rglob("*") if recursive else directory.iterdir()

    for path in iterator:
        if not path.is_file():
            continue

        relative = path.relative_to(directory)

        # Skip hidden files and anything under a hidden directory
        if not include_hidden and any(part.startswith(".") for part in relative.parts):
            continue

        if excluded and _is_within(path.resolve(), excluded):
            continue

        files.append(path)

    return sorted(files)


def _is_within(path: Path, roots: List[Path]) -> bool:
    return any(path == root or root in path.parents for root in roots)


def existing_names_under(output_root: Path) -> ExistingNames:
    """
    Build the lookup of names already present in destination directories.

    Args:
        output_root: Root the relative destination directories live under

    Returns:
        Callable mapping a relative directory ("2023/06") to the names in it.
        A directory that does not exist yet is empty; other OSErrors
        (permission denied, not a directory) propagate to the caller.
    """
    def list_names(directory: str) -> Set[str]:
        target = output_root.joinpath(*directory.split("/"))
        try:
            return {entry.name for entry in target.iterdir()}
        except FileNotFoundError:
            return set()

    return list_names
