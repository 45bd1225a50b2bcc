"""
Collision-free filename assignment.

The DestinationRegistry remembers, per destination directory, every name
already taken: files that exist on disk (seeded on first use through an
injected lookup) and names handed out earlier in the same run. A name that
is taken gets "_1", "_2", ... inserted before its extension.

Names are compared case-insensitively. On case-insensitive filesystems
"IMG.jpg" and "img.jpg" are the same file, so issuing both would overwrite.
"""

import itertools
import logging
from dataclasses import dataclass
from pathlib import PurePath
from typing import Callable, Dict, Iterable, List, Optional, Set, Tuple

logger = logging.getLogger(__name__)

# Returns the names already present in a destination directory
ExistingNames = Callable[[str], Iterable[str]]


@dataclass(frozen=True)
class Claim:
    """
    A name reserved in a destination directory.

    Attributes:
        filename: The final name
        suffix: The numeric suffix that was added, or 0 if none was needed
    """
    filename: str
    suffix: int = 0

    @property
    def renamed(self) -> bool:
        return self.suffix > 0


def suffixed_name(filename: str, index: int) -> str:
    """
    Insert a numeric suffix before the final extension.

    Examples:
        >>> suffixed_name("IMG_0001.jpg", 1)
        'IMG_0001_1.jpg'
        >>> suffixed_name("archive.tar.gz", 2)
        'archive.tar_2.gz'
        >>> suffixed_name("README", 3)
        'README_3'
    """
    path = PurePath(filename)
    return f"{path.stem}_{index}{path.suffix}"


def _name_key(filename: str) -> str:
    return filename.casefold()


class DestinationRegistry:
    """
    Names claimed per destination directory for one run.

    Not thread-safe: claims must come from a single planning thread, in
    input order, for suffix assignment to be reproducible.
    """

    def __init__(self, existing_names: Optional[ExistingNames] = None):
        """
        Args:
            existing_names: Lookup for names already on disk in a destination
                directory. None means every directory starts out empty.
        """
        self._existing_names = existing_names
        self._claimed: Dict[str, Set[str]] = {}
        self._next_suffix: Dict[Tuple[str, str], int] = {}
        self.listing_errors: List[Tuple[str, str]] = []

    def _names_in(self, directory: str) -> Set[str]:
        names = self._claimed.get(directory)
        if names is not None:
            return names

        names = set()
        if self._existing_names is not None:
            try:
                names.update(_name_key(name) for name in self._existing_names(directory))
            except OSError as e:
                # Proceed as if empty; the transfer step still refuses to overwrite
                logger.warning("Could not list destination %s: %s", directory, e)
                self.listing_errors.append((directory, str(e)))

        self._claimed[directory] = names
        return names

    def is_claimed(self, directory: str, filename: str) -> bool:
        return _name_key(filename) in self._names_in(directory)

    def claim(self, directory: str, filename: str) -> Claim:
        """
        Reserve filename in directory, adding a suffix if it is taken.

        Args:
            directory: Relative destination directory
            filename: Desired name (the source file's name)

        Returns:
            Claim with the final name and the suffix used
        """
        names = self._names_in(directory)

        key = _name_key(filename)
        if key not in names:
            names.add(key)
            return Claim(filename)

        # Every index below the hint was already found taken
        hint_key = (directory, key)
        start = self._next_suffix.get(hint_key, 1)
        for index in itertools.count(start):
            candidate = suffixed_name(filename, index)
            candidate_key = _name_key(candidate)
            if candidate_key not in names:
                names.add(candidate_key)
                self._next_suffix[hint_key] = index + 1
                logger.debug("Renamed %s to %s in %s", filename, candidate, directory)
                return Claim(candidate, index)
