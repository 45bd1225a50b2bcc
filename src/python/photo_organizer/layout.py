"""
Destination directory layout.

Renders a resolved date into a relative directory using a pattern such as
"%Y/%Y-%m/%Y-%m-%d". Only %Y, %m and %d are tokens; everything else,
including "/" and unknown %-sequences, is copied literally so users can
embed fixed path segments ("photos/%Y" or "%Y/%q" both work).
"""

import re

from photo_organizer.models.plan import ResolvedDate

DEFAULT_PATTERN = "%Y-%m-%d"

# Files without a usable date always land here, whatever the pattern
UNSORTED_DIRECTORY = "unsorted"

_TOKEN_RE = re.compile(r"%([Ymd])")


class PatternError(ValueError):
    """Raised for a pattern that cannot produce a relative directory."""


def format_destination(resolved: ResolvedDate, pattern: str = DEFAULT_PATTERN) -> str:
    """
    Render the destination directory for a resolved date.

    Args:
        resolved: The file's resolved capture date
        pattern: Directory pattern with %Y, %m and %d tokens

    Returns:
        Relative "/"-separated directory; UNSORTED_DIRECTORY if the date is unknown

    Examples:
        >>> format_destination(ResolvedDate(datetime(2023, 6, 15)), "%Y/%Y-%m/%Y-%m-%d")
        '2023/2023-06/2023-06-15'
        >>> format_destination(ResolvedDate.unknown(), "%Y/%m")
        'unsorted'
    """
    if not resolved.is_known:
        return UNSORTED_DIRECTORY

    value = resolved.value
    tokens = {
        "Y": f"{value.year:04d}",
        "m": f"{value.month:02d}",
        "d": f"{value.day:02d}",
    }
    rendered = _TOKEN_RE.sub(lambda match: tokens[match.group(1)], pattern)

    return "/".join(part for part in rendered.split("/") if part not in ("", "."))


def validate_pattern(pattern: str) -> str:
    """
    Check that a pattern always renders a usable relative directory.

    Args:
        pattern: Directory pattern

    Returns:
        The pattern, unchanged

    Raises:
        PatternError: If the pattern is empty, absolute, escapes the output
            directory with "..", or contains a NUL character
    """
    if not pattern or not pattern.strip():
        raise PatternError("Directory pattern is empty")

    if "\x00" in pattern:
        raise PatternError("Directory pattern contains a NUL character")

    if pattern.startswith(("/", "\\")) or re.match(r"^[A-Za-z]:", pattern):
        raise PatternError(f"Directory pattern must be relative: {pattern!r}")

    segments = re.split(r"[/\\]", pattern)
    if ".." in segments:
        raise PatternError(f"Directory pattern must not contain '..': {pattern!r}")

    if not any(segment not in ("", ".") for segment in segments):
        raise PatternError(f"Directory pattern renders an empty directory: {pattern!r}")

    return pattern
