"""
Capture date resolution.

Picks one authoritative date per file from the candidates found by the
extractor: DateTimeOriginal, else DateTimeDigitized, else DateTime, else
no date. When a field appears twice (some cameras write DateTimeOriginal to
both IFD0 and the Exif IFD), the first one encountered in scan order wins.
"""

from typing import Dict, Iterable

from photo_organizer.models.enums import DateField
from photo_organizer.models.plan import CandidateDate, ResolvedDate


def resolve_capture_date(candidates: Iterable[CandidateDate]) -> ResolvedDate:
    """
    Apply the date field priority chain.

    Args:
        candidates: Valid candidates in scan order

    Returns:
        The highest-priority candidate as a ResolvedDate, or
        ResolvedDate.unknown() if there are none

    Example:
        >>> resolve_capture_date([
        ...     CandidateDate(DateField.DATE_TIME, datetime(2024, 1, 2, 8, 0)),
        ...     CandidateDate(DateField.DATE_TIME_ORIGINAL, datetime(2023, 6, 15, 10, 30)),
        ... ]).value
        datetime.datetime(2023, 6, 15, 10, 30)
    """
    first_by_field: Dict[DateField, CandidateDate] = {}
    for candidate in candidates:
        first_by_field.setdefault(candidate.kind, candidate)

    for date_field in DateField.by_priority():
        chosen = first_by_field.get(date_field)
        if chosen is not None:
            return ResolvedDate(chosen.value, chosen.kind)

    return ResolvedDate.unknown()
