"""Scanner module for identifying containers and reading capture dates."""

from photo_organizer.scanner.dates import resolve_capture_date
from photo_organizer.scanner.directory import collect_files, existing_names_under
from photo_organizer.scanner.exif import (
    CorruptMetadataError,
    ExtractionResult,
    extract_candidates,
    parse_exif_datetime,
)
from photo_organizer.scanner.formats import identify_format, sniff_format

__all__ = [
    "CorruptMetadataError",
    "ExtractionResult",
    "collect_files",
    "existing_names_under",
    "extract_candidates",
    "identify_format",
    "parse_exif_datetime",
    "resolve_capture_date",
    "sniff_format",
]
