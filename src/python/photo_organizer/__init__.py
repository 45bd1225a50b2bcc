"""
photo-organizer - sort photos into date-named directories by capture date.

The capture date is read from the EXIF metadata embedded in each file's
container (JPEG, TIFF/RAW, HEIC, PNG). Files are then planned into a
directory layout such as "2023/2023-06/2023-06-15" and copied or moved
there without overwriting anything.

Core Concepts:
- ClassificationPlan: where one file goes and whether it is copied or moved
- Dry run: the same plans and validation as a real run, with no file changes

Usage:
    from pathlib import Path
    from photo_organizer import ClassificationPlanner, collect_files, execute_plans

    files = collect_files(Path("/photos/inbox"))
    planning = ClassificationPlanner(pattern="%Y/%m").plan(files)
    result = execute_plans(planning.plans, Path("/photos/library"), dry_run=True)
    print(planning.statistics)
    print(result)
"""

from photo_organizer.__version__ import __version__
from photo_organizer.conflicts import DestinationRegistry, suffixed_name
from photo_organizer.executor import ExecutionResult, execute_plans, transfer_file, validate_plans
from photo_organizer.layout import (
    DEFAULT_PATTERN,
    UNSORTED_DIRECTORY,
    PatternError,
    format_destination,
    validate_pattern,
)
from photo_organizer.models import (
    CandidateDate,
    ClassificationPlan,
    ContainerFormat,
    DateField,
    ResolvedDate,
    RunStatistics,
    TransferAction,
)
from photo_organizer.planner import ClassificationPlanner, PlanningResult, inspect_file
from photo_organizer.scanner import (
    ExtractionResult,
    collect_files,
    existing_names_under,
    extract_candidates,
    identify_format,
    resolve_capture_date,
)

__all__ = [
    "__version__",
    # Models
    "CandidateDate",
    "ClassificationPlan",
    "ContainerFormat",
    "DateField",
    "ResolvedDate",
    "RunStatistics",
    "TransferAction",
    # Scanner
    "ExtractionResult",
    "collect_files",
    "existing_names_under",
    "extract_candidates",
    "identify_format",
    "resolve_capture_date",
    # Layout and placement
    "DEFAULT_PATTERN",
    "UNSORTED_DIRECTORY",
    "PatternError",
    "DestinationRegistry",
    "format_destination",
    "suffixed_name",
    "validate_pattern",
    # Planning and execution
    "ClassificationPlanner",
    "ExecutionResult",
    "PlanningResult",
    "execute_plans",
    "inspect_file",
    "transfer_file",
    "validate_plans",
]
