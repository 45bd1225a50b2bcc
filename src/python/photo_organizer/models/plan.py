"""
Date and plan models.

A photo moves through the organizer as:
- CandidateDate: one date field read from its metadata (zero or more per file)
- ResolvedDate: the single date chosen for classification, or "no date"
- ClassificationPlan: where the file goes and how it gets there

RunStatistics accumulates counts while plans are created. These models are
plain dataclasses so they convert cleanly to dicts and pandas DataFrames.
"""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path, PurePosixPath
from typing import Dict, List, Optional, Tuple

from photo_organizer.models.enums import ContainerFormat, DateField, TransferAction


@dataclass(frozen=True)
class CandidateDate:
    """A plausible date read from one metadata field."""
    kind: DateField
    value: datetime


@dataclass(frozen=True)
class ResolvedDate:
    """
    The authoritative capture date of a file.

    Attributes:
        value: The chosen timestamp, or None when no field held a valid date
        source: The field the timestamp came from
    """
    value: Optional[datetime] = None
    source: Optional[DateField] = None

    @classmethod
    def unknown(cls) -> "ResolvedDate":
        """The explicit "no date" state."""
        return cls()

    @property
    def is_known(self) -> bool:
        return self.value is not None


@dataclass(frozen=True)
class ClassificationPlan:
    """
    Where one input file goes and how it gets there.

    Attributes:
        source: Path of the input file
        destination_dir: Relative, "/"-separated destination directory
        filename: Final, collision-free filename inside destination_dir
        action: Copy or move
        captured_at: The resolved capture date (None for unsorted files)
        date_field: Metadata field that supplied captured_at
        container_format: Detected container family of the source
    """
    source: Path
    destination_dir: str
    filename: str
    action: TransferAction = TransferAction.COPY
    captured_at: Optional[datetime] = None
    date_field: Optional[DateField] = None
    container_format: ContainerFormat = ContainerFormat.UNSUPPORTED

    @property
    def relative_path(self) -> str:
        """Destination relative to the output root, e.g. "2023-06-15/a.jpg"."""
        return f"{self.destination_dir}/{self.filename}"

    @property
    def renamed(self) -> bool:
        """True if a suffix was added to avoid a name collision."""
        return self.filename != self.source.name

    def target_path(self, output_root: Path) -> Path:
        """Absolute destination of this plan under output_root."""
        return output_root.joinpath(*PurePosixPath(self.destination_dir).parts, self.filename)

    def to_dict(self) -> dict:
        """Convert to dictionary for pandas DataFrame."""
        return {
            "source": str(self.source),
            "destination_dir": self.destination_dir,
            "filename": self.filename,
            "relative_path": self.relative_path,
            "action": self.action.value,
            "captured_at": self.captured_at,
            "date_field": self.date_field.value if self.date_field else None,
            "container_format": self.container_format.value,
            "renamed": self.renamed,
        }


@dataclass
class RunStatistics:
    """
    Counts accumulated while a batch is planned.

    Attributes:
        files_processed: Number of files planned
        dated: Files placed in a date bucket
        unsorted: Files routed to the unsorted directory
        unsupported: Files whose format carries no date metadata
        unreadable: Files whose metadata could not be read or parsed
        collisions: Files that needed a numeric suffix
        bucket_counts: Files per destination directory
        listing_errors: (directory, error) for destinations that could not be listed
    """
    files_processed: int = 0
    dated: int = 0
    unsorted: int = 0
    unsupported: int = 0
    unreadable: int = 0
    collisions: int = 0
    bucket_counts: Dict[str, int] = field(default_factory=dict)
    listing_errors: List[Tuple[str, str]] = field(default_factory=list)

    def record_plan(self, plan: ClassificationPlan, renamed: bool) -> None:
        """Count one newly created plan."""
        self.files_processed += 1
        if plan.captured_at is None:
            self.unsorted += 1
        else:
            self.dated += 1
        if renamed:
            self.collisions += 1
        self.bucket_counts[plan.destination_dir] = self.bucket_counts.get(plan.destination_dir, 0) + 1

    def finalize(self) -> None:
        """Order the bucket counts by bucket name once planning is complete."""
        self.bucket_counts = dict(sorted(self.bucket_counts.items()))

    def to_dict(self) -> dict:
        return {
            "files_processed": self.files_processed,
            "dated": self.dated,
            "unsorted": self.unsorted,
            "unsupported": self.unsupported,
            "unreadable": self.unreadable,
            "collisions": self.collisions,
            "bucket_counts": dict(self.bucket_counts),
            "listing_errors": list(self.listing_errors),
        }

    def __str__(self):
        return (
            f"Planned {self.files_processed} files. "
            f"Dated: {self.dated}. "
            f"Unsorted: {self.unsorted}. "
            f"Collisions resolved: {self.collisions}"
        )
