"""Data models for photo-organizer."""

from photo_organizer.models.enums import ContainerFormat, DateField, TransferAction
from photo_organizer.models.plan import (
    CandidateDate,
    ClassificationPlan,
    ResolvedDate,
    RunStatistics,
)

__all__ = [
    "CandidateDate",
    "ClassificationPlan",
    "ContainerFormat",
    "DateField",
    "ResolvedDate",
    "RunStatistics",
    "TransferAction",
]
