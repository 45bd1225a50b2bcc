"""
Classification planning.

Turns an ordered list of files into one ClassificationPlan per file plus
RunStatistics. Reading each file's metadata is independent and may run on a
thread pool; assigning final names is done by a single thread, in input
order, so that collision suffixes are reproducible between runs.

Example:
    >>> planner = ClassificationPlanner(pattern="%Y/%m")
    >>> result = planner.plan(sorted(Path("/photos/inbox").iterdir()))
    >>> for plan in result.plans:
    ...     print(plan.source.name, "->", plan.relative_path)
    >>> print(result.statistics)
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional

from tqdm import tqdm

from photo_organizer.conflicts import DestinationRegistry, ExistingNames
from photo_organizer.layout import DEFAULT_PATTERN, format_destination, validate_pattern
from photo_organizer.models.enums import ContainerFormat, TransferAction
from photo_organizer.models.plan import ClassificationPlan, ResolvedDate, RunStatistics
from photo_organizer.scanner.dates import resolve_capture_date
from photo_organizer.scanner.exif import ExtractionResult, extract_candidates
from photo_organizer.scanner.formats import SIGNATURE_SIZE, identify_format

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FileInspection:
    """
    What was learned about one file before it is planned.

    Attributes:
        source: Path of the file
        extraction: Container format, date candidates and read errors
        resolved: The capture date chosen from the candidates
    """
    source: Path
    extraction: ExtractionResult
    resolved: ResolvedDate

    @property
    def container_format(self) -> ContainerFormat:
        return self.extraction.container_format


@dataclass
class PlanningResult:
    """Plans in input order, the run statistics and the per-file inspections."""
    plans: List[ClassificationPlan] = field(default_factory=list)
    statistics: RunStatistics = field(default_factory=RunStatistics)
    inspections: List[FileInspection] = field(default_factory=list)


def inspect_file(path: Path) -> FileInspection:
    """
    Identify a file's container and resolve its capture date.

    Never raises for problems with the file itself: an unreadable or corrupt
    file comes back with no candidates and an error, and is planned as
    unsorted.

    Args:
        path: File to inspect

    Returns:
        FileInspection for the file
    """
    try:
        with open(path, "rb") as stream:
            prefix = stream.read(SIGNATURE_SIZE)
            container_format = identify_format(path, prefix)
            extraction = extract_candidates(stream, container_format, source=str(path))
    except OSError as e:
        logger.warning("Could not read %s: %s", path, e)
        extraction = ExtractionResult(ContainerFormat.from_filename(path.name), error=str(e))

    return FileInspection(path, extraction, resolve_capture_date(extraction.candidates))


class ClassificationPlanner:
    """
    Plan where each file of a batch goes.

    The planner owns the DestinationRegistry and RunStatistics of a run.
    Calling plan() again starts a fresh run.
    """

    def __init__(
        self,
        pattern: str = DEFAULT_PATTERN,
        action: TransferAction = TransferAction.COPY,
        existing_names: Optional[ExistingNames] = None,
        max_workers: int = 1,
    ):
        """
        Initialize the planner.

        Args:
            pattern: Destination directory pattern (%Y, %m, %d tokens)
            action: Copy or move, recorded on every plan
            existing_names: Lookup for names already present in a destination
                directory; None treats all destinations as empty
            max_workers: Threads used to read metadata; 1 reads sequentially

        Raises:
            PatternError: If the pattern cannot render a relative directory
            ValueError: If max_workers is less than 1
        """
        if max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {max_workers}")

        self.pattern = validate_pattern(pattern)
        self.action = action
        self.existing_names = existing_names
        self.max_workers = max_workers

    def plan(self, paths: Iterable[Path], progress: bool = False) -> PlanningResult:
        """
        Plan every file, in the order given.

        Args:
            paths: Files to plan; the order decides suffix assignment
            progress: Show a progress bar while reading metadata

        Returns:
            PlanningResult with exactly one plan per input file
        """
        paths = [Path(p) for p in paths]
        logger.info("Planning %d files with pattern %r", len(paths), self.pattern)

        result = PlanningResult()
        registry = DestinationRegistry(self.existing_names)

        for inspection in self._inspect_all(paths, progress):
            self._add_plan(inspection, registry, result)

        result.statistics.listing_errors.extend(registry.listing_errors)
        result.statistics.finalize()

        logger.info("%s", result.statistics)
        return result

    def _inspect_all(self, paths: List[Path], progress: bool) -> Iterable[FileInspection]:
        """Yield inspections in input order, reading on a pool if configured."""
        bar = tqdm(total=len(paths), desc="Reading metadata", unit="files", disable=not progress)

        try:
            if self.max_workers == 1:
                for path in paths:
                    yield inspect_file(path)
                    bar.update()
            else:
                # map() hands results back in submission order
                with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                    for inspection in executor.map(inspect_file, paths):
                        yield inspection
                        bar.update()
        finally:
            bar.close()

    def _add_plan(
        self,
        inspection: FileInspection,
        registry: DestinationRegistry,
        result: PlanningResult,
    ) -> None:
        resolved = inspection.resolved
        destination = format_destination(resolved, self.pattern)
        claim = registry.claim(destination, inspection.source.name)

        plan = ClassificationPlan(
            source=inspection.source,
            destination_dir=destination,
            filename=claim.filename,
            action=self.action,
            captured_at=resolved.value,
            date_field=resolved.source,
            container_format=inspection.container_format,
        )

        stats = result.statistics
        stats.record_plan(plan, claim.renamed)
        if not inspection.container_format.has_embedded_metadata:
            stats.unsupported += 1
        elif inspection.extraction.failed:
            stats.unreadable += 1

        result.plans.append(plan)
        result.inspections.append(inspection)

        logger.debug("Planned %s -> %s", inspection.source, plan.relative_path)
