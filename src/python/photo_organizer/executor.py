"""
Applying classification plans to the filesystem.

A dry run performs exactly the same validation as a real run and reports
the same failures for invalid plans, it just stops before touching the
disk. A failed copy or move is recorded and the remaining plans still run.
"""

import errno
import logging
import shutil
from pathlib import Path, PurePosixPath
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from tqdm import tqdm

from photo_organizer.models.enums import TransferAction
from photo_organizer.models.plan import ClassificationPlan

logger = logging.getLogger(__name__)

# Performs the byte transfer for one plan: (source, target, action)
Transfer = Callable[[Path, Path, TransferAction], None]


class ExecutionResult:
    """Track results of applying a plan list."""
    def __init__(self, dry_run: bool = True):
        self.dry_run = dry_run
        self.succeeded = 0
        self.errors: List[Tuple[Path, str]] = []

    @property
    def failed(self) -> int:
        return len(self.errors)

    def add_error(self, file_path: Path, error: str):
        self.errors.append((file_path, error))

    def __str__(self):
        verb = "Would transfer" if self.dry_run else "Transferred"
        return f"{verb} {self.succeeded} files. Failures: {self.failed}"


def transfer_file(source: Path, target: Path, action: TransferAction) -> None:
    """
    Copy or move one file, never replacing an existing target.

    Moves use shutil.move, which renames within a filesystem and falls back
    to copy-then-delete across filesystems.

    Raises:
        FileExistsError: If target already exists
        OSError: If the copy or move fails
    """
    if target.exists():
        raise FileExistsError(errno.EEXIST, "Destination already exists", str(target))

    if action is TransferAction.MOVE:
        shutil.move(str(source), str(target))
    else:
        shutil.copy2(source, target)


def validate_plan(plan: ClassificationPlan) -> Optional[str]:
    """
    Check that a single plan can be executed.

    Returns:
        The reason the plan is invalid, or None if it is valid
    """
    directory = plan.destination_dir
    if not directory or not directory.strip():
        return "empty destination directory"

    parts = PurePosixPath(directory).parts
    if directory.startswith(("/", "\\")) or ".." in parts:
        return f"destination directory escapes the output root: {directory!r}"

    name = plan.filename
    if not name or name in (".", "..") or "/" in name or "\\" in name:
        return f"invalid destination filename: {name!r}"

    if not isinstance(plan.action, TransferAction):
        return f"unknown action: {plan.action!r}"

    return None


def validate_plans(plans: Sequence[ClassificationPlan]) -> Dict[int, str]:
    """
    Validate a plan list as a whole.

    Besides checking each plan, no two plans may target the same path
    (compared case-insensitively); the later plan is the invalid one.

    Returns:
        Mapping of plan index to the reason that plan is invalid
    """
    problems: Dict[int, str] = {}
    targets: Dict[str, int] = {}

    for index, plan in enumerate(plans):
        reason = validate_plan(plan)
        if reason is None:
            key = plan.relative_path.casefold()
            if key in targets:
                reason = f"same destination as plan {targets[key]}: {plan.relative_path}"
            else:
                targets[key] = index
        if reason is not None:
            problems[index] = reason

    return problems


def execute_plans(
    plans: Sequence[ClassificationPlan],
    output_root: Path,
    dry_run: bool = True,
    transfer: Transfer = transfer_file,
    progress: bool = False,
) -> ExecutionResult:
    """
    Apply plans in order, or only validate them in a dry run.

    Args:
        plans: Plans from the classification planner
        output_root: Directory the plans' relative destinations live under
        dry_run: If True, validate only; nothing on disk changes
        transfer: Copy/move primitive used for each plan
        progress: Show a progress bar

    Returns:
        ExecutionResult with success and failure counts
    """
    result = ExecutionResult(dry_run=dry_run)
    problems = validate_plans(plans)

    logger.info(
        "Executing %d plans into %s (%s)",
        len(plans), output_root, "DRY RUN" if dry_run else "LIVE",
    )

    for index, plan in enumerate(tqdm(plans, desc="Organizing", unit="files", disable=not progress)):
        if index in problems:
            logger.error("Invalid plan for %s: %s", plan.source, problems[index])
            result.add_error(plan.source, problems[index])
            continue

        target = plan.target_path(output_root)

        if dry_run:
            logger.info("[DRY RUN] %s: %s -> %s", plan.action.value, plan.source, target)
            result.succeeded += 1
            continue

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            transfer(plan.source, target, plan.action)
        except OSError as e:
            logger.error("Failed to %s %s: %s", plan.action.value, plan.source, e)
            result.add_error(plan.source, str(e))
        else:
            logger.info("%s: %s -> %s", plan.action.value, plan.source, target)
            result.succeeded += 1

    logger.info("%s", result)
    return result
