"""
Command-line interface for photo-organizer.

Example:
    $ photo-organizer ~/Pictures/inbox --dry-run
    $ photo-organizer ~/Pictures/inbox -o ~/Pictures/library -f "%Y/%Y-%m" --move
    $ photo-organizer . --report plan.csv --workers 8
"""

import sys
from pathlib import Path
from typing import Optional

import click
import yaml

from photo_organizer.__version__ import __version__
from photo_organizer.config import ConfigError, OrganizerSettings, load_settings
from photo_organizer.executor import execute_plans
from photo_organizer.models.enums import TransferAction
from photo_organizer.planner import ClassificationPlanner
from photo_organizer.report import write_report
from photo_organizer.scanner.directory import collect_files, existing_names_under
from photo_organizer.utils import setup_logging


DEFAULT_OUTPUT_NAME = "organized"

# How many failures to list before summarising the rest
MAX_LISTED_FAILURES = 10


def _apply_overrides(
    settings: OrganizerSettings,
    output: Optional[Path],
    pattern: Optional[str],
    move: bool,
    recursive: Optional[bool],
    workers: Optional[int],
) -> OrganizerSettings:
    """Layer command-line flags over file and environment settings."""
    if output is not None:
        settings.output = str(output)
    if pattern is not None:
        settings.pattern = pattern
    if move:
        settings.action = TransferAction.MOVE.value
    if recursive is not None:
        settings.recursive = recursive
    if workers is not None:
        settings.max_workers = workers
    return settings.validate()


@click.command()
@click.argument('source', default='.', type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option('--output', '-o', type=click.Path(file_okay=False, path_type=Path),
              help='Output directory (default: SOURCE/organized)')
@click.option('--format', '-f', 'pattern', type=str,
              help='Date directory pattern using %Y, %m and %d (default: "%Y-%m-%d")')
@click.option('--move', '-m', is_flag=True, help='Move files instead of copying them')
@click.option('--dry-run', '-d', is_flag=True, help='Show what would happen without touching any file')
@click.option('--recursive/--no-recursive', default=None, help='Scan subdirectories (default: recursive)')
@click.option('--workers', '-w', type=click.IntRange(min=1), help='Threads used to read metadata')
@click.option('--config', '-c', 'config_path', type=click.Path(exists=True, dir_okay=False, path_type=Path),
              help='Configuration file path')
@click.option('--report', type=click.Path(dir_okay=False, path_type=Path), help='Write the plan to a CSV file')
@click.option('--progress/--no-progress', default=False, help='Show progress bars')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.option('--quiet', '-q', is_flag=True, help='Only print the summary')
@click.version_option(__version__, prog_name='photo-organizer')
def main(source, output, pattern, move, dry_run, recursive, workers, config_path,
         report, progress, verbose, quiet):
    """Organize photos into date-named directories by their capture date.

    The capture date is read from the EXIF metadata of each file
    (DateTimeOriginal, then DateTimeDigitized, then DateTime). Files without
    a usable date go to "unsorted". Existing files are never overwritten:
    name clashes get a numeric suffix (IMG_0001_1.jpg).

    SOURCE: Directory containing the photos (default: current directory)

    Examples:
        photo-organizer ~/Pictures/inbox --dry-run
        photo-organizer . -o ~/Pictures/library -f "%Y/%Y-%m" --move
    """
    try:
        settings = _apply_overrides(load_settings(config_path), output, pattern, move, recursive, workers)
    except (ConfigError, FileNotFoundError, yaml.YAMLError) as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(2)

    try:
        setup_logging(settings.log_level, settings.log_file, verbose=verbose, quiet=quiet)
    except ValueError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(2)

    source = source.resolve()
    output_root = Path(settings.output).expanduser().resolve() if settings.output else source / DEFAULT_OUTPUT_NAME
    action = settings.transfer_action

    if not quiet:
        if dry_run:
            click.echo("DRY RUN: no files will be copied or moved.\n")
        click.echo(f"Source: {source}")
        click.echo(f"Output: {output_root}")
        click.echo(
            f"Action: {action.value}  |  Pattern: {settings.pattern}  |  "
            f"Recursive: {'yes' if settings.recursive else 'no'}\n"
        )

    files = collect_files(
        source,
        recursive=settings.recursive,
        include_hidden=settings.include_hidden,
        exclude=[output_root],
    )

    if not quiet:
        click.echo(f"Found {len(files)} files\n")

    if not files:
        click.echo("No files to organize.")
        return

    planner = ClassificationPlanner(
        pattern=settings.pattern,
        action=action,
        existing_names=existing_names_under(output_root),
        max_workers=settings.max_workers,
    )
    planning = planner.plan(files, progress=progress)
    stats = planning.statistics

    if not quiet:
        label = f"[DRY RUN] {action.value}" if dry_run else action.value
        for plan in planning.plans:
            date_info = plan.captured_at.strftime("%Y-%m-%d %H:%M:%S") if plan.captured_at else "no date"
            click.echo(f"  {label}: {plan.source} -> {plan.target_path(output_root)} [{date_info}]")

    execution = execute_plans(planning.plans, output_root, dry_run=dry_run, progress=progress)

    if report:
        write_report(planning.plans, report)
        if not quiet:
            click.echo(f"\nPlan written to {report}")

    click.echo("\nOrganization complete:")
    click.echo(f"  Dated: {stats.dated}  |  Unsorted: {stats.unsorted}  |  "
               f"Renamed: {stats.collisions}  |  Failed: {execution.failed}")
    click.echo(f"  {execution}")

    if not quiet and stats.bucket_counts:
        click.echo("\nDate distribution:")
        for bucket, count in stats.bucket_counts.items():
            click.echo(f"  {bucket}: {count}")

    if stats.listing_errors:
        click.echo("\nDestinations that could not be listed:", err=True)
        for directory, error in stats.listing_errors:
            click.echo(f"  {directory}: {error}", err=True)

    if execution.errors:
        click.echo("\nFailed files:", err=True)
        for path, error in execution.errors[:MAX_LISTED_FAILURES]:
            click.echo(f"  {path}: {error}", err=True)
        if len(execution.errors) > MAX_LISTED_FAILURES:
            click.echo(f"  ... and {len(execution.errors) - MAX_LISTED_FAILURES} more", err=True)
        sys.exit(1)


if __name__ == '__main__':
    main()
