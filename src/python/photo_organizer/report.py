"""
Tabular reports of a planning run.

Plans and bucket counts are returned as pandas DataFrames for inspection
in a notebook, or written to CSV from the command line.
"""

from pathlib import Path
from typing import Sequence

import pandas as pd

from photo_organizer.models.plan import ClassificationPlan, RunStatistics

PLAN_COLUMNS = [
    "source",
    "destination_dir",
    "filename",
    "relative_path",
    "action",
    "captured_at",
    "date_field",
    "container_format",
    "renamed",
]


def plans_to_dataframe(plans: Sequence[ClassificationPlan]) -> pd.DataFrame:
    """
    Convert a list of plans to a pandas DataFrame.

    Args:
        plans: Plans in planning order

    Returns:
        DataFrame with one row per plan
    """
    if not plans:
        return pd.DataFrame(columns=PLAN_COLUMNS)

    return pd.DataFrame([plan.to_dict() for plan in plans], columns=PLAN_COLUMNS)


def statistics_to_dataframe(statistics: RunStatistics) -> pd.DataFrame:
    """
    Convert per-bucket counts to a DataFrame sorted by bucket.

    Args:
        statistics: Statistics of a planning run

    Returns:
        DataFrame with "bucket" and "files" columns
    """
    rows = sorted(statistics.bucket_counts.items())
    return pd.DataFrame(rows, columns=["bucket", "files"])


def write_report(plans: Sequence[ClassificationPlan], path: Path) -> Path:
    """
    Write the plan table to a CSV file.

    Args:
        plans: Plans to report
        path: Output CSV path; parent directories are created

    Returns:
        The path written
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    plans_to_dataframe(plans).to_csv(path, index=False)
    return path
