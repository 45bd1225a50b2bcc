"""Tests for plan reports."""

from datetime import datetime
from pathlib import Path

import pandas as pd

from photo_organizer.models import ClassificationPlan, DateField, RunStatistics
from photo_organizer.report import PLAN_COLUMNS, plans_to_dataframe, statistics_to_dataframe, write_report


def sample_plans():
    return [
        ClassificationPlan(
            source=Path("/inbox/a.jpg"),
            destination_dir="2023-06-15",
            filename="a.jpg",
            captured_at=datetime(2023, 6, 15, 10, 30),
            date_field=DateField.DATE_TIME_ORIGINAL,
        ),
        ClassificationPlan(source=Path("/inbox/b.jpg"), destination_dir="unsorted", filename="b.jpg"),
    ]


class TestPlansToDataframe:
    def test_columns_and_rows(self):
        df = plans_to_dataframe(sample_plans())

        assert list(df.columns) == PLAN_COLUMNS
        assert len(df) == 2
        assert df.loc[0, "relative_path"] == "2023-06-15/a.jpg"
        assert df.loc[0, "date_field"] == "DateTimeOriginal"
        assert df.loc[1, "destination_dir"] == "unsorted"

    def test_empty(self):
        df = plans_to_dataframe([])

        assert df.empty
        assert list(df.columns) == PLAN_COLUMNS


class TestStatisticsToDataframe:
    def test_sorted_buckets(self):
        stats = RunStatistics(bucket_counts={"unsorted": 1, "2023-06-15": 2})

        df = statistics_to_dataframe(stats)

        assert list(df["bucket"]) == ["2023-06-15", "unsorted"]
        assert list(df["files"]) == [2, 1]


class TestWriteReport:
    def test_writes_csv(self, temp_dir: Path):
        path = temp_dir / "reports" / "plan.csv"

        written = write_report(sample_plans(), path)

        assert written == path
        df = pd.read_csv(path)
        assert list(df.columns) == PLAN_COLUMNS
        assert list(df["filename"]) == ["a.jpg", "b.jpg"]
