"""Tests for applying classification plans."""

from datetime import datetime
from pathlib import Path

import pytest

from photo_organizer.executor import (
    ExecutionResult,
    execute_plans,
    transfer_file,
    validate_plan,
    validate_plans,
)
from photo_organizer.models import ClassificationPlan, TransferAction


def make_source(temp_dir: Path, name: str, content: bytes = b"photo") -> Path:
    path = temp_dir / "inbox" / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content)
    return path


def plan_for(source: Path, directory="2023-06-15", filename=None, action=TransferAction.COPY):
    return ClassificationPlan(
        source=source,
        destination_dir=directory,
        filename=filename or source.name,
        action=action,
        captured_at=datetime(2023, 6, 15),
    )


class TestExecutionResult:
    def test_str(self):
        result = ExecutionResult(dry_run=False)
        result.succeeded = 2
        result.add_error(Path("b.jpg"), "boom")

        assert result.failed == 1
        assert str(result) == "Transferred 2 files. Failures: 1"

    def test_str_dry_run(self):
        assert str(ExecutionResult()) == "Would transfer 0 files. Failures: 0"


class TestTransferFile:
    """Tests for transfer_file function."""

    def test_copy_keeps_source(self, temp_dir: Path):
        source = make_source(temp_dir, "a.jpg")
        target = temp_dir / "a_copy.jpg"

        transfer_file(source, target, TransferAction.COPY)

        assert source.exists()
        assert target.read_bytes() == b"photo"

    def test_move_removes_source(self, temp_dir: Path):
        source = make_source(temp_dir, "a.jpg")
        target = temp_dir / "a_moved.jpg"

        transfer_file(source, target, TransferAction.MOVE)

        assert not source.exists()
        assert target.read_bytes() == b"photo"

    def test_never_overwrites(self, temp_dir: Path):
        source = make_source(temp_dir, "a.jpg")
        target = temp_dir / "taken.jpg"
        target.write_bytes(b"original")

        with pytest.raises(FileExistsError):
            transfer_file(source, target, TransferAction.MOVE)

        assert target.read_bytes() == b"original"
        assert source.exists()


class TestValidatePlans:
    """Tests for plan validation."""

    def test_valid_plan(self):
        assert validate_plan(plan_for(Path("/inbox/a.jpg"))) is None

    @pytest.mark.parametrize("directory,filename", [
        ("", "a.jpg"),
        ("   ", "a.jpg"),
        ("/etc", "a.jpg"),
        ("2023/../..", "a.jpg"),
        ("2023", ""),
        ("2023", ".."),
        ("2023", "sub/a.jpg"),
        ("2023", "sub\\a.jpg"),
    ])
    def test_invalid_plan(self, directory, filename):
        plan = ClassificationPlan(source=Path("/inbox/a.jpg"), destination_dir=directory, filename=filename)
        assert validate_plan(plan) is not None

    def test_duplicate_targets(self):
        """Test that the later of two plans with the same target is rejected."""
        plans = [
            plan_for(Path("/inbox/1/a.jpg")),
            plan_for(Path("/inbox/2/b.jpg")),
            plan_for(Path("/inbox/3/A.JPG")),
        ]

        problems = validate_plans(plans)

        assert list(problems) == [2]
        assert "same destination as plan 0" in problems[2]


class TestExecutePlans:
    """Tests for execute_plans function."""

    def test_copy(self, temp_dir: Path):
        source = make_source(temp_dir, "a.jpg")
        output_root = temp_dir / "organized"

        result = execute_plans([plan_for(source, directory="2023/2023-06")], output_root, dry_run=False)

        assert result.succeeded == 1
        assert source.exists()
        assert (output_root / "2023" / "2023-06" / "a.jpg").read_bytes() == b"photo"

    def test_move(self, temp_dir: Path):
        source = make_source(temp_dir, "a.jpg")
        output_root = temp_dir / "organized"

        result = execute_plans([plan_for(source, action=TransferAction.MOVE)], output_root, dry_run=False)

        assert result.succeeded == 1
        assert not source.exists()
        assert (output_root / "2023-06-15" / "a.jpg").exists()

    def test_dry_run_changes_nothing(self, temp_dir: Path):
        source = make_source(temp_dir, "a.jpg")
        output_root = temp_dir / "organized"

        result = execute_plans([plan_for(source, action=TransferAction.MOVE)], output_root, dry_run=True)

        assert result.dry_run
        assert result.succeeded == 1
        assert source.exists()
        assert not output_root.exists()

    def test_dry_run_reports_invalid_plans(self, temp_dir: Path):
        """Test that a dry run fails the same plans a real run would."""
        source = make_source(temp_dir, "a.jpg")
        plans = [plan_for(source), plan_for(source, directory="../escape")]

        dry = execute_plans(plans, temp_dir / "organized", dry_run=True)

        assert dry.succeeded == 1
        assert [path for path, _ in dry.errors] == [source]

    def test_failure_does_not_stop_batch(self, temp_dir: Path):
        missing = temp_dir / "inbox" / "missing.jpg"
        present = make_source(temp_dir, "b.jpg")
        output_root = temp_dir / "organized"

        result = execute_plans([plan_for(missing), plan_for(present)], output_root, dry_run=False)

        assert result.succeeded == 1
        assert result.failed == 1
        assert result.errors[0][0] == missing
        assert (output_root / "2023-06-15" / "b.jpg").exists()

    def test_existing_target_is_a_failure(self, temp_dir: Path):
        source = make_source(temp_dir, "a.jpg")
        output_root = temp_dir / "organized"
        (output_root / "2023-06-15").mkdir(parents=True)
        (output_root / "2023-06-15" / "a.jpg").write_bytes(b"keep me")

        result = execute_plans([plan_for(source)], output_root, dry_run=False)

        assert result.failed == 1
        assert (output_root / "2023-06-15" / "a.jpg").read_bytes() == b"keep me"

    def test_custom_transfer(self, temp_dir: Path, mocker):
        transfer = mocker.Mock()
        source = make_source(temp_dir, "a.jpg")
        output_root = temp_dir / "organized"

        execute_plans([plan_for(source)], output_root, dry_run=False, transfer=transfer)

        transfer.assert_called_once_with(source, output_root / "2023-06-15" / "a.jpg", TransferAction.COPY)

    def test_transfer_error_is_recorded(self, temp_dir: Path, mocker):
        transfer = mocker.Mock(side_effect=[PermissionError(13, "Permission denied"), None])
        sources = [make_source(temp_dir, "a.jpg"), make_source(temp_dir, "b.jpg")]

        result = execute_plans([plan_for(s) for s in sources], temp_dir / "organized", dry_run=False, transfer=transfer)

        assert transfer.call_count == 2
        assert result.succeeded == 1
        assert "Permission denied" in result.errors[0][1]
