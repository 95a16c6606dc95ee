"""Tests for timesheets CLI commands via Typer CliRunner."""

import json

from hourbook.timesheets.cli import app as ts_app


# ---------------------------------------------------------------------------
# split
# ---------------------------------------------------------------------------


def test_split_human(cli_runner):
    result = cli_runner.invoke(ts_app, ["split", "--week", "14", "--year", "2025",
                                        "--hours", "8,8,8,8,8"])
    assert result.exit_code == 0, result.output
    assert "2025-03-31 to 2025-04-04" in result.output
    assert "2025-03" in result.output
    assert "32.00" in result.output


def test_split_json(cli_runner):
    result = cli_runner.invoke(ts_app, ["split", "-w", "14", "-y", "2025",
                                        "--hours", "8,8,8,8,8", "--format", "json"])
    assert result.exit_code == 0, result.output
    rows = json.loads(result.output)
    assert [r["month"] for r in rows] == ["2025-03", "2025-04"]
    assert rows[0]["total_hours"] == 8
    assert rows[1]["total_hours"] == 32


def test_split_wrong_count(cli_runner):
    result = cli_runner.invoke(ts_app, ["split", "-w", "14", "-y", "2025", "--hours", "8,8"])
    assert result.exit_code == 1
    assert "needs 5 values" in result.output


def test_split_not_numbers(cli_runner):
    result = cli_runner.invoke(ts_app, ["split", "-w", "14", "-y", "2025", "--hours", "a,b,c,d,e"])
    assert result.exit_code == 1


# ---------------------------------------------------------------------------
# month / range
# ---------------------------------------------------------------------------


def test_month_json(cli_runner, dataset_file):
    result = cli_runner.invoke(ts_app, ["month", str(dataset_file), "--month", "2025-04",
                                        "--format", "json"])
    assert result.exit_code == 0, result.output
    rows = json.loads(result.output)
    assert sum(r["hours"] for r in rows) == 70
    assert {r["status"] for r in rows} == {"submitted", "approved", "draft"}


def test_month_human_title(cli_runner, dataset_file):
    result = cli_runner.invoke(ts_app, ["month", str(dataset_file), "-m", "2025-03"])
    assert result.exit_code == 0, result.output
    assert "2025-03: 8.00 hours" in result.output
    assert "Asha Rao" in result.output


def test_month_filtered_by_user(cli_runner, dataset_file):
    result = cli_runner.invoke(ts_app, ["month", str(dataset_file), "-m", "2025-04",
                                        "--users", "u2", "--format", "json"])
    assert result.exit_code == 0, result.output
    rows = json.loads(result.output)
    assert [r["user"] for r in rows] == ["ben"]


def test_month_invalid_key(cli_runner, dataset_file):
    result = cli_runner.invoke(ts_app, ["month", str(dataset_file), "-m", "April"])
    assert result.exit_code == 1
    assert "Invalid month key" in result.output


def test_range_json(cli_runner, dataset_file):
    result = cli_runner.invoke(ts_app, ["range", str(dataset_file), "--start", "2025-04-01",
                                        "--end", "2025-04-02", "--format", "json"])
    assert result.exit_code == 0, result.output
    rows = json.loads(result.output)
    assert [r["total_hours"] for r in rows] == [16, 4]
    assert list(rows[0]["month_hours"]) == ["2025-04"]


def test_range_bad_date(cli_runner, dataset_file):
    result = cli_runner.invoke(ts_app, ["range", str(dataset_file), "--start", "04/01/2025",
                                        "--end", "2025-04-02"])
    assert result.exit_code == 1
    assert "--start" in result.output


def test_missing_dataset(cli_runner, tmp_path):
    result = cli_runner.invoke(ts_app, ["month", str(tmp_path / "none.json"), "-m", "2025-04"])
    assert result.exit_code == 1
    assert "Dataset not found" in result.output


# ---------------------------------------------------------------------------
# summary / utilization
# ---------------------------------------------------------------------------


def test_summary_json(cli_runner, dataset_file):
    result = cli_runner.invoke(ts_app, ["summary", str(dataset_file), "--format", "json"])
    assert result.exit_code == 0, result.output
    data = json.loads(result.output)
    assert data["view"] == "All Data (Full History)"
    assert data["stats"]["total_hours"] == 78
    assert [u["name"] for u in data["users"]] == ["Asha Rao", "ben"]


def test_summary_human_month(cli_runner, dataset_file):
    result = cli_runner.invoke(ts_app, ["summary", str(dataset_file), "--month", "2025-04"])
    assert result.exit_code == 0, result.output
    assert "Summary: 2025-04" in result.output
    assert "70.00" in result.output


def test_summary_needs_both_range_ends(cli_runner, dataset_file):
    result = cli_runner.invoke(ts_app, ["summary", str(dataset_file), "--start", "2025-04-01"])
    assert result.exit_code == 1
    assert "both --start and --end" in result.output


def test_summary_month_and_range_conflict(cli_runner, dataset_file):
    result = cli_runner.invoke(ts_app, ["summary", str(dataset_file), "-m", "2025-04",
                                        "--start", "2025-04-01", "--end", "2025-04-30"])
    assert result.exit_code == 1


def test_utilization_json(cli_runner, dataset_file):
    result = cli_runner.invoke(ts_app, ["utilization", str(dataset_file), "--format", "json"])
    assert result.exit_code == 0, result.output
    rows = json.loads(result.output)
    assert rows[0]["name"] == "Atlas"
    assert rows[0]["utilization"] == 58.33
    assert rows[1]["utilization"] == 0


def test_utilization_markdown(cli_runner, dataset_file):
    result = cli_runner.invoke(ts_app, ["utilization", str(dataset_file), "-m", "2025-04",
                                        "--format", "markdown"])
    assert result.exit_code == 0, result.output
    assert "# Project utilization: 2025-04" in result.output
    assert "| Atlas |" in result.output


# ---------------------------------------------------------------------------
# export
# ---------------------------------------------------------------------------


def test_export_projects(cli_runner, dataset_file, tmp_path):
    out = tmp_path / "all.xlsx"
    result = cli_runner.invoke(ts_app, ["export", str(dataset_file), "--out", str(out)])
    assert result.exit_code == 0, result.output
    assert out.exists()
    assert "3 sheets" in result.output


def test_export_user_month(cli_runner, dataset_file, tmp_path):
    result = cli_runner.invoke(ts_app, ["export", str(dataset_file), "--by", "user", "--id", "u1",
                                        "-m", "2025-03", "--output-dir", str(tmp_path)])
    assert result.exit_code == 0, result.output
    files = list(tmp_path.glob("Asha Rao-01-Mar-25 to 31-Mar-25 (*).xlsx"))
    assert len(files) == 1


def test_export_project_needs_id(cli_runner, dataset_file, tmp_path):
    result = cli_runner.invoke(ts_app, ["export", str(dataset_file), "--by", "project",
                                        "--output-dir", str(tmp_path)])
    assert result.exit_code == 1
    assert "--id" in result.output


def test_export_unknown_kind(cli_runner, dataset_file, tmp_path):
    result = cli_runner.invoke(ts_app, ["export", str(dataset_file), "--by", "client",
                                        "--output-dir", str(tmp_path)])
    assert result.exit_code == 1
