from __future__ import annotations

import datetime
import json
import os
import tempfile

import pytest
from pypdf import PdfWriter
from typer.testing import CliRunner

from leavewise.cli import app
from leavewise.holidays import HolidayRule, get_holidays, in_holidays, us_holidays

runner = CliRunner()


def _write_file(content: str, suffix: str) -> str:
    """Write *content* to a temp file and return its path."""
    fd, path = tempfile.mkstemp(suffix=suffix)
    with os.fdopen(fd, "w") as f:
        f.write(content)
    return path


def _write_config(data: object) -> str:
    return _write_file(json.dumps(data), ".json")


class TestOptimizeCommand:
    def test_optimize_basic(self) -> None:
        result = runner.invoke(
            app, ["optimize", "--budget", "10", "--year", "2025", "--no-calendar"]
        )
        assert result.exit_code == 0
        assert "LEAVE OPTIMIZER" in result.output
        assert "Vacation Blocks" in result.output
        assert "Christmas Day" in result.output

    def test_optimize_json_output(self) -> None:
        result = runner.invoke(
            app,
            ["optimize", "--budget", "3", "--country", "none", "--holiday", "2025-03-03", "--json"],
        )
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["total_leaves"] == 3
        assert data["holidays"] == ["2025-03-03"]
        rec = data["result"]["recommendations"][0]
        assert rec["leave_dates"] == ["2025-03-04", "2025-03-05", "2025-03-06"]
        assert rec["start_date"] == "2025-03-01"
        assert rec["end_date"] == "2025-03-06"
        assert rec["total_days"] == 6
        assert rec["leaves_used"] == 3
        assert data["result"]["leaves_remaining"] == 0
        assert data["result"]["longest_break"] == 6

    def test_prefer_longer_flag(self) -> None:
        base = [
            "optimize",
            "--budget",
            "2",
            "--country",
            "none",
            "--holiday",
            "2025-03-04",
            "--holiday",
            "2025-03-06",
            "--json",
        ]
        efficient = json.loads(runner.invoke(app, base).output)
        longer = json.loads(runner.invoke(app, [*base, "--prefer-longer"]).output)
        assert efficient["result"]["total_vacations"] == 2
        assert longer["result"]["total_vacations"] == 1
        assert longer["result"]["longest_break"] == 6

    def test_seed_window_and_max_consecutive(self) -> None:
        result = runner.invoke(
            app,
            [
                "optimize",
                "--budget",
                "3",
                "--country",
                "none",
                "--holiday",
                "2025-03-03",
                "--max-consecutive",
                "2",
                "--json",
            ],
        )
        assert result.exit_code == 0
        assert json.loads(result.output)["result"]["recommendations"] == []

        result = runner.invoke(
            app,
            [
                "optimize",
                "--budget",
                "3",
                "--country",
                "none",
                "--holiday",
                "2025-03-03",
                "--seed-window",
                "1",
                "--json",
            ],
        )
        data = json.loads(result.output)
        assert data["result"]["optimized_leaves"] == ["2025-03-04"]

    def test_optimize_with_calendar(self) -> None:
        result = runner.invoke(
            app,
            ["optimize", "--budget", "5", "--country", "in", "--year", "2025", "--calendar"],
        )
        assert result.exit_code == 0
        assert "Calendar View" in result.output
        assert "Republic Day" in result.output

    def test_optimize_zero_budget(self) -> None:
        result = runner.invoke(app, ["optimize", "--budget", "0", "--year", "2025", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["result"]["recommendations"] == []
        assert data["result"]["leaves_remaining"] == 0

    def test_optimize_sandwich_rule_accepted(self) -> None:
        args = ["optimize", "--budget", "5", "--year", "2025", "--json"]
        plain = json.loads(runner.invoke(app, args).output)
        sandwich = json.loads(runner.invoke(app, [*args, "--sandwich-rule"]).output)
        assert plain["result"] == sandwich["result"]

    def test_optimize_budget_required(self) -> None:
        result = runner.invoke(app, ["optimize"])
        assert result.exit_code == 1
        assert "--budget is required" in result.output

    def test_optimize_invalid_country(self) -> None:
        result = runner.invoke(app, ["optimize", "--budget", "5", "--country", "zz"])
        assert result.exit_code == 1
        assert "Unknown country preset" in result.output

    def test_optimize_invalid_holiday(self) -> None:
        result = runner.invoke(app, ["optimize", "--budget", "5", "--holiday", "25/12/2025"])
        assert result.exit_code != 0

    def test_debug_logging(self) -> None:
        result = runner.invoke(
            app, ["--debug", "optimize", "--budget", "5", "--year", "2025", "--no-calendar"]
        )
        assert result.exit_code == 0


class TestConfigFile:
    def test_config_supplies_defaults(self) -> None:
        path = _write_config(
            {
                "budget": 2,
                "country": "none",
                "holidays": ["2025-03-04", "2025-03-06"],
                "prefer_longer": True,
            }
        )
        try:
            result = runner.invoke(app, ["optimize", "--config", path, "--json"])
            assert result.exit_code == 0
            data = json.loads(result.output)
            assert data["prefer_longer"] is True
            assert data["result"]["optimized_leaves"] == ["2025-03-03", "2025-03-05"]
        finally:
            os.unlink(path)

    def test_options_override_config(self) -> None:
        path = _write_config({"budget": 5, "country": "none", "holidays": ["2025-03-04"]})
        try:
            result = runner.invoke(app, ["optimize", "--config", path, "--budget", "0", "--json"])
            assert result.exit_code == 0
            data = json.loads(result.output)
            assert data["total_leaves"] == 0
            assert data["result"]["recommendations"] == []
        finally:
            os.unlink(path)

    def test_config_not_found(self) -> None:
        result = runner.invoke(app, ["optimize", "--config", "/nonexistent/config.json"])
        assert result.exit_code == 1
        assert "Config file not found" in result.output

    def test_config_invalid_json(self) -> None:
        path = _write_file("{not json", ".json")
        try:
            result = runner.invoke(app, ["optimize", "--config", path])
            assert result.exit_code == 1
            assert "Invalid JSON" in result.output
        finally:
            os.unlink(path)

    def test_config_must_be_object(self) -> None:
        path = _write_config([1, 2, 3])
        try:
            result = runner.invoke(app, ["optimize", "--config", path])
            assert result.exit_code == 1
            assert "JSON object" in result.output
        finally:
            os.unlink(path)

    def test_config_holidays_must_be_list(self) -> None:
        path = _write_config({"budget": 3, "holidays": "2025-03-04"})
        try:
            result = runner.invoke(app, ["optimize", "--config", path])
            assert result.exit_code == 1
            assert "must be a list" in result.output
        finally:
            os.unlink(path)

    def test_config_negative_seed_window(self) -> None:
        path = _write_config(
            {"budget": 5, "seed_window": -1, "country": "none", "holidays": ["2025-03-03"]}
        )
        try:
            result = runner.invoke(app, ["optimize", "--config", path, "--json"])
            assert result.exit_code == 1
            assert "'seed_window' must be at least 0" in result.output
        finally:
            os.unlink(path)

    def test_config_zero_max_consecutive(self) -> None:
        path = _write_config({"budget": 5, "max_consecutive": 0, "country": "none"})
        try:
            result = runner.invoke(app, ["optimize", "--config", path])
            assert result.exit_code == 1
            assert "'max_consecutive' must be at least 1" in result.output
        finally:
            os.unlink(path)

    def test_config_holiday_not_a_string(self) -> None:
        path = _write_config({"budget": 5, "country": "none", "holidays": [20250303]})
        try:
            result = runner.invoke(app, ["optimize", "--config", path])
            assert result.exit_code == 1
            assert "Error:" in result.output
            assert "YYYY-MM-DD strings" in result.output
        finally:
            os.unlink(path)

    @pytest.mark.parametrize(
        ("key", "value"),
        [
            ("budget", "five"),
            ("budget", True),
            ("year", 2025.5),
            ("country", 1),
            ("holidays_file", ["a.txt"]),
            ("prefer_longer", "yes"),
        ],
    )
    def test_config_wrong_types(self, key: str, value: object) -> None:
        data: dict[str, object] = {"budget": 5, "country": "none"}
        data[key] = value
        path = _write_config(data)
        try:
            result = runner.invoke(app, ["optimize", "--config", path])
            assert result.exit_code == 1
            assert f"Error: '{key}'" in result.output
            assert result.exception is None or isinstance(result.exception, SystemExit)
        finally:
            os.unlink(path)


class TestHolidayDocuments:
    def test_optimize_with_holidays_file(self) -> None:
        path = _write_file("Holi 2025-03-04\nFounders Day 2025-03-06\nNext year 2026-03-04\n", ".txt")
        try:
            result = runner.invoke(
                app,
                [
                    "optimize",
                    "--budget",
                    "2",
                    "--country",
                    "none",
                    "--year",
                    "2025",
                    "--holidays-file",
                    path,
                    "--prefer-longer",
                    "--no-calendar",
                ],
            )
            assert result.exit_code == 0
            assert "Company holidays:  2" in result.output
            assert "Holi" in result.output
            assert "Founders Day" in result.output
            assert "Take 2 leave day(s) to get 6 continuous days off" in result.output
        finally:
            os.unlink(path)

    def test_holidays_file_without_dates(self) -> None:
        path = _write_file("Nothing to see here\n", ".txt")
        try:
            result = runner.invoke(
                app, ["optimize", "--budget", "2", "--holidays-file", path, "--year", "2025"]
            )
            assert result.exit_code == 1
            assert "No holiday dates were found" in result.output
            assert "--holiday" in result.output
        finally:
            os.unlink(path)

    def test_holidays_file_missing(self) -> None:
        result = runner.invoke(
            app, ["optimize", "--budget", "2", "--holidays-file", "/nonexistent/list.txt"]
        )
        assert result.exit_code == 1
        assert "Holidays file not found" in result.output

    def test_extract_command(self) -> None:
        path = _write_file("Republic Day 26 January 2025\nChristmas Day Dec 25, 2025\n", ".txt")
        try:
            result = runner.invoke(app, ["extract", path])
            assert result.exit_code == 0
            assert "Found 2 holidays" in result.output
            assert "2025-01-26  Sun  Republic Day" in result.output
            assert "2025-12-25  Thu  Christmas Day" in result.output
        finally:
            os.unlink(path)

    def test_extract_scanned_pdf(self) -> None:
        writer = PdfWriter()
        writer.add_blank_page(width=612, height=792)
        fd, path = tempfile.mkstemp(suffix=".pdf")
        with os.fdopen(fd, "wb") as f:
            writer.write(f)
        try:
            result = runner.invoke(app, ["extract", path])
            assert result.exit_code == 1
            assert "scanned image" in result.output
            assert "OCR" in result.output
        finally:
            os.unlink(path)

    def test_extract_broken_pdf(self) -> None:
        fd, path = tempfile.mkstemp(suffix=".pdf")
        with os.fdopen(fd, "wb") as f:
            f.write(b"%PDF-1.4\nnot really a pdf\n")
        try:
            result = runner.invoke(app, ["extract", path])
            assert result.exit_code == 1
            assert "could not be read" in result.output
            assert "--holiday" in result.output
        finally:
            os.unlink(path)


class TestHolidaysCommand:
    def test_holidays_default(self) -> None:
        result = runner.invoke(app, ["holidays", "--year", "2025"])
        assert result.exit_code == 0
        assert "United States federal holidays" in result.output
        assert "New Year" in result.output
        assert "Christmas" in result.output

    def test_holidays_india(self) -> None:
        result = runner.invoke(app, ["holidays", "--country", "in", "--year", "2025"])
        assert result.exit_code == 0
        assert "India national holidays" in result.output
        assert "Gandhi Jayanti" in result.output

    def test_holidays_invalid_country(self) -> None:
        result = runner.invoke(app, ["holidays", "--country", "zz"])
        assert result.exit_code == 1
        assert "Unknown country preset" in result.output

    def test_holidays_flags_weekend(self) -> None:
        # August 15, 2026 is a Saturday
        result = runner.invoke(app, ["holidays", "--country", "in", "--year", "2026"])
        assert result.exit_code == 0
        assert "Independence Day  (weekend)" in result.output
        assert "Republic Day  (weekend)" not in result.output
        assert "3 of 4 fall on a working day." in result.output


class TestHolidayPresets:
    def test_us_holidays_count(self) -> None:
        assert len(us_holidays(2025)) == 9

    def test_us_floating_holidays(self) -> None:
        by_name = {name: d for d, name in us_holidays(2025)}
        assert by_name["Martin Luther King Jr. Day"] == datetime.date(2025, 1, 20)
        assert by_name["Memorial Day"] == datetime.date(2025, 5, 26)
        assert by_name["Labor Day"] == datetime.date(2025, 9, 1)
        assert by_name["Thanksgiving"] == datetime.date(2025, 11, 27)

    def test_holiday_rule_last_weekday_in_december(self) -> None:
        rule = HolidayRule("Last Friday", 12, weekday=4, nth=-1)
        assert rule.date_in(2025) == datetime.date(2025, 12, 26)
        assert HolidayRule("Fixed", 3, 14).date_in(2025) == datetime.date(2025, 3, 14)

    def test_us_holidays_sorted(self) -> None:
        dates = [d for d, _ in us_holidays(2025)]
        assert dates == sorted(dates)

    def test_us_holidays_observed_saturday(self) -> None:
        # July 4, 2026 falls on Saturday -> observed Friday July 3
        dates = {d for d, _ in us_holidays(2026)}
        assert datetime.date(2026, 7, 3) in dates

    def test_us_holidays_observed_sunday(self) -> None:
        # July 4, 2021 falls on Sunday -> observed Monday July 5
        dates = {d for d, _ in us_holidays(2021)}
        assert datetime.date(2021, 7, 5) in dates

    def test_in_holidays_not_shifted(self) -> None:
        # August 15, 2026 falls on Saturday and stays there
        dates = {d for d, _ in in_holidays(2026)}
        assert datetime.date(2026, 8, 15) in dates
        assert len(dates) == 4

    def test_get_holidays_unknown_country(self) -> None:
        with pytest.raises(KeyError):
            get_holidays("xx", 2025)

    def test_get_holidays_presets(self) -> None:
        assert len(get_holidays("us", 2025)) == 9
        assert len(get_holidays("in", 2025)) == 4
