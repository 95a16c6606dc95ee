"""Smoke-test that all public APIs can be imported without error.

Catches stale imports, circular dependencies, and missing deps.
"""


def test_import_hourbook():
    import hourbook
    assert hourbook.__version__ == "0.1.0"


def test_import_core():
    from hourbook.core import get_config, get_config_value, get_logger, HOURBOOK_PATHS  # noqa: F401
    from hourbook.core.output import OutputFormat, format_result, format_table  # noqa: F401
    from hourbook.core.paths import ensure_directory, resolve_export_path  # noqa: F401


def test_import_timesheets():
    from hourbook.timesheets import (  # noqa: F401
        MonthFragment, WeeklyRecord, Status, split_week, submit_week,
        hours_for_month, is_in_month, status_for_month, filter_by_date_range,
        View, utilization, monday_of, month_key_of,
    )


def test_import_timesheets_modules():
    from hourbook.timesheets import approvals, dataset, excel, export, rollup  # noqa: F401


def test_import_cli():
    from hourbook.cli.main import app, main  # noqa: F401
    from hourbook.timesheets.cli import app as timesheets_app  # noqa: F401
