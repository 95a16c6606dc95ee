"""
Hourbook - Timesheet hour splitting and reporting

Weekly timesheets attributed to calendar months, with per-month approval
status and reporting across months and arbitrary date ranges.

Modules:
    core        - Shared services (config, logging, output, paths)
    timesheets  - Calendar math, week splitting, month resolution,
                  range filtering, rollups and spreadsheet export
    cli         - Command line entry point
"""

__version__ = "0.1.0"
