"""
Excel rendering for timesheet exports.

Encodes an export Workbook (hourbook.timesheets.export) as .xlsx.
Uses openpyxl. No CLI imports.
"""

from io import BytesIO
from pathlib import Path
from typing import Optional

from hourbook.core import get_logger
from hourbook.core.paths import resolve_export_path
from hourbook.timesheets.export import Cell, Workbook

logger = get_logger("hourbook.timesheets.excel")


def _style_cell(target, cell: Cell) -> None:
    from openpyxl.styles import Alignment, Font, PatternFill

    if cell.bold or cell.size:
        target.font = Font(bold=cell.bold, size=cell.size or 11)
    if cell.fill:
        target.fill = PatternFill(fill_type="solid", start_color=cell.fill, end_color=cell.fill)
    if cell.align:
        target.alignment = Alignment(horizontal=cell.align)


def build_openpyxl(workbook: Workbook):
    """Build an openpyxl Workbook mirroring the export structure."""
    from openpyxl import Workbook as XlsxWorkbook
    from openpyxl.utils import get_column_letter

    wb = XlsxWorkbook()
    wb.remove(wb.active)

    for sheet in workbook.sheets:
        ws = wb.create_sheet(title=sheet.name)
        for row_num, row in enumerate(sheet.rows, 1):
            for col_num, cell in enumerate(row, 1):
                if cell is None or cell.value in ("", None):
                    continue
                target = ws.cell(row=row_num, column=col_num, value=cell.value)
                _style_cell(target, cell)

        for i, width in enumerate(sheet.column_widths, 1):
            ws.column_dimensions[get_column_letter(i)].width = width

        if sheet.freeze_rows:
            ws.freeze_panes = f"A{sheet.freeze_rows + 1}"

    return wb


def render_workbook(workbook: Workbook) -> BytesIO:
    """Encode the workbook as .xlsx bytes."""
    output = BytesIO()
    build_openpyxl(workbook).save(output)
    output.seek(0)
    return output


def save_workbook(
    workbook: Workbook,
    path: Optional[Path] = None,
    *,
    output_dir: Optional[Path] = None,
) -> Path:
    """
    Write the workbook to disk.

    Args:
        workbook: Export structure
        path: Exact destination; overrides output_dir
        output_dir: Directory for workbook.filename (default: configured exports dir)

    Returns:
        Path written
    """
    if path is None:
        path = resolve_export_path(workbook.filename, output_dir)
    else:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

    build_openpyxl(workbook).save(str(path))
    logger.info("Excel generated: %s", path)
    return path
