"""Excel 读写公共逻辑：只读打开、单元格取值、按行写入并可选填充底色。"""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Sequence

import openpyxl  # type: ignore[import-untyped]
from openpyxl.styles import PatternFill  # type: ignore[import-untyped]

# openpyxl 能读取的扩展名（不支持旧版 .xls）
EXCEL_SUFFIXES = (".xlsx", ".xlsm")


def cell_value(cell_or_value: Any) -> str:
    """支持 openpyxl Cell 或裸值（如 iter_rows values_only=True），统一为 str。"""
    v = getattr(cell_or_value, "value", cell_or_value)
    if v is None:
        return ""
    return str(v).strip()


def is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


@contextmanager
def open_excel_read(path: Path):
    """以只读、data_only 方式打开 Excel，yield (wb, ws)，ws 为第一个工作表，退出时关闭 wb。"""
    wb = openpyxl.load_workbook(path, read_only=True, data_only=True)
    try:
        yield wb, (wb.worksheets[0] if wb.worksheets else None)
    finally:
        wb.close()


def write_sheet(
    output_path: Path,
    sheet_title: str,
    headers: Sequence[str],
    rows: Sequence[Sequence[Any]],
    *,
    highlight_row: Callable[[int], bool] | None = None,
    fill_hex: str = "FFCCCC",
) -> None:
    """
    写表头与数据行；若 highlight_row(数据行序号, 0 起) 为 True，该行所有单元格填充底色。
    父目录会自动创建。
    """
    wb = openpyxl.Workbook()
    ws = wb.active
    if ws is None:
        raise RuntimeError("无法创建工作表")
    # Excel 工作表名最长 31 个字符
    ws.title = sheet_title[:31] or "Sheet1"
    fill = PatternFill(start_color=fill_hex, end_color=fill_hex, fill_type="solid")
    for col, h in enumerate(headers, start=1):
        ws.cell(row=1, column=col, value=h)
    for i, row_data in enumerate(rows):
        highlighted = bool(highlight_row and highlight_row(i))
        for col_idx in range(1, len(headers) + 1):
            value = row_data[col_idx - 1] if col_idx - 1 < len(row_data) else ""
            cell = ws.cell(row=i + 2, column=col_idx, value=value)
            if highlighted:
                cell.fill = fill
    output_path.parent.mkdir(parents=True, exist_ok=True)
    wb.save(output_path)
