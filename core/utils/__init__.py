"""公共工具：Excel 读写。"""

from .excel_io import EXCEL_SUFFIXES, cell_value, is_blank, open_excel_read, write_sheet

__all__ = [
    "EXCEL_SUFFIXES",
    "cell_value",
    "is_blank",
    "open_excel_read",
    "write_sheet",
]
