"""文件读写：从 Excel 读取付款登记表、检查结果写入 Excel（命中行填充底色）。"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from core.utils.excel_io import EXCEL_SUFFIXES, is_blank, open_excel_read, write_sheet
from domain.trigger import STATUS_FOUND, AnnotatedRow, Row
from models.schemas import ExportSection

logger = logging.getLogger(__name__)

# 表头单元格为空时使用的列名（与原门户导入行为一致）
EMPTY_HEADER = "__EMPTY"


@dataclass
class PaymentSheet:
    """登记表第一个工作表：表头（按列顺序）与数据行。"""

    headers: list[str] = field(default_factory=list)
    rows: list[Row] = field(default_factory=list)


def _unique_headers(raw: list[Any]) -> list[str]:
    """空表头命名为 __EMPTY、__EMPTY_1…；重名表头追加 _1、_2…。"""
    seen: dict[str, int] = {}
    headers: list[str] = []
    for v in raw:
        base = EMPTY_HEADER if is_blank(v) else str(v).strip()
        name = base
        while name in seen:
            seen[base] += 1
            name = f"{base}_{seen[base]}"
        seen.setdefault(name, 0)
        headers.append(name)
    return headers


def read_payments_from_file(file_path: Path) -> PaymentSheet:
    """
    读取 Excel 第一个工作表：第 1 行为表头，第 2 行起为付款记录。
    缺失单元格取 ""，整行为空的记录跳过；列宽取表头与数据行中最宽者，表头为空且整列无数据的列不保留。
    空表返回空的 PaymentSheet。
    """
    path = Path(file_path)
    if path.suffix.lower() not in EXCEL_SUFFIXES:
        raise RuntimeError(f"仅支持 Excel 输入（.xlsx/.xlsm），当前: {path.suffix or path.name}")
    if not path.exists():
        raise RuntimeError(f"文件不存在: {path}")

    try:
        with open_excel_read(path) as (_wb, ws):
            if ws is None:
                return PaymentSheet()
            rows_iter = ws.iter_rows(values_only=True)
            header_row = next(rows_iter, None)
            if header_row is None:
                return PaymentSheet()
            data = [list(r) for r in rows_iter if r and not all(is_blank(v) for v in r)]
            width = max([len(header_row), *(len(v) for v in data)])
            raw_header = list(header_row) + [None] * (width - len(header_row))
            # 表头为空且所有数据行也为空的列不保留
            keep = [
                i
                for i in range(width)
                if not is_blank(raw_header[i]) or any(i < len(v) and not is_blank(v[i]) for v in data)
            ]
            headers = _unique_headers([raw_header[i] for i in keep])
            rows: list[Row] = [
                {
                    h: ("" if i >= len(values) or values[i] is None else values[i])
                    for i, h in zip(keep, headers)
                }
                for values in data
            ]
    except RuntimeError:
        raise
    except Exception as e:
        raise RuntimeError(f"无法读取 Excel 文件 {path}: {e}") from e
    logger.info("已读取 %s：%d 列，%d 行", path, len(headers), len(rows))
    return PaymentSheet(headers=headers, rows=rows)


def build_export_table(
    results: list[AnnotatedRow],
    headers: list[str],
    export: ExportSection | None = None,
) -> tuple[list[str], list[list[Any]]]:
    """原始列 + 状态、触发器、关键词三列，返回 (表头, 数据行)。"""
    export = export or ExportSection()
    out_headers = [*headers, export.status_header, export.triggered_by_header, export.keywords_header]
    out_rows: list[list[Any]] = []
    for r in results:
        status = export.found_label if r.status == STATUS_FOUND else export.not_found_label
        out_rows.append(
            [
                *(r.values.get(h, "") for h in headers),
                status,
                r.triggered_by,
                export.keywords_joiner.join(r.matched_keywords),
            ]
        )
    return out_headers, out_rows


def write_result_excel(
    results: list[AnnotatedRow],
    headers: list[str],
    output_path: Path,
    export: ExportSection | None = None,
    *,
    highlight: bool | None = None,
) -> None:
    """将检查结果写入 Excel；highlight 为 None 时取 export.highlight。"""
    export = export or ExportSection()
    do_highlight = export.highlight if highlight is None else highlight
    out_headers, out_rows = build_export_table(results, headers, export)
    write_sheet(
        Path(output_path),
        export.sheet_title,
        out_headers,
        out_rows,
        highlight_row=(lambda i: results[i].found) if do_highlight else None,
        fill_hex=export.highlight_color,
    )
