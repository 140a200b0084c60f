"""批量检查：对整个登记表逐行执行触发器匹配并汇总。"""

from __future__ import annotations

import logging
from collections import Counter
from typing import Sequence

from tqdm import tqdm  # type: ignore[import-untyped]

from core.matching import MIN_PREFIX_MATCH_LEN, annotate_row, collect_columns
from domain.trigger import AnnotatedRow, Row, Trigger
from models.schemas import CheckSummary

logger = logging.getLogger(__name__)


def run_check(
    rows: Sequence[Row],
    triggers: Sequence[Trigger],
    columns: Sequence[str] | None = None,
    *,
    min_prefix_len: int = MIN_PREFIX_MATCH_LEN,
    progress: bool = True,
) -> list[AnnotatedRow]:
    """
    与 core.matching.evaluate 结果一致，另带进度条与日志。
    返回与 rows 顺序一致的标注结果。
    """
    if not rows:
        return []
    cols = collect_columns(rows) if columns is None else list(columns)
    if not triggers:
        logger.info("未配置触发器，所有 %d 行均为未命中", len(rows))
    results: list[AnnotatedRow] = []
    for i, row in enumerate(
        tqdm(rows, total=len(rows), desc="触发器检查", unit="行", disable=not progress)
    ):
        result = annotate_row(row, triggers, cols, index=i, min_prefix_len=min_prefix_len)
        if result.found:
            logger.debug("第 %d 行命中 [%s]: %s", i + 1, result.triggered_by, ", ".join(result.matched_keywords))
        results.append(result)
    return results


def summarize(results: Sequence[AnnotatedRow]) -> CheckSummary:
    """统计命中/未命中行数及各触发器命中行数。"""
    by_trigger = Counter(r.triggered_by for r in results if r.found)
    found = sum(by_trigger.values())
    return CheckSummary(
        total=len(results),
        found=found,
        not_found=len(results) - found,
        by_trigger=dict(by_trigger),
    )
