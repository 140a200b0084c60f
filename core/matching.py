"""触发器匹配：对付款登记表逐行判断是否命中触发器。"""

from __future__ import annotations

import datetime as _dt
from typing import Any, Iterable, Sequence

from domain.trigger import (
    STATUS_FOUND,
    STATUS_NOT_FOUND,
    AnnotatedRow,
    CriteriaTrigger,
    KeywordTrigger,
    Row,
    Trigger,
)

# 前缀（缩写）匹配时两侧单词的最小长度
MIN_PREFIX_MATCH_LEN = 3


def cell_text(value: Any) -> str:
    """
    单元格值统一转为小写字符串，任何类型都不抛异常。
    None -> ""；bool -> "true"/"false"；整数值的 float 去掉 ".0"。
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, _dt.datetime) and value.time() == _dt.time(0, 0):
        return value.date().isoformat()
    try:
        return str(value).lower()
    except Exception:
        return ""


def collect_columns(rows: Iterable[Row]) -> list[str]:
    """收集所有行出现过的列名，保持首次出现顺序。"""
    seen: dict[str, None] = {}
    for row in rows:
        for key in row:
            seen.setdefault(key, None)
    return list(seen)


def word_matches(term: str, word: str, min_prefix_len: int = MIN_PREFIX_MATCH_LEN) -> bool:
    """
    单词比较：完全相等，或一方是另一方的前缀（两侧都不短于 min_prefix_len）。
    例：「задолж」与「задолженность」互相匹配；「ая」只做完全相等比较。
    """
    if term == word:
        return True
    if len(term) < min_prefix_len or len(word) < min_prefix_len:
        return False
    return word.startswith(term) or term.startswith(word)


def _is_phrase(term: str) -> bool:
    return any(ch.isspace() for ch in term)


def _term_in_cell(term: str, text: str, min_prefix_len: int) -> bool:
    if _is_phrase(term):
        return term in text
    return any(word_matches(term, w, min_prefix_len) for w in text.split())


def match_keyword_trigger(
    trigger: KeywordTrigger,
    row: Row,
    columns: Sequence[str],
    min_prefix_len: int = MIN_PREFIX_MATCH_LEN,
) -> list[str]:
    """返回该行命中的词/短语（按声明顺序去重）；空列表表示未触发。"""
    terms = trigger.terms
    if not terms or not columns:
        return []
    texts = [cell_text(row.get(col)) for col in columns]
    texts = [t for t in texts if t]
    matched: list[str] = []
    for term in terms:
        if term in matched:
            continue
        if any(_term_in_cell(term, text, min_prefix_len) for text in texts):
            matched.append(term)
    return matched


def match_criteria_trigger(trigger: CriteriaTrigger, row: Row) -> bool:
    """所有有效条件均满足才为 True；没有有效条件时永不触发。"""
    criteria = trigger.usable_criteria
    if not criteria:
        return False
    return all(c.text.lower() in cell_text(row.get(c.column)) for c in criteria)


def annotate_row(
    row: Row,
    triggers: Sequence[Trigger],
    columns: Sequence[str],
    *,
    index: int = 0,
    min_prefix_len: int = MIN_PREFIX_MATCH_LEN,
) -> AnnotatedRow:
    """按声明顺序检查触发器，第一个命中的触发器即为结果，后续不再检查。"""
    if columns:
        for trigger in triggers:
            if isinstance(trigger, KeywordTrigger):
                matched = match_keyword_trigger(trigger, row, columns, min_prefix_len)
                if matched:
                    return AnnotatedRow(
                        index=index,
                        values=dict(row),
                        status=STATUS_FOUND,
                        triggered_by=trigger.name,
                        matched_keywords=matched,
                    )
            elif isinstance(trigger, CriteriaTrigger) and match_criteria_trigger(trigger, row):
                return AnnotatedRow(
                    index=index,
                    values=dict(row),
                    status=STATUS_FOUND,
                    triggered_by=trigger.name,
                )
    return AnnotatedRow(index=index, values=dict(row), status=STATUS_NOT_FOUND)


def evaluate(
    rows: Sequence[Row],
    triggers: Sequence[Trigger],
    columns: Sequence[str] | None = None,
    *,
    min_prefix_len: int = MIN_PREFIX_MATCH_LEN,
) -> list[AnnotatedRow]:
    """
    对每一行执行触发器检查，返回与输入等长、同序的标注结果。
    纯函数：不修改 rows 与 triggers，重复调用结果相同。
    columns 为 None 时从 rows 中收集；为空列表时所有行均为 not found。
    """
    if not rows:
        return []
    cols = collect_columns(rows) if columns is None else list(columns)
    return [
        annotate_row(row, triggers, cols, index=i, min_prefix_len=min_prefix_len)
        for i, row in enumerate(rows)
    ]
