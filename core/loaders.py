"""加载触发器：内置默认、YAML 列表、Excel 表。"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Iterable

import yaml
from pydantic import ValidationError
from tqdm import tqdm  # type: ignore[import-untyped]

from domain.trigger import CriteriaTrigger, KeywordTrigger, Trigger, TriggerSet

from .utils.excel_io import EXCEL_SUFFIXES, cell_value, open_excel_read

logger = logging.getLogger(__name__)

YAML_SUFFIXES = (".yaml", ".yml")

# Excel 触发器表的列名（俄文表头或英文字段名均可）
TRIGGER_NAME_COLS = ("Название", "Название триггера", "name")
TRIGGER_TEXT_COLS = ("Поисковый текст", "search_text")

# 内置默认触发器：(名称, 逗号分隔的搜索文本)
DEFAULT_TRIGGERS: tuple[tuple[str, str], ...] = (
    ("Общество", "общество, общества"),
    ("Уставный капитал", "уставный капитал"),
    ("Доли", "доли, долей"),
    ("Вложение", "вложение, вложения"),
    ("Займ", "займ"),
    ("Задолженность", "задолженность, задолж"),
    ("Долг", "долг"),
    ("Возврат", "возврат"),
    ("Предоставление", "предоставление"),
    ("Приобретение", "приобретение"),
    ("Погашение", "погашение"),
    ("ДКП", "дкп"),
    ("Договор купли продажи", "договор купли продажи"),
    ("Земельный участок", "земельный участок"),
    ("Имущество", "имущество"),
    ("Недвижимость", "недвиж., недвижимость"),
    ("Ценные бумаги", "ценные бумаги"),
    ("Вексель", "вексел., вексель"),
    ("Акции", "акции"),
)


def default_triggers() -> TriggerSet:
    """返回内置默认触发器的新副本。"""
    return TriggerSet(
        triggers=[KeywordTrigger(name=name, search_text=text) for name, text in DEFAULT_TRIGGERS]
    )


def _find_column(header: list[str], names: tuple[str, ...]) -> int | None:
    """在表头中查找任一名称所在的列索引（0-based），未找到返回 None。"""
    for i, h in enumerate(header):
        if h and h.strip() in names:
            return i
    return None


def parse_trigger(item: Any) -> Trigger | None:
    """
    将一项配置解析为触发器：含 criteria 键为按列条件触发器，否则为关键词触发器。
    名称为空或校验失败时记录警告并返回 None。
    """
    if not isinstance(item, dict):
        logger.warning("忽略无法识别的触发器配置: %r", item)
        return None
    try:
        if "criteria" in item:
            trigger: Trigger = CriteriaTrigger.model_validate(item)
        else:
            trigger = KeywordTrigger.model_validate(item)
    except ValidationError as e:
        logger.warning("触发器配置校验失败，已忽略 %r: %s", item.get("name"), e)
        return None
    if not trigger.name:
        logger.warning("忽略未命名的触发器: %r", item)
        return None
    return trigger


def triggers_from_items(items: Iterable[Any]) -> TriggerSet:
    """按顺序解析配置项，跳过无效项。"""
    parsed = (parse_trigger(item) for item in items)
    return TriggerSet(triggers=[t for t in parsed if t is not None])


def _load_yaml_triggers(path: Path) -> TriggerSet:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (yaml.YAMLError, OSError) as e:
        raise ValueError(f"读取触发器文件失败: {path}") from e
    if isinstance(data, dict):
        data = data.get("triggers")
    if data is None:
        return TriggerSet()
    if not isinstance(data, list):
        raise ValueError(f"触发器文件格式错误（应为列表或含 triggers 键）: {path}")
    return triggers_from_items(data)


def _load_excel_triggers(path: Path) -> TriggerSet:
    """第 1 行为表头（名称、搜索文本），第 2 行起每行一个关键词触发器。"""
    with open_excel_read(path) as (_wb, ws):
        if ws is None:
            raise ValueError(f"工作簿中没有工作表: {path}")
        rows = ws.iter_rows(values_only=True)
        header_row = next(rows, None)
        if header_row is None:
            return TriggerSet()
        header = [cell_value(v) for v in header_row]
        total = ws.max_row - 1 if ws.max_row else None
        col_name = _find_column(header, TRIGGER_NAME_COLS)
        col_text = _find_column(header, TRIGGER_TEXT_COLS)
        if col_name is None or col_text is None:
            raise ValueError(
                f"触发器表缺少列「{TRIGGER_NAME_COLS[0]}」或「{TRIGGER_TEXT_COLS[0]}」: {path}"
            )
        items: list[dict[str, str]] = []
        for row_tuple in tqdm(rows, total=total, desc="解析触发器", unit="行"):
            row = list(row_tuple) if row_tuple else []
            name = cell_value(row[col_name]) if col_name < len(row) else ""
            text = cell_value(row[col_text]) if col_text < len(row) else ""
            if not name and not text:
                continue
            items.append({"name": name, "search_text": text})
    return triggers_from_items(items)


def load_triggers(path: str | Path) -> TriggerSet:
    """
    从 YAML 或 Excel 文件加载触发器，保持文件中的顺序。

    Raises:
        FileNotFoundError: 文件不存在。
        ValueError: 扩展名不支持或文件无法解析。
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"触发器文件不存在: {path}")
    suffix = path.suffix.lower()
    if suffix in YAML_SUFFIXES:
        trigger_set = _load_yaml_triggers(path)
    elif suffix in EXCEL_SUFFIXES:
        try:
            trigger_set = _load_excel_triggers(path)
        except ValueError:
            raise
        except Exception as e:
            raise ValueError(f"读取触发器文件失败: {path}") from e
    else:
        raise ValueError(f"不支持的触发器文件类型: {path.suffix or path.name}")
    logger.info("已从 %s 加载触发器 %d 条", path, len(trigger_set.triggers))
    return trigger_set


def parse_cli_trigger(raw: str) -> tuple[str, str]:
    """解析命令行「名称=搜索文本」，返回 (名称, 搜索文本)。"""
    name, sep, text = raw.partition("=")
    if not sep:
        raise ValueError(f"触发器格式应为「名称=词1, 词2」: {raw}")
    return name.strip(), text.strip()
