"""
检查核心：触发器加载、逐行触发器匹配。
"""

from domain.trigger import AnnotatedRow, CriteriaTrigger, Criterion, KeywordTrigger, TriggerSet
from .loaders import default_triggers, load_triggers, parse_cli_trigger, triggers_from_items
from .matching import MIN_PREFIX_MATCH_LEN, annotate_row, collect_columns, evaluate

__all__ = [
    "AnnotatedRow",
    "CriteriaTrigger",
    "Criterion",
    "KeywordTrigger",
    "MIN_PREFIX_MATCH_LEN",
    "TriggerSet",
    "annotate_row",
    "collect_columns",
    "default_triggers",
    "evaluate",
    "load_triggers",
    "parse_cli_trigger",
    "triggers_from_items",
]
