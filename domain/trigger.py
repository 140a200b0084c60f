"""付款触发器检查的领域模型（Pydantic V2）：触发器、条件、标注后的行。"""

from __future__ import annotations

from typing import Any, Literal, Union

from pydantic import BaseModel, Field, field_validator

STATUS_FOUND = "found"
STATUS_NOT_FOUND = "not found"

# 一行数据：列名 -> 单元格值
Row = dict[str, Any]


def _strip_str(v: Any) -> str:
    if v is None:
        return ""
    return str(v).strip()


def split_terms(search_text: str, sep: str = ",") -> list[str]:
    """按分隔符拆分搜索文本，去首尾空白并转小写，丢弃空项。"""
    if not search_text:
        return []
    return [t.strip().lower() for t in search_text.split(sep) if t.strip()]


class KeywordTrigger(BaseModel):
    """关键词触发器：任意一个词/短语出现在任意一列即触发。"""

    name: str = Field(default="", description="触发器名称")
    search_text: str = Field(default="", description="逗号分隔的词或短语")

    @field_validator("name", "search_text", mode="before")
    @classmethod
    def strip_str_fields(cls, v: Any) -> str:
        return _strip_str(v)

    @property
    def terms(self) -> list[str]:
        return split_terms(self.search_text)

    model_config = {"frozen": True, "extra": "forbid"}


class Criterion(BaseModel):
    """单个列条件：指定列的值需包含 text（不区分大小写）。"""

    column: str = Field(default="", description="列名，按原样精确匹配")
    text: str = Field(default="", description="需包含的子串")

    @field_validator("text", mode="before")
    @classmethod
    def strip_text(cls, v: Any) -> str:
        return _strip_str(v)

    @field_validator("column", mode="before")
    @classmethod
    def column_to_str(cls, v: Any) -> str:
        return "" if v is None else str(v)

    model_config = {"frozen": True}


class CriteriaTrigger(BaseModel):
    """按列条件触发器：所有有效条件同时满足才触发。"""

    name: str = Field(default="", description="触发器名称")
    criteria: list[Criterion] = Field(default_factory=list, description="列条件（且）")

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v: Any) -> str:
        return _strip_str(v)

    @property
    def usable_criteria(self) -> list[Criterion]:
        """text 为空的条件不参与判断。"""
        return [c for c in self.criteria if c.text]

    model_config = {"frozen": True, "extra": "forbid"}


Trigger = Union[KeywordTrigger, CriteriaTrigger]


class AnnotatedRow(BaseModel):
    """检查结果：原始行 + 状态、命中的触发器、命中的关键词。"""

    index: int = Field(default=0, ge=0, description="原始行序号（0 起）")
    values: dict[str, Any] = Field(default_factory=dict, description="原始行数据副本")
    status: Literal["found", "not found"] = Field(default=STATUS_NOT_FOUND, description="found / not found")
    triggered_by: str = Field(default="", description="首个命中的触发器名称")
    matched_keywords: list[str] = Field(default_factory=list, description="命中的词/短语，按声明顺序去重")

    @property
    def found(self) -> bool:
        return self.status == STATUS_FOUND

    model_config = {"frozen": False}


class TriggerSet(BaseModel):
    """
    有序的触发器集合，由调用方持有并传给 evaluate。
    声明顺序即判断顺序；add/update 与原表单一致：名称与搜索文本均不能为空。
    """

    triggers: list[Trigger] = Field(default_factory=list, description="按声明顺序排列的触发器")

    @property
    def names(self) -> list[str]:
        return [t.name for t in self.triggers]

    def _position(self, name: str) -> int:
        for i, t in enumerate(self.triggers):
            if t.name == name:
                return i
        raise KeyError(f"触发器不存在: {name}")

    @staticmethod
    def _build_keyword_trigger(name: str, search_text: str) -> KeywordTrigger:
        trigger = KeywordTrigger(name=name, search_text=search_text)
        if not trigger.name:
            raise ValueError("触发器名称不能为空")
        if not trigger.search_text:
            raise ValueError("触发器搜索文本不能为空")
        return trigger

    def add(self, name: str, search_text: str) -> KeywordTrigger:
        """追加关键词触发器到末尾。"""
        trigger = self._build_keyword_trigger(name, search_text)
        self.triggers.append(trigger)
        return trigger

    def update(self, name: str, new_name: str, search_text: str) -> KeywordTrigger:
        """原位替换名为 name 的触发器，保持其顺序。"""
        pos = self._position(name)
        trigger = self._build_keyword_trigger(new_name, search_text)
        self.triggers[pos] = trigger
        return trigger

    def remove(self, name: str) -> Trigger:
        return self.triggers.pop(self._position(name))

    model_config = {"frozen": False}
