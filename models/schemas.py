"""
Pydantic V2 Schema：应用配置、运行时路径、检查结果汇总。

- AppConfigSchema: config/app_config.yaml 根结构（app / matching / export / triggers）。
- RunConfigSchema: 运行时路径（输出目录、日志目录、外部触发器文件）。
- CheckSummary: 一次检查的统计结果。
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator


def _strip_str(v: Any) -> str:
    if v is None:
        return ""
    return str(v).strip()


# ----- app_config.yaml 各节 -----


class AppSection(BaseModel):
    """应用级配置：输出文件名、日志级别。"""

    output_filename_template: str = Field(
        default="Результаты_проверки_{stem}_{stamp}.xlsx",
        description="结果文件名模板，可用占位 {stem}（输入文件名）、{stamp}（时间戳）",
    )
    default_stem: str = Field(default="реестр", description="输入文件名不可用时的替代名")
    log_level: str = Field(default="INFO", description="日志级别")

    @field_validator("log_level", mode="before")
    @classmethod
    def upper_level(cls, v: Any) -> str:
        return _strip_str(v).upper() or "INFO"


class MatchingSection(BaseModel):
    """匹配参数。"""

    min_prefix_len: int = Field(default=3, ge=1, description="前缀（缩写）匹配时两侧单词的最小长度")


class ExportSection(BaseModel):
    """导出 Excel：新增列的表头、状态文字、高亮。"""

    sheet_title: str = Field(default="Результаты проверки", description="工作表名")
    status_header: str = Field(default="Статус Триггера", description="状态列表头")
    triggered_by_header: str = Field(default="Сработавший Триггер", description="触发器列表头")
    keywords_header: str = Field(default="Ключевые слова/фразы триггера", description="关键词列表头")
    found_label: str = Field(default="найден", description="found 状态的显示文字")
    not_found_label: str = Field(default="не найден", description="not found 状态的显示文字")
    keywords_joiner: str = Field(default=", ", description="关键词连接符")
    highlight: bool = Field(default=True, description="是否为命中行填充底色")
    highlight_color: str = Field(default="FFCCCC", description="底色（RGB 十六进制）")

    @field_validator("highlight_color", mode="after")
    @classmethod
    def normalize_color(cls, v: str) -> str:
        v = v.strip().lstrip("#").upper()
        if len(v) not in (6, 8) or any(ch not in "0123456789ABCDEF" for ch in v):
            raise ValueError(f"无效的颜色值: {v}")
        return v


class AppConfigSchema(BaseModel):
    """config/app_config.yaml 根结构；各节均有默认值。"""

    app: AppSection = Field(default_factory=AppSection)
    matching: MatchingSection = Field(default_factory=MatchingSection)
    export: ExportSection = Field(default_factory=ExportSection)
    triggers: list[Any] | None = Field(
        default=None, description="内联触发器列表；为 None 时使用外部文件或内置默认"
    )
    triggers_file: str = Field(default="", description="外部触发器文件（.yaml/.yml/.xlsx），相对 config 目录")

    @field_validator("triggers_file", mode="before")
    @classmethod
    def strip_triggers_file(cls, v: Any) -> str:
        return _strip_str(v)


# ----- 运行时配置/结果 -----


class RunConfigSchema(BaseModel):
    """运行时路径配置：输出目录、日志目录、外部触发器文件。"""

    output_dir: Path = Field(description="检查结果输出目录")
    log_dir: Path = Field(description="日志文件目录")
    triggers_path: Path | None = Field(default=None, description="外部触发器文件；为 None 时用配置内联或内置默认")

    model_config = {"frozen": False}


class CheckSummary(BaseModel):
    """一次检查的统计：总行数、命中/未命中数、各触发器命中数（按首次出现顺序）。"""

    total: int = Field(default=0, ge=0)
    found: int = Field(default=0, ge=0)
    not_found: int = Field(default=0, ge=0)
    by_trigger: dict[str, int] = Field(default_factory=dict)

    def render(self) -> str:
        """用于控制台与日志的一行摘要。"""
        line = f"共 {self.total} 行：命中 {self.found} 行，未命中 {self.not_found} 行"
        if self.by_trigger:
            parts = "，".join(f"{name} {count}" for name, count in self.by_trigger.items())
            line += f"（{parts}）"
        return line
