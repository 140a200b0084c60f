"""Pydantic 模型与 Schema：配置、运行时路径、检查汇总。"""

from .schemas import (
    AppConfigSchema,
    AppSection,
    CheckSummary,
    ExportSection,
    MatchingSection,
    RunConfigSchema,
)

__all__ = [
    "AppConfigSchema",
    "AppSection",
    "CheckSummary",
    "ExportSection",
    "MatchingSection",
    "RunConfigSchema",
]
