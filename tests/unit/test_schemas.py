"""models.schemas 单元测试：AppConfigSchema、ExportSection、RunConfigSchema、CheckSummary。"""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from models.schemas import (
    AppConfigSchema,
    AppSection,
    CheckSummary,
    ExportSection,
    MatchingSection,
    RunConfigSchema,
)


class TestAppConfigSchema:
    def test_defaults(self) -> None:
        c = AppConfigSchema()
        assert c.matching.min_prefix_len == 3
        assert c.export.found_label == "найден"
        assert c.export.not_found_label == "не найден"
        assert c.export.sheet_title == "Результаты проверки"
        assert c.export.highlight is True
        assert c.triggers is None
        assert c.triggers_file == ""

    def test_partial_sections(self) -> None:
        c = AppConfigSchema.model_validate({"export": {"highlight": False}, "app": {"log_level": "debug"}})
        assert c.export.highlight is False
        assert c.export.status_header == "Статус Триггера"
        assert c.app.log_level == "DEBUG"

    def test_min_prefix_len_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            MatchingSection(min_prefix_len=0)


class TestExportSection:
    def test_color_normalized(self) -> None:
        assert ExportSection(highlight_color="#ffcccc").highlight_color == "FFCCCC"

    def test_invalid_color(self) -> None:
        with pytest.raises(ValidationError):
            ExportSection(highlight_color="red")


def test_app_section_template_has_placeholders() -> None:
    name = AppSection().output_filename_template.format(stem="реестр", stamp="20240101_000000")
    assert name == "Результаты_проверки_реестр_20240101_000000.xlsx"


def test_run_config_schema() -> None:
    config = RunConfigSchema(output_dir=Path("/out"), log_dir=Path("/log"))
    assert config.output_dir == Path("/out")
    assert config.triggers_path is None


class TestCheckSummary:
    def test_render_with_triggers(self) -> None:
        s = CheckSummary(total=3, found=2, not_found=1, by_trigger={"Займ": 1, "Долг": 1})
        assert s.render() == "共 3 行：命中 2 行，未命中 1 行（Займ 1，Долг 1）"

    def test_render_without_triggers(self) -> None:
        assert CheckSummary(total=1, not_found=1).render() == "共 1 行：命中 0 行，未命中 1 行"
