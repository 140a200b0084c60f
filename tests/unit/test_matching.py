"""core.matching 单元测试（触发器匹配逻辑，不依赖 Excel 文件）。"""

from __future__ import annotations

import copy
from datetime import datetime

import pytest

from core.matching import (
    annotate_row,
    cell_text,
    collect_columns,
    evaluate,
    match_criteria_trigger,
    match_keyword_trigger,
    word_matches,
)
from domain.trigger import CriteriaTrigger, Criterion, KeywordTrigger

COLUMNS = ["A", "B"]


def kw(name: str, text: str) -> KeywordTrigger:
    return KeywordTrigger(name=name, search_text=text)


class TestCellText:
    def test_none_is_empty(self) -> None:
        assert cell_text(None) == ""

    def test_lowercases(self) -> None:
        assert cell_text("Депозит") == "депозит"

    def test_numbers_and_bools(self) -> None:
        assert cell_text(1000) == "1000"
        assert cell_text(1000.0) == "1000"
        assert cell_text(12.5) == "12.5"
        assert cell_text(True) == "true"

    def test_midnight_datetime_is_date(self) -> None:
        assert cell_text(datetime(2024, 3, 1)) == "2024-03-01"


class TestWordMatches:
    def test_exact(self) -> None:
        assert word_matches("займ", "займ") is True

    def test_term_is_prefix_of_word(self) -> None:
        assert word_matches("задолж", "задолженность") is True

    def test_word_is_prefix_of_term(self) -> None:
        assert word_matches("задолженность", "задолж") is True

    def test_short_term_no_prefix(self) -> None:
        assert word_matches("ая", "аякс") is False
        assert word_matches("ая", "ая") is True

    def test_short_word_no_prefix(self) -> None:
        assert word_matches("долг", "до") is False

    def test_unrelated(self) -> None:
        assert word_matches("долг", "вклад") is False


def test_collect_columns_keeps_first_seen_order() -> None:
    rows = [{"A": 1, "B": 2}, {"B": 3, "C": 4}]
    assert collect_columns(rows) == ["A", "B", "C"]


class TestKeywordTrigger:
    def test_case_insensitive(self) -> None:
        assert match_keyword_trigger(kw("Д", "депозит"), {"A": "ДЕПОЗИТ клиента"}, ["A"]) == ["депозит"]

    def test_phrase_contiguous(self) -> None:
        row = {"A": "подписан договор купли продажи №5"}
        assert match_keyword_trigger(kw("ДКП", "договор купли продажи"), row, ["A"]) == ["договор купли продажи"]
        assert match_keyword_trigger(kw("ДКП", "договор продажи купли"), row, ["A"]) == []

    def test_nbsp_term_is_phrase(self) -> None:
        # 含不换行空格的词条按短语整体包含判断，不再按词前缀匹配
        trigger = kw("ДКП", "договор\u00a0купли")
        assert match_keyword_trigger(trigger, {"A": "договор купли"}, ["A"]) == []
        assert match_keyword_trigger(trigger, {"A": "наш договор\u00a0купли №5"}, ["A"]) == ["договор\u00a0купли"]

    def test_phrase_not_across_cells(self) -> None:
        row = {"A": "договор купли", "B": "продажи"}
        assert match_keyword_trigger(kw("ДКП", "договор купли продажи"), row, COLUMNS) == []

    def test_records_distinct_terms_in_declaration_order(self) -> None:
        row = {"A": "возврат займа", "B": "займ"}
        trigger = kw("T", "займ, возврат, займ, акции")
        assert match_keyword_trigger(trigger, row, COLUMNS) == ["займ", "возврат"]

    def test_only_listed_columns_are_searched(self) -> None:
        row = {"A": "обычный платеж", "B": "займ"}
        assert match_keyword_trigger(kw("T", "займ"), row, ["A"]) == []

    def test_term_with_punctuation(self) -> None:
        row = {"A": "оплата по векселю, недвиж. объект"}
        assert match_keyword_trigger(kw("Н", "недвиж."), row, ["A"]) == ["недвиж."]

    def test_empty_search_text_never_matches(self) -> None:
        assert match_keyword_trigger(kw("T", " , ,"), {"A": "что угодно"}, ["A"]) == []


class TestCriteriaTrigger:
    def _trigger(self) -> CriteriaTrigger:
        return CriteriaTrigger(
            name="Возврат",
            criteria=[Criterion(column="A", text="Возврат"), Criterion(column="B", text="000")],
        )

    def test_all_criteria_must_pass(self) -> None:
        t = self._trigger()
        assert match_criteria_trigger(t, {"A": "ВОЗВРАТ долга", "B": 1000000}) is True
        assert match_criteria_trigger(t, {"A": "оплата", "B": 1000000}) is False
        assert match_criteria_trigger(t, {"A": "возврат", "B": 15}) is False

    def test_missing_column_reads_empty(self) -> None:
        assert match_criteria_trigger(self._trigger(), {"A": "возврат"}) is False

    def test_no_usable_criteria_never_matches(self) -> None:
        t = CriteriaTrigger(name="X", criteria=[Criterion(column="A", text="  ")])
        assert match_criteria_trigger(t, {"A": "anything"}) is False
        assert match_criteria_trigger(CriteriaTrigger(name="Y"), {"A": "anything"}) is False

    def test_blank_criterion_is_ignored(self) -> None:
        t = CriteriaTrigger(
            name="X",
            criteria=[Criterion(column="A", text="займ"), Criterion(column="B", text="")],
        )
        assert match_criteria_trigger(t, {"A": "займ", "B": "x"}) is True


class TestEvaluate:
    def test_concrete_scenario(self) -> None:
        rows = [{"A": "Оплата займа", "B": "1000"}, {"A": "Обычный платеж", "B": "500"}]
        results = evaluate(rows, [kw("Займ", "займ")], COLUMNS)
        assert results[0].status == "found"
        assert results[0].triggered_by == "Займ"
        assert results[0].matched_keywords == ["займ"]
        assert results[1].status == "not found"
        assert results[1].triggered_by == ""
        assert results[1].matched_keywords == []

    def test_empty_rows(self) -> None:
        assert evaluate([], [kw("T", "x")], COLUMNS) == []

    def test_empty_triggers_all_not_found(self) -> None:
        rows = [{"A": "займ"}, {"A": "долг"}]
        results = evaluate(rows, [], ["A"])
        assert [r.status for r in results] == ["not found", "not found"]

    def test_empty_columns_never_match(self) -> None:
        results = evaluate([{"A": "займ"}], [kw("T", "займ")], [])
        assert results[0].status == "not found"

    def test_columns_default_to_row_keys(self) -> None:
        results = evaluate([{"X": "займ"}], [kw("T", "займ")])
        assert results[0].found

    def test_first_match_wins(self) -> None:
        rows = [{"A": "возврат займа"}]
        t1 = kw("Первый", "возврат")
        t2 = kw("Второй", "займ")
        assert evaluate(rows, [t1, t2], ["A"])[0].triggered_by == "Первый"
        assert evaluate(rows, [t2, t1], ["A"])[0].triggered_by == "Второй"

    def test_first_match_wins_across_shapes(self) -> None:
        rows = [{"A": "возврат займа", "B": "100"}]
        criteria = CriteriaTrigger(name="По столбцам", criteria=[Criterion(column="B", text="100")])
        results = evaluate(rows, [criteria, kw("Займ", "займ")], COLUMNS)
        assert results[0].triggered_by == "По столбцам"
        assert results[0].matched_keywords == []

    def test_order_and_length_preserved(self) -> None:
        rows = [{"A": str(i)} for i in range(20)]
        results = evaluate(rows, [kw("T", "7")], ["A"])
        assert len(results) == 20
        assert [r.index for r in results] == list(range(20))
        assert [r.values["A"] for r in results] == [str(i) for i in range(20)]
        assert [r.found for r in results].count(True) == 1

    def test_idempotent_and_pure(self) -> None:
        rows = [{"A": "Задолженность по займу", "B": None}, {"A": "прочее", "B": 3.0}]
        triggers = [kw("Задолженность", "задолж"), kw("Займ", "займ")]
        rows_before = copy.deepcopy(rows)
        triggers_before = copy.deepcopy(triggers)
        first = evaluate(rows, triggers, COLUMNS)
        second = evaluate(rows, triggers, COLUMNS)
        assert [r.model_dump() for r in first] == [r.model_dump() for r in second]
        assert rows == rows_before
        assert triggers == triggers_before

    def test_result_values_are_copies(self) -> None:
        rows = [{"A": "займ"}]
        result = evaluate(rows, [kw("T", "займ")], ["A"])[0]
        result.values["A"] = "changed"
        assert rows[0]["A"] == "займ"

    @pytest.mark.parametrize(
        "term, cell, expected",
        [
            ("задолж", "Погашение задолженности", True),
            ("задолженность", "задолж. по кредиту", False),
            ("задолженность", "задолж по кредиту", True),
            ("ая", "аякс", False),
        ],
    )
    def test_abbreviation_through_evaluate(self, term: str, cell: str, expected: bool) -> None:
        results = evaluate([{"A": cell}], [kw("T", term)], ["A"])
        assert results[0].found is expected

    def test_custom_min_prefix_len(self) -> None:
        row = {"A": "дкп"}
        assert annotate_row(row, [kw("T", "дк")], ["A"], min_prefix_len=2).found is True
        assert annotate_row(row, [kw("T", "дк")], ["A"]).found is False
