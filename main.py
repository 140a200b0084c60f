"""
付款触发器检查入口：加载配置与触发器后，接受付款登记表（Excel）路径，逐行检查并输出到 output 目录。

流程拆分为：init_config -> load_data -> (循环) run_matching -> save_output，
便于单测与维护；支持可选命令行参数（input_file、--no-loop、--triggers、--trigger、--no-highlight）。
"""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path

from app import (
    normalize_input_path,
    read_payments_from_file,
    run_check,
    summarize,
    write_result_excel,
)
from core import AnnotatedRow, TriggerSet, default_triggers, load_triggers, parse_cli_trigger, triggers_from_items
from core.config import (
    get_app_config,
    get_log_dir,
    get_output_dir,
    load_app_config,
    resolve_config_relative,
)
from models.schemas import RunConfigSchema

logger = logging.getLogger(__name__)

RunConfig = RunConfigSchema


def init_config(
    *,
    output_dir: Path | None = None,
    log_dir: Path | None = None,
    triggers_path: Path | None = None,
) -> RunConfigSchema:
    """
    初始化配置与日志：加载应用配置、创建日志目录、配置 logging，返回 RunConfig。

    Args:
        output_dir: 结果输出目录，默认从 core.config.get_output_dir() 获取。
        log_dir: 日志目录，默认从 core.config.get_log_dir() 获取。
        triggers_path: 外部触发器文件；为 None 时取配置中的 triggers_file（若有）。

    Returns:
        RunConfigSchema: 运行时路径配置，用于后续 load_data / save_output。
    """
    load_app_config()
    app_cfg = get_app_config()
    if triggers_path is None and app_cfg.triggers_file:
        triggers_path = resolve_config_relative(app_cfg.triggers_file)
    _config = RunConfigSchema(
        output_dir=output_dir or get_output_dir(),
        log_dir=log_dir or get_log_dir(),
        triggers_path=triggers_path,
    )
    _setup_logging(_config.log_dir, app_cfg.app.log_level)
    print(f"配置已加载: output_dir={_config.output_dir}")
    return _config


def _setup_logging(log_dir: Path, level: str = "INFO") -> None:
    """
    将日志按日期写入 log_dir，文件名 payment_trigger_check_YYYYMMDD.log。
    若已存在指向当日日志文件的 FileHandler 则不再添加，避免重复。
    """
    log_dir.mkdir(parents=True, exist_ok=True)
    today = datetime.now().strftime("%Y%m%d")
    log_file = log_dir / f"payment_trigger_check_{today}.log"
    log_path = str(log_file.resolve())
    root = logging.getLogger()
    root.setLevel(getattr(logging, level, logging.INFO))
    for h in root.handlers:
        if isinstance(h, logging.FileHandler) and getattr(h, "baseFilename", "") == log_path:
            return
    fmt = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
    handler.setFormatter(logging.Formatter(fmt))
    root.addHandler(handler)


def load_data(
    config: RunConfigSchema,
    extra_triggers: list[str] | None = None,
) -> TriggerSet:
    """
    加载触发器：外部文件优先，其次配置内联 triggers，最后为内置默认；
    命令行 --trigger 追加在末尾。

    Raises:
        FileNotFoundError: 外部触发器文件不存在。
        ValueError: 外部触发器文件无法解析，或 --trigger 格式/内容无效。
    """
    app_cfg = get_app_config()
    if config.triggers_path is not None:
        trigger_set = load_triggers(config.triggers_path)
        source = str(config.triggers_path)
    elif app_cfg.triggers is not None:
        trigger_set = triggers_from_items(app_cfg.triggers)
        source = "app_config.yaml"
    else:
        trigger_set = default_triggers()
        source = "内置默认"

    for raw in extra_triggers or []:
        name, text = parse_cli_trigger(raw)
        trigger_set.add(name, text)

    if not trigger_set.triggers:
        print("未配置任何触发器，所有行都将标记为未命中。")
    print(f"触发器 {len(trigger_set.triggers)} 条（来源：{source}）。")
    logger.info("触发器: %s", ", ".join(trigger_set.names))
    return trigger_set


def run_matching(
    rows: list[dict],
    trigger_set: TriggerSet,
    headers: list[str] | None = None,
) -> list[AnnotatedRow]:
    """
    对登记表执行触发器检查。

    Args:
        rows: 付款记录（read_payments_from_file 返回的 rows）。
        trigger_set: 触发器集合（由 load_data 返回）。
        headers: 参与检查的列；为 None 时使用所有行出现过的列。

    Returns:
        与 rows 顺序一致的标注结果。
    """
    if not rows:
        return []
    min_prefix_len = get_app_config().matching.min_prefix_len
    try:
        return run_check(rows, trigger_set.triggers, headers, min_prefix_len=min_prefix_len)
    except Exception as e:
        raise RuntimeError("批量检查失败") from e


def save_output(
    results: list[AnnotatedRow],
    headers: list[str],
    output_dir: Path,
    *,
    source_stem: str | None = None,
    highlight: bool | None = None,
) -> Path:
    """
    将检查结果写入 Excel 并保存到 output_dir。

    Args:
        results: run_matching 返回值。
        headers: 原始表头（按列顺序）。
        output_dir: 输出目录，不存在时会创建。
        source_stem: 输入文件名（无后缀）；为空时使用配置中的 default_stem。
        highlight: 是否为命中行填充底色；None 时取配置。

    Returns:
        写入的 Excel 文件路径。

    Raises:
        RuntimeError: 写入 Excel 失败。
    """
    app_cfg = get_app_config()
    output_dir.mkdir(parents=True, exist_ok=True)
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    output_filename = app_cfg.app.output_filename_template.format(
        stem=source_stem or app_cfg.app.default_stem,
        stamp=stamp,
    )
    output_path = output_dir / output_filename
    try:
        write_result_excel(results, headers, output_path, app_cfg.export, highlight=highlight)
    except Exception as e:
        raise RuntimeError(f"写入结果文件失败: {output_path}") from e
    return output_path


def _process_one_file(
    input_path: Path,
    config: RunConfigSchema,
    trigger_set: TriggerSet,
    *,
    highlight: bool | None = None,
) -> Path | None:
    """
    处理单个登记表：读取 -> 检查 -> 写结果。
    返回结果文件路径；读取、检查或写入失败时返回 None 并已提示。
    """
    try:
        sheet = read_payments_from_file(input_path)
    except RuntimeError as e:
        print(f"读取文件失败 {input_path}: {e}")
        logger.warning("读取文件失败 %s: %s", input_path, e)
        return None

    if not sheet.rows:
        print(f"文件为空或未能读取数据: {input_path}")
        return None
    print(f"文件「{input_path.name}」（{len(sheet.rows)} 行）已加载，将按所有列检查触发器。")

    try:
        results = run_matching(sheet.rows, trigger_set, sheet.headers)
    except RuntimeError as e:
        print(f"检查失败: {e}")
        logger.exception("检查失败: %s", input_path)
        return None

    summary = summarize(results)
    print(summary.render())
    logger.info("%s: %s", input_path.name, summary.render())

    try:
        out_path = save_output(
            results,
            sheet.headers,
            config.output_dir,
            source_stem=input_path.stem,
            highlight=highlight,
        )
    except RuntimeError as e:
        print(str(e))
        logger.exception("写入结果失败: %s", input_path)
        return None
    print(f"已写入: {out_path}")
    return out_path


def _parse_args(args: list[str] | None = None) -> argparse.Namespace:
    """解析命令行参数；args 为 None 时使用 sys.argv，便于单测注入。"""
    parser = argparse.ArgumentParser(
        description="付款触发器检查：加载触发器，对付款登记表（Excel）逐行检查并输出带标注的 Excel。",
    )
    parser.add_argument(
        "input_file",
        nargs="?",
        default=None,
        help="付款登记表路径（.xlsx）；不指定则进入交互式输入。",
    )
    parser.add_argument(
        "--no-loop",
        action="store_true",
        help="指定 input_file 时仅处理该文件一次后退出，不进入交互循环。",
    )
    parser.add_argument(
        "--triggers",
        default=None,
        help="外部触发器文件（.yaml/.yml/.xlsx），覆盖配置中的触发器。",
    )
    parser.add_argument(
        "--trigger",
        action="append",
        default=[],
        metavar="NAME=TERMS",
        help="追加一个关键词触发器，如 --trigger \"Займ=займ, заем\"；可重复。",
    )
    parser.add_argument(
        "--no-highlight",
        action="store_true",
        help="结果文件中不为命中行填充底色。",
    )
    return parser.parse_args(args)


def main(args: list[str] | None = None) -> None:
    """
    入口：初始化配置 -> 加载触发器 -> 循环处理输入文件或处理单文件后退出。

    支持命令行：
      python main.py                          # 交互式输入文件路径
      python main.py реестр.xlsx              # 处理该文件后继续交互
      python main.py реестр.xlsx --no-loop    # 仅处理该文件后退出
    """
    parsed = _parse_args(args)
    triggers_path = normalize_input_path(parsed.triggers) if parsed.triggers else None
    config = init_config(triggers_path=triggers_path)

    try:
        trigger_set = load_data(config, parsed.trigger)
    except (FileNotFoundError, ValueError) as e:
        print(f"加载触发器失败，退出: {e}")
        sys.exit(1)

    highlight = False if parsed.no_highlight else None
    if not parsed.no_loop or not parsed.input_file:
        print("请拖动或输入付款登记表路径（.xlsx），输入 q 退出。\n")

    pending_path: str | None = parsed.input_file.strip() if parsed.input_file else None

    while True:
        file_path_str = pending_path if pending_path else input("文件路径: ").strip()
        pending_path = None

        if not file_path_str:
            continue
        if file_path_str.lower() in ("q", "quit", "exit"):
            print("退出。")
            break

        path = normalize_input_path(file_path_str)
        if not path or not path.exists():
            print(f"文件不存在: {path}\n")
        else:
            _process_one_file(path, config, trigger_set, highlight=highlight)
            print(f"已处理: {path}\n")

        if parsed.no_loop and parsed.input_file:
            break


if __name__ == "__main__":
    main()
