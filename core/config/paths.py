"""
路径解析：基准目录、配置目录、输出/日志目录及用户输入路径规范化。

环境变量：PAYMENT_TRIGGER_BASE_DIR / CONFIG_DIR / OUTPUT_DIR / LOG_DIR
"""

from __future__ import annotations

import os
import re
from pathlib import Path

ENV_PREFIX = "PAYMENT_TRIGGER_"


def _env_dir(name: str) -> Path | None:
    value = os.environ.get(ENV_PREFIX + name)
    return Path(value).resolve() if value else None


def get_base_dir() -> Path:
    """基准目录：默认为项目根（core 的父目录）。"""
    env = _env_dir("BASE_DIR")
    if env:
        return env
    return Path(__file__).resolve().parent.parent.parent


def get_config_dir() -> Path:
    """配置文件目录，默认 基准目录/config。"""
    return _env_dir("CONFIG_DIR") or get_base_dir() / "config"


def get_output_dir() -> Path:
    """检查结果输出目录。"""
    return _env_dir("OUTPUT_DIR") or get_base_dir() / "output"


def get_log_dir() -> Path:
    """日志文件目录。"""
    return _env_dir("LOG_DIR") or get_base_dir() / "logs"


def normalize_input_path(raw: str) -> Path:
    """
    规范化用户输入的文件路径：去首尾引号/空白；WSL 下将 Windows 盘符路径转为可访问路径。
    例：'c:/Users/ivan/Desktop/реестр.xlsx' -> /mnt/c/Users/ivan/Desktop/реестр.xlsx
    """
    s = raw.strip().strip("\"'")
    if not s:
        return Path("")
    if os.name == "posix" and len(s) >= 2:
        m = re.match(r"^([a-zA-Z])\s*[:\\](.*)$", s)
        if m:
            drive = m.group(1).lower()
            rest = (m.group(2) or "").replace("\\", "/").strip("/")
            s = f"/mnt/{drive}/{rest}" if rest else f"/mnt/{drive}"
    return Path(s)
