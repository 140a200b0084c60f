"""
core.config：路径与统一 YAML 配置 app_config.yaml 的加载。

- 配置：config/app_config.yaml（app、matching、export、triggers、triggers_file）。
- 路径：config/output/logs 目录（见 .paths）。
- 统一加载：load_app_config() 启动时调用一次；之后通过 get_app_config() 获取。
"""

from __future__ import annotations

import logging
from pathlib import Path

from models.schemas import AppConfigSchema

from . import loader as _loader
from . import paths as _paths

logger = logging.getLogger(__name__)

get_app_config_path = _loader.get_app_config_path
get_base_dir = _paths.get_base_dir
get_config_dir = _paths.get_config_dir
get_output_dir = _paths.get_output_dir
get_log_dir = _paths.get_log_dir
normalize_input_path = _paths.normalize_input_path

_app_config: AppConfigSchema | None = None
_app_config_path: Path | None = None


def load_app_config(path: Path | None = None) -> AppConfigSchema:
    """加载并缓存配置；已加载时直接返回缓存。"""
    global _app_config, _app_config_path

    if _app_config is not None:
        return _app_config

    _app_config_path = path or get_app_config_path()
    _app_config = _loader.load_app_config_yaml(_app_config_path)
    logger.debug("配置已加载: config_file=%s", _app_config_path)
    return _app_config


def get_app_config() -> AppConfigSchema:
    """返回已加载的配置，未加载时先加载。"""
    return load_app_config()


def get_loaded_config_path() -> Path | None:
    return _app_config_path


def reset_app_config() -> None:
    """清除缓存（单测用）。"""
    global _app_config, _app_config_path
    _app_config = None
    _app_config_path = None


def resolve_config_relative(raw: str) -> Path:
    """配置中的相对路径以 config 目录为基准。"""
    p = Path(raw)
    return p if p.is_absolute() else get_config_dir() / p


__all__ = [
    "get_app_config",
    "get_app_config_path",
    "get_base_dir",
    "get_config_dir",
    "get_loaded_config_path",
    "get_log_dir",
    "get_output_dir",
    "load_app_config",
    "normalize_input_path",
    "reset_app_config",
    "resolve_config_relative",
]
