"""pytest 共享 fixture 与配置。"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

# 保证项目根在 sys.path 中，便于导入 core / app / domain / models
_root = Path(__file__).resolve().parent.parent
if str(_root) not in sys.path:
    sys.path.insert(0, str(_root))


@pytest.fixture(autouse=True)
def _fresh_app_config():
    """每个用例前后清除配置缓存，避免用例之间相互影响。"""
    from core.config import reset_app_config

    reset_app_config()
    yield
    reset_app_config()
