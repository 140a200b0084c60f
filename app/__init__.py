"""应用层：批量检查、登记表读取、结果写入。"""

from core.config.paths import normalize_input_path
from .batch_check import run_check, summarize
from .file_io import PaymentSheet, read_payments_from_file, write_result_excel

__all__ = [
    "PaymentSheet",
    "normalize_input_path",
    "read_payments_from_file",
    "run_check",
    "summarize",
    "write_result_excel",
]
