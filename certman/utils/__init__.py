"""Utility modules."""

from .file_utils import FileUtils
from .logger import setup_logger
from .render import fmt_table
from .validators import split_comma_list, validate_cert_name

__all__ = ["FileUtils", "fmt_table", "setup_logger", "split_comma_list", "validate_cert_name"]
