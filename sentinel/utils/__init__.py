"""
Sentinel Utility Modules
Logging and reporting utilities
"""

from .logger import setup_logger, RequestLogger
from .report import ReportGenerator, findings_table

__all__ = [
    "setup_logger",
    "RequestLogger",
    "ReportGenerator",
    "findings_table",
]
