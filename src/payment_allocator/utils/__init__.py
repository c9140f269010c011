"""
Reporting and validation helpers for allocation results.
"""

from .report import instrument_usage, order_summary, print_summary
from .validate import validate_result

__all__ = [
    "instrument_usage",
    "order_summary",
    "print_summary",
    "validate_result",
]
