"""QA validation package for the analytics dashboard.

Validates settled reports — checks summary block sizes, error list
consistency, and the alignment of the user-growth and revenue series.
"""

from .validator import (
    Issue,
    QAResult,
    ReportValidator,
    validate_report,
)

__all__ = [
    "Issue",
    "QAResult",
    "ReportValidator",
    "validate_report",
]
