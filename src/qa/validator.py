"""QA validator — checks a NormalizedReport against its contract.

Validates that a settled report is well formed before it is handed to
the dashboard: both summary blocks hold three points, the error list
matches the missing sources, and the API payloads are internally
consistent.  Also flags the positional pairing of the user-growth and
revenue series when the two do not line up.

Usage::

    from src.qa.validator import ReportValidator

    result = ReportValidator().validate(report)
    assert result.passed, result.summary()
"""

import math
from collections import Counter
from dataclasses import dataclass, field

from src.processor.aggregator import (
    ERROR_MESSAGES,
    REVENUE_ERROR,
    SPREADSHEET_ERROR,
    STATISTIC_ERROR,
)
from src.schema.models import NormalizedReport

SUMMARY_SIZE = 3
PLAN_TOTAL_TOLERANCE = 0.5


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass
class Issue:
    """A single QA issue found during validation."""
    severity: str       # "error" or "warning"
    section: str        # e.g. "overview", "statistic", "errors"
    category: str       # e.g. "size", "error_mismatch", "series_alignment"
    message: str

    def __str__(self) -> str:
        return f"[{self.severity.upper()}] {self.section}: {self.message}"


@dataclass
class QAResult:
    """Aggregated result of QA validation."""
    issues: list[Issue] = field(default_factory=list)

    @property
    def errors(self) -> list[Issue]:
        return [i for i in self.issues if i.severity == "error"]

    @property
    def warnings(self) -> list[Issue]:
        return [i for i in self.issues if i.severity == "warning"]

    @property
    def passed(self) -> bool:
        return len(self.errors) == 0

    @property
    def error_count(self) -> int:
        return len(self.errors)

    @property
    def warning_count(self) -> int:
        return len(self.warnings)

    def summary(self) -> str:
        """One-line summary string."""
        status = "PASS" if self.passed else "FAIL"
        return (
            f"QA {status}: {self.error_count} error(s), "
            f"{self.warning_count} warning(s)"
        )

    def report(self) -> str:
        """Multi-line report of all issues."""
        lines = [self.summary()]
        for issue in self.issues:
            lines.append(f"  {issue}")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _is_missing(value) -> bool:
    """Check if a value is None or NaN."""
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return False


# ---------------------------------------------------------------------------
# ReportValidator
# ---------------------------------------------------------------------------

class ReportValidator:
    """Validates a settled NormalizedReport.

    Errors mean the report breaks its contract and the dashboard cannot
    trust it; warnings point at suspicious data the dashboard can still
    render.
    """

    def validate(self, report: NormalizedReport) -> QAResult:
        result = QAResult()
        self._check_summary(report, "overview", report.overview, result)
        self._check_summary(report, "conversion", report.conversion, result)
        self._check_errors(report, result)
        self._check_daily(report, result)
        self._check_series_alignment(report, result)
        self._check_plan_shares(report, result)
        return result

    # -- contract checks ----------------------------------------------------

    def _check_summary(self, report, name, points, result):
        if len(points) != SUMMARY_SIZE:
            result.issues.append(Issue(
                "error", name, "size",
                f"expected {SUMMARY_SIZE} metrics, found {len(points)}",
            ))
        for point in points:
            if _is_missing(point.value):
                result.issues.append(Issue(
                    "error", name, "missing_value",
                    f"'{point.metric}' has no value",
                ))

    def _check_errors(self, report, result):
        known = set(ERROR_MESSAGES.values())
        for message in report.errors:
            if message not in known:
                result.issues.append(Issue(
                    "error", "errors", "unknown_error",
                    f"unrecognised error message: {message!r}",
                ))
        for message, count in Counter(report.errors).items():
            if count > 1:
                result.issues.append(Issue(
                    "error", "errors", "duplicate_error",
                    f"{message!r} reported {count} times",
                ))

        order = list(ERROR_MESSAGES.values())
        listed = [m for m in report.errors if m in known]
        if listed != sorted(listed, key=order.index):
            result.issues.append(Issue(
                "error", "errors", "error_order",
                "errors are not in fetch order",
            ))

        for section, payload, message in (
            ("statistic", report.statistic, STATISTIC_ERROR),
            ("revenue", report.revenue, REVENUE_ERROR),
        ):
            failed = message in report.errors
            if payload is None and not failed:
                result.issues.append(Issue(
                    "error", section, "error_mismatch",
                    "payload missing but no error recorded",
                ))
            elif payload is not None and failed:
                result.issues.append(Issue(
                    "error", section, "error_mismatch",
                    "payload present but the source is reported as failed",
                ))

    # -- data checks --------------------------------------------------------

    def _check_daily(self, report, result):
        if SPREADSHEET_ERROR in report.errors:
            if report.daily:
                result.issues.append(Issue(
                    "error", "daily", "error_mismatch",
                    "daily rows present but the spreadsheet is reported as failed",
                ))
            return
        if not report.daily:
            result.issues.append(Issue(
                "warning", "daily", "empty",
                "spreadsheet loaded but no daily rows were found",
            ))

    def _check_series_alignment(self, report, result):
        statistic = report.statistic
        if statistic is None:
            return
        users = statistic.user_growth
        revenue = statistic.revenue_series
        if len(users) != len(revenue):
            result.issues.append(Issue(
                "warning", "statistic", "series_alignment",
                f"user growth has {len(users)} point(s) but revenue has "
                f"{len(revenue)}; combined growth is paired by position",
            ))
        for index, (u, r) in enumerate(zip(users, revenue)):
            if u.month and r.month and u.month != r.month:
                result.issues.append(Issue(
                    "warning", "statistic", "series_alignment",
                    f"point {index}: user growth month {u.month!r} "
                    f"!= revenue month {r.month!r}",
                ))

    def _check_plan_shares(self, report, result):
        if report.revenue is None or not report.revenue.sold_plans:
            return
        total = sum(share.percentage for share in report.revenue.sold_plans)
        if abs(total - 100) > PLAN_TOTAL_TOLERANCE:
            result.issues.append(Issue(
                "warning", "revenue", "plan_total",
                f"sold plan shares sum to {total:.2f}%, expected 100%",
            ))


def validate_report(report: NormalizedReport) -> QAResult:
    """Convenience wrapper around ``ReportValidator().validate``."""
    return ReportValidator().validate(report)
