"""Report completeness: the stored partial/full tag and the three-valued display state."""
from __future__ import annotations

from enum import Enum
from typing import Optional

from daycare.models.attendance import PRESENT, AttendanceEntry
from daycare.models.daily_report import DailyReportRecord
from daycare.services.themes import parse_tags
from daycare.services.time_format import to_24_hour

DRAFT_TEXT_FIELDS = (
    "out_time",
    "snack",
    "meal",
    "sleep_from",
    "sleep_to",
    "diaper_changes",
    "toilet_visits",
    "poops",
    "notes",
    "ouch_report",
)


class ReportStatus(str, Enum):
    PARTIAL = "partial"
    FULL = "full"


class DisplayState(str, Enum):
    NOT_FILLED = "not_filled"
    PARTIAL = "partial"
    FULL = "full"

    @property
    def label(self) -> str:
        return _LABELS[self]


_LABELS = {
    DisplayState.NOT_FILLED: "Not filled",
    DisplayState.PARTIAL: "Partially filled",
    DisplayState.FULL: "Fully filled",
}


def classify_stored_status(report: DailyReportRecord | None) -> ReportStatus:
    """Anything not explicitly marked partial counts as a full report."""
    if report is not None and report.report_status == ReportStatus.PARTIAL.value:
        return ReportStatus.PARTIAL
    return ReportStatus.FULL


def has_meaningful_draft_content(
    report: DailyReportRecord,
    report_in_time: str,
    attendance_in_time: str,
) -> bool:
    """Whether a draft holds anything beyond the check-in time seeded from attendance.

    Both times must already be normalized to 24-hour form.
    """
    if report_in_time and report_in_time != attendance_in_time:
        return True
    if any(str(getattr(report, name) or "").strip() for name in DRAFT_TEXT_FIELDS):
        return True
    if report.sleep_not or report.no_diaper or report.ouch:
        return True
    return bool(parse_tags(report.feelings))


def classify_for_display(
    report: DailyReportRecord | None,
    attendance: AttendanceEntry | None,
) -> Optional[DisplayState]:
    if attendance is None or attendance.status != PRESENT:
        return None
    if report is None:
        return DisplayState.NOT_FILLED

    if classify_stored_status(report) == ReportStatus.PARTIAL:
        meaningful = has_meaningful_draft_content(
            report,
            to_24_hour(report.in_time),
            to_24_hour(attendance.time),
        )
        return DisplayState.PARTIAL if meaningful else DisplayState.NOT_FILLED

    return DisplayState.FULL
