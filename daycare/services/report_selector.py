"""Pick the one authoritative report per child when a day holds duplicates."""
from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional

from daycare.models.daily_report import DailyReportRecord
from daycare.services.report_status import ReportStatus, classify_stored_status


def _millis(value: Optional[datetime]) -> int:
    if value is None:
        return 0
    try:
        return int(value.timestamp() * 1000)
    except (OverflowError, OSError, ValueError):
        return 0


def effective_timestamp(report: DailyReportRecord) -> int:
    """Latest of ``updated_at`` and ``date`` in epoch milliseconds (0 when neither is usable)."""
    return max(_millis(report.updated_at), _millis(report.date))


def pick_preferred_report(
    current: Optional[DailyReportRecord],
    candidate: DailyReportRecord,
) -> DailyReportRecord:
    """A full report outranks a draft; otherwise the more recent one wins, ties to the candidate."""
    if current is None:
        return candidate

    current_status = classify_stored_status(current)
    candidate_status = classify_stored_status(candidate)
    if current_status != candidate_status:
        return candidate if candidate_status == ReportStatus.FULL else current

    if effective_timestamp(candidate) >= effective_timestamp(current):
        return candidate
    return current


def index_reports_by_child(records: Iterable[DailyReportRecord]) -> dict[str, DailyReportRecord]:
    by_child: dict[str, DailyReportRecord] = {}
    for record in records:
        if not record.child_name:
            continue
        candidate = record.model_copy(
            update={"report_status": classify_stored_status(record).value}
        )
        by_child[record.child_name] = pick_preferred_report(by_child.get(record.child_name), candidate)
    return by_child
