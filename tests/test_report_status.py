from daycare.models.attendance import AttendanceEntry
from daycare.models.daily_report import DailyReportRecord
from daycare.services.report_status import (
    DisplayState,
    ReportStatus,
    classify_for_display,
    classify_stored_status,
    has_meaningful_draft_content,
)

PRESENT_AT_0915 = AttendanceEntry(status="present", time="09:15")


def draft(**fields) -> DailyReportRecord:
    return DailyReportRecord(**{"child_name": "Ana", "report_status": "partial", "in_time": "09:15 AM", **fields})


def test_missing_or_unknown_status_counts_as_full():
    assert classify_stored_status(DailyReportRecord(child_name="Ana")) == ReportStatus.FULL
    assert classify_stored_status(DailyReportRecord(child_name="Ana", report_status="done")) == ReportStatus.FULL
    assert classify_stored_status(DailyReportRecord(child_name="Ana", report_status="partial")) == ReportStatus.PARTIAL


def test_no_classification_unless_present():
    assert classify_for_display(draft(), None) is None
    assert classify_for_display(draft(), AttendanceEntry(status="absent", time="09:15")) is None


def test_present_without_report_is_not_filled():
    assert classify_for_display(None, PRESENT_AT_0915) == DisplayState.NOT_FILLED


def test_seeded_draft_is_not_filled():
    assert classify_for_display(draft(), PRESENT_AT_0915) == DisplayState.NOT_FILLED


def test_draft_with_notes_is_partially_filled():
    assert classify_for_display(draft(notes="ok"), PRESENT_AT_0915) == DisplayState.PARTIAL


def test_whitespace_only_text_is_not_content():
    assert classify_for_display(draft(notes="   ", meal=""), PRESENT_AT_0915) == DisplayState.NOT_FILLED


def test_changed_check_in_time_is_content():
    assert classify_for_display(draft(in_time="09:45 AM"), PRESENT_AT_0915) == DisplayState.PARTIAL


def test_flags_and_feelings_are_content():
    assert classify_for_display(draft(ouch=True), PRESENT_AT_0915) == DisplayState.PARTIAL
    assert classify_for_display(draft(feelings=["Happy"]), PRESENT_AT_0915) == DisplayState.PARTIAL


def test_full_report_is_fully_filled():
    report = DailyReportRecord(child_name="Ana", report_status="full")
    assert classify_for_display(report, PRESENT_AT_0915) == DisplayState.FULL
    assert DisplayState.FULL.label == "Fully filled"


def test_heuristic_takes_normalized_times():
    report = draft()
    assert not has_meaningful_draft_content(report, "09:15", "09:15")
    assert has_meaningful_draft_content(report, "09:15", "")
    assert not has_meaningful_draft_content(report, "", "09:15")
