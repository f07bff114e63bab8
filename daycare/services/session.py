"""Per-day session context: cached snapshot, attendance marking, the noon sweep and report upserts.

The caches are replaced wholesale on every load and written through
optimistically on every mark or save. Attendance marks are never rolled
back when the store rejects the write; callers get a ``MarkResult`` that
says whether the local state changed and whether the write persisted.
"""
from __future__ import annotations

import asyncio
import logging
from datetime import date, datetime
from typing import Any, Callable, Optional

from pydantic import BaseModel, Field, ValidationError

from daycare.models.attendance import ABSENT, ATTENDANCE_STATUSES, PRESENT, AttendanceEntry
from daycare.models.child import ChildRecord
from daycare.models.daily_report import (
    COUNT_FIELDS,
    COUNT_OPTIONS,
    FEELING_OPTIONS,
    MEAL_OPTIONS,
    TIME_FIELDS,
    DailyReportRecord,
)
from daycare.models.form_state import FormState
from daycare.models.theme_config import THEME_CONFIG_ID, ThemeConfigRecord
from daycare.services.report_selector import index_reports_by_child
from daycare.services.report_status import (
    DisplayState,
    ReportStatus,
    classify_for_display,
    classify_stored_status,
)
from daycare.services.store import (
    APP_CONFIG,
    ATTENDANCE,
    CHILDREN,
    DAILY_REPORTS,
    DocumentStore,
    StoreError,
)
from daycare.services.synchronizer import DaySnapshot, form_state_for_child, reconcile_form_state
from daycare.services.themes import WeeklyThemePreview, config_defaults, parse_tags, weekly_theme_preview
from daycare.services.time_format import (
    day_bounds,
    day_stamp,
    format_clock_time,
    format_marked_at,
    format_out_time,
    to_12_hour,
)

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


class ValidationFailed(ValueError):
    """Input rejected before anything was written."""


class ReportAccessDenied(Exception):
    """The child's report cannot be opened or changed in its current state."""


class MarkResult(BaseModel):
    child_name: str
    record: AttendanceEntry
    local_updated: bool = True
    persisted: bool = False
    error: Optional[str] = None


class SaveResult(BaseModel):
    child_name: str
    saved: bool
    created: bool = False
    report_id: Optional[str] = None
    report_status: Optional[ReportStatus] = None
    error: Optional[str] = None


class ChildOverview(BaseModel):
    name: str
    email: str = ""
    email2: str = ""
    attendance: Optional[AttendanceEntry] = None
    report_state: Optional[DisplayState] = None
    report_state_label: Optional[str] = None
    report_complete: bool = False
    out_time: str = ""


class DaySummary(BaseModel):
    date: str
    marked_count: int
    total: int
    progress_percent: float
    weekly_theme: WeeklyThemePreview
    day_themes: list[str] = Field(default_factory=list)
    common_parents_note: str = ""
    children: list[ChildOverview] = Field(default_factory=list)


def validate_report_form(form: FormState) -> None:
    if not form.child_name.strip():
        raise ValidationFailed("Please select a child first.")
    for name in ("snack", "meal"):
        value = getattr(form, name)
        if value and value not in MEAL_OPTIONS:
            raise ValidationFailed(f"{name} must be one of {', '.join(MEAL_OPTIONS)}")
    for name in COUNT_FIELDS:
        value = getattr(form, name)
        if value and value not in COUNT_OPTIONS:
            raise ValidationFailed(f"{name} must be between 0 and 4")
    unknown = [feeling for feeling in form.feelings if feeling not in FEELING_OPTIONS]
    if unknown:
        raise ValidationFailed(f"Unknown feelings: {', '.join(unknown)}")


def build_report_payload(form: FormState, status: ReportStatus, now: datetime) -> dict[str, Any]:
    """Stored shape of a form: 12-hour times, themes under ``theme_of_the_day``, stamped."""
    payload = form.model_dump(exclude={"themes"})
    for name in TIME_FIELDS:
        payload[name] = to_12_hour(payload[name])
    payload["theme_of_the_day"] = list(form.themes)
    payload["report_status"] = status.value
    payload["date"] = now
    payload["updated_at"] = now
    return payload


def attendance_sort_key(kid: ChildRecord, attendance: dict[str, AttendanceEntry]):
    """Present children first, absent last, unmarked in between; then by name."""
    record = attendance.get(kid.name)
    status = record.status if record else None
    rank = 0 if status == PRESENT else 2 if status == ABSENT else 1
    return rank, kid.name.casefold()


class DailySession:
    """Owns the cached state for one calendar day."""

    def __init__(
        self,
        store: DocumentStore,
        clock: Clock = datetime.now,
        auto_absent_hour: int = 12,
    ):
        self.store = store
        self.clock = clock
        self.auto_absent_hour = auto_absent_hour
        self.day: date = clock().date()
        self.snapshot = DaySnapshot()
        self.theme_config: Optional[ThemeConfigRecord] = None
        self.attendance_doc_id: Optional[str] = None
        self.auto_absent_done = False
        self._roster_loaded = False
        self._attendance_loaded = False
        # One report upsert at a time so a second save sees the first one's document
        self._save_lock = asyncio.Lock()

    # Loading

    async def load_roster(self) -> None:
        try:
            records = await self.store.list_all(CHILDREN)
        except StoreError as e:
            logger.error(f"Error fetching kids info: {e}")
            return
        roster = []
        for record in records:
            try:
                roster.append(ChildRecord.model_validate(record))
            except ValidationError as e:
                logger.warning(f"Skipping unreadable roster entry {record.get('id')}: {e}")
        self.snapshot.roster = roster
        self._roster_loaded = True

    async def load_attendance(self) -> None:
        start, end = day_bounds(self.clock())
        try:
            records = await self.store.query_by_date_range(ATTENDANCE, "date", start, end)
        except StoreError as e:
            logger.error(f"Error fetching attendance: {e}")
            return
        attendance: dict[str, AttendanceEntry] = {}
        doc_id = self.attendance_doc_id
        for record in records:
            for name, entry in (record.get("attendance") or {}).items():
                try:
                    attendance[name] = AttendanceEntry.model_validate(entry)
                except ValidationError as e:
                    logger.warning(f"Skipping attendance entry for {name!r} in {record['id']}: {e}")
            doc_id = record["id"]
        self.snapshot.attendance = attendance
        self.attendance_doc_id = doc_id
        self._attendance_loaded = True

    async def load_reports(self) -> None:
        start, end = day_bounds(self.clock())
        try:
            records = await self.store.query_by_date_range(DAILY_REPORTS, "date", start, end)
        except StoreError as e:
            logger.error(f"Error fetching daily reports: {e}")
            return
        reports = []
        for record in records:
            try:
                reports.append(DailyReportRecord.model_validate(record))
            except ValidationError as e:
                logger.warning(f"Skipping unreadable daily report {record.get('id')}: {e}")
        self.snapshot.reports_by_child = index_reports_by_child(reports)

    async def load_config(self) -> None:
        try:
            record = await self.store.get_document(APP_CONFIG, THEME_CONFIG_ID)
            config = ThemeConfigRecord.model_validate(record) if record else None
        except (StoreError, ValidationError) as e:
            logger.error(f"Error loading config: {e}")
            return
        if config is None:
            return
        self.theme_config = config
        self.snapshot.defaults = config_defaults(config, self.day)
        self.snapshot.weekly_themes = parse_tags(config.theme)

    async def refresh(self) -> None:
        """Reload every source independently, then give the noon sweep a chance to run."""
        await asyncio.gather(
            self.load_roster(),
            self.load_attendance(),
            self.load_reports(),
            self.load_config(),
        )
        await self.run_auto_absent_sweep()

    # Form state

    def form_for(self, child_name: str) -> FormState:
        return form_state_for_child(child_name, self.snapshot)

    def reconcile(self, form: FormState) -> FormState:
        return reconcile_form_state(form, self.snapshot)

    # Attendance

    async def mark_attendance(self, child_name: str, status: str, now: datetime | None = None) -> MarkResult:
        child_name = (child_name or "").strip()
        if not child_name:
            raise ValidationFailed("Child name is required")
        if "." in child_name or child_name.startswith("$"):
            raise ValidationFailed(f"Child name cannot contain '.' or start with '$': {child_name}")
        if self._roster_loaded and all(kid.name != child_name for kid in self.snapshot.roster):
            raise ValidationFailed(f"{child_name} is not on the roster")
        if status not in ATTENDANCE_STATUSES:
            raise ValidationFailed(f"Status must be one of {', '.join(ATTENDANCE_STATUSES)}")

        now = now or self.clock()
        record = AttendanceEntry(status=status, time=format_clock_time(now), marked_at=format_marked_at(now))
        self.snapshot.attendance = {**self.snapshot.attendance, child_name: record}

        entry = record.model_dump()
        try:
            if self.attendance_doc_id:
                updated = await self.store.update_document(
                    ATTENDANCE,
                    self.attendance_doc_id,
                    {f"attendance.{child_name}": entry, "date": now},
                )
                if not updated:
                    raise StoreError(f"Attendance document {self.attendance_doc_id} not found")
            else:
                self.attendance_doc_id = await self.store.create_document(
                    ATTENDANCE, {"date": now, "attendance": {child_name: entry}}
                )
        except StoreError as e:
            logger.error(f"Error marking attendance for {child_name}: {e}")
            return MarkResult(child_name=child_name, record=record, persisted=False, error=str(e))

        return MarkResult(child_name=child_name, record=record, persisted=True)

    async def run_auto_absent_sweep(self, now: datetime | None = None) -> list[str]:
        """Mark every unmarked roster child absent, once per session, from the cutoff hour on."""
        if self.auto_absent_done:
            return []
        now = now or self.clock()
        if now.hour < self.auto_absent_hour:
            return []
        if not (self._roster_loaded and self._attendance_loaded):
            return []

        self.auto_absent_done = True
        marked: list[str] = []
        for kid in self.snapshot.roster:
            if kid.name in self.snapshot.attendance:
                continue
            try:
                await self.mark_attendance(kid.name, ABSENT, now=now)
            except ValidationFailed as e:
                logger.warning(f"Skipping auto-absent for {kid.name!r}: {e}")
                continue
            marked.append(kid.name)

        if marked:
            logger.info(f"Auto-marked {len(marked)} children absent: {', '.join(marked)}")
        return marked

    def marked_count(self) -> int:
        names = {kid.name for kid in self.snapshot.roster}
        return sum(
            1
            for name, record in self.snapshot.attendance.items()
            if name in names and record.status in ATTENDANCE_STATUSES
        )

    def sorted_roster(self) -> list[ChildRecord]:
        return sorted(self.snapshot.roster, key=lambda kid: attendance_sort_key(kid, self.snapshot.attendance))

    # Reports

    def report_state(self, child_name: str) -> Optional[DisplayState]:
        return classify_for_display(
            self.snapshot.reports_by_child.get(child_name),
            self.snapshot.attendance.get(child_name),
        )

    def is_report_complete(self, child_name: str) -> bool:
        report = self.snapshot.reports_by_child.get(child_name)
        return report is not None and classify_stored_status(report) == ReportStatus.FULL

    def eligible_children(self, selected: str = "") -> list[str]:
        """Present children who can still be picked for a report."""
        present = [name for name, record in self.snapshot.attendance.items() if record.status == PRESENT]
        return sorted(
            (name for name in present if name == selected or not self.is_report_complete(name)),
            key=str.casefold,
        )

    def check_report_access(self, child_name: str) -> None:
        record = self.snapshot.attendance.get(child_name)
        if record is None or record.status != PRESENT:
            raise ReportAccessDenied(f"Daily report can only be submitted if {child_name} is marked Present.")
        if self.is_report_complete(child_name):
            raise ReportAccessDenied(f"Daily report for {child_name} is already fully filled.")

    async def save_report(self, form: FormState, status: ReportStatus) -> SaveResult:
        validate_report_form(form)
        child_name = form.child_name
        async with self._save_lock:
            now = self.clock()
            payload = build_report_payload(form, status, now)
            existing = self.snapshot.reports_by_child.get(child_name)

            try:
                if existing is not None and existing.id:
                    updated = await self.store.update_document(DAILY_REPORTS, existing.id, payload)
                    if not updated:
                        raise StoreError(f"Daily report {existing.id} not found")
                    report = DailyReportRecord.model_validate(
                        {**existing.model_dump(), **payload, "id": existing.id}
                    )
                    created = False
                else:
                    payload["created_at"] = now
                    new_id = await self.store.create_document(DAILY_REPORTS, payload)
                    report = DailyReportRecord.model_validate({**payload, "id": new_id})
                    created = True
            except StoreError as e:
                logger.error(f"Error saving report for {child_name}: {e}")
                return SaveResult(child_name=child_name, saved=False, report_status=status, error=str(e))

            self.snapshot.reports_by_child = {**self.snapshot.reports_by_child, child_name: report}
        logger.info(f"Saved {status.value} report {report.id} for {child_name} (created={created})")
        return SaveResult(
            child_name=child_name,
            saved=True,
            created=created,
            report_id=report.id,
            report_status=status,
        )

    async def save_draft(self, form: FormState) -> SaveResult:
        return await self.save_report(form, ReportStatus.PARTIAL)

    async def submit(self, form: FormState) -> SaveResult:
        return await self.save_report(form, ReportStatus.FULL)

    async def mark_out_time(self, child_name: str) -> SaveResult:
        report = self.snapshot.reports_by_child.get(child_name)
        if report is None or classify_stored_status(report) != ReportStatus.FULL:
            raise ReportAccessDenied(f"Out time can only be marked once {child_name}'s report is fully filled.")

        now = self.clock()
        fields = {"out_time": format_out_time(now), "updated_at": now}
        try:
            updated = await self.store.update_document(DAILY_REPORTS, report.id, fields)
            if not updated:
                raise StoreError(f"Daily report {report.id} not found")
        except StoreError as e:
            logger.error(f"Error marking out time for {child_name}: {e}")
            return SaveResult(child_name=child_name, saved=False, report_id=report.id, error=str(e))

        self.snapshot.reports_by_child = {
            **self.snapshot.reports_by_child,
            child_name: report.model_copy(update=fields),
        }
        return SaveResult(child_name=child_name, saved=True, report_id=report.id, report_status=ReportStatus.FULL)

    # Overview

    def summary(self, expand_weekly_themes: bool = False) -> DaySummary:
        total = len(self.snapshot.roster)
        marked = self.marked_count()
        children = []
        for kid in self.sorted_roster():
            state = self.report_state(kid.name)
            report = self.snapshot.reports_by_child.get(kid.name)
            children.append(
                ChildOverview(
                    name=kid.name,
                    email=kid.email,
                    email2=kid.email2,
                    attendance=self.snapshot.attendance.get(kid.name),
                    report_state=state,
                    report_state_label=state.label if state else None,
                    report_complete=self.is_report_complete(kid.name),
                    out_time=report.out_time if report else "",
                )
            )
        return DaySummary(
            date=day_stamp(self.day),
            marked_count=marked,
            total=total,
            progress_percent=min(100.0, marked / total * 100) if total else 0.0,
            weekly_theme=weekly_theme_preview(self.snapshot.weekly_themes, expand_weekly_themes),
            day_themes=list(self.snapshot.defaults.themes),
            common_parents_note=self.snapshot.defaults.common_parents_note,
            children=children,
        )


class SessionRegistry:
    """Hands out the current day's session; a new day starts a new session."""

    def __init__(self, store: DocumentStore, clock: Clock = datetime.now, auto_absent_hour: int = 12):
        self.store = store
        self.clock = clock
        self.auto_absent_hour = auto_absent_hour
        self._session: Optional[DailySession] = None

    def current(self) -> DailySession:
        today = self.clock().date()
        if self._session is None or self._session.day != today:
            logger.info(f"Starting daily session for {day_stamp(today)}")
            self._session = DailySession(self.store, clock=self.clock, auto_absent_hour=self.auto_absent_hour)
        return self._session
