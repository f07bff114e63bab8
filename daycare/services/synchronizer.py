"""Per-child form state: merge roster, attendance, the preferred report and config defaults.

Two entry points:

* ``form_state_for_child`` builds a fresh form when a child is picked, either
  from the navigation context or by switching the selection.
* ``reconcile_form_state`` is re-run after every background load. It only
  fills fields that are still blank, so it never discards what the user has
  typed and running it twice changes nothing.
"""
from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field

from daycare.models.attendance import PRESENT, AttendanceEntry
from daycare.models.child import ChildRecord
from daycare.models.daily_report import DailyReportRecord
from daycare.models.form_state import ConfigDefaults, FormState
from daycare.services.themes import parse_tags
from daycare.services.time_format import to_24_hour


class DaySnapshot(BaseModel):
    """The most recently loaded state for the current day, keyed by child name."""

    roster: list[ChildRecord] = Field(default_factory=list)
    attendance: dict[str, AttendanceEntry] = Field(default_factory=dict)
    reports_by_child: dict[str, DailyReportRecord] = Field(default_factory=dict)
    defaults: ConfigDefaults = Field(default_factory=ConfigDefaults)
    weekly_themes: list[str] = Field(default_factory=list)

    def child(self, name: str) -> Optional[ChildRecord]:
        return next((kid for kid in self.roster if kid.name == name), None)

    def check_in_time(self, name: str) -> str:
        record = self.attendance.get(name)
        if record is None or record.status != PRESENT:
            return ""
        return to_24_hour(record.time)


def build_initial_form_state(child_name: str = "", defaults: ConfigDefaults | None = None) -> FormState:
    defaults = defaults or ConfigDefaults()
    return FormState(
        child_name=child_name,
        themes=list(defaults.themes),
        common_parents_note=defaults.common_parents_note or "",
    )


def map_report_to_form_state(report: DailyReportRecord, defaults: ConfigDefaults | None = None) -> FormState:
    defaults = defaults or ConfigDefaults()
    themes = (
        parse_tags(report.theme_of_the_day)
        or parse_tags(report.themes)
        or list(defaults.themes)
    )
    return FormState(
        child_name=report.child_name,
        email=report.email,
        email2=report.email2,
        in_time=to_24_hour(report.in_time),
        out_time=to_24_hour(report.out_time),
        sleep_from=to_24_hour(report.sleep_from),
        sleep_to=to_24_hour(report.sleep_to),
        snack=report.snack,
        meal=report.meal,
        diaper_changes=report.diaper_changes,
        toilet_visits=report.toilet_visits,
        poops=report.poops,
        sleep_not=bool(report.sleep_not),
        no_diaper=bool(report.no_diaper),
        ouch=bool(report.ouch),
        notes=report.notes,
        ouch_report=report.ouch_report,
        common_parents_note=report.common_parents_note or defaults.common_parents_note or "",
        feelings=parse_tags(report.feelings),
        themes=themes,
    )


def reconcile_form_state(form: FormState, snapshot: DaySnapshot) -> FormState:
    """Fill blank fields from newly loaded data; populated fields are left alone."""
    updates: dict[str, Any] = {}

    if form.child_name:
        kid = snapshot.child(form.child_name)
        if kid is not None:
            if not form.email and kid.email:
                updates["email"] = kid.email
            if not form.email2 and kid.email2:
                updates["email2"] = kid.email2

        check_in = snapshot.check_in_time(form.child_name)
        if not form.in_time and check_in:
            updates["in_time"] = check_in

    if not form.themes and snapshot.defaults.themes:
        updates["themes"] = list(snapshot.defaults.themes)
    if not form.common_parents_note and snapshot.defaults.common_parents_note:
        updates["common_parents_note"] = snapshot.defaults.common_parents_note

    if not updates:
        return form
    return form.model_copy(update=updates)


def form_state_for_child(child_name: str, snapshot: DaySnapshot) -> FormState:
    report = snapshot.reports_by_child.get(child_name) if child_name else None
    if report is not None:
        form = map_report_to_form_state(report, snapshot.defaults)
    else:
        form = build_initial_form_state(child_name, snapshot.defaults)
    return reconcile_form_state(form, snapshot)


def apply_field_change(form: FormState, field: str, value: Any) -> FormState:
    """Apply one edit together with the fields it implies."""
    if field == "child_name":
        raise ValueError("Switch children with form_state_for_child, not a field edit")
    if field not in FormState.model_fields:
        raise ValueError(f"Unknown form field: {field}")

    if field == "sleep_not":
        return form.model_copy(update={"sleep_not": bool(value), "sleep_from": "", "sleep_to": ""})

    if field == "ouch":
        checked = bool(value)
        return form.model_copy(
            update={"ouch": checked, "ouch_report": form.ouch_report if checked else ""}
        )

    if field == "no_diaper":
        checked = bool(value)
        return form.model_copy(
            update={
                "no_diaper": checked,
                "diaper_changes": "" if checked else form.diaper_changes,
                "toilet_visits": form.toilet_visits if checked else "",
            }
        )

    if field in ("feelings", "themes"):
        tag = str(value or "").strip()
        if not tag:
            return form
        current = list(getattr(form, field))
        toggled = [item for item in current if item != tag] if tag in current else current + [tag]
        return form.model_copy(update={field: toggled})

    return FormState.model_validate({**form.model_dump(), field: value if value is not None else ""})
