"""Daily report per child per day: meals, sleep, diaper/toilet, mood, notes."""
from datetime import datetime
from typing import Optional

from beanie import Document
from pydantic import BaseModel, Field, field_validator

MEAL_OPTIONS = ("None", "Some", "Half", "Most", "All")
COUNT_OPTIONS = ("0", "1", "2", "3", "4")
FEELING_OPTIONS = ("Happy", "Sad", "Restless", "Quiet", "Playful", "Sick")

TIME_FIELDS = ("in_time", "out_time", "sleep_from", "sleep_to")
COUNT_FIELDS = ("diaper_changes", "toilet_visits", "poops")
FLAG_FIELDS = ("sleep_not", "no_diaper", "ouch")


def parse_timestamp(value) -> Optional[datetime]:
    """Best-effort conversion of a stored timestamp; unusable values become None."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    return None


class ReportFields(BaseModel):
    child_name: str = ""
    email: str = ""
    email2: str = ""

    # 12-hour labeled at rest ("09:15 AM")
    in_time: str = ""
    out_time: str = ""
    sleep_from: str = ""
    sleep_to: str = ""

    snack: str = ""
    meal: str = ""
    diaper_changes: str = ""
    toilet_visits: str = ""
    poops: str = ""

    sleep_not: bool = False
    no_diaper: bool = False
    ouch: bool = False

    notes: str = ""
    ouch_report: str = ""
    common_parents_note: str = ""

    # Lists, or comma-delimited strings in older documents
    feelings: list[str] | str = Field(default_factory=list)
    theme_of_the_day: list[str] | str = Field(default_factory=list)
    themes: list[str] | str | None = None  # legacy name of theme_of_the_day

    report_status: Optional[str] = None  # partial, full; missing means full
    date: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator(
        "child_name", "email", "email2", *TIME_FIELDS, "snack", "meal", *COUNT_FIELDS,
        "notes", "ouch_report", "common_parents_note",
        mode="before",
    )
    @classmethod
    def _as_text(cls, value):
        if value is None:
            return ""
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("feelings", "theme_of_the_day", mode="before")
    @classmethod
    def _as_tags(cls, value):
        return [] if value is None else value

    @field_validator(*FLAG_FIELDS, mode="before")
    @classmethod
    def _as_flag(cls, value):
        return bool(value)

    @field_validator("date", "created_at", "updated_at", mode="before")
    @classmethod
    def _as_timestamp(cls, value):
        return parse_timestamp(value)


class DailyReportRecord(ReportFields):
    """A report as read back from the store; the id is the store's opaque key."""

    id: Optional[str] = None


class DailyReport(Document, ReportFields):
    class Settings:
        name = "daily_reports"
        use_state_management = True
