"""Theme tags and per-day configuration defaults."""
from __future__ import annotations

from datetime import date
from typing import Iterable

from pydantic import BaseModel, Field

from daycare.models.form_state import ConfigDefaults
from daycare.models.theme_config import ThemeConfigRecord
from daycare.services.time_format import day_stamp

WEEKLY_THEME_PREVIEW_COUNT = 4


class ThemeOverview(BaseModel):
    weekly_themes: list[str] = Field(default_factory=list)
    day_themes: list[str] = Field(default_factory=list)
    common_parents_note: str = ""


class WeeklyThemePreview(BaseModel):
    visible: list[str] = Field(default_factory=list)
    hidden_count: int = 0
    total: int = 0
    summary: str = "None"


def parse_tags(value: Iterable[str] | str | None) -> list[str]:
    """Accept a list or a comma-delimited string; return trimmed, non-empty tags."""
    if value is None:
        return []
    if isinstance(value, str):
        items = value.split(",")
    else:
        items = list(value)
    return [str(item).strip() for item in items if str(item or "").strip()]


def config_defaults(record: ThemeConfigRecord | None, today: date) -> ConfigDefaults:
    """Defaults for a new report; the parents' note only counts on the day it was written."""
    if record is None:
        return ConfigDefaults()
    note = record.common_parents_note if record.common_parents_note_date == day_stamp(today) else ""
    return ConfigDefaults(
        themes=parse_tags(record.theme_of_the_day),
        common_parents_note=note or "",
    )


def theme_overview(record: ThemeConfigRecord | None, today: date) -> ThemeOverview:
    if record is None:
        return ThemeOverview()
    defaults = config_defaults(record, today)
    return ThemeOverview(
        weekly_themes=parse_tags(record.theme),
        day_themes=defaults.themes,
        common_parents_note=defaults.common_parents_note,
    )


def weekly_theme_preview(tags: list[str], expanded: bool = False) -> WeeklyThemePreview:
    visible = tags if expanded else tags[:WEEKLY_THEME_PREVIEW_COUNT]
    return WeeklyThemePreview(
        visible=list(visible),
        hidden_count=len(tags) - len(visible),
        total=len(tags),
        summary=", ".join(visible) or "None",
    )
