"""Editable working copy of a child's daily report (24-hour times)."""
from pydantic import BaseModel, Field, field_validator


class ConfigDefaults(BaseModel):
    themes: list[str] = Field(default_factory=list)
    common_parents_note: str = ""


class FormState(BaseModel):
    child_name: str = ""
    email: str = ""
    email2: str = ""

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

    feelings: list[str] = Field(default_factory=list)
    themes: list[str] = Field(default_factory=list)

    @field_validator("diaper_changes", "toilet_visits", "poops", mode="before")
    @classmethod
    def _count_as_text(cls, value):
        if value is None:
            return ""
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value


class FormChange(BaseModel):
    form: FormState
    field: str
    value: bool | str | None = None
