"""Theme of the week / theme of the day and the common note for parents."""
from typing import Optional

from beanie import Document
from pydantic import BaseModel, Field

THEME_CONFIG_ID = "themeOfTheWeek"


class ThemeConfigFields(BaseModel):
    theme: list[str] | str = Field(default_factory=list)  # weekly tags
    theme_of_the_day: list[str] | str = Field(default_factory=list)
    common_parents_note: str = ""
    common_parents_note_date: str = ""  # YYYY-MM-DD; note is only valid on that day


class ThemeConfigRecord(ThemeConfigFields):
    id: Optional[str] = None


class ThemeConfig(Document, ThemeConfigFields):
    """Single-doc configuration (id='themeOfTheWeek')."""

    id: Optional[str] = None

    class Settings:
        name = "app_config"
        use_state_management = True


class ThemeConfigUpdate(BaseModel):
    theme: list[str] = Field(default_factory=list)
    theme_of_the_day: list[str] = Field(default_factory=list)
    common_parents_note: str = ""
