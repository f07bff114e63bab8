"""Roster: children and their parents' contact emails."""
from typing import Optional

from beanie import Document, Indexed
from pydantic import BaseModel, field_validator


class ChildFields(BaseModel):
    name: str
    email: str = ""
    email2: str = ""

    @field_validator("email", "email2", mode="before")
    @classmethod
    def _blank_email(cls, value):
        return (value or "").strip()


class ChildRecord(ChildFields):
    """A roster entry as read back from the store."""

    id: Optional[str] = None


class Child(Document):
    """Roster document keyed by the child's name."""

    name: Indexed(str, unique=True)
    email: str = ""
    email2: str = ""

    class Settings:
        name = "kids_info"
        use_state_management = True


class ChildCreate(ChildFields):
    @field_validator("name")
    @classmethod
    def _require_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("name must not be blank")
        # Names are field paths inside the per-day attendance map
        if "." in value or value.startswith("$"):
            raise ValueError("name cannot contain '.' or start with '$'")
        return value
