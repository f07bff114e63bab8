"""Beanie document models and Pydantic schemas."""
from daycare.models.child import Child, ChildCreate, ChildRecord
from daycare.models.attendance import (
    ABSENT,
    PRESENT,
    AttendanceDay,
    AttendanceEntry,
    AttendanceMarkRequest,
)
from daycare.models.daily_report import DailyReport, DailyReportRecord
from daycare.models.theme_config import THEME_CONFIG_ID, ThemeConfig, ThemeConfigRecord, ThemeConfigUpdate
from daycare.models.form_state import ConfigDefaults, FormChange, FormState

__all__ = [
    "Child",
    "ChildCreate",
    "ChildRecord",
    "ABSENT",
    "PRESENT",
    "AttendanceDay",
    "AttendanceEntry",
    "AttendanceMarkRequest",
    "DailyReport",
    "DailyReportRecord",
    "THEME_CONFIG_ID",
    "ThemeConfig",
    "ThemeConfigRecord",
    "ThemeConfigUpdate",
    "ConfigDefaults",
    "FormChange",
    "FormState",
]
