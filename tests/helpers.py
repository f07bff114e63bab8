"""Shared builders for the test suite."""
from datetime import datetime, timedelta

from daycare.services.store import APP_CONFIG, ATTENDANCE, CHILDREN, DAILY_REPORTS, MemoryDocumentStore


class FakeClock:
    """Wall clock the tests can move by hand."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


def at(hour: int, minute: int = 0, day: int = 19) -> datetime:
    return datetime(2026, 10, day, hour, minute)


def roster(*names: str) -> list[dict]:
    return [
        {"id": f"kid-{i}", "name": name, "email": f"{name.lower()}@example.com", "email2": ""}
        for i, name in enumerate(names)
    ]


def attendance_doc(entries: dict[str, tuple[str, str]], when: datetime | None = None, doc_id: str = "att-1") -> dict:
    return {
        "id": doc_id,
        "date": when or at(8),
        "attendance": {
            name: {"status": status, "time": time, "marked_at": ""}
            for name, (status, time) in entries.items()
        },
    }


def make_store(children=(), attendance=(), reports=(), config=None) -> MemoryDocumentStore:
    collections = {
        CHILDREN: list(children),
        ATTENDANCE: list(attendance),
        DAILY_REPORTS: list(reports),
    }
    if config is not None:
        collections[APP_CONFIG] = [config]
    return MemoryDocumentStore(collections)
