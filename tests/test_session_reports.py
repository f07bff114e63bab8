import asyncio

import pytest

from daycare.models.form_state import FormState
from daycare.services.report_status import DisplayState, ReportStatus
from daycare.services.session import (
    DailySession,
    ReportAccessDenied,
    ValidationFailed,
    build_report_payload,
)
from daycare.services.store import DAILY_REPORTS, MemoryDocumentStore, StoreError
from tests.helpers import at, attendance_doc, make_store, roster


class RejectingUpdates(MemoryDocumentStore):
    async def update_document(self, collection, doc_id, fields):
        raise StoreError("update rejected")


def test_payload_uses_stored_shape():
    form = FormState(child_name="Ana", in_time="09:15", sleep_from="13:00", themes=["Autumn"], feelings=["Happy"])
    payload = build_report_payload(form, ReportStatus.PARTIAL, at(10))

    assert "themes" not in payload
    assert payload["theme_of_the_day"] == ["Autumn"]
    assert payload["in_time"] == "09:15 AM"
    assert payload["sleep_from"] == "01:00 PM"
    assert payload["out_time"] == ""
    assert payload["report_status"] == "partial"
    assert payload["date"] == payload["updated_at"] == at(10)
    assert "created_at" not in payload


async def test_draft_then_save_again_updates_same_document(session, store, clock):
    await session.refresh()
    form = session.form_for("Ana")

    first = await session.save_draft(form)
    assert first.saved and first.created

    docs = await store.list_all(DAILY_REPORTS)
    assert len(docs) == 1
    assert docs[0]["report_status"] == "partial"
    assert docs[0]["created_at"] == clock.now

    clock.advance(minutes=10)
    second = await session.save_draft(form.model_copy(update={"notes": "Ate well"}))
    assert second.saved and not second.created
    assert second.report_id == first.report_id

    docs = await store.list_all(DAILY_REPORTS)
    assert len(docs) == 1
    assert docs[0]["notes"] == "Ate well"
    assert session.snapshot.reports_by_child["Ana"].id == first.report_id


async def test_saved_report_survives_reload_and_reclassifies(session, clock):
    await session.refresh()
    form = session.form_for("Ana")

    await session.save_draft(form)
    await session.refresh()
    assert session.report_state("Ana") == DisplayState.NOT_FILLED

    await session.save_draft(form.model_copy(update={"notes": "ok"}))
    await session.refresh()
    assert session.report_state("Ana") == DisplayState.PARTIAL

    await session.submit(session.form_for("Ana"))
    await session.refresh()
    assert session.report_state("Ana") == DisplayState.FULL
    assert session.form_for("Ana").notes == "ok"


async def test_save_resolves_duplicates_through_selector(clock):
    store = make_store(
        children=roster("Ana"),
        attendance=[attendance_doc({"Ana": ("present", "09:15")})],
        reports=[
            {"id": "A", "child_name": "Ana", "report_status": "full", "updated_at": at(10), "date": at(10)},
            {"id": "B", "child_name": "Ana", "report_status": "partial", "updated_at": at(11), "date": at(11)},
        ],
    )
    clock.now = at(11, 30)
    session = DailySession(store, clock=clock)
    await session.refresh()

    assert session.snapshot.reports_by_child["Ana"].id == "A"
    result = await session.submit(session.form_for("Ana"))
    assert result.report_id == "A"
    assert (await store.get_document(DAILY_REPORTS, "B"))["report_status"] == "partial"


async def test_blank_child_is_rejected_without_writing(session, store):
    await session.refresh()
    with pytest.raises(ValidationFailed):
        await session.save_draft(FormState())
    assert await store.list_all(DAILY_REPORTS) == []


@pytest.mark.parametrize(
    "changes",
    [{"meal": "Lots"}, {"poops": "7"}, {"feelings": ["Grumpy"]}],
)
async def test_out_of_range_values_are_rejected(session, changes):
    await session.refresh()
    with pytest.raises(ValidationFailed):
        await session.submit(FormState(child_name="Ana", **changes))


async def test_failed_update_is_reported_and_cache_untouched(clock):
    store = RejectingUpdates(
        {
            "kids_info": roster("Ana"),
            "daily_reports": [{"id": "r1", "child_name": "Ana", "report_status": "partial", "date": at(9)}],
        }
    )
    session = DailySession(store, clock=clock)
    await session.refresh()

    result = await session.submit(session.form_for("Ana"))

    assert not result.saved
    assert result.error == "update rejected"
    assert session.snapshot.reports_by_child["Ana"].report_status == "partial"


async def test_eligible_children_and_access(session):
    await session.refresh()
    await session.mark_attendance("Cleo", "present")
    assert session.eligible_children() == ["Ana", "Cleo"]

    await session.submit(session.form_for("Ana"))
    assert session.eligible_children() == ["Cleo"]
    assert session.eligible_children(selected="Ana") == ["Ana", "Cleo"]

    with pytest.raises(ReportAccessDenied, match="already fully filled"):
        session.check_report_access("Ana")
    with pytest.raises(ReportAccessDenied, match="marked Present"):
        session.check_report_access("Ben")
    session.check_report_access("Cleo")


async def test_out_time_only_for_full_reports(session, store, clock):
    await session.refresh()
    with pytest.raises(ReportAccessDenied):
        await session.mark_out_time("Ana")

    await session.save_draft(session.form_for("Ana"))
    with pytest.raises(ReportAccessDenied):
        await session.mark_out_time("Ana")

    saved = await session.submit(session.form_for("Ana"))
    clock.now = at(16, 5)
    result = await session.mark_out_time("Ana")

    assert result.saved
    doc = await store.get_document(DAILY_REPORTS, saved.report_id)
    assert doc["out_time"] == "4:05 PM"
    assert session.form_for("Ana").out_time == "16:05"


class SlowCreates(MemoryDocumentStore):
    async def create_document(self, collection, fields, doc_id=None):
        await asyncio.sleep(0)
        return await super().create_document(collection, fields, doc_id)


async def test_unreadable_report_does_not_hide_the_others(clock):
    store = make_store(
        children=roster("Ana", "Ben", "Cleo"),
        attendance=[attendance_doc({"Ana": ("present", "09:15"), "Ben": ("present", "09:20")})],
        reports=[
            {"id": "A", "child_name": "Ana", "report_status": "full", "notes": "ok", "date": at(9)},
            {"id": "B", "child_name": "Ben", "report_status": "full", "feelings": None, "date": at(9)},
            {"id": "C", "child_name": "Cleo", "feelings": 42, "date": at(9)},
        ],
    )
    session = DailySession(store, clock=clock)
    await session.refresh()

    assert set(session.snapshot.reports_by_child) == {"Ana", "Ben"}
    assert session.snapshot.reports_by_child["Ben"].feelings == []
    assert session.is_report_complete("Ana")
    assert session.eligible_children() == []


async def test_concurrent_saves_create_one_document(clock):
    store = SlowCreates({"kids_info": roster("Ana"), "attendance": [attendance_doc({"Ana": ("present", "09:15")})]})
    session = DailySession(store, clock=clock)
    await session.refresh()
    form = session.form_for("Ana")

    first, second = await asyncio.gather(
        session.save_draft(form.model_copy(update={"notes": "one"})),
        session.save_draft(form.model_copy(update={"notes": "two"})),
    )

    docs = await store.list_all(DAILY_REPORTS)
    assert len(docs) == 1
    assert first.created and not second.created
    assert first.report_id == second.report_id
    assert docs[0]["notes"] == "two"
