"""Daily reports: form state for a child, drafts, submissions, out time."""
from typing import Optional

from fastapi import APIRouter, HTTPException

from daycare.api.deps import CurrentSession
from daycare.models.form_state import FormChange, FormState
from daycare.services.report_status import ReportStatus
from daycare.services.session import DailySession, ReportAccessDenied, SaveResult, ValidationFailed
from daycare.services.synchronizer import apply_field_change

router = APIRouter()


def _raise_for_failed_save(result: SaveResult) -> SaveResult:
    if not result.saved:
        raise HTTPException(
            status_code=502,
            detail={"message": "Error saving daily report.", **result.model_dump(mode="json")},
        )
    return result


async def _save(session: DailySession, form: FormState, report_status: ReportStatus) -> SaveResult:
    try:
        result = await session.save_report(form, report_status)
    except ValidationFailed as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _raise_for_failed_save(result)


@router.get("/today")
async def get_today_reports(session: CurrentSession):
    """The preferred report per child for the current day."""
    return {name: report.model_dump() for name, report in session.snapshot.reports_by_child.items()}


@router.get("/eligible")
async def get_eligible_children(session: CurrentSession, selected: Optional[str] = None):
    return {"children": session.eligible_children(selected or "")}


@router.get("/access/{child_name}")
async def check_access(child_name: str, session: CurrentSession):
    try:
        session.check_report_access(child_name)
    except ReportAccessDenied as e:
        raise HTTPException(status_code=403, detail=str(e))
    return {"child_name": child_name, "allowed": True}


@router.get("/form", response_model=FormState)
async def get_form(session: CurrentSession, child: Optional[str] = None):
    """Form state for the child named in the navigation context (blank when none)."""
    return session.form_for((child or "").strip())


@router.post("/form/sync", response_model=FormState)
async def sync_form(form: FormState, session: CurrentSession):
    """Fill blank fields of an in-progress form from freshly loaded data."""
    return session.reconcile(form)


@router.post("/form/change", response_model=FormState)
async def change_form(data: FormChange):
    try:
        return apply_field_change(data.form, data.field, data.value)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/draft", response_model=SaveResult)
async def save_draft(form: FormState, session: CurrentSession):
    return await _save(session, form, ReportStatus.PARTIAL)


@router.post("/submit", response_model=SaveResult)
async def submit_report(form: FormState, session: CurrentSession):
    return await _save(session, form, ReportStatus.FULL)


@router.post("/{child_name}/out-time", response_model=SaveResult)
async def mark_out_time(child_name: str, session: CurrentSession):
    try:
        result = await session.mark_out_time(child_name)
    except ReportAccessDenied as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _raise_for_failed_save(result)
