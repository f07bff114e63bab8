from fastapi import APIRouter, HTTPException

from daycare.api.deps import CurrentSession
from daycare.models.attendance import AttendanceMarkRequest
from daycare.services.session import ValidationFailed
from daycare.services.time_format import day_stamp

router = APIRouter()


@router.get("/today")
async def get_today_attendance(session: CurrentSession):
    """Attendance for the current day, keyed by child name."""
    return {
        "date": day_stamp(session.day),
        "attendance": {name: record.model_dump() for name, record in session.snapshot.attendance.items()},
        "marked_count": session.marked_count(),
        "total": len(session.snapshot.roster),
        "auto_absent_done": session.auto_absent_done,
    }


@router.post("/mark")
async def mark_attendance(data: AttendanceMarkRequest, session: CurrentSession):
    """Mark a child present or absent; re-marking overwrites the earlier mark."""
    try:
        result = await session.mark_attendance(data.child_name, data.status)
    except ValidationFailed as e:
        raise HTTPException(status_code=400, detail=str(e))

    if not result.persisted:
        # The local mark stays in place; the caller decides whether to retry.
        raise HTTPException(
            status_code=502,
            detail={"message": "Failed to mark attendance.", **result.model_dump(mode="json")},
        )
    return result
