from fastapi import APIRouter, Query
from fastapi.responses import StreamingResponse

from daycare.api.deps import CurrentSession
from daycare.services.export import summary_frame, to_csv, to_excel
from daycare.services.session import DaySummary

router = APIRouter()


@router.get("/summary", response_model=DaySummary)
async def get_summary(session: CurrentSession, expand_weekly_themes: bool = False):
    """Roster with attendance and report state, progress and themes for today."""
    return session.summary(expand_weekly_themes)


@router.get("/export")
async def export_summary(
    session: CurrentSession,
    format: str = Query("csv", enum=["csv", "excel"]),
):
    """Download today's roster sheet."""
    summary = session.summary()
    df = summary_frame(summary)

    if format == "csv":
        return StreamingResponse(
            iter([to_csv(df)]),
            media_type="text/csv",
            headers={"Content-Disposition": f"attachment; filename=daily_report_{summary.date}.csv"},
        )
    return StreamingResponse(
        to_excel(df),
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": f"attachment; filename=daily_report_{summary.date}.xlsx"},
    )
