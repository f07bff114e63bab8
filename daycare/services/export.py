"""Daily roster sheet (attendance + report state) as CSV or Excel."""
import io

import pandas as pd

from daycare.services.session import DaySummary

EXPORT_COLUMNS = ["Child", "Attendance", "Check-in", "Marked At", "Report", "Out Time", "Email", "Second Email"]


def summary_frame(summary: DaySummary) -> pd.DataFrame:
    rows = []
    for child in summary.children:
        attendance = child.attendance
        rows.append(
            {
                "Child": child.name,
                "Attendance": attendance.status if attendance else "unmarked",
                "Check-in": attendance.time if attendance else "",
                "Marked At": attendance.marked_at if attendance else "",
                "Report": child.report_state_label or "",
                "Out Time": child.out_time,
                "Email": child.email,
                "Second Email": child.email2,
            }
        )
    return pd.DataFrame(rows, columns=EXPORT_COLUMNS)


def to_csv(df: pd.DataFrame) -> str:
    stream = io.StringIO()
    df.to_csv(stream, index=False)
    return stream.getvalue()


def to_excel(df: pd.DataFrame, sheet_name: str = "Daily Report") -> io.BytesIO:
    output = io.BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name=sheet_name)
    output.seek(0)
    return output
