# app/routers/export.py
from __future__ import annotations

from fastapi import APIRouter, HTTPException
from fastapi.responses import Response
from typing import Dict, Any

from app import config
from app.exporter import ExportBusyError, ExportError, ExportSession, NoCaptureError
from app.models import CapturedRequest, ExportRequestIn

router = APIRouter(prefix="/export", tags=["export"])

# One session per process: the panel and the interception shim share it
session = ExportSession()

# -------------------------------
# Interception shim reports outbound requests here
# -------------------------------
@router.post("/capture")
def capture_request(payload: CapturedRequest) -> Dict[str, Any]:
    """
    Record an outbound request. Only the main search call is kept;
    analytics/suggestion calls are ignored.
    """
    captured = session.record_request(payload.url, payload.headers, payload.body)
    return {"captured": captured, "status": session.status.model_dump()}

# -------------------------------
# Trigger an export (panel button)
# -------------------------------
@router.post("")
def trigger_export(payload: ExportRequestIn) -> Response:
    """
    Replay the captured search with ranking debug on and return the CSV
    as a file download.
    """
    count = payload.count or config.default_count()
    try:
        result = session.export(count)
    except NoCaptureError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ExportBusyError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ExportError as e:
        raise HTTPException(status_code=502, detail=f"Error: {e}")

    return Response(
        content=result.csv_text,
        media_type="text/csv; charset=utf-8",
        headers={
            "Content-Disposition": f'attachment; filename="{result.filename}"',
            "X-Export-Rows": str(result.row_count),
        },
    )

# -------------------------------
# Status line shown in the panel
# -------------------------------
@router.get("/status")
def export_status() -> Dict[str, Any]:
    return session.status.model_dump()
