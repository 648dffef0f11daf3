"""FBA inventory ledger routes."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, FastAPI, Query
from fastapi.responses import JSONResponse

from services.ledger_report import fetch_ledger_report, resolve_date_range
from services.report_errors import LedgerReportError, http_status_for

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/ledger")
async def get_ledger(
    start: Optional[str] = Query(None, description="YYYY-MM-DD, defaults to first of the month"),
    end: Optional[str] = Query(None, description="YYYY-MM-DD, defaults to now"),
):
    try:
        start_dt, end_dt = resolve_date_range(start, end)
    except ValueError as exc:
        return JSONResponse({"error": f"Invalid date range: {exc}"}, status_code=400)

    try:
        return await fetch_ledger_report(start_dt, end_dt)
    except LedgerReportError as exc:
        logger.error("[Ledger] Ledger error: %s", exc)
        return JSONResponse({"error": str(exc)}, status_code=http_status_for(exc))
    except Exception as exc:
        logger.error("[Ledger] Unexpected ledger error: %s", exc, exc_info=True)
        return JSONResponse(
            {"error": str(exc) or "Error generating ledger report"},
            status_code=500,
        )


def register_ledger_routes(app: FastAPI) -> None:
    app.include_router(router)
