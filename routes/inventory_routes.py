"""Current FBA inventory snapshot route."""

from __future__ import annotations

import logging

from fastapi import APIRouter, FastAPI
from fastapi.responses import JSONResponse

from services.fba_inventory import fetch_inventory_snapshot
from services.report_errors import LedgerReportError, http_status_for

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/inventory")
def get_inventory():
    try:
        return fetch_inventory_snapshot()
    except LedgerReportError as exc:
        logger.error("[Inventory] Inventory error: %s", exc)
        return JSONResponse({"error": str(exc)}, status_code=http_status_for(exc))
    except Exception as exc:
        logger.error("[Inventory] Unexpected inventory error: %s", exc, exc_info=True)
        return JSONResponse(
            {"error": str(exc) or "Error fetching inventory summary"},
            status_code=500,
        )


def register_inventory_routes(app: FastAPI) -> None:
    app.include_router(router)
