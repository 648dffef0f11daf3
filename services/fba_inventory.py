"""Current FBA inventory snapshot (what is sitting in the fulfillment centers)."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional

import config
from services.ledger_fields import first_present
from services.spapi_reports import get_spapi_client

logger = logging.getLogger(__name__)

TOTAL_KEYS = ("totalQuantityOnHand", "totalQuantity")
INBOUND_KEYS = (
    "inboundWorkingQuantity",
    "inboundShippedQuantity",
    "inboundReceivingQuantity",
)


def _quantity(value: Any) -> Any:
    return value if value not in (None, "") else 0


def normalize_inventory_summary(row: Mapping[str, Any]) -> Dict[str, Any]:
    details = row.get("inventoryDetails") or {}
    return {
        "asin": row.get("asin") or "",
        "sku": first_present(row, ("sellerSku", "sku")),
        "fnsku": row.get("fnsku") or "",
        "condition": row.get("condition") or "",
        # totalQuantity is the current FBA stock figure.
        "totalQuantity": next((row[k] for k in TOTAL_KEYS if row.get(k)), 0),
        "fulfillableQty": _quantity(details.get("fulfillableQuantity")),
        # First non-zero inbound bucket, in pipeline order.
        "inboundQty": next((details[k] for k in INBOUND_KEYS if details.get(k)), 0),
        "reservedQty": _quantity(details.get("reservedQuantity")),
        "researchingQty": _quantity(details.get("researchingQuantity")),
    }


def _extract_rows(result: Any) -> List[Mapping[str, Any]]:
    payload = result.get("payload", result) if isinstance(result, dict) else result
    if isinstance(payload, dict):
        rows = payload.get("inventorySummaries") or []
    else:
        rows = payload or []
    return [row for row in rows if isinstance(row, dict)]


def fetch_inventory_snapshot(client=None, marketplace_ids: Optional[List[str]] = None) -> Dict[str, Any]:
    client = client or get_spapi_client()
    marketplace_ids = list(marketplace_ids or config.MARKETPLACE_IDS)
    result = client.getInventorySummaries(marketplace_ids, details=True)
    rows = _extract_rows(result)
    cleaned = [normalize_inventory_summary(row) for row in rows]
    logger.info("[fba_inventory] %s inventory summaries for %s", len(cleaned), marketplace_ids[0])
    return {"count": len(cleaned), "data": cleaned}
