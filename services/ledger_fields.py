"""
Column-name fallbacks for ledger report rows.

Ledger report headers are not stable across report runs (``FNSKU`` vs
``fnsku`` vs ``FNSKU Code`` ...). Each semantic field has an ordered list of
accepted header spellings; the first one present with a non-empty value wins.
Lookups are exact (case sensitive) against the header text.
"""

from __future__ import annotations

import math
import re
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

FIELD_VARIANTS: Dict[str, Tuple[str, ...]] = {
    "fnsku": ("FNSKU", "fnsku", "fnskuCode", "FnSku", "FNSKU Code"),
    "asin": ("ASIN", "asin", "Asin"),
    "sku": ("SKU", "sku", "SellerSKU", "sellerSku", "MSKU", "msku"),
    "fulfillmentCenterId": (
        "fulfillmentCenterId",
        "FulfillmentCenterId",
        "Fulfillment Center",
        "fulfillment_center_id",
        "facility_id",
        "Facility",
    ),
    "quantity": (
        "Quantity",
        "quantity",
        "Qty",
        "Quantity Amount",
        "quantityAmount",
        "PostedQuantity",
        "postedQuantity",
    ),
}

IDENTITY_FIELDS: Tuple[str, ...] = ("fnsku", "asin", "sku", "fulfillmentCenterId")

SIGNED_DECIMAL_RE = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$", re.ASCII)


def first_present(row: Mapping[str, Any], candidates: Iterable[str], default: Any = "") -> Any:
    for key in candidates:
        value = row.get(key)
        if value is not None and value != "":
            return value
    return default


def resolve_identity(row: Mapping[str, Any]) -> Dict[str, str]:
    # Absent columns and blank cells both resolve to "".
    return {field: str(first_present(row, FIELD_VARIANTS[field])) for field in IDENTITY_FIELDS}


def resolve_quantity(row: Mapping[str, Any]) -> Optional[Any]:
    return first_present(row, FIELD_VARIANTS["quantity"], default=None)


def parse_quantity(raw: Any) -> Optional[float]:
    """
    "1,234" -> 1234.0, " -56 " -> -56.0; None for anything that is not a
    finite signed decimal (including missing and blank values).
    """
    if raw is None:
        return None
    if isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        value = float(raw)
    else:
        text = str(raw).replace(",", "").strip()
        if not SIGNED_DECIMAL_RE.match(text):
            return None
        value = float(text)
    if not math.isfinite(value):
        return None
    return value
