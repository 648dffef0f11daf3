import logging
from typing import Any, Dict, Iterable, List, Mapping

from services.ledger_fields import (
    IDENTITY_FIELDS,
    parse_quantity,
    resolve_identity,
    resolve_quantity,
)

logger = logging.getLogger(__name__)

# "|" never appears in FNSKU/ASIN/SKU/FC codes.
KEY_SEPARATOR = "|"


def summary_key(identity: Mapping[str, str]) -> str:
    return KEY_SEPARATOR.join(identity[field] for field in IDENTITY_FIELDS)


def summarize_ledger_rows(rows: Iterable[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    """
    FNSKU + ASIN + SKU + FC wise net movement for one ledger report.

    Ledger quantities are already signed, so the net movement is a plain sum.
    Rows whose quantity does not parse are left out of the summary (they are
    still part of the raw data returned to the caller).
    """
    summary_map: Dict[str, Dict[str, Any]] = {}
    skipped = 0
    for row in rows:
        qty = parse_quantity(resolve_quantity(row))
        if qty is None:
            skipped += 1
            continue

        identity = resolve_identity(row)
        key = summary_key(identity)
        entry = summary_map.get(key)
        if entry is None:
            entry = {**identity, "netMovement": 0.0}
            summary_map[key] = entry
        entry["netMovement"] += qty

    if skipped:
        logger.debug("[ledger_summary] Skipped %s rows without a numeric quantity", skipped)
    return list(summary_map.values())
