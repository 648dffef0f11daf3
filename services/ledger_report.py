"""
FBA inventory ledger report pipeline.

    createReport -> getReport (poll) -> getReportDocument -> download
    -> gunzip -> TSV parse -> net movement summary

Each call of fetch_ledger_report drives its own report job and owns all of
its state. The only suspension point is the poll interval, awaited with
asyncio.sleep; the blocking SP-API calls run in worker threads so other
requests keep being served while a report is generating.
"""

from __future__ import annotations

import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

import config
from services.ledger_summary import summarize_ledger_rows
from services.report_document import decode_document_text, decompress_document
from services.report_errors import (
    MalformedReportError,
    RemoteCallError,
    RemoteJobFailed,
    RemoteJobTimeout,
)
from services.report_parser import parse_delimited_records
from services.spapi_reports import get_spapi_client

logger = logging.getLogger(__name__)

STATUS_DONE = "DONE"
FAILED_STATUSES = frozenset({"CANCELLED", "FATAL"})

Sleep = Callable[[float], Awaitable[Any]]


# ---------------------------------------------------------------------------
# Request building
# ---------------------------------------------------------------------------

def _parse_dt(value: str) -> datetime:
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    dt = datetime.fromisoformat(text)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def resolve_date_range(
    start: Optional[str],
    end: Optional[str],
    now: Optional[datetime] = None,
) -> Tuple[datetime, datetime]:
    """
    Start defaults to the first of the current month, end to now (UTC).
    Accepts YYYY-MM-DD or full ISO-8601 instants; raises ValueError otherwise.
    """
    now = now or datetime.now(timezone.utc)
    start_dt = _parse_dt(start) if start else now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    end_dt = _parse_dt(end) if end else now
    if start_dt > end_dt:
        raise ValueError(f"start ({start_dt.isoformat()}) must not be after end ({end_dt.isoformat()})")
    return start_dt, end_dt


def _iso_z(dt: datetime) -> str:
    return dt.astimezone(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


def build_ledger_request(
    start: datetime,
    end: datetime,
    marketplace_ids: Optional[List[str]] = None,
) -> Dict[str, Any]:
    if start > end:
        raise ValueError("dataStartTime must not be after dataEndTime")
    return {
        "reportType": config.LEDGER_REPORT_TYPE,
        "marketplaceIds": list(marketplace_ids or config.MARKETPLACE_IDS),
        "dataStartTime": _iso_z(start),
        "dataEndTime": _iso_z(end),
    }


# ---------------------------------------------------------------------------
# State machine steps
# ---------------------------------------------------------------------------

async def submit_report(client, body: Dict[str, Any]) -> str:
    resp = await asyncio.to_thread(client.createReport, body)
    report_id = (resp or {}).get("reportId")
    if not report_id:
        raise RemoteCallError(f"createReport returned no reportId: {resp}")
    logger.info("[ledger] Report created: %s", report_id)
    return report_id


def poll_deadline_seconds(
    max_attempts: int,
    interval_seconds: float,
    timeout_seconds: Optional[float] = None,
) -> float:
    if timeout_seconds:
        return timeout_seconds
    return max_attempts * interval_seconds + config.LEDGER_POLL_DEADLINE_MARGIN_SECONDS


async def wait_for_report(
    client,
    report_id: str,
    *,
    max_attempts: int = config.LEDGER_POLL_MAX_ATTEMPTS,
    interval_seconds: float = config.LEDGER_POLL_INTERVAL_SECONDS,
    timeout_seconds: Optional[float] = config.LEDGER_POLL_TIMEOUT_SECONDS,
    sleep: Sleep = asyncio.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> Dict[str, Any]:
    """
    Poll getReport until DONE.

    Gives up with RemoteJobTimeout when either the attempt budget or the
    wall-clock timeout runs out; CANCELLED/FATAL fail immediately. The
    interval is only waited between attempts.
    """
    deadline = clock() + poll_deadline_seconds(max_attempts, interval_seconds, timeout_seconds)
    last_status: Optional[str] = None
    attempt = 0
    while True:
        attempt += 1
        details = await asyncio.to_thread(client.getReport, report_id) or {}
        last_status = details.get("processingStatus")
        logger.info("[ledger] Status attempt %s => %s", attempt, last_status)

        if last_status == STATUS_DONE:
            return details
        if last_status in FAILED_STATUSES:
            logger.error("[ledger] Report %s ended with status %s", report_id, last_status)
            raise RemoteJobFailed(report_id, last_status)
        if attempt >= max_attempts or clock() >= deadline:
            logger.error(
                "[ledger] Report %s not ready after %s attempts (status=%s)",
                report_id,
                attempt,
                last_status,
            )
            raise RemoteJobTimeout(report_id, last_status, attempt)
        await sleep(interval_seconds)


async def fetch_report_text(client, document_id: str) -> str:
    doc = await asyncio.to_thread(client.getReportDocument, document_id) or {}
    url = doc.get("url")
    if not url:
        raise RemoteCallError(f"Missing download URL for document {document_id}")

    logger.info("[ledger] Downloading report file for document %s", document_id)
    payload = await asyncio.to_thread(client.download_document, url)
    content = decompress_document(payload, doc.get("compressionAlgorithm"))
    return decode_document_text(content)


def parse_ledger_text(text: str) -> List[Dict[str, str]]:
    try:
        return parse_delimited_records(text, delimiter="\t")
    except MalformedReportError as exc:
        logger.error("[ledger] TSV parse failed, first 300 chars:\n%s", exc.preview)
        raise


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------

async def fetch_ledger_report(
    start: datetime,
    end: datetime,
    *,
    client=None,
    marketplace_ids: Optional[List[str]] = None,
    max_attempts: int = config.LEDGER_POLL_MAX_ATTEMPTS,
    interval_seconds: float = config.LEDGER_POLL_INTERVAL_SECONDS,
    timeout_seconds: Optional[float] = config.LEDGER_POLL_TIMEOUT_SECONDS,
    sleep: Sleep = asyncio.sleep,
) -> Dict[str, Any]:
    body = build_ledger_request(start, end, marketplace_ids)
    client = client or get_spapi_client()
    logger.info("[ledger] Creating ledger report: %s -> %s", body["dataStartTime"], body["dataEndTime"])

    report_id = await submit_report(client, body)
    details = await wait_for_report(
        client,
        report_id,
        max_attempts=max_attempts,
        interval_seconds=interval_seconds,
        timeout_seconds=timeout_seconds,
        sleep=sleep,
    )
    document_id = details.get("reportDocumentId")
    if not document_id:
        raise RemoteCallError(f"Report {report_id} is DONE but has no reportDocumentId")

    text = await fetch_report_text(client, document_id)
    records = parse_ledger_text(text)
    logger.info("[ledger] Rows in ledger report: %s", len(records))

    summary = summarize_ledger_rows(records)
    return {
        "reportId": report_id,
        "from": body["dataStartTime"],
        "to": body["dataEndTime"],
        "rowCount": len(records),
        "summary": summary,
        "data": records,
    }
