"""
Error taxonomy for the ledger report pipeline.

Every error here is terminal for the pipeline run that raised it. Routes map
them to HTTP responses through HTTP_STATUS_BY_ERROR.
"""

from __future__ import annotations

from typing import Optional

PREVIEW_CHARS = 300


class LedgerReportError(RuntimeError):
    """Base class for ledger pipeline failures."""


class RemoteCallError(LedgerReportError):
    """Raised when an SP-API call fails at the transport or API level."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class SpApiQuotaError(RemoteCallError):
    """Raised when SP-API returns a QuotaExceeded / 429."""

    def __init__(self, message: str):
        super().__init__(message, status_code=429)


class RemoteJobTimeout(LedgerReportError):
    def __init__(self, report_id: str, last_status: Optional[str], attempts: int):
        super().__init__(
            f"Report not ready, try again. Status: {last_status} "
            f"(report {report_id}, {attempts} attempts)"
        )
        self.report_id = report_id
        self.last_status = last_status
        self.attempts = attempts


class RemoteJobFailed(LedgerReportError):
    def __init__(self, report_id: str, status: str):
        super().__init__(f"Report failed with status {status}")
        self.report_id = report_id
        self.status = status


class DownloadError(LedgerReportError):
    """Raised when the pre-signed document URL cannot be fetched."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class DecompressionError(LedgerReportError):
    """Raised when a payload declared as compressed cannot be inflated."""


class MalformedReportError(LedgerReportError):
    """Raised when the document text cannot be read as delimited data."""

    def __init__(self, message: str, text: str = ""):
        self.preview = (text or "")[:PREVIEW_CHARS]
        super().__init__(message)


HTTP_STATUS_BY_ERROR = (
    (SpApiQuotaError, 503),
    (RemoteJobTimeout, 504),
    (LedgerReportError, 500),
)


def http_status_for(exc: BaseException) -> int:
    for error_cls, status in HTTP_STATUS_BY_ERROR:
        if isinstance(exc, error_cls):
            return status
    return 500
