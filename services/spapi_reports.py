"""
Thin SP-API client for the Reports API (2021-06-30) and the FBA Inventory API.

Each method is a single attempt: transport failures and non-2xx responses are
surfaced as RemoteCallError (SpApiQuotaError for 429). Token refresh is
delegated to auth.spapi_auth.SpApiAuth.
"""

import logging
from typing import Any, Dict, List, Optional

import requests

import config
from auth.spapi_auth import SpApiAuth
from services.report_errors import DownloadError, RemoteCallError, SpApiQuotaError

logger = logging.getLogger("spapi_reports")
# Shared across requests so the LWA token cache outlives a single call.
auth_client = SpApiAuth()

REPORTS_API_PATH = "/reports/2021-06-30"
FBA_INVENTORY_PATH = "/fba/inventory/v1/summaries"
API_TIMEOUT_SECONDS = 30
DOWNLOAD_TIMEOUT_SECONDS = 60


def _response_payload(resp: requests.Response) -> Any:
    try:
        return resp.json()
    except ValueError:
        return resp.text


class _ReportsApiClient:
    def __init__(self, host: Optional[str] = None, auth: Optional[SpApiAuth] = None):
        self.host = (host or config.SPAPI_HOST).rstrip("/")
        self.auth = auth or auth_client

    def _headers(self) -> Dict[str, str]:
        try:
            access_token = self.auth.get_lwa_access_token()
        except (requests.RequestException, RuntimeError, KeyError, ValueError) as exc:
            logger.error("[spapi_reports] Failed to obtain LWA access token: %s", exc)
            raise RemoteCallError(f"Failed to obtain LWA access token: {exc}") from exc
        return {
            "content-type": "application/json",
            "x-amz-access-token": access_token,
            "accept": "application/json",
        }

    def _call(self, operation: str, method: str, path: str, **kwargs) -> Dict[str, Any]:
        url = f"{self.host}{path}"
        headers = self._headers()
        try:
            resp = requests.request(method, url, headers=headers, timeout=API_TIMEOUT_SECONDS, **kwargs)
        except requests.RequestException as exc:
            logger.error("[spapi_reports] %s transport error: %s", operation, exc)
            raise RemoteCallError(f"{operation} failed: {exc}") from exc

        if resp.status_code == 429:
            payload = _response_payload(resp)
            logger.error(
                "[spapi_reports] %s failed 429 QuotaExceeded resp=%s",
                operation,
                payload,
            )
            raise SpApiQuotaError(f"QuotaExceeded in {operation}: {payload}")
        if resp.status_code >= 300:
            logger.error(
                "[spapi_reports] %s failed %s: %s",
                operation,
                resp.status_code,
                resp.text,
            )
            raise RemoteCallError(
                f"{operation} failed with HTTP {resp.status_code}: {resp.text}",
                status_code=resp.status_code,
            )
        try:
            return resp.json()
        except ValueError as exc:
            raise RemoteCallError(f"{operation} returned a non-JSON body") from exc

    def createReport(self, body: Dict[str, Any]) -> Dict[str, Any]:
        return self._call("createReport", "POST", f"{REPORTS_API_PATH}/reports", json=body)

    def getReport(self, report_id: str) -> Dict[str, Any]:
        return self._call("getReport", "GET", f"{REPORTS_API_PATH}/reports/{report_id}")

    def getReportDocument(self, document_id: str) -> Dict[str, Any]:
        return self._call("getReportDocument", "GET", f"{REPORTS_API_PATH}/documents/{document_id}")

    def getInventorySummaries(self, marketplace_ids: List[str], details: bool = True) -> Dict[str, Any]:
        params = {
            "granularityType": "Marketplace",
            "granularityId": marketplace_ids[0],
            "marketplaceIds": ",".join(marketplace_ids),
            "details": "true" if details else "false",
        }
        return self._call("getInventorySummaries", "GET", FBA_INVENTORY_PATH, params=params)

    def download_document(self, url: str) -> bytes:
        """
        Fetch a pre-signed report document URL (no SP-API auth headers).

        NOTE: Report document URLs expire shortly after getReportDocument
        returns them, so this is called immediately and never cached.
        """
        try:
            resp = requests.get(url, timeout=DOWNLOAD_TIMEOUT_SECONDS)
        except requests.RequestException as exc:
            logger.error("[spapi_reports] Document download transport error: %s", exc)
            raise DownloadError(f"Document download failed: {exc}") from exc
        if resp.status_code >= 300:
            logger.error("[spapi_reports] Document download failed %s", resp.status_code)
            raise DownloadError(
                f"Document download failed with HTTP {resp.status_code}",
                status_code=resp.status_code,
            )
        return resp.content


def get_spapi_client() -> _ReportsApiClient:
    return _ReportsApiClient()
