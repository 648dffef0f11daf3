import logging
import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env early so os.getenv picks up local dev secrets.
_DOTENV_PATHS = [Path.cwd() / ".env", Path(__file__).resolve().parent / ".env"]
for _env_path in _DOTENV_PATHS:
    if _env_path.exists():
        try:
            load_dotenv(dotenv_path=_env_path, override=False)
        except OSError as exc:  # pragma: no cover - environment bootstrap
            logging.getLogger(__name__).warning("Failed to load %s: %s", _env_path, exc)

APP_NAME = "FBA Ledger API"
APP_VERSION = "1.0.0"

# ----------------------------
# Helpers
# ----------------------------
def _req(name: str) -> str:
    v = os.getenv(name)
    if not v:
        raise RuntimeError(f"Missing required env var: {name}")
    return v

def _csv_list(name: str, default: str = "") -> list[str]:
    raw = (os.getenv(name) or default).strip()
    if not raw:
        return []
    return [x.strip() for x in raw.split(",") if x.strip()]

def _int(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logging.getLogger(__name__).warning("Ignoring non-integer %s=%r; using %s", name, raw, default)
        return default

# ----------------------------
# Credentials (env only)
# ----------------------------
# Read lazily by auth.spapi_auth so the app can boot and serve / without them.
def lwa_credentials() -> dict:
    return {
        "client_id": _req("LWA_CLIENT_ID"),
        "client_secret": _req("LWA_CLIENT_SECRET"),
        "refresh_token": _req("LWA_REFRESH_TOKEN"),
    }

LWA_TOKEN_URL = os.getenv("LWA_TOKEN_URL", "https://api.amazon.com/auth/o2/token")

# ----------------------------
# Marketplace / region
# ----------------------------
# Preferred: MARKETPLACE_IDS="A21TJRUUN4KGV" (comma-separated supported)
MARKETPLACE_IDS = _csv_list("MARKETPLACE_IDS")

# Back-compat: MARKETPLACE_ID="A21TJRUUN4KGV"
if not MARKETPLACE_IDS:
    single = (os.getenv("MARKETPLACE_ID") or "").strip()
    if single:
        MARKETPLACE_IDS = [single]

# Hard default (India)
if not MARKETPLACE_IDS:
    MARKETPLACE_IDS = ["A21TJRUUN4KGV"]

MARKETPLACE_ID = MARKETPLACE_IDS[0]

# India is served from the EU endpoint.
EU_MARKETPLACE_IDS = {
    "A21TJRUUN4KGV",  # IN
    "A2VIGQ35RCS4UG",  # AE
    "A1PA6795UKMFR9",  # DE
    "A13V1IB3VIYZZH",  # FR
    "A1RKKUPIHCS9HS",  # ES
    "A1F83G8C2ARO7P",  # UK
    "APJ6JRA9NG5V4",  # IT
}
FE_MARKETPLACE_IDS = {"A1VC38T7YXB528", "A39IBJ37TRP1C6"}  # JP, AU


def resolve_spapi_host(marketplace_id: str) -> str:
    if marketplace_id in EU_MARKETPLACE_IDS:
        return "https://sellingpartnerapi-eu.amazon.com"
    if marketplace_id in FE_MARKETPLACE_IDS:
        return "https://sellingpartnerapi-fe.amazon.com"
    return "https://sellingpartnerapi-na.amazon.com"


SPAPI_HOST = os.getenv("SPAPI_HOST") or resolve_spapi_host(MARKETPLACE_ID)

# ----------------------------
# Ledger report polling
# ----------------------------
LEDGER_REPORT_TYPE = "GET_LEDGER_DETAIL_VIEW_DATA"
LEDGER_POLL_INTERVAL_SECONDS = _int("LEDGER_POLL_INTERVAL_SECONDS", 15)
LEDGER_POLL_MAX_ATTEMPTS = _int("LEDGER_POLL_MAX_ATTEMPTS", 40)
# Wall-clock ceiling for the whole poll loop. Unset or 0 derives it from the
# attempt budget: attempts x interval + margin.
LEDGER_POLL_TIMEOUT_SECONDS = _int("LEDGER_POLL_TIMEOUT_SECONDS", 0) or None
LEDGER_POLL_DEADLINE_MARGIN_SECONDS = _int("LEDGER_POLL_DEADLINE_MARGIN_SECONDS", 300)

# ----------------------------
# Process
# ----------------------------
LOG_LEVEL = os.getenv("SPAPI_LOG_LEVEL", "INFO").upper()
PORT = _int("PORT", 3000)
