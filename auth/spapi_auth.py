# ================================================================
#  SP-API AUTH MODULE (NO AWS REQUIRED)
#  ---------------------------------------------------------------
#  - Get LWA Access Token from the refresh token
#  - Cache it until shortly before expiry
# ================================================================

import datetime
import logging
import threading
import time

import requests

import config

logger = logging.getLogger("spapi_auth")


class SpApiAuth:
    def __init__(self, token_url: str = config.LWA_TOKEN_URL):
        self.token_url = token_url
        self._lwa_token = None
        self._lwa_expiry = None
        # Concurrent ledger runs call this from worker threads.
        self._lock = threading.Lock()

    def _token_is_fresh(self) -> bool:
        return bool(
            self._lwa_token
            and self._lwa_expiry
            and self._lwa_expiry > datetime.datetime.now(datetime.timezone.utc)
        )

    # ====================================================================
    # AUTH TOKEN RETRY + TIMEOUT
    # - Retries 3 times with exponential backoff (1s, 2s) on transient errors
    # - Timeout of 15s prevents infinite hang on network failure
    # ====================================================================
    def get_lwa_access_token(self):
        with self._lock:
            if self._token_is_fresh():
                return self._lwa_token
            return self._request_token()

    def _request_token(self):
        creds = config.lwa_credentials()
        data = {
            "grant_type": "refresh_token",
            "refresh_token": creds["refresh_token"],
            "client_id": creds["client_id"],
            "client_secret": creds["client_secret"],
        }

        max_attempts = 3
        for attempt in range(1, max_attempts + 1):
            try:
                resp = requests.post(self.token_url, data=data, timeout=15)

                if resp.status_code == 200:
                    payload = resp.json()
                    self._lwa_token = payload["access_token"]
                    self._lwa_expiry = datetime.datetime.now(datetime.timezone.utc) + datetime.timedelta(
                        seconds=payload.get("expires_in", 3600) - 60
                    )
                    logger.info("[Auth] Successfully obtained LWA token")
                    return self._lwa_token
                elif resp.status_code == 429 and attempt < max_attempts:
                    wait_time = 2 ** (attempt - 1)
                    logger.warning(f"[Auth] Token request rate limited (429), waiting {wait_time}s before retry {attempt}/{max_attempts}")
                    time.sleep(wait_time)
                    continue
                else:
                    logger.error(f"[Auth] Token request failed {resp.status_code}: {resp.text}")
                    resp.raise_for_status()

            except (requests.exceptions.Timeout, requests.exceptions.ConnectionError) as e:
                logger.warning(f"[Auth] Token request transport error, attempt {attempt}/{max_attempts}: {e}")
                if attempt < max_attempts:
                    time.sleep(2 ** (attempt - 1))
                    continue
                logger.error(f"[Auth] Token request failed after {max_attempts} attempts")
                raise

        raise RuntimeError(f"[Auth] Failed to obtain LWA token after {max_attempts} attempts")
