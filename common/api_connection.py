"""
common/api_connection.py
------------------------
Shared client of the spreadsheet REST API.
Targets are picked by name (production / local), same as the other common
helpers pick a connection by key.

    with get_connection() as conn:
        values = conn.get_values("Sales")
"""
from concurrent.futures import ThreadPoolExecutor
from urllib.parse import quote

import requests

from .config_util import get_setting, get_int_setting

# API targets
API_CONFIGS = {
    "production": {
        "BASE_URL": "https://google-sheets-rest-api-production.up.railway.app",
    },
    "local": {
        "BASE_URL": "http://localhost:3000",
    },
}

API_PATH = "/api/v1/sheets"
DEFAULT_TIMEOUT = 10
MAX_WORKERS = 6


class SheetsApiError(Exception):
    """Transport or HTTP failure talking to the sheets API."""

    def __init__(self, message, status=None):
        super().__init__(message)
        self.message = message
        self.status = status

    def __str__(self):
        return self.message


def unwrap_payload(body):
    """{data: X} -> X, anything else as is."""
    if isinstance(body, dict) and "data" in body:
        return body["data"]
    return body


def extract_values(body) -> list:
    """Cell values out of a sheet / range response (wrapped or bare)."""
    payload = unwrap_payload(body)
    if isinstance(payload, dict):
        values = payload.get("values")
        return values if isinstance(values, list) else []
    if isinstance(payload, list):
        return payload
    return []


def _error_message(resp) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.text or f"HTTP {resp.status_code}"
    if isinstance(body, dict):
        return body.get("message") or body.get("error") or f"HTTP {resp.status_code}"
    return f"HTTP {resp.status_code}"


class SheetsConnection:
    def __init__(self, base_url: str, timeout=DEFAULT_TIMEOUT, session=None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers["Content-Type"] = "application/json"

    # --- context manager (with get_connection() as conn:) ---
    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def close(self):
        self.session.close()

    # ---------------------------------------------------
    # transport
    # ---------------------------------------------------
    def _request(self, method, path, session=None, **kwargs):
        url = self.base_url + path
        http = session or self.session
        try:
            resp = http.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            print(f"[Sheets API] {method} {path} failed: {e}")
            raise SheetsApiError(str(e)) from e

        if not resp.ok:
            msg = _error_message(resp)
            print(f"[Sheets API] {method} {path} -> {resp.status_code} {msg}")
            raise SheetsApiError(msg, resp.status_code)

        try:
            return resp.json()
        except ValueError as e:
            raise SheetsApiError(f"Invalid JSON from {path}", resp.status_code) from e

    @staticmethod
    def _sheet_path(sheet_name, range_=None):
        path = f"{API_PATH}/{quote(sheet_name, safe='')}"
        if range_:
            path += f"/range/{quote(range_, safe='!:')}"
        return path

    # ---------------------------------------------------
    # read
    # ---------------------------------------------------
    def health(self) -> dict:
        return self._request("GET", "/health")

    def metadata(self):
        return unwrap_payload(self._request("GET", f"{API_PATH}/metadata"))

    def all_sheets(self) -> dict:
        payload = unwrap_payload(self._request("GET", f"{API_PATH}/all"))
        return payload if isinstance(payload, dict) else {}

    def get_values(self, sheet_name, range_=None, session=None) -> list:
        return extract_values(self._request("GET", self._sheet_path(sheet_name, range_), session=session))

    def fetch_many(self, sheet_names) -> dict:
        """
        Fetch several sheets in parallel, one HTTP session per worker.
        Any failure fails the whole call (first error raised).

        Returns:
            dict: {sheet_name: values}
        """
        sheet_names = list(sheet_names)
        if not sheet_names:
            return {}

        def fetch_one(name):
            with requests.Session() as worker_session:
                worker_session.headers.update(self.session.headers)
                return self.get_values(name, session=worker_session)

        workers = min(MAX_WORKERS, len(sheet_names))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = {name: pool.submit(fetch_one, name) for name in sheet_names}
            return {name: future.result() for name, future in futures.items()}

    # ---------------------------------------------------
    # write
    # ---------------------------------------------------
    def append(self, sheet_name, values):
        return unwrap_payload(self._request(
            "POST", f"{self._sheet_path(sheet_name)}/append", json={"values": values}
        ))

    def update_range(self, sheet_name, range_, values):
        return unwrap_payload(self._request(
            "PUT", self._sheet_path(sheet_name, range_), json={"values": values}
        ))

    def clear(self, sheet_name, range_=None):
        params = {"range": range_} if range_ else None
        return unwrap_payload(self._request(
            "DELETE", f"{self._sheet_path(sheet_name)}/clear", params=params
        ))


def get_connection(target: str = None) -> SheetsConnection:
    """
    Open a client for the configured API.
    target: "production" / "local" (default: API_TARGET setting).
    BACKEND_URL, when set, overrides the target's base URL.
    """
    target = (target or get_setting("API_TARGET", "production")).lower().strip()
    if target not in API_CONFIGS:
        raise ValueError(f"Unknown API target: {target}")

    base_url = get_setting("BACKEND_URL") or API_CONFIGS[target]["BASE_URL"]
    timeout = get_int_setting("API_TIMEOUT", DEFAULT_TIMEOUT)
    return SheetsConnection(base_url, timeout=timeout)
