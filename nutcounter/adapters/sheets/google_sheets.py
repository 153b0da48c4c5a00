"""
Google Sheets writer (Sheets API v4, values:append).

Auth: service-account JSON blob from GOOGLE_CREDENTIALS_JSON, exchanged for an
access token with google-auth. The append itself is a plain httpx POST, same
as the other outbound calls in this service.

Every failure surfaces as SheetWriteError; status_code carries the HTTP code
when the API answered (400/403 mean bad range or no Editor access).
"""
import functools
import json
import threading
from urllib.parse import quote
import httpx
from google.auth.exceptions import GoogleAuthError, TransportError
from google.auth.transport.requests import Request
from google.oauth2 import service_account
from nutcounter.adapters.sheets.base import SheetWriter
from nutcounter.orchestrator.errors import MissingSheetCredentialError, SheetWriteError

SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]
APPEND_URL = "https://sheets.googleapis.com/v4/spreadsheets/{sheet_id}/values/{range}:append"


def column_letter(n: int) -> str:
    """1 -> A, 26 -> Z, 27 -> AA."""
    letters = ""
    while n > 0:
        n, rem = divmod(n - 1, 26)
        letters = chr(ord("A") + rem) + letters
    return letters


def row_range(sheet_name: str, width: int) -> str:
    """A1 range with the tab name quoted: 'Tally #2'!A:E."""
    quoted = sheet_name.replace("'", "''")
    return f"'{quoted}'!A:{column_letter(width)}"


def append_url(sheet_id: str, a1_range: str) -> str:
    # Range goes in the URL path; "#", "?" and spaces must not reach it raw
    return APPEND_URL.format(sheet_id=quote(sheet_id, safe=""), range=quote(a1_range, safe=""))


def parse_credentials(blob: str) -> dict:
    try:
        info = json.loads(blob)
    except ValueError as e:
        raise SheetWriteError(f"GOOGLE_CREDENTIALS_JSON is not valid JSON: {e}") from e
    if not isinstance(info, dict) or not info.get("client_email") or not info.get("private_key"):
        raise SheetWriteError("GOOGLE_CREDENTIALS_JSON lacks client_email/private_key")
    # Keys pasted into env vars usually carry literal "\n"
    info["private_key"] = info["private_key"].replace("\\n", "\n")
    return info


class GoogleSheetsWriter(SheetWriter):
    def __init__(self, status_store, settings):
        self.status = status_store
        self._sheet_id = settings.google_sheet_id
        self._credentials_json = settings.google_credentials_json
        self._sheet_name = settings.sheet_name
        self._timeout = settings.sheets_timeout_s
        self._credentials = None
        # Cached token is shared by request threads; one refresh at a time, one HTTP session
        self._token_lock = threading.Lock()
        self._auth_request = Request()
        if self.configured:
            self.status.log(f"google_sheets: ready (sheet={self._sheet_id}, tab={self._sheet_name})")
        else:
            self.status.log("google_sheets: GOOGLE_CREDENTIALS_JSON or GOOGLE_SHEET_ID not set", level="error")

    @property
    def configured(self) -> bool:
        return bool(self._credentials_json) and bool(self._sheet_id)

    def _access_token(self) -> str:
        if not self._credentials_json:
            raise MissingSheetCredentialError()
        with self._token_lock:
            if self._credentials is None:
                info = parse_credentials(self._credentials_json)
                try:
                    self._credentials = service_account.Credentials.from_service_account_info(info, scopes=SCOPES)
                except (ValueError, GoogleAuthError) as e:
                    raise SheetWriteError(f"invalid service account: {e}") from e
            if not self._credentials.valid:
                request = functools.partial(self._auth_request, timeout=self._timeout)
                try:
                    self._credentials.refresh(request)
                except TransportError as e:
                    raise SheetWriteError(f"token exchange unreachable: {e}") from e
                except GoogleAuthError as e:
                    raise SheetWriteError(f"token exchange failed: {e}", status_code=403) from e
            return self._credentials.token

    def append_row(self, values: list):
        if not self._sheet_id:
            raise MissingSheetCredentialError("GOOGLE_SHEET_ID is not set")
        token = self._access_token()
        url = append_url(self._sheet_id, row_range(self._sheet_name, len(values)))
        self.status.log(f"google_sheets: POST append {len(values)} cols")
        try:
            resp = httpx.post(
                url,
                params={"valueInputOption": "USER_ENTERED"},
                json={"values": [values]},
                headers={"Authorization": f"Bearer {token}"},
                timeout=self._timeout,
            )
        except httpx.HTTPError as e:
            raise SheetWriteError(f"{type(e).__name__}: {e}") from e
        if not resp.is_success:
            raise SheetWriteError(self._error_message(resp), status_code=resp.status_code)
        self.status.log("google_sheets: append ok")

    @staticmethod
    def _error_message(resp: httpx.Response) -> str:
        try:
            body = resp.json()
            return body["error"]["message"]
        except (ValueError, KeyError, TypeError):
            return f"HTTP {resp.status_code}: {resp.text[:200]}"
