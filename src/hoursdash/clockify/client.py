from __future__ import annotations
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
import logging
import requests
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential
from hoursdash.config import ClockifySettings
from hoursdash.clockify.models import ClockifyClientRecord, Project, TimeEntry
from hoursdash.errors import ClockifyApiError

log = logging.getLogger("clockify")

def format_utc_z(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")

def normalize_items_response(payload: Any) -> List[dict]:
    if isinstance(payload, list):
        return [x for x in payload if isinstance(x, dict)]
    if isinstance(payload, dict):
        for key in ("items", "data", "results", "timeentries", "entities"):
            val = payload.get(key)
            if isinstance(val, list):
                return [x for x in val if isinstance(x, dict)]
        if payload.get("id"):
            return [payload]
    return []

class ClockifyClient:
    """Read-only Clockify REST client.

    Constructed explicitly with its settings; the HTTP session can be swapped
    for a test double.
    """

    def __init__(self, settings: ClockifySettings, session: requests.Session | None = None) -> None:
        self.settings = settings
        self.base_url = settings.base_url.rstrip("/")
        self.session = session if session is not None else requests.Session()
        self.session.headers.update({
            "X-Api-Key": settings.api_key or "",
            "Content-Type": "application/json",
        })

    def is_configured(self) -> bool:
        return self.settings.is_configured()

    def _retrying(self) -> Retrying:
        # only transport failures are retried, and only when max_attempts > 1
        return Retrying(
            stop=stop_after_attempt(self.settings.max_attempts),
            wait=wait_exponential(min=1, max=30),
            retry=retry_if_exception_type((requests.exceptions.ConnectionError, requests.exceptions.Timeout)),
            reraise=True,
        )

    def _get(self, path: str, params: Optional[Dict[str, str]] = None) -> Any:
        url = f"{self.base_url}{path}"
        try:
            resp = self._retrying()(
                self.session.get, url, params=params, timeout=self.settings.timeout_seconds
            )
        except requests.exceptions.Timeout as err:
            raise ClockifyApiError(f"Timed out after {self.settings.timeout_seconds}s contacting Clockify: {path}") from err
        except requests.exceptions.RequestException as err:
            raise ClockifyApiError(f"Network error while contacting Clockify: {err}") from err

        if not resp.ok:
            raise ClockifyApiError(
                f"Clockify API error {resp.status_code} for {path}: {resp.text}",
                status_code=resp.status_code,
            )
        try:
            return resp.json()
        except ValueError as err:
            raise ClockifyApiError(f"Invalid JSON from Clockify for {path}") from err

    def _paginated_get(self, path: str, query: Optional[Dict[str, str]] = None) -> List[dict]:
        items: List[dict] = []
        page = 1
        page_size = self.settings.page_size
        while True:
            params = dict(query or {})
            params["page"] = str(page)
            params["page-size"] = str(page_size)
            data = normalize_items_response(self._get(path, params))
            log.debug("Fetched %s page=%s items=%s", path, page, len(data))
            if not data:
                break
            items.extend(data)
            # no "has more" flag: a short page is the end. A full last page
            # costs one extra empty request.
            if len(data) < page_size:
                break
            page += 1
        return items

    def get_current_user(self) -> dict:
        payload = self._get("/user")
        if not isinstance(payload, dict) or not payload.get("id"):
            raise ClockifyApiError("Clockify /user response has no user id")
        return payload

    def list_workspaces(self) -> List[dict]:
        return normalize_items_response(self._get("/workspaces"))

    def list_projects(self, workspace_id: str) -> List[Project]:
        raw = self._paginated_get(f"/workspaces/{workspace_id}/projects")
        return [Project.from_payload(p) for p in raw if p.get("id")]

    def list_clients(self, workspace_id: str) -> List[ClockifyClientRecord]:
        raw = self._paginated_get(f"/workspaces/{workspace_id}/clients")
        return [ClockifyClientRecord.from_payload(c) for c in raw if c.get("id")]

    def fetch_all_entries(
        self,
        workspace_id: str,
        user_id: str,
        start: datetime,
        end: datetime,
    ) -> List[TimeEntry]:
        query = {"start": format_utc_z(start), "end": format_utc_z(end)}
        raw = self._paginated_get(f"/workspaces/{workspace_id}/user/{user_id}/time-entries", query)
        log.info("Fetched %s time entries for user=%s workspace=%s", len(raw), user_id, workspace_id)
        entries: List[TimeEntry] = []
        for e in raw:
            try:
                entries.append(TimeEntry.from_payload(e))
            except (TypeError, ValueError) as err:
                raise ClockifyApiError(f"Malformed Clockify time entry {e.get('id')}: {err}") from err
        return entries
