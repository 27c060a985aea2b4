"""
api.py
HTTP client for the membership backend (JSON REST, unauthenticated).

Every endpoint answers with an envelope {"success": bool, "message"?, ...}.
A false `success` raises ApiError; transport problems surface as
requests.exceptions.RequestException (timeouts and bad JSON included).
"""

from __future__ import annotations

from urllib.parse import urlencode

import requests

from config import host_root, settings
from logging_config import get_logger

logger = get_logger("api")


class ApiError(Exception):
    """The backend answered but reported `success: false`."""

    def __init__(self, message: str | None = None):
        super().__init__(message or "La operación no se pudo completar")
        self.message = message


class ApiClient:
    def __init__(
        self,
        base_url: str = settings.API_URL,
        health_url: str | None = None,
        timeout: float = settings.REQUEST_TIMEOUT,
        session: requests.Session | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.health_url = health_url or settings.HEALTH_URL or host_root(self.base_url)
        self.timeout = timeout
        self.session = session or requests.Session()

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def _request(self, method: str, path: str, **kwargs) -> dict:
        url = self._url(path)
        logger.debug("%s %s", method, url)
        response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        body = response.json()
        if not isinstance(body, dict) or not body.get("success"):
            message = body.get("message") if isinstance(body, dict) else None
            logger.warning("%s %s -> HTTP %s, success=false (%s)", method, url, response.status_code, message)
            raise ApiError(message)
        return body

    # ---------- Health ----------

    def health_check(self, timeout: float = settings.HEALTH_TIMEOUT) -> None:
        """GET on the host root; raises on timeout, connection error or non-2xx."""
        response = self.session.get(self.health_url, timeout=timeout)
        response.raise_for_status()

    # ---------- Memberships ----------

    def list_memberships(self) -> list[dict]:
        return self._request("GET", "/memberships")["data"]

    def search_memberships(self, status: str | None = None, search: str | None = None) -> list[dict]:
        params = {}
        if status:
            params["status"] = status
        if search:
            params["search"] = search
        return self._request("GET", "/memberships/search/filter", params=params)["data"]

    def get_membership(self, membership_id: int) -> dict:
        return self._request("GET", f"/memberships/{membership_id}")["data"]

    def create_membership(self, payload: dict) -> dict:
        return self._request("POST", "/memberships", json=payload)

    def update_membership(self, membership_id: int, payload: dict) -> dict:
        return self._request("PUT", f"/memberships/{membership_id}", json=payload)

    def delete_membership(self, membership_id: int) -> dict:
        return self._request("DELETE", f"/memberships/{membership_id}")

    def membership_stats(self) -> dict:
        return self._request("GET", "/memberships/stats/summary")["data"]

    # ---------- Recharges ----------

    def list_recharges(self) -> list[dict]:
        return self._request("GET", "/recharges")["data"]

    def create_recharge(self, payload: dict) -> dict:
        return self._request("POST", "/recharges", json=payload)

    def delete_recharge(self, recharge_id: int) -> dict:
        return self._request("DELETE", f"/recharges/{recharge_id}")

    # ---------- Reports ----------

    def report_summary(self) -> dict:
        return self._request("GET", "/reports/summary")["data"]["overall"]

    def detailed_report(self, start_date: str, end_date: str) -> tuple[list[dict], dict]:
        body = self._request(
            "GET",
            "/reports/detailed",
            params={"startDate": start_date, "endDate": end_date},
        )
        return body.get("details") or [], body.get("summary") or {}

    def export_url(self, start_date: str, end_date: str) -> str:
        """The server streams the file; the client only opens this URL."""
        query = urlencode({"startDate": start_date, "endDate": end_date})
        return f"{self._url('/reports/export')}?{query}"

    # ---------- Notifications ----------

    def pending_notifications(self) -> list[dict]:
        return self._request("GET", "/notifications/pending")["data"]

    def send_notification(self, membership_id: int) -> str:
        """Returns the WhatsApp deep link prepared by the server."""
        body = self._request("POST", "/notifications/send", json={"membershipId": membership_id})
        return body["data"]["whatsappUrl"]
