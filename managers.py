"""
managers.py
Controllers behind each tab. They talk to the API through the AppContext,
keep the last good rows on the context and queue user-facing alerts.
No manager raises: every failure ends up as an alert (and a log line).
"""

from __future__ import annotations

import time
from collections.abc import MutableMapping
from datetime import date

import requests

from api import ApiError
from config import settings
from context import AppContext, Tab
from logging_config import get_logger
from models import (
    ConnectionState,
    FinancialStats,
    Membership,
    NotificationCandidate,
    Recharge,
    ReportRow,
    ReportSummary,
)
import utils

logger = get_logger("managers")

CONNECTION_ERROR = "Error de conexión con el servidor"
MISSING_DATES = "Por favor seleccione ambas fechas"

MEMBERSHIP_FIELDS = (
    "client_id",
    "client_name",
    "service_name",
    "provider",
    "duration",
    "purchase_date",
    "expiration_date",
    "purchase_price",
    "sale_price",
    "access_email",
    "access_password",
    "security_pin",
    "profile_name",
    "whatsapp_number",
)
MEMBERSHIP_KEYS = {name: f"membership_{name}" for name in MEMBERSHIP_FIELDS}
SUBMIT_LABEL_KEY = "membership_submit_label"
CREATE_LABEL = "✅ Guardar Membresía"
UPDATE_LABEL = "🔄 Actualizar Membresía"

RECHARGE_KEYS = {
    "client_id": "recharge_client_id",
    "amount": "recharge_amount",
    "recharge_date": "recharge_date",
    "note": "recharge_note",
}

REPORT_START_KEY = "report_start"
REPORT_END_KEY = "report_end"


# ---------- Connectivity ----------

class ConnectivityMonitor:
    def __init__(self, ctx: AppContext, timeout: float = settings.HEALTH_TIMEOUT,
                 interval: float = settings.HEALTH_POLL_SECONDS):
        self.ctx = ctx
        self.timeout = timeout
        self.interval = interval

    def check(self) -> ConnectionState:
        self.ctx.connection = ConnectionState.CONNECTING
        self.ctx.last_health_check = time.monotonic()
        try:
            self.ctx.api.health_check(timeout=self.timeout)
            state = ConnectionState.CONNECTED
        except requests.exceptions.Timeout:
            logger.warning("Health check timed out after %ss", self.timeout)
            state = ConnectionState.DISCONNECTED_TIMEOUT
        except requests.exceptions.RequestException as e:
            logger.warning("Health check failed: %s", e)
            state = ConnectionState.DISCONNECTED_ERROR

        self.ctx.connection = state
        if state is not ConnectionState.CONNECTED:
            self.ctx.alert("El backend puede estar dormido. Espera 30 segundos y recarga la página.", "warning")
        return state

    def poll(self, now: float | None = None) -> ConnectionState:
        """Check only when the polling interval has elapsed since the last check."""
        now = time.monotonic() if now is None else now
        last = self.ctx.last_health_check
        if last is None or now - last >= self.interval:
            return self.check()
        return self.ctx.connection


# ---------- Memberships ----------

class MembershipManager:
    def __init__(self, ctx: AppContext, form: MutableMapping):
        self.ctx = ctx
        self.form = form

    def list(self, status: str | None = None, search: str | None = None) -> list[Membership]:
        search = (search or "").strip()
        try:
            if status or search:
                rows = self.ctx.api.search_memberships(status=status or None, search=search or None)
            else:
                rows = self.ctx.api.list_memberships()
        except ApiError:
            self.ctx.alert("Error al cargar membresías", "danger")
            return self.ctx.memberships
        except requests.exceptions.RequestException:
            logger.exception("Could not load memberships")
            self.ctx.alert(CONNECTION_ERROR, "danger")
            return self.ctx.memberships

        self.ctx.memberships = [Membership.from_api(r) for r in rows]
        return self.ctx.memberships

    def apply_filter(self, status: str = "", search: str = "") -> list[Membership]:
        self.ctx.membership_filter.status = status or ""
        self.ctx.membership_filter.search = search or ""
        return self.reload()

    def reload(self) -> list[Membership]:
        f = self.ctx.membership_filter
        return self.list(status=f.status, search=f.search)

    # ----- form -----

    def form_defaults(self) -> dict:
        seeded = utils.default_dates(report_days=settings.REPORT_DEFAULT_DAYS)
        values = {key: "" for key in MEMBERSHIP_KEYS.values()}
        values.update({
            MEMBERSHIP_KEYS["duration"]: None,
            MEMBERSHIP_KEYS["purchase_price"]: None,
            MEMBERSHIP_KEYS["sale_price"]: None,
            MEMBERSHIP_KEYS["purchase_date"]: seeded["purchase_date"],
            MEMBERSHIP_KEYS["expiration_date"]: None,
            SUBMIT_LABEL_KEY: CREATE_LABEL,
        })
        return values

    def ensure_defaults(self) -> None:
        for key, value in self.form_defaults().items():
            self.form.setdefault(key, value)

    def reset_form(self) -> None:
        self.form.update(self.form_defaults())
        self.ctx.edit_id = None

    def cancel_edit(self) -> None:
        self.reset_form()

    def form_values(self) -> dict:
        return {name: self.form.get(key) for name, key in MEMBERSHIP_KEYS.items()}

    def autofill_expiration(self) -> None:
        expiration = utils.calc_expiration(
            self.form.get(MEMBERSHIP_KEYS["purchase_date"]),
            self.form.get(MEMBERSHIP_KEYS["duration"]),
        )
        if expiration is not None:
            self.form[MEMBERSHIP_KEYS["expiration_date"]] = expiration

    def submit(self) -> bool:
        edit_id = self.ctx.edit_id
        try:
            payload = utils.membership_payload(self.form_values())
            if edit_id:
                self.ctx.api.update_membership(edit_id, payload)
            else:
                self.ctx.api.create_membership(payload)
        except ApiError as e:
            self.ctx.alert(e.message or "Error al guardar membresía", "danger")
            return False
        except requests.exceptions.RequestException:
            logger.exception("Could not save membership")
            self.ctx.alert(CONNECTION_ERROR, "danger")
            return False

        self.ctx.alert(
            "Membresía actualizada exitosamente" if edit_id else "Membresía creada exitosamente",
            "success",
        )
        self.reset_form()
        self.reload()
        return True

    def load_for_edit(self, membership_id: int) -> bool:
        try:
            m = Membership.from_api(self.ctx.api.get_membership(membership_id))
        except (ApiError, requests.exceptions.RequestException):
            logger.exception("Could not load membership %s", membership_id)
            self.ctx.alert("Error al cargar membresía", "danger")
            return False

        values = {
            "client_id": m.client_id,
            "client_name": m.client_name,
            "service_name": m.service_name,
            "provider": m.provider,
            "duration": m.duration,
            "purchase_date": utils.parse_iso(m.purchase_date) if m.purchase_date else None,
            "expiration_date": utils.parse_iso(m.expiration_date) if m.expiration_date else None,
            "purchase_price": m.purchase_price,
            "sale_price": m.sale_price,
            "access_email": m.access_email,
            "access_password": m.access_password,
            "security_pin": m.security_pin or "",
            "profile_name": m.profile_name or "",
            "whatsapp_number": m.whatsapp_number,
        }
        for name, value in values.items():
            self.form[MEMBERSHIP_KEYS[name]] = value
        self.form[SUBMIT_LABEL_KEY] = UPDATE_LABEL
        self.ctx.edit_id = membership_id
        return True

    def remove(self, membership_id: int, confirmed: bool) -> bool:
        if not confirmed:
            return False
        try:
            self.ctx.api.delete_membership(membership_id)
        except ApiError:
            self.ctx.alert("Error al eliminar membresía", "danger")
            return False
        except requests.exceptions.RequestException:
            logger.exception("Could not delete membership %s", membership_id)
            self.ctx.alert(CONNECTION_ERROR, "danger")
            return False

        if self.ctx.edit_id == membership_id:
            self.reset_form()
        self.ctx.alert("Membresía eliminada exitosamente", "success")
        self.reload()
        return True

    def view_details(self, membership_id: int) -> Membership | None:
        try:
            self.ctx.detail = Membership.from_api(self.ctx.api.get_membership(membership_id))
        except (ApiError, requests.exceptions.RequestException):
            logger.exception("Could not load details for membership %s", membership_id)
            self.ctx.alert("Error al cargar detalles", "danger")
            return None
        return self.ctx.detail


# ---------- Recharges ----------

class RechargeManager:
    def __init__(self, ctx: AppContext, form: MutableMapping):
        self.ctx = ctx
        self.form = form

    def list(self) -> list[Recharge]:
        try:
            rows = self.ctx.api.list_recharges()
        except (ApiError, requests.exceptions.RequestException):
            logger.exception("Could not load recharges")
            self.ctx.alert("Error al cargar recargas", "danger")
            return self.ctx.recharges

        self.ctx.recharges = [Recharge.from_api(r) for r in rows]
        return self.ctx.recharges

    def form_defaults(self) -> dict:
        return {
            RECHARGE_KEYS["client_id"]: "",
            RECHARGE_KEYS["amount"]: None,
            RECHARGE_KEYS["recharge_date"]: utils.default_dates()["recharge_date"],
            RECHARGE_KEYS["note"]: "",
        }

    def ensure_defaults(self) -> None:
        for key, value in self.form_defaults().items():
            self.form.setdefault(key, value)

    def reset_form(self) -> None:
        self.form.update(self.form_defaults())

    def create(self) -> bool:
        values = {name: self.form.get(key) for name, key in RECHARGE_KEYS.items()}
        try:
            self.ctx.api.create_recharge(utils.recharge_payload(values))
        except ApiError:
            self.ctx.alert("Error al registrar recarga", "danger")
            return False
        except requests.exceptions.RequestException:
            logger.exception("Could not create recharge")
            self.ctx.alert("Error de conexión", "danger")
            return False

        self.ctx.alert("Recarga registrada exitosamente", "success")
        self.reset_form()
        self.list()
        return True

    def remove(self, recharge_id: int, confirmed: bool) -> bool:
        if not confirmed:
            return False
        try:
            self.ctx.api.delete_recharge(recharge_id)
        except (ApiError, requests.exceptions.RequestException):
            logger.exception("Could not delete recharge %s", recharge_id)
            self.ctx.alert("Error al eliminar", "danger")
            return False

        self.ctx.alert("Recarga eliminada", "success")
        self.list()
        return True


# ---------- Reports ----------

class ReportGenerator:
    def __init__(self, ctx: AppContext):
        self.ctx = ctx

    def load_summary(self) -> FinancialStats:
        # Headline figures are best effort: failures are only logged
        try:
            overall = self.ctx.api.report_summary()
        except (ApiError, requests.exceptions.RequestException):
            logger.exception("Could not load report summary")
            return self.ctx.stats

        active = self.ctx.stats.active
        try:
            active = int(self.ctx.api.membership_stats().get("active") or 0)
        except (ApiError, requests.exceptions.RequestException):
            logger.exception("Could not load membership stats")

        self.ctx.stats = FinancialStats(
            totalRevenue=float(overall.get("totalRevenue") or 0),
            totalCosts=float(overall.get("totalCosts") or 0),
            netProfit=float(overall.get("netProfit") or 0),
            active=active,
        )
        return self.ctx.stats

    def _range(self, start_date, end_date) -> tuple[str, str] | None:
        if not start_date or not end_date:
            self.ctx.alert(MISSING_DATES, "warning")
            return None
        return utils.to_iso(start_date), utils.to_iso(end_date)

    def generate(self, start_date: date | str | None, end_date: date | str | None) -> bool:
        bounds = self._range(start_date, end_date)
        if bounds is None:
            return False

        try:
            details, summary = self.ctx.api.detailed_report(*bounds)
        except (ApiError, requests.exceptions.RequestException):
            logger.exception("Could not generate report %s..%s", *bounds)
            self.ctx.alert("Error al generar reporte", "danger")
            return False

        self.ctx.report_rows = [ReportRow.from_api(d) for d in details]
        self.ctx.report_summary = ReportSummary.from_api(summary)
        return True

    def clear_export(self) -> None:
        # A staged link is only valid for the range it was built from
        self.ctx.export_link = None

    def export(self, start_date: date | str | None, end_date: date | str | None) -> str | None:
        self.clear_export()
        bounds = self._range(start_date, end_date)
        if bounds is None:
            return None
        self.ctx.export_link = self.ctx.api.export_url(*bounds)
        return self.ctx.export_link


# ---------- Notifications ----------

class NotificationDispatcher:
    def __init__(self, ctx: AppContext):
        self.ctx = ctx

    def load_pending(self) -> list[NotificationCandidate]:
        try:
            rows = self.ctx.api.pending_notifications()
        except (ApiError, requests.exceptions.RequestException):
            logger.exception("Could not load pending notifications")
            self.ctx.alert("Error al cargar notificaciones", "danger")
            return self.ctx.notifications

        self.ctx.notifications = [NotificationCandidate.from_api(r) for r in rows]
        return self.ctx.notifications

    def send(self, membership_id: int) -> str | None:
        # The previous link belongs to another membership
        self.ctx.whatsapp_link = None
        try:
            url = self.ctx.api.send_notification(membership_id)
        except ApiError:
            self.ctx.alert("Error al preparar mensaje", "danger")
            return None
        except requests.exceptions.RequestException:
            logger.exception("Could not prepare WhatsApp message for %s", membership_id)
            self.ctx.alert("Error de conexión", "danger")
            return None

        self.ctx.whatsapp_link = url
        self.ctx.alert("Abriendo WhatsApp...", "success")
        return url


# ---------- Tabs ----------

class TabController:
    def __init__(self, ctx: AppContext, memberships: MembershipManager, recharges: RechargeManager,
                 reports: ReportGenerator, notifications: NotificationDispatcher):
        self.ctx = ctx
        self.loaders = {
            Tab.MEMBERSHIPS: memberships.reload,
            Tab.RECHARGES: recharges.list,
            Tab.REPORTS: reports.load_summary,
            Tab.NOTIFICATIONS: notifications.load_pending,
        }

    def activate(self, tab: Tab) -> None:
        self.ctx.active_tab = tab
        loader = self.loaders.get(tab)
        if loader is not None:
            loader()
