"""
models.py
Lightweight domain helpers (status badges, connection states, dataclasses).
All records are server-owned; these are render-ready copies built from API dicts.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class Badge:
    label: str
    kind: str  # 'active', 'expiring' or 'expired'


# Membership status -> badge shown in tables and in the detail modal
STATUS_BADGES = {
    "active": Badge("Activo", "active"),
    "expiring": Badge("Por Vencer", "expiring"),
    "expired": Badge("Vencido", "expired"),
}
PLACEHOLDER_BADGE = Badge("-", "active")

STATUS_FILTERS = {
    "": "Todos",
    "active": "Activos",
    "expiring": "Por Vencer",
    "expired": "Vencidos",
}


class ConnectionState(Enum):
    CONNECTING = "🟡 Conectando..."
    CONNECTED = "🟢 Conectado"
    DISCONNECTED_TIMEOUT = "🔴 Tiempo agotado (Backend dormido)"
    DISCONNECTED_ERROR = "🔴 Desconectado"

    @property
    def label(self) -> str:
        return self.value


def _money(value) -> float:
    return float(value) if value not in (None, "") else 0.0


@dataclass(frozen=True)
class Membership:
    id: int
    client_id: str
    client_name: str
    service_name: str
    provider: str
    duration: int  # whole months
    purchase_date: str
    expiration_date: str
    purchase_price: float
    sale_price: float
    profit: float
    access_email: str
    access_password: str
    whatsapp_number: str
    security_pin: str | None = None
    profile_name: str | None = None
    status: str | None = None  # 'active', 'expiring' or 'expired'

    @classmethod
    def from_api(cls, data: dict) -> "Membership":
        purchase_price = _money(data.get("purchase_price"))
        sale_price = _money(data.get("sale_price"))
        profit = data.get("profit")
        return cls(
            id=int(data["id"]),
            client_id=str(data.get("client_id") or ""),
            client_name=data.get("client_name") or "",
            service_name=data.get("service_name") or "",
            provider=data.get("provider") or "",
            duration=int(data.get("duration") or 0),
            purchase_date=data.get("purchase_date") or "",
            expiration_date=data.get("expiration_date") or "",
            purchase_price=purchase_price,
            sale_price=sale_price,
            profit=_money(profit) if profit is not None else sale_price - purchase_price,
            access_email=data.get("access_email") or "",
            access_password=data.get("access_password") or "",
            whatsapp_number=data.get("whatsapp_number") or "",
            security_pin=data.get("security_pin") or None,
            profile_name=data.get("profile_name") or None,
            status=data.get("status"),
        )


@dataclass(frozen=True)
class Recharge:
    id: int
    client_id: str
    amount: float
    recharge_date: str
    client_name: str | None = None
    note: str | None = None

    @classmethod
    def from_api(cls, data: dict) -> "Recharge":
        return cls(
            id=int(data["id"]),
            client_id=str(data.get("client_id") or ""),
            amount=_money(data.get("amount")),
            recharge_date=data.get("recharge_date") or "",
            client_name=data.get("client_name") or None,
            note=data.get("note") or None,
        )


@dataclass(frozen=True)
class ReportRow:
    client_name: str
    service_name: str
    purchase_date: str
    purchase_price: float
    sale_price: float
    profit: float
    margin_percentage: float

    @classmethod
    def from_api(cls, data: dict) -> "ReportRow":
        return cls(
            client_name=data.get("client_name") or "",
            service_name=data.get("service_name") or "",
            purchase_date=data.get("purchase_date") or "",
            purchase_price=_money(data.get("purchase_price")),
            sale_price=_money(data.get("sale_price")),
            profit=_money(data.get("profit")),
            margin_percentage=_money(data.get("margin_percentage")),
        )


@dataclass(frozen=True)
class ReportSummary:
    totalCosts: float
    totalRevenue: float
    netProfit: float
    overallMargin: float

    @classmethod
    def from_api(cls, data: dict) -> "ReportSummary":
        return cls(
            totalCosts=_money(data.get("totalCosts")),
            totalRevenue=_money(data.get("totalRevenue")),
            netProfit=_money(data.get("netProfit")),
            overallMargin=_money(data.get("overallMargin")),
        )


@dataclass(frozen=True)
class FinancialStats:
    """Headline figures of the reports tab."""

    totalRevenue: float = 0.0
    totalCosts: float = 0.0
    netProfit: float = 0.0
    active: int | None = None


@dataclass(frozen=True)
class NotificationCandidate:
    id: int
    client_name: str
    service_name: str
    expiration_date: str
    days_until_expiry: int  # negative = already expired
    whatsapp_number: str

    @classmethod
    def from_api(cls, data: dict) -> "NotificationCandidate":
        return cls(
            id=int(data["id"]),
            client_name=data.get("client_name") or "",
            service_name=data.get("service_name") or "",
            expiration_date=data.get("expiration_date") or "",
            days_until_expiry=int(float(data.get("days_until_expiry") or 0)),
            whatsapp_number=data.get("whatsapp_number") or "",
        )
