"""
context.py
Per-session application state shared by the managers (kept in st.session_state).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from api import ApiClient
from models import (
    ConnectionState,
    FinancialStats,
    Membership,
    NotificationCandidate,
    Recharge,
    ReportRow,
    ReportSummary,
)


class Tab(Enum):
    MEMBERSHIPS = "📋 Membresías"
    RECHARGES = "💰 Recargas"
    REPORTS = "📊 Reportes"
    NOTIFICATIONS = "📱 Notificaciones"

    @property
    def label(self) -> str:
        return self.value

    @classmethod
    def from_label(cls, label: str) -> "Tab":
        return next(t for t in cls if t.value == label)


@dataclass
class Alert:
    message: str
    kind: str = "success"  # success, danger, warning, info


@dataclass
class MembershipFilter:
    status: str = ""
    search: str = ""

    @property
    def empty(self) -> bool:
        return not self.status and not self.search.strip()


@dataclass
class AppContext:
    api: ApiClient
    edit_id: int | None = None
    active_tab: Tab = Tab.MEMBERSHIPS
    initialized: bool = False

    connection: ConnectionState = ConnectionState.CONNECTING
    last_health_check: float | None = None

    membership_filter: MembershipFilter = field(default_factory=MembershipFilter)
    memberships: list[Membership] = field(default_factory=list)
    recharges: list[Recharge] = field(default_factory=list)
    notifications: list[NotificationCandidate] = field(default_factory=list)
    report_rows: list[ReportRow] | None = None
    report_summary: ReportSummary | None = None
    stats: FinancialStats = field(default_factory=FinancialStats)

    detail: Membership | None = None  # shown in the modal on the next run
    whatsapp_link: str | None = None
    export_link: str | None = None

    alerts: list[Alert] = field(default_factory=list)

    def alert(self, message: str, kind: str = "success") -> None:
        self.alerts.append(Alert(message, kind))

    def drain_alerts(self) -> list[Alert]:
        """Every queued alert, in order, exactly once; the queue is emptied."""
        pending = list(self.alerts)
        self.alerts.clear()
        return pending
