"""
views.py
Table builders: API records -> pandas DataFrames (plus Styler colouring) for st.dataframe.
Cell values are plain text, so names, notes and credentials are never interpreted as markup.
"""

from __future__ import annotations

import pandas as pd

from models import STATUS_BADGES, Membership, NotificationCandidate, Recharge, ReportRow, ReportSummary
import utils

MEMBERSHIP_COLUMNS = ["ID Cliente", "Cliente", "Servicio", "Proveedor", "Duración", "Vencimiento", "Ganancia", "Estado"]
RECHARGE_COLUMNS = ["ID Cliente", "Cliente", "Monto", "Fecha", "Nota"]
REPORT_COLUMNS = ["Cliente", "Servicio", "Fecha", "Costo", "Venta", "Ganancia", "Margen"]
NOTIFICATION_COLUMNS = ["Cliente", "Servicio", "Vencimiento", "Días", "Estado", "WhatsApp"]

BADGE_COLORS = {
    "active": "color: #155724; background-color: #d4edda",
    "expiring": "color: #856404; background-color: #fff3cd",
    "expired": "color: #721c24; background-color: #f8d7da",
}
LABEL_TO_KIND = {badge.label: badge.kind for badge in STATUS_BADGES.values()}

TOTALS_LABEL = "TOTALES"


def empty_frame(columns: list[str], message: str) -> pd.DataFrame:
    """One placeholder row: the message in the first column, the rest blank."""
    return pd.DataFrame([[message] + [""] * (len(columns) - 1)], columns=columns)


def memberships_frame(memberships: list[Membership]) -> pd.DataFrame:
    if not memberships:
        return empty_frame(MEMBERSHIP_COLUMNS, "No hay membresías registradas")
    rows = [
        [
            m.client_id,
            m.client_name,
            m.service_name,
            m.provider,
            utils.duration_label(m.duration),
            utils.format_date(m.expiration_date),
            utils.format_money(m.profit),
            utils.status_badge(m.status).label,
        ]
        for m in memberships
    ]
    return pd.DataFrame(rows, columns=MEMBERSHIP_COLUMNS)


def recharges_frame(recharges: list[Recharge]) -> pd.DataFrame:
    if not recharges:
        return empty_frame(RECHARGE_COLUMNS, "No hay recargas registradas")
    rows = [
        [
            r.client_id,
            r.client_name or "-",
            utils.format_money(r.amount),
            utils.format_date(r.recharge_date),
            r.note or "-",
        ]
        for r in recharges
    ]
    return pd.DataFrame(rows, columns=RECHARGE_COLUMNS)


def report_frame(rows: list[ReportRow], summary: ReportSummary) -> pd.DataFrame:
    """Detail rows followed by the totals row."""
    data = [
        [
            r.client_name,
            r.service_name,
            utils.format_date(r.purchase_date),
            utils.format_money(r.purchase_price),
            utils.format_money(r.sale_price),
            utils.format_money(r.profit),
            utils.format_percent(r.margin_percentage),
        ]
        for r in rows
    ]
    data.append([
        TOTALS_LABEL,
        "",
        "",
        utils.format_money(summary.totalCosts),
        utils.format_money(summary.totalRevenue),
        utils.format_money(summary.netProfit),
        utils.format_percent(summary.overallMargin),
    ])
    return pd.DataFrame(data, columns=REPORT_COLUMNS)


def notifications_frame(candidates: list[NotificationCandidate]) -> pd.DataFrame:
    if not candidates:
        return empty_frame(NOTIFICATION_COLUMNS, "No hay notificaciones pendientes")
    rows = [
        [
            c.client_name,
            c.service_name,
            utils.format_date(c.expiration_date),
            f"{c.days_until_expiry} días",
            utils.expiry_badge(c.days_until_expiry).label,
            c.whatsapp_number,
        ]
        for c in candidates
    ]
    return pd.DataFrame(rows, columns=NOTIFICATION_COLUMNS)


# ---------- Styling ----------

def _money_style(cell: str) -> str:
    # cells look like "Q -12.50"
    if not cell or not cell.startswith(utils.CURRENCY):
        return ""
    amount = float(cell[len(utils.CURRENCY):])
    return f"color: {utils.profit_color(amount)}; font-weight: bold"


def _badge_style(cell: str) -> str:
    kind = LABEL_TO_KIND.get(cell)
    return BADGE_COLORS.get(kind, "")


def style_table(df: pd.DataFrame, profit_column: str | None = None, badge_column: str | None = None):
    styler = df.style
    if profit_column in df.columns:
        styler = styler.map(_money_style, subset=[profit_column])
    if badge_column in df.columns:
        styler = styler.map(_badge_style, subset=[badge_column])
    return styler


def style_report(df: pd.DataFrame):
    last = len(df) - 1

    def bold_totals(row: pd.Series) -> list[str]:
        style = "font-weight: bold; background-color: #f8f9fa" if row.name == last else ""
        return [style] * len(row)

    return style_table(df, profit_column="Ganancia").apply(bold_totals, axis=1)


def detail_sections(m: Membership) -> dict[str, pd.DataFrame]:
    """Read-only detail modal content, grouped by section."""

    def section(pairs: list[tuple[str, str]]) -> pd.DataFrame:
        return pd.DataFrame(pairs, columns=["Campo", "Valor"])

    return {
        "Información del Cliente": section([
            ("Nombre", m.client_name),
            ("ID Cliente", m.client_id),
            ("WhatsApp", m.whatsapp_number),
        ]),
        "Información del Servicio": section([
            ("Servicio", m.service_name),
            ("Proveedor", m.provider),
            ("Duración", utils.duration_label(m.duration)),
            ("Estado", utils.status_badge(m.status).label),
        ]),
        "Credenciales de Acceso": section([
            ("Correo", m.access_email),
            ("Contraseña", m.access_password),
            ("PIN", m.security_pin or "N/A"),
            ("Perfil", m.profile_name or "N/A"),
        ]),
        "Información Financiera": section([
            ("Fecha de Compra", utils.format_date(m.purchase_date)),
            ("Fecha de Vencimiento", utils.format_date(m.expiration_date)),
            ("Precio de Compra", utils.format_money(m.purchase_price)),
            ("Precio de Venta", utils.format_money(m.sale_price)),
        ]),
    }
