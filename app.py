"""
app.py
Streamlit console for the membership reselling business.
All data lives behind the REST API; this app only renders it and sends edits back.
Run: streamlit run app.py
"""

from __future__ import annotations

import streamlit as st

import api
import views
import utils
from config import settings
from context import AppContext, Tab
from managers import (
    MEMBERSHIP_KEYS,
    RECHARGE_KEYS,
    REPORT_END_KEY,
    REPORT_START_KEY,
    SUBMIT_LABEL_KEY,
    ConnectivityMonitor,
    MembershipManager,
    NotificationDispatcher,
    RechargeManager,
    ReportGenerator,
    TabController,
)
from models import STATUS_FILTERS, ConnectionState

st.set_page_config(page_title="Sistema de Membresías", layout="wide")

ALERT_ICONS = {"success": "✅", "danger": "❌", "warning": "⚠️", "info": "ℹ️"}


def get_context() -> AppContext:
    if "ctx" not in st.session_state:
        st.session_state.ctx = AppContext(api=api.ApiClient())
    return st.session_state.ctx


def show_alerts(ctx: AppContext):
    for alert in ctx.drain_alerts():
        st.toast(alert.message, icon=ALERT_ICONS.get(alert.kind, "ℹ️"), duration=settings.ALERT_SECONDS)


FORM_KEYS = [
    *MEMBERSHIP_KEYS.values(),
    *RECHARGE_KEYS.values(),
    REPORT_START_KEY,
    REPORT_END_KEY,
    "filter_status",
    "filter_search",
]


def keep_form_state():
    # Widget values are dropped when their tab is not rendered; store them again every run
    for key in FORM_KEYS:
        if key in st.session_state:
            st.session_state[key] = st.session_state[key]


def seed_report_range():
    seeded = utils.default_dates(report_days=settings.REPORT_DEFAULT_DAYS)
    st.session_state.setdefault(REPORT_START_KEY, seeded["report_start"])
    st.session_state.setdefault(REPORT_END_KEY, seeded["report_end"])


def init_once(ctx: AppContext, memberships: MembershipManager, reports: ReportGenerator):
    # First run of the session loads the landing data
    if ctx.initialized:
        return
    ctx.initialized = True
    with st.spinner("Cargando membresías..."):
        memberships.list()
    reports.load_summary()


# ---------- Sidebar ----------

@st.fragment(run_every=settings.HEALTH_POLL_SECONDS)
def connection_status(ctx: AppContext):
    monitor = ConnectivityMonitor(ctx)
    if ctx.last_health_check is None:
        with st.spinner(ConnectionState.CONNECTING.label):
            monitor.check()
    else:
        monitor.poll()

    if ctx.connection is ConnectionState.CONNECTED:
        st.success(ctx.connection.label)
    elif ctx.connection is ConnectionState.CONNECTING:
        st.info(ctx.connection.label)
    else:
        st.error(ctx.connection.label)
    show_alerts(ctx)


def on_tab_change(tabs: TabController):
    with st.spinner("Cargando..."):
        tabs.activate(Tab.from_label(st.session_state.nav_tab))


def sidebar(ctx: AppContext, tabs: TabController):
    with st.sidebar:
        st.title("📺 Membresías")
        connection_status(ctx)
        st.session_state.setdefault("nav_tab", ctx.active_tab.label)
        st.radio(
            "Navegar",
            [t.label for t in Tab],
            key="nav_tab",
            on_change=on_tab_change,
            args=(tabs,),
        )


def whatsapp_link(ctx: AppContext):
    if ctx.whatsapp_link:
        st.link_button("📱 Abrir WhatsApp", ctx.whatsapp_link, type="primary")


# ---------- Memberships ----------

@st.dialog("Detalles de la Membresía", width="large")
def detail_dialog(m):
    for title, df in views.detail_sections(m).items():
        st.subheader(title)
        st.dataframe(df, use_container_width=True, hide_index=True)
    st.markdown(f"**Ganancia:** :{utils.profit_color(m.profit)}[**{utils.format_money(m.profit)}**]")
    if st.button("Cerrar"):
        st.rerun()


def apply_membership_filter(memberships: MembershipManager):
    memberships.apply_filter(
        status=st.session_state.get("filter_status", ""),
        search=st.session_state.get("filter_search", ""),
    )


def selected_action(manager_action, key: str):
    selected = st.session_state.get(key)
    if selected is not None:
        manager_action(int(selected))


def delete_selected_membership(memberships: MembershipManager):
    selected = st.session_state.get("membership_selected")
    confirmed = st.session_state.get("membership_delete_confirm", False)
    if selected is not None and memberships.remove(int(selected), confirmed):
        st.session_state.membership_delete_confirm = False


def submit_membership(memberships: MembershipManager):
    with st.spinner("Guardando..."):
        memberships.submit()


def membership_form(ctx: AppContext, memberships: MembershipManager):
    if ctx.edit_id:
        st.subheader(f"✏️ Editar Membresía (ID: {ctx.edit_id})")
    else:
        st.subheader("➕ Nueva Membresía")

    k = MEMBERSHIP_KEYS
    col1, col2, col3 = st.columns(3)
    with col1:
        st.text_input("ID Cliente", key=k["client_id"])
        st.text_input("Nombre del cliente", key=k["client_name"])
        st.text_input("WhatsApp", key=k["whatsapp_number"])
        st.text_input("Servicio", key=k["service_name"])
        st.text_input("Proveedor", key=k["provider"])

    with col2:
        st.number_input(
            "Duración (meses)", min_value=1, step=1, value=None,
            key=k["duration"], on_change=memberships.autofill_expiration,
        )
        st.date_input(
            "Fecha de compra", value=None, format="DD/MM/YYYY",
            key=k["purchase_date"], on_change=memberships.autofill_expiration,
        )
        st.date_input("Fecha de vencimiento", value=None, format="DD/MM/YYYY", key=k["expiration_date"])
        st.number_input("Precio de compra (Q)", min_value=0.0, step=0.01, format="%.2f", value=None, key=k["purchase_price"])
        st.number_input("Precio de venta (Q)", min_value=0.0, step=0.01, format="%.2f", value=None, key=k["sale_price"])

    with col3:
        st.text_input("Correo de acceso", key=k["access_email"])
        st.text_input("Contraseña de acceso", type="password", key=k["access_password"])
        st.text_input("PIN (opcional)", key=k["security_pin"])
        st.text_input("Perfil (opcional)", key=k["profile_name"])

    c1, c2 = st.columns([1, 4])
    with c1:
        st.button(
            st.session_state[SUBMIT_LABEL_KEY],
            type="primary",
            on_click=submit_membership,
            args=(memberships,),
        )
    with c2:
        if ctx.edit_id:
            st.button("Cancelar edición", on_click=memberships.cancel_edit)


def memberships_page(ctx: AppContext, memberships: MembershipManager, notifications: NotificationDispatcher):
    st.header("📋 Membresías")

    membership_form(ctx, memberships)

    st.divider()

    f1, f2, f3 = st.columns([1, 2, 1])
    with f1:
        st.selectbox(
            "Estado",
            options=list(STATUS_FILTERS),
            format_func=STATUS_FILTERS.get,
            key="filter_status",
            on_change=apply_membership_filter,
            args=(memberships,),
        )
    with f2:
        st.text_input(
            "Buscar (cliente, servicio, proveedor)",
            key="filter_search",
            on_change=apply_membership_filter,
            args=(memberships,),
        )
    with f3:
        st.button("🔄 Recargar", on_click=memberships.reload)

    df = views.memberships_frame(ctx.memberships)
    st.dataframe(
        views.style_table(df, profit_column="Ganancia", badge_column="Estado"),
        use_container_width=True,
        hide_index=True,
    )

    if not ctx.memberships:
        return

    st.subheader("Acciones")
    labels = {m.id: f"{m.client_name} - {m.service_name} (ID {m.id})" for m in ctx.memberships}
    colA, colB = st.columns([1, 2])
    with colA:
        st.selectbox("Membresía", options=list(labels), format_func=labels.get, key="membership_selected")
    with colB:
        c1, c2, c3, c4 = st.columns(4)
        with c1:
            st.button("👁️ Ver", on_click=selected_action, args=(memberships.view_details, "membership_selected"))
        with c2:
            st.button("✏️ Editar", on_click=selected_action, args=(memberships.load_for_edit, "membership_selected"))
        with c3:
            st.button("📱 WhatsApp", on_click=selected_action, args=(notifications.send, "membership_selected"))
        with c4:
            confirmed = st.checkbox("Confirmar eliminación", key="membership_delete_confirm")
            st.button(
                "🗑️ Eliminar",
                disabled=not confirmed,
                on_click=delete_selected_membership,
                args=(memberships,),
            )

    whatsapp_link(ctx)


# ---------- Recharges ----------

def delete_selected_recharge(recharges: RechargeManager):
    selected = st.session_state.get("recharge_selected")
    confirmed = st.session_state.get("recharge_delete_confirm", False)
    if selected is not None and recharges.remove(int(selected), confirmed):
        st.session_state.recharge_delete_confirm = False


def recharges_page(ctx: AppContext, recharges: RechargeManager):
    st.header("💰 Recargas")

    k = RECHARGE_KEYS
    with st.form("recharge_form"):
        c1, c2, c3, c4 = st.columns([1, 1, 1, 2])
        with c1:
            st.text_input("ID Cliente", key=k["client_id"])
        with c2:
            st.number_input("Monto (Q)", min_value=0.0, step=0.01, format="%.2f", value=None, key=k["amount"])
        with c3:
            st.date_input("Fecha", value=None, format="DD/MM/YYYY", key=k["recharge_date"])
        with c4:
            st.text_input("Nota (opcional)", key=k["note"])
        st.form_submit_button("💾 Registrar Recarga", type="primary", on_click=recharges.create)

    st.divider()

    st.dataframe(views.recharges_frame(ctx.recharges), use_container_width=True, hide_index=True)

    if not ctx.recharges:
        return

    labels = {r.id: f"{r.client_id} - {utils.format_money(r.amount)} ({utils.format_date(r.recharge_date)})" for r in ctx.recharges}
    colA, colB = st.columns([2, 1])
    with colA:
        st.selectbox("Recarga", options=list(labels), format_func=labels.get, key="recharge_selected")
    with colB:
        confirmed = st.checkbox("Confirmar eliminación", key="recharge_delete_confirm")
        st.button("🗑️ Eliminar", disabled=not confirmed, on_click=delete_selected_recharge, args=(recharges,))


# ---------- Reports ----------

def generate_report(reports: ReportGenerator):
    with st.spinner("Generando reporte..."):
        reports.generate(st.session_state.get(REPORT_START_KEY), st.session_state.get(REPORT_END_KEY))


def export_report(reports: ReportGenerator):
    reports.export(st.session_state.get(REPORT_START_KEY), st.session_state.get(REPORT_END_KEY))


def reports_page(ctx: AppContext, reports: ReportGenerator):
    st.header("📊 Reportes Financieros")

    stats = ctx.stats
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Ingresos totales", utils.format_money(stats.totalRevenue))
    c2.metric("Costos totales", utils.format_money(stats.totalCosts))
    c3.metric("Ganancia neta", utils.format_money(stats.netProfit))
    c4.metric("Membresías activas", "-" if stats.active is None else stats.active)

    st.divider()

    d1, d2, d3, d4 = st.columns(4)
    with d1:
        st.date_input("Desde", value=None, format="DD/MM/YYYY", key=REPORT_START_KEY,
                      on_change=reports.clear_export)
    with d2:
        st.date_input("Hasta", value=None, format="DD/MM/YYYY", key=REPORT_END_KEY,
                      on_change=reports.clear_export)
    with d3:
        st.button("📊 Generar Reporte", type="primary", on_click=generate_report, args=(reports,))
    with d4:
        st.button("📥 Exportar", on_click=export_report, args=(reports,))

    if ctx.export_link:
        st.link_button("⬇️ Descargar reporte", ctx.export_link)

    if ctx.report_rows is not None and ctx.report_summary is not None:
        df = views.report_frame(ctx.report_rows, ctx.report_summary)
        st.dataframe(views.style_report(df), use_container_width=True, hide_index=True)


# ---------- Notifications ----------

def notifications_page(ctx: AppContext, notifications: NotificationDispatcher):
    st.header("📱 Notificaciones")

    st.button("🔄 Actualizar", on_click=notifications.load_pending)

    df = views.notifications_frame(ctx.notifications)
    st.dataframe(views.style_table(df, badge_column="Estado"), use_container_width=True, hide_index=True)

    if ctx.notifications:
        labels = {c.id: f"{c.client_name} - {c.service_name} ({c.whatsapp_number})" for c in ctx.notifications}
        colA, colB = st.columns([2, 1])
        with colA:
            st.selectbox("Membresía", options=list(labels), format_func=labels.get, key="notification_selected")
        with colB:
            st.button(
                "📱 Enviar",
                type="primary",
                on_click=selected_action,
                args=(notifications.send, "notification_selected"),
            )

    whatsapp_link(ctx)


# --------- App entry ---------

def run():
    ctx = get_context()
    memberships = MembershipManager(ctx, st.session_state)
    recharges = RechargeManager(ctx, st.session_state)
    reports = ReportGenerator(ctx)
    notifications = NotificationDispatcher(ctx)
    tabs = TabController(ctx, memberships, recharges, reports, notifications)

    keep_form_state()
    memberships.ensure_defaults()
    recharges.ensure_defaults()
    seed_report_range()

    sidebar(ctx, tabs)
    init_once(ctx, memberships, reports)
    show_alerts(ctx)

    if ctx.detail is not None:
        membership, ctx.detail = ctx.detail, None
        detail_dialog(membership)

    if ctx.active_tab is Tab.MEMBERSHIPS:
        memberships_page(ctx, memberships, notifications)
    elif ctx.active_tab is Tab.RECHARGES:
        recharges_page(ctx, recharges)
    elif ctx.active_tab is Tab.REPORTS:
        reports_page(ctx, reports)
    elif ctx.active_tab is Tab.NOTIFICATIONS:
        notifications_page(ctx, notifications)


if __name__ == "__main__":
    run()
