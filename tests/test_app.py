import unittest.mock
from datetime import date
from pathlib import Path

from streamlit.testing.v1 import AppTest

from api import ApiError
from context import Tab
from managers import CREATE_LABEL, MEMBERSHIP_KEYS, REPORT_START_KEY

APP_FILE = str(Path(__file__).resolve().parent.parent / "app.py")


def configure(api):
    api.list_memberships.return_value = []
    api.list_recharges.return_value = []
    api.pending_notifications.return_value = []
    api.report_summary.return_value = {"totalRevenue": 100, "totalCosts": 60, "netProfit": 40}
    api.membership_stats.return_value = {"active": 3}
    api.create_membership.return_value = {"success": True}


def test_first_run_checks_connection_and_loads_landing_data():
    with unittest.mock.patch("api.ApiClient") as client_cls:
        api = client_cls.return_value
        configure(api)

        at = AppTest.from_file(APP_FILE, default_timeout=15).run()

        assert not at.exception
        api.health_check.assert_called_once()
        api.list_memberships.assert_called_once_with()
        api.report_summary.assert_called_once_with()
        assert "🟢 Conectado" in [s.value for s in at.success]


def test_switching_tab_runs_its_loader():
    with unittest.mock.patch("api.ApiClient") as client_cls:
        api = client_cls.return_value
        configure(api)

        at = AppTest.from_file(APP_FILE, default_timeout=15).run()
        at.radio(key="nav_tab").set_value(Tab.RECHARGES.label).run()

        assert not at.exception
        api.list_recharges.assert_called_once_with()
        assert "💰 Recargas" in [h.value for h in at.header]


def test_membership_form_creates_and_reloads():
    with unittest.mock.patch("api.ApiClient") as client_cls:
        api = client_cls.return_value
        configure(api)

        at = AppTest.from_file(APP_FILE, default_timeout=15).run()
        at.text_input(key=MEMBERSHIP_KEYS["client_id"]).input("C-100")
        at.text_input(key=MEMBERSHIP_KEYS["client_name"]).input("Marta")
        next(b for b in at.button if b.label == CREATE_LABEL).click().run()

        assert not at.exception
        payload = api.create_membership.call_args.args[0]
        assert payload["client_id"] == "C-100"
        assert payload["client_name"] == "Marta"
        assert api.list_memberships.call_count == 2
        assert at.text_input(key=MEMBERSHIP_KEYS["client_id"]).value == ""


def test_new_report_range_drops_export_link():
    with unittest.mock.patch("api.ApiClient") as client_cls:
        api = client_cls.return_value
        configure(api)
        api.export_url.return_value = "https://h/api/reports/export?startDate=2024-01-01&endDate=2024-01-31"

        at = AppTest.from_file(APP_FILE, default_timeout=15).run()
        at.radio(key="nav_tab").set_value(Tab.REPORTS.label).run()
        next(b for b in at.button if b.label == "📥 Exportar").click().run()
        assert at.session_state["ctx"].export_link == api.export_url.return_value

        at.date_input(key=REPORT_START_KEY).set_value(date(2024, 2, 1)).run()

        assert not at.exception
        assert at.session_state["ctx"].export_link is None


def test_failed_save_leaves_submit_enabled():
    with unittest.mock.patch("api.ApiClient") as client_cls:
        api = client_cls.return_value
        configure(api)
        api.create_membership.side_effect = ApiError("Cliente duplicado")

        at = AppTest.from_file(APP_FILE, default_timeout=15).run()
        at.text_input(key=MEMBERSHIP_KEYS["client_id"]).input("C-100")
        next(b for b in at.button if b.label == CREATE_LABEL).click().run()

        assert not at.exception
        assert not next(b for b in at.button if b.label == CREATE_LABEL).disabled
        assert at.text_input(key=MEMBERSHIP_KEYS["client_id"]).value == "C-100"
