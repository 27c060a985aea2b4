from models import Membership, NotificationCandidate, Recharge, ReportRow, ReportSummary
import views


def test_empty_tables_render_one_placeholder_row():
    cases = [
        (views.memberships_frame([]), views.MEMBERSHIP_COLUMNS, "No hay membresías registradas"),
        (views.recharges_frame([]), views.RECHARGE_COLUMNS, "No hay recargas registradas"),
        (views.notifications_frame([]), views.NOTIFICATION_COLUMNS, "No hay notificaciones pendientes"),
    ]
    for df, columns, message in cases:
        assert list(df.columns) == columns
        assert len(df) == 1
        assert df.iloc[0, 0] == message
        assert set(df.iloc[0, 1:]) == {""}


def test_memberships_frame(make_membership):
    rows = [
        Membership.from_api(make_membership()),
        Membership.from_api(make_membership(id=8, duration=1, profit="-5", status="unknown")),
    ]
    df = views.memberships_frame(rows)

    assert df.loc[0, "Duración"] == "3 Meses"
    assert df.loc[0, "Vencimiento"] == "30/04/2024"
    assert df.loc[0, "Ganancia"] == "Q 15.00"
    assert df.loc[0, "Estado"] == "Activo"
    assert df.loc[1, "Duración"] == "1 Mes"
    assert df.loc[1, "Ganancia"] == "Q -5.00"
    assert df.loc[1, "Estado"] == "-"


def test_markup_is_kept_as_text(make_membership):
    m = Membership.from_api(make_membership(client_name="<script>alert(1)</script>"))
    df = views.memberships_frame([m])
    assert df.loc[0, "Cliente"] == "<script>alert(1)</script>"


def test_recharges_frame_fills_missing_values():
    df = views.recharges_frame([Recharge(id=1, client_id="C-1", amount=50, recharge_date="2024-02-02")])
    assert df.iloc[0].tolist() == ["C-1", "-", "Q 50.00", "02/02/2024", "-"]


def test_report_frame_appends_totals_row():
    rows = [ReportRow("Ana", "Netflix", "2024-01-10", 25, 40, 15, 37.5)]
    summary = ReportSummary(totalCosts=25, totalRevenue=40, netProfit=15, overallMargin=37.5)

    df = views.report_frame(rows, summary)

    assert len(df) == 2
    assert df.loc[0, "Margen"] == "37.50%"
    assert df.iloc[-1].tolist() == [views.TOTALS_LABEL, "", "", "Q 25.00", "Q 40.00", "Q 15.00", "37.50%"]


def test_report_frame_with_no_details_still_has_totals():
    df = views.report_frame([], ReportSummary(0, 0, 0, 0))
    assert df.iloc[0, 0] == views.TOTALS_LABEL


def test_notifications_frame_badges():
    candidates = [
        NotificationCandidate(1, "Ana", "Netflix", "2024-01-01", -3, "502"),
        NotificationCandidate(2, "Luis", "Disney", "2024-01-09", 4, "503"),
    ]
    df = views.notifications_frame(candidates)
    assert df["Estado"].tolist() == ["Vencido", "Por Vencer"]
    assert df["Días"].tolist() == ["-3 días", "4 días"]


def test_money_style_colours_by_sign():
    assert "green" in views._money_style("Q 0.00")
    assert "red" in views._money_style("Q -1.50")
    assert views._money_style("") == ""


def test_style_report_renders():
    df = views.report_frame([], ReportSummary(10, 20, 10, 50))
    html = views.style_report(df).to_html()
    assert "font-weight: bold" in html


def test_detail_sections(make_membership):
    m = Membership.from_api(make_membership(security_pin=None, profit="-1"))
    sections = views.detail_sections(m)

    assert list(sections) == [
        "Información del Cliente",
        "Información del Servicio",
        "Credenciales de Acceso",
        "Información Financiera",
    ]
    creds = dict(sections["Credenciales de Acceso"].values.tolist())
    assert creds["Contraseña"] == "s3cret<b>"
    assert creds["PIN"] == "N/A"
    assert creds["Perfil"] == "Perfil 2"
