from datetime import date

import pytest

import utils


@pytest.mark.parametrize(
    "start, months, expected",
    [
        (date(2024, 1, 15), 1, date(2024, 2, 15)),
        (date(2024, 1, 31), 1, date(2024, 2, 29)),
        (date(2023, 1, 31), 1, date(2023, 2, 28)),
        (date(2024, 3, 31), 1, date(2024, 4, 30)),
        (date(2024, 11, 30), 3, date(2025, 2, 28)),
        (date(2024, 5, 10), 12, date(2025, 5, 10)),
    ],
)
def test_add_months_clamps_to_end_of_month(start, months, expected):
    assert utils.add_months(start, months) == expected


def test_calc_expiration_accepts_iso_strings_and_dates():
    assert utils.calc_expiration("2024-01-31", 1) == date(2024, 2, 29)
    assert utils.calc_expiration(date(2024, 6, 1), 6) == date(2024, 12, 1)


def test_calc_expiration_needs_both_inputs():
    assert utils.calc_expiration(None, 3) is None
    assert utils.calc_expiration(date(2024, 6, 1), None) is None
    assert utils.calc_expiration("", 3) is None


@pytest.mark.parametrize(
    "value, expected",
    [(10, "Q 10.00"), (10.5, "Q 10.50"), ("7.126", "Q 7.13"), (-3, "Q -3.00"), (None, "Q 0.00")],
)
def test_format_money(value, expected):
    assert utils.format_money(value) == expected


def test_format_percent():
    assert utils.format_percent(37.5) == "37.50%"
    assert utils.format_percent("12.346") == "12.35%"


def test_format_date():
    assert utils.format_date("2024-03-05") == "05/03/2024"
    assert utils.format_date("2024-03-05T00:00:00.000Z") == "05/03/2024"
    assert utils.format_date(date(2024, 12, 1)) == "01/12/2024"
    assert utils.format_date("") == "-"


def test_duration_label():
    assert utils.duration_label(1) == "1 Mes"
    assert utils.duration_label(6) == "6 Meses"


def test_status_badge_labels():
    assert utils.status_badge("active").label == "Activo"
    assert utils.status_badge("expiring").label == "Por Vencer"
    assert utils.status_badge("expired").label == "Vencido"
    assert utils.status_badge("suspended").label == "-"
    assert utils.status_badge(None).label == "-"


def test_expiry_badge():
    assert utils.expiry_badge(-1).label == "Vencido"
    assert utils.expiry_badge(0).label == "Por Vencer"
    assert utils.expiry_badge(5).label == "Por Vencer"


def test_profit_color():
    assert utils.profit_color(0) == "green"
    assert utils.profit_color("12.5") == "green"
    assert utils.profit_color(-0.01) == "red"


def test_default_dates():
    seeded = utils.default_dates(today=date(2024, 3, 15), report_days=30)
    assert seeded == {
        "purchase_date": date(2024, 3, 15),
        "recharge_date": date(2024, 3, 15),
        "report_start": date(2024, 2, 14),
        "report_end": date(2024, 3, 15),
    }


def test_membership_payload_coerces_types():
    payload = utils.membership_payload({
        "client_id": " C-9 ",
        "duration": 3.0,
        "purchase_date": date(2024, 1, 1),
        "expiration_date": date(2024, 4, 1),
        "purchase_price": "10",
        "sale_price": 15.5,
        "security_pin": None,
    })
    assert payload["client_id"] == "C-9"
    assert payload["duration"] == 3 and isinstance(payload["duration"], int)
    assert payload["purchase_date"] == "2024-01-01"
    assert payload["expiration_date"] == "2024-04-01"
    assert payload["purchase_price"] == 10.0
    assert payload["sale_price"] == 15.5
    assert payload["security_pin"] == ""


def test_recharge_payload():
    payload = utils.recharge_payload({
        "client_id": "C-1",
        "amount": "50",
        "recharge_date": date(2024, 2, 2),
        "note": None,
    })
    assert payload == {"client_id": "C-1", "amount": 50.0, "recharge_date": "2024-02-02", "note": ""}
