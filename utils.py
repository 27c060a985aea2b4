"""
utils.py
Dates, money/percent formatting, badges and form payload coercion.
"""

from __future__ import annotations

from datetime import date, timedelta

from models import PLACEHOLDER_BADGE, STATUS_BADGES, Badge

CURRENCY = "Q"


def today_iso() -> str:
    return date.today().isoformat()


def parse_iso(d: str) -> date:
    # The API may send full timestamps (2024-01-31T00:00:00.000Z)
    return date.fromisoformat(d[:10])


def to_iso(value) -> str:
    if isinstance(value, date):
        return value.isoformat()
    return str(value or "")


def add_months(start: date, months: int) -> date:
    """
    Add calendar months, clamping the day to the target month
    (e.g., Jan 31 + 1 month => Feb 28/29).
    """
    y = start.year + (start.month - 1 + months) // 12
    m = (start.month - 1 + months) % 12 + 1
    # last day of target month
    if m == 12:
        next_month = date(y + 1, 1, 1)
    else:
        next_month = date(y, m + 1, 1)
    last_day = next_month - timedelta(days=1)
    day = min(start.day, last_day.day)
    return date(y, m, day)


def calc_expiration(purchase_date, duration) -> date | None:
    """Expiration default for the membership form; None until both inputs are set."""
    if not purchase_date or not duration:
        return None
    start = purchase_date if isinstance(purchase_date, date) else parse_iso(purchase_date)
    return add_months(start, int(duration))


def default_dates(today: date | None = None, report_days: int = 30) -> dict[str, date]:
    """Values seeded into date inputs on load and after every form reset."""
    today = today or date.today()
    return {
        "purchase_date": today,
        "recharge_date": today,
        "report_start": today - timedelta(days=report_days),
        "report_end": today,
    }


def format_date(value) -> str:
    if not value:
        return "-"
    d = value if isinstance(value, date) else parse_iso(str(value))
    return d.strftime("%d/%m/%Y")


def format_money(value) -> str:
    return f"{CURRENCY} {float(value or 0):.2f}"


def format_percent(value) -> str:
    return f"{float(value or 0):.2f}%"


def duration_label(months: int) -> str:
    return f"{months} {'Mes' if months == 1 else 'Meses'}"


def profit_color(value) -> str:
    return "green" if float(value or 0) >= 0 else "red"


def status_badge(status: str | None) -> Badge:
    return STATUS_BADGES.get(status or "", PLACEHOLDER_BADGE)


def expiry_badge(days_until_expiry: int) -> Badge:
    return STATUS_BADGES["expired"] if days_until_expiry < 0 else STATUS_BADGES["expiring"]


def membership_payload(form: dict) -> dict:
    """Build the create/update body from raw form values."""
    return {
        "client_id": str(form.get("client_id") or "").strip(),
        "client_name": str(form.get("client_name") or "").strip(),
        "service_name": str(form.get("service_name") or "").strip(),
        "provider": str(form.get("provider") or "").strip(),
        "duration": int(form.get("duration") or 0),
        "purchase_date": to_iso(form.get("purchase_date")),
        "expiration_date": to_iso(form.get("expiration_date")),
        "purchase_price": float(form.get("purchase_price") or 0),
        "sale_price": float(form.get("sale_price") or 0),
        "access_email": str(form.get("access_email") or "").strip(),
        "access_password": str(form.get("access_password") or ""),
        "security_pin": str(form.get("security_pin") or "").strip(),
        "profile_name": str(form.get("profile_name") or "").strip(),
        "whatsapp_number": str(form.get("whatsapp_number") or "").strip(),
    }


def recharge_payload(form: dict) -> dict:
    return {
        "client_id": str(form.get("client_id") or "").strip(),
        "amount": float(form.get("amount") or 0),
        "recharge_date": to_iso(form.get("recharge_date")),
        "note": str(form.get("note") or "").strip(),
    }
