from datetime import date, datetime
from decimal import Decimal
from types import SimpleNamespace

from homeledger.insights.alerts import build_alerts

TODAY = date(2024, 4, 10)


def make_debt(**overrides):
    fields = dict(
        id=1,
        name="Card",
        balance=Decimal("1000"),
        apr=Decimal("0"),
        is_promo_0=False,
        promo_end_date=None,
        payment_day=None,
        minimum_payment=Decimal("0"),
        planned_payment=None,
        created_at=datetime(2024, 4, 1),
    )
    fields.update(overrides)
    return SimpleNamespace(**fields)


def household_debts():
    return [
        make_debt(
            id=1,
            name="Promo Card",
            balance=Decimal("2000"),
            apr=Decimal("24"),
            is_promo_0=True,
            promo_end_date=date(2024, 4, 30),
            payment_day=12,
            planned_payment=Decimal("100"),
        ),
        make_debt(
            id=2,
            name="Loan",
            balance=Decimal("5000"),
            apr=Decimal("29.9"),
            payment_day=20,
            minimum_payment=Decimal("150"),
        ),
        make_debt(id=3, name="Old Promo", balance=Decimal("500"), is_promo_0=True, promo_end_date=date(2024, 12, 31)),
    ]


def test_alerts_are_sorted_by_severity():
    alerts = build_alerts(household_debts(), today=TODAY)
    assert [a["id"] for a in alerts] == [
        "promo-1",
        "payment-1",
        "apr-2",
        "monthly-payments",
        "upcoming-payments",
        "payment-2",
    ]


def test_alert_descriptions():
    alerts = {a["id"]: a for a in build_alerts(household_debts(), today=TODAY)}

    assert alerts["monthly-payments"]["description"] == "Total due: £250.00"
    assert alerts["upcoming-payments"]["description"] == "May: £250, Jun: £250, Jul: £250"
    assert alerts["promo-1"]["description"] == "Promo Card: 20 days remaining"
    assert alerts["promo-1"]["severity"] == "danger"
    assert alerts["payment-1"]["description"] == "Promo Card: Due in 2 days"
    assert alerts["payment-2"]["severity"] == "info"
    assert alerts["apr-2"]["description"] == "Loan: 29.9% APR"
    assert alerts["apr-2"]["debt_id"] == 2


def test_promo_alert_is_a_warning_outside_thirty_days():
    debt = make_debt(is_promo_0=True, promo_end_date=date(2024, 5, 25))
    alerts = build_alerts([debt], today=TODAY)
    assert [(a["id"], a["severity"]) for a in alerts] == [("promo-1", "warning")]


def test_payment_due_today_is_danger():
    debt = make_debt(payment_day=10, planned_payment=Decimal("50"))
    payment = [a for a in build_alerts([debt], today=TODAY) if a["type"] == "payment_due"]
    assert payment[0]["description"] == "Card: Due in 0 days"
    assert payment[0]["severity"] == "danger"


def test_high_apr_threshold_is_configurable():
    debt = make_debt(apr=Decimal("18.9"))
    assert build_alerts([debt], today=TODAY) == []
    alerts = build_alerts([debt], today=TODAY, high_apr_threshold=Decimal("15"), currency_symbol="$")
    assert [a["type"] for a in alerts] == ["high_apr"]


def test_no_debts_no_alerts():
    assert build_alerts([], today=TODAY) == []


def test_renewal_ending_alerts():
    renewals = [
        SimpleNamespace(id=7, name="Broadband", agreement_end=date(2024, 4, 15)),
        SimpleNamespace(id=8, name="Car Insurance", agreement_end=date(2024, 5, 5)),
        SimpleNamespace(id=9, name="TV Licence", agreement_end=date(2024, 8, 1)),
        SimpleNamespace(id=10, name="Gym", agreement_end=None),
    ]
    alerts = build_alerts([], today=TODAY, renewals=renewals)

    assert [(a["id"], a["severity"]) for a in alerts] == [("renewal-7", "danger"), ("renewal-8", "warning")]
    assert alerts[0]["description"] == "Broadband: ends in 5 days"
    assert alerts[1]["renewal_id"] == 8
    assert alerts[1]["debt_id"] is None
