from datetime import date

from homeledger.insights.planner import add_months, days_until, next_payment_date, payment_date_in_month


def test_add_months_clamps_to_month_end():
    assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
    assert add_months(date(2023, 1, 31), 1) == date(2023, 2, 28)
    assert add_months(date(2024, 11, 15), 3) == date(2025, 2, 15)


def test_payment_date_in_month_clamps_long_payment_day():
    assert payment_date_in_month(2024, 4, 31) == date(2024, 4, 30)
    assert payment_date_in_month(2024, 5, 31) == date(2024, 5, 31)


def test_next_payment_date_monthly_rolls_forward():
    today = date(2026, 2, 20)
    assert next_payment_date(5, today) == date(2026, 3, 5)
    assert next_payment_date(25, today) == date(2026, 2, 25)


def test_next_payment_date_due_today():
    today = date(2026, 2, 5)
    assert next_payment_date(5, today) == today
    assert next_payment_date(5, today, include_today=False) == date(2026, 3, 5)


def test_next_payment_date_without_payment_day():
    assert next_payment_date(None, date(2026, 2, 5)) is None


def test_days_until():
    assert days_until(date(2026, 3, 1), date(2026, 2, 20)) == 9
    assert days_until(date(2026, 2, 19), date(2026, 2, 20)) == -1
