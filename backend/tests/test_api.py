from datetime import date, timedelta
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from homeledger.db.models import Base
from homeledger.db.session import get_db
from homeledger.main import app


@pytest.fixture()
def client():
    # Shared in-memory DB so every request sees the same tables
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def override_get_db():
        db = TestingSession()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()
    Base.metadata.drop_all(engine)


def create_debt(client, **overrides):
    body = {
        "name": "Visa",
        "type": "credit_card",
        "balance": "1200",
        "starting_balance": "1500",
        "apr": "0",
        "minimum_payment": "25",
        "planned_payment": "100",
    }
    body.update(overrides)
    response = client.post("/api/debts/", json=body)
    assert response.status_code == 201, response.text
    return response.json()


def test_health(client):
    assert client.get("/").json() == {"status": "ok", "message": "Household Ledger API"}
    assert client.get("/health").json() == {"status": "healthy"}


def test_create_and_get_debt(client):
    debt = create_debt(client)
    assert debt["name"] == "Visa"
    assert Decimal(debt["overview"]["adjusted_balance"]) == Decimal("1200")
    assert debt["overview"]["status"] == "active"
    assert debt["overview"]["months_remaining"] == 12

    fetched = client.get(f"/api/debts/{debt['id']}").json()
    assert fetched["id"] == debt["id"]


def test_debt_validation(client):
    response = client.post(
        "/api/debts/",
        json={
            "name": "Card",
            "balance": "100",
            "is_promo_0": True,
            "promo_start_date": "2024-06-01",
            "promo_end_date": "2024-01-01",
        },
    )
    assert response.status_code == 422

    assert client.post("/api/debts/", json={"name": "Card", "balance": "-5"}).status_code == 422
    assert client.post("/api/debts/", json={"name": "Card", "balance": "5", "payment_day": 32}).status_code == 422
    assert client.get("/api/debts/999").status_code == 404


def test_update_debt_rejects_bad_promo_dates(client):
    debt = create_debt(client, is_promo_0=True, promo_start_date="2024-06-01", promo_end_date="2025-06-01")

    response = client.patch(f"/api/debts/{debt['id']}", json={"promo_end_date": "2024-01-01"})
    assert response.status_code == 400

    response = client.patch(f"/api/debts/{debt['id']}", json={"planned_payment": "200"})
    assert response.status_code == 200
    assert Decimal(response.json()["planned_payment"]) == Decimal("200")


def test_list_debts_with_totals_and_sort(client):
    create_debt(client, name="Small", balance="300", apr="29.9")
    create_debt(client, name="Large", balance="5000", apr="9.9", planned_payment=None, minimum_payment="150")

    body = client.get("/api/debts/").json()
    assert body["total"] == 2
    assert [d["name"] for d in body["debts"]] == ["Large", "Small"]
    assert Decimal(body["total_debt"]) == Decimal("5300")
    assert Decimal(body["total_minimums"]) == Decimal("175")
    assert Decimal(body["total_planned"]) == Decimal("250")

    by_apr = client.get("/api/debts/", params={"sort": "apr"}).json()
    assert [d["name"] for d in by_apr["debts"]] == ["Small", "Large"]
    assert client.get("/api/debts/", params={"sort": "name"}).status_code == 422


def test_record_payment_reduces_balance(client):
    debt = create_debt(client)

    response = client.post(f"/api/debts/{debt['id']}/payments", json={"paid_on": "2024-05-01", "amount": "250"})
    assert response.status_code == 201
    assert Decimal(client.get(f"/api/debts/{debt['id']}").json()["balance"]) == Decimal("950")

    client.post(f"/api/debts/{debt['id']}/payments", json={"paid_on": "2024-06-01", "amount": "5000"})
    assert Decimal(client.get(f"/api/debts/{debt['id']}").json()["balance"]) == Decimal("0")

    payments = client.get(f"/api/debts/{debt['id']}/payments").json()
    assert [p["paid_on"] for p in payments] == ["2024-06-01", "2024-05-01"]

    assert client.post(f"/api/debts/{debt['id']}/payments", json={"paid_on": "2024-06-01", "amount": "0"}).status_code == 422


def test_debt_projection(client):
    debt = create_debt(client)

    body = client.get(f"/api/debts/{debt['id']}/projection").json()
    assert body["status"] == "ok"
    assert body["months_to_payoff"] == 12
    assert len(body["schedule"]) == 12
    assert Decimal(body["schedule"][-1]["balance_after"]) == 0
    assert Decimal(body["total_paid"]) == Decimal("1200")

    short = client.get(f"/api/debts/{debt['id']}/projection", params={"months": 6}).json()
    assert short["status"] == "max_months_exceeded"
    assert len(short["schedule"]) == 6


def test_delete_debt(client):
    debt = create_debt(client)
    assert client.delete(f"/api/debts/{debt['id']}").json() == {"ok": True}
    assert client.get(f"/api/debts/{debt['id']}").status_code == 404


def test_savings_account_flow(client):
    response = client.post("/api/savings/", json={"name": "Easy Saver", "balance": "10000", "aer": "5"})
    assert response.status_code == 201
    account = response.json()
    assert Decimal(account["monthly_interest"]) == Decimal("41.67")

    deposit = client.post(
        f"/api/savings/{account['id']}/transactions",
        json={"trans_on": "2024-05-01", "amount": "500", "type": "deposit"},
    )
    assert deposit.status_code == 201
    assert Decimal(client.get(f"/api/savings/{account['id']}").json()["balance"]) == Decimal("10500")

    overdraw = client.post(
        f"/api/savings/{account['id']}/transactions",
        json={"trans_on": "2024-05-02", "amount": "20000", "type": "withdrawal"},
    )
    assert overdraw.status_code == 400

    listing = client.get("/api/savings/").json()
    assert listing["total"] == 1
    assert Decimal(listing["total_savings"]) == Decimal("10500")


def test_savings_projection(client):
    account = client.post("/api/savings/", json={"name": "Easy Saver", "balance": "10000", "aer": "5"}).json()

    body = client.get(f"/api/savings/{account['id']}/projection").json()
    assert body["months"] == 12
    assert len(body["rows"]) == 12
    assert Decimal(body["rows"][0]["interest_this_month"]) == Decimal("41.67")
    assert Decimal(body["final_balance"]) == Decimal("10000") + Decimal(body["total_interest"])

    assert client.get("/api/savings/999/projection").status_code == 404


def test_interest_statement(client):
    client.post("/api/savings/", json={"name": "Cash ISA", "balance": "25000", "aer": "4"})
    client.post("/api/savings/", json={"name": "Easy Saver", "balance": "30000", "aer": "5"})

    body = client.get("/api/savings/interest-statement").json()
    assert len(body["months"]) == 14
    assert Decimal(body["tax_free_interest"]) == Decimal("800")
    assert Decimal(body["estimated_tax"]) == Decimal("140")


def test_cashflow(client):
    client.post("/api/cashflow/income", json={"name": "Salary", "monthly_amount": "3000"})
    response = client.post(
        "/api/cashflow/expenses",
        json={"name": "Car insurance", "monthly_amount": "600", "frequency": "annual", "couples_mode": True},
    )
    assert response.status_code == 201
    assert Decimal(response.json()["monthly_equivalent"]) == Decimal("25")
    client.post("/api/cashflow/expenses", json={"name": "Rent", "monthly_amount": "1200"})

    body = client.get("/api/cashflow/").json()
    assert Decimal(body["total_income"]) == Decimal("3000")
    assert Decimal(body["monthly_expenses"]) == Decimal("1200")
    assert Decimal(body["annual_expenses_monthly"]) == Decimal("25")
    assert Decimal(body["surplus"]) == Decimal("1775")
    assert [e["name"] for e in body["expenses"]] == ["Rent", "Car insurance"]

    by_name = client.get("/api/cashflow/expenses", params={"sort": "name"}).json()
    assert [e["name"] for e in by_name] == ["Car insurance", "Rent"]

    assert client.post("/api/cashflow/expenses", json={"name": "Gym", "monthly_amount": "30", "frequency": "weekly"}).status_code == 422


def test_overview(client):
    client.post("/api/cashflow/income", json={"name": "Salary", "monthly_amount": "2000"})
    client.post("/api/cashflow/expenses", json={"name": "Rent", "monthly_amount": "2500"})
    client.post("/api/savings/", json={"name": "Easy Saver", "balance": "3000", "aer": "4"})
    create_debt(client, balance="500", apr="29.9", planned_payment="100")

    summary = client.get("/api/overview/summary").json()
    assert Decimal(summary["net_position"]) == Decimal("2500")
    assert Decimal(summary["monthly_surplus"]) == Decimal("-600")
    assert Decimal(summary["projected_annual_interest"]) == Decimal("120")

    runway = client.get("/api/overview/runway").json()
    assert runway["in_surplus"] is False
    assert runway["months"] == 4

    alerts = client.get("/api/overview/alerts").json()["alerts"]
    assert alerts[0]["type"] == "high_apr"
    assert {"monthly_payments", "upcoming_payments"} <= {a["type"] for a in alerts}

    assert client.get("/api/overview/household").json() == {"members": []}


def test_planner_endpoints(client):
    plan = client.post(
        "/api/planner/payoff-plan",
        json={"current_balance": "1200", "monthly_payment": "100", "apr_percentage": "0", "start_date": "2024-01-01"},
    ).json()
    assert plan["status"] == "ok"
    assert plan["months_to_payoff"] == 12
    assert plan["payoff_date"] == "2024-12-01"

    too_low = client.post(
        "/api/planner/payoff-plan",
        json={"current_balance": "100000", "monthly_payment": "100", "apr_percentage": "36"},
    ).json()
    assert too_low["status"] == "payment_too_low"

    growth = client.post(
        "/api/planner/savings-growth",
        json={"starting_balance": "10000", "aer_percent": "5", "months": 3},
    ).json()
    assert len(growth["rows"]) == 3
    assert growth["account_id"] is None


def test_update_rejects_null_on_required_fields(client):
    debt = create_debt(client)
    for field in ("balance", "name", "apr", "minimum_payment", "is_promo_0", "type"):
        response = client.patch(f"/api/debts/{debt['id']}", json={field: None})
        assert response.status_code == 422, field

    # Nullable columns can still be cleared
    response = client.patch(f"/api/debts/{debt['id']}", json={"planned_payment": None})
    assert response.status_code == 200
    assert response.json()["planned_payment"] is None

    account = client.post("/api/savings/", json={"name": "Easy Saver", "balance": "100", "aer": "4"}).json()
    for field in ("aer", "balance", "name"):
        assert client.patch(f"/api/savings/{account['id']}", json={field: None}).status_code == 422

    income = client.post("/api/cashflow/income", json={"name": "Salary", "monthly_amount": "3000"}).json()
    assert client.patch(f"/api/cashflow/income/{income['id']}", json={"monthly_amount": None}).status_code == 422

    expense = client.post("/api/cashflow/expenses", json={"name": "Rent", "monthly_amount": "1200"}).json()
    assert client.patch(f"/api/cashflow/expenses/{expense['id']}", json={"name": None}).status_code == 422
    assert client.patch(f"/api/cashflow/expenses/{expense['id']}", json={"provider": None}).status_code == 200


def create_renewal(client, **overrides):
    body = {"name": "Car Insurance", "provider": "Admiral", "total_cost": "650", "monthly_amount": "0"}
    body.update(overrides)
    response = client.post("/api/renewals/", json=body)
    assert response.status_code == 201, response.text
    return response.json()


def test_renewals_list_with_totals(client):
    soon = (date.today() + timedelta(days=5)).isoformat()
    later = (date.today() + timedelta(days=200)).isoformat()
    create_renewal(client, name="Broadband", total_cost="360", monthly_amount="30", agreement_end=later, person_or_address="Flat 2")
    create_renewal(client, agreement_end=soon, person_or_address="Sam")
    create_renewal(client, name="TV Licence", total_cost="169.50")

    body = client.get("/api/renewals/").json()
    assert [r["name"] for r in body["renewals"]] == ["Car Insurance", "Broadband", "TV Licence"]
    assert Decimal(body["annual_total"]) == Decimal("1179.50")
    assert Decimal(body["monthly_total"]) == Decimal("30")
    assert body["ending_soon"] == 1
    assert body["people"] == ["Flat 2", "Sam"]
    assert body["renewals"][0]["expiry"] == {"days_until_end": 5, "level": "urgent", "label": "5d"}
    assert body["renewals"][2]["expiry"] is None

    by_value = client.get("/api/renewals/", params={"sort": "value"}).json()
    assert [r["name"] for r in by_value["renewals"]] == ["Car Insurance", "Broadband", "TV Licence"]

    for_sam = client.get("/api/renewals/", params={"person": "Sam"}).json()
    assert for_sam["total"] == 1
    assert for_sam["people"] == ["Flat 2", "Sam"]


def test_renewal_validation_and_updates(client):
    bad = client.post(
        "/api/renewals/",
        json={"name": "Gym", "agreement_start": "2024-06-01", "agreement_end": "2024-01-01"},
    )
    assert bad.status_code == 422

    renewal = create_renewal(client, agreement_start="2024-06-01")
    assert client.patch(f"/api/renewals/{renewal['id']}", json={"agreement_end": "2024-01-01"}).status_code == 400
    assert client.patch(f"/api/renewals/{renewal['id']}", json={"total_cost": None}).status_code == 422

    response = client.patch(f"/api/renewals/{renewal['id']}", json={"total_cost": "700"})
    assert Decimal(response.json()["total_cost"]) == Decimal("700")

    assert client.delete(f"/api/renewals/{renewal['id']}").json() == {"ok": True}
    assert client.get(f"/api/renewals/{renewal['id']}").status_code == 404


def test_add_renewal_to_expenses(client):
    renewal = create_renewal(client)

    response = client.post(f"/api/renewals/{renewal['id']}/add-to-expenses")
    assert response.status_code == 201
    expense = response.json()
    assert expense["category"] == "subscriptions"
    assert expense["frequency"] == "annual"
    assert Decimal(expense["monthly_equivalent"]).quantize(Decimal("0.01")) == Decimal("54.17")

    linked = client.get(f"/api/renewals/{renewal['id']}").json()
    assert linked["added_to_expenses"] is True
    assert linked["linked_expense_id"] == expense["id"]
    assert client.post(f"/api/renewals/{renewal['id']}/add-to-expenses").status_code == 400

    client.delete(f"/api/cashflow/expenses/{expense['id']}")
    assert client.get(f"/api/renewals/{renewal['id']}").json()["added_to_expenses"] is False


def test_renewal_alerts_in_overview(client):
    ending = (date.today() + timedelta(days=20)).isoformat()
    renewal = create_renewal(client, agreement_end=ending)

    alerts = client.get("/api/overview/alerts").json()["alerts"]
    assert alerts == [
        {
            "id": f"renewal-{renewal['id']}",
            "type": "renewal_ending",
            "title": "Renewal Due Soon",
            "description": "Car Insurance: ends in 20 days",
            "severity": "warning",
            "debt_id": None,
            "renewal_id": renewal["id"],
        }
    ]
