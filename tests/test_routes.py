"""HTTP-level tests against the Flask app."""

from __future__ import annotations

import pytest

from ledgerwise import create_app


@pytest.fixture()
def app(tmp_path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("LEDGERWISE_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("LEDGERWISE_DATABASE_URL", f"sqlite:///{tmp_path / 'api.db'}")
    monkeypatch.setenv("LEDGERWISE_SECRET_KEY", "route-tests")
    monkeypatch.delenv("LEDGERWISE_AI_API_KEY", raising=False)
    return create_app("testing")


@pytest.fixture()
def client(app):
    with app.test_client() as client:
        yield client


def _login(client, email: str = "route@example.com") -> dict[str, str]:
    response = client.post(
        "/api/auth/register", json={"name": "Route", "email": email, "password": "secret1"}
    )
    assert response.status_code == 201
    response = client.post("/api/auth/login", json={"email": email, "password": "secret1"})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.get_json()['token']}"}


def test_routes_require_bearer_token(client):
    response = client.get("/api/networth")

    assert response.status_code == 401
    assert response.get_json()["error"] == "unauthorized"


def test_register_conflict_and_check_email(client):
    _login(client)

    duplicate = client.post(
        "/api/auth/register",
        json={"name": "Again", "email": "ROUTE@example.com", "password": "secret1"},
    )
    assert duplicate.status_code == 409
    assert client.get("/api/auth/check-email?email=route@example.com").get_json() == {"exists": True}


def test_profile_hides_password_hash(client):
    headers = _login(client)

    body = client.get("/api/auth/profile", headers=headers).get_json()

    assert body["email"] == "route@example.com"
    assert "passwordHash" not in body and "password_hash" not in body


def test_foreign_user_id_is_forbidden(client):
    headers = _login(client)
    profile = client.get("/api/auth/profile", headers=headers).get_json()

    response = client.get(f"/api/networth?userId={profile['id'] + 1}", headers=headers)

    assert response.status_code == 403


def test_transaction_flow_updates_net_worth(client):
    headers = _login(client)
    asset = client.post(
        "/api/assets",
        json={"name": "Checking", "type": "BankAccount", "value": 1000},
        headers=headers,
    )
    assert asset.status_code == 201
    asset_id = asset.get_json()["id"]

    created = client.post(
        "/api/transactions",
        json={
            "amount": 200,
            "description": "Groceries",
            "category": "Food",
            "type": "Expense",
            "date": "2024-06-01T10:00:00Z",
            "paymentMethod": "BankAccount",
            "sourceAssetId": asset_id,
        },
        headers=headers,
    )
    assert created.status_code == 201
    tx = created.get_json()
    assert tx["amount"] == 200.0
    assert tx["date"] == "2024-06-01T10:00:00"
    assert tx["paymentMethod"] == "BankAccount"

    assert client.get(f"/api/assets/{asset_id}", headers=headers).get_json()["value"] == 800.0

    net_worth = client.get("/api/networth", headers=headers).get_json()
    assert net_worth["totalAssets"] == 600.0
    assert net_worth["transactionBalance"] == -200.0
    assert net_worth["netWorth"] == 600.0

    deleted = client.delete(f"/api/transactions/{tx['id']}", headers=headers)
    assert deleted.status_code == 204
    assert client.get(f"/api/assets/{asset_id}", headers=headers).get_json()["value"] == 1000.0


def test_transaction_stays_editable_after_its_asset_is_deleted(client):
    headers = _login(client)
    asset_id = client.post(
        "/api/assets",
        json={"name": "Checking", "type": "BankAccount", "value": 1000},
        headers=headers,
    ).get_json()["id"]
    tx_id = client.post(
        "/api/transactions",
        json={
            "amount": 50,
            "description": "Groceries",
            "category": "Food",
            "type": "Expense",
            "paymentMethod": "BankAccount",
            "sourceAssetId": asset_id,
        },
        headers=headers,
    ).get_json()["id"]

    assert client.delete(f"/api/assets/{asset_id}", headers=headers).status_code == 204

    current = client.get(f"/api/transactions/{tx_id}", headers=headers).get_json()
    assert current["paymentMethod"] == "Other"
    assert current["sourceAssetId"] is None

    current["description"] = "Weekly groceries"
    response = client.put(f"/api/transactions/{tx_id}", json=current, headers=headers)

    assert response.status_code == 200
    assert response.get_json()["description"] == "Weekly groceries"


def test_transaction_validation_errors_are_json(client):
    headers = _login(client)

    response = client.post(
        "/api/transactions",
        json={"amount": -5, "description": "", "category": "Food", "type": "Expense"},
        headers=headers,
    )

    assert response.status_code == 400
    body = response.get_json()
    assert body["error"] == "validation_failed"
    assert set(body["fields"]) >= {"amount", "description"}


def test_transaction_summary_and_missing_record(client):
    headers = _login(client)
    client.post(
        "/api/transactions",
        json={"amount": 50, "description": "Pay", "category": "Salary", "type": "Income"},
        headers=headers,
    )

    summary = client.get("/api/transactions/summary", headers=headers).get_json()
    assert summary == {"income": 50.0, "expenses": 0.0, "balance": 50.0, "transactionCount": 1}
    assert client.get("/api/transactions/9999", headers=headers).status_code == 404


def test_liability_totals(client):
    headers = _login(client)
    client.post(
        "/api/liabilities",
        json={"name": "Visa", "type": "CreditCard", "currentBalance": 300, "creditLimit": 5000},
        headers=headers,
    )

    assert client.get("/api/liabilities/total-debt", headers=headers).get_json() == {"totalDebt": 300.0}
    net_worth = client.get("/api/networth", headers=headers).get_json()
    assert net_worth["creditUtilization"] == 6.0


def test_spending_patterns_month_bounds(client):
    headers = _login(client)

    assert client.get("/api/finance/spending-patterns?months=0", headers=headers).status_code == 400
    assert client.get("/api/finance/spending-patterns?months=25", headers=headers).status_code == 400
    ok = client.get("/api/finance/spending-patterns?months=6", headers=headers)
    assert ok.status_code == 200
    assert ok.get_json()["analysisPeriod"] == 6


def test_spending_patterns_keep_spend_order(client):
    headers = _login(client)
    for category, amount in (("Alpha", 10), ("Zeta", 500)):
        response = client.post(
            "/api/transactions",
            json={"amount": amount, "description": category, "category": category, "type": "Expense"},
            headers=headers,
        )
        assert response.status_code == 201

    body = client.get("/api/finance/spending-patterns?months=3", headers=headers).get_json()

    assert body["mostSpentCategory"] == "Zeta"
    assert list(body["categoryPatterns"]) == ["Zeta", "Alpha"]


def test_finance_endpoints_without_provider(client):
    headers = _login(client)

    advice = client.get("/api/finance/advice", headers=headers).get_json()
    assert advice["advice"].startswith("Start recording")

    report = client.get("/api/finance/smart-anomalies", headers=headers).get_json()
    assert report["totalAnomalies"] == 0

    assert client.get("/api/finance/recommendations", headers=headers).get_json() == []

    chat = client.post("/api/finance/chat", json={"message": "Hi"}, headers=headers).get_json()
    assert chat["response"] == "AI provider is not configured."

    bad_summary = client.get(
        "/api/finance/summary?startDate=2024-02-01&endDate=2024-01-01", headers=headers
    )
    assert bad_summary.status_code == 400


def test_cli_commands(app, client):
    headers = _login(client)
    user_id = client.get("/api/auth/profile", headers=headers).get_json()["id"]
    runner = app.test_cli_runner()

    init = runner.invoke(args=["ledgerwise-init-db"])
    assert init.exit_code == 0
    assert "Database initialized." in init.output

    recompute = runner.invoke(args=["ledgerwise-recompute", "--user-id", str(user_id)])
    assert recompute.exit_code == 0
    assert "Recomputed 0 asset(s) and 0 liability(ies)." in recompute.output
