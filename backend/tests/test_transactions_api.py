from decimal import Decimal

from freightdesk.models import Customer, Transaction


def test_deposit_returns_created_transaction(client, auth_headers, make_customer):
    customer = make_customer(usd="10.00")
    response = client.post(
        "/transactions/",
        json={"customerId": customer.id, "type": "DEPOSIT", "amount": 40, "currency": "USD", "notes": "cash"},
        headers=auth_headers("ADMIN", actor_id=3),
    )
    assert response.status_code == 201, response.text
    body = response.json()
    assert body["type"] == "DEPOSIT"
    assert float(body["balance_before"]) == 10.0
    assert float(body["balance_after"]) == 50.0
    assert body["created_by"] == 3


def test_withdrawal_over_balance_leaves_balance_untouched(client, auth_headers, make_customer, db_session):
    customer = make_customer(usd="50.00")
    response = client.post(
        "/transactions/",
        json={"customerId": customer.id, "type": "WITHDRAWAL", "amount": 75, "currency": "USD"},
        headers=auth_headers("ADMIN"),
    )
    assert response.status_code == 400

    db_session.expire_all()
    assert db_session.get(Customer, customer.id).balance_usd == Decimal("50.00")
    assert db_session.query(Transaction).count() == 0


def test_invalid_payloads_are_bad_requests(client, auth_headers, make_customer):
    customer = make_customer()
    admin = auth_headers("ADMIN")
    bad_payloads = [
        {"customerId": customer.id, "type": "DEPOSIT", "amount": 0, "currency": "USD"},
        {"customerId": customer.id, "type": "DEPOSIT", "amount": 0.001, "currency": "USD"},
        {"customerId": customer.id, "type": "DEPOSIT", "amount": 10**13, "currency": "USD"},
        {"customerId": customer.id, "type": "BONUS", "amount": 5, "currency": "USD"},
        {"customerId": customer.id, "type": "DEPOSIT", "amount": 5, "currency": "EUR"},
        {"type": "DEPOSIT", "amount": 5, "currency": "USD"},
    ]
    for payload in bad_payloads:
        response = client.post("/transactions/", json=payload, headers=admin)
        assert response.status_code == 400, payload


def test_unknown_customer_is_not_found(client, auth_headers):
    response = client.post(
        "/transactions/",
        json={"customerId": 321, "type": "DEPOSIT", "amount": 5, "currency": "USD"},
        headers=auth_headers("ADMIN"),
    )
    assert response.status_code == 404


def test_warehouse_staff_cannot_post_transactions(client, auth_headers, make_customer):
    customer = make_customer()
    response = client.post(
        "/transactions/",
        json={"customerId": customer.id, "type": "DEPOSIT", "amount": 5, "currency": "USD"},
        headers=auth_headers("LIBYA_WAREHOUSE"),
    )
    assert response.status_code == 403


def test_list_requires_customer_and_filters(client, auth_headers, make_customer):
    customer = make_customer(usd="100.00")
    admin = auth_headers("ADMIN")
    for payload in (
        {"type": "DEPOSIT", "amount": 10, "currency": "USD", "notes": "bank transfer"},
        {"type": "WITHDRAWAL", "amount": 20, "currency": "USD", "notes": "refund to customer"},
        {"type": "DEPOSIT", "amount": 500, "currency": "LYD", "notes": "cash"},
    ):
        client.post("/transactions/", json={"customerId": customer.id, **payload}, headers=admin)

    assert client.get("/transactions/", headers=admin).status_code == 400

    everything = client.get("/transactions/", params={"customerId": customer.id}, headers=admin).json()
    assert [row["currency"] for row in everything] == ["LYD", "USD", "USD"]

    usd_deposits = client.get(
        "/transactions/",
        params={"customerId": customer.id, "currency": "USD", "type": "DEPOSIT"},
        headers=admin,
    ).json()
    assert len(usd_deposits) == 1
    assert usd_deposits[0]["notes"] == "bank transfer"

    searched = client.get(
        "/transactions/", params={"customerId": customer.id, "search": "REFUND"}, headers=admin
    ).json()
    assert [row["type"] for row in searched] == ["WITHDRAWAL"]


def test_customer_reads_only_own_ledger(client, auth_headers, make_customer):
    mine = make_customer(code="LY-1")
    theirs = make_customer(code="LY-2")
    headers = auth_headers("CUSTOMER", customer_id=mine.id)

    assert client.get("/transactions/", params={"customerId": mine.id}, headers=headers).status_code == 200
    assert client.get("/transactions/", params={"customerId": theirs.id}, headers=headers).status_code == 403
