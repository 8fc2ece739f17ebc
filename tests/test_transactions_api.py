from decimal import Decimal

import pytest


def transaction_payload(**overrides):
    payload = {
        "amount": 42.5,
        "transaction_type": "expense",
        "category": "food",
        "description": "Groceries",
        "transaction_date": "2024-01-15",
    }
    payload.update(overrides)
    return payload


def create(client, headers, **overrides):
    response = client.post("/transactions/", json=transaction_payload(**overrides), headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


def test_create_transaction(client, auth_headers):
    data = create(client, auth_headers, tags=[" weekly ", "", "groceries"], payment_method="card")

    assert Decimal(str(data["amount"])) == Decimal("42.50")
    assert data["transaction_type"] == "expense"
    assert data["payment_method"] == "card"
    assert data["tags"] == ["weekly", "groceries"]
    assert data["currency"] == "USD"
    assert data["is_recurring"] is False


@pytest.mark.parametrize("overrides", [
    {"amount": 0},
    {"amount": -5},
    {"transaction_type": "transfer"},
    {"category": ""},
    {"description": "x" * 201},
])
def test_create_transaction_validation(client, auth_headers, overrides):
    response = client.post("/transactions/", json=transaction_payload(**overrides), headers=auth_headers)

    assert response.status_code == 422


def test_read_transaction_is_owner_scoped(client, auth_headers, make_user):
    created = create(client, auth_headers)
    stranger = {"X-User-Id": str(make_user().id)}

    assert client.get(f"/transactions/{created['id']}", headers=auth_headers).status_code == 200
    assert client.get(f"/transactions/{created['id']}", headers=stranger).status_code == 404


def test_update_transaction(client, auth_headers):
    created = create(client, auth_headers)

    response = client.put(
        f"/transactions/{created['id']}",
        json={"amount": 60, "category": "dining", "transaction_type": "income"},
        headers=auth_headers,
    )

    assert response.status_code == 200
    data = response.json()
    assert Decimal(str(data["amount"])) == Decimal("60")
    assert data["category"] == "dining"
    assert data["transaction_type"] == "income"
    assert data["description"] == "Groceries"


def test_update_without_fields_is_rejected(client, auth_headers):
    created = create(client, auth_headers)

    assert client.put(f"/transactions/{created['id']}", json={}, headers=auth_headers).status_code == 400


def test_update_rejects_null_for_required_fields(client, auth_headers):
    created = create(client, auth_headers, tags=["weekly"], comments="split with Sam")

    for field in ("tags", "category", "amount", "payment_method"):
        response = client.put(f"/transactions/{created['id']}", json={field: None}, headers=auth_headers)
        assert response.status_code == 400
        assert field in response.json()["detail"]

    listing = client.get("/transactions/", headers=auth_headers)
    assert listing.status_code == 200
    assert listing.json()["transactions"][0]["tags"] == ["weekly"]


def test_update_can_clear_optional_fields(client, auth_headers):
    created = create(client, auth_headers, comments="split with Sam",
                     is_recurring=True, recurring_frequency="monthly")

    response = client.put(
        f"/transactions/{created['id']}",
        json={"comments": None, "recurring_frequency": None, "is_recurring": False},
        headers=auth_headers,
    )

    assert response.status_code == 200
    data = response.json()
    assert data["comments"] is None
    assert data["recurring_frequency"] is None
    assert data["is_recurring"] is False


def test_delete_is_soft(client, auth_headers, db_session):
    from expense_tracker.db.core import TransactionDB

    created = create(client, auth_headers)

    response = client.delete(f"/transactions/{created['id']}", headers=auth_headers)

    assert response.status_code == 200
    assert client.get(f"/transactions/{created['id']}", headers=auth_headers).status_code == 404
    assert client.put(f"/transactions/{created['id']}", json={"amount": 1}, headers=auth_headers).status_code == 404
    assert client.delete(f"/transactions/{created['id']}", headers=auth_headers).status_code == 404

    stored = db_session.get(TransactionDB, created["id"])
    assert stored is not None
    assert stored.is_deleted is True


def test_list_transactions_newest_first_with_pagination(client, auth_headers):
    for day in range(1, 26):
        create(client, auth_headers, transaction_date=f"2024-01-{day:02d}")

    first_page = client.get("/transactions/", params={"limit": 10}, headers=auth_headers).json()
    last_page = client.get("/transactions/", params={"limit": 10, "page": 3}, headers=auth_headers).json()

    assert first_page["pagination"] == {"current": 1, "pages": 3, "total": 25}
    assert first_page["transactions"][0]["transaction_date"] == "2024-01-25"
    assert len(last_page["transactions"]) == 5
    assert last_page["transactions"][-1]["transaction_date"] == "2024-01-01"


def test_list_transactions_filters(client, auth_headers):
    create(client, auth_headers, category="food", transaction_date="2024-01-05")
    create(client, auth_headers, category="rent", transaction_date="2024-01-20")
    create(client, auth_headers, transaction_type="income", category="salary",
           description="Payroll", transaction_date="2024-02-01")
    deleted = create(client, auth_headers, category="food", transaction_date="2024-01-06")
    client.delete(f"/transactions/{deleted['id']}", headers=auth_headers)

    def categories(**params):
        body = client.get("/transactions/", params=params, headers=auth_headers).json()
        return sorted(t["category"] for t in body["transactions"])

    assert categories() == ["food", "rent", "salary"]
    assert categories(type="expense") == ["food", "rent"]
    assert categories(type="income") == ["salary"]
    assert categories(type="all") == ["food", "rent", "salary"]
    assert categories(category="food") == ["food"]
    assert categories(category="all") == ["food", "rent", "salary"]
    assert categories(date_from="2024-01-05", date_to="2024-01-20") == ["food", "rent"]


def test_search_matches_description_category_and_tags(client, auth_headers):
    create(client, auth_headers, description="Weekly SHOP", category="food")
    create(client, auth_headers, description="Bus pass", category="Transport")
    create(client, auth_headers, description="Cinema", category="fun", tags=["date-night"])

    def descriptions(search):
        body = client.get("/transactions/", params={"search": search}, headers=auth_headers).json()
        return [t["description"] for t in body["transactions"]]

    assert descriptions("shop") == ["Weekly SHOP"]
    assert descriptions("transport") == ["Bus pass"]
    assert descriptions("night") == ["Cinema"]


def test_transaction_stats(client, auth_headers):
    create(client, auth_headers, amount=100, category="food", transaction_date="2024-01-10")
    create(client, auth_headers, amount=50, category="food", transaction_date="2024-02-10")
    create(client, auth_headers, amount=300, category="rent", transaction_date="2024-01-01")
    create(client, auth_headers, amount=2000, transaction_type="income", category="salary",
           description="Payroll", transaction_date="2024-01-31")
    deleted = create(client, auth_headers, amount=999, category="rent", transaction_date="2024-01-02")
    client.delete(f"/transactions/{deleted['id']}", headers=auth_headers)

    response = client.get("/transactions/stats", headers=auth_headers)

    assert response.status_code == 200
    stats = response.json()

    overview = {row["transaction_type"]: row for row in stats["overview"]}
    assert Decimal(str(overview["expense"]["total"])) == Decimal("450")
    assert overview["expense"]["count"] == 3
    assert Decimal(str(overview["income"]["total"])) == Decimal("2000")

    assert [row["category"] for row in stats["categories"]] == ["rent", "food"]
    assert stats["categories"][1]["count"] == 2

    monthly = [(row["year"], row["month"], row["transaction_type"], Decimal(str(row["total"])))
               for row in stats["monthly"]]
    assert monthly == [
        (2024, 1, "expense", Decimal("400")),
        (2024, 1, "income", Decimal("2000")),
        (2024, 2, "expense", Decimal("50")),
    ]


def test_transaction_stats_date_range(client, auth_headers):
    create(client, auth_headers, amount=100, transaction_date="2024-01-10")
    create(client, auth_headers, amount=50, transaction_date="2024-02-10")

    stats = client.get("/transactions/stats", params={"date_from": "2024-02-01"}, headers=auth_headers).json()

    assert len(stats["overview"]) == 1
    assert Decimal(str(stats["overview"][0]["total"])) == Decimal("50")
