import pytest
from agromarket.core.security import create_access_token
from tests.utils import auth_header


def signup(client, email, role="buyer"):
    response = client.post(
        "/api/v1/users/signup",
        json={"name": email.split("@")[0], "email": email, "password": "secret", "role": role},
    )
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
def farmer_token(client):
    return signup(client, "farmer@example.com", "farmer")["token"]


@pytest.fixture
def buyer_token(client):
    return signup(client, "buyer@example.com")["token"]


@pytest.fixture
def product(client, farmer_token):
    response = client.post(
        "/api/v1/products/",
        json={"name": "Tomatoes", "price": 10.0, "category": "Vegetables", "quantity": 5},
        headers=auth_header(farmer_token),
    )
    assert response.status_code == 201, response.text
    return response.json()


def place(client, token, items, headers=None):
    return client.post(
        "/api/v1/orders/",
        json={"items": [{"product_id": pid, "quantity": qty} for pid, qty in items]},
        headers=headers if headers is not None else auth_header(token),
    )


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["database"] == "healthy"


def test_signup_login_and_me(client):
    payload = signup(client, "ana@example.com")
    assert payload["user"]["role"] == "buyer"

    duplicate = client.post(
        "/api/v1/users/signup",
        json={"name": "Ana", "email": "ana@example.com", "password": "x"},
    )
    assert duplicate.status_code == 409
    assert duplicate.json()["error"] == "already_exists"

    bad_login = client.post("/api/v1/users/login", json={"email": "ana@example.com", "password": "nope"})
    assert bad_login.status_code == 401

    login = client.post("/api/v1/users/login", json={"email": "ana@example.com", "password": "secret"})
    assert login.status_code == 200
    me = client.get("/api/v1/users/me", headers=auth_header(login.json()["token"]))
    assert me.json()["email"] == "ana@example.com"
    assert "hashed_password" not in me.json()


def test_logout_requires_token(client, buyer_token):
    assert client.post("/api/v1/users/logout").status_code == 401
    response = client.post("/api/v1/users/logout", headers=auth_header(buyer_token))
    assert response.json() == {"success": True}


def test_product_defaults_and_listing(client, product):
    assert product["image"] == "default-product.jpg"

    listing = client.get("/api/v1/products/", params={"category": "Vegetables"}).json()
    assert listing["total"] == 1
    assert listing["products"][0]["seller"]["email"] == "farmer@example.com"

    assert client.get("/api/v1/products/", params={"category": "Fruits"}).json()["total"] == 0
    assert client.get("/api/v1/products/", params={"category": "Gadgets"}).status_code == 422

    by_seller = client.get(f"/api/v1/products/seller/{product['seller_id']}").json()
    assert [p["id"] for p in by_seller] == [product["id"]]


def test_only_farmers_create_products(client, buyer_token):
    response = client.post(
        "/api/v1/products/",
        json={"name": "Honey", "price": 4.0, "category": "Honey", "quantity": 3},
        headers=auth_header(buyer_token),
    )
    assert response.status_code == 403
    assert response.json()["error"] == "not_authorized"


def test_invalid_product_payload(client, farmer_token):
    response = client.post(
        "/api/v1/products/",
        json={"name": "Honey", "price": -1, "category": "Honey", "quantity": 3},
        headers=auth_header(farmer_token),
    )
    assert response.status_code == 422
    assert response.json()["error"] == "validation_error"


def test_only_owner_edits_or_deletes_product(client, product, buyer_token, farmer_token):
    url = f"/api/v1/products/{product['id']}"

    assert client.put(url, json={"price": 1.0}, headers=auth_header(buyer_token)).status_code == 403
    assert client.delete(url, headers=auth_header(buyer_token)).status_code == 403

    updated = client.put(url, json={"price": 12.0}, headers=auth_header(farmer_token))
    assert updated.status_code == 200
    assert updated.json()["price"] == 12.0
    assert updated.json()["name"] == "Tomatoes"

    assert client.delete(url, headers=auth_header(farmer_token)).json() == {"success": True}
    assert client.get(url).status_code == 404


def test_place_order_then_run_out_of_stock(client, product, buyer_token):
    first = place(client, buyer_token, [(product["id"], 3)])
    assert first.status_code == 201, first.text
    order = first.json()
    assert order["total"] == 30.0
    assert order["status"] == "pending"
    assert order["buyer"]["email"] == "buyer@example.com"
    assert order["items"][0]["product"]["name"] == "Tomatoes"
    assert order["items"][0]["price"] == 10.0

    second = place(client, buyer_token, [(product["id"], 3)])
    assert second.status_code == 409
    body = second.json()
    assert body["error"] == "insufficient_stock"
    assert body["available"] == 2
    assert body["requested"] == 3

    assert client.get(f"/api/v1/products/{product['id']}").json()["quantity"] == 2


def test_anonymous_or_bad_token_cannot_order(client, product):
    anonymous = place(client, None, [(product["id"], 1)], headers={})
    assert anonymous.status_code == 401
    assert anonymous.json()["error"] == "not_authenticated"
    assert anonymous.headers["www-authenticate"] == "Bearer"

    forged = place(client, None, [(product["id"], 1)], headers={"Authorization": "Bearer forged.token.value"})
    assert forged.status_code == 401

    assert client.get(f"/api/v1/products/{product['id']}").json()["quantity"] == 5


def test_quoted_token_is_accepted(client, product, buyer_token):
    response = place(client, None, [(product["id"], 1)], headers={"Authorization": f'"{buyer_token}"'})
    assert response.status_code == 201


def test_order_errors(client, product, buyer_token):
    empty = place(client, buyer_token, [])
    assert empty.status_code == 422
    assert empty.json()["error"] == "validation_error"

    zero = place(client, buyer_token, [(product["id"], 0)])
    assert zero.status_code == 422

    missing = place(client, buyer_token, [(product["id"], 1), (999, 1)])
    assert missing.status_code == 404
    assert missing.json()["error"] == "not_found"
    assert client.get(f"/api/v1/products/{product['id']}").json()["quantity"] == 5


def test_token_for_unknown_account_cannot_order(client, settings, product):
    token = create_access_token(
        {"sub": "999", "email": "ghost@example.com", "role": "buyer"},
        secret_key=settings.SECRET_KEY,
        algorithm=settings.ALGORITHM,
    )

    response = place(client, token, [(product["id"], 1)])
    assert response.status_code == 401
    assert response.json()["error"] == "not_authenticated"
    assert client.get(f"/api/v1/products/{product['id']}").json()["quantity"] == 5


def test_ids_beyond_integer_range_are_validation_errors(client, product, buyer_token, farmer_token):
    huge = 10 ** 20

    order = place(client, buyer_token, [(huge, 1)])
    assert order.status_code == 422
    assert order.json()["error"] == "validation_error"

    too_many = place(client, buyer_token, [(product["id"], huge)])
    assert too_many.status_code == 422

    assert client.get(f"/api/v1/products/{huge}").status_code == 422
    assert client.get(f"/api/v1/products/seller/{huge}").status_code == 422
    assert client.get(f"/api/v1/users/{huge}", headers=auth_header(buyer_token)).status_code == 422
    status_update = client.put(
        f"/api/v1/orders/{huge}/status", json={"status": "confirmed"}, headers=auth_header(farmer_token)
    )
    assert status_update.status_code == 422
    assert status_update.json()["error"] == "validation_error"
    assert client.get(f"/api/v1/products/{product['id']}").json()["quantity"] == 5


def test_status_updates(client, product, buyer_token, farmer_token):
    order_id = place(client, buyer_token, [(product["id"], 1)]).json()["id"]
    url = f"/api/v1/orders/{order_id}/status"

    by_buyer = client.put(url, json={"status": "confirmed"}, headers=auth_header(buyer_token))
    assert by_buyer.status_code == 403

    confirmed = client.put(url, json={"status": "confirmed"}, headers=auth_header(farmer_token))
    assert confirmed.status_code == 200
    assert confirmed.json()["status"] == "confirmed"

    backwards = client.put(url, json={"status": "pending"}, headers=auth_header(farmer_token))
    assert backwards.status_code == 409
    assert backwards.json()["error"] == "invalid_transition"

    unknown = client.put(url, json={"status": "lost"}, headers=auth_header(farmer_token))
    assert unknown.status_code == 422

    missing = client.put("/api/v1/orders/999/status", json={"status": "confirmed"}, headers=auth_header(farmer_token))
    assert missing.status_code == 404


def test_order_listings_and_dashboard(client, product, buyer_token, farmer_token):
    order_id = place(client, buyer_token, [(product["id"], 2)]).json()["id"]

    buyer_orders = client.get("/api/v1/orders/buyer", headers=auth_header(buyer_token)).json()
    assert [o["id"] for o in buyer_orders["orders"]] == [order_id]

    seller_orders = client.get("/api/v1/orders/seller", headers=auth_header(farmer_token)).json()
    assert [o["id"] for o in seller_orders["orders"]] == [order_id]
    assert client.get("/api/v1/orders/seller", headers=auth_header(buyer_token)).json()["total"] == 0

    for status in ("confirmed", "completed"):
        client.put(f"/api/v1/orders/{order_id}/status", json={"status": status}, headers=auth_header(farmer_token))

    stats = client.get("/api/v1/dashboard/stats", headers=auth_header(buyer_token)).json()
    assert stats["total_orders"] == 1
    assert stats["total_revenue"] == 20.0
    assert stats["active_listings"] == 1
    assert [o["id"] for o in stats["recent_transactions"]] == [order_id]

    transactions = client.get("/api/v1/orders/transactions", headers=auth_header(farmer_token))
    assert [o["id"] for o in transactions.json()] == [order_id]
    assert client.get("/api/v1/orders/transactions", headers=auth_header(buyer_token)).status_code == 403
    assert client.get("/api/v1/dashboard/stats").status_code == 401


def test_deleted_product_keeps_order_snapshot(client, product, buyer_token, farmer_token):
    order_id = place(client, buyer_token, [(product["id"], 1)]).json()["id"]
    client.delete(f"/api/v1/products/{product['id']}", headers=auth_header(farmer_token))

    orders = client.get("/api/v1/orders/buyer", headers=auth_header(buyer_token)).json()["orders"]
    item = orders[0]["items"][0]
    assert orders[0]["id"] == order_id
    assert item["product"] is None
    assert item["product_name"] == "Tomatoes"
    assert item["price"] == 10.0
