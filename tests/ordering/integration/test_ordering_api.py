"""Integration tests for the Ordering API endpoints via TestClient."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from ordering.api.errors import register_error_handlers
from ordering.api.routes import (
    address_router,
    cart_router,
    checkout_router,
    order_router,
    promo_router,
    saved_cart_router,
)
from ordering.order.lifecycle import OrderStatus
from ordering.order.order import load_order


@pytest.fixture()
def client():
    app = FastAPI()
    register_error_handlers(app)
    for router in (cart_router, saved_cart_router, address_router, promo_router, checkout_router, order_router):
        app.include_router(router)
    return TestClient(app)


def _add_item(client, customer_id, menu_item_id, quantity=1, selections=None):
    payload = {"customer_id": customer_id, "menu_item_id": menu_item_id, "quantity": quantity}
    if selections:
        payload["selections"] = selections
    response = client.post("/cart/items", json=payload)
    assert response.status_code == 201
    return response.json()


def _create_order(client, customer_id, address_id, **overrides):
    payload = {
        "customer_id": customer_id,
        "delivery_address_id": address_id,
        "payment_method": "CARD",
        "tax": 1.5,
        "delivery_fee": 2.5,
    }
    payload.update(overrides)
    return client.post("/checkout/create-order", json=payload)


@pytest.fixture()
def placed_order(client, customer_id, menu_item, address):
    _add_item(client, customer_id, menu_item.id, quantity=2)
    response = _create_order(client, customer_id, address.id)
    assert response.status_code == 201
    return response.json()


class TestCartEndpoints:
    def test_add_and_view_cart(self, client, customer_id, menu_item, toppings):
        add_on, cheese, _ = toppings
        line = _add_item(
            client,
            customer_id,
            menu_item.id,
            quantity=2,
            selections={"add_ons": [{"add_on_id": add_on.id, "selected_option_ids": [cheese.id]}]},
        )
        assert line["quantity"] == 2

        response = client.get("/cart", params={"customer_id": customer_id})

        assert response.status_code == 200
        body = response.json()
        assert body["subtotal"] == "27.00"
        assert body["item_count"] == 2
        assert body["lines"][0]["unit_price"] == "13.50"
        assert body["lines"][0]["selections"]["add_ons"][0]["selected_option_ids"] == [cheese.id]

    def test_empty_cart_view(self, client, customer_id):
        body = client.get("/cart", params={"customer_id": customer_id}).json()
        assert body["lines"] == []
        assert body["subtotal"] == "0.00"

    def test_update_and_remove_line(self, client, customer_id, menu_item):
        line = _add_item(client, customer_id, menu_item.id)

        response = client.patch(f"/cart/items/{line['line_id']}", json={"customer_id": customer_id, "quantity": 4})
        assert response.json()["quantity"] == 4

        response = client.delete(f"/cart/items/{line['line_id']}", params={"customer_id": customer_id})
        assert response.status_code == 200
        assert client.get("/cart", params={"customer_id": customer_id}).json()["lines"] == []

    def test_unknown_line(self, client, customer_id, menu_item):
        _add_item(client, customer_id, menu_item.id)
        response = client.patch("/cart/items/line-missing", json={"customer_id": customer_id, "quantity": 2})
        assert response.status_code == 404
        assert response.json()["message"] == "Cart item not found"

    def test_zero_quantity_is_rejected(self, client, customer_id, menu_item):
        response = client.post(
            "/cart/items",
            json={"customer_id": customer_id, "menu_item_id": menu_item.id, "quantity": 0},
        )
        assert response.status_code == 400
        body = response.json()
        assert body["message"] == "Validation failed"
        assert "quantity" in body["errors"]

    def test_unknown_menu_item(self, client, customer_id):
        response = client.post("/cart/items", json={"customer_id": customer_id, "menu_item_id": "item-missing"})
        assert response.status_code == 404
        assert response.json() == {"message": "Menu item not found", "errors": {"menu_item_id": ["item-missing"]}}


class TestSavedCartAndAddressEndpoints:
    def test_save_and_restore(self, client, customer_id, menu_item):
        _add_item(client, customer_id, menu_item.id, quantity=2)

        saved = client.post("/saved-carts", json={"customer_id": customer_id, "name": "Friday"})
        assert saved.status_code == 201
        client.delete("/cart", params={"customer_id": customer_id})

        response = client.post(
            f"/saved-carts/{saved.json()['saved_cart_id']}/restore",
            json={"customer_id": customer_id},
        )
        assert response.json()["items_added"] == 1

    def test_add_and_list_addresses(self, client, customer_id):
        response = client.post(
            "/addresses",
            json={"customer_id": customer_id, "address_line": "4 Elm Row", "city": "Springfield"},
        )
        assert response.status_code == 201

        addresses = client.get("/addresses", params={"customer_id": customer_id}).json()
        assert len(addresses) == 1
        assert addresses[0]["is_default"] is True


class TestPromoEndpoints:
    def test_apply_valid_code(self, client, promo_10):
        body = client.post("/promo-codes/apply", json={"code": "SAVE10"}).json()
        assert body["valid"] is True
        assert body["promo_code_id"] == promo_10.id
        assert body["discount_percentage"] == "10"

    def test_apply_unknown_code(self, client):
        body = client.post("/promo-codes/apply", json={"code": "NOPE"}).json()
        assert body["valid"] is False
        assert body["reason"]

    def test_available_codes(self, client, promo_10):
        promos = client.get("/promo-codes/available").json()
        assert [promo["code"] for promo in promos] == ["SAVE10"]
        assert promos[0]["discount_percentage"] == "10"


class TestCheckoutEndpoints:
    def test_create_order(self, client, customer_id, menu_item, address, promo_10):
        _add_item(client, customer_id, menu_item.id, quantity=2)

        response = _create_order(client, customer_id, address.id, promo_code_id=promo_10.id)

        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "PENDING"
        assert body["payment_status"] == "PENDING"
        assert body["subtotal"] == "25.00"
        assert body["discount"] == "2.50"
        assert body["total"] == "26.50"
        assert body["order_number"].startswith("#")
        assert body["lines"][0]["item_name"] == "Margherita"

    def test_empty_cart(self, client, customer_id, address):
        response = _create_order(client, customer_id, address.id)
        assert response.status_code == 400
        assert response.json() == {"message": "Cart is empty"}

    def test_mixed_restaurants(self, client, customer_id, menu_item, other_menu_item, address):
        _add_item(client, customer_id, menu_item.id)
        _add_item(client, customer_id, other_menu_item.id)

        response = _create_order(client, customer_id, address.id)

        assert response.status_code == 400
        assert response.json()["errors"] == {"restaurant_ids": ["rest-001", "rest-002"]}

    def test_unknown_payment_method(self, client, customer_id, menu_item, address):
        _add_item(client, customer_id, menu_item.id)
        response = _create_order(client, customer_id, address.id, payment_method="CHEQUE")
        assert response.status_code == 400
        assert "payment_method" in response.json()["errors"]

    def test_idempotent_retry(self, client, customer_id, menu_item, address):
        _add_item(client, customer_id, menu_item.id)

        first = _create_order(client, customer_id, address.id, idempotency_key="web-1")
        second = _create_order(client, customer_id, address.id, idempotency_key="web-1")

        assert first.json()["id"] == second.json()["id"]

    def test_summary(self, client, customer_id, menu_item, address):
        _add_item(client, customer_id, menu_item.id, quantity=2)

        body = client.get("/checkout/summary", params={"customer_id": customer_id}).json()

        assert body["subtotal"] == "25.00"
        assert body["can_checkout"] is True
        assert body["restaurants"][0]["restaurant_id"] == menu_item.restaurant_id


class TestOrderEndpoints:
    def test_get_order(self, client, placed_order):
        response = client.get(f"/orders/{placed_order['id']}")
        assert response.status_code == 200
        assert response.json()["order_number"] == placed_order["order_number"]

    def test_unknown_order(self, client):
        response = client.get("/orders/ord-missing")
        assert response.status_code == 404
        assert response.json()["message"] == "Order not found"

    def test_cancellation_reasons(self, client):
        reasons = client.get("/orders/cancellation-reasons").json()["reasons"]
        assert "Changed my mind" in reasons

    def test_cancel(self, client, placed_order, customer_id):
        response = client.post(
            "/orders/cancel",
            json={"order_id": placed_order["id"], "customer_id": customer_id, "reason": "Changed my mind"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "CANCELLED"
        assert body["refund_initiated"] is False

    def test_cancel_someone_elses_order(self, client, placed_order):
        response = client.post(
            "/orders/cancel",
            json={"order_id": placed_order["id"], "customer_id": "cust-999", "reason": "Changed my mind"},
        )
        assert response.status_code == 403
        assert load_order(placed_order["id"]).status == OrderStatus.PENDING.value

    def test_restaurant_flow(self, client, placed_order, restaurant_id):
        order_id = placed_order["id"]

        accepted = client.post(f"/orders/{order_id}/accept", json={"restaurant_id": restaurant_id})
        assert accepted.json()["status"] == "ACCEPTED"

        preparing = client.patch(
            f"/orders/{order_id}/status",
            json={"restaurant_id": restaurant_id, "status": "PREPARING"},
        )
        assert preparing.json()["status"] == "PREPARING"

        backwards = client.patch(
            f"/orders/{order_id}/status",
            json={"restaurant_id": restaurant_id, "status": "ACCEPTED"},
        )
        assert backwards.status_code == 400

    def test_decline(self, client, placed_order, restaurant_id):
        response = client.post(
            f"/orders/{placed_order['id']}/decline",
            json={"restaurant_id": restaurant_id, "reason": "Kitchen closed"},
        )
        body = response.json()
        assert body["order"]["status"] == "REJECTED"
        assert body["order"]["rejection_reason"] == "Kitchen closed"

    def test_refund(self, client, placed_order, gateway):
        client.post(f"/orders/{placed_order['id']}/payment", json={"payment_reference": "pi_123"})

        response = client.post(f"/orders/{placed_order['id']}/refund", json={"actor_role": "ADMIN"})

        assert response.status_code == 200
        assert response.json()["amount"] == "29.00"
        assert response.json()["cash_on_delivery"] is False

    def test_refund_gateway_failure(self, client, placed_order, gateway):
        client.post(f"/orders/{placed_order['id']}/payment", json={"payment_reference": "pi_123"})
        gateway.configure(should_raise=True)

        response = client.post(f"/orders/{placed_order['id']}/refund", json={"actor_role": "ADMIN"})

        assert response.status_code == 502
        assert "message" in response.json()

    def test_reorder(self, client, placed_order, customer_id):
        client.post(
            "/orders/cancel",
            json={"order_id": placed_order["id"], "customer_id": customer_id, "reason": "Changed my mind"},
        )

        response = client.post("/orders/reorder", json={"order_id": placed_order["id"], "customer_id": customer_id})

        assert response.status_code == 200
        assert response.json()["message"] == "1 items added to cart"

    def test_reorder_pending_order(self, client, placed_order, customer_id):
        response = client.post("/orders/reorder", json={"order_id": placed_order["id"], "customer_id": customer_id})
        assert response.status_code == 400
        assert response.json()["message"] == "Can only reorder from delivered or cancelled orders"


class TestOrderHistoryEndpoints:
    def test_list_orders(self, client, placed_order, customer_id):
        response = client.get("/orders/list", params={"customer_id": customer_id})

        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 1
        assert body["limit"] == 10
        assert body["offset"] == 0
        summary = body["data"][0]
        assert summary["id"] == placed_order["id"]
        assert summary["order_number"] == placed_order["order_number"]
        assert summary["status"] == "PENDING"
        assert summary["total"] == "29.00"
        assert summary["item_count"] == 1

    def test_list_with_status_filter(self, client, placed_order, customer_id):
        response = client.get("/orders/list", params={"customer_id": customer_id, "status": "DELIVERED"})
        assert response.json()["total"] == 0

    def test_unknown_status_filter(self, client, customer_id):
        response = client.get("/orders/list", params={"customer_id": customer_id, "status": "LOST"})
        assert response.status_code == 400

    def test_bad_limit(self, client, customer_id):
        response = client.get("/orders/list", params={"customer_id": customer_id, "limit": 0})
        assert response.status_code == 400
        assert "limit" in response.json()["errors"]

    def test_active_and_past(self, client, placed_order, customer_id):
        active = client.get("/orders/active", params={"customer_id": customer_id}).json()
        assert [o["id"] for o in active["data"]] == [placed_order["id"]]

        client.post(
            "/orders/cancel",
            json={"order_id": placed_order["id"], "customer_id": customer_id, "reason": "Changed my mind"},
        )

        assert client.get("/orders/active", params={"customer_id": customer_id}).json()["total"] == 0
        past = client.get("/orders/past", params={"customer_id": customer_id}).json()
        assert past["data"][0]["status"] == "CANCELLED"

    def test_restaurant_orders_and_accepted_queue(self, client, placed_order, restaurant_id):
        orders = client.get(f"/orders/restaurant/{restaurant_id}").json()
        assert orders["total"] == 1
        assert orders["limit"] == 50
        assert client.get(f"/orders/restaurant/{restaurant_id}/accepted").json()["total"] == 0

        client.post(f"/orders/{placed_order['id']}/accept", json={"restaurant_id": restaurant_id})

        queue = client.get(f"/orders/restaurant/{restaurant_id}/accepted").json()
        assert [o["id"] for o in queue["data"]] == [placed_order["id"]]
        pending = client.get(f"/orders/restaurant/{restaurant_id}", params={"status": "PENDING"}).json()
        assert pending["total"] == 0

    def test_reorder_preview(self, client, placed_order, customer_id, menu_item):
        response = client.get(f"/orders/{placed_order['id']}/reorder-preview", params={"customer_id": customer_id})

        assert response.status_code == 200
        body = response.json()
        assert body["order_number"] == placed_order["order_number"]
        assert body["can_reorder"] is False
        assert body["total"] == "29.00"
        assert body["lines"] == [
            {
                "menu_item_id": menu_item.id,
                "item_name": "Margherita",
                "unit_price": "12.50",
                "quantity": 2,
                "special_notes": None,
                "selections": {"variations": [], "add_ons": []},
            }
        ]

    def test_reorder_preview_of_someone_elses_order(self, client, placed_order):
        response = client.get(f"/orders/{placed_order['id']}/reorder-preview", params={"customer_id": "cust-999"})
        assert response.status_code == 403
