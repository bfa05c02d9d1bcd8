# Overview: Pytest coverage for cart-to-order checkout and customer order actions.

"""
Checkout Tests

Verifies:
- Empty cart / foreign brand / missing shipping are rejected with 400
- Insufficient stock leaves no Order and no Inventory change (atomicity)
- BankCard completes at once and takes stock; COD/BankTransfer stay Pending
- Order total equals the sum of its line snapshots
- Checked-out lines leave the cart; other brands' lines stay
- Customer cancel restores stock and marks the payment Cancelled
"""

from decimal import Decimal

import pytest

from haki.extensions import db
from haki.models import Cart, CartItem, Customer, Inventory, Order, Payment
from haki.services import inventory_service, order_service
from haki.services.auth_service import hash_password
from haki.validation import ValidationError

from conftest import auth_headers, get_customer_token, make_product


SHIPPING = {"full_name": "Nguyễn Văn A", "phone": "0900000000", "address": "1 Lê Lợi, Quận 1"}


def _add(client, headers, product, quantity):
    return client.post("/api/cart/add", json={"product_id": product.id, "quantity": quantity}, headers=headers)


def _checkout(client, headers, brand, method="BankCard", **extra):
    body = {"brand_id": brand.id, "payment_method": method, **SHIPPING}
    body.update(extra)
    return client.post("/api/order/create", json=body, headers=headers)


class TestCheckoutValidation:
    def test_empty_cart(self, client, customer_headers, brand_a):
        resp = _checkout(client, customer_headers, brand_a)
        assert resp.status_code == 400
        assert resp.json["message"] == "Giỏ hàng trống hoặc không tồn tại."

    def test_empty_cart_reported_before_other_problems(self, client, customer_headers):
        resp = client.post("/api/order/create", json={}, headers=customer_headers)
        assert resp.status_code == 400
        assert resp.json["message"] == "Giỏ hàng trống hoặc không tồn tại."

    def test_no_lines_for_brand(self, client, customer_headers, product_a, brand_b):
        _add(client, customer_headers, product_a, 1)
        resp = _checkout(client, customer_headers, brand_b)
        assert resp.status_code == 400
        assert db.session.query(Order).count() == 0

    def test_unknown_payment_method(self, client, customer_headers, product_a, brand_a):
        _add(client, customer_headers, product_a, 1)
        resp = _checkout(client, customer_headers, brand_a, method="Bitcoin")
        assert resp.status_code == 400
        assert resp.json["message"] == "Phương thức thanh toán không hợp lệ."

    def test_missing_shipping_without_default_address(self, client, customer_headers, product_a, brand_a):
        _add(client, customer_headers, product_a, 1)
        resp = client.post(
            "/api/order/create",
            json={"brand_id": brand_a.id, "payment_method": "COD"},
            headers=customer_headers,
        )
        assert resp.status_code == 400
        assert resp.json["message"] == "Vui lòng điền đầy đủ thông tin giao hàng."

    def test_back_office_user_cannot_checkout(self, client, owner_a_headers, brand_a):
        resp = _checkout(client, owner_a_headers, brand_a)
        assert resp.status_code == 403

    def test_requires_login(self, client, brand_a):
        resp = client.post("/api/order/create", json={"brand_id": brand_a.id})
        assert resp.status_code == 401


class TestCheckoutStock:
    def test_insufficient_stock_changes_nothing(self, client, customer, customer_headers, product_a, brand_a):
        _add(client, customer_headers, product_a, 3)
        # Stock drops below the cart quantity after the item was added
        inventory_service.set_stock(product_a.id, 2)

        resp = _checkout(client, customer_headers, brand_a)
        assert resp.status_code == 400
        assert resp.json["message"] == "Sản phẩm Product A không đủ tồn kho."

        assert db.session.query(Order).count() == 0
        assert db.session.query(Payment).count() == 0
        assert inventory_service.get_stock(product_a.id) == 2
        cart = db.session.query(Cart).filter_by(customer_id=customer.id).one()
        assert [item.quantity for item in cart.items] == [3]

    def test_one_short_line_aborts_whole_order(self, client, customer_headers, brand_a):
        plenty = make_product(brand_a, name="Plenty", stock=10)
        scarce = make_product(brand_a, name="Scarce", stock=1)
        _add(client, customer_headers, plenty, 4)
        _add(client, customer_headers, scarce, 1)
        inventory_service.set_stock(scarce.id, 0)

        resp = _checkout(client, customer_headers, brand_a)
        assert resp.status_code == 400
        assert inventory_service.get_stock(plenty.id) == 10
        assert inventory_service.get_stock(scarce.id) == 0

    def test_decrement_refuses_to_oversell(self, app, product_a):
        """Conditional UPDATE matches no row when stock is short."""
        with pytest.raises(ValidationError):
            inventory_service.decrement([(product_a.id, 6, product_a.name)])
        db.session.rollback()
        assert inventory_service.get_stock(product_a.id) == 5

    def test_second_checkout_for_last_units_fails(self, client, customer_headers, product_a, brand_a):
        """Both carts fit the stock on their own; only the first checkout gets it."""
        other = Customer(
            name="Khách 2",
            email="other@haki.test",
            password_hash=hash_password("Password123!"),
            is_email_verified=True,
        )
        db.session.add(other)
        db.session.commit()
        other_headers = auth_headers(get_customer_token(client, other.email))

        _add(client, customer_headers, product_a, 4)
        _add(client, other_headers, product_a, 3)

        assert _checkout(client, customer_headers, brand_a).status_code == 201
        resp = _checkout(client, other_headers, brand_a)
        assert resp.status_code == 400
        assert inventory_service.get_stock(product_a.id) == 1
        assert db.session.query(Order).count() == 1


class TestCheckoutPayment:
    def test_bank_card_scenario(self, client, customer, customer_headers, product_a, brand_a):
        """Stock 5, buy 3 by card: order Completed, stock 2, cart gone."""
        assert _add(client, customer_headers, product_a, 3).status_code == 200

        resp = _checkout(client, customer_headers, brand_a, method="BankCard")
        assert resp.status_code == 201
        order = resp.json["order"]
        assert order["payment_status"] == "Completed"
        assert order["delivery_status"] == "Processing"
        assert order["payment"]["status"] == "Completed"
        assert order["payment"]["payment_method"] == "BankCard"

        assert db.session.query(Inventory).filter_by(product_id=product_a.id).one().stock_quantity == 2
        assert db.session.query(Cart).filter_by(customer_id=customer.id).first() is None

    @pytest.mark.parametrize("method", ["COD", "BankTransfer"])
    def test_deferred_methods_stay_pending(self, client, customer_headers, product_a, brand_a, method):
        _add(client, customer_headers, product_a, 2)
        resp = _checkout(client, customer_headers, brand_a, method=method)
        assert resp.status_code == 201
        order = resp.json["order"]
        assert order["payment_status"] == "Pending"
        assert order["delivery_status"] == "Pending"
        assert order["payment"]["status"] == "Pending"
        assert inventory_service.get_stock(product_a.id) == 5

    def test_total_matches_line_snapshots(self, client, customer_headers, brand_a):
        shirt = make_product(brand_a, name="Shirt", price_sell="150000.50", stock=10)
        cap = make_product(brand_a, name="Cap", price_sell="75000", stock=10)
        _add(client, customer_headers, shirt, 2)
        _add(client, customer_headers, cap, 3)

        resp = _checkout(client, customer_headers, brand_a, method="COD")
        order = db.session.get(Order, resp.json["order"]["id"])
        assert order.total_amount == sum(item.price * item.quantity for item in order.items)
        assert order.total_amount == Decimal("525001.00")
        assert order.payment.amount == order.total_amount

    def test_snapshot_survives_product_edit(self, client, customer_headers, owner_a_headers, product_a, brand_a):
        _add(client, customer_headers, product_a, 1)
        order_id = _checkout(client, customer_headers, brand_a, method="COD").json["order"]["id"]

        client.put(f"/api/product/{product_a.id}", json={"name": "Renamed", "price_sell": 1}, headers=owner_a_headers)

        item = db.session.get(Order, order_id).items[0]
        assert item.product_name == "Product A"
        assert item.price == Decimal("100000")
        assert item.cost_price == Decimal("60000")


class TestCheckoutCart:
    def test_only_brand_lines_removed(self, client, customer, customer_headers, product_a, product_b, brand_a):
        _add(client, customer_headers, product_a, 1)
        _add(client, customer_headers, product_b, 2)

        assert _checkout(client, customer_headers, brand_a).status_code == 201

        cart = db.session.query(Cart).filter_by(customer_id=customer.id).one()
        assert [(item.product_id, item.quantity) for item in cart.items] == [(product_b.id, 2)]

    def test_saved_address_used_for_shipping(self, client, customer_headers, product_a, brand_a):
        created = client.post("/api/customeraddress", json={
            "full_name": "Trần Thị B",
            "phone": "0911111111",
            "address": "2 Nguyễn Huệ",
        }, headers=customer_headers)
        _add(client, customer_headers, product_a, 1)

        resp = client.post("/api/order/create", json={
            "brand_id": brand_a.id,
            "payment_method": "COD",
            "address_id": created.json["address"]["id"],
        }, headers=customer_headers)
        assert resp.status_code == 201
        assert resp.json["order"]["full_name"] == "Trần Thị B"
        assert resp.json["order"]["address"] == "2 Nguyễn Huệ"

    def test_default_address_used_when_no_shipping(self, client, customer_headers, product_a, brand_a):
        client.post("/api/customeraddress", json={
            "full_name": "Trần Thị B",
            "phone": "0911111111",
            "address": "2 Nguyễn Huệ",
        }, headers=customer_headers)
        _add(client, customer_headers, product_a, 1)

        resp = client.post(
            "/api/order/create",
            json={"brand_id": brand_a.id, "payment_method": "COD"},
            headers=customer_headers,
        )
        assert resp.status_code == 201
        assert resp.json["order"]["phone"] == "0911111111"


class TestCustomerOrders:
    def test_list_and_get_own_orders(self, client, customer_headers, product_a, brand_a):
        _add(client, customer_headers, product_a, 1)
        order_id = _checkout(client, customer_headers, brand_a, method="COD").json["order"]["id"]

        resp = client.get("/api/order", headers=customer_headers)
        assert [o["id"] for o in resp.json["orders"]] == [order_id]

        resp = client.get(f"/api/order/{order_id}", headers=customer_headers)
        assert resp.status_code == 200
        assert resp.json["order"]["items"][0]["product_name"] == "Product A"

    def test_cannot_see_other_customers_order(self, client, customer_headers, product_a, brand_a):
        _add(client, customer_headers, product_a, 1)
        order_id = _checkout(client, customer_headers, brand_a, method="COD").json["order"]["id"]
        db.session.get(Order, order_id).customer_id = None
        db.session.commit()

        resp = client.get(f"/api/order/{order_id}", headers=customer_headers)
        assert resp.status_code == 404

    def test_cancel_paid_order_restores_stock(self, client, customer_headers, product_a, brand_a):
        _add(client, customer_headers, product_a, 3)
        order_id = _checkout(client, customer_headers, brand_a, method="BankCard").json["order"]["id"]
        assert inventory_service.get_stock(product_a.id) == 2

        resp = client.post(f"/api/order/{order_id}/cancel", headers=customer_headers)
        assert resp.status_code == 200
        assert resp.json["order"]["payment_status"] == "Cancelled"
        assert resp.json["order"]["delivery_status"] == "Cancelled"
        assert resp.json["order"]["payment"]["status"] == "Cancelled"
        assert inventory_service.get_stock(product_a.id) == 5

    def test_cancel_pending_order_without_taken_stock(self, client, customer_headers, product_a, brand_a):
        """Nothing was decremented, so nothing is added back."""
        _add(client, customer_headers, product_a, 2)
        order_id = _checkout(client, customer_headers, brand_a, method="COD").json["order"]["id"]

        resp = client.post(f"/api/order/{order_id}/cancel", headers=customer_headers)
        assert resp.status_code == 200
        assert inventory_service.get_stock(product_a.id) == 5

    def test_cannot_cancel_twice(self, client, customer_headers, product_a, brand_a):
        _add(client, customer_headers, product_a, 2)
        order_id = _checkout(client, customer_headers, brand_a, method="BankCard").json["order"]["id"]

        client.post(f"/api/order/{order_id}/cancel", headers=customer_headers)
        resp = client.post(f"/api/order/{order_id}/cancel", headers=customer_headers)
        assert resp.status_code == 400
        assert inventory_service.get_stock(product_a.id) == 5

    def test_cannot_cancel_shipped_order(self, client, customer_headers, owner_a_headers, product_a, brand_a):
        _add(client, customer_headers, product_a, 1)
        order_id = _checkout(client, customer_headers, brand_a, method="BankCard").json["order"]["id"]
        client.put(f"/api/ordermanagement/{order_id}", json={"delivery_status": "Shipped"}, headers=owner_a_headers)

        resp = client.post(f"/api/order/{order_id}/cancel", headers=customer_headers)
        assert resp.status_code == 400
        assert inventory_service.get_stock(product_a.id) == 4

    def test_direct_service_checkout_rolls_back(self, app, customer, product_a, brand_a):
        db.session.add(Cart(customer_id=customer.id))
        db.session.commit()
        cart = db.session.query(Cart).filter_by(customer_id=customer.id).one()
        db.session.add(CartItem(cart_id=cart.id, product_id=product_a.id, quantity=9))
        db.session.commit()

        with pytest.raises(ValidationError):
            order_service.checkout(customer, {"brand_id": brand_a.id, "payment_method": "BankCard", **SHIPPING})
        assert db.session.query(Order).count() == 0
        assert inventory_service.get_stock(product_a.id) == 5
