"""
Admin, profile and CLI tests.

Verifies:
- Admin user/customer management and its deletion rules
- Customer self-service profile and password reset
- Flask CLI bootstrap and maintenance commands
"""

from datetime import timedelta

import pytest

from haki.extensions import db
from haki.models import Brand, Cart, Customer, CustomerAddress, Order, OtpCode, Product, User
from haki.services import otp_service
from haki.services.auth_service import verify_password
from haki.time_utils import utcnow

from conftest import PASSWORD, latest_otp


SHIPPING = {"full_name": "Nguyễn Văn A", "phone": "0900000000", "address": "1 Lê Lợi"}


def _order(client, headers, product):
    client.post("/api/cart/add", json={"product_id": product.id, "quantity": 1}, headers=headers)
    resp = client.post(
        "/api/order/create",
        json={"brand_id": product.brand_id, "payment_method": "COD", **SHIPPING},
        headers=headers,
    )
    assert resp.status_code == 201
    return resp.json["order"]["id"]


# =============================================================================
# ADMIN - USERS
# =============================================================================


class TestAdminUsers:
    def test_list_users(self, client, admin_headers, admin, owner_a):
        resp = client.get("/api/admin/users", headers=admin_headers)
        assert resp.status_code == 200
        assert [u["email"] for u in resp.json["users"]] == [admin.email, owner_a.email]
        assert "password_hash" not in resp.json["users"][0]

    def test_create_user(self, client, admin_headers):
        resp = client.post("/api/admin/users", json={
            "name": "Nhân viên mới",
            "email": "NEW@haki.test",
            "password": "secret1",
            "role": "Staff",
        }, headers=admin_headers)
        assert resp.status_code == 201
        assert resp.json["user"]["email"] == "new@haki.test"
        assert resp.json["user"]["is_email_verified"] is True

    def test_create_duplicate_email(self, client, admin_headers, owner_a):
        resp = client.post("/api/admin/users", json={
            "name": "X", "email": owner_a.email, "password": "secret1", "role": "Staff",
        }, headers=admin_headers)
        assert resp.status_code == 409

    def test_create_invalid_role(self, client, admin_headers):
        resp = client.post("/api/admin/users", json={
            "name": "X", "email": "x@haki.test", "password": "secret1", "role": "Customer",
        }, headers=admin_headers)
        assert resp.status_code == 400

    def test_update_user(self, client, admin_headers, owner_a):
        resp = client.put(f"/api/admin/users/{owner_a.id}", json={
            "name": "Chủ mới", "role": "InventoryManager", "password": "newpass1",
        }, headers=admin_headers)
        assert resp.status_code == 200
        assert resp.json["user"]["role"] == "InventoryManager"
        assert verify_password("newpass1", db.session.get(User, owner_a.id).password_hash)

    def test_update_email_conflict(self, client, admin_headers, owner_a, owner_b):
        resp = client.put(f"/api/admin/users/{owner_a.id}", json={"email": owner_b.email}, headers=admin_headers)
        assert resp.status_code == 409

    def test_clearing_brand_clears_approval(self, client, admin_headers, staff_a):
        resp = client.put(f"/api/admin/users/{staff_a.id}", json={"brand_id": None}, headers=admin_headers)
        assert resp.status_code == 200
        assert resp.json["user"]["approval_status"] is None

    def test_admin_cannot_be_deleted(self, client, admin_headers, admin):
        resp = client.delete(f"/api/admin/users/{admin.id}", headers=admin_headers)
        assert resp.status_code == 400
        assert resp.json["message"] == "Không thể xóa tài khoản Admin."

    def test_delete_user_removes_owned_brands(self, client, admin_headers, owner_a, brand_a, product_a, staff_a):
        resp = client.delete(f"/api/admin/users/{owner_a.id}", headers=admin_headers)
        assert resp.status_code == 200
        assert db.session.get(User, owner_a.id) is None
        assert db.session.query(Brand).count() == 0
        assert db.session.query(Product).count() == 0
        assert db.session.get(User, staff_a.id).brand_id is None

    def test_delete_owner_with_orders_refused(
        self, client, admin_headers, customer_headers, owner_a, product_a
    ):
        _order(client, customer_headers, product_a)
        resp = client.delete(f"/api/admin/users/{owner_a.id}", headers=admin_headers)
        assert resp.status_code == 409
        assert db.session.get(User, owner_a.id) is not None

    def test_unknown_user(self, client, admin_headers):
        assert client.get("/api/admin/users/999", headers=admin_headers).status_code == 404


# =============================================================================
# ADMIN - CUSTOMERS
# =============================================================================


class TestAdminCustomers:
    def test_list_and_get(self, client, admin_headers, customer):
        resp = client.get("/api/admin/customers", headers=admin_headers)
        assert [c["id"] for c in resp.json["customers"]] == [customer.id]

        resp = client.get(f"/api/admin/customers/{customer.id}", headers=admin_headers)
        assert resp.json["customer"]["email"] == customer.email

    def test_update_customer(self, client, admin_headers, customer):
        resp = client.put(
            f"/api/admin/customers/{customer.id}",
            json={"name": "Tên mới", "is_email_verified": False},
            headers=admin_headers,
        )
        assert resp.status_code == 200
        assert resp.json["customer"]["name"] == "Tên mới"
        assert resp.json["customer"]["is_email_verified"] is False

    def test_delete_customer_keeps_orders(self, client, admin_headers, customer, customer_headers, product_a):
        order_id = _order(client, customer_headers, product_a)
        client.post("/api/cart/add", json={"product_id": product_a.id, "quantity": 1}, headers=customer_headers)
        client.post("/api/customeraddress", json=SHIPPING, headers=customer_headers)
        customer_id = customer.id

        resp = client.delete(f"/api/admin/customers/{customer_id}", headers=admin_headers)
        assert resp.status_code == 200
        assert db.session.get(Customer, customer_id) is None
        assert db.session.query(Cart).count() == 0
        assert db.session.query(CustomerAddress).count() == 0

        order = db.session.get(Order, order_id)
        assert order.customer_id is None
        assert order.to_dict()["customer_name"] is None

    def test_unknown_customer(self, client, admin_headers):
        resp = client.delete("/api/admin/customers/999", headers=admin_headers)
        assert resp.status_code == 404
        assert resp.json["message"] == "Khách hàng không tồn tại."


# =============================================================================
# PROFILE
# =============================================================================


class TestProfile:
    def test_info_includes_addresses(self, client, customer, customer_headers):
        client.post("/api/customeraddress", json=SHIPPING, headers=customer_headers)
        resp = client.get("/api/profile/info", headers=customer_headers)
        assert resp.status_code == 200
        assert resp.json["profile"]["email"] == customer.email
        assert len(resp.json["profile"]["addresses"]) == 1

    def test_update_name(self, client, customer_headers):
        resp = client.put("/api/profile/update", json={"name": "  Tên mới "}, headers=customer_headers)
        assert resp.status_code == 200
        assert resp.json["profile"]["name"] == "Tên mới"

    def test_update_blank_name(self, client, customer_headers):
        resp = client.put("/api/profile/update", json={"name": ""}, headers=customer_headers)
        assert resp.status_code == 400

    def test_reset_password(self, client, customer, customer_headers, outbox):
        resp = client.post("/api/profile/request-reset-password", headers=customer_headers)
        assert resp.status_code == 200
        code = latest_otp(customer.email)

        resp = client.post("/api/profile/reset-password", json={
            "otp": code, "new_password": "newpass1", "confirm_password": "newpass1",
        }, headers=customer_headers)
        assert resp.status_code == 200
        assert verify_password("newpass1", db.session.get(Customer, customer.id).password_hash)

        resp = client.post("/api/profile/reset-password", json={
            "otp": code, "new_password": "again12", "confirm_password": "again12",
        }, headers=customer_headers)
        assert resp.status_code == 400

    def test_reset_password_mismatch(self, client, customer, customer_headers, outbox):
        client.post("/api/profile/request-reset-password", headers=customer_headers)
        resp = client.post("/api/profile/reset-password", json={
            "otp": latest_otp(customer.email), "new_password": "newpass1", "confirm_password": "other12",
        }, headers=customer_headers)
        assert resp.status_code == 400
        assert verify_password(PASSWORD, db.session.get(Customer, customer.id).password_hash)

    def test_users_cannot_use_profile(self, client, owner_a_headers):
        assert client.get("/api/profile/info", headers=owner_a_headers).status_code == 403


# =============================================================================
# CLI
# =============================================================================


class TestCli:
    def test_users_create(self, app):
        runner = app.test_cli_runner()
        result = runner.invoke(args=[
            "users", "create",
            "--name", "Quản trị", "--email", "root@haki.test",
            "--password", "secret1", "--role", "Admin",
        ])
        assert result.exit_code == 0, result.output
        assert "PASS Created user: root@haki.test" in result.output

        user = db.session.query(User).filter_by(email="root@haki.test").one()
        assert user.role == "Admin"
        assert user.is_email_verified is True

    def test_users_create_duplicate(self, app, admin):
        runner = app.test_cli_runner()
        result = runner.invoke(args=[
            "users", "create",
            "--name", "X", "--email", admin.email, "--password", "secret1", "--role", "Staff",
        ])
        assert result.exit_code != 0
        assert "Email đã tồn tại." in result.output

    def test_users_list(self, app, admin, staff_a):
        runner = app.test_cli_runner()
        result = runner.invoke(args=["users", "list", "--role", "Staff"])
        assert result.exit_code == 0
        assert staff_a.email in result.output
        assert admin.email not in result.output

    def test_purge_otps(self, app):
        otp_service.issue(otp_service.REGISTER, "old@haki.test")
        otp_service.issue(otp_service.REGISTER, "fresh@haki.test")
        row = db.session.query(OtpCode).filter_by(email="old@haki.test").one()
        row.expires_at = utcnow() - timedelta(minutes=1)
        db.session.commit()

        result = app.test_cli_runner().invoke(args=["maintenance", "purge-otps"])
        assert result.exit_code == 0
        assert "PASS Removed 1 expired OTP code(s)." in result.output
        assert [r.email for r in db.session.query(OtpCode).all()] == ["fresh@haki.test"]

    @pytest.mark.parametrize("command", [["system", "init-db"], ["system", "reset-db", "--yes"]])
    def test_system_commands(self, app, command):
        result = app.test_cli_runner().invoke(args=command)
        assert result.exit_code == 0
        assert "PASS" in result.output
