"""
Staff workflow tests.

Verifies:
- Apply / approve / reject / update / remove lifecycle
- Only MANAGE_STAFF holders (brand owner, Admin) act on applications
- Capability listing and per-member role assignment
"""

import pytest

from haki.extensions import db
from haki.models import User
from haki.permissions import BRAND_MANAGER, INVENTORY_MANAGER, STAFF, get_all_permission_codes
from haki.services.auth_service import create_user

from conftest import auth_headers, get_auth_token


@pytest.fixture
def applicant(db_session):
    return create_user("Ứng viên", "applicant@haki.test", "Password123!", STAFF)


@pytest.fixture
def applicant_headers(client, applicant):
    return auth_headers(get_auth_token(client, applicant.email))


@pytest.fixture
def pending(client, applicant, applicant_headers, brand_a):
    resp = client.post(f"/api/staff-approval/apply/{brand_a.id}", headers=applicant_headers)
    assert resp.status_code == 200
    return applicant


# =============================================================================
# APPLICATIONS
# =============================================================================


class TestApply:
    def test_apply_marks_pending(self, client, applicant, applicant_headers, brand_a):
        resp = client.post(f"/api/staff-approval/apply/{brand_a.id}", headers=applicant_headers)
        assert resp.status_code == 200
        assert resp.json["user"]["brand_id"] == brand_a.id
        assert resp.json["user"]["approval_status"] == "Pending"

    def test_apply_twice_rejected(self, client, pending, applicant_headers, brand_a):
        resp = client.post(f"/api/staff-approval/apply/{brand_a.id}", headers=applicant_headers)
        assert resp.status_code == 400

    def test_apply_unknown_brand(self, client, applicant_headers):
        resp = client.post("/api/staff-approval/apply/999", headers=applicant_headers)
        assert resp.status_code == 404

    def test_admin_cannot_apply(self, client, admin_headers, brand_a):
        resp = client.post(f"/api/staff-approval/apply/{brand_a.id}", headers=admin_headers)
        assert resp.status_code == 403

    def test_owner_cannot_apply_to_own_brand(self, client, brand_a):
        owner = db.session.get(User, brand_a.owner_id)
        owner.role = STAFF
        db.session.commit()
        headers = auth_headers(get_auth_token(client, owner.email))

        resp = client.post(f"/api/staff-approval/apply/{brand_a.id}", headers=headers)
        assert resp.status_code == 400
        assert resp.json["message"] == "Bạn là chủ của thương hiệu này."

    def test_higher_roles_cannot_apply(self, client, owner_b_headers, brand_a):
        """Only Staff accounts apply; a BrandManager signup cannot join with its own grant."""
        resp = client.post(f"/api/staff-approval/apply/{brand_a.id}", headers=owner_b_headers)
        assert resp.status_code == 403
        assert resp.json["required_roles"] == ["Staff"]

    def test_pending_applicant_has_no_access(self, client, pending, applicant_headers, product_a):
        resp = client.get(f"/api/inventory/{product_a.id}", headers=applicant_headers)
        assert resp.status_code == 403


class TestReview:
    def test_owner_sees_pending(self, client, pending, owner_a_headers, owner_b_headers):
        resp = client.get("/api/staff-approval/pending-applications", headers=owner_a_headers)
        assert [u["id"] for u in resp.json["applications"]] == [pending.id]

        resp = client.get("/api/staff-approval/pending-applications", headers=owner_b_headers)
        assert resp.json["applications"] == []

    def test_approve_grants_role_capabilities(self, client, pending, owner_a_headers, applicant_headers, product_a):
        resp = client.post(f"/api/staff-approval/approve/{pending.id}", headers=owner_a_headers)
        assert resp.status_code == 200
        assert resp.json["user"]["approval_status"] == "Approved"

        resp = client.get(f"/api/inventory/{product_a.id}", headers=applicant_headers)
        assert resp.status_code == 200

        resp = client.get("/api/staff-approval/approved-staff", headers=owner_a_headers)
        assert [u["id"] for u in resp.json["staff"]] == [pending.id]

    def test_approval_starts_at_staff_role(
        self, client, pending, admin_headers, owner_a_headers, applicant_headers, brand_a
    ):
        client.put(f"/api/admin/users/{pending.id}", json={"role": BRAND_MANAGER}, headers=admin_headers)

        resp = client.post(f"/api/staff-approval/approve/{pending.id}", headers=owner_a_headers)
        assert resp.status_code == 200
        assert resp.json["user"]["role"] == STAFF

        resp = client.get(f"/api/revenue/brand/{brand_a.id}", headers=applicant_headers)
        assert resp.status_code == 403
        assert resp.json["required_permission"] == "VIEW_REVENUE"

    def test_reject_detaches(self, client, pending, owner_a_headers):
        resp = client.post(f"/api/staff-approval/reject/{pending.id}", headers=owner_a_headers)
        assert resp.status_code == 200
        user = db.session.get(User, pending.id)
        assert user.brand_id is None
        assert user.approval_status is None

    def test_approve_twice_rejected(self, client, pending, owner_a_headers):
        client.post(f"/api/staff-approval/approve/{pending.id}", headers=owner_a_headers)
        resp = client.post(f"/api/staff-approval/approve/{pending.id}", headers=owner_a_headers)
        assert resp.status_code == 400

    def test_other_owner_cannot_approve(self, client, pending, owner_b_headers):
        resp = client.post(f"/api/staff-approval/approve/{pending.id}", headers=owner_b_headers)
        assert resp.status_code == 403
        assert resp.json["required_permission"] == "MANAGE_STAFF"
        assert db.session.get(User, pending.id).approval_status == "Pending"

    def test_staff_cannot_approve(self, client, pending, staff_a_headers):
        resp = client.post(f"/api/staff-approval/approve/{pending.id}", headers=staff_a_headers)
        assert resp.status_code == 403

    def test_admin_can_approve(self, client, pending, admin_headers):
        resp = client.post(f"/api/staff-approval/approve/{pending.id}", headers=admin_headers)
        assert resp.status_code == 200

    def test_unknown_member(self, client, owner_a_headers):
        resp = client.post("/api/staff-approval/approve/999", headers=owner_a_headers)
        assert resp.status_code == 404


# =============================================================================
# MEMBERS
# =============================================================================


class TestMembers:
    def test_update_name_and_role(self, client, staff_a, owner_a_headers):
        resp = client.put(
            f"/api/staff-approval/update/{staff_a.id}",
            json={"name": "Tên mới", "role": INVENTORY_MANAGER},
            headers=owner_a_headers,
        )
        assert resp.status_code == 200
        assert resp.json["user"]["name"] == "Tên mới"
        assert resp.json["user"]["role"] == INVENTORY_MANAGER

    @pytest.mark.parametrize("body", [{"role": "Admin"}, {"role": "Owner"}, {"name": "  "}])
    def test_update_invalid(self, client, staff_a, owner_a_headers, body):
        resp = client.put(f"/api/staff-approval/update/{staff_a.id}", json=body, headers=owner_a_headers)
        assert resp.status_code == 400
        assert db.session.get(User, staff_a.id).role == STAFF

    def test_update_pending_member_not_found(self, client, pending, owner_a_headers):
        resp = client.put(f"/api/staff-approval/update/{pending.id}", json={"name": "X"}, headers=owner_a_headers)
        assert resp.status_code == 404

    def test_remove_member(self, client, staff_a, staff_a_headers, owner_a_headers, product_a):
        resp = client.delete(f"/api/staff-approval/delete/{staff_a.id}", headers=owner_a_headers)
        assert resp.status_code == 200
        assert db.session.get(User, staff_a.id).brand_id is None

        resp = client.get(f"/api/inventory/{product_a.id}", headers=staff_a_headers)
        assert resp.status_code == 403


# =============================================================================
# PERMISSION CATALOG AND ROLE ASSIGNMENT
# =============================================================================


class TestPermissions:
    def test_list_definitions(self, client, staff_a_headers):
        resp = client.get("/api/permission", headers=staff_a_headers)
        assert resp.status_code == 200
        codes = [p["code"] for p in resp.json["permissions"]]
        assert codes == get_all_permission_codes()
        assert "MANAGE_STAFF" in codes

    def test_role_table(self, client, staff_a_headers):
        roles = client.get("/api/permission/roles", headers=staff_a_headers).json["roles"]
        assert roles["Staff"] == ["VIEW_PRODUCTS", "VIEW_INVENTORY", "VIEW_ORDERS"]
        assert "UPDATE_INVENTORY" in roles["InventoryManager"]
        assert "MANAGE_STAFF" not in roles["BrandManager"]

    def test_brand_staff_permissions(self, client, staff_a, owner_a_headers, brand_a):
        resp = client.get(f"/api/permission/brand/{brand_a.id}/staff", headers=owner_a_headers)
        assert resp.status_code == 200
        member = resp.json["staff"][0]
        assert member["id"] == staff_a.id
        assert member["permissions"] == ["VIEW_PRODUCTS", "VIEW_INVENTORY", "VIEW_ORDERS"]

    def test_set_role_changes_capabilities(self, client, staff_a, staff_a_headers, owner_a_headers, brand_a, product_a):
        resp = client.put(f"/api/inventory/{product_a.id}", json={"stock_quantity": 9}, headers=staff_a_headers)
        assert resp.status_code == 403

        resp = client.put(
            f"/api/permission/brand/{brand_a.id}/staff/{staff_a.id}",
            json={"role": INVENTORY_MANAGER},
            headers=owner_a_headers,
        )
        assert resp.status_code == 200

        resp = client.put(f"/api/inventory/{product_a.id}", json={"stock_quantity": 9}, headers=staff_a_headers)
        assert resp.status_code == 200

    def test_set_role_requires_manage_staff(self, client, staff_a, staff_a_headers, brand_a):
        resp = client.put(
            f"/api/permission/brand/{brand_a.id}/staff/{staff_a.id}",
            json={"role": INVENTORY_MANAGER},
            headers=staff_a_headers,
        )
        assert resp.status_code == 403

    def test_set_role_for_non_member(self, client, staff_a, owner_b_headers, brand_b):
        resp = client.put(
            f"/api/permission/brand/{brand_b.id}/staff/{staff_a.id}",
            json={"role": INVENTORY_MANAGER},
            headers=owner_b_headers,
        )
        assert resp.status_code == 404
