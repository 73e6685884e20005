# =============================================================================
# tests/test_customers.py - CRM Tests
# =============================================================================
# Customer creation, protected fields, archive vs permanent delete, and
# interaction logging.
#
# Run with: pytest tests/test_customers.py -v
# =============================================================================

from unittest.mock import patch

import pytest

from app.exceptions import DatabaseError, MissingFieldsError, NotFoundError
from core.models.customer import CustomerCreate, InteractionCreate
from core.services.customer_service import CustomerService


class TestCreateCustomer:
    """Tests for CustomerService.create_customer()."""

    def test_requires_name_and_email(self, fake_db, admin_profile):
        with pytest.raises(MissingFieldsError):
            CustomerService.create_customer(CustomerCreate(name="Acme"), admin=admin_profile)

    def test_manual_customer(self, fake_db, admin_profile):
        fake_db.queue("customers", data=[{"id": "cust-1", "email": "ops@acme.com"}])

        customer = CustomerService.create_customer(
            CustomerCreate(name="Acme", email="ops@acme.com", stage="closed_won", business_size="11-50"),
            admin=admin_profile,
        )

        assert customer["id"] == "cust-1"
        record = fake_db.payloads("customers", "insert")[0]
        assert record["stage"] == "proposal_development"
        assert record["project_status"] == "on_track"
        assert record["assigned_admin_id"] == admin_profile.user_id
        assert record["business_size"] == "11-50"
        assert "notes" not in record

        interaction = fake_db.payloads("customer_interactions", "insert")[0]
        assert interaction["customer_id"] == "cust-1"
        assert interaction["interaction_type"] == "note"
        assert interaction["notes"] == "Customer manually added to CRM"
        assert interaction["created_by"] == admin_profile.user_id

        assert fake_db.queries_for("roi_assessments") == []

    def test_linked_roi_assessment_marked_converted(self, fake_db, admin_profile):
        fake_db.queue("customers", data=[{"id": "cust-1", "email": "ops@acme.com"}])

        CustomerService.create_customer(
            CustomerCreate(name="Acme", email="ops@acme.com", roi_assessment_id="roi-1"),
            admin=admin_profile,
        )

        update = fake_db.payloads("roi_assessments", "update")[0]
        assert update["converted"] is True
        assert update["converted_to_customer_id"] == "cust-1"
        assert fake_db.payloads("customer_interactions", "insert")[0]["notes"] == "Customer created from ROI assessment"

    def test_insert_failure(self, fake_db, admin_profile):
        fake_db.fail("customers", RuntimeError("duplicate key"))

        with pytest.raises(DatabaseError) as exc_info:
            CustomerService.create_customer(CustomerCreate(name="Acme", email="a@acme.com"), admin=admin_profile)

        assert exc_info.value.details == {"error": "duplicate key"}


class TestUpdateCustomer:
    """Tests for CustomerService.update_customer()."""

    def test_protected_fields_dropped(self, fake_db):
        fake_db.queue("customers", data=[{"id": "cust-1", "stage": "negotiation"}])

        CustomerService.update_customer("cust-1", {
            "id": "other",
            "created_at": "2020-01-01",
            "roi_assessment_id": "roi-9",
            "interactions": [],
            "stage": "negotiation",
            "next_action_required": "Send proposal",
        })

        changes = fake_db.payloads("customers", "update")[0]
        assert changes == {"stage": "negotiation", "next_action_required": "Send proposal"}

    def test_missing_customer(self, fake_db):
        fake_db.queue("customers", data=[])

        with pytest.raises(NotFoundError):
            CustomerService.update_customer("nope", {"stage": "negotiation"})


class TestDeleteCustomer:
    """Tests for CustomerService.delete_customer()."""

    def test_archive_by_default(self, fake_db, admin_profile):
        fake_db.queue("customers", data=[{"id": "cust-1"}])

        action = CustomerService.delete_customer("cust-1", admin=admin_profile)

        assert action == "archived"
        assert fake_db.payloads("customers", "update") == [{"stage": "closed_lost"}]
        interaction = fake_db.payloads("customer_interactions", "insert")[0]
        assert interaction["interaction_type"] == "stage_change"

    def test_permanent_delete_unlinks_assessments(self, fake_db, admin_profile):
        fake_db.queue("customers", data=[{"id": "cust-1"}])

        action = CustomerService.delete_customer("cust-1", admin=admin_profile, permanent=True)

        assert action == "deleted"
        assert fake_db.payloads("roi_assessments", "update") == [{
            "converted": False,
            "converted_at": None,
            "converted_to_customer_id": None,
        }]
        assert fake_db.queries_for("customer_interactions")[0].called("delete")
        assert fake_db.queries_for("customers")[-1].called("delete")

    @pytest.mark.parametrize("permanent", [False, True])
    def test_unknown_customer(self, fake_db, admin_profile, permanent):
        with pytest.raises(NotFoundError):
            CustomerService.delete_customer("missing", admin=admin_profile, permanent=permanent)

        assert fake_db.payloads("customers", "update") == []
        assert fake_db.queries_for("roi_assessments") == []
        assert fake_db.queries_for("customer_interactions") == []

    def test_unknown_customer_route_404(self, api_client, login, admin_profile, fake_db):
        login(admin_profile)

        response = api_client.delete("/api/v1/customers/missing")

        assert response.status_code == 404
        assert response.json()["code"] == "CUSTOMER_NOT_FOUND"


class TestInteractions:
    """Tests for interaction logging."""

    def test_requires_type(self, fake_db, admin_profile):
        with pytest.raises(MissingFieldsError):
            CustomerService.create_interaction("cust-1", InteractionCreate(notes="Called"), admin=admin_profile)

    def test_creates_interaction(self, fake_db, admin_profile):
        fake_db.queue("customer_interactions", data=[{"id": "int-1"}])

        interaction = CustomerService.create_interaction(
            "cust-1",
            InteractionCreate(interaction_type="call", notes="Discussed scope"),
            admin=admin_profile,
        )

        assert interaction == {"id": "int-1"}
        record = fake_db.payloads("customer_interactions", "insert")[0]
        assert record == {
            "interaction_type": "call",
            "notes": "Discussed scope",
            "customer_id": "cust-1",
            "created_by": admin_profile.user_id,
        }

    def test_get_customer_includes_interactions(self, fake_db):
        fake_db.queue("customers", data={"id": "cust-1", "name": "Acme"})
        fake_db.queue("customer_interactions", data=[{"id": "int-1"}])

        customer = CustomerService.get_customer("cust-1")

        assert customer["interactions"] == [{"id": "int-1"}]


class TestCustomerRoutes:
    """Tests for /api/v1/customers."""

    def test_delete_requires_admin(self, api_client, login, editor_profile):
        login(editor_profile)

        response = api_client.delete("/api/v1/customers/cust-1")

        assert response.status_code == 403

    def test_permanent_delete(self, api_client, login, admin_profile):
        login(admin_profile)

        with patch.object(CustomerService, "delete_customer", return_value="deleted") as delete:
            response = api_client.delete("/api/v1/customers/cust-1?permanent=true")

        assert response.json() == {"success": True, "action": "deleted"}
        assert delete.call_args.kwargs["permanent"] is True

    def test_create_returns_201(self, api_client, login, admin_profile):
        login(admin_profile)

        with patch.object(CustomerService, "create_customer", return_value={"id": "cust-1"}):
            response = api_client.post("/api/v1/customers", json={"name": "Acme", "email": "a@acme.com"})

        assert response.status_code == 201
        assert response.json()["data"] == {"id": "cust-1"}
