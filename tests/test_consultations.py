# =============================================================================
# tests/test_consultations.py - Consultation Request Tests
# =============================================================================
# Public intake, admin updates and conversion to a customer.
#
# Run with: pytest tests/test_consultations.py -v
# =============================================================================

from unittest.mock import patch

import pytest

from app.exceptions import AlreadyConvertedError, MissingFieldsError, ValidationFailedError
from core.models.consultation import ConsultationCreate, ConsultationUpdate
from core.services.consultation_service import ConsultationService
from core.services.notification_service import NotificationService

CONSULTATION = {
    "id": "cr-1",
    "name": "Dana Reyes",
    "email": "dana@example.com",
    "phone": "+15555550100",
    "business_type": "healthcare",
    "business_size": "1-10",
    "challenges": "Missed calls and slow intake",
    "meeting_type": "video",
    "preferred_date": "2026-11-02",
    "preferred_time": "10:00",
    "status": "pending",
    "converted_to_customer_id": None,
    "created_at": "2026-10-18T15:00:00+00:00",
}


class TestSubmit:
    """Tests for ConsultationService.submit()."""

    def test_camel_case_body(self):
        data = ConsultationCreate.model_validate({"businessType": "retail", "meetingType": "phone"})
        assert data.business_type == "retail"
        assert data.meeting_type == "phone"

    def test_required_fields(self, fake_db):
        with pytest.raises(MissingFieldsError) as exc_info:
            ConsultationService.submit(ConsultationCreate(name="Dana", email="dana@example.com"))

        assert "phone" in exc_info.value.message
        assert "challenges" in exc_info.value.message

    def test_stored_pending_and_announced(self, fake_db):
        fake_db.queue("consultation_requests", data=[CONSULTATION])

        with patch.object(NotificationService, "consultation_request") as notify:
            consultation = ConsultationService.submit(ConsultationCreate(
                name="Dana Reyes",
                email="dana@example.com",
                phone="+15555550100",
                challenges="Missed calls and slow intake",
            ))

        assert consultation["id"] == "cr-1"
        record = fake_db.payloads("consultation_requests", "insert")[0]
        assert record["status"] == "pending"
        notify.assert_called_once_with(CONSULTATION)

    def test_public_route(self, api_client):
        with patch.object(ConsultationService, "submit", return_value=CONSULTATION):
            response = api_client.post("/api/v1/consultation", json={
                "name": "Dana Reyes",
                "email": "dana@example.com",
                "phone": "+15555550100",
                "challenges": "Missed calls",
            })

        assert response.status_code == 201
        assert response.json() == {"success": True, "id": "cr-1"}


class TestUpdate:
    """Tests for ConsultationService.update_consultation()."""

    def test_empty_update_rejected(self, fake_db):
        with pytest.raises(ValidationFailedError):
            ConsultationService.update_consultation("cr-1", ConsultationUpdate())

    def test_status_change(self, fake_db):
        fake_db.queue("consultation_requests", data=[{**CONSULTATION, "status": "contacted"}])

        updated = ConsultationService.update_consultation("cr-1", ConsultationUpdate(status="contacted"))

        assert updated["status"] == "contacted"
        changes = fake_db.payloads("consultation_requests", "update")[0]
        assert changes["status"] == "contacted"
        assert "updated_at" in changes
        assert "notes" not in changes


class TestConvert:
    """Tests for ConsultationService.convert_to_customer()."""

    def test_already_converted(self, fake_db, admin_profile):
        fake_db.queue("consultation_requests", data={**CONSULTATION, "converted_to_customer_id": "cust-0"})

        with pytest.raises(AlreadyConvertedError) as exc_info:
            ConsultationService.convert_to_customer("cr-1", admin=admin_profile)

        assert exc_info.value.status_code == 400
        assert exc_info.value.details == {"customer_id": "cust-0"}

    def test_creates_customer_and_marks_converted(self, fake_db, admin_profile):
        fake_db.queue("consultation_requests", data=CONSULTATION)
        fake_db.queue("customers", data=[{"id": "cust-1", "email": "dana@example.com"}])

        customer = ConsultationService.convert_to_customer("cr-1", admin=admin_profile)

        assert customer["id"] == "cust-1"

        record = fake_db.payloads("customers", "insert")[0]
        assert record["consultation_request_id"] == "cr-1"
        assert record["initial_challenges"] == "Missed calls and slow intake"
        assert record["stage"] == "proposal_development"
        assert record["assigned_admin_id"] == admin_profile.user_id

        interaction = fake_db.payloads("customer_interactions", "insert")[0]
        assert interaction["interaction_type"] == "consultation_request"
        assert interaction["subject"] == "Initial consultation request"
        assert interaction["notes"] == "Preferred meeting: video on 2026-11-02 at 10:00"
        assert interaction["interaction_date"] == CONSULTATION["created_at"]

        update = fake_db.payloads("consultation_requests", "update")[0]
        assert update["status"] == "converted"
        assert update["converted_to_customer_id"] == "cust-1"

    def test_route_returns_customer_id(self, api_client, login, admin_profile):
        login(admin_profile)

        with patch.object(ConsultationService, "convert_to_customer", return_value={"id": "cust-1"}):
            response = api_client.post("/api/v1/consultations/cr-1/convert")

        assert response.json() == {"success": True, "data": {"id": "cust-1"}, "customerId": "cust-1"}
