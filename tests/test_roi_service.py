# =============================================================================
# tests/test_roi_service.py - ROI Assessment Service Tests
# =============================================================================
# Calculator endpoint output, lead submission and the admin pipeline.
#
# Run with: pytest tests/test_roi_service.py -v
# =============================================================================

from unittest.mock import patch

import pytest

from app.exceptions import AlreadyConvertedError, ValidationFailedError
from core.models.roi import ROIAssessmentUpdate, ROISubmitRequest
from core.services.notification_service import NotificationService
from core.services.roi_service import ROIService

ASSESSMENT = {
    "id": "roi-1",
    "email": "owner@acme.com",
    "industry": "real_estate",
    "selected_workflows": ["lead_followup", "invoice_generation"],
    "calculated_results": {"totalBenefitPerMonth": 8450, "roiPercent": 312},
    "converted_to_customer_id": None,
    "created_at": "2026-10-01T12:00:00+00:00",
}


class TestCalculate:
    """Tests for POST /api/v1/roi/calculate."""

    def test_returns_results_and_pricing(self, api_client):
        response = api_client.post("/api/v1/roi/calculate", json={
            "state": {
                "costs": {"hourlyRate": 30, "fullyLoadedMultiplier": 1.3},
                "workflows": [{"id": "lead_followup", "eventsPerWeek": 25, "minutesBefore": 12, "minutesAfter": 3}],
                "novique": {"monthlyFee": 750, "oneTimeSetup": 2250, "selectedPlan": "growth"},
            },
        })

        assert response.status_code == 200
        body = response.json()
        assert body["results"]["hoursSavedPerMonth"] == 16.2
        assert body["results"]["paybackMonths"] is None
        assert body["derived_pricing"]["recommendedTier"] == "starter"
        assert body["derived_pricing"]["finalTier"] == "growth"
        assert body["derived_pricing"]["monthlyFee"] == 750

    def test_catalog(self, api_client):
        body = api_client.get("/api/v1/roi/catalog").json()

        assert [plan["id"] for plan in body["plans"]] == ["starter", "growth", "scale"]
        assert body["workflows"][0]["defaultEventsPerWeek"] == 25
        assert {"id": "healthcare", "name": "Healthcare"} in body["industries"]
        assert [segment["id"] for segment in body["segments"]] == [
            "financial", "healthcare", "logistics", "realestate",
        ]
        financial = body["segments"][0]
        assert financial["industry"] == "professional_services"
        assert financial["defaults"]["hourlyRate"] == 50
        assert financial["defaults"]["workflowOverrides"]["lead_followup"] == {"eventsPerWeek": 40}

    def test_segment_preset(self, api_client):
        response = api_client.get("/api/v1/roi/segments/Healthcare")

        assert response.status_code == 200
        body = response.json()
        assert body["label"] == "Healthcare & Health Services"
        assert body["state"]["company"] == {"employeesImpacted": 4, "industry": "healthcare"}
        assert body["state"]["costs"]["hourlyRate"] == 30

    def test_unknown_segment(self, api_client):
        response = api_client.get("/api/v1/roi/segments/retail")

        assert response.status_code == 404
        assert response.json()["code"] == "ROI_SEGMENT_NOT_FOUND"

    def test_malformed_body_uses_error_envelope(self, api_client):
        response = api_client.post("/api/v1/roi/calculate", json={"state": {"scenario": "wild"}})

        assert response.status_code == 422
        body = response.json()
        assert body["code"] == "REQUEST_VALIDATION_ERROR"
        assert body["detail"] == "Request validation failed"
        assert body["details"]["errors"][0]["loc"] == ["body", "state", "scenario"]


class TestSubmit:
    """Tests for ROIService.submit()."""

    def request(self, **overrides) -> ROISubmitRequest:
        data = {
            "email": "owner@acme.com",
            "results": {"roiPercent": 312, "netBenefitPerMonth": 6200},
            "industry": "healthcare",
            "derivedPricing": {"monthlyFee": 1250, "setupFee": 3750, "recommendedTier": "growth"},
        }
        data.update(overrides)
        return ROISubmitRequest.model_validate(data)

    def test_invalid_email(self, fake_db):
        with pytest.raises(ValidationFailedError):
            ROIService.submit(self.request(email="not-an-email"))

    def test_stored_with_pricing(self, fake_db):
        fake_db.queue("roi_assessments", data=[{"id": "roi-1"}])

        with patch.object(NotificationService, "roi_assessment") as notify:
            assessment = ROIService.submit(self.request())

        assert assessment == {"id": "roi-1"}
        record = fake_db.payloads("roi_assessments", "insert")[0]
        assert record["calculated_results"] == {
            "roiPercent": 312,
            "netBenefitPerMonth": 6200,
            "monthlyFee": 1250,
            "setupFee": 3750,
            "recommendedTier": "growth",
        }
        assert record["selected_workflows"] == []
        assert notify.call_args.args[0] == "roi-1"

    def test_insert_failure_still_notifies(self, fake_db):
        fake_db.fail("roi_assessments", RuntimeError("insert failed"))

        with patch.object(NotificationService, "roi_assessment") as notify:
            assessment = ROIService.submit(self.request())

        assert assessment is None
        record_id = notify.call_args.args[0]
        assert record_id.startswith("roi_")

    def test_route_tolerates_failed_insert(self, api_client):
        with patch.object(ROIService, "submit", return_value=None):
            response = api_client.post("/api/v1/roi/submit", json={"email": "owner@acme.com"})

        assert response.json() == {"success": True, "id": None}


class TestPipeline:
    """Tests for the admin side of roi_assessments."""

    def test_unconverted_filter_includes_null(self, fake_db):
        ROIService.list_assessments(converted=False, search="acme")

        query = fake_db.queries_for("roi_assessments")[0]
        assert query.called("or_") == [(("converted.is.null,converted.eq.false",), {})]
        assert query.called("ilike") == [(("email", "%acme%"), {})]

    def test_contacted_stamps_time(self, fake_db):
        fake_db.queue("roi_assessments", data=[{"id": "roi-1", "contacted": True}])

        ROIService.update_assessment("roi-1", ROIAssessmentUpdate(contacted=True))

        changes = fake_db.payloads("roi_assessments", "update")[0]
        assert changes["contacted"] is True
        assert "contacted_at" in changes

    def test_empty_update_rejected(self, fake_db):
        with pytest.raises(ValidationFailedError):
            ROIService.update_assessment("roi-1", ROIAssessmentUpdate())

    def test_delete_unlinks_customers_first(self, fake_db):
        ROIService.delete_assessment("roi-1")

        tables = [query.table for query in fake_db.queries]
        assert tables == ["customers", "roi_assessments"]
        assert fake_db.payloads("customers", "update") == [{"roi_assessment_id": None}]


class TestConvert:
    """Tests for ROIService.convert_to_customer()."""

    def test_already_converted(self, fake_db, admin_profile):
        fake_db.queue("roi_assessments", data={**ASSESSMENT, "converted_to_customer_id": "cust-0"})

        with pytest.raises(AlreadyConvertedError):
            ROIService.convert_to_customer("roi-1", admin=admin_profile)

    def test_customer_from_lead(self, fake_db, admin_profile):
        fake_db.queue("roi_assessments", data=ASSESSMENT)
        fake_db.queue("customers", data=[{"id": "cust-1", "email": "owner@acme.com"}])

        customer = ROIService.convert_to_customer("roi-1", admin=admin_profile)

        assert customer["id"] == "cust-1"
        record = fake_db.payloads("customers", "insert")[0]
        assert record["name"] == "owner"
        assert record["business_type"] == "professional"
        assert record["initial_challenges"] == (
            "Interested in automation for: Lead Capture + Follow-up, Invoice/Quote Generation"
        )
        assert record["roi_estimate"] == ASSESSMENT["calculated_results"]

        interaction = fake_db.payloads("customer_interactions", "insert")[0]
        assert interaction["subject"] == "ROI Assessment Conversion"
        assert interaction["notes"] == (
            "Customer created from ROI assessment. Est. monthly benefit: $8,450, ROI: 312%"
        )

        update = fake_db.payloads("roi_assessments", "update")[0]
        assert update["converted"] is True
        assert update["converted_to_customer_id"] == "cust-1"
