# =============================================================================
# tests/test_notifications.py - Staff Alert Tests
# =============================================================================
# Discord webhook payloads and failure handling, plus admin SMS gating.
# httpx and Twilio are patched; nothing leaves the process.
#
# Run with: pytest tests/test_notifications.py -v
# =============================================================================

from unittest.mock import MagicMock, patch

import httpx
import pytest

from app.config import settings
from app.exceptions import UpstreamServiceError
from core.services.notification_service import (
    NotificationService,
    score_badge,
    score_color,
    score_emoji,
)
from core.services.twilio_service import TwilioService

WEBHOOK_URL = "https://discord.test/api/webhooks/1/abc"


@pytest.fixture
def discord(monkeypatch):
    """Configure a webhook URL and capture httpx.post calls."""
    monkeypatch.setattr(settings, "DISCORD_WEBHOOK_URL", WEBHOOK_URL)
    with patch("core.services.notification_service.httpx.post") as post:
        post.return_value = MagicMock(is_success=True, status_code=204)
        yield post


def sent_payload(post: MagicMock) -> dict:
    return post.call_args.kwargs["json"]


class TestSendDiscord:
    """Tests for NotificationService.send_discord()."""

    def test_not_configured(self, monkeypatch):
        monkeypatch.setattr(settings, "DISCORD_WEBHOOK_URL", "")

        result = NotificationService.send_discord({"content": "hi"})

        assert result == {"success": False, "error": "Discord webhook URL not configured"}

    def test_success(self, discord):
        result = NotificationService.send_discord({"content": "hi"})

        assert result == {"success": True, "error": None}
        assert discord.call_args.args[0] == WEBHOOK_URL
        assert discord.call_args.kwargs["timeout"] == settings.DISCORD_WEBHOOK_TIMEOUT

    def test_http_error_status(self, discord):
        discord.return_value = MagicMock(is_success=False, status_code=429, reason_phrase="Too Many Requests", text="")

        result = NotificationService.send_discord({"content": "hi"})

        assert result == {"success": False, "error": "HTTP 429: Too Many Requests"}

    def test_timeout(self, discord):
        discord.side_effect = httpx.TimeoutException("slow")

        result = NotificationService.send_discord({"content": "hi"})

        assert result == {"success": False, "error": "Discord webhook timeout"}

    def test_network_error(self, discord):
        discord.side_effect = httpx.ConnectError("refused")

        result = NotificationService.send_discord({"content": "hi"})

        assert result == {"success": False, "error": "Network error"}

    def test_unexpected_error_is_reported_not_raised(self, discord):
        discord.side_effect = RuntimeError("bad payload")

        result = NotificationService.send_discord({"content": "hi"})

        assert result == {"success": False, "error": "bad payload"}


class TestEmbeds:
    """Tests for the alert payloads."""

    def test_consultation_request(self, discord):
        NotificationService.consultation_request({
            "id": "cr-1",
            "name": "Dana Reyes",
            "email": "dana@example.com",
            "phone": "+15555550100",
            "business_type": "healthcare",
            "meeting_type": "video",
            "challenges": "x" * 150,
        })

        payload = sent_payload(discord)
        embed = payload["embeds"][0]
        assert "Dana Reyes" in payload["content"]
        assert embed["title"] == "🤝 New Consultation Request"
        assert embed["footer"]["text"] == "ID: cr-1 • novique.ai"

        fields = {field["name"]: field["value"] for field in embed["fields"]}
        assert "📞 +15555550100" in fields["👤 Contact"]
        assert "**Size:** Not specified" in fields["🏢 Business"]
        assert fields["💼 Challenges"] == "x" * 100 + "..."

    def test_roi_assessment_hot_lead(self, discord):
        results = {"roiPercent": 350, "paybackMonths": 2, "netBenefitPerMonth": 12000}

        NotificationService.roi_assessment("roi-1", "owner@acme.com", results, industry="healthcare")

        embed = sent_payload(discord)["embeds"][0]
        fields = {field["name"]: field["value"] for field in embed["fields"]}
        assert embed["color"] == 0x22C55E
        assert embed["title"].endswith("🔥")
        assert fields["📈 ROI Score"] == "**100/100** 🚀"
        assert "**owner**" in fields["👤 Contact"]
        assert "$12,000/mo" in fields["💰 Projections"]
        assert "2.0 months" in fields["💰 Projections"]

    def test_roi_assessment_without_results(self, discord):
        NotificationService.roi_assessment("roi_123", "lead@example.com", {})

        embed = sent_payload(discord)["embeds"][0]
        names = [field["name"] for field in embed["fields"]]
        assert "💰 Projections" not in names
        assert "🏢 Company" not in names

    def test_sms_received_truncates_body(self, discord):
        NotificationService.sms_received("comm-1", "+15555550100", "y" * 120)

        embed = sent_payload(discord)["embeds"][0]
        assert embed["fields"][1]["value"] == '"' + "y" * 100 + '..."'

    def test_voicemail_duration_optional(self, discord):
        NotificationService.voicemail_received("vm-1", "+15555550100")

        embed = sent_payload(discord)["embeds"][0]
        assert len(embed["fields"]) == 1


class TestScorePresentation:
    """Tests for ROI score colors and emoji."""

    @pytest.mark.parametrize("score, color", [(85, 0x22C55E), (65, 0xF59E0B), (45, 0xEF4444), (10, 0x6B7280)])
    def test_color(self, score, color):
        assert score_color(score) == color

    def test_badge_and_emoji(self):
        assert score_badge(80) == "🔥"
        assert score_badge(39) == "📊"
        assert score_emoji(95) == "🚀"
        assert score_emoji(72) == "⭐"


class TestAdminSms:
    """Tests for SMS alerts to the admin phone."""

    def test_skipped_without_config(self, monkeypatch):
        monkeypatch.setattr(settings, "ADMIN_PHONE_NUMBER", "")

        with patch.object(TwilioService, "send_sms") as send:
            result = NotificationService.admin_sms_for_message("+15555550100", "hello")

        assert result["success"] is False
        send.assert_not_called()

    def test_sent_when_configured(self, monkeypatch):
        monkeypatch.setattr(settings, "ADMIN_PHONE_NUMBER", "+15555550111")
        monkeypatch.setattr(settings, "TWILIO_PHONE_NUMBER", "+15555550199")
        monkeypatch.setattr(settings, "TWILIO_ACCOUNT_SID", "AC123")
        monkeypatch.setattr(settings, "TWILIO_AUTH_TOKEN", "token")

        with patch.object(TwilioService, "send_sms", return_value="SM1") as send:
            result = NotificationService.admin_sms_for_voicemail("+15555550100", 42)

        assert result == {"success": True, "error": None}
        to, body = send.call_args.args
        assert to == "+15555550111"
        assert "Duration: 42s" in body
        assert body.endswith("/admin/communications")

    def test_twilio_failure_is_reported_not_raised(self, monkeypatch):
        monkeypatch.setattr(settings, "ADMIN_PHONE_NUMBER", "+15555550111")
        monkeypatch.setattr(settings, "TWILIO_PHONE_NUMBER", "+15555550199")
        monkeypatch.setattr(settings, "TWILIO_ACCOUNT_SID", "AC123")
        monkeypatch.setattr(settings, "TWILIO_AUTH_TOKEN", "token")

        with patch.object(TwilioService, "send_sms", side_effect=UpstreamServiceError("Twilio", "21211")):
            result = NotificationService.send_admin_sms("test")

        assert result["success"] is False
        assert "21211" in result["error"]

    def test_transport_error_is_reported_not_raised(self, monkeypatch):
        monkeypatch.setattr(settings, "ADMIN_PHONE_NUMBER", "+15555550111")
        monkeypatch.setattr(settings, "TWILIO_PHONE_NUMBER", "+15555550199")
        monkeypatch.setattr(settings, "TWILIO_ACCOUNT_SID", "AC123")
        monkeypatch.setattr(settings, "TWILIO_AUTH_TOKEN", "token")

        with patch.object(TwilioService, "send_sms", side_effect=ConnectionError("network down")):
            result = NotificationService.send_admin_sms("test")

        assert result == {"success": False, "error": "network down"}


class TestSendSms:
    """Tests for TwilioService.send_sms error mapping."""

    def test_connection_error_becomes_upstream_error(self, monkeypatch):
        monkeypatch.setattr(settings, "TWILIO_PHONE_NUMBER", "+15555550199")
        client = MagicMock()
        client.messages.create.side_effect = ConnectionError("network down")

        with patch.object(TwilioService, "get_client", return_value=client):
            with pytest.raises(UpstreamServiceError) as exc_info:
                TwilioService.send_sms("+15555550100", "hello")

        assert "network down" in exc_info.value.message
