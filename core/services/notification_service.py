# =============================================================================
# core/services/notification_service.py - Staff Alerts
# =============================================================================
# Instant alerts for new leads and messages:
# - Discord channel via incoming webhook (rich embeds)
# - SMS to ADMIN_PHONE_NUMBER via Twilio
#
# Alerts are best-effort. Every sender returns a NotificationResult and
# logs failures; none of them raise, so a broken webhook never fails the
# request that triggered it.
# =============================================================================

import logging
from typing import Any, TypedDict

import httpx

from app.config import settings
from app.exceptions import NoviqueException
from core.services.twilio_service import TwilioService
from lib.roi import calculate_roi_score
from lib.utils import truncate, utc_now, utc_now_iso

logger = logging.getLogger(__name__)

# Embed colors
COLOR_CONSULTATION = 0x0891B2
COLOR_SMS = 0x22C55E
COLOR_VOICEMAIL = 0x8B5CF6
COLOR_TEST = 0x3B82F6

FOOTER_SUFFIX = "novique.ai"


class NotificationResult(TypedDict):
    success: bool
    error: str | None


def _ok() -> NotificationResult:
    return {"success": True, "error": None}


def _failed(error: str) -> NotificationResult:
    return {"success": False, "error": error}


# =============================================================================
# ROI score presentation
# =============================================================================

def score_color(score: int) -> int:
    if score >= 80:
        return 0x22C55E
    if score >= 60:
        return 0xF59E0B
    if score >= 40:
        return 0xEF4444
    return 0x6B7280


def score_badge(score: int) -> str:
    if score >= 80:
        return "🔥"
    if score >= 60:
        return "⭐"
    if score >= 40:
        return "📈"
    return "📊"


def score_emoji(score: int) -> str:
    if score >= 90:
        return "🚀"
    if score >= 80:
        return "🔥"
    if score >= 70:
        return "⭐"
    if score >= 60:
        return "👍"
    if score >= 50:
        return "📈"
    return "📊"


class NotificationService:
    """Builds and sends staff alerts."""

    # -------------------------------------------------------------------------
    # Discord
    # -------------------------------------------------------------------------

    @staticmethod
    def send_discord(payload: dict[str, Any]) -> NotificationResult:
        """POST a webhook payload to Discord."""
        if not settings.DISCORD_WEBHOOK_URL:
            logger.warning("DISCORD_WEBHOOK_URL not configured; skipping notification")
            return _failed("Discord webhook URL not configured")

        try:
            response = httpx.post(
                settings.DISCORD_WEBHOOK_URL,
                json=payload,
                timeout=settings.DISCORD_WEBHOOK_TIMEOUT,
            )
        except httpx.TimeoutException:
            logger.error("Discord webhook timeout")
            return _failed("Discord webhook timeout")
        except httpx.HTTPError as e:
            logger.error(f"Discord webhook network error: {e}")
            return _failed("Network error")
        except Exception as e:
            logger.error(f"Discord webhook error: {e}")
            return _failed(str(e))

        if response.is_success:
            logger.info("Discord notification sent")
            return _ok()

        logger.error(f"Discord webhook failed: {response.status_code} {response.text}")
        return _failed(f"HTTP {response.status_code}: {response.reason_phrase}")

    @staticmethod
    def _embed(title: str, color: int, fields: list[dict[str, Any]], record_id: Any) -> dict[str, Any]:
        return {
            "title": title,
            "color": color,
            "fields": fields,
            "footer": {"text": f"ID: {record_id} • {FOOTER_SUFFIX}"},
            "timestamp": utc_now_iso(),
        }

    @staticmethod
    def consultation_request(consultation: dict[str, Any]) -> NotificationResult:
        """Alert for a new booking request."""
        contact = f"**{consultation.get('name')}**\n📧 {consultation.get('email')}"
        if consultation.get("phone"):
            contact += f"\n📞 {consultation['phone']}"

        fields = [
            {"name": "👤 Contact", "value": contact, "inline": True},
            {
                "name": "🏢 Business",
                "value": (
                    f"**Type:** {consultation.get('business_type') or 'Not specified'}\n"
                    f"**Size:** {consultation.get('business_size') or 'Not specified'}"
                ),
                "inline": True,
            },
        ]
        if consultation.get("meeting_type"):
            fields.append({"name": "📅 Meeting Preference", "value": consultation["meeting_type"], "inline": True})
        if consultation.get("challenges"):
            fields.append({"name": "💼 Challenges", "value": truncate(consultation["challenges"], 100), "inline": False})

        embed = NotificationService._embed(
            "🤝 New Consultation Request", COLOR_CONSULTATION, fields, consultation.get("id"),
        )
        return NotificationService.send_discord({
            "content": f"🚨 **New consultation request from {consultation.get('name')}**",
            "embeds": [embed],
        })

    @staticmethod
    def roi_assessment(
        record_id: Any,
        email: str,
        results: dict[str, Any],
        industry: str | None = None,
        name: str | None = None,
    ) -> NotificationResult:
        """Alert for a calculator lead, colored by its ROI score."""
        score = calculate_roi_score(results)
        badge = score_badge(score)

        fields = [
            {"name": "👤 Contact", "value": f"**{name or email.split('@')[0]}**\n📧 {email}", "inline": True},
        ]
        if industry:
            fields.append({"name": "🏢 Company", "value": industry, "inline": True})
        fields.append({"name": "📈 ROI Score", "value": f"**{score}/100** {score_emoji(score)}", "inline": True})

        metrics = []
        if isinstance(results.get("roiPercent"), (int, float)):
            metrics.append(f"**ROI:** {results['roiPercent']:.0f}%")
        if isinstance(results.get("netBenefitPerMonth"), (int, float)):
            metrics.append(f"**Net Benefit:** ${results['netBenefitPerMonth']:,.0f}/mo")
        if isinstance(results.get("paybackMonths"), (int, float)):
            metrics.append(f"**Payback:** {results['paybackMonths']:.1f} months")
        if metrics:
            fields.append({"name": "💰 Projections", "value": "\n".join(metrics), "inline": False})

        embed = NotificationService._embed(f"📊 New ROI Assessment {badge}", score_color(score), fields, record_id)
        return NotificationService.send_discord({
            "content": f"🚨 **New ROI assessment from {email}** {badge}",
            "embeds": [embed],
        })

    @staticmethod
    def sms_received(record_id: Any, from_number: str, body: str) -> NotificationResult:
        fields = [
            {"name": "📱 From", "value": from_number, "inline": True},
            {"name": "💬 Message", "value": f'"{truncate(body, 100)}"', "inline": False},
        ]
        embed = NotificationService._embed("💬 New SMS Message", COLOR_SMS, fields, record_id)
        return NotificationService.send_discord({
            "content": f"🚨 **New SMS from {from_number}**",
            "embeds": [embed],
        })

    @staticmethod
    def voicemail_received(record_id: Any, from_number: str, duration: int | None = None) -> NotificationResult:
        fields = [{"name": "📱 From", "value": from_number, "inline": True}]
        if duration:
            fields.append({"name": "⏱️ Duration", "value": f"{duration} seconds", "inline": True})
        embed = NotificationService._embed("📞 New Voicemail", COLOR_VOICEMAIL, fields, record_id)
        return NotificationService.send_discord({
            "content": f"🚨 **New voicemail from {from_number}**",
            "embeds": [embed],
        })

    @staticmethod
    def test() -> NotificationResult:
        """Connectivity check for the Discord webhook."""
        embed = {
            "title": "🧪 Webhook Test",
            "description": "Discord webhook integration is working!",
            "color": COLOR_TEST,
            "fields": [
                {"name": "🚀 Status", "value": "✅ Connection successful", "inline": True},
                {"name": "🕐 Time", "value": utc_now().strftime("%H:%M:%S UTC"), "inline": True},
            ],
            "footer": {"text": f"{FOOTER_SUFFIX} webhook test"},
            "timestamp": utc_now_iso(),
        }
        return NotificationService.send_discord({
            "content": "🧪 **Webhook test notification**",
            "embeds": [embed],
        })

    # -------------------------------------------------------------------------
    # Admin SMS
    # -------------------------------------------------------------------------

    @staticmethod
    def admin_sms_configured() -> bool:
        return bool(
            settings.ADMIN_PHONE_NUMBER
            and settings.TWILIO_PHONE_NUMBER
            and settings.twilio_configured
        )

    @staticmethod
    def send_admin_sms(body: str) -> NotificationResult:
        if not NotificationService.admin_sms_configured():
            logger.info("Admin SMS skipped - missing Twilio config")
            return _failed("Admin SMS not configured")

        try:
            TwilioService.send_sms(settings.ADMIN_PHONE_NUMBER, body)
        except NoviqueException as e:
            logger.error(f"Failed to send admin notification: {e.message}")
            return _failed(e.message)
        except Exception as e:
            logger.error(f"Failed to send admin notification: {e}")
            return _failed(str(e))

        logger.info(f"Admin notification sent to {settings.ADMIN_PHONE_NUMBER}")
        return _ok()

    @staticmethod
    def admin_sms_for_message(from_number: str, body: str) -> NotificationResult:
        preview = truncate(body, 50)
        return NotificationService.send_admin_sms(
            f'New SMS from {from_number}\n"{preview}"\n'
            f"View: {settings.SITE_URL}/admin/communications"
        )

    @staticmethod
    def admin_sms_for_voicemail(from_number: str, duration: int) -> NotificationResult:
        return NotificationService.send_admin_sms(
            f"New voicemail from {from_number}\nDuration: {duration}s\n"
            f"View: {settings.SITE_URL}/admin/communications"
        )
