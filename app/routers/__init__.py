# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by feature:
# - health.py: Health check endpoints
# - blog.py / labs.py: Content CRUD and image uploads
# - ai.py: AI-assisted post generation, research, image search
# - communications.py: Voicemail/SMS inbox
# - customers.py / consultations.py / roi.py: Leads and CRM
# - dashboard.py: Admin dashboard statistics
# - admin.py: User management and SMS replies
# - twilio.py: Twilio webhooks
# - jarvis.py: Jarvis integration API
# - cron.py: Scheduled job triggers
#
# Each router is mounted in main.py with a URL prefix.
# =============================================================================

from . import admin
from . import ai
from . import blog
from . import communications
from . import consultations
from . import cron
from . import customers
from . import dashboard
from . import health
from . import jarvis
from . import labs
from . import roi
from . import twilio

__all__ = [
    "admin",
    "ai",
    "blog",
    "communications",
    "consultations",
    "cron",
    "customers",
    "dashboard",
    "health",
    "jarvis",
    "labs",
    "roi",
    "twilio",
]
