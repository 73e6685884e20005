# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .blog_service import BlogService
from .communication_service import CommunicationService
from .consultation_service import ConsultationService
from .content_service import ContentService
from .customer_service import CustomerService
from .dashboard_service import DashboardService
from .jarvis_service import JarvisService
from .lab_service import LabService
from .notification_service import NotificationService
from .roi_service import ROIService
from .storage_service import StorageService
from .user_service import UserService
from .voicemail_service import VoicemailService

__all__ = [
    "BlogService",
    "CommunicationService",
    "ConsultationService",
    "ContentService",
    "CustomerService",
    "DashboardService",
    "JarvisService",
    "LabService",
    "NotificationService",
    "ROIService",
    "StorageService",
    "UserService",
    "VoicemailService",
]
