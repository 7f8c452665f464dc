from .base import BaseModel
from .user import User, SubscriptionTier, PaymentStatus
from .form import Form, FormDraft
from .submission import FormSubmission
from .analytics_event import AnalyticsEvent, AnalyticsEventType
from .integration import (
    ZapierIntegration, CRMIntegration, GoogleSheetsIntegration, IntegrationSyncLog,
    CRMType, IntegrationType, SyncStatus
)
from .notification import EmailNotification, EmailStatus
from .payment import PaymentTransaction

__all__ = [
    "BaseModel", "User", "SubscriptionTier", "PaymentStatus", "Form", "FormDraft",
    "FormSubmission", "AnalyticsEvent", "AnalyticsEventType",
    "ZapierIntegration", "CRMIntegration", "GoogleSheetsIntegration", "IntegrationSyncLog",
    "CRMType", "IntegrationType", "SyncStatus", "EmailNotification", "EmailStatus",
    "PaymentTransaction"
]
