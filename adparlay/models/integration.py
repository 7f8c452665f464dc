# File: adparlay/models/integration.py
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, JSON, Text, Enum
from adparlay.models.base import BaseModel
import enum


class CRMType(enum.Enum):
    HUBSPOT = "hubspot"
    ZOHO = "zoho"
    SALESFORCE = "salesforce"


class IntegrationType(enum.Enum):
    ZAPIER = "zapier"
    CRM = "crm"
    GOOGLE_SHEETS = "google_sheets"


class SyncStatus(enum.Enum):
    SUCCESS = "success"
    FAILED = "failed"


class ZapierIntegration(BaseModel):
    __tablename__ = "zapier_integrations"

    form_id = Column(String(36), ForeignKey("forms.id", ondelete="CASCADE"), nullable=False, index=True)
    webhook_url = Column(String(1000), nullable=False)
    is_active = Column(Boolean, default=True)
    custom_fields = Column(JSON, nullable=False, default=dict)


class CRMIntegration(BaseModel):
    __tablename__ = "crm_integrations"

    form_id = Column(String(36), ForeignKey("forms.id", ondelete="CASCADE"), nullable=False, index=True)
    crm_type = Column(Enum(CRMType), nullable=False)
    access_token = Column(Text, nullable=False)
    refresh_token = Column(Text, nullable=True)
    client_id = Column(String(255), nullable=True)
    client_secret = Column(String(255), nullable=True)
    account_id = Column(String(255), nullable=True)
    portal_id = Column(String(255), nullable=True)
    instance_url = Column(String(500), nullable=True)  # Salesforce only
    is_active = Column(Boolean, default=True)


class GoogleSheetsIntegration(BaseModel):
    __tablename__ = "google_sheets_integrations"

    form_id = Column(String(36), ForeignKey("forms.id", ondelete="CASCADE"), nullable=False, index=True)
    spreadsheet_id = Column(String(255), nullable=False)
    sheet_name = Column(String(255), nullable=False, default="Submissions")
    access_token = Column(Text, nullable=False)
    refresh_token = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True)


class IntegrationSyncLog(BaseModel):
    __tablename__ = "integration_sync_logs"

    integration_type = Column(Enum(IntegrationType), nullable=False, index=True)
    form_id = Column(String(36), nullable=True, index=True)
    submission_id = Column(String(36), nullable=True)
    target = Column(String(1000), nullable=True)  # webhook URL, CRM name or spreadsheet id
    payload = Column(JSON, nullable=True)
    status = Column(Enum(SyncStatus), nullable=False)
    error = Column(Text, nullable=True)
    synced_at = Column(DateTime, nullable=False)
