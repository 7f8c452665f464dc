# File: adparlay/schemas/integration.py
from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional
from datetime import datetime
from adparlay.models.integration import CRMType


class ZapierSetupRequest(BaseModel):
    form_id: str = Field(..., alias="formId")
    webhook_url: str = Field(..., alias="webhookUrl")
    is_active: bool = Field(True, alias="isActive")
    custom_fields: Dict[str, Any] = Field(default_factory=dict, alias="customFields")

    class Config:
        populate_by_name = True


class ZapierConfig(BaseModel):
    webhook_url: str = Field(..., alias="webhookUrl")
    custom_fields: Dict[str, Any] = Field(default_factory=dict, alias="customFields")

    class Config:
        populate_by_name = True


class ZapierTriggerRequest(BaseModel):
    config: ZapierConfig
    webhook_data: Dict[str, Any] = Field(..., alias="webhookData")

    class Config:
        populate_by_name = True


class CRMSetupRequest(BaseModel):
    form_id: str = Field(..., alias="formId")
    type: CRMType
    access_token: str = Field(..., alias="accessToken")
    refresh_token: Optional[str] = Field(None, alias="refreshToken")
    client_id: Optional[str] = Field(None, alias="clientId")
    client_secret: Optional[str] = Field(None, alias="clientSecret")
    account_id: Optional[str] = Field(None, alias="accountId")
    portal_id: Optional[str] = Field(None, alias="portalId")
    instance_url: Optional[str] = Field(None, alias="instanceUrl")

    class Config:
        populate_by_name = True


class CRMConfig(BaseModel):
    type: CRMType
    access_token: str = Field(..., alias="accessToken")
    refresh_token: Optional[str] = Field(None, alias="refreshToken")
    account_id: Optional[str] = Field(None, alias="accountId")
    portal_id: Optional[str] = Field(None, alias="portalId")
    instance_url: Optional[str] = Field(None, alias="instanceUrl")

    class Config:
        populate_by_name = True


class CRMContact(BaseModel):
    email: Optional[str] = None
    first_name: Optional[str] = Field(None, alias="firstName")
    last_name: Optional[str] = Field(None, alias="lastName")
    phone: Optional[str] = None
    company: Optional[str] = None
    lead_source: str = Field("Adparlay", alias="leadSource")
    custom_fields: Dict[str, Any] = Field(default_factory=dict, alias="customFields")

    class Config:
        populate_by_name = True


class CRMSubmissionRef(BaseModel):
    id: str
    form_id: str = Field(..., alias="formId")
    form_title: str = Field("", alias="formTitle")
    submitted_at: Optional[datetime] = Field(None, alias="submittedAt")

    class Config:
        populate_by_name = True


class CRMSyncRequest(BaseModel):
    config: CRMConfig
    contact: CRMContact
    submission: CRMSubmissionRef


class GoogleSheetsSetupRequest(BaseModel):
    form_id: str = Field(..., alias="formId")
    spreadsheet_id: str = Field(..., alias="spreadsheetId")
    sheet_name: str = Field("Submissions", alias="sheetName")
    access_token: str = Field(..., alias="accessToken")
    refresh_token: Optional[str] = Field(None, alias="refreshToken")

    class Config:
        populate_by_name = True


class GoogleSheetsConfig(BaseModel):
    spreadsheet_id: str = Field(..., alias="spreadsheetId")
    sheet_name: str = Field("Submissions", alias="sheetName")
    access_token: str = Field(..., alias="accessToken")
    refresh_token: Optional[str] = Field(None, alias="refreshToken")

    class Config:
        populate_by_name = True


class GoogleSheetsSyncRequest(BaseModel):
    config: GoogleSheetsConfig
    row_data: Dict[str, Any] = Field(..., alias="rowData")

    class Config:
        populate_by_name = True


class SyncResult(BaseModel):
    message: str
    sync_id: Optional[int] = None
    status: str


class FormIntegrations(BaseModel):
    form_id: str
    zapier: List[Dict[str, Any]] = []
    crm: List[Dict[str, Any]] = []
    google_sheets: List[Dict[str, Any]] = []
