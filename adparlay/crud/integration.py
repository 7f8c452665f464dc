from typing import Any, Dict, List, Optional
from datetime import datetime
from sqlalchemy.orm import Session
from adparlay.models.integration import (
    ZapierIntegration, CRMIntegration, GoogleSheetsIntegration, IntegrationSyncLog,
    IntegrationType, SyncStatus
)


def upsert_zapier(db: Session, form_id: str, webhook_url: str, is_active: bool = True,
                  custom_fields: Optional[Dict[str, Any]] = None) -> ZapierIntegration:
    integration = db.query(ZapierIntegration).filter(ZapierIntegration.form_id == form_id).first()
    if integration is None:
        integration = ZapierIntegration(form_id=form_id)
        db.add(integration)
    integration.webhook_url = webhook_url
    integration.is_active = is_active
    integration.custom_fields = dict(custom_fields or {})
    db.commit()
    db.refresh(integration)
    return integration


def upsert_crm(db: Session, form_id: str, **fields) -> CRMIntegration:
    integration = db.query(CRMIntegration).filter(
        CRMIntegration.form_id == form_id, CRMIntegration.crm_type == fields["crm_type"]
    ).first()
    if integration is None:
        integration = CRMIntegration(form_id=form_id)
        db.add(integration)
    for field, value in fields.items():
        setattr(integration, field, value)
    integration.is_active = True
    db.commit()
    db.refresh(integration)
    return integration


def upsert_google_sheets(db: Session, form_id: str, **fields) -> GoogleSheetsIntegration:
    integration = db.query(GoogleSheetsIntegration).filter(GoogleSheetsIntegration.form_id == form_id).first()
    if integration is None:
        integration = GoogleSheetsIntegration(form_id=form_id)
        db.add(integration)
    for field, value in fields.items():
        setattr(integration, field, value)
    integration.is_active = True
    db.commit()
    db.refresh(integration)
    return integration


def get_active_zapier(db: Session, form_id: str) -> List[ZapierIntegration]:
    return db.query(ZapierIntegration).filter(
        ZapierIntegration.form_id == form_id, ZapierIntegration.is_active == True
    ).all()


def get_active_crm(db: Session, form_id: str) -> List[CRMIntegration]:
    return db.query(CRMIntegration).filter(
        CRMIntegration.form_id == form_id, CRMIntegration.is_active == True
    ).all()


def get_active_google_sheets(db: Session, form_id: str) -> List[GoogleSheetsIntegration]:
    return db.query(GoogleSheetsIntegration).filter(
        GoogleSheetsIntegration.form_id == form_id, GoogleSheetsIntegration.is_active == True
    ).all()


def log_sync(
    db: Session,
    integration_type: IntegrationType,
    status: SyncStatus,
    form_id: Optional[str] = None,
    submission_id: Optional[str] = None,
    target: Optional[str] = None,
    payload: Optional[Dict[str, Any]] = None,
    error: Optional[str] = None,
) -> IntegrationSyncLog:
    entry = IntegrationSyncLog(
        integration_type=integration_type,
        status=status,
        form_id=form_id,
        submission_id=submission_id,
        target=target,
        payload=payload,
        error=error,
        synced_at=datetime.utcnow(),
    )
    db.add(entry)
    db.commit()
    db.refresh(entry)
    return entry
