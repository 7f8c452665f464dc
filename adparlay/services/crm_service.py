import json
import logging
from typing import Any, Dict, Optional

import requests

from adparlay.core.config import settings
from adparlay.core.exceptions import IntegrationError
from adparlay.models.form import Form
from adparlay.models.integration import CRMType
from adparlay.models.submission import FormSubmission

logger = logging.getLogger(__name__)

FIELD_MAPPINGS: Dict[CRMType, Dict[str, str]] = {
    CRMType.HUBSPOT: {
        "email": "email",
        "first_name": "firstname",
        "last_name": "lastname",
        "phone": "phone",
        "company": "company",
        "lead_source": "hs_lead_source",
    },
    CRMType.ZOHO: {
        "email": "Email",
        "first_name": "First_Name",
        "last_name": "Last_Name",
        "phone": "Phone",
        "company": "Account_Name",
        "lead_source": "Lead_Source",
    },
    CRMType.SALESFORCE: {
        "email": "Email",
        "first_name": "FirstName",
        "last_name": "LastName",
        "phone": "Phone",
        "company": "Company",
        "lead_source": "LeadSource",
    },
}

HUBSPOT_CONTACTS_URL = "https://api.hubapi.com/crm/v3/objects/contacts"
ZOHO_LEADS_URL = "https://www.zohoapis.com/crm/v2/Leads"
SALESFORCE_API_VERSION = "v58.0"


def extract_contact(form: Form, submission: FormSubmission) -> Dict[str, Any]:
    """Map answers onto CRM contact fields by question type and label."""
    contact: Dict[str, Any] = {
        "lead_source": f"AdParlay Form: {form.title}",
        "custom_fields": {},
    }
    answers = submission.form_data or {}

    for question in form.questions or []:
        value = answers.get(question.get("id"))
        if not value:
            continue
        text = value if isinstance(value, str) else json.dumps(value)
        label = question.get("label") or question.get("id")
        lowered = label.lower()
        qtype = question.get("type")

        if qtype == "email":
            contact["email"] = text
        elif qtype == "phone":
            contact["phone"] = text
        elif qtype == "text" and ("first name" in lowered or "firstname" in lowered):
            contact["first_name"] = text
        elif qtype == "text" and ("last name" in lowered or "lastname" in lowered):
            contact["last_name"] = text
        elif qtype == "text" and "company" in lowered:
            contact["company"] = text
        else:
            contact["custom_fields"][label] = text
    return contact


def map_contact(crm_type: CRMType, contact: Dict[str, Any]) -> Dict[str, Any]:
    mapping = FIELD_MAPPINGS[crm_type]
    return {
        provider_field: contact[field]
        for field, provider_field in mapping.items()
        if contact.get(field)
    }


def push_contact(
    crm_type: CRMType,
    access_token: str,
    contact: Dict[str, Any],
    instance_url: Optional[str] = None,
) -> Dict[str, Any]:
    """Create the contact (HubSpot) or lead (Zoho, Salesforce). Returns the provider response body."""
    properties = map_contact(crm_type, contact)

    if crm_type == CRMType.HUBSPOT:
        url = HUBSPOT_CONTACTS_URL
        headers = {"Authorization": f"Bearer {access_token}"}
        body: Dict[str, Any] = {"properties": properties}
    elif crm_type == CRMType.ZOHO:
        url = ZOHO_LEADS_URL
        headers = {"Authorization": f"Zoho-oauthtoken {access_token}"}
        body = {"data": [properties]}
    else:
        if not instance_url:
            raise IntegrationError("Salesforce integration requires an instance URL", status_code=400)
        url = f"{instance_url.rstrip('/')}/services/data/{SALESFORCE_API_VERSION}/sobjects/Lead/"
        headers = {"Authorization": f"Bearer {access_token}"}
        body = properties

    try:
        response = requests.post(url, json=body, headers=headers, timeout=settings.INTEGRATION_TIMEOUT)
        response.raise_for_status()
    except requests.RequestException as e:
        logger.error(f"Syncing contact to {crm_type.value} failed: {e}")
        raise IntegrationError(f"Failed to sync to {crm_type.value}: {e}")

    logger.info(f"Contact synced to {crm_type.value}")
    try:
        return response.json()
    except ValueError:
        return {}
