import os

# The engine is built at import time, so the environment must be ready first
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "testing"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["PAYSTACK_SECRET_KEY"] = "sk_test_adparlay"
os.environ["PREMIUM_TEST_EMAILS"] = "vip@adparlay.test"
os.environ["FRONTEND_URL"] = "https://forms.adparlay.test"
os.environ["SEND_EMAILS"] = "false"

import pytest
import requests
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import adparlay.models  # noqa: F401
from adparlay.core.security import create_access_token
from adparlay.db.database import Base, get_db
from adparlay.main import app
from adparlay.services import submission_hooks

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

API = "/api/v1"


class FakeResponse:
    def __init__(self, status_code=200, json_data=None):
        self.status_code = status_code
        self._json = json_data if json_data is not None else {}

    def json(self):
        return self._json

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db, monkeypatch):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    # Background fan-out opens its own session
    monkeypatch.setattr(submission_hooks, "SessionLocal", TestingSessionLocal)
    yield TestClient(app)
    app.dependency_overrides.clear()


def auth_headers(uid="user-1", email="owner@adparlay.test", name="Form Owner"):
    token = create_access_token(uid, email=email, name=name)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def owner_headers():
    return auth_headers()


@pytest.fixture
def other_headers():
    return auth_headers(uid="user-2", email="other@adparlay.test", name="Someone Else")


@pytest.fixture
def premium_headers():
    return auth_headers(uid="vip-1", email="vip@adparlay.test", name="Premium Owner")


def branching_form_payload(title="Property enquiry"):
    """Intro question revealing either the buyer or the seller block."""
    return {
        "title": title,
        "blocks": [
            {"id": "intro", "title": "About you"},
            {"id": "buyer", "title": "Buying"},
            {"id": "seller", "title": "Selling"},
            {"id": "contact", "title": "Contact"},
        ],
        "questions": [
            {
                "id": "q-intent",
                "type": "radio",
                "label": "Are you buying or selling?",
                "required": True,
                "options": ["Buy", "Sell"],
                "blockId": "intro",
                "conditionalLogic": [
                    {"option": "Buy", "targetBlockId": "buyer", "action": "show"},
                    {"option": "Sell", "targetBlockId": "seller", "action": "show"},
                ],
            },
            {"id": "q-budget", "type": "text", "label": "Budget", "required": True, "blockId": "buyer"},
            {"id": "q-address", "type": "text", "label": "Property address", "required": True, "blockId": "seller"},
            {"id": "q-name", "type": "text", "label": "Full name", "required": True, "blockId": "contact"},
            {"id": "q-email", "type": "email", "label": "Email", "required": True, "blockId": "contact"},
        ],
    }


@pytest.fixture
def form_payload():
    return branching_form_payload()


@pytest.fixture
def created_form(client, owner_headers, form_payload):
    response = client.post(f"{API}/forms", json=form_payload, headers=owner_headers)
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
def published_form(client, owner_headers, created_form):
    response = client.patch(
        f"{API}/forms/{created_form['id']}/publish",
        json={"is_published": True},
        headers=owner_headers,
    )
    assert response.status_code == 200, response.text
    return response.json()
