import warnings

from pydantic.warnings import PydanticDeprecatedSince20

from conftest import API, auth_headers, branching_form_payload


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["database"] == "connected"
    assert "X-Process-Time" in response.headers


def test_requests_without_token_are_rejected(client):
    response = client.get(f"{API}/forms")
    assert response.status_code == 401


def test_invalid_token_is_forbidden(client):
    response = client.get(f"{API}/forms", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 403


def test_first_request_provisions_a_free_user(client, owner_headers):
    response = client.get(f"{API}/users/me", headers=owner_headers)
    assert response.status_code == 200
    body = response.json()
    assert body["user"]["uid"] == "user-1"
    assert body["user"]["email"] == "owner@adparlay.test"
    assert body["status"]["subscription"] == "free"
    assert body["usage"] == {"forms_count": 0, "leads_count": 0, "forms_remaining": 3, "leads_remaining": 100}


def test_username_must_be_unique(client, owner_headers, other_headers):
    assert client.put(f"{API}/users/me", json={"username": "jane"}, headers=owner_headers).status_code == 200
    response = client.put(f"{API}/users/me", json={"username": "jane"}, headers=other_headers)
    assert response.status_code == 400


def test_create_form(client, owner_headers, created_form):
    assert created_form["title"] == "Property enquiry"
    assert created_form["form_name"] == "Property enquiry"
    assert created_form["is_published"] is False
    assert created_form["share_url"] is None
    assert created_form["responses_count"] == 0

    intent = created_form["questions"][0]
    assert intent["blockId"] == "intro"
    assert intent["conditionalLogic"][0] == {"option": "Buy", "targetBlockId": "buyer", "action": "show"}


def test_create_form_rejects_broken_structure(client, owner_headers):
    payload = branching_form_payload()
    payload["questions"][1]["blockId"] = "nowhere"
    response = client.post(f"{API}/forms", json=payload, headers=owner_headers)
    assert response.status_code == 422
    issues = response.json()["detail"]["issues"]
    assert issues[0]["code"] == "missing_block"


def test_free_plan_form_limit(client, owner_headers):
    for i in range(3):
        response = client.post(f"{API}/forms", json={"title": f"Form {i}"}, headers=owner_headers)
        assert response.status_code == 201
    response = client.post(f"{API}/forms", json={"title": "One too many"}, headers=owner_headers)
    assert response.status_code == 403
    assert "Form limit reached" in response.json()["detail"]


def test_premium_users_are_not_capped(client, premium_headers):
    for i in range(5):
        response = client.post(f"{API}/forms", json={"title": f"Form {i}"}, headers=premium_headers)
        assert response.status_code == 201


def test_list_forms_only_returns_own_forms(client, owner_headers, other_headers, created_form):
    client.post(f"{API}/forms", json={"title": "Not yours"}, headers=other_headers)
    response = client.get(f"{API}/forms", headers=owner_headers)
    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 1
    assert body["items"][0]["id"] == created_form["id"]


def test_other_users_form_is_not_found(client, other_headers, created_form):
    form_id = created_form["id"]
    assert client.get(f"{API}/forms/{form_id}", headers=other_headers).status_code == 404
    assert client.delete(f"{API}/forms/{form_id}", headers=other_headers).status_code == 404


def test_update_form(client, owner_headers, created_form):
    response = client.put(
        f"{API}/forms/{created_form['id']}",
        json={"title": "Renamed", "form_style": {"primaryColor": "#ff0000"}},
        headers=owner_headers,
    )
    assert response.status_code == 200
    body = response.json()
    assert body["title"] == "Renamed"
    assert body["form_style"] == {"primaryColor": "#ff0000"}
    assert len(body["questions"]) == 5


def test_update_rejects_dangling_rule(client, owner_headers, created_form):
    questions = created_form["questions"]
    questions[0]["conditionalLogic"][0]["targetBlockId"] = "ghost"
    response = client.put(f"{API}/forms/{created_form['id']}", json={"questions": questions}, headers=owner_headers)
    assert response.status_code == 422
    assert response.json()["detail"]["issues"][0]["code"] == "missing_target"


def test_publish_sets_share_links(client, owner_headers, published_form):
    form_id = published_form["id"]
    assert published_form["is_published"] is True
    assert published_form["share_url"] == f"https://forms.adparlay.test/form/{form_id}"
    assert published_form["short_share_url"] == f"https://forms.adparlay.test/f/{form_id}"


def test_delete_form(client, owner_headers, created_form):
    form_id = created_form["id"]
    response = client.delete(f"{API}/forms/{form_id}", headers=owner_headers)
    assert response.status_code == 200
    assert client.get(f"{API}/forms/{form_id}", headers=owner_headers).status_code == 404


def test_duplicate_form(client, owner_headers, published_form):
    response = client.post(f"{API}/forms/{published_form['id']}/duplicate", headers=owner_headers)
    assert response.status_code == 201
    copy = response.json()
    assert copy["id"] != published_form["id"]
    assert copy["title"] == "Property enquiry (Copy)"
    assert copy["is_published"] is False
    assert copy["responses_count"] == 0

    block_ids = [b["id"] for b in copy["blocks"]]
    assert "intro" not in block_ids
    targets = [r["targetBlockId"] for r in copy["questions"][0]["conditionalLogic"]]
    assert targets == block_ids[1:3]


# Builder operations

def test_add_block_and_question(client, owner_headers, created_form):
    form_id = created_form["id"]
    response = client.post(f"{API}/forms/{form_id}/blocks", json={"title": "Extras"}, headers=owner_headers)
    assert response.status_code == 201
    body = response.json()
    block = body["blocks"][-1]
    assert block["title"] == "Extras"
    assert body["questions"][-1]["blockId"] == block["id"]

    response = client.post(
        f"{API}/forms/{form_id}/blocks/{block['id']}/questions",
        json={"type": "rating", "label": "How did we do?"},
        headers=owner_headers,
    )
    assert response.status_code == 201
    question = response.json()["questions"][-1]
    assert question["options"] == ["1", "2", "3", "4", "5"]

    response = client.post(f"{API}/forms/{form_id}/blocks/nope/questions", json={}, headers=owner_headers)
    assert response.status_code == 404


def test_remove_block_prunes_rules(client, owner_headers, created_form):
    response = client.delete(f"{API}/forms/{created_form['id']}/blocks/buyer", headers=owner_headers)
    assert response.status_code == 200
    body = response.json()
    assert [b["id"] for b in body["blocks"]] == ["intro", "seller", "contact"]
    assert [r["option"] for r in body["questions"][0]["conditionalLogic"]] == ["Sell"]


def test_reorder_blocks(client, owner_headers, created_form):
    url = f"{API}/forms/{created_form['id']}/blocks/order"
    response = client.put(url, json={"block_ids": ["contact", "intro", "buyer", "seller"]}, headers=owner_headers)
    assert response.status_code == 200
    assert [b["id"] for b in response.json()["blocks"]] == ["contact", "intro", "buyer", "seller"]

    response = client.put(url, json={"block_ids": ["contact"]}, headers=owner_headers)
    assert response.status_code == 400


def test_move_and_remove_question(client, owner_headers, created_form):
    form_id = created_form["id"]
    response = client.put(
        f"{API}/forms/{form_id}/questions/q-email/move",
        json={"block_id": "intro", "position": 0},
        headers=owner_headers,
    )
    assert response.status_code == 200
    assert response.json()["questions"][0]["id"] == "q-email"

    response = client.delete(f"{API}/forms/{form_id}/questions/q-email", headers=owner_headers)
    assert response.status_code == 200
    assert "q-email" not in [q["id"] for q in response.json()["questions"]]
    assert client.delete(f"{API}/forms/{form_id}/questions/q-email", headers=owner_headers).status_code == 404


def test_change_question_type(client, owner_headers, created_form):
    response = client.patch(
        f"{API}/forms/{created_form['id']}/questions/q-intent/type",
        json={"type": "text"},
        headers=owner_headers,
    )
    assert response.status_code == 200
    intent = response.json()["questions"][0]
    assert intent["type"] == "text"
    assert intent["options"] == []
    assert intent["conditionalLogic"] == []


def test_set_logic(client, owner_headers, created_form):
    url = f"{API}/forms/{created_form['id']}/questions/q-intent/logic"
    response = client.put(
        url, json={"option": "Sell", "target_block_id": "contact", "action": "jump"}, headers=owner_headers
    )
    assert response.status_code == 200
    rules = response.json()["questions"][0]["conditionalLogic"]
    assert {"option": "Sell", "targetBlockId": "contact", "action": "jump"} in rules

    response = client.put(url, json={"option": "Sell", "target_block_id": "ghost"}, headers=owner_headers)
    assert response.status_code == 422

    response = client.put(url, json={"option": "Maybe", "target_block_id": "contact"}, headers=owner_headers)
    assert response.status_code == 422
    assert response.json()["detail"]["issues"][0]["code"] == "unknown_option"


def test_validate_endpoint(client, owner_headers, created_form):
    response = client.get(f"{API}/forms/{created_form['id']}/validate", headers=owner_headers)
    assert response.status_code == 200
    assert response.json() == {"valid": True, "issues": []}


# Templates and drafts

def test_templates(client, owner_headers):
    response = client.get(f"{API}/templates", headers=owner_headers)
    assert response.status_code == 200
    keys = {t["key"] for t in response.json()}
    assert keys == {"real-estate", "event-registration", "customer-feedback"}

    response = client.post(f"{API}/templates/real-estate/forms", headers=owner_headers)
    assert response.status_code == 201
    form = response.json()
    assert form["title"] == "Real Estate Lead Generation"
    assert len(form["blocks"]) == 4
    assert form["is_published"] is False

    assert client.post(f"{API}/templates/unknown/forms", headers=owner_headers).status_code == 404


def test_drafts(client, owner_headers, created_form):
    assert client.get(f"{API}/drafts", headers=owner_headers).status_code == 404

    draft = {"title": "Half done", "blocks": [{"id": "b1", "title": "Start"}], "questions": []}
    response = client.put(f"{API}/drafts", json=draft, headers=owner_headers)
    assert response.status_code == 200
    assert response.json()["form_key"] == "new"

    response = client.put(
        f"{API}/drafts", params={"form_id": created_form["id"]}, json={"title": "Edit"}, headers=owner_headers
    )
    assert response.status_code == 200

    response = client.get(f"{API}/drafts", headers=owner_headers)
    assert response.json()["payload"]["title"] == "Half done"

    assert client.delete(f"{API}/drafts", headers=owner_headers).status_code == 200
    assert client.get(f"{API}/drafts", headers=owner_headers).status_code == 404
    response = client.get(f"{API}/drafts", params={"form_id": created_form["id"]}, headers=owner_headers)
    assert response.json()["payload"]["title"] == "Edit"


def test_drafts_for_someone_elses_form(client, other_headers, created_form):
    response = client.put(
        f"{API}/drafts", params={"form_id": created_form["id"]}, json={"title": "x"}, headers=other_headers
    )
    assert response.status_code == 404


def test_usage_counts_forms(client, owner_headers, created_form):
    usage = client.get(f"{API}/users/me", headers=owner_headers).json()["usage"]
    assert usage["forms_count"] == 1
    assert usage["forms_remaining"] == 2


def test_expired_token_is_forbidden(client):
    from datetime import timedelta
    from adparlay.core.security import create_access_token

    token = create_access_token("user-1", expires_delta=timedelta(minutes=-5))
    response = client.get(f"{API}/forms", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 403
    assert client.get(f"{API}/forms", headers=auth_headers()).status_code == 200


def test_request_models_are_serialised_without_deprecated_calls(client, owner_headers):
    with warnings.catch_warnings():
        warnings.simplefilter("error", PydanticDeprecatedSince20)
        form = client.post(f"{API}/forms", json=branching_form_payload(), headers=owner_headers)
        assert form.status_code == 201
        form_id = form.json()["id"]
        response = client.put(f"{API}/forms/{form_id}", json={"title": "Renamed"}, headers=owner_headers)
        assert response.status_code == 200
        response = client.put(f"{API}/drafts", json={"title": "Half done"}, headers=owner_headers)
        assert response.status_code == 200
