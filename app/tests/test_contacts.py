import pytest
from httpx import AsyncClient

CONTACT = {
    "name": "Alice",
    "contactMethod": "email",
    "contactDetail": "alice@example.com",
    "category": "bug",
    "message": "The looper drops the first beat"
}

async def _submit(test_client: AsyncClient, headers: dict = None) -> dict:
    response = await test_client.post("/api/contacts", json=CONTACT, headers=headers or {})
    assert response.status_code == 201
    return response.json()

@pytest.mark.asyncio
async def test_submit_contact_as_user(test_client: AsyncClient, alice, auth_headers):
    contact = await _submit(test_client, auth_headers(alice))

    assert contact["userId"] == alice.id
    assert contact["status"] == "new"
    assert contact["isAnonymous"] is False

    mine = (await test_client.get("/api/contacts/my", headers=auth_headers(alice))).json()
    assert [c["id"] for c in mine] == [contact["id"]]

@pytest.mark.asyncio
async def test_submit_contact_anonymously(test_client: AsyncClient):
    contact = await _submit(test_client)

    assert contact["userId"] is None
    assert contact["isAnonymous"] is True

@pytest.mark.asyncio
async def test_admin_reply_notifies_submitter(test_client: AsyncClient, alice, admin, auth_headers):
    """Reply moves the contact to in_progress and sends alice a contact_reply"""
    contact = await _submit(test_client, auth_headers(alice))

    response = await test_client.post(
        f"/api/contacts/{contact['id']}/reply",
        json={"reply": "Thanks, we are looking into it"},
        headers=auth_headers(admin)
    )
    assert response.status_code == 201
    assert response.json()["contactId"] == contact["id"]

    detail = (await test_client.get(f"/api/contacts/{contact['id']}", headers=auth_headers(alice))).json()
    assert detail["status"] == "in_progress"
    assert [r["reply"] for r in detail["replies"]] == ["Thanks, we are looking into it"]

    notifications = (await test_client.get("/api/notifications", headers=auth_headers(alice))).json()
    assert len(notifications) == 1
    assert notifications[0]["type"] == "contact_reply"
    assert notifications[0]["contactId"] == contact["id"]
    assert notifications[0]["actorId"] is None
    assert notifications[0]["actor"] is None

@pytest.mark.asyncio
async def test_reply_to_anonymous_contact_sends_no_notification(test_client: AsyncClient, admin, auth_headers):
    contact = await _submit(test_client)

    response = await test_client.post(
        f"/api/contacts/{contact['id']}/reply",
        json={"reply": "Fixed in the next release"},
        headers=auth_headers(admin)
    )
    assert response.status_code == 201

    notifications = (await test_client.get("/api/notifications", headers=auth_headers(admin))).json()
    assert notifications == []

@pytest.mark.asyncio
async def test_second_reply_keeps_status(test_client: AsyncClient, alice, admin, auth_headers):
    contact = await _submit(test_client, auth_headers(alice))
    url = f"/api/contacts/{contact['id']}"

    response = await test_client.patch(f"{url}/status", json={"status": "resolved"}, headers=auth_headers(admin))
    assert response.status_code == 200
    assert response.json()["status"] == "resolved"

    await test_client.post(f"{url}/reply", json={"reply": "One more thing"}, headers=auth_headers(admin))

    detail = (await test_client.get(url, headers=auth_headers(admin))).json()
    assert detail["status"] == "resolved"

@pytest.mark.asyncio
async def test_blank_reply_is_rejected(test_client: AsyncClient, alice, admin, auth_headers):
    contact = await _submit(test_client, auth_headers(alice))

    response = await test_client.post(
        f"/api/contacts/{contact['id']}/reply",
        json={"reply": "  "},
        headers=auth_headers(admin)
    )
    assert response.status_code == 400

@pytest.mark.asyncio
async def test_admin_endpoints_require_admin(test_client: AsyncClient, alice, bob, auth_headers):
    contact = await _submit(test_client, auth_headers(alice))

    response = await test_client.post(
        f"/api/contacts/{contact['id']}/reply",
        json={"reply": "Not my place"},
        headers=auth_headers(bob)
    )
    assert response.status_code == 403

    assert (await test_client.get("/api/contacts", headers=auth_headers(alice))).status_code == 403

@pytest.mark.asyncio
async def test_contact_visible_to_owner_and_admin_only(test_client: AsyncClient, alice, bob, admin, auth_headers):
    contact = await _submit(test_client, auth_headers(alice))
    url = f"/api/contacts/{contact['id']}"

    assert (await test_client.get(url, headers=auth_headers(alice))).status_code == 200
    assert (await test_client.get(url, headers=auth_headers(admin))).status_code == 200
    assert (await test_client.get(url, headers=auth_headers(bob))).status_code == 403
    assert (await test_client.get("/api/contacts/9999", headers=auth_headers(admin))).status_code == 404

    everything = (await test_client.get("/api/contacts", headers=auth_headers(admin))).json()
    assert [c["id"] for c in everything] == [contact["id"]]
