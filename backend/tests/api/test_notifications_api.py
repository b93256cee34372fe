import pytest

ALICE = {"X-User-Id": "alice"}
BOB = {"X-User-Id": "bob"}


async def _bob_post(api_client):
	response = await api_client.post("/posts", json={"content": "hello from bob"}, headers=BOB)
	assert response.status_code == 201
	return response.json()["id"]


@pytest.mark.asyncio
async def test_notifications_list_newest_first(api_client):
	post_id = await _bob_post(api_client)
	await api_client.put(f"/posts/{post_id}/like", headers=ALICE)
	await api_client.post(f"/posts/{post_id}/comment", json={"text": "nice"}, headers=ALICE)

	response = await api_client.get("/notifications", headers=BOB)
	assert response.status_code == 200
	payload = response.json()
	assert payload["total"] == 2
	assert payload["page"] == 1
	assert payload["limit"] == 20
	assert payload["hasMore"] is False
	types = {item["type"] for item in payload["notifications"]}
	assert types == {"like", "comment"}
	first = payload["notifications"][0]
	assert first["recipient"] == "bob"
	assert first["initiator"] == "alice"
	assert first["post"] == post_id
	assert first["read"] is False

	empty = (await api_client.get("/notifications", headers=ALICE)).json()
	assert empty["total"] == 0


@pytest.mark.asyncio
async def test_mark_one_notification_read(api_client):
	await api_client.put("/users/bob/follow", headers=ALICE)
	notification = (await api_client.get("/notifications", headers=BOB)).json()["notifications"][0]
	assert notification["type"] == "follow"

	forbidden = await api_client.put(f"/notifications/{notification['id']}/read", headers=ALICE)
	assert forbidden.status_code == 403

	missing = await api_client.put("/notifications/nope/read", headers=BOB)
	assert missing.status_code == 404

	response = await api_client.put(f"/notifications/{notification['id']}/read", headers=BOB)
	assert response.status_code == 200
	assert response.json()["notification"]["read"] is True


@pytest.mark.asyncio
async def test_mark_all_notifications_read(api_client):
	post_id = await _bob_post(api_client)
	await api_client.put(f"/posts/{post_id}/like", headers=ALICE)
	await api_client.put("/users/bob/follow", headers=ALICE)

	response = await api_client.put("/notifications/read-all", headers=BOB)
	assert response.status_code == 200
	assert response.json() == {"message": "All notifications marked as read."}

	payload = (await api_client.get("/notifications", headers=BOB)).json()
	assert all(item["read"] for item in payload["notifications"])


@pytest.mark.asyncio
async def test_notifications_require_authentication(api_client):
	response = await api_client.get("/notifications")
	assert response.status_code == 401
