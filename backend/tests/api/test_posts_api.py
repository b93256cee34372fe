import asyncio

import pytest

ALICE = {"X-User-Id": "alice"}
BOB = {"X-User-Id": "bob"}
ADMIN = {"X-User-Id": "root", "X-User-Roles": "admin"}
ANALYZER = {"X-User-Id": "worker", "X-User-Roles": "analyzer"}


async def _create(api_client, headers, content="hello"):
	response = await api_client.post("/posts", json={"content": content}, headers=headers)
	assert response.status_code == 201
	return response.json()


@pytest.mark.asyncio
async def test_requires_authentication(api_client):
	response = await api_client.get("/posts/feed")
	assert response.status_code == 401
	assert response.json()["detail"] == "invalid_token"


@pytest.mark.asyncio
async def test_create_and_read_home_feed(api_client):
	created = await _create(api_client, BOB, "first post")
	assert created["user"] == "bob"
	assert created["isPinned"] is False
	assert "createdAt" in created

	response = await api_client.get("/posts/feed", headers=ALICE)
	assert response.status_code == 200
	payload = response.json()
	assert payload["total"] == 1
	assert payload["page"] == 1
	assert payload["limit"] == 10
	assert payload["hasMore"] is False
	post = payload["posts"][0]
	assert post["id"] == created["id"]
	assert post["relevanceScore"] is not None
	assert post["scoreBreakdown"] is None


@pytest.mark.asyncio
async def test_home_feed_explain_includes_breakdown(api_client):
	await _create(api_client, BOB)
	response = await api_client.get("/posts/feed", params={"explain": "true"}, headers=ALICE)
	breakdown = response.json()["posts"][0]["scoreBreakdown"]
	assert set(breakdown) == {"engagement", "social", "quality", "recency", "discovery", "personalization", "total"}


@pytest.mark.asyncio
async def test_feed_pagination(api_client):
	for i in range(3):
		await _create(api_client, BOB, f"post {i}")
	first = (await api_client.get("/posts", params={"limit": 2}, headers=ALICE)).json()
	second = (await api_client.get("/posts", params={"limit": 2, "page": 2}, headers=ALICE)).json()
	assert first["hasMore"] is True
	assert second["hasMore"] is False
	assert first["total"] == second["total"] == 3
	assert len(first["posts"]) == 2
	assert len(second["posts"]) == 1
	assert all(post["relevanceScore"] is None for post in first["posts"])


@pytest.mark.asyncio
async def test_feed_rejects_bad_paging(api_client):
	assert (await api_client.get("/posts/feed", params={"page": 0}, headers=ALICE)).status_code == 422
	assert (await api_client.get("/posts/feed", params={"limit": 51}, headers=ALICE)).status_code == 422
	assert (await api_client.get("/posts", params={"sort": "home"}, headers=ALICE)).status_code == 422


@pytest.mark.asyncio
async def test_discover_sort_is_scored(api_client):
	await _create(api_client, BOB)
	response = await api_client.get("/posts", params={"sort": "discover"}, headers=ALICE)
	assert response.status_code == 200
	assert response.json()["posts"][0]["relevanceScore"] is not None


@pytest.mark.asyncio
async def test_like_toggle(api_client):
	created = await _create(api_client, BOB)
	liked = await api_client.put(f"/posts/{created['id']}/like", headers=ALICE)
	assert liked.status_code == 200
	assert liked.json()["post"]["likes"] == ["alice"]

	unliked = await api_client.put(f"/posts/{created['id']}/like", headers=ALICE)
	assert unliked.json()["post"]["likes"] == []

	missing = await api_client.put("/posts/unknown/like", headers=ALICE)
	assert missing.status_code == 404
	assert missing.json()["detail"] == "post_not_found"


@pytest.mark.asyncio
async def test_pin_requires_admin(api_client):
	created = await _create(api_client, BOB)
	denied = await api_client.put(f"/posts/{created['id']}/pin", headers=ALICE)
	assert denied.status_code == 403

	pinned = await api_client.put(f"/posts/{created['id']}/pin", headers=ADMIN)
	assert pinned.status_code == 200
	body = pinned.json()["post"]
	assert body["isPinned"] is True
	assert body["pinnedAt"] is not None


@pytest.mark.asyncio
async def test_comment_and_delete(api_client):
	created = await _create(api_client, BOB)
	commented = await api_client.post(f"/posts/{created['id']}/comment", json={"text": "great"}, headers=ALICE)
	assert commented.status_code == 201
	assert commented.json()["post"]["comments"][0]["text"] == "great"

	assert (await api_client.delete(f"/posts/{created['id']}", headers=ALICE)).status_code == 403
	assert (await api_client.delete(f"/posts/{created['id']}", headers=BOB)).status_code == 204
	feed = (await api_client.get("/posts", headers=ALICE)).json()
	assert feed["total"] == 0


@pytest.mark.asyncio
async def test_analysis_topics_and_search(api_client):
	created = await _create(api_client, BOB)
	analysis = {
		"sentiment": "Positive",
		"topics": ["Machine Learning", "python"],
		"category": "Tech",
		"factCheck": "support",
		"toxicity": {"detected": False},
	}
	denied = await api_client.put(f"/posts/{created['id']}/analysis", json=analysis, headers=ALICE)
	assert denied.status_code == 403

	response = await api_client.put(f"/posts/{created['id']}/analysis", json=analysis, headers=ANALYZER)
	assert response.status_code == 200
	assert response.json()["aiAnalysis"]["factCheck"] == "support"

	trending = await api_client.get("/posts/trending-topics", headers=ALICE)
	assert trending.json() == [{"topic": "Machine Learning", "count": 1}, {"topic": "python", "count": 1}]

	found = await api_client.get("/posts/by-topic", params={"topic": "learning"}, headers=ALICE)
	assert [post["id"] for post in found.json()] == [created["id"]]

	missing_topic = await api_client.get("/posts/by-topic", headers=ALICE)
	assert missing_topic.status_code == 422


@pytest.mark.asyncio
async def test_errors_carry_request_id(api_client):
	response = await api_client.put("/posts/unknown/pin", headers={**ADMIN, "X-Request-Id": "req-123"})
	assert response.status_code == 404
	assert response.json()["request_id"] == "req-123"
	assert response.headers["X-Request-Id"] == "req-123"


@pytest.mark.asyncio
async def test_get_single_post(api_client):
	created = await _create(api_client, BOB, "single")
	response = await api_client.get(f"/posts/{created['id']}", headers=ALICE)
	assert response.status_code == 200
	assert response.json()["content"] == "single"

	missing = await api_client.get("/posts/nope", headers=ALICE)
	assert missing.status_code == 404
	assert missing.json()["detail"] == "post_not_found"


@pytest.mark.asyncio
async def test_user_posts_listing(api_client):
	for i in range(3):
		await _create(api_client, BOB, f"bob {i}")
	await _create(api_client, ALICE, "alice post")

	response = await api_client.get("/posts/user/bob", params={"limit": 2}, headers=ALICE)
	assert response.status_code == 200
	payload = response.json()
	assert payload["total"] == 3
	assert payload["hasMore"] is True
	assert [post["user"] for post in payload["posts"]] == ["bob", "bob"]
	assert all(post["relevanceScore"] is None for post in payload["posts"])


@pytest.mark.asyncio
async def test_concurrent_like_requests_all_count(api_client):
	created = await _create(api_client, BOB)
	responses = await asyncio.gather(
		*(api_client.put(f"/posts/{created['id']}/like", headers={"X-User-Id": f"fan-{i}"}) for i in range(10))
	)
	assert all(response.status_code == 200 for response in responses)
	post = (await api_client.get(f"/posts/{created['id']}", headers=ALICE)).json()
	assert len(post["likes"]) == 10
