import pytest

from sayitloud.settings import settings


@pytest.mark.asyncio
async def test_health_live(api_client):
	response = await api_client.get("/health")
	assert response.status_code == 200
	assert response.json()["status"] == "ok"


@pytest.mark.asyncio
async def test_health_ready_pings_redis(api_client):
	response = await api_client.get("/health/ready")
	assert response.status_code == 200
	assert response.json()["checks"]["redis"]["ok"] is True


@pytest.mark.asyncio
async def test_metrics_exposed_in_dev(api_client):
	await api_client.get("/health")
	response = await api_client.get("/metrics")
	assert response.status_code == 200
	assert "sayitloud_http_requests_total" in response.text


@pytest.mark.asyncio
async def test_metrics_require_token_in_production(api_client, monkeypatch):
	settings.environment = "production"
	monkeypatch.setattr(settings, "obs_admin_token", "ops-secret")
	monkeypatch.setattr(settings, "obs_metrics_public", False)

	assert (await api_client.get("/metrics")).status_code == 403
	allowed = await api_client.get("/metrics", headers={"X-Admin-Token": "ops-secret"})
	assert allowed.status_code == 200
