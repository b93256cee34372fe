from __future__ import annotations

import json
import logging

import pytest
from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials
from starlette.requests import Request

from sayitloud.infra import jwt as jwt_helper
from sayitloud.infra.auth import get_current_user
from sayitloud.obs import logging as obs_logging


def _request() -> Request:
	return Request({"type": "http", "method": "GET", "path": "/", "headers": []})


def _formatted_user_id():
	record = logging.LogRecord("sayitloud.test", logging.INFO, __file__, 1, "after_auth", None, None)
	return json.loads(obs_logging.JSONLogFormatter().format(record)).get("user_id")


@pytest.mark.asyncio
async def test_dev_headers_resolve_user_without_leaking_log_context():
	request = _request()
	user = await get_current_user(request, x_user_id="alice", x_user_roles="admin, analyzer", credentials=None)

	assert user.id == "alice"
	assert user.roles == ("admin", "analyzer")
	assert request.state.user_id == "alice"
	assert _formatted_user_id() is None


@pytest.mark.asyncio
async def test_bearer_token_resolves_user_without_leaking_log_context():
	token = jwt_helper.encode_access({"sub": "bob", "username": "Bob", "roles": ["admin"]})
	credentials = HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)
	request = _request()

	user = await get_current_user(request, x_user_id=None, x_user_roles=None, credentials=credentials)

	assert (user.id, user.username, user.roles) == ("bob", "Bob", ("admin",))
	assert request.state.user_id == "bob"
	assert _formatted_user_id() is None


@pytest.mark.asyncio
async def test_missing_credentials_are_rejected():
	with pytest.raises(HTTPException) as exc_info:
		await get_current_user(_request(), x_user_id=None, x_user_roles=None, credentials=None)
	assert exc_info.value.status_code == 401
