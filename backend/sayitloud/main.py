"""FastAPI application entrypoint."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from sayitloud.api import notifications, ops, posts, users
from sayitloud.api.errors import install_error_handlers
from sayitloud.infra.redis import redis_client
from sayitloud.obs import init as obs_init
from sayitloud.settings import settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
	logger.info("startup", extra={"environment": settings.environment})
	try:
		yield
	finally:
		await redis_client.client.aclose()


app = FastAPI(title="SayItLoud Feed API", lifespan=lifespan)
install_error_handlers(app)

allow_origins = list(settings.cors_allow_origins)
if "*" in allow_origins or not allow_origins:
	allow_origins = ["http://localhost:3000", "http://127.0.0.1:3000"] if settings.is_dev() else []

app.add_middleware(
	CORSMiddleware,
	allow_origins=allow_origins,
	allow_credentials=True,
	allow_methods=["*"],
	allow_headers=["*"],
)

obs_init(app)

app.include_router(posts.router)
app.include_router(users.router)
app.include_router(notifications.router)
app.include_router(ops.router)
