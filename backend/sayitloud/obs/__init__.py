"""Observability package bootstrap."""

from __future__ import annotations

from fastapi import FastAPI

from sayitloud.obs import logging as obs_logging
from sayitloud.obs import middleware
from sayitloud.settings import settings

_logging_configured = False


def init(app: FastAPI) -> None:
	"""Install request instrumentation and configure JSON logging once per process."""
	global _logging_configured
	middleware.install(app, enabled=settings.obs_enabled)
	if _logging_configured or not settings.obs_enabled:
		return
	obs_logging.configure_logging()
	_logging_configured = True


__all__ = ["init"]
