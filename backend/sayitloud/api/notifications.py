"""Notification inbox endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from sayitloud.api.errors import to_http_error
from sayitloud.domain.feed import schemas
from sayitloud.domain.feed.exceptions import FeedError
from sayitloud.domain.feed.service import FeedService
from sayitloud.infra.auth import AuthenticatedUser, get_current_user
from sayitloud.settings import settings

router = APIRouter(prefix="/notifications", tags=["notifications"])
_service = FeedService()


@router.get("", response_model=schemas.NotificationPageResponse)
async def list_notifications_endpoint(
	page: int = Query(default=1, ge=1),
	limit: int = Query(default=20, ge=1, le=settings.feed_max_limit),
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> schemas.NotificationPageResponse:
	items, total, page, limit, has_more = await _service.list_notifications(auth_user, page=page, limit=limit)
	return schemas.NotificationPageResponse(
		notifications=[schemas.NotificationSchema.from_model(item) for item in items],
		total=total,
		page=page,
		limit=limit,
		has_more=has_more,
	)


@router.put("/read-all", response_model=schemas.MessageResponse)
async def mark_all_read_endpoint(
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> schemas.MessageResponse:
	await _service.mark_all_notifications_read(auth_user)
	return schemas.MessageResponse(message="All notifications marked as read.")


@router.put("/{notification_id}/read", response_model=schemas.NotificationActionResponse)
async def mark_read_endpoint(
	notification_id: str,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> schemas.NotificationActionResponse:
	try:
		notification = await _service.mark_notification_read(auth_user, notification_id)
	except FeedError as exc:
		raise to_http_error(exc) from exc
	return schemas.NotificationActionResponse(
		message="Notification marked as read.",
		notification=schemas.NotificationSchema.from_model(notification),
	)


__all__ = ["router"]
