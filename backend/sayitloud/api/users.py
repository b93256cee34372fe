"""Follow graph endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from sayitloud.api.errors import to_http_error
from sayitloud.domain.feed import schemas
from sayitloud.domain.feed.exceptions import FeedError
from sayitloud.domain.feed.service import FeedService
from sayitloud.infra.auth import AuthenticatedUser, get_current_user

router = APIRouter(prefix="/users", tags=["users"])
_service = FeedService()


@router.put("/{user_id}/follow", response_model=schemas.FollowResponse)
async def follow_user_endpoint(
	user_id: str,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> schemas.FollowResponse:
	try:
		followers = await _service.follow(auth_user, user_id)
	except FeedError as exc:
		raise to_http_error(exc) from exc
	return schemas.FollowResponse(message="User followed.", following=True, follower_count=followers)


@router.put("/{user_id}/unfollow", response_model=schemas.FollowResponse)
async def unfollow_user_endpoint(
	user_id: str,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> schemas.FollowResponse:
	try:
		followers = await _service.unfollow(auth_user, user_id)
	except FeedError as exc:
		raise to_http_error(exc) from exc
	return schemas.FollowResponse(message="User unfollowed.", following=False, follower_count=followers)


__all__ = ["router"]
