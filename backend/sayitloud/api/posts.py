"""Feed and post endpoints."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Query, Response, status

from sayitloud.api.errors import to_http_error
from sayitloud.domain.feed import schemas
from sayitloud.domain.feed.exceptions import FeedError
from sayitloud.domain.feed.ranking import FeedMode, FeedPage
from sayitloud.domain.feed.service import FeedService
from sayitloud.infra.auth import AuthenticatedUser, get_current_user, require_roles
from sayitloud.settings import settings

router = APIRouter(prefix="/posts", tags=["posts"])
_service = FeedService()


def _page_response(result: FeedPage, *, explain: bool = False) -> schemas.FeedPageResponse:
	return schemas.FeedPageResponse(
		posts=[schemas.PostSchema.from_scored(item, explain=explain) for item in result.items],
		total=result.total,
		page=result.page,
		limit=result.limit,
		has_more=result.has_more,
	)


@router.get("/feed", response_model=schemas.FeedPageResponse)
async def get_home_feed_endpoint(
	page: int = Query(default=1, ge=1),
	limit: int = Query(default=settings.feed_default_limit, ge=1, le=settings.feed_max_limit),
	explain: bool = Query(default=False),
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> schemas.FeedPageResponse:
	try:
		result = await _service.get_home_feed(auth_user, page=page, limit=limit)
	except FeedError as exc:
		raise to_http_error(exc) from exc
	return _page_response(result, explain=explain)


@router.get("", response_model=schemas.FeedPageResponse)
async def get_explore_feed_endpoint(
	page: int = Query(default=1, ge=1),
	limit: int = Query(default=settings.feed_default_limit, ge=1, le=settings.feed_max_limit),
	sort: str = Query(default=FeedMode.RECENT.value, pattern="^(recent|discover)$"),
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> schemas.FeedPageResponse:
	try:
		result = await _service.get_explore_feed(auth_user, page=page, limit=limit, sort=FeedMode(sort))
	except FeedError as exc:
		raise to_http_error(exc) from exc
	return _page_response(result)


@router.get("/trending-topics", response_model=List[schemas.TrendingTopicSchema])
async def get_trending_topics_endpoint(
	limit: int = Query(default=10, ge=1, le=100),
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> List[schemas.TrendingTopicSchema]:
	_ = auth_user
	rows = await _service.get_trending_topics(limit=limit)
	return [schemas.TrendingTopicSchema(topic=topic, count=count) for topic, count in rows]


@router.get("/by-topic", response_model=List[schemas.PostSchema])
async def get_posts_by_topic_endpoint(
	topic: str = Query(default=""),
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> List[schemas.PostSchema]:
	_ = auth_user
	try:
		posts = await _service.get_posts_by_topic(topic)
	except FeedError as exc:
		raise to_http_error(exc) from exc
	return [schemas.PostSchema.from_post(post) for post in posts]


@router.get("/user/{user_id}", response_model=schemas.FeedPageResponse)
async def get_user_posts_endpoint(
	user_id: str,
	page: int = Query(default=1, ge=1),
	limit: int = Query(default=settings.feed_default_limit, ge=1, le=settings.feed_max_limit),
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> schemas.FeedPageResponse:
	_ = auth_user
	result = await _service.get_user_posts(user_id, page=page, limit=limit)
	return _page_response(result)


@router.get("/{post_id}", response_model=schemas.PostSchema)
async def get_post_endpoint(
	post_id: str,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> schemas.PostSchema:
	_ = auth_user
	try:
		post = await _service.get_post(post_id)
	except FeedError as exc:
		raise to_http_error(exc) from exc
	return schemas.PostSchema.from_post(post)


@router.post("", response_model=schemas.PostSchema, status_code=status.HTTP_201_CREATED)
async def create_post_endpoint(
	payload: schemas.PostCreateRequest,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> schemas.PostSchema:
	try:
		post = await _service.create_post(auth_user, content=payload.content, image=payload.image)
	except FeedError as exc:
		raise to_http_error(exc) from exc
	return schemas.PostSchema.from_post(post)


@router.delete("/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_post_endpoint(
	post_id: str,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> Response:
	try:
		await _service.delete_post(auth_user, post_id)
	except FeedError as exc:
		raise to_http_error(exc) from exc
	return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{post_id}/comment", response_model=schemas.PostActionResponse, status_code=status.HTTP_201_CREATED)
async def add_comment_endpoint(
	post_id: str,
	payload: schemas.CommentCreateRequest,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> schemas.PostActionResponse:
	try:
		post = await _service.add_comment(auth_user, post_id, text=payload.text)
	except FeedError as exc:
		raise to_http_error(exc) from exc
	return schemas.PostActionResponse(message="Comment added.", post=schemas.PostSchema.from_post(post))


@router.put("/{post_id}/like", response_model=schemas.PostActionResponse)
async def toggle_like_endpoint(
	post_id: str,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> schemas.PostActionResponse:
	try:
		post, liked = await _service.toggle_like(auth_user, post_id)
	except FeedError as exc:
		raise to_http_error(exc) from exc
	message = "Post liked." if liked else "Post unliked."
	return schemas.PostActionResponse(message=message, post=schemas.PostSchema.from_post(post))


@router.put("/{post_id}/pin", response_model=schemas.PostActionResponse)
async def toggle_pin_endpoint(
	post_id: str,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> schemas.PostActionResponse:
	try:
		post = await _service.toggle_pin(auth_user, post_id)
	except FeedError as exc:
		raise to_http_error(exc) from exc
	message = "Post pinned." if post.is_pinned else "Post unpinned."
	return schemas.PostActionResponse(message=message, post=schemas.PostSchema.from_post(post))


@router.put("/{post_id}/analysis", response_model=schemas.PostSchema)
async def attach_analysis_endpoint(
	post_id: str,
	payload: schemas.AIAnalysisRequest,
	service_user: AuthenticatedUser = Depends(require_roles("admin", "analyzer")),
) -> schemas.PostSchema:
	_ = service_user
	try:
		post = await _service.attach_analysis(post_id, payload.to_model())
	except FeedError as exc:
		raise to_http_error(exc) from exc
	return schemas.PostSchema.from_post(post)


__all__ = ["router"]
