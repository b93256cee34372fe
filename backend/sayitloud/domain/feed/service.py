"""Service layer orchestrating feed reads and the writes that feed ranking."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from time import perf_counter
from typing import Callable, List, Optional, Tuple
from uuid import uuid4

from sayitloud.domain.feed.context import context_for_viewer
from sayitloud.domain.feed.exceptions import ConflictError, ForbiddenError, NotFoundError, ValidationError
from sayitloud.domain.feed.models import AIAnalysis, Comment, Notification, NotificationType, Post, utcnow
from sayitloud.domain.feed.preferences import preference_keys
from sayitloud.domain.feed.ranking import FeedMode, FeedPage, rank_feed
from sayitloud.domain.feed.repo import FeedRepository
from sayitloud.domain.feed.scoring import RandomSource, ScoredPost
from sayitloud.domain.feed.trending import posts_matching_topic, trending_topics
from sayitloud.infra.auth import AuthenticatedUser
from sayitloud.obs import metrics as obs_metrics
from sayitloud.settings import Settings, settings as default_settings

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

_EXCERPT_LENGTH = 30


def _display_name(user: AuthenticatedUser) -> str:
	return user.username or user.id


def _offset(page: int, limit: int) -> Tuple[int, int, int]:
	page = max(1, page)
	limit = max(0, limit)
	return page, limit, (page - 1) * limit


class FeedService:
	def __init__(
		self,
		repository: Optional[FeedRepository] = None,
		*,
		config: Optional[Settings] = None,
		clock: Clock = utcnow,
		rng: Optional[RandomSource] = None,
	) -> None:
		self.repo = repository or FeedRepository()
		self.config = config or default_settings
		self.clock = clock
		self.rng = rng

	# Feeds -----------------------------------------------------------------

	async def get_home_feed(self, user: AuthenticatedUser, *, page: int, limit: int) -> FeedPage:
		now = self.clock()
		since = now - timedelta(days=self.config.feed_candidate_window_days)
		candidates = await self.repo.list_posts(since=since)
		return await self._rank(user, candidates, FeedMode.HOME, page=page, limit=limit, now=now)

	async def get_explore_feed(
		self,
		user: AuthenticatedUser,
		*,
		page: int,
		limit: int,
		sort: FeedMode = FeedMode.RECENT,
	) -> FeedPage:
		if sort == FeedMode.HOME:
			raise ValidationError("unsupported_sort")
		candidates = await self.repo.list_posts()
		return await self._rank(user, candidates, sort, page=page, limit=limit, now=self.clock())

	async def _rank(
		self,
		user: AuthenticatedUser,
		candidates: List[Post],
		mode: FeedMode,
		*,
		page: int,
		limit: int,
		now: datetime,
	) -> FeedPage:
		profile = await self.repo.get_viewer(user.id)
		context = context_for_viewer(profile)
		start = perf_counter()
		result = rank_feed(
			candidates,
			context,
			mode=mode,
			page=page,
			limit=limit,
			weights=self.config.feed_weights,
			interleave_policy=self.config.feed_interleave,
			now=now,
			rng=self.rng,
		)
		elapsed_ms = (perf_counter() - start) * 1000.0
		obs_metrics.observe_feed_rank(mode.value, len(candidates), elapsed_ms, (item.score for item in result.items))
		logger.info(
			"feed_ranked",
			extra={
				"mode": mode.value,
				"candidates": len(candidates),
				"page": result.page,
				"returned": len(result.items),
				"elapsed_ms": round(elapsed_ms, 3),
			},
		)
		return result

	# Posts -----------------------------------------------------------------

	async def _require_post(self, post_id: str) -> Post:
		post = await self.repo.get_post(post_id)
		if post is None:
			raise NotFoundError("post_not_found")
		return post

	async def _is_admin(self, user: AuthenticatedUser) -> bool:
		if user.has_role("admin"):
			return True
		profile = await self.repo.get_viewer(user.id)
		return profile.is_admin

	async def get_post(self, post_id: str) -> Post:
		return await self._require_post(post_id)

	async def get_user_posts(self, user_id: str, *, page: int, limit: int) -> FeedPage:
		"""An author's posts, newest first, without relevance scores."""
		page, limit, offset = _offset(page, limit)
		posts, total = await self.repo.list_user_posts(user_id, offset=offset, limit=limit)
		return FeedPage(
			items=[ScoredPost(post=post, score=None) for post in posts],
			total=total,
			page=page,
			limit=limit,
			has_more=offset + len(posts) < total,
		)

	async def create_post(self, user: AuthenticatedUser, *, content: str, image: Optional[str] = None) -> Post:
		text = content.strip()
		if not text:
			raise ValidationError("content_required")
		now = self.clock()
		post = Post(id=uuid4().hex, user=user.id, content=text, image=image, created_at=now, updated_at=now)
		await self.repo.insert_post(post)
		obs_metrics.POSTS_CREATED.inc()
		logger.info("post_created", extra={"post_id": post.id})
		return post

	async def delete_post(self, user: AuthenticatedUser, post_id: str) -> None:
		post = await self._require_post(post_id)
		if post.user != user.id and not await self._is_admin(user):
			raise ForbiddenError("not_post_owner")
		await self.repo.delete_post(post_id, post.user)
		logger.info("post_deleted", extra={"post_id": post_id})

	async def add_comment(self, user: AuthenticatedUser, post_id: str, *, text: str) -> Post:
		body = text.strip()
		if not body:
			raise ValidationError("comment_required")
		post = await self._require_post(post_id)
		await self.repo.add_comment(post_id, Comment(id=uuid4().hex, user=user.id, text=body, created_at=self.clock()))
		obs_metrics.COMMENTS_CREATED.inc()
		await self._notify(
			recipient=post.user,
			initiator=user,
			kind=NotificationType.COMMENT,
			post_id=post_id,
			message=f'{_display_name(user)} commented on your post: "{body[:_EXCERPT_LENGTH]}..."',
		)
		return await self._require_post(post_id)

	async def toggle_like(self, user: AuthenticatedUser, post_id: str) -> Tuple[Post, bool]:
		"""Like or unlike a post and move the viewer's preference counters with it."""
		post = await self._require_post(post_id)
		liked = await self.repo.toggle_like(post_id, user.id)
		category, topics = preference_keys(post.ai_analysis)
		await self.repo.adjust_preferences(user.id, category, topics, 1 if liked else -1)
		obs_metrics.inc_like(liked)
		logger.info("post_like_toggled", extra={"post_id": post_id, "liked": liked})
		if liked:
			await self._notify(
				recipient=post.user,
				initiator=user,
				kind=NotificationType.LIKE,
				post_id=post_id,
				message=f'{_display_name(user)} liked your post: "{post.content[:_EXCERPT_LENGTH]}..."',
			)
		return await self._require_post(post_id), liked

	async def toggle_pin(self, user: AuthenticatedUser, post_id: str) -> Post:
		if not await self._is_admin(user):
			raise ForbiddenError("admin_required")
		post = await self._require_post(post_id)
		if post.is_pinned:
			post.unpin(self.clock())
		else:
			post.pin(self.clock())
		await self.repo.save_post(post)
		obs_metrics.inc_pin(post.is_pinned)
		logger.info("post_pin_toggled", extra={"post_id": post_id, "is_pinned": post.is_pinned})
		return post

	async def attach_analysis(self, post_id: str, analysis: AIAnalysis) -> Post:
		post = await self._require_post(post_id)
		post.ai_analysis = analysis
		post.updated_at = self.clock()
		await self.repo.save_post(post)
		logger.info(
			"post_analysis_attached",
			extra={"post_id": post_id, "category": analysis.category, "toxic": analysis.toxicity.detected},
		)
		return post

	# Topics ----------------------------------------------------------------

	async def get_trending_topics(self, *, limit: int = 10) -> List[Tuple[str, int]]:
		since = self.clock() - timedelta(days=self.config.trending_window_days)
		posts = await self.repo.list_posts(since=since)
		return trending_topics(posts, limit=limit)

	async def get_posts_by_topic(self, topic: str) -> List[Post]:
		if not topic or not topic.strip():
			raise ValidationError("topic_required")
		posts = await self.repo.list_posts()
		return posts_matching_topic(posts, topic)

	# Social graph ----------------------------------------------------------

	async def follow(self, user: AuthenticatedUser, target_id: str) -> int:
		if target_id == user.id:
			raise ConflictError("cannot_follow_self")
		added = await self.repo.follow(user.id, target_id)
		if added:
			obs_metrics.inc_follow("follow")
			await self._notify(
				recipient=target_id,
				initiator=user,
				kind=NotificationType.FOLLOW,
				message=f"{_display_name(user)} started following you.",
			)
		return await self.repo.follower_count(target_id)

	async def unfollow(self, user: AuthenticatedUser, target_id: str) -> int:
		if target_id == user.id:
			raise ConflictError("cannot_unfollow_self")
		removed = await self.repo.unfollow(user.id, target_id)
		if removed:
			obs_metrics.inc_follow("unfollow")
		return await self.repo.follower_count(target_id)

	# Notifications ---------------------------------------------------------

	async def _notify(
		self,
		*,
		recipient: str,
		initiator: AuthenticatedUser,
		kind: NotificationType,
		message: str,
		post_id: Optional[str] = None,
	) -> Optional[Notification]:
		if recipient == initiator.id:
			return None
		now = self.clock()
		notification = Notification(
			id=uuid4().hex,
			recipient=recipient,
			type=kind,
			initiator=initiator.id,
			post=post_id,
			message=message,
			created_at=now,
			updated_at=now,
		)
		await self.repo.insert_notification(notification)
		obs_metrics.NOTIFICATIONS_CREATED.labels(type=kind.value).inc()
		return notification

	async def list_notifications(
		self,
		user: AuthenticatedUser,
		*,
		page: int,
		limit: int,
	) -> Tuple[List[Notification], int, int, int, bool]:
		page, limit, offset = _offset(page, limit)
		items, total = await self.repo.list_notifications(user.id, offset=offset, limit=limit)
		return items, total, page, limit, offset + len(items) < total

	async def mark_notification_read(self, user: AuthenticatedUser, notification_id: str) -> Notification:
		notification = await self.repo.get_notification(notification_id)
		if notification is None:
			raise NotFoundError("notification_not_found")
		if notification.recipient != user.id:
			raise ForbiddenError("not_notification_recipient")
		if not notification.read:
			notification.read = True
			notification.updated_at = self.clock()
			await self.repo.save_notification(notification)
		return notification

	async def mark_all_notifications_read(self, user: AuthenticatedUser) -> int:
		unread = await self.repo.unread_notifications(user.id)
		now = self.clock()
		for notification in unread:
			notification.read = True
			notification.updated_at = now
			await self.repo.save_notification(notification)
		return len(unread)


__all__ = ["FeedService"]
