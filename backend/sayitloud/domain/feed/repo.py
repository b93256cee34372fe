"""Redis-backed storage for posts, viewer profiles and notifications.

A post is a JSON document without its engagement. Likes live in a set and
comments in a list beside it so concurrent writers never overwrite each
other; the full ``Post`` is rebuilt on read.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from pydantic import ValidationError as PydanticValidationError
from redis.exceptions import WatchError

from sayitloud.domain.feed.models import Comment, Notification, Post, ViewerProfile, as_utc
from sayitloud.infra.redis import redis_client

logger = logging.getLogger(__name__)

_POST_KEY = "post:{post_id}"
_LIKES_KEY = "post:{post_id}:likes"
_COMMENTS_KEY = "post:{post_id}:comments"
_TIMELINE_KEY = "posts:timeline"
_AUTHOR_KEY = "user:{user_id}:posts"
_FOLLOWING_KEY = "user:{user_id}:following"
_FOLLOWERS_KEY = "user:{user_id}:followers"
_CATEGORY_KEY = "user:{user_id}:likes:categories"
_TOPIC_KEY = "user:{user_id}:likes:topics"
_ADMIN_KEY = "user:{user_id}:admin"
_NOTIFICATION_KEY = "notification:{notification_id}"
_INBOX_KEY = "user:{user_id}:notifications"

_ENGAGEMENT_FIELDS = {"likes", "comments"}


def _post_key(post_id: str) -> str:
	return _POST_KEY.format(post_id=post_id)


def _likes_key(post_id: str) -> str:
	return _LIKES_KEY.format(post_id=post_id)


def _comments_key(post_id: str) -> str:
	return _COMMENTS_KEY.format(post_id=post_id)


def _counts(raw: Dict[str, str]) -> Dict[str, int]:
	counts: Dict[str, int] = {}
	for key, value in raw.items():
		try:
			count = int(value)
		except (TypeError, ValueError):
			continue
		if count > 0:
			counts[key] = count
	return counts


def _decode_post(raw: str, likes: Iterable[str], comments: Sequence[str]) -> Post:
	data: Dict[str, Any] = json.loads(raw)
	data["likes"] = sorted(likes or ())
	data["comments"] = [json.loads(item) for item in comments or ()]
	return Post.model_validate(data)


class FeedRepository:
	"""Stores posts, their engagement, and per-viewer graph and like counters."""

	def __init__(self, client=None) -> None:
		self._client = client

	@property
	def redis(self):
		return self._client if self._client is not None else redis_client

	# Posts -----------------------------------------------------------------

	async def _load(self, post_ids: Sequence[str]) -> List[Post]:
		if not post_ids:
			return []
		payloads = await self.redis.mget([_post_key(post_id) for post_id in post_ids])
		pipe = self.redis.pipeline(transaction=False)
		for post_id in post_ids:
			pipe.smembers(_likes_key(post_id))
			pipe.lrange(_comments_key(post_id), 0, -1)
		engagement = await pipe.execute()
		posts: List[Post] = []
		for index, (post_id, raw) in enumerate(zip(post_ids, payloads)):
			if raw is None:
				continue
			likes, comments = engagement[2 * index], engagement[2 * index + 1]
			try:
				posts.append(_decode_post(raw, likes, comments))
			except (PydanticValidationError, ValueError):
				logger.warning("post_decode_failed", extra={"post_id": post_id})
		return posts

	async def get_post(self, post_id: str) -> Optional[Post]:
		posts = await self._load([post_id])
		return posts[0] if posts else None

	async def insert_post(self, post: Post) -> None:
		"""Write a new post together with any engagement it already carries."""
		pipe = self.redis.pipeline(transaction=True)
		pipe.set(_post_key(post.id), post.model_dump_json(exclude=_ENGAGEMENT_FIELDS))
		created = as_utc(post.created_at).timestamp()
		pipe.zadd(_TIMELINE_KEY, {post.id: created})
		pipe.zadd(_AUTHOR_KEY.format(user_id=post.user), {post.id: created})
		if post.likes:
			pipe.sadd(_likes_key(post.id), *post.likes)
		if post.comments:
			pipe.rpush(_comments_key(post.id), *(comment.model_dump_json() for comment in post.comments))
		await pipe.execute()

	async def save_post(self, post: Post) -> None:
		"""Overwrite the post document; likes and comments are left untouched."""
		await self.redis.set(_post_key(post.id), post.model_dump_json(exclude=_ENGAGEMENT_FIELDS))

	async def delete_post(self, post_id: str, author_id: str) -> bool:
		pipe = self.redis.pipeline(transaction=True)
		pipe.delete(_post_key(post_id))
		pipe.delete(_likes_key(post_id), _comments_key(post_id))
		pipe.zrem(_TIMELINE_KEY, post_id)
		pipe.zrem(_AUTHOR_KEY.format(user_id=author_id), post_id)
		removed, *_ = await pipe.execute()
		return bool(removed)

	async def list_posts(self, *, since: datetime | None = None) -> List[Post]:
		"""Return posts created at or after ``since`` (all posts when None), newest first."""
		low = as_utc(since).timestamp() if since is not None else "-inf"
		post_ids = await self.redis.zrevrangebyscore(_TIMELINE_KEY, "+inf", low)
		return await self._load(post_ids)

	async def list_user_posts(self, user_id: str, *, offset: int, limit: int) -> Tuple[List[Post], int]:
		"""One page of an author's posts, newest first, plus the author's post total."""
		key = _AUTHOR_KEY.format(user_id=user_id)
		total = int(await self.redis.zcard(key))
		if limit <= 0 or offset >= total:
			return [], total
		post_ids = await self.redis.zrevrange(key, offset, offset + limit - 1)
		return await self._load(post_ids), total

	# Engagement ------------------------------------------------------------

	async def toggle_like(self, post_id: str, viewer_id: str) -> bool:
		"""Flip the viewer's like; returns True when the post is now liked."""
		key = _likes_key(post_id)
		if await self.redis.sadd(key, viewer_id):
			return True
		await self.redis.srem(key, viewer_id)
		return False

	async def add_comment(self, post_id: str, comment: Comment) -> None:
		await self.redis.rpush(_comments_key(post_id), comment.model_dump_json())

	async def adjust_preferences(
		self,
		viewer_id: str,
		category: Optional[str],
		topics: Sequence[str],
		delta: int,
	) -> None:
		"""Move the viewer's category/topic like counters by ``delta``."""
		fields: List[Tuple[str, str]] = []
		if category:
			fields.append((_CATEGORY_KEY.format(user_id=viewer_id), category))
		fields.extend((_TOPIC_KEY.format(user_id=viewer_id), topic) for topic in topics)
		if not fields:
			return
		if delta > 0:
			pipe = self.redis.pipeline(transaction=False)
			for key, field in fields:
				pipe.hincrby(key, field, delta)
			await pipe.execute()
			return
		for key, field in fields:
			await self._decrement(key, field, -delta)

	async def _decrement(self, key: str, field: str, amount: int) -> None:
		# Counters never go below zero; a counter reaching zero is removed.
		async with self.redis.pipeline(transaction=True) as pipe:
			while True:
				try:
					await pipe.watch(key)
					current = int(await pipe.hget(key, field) or 0)
					pipe.multi()
					if current <= amount:
						pipe.hdel(key, field)
					else:
						pipe.hincrby(key, field, -amount)
					await pipe.execute()
					return
				except WatchError:
					continue

	# Viewers ---------------------------------------------------------------

	async def get_viewer(self, viewer_id: str) -> ViewerProfile:
		pipe = self.redis.pipeline(transaction=False)
		pipe.smembers(_FOLLOWING_KEY.format(user_id=viewer_id))
		pipe.hgetall(_CATEGORY_KEY.format(user_id=viewer_id))
		pipe.hgetall(_TOPIC_KEY.format(user_id=viewer_id))
		pipe.get(_ADMIN_KEY.format(user_id=viewer_id))
		following, categories, topics, admin = await pipe.execute()
		return ViewerProfile(
			id=viewer_id,
			following=sorted(following or ()),
			liked_categories=_counts(categories or {}),
			liked_topics=_counts(topics or {}),
			is_admin=admin == "1",
		)

	async def follow(self, viewer_id: str, target_id: str) -> bool:
		pipe = self.redis.pipeline(transaction=True)
		pipe.sadd(_FOLLOWING_KEY.format(user_id=viewer_id), target_id)
		pipe.sadd(_FOLLOWERS_KEY.format(user_id=target_id), viewer_id)
		added, _ = await pipe.execute()
		return bool(added)

	async def unfollow(self, viewer_id: str, target_id: str) -> bool:
		pipe = self.redis.pipeline(transaction=True)
		pipe.srem(_FOLLOWING_KEY.format(user_id=viewer_id), target_id)
		pipe.srem(_FOLLOWERS_KEY.format(user_id=target_id), viewer_id)
		removed, _ = await pipe.execute()
		return bool(removed)

	async def follower_count(self, user_id: str) -> int:
		return int(await self.redis.scard(_FOLLOWERS_KEY.format(user_id=user_id)))

	async def set_admin(self, user_id: str, is_admin: bool) -> None:
		key = _ADMIN_KEY.format(user_id=user_id)
		if is_admin:
			await self.redis.set(key, "1")
		else:
			await self.redis.delete(key)

	# Notifications ---------------------------------------------------------

	async def _load_notifications(self, notification_ids: Sequence[str]) -> List[Notification]:
		if not notification_ids:
			return []
		keys = [_NOTIFICATION_KEY.format(notification_id=nid) for nid in notification_ids]
		items: List[Notification] = []
		for nid, raw in zip(notification_ids, await self.redis.mget(keys)):
			if raw is None:
				continue
			try:
				items.append(Notification.model_validate_json(raw))
			except PydanticValidationError:
				logger.warning("notification_decode_failed", extra={"notification_id": nid})
		return items

	async def insert_notification(self, notification: Notification) -> None:
		pipe = self.redis.pipeline(transaction=True)
		pipe.set(_NOTIFICATION_KEY.format(notification_id=notification.id), notification.model_dump_json())
		pipe.zadd(
			_INBOX_KEY.format(user_id=notification.recipient),
			{notification.id: as_utc(notification.created_at).timestamp()},
		)
		await pipe.execute()

	async def get_notification(self, notification_id: str) -> Optional[Notification]:
		items = await self._load_notifications([notification_id])
		return items[0] if items else None

	async def save_notification(self, notification: Notification) -> None:
		await self.redis.set(
			_NOTIFICATION_KEY.format(notification_id=notification.id),
			notification.model_dump_json(),
		)

	async def list_notifications(self, user_id: str, *, offset: int, limit: int) -> Tuple[List[Notification], int]:
		"""One page of a user's notifications, newest first, plus the inbox total."""
		key = _INBOX_KEY.format(user_id=user_id)
		total = int(await self.redis.zcard(key))
		if limit <= 0 or offset >= total:
			return [], total
		ids = await self.redis.zrevrange(key, offset, offset + limit - 1)
		return await self._load_notifications(ids), total

	async def unread_notifications(self, user_id: str) -> List[Notification]:
		ids = await self.redis.zrevrange(_INBOX_KEY.format(user_id=user_id), 0, -1)
		return [item for item in await self._load_notifications(ids) if not item.read]


__all__ = ["FeedRepository"]
