"""Ordering and pagination policy for home, discover and recent feeds."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Iterable, List, Sequence, Tuple, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from sayitloud.domain.feed.context import ScoringContext
from sayitloud.domain.feed.models import Post, as_utc
from sayitloud.domain.feed.scoring import (
	DEFAULT_WEIGHTS,
	RandomSource,
	ScoredPost,
	ScoringWeights,
	age_hours,
	score_post,
)

T = TypeVar("T")

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class FeedMode(str, Enum):
	HOME = "home"
	DISCOVER = "discover"
	RECENT = "recent"


class InterleavePolicy(BaseModel):
	"""Batch sizes and eligibility window for the discover interleave."""

	popular_batch: int = Field(default=3, ge=1)
	new_batch: int = Field(default=1, ge=1)
	new_max_engagement: int = 5
	new_max_age_hours: float = 24.0

	model_config = ConfigDict(frozen=True)


DEFAULT_INTERLEAVE = InterleavePolicy()


@dataclass(slots=True)
class FeedPage:
	items: List[ScoredPost]
	total: int
	page: int
	limit: int
	has_more: bool


def _created_key(post: Post) -> float:
	return as_utc(post.created_at).timestamp()


def _pinned_key(item: ScoredPost) -> float:
	pinned_at = item.post.pinned_at
	return as_utc(pinned_at).timestamp() if pinned_at else _EPOCH.timestamp()


def _by_score(items: List[ScoredPost]) -> List[ScoredPost]:
	return sorted(
		items,
		key=lambda item: (item.score or 0.0, _created_key(item.post)),
		reverse=True,
	)


def _by_recency(items: List[ScoredPost]) -> List[ScoredPost]:
	return sorted(items, key=lambda item: _created_key(item.post), reverse=True)


def interleave(primary: Sequence[T], secondary: Sequence[T], *, primary_batch: int, secondary_batch: int) -> List[T]:
	"""Alternate fixed-size batches from two sequences, then drain whichever remains."""

	primary_batch = max(1, primary_batch)
	secondary_batch = max(1, secondary_batch)
	merged: List[T] = []
	i = j = 0
	while i < len(primary) or j < len(secondary):
		merged.extend(primary[i : i + primary_batch])
		i += primary_batch
		merged.extend(secondary[j : j + secondary_batch])
		j += secondary_batch
	return merged


def is_new_post(post: Post, now: datetime, policy: InterleavePolicy = DEFAULT_INTERLEAVE) -> bool:
	return post.engagement < policy.new_max_engagement and age_hours(post, now) < policy.new_max_age_hours


def order_discover(
	items: Iterable[ScoredPost],
	now: datetime,
	policy: InterleavePolicy = DEFAULT_INTERLEAVE,
) -> List[ScoredPost]:
	fresh: List[ScoredPost] = []
	popular: List[ScoredPost] = []
	for item in items:
		(fresh if is_new_post(item.post, now, policy) else popular).append(item)
	return interleave(
		_by_score(popular),
		_by_recency(fresh),
		primary_batch=policy.popular_batch,
		secondary_batch=policy.new_batch,
	)


def paginate(items: Sequence[T], page: int, limit: int) -> Tuple[List[T], int, bool]:
	"""Slice a 1-based page; returns (page items, total, has_more)."""

	page = max(1, page)
	limit = max(0, limit)
	total = len(items)
	offset = (page - 1) * limit
	window = list(items[offset : offset + limit])
	return window, total, offset + len(window) < total


def rank_feed(
	posts: Iterable[Post],
	context: ScoringContext,
	*,
	mode: FeedMode = FeedMode.HOME,
	page: int = 1,
	limit: int = 10,
	weights: ScoringWeights = DEFAULT_WEIGHTS,
	interleave_policy: InterleavePolicy = DEFAULT_INTERLEAVE,
	now: datetime | None = None,
	rng: RandomSource | None = None,
) -> FeedPage:
	"""Score, order and paginate candidate posts.

	Pinned posts always lead, newest pin first. Recent mode skips scoring
	and reports no score.
	"""

	current = now or datetime.now(timezone.utc)
	if mode == FeedMode.RECENT:
		scored = [ScoredPost(post=post, score=None) for post in posts]
	else:
		scored = [score_post(post, context, weights=weights, now=current, rng=rng) for post in posts]

	pinned = sorted((item for item in scored if item.post.is_pinned), key=_pinned_key, reverse=True)
	regular = [item for item in scored if not item.post.is_pinned]

	if mode == FeedMode.RECENT:
		ordered = _by_recency(regular)
	elif mode == FeedMode.DISCOVER:
		ordered = order_discover(regular, current, interleave_policy)
	else:
		ordered = _by_score(regular)

	window, total, has_more = paginate(pinned + ordered, page, limit)
	return FeedPage(items=window, total=total, page=max(1, page), limit=max(0, limit), has_more=has_more)


__all__ = [
	"DEFAULT_INTERLEAVE",
	"FeedMode",
	"FeedPage",
	"InterleavePolicy",
	"interleave",
	"is_new_post",
	"order_discover",
	"paginate",
	"rank_feed",
]
