"""Multi-factor relevance scoring for feed posts."""

from __future__ import annotations

import random
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Mapping, Optional

from pydantic import BaseModel, ConfigDict

from sayitloud.domain.feed.context import ScoringContext
from sayitloud.domain.feed.models import FactCheck, Post, Sentiment, as_utc

RandomSource = Callable[[], float]


class ScoringWeights(BaseModel):
	"""Tunable weight table. Every field can be overridden from the environment."""

	like: float = 2.0
	comment: float = 5.0
	engagement_rate: float = 15.0
	engagement_rate_threshold: float = 2.0
	engagement_rate_cap: float = 10.0

	followed_user: float = 50.0
	own_post: float = 30.0

	category_match: float = 8.0
	category_cap: float = 50.0
	topic_match: float = 4.0
	topic_cap: float = 20.0

	fact_supported: float = 10.0
	fact_opposed: float = -15.0
	toxic_penalty: float = -100.0
	positive_sentiment: float = 3.0

	recency_max: float = 20.0
	recency_decay_hours: float = 72.0
	new_post_boost: float = 15.0
	new_post_hours: float = 2.0

	low_engagement_boost: float = 25.0
	low_engagement_threshold: int = 5
	random_diversity: float = 10.0

	model_config = ConfigDict(frozen=True)


DEFAULT_WEIGHTS = ScoringWeights()


@dataclass(slots=True)
class ScoreBreakdown:
	engagement: float
	social: float
	quality: float
	recency: float
	discovery: float
	personalization: float
	total: float

	def as_dict(self) -> dict[str, float]:
		return {
			"engagement": self.engagement,
			"social": self.social,
			"quality": self.quality,
			"recency": self.recency,
			"discovery": self.discovery,
			"personalization": self.personalization,
			"total": self.total,
		}


@dataclass(slots=True)
class ScoredPost:
	"""A post paired with its relevance score for one request."""

	post: Post
	score: Optional[float]
	breakdown: Optional[ScoreBreakdown] = None


def age_hours(post: Post, now: datetime) -> float:
	"""Hours since creation, never negative."""
	delta = as_utc(now) - as_utc(post.created_at)
	return max(0.0, delta.total_seconds() / 3600.0)


def engagement_score(post: Post, now: datetime, weights: ScoringWeights = DEFAULT_WEIGHTS) -> float:
	likes = post.like_count
	comments = post.comment_count
	score = likes * weights.like + comments * weights.comment
	# Rate is per hour with a one hour floor so brand new posts are not inflated.
	rate = (likes + comments) / max(1.0, age_hours(post, now))
	if rate > weights.engagement_rate_threshold:
		score += weights.engagement_rate * min(rate, weights.engagement_rate_cap)
	return score


def social_score(post: Post, context: ScoringContext, weights: ScoringWeights = DEFAULT_WEIGHTS) -> float:
	score = 0.0
	author = str(post.user)
	if author in context.followed_ids:
		score += weights.followed_user
	if context.viewer_id and author == context.viewer_id:
		score += weights.own_post
	return score


def quality_score(post: Post, weights: ScoringWeights = DEFAULT_WEIGHTS) -> float:
	analysis = post.ai_analysis
	if analysis is None:
		return 0.0
	score = 0.0
	if analysis.fact_check == FactCheck.SUPPORT:
		score += weights.fact_supported
	elif analysis.fact_check == FactCheck.OPPOSE:
		score += weights.fact_opposed
	if analysis.toxicity.detected:
		score += weights.toxic_penalty
	if analysis.sentiment == Sentiment.POSITIVE:
		score += weights.positive_sentiment
	return score


def recency_score(post: Post, now: datetime, weights: ScoringWeights = DEFAULT_WEIGHTS) -> float:
	age = age_hours(post, now)
	decay = max(0.0, weights.recency_max * (1 - age / weights.recency_decay_hours))
	if age < weights.new_post_hours:
		return decay + weights.new_post_boost
	return decay


def discovery_score(post: Post, rng: RandomSource, weights: ScoringWeights = DEFAULT_WEIGHTS) -> float:
	score = 0.0
	if post.engagement < weights.low_engagement_threshold:
		score += weights.low_engagement_boost
	score += rng() * weights.random_diversity
	return score


def _count(counts: Mapping[str, int], key: str) -> float:
	try:
		return float(counts.get(key, 0) or 0)
	except (AttributeError, TypeError, ValueError):
		return 0.0


def personalization_score(post: Post, context: ScoringContext, weights: ScoringWeights = DEFAULT_WEIGHTS) -> float:
	analysis = post.ai_analysis
	if analysis is None:
		return 0.0
	score = 0.0
	if analysis.category:
		count = _count(context.liked_categories, analysis.category)
		if count > 0:
			score += min(count * weights.category_match, weights.category_cap)
	for topic in analysis.topics:
		count = _count(context.liked_topics, topic)
		if count > 0:
			score += min(count * weights.topic_match, weights.topic_cap)
	return score


def score_post(
	post: Post,
	context: ScoringContext,
	*,
	weights: ScoringWeights = DEFAULT_WEIGHTS,
	now: datetime | None = None,
	rng: RandomSource | None = None,
) -> ScoredPost:
	"""Score a single post and keep the per-factor breakdown."""

	current = now or datetime.now(timezone.utc)
	source = rng or random.random
	engagement = engagement_score(post, current, weights)
	social = social_score(post, context, weights)
	quality = quality_score(post, weights)
	recency = recency_score(post, current, weights)
	discovery = discovery_score(post, source, weights)
	personalization = personalization_score(post, context, weights)
	total = engagement + social + quality + recency + discovery + personalization
	return ScoredPost(
		post=post,
		score=total,
		breakdown=ScoreBreakdown(
			engagement=engagement,
			social=social,
			quality=quality,
			recency=recency,
			discovery=discovery,
			personalization=personalization,
			total=total,
		),
	)


__all__ = [
	"DEFAULT_WEIGHTS",
	"RandomSource",
	"ScoreBreakdown",
	"ScoredPost",
	"ScoringWeights",
	"age_hours",
	"discovery_score",
	"engagement_score",
	"personalization_score",
	"quality_score",
	"recency_score",
	"score_post",
	"social_score",
]
