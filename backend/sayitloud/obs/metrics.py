"""Central registry for Prometheus metrics used across the backend."""

from __future__ import annotations

from typing import Iterable, Optional

from prometheus_client import Counter, Gauge, Histogram, Summary


REQUEST_COUNTER = Counter(
	"sayitloud_http_requests_total",
	"Total HTTP requests processed",
	["route", "method", "status"],
)

REQUEST_LATENCY = Histogram(
	"sayitloud_http_request_duration_seconds",
	"HTTP request latency in seconds",
	["route", "method"],
	buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0),
)

FEED_REQUESTS = Counter(
	"sayitloud_feed_requests_total",
	"Feed pages served",
	["mode"],
)

FEED_RANK_CANDIDATES = Counter(
	"sayitloud_feed_rank_candidates_total",
	"Candidates considered",
	["mode"],
)

FEED_RANK_DURATION = Histogram(
	"sayitloud_feed_rank_duration_ms",
	"Feed rank duration",
	["mode"],
	buckets=[5, 10, 20, 40, 80, 160, 320],
)

FEED_RANK_SCORE_AVG = Gauge(
	"sayitloud_feed_rank_score_avg",
	"Average score of top-N",
	["mode"],
)

POST_LIKES = Counter(
	"sayitloud_post_likes_total",
	"Like toggles applied",
	["action"],
)

POST_PINS = Counter(
	"sayitloud_post_pins_total",
	"Pin toggles applied",
	["action"],
)

POSTS_CREATED = Counter(
	"sayitloud_posts_created_total",
	"Posts created",
)

COMMENTS_CREATED = Counter(
	"sayitloud_comments_created_total",
	"Comments created",
)

FOLLOWS = Counter(
	"sayitloud_follows_total",
	"Follow graph changes",
	["action"],
)

NOTIFICATIONS_CREATED = Counter(
	"sayitloud_notifications_created_total",
	"Notifications recorded",
	["type"],
)

REDIS_UP = Gauge("sayitloud_redis_up", "Redis availability (1=up,0=down)")
REDIS_LATENCY = Summary("sayitloud_redis_latency_seconds", "Redis ping latency (seconds)")


def observe_request(route: str, method: str, status: int, elapsed_seconds: float) -> None:
	REQUEST_COUNTER.labels(route=route, method=method, status=str(status)).inc()
	REQUEST_LATENCY.labels(route=route, method=method).observe(elapsed_seconds)


def observe_feed_rank(mode: str, candidates: int, elapsed_ms: float, top_scores: Iterable[Optional[float]]) -> None:
	FEED_REQUESTS.labels(mode=mode).inc()
	FEED_RANK_CANDIDATES.labels(mode=mode).inc(candidates)
	FEED_RANK_DURATION.labels(mode=mode).observe(elapsed_ms)
	scores = [score for score in top_scores if score is not None][:20]
	if scores:
		FEED_RANK_SCORE_AVG.labels(mode=mode).set(sum(scores) / len(scores))


def inc_like(liked: bool) -> None:
	POST_LIKES.labels(action="like" if liked else "unlike").inc()


def inc_pin(pinned: bool) -> None:
	POST_PINS.labels(action="pin" if pinned else "unpin").inc()


def inc_follow(action: str) -> None:
	FOLLOWS.labels(action=action).inc()


def mark_redis(up: bool, *, latency_seconds: Optional[float] = None) -> None:
	REDIS_UP.set(1 if up else 0)
	if up and latency_seconds is not None:
		REDIS_LATENCY.observe(latency_seconds)
