from __future__ import annotations

from datetime import datetime, timedelta, timezone

from sayitloud.domain.feed.models import AIAnalysis, Post
from sayitloud.domain.feed.trending import posts_matching_topic, trending_topics

NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


def _make_post(post_id: str, topics: list[str] | None, *, age_hours: float = 1.0) -> Post:
	created = NOW - timedelta(hours=age_hours)
	analysis = AIAnalysis(topics=topics) if topics is not None else None
	return Post(id=post_id, user="u", content="c", ai_analysis=analysis, created_at=created, updated_at=created)


def test_trending_counts_sorted_by_frequency_then_name():
	posts = [
		_make_post("1", ["python", "ai"]),
		_make_post("2", ["ai", "music"]),
		_make_post("3", ["python", "ai"]),
		_make_post("4", None),
	]
	assert trending_topics(posts) == [("ai", 3), ("python", 2), ("music", 1)]


def test_trending_respects_limit():
	posts = [_make_post(str(i), [f"topic{i}"]) for i in range(15)]
	result = trending_topics(posts)
	assert len(result) == 10
	assert result[0] == ("topic0", 1)


def test_topic_search_is_case_insensitive_substring_newest_first():
	posts = [
		_make_post("old", ["Machine Learning"], age_hours=10),
		_make_post("new", ["learning to cook"], age_hours=1),
		_make_post("other", ["gardening"]),
		_make_post("bare", None),
	]
	matched = posts_matching_topic(posts, "LEARN")
	assert [post.id for post in matched] == ["new", "old"]
