"""Topic aggregation over recent posts."""

from __future__ import annotations

from collections import Counter
from typing import Iterable, List, Tuple

from sayitloud.domain.feed.models import Post, as_utc


def trending_topics(posts: Iterable[Post], *, limit: int = 10) -> List[Tuple[str, int]]:
	"""Count topic occurrences, most frequent first, ties alphabetical."""
	counts: Counter[str] = Counter()
	for post in posts:
		if post.ai_analysis is None:
			continue
		counts.update(topic for topic in post.ai_analysis.topics if topic)
	ranked = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
	return ranked[: max(0, limit)]


def posts_matching_topic(posts: Iterable[Post], topic: str) -> List[Post]:
	"""Posts with a topic containing ``topic`` (case-insensitive), newest first."""
	needle = topic.strip().lower()
	matched = [
		post
		for post in posts
		if post.ai_analysis is not None
		and any(needle in candidate.lower() for candidate in post.ai_analysis.topics)
	]
	matched.sort(key=lambda post: as_utc(post.created_at), reverse=True)
	return matched


__all__ = ["posts_matching_topic", "trending_topics"]
