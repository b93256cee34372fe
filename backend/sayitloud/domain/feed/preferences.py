"""Like-driven preference keys that feed the scoring context.

The counters themselves live in Redis hashes and are moved atomically by
``FeedRepository.adjust_preferences``.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from sayitloud.domain.feed.models import AIAnalysis


def preference_keys(analysis: Optional[AIAnalysis]) -> Tuple[Optional[str], List[str]]:
	"""Return the category and de-duplicated topics a like counts towards."""
	if analysis is None:
		return None, []
	topics: List[str] = []
	for topic in analysis.topics:
		if topic and topic not in topics:
			topics.append(topic)
	return analysis.category or None, topics


__all__ = ["preference_keys"]
