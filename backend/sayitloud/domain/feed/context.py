"""Per-request scoring context built from a viewer's stored preferences."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, FrozenSet

from sayitloud.domain.feed.models import ViewerProfile

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class ScoringContext:
	"""Viewer identity, follow set and like frequency maps used for scoring.

	The maps are read-only views so a context can be shared across requests.
	"""

	viewer_id: str
	followed_ids: FrozenSet[str] = frozenset()
	liked_categories: Mapping[str, int] = field(default_factory=lambda: MappingProxyType({}))
	liked_topics: Mapping[str, int] = field(default_factory=lambda: MappingProxyType({}))


def _coerce_ids(value: Any) -> FrozenSet[str]:
	if value is None or isinstance(value, (str, bytes, Mapping)):
		return frozenset()
	if not isinstance(value, Iterable):
		return frozenset()
	return frozenset(str(item) for item in value if item is not None and str(item))


def _coerce_counts(value: Any, *, name: str) -> Dict[str, int]:
	if value is None:
		return {}
	if not isinstance(value, Mapping):
		logger.warning("scoring_context_bad_map", extra={"field": name, "kind": type(value).__name__})
		return {}
	counts: Dict[str, int] = {}
	for key, raw in value.items():
		if isinstance(raw, bool):
			continue
		try:
			count = int(raw)
		except (TypeError, ValueError):
			continue
		if count > 0 and key is not None:
			counts[str(key)] = count
	return counts


def build_scoring_context(
	viewer_id: Any,
	following: Any = None,
	liked_categories: Any = None,
	liked_topics: Any = None,
) -> ScoringContext:
	"""Build a context, replacing malformed structures with empty ones."""

	return ScoringContext(
		viewer_id=str(viewer_id) if viewer_id is not None else "",
		followed_ids=_coerce_ids(following),
		liked_categories=MappingProxyType(_coerce_counts(liked_categories, name="liked_categories")),
		liked_topics=MappingProxyType(_coerce_counts(liked_topics, name="liked_topics")),
	)


def context_for_viewer(profile: ViewerProfile) -> ScoringContext:
	return build_scoring_context(
		profile.id,
		following=profile.following,
		liked_categories=profile.liked_categories,
		liked_topics=profile.liked_topics,
	)


__all__ = ["ScoringContext", "build_scoring_context", "context_for_viewer"]
