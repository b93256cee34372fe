from __future__ import annotations

import logging

import pytest

from sayitloud.domain.feed.context import build_scoring_context, context_for_viewer
from sayitloud.domain.feed.models import ViewerProfile


def test_build_context_from_well_formed_input():
	context = build_scoring_context(
		"viewer",
		following=["a", "b", "a"],
		liked_categories={"Tech": 3},
		liked_topics={"ai": 1},
	)
	assert context.viewer_id == "viewer"
	assert context.followed_ids == frozenset({"a", "b"})
	assert context.liked_categories == {"Tech": 3}
	assert context.liked_topics == {"ai": 1}


def test_malformed_structures_become_empty(caplog):
	with caplog.at_level(logging.WARNING):
		context = build_scoring_context(
			"viewer",
			following="not-a-list",
			liked_categories=["Tech"],
			liked_topics=42,
		)
	assert context.followed_ids == frozenset()
	assert context.liked_categories == {}
	assert context.liked_topics == {}
	assert any(record.getMessage() == "scoring_context_bad_map" for record in caplog.records)


def test_missing_values_default_to_empty():
	context = build_scoring_context(None)
	assert context.viewer_id == ""
	assert context.followed_ids == frozenset()
	assert context.liked_categories == {}


def test_non_numeric_and_non_positive_counts_are_dropped():
	context = build_scoring_context(
		"viewer",
		liked_categories={"Tech": "4", "Art": "many", "News": 0, "Sport": True},
	)
	assert context.liked_categories == {"Tech": 4}


def test_context_for_viewer_uses_profile():
	profile = ViewerProfile(id="v1", following=["x"], liked_topics={"ai": 2})
	context = context_for_viewer(profile)
	assert context.viewer_id == "v1"
	assert "x" in context.followed_ids
	assert context.liked_topics == {"ai": 2}


def test_context_maps_are_read_only():
	source = {"Tech": 2}
	context = build_scoring_context("viewer", liked_categories=source, liked_topics={"ai": 1})
	with pytest.raises(TypeError):
		context.liked_categories["Tech"] = 99
	with pytest.raises(TypeError):
		context.liked_topics["new"] = 1
	source["Tech"] = 5
	assert context.liked_categories["Tech"] == 2
	assert build_scoring_context("viewer").liked_topics == {}
