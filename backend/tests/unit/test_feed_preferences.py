from __future__ import annotations

import asyncio

import pytest

from sayitloud.domain.feed import preferences
from sayitloud.domain.feed.models import AIAnalysis
from sayitloud.domain.feed.repo import FeedRepository


def test_preference_keys_dedupe_topics():
	analysis = AIAnalysis(category="Tech", topics=["ai", "ai", "", "python"])
	assert preferences.preference_keys(analysis) == ("Tech", ["ai", "python"])


def test_posts_without_analysis_have_no_keys():
	assert preferences.preference_keys(None) == (None, [])
	assert preferences.preference_keys(AIAnalysis(category="")) == (None, [])


@pytest.mark.asyncio
async def test_like_increments_category_and_topics(fake_redis):
	repo = FeedRepository()
	await fake_redis.hset("user:alice:likes:topics", "ai", 1)
	await repo.adjust_preferences("alice", "Tech", ["ai", "python"], 1)
	assert await fake_redis.hgetall("user:alice:likes:categories") == {"Tech": "1"}
	assert await fake_redis.hgetall("user:alice:likes:topics") == {"ai": "2", "python": "1"}


@pytest.mark.asyncio
async def test_unlike_decrements_and_removes_zero_counters(fake_redis):
	repo = FeedRepository()
	await fake_redis.hset("user:alice:likes:categories", "Tech", 1)
	await fake_redis.hset("user:alice:likes:topics", "ai", 3)
	await repo.adjust_preferences("alice", "Tech", ["ai"], -1)
	assert await fake_redis.hgetall("user:alice:likes:categories") == {}
	assert await fake_redis.hgetall("user:alice:likes:topics") == {"ai": "2"}


@pytest.mark.asyncio
async def test_unlike_never_creates_negative_counters(fake_redis):
	repo = FeedRepository()
	await repo.adjust_preferences("alice", "Tech", ["ai"], -1)
	assert await fake_redis.hgetall("user:alice:likes:categories") == {}
	assert await fake_redis.hgetall("user:alice:likes:topics") == {}


@pytest.mark.asyncio
async def test_concurrent_increments_are_not_lost(fake_redis):
	repo = FeedRepository()
	await asyncio.gather(*(repo.adjust_preferences("alice", "Tech", ["ai"], 1) for _ in range(5)))
	assert await fake_redis.hgetall("user:alice:likes:categories") == {"Tech": "5"}
	assert await fake_redis.hgetall("user:alice:likes:topics") == {"ai": "5"}

	await asyncio.gather(*(repo.adjust_preferences("alice", "Tech", [], -1) for _ in range(3)))
	assert await fake_redis.hgetall("user:alice:likes:categories") == {"Tech": "2"}
