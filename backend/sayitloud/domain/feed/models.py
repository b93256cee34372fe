"""Domain models for posts, their AI analysis and the viewer profile."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def utcnow() -> datetime:
	return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
	"""Treat naive timestamps as UTC."""
	if value.tzinfo is None:
		return value.replace(tzinfo=timezone.utc)
	return value


class Sentiment(str, Enum):
	POSITIVE = "Positive"
	NEGATIVE = "Negative"
	NEUTRAL = "Neutral"
	MIXED = "Mixed"
	UNKNOWN = "Unknown"
	ERROR = "Error"


class FactCheck(str, Enum):
	SUPPORT = "support"
	NEUTRAL = "neutral"
	OPPOSE = "oppose"
	UNKNOWN = "Unknown"


class Emotion(BaseModel):
	emotion: str
	score: float = 0.0


class Toxicity(BaseModel):
	detected: bool = False
	details: Dict[str, float] = Field(default_factory=dict)


class AIAnalysis(BaseModel):
	"""Content analysis attached asynchronously after a post is created."""

	sentiment: Sentiment = Sentiment.UNKNOWN
	emotions: List[Emotion] = Field(default_factory=list)
	toxicity: Toxicity = Field(default_factory=Toxicity)
	topics: List[str] = Field(default_factory=list)
	summary: str = ""
	category: Optional[str] = None
	fact_check: FactCheck = FactCheck.UNKNOWN
	fact_check_reason: str = ""

	model_config = ConfigDict(from_attributes=True)


class Comment(BaseModel):
	id: str
	user: str
	text: str
	created_at: datetime = Field(default_factory=utcnow)

	model_config = ConfigDict(from_attributes=True)


class Post(BaseModel):
	"""Represents a post snapshot as stored.

	``pinned_at`` is set exactly when ``is_pinned`` is true.
	"""

	id: str
	user: str
	content: str
	image: Optional[str] = None
	likes: List[str] = Field(default_factory=list)
	comments: List[Comment] = Field(default_factory=list)
	ai_analysis: Optional[AIAnalysis] = None
	is_pinned: bool = False
	pinned_at: Optional[datetime] = None
	created_at: datetime = Field(default_factory=utcnow)
	updated_at: datetime = Field(default_factory=utcnow)

	model_config = ConfigDict(from_attributes=True)

	@field_validator("likes", mode="before")
	@classmethod
	def _unique_likes(cls, value):
		if value is None:
			return []
		return list(dict.fromkeys(str(liker) for liker in value))

	@field_validator("comments", mode="before")
	@classmethod
	def _default_comments(cls, value):
		return [] if value is None else value

	@model_validator(mode="after")
	def _pin_invariant(self) -> "Post":
		if self.is_pinned and self.pinned_at is None:
			self.pinned_at = self.updated_at
		elif not self.is_pinned and self.pinned_at is not None:
			self.pinned_at = None
		return self

	@property
	def like_count(self) -> int:
		return len(self.likes)

	@property
	def comment_count(self) -> int:
		return len(self.comments)

	@property
	def engagement(self) -> int:
		return self.like_count + self.comment_count

	def pin(self, at: datetime | None = None) -> None:
		stamp = at or utcnow()
		self.is_pinned = True
		self.pinned_at = stamp
		self.updated_at = stamp

	def unpin(self, at: datetime | None = None) -> None:
		self.is_pinned = False
		self.pinned_at = None
		self.updated_at = at or utcnow()


class ViewerProfile(BaseModel):
	"""Stored social graph and like counters for one viewer."""

	id: str
	following: List[str] = Field(default_factory=list)
	liked_categories: Dict[str, int] = Field(default_factory=dict)
	liked_topics: Dict[str, int] = Field(default_factory=dict)
	is_admin: bool = False


class NotificationType(str, Enum):
	LIKE = "like"
	COMMENT = "comment"
	FOLLOW = "follow"


class Notification(BaseModel):
	"""Tells ``recipient`` that ``initiator`` liked, commented on or followed."""

	id: str
	recipient: str
	type: NotificationType
	initiator: str
	post: Optional[str] = None
	message: str
	read: bool = False
	created_at: datetime = Field(default_factory=utcnow)
	updated_at: datetime = Field(default_factory=utcnow)

	model_config = ConfigDict(from_attributes=True)


__all__ = [
	"AIAnalysis",
	"Comment",
	"Emotion",
	"FactCheck",
	"Notification",
	"NotificationType",
	"Post",
	"Sentiment",
	"Toxicity",
	"ViewerProfile",
	"as_utc",
	"utcnow",
]
