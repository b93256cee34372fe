"""Pydantic schemas for the posts, users and notifications APIs.

Responses are camelCase on the wire to match the web client.
"""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from sayitloud.domain.feed.models import AIAnalysis, Comment, Notification, Post
from sayitloud.domain.feed.scoring import ScoredPost


class _CamelModel(BaseModel):
	model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AIAnalysisSchema(_CamelModel):
	sentiment: str
	emotions: List[Dict[str, object]] = Field(default_factory=list)
	toxicity: Dict[str, object] = Field(default_factory=dict)
	topics: List[str] = Field(default_factory=list)
	summary: str = ""
	category: Optional[str] = None
	fact_check: str
	fact_check_reason: str = ""

	@classmethod
	def from_model(cls, analysis: AIAnalysis) -> "AIAnalysisSchema":
		data = analysis.model_dump(mode="json")
		return cls(**data)


class CommentSchema(_CamelModel):
	id: str
	user: str
	text: str
	created_at: datetime

	@classmethod
	def from_model(cls, comment: Comment) -> "CommentSchema":
		return cls(id=comment.id, user=comment.user, text=comment.text, created_at=comment.created_at)


class PostSchema(_CamelModel):
	id: str
	user: str
	content: str
	image: Optional[str] = None
	likes: List[str] = Field(default_factory=list)
	comments: List[CommentSchema] = Field(default_factory=list)
	ai_analysis: Optional[AIAnalysisSchema] = None
	is_pinned: bool = False
	pinned_at: Optional[datetime] = None
	created_at: datetime
	updated_at: datetime
	relevance_score: Optional[float] = None
	score_breakdown: Optional[Dict[str, float]] = None

	@classmethod
	def from_post(cls, post: Post) -> "PostSchema":
		return cls(
			id=post.id,
			user=post.user,
			content=post.content,
			image=post.image,
			likes=list(post.likes),
			comments=[CommentSchema.from_model(comment) for comment in post.comments],
			ai_analysis=AIAnalysisSchema.from_model(post.ai_analysis) if post.ai_analysis else None,
			is_pinned=post.is_pinned,
			pinned_at=post.pinned_at,
			created_at=post.created_at,
			updated_at=post.updated_at,
		)

	@classmethod
	def from_scored(cls, scored: ScoredPost, *, explain: bool = False) -> "PostSchema":
		item = cls.from_post(scored.post)
		item.relevance_score = scored.score
		if explain and scored.breakdown is not None:
			item.score_breakdown = scored.breakdown.as_dict()
		return item


class FeedPageResponse(_CamelModel):
	posts: List[PostSchema]
	total: int
	page: int
	limit: int
	has_more: bool


class PostCreateRequest(BaseModel):
	content: str = Field(..., min_length=1, max_length=5000)
	image: Optional[str] = Field(default=None, max_length=2048)


class CommentCreateRequest(BaseModel):
	text: str = Field(..., min_length=1, max_length=2000)


class AIAnalysisRequest(AIAnalysis):
	"""Analysis payload posted by the analysis worker; accepts camelCase or snake_case."""

	model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

	def to_model(self) -> AIAnalysis:
		return AIAnalysis.model_validate(self.model_dump())


class PostActionResponse(_CamelModel):
	message: str
	post: PostSchema


class TrendingTopicSchema(BaseModel):
	topic: str
	count: int


class FollowResponse(_CamelModel):
	message: str
	following: bool
	follower_count: int


class NotificationSchema(_CamelModel):
	id: str
	recipient: str
	type: str
	initiator: str
	post: Optional[str] = None
	message: str
	read: bool
	created_at: datetime
	updated_at: datetime

	@classmethod
	def from_model(cls, notification: Notification) -> "NotificationSchema":
		return cls(**notification.model_dump(mode="json"))


class NotificationPageResponse(_CamelModel):
	notifications: List[NotificationSchema]
	total: int
	page: int
	limit: int
	has_more: bool


class NotificationActionResponse(_CamelModel):
	message: str
	notification: NotificationSchema


class MessageResponse(BaseModel):
	message: str


__all__ = [
	"AIAnalysisRequest",
	"AIAnalysisSchema",
	"CommentCreateRequest",
	"CommentSchema",
	"FeedPageResponse",
	"FollowResponse",
	"MessageResponse",
	"NotificationActionResponse",
	"NotificationPageResponse",
	"NotificationSchema",
	"PostActionResponse",
	"PostCreateRequest",
	"PostSchema",
	"TrendingTopicSchema",
]
