"""Conversation analysis value object."""

from typing import Literal

from pydantic import BaseModel, Field


class ConversationAnalysis(BaseModel):
    """Structured admin summary of a whole transcript."""

    sentiment: Literal["positive", "neutral", "negative"]
    sentiment_score: int = Field(ge=0, le=100, description="0 = very negative, 100 = very positive")
    summary: str
    key_topics: list[str] = Field(default_factory=list)
    customer_intent: str
    unresolved_issues: list[str] = Field(default_factory=list)
    admin_recommendations: list[str] = Field(default_factory=list)
    criticality: Literal["low", "medium", "high"]
