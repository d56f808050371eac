"""Conversation module."""

from .orchestrator import ConversationOrchestrator

__all__ = ["ConversationOrchestrator"]
