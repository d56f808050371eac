"""Core data models for Support Desk."""

from .analysis import ConversationAnalysis
from .messages import Attachment, Feedback, Message, Role, Source
from .tracing import TraceEvent

__all__ = [
    # Messages
    "Message",
    "Attachment",
    "Source",
    "Role",
    "Feedback",
    # Analysis
    "ConversationAnalysis",
    # Tracing
    "TraceEvent",
]
