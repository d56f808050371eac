"""Support Desk core module."""

from .admin import AnalysisController, AnalysisView
from .app import Application, IApplication
from .attachments import AttachmentReadError
from .conversation import ConversationOrchestrator
from .gateway import AnswerResult, AnthropicGateway, BackendError, IBackendGateway
from .models import Attachment, ConversationAnalysis, Message, Source, TraceEvent
from .tracker import ITracker, Tracker
from .transcript import TranscriptStore

__all__ = [
    # Application
    "Application",
    "IApplication",
    # Models
    "Message",
    "Attachment",
    "Source",
    "ConversationAnalysis",
    "TraceEvent",
    # Errors
    "AttachmentReadError",
    "BackendError",
    # Components
    "TranscriptStore",
    "IBackendGateway",
    "AnthropicGateway",
    "AnswerResult",
    "ConversationOrchestrator",
    "AnalysisController",
    "AnalysisView",
    "ITracker",
    "Tracker",
]
