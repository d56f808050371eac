"""API request and response models."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel

from ..admin import AnalysisView
from ..models import Attachment, ConversationAnalysis, Message


class SourceResponse(BaseModel):
    uri: str
    title: str | None = None


class AttachmentInfo(BaseModel):
    """Attachment metadata; the payload itself is never echoed back."""

    name: str
    mime_type: str
    size: int  # base64 characters

    @classmethod
    def from_attachment(cls, attachment: Attachment | None) -> "AttachmentInfo | None":
        if attachment is None:
            return None
        return cls(name=attachment.name, mime_type=attachment.mime_type, size=len(attachment.data))


class MessageResponse(BaseModel):
    """Response model for a transcript entry."""

    id: str
    role: Literal["user", "model"]
    text: str
    timestamp: datetime
    sources: list[SourceResponse] = []
    attachment: AttachmentInfo | None = None
    is_error: bool = False
    feedback: Literal["positive", "negative"] | None = None

    @classmethod
    def from_message(cls, message: Message) -> "MessageResponse":
        return cls(
            id=message.id,
            role=message.role,
            text=message.text,
            timestamp=message.timestamp,
            sources=[SourceResponse(uri=s.uri, title=s.title) for s in message.sources],
            attachment=AttachmentInfo.from_attachment(message.attachment),
            is_error=message.is_error,
            feedback=message.feedback,
        )


class SendRequest(BaseModel):
    """Request model for sending a message; omitted text uses the input buffer."""

    text: str | None = None


class SendResponse(BaseModel):
    accepted: bool
    messages: list[MessageResponse] = []


class FeedbackRequest(BaseModel):
    value: Literal["positive", "negative"] | None


class InputRequest(BaseModel):
    text: str


class AttachmentRequest(BaseModel):
    """A file as read by the browser: ``data:<mime>;base64,<payload>``."""

    name: str
    data_url: str


class ChatStateResponse(BaseModel):
    is_loading: bool
    input_text: str
    pending_attachment: AttachmentInfo | None = None


class AnalysisViewResponse(BaseModel):
    is_open: bool
    is_loading: bool
    analysis: ConversationAnalysis | None = None
    error: str | None = None

    @classmethod
    def from_view(cls, view: AnalysisView) -> "AnalysisViewResponse":
        return cls(
            is_open=view.is_open,
            is_loading=view.is_loading,
            analysis=view.analysis,
            error=view.error,
        )
