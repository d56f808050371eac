"""Message-related data models."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Literal

Role = Literal["user", "model"]
Feedback = Literal["positive", "negative"]


def new_id() -> str:
    """Opaque, session-unique message identifier."""
    return uuid.uuid4().hex


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Source:
    """A citation returned alongside a grounded answer."""

    uri: str
    title: str | None = None


@dataclass(frozen=True)
class Attachment:
    """A user-supplied file, base64-encoded in full."""

    name: str
    mime_type: str
    data: str  # base64, no data-URL prefix

    @property
    def is_pdf(self) -> bool:
        return self.mime_type == "application/pdf"

    @property
    def is_image(self) -> bool:
        return self.mime_type.startswith("image/")


@dataclass(frozen=True)
class Message:
    """A single transcript entry.

    Instances are never changed in place; the transcript store swaps in a
    copy with a new ``feedback`` value when feedback is recorded.
    """

    role: Role
    text: str
    id: str = field(default_factory=new_id)
    timestamp: datetime = field(default_factory=utc_now)
    sources: tuple[Source, ...] = ()
    attachment: Attachment | None = None
    is_error: bool = False
    feedback: Feedback | None = None

    @classmethod
    def user(cls, text: str, attachment: Attachment | None = None) -> "Message":
        return cls(role="user", text=text, attachment=attachment)

    @classmethod
    def model(cls, text: str, sources: list[Source] | tuple[Source, ...] = ()) -> "Message":
        return cls(role="model", text=text, sources=tuple(sources))

    @classmethod
    def error(cls, text: str) -> "Message":
        return cls(role="model", text=text, is_error=True)
