"""Backend gateway: the single seam between the core and the language model."""

from dataclasses import dataclass, field
from typing import Protocol

from ..models import Attachment, ConversationAnalysis, Message, Source


class BackendError(Exception):
    """Any failure of a backend request, normalized to a readable message."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


@dataclass
class AnswerResult:
    """Outcome of a successful ``answer`` request."""

    text: str
    sources: list[Source] = field(default_factory=list)


class IBackendGateway(Protocol):
    """Request/response access to the language-model backend."""

    async def answer(
        self,
        history: list[Message],
        new_text: str,
        attachment: Attachment | None = None,
    ) -> AnswerResult:
        """Answer ``new_text`` given the transcript before it. Raises BackendError."""
        ...

    async def analyze(self, history: list[Message]) -> ConversationAnalysis:
        """Analyze the whole transcript. Raises BackendError."""
        ...
