"""Backend gateway module."""

from .anthropic_gateway import AnthropicGateway
from .gateway import AnswerResult, BackendError, IBackendGateway

__all__ = ["AnthropicGateway", "AnswerResult", "BackendError", "IBackendGateway"]
