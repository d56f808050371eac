"""Backend gateway implementation using the Anthropic Claude API."""

import os

import anthropic
from pydantic import ValidationError

from ..config import (
    DEFAULT_ANALYSIS_MODEL,
    DEFAULT_ANSWER_MODEL,
    DEFAULT_MAX_TOKENS,
    DEFAULT_WEB_SEARCH_MAX_USES,
    env_int,
    get_brand,
)
from ..logging_config import get_logger
from ..models import Attachment, ConversationAnalysis, Message, Source
from .gateway import AnswerResult, BackendError

logger = get_logger(__name__)

ANALYSIS_TOOL_NAME = "record_conversation_analysis"

# Continuations allowed after a pause_turn stop
MAX_PAUSED_TURNS = 3
TRUNCATED_MARKER = "\n\n_(Answer truncated.)_"

ANSWER_SYSTEM_PROMPT = """You are the customer support assistant for {brand}, a telecommunications provider.
Answer questions about {brand} services, packages, billing and faults using the live knowledge base (web search).
Prefer official {brand} sources and keep answers short and practical, formatted in Markdown.
When the customer attaches a bill or document, read it carefully and refer to concrete figures from it.
If you cannot find an answer, say so and suggest contacting the {brand} hotline."""

ANALYSIS_SYSTEM_PROMPT = """You review customer support conversations for {brand} administrators.
Assess the customer's sentiment, intent and any unresolved issues, and recommend follow-up actions.
Always respond by calling the {tool} tool."""


def _role(message: Message) -> str:
    return "user" if message.role == "user" else "assistant"


def attachment_block(attachment: Attachment) -> dict:
    """Content block for an attachment: PDFs as documents, everything else as images."""
    block_type = "document" if attachment.is_pdf else "image"
    return {
        "type": block_type,
        "source": {
            "type": "base64",
            "media_type": attachment.mime_type,
            "data": attachment.data,
        },
    }


def message_blocks(text: str, attachment: Attachment | None = None) -> list[dict]:
    blocks = []
    if attachment is not None:
        blocks.append(attachment_block(attachment))
    if text:
        blocks.append({"type": "text", "text": text})
    return blocks


def build_conversation(
    history: list[Message],
    new_text: str,
    attachment: Attachment | None = None,
) -> list[dict]:
    """
    Convert the transcript plus the new turn into Messages API format.

    Synthesized error entries are skipped, consecutive turns of the same role
    are merged, and leading assistant turns (the greeting) are dropped since
    the conversation has to open with a user turn.
    """
    turns = [
        (_role(m), message_blocks(m.text, m.attachment))
        for m in history
        if not m.is_error
    ]
    turns.append(("user", message_blocks(new_text, attachment)))

    conversation: list[dict] = []
    for role, blocks in turns:
        if not blocks:
            continue
        if not conversation and role == "assistant":
            continue
        if conversation and conversation[-1]["role"] == role:
            conversation[-1]["content"].extend(blocks)
        else:
            conversation.append({"role": role, "content": list(blocks)})
    return conversation


def render_transcript(history: list[Message]) -> str:
    """Plain-text transcript for analysis prompts."""
    lines = []
    for m in history:
        speaker = "Customer" if m.role == "user" else "Assistant"
        text = m.text
        if m.attachment is not None:
            text = f"{text} [attached: {m.attachment.name}]"
        if m.is_error:
            text = f"{text} [delivery failed]"
        if m.feedback:
            text = f"{text} [customer feedback: {m.feedback}]"
        lines.append(f"{speaker}: {text}")
    return "\n\n".join(lines)


def extract_sources(content: list) -> list[Source]:
    """Collect web citations from text blocks, unique by uri, in first-seen order."""
    sources: list[Source] = []
    seen: set[str] = set()
    for block in content:
        if getattr(block, "type", None) != "text":
            continue
        for citation in getattr(block, "citations", None) or []:
            uri = getattr(citation, "url", None)
            if not uri or uri in seen:
                continue
            seen.add(uri)
            sources.append(Source(uri=uri, title=getattr(citation, "title", None)))
    return sources


def _check_refusal(response) -> None:
    if getattr(response, "stop_reason", None) == "refusal":
        raise BackendError("The request was blocked by the safety filter.")


class AnthropicGateway:
    """Anthropic Claude API gateway with web-search grounding."""

    def __init__(
        self,
        api_key: str | None = None,
        answer_model: str | None = None,
        analysis_model: str | None = None,
        max_tokens: int | None = None,
        web_search_max_uses: int | None = None,
        brand: str | None = None,
    ):
        self._api_key = api_key or os.getenv("ANTHROPIC_API_KEY")
        if not self._api_key:
            raise ValueError("ANTHROPIC_API_KEY environment variable not set")

        self._answer_model = answer_model or os.getenv("ANSWER_MODEL", DEFAULT_ANSWER_MODEL)
        self._analysis_model = analysis_model or os.getenv("ANALYSIS_MODEL", DEFAULT_ANALYSIS_MODEL)
        self._max_tokens = max_tokens or env_int("LLM_MAX_TOKENS", DEFAULT_MAX_TOKENS)
        self._web_search_max_uses = web_search_max_uses or env_int(
            "WEB_SEARCH_MAX_USES", DEFAULT_WEB_SEARCH_MAX_USES
        )
        self._brand = brand or get_brand()
        self._client = anthropic.AsyncAnthropic(api_key=self._api_key)

    async def answer(
        self,
        history: list[Message],
        new_text: str,
        attachment: Attachment | None = None,
    ) -> AnswerResult:
        """Answer a question with grounding, given the prior transcript."""
        conversation = build_conversation(history, new_text, attachment)
        for _ in range(MAX_PAUSED_TURNS + 1):
            response = await self._create(
                model=self._answer_model,
                system=ANSWER_SYSTEM_PROMPT.format(brand=self._brand),
                messages=list(conversation),
                max_tokens=self._max_tokens,
                tools=[
                    {
                        "type": "web_search_20250305",
                        "name": "web_search",
                        "max_uses": self._web_search_max_uses,
                    }
                ],
            )
            _check_refusal(response)
            if getattr(response, "stop_reason", None) != "pause_turn":
                break
            # Server tool paused a long turn; send the partial turn back to resume it
            conversation.append({"role": "assistant", "content": response.content})
        else:
            raise BackendError("The knowledge base did not finish answering.")

        text = "".join(
            block.text for block in response.content if getattr(block, "type", None) == "text"
        ).strip()
        if not text:
            raise BackendError("The knowledge base returned an empty answer.")
        if getattr(response, "stop_reason", None) == "max_tokens":
            logger.warning("Answer truncated at max_tokens")
            text = f"{text}{TRUNCATED_MARKER}"

        return AnswerResult(text=text, sources=extract_sources(response.content))

    async def analyze(self, history: list[Message]) -> ConversationAnalysis:
        """Produce a structured analysis of the whole transcript."""
        response = await self._create(
            model=self._analysis_model,
            system=ANALYSIS_SYSTEM_PROMPT.format(brand=self._brand, tool=ANALYSIS_TOOL_NAME),
            messages=[
                {
                    "role": "user",
                    "content": "Analyze this support conversation:\n\n"
                    + (render_transcript(history) or "(empty conversation)"),
                }
            ],
            max_tokens=self._max_tokens,
            tools=[
                {
                    "name": ANALYSIS_TOOL_NAME,
                    "description": "Record the structured analysis of a support conversation.",
                    "input_schema": ConversationAnalysis.model_json_schema(),
                }
            ],
            tool_choice={"type": "tool", "name": ANALYSIS_TOOL_NAME},
        )
        _check_refusal(response)

        for block in response.content:
            if getattr(block, "type", None) == "tool_use" and block.name == ANALYSIS_TOOL_NAME:
                try:
                    return ConversationAnalysis.model_validate(block.input)
                except ValidationError as e:
                    logger.warning(f"Malformed analysis payload: {e}")
                    raise BackendError("The analysis returned by the backend was malformed.") from e

        raise BackendError("The backend did not return an analysis.")

    async def _create(self, **kwargs):
        """Single Messages API call; every failure becomes a BackendError."""
        try:
            return await self._client.messages.create(**kwargs)
        except anthropic.APIError as e:
            raise BackendError(e.message) from e
        except Exception as e:
            raise BackendError(f"LLM API error: {e}") from e
