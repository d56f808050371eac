"""Tests for AnthropicGateway."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, Mock, patch

import anthropic
import httpx
import pytest

from support_desk.gateway import AnthropicGateway, BackendError
from support_desk.gateway.anthropic_gateway import (
    ANALYSIS_TOOL_NAME,
    MAX_PAUSED_TURNS,
    TRUNCATED_MARKER,
    build_conversation,
    extract_sources,
    render_transcript,
)
from support_desk.models import Attachment, Message, Source

from conftest import ANALYSIS_PAYLOAD

CLIENT_PATH = "support_desk.gateway.anthropic_gateway.anthropic.AsyncAnthropic"


def _text(text, citations=None):
    return SimpleNamespace(type="text", text=text, citations=citations)


def _citation(url, title=None):
    return SimpleNamespace(type="web_search_result_location", url=url, title=title)


def _response(*blocks, stop_reason="end_turn"):
    return SimpleNamespace(content=list(blocks), stop_reason=stop_reason)


@pytest.fixture
def mock_client():
    client = Mock()
    client.messages.create = AsyncMock(return_value=_response(_text("Hello from the KB")))
    return client


@pytest.fixture
def gateway(monkeypatch, mock_client):
    monkeypatch.setenv("ANTHROPIC_API_KEY", "test_key")
    with patch(CLIENT_PATH, return_value=mock_client):
        yield AnthropicGateway(brand="TestTel")


class TestAnthropicGatewayInit:
    """Tests for AnthropicGateway initialization."""

    def test_init_with_api_key(self, monkeypatch):
        monkeypatch.setenv("ANTHROPIC_API_KEY", "test_key")

        with patch(CLIENT_PATH):
            assert AnthropicGateway() is not None

    def test_init_without_api_key(self, monkeypatch):
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)

        with patch(CLIENT_PATH):
            with pytest.raises(ValueError, match="ANTHROPIC_API_KEY"):
                AnthropicGateway()

    def test_models_from_environment(self, monkeypatch, mock_client):
        monkeypatch.setenv("ANTHROPIC_API_KEY", "test_key")
        monkeypatch.setenv("ANSWER_MODEL", "answer-model")
        monkeypatch.setenv("LLM_MAX_TOKENS", "2048")

        with patch(CLIENT_PATH, return_value=mock_client):
            provider = AnthropicGateway()

        assert provider._answer_model == "answer-model"
        assert provider._max_tokens == 2048


class TestAnswer:
    """Tests for AnthropicGateway.answer()."""

    @pytest.mark.asyncio
    async def test_returns_text(self, gateway):
        result = await gateway.answer([], "Hi")

        assert result.text == "Hello from the KB"
        assert result.sources == []

    @pytest.mark.asyncio
    async def test_sends_grounded_request(self, gateway, mock_client):
        await gateway.answer([Message.model("Greeting")], "What are your data plans?")

        kwargs = mock_client.messages.create.call_args.kwargs
        assert "TestTel" in kwargs["system"]
        assert kwargs["tools"][0]["name"] == "web_search"
        assert kwargs["messages"] == [
            {"role": "user", "content": [{"type": "text", "text": "What are your data plans?"}]}
        ]

    @pytest.mark.asyncio
    async def test_collects_sources(self, gateway, mock_client):
        mock_client.messages.create.return_value = _response(
            SimpleNamespace(type="server_tool_use", name="web_search"),
            _text("We offer ", [_citation("https://slt.lk/plans", "Plans")]),
            _text("several plans.", [_citation("https://slt.lk/plans", "Plans")]),
        )

        result = await gateway.answer([], "What are your data plans?")

        assert result.text == "We offer several plans."
        assert result.sources == [Source(uri="https://slt.lk/plans", title="Plans")]

    @pytest.mark.asyncio
    async def test_paused_turn_is_resumed(self, gateway, mock_client):
        """Test that a pause_turn stop is continued until the turn ends."""
        search = SimpleNamespace(type="server_tool_use", name="web_search")
        paused = _response(_text("Let me search"), search, stop_reason="pause_turn")
        final = _response(
            _text("We offer several plans.", [_citation("https://slt.lk/plans", "Plans")])
        )
        mock_client.messages.create.side_effect = [paused, final]

        result = await gateway.answer([], "What are your data plans?")

        assert result.text == "We offer several plans."
        assert result.sources == [Source(uri="https://slt.lk/plans", title="Plans")]
        assert mock_client.messages.create.await_count == 2

        first_call, second_call = mock_client.messages.create.call_args_list
        assert len(first_call.kwargs["messages"]) == 1
        assert second_call.kwargs["messages"][-1] == {
            "role": "assistant",
            "content": paused.content,
        }

    @pytest.mark.asyncio
    async def test_endless_pause_is_backend_error(self, gateway, mock_client):
        mock_client.messages.create.return_value = _response(
            _text("Still searching"), stop_reason="pause_turn"
        )

        with pytest.raises(BackendError, match="did not finish"):
            await gateway.answer([], "Hi")

        assert mock_client.messages.create.await_count == MAX_PAUSED_TURNS + 1

    @pytest.mark.asyncio
    async def test_truncated_answer_is_marked(self, gateway, mock_client):
        mock_client.messages.create.return_value = _response(
            _text("Our plans start at"), stop_reason="max_tokens"
        )

        result = await gateway.answer([], "What are your data plans?")

        assert result.text == "Our plans start at" + TRUNCATED_MARKER

    @pytest.mark.asyncio
    async def test_truncated_empty_answer_is_backend_error(self, gateway, mock_client):
        mock_client.messages.create.return_value = _response(stop_reason="max_tokens")

        with pytest.raises(BackendError, match="empty"):
            await gateway.answer([], "Hi")

    @pytest.mark.asyncio
    async def test_refusal_is_backend_error(self, gateway, mock_client):
        mock_client.messages.create.return_value = _response(stop_reason="refusal")

        with pytest.raises(BackendError, match="safety"):
            await gateway.answer([], "Hi")

    @pytest.mark.asyncio
    async def test_empty_answer_is_backend_error(self, gateway, mock_client):
        mock_client.messages.create.return_value = _response(_text("   "))

        with pytest.raises(BackendError, match="empty"):
            await gateway.answer([], "Hi")

    @pytest.mark.asyncio
    async def test_api_error_is_backend_error(self, gateway, mock_client):
        request = httpx.Request("POST", "https://api.anthropic.com/v1/messages")
        mock_client.messages.create.side_effect = anthropic.APIConnectionError(request=request)

        with pytest.raises(BackendError) as exc_info:
            await gateway.answer([], "Hi")

        assert exc_info.value.message == "Connection error."

    @pytest.mark.asyncio
    async def test_unexpected_error_is_backend_error(self, gateway, mock_client):
        mock_client.messages.create.side_effect = Exception("API Error")

        with pytest.raises(BackendError, match="API Error"):
            await gateway.answer([], "Hi")


class TestAnalyze:
    """Tests for AnthropicGateway.analyze()."""

    @pytest.mark.asyncio
    async def test_parses_tool_input(self, gateway, mock_client):
        mock_client.messages.create.return_value = _response(
            SimpleNamespace(type="tool_use", name=ANALYSIS_TOOL_NAME, input=ANALYSIS_PAYLOAD),
            stop_reason="tool_use",
        )

        analysis = await gateway.analyze([Message.user("Hi")])

        assert analysis.sentiment == "neutral"
        assert analysis.sentiment_score == 55
        kwargs = mock_client.messages.create.call_args.kwargs
        assert kwargs["tool_choice"] == {"type": "tool", "name": ANALYSIS_TOOL_NAME}
        assert "Customer: Hi" in kwargs["messages"][0]["content"]

    @pytest.mark.asyncio
    async def test_malformed_payload(self, gateway, mock_client):
        mock_client.messages.create.return_value = _response(
            SimpleNamespace(
                type="tool_use",
                name=ANALYSIS_TOOL_NAME,
                input={**ANALYSIS_PAYLOAD, "sentiment_score": 400},
            ),
        )

        with pytest.raises(BackendError, match="malformed"):
            await gateway.analyze([])

    @pytest.mark.asyncio
    async def test_missing_tool_call(self, gateway, mock_client):
        mock_client.messages.create.return_value = _response(_text("I think it went fine"))

        with pytest.raises(BackendError, match="did not return"):
            await gateway.analyze([])


class TestBuildConversation:
    """Tests for transcript to Messages API conversion."""

    def test_drops_leading_greeting(self):
        conversation = build_conversation([Message.model("Welcome")], "Hi")
        assert conversation == [{"role": "user", "content": [{"type": "text", "text": "Hi"}]}]

    def test_maps_roles(self):
        history = [Message.model("Welcome"), Message.user("Q1"), Message.model("A1")]

        conversation = build_conversation(history, "Q2")

        assert [turn["role"] for turn in conversation] == ["user", "assistant", "user"]

    def test_skips_errors_and_merges_turns(self):
        history = [Message.user("Q1"), Message.error("**Knowledge Base Error**: down")]

        conversation = build_conversation(history, "Q1 again")

        assert conversation == [
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": "Q1"},
                    {"type": "text", "text": "Q1 again"},
                ],
            }
        ]

    def test_attachment_blocks(self):
        pdf = Attachment(name="bill.pdf", mime_type="application/pdf", data="JVBERi0=")
        image = Attachment(name="bill.png", mime_type="image/png", data="iVBORw0=")

        conversation = build_conversation([Message.user("old", image)], "new", pdf)

        blocks = conversation[0]["content"]
        assert blocks[0] == {
            "type": "image",
            "source": {"type": "base64", "media_type": "image/png", "data": "iVBORw0="},
        }
        assert blocks[2]["type"] == "document"
        assert blocks[2]["source"]["media_type"] == "application/pdf"
        assert blocks[3] == {"type": "text", "text": "new"}


class TestHelpers:
    """Tests for response and prompt helpers."""

    def test_extract_sources_ignores_non_url_citations(self):
        content = [
            _text("a", [SimpleNamespace(type="char_location", document_title="bill.pdf")]),
            _text("b", [_citation("https://slt.lk", None)]),
        ]
        assert extract_sources(content) == [Source(uri="https://slt.lk")]

    def test_render_transcript(self):
        history = [Message.user("Hi"), Message.error("down")]
        rendered = render_transcript(history)
        assert rendered == "Customer: Hi\n\nAssistant: down [delivery failed]"
