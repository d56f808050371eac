"""Pytest configuration and fixtures."""

import sys
from pathlib import Path
from unittest.mock import AsyncMock, Mock

import pytest

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

GREETING = "Welcome to the test knowledge base."

ANALYSIS_PAYLOAD = {
    "sentiment": "neutral",
    "sentiment_score": 55,
    "summary": "Customer asked about data plans.",
    "key_topics": ["data plans"],
    "customer_intent": "Compare prepaid data plans",
    "unresolved_issues": [],
    "admin_recommendations": ["Follow up with a plan brochure"],
    "criticality": "low",
}


@pytest.fixture
def tracker():
    """Create an in-memory tracker."""
    from support_desk.tracker import Tracker

    return Tracker()


@pytest.fixture
def sample_analysis():
    """A valid ConversationAnalysis."""
    from support_desk.models import ConversationAnalysis

    return ConversationAnalysis(**ANALYSIS_PAYLOAD)


@pytest.fixture
def mock_gateway(sample_analysis):
    """Create mock backend gateway."""
    from support_desk.gateway import AnswerResult

    gateway = Mock()
    gateway.answer = AsyncMock(return_value=AnswerResult(text="Test response"))
    gateway.analyze = AsyncMock(return_value=sample_analysis)
    return gateway


@pytest.fixture
def orchestrator(mock_gateway, tracker):
    """Create ConversationOrchestrator with a seeded greeting."""
    from support_desk.conversation import ConversationOrchestrator

    return ConversationOrchestrator(
        gateway=mock_gateway,
        tracker=tracker,
        greeting=GREETING,
    )


@pytest.fixture
def admin(mock_gateway, orchestrator, tracker):
    """Create AnalysisController reading the orchestrator's transcript."""
    from support_desk.admin import AnalysisController

    return AnalysisController(
        gateway=mock_gateway,
        transcript=orchestrator.transcript,
        tracker=tracker,
    )


@pytest.fixture
def pdf_bytes():
    """Minimal PDF-looking payload."""
    return b"%PDF-1.4\n1 0 obj\n<<>>\nendobj\n%%EOF\n"
