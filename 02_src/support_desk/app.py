"""Application bootstrap and lifecycle management."""

from typing import Protocol

from .admin import AnalysisController
from .conversation import ConversationOrchestrator
from .gateway import AnthropicGateway, IBackendGateway
from .logging_config import get_logger
from .tracker import ITracker, Tracker

logger = get_logger(__name__)


class IApplication(Protocol):
    """Bootstrap and lifecycle."""

    async def start(self) -> None:
        """Initialize components in dependency order."""
        ...

    async def stop(self) -> None:
        """Shutdown in reverse order."""
        ...

    async def reset(self) -> None:
        """Start a fresh chat session."""
        ...

    @property
    def orchestrator(self) -> ConversationOrchestrator: ...

    @property
    def admin(self) -> AnalysisController: ...

    @property
    def tracker(self) -> ITracker: ...


class Application:
    """Owns the application state shared by the API layer."""

    def __init__(
        self,
        gateway: IBackendGateway | None = None,
        greeting: str | None = None,
    ):
        self._gateway = gateway
        self._greeting = greeting

        # Components (will be initialized in start())
        self._tracker: Tracker | None = None
        self._orchestrator: ConversationOrchestrator | None = None
        self._admin: AnalysisController | None = None

    async def start(self) -> None:
        """Initialize components in dependency order."""
        logger.info("Starting application")

        # 1. Tracker (no dependencies)
        self._tracker = Tracker()

        # 2. Gateway (no internal dependencies)
        if self._gateway is None:
            self._gateway = AnthropicGateway()
        logger.info("Backend gateway initialized")

        # 3. Orchestrator (depends on Gateway, Tracker; creates the transcript)
        self._orchestrator = ConversationOrchestrator(
            gateway=self._gateway,
            tracker=self._tracker,
            greeting=self._greeting,
        )

        # 4. Admin controller (reads the orchestrator's transcript)
        self._admin = AnalysisController(
            gateway=self._gateway,
            transcript=self._orchestrator.transcript,
            tracker=self._tracker,
        )
        logger.info("All components initialized successfully")

    async def stop(self) -> None:
        """Shutdown in reverse order."""
        if self._admin:
            self._admin.close()
        self._admin = None
        self._orchestrator = None
        logger.info("Application stopped")

    async def reset(self) -> None:
        """Replace the session with a fresh one holding only the greeting."""
        if not self._orchestrator or not self._admin:
            raise RuntimeError("Application not started")

        self._orchestrator = ConversationOrchestrator(
            gateway=self._gateway,
            tracker=self._tracker,
            greeting=self._greeting,
        )
        self._admin.bind(self._orchestrator.transcript)
        self._tracker.clear()
        logger.info("Reset complete")

    @property
    def orchestrator(self) -> ConversationOrchestrator:
        """Get orchestrator instance."""
        if not self._orchestrator:
            raise RuntimeError("Application not started")
        return self._orchestrator

    @property
    def admin(self) -> AnalysisController:
        """Get admin analysis controller."""
        if not self._admin:
            raise RuntimeError("Application not started")
        return self._admin

    @property
    def tracker(self) -> Tracker:
        """Get tracker instance."""
        if not self._tracker:
            raise RuntimeError("Application not started")
        return self._tracker
