"""AnalysisController implementation."""

from dataclasses import dataclass
from typing import Callable

from ..gateway import BackendError, IBackendGateway
from ..logging_config import get_logger
from ..models import ConversationAnalysis
from ..tracker import ITracker
from ..transcript import TranscriptStore

logger = get_logger(__name__)

ANALYSIS_ERROR_FALLBACK = "Analysis failed."


@dataclass(frozen=True)
class AnalysisView:
    """What the display surface renders."""

    is_open: bool = False
    is_loading: bool = False
    analysis: ConversationAnalysis | None = None
    error: str | None = None


ViewListener = Callable[[AnalysisView], None]


class AnalysisController:
    """
    Admin conversation analysis, independent of the send cycle.

    States: Idle -> Analyzing -> Idle. Reads the transcript, never writes it.
    On failure the last successful analysis stays available next to the error.
    Closing the surface does not cancel a running request; its late result
    is dropped.
    """

    def __init__(
        self,
        gateway: IBackendGateway,
        transcript: TranscriptStore,
        tracker: ITracker,
    ):
        self._gateway = gateway
        self._transcript = transcript
        self._tracker = tracker

        self._analyzing = False
        self._is_open = False
        self._analysis: ConversationAnalysis | None = None
        self._error: str | None = None
        self._listeners: list[ViewListener] = []

    @property
    def is_analyzing(self) -> bool:
        return self._analyzing

    @property
    def view(self) -> AnalysisView:
        return AnalysisView(
            is_open=self._is_open,
            is_loading=self._analyzing and self._is_open,
            analysis=self._analysis,
            error=self._error,
        )

    def subscribe(self, listener: ViewListener) -> None:
        """Register a display surface; it receives every view change."""
        self._listeners.append(listener)

    def bind(self, transcript: TranscriptStore) -> None:
        """Point the controller at a new session's transcript."""
        self._transcript = transcript
        self._is_open = False
        self._analysis = None
        self._error = None
        self._publish()

    def close(self) -> None:
        """Hide the display surface. A running request keeps going."""
        if not self._is_open:
            return
        self._is_open = False
        self._publish()

    async def request_analysis(self) -> AnalysisView:
        """Analyze the current transcript; ignored while a request is running."""
        if self._analyzing:
            logger.debug("Analysis already in progress")
            return self.view

        self._analyzing = True
        self._is_open = True
        self._error = None
        self._publish()

        history = self._transcript.snapshot()
        self._tracker.track(
            event_type="analysis_requested",
            actor="admin",
            data={"message_count": len(history)},
        )

        try:
            analysis = await self._gateway.analyze(history)
        except BackendError as e:
            self._fail(e.message)
        except Exception as e:
            logger.exception(f"Unexpected analysis failure: {e}")
            self._fail(str(e))
        else:
            if self._is_open:
                self._analysis = analysis
                logger.info(f"Analysis completed: {analysis.sentiment}, {analysis.criticality}")
                self._tracker.track(
                    event_type="analysis_completed",
                    actor="admin",
                    data={
                        "sentiment": analysis.sentiment,
                        "sentiment_score": analysis.sentiment_score,
                        "criticality": analysis.criticality,
                    },
                )
            else:
                logger.info("Analysis arrived after close, discarded")
                self._tracker.track(event_type="analysis_discarded", actor="admin", data={})
        finally:
            self._analyzing = False

        if self._is_open:
            self._publish()
        return self.view

    def _fail(self, message: str) -> None:
        logger.error(f"Analysis failed: {message}")
        self._tracker.track(event_type="analysis_failed", actor="admin", data={"error": message})
        if self._is_open:
            self._error = message or ANALYSIS_ERROR_FALLBACK

    def _publish(self) -> None:
        view = self.view
        for listener in self._listeners:
            try:
                listener(view)
            except Exception as e:
                logger.error(f"Error in analysis listener: {e}", exc_info=True)
