"""SIM implementation - scripted customer driving the HTTP API."""

import asyncio
import random

import httpx

from support_desk.logging_config import get_logger
from support_desk.tracker import ITracker

logger = get_logger(__name__)

# Follow-ups sent after the quick actions, to exercise multi-turn history
FOLLOW_UPS = [
    "Which of those is best for working from home?",
    "Thanks, that helps!",
]


class Sim:
    """Customer that walks the quick actions, rates answers and asks for an analysis."""

    def __init__(
        self,
        api_url: str = "http://localhost:8000",
        tracker: ITracker | None = None,
        delay_range: tuple[float, float] = (1.0, 3.0),
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._api_url = api_url
        self._tracker = tracker
        self._delay_range = delay_range
        self._transport = transport
        self._running = False
        self._task: asyncio.Task | None = None
        self._client: httpx.AsyncClient | None = None

    def set_tracker(self, tracker: ITracker) -> None:
        """Inject tracker for SIM trace events."""
        self._tracker = tracker

    @property
    def running(self) -> bool:
        return self._running

    async def start(self) -> None:
        """Start the scenario in the background."""
        if self._running:
            return

        self._running = True
        self._client = httpx.AsyncClient(
            base_url=self._api_url, transport=self._transport, timeout=60.0
        )
        self._task = asyncio.create_task(self._run_scenario())

    async def stop(self) -> None:
        """Stop the scenario."""
        self._running = False

        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        if self._client:
            await self._client.aclose()
            self._client = None

    async def wait(self) -> None:
        """Wait for the scenario to finish on its own."""
        if self._task:
            await self._task

    async def _run_scenario(self) -> None:
        """Send every quick action plus follow-ups, then request an analysis."""
        sent = 0
        try:
            response = await self._client.get("/api/quick-actions")
            response.raise_for_status()
            queries = [action["query"] for action in response.json()] + FOLLOW_UPS

            self._track("sim_started", {"message_count": len(queries)})

            for text in queries:
                if not self._running:
                    break
                if await self._send_message(text):
                    sent += 1
                await self._pause()

            if self._running:
                await self._request_analysis()

        except asyncio.CancelledError:
            pass
        except Exception as e:
            logger.error("SIM scenario error: %s", e)
        finally:
            self._running = False
            self._track("sim_completed", {"sent": sent})

    async def _send_message(self, text: str) -> bool:
        """Send one message and rate the answer."""
        try:
            response = await self._client.post("/api/messages", json={"text": text})
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error("SIM: Failed to send message: %s", e)
            return False

        data = response.json()
        if not data.get("accepted"):
            logger.info("SIM: message ignored: %s", text)
            return False

        reply = data["messages"][-1]
        logger.info("SIM: %s -> %s", text, reply["text"][:100])

        value = "negative" if reply["is_error"] else "positive"
        try:
            feedback = await self._client.post(
                f"/api/messages/{reply['id']}/feedback", json={"value": value}
            )
            feedback.raise_for_status()
        except httpx.HTTPError as e:
            logger.error("SIM: Failed to record feedback: %s", e)
        return True

    async def _request_analysis(self) -> None:
        try:
            response = await self._client.post("/api/admin/analysis")
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error("SIM: Analysis request failed: %s", e)
            return

        analysis = response.json().get("analysis") or {}
        logger.info(
            "SIM: analysis sentiment=%s criticality=%s",
            analysis.get("sentiment", "N/A"),
            analysis.get("criticality", "N/A"),
        )

    async def _pause(self) -> None:
        low, high = self._delay_range
        if high > 0:
            await asyncio.sleep(random.uniform(low, high))

    def _track(self, event_type: str, data: dict) -> None:
        if self._tracker:
            self._tracker.track(event_type, "sim", data)
