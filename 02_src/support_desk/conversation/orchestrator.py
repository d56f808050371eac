"""ConversationOrchestrator implementation."""

from pathlib import Path

from ..attachments import AttachmentReadError, encode_attachment, encode_data_url, encode_file
from ..config import greeting_text
from ..gateway import BackendError, IBackendGateway
from ..logging_config import get_logger
from ..models import Attachment, Feedback, Message
from ..tracker import ITracker
from ..transcript import TranscriptStore

logger = get_logger(__name__)

ERROR_TEMPLATE = "**Knowledge Base Error**: {message}"
ERROR_FALLBACK = "Could not retrieve info."
DOCUMENT_PROMPT = "Analyze this document: {name}"


class ConversationOrchestrator:
    """
    Owns the send/receive cycle for one chat session.

    Cycle: Idle -> Sending -> Idle. Everything up to the gateway call runs
    without yielding, so a second ``send`` issued while the first awaits the
    backend sees the in-flight flag and is ignored.
    """

    def __init__(
        self,
        gateway: IBackendGateway,
        tracker: ITracker,
        transcript: TranscriptStore | None = None,
        greeting: str | None = None,
    ):
        self._gateway = gateway
        self._tracker = tracker
        if transcript is None:
            transcript = TranscriptStore([Message.model(greeting or greeting_text())])
        self._transcript = transcript

        self._input_text = ""
        self._pending_attachment: Attachment | None = None
        self._in_flight = False

    @property
    def transcript(self) -> TranscriptStore:
        return self._transcript

    @property
    def is_loading(self) -> bool:
        """True while a cycle awaits the backend."""
        return self._in_flight

    @property
    def input_text(self) -> str:
        return self._input_text

    @property
    def pending_attachment(self) -> Attachment | None:
        return self._pending_attachment

    def set_input(self, text: str) -> None:
        """Update the input buffer."""
        self._input_text = text

    # Attachment selection

    def select_attachment(self, name: str, mime_type: str, data: bytes) -> Attachment | None:
        """Encode raw bytes and make them the pending attachment."""
        return self._select(lambda: encode_attachment(name, mime_type, data), name)

    def select_data_url(self, name: str, data_url: str) -> Attachment | None:
        """Accept a browser-style data URL as the pending attachment."""
        return self._select(lambda: encode_data_url(name, data_url), name)

    def select_file(self, path: str | Path, mime_type: str | None = None) -> Attachment | None:
        """Read a file from disk as the pending attachment."""
        return self._select(lambda: encode_file(path, mime_type), Path(path).name)

    def clear_attachment(self) -> None:
        self._pending_attachment = None

    def _select(self, encode, name: str) -> Attachment | None:
        """Replace the pending attachment, or leave it untouched when encoding fails."""
        try:
            attachment = encode()
        except AttachmentReadError as e:
            logger.warning(f"Attachment rejected: {e.message}")
            self._tracker.track(
                event_type="attachment_rejected",
                actor="orchestrator",
                data={"name": name, "reason": e.message},
            )
            return None

        self._pending_attachment = attachment
        self._tracker.track(
            event_type="attachment_selected",
            actor="orchestrator",
            data={"name": attachment.name, "mime_type": attachment.mime_type},
        )
        return attachment

    # Send cycle

    async def send(self, text: str | None = None) -> list[Message] | None:
        """
        Run one send cycle.

        Args:
            text: Message text. Defaults to the input buffer.

        Returns:
            The user message and the model (or error) message appended by this
            cycle, or None when the send was ignored.
        """
        if text is None:
            text = self._input_text

        attachment = self._pending_attachment
        if self._in_flight or (not text.strip() and attachment is None):
            logger.debug("Send ignored (in flight or nothing to send)")
            return None

        # Transition to Sending before the first await
        history = self._transcript.snapshot()
        if not text.strip():
            text = DOCUMENT_PROMPT.format(name=attachment.name)
        user_message = Message.user(text, attachment=attachment)
        self._transcript.append(user_message)
        self._pending_attachment = None
        self._input_text = ""
        self._in_flight = True

        logger.info(f"Message received: {text[:100]}")
        self._tracker.track(
            event_type="message_received",
            actor="orchestrator",
            data={
                "message_id": user_message.id,
                "message_text": text,
                "attachment": attachment.name if attachment else None,
            },
        )

        try:
            try:
                result = await self._gateway.answer(history, user_message.text, attachment)
            except BackendError as e:
                logger.error(f"Knowledge base request failed: {e.message}", exc_info=True)
                reply = self._failure_reply(user_message, e.message)
            except Exception as e:
                logger.exception(f"Unexpected gateway failure: {e}")
                reply = self._failure_reply(user_message, str(e))
            else:
                reply = Message.model(result.text, result.sources)
                self._tracker.track(
                    event_type="message_responded",
                    actor="orchestrator",
                    data={
                        "message_id": reply.id,
                        "response_text": result.text,
                        "source_count": len(result.sources),
                    },
                )
            self._transcript.append(reply)
        finally:
            self._in_flight = False

        return [user_message, reply]

    def _failure_reply(self, user_message: Message, error: str) -> Message:
        self._tracker.track(
            event_type="message_failed",
            actor="orchestrator",
            data={"message_id": user_message.id, "error": error},
        )
        return Message.error(ERROR_TEMPLATE.format(message=error or ERROR_FALLBACK))

    def record_feedback(self, message_id: str, value: Feedback | None) -> Message | None:
        """Tag a message with feedback. Allowed at any time, including mid-cycle."""
        updated = self._transcript.set_feedback(message_id, value)
        if updated is None:
            logger.warning(f"Feedback for unknown message {message_id}")
            return None

        logger.info(f"Feedback for {message_id}: {value}")
        self._tracker.track(
            event_type="feedback_recorded",
            actor="orchestrator",
            data={"message_id": message_id, "feedback": value},
        )
        return updated
