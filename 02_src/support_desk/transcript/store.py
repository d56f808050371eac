"""TranscriptStore implementation."""

from dataclasses import replace

from ..models import Feedback, Message


class TranscriptStore:
    """Ordered, append-only log of Messages.

    The only mutation besides ``append`` is ``set_feedback``, which swaps the
    addressed entry for a copy carrying the new value. Order is display order.
    """

    def __init__(self, messages: list[Message] | None = None):
        self._messages: list[Message] = []
        self._index: dict[str, int] = {}
        for message in messages or []:
            self.append(message)

    def append(self, message: Message) -> None:
        """Add a message to the end of the transcript."""
        if self._messages and message.timestamp < self._messages[-1].timestamp:
            # Wall clock stepped back; keep timestamps non-decreasing
            message = replace(message, timestamp=self._messages[-1].timestamp)
        self._index[message.id] = len(self._messages)
        self._messages.append(message)

    def set_feedback(self, message_id: str, value: Feedback | None) -> Message | None:
        """Set feedback on the message with ``message_id``; no-op when unknown."""
        position = self._index.get(message_id)
        if position is None:
            return None

        updated = replace(self._messages[position], feedback=value)
        self._messages[position] = updated
        return updated

    def get(self, message_id: str) -> Message | None:
        position = self._index.get(message_id)
        return None if position is None else self._messages[position]

    def last(self) -> Message | None:
        return self._messages[-1] if self._messages else None

    def snapshot(self) -> list[Message]:
        """Get all messages in order, detached from later changes."""
        return self._messages.copy()

    def __len__(self) -> int:
        return len(self._messages)
