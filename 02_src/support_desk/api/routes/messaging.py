"""Messaging API routes."""

from fastapi import APIRouter, HTTPException

from ...app import IApplication
from ...config import QUICK_ACTIONS
from ..schemas import (
    AttachmentInfo,
    AttachmentRequest,
    ChatStateResponse,
    FeedbackRequest,
    InputRequest,
    MessageResponse,
    SendRequest,
    SendResponse,
)


def _state(app: IApplication) -> dict:
    orchestrator = app.orchestrator
    return {
        "is_loading": orchestrator.is_loading,
        "input_text": orchestrator.input_text,
        "pending_attachment": AttachmentInfo.from_attachment(orchestrator.pending_attachment),
    }


def create_messaging_router(app: IApplication) -> APIRouter:
    """Create messaging router."""
    router = APIRouter(prefix="/api", tags=["messaging"])

    @router.get("/messages", response_model=list[MessageResponse])
    async def get_messages() -> list[MessageResponse]:
        """Get the transcript in display order."""
        return [
            MessageResponse.from_message(m) for m in app.orchestrator.transcript.snapshot()
        ]

    @router.post("/messages", response_model=SendResponse)
    async def send_message(request: SendRequest) -> dict:
        """Send a message; ignored when empty or while another send is in flight."""
        try:
            appended = await app.orchestrator.send(request.text)
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

        if appended is None:
            return {"accepted": False, "messages": []}
        return {
            "accepted": True,
            "messages": [MessageResponse.from_message(m) for m in appended],
        }

    @router.post("/messages/{message_id}/feedback", response_model=MessageResponse)
    async def record_feedback(message_id: str, request: FeedbackRequest) -> MessageResponse:
        """Tag a message with positive/negative feedback."""
        updated = app.orchestrator.record_feedback(message_id, request.value)
        if updated is None:
            raise HTTPException(status_code=404, detail="Message not found")
        return MessageResponse.from_message(updated)

    @router.get("/state", response_model=ChatStateResponse)
    async def get_state() -> dict:
        """Get loading flag, input buffer and pending attachment."""
        return _state(app)

    @router.put("/input", response_model=ChatStateResponse)
    async def set_input(request: InputRequest) -> dict:
        """Update the input buffer."""
        app.orchestrator.set_input(request.text)
        return _state(app)

    @router.put("/attachment", response_model=ChatStateResponse)
    async def select_attachment(request: AttachmentRequest) -> dict:
        """Select a file, replacing any pending one."""
        attachment = app.orchestrator.select_data_url(request.name, request.data_url)
        if attachment is None:
            raise HTTPException(status_code=422, detail=f"Could not read file {request.name!r}")
        return _state(app)

    @router.delete("/attachment", response_model=ChatStateResponse)
    async def clear_attachment() -> dict:
        """Drop the pending attachment."""
        app.orchestrator.clear_attachment()
        return _state(app)

    @router.get("/quick-actions")
    async def get_quick_actions() -> list[dict]:
        """Get canned queries for the quick-link bar."""
        return QUICK_ACTIONS

    return router
