"""Admin analysis API routes."""

from fastapi import APIRouter, HTTPException

from ...app import IApplication
from ..schemas import AnalysisViewResponse


def create_admin_router(app: IApplication) -> APIRouter:
    """Create admin router."""
    router = APIRouter(prefix="/api/admin", tags=["admin"])

    @router.post("/analysis", response_model=AnalysisViewResponse)
    async def request_analysis() -> AnalysisViewResponse:
        """Analyze the conversation; returns the current view if one is already running."""
        try:
            view = await app.admin.request_analysis()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        return AnalysisViewResponse.from_view(view)

    @router.get("/analysis", response_model=AnalysisViewResponse)
    async def get_analysis() -> AnalysisViewResponse:
        """Get the display surface state."""
        return AnalysisViewResponse.from_view(app.admin.view)

    @router.delete("/analysis", response_model=AnalysisViewResponse)
    async def close_analysis() -> AnalysisViewResponse:
        """Close the display surface."""
        app.admin.close()
        return AnalysisViewResponse.from_view(app.admin.view)

    return router
