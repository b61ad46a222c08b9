"""Statistics endpoint router."""

from fastapi import APIRouter, Depends

from baton_server.dependencies import get_coordinator
from baton_server.models.stats import StatsResponse
from baton_server.services import Coordinator

router = APIRouter(prefix="/api/v1", tags=["stats"])


@router.get("/stats", response_model=StatsResponse)
async def get_stats(
    coordinator: Coordinator = Depends(get_coordinator),
) -> StatsResponse:
    """Counts of sessions, agents by reachability and workflows by status."""
    return StatsResponse(**coordinator.stats())
