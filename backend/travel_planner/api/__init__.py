from typing import Optional

from fastapi import Header, HTTPException
from starlette.requests import Request

from travel_planner.services.planning_service import PlanningService


def get_planning_service(request: Request) -> PlanningService:
    service = getattr(request.app.state, "planning_service", None)
    if service is None:
        raise HTTPException(status_code=500, detail="Planning service not initialized")
    return service


def get_current_user_id(x_user_id: Optional[str] = Header(None)) -> Optional[str]:
    """
    Caller uid as forwarded by the gateway that verified the identity token.
    Missing or blank means unauthenticated; the service decides what that rejects.
    """
    if x_user_id is None:
        return None
    return x_user_id.strip() or None
