from typing import Optional

from fastapi import APIRouter, Depends

from travel_planner.api import get_current_user_id, get_planning_service
from travel_planner.models.schemas import (
    DeleteResponse,
    PlanListResponse,
    PlanRequestSchema,
    PlanResponse,
    TravelPlanSchema,
)
from travel_planner.services.planning_service import PlanningService

router = APIRouter()


@router.post("", response_model=PlanResponse)
def create_plan(
    request: PlanRequestSchema,
    user_id: Optional[str] = Depends(get_current_user_id),
    service: PlanningService = Depends(get_planning_service),
) -> PlanResponse:
    plan = service.generate(user_id=user_id, raw_request=request)
    return PlanResponse(success=True, plan=TravelPlanSchema.from_domain(plan))


@router.get("", response_model=PlanListResponse)
def list_plans(
    user_id: Optional[str] = Depends(get_current_user_id),
    service: PlanningService = Depends(get_planning_service),
) -> PlanListResponse:
    plans = service.list_plans(user_id=user_id)
    return PlanListResponse(plans=[TravelPlanSchema.from_domain(p) for p in plans])


@router.get("/{plan_id}", response_model=TravelPlanSchema)
def get_plan(
    plan_id: str,
    user_id: Optional[str] = Depends(get_current_user_id),
    service: PlanningService = Depends(get_planning_service),
) -> TravelPlanSchema:
    return TravelPlanSchema.from_domain(service.get_plan(user_id=user_id, plan_id=plan_id))


@router.delete("/{plan_id}", response_model=DeleteResponse)
def delete_plan(
    plan_id: str,
    user_id: Optional[str] = Depends(get_current_user_id),
    service: PlanningService = Depends(get_planning_service),
) -> DeleteResponse:
    service.delete_plan(user_id=user_id, plan_id=plan_id)
    return DeleteResponse()
