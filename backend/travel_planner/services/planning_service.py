import logging
import re
from dataclasses import replace
from datetime import date, datetime, timezone
from typing import Callable, List, Optional
from uuid import uuid4

from travel_planner.core.config import Settings
from travel_planner.core.errors import (
    InvalidArgument,
    MalformedModelOutput,
    PlanNotFound,
    PlanServiceError,
    StorageError,
    Unauthenticated,
)
from travel_planner.llm.client import LLMClient
from travel_planner.llm.normalizer import ItineraryNormalizer, parse_calendar_date
from travel_planner.llm.prompts import build_prompt
from travel_planner.models.domain import BudgetLevel, PlanRequest, TravelPlan
from travel_planner.models.schemas import PlanRequestSchema
from travel_planner.services.rate_limiter import RateLimiter
from travel_planner.storage.repository import InMemoryRepository

logger = logging.getLogger(__name__)

_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_plan_id() -> str:
    return str(uuid4())


class PlanningService:
    """
    Generates, stores and serves travel plans.

    generate() runs one sequential pipeline per call: authenticate, validate,
    rate-limit, prompt, model call, normalize, persist. Any failure aborts the
    remaining steps, and the plan is only returned once the store accepted it.
    """

    def __init__(
        self,
        repository: InMemoryRepository,
        llm_client: LLMClient,
        settings: Settings,
        rate_limiter: Optional[RateLimiter] = None,
        normalizer: Optional[ItineraryNormalizer] = None,
        clock: Callable[[], datetime] = _utcnow,
        id_factory: Callable[[], str] = _new_plan_id,
    ):
        self.repository = repository
        self.llm_client = llm_client
        self.settings = settings
        self.clock = clock
        self.id_factory = id_factory
        self.rate_limiter = rate_limiter or RateLimiter(
            repository,
            max_requests=settings.rate_limit_max_requests,
            window_ms=settings.rate_limit_window_ms,
            clock=lambda: int(self.clock().timestamp() * 1000),
        )
        self.normalizer = normalizer or ItineraryNormalizer(
            today=lambda: self.clock().date(),
            fallback_offset_days=settings.flexible_start_offset_days,
        )

    def validate(self, raw: PlanRequestSchema) -> PlanRequest:
        destination = (raw.destination or "").strip()
        if not destination:
            raise InvalidArgument("Missing required field: destination")
        if _CONTROL_CHARS.search(destination):
            raise InvalidArgument("destination must be a single line of text")
        if len(destination) > self.settings.max_destination_length:
            raise InvalidArgument(
                f"destination must be at most {self.settings.max_destination_length} characters"
            )

        if not (raw.budget or "").strip():
            raise InvalidArgument("Missing required field: budget")
        budget = BudgetLevel.parse(raw.budget)
        if budget is None:
            raise InvalidArgument(f"Unsupported budget level: {raw.budget}")

        special_requests = " ".join(_CONTROL_CHARS.sub(" ", raw.special_requests or "").split()) or None

        if raw.is_flexible_dates:
            duration = raw.duration if raw.duration is not None else self.settings.default_trip_duration
            if not 1 <= duration <= self.settings.max_trip_duration:
                raise InvalidArgument(
                    f"duration must be between 1 and {self.settings.max_trip_duration} days"
                )
            return PlanRequest(
                destination=destination,
                budget=budget,
                is_flexible_dates=True,
                duration=duration,
                special_requests=special_requests,
            )

        start_date = self._required_date(raw.start_date, "startDate")
        end_date = self._required_date(raw.end_date, "endDate")
        if end_date <= start_date:
            raise InvalidArgument("endDate must be after startDate")
        if (end_date - start_date).days > self.settings.max_trip_duration:
            raise InvalidArgument(f"Trips are limited to {self.settings.max_trip_duration} days")
        return PlanRequest(
            destination=destination,
            budget=budget,
            start_date=start_date,
            end_date=end_date,
            is_flexible_dates=False,
            duration=(end_date - start_date).days,
            special_requests=special_requests,
        )

    @staticmethod
    def _required_date(value: Optional[str], name: str) -> date:
        if not value:
            raise InvalidArgument(f"Missing required field: {name}")
        parsed = parse_calendar_date(value)
        if parsed is None:
            raise InvalidArgument(f"{name} must be an ISO-8601 date")
        return parsed

    def generate(self, user_id: Optional[str], raw_request: PlanRequestSchema) -> TravelPlan:
        if not user_id:
            raise Unauthenticated()
        request = self.validate(raw_request)

        try:
            self.rate_limiter.check_and_record(user_id)
        except PlanServiceError:
            raise
        except Exception as exc:  # noqa: BLE001
            logger.error("Rate limit check failed user=%s: %s", user_id, exc)
            raise StorageError() from exc

        logger.info("Generating travel plan user=%s destination=%s", user_id, request.destination)
        prompt = build_prompt(request, earliest_start=self.clock().date())

        try:
            reply = self.llm_client.complete(prompt)
        except PlanServiceError:
            logger.error(
                "Model call failed user=%s destination=%s step=model", user_id, request.destination
            )
            raise

        try:
            plan = self.normalizer.normalize(reply, request)
        except MalformedModelOutput:
            logger.error(
                "Model output could not be normalized user=%s destination=%s step=normalize",
                user_id,
                request.destination,
            )
            logger.debug("Rejected model output: %s", reply)
            raise

        now = self.clock()
        plan = replace(plan, id=self.id_factory(), user_id=user_id, created_at=now, updated_at=now)

        try:
            self.repository.save_plan(plan)
        except Exception as exc:  # noqa: BLE001
            logger.error(
                "Saving plan failed user=%s destination=%s step=persist: %s",
                user_id,
                request.destination,
                exc,
            )
            raise StorageError() from exc

        logger.info("Travel plan created plan=%s user=%s days=%d", plan.id, user_id, len(plan.days))
        return plan

    def list_plans(self, user_id: Optional[str]) -> List[TravelPlan]:
        if not user_id:
            raise Unauthenticated()
        plans = self.repository.list_plans_for_user(user_id)
        return sorted(plans, key=lambda p: p.created_at, reverse=True)

    def get_plan(self, user_id: Optional[str], plan_id: str) -> TravelPlan:
        if not user_id:
            raise Unauthenticated()
        plan = self.repository.get_plan(plan_id)
        if plan is None or plan.user_id != user_id:
            raise PlanNotFound()
        return plan

    def delete_plan(self, user_id: Optional[str], plan_id: str) -> None:
        self.get_plan(user_id, plan_id)
        try:
            self.repository.delete_plan(plan_id)
        except Exception as exc:  # noqa: BLE001
            logger.error("Deleting plan failed plan=%s user=%s: %s", plan_id, user_id, exc)
            raise StorageError("Failed to delete travel plan, please retry") from exc
        logger.info("Travel plan deleted plan=%s user=%s", plan_id, user_id)
