from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from travel_planner.models.domain import (
    Activity,
    BudgetLevel,
    DayItinerary,
    Restaurant,
    TravelPlan,
)


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PlanRequestSchema(CamelModel):
    """
    Raw plan request as sent by the client. Everything is optional here so the
    service can report missing fields with its own messages.
    """

    destination: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    budget: Optional[str] = None
    special_requests: Optional[str] = None
    is_flexible_dates: bool = False
    duration: Optional[int] = None


class ActivitySchema(CamelModel):
    time: str
    name: str
    description: str
    duration: Optional[str] = None
    cost: Optional[str] = None
    location: Optional[str] = None
    tips: Optional[str] = None

    @classmethod
    def from_domain(cls, obj: Activity) -> "ActivitySchema":
        return cls(
            time=obj.time,
            name=obj.name,
            description=obj.description,
            duration=obj.duration,
            cost=obj.cost,
            location=obj.location,
            tips=obj.tips,
        )

    def to_domain(self) -> Activity:
        return Activity(**self.model_dump())


class RestaurantSchema(CamelModel):
    name: str
    time: str
    cuisine: Optional[str] = None
    price_range: Optional[str] = None
    reservation: Optional[str] = None
    description: Optional[str] = None

    @classmethod
    def from_domain(cls, obj: Restaurant) -> "RestaurantSchema":
        return cls(
            name=obj.name,
            time=obj.time,
            cuisine=obj.cuisine,
            price_range=obj.price_range,
            reservation=obj.reservation,
            description=obj.description,
        )

    def to_domain(self) -> Restaurant:
        return Restaurant(**self.model_dump())


class DayItinerarySchema(CamelModel):
    day_number: int
    date: date
    theme: Optional[str] = None
    activities: List[ActivitySchema]
    restaurants: List[RestaurantSchema]
    hidden_gems: List[str]
    tip: Optional[str] = None
    estimated_daily_cost: Optional[str] = None

    @classmethod
    def from_domain(cls, obj: DayItinerary) -> "DayItinerarySchema":
        return cls(
            day_number=obj.day_number,
            date=obj.date,
            theme=obj.theme,
            activities=[ActivitySchema.from_domain(a) for a in obj.activities],
            restaurants=[RestaurantSchema.from_domain(r) for r in obj.restaurants],
            hidden_gems=list(obj.hidden_gems),
            tip=obj.tip,
            estimated_daily_cost=obj.estimated_daily_cost,
        )

    def to_domain(self) -> DayItinerary:
        return DayItinerary(
            day_number=self.day_number,
            date=self.date,
            theme=self.theme,
            activities=[a.to_domain() for a in self.activities],
            restaurants=[r.to_domain() for r in self.restaurants],
            hidden_gems=list(self.hidden_gems),
            tip=self.tip,
            estimated_daily_cost=self.estimated_daily_cost,
        )


class TravelPlanSchema(CamelModel):
    id: str
    user_id: str
    destination: str
    display_name: str
    country_code: Optional[str] = None
    start_date: date
    end_date: date
    budget: BudgetLevel
    special_requests: Optional[str] = None
    days: List[DayItinerarySchema]
    total_estimated_cost: Optional[str] = None
    highlights: List[str]
    local_tips: List[str]
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_domain(cls, obj: TravelPlan) -> "TravelPlanSchema":
        return cls(
            id=obj.id,
            user_id=obj.user_id,
            destination=obj.destination,
            display_name=obj.display_name,
            country_code=obj.country_code,
            start_date=obj.start_date,
            end_date=obj.end_date,
            budget=obj.budget,
            special_requests=obj.special_requests,
            days=[DayItinerarySchema.from_domain(d) for d in obj.days],
            total_estimated_cost=obj.total_estimated_cost,
            highlights=list(obj.highlights),
            local_tips=list(obj.local_tips),
            created_at=obj.created_at,
            updated_at=obj.updated_at,
        )

    def to_domain(self) -> TravelPlan:
        return TravelPlan(
            id=self.id,
            user_id=self.user_id,
            destination=self.destination,
            display_name=self.display_name,
            country_code=self.country_code,
            start_date=self.start_date,
            end_date=self.end_date,
            budget=self.budget,
            special_requests=self.special_requests,
            days=[d.to_domain() for d in self.days],
            total_estimated_cost=self.total_estimated_cost,
            highlights=list(self.highlights),
            local_tips=list(self.local_tips),
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    def to_document(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class PlanResponse(CamelModel):
    success: bool = True
    plan: TravelPlanSchema


class PlanListResponse(CamelModel):
    plans: List[TravelPlanSchema]


class DeleteResponse(CamelModel):
    success: bool = True


class ErrorDetail(BaseModel):
    code: str
    message: str


class ErrorResponse(BaseModel):
    success: bool = False
    error: ErrorDetail
