from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import List, Optional


class BudgetLevel(str, Enum):
    budget = "budget"
    moderate = "moderate"
    luxury = "luxury"

    @property
    def label(self) -> str:
        return _BUDGET_LABELS[self]

    @classmethod
    def parse(cls, raw: Optional[str]) -> Optional["BudgetLevel"]:
        """Accept the enum value or the client label ("Budget-Friendly"), any case."""
        if raw is None:
            return None
        key = raw.strip().lower()
        for level in cls:
            if key in (level.value, level.label.lower()):
                return level
        return None


_BUDGET_LABELS = {
    BudgetLevel.budget: "Budget-Friendly",
    BudgetLevel.moderate: "Moderate",
    BudgetLevel.luxury: "Luxury",
}


@dataclass
class PlanRequest:
    """A plan request that passed validation."""

    destination: str
    budget: BudgetLevel
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    is_flexible_dates: bool = False
    duration: int = 7
    special_requests: Optional[str] = None

    @property
    def day_count(self) -> int:
        if self.is_flexible_dates:
            return self.duration
        return (self.end_date - self.start_date).days


@dataclass
class Activity:
    time: str
    name: str
    description: str
    duration: Optional[str] = None
    cost: Optional[str] = None
    location: Optional[str] = None
    tips: Optional[str] = None


@dataclass
class Restaurant:
    name: str
    time: str
    cuisine: Optional[str] = None
    price_range: Optional[str] = None
    reservation: Optional[str] = None
    description: Optional[str] = None


@dataclass
class DayItinerary:
    day_number: int
    date: date
    theme: Optional[str] = None
    activities: List[Activity] = field(default_factory=list)
    restaurants: List[Restaurant] = field(default_factory=list)
    hidden_gems: List[str] = field(default_factory=list)
    tip: Optional[str] = None
    estimated_daily_cost: Optional[str] = None


@dataclass
class TravelPlan:
    destination: str
    display_name: str
    country_code: Optional[str]
    start_date: date
    end_date: date
    budget: BudgetLevel
    days: List[DayItinerary]
    special_requests: Optional[str] = None
    total_estimated_cost: Optional[str] = None
    highlights: List[str] = field(default_factory=list)
    local_tips: List[str] = field(default_factory=list)
    # assigned by the service when the plan is persisted
    id: Optional[str] = None
    user_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
