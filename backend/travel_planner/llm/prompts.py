import json
from datetime import date
from typing import Optional

from travel_planner.models.domain import BudgetLevel, PlanRequest

PLANNER_SYSTEM_PROMPT = (
    "You are an expert travel planner who knows destinations worldwide, their "
    "seasons, local events and hidden gems. You always answer with a single valid "
    "JSON object and no prose, no Markdown."
)

BUDGET_GUIDANCE = {
    BudgetLevel.budget: (
        "Keep costs low: free attractions, street food and casual eateries, "
        "public transport. Prices in the low range."
    ),
    BudgetLevel.moderate: (
        "Balance cost and comfort: a mix of paid attractions and free sights, "
        "mid-range restaurants. Prices in the middle range."
    ),
    BudgetLevel.luxury: (
        "Premium experiences: private tours, fine dining, exclusive venues. "
        "Prices reflect high-end options."
    ),
}

_ACTIVITY = {
    "time": "9:00 AM",
    "name": "Activity name",
    "description": "One or two sentences",
    "duration": "2 hours",
    "cost": "$20",
    "location": "Neighbourhood or address",
    "tips": "Short practical tip",
}

_RESTAURANT = {
    "name": "Restaurant name",
    "cuisine": "Cuisine",
    "priceRange": "$$",
    "time": "Lunch",
    "reservation": "Recommended",
    "description": "One sentence",
}


def _response_schema(flexible: bool) -> dict:
    schema = {
        "displayName": "Correctly spelled, canonical place name",
        "countryCode": "ISO 3166-1 alpha-2 code, e.g. PT",
    }
    if flexible:
        schema["suggestedStartDate"] = "YYYY-MM-DD"
        schema["suggestedEndDate"] = "YYYY-MM-DD"
    schema.update(
        {
            "days": [
                {
                    "dayNumber": 1,
                    "date": "YYYY-MM-DD",
                    "theme": "Short theme for the day",
                    "activities": [_ACTIVITY],
                    "restaurants": [_RESTAURANT],
                    "hiddenGems": ["Lesser-known spot"],
                    "tip": "Tip for the day",
                    "estimatedDailyCost": "$150",
                }
            ],
            "highlights": ["Highlight 1", "Highlight 2"],
            "localTips": ["Local tip"],
            "totalEstimatedCost": "$1,000",
        }
    )
    return schema


def build_prompt(request: PlanRequest, earliest_start: Optional[date] = None) -> str:
    """
    Build the user prompt for a validated request. Pure: the same request and
    earliest_start always produce the same text.
    """
    days = request.day_count
    lines = [
        f"Create a detailed {days}-day travel itinerary.",
        f"Destination: {request.destination}",
        f"Budget level: {request.budget.label}",
        f"Number of days: {days}",
    ]

    if request.is_flexible_dates:
        lines += [
            "Dates: flexible.",
            "Choose the optimal start date for this destination considering "
            "weather and seasonality, local events and festivals, and crowd levels.",
            f"The trip lasts exactly {days} days.",
            "Return suggestedStartDate and suggestedEndDate in YYYY-MM-DD format "
            f"and exactly {days} entries in days, one per consecutive date.",
        ]
        if earliest_start:
            lines.append(f"The trip must not start before {earliest_start.isoformat()}.")
    else:
        start = request.start_date.isoformat()
        lines += [
            f"Start date: {start}",
            f"End date: {request.end_date.isoformat()}",
            f"Day 1 is {start}; each following day is the next calendar date.",
        ]

    if request.special_requests:
        lines.append(f"Special requests: {request.special_requests}")

    lines += [
        "",
        "Requirements:",
        "- 2 to 4 activities per day.",
        "- 2 to 3 restaurants per day.",
        "- Keep every description concise.",
        "- At most 2 highlights for the whole trip.",
        f"- {BUDGET_GUIDANCE[request.budget]}",
        "",
        "Respond with a single JSON object using exactly this structure:",
        json.dumps(_response_schema(request.is_flexible_dates), indent=2),
    ]
    return "\n".join(lines)
