"""
Turn the model's loosely structured JSON reply into a strict TravelPlan.

The model is asked for a fixed schema but routinely returns numbers where
strings are expected, drops optional keys, invents extra days or leaves
instructional text where a date should be. Everything here is tolerant of
that, except where a plan invariant cannot be established, in which case
MalformedModelOutput is raised and nothing is persisted.
"""
import json
import logging
import re
from datetime import date, datetime, timedelta
from typing import Any, Callable, List, Optional, Tuple

from travel_planner.core.errors import MalformedModelOutput
from travel_planner.models.domain import (
    Activity,
    DayItinerary,
    PlanRequest,
    Restaurant,
    TravelPlan,
)

logger = logging.getLogger(__name__)

MAX_HIGHLIGHTS = 2
FALLBACK_TRIP_SPAN_DAYS = 6

_ISO_DATE = re.compile(r"^(\d{4}-\d{2}-\d{2})(?:[T ][0-9:.]+(?:Z|[+-]\d{2}:?\d{2})?)?$")
_CODE_FENCE = re.compile(r"^```[a-zA-Z]*\s*|\s*```$")


def parse_calendar_date(value: Any) -> Optional[date]:
    """
    Parse YYYY-MM-DD, or an ISO-8601 timestamp whose calendar date is taken.
    Anything else (placeholders like "YYYY-MM-DD", "to be determined", impossible
    dates) yields None.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    match = _ISO_DATE.match(value.strip())
    if not match:
        return None
    try:
        return date.fromisoformat(match.group(1))
    except ValueError:
        return None


def resolve_trip_dates(
    reply: dict,
    days: List[dict],
    request: PlanRequest,
    today: date,
    offset_days: int = 30,
) -> Tuple[date, date]:
    """
    Pick the start of a flexible trip: suggestedStartDate, then suggestedEndDate,
    then the first or last per-day date, then today + offset_days. The end is
    always start + (days - 1), so the range agrees with the itinerary.
    """
    if not request.is_flexible_dates:
        return request.start_date, request.end_date

    span = timedelta(days=len(days) - 1 if days else FALLBACK_TRIP_SPAN_DAYS)
    suggested_start = parse_calendar_date(reply.get("suggestedStartDate"))
    suggested_end = parse_calendar_date(reply.get("suggestedEndDate"))
    first = parse_calendar_date(days[0].get("date")) if days else None
    last = parse_calendar_date(days[-1].get("date")) if days else None

    if suggested_start:
        start = suggested_start
    elif suggested_end:
        start = suggested_end - span
    elif first:
        start = first
    elif last:
        start = last - span
    else:
        logger.info("No usable dates in model reply, starting %d days from %s", offset_days, today)
        start = today + timedelta(days=offset_days)

    end = start + span
    reported_end = suggested_end if suggested_start or suggested_end else last
    if reported_end and reported_end != end:
        logger.warning("Model reported trip end %s, using %s to match %d days", reported_end, end, len(days))
    return start, end


def _text(value: Any) -> Optional[str]:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        return value.strip() or None
    return None


def _text_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    items = [_text(item) for item in value]
    return [item for item in items if item]


def _load_reply(raw_json: str) -> dict:
    content = (raw_json or "").strip()
    if content.startswith("```"):
        content = _CODE_FENCE.sub("", content).strip()
    try:
        data = json.loads(content)
    except (TypeError, json.JSONDecodeError) as exc:
        raise MalformedModelOutput() from exc
    if not isinstance(data, dict):
        raise MalformedModelOutput()
    return data


def _reply_days(reply: dict, expected: int) -> List[dict]:
    days = reply.get("days")
    if days is None:
        days = []
    if not isinstance(days, list):
        logger.error("Model reply 'days' is %s, not a list", type(days).__name__)
        raise MalformedModelOutput()
    if not all(isinstance(day, dict) for day in days):
        logger.error("Model reply contains a day that is not an object")
        raise MalformedModelOutput()
    if len(days) < expected:
        logger.error("Model reply has %d days, expected %d", len(days), expected)
        raise MalformedModelOutput()
    if len(days) > expected:
        logger.warning("Model reply has %d days, keeping the first %d", len(days), expected)
    return days[:expected]


def _activity(data: Any) -> Optional[Activity]:
    if not isinstance(data, dict):
        return None
    time, name, description = (_text(data.get(k)) for k in ("time", "name", "description"))
    if not (time and name and description):
        return None
    return Activity(
        time=time,
        name=name,
        description=description,
        duration=_text(data.get("duration")),
        cost=_text(data.get("cost")),
        location=_text(data.get("location")),
        tips=_text(data.get("tips")),
    )


def _restaurant(data: Any) -> Optional[Restaurant]:
    if not isinstance(data, dict):
        return None
    name, time = _text(data.get("name")), _text(data.get("time"))
    if not (name and time):
        return None
    return Restaurant(
        name=name,
        time=time,
        cuisine=_text(data.get("cuisine")),
        price_range=_text(data.get("priceRange")),
        reservation=_text(data.get("reservation")),
        description=_text(data.get("description")),
    )


def _day(data: dict, index: int, start: date) -> DayItinerary:
    day_number = index + 1
    reported = data.get("dayNumber")
    if isinstance(reported, int) and not isinstance(reported, bool) and reported != day_number:
        logger.debug("Renumbering model day %s as %d", reported, day_number)

    raw_activities = data.get("activities") if isinstance(data.get("activities"), list) else []
    raw_restaurants = data.get("restaurants") if isinstance(data.get("restaurants"), list) else []
    activities = [a for a in (_activity(item) for item in raw_activities) if a]
    restaurants = [r for r in (_restaurant(item) for item in raw_restaurants) if r]
    dropped = len(raw_activities) - len(activities) + len(raw_restaurants) - len(restaurants)
    if dropped:
        logger.warning("Dropped %d incomplete entries from day %d", dropped, day_number)

    return DayItinerary(
        day_number=day_number,
        date=start + timedelta(days=index),
        theme=_text(data.get("theme")),
        activities=activities,
        restaurants=restaurants,
        hidden_gems=_text_list(data.get("hiddenGems")),
        tip=_text(data.get("tip")),
        estimated_daily_cost=_text(data.get("estimatedDailyCost")),
    )


class ItineraryNormalizer:
    def __init__(
        self,
        today: Callable[[], date] = date.today,
        fallback_offset_days: int = 30,
    ):
        self.today = today
        self.fallback_offset_days = fallback_offset_days

    def normalize(self, raw_json: str, request: PlanRequest) -> TravelPlan:
        reply = _load_reply(raw_json)
        days = _reply_days(reply, request.day_count)
        start, end = resolve_trip_dates(
            reply, days, request, today=self.today(), offset_days=self.fallback_offset_days
        )

        country_code = _text(reply.get("countryCode"))
        return TravelPlan(
            destination=request.destination,
            display_name=_text(reply.get("displayName")) or request.destination,
            country_code=country_code.upper() if country_code else None,
            start_date=start,
            end_date=end,
            budget=request.budget,
            special_requests=request.special_requests,
            days=[_day(data, i, start) for i, data in enumerate(days)],
            total_estimated_cost=_text(reply.get("totalEstimatedCost")),
            highlights=_text_list(reply.get("highlights"))[:MAX_HIGHLIGHTS],
            local_tips=_text_list(reply.get("localTips")),
        )
