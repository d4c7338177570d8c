import json
import logging
import re
from datetime import date, timedelta
from typing import Callable, Dict, List, Optional

from travel_planner.llm.normalizer import parse_calendar_date

logger = logging.getLogger(__name__)

CATALOG: Dict[str, dict] = {
    "lisbon": {
        "displayName": "Lisbon",
        "countryCode": "PT",
        "activities": [
            ("9:00 AM", "Alfama walking tour", "Explore historic Lisbon on foot.", "$25"),
            ("2:00 PM", "Tram 28 ride", "Ride the classic yellow tram through the hills.", "$4"),
            ("6:00 PM", "LX Factory evening", "Food and art markets by the river.", "Free"),
        ],
        "restaurants": [
            ("Time Out Market", "Lunch", "Portuguese"),
            ("Taberna da Rua das Flores", "Dinner", "Petiscos"),
        ],
        "highlights": ["Sunset at Miradouro da Senhora do Monte", "Pastel de nata in Belém"],
        "localTips": ["Wear shoes with grip, the cobblestones are slippery"],
    },
    "bali": {
        "displayName": "Bali",
        "countryCode": "ID",
        "activities": [
            ("6:00 AM", "Rice terrace sunrise", "Guided sunrise hike to Tegallalang.", "$30"),
            ("11:00 AM", "Cooking class", "Learn Balinese cuisine with locals.", "$35"),
            ("4:00 PM", "Uluwatu temple", "Cliff-top temple and Kecak dance.", "$10"),
        ],
        "restaurants": [
            ("Warung Babi Guling", "Lunch", "Balinese"),
            ("Locavore", "Dinner", "Modern Indonesian"),
        ],
        "highlights": ["Tegallalang rice terraces", "Kecak dance at Uluwatu"],
        "localTips": ["Carry small notes for temple donations"],
    },
}


def _field(prompt: str, name: str) -> Optional[str]:
    match = re.search(rf"^{name}: (.+)$", prompt, re.MULTILINE)
    return match.group(1).strip() if match else None


class MockBackend:
    """
    Deterministic stand-in for a language model. It reads the destination, day
    count and dates back out of the prompt and assembles a schema-conformant
    itinerary from a small catalog, so the API runs end to end without a model.
    """

    def __init__(self, today: Callable[[], date] = date.today):
        self.today = today

    def complete(self, prompt: str) -> str:
        destination = _field(prompt, "Destination") or "Lisbon"
        days = int(_field(prompt, "Number of days") or 3)
        fixed_start = parse_calendar_date(_field(prompt, "Start date"))
        start = fixed_start or self.today() + timedelta(days=30)
        data = CATALOG.get(destination.lower()) or self._generic(destination)

        reply = {
            "displayName": data["displayName"],
            "countryCode": data["countryCode"],
            "days": [self._day(data, i, start) for i in range(days)],
            "highlights": data["highlights"],
            "localTips": data["localTips"],
            "totalEstimatedCost": f"${days * 150}",
        }
        if fixed_start is None:
            reply["suggestedStartDate"] = start.isoformat()
            reply["suggestedEndDate"] = (start + timedelta(days=days - 1)).isoformat()
        logger.info("Mock model produced %d days for %s", days, destination)
        return json.dumps(reply)

    @staticmethod
    def _day(data: dict, index: int, start: date) -> dict:
        activities: List[dict] = []
        for offset in range(2):
            time, name, description, cost = data["activities"][(index + offset) % len(data["activities"])]
            activities.append(
                {"time": time, "name": name, "description": description, "duration": "2 hours", "cost": cost}
            )
        return {
            "dayNumber": index + 1,
            "date": (start + timedelta(days=index)).isoformat(),
            "theme": f"Day {index + 1} exploration",
            "activities": activities,
            "restaurants": [
                {"name": name, "time": time, "cuisine": cuisine}
                for name, time, cuisine in data["restaurants"]
            ],
            "hiddenGems": [f"Quiet viewpoint near {activities[0]['name']}"],
            "tip": "Start early to avoid the crowds",
            "estimatedDailyCost": "$150",
        }

    @staticmethod
    def _generic(destination: str) -> dict:
        return {
            "displayName": destination,
            "countryCode": None,
            "activities": [
                ("9:00 AM", f"{destination} city walk", f"Explore notable spots in {destination}.", "Free"),
                ("2:00 PM", f"{destination} museum visit", "See the main local collection.", "$15"),
            ],
            "restaurants": [("Local market", "Lunch", "Local"), ("Neighbourhood bistro", "Dinner", "Local")],
            "highlights": [f"Old town of {destination}"],
            "localTips": ["Learn a few basic phrases", "Carry some cash"],
        }
