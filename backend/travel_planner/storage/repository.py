from __future__ import annotations

import copy
import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import ValidationError

from travel_planner.core.config import Settings
from travel_planner.core.errors import StorageError
from travel_planner.models.domain import TravelPlan
from travel_planner.models.schemas import TravelPlanSchema

logger = logging.getLogger(__name__)


class InMemoryRepository:
    """
    Document store for travel plans and per-user rate-limit records.

    Plans are kept as camelCase documents, the same shape a remote document
    store would hold, so reads always go through schema validation. Each write
    replaces the whole collection under a lock and is committed before it
    becomes visible.
    """

    def __init__(self) -> None:
        self.plans: Dict[str, dict] = {}
        self.rate_limits: Dict[str, dict] = {}
        self._lock = threading.Lock()

    def _commit(self, plans: Dict[str, dict], rate_limits: Dict[str, dict]) -> None:
        """Hook for durable backends; raising here leaves the store unchanged."""

    def save_plan(self, plan: TravelPlan) -> TravelPlan:
        document = TravelPlanSchema.from_domain(plan).to_document()
        with self._lock:
            plans = {**self.plans, plan.id: document}
            self._commit(plans, self.rate_limits)
            self.plans = plans
        return plan

    def get_plan(self, plan_id: str) -> Optional[TravelPlan]:
        document = self.plans.get(plan_id)
        if document is None:
            return None
        try:
            return self._parse(document)
        except ValidationError as exc:
            logger.error("Stored plan %s is unreadable: %s", plan_id, exc)
            raise StorageError("Failed to read travel plan") from exc

    def list_plans_for_user(self, user_id: str) -> List[TravelPlan]:
        plans: List[TravelPlan] = []
        for document in self.plans.values():
            if document.get("userId") != user_id:
                continue
            try:
                plans.append(self._parse(document))
            except ValidationError as exc:
                logger.warning("Skipping unreadable plan %s: %s", document.get("id"), exc)
        return plans

    def delete_plan(self, plan_id: str) -> bool:
        with self._lock:
            if plan_id not in self.plans:
                return False
            plans = {k: v for k, v in self.plans.items() if k != plan_id}
            self._commit(plans, self.rate_limits)
            self.plans = plans
        return True

    def get_rate_limit(self, user_id: str) -> List[int]:
        record = self.rate_limits.get(user_id) or {}
        return list(record.get("requests", []))

    def save_rate_limit(self, user_id: str, timestamps: List[int]) -> None:
        with self._lock:
            rate_limits = {**self.rate_limits, user_id: {"requests": list(timestamps)}}
            self._commit(self.plans, rate_limits)
            self.rate_limits = rate_limits

    @staticmethod
    def _parse(document: dict) -> TravelPlan:
        return TravelPlanSchema.model_validate(copy.deepcopy(document)).to_domain()


class JsonFileRepository(InMemoryRepository):
    """Keeps the documents in one JSON file, rewritten atomically on every change."""

    def __init__(self, path: str | Path) -> None:
        super().__init__()
        self.path = Path(path)
        if self.path.exists():
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
            self.plans = data.get("travelPlans", {})
            self.rate_limits = data.get("rateLimits", {})
            logger.info("Loaded %d plans from %s", len(self.plans), self.path)

    def _commit(self, plans: Dict[str, dict], rate_limits: Dict[str, dict]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump({"travelPlans": plans, "rateLimits": rate_limits}, f, indent=2)
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise


def create_repository(settings: Settings) -> InMemoryRepository:
    backend = settings.storage_backend.lower()
    if backend == "memory":
        return InMemoryRepository()
    if backend == "file":
        return JsonFileRepository(settings.storage_path)
    raise ValueError(f"Unknown storage backend: {settings.storage_backend}")
