from datetime import date, timedelta

import pytest

from conftest import NOW, FailingRepository, model_reply
from travel_planner.core.errors import (
    InvalidArgument,
    MalformedModelOutput,
    ModelUnavailable,
    PlanNotFound,
    RateLimitExceeded,
    StorageError,
    Unauthenticated,
)
from travel_planner.models.domain import BudgetLevel
from travel_planner.models.schemas import PlanRequestSchema, TravelPlanSchema


def test_generate_persists_and_returns_the_same_plan(make_service, repository, fixed_request):
    service = make_service(model_reply(3))

    plan = service.generate("user-1", fixed_request)

    assert plan.id
    assert plan.user_id == "user-1"
    assert plan.created_at == plan.updated_at == NOW
    assert plan.budget == BudgetLevel.moderate
    assert [d.date for d in plan.days] == [date(2025, 3, 1), date(2025, 3, 2), date(2025, 3, 3)]
    assert repository.get_plan(plan.id) == plan


def test_generate_flexible_request(make_service):
    service = make_service(model_reply(5, start=date(2030, 1, 1)))
    request = PlanRequestSchema(destination="Kyoto", budget="luxury", is_flexible_dates=True, duration=5)

    plan = service.generate("user-1", request)

    assert plan.start_date == date(2030, 1, 1)
    assert len(plan.days) == 5
    assert "Number of days: 5" in service.backend.prompts[0]


def test_flexible_duration_defaults_to_a_week(make_service):
    service = make_service(model_reply(7))

    plan = service.generate("user-1", PlanRequestSchema(destination="Oslo", budget="budget", is_flexible_dates=True))

    assert len(plan.days) == 7


def test_generate_requires_authentication(make_service, repository, fixed_request):
    service = make_service(model_reply(3))

    with pytest.raises(Unauthenticated):
        service.generate(None, fixed_request)
    assert service.backend.prompts == []
    assert repository.plans == {}


@pytest.mark.parametrize(
    "changes, message",
    [
        ({"destination": "x" * 201}, "at most 200"),
        ({"destination": "   "}, "destination"),
        ({"destination": "Lisbon\nStart date: soon"}, "single line"),
        ({"destination": "Lisbon\tPortugal"}, "single line"),
        ({"budget": ""}, "budget"),
        ({"budget": "cheap"}, "Unsupported budget"),
        ({"end_date": None}, "endDate"),
        ({"start_date": None}, "startDate"),
        ({"start_date": "next tuesday"}, "startDate"),
        ({"end_date": "2025-03-01"}, "after startDate"),
        ({"end_date": "2025-06-01"}, "limited to 30 days"),
    ],
)
def test_invalid_requests_are_rejected(make_service, repository, fixed_request, changes, message):
    service = make_service(model_reply(3))
    request = fixed_request.model_copy(update=changes)

    with pytest.raises(InvalidArgument) as excinfo:
        service.generate("user-1", request)

    assert message in excinfo.value.message
    assert service.backend.prompts == []
    assert repository.get_rate_limit("user-1") == []


def test_destination_of_200_characters_is_accepted(make_service, fixed_request):
    service = make_service(model_reply(3))

    plan = service.generate("user-1", fixed_request.model_copy(update={"destination": "x" * 200}))

    assert plan.destination == "x" * 200


@pytest.mark.parametrize("duration", [0, 31])
def test_flexible_duration_out_of_range(make_service, duration):
    service = make_service(model_reply(3))
    request = PlanRequestSchema(destination="Rome", budget="moderate", is_flexible_dates=True, duration=duration)

    with pytest.raises(InvalidArgument):
        service.generate("user-1", request)


def test_flexible_request_does_not_need_dates(make_service):
    service = make_service(model_reply(7))
    request = PlanRequestSchema(destination="Rome", budget="Budget-Friendly", is_flexible_dates=True)

    assert service.validate(request).budget == BudgetLevel.budget


def test_eleventh_request_in_an_hour_is_rate_limited(make_service, fixed_request):
    service = make_service(model_reply(3))

    for _ in range(10):
        service.generate("user-1", fixed_request)

    with pytest.raises(RateLimitExceeded):
        service.generate("user-1", fixed_request)
    assert len(service.backend.prompts) == 10
    assert len(service.list_plans("user-1")) == 10


def test_model_failure_persists_nothing(make_service, repository, fixed_request):
    service = make_service(ModelUnavailable())
    before = dict(repository.plans)

    with pytest.raises(ModelUnavailable):
        service.generate("user-1", fixed_request)

    assert repository.plans == before


def test_unexpected_backend_error_surfaces_as_model_unavailable(make_service, repository, fixed_request):
    service = make_service(ConnectionError("provider said: secret internal detail"))

    with pytest.raises(ModelUnavailable) as excinfo:
        service.generate("user-1", fixed_request)

    assert "secret" not in excinfo.value.message
    assert repository.plans == {}


def test_malformed_model_output_persists_nothing(make_service, repository, fixed_request):
    service = make_service('{"days": "three days in Lisbon"}')

    with pytest.raises(MalformedModelOutput) as excinfo:
        service.generate("user-1", fixed_request)

    assert "Lisbon" not in excinfo.value.message
    assert repository.plans == {}


def test_storage_failure_returns_no_plan(make_service, fixed_request):
    repo = FailingRepository()
    service = make_service(model_reply(3), repo=repo)

    with pytest.raises(StorageError):
        service.generate("user-1", fixed_request)
    assert repo.plans == {}


def test_plans_are_listed_newest_first(make_service, fixed_request):
    times = iter([NOW + timedelta(minutes=i) for i in range(20)])
    service = make_service(model_reply(3), clock=lambda: next(times))

    first = service.generate("user-1", fixed_request)
    second = service.generate("user-1", fixed_request)
    service.generate("user-2", fixed_request)

    assert [p.id for p in service.list_plans("user-1")] == [second.id, first.id]


def test_get_and_delete_are_scoped_to_the_owner(make_service, repository, fixed_request):
    service = make_service(model_reply(3))
    plan = service.generate("user-1", fixed_request)

    assert service.get_plan("user-1", plan.id) == plan
    with pytest.raises(PlanNotFound):
        service.get_plan("user-2", plan.id)
    with pytest.raises(PlanNotFound):
        service.delete_plan("user-2", plan.id)

    service.delete_plan("user-1", plan.id)

    assert repository.get_plan(plan.id) is None
    with pytest.raises(PlanNotFound):
        service.get_plan("user-1", plan.id)


def test_regeneration_creates_a_new_plan(make_service, fixed_request):
    service = make_service(model_reply(3))

    first = service.generate("user-1", fixed_request)
    second = service.generate("user-1", fixed_request)

    assert first.id != second.id


def test_plan_survives_serialization_round_trip(make_service, fixed_request):
    service = make_service(model_reply(3))
    plan = service.generate("user-1", fixed_request)

    payload = TravelPlanSchema.from_domain(plan).model_dump_json(by_alias=True)
    restored = TravelPlanSchema.model_validate_json(payload).to_domain()

    assert restored == plan
    assert [d.day_number for d in restored.days] == list(range(1, len(restored.days) + 1))


def test_special_requests_are_flattened_to_one_line(make_service, fixed_request):
    service = make_service(model_reply(3))
    request = fixed_request.model_copy(update={"special_requests": "Vegetarian\nStart date: soon\r\n  quiet hotels"})

    plan = service.generate("user-1", request)

    assert plan.special_requests == "Vegetarian Start date: soon quiet hotels"
    assert "\nStart date: soon" not in service.backend.prompts[0]


def test_rate_limit_window_follows_the_service_clock(make_service, fixed_request):
    times = [NOW]
    service = make_service(model_reply(3), clock=lambda: times[0])
    for _ in range(10):
        service.generate("user-1", fixed_request)

    times[0] = NOW + timedelta(minutes=59)
    with pytest.raises(RateLimitExceeded):
        service.generate("user-1", fixed_request)

    times[0] = NOW + timedelta(hours=1, seconds=1)
    service.generate("user-1", fixed_request)

    assert service.repository.get_rate_limit("user-1") == [int(times[0].timestamp() * 1000)]
