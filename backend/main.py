from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from travel_planner.api import routes_health, routes_plan
from travel_planner.core.config import Settings, settings as default_settings
from travel_planner.core.errors import InvalidArgument, PlanServiceError
from travel_planner.core.logging import configure_logging
from travel_planner.llm.client import LLMClient, create_llm_client
from travel_planner.models.schemas import ErrorDetail, ErrorResponse
from travel_planner.services.planning_service import PlanningService
from travel_planner.storage.repository import InMemoryRepository, create_repository


def _error_response(exc: PlanServiceError) -> JSONResponse:
    body = ErrorResponse(error=ErrorDetail(code=exc.code, message=exc.message))
    return JSONResponse(status_code=exc.status_code, content=body.model_dump())


def create_app(
    settings: Optional[Settings] = None,
    repository: Optional[InMemoryRepository] = None,
    llm_client: Optional[LLMClient] = None,
) -> FastAPI:
    settings = settings or default_settings
    configure_logging(settings.log_level)
    app = FastAPI(title=settings.app_name, version="0.1.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    repository = repository or create_repository(settings)
    llm_client = llm_client or create_llm_client(settings)

    app.include_router(routes_health.router, tags=["health"])
    app.include_router(routes_plan.router, prefix="/plan", tags=["planning"])

    @app.exception_handler(PlanServiceError)
    async def plan_service_error_handler(request: Request, exc: PlanServiceError):
        return _error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def request_validation_error_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        field = ".".join(str(p) for p in errors[0]["loc"][1:]) if errors else "request"
        return _error_response(InvalidArgument(f"Invalid value for field: {field or 'body'}"))

    # Collaborators live on app state for the route dependencies
    app.state.settings = settings
    app.state.repository = repository
    app.state.planning_service = PlanningService(
        repository=repository, llm_client=llm_client, settings=settings
    )
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
