from fastapi import APIRouter
from starlette.requests import Request

router = APIRouter()


@router.get("/health")
def healthcheck(request: Request) -> dict:
    return {"status": "ok", "environment": request.app.state.settings.environment}
