"""
Liveness route.
"""

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

router = APIRouter(tags=["health"])


@router.get(
    "/healthcheck",
    response_class=PlainTextResponse,
    responses={200: {"description": "Healthcheck route"}},
)
async def healthcheck() -> str:
    """General healthcheck route, returns "ok"."""
    return "ok"
