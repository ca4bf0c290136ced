"""Auth API router.

Tokens are normally minted by the identity provider that shares JWT_SECRET.
POST /auth/token issues one for any subject and exists only when DEBUG is on.
"""

from fastapi import APIRouter, Request
from pydantic import BaseModel, Field

from config.settings import settings
from src.pm_common.errors import DevFeatureDisabledError
from src.pm_common.response import ApiResponse, success_response
from src.pm_gateway.auth.jwt_handler import create_access_token

router = APIRouter(prefix="/auth", tags=["auth"])


class DevTokenRequest(BaseModel):
    participant: str = Field(..., min_length=1, max_length=64, pattern=r"^[A-Za-z0-9_.\-]+$")


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int


@router.post("/token", response_model=ApiResponse, summary="Development token")
async def issue_dev_token(request: Request, body: DevTokenRequest) -> ApiResponse:
    if not settings.DEBUG:
        raise DevFeatureDisabledError()
    data = TokenResponse(
        access_token=create_access_token(body.participant),
        expires_in=settings.JWT_EXPIRE_MINUTES * 60,
    )
    return success_response(data.model_dump(), request)
