# src/pm_admin/api/router.py
"""Admin REST API — registry-admin only."""
from typing import Annotated

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from src.pm_admin.application.service import AdminService
from src.pm_common.enums import Side
from src.pm_common.response import ApiResponse, success_response
from src.pm_gateway.auth.dependencies import require_admin

router = APIRouter(prefix="/admin", tags=["admin"])
_service = AdminService()


class ResolveRequest(BaseModel):
    outcome: Side


@router.post("/markets/{market_id}/resolve")
async def resolve_market(
    market_id: str,
    body: ResolveRequest,
    request: Request,
    admin: Annotated[str, Depends(require_admin)],
) -> ApiResponse:
    result = await _service.resolve_market(market_id, body.outcome)
    return success_response(result, request)


@router.get("/invariants")
async def verify_invariants(
    request: Request,
    admin: Annotated[str, Depends(require_admin)],
) -> ApiResponse:
    return success_response(_service.verify_all_invariants(), request)
