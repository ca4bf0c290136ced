"""pm_currency REST API — balance, approvals and the development faucet."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from config.settings import settings
from src.pm_common.errors import DevFeatureDisabledError
from src.pm_common.response import ApiResponse, success_response
from src.pm_currency.application.schemas import ApproveRequest, FaucetRequest
from src.pm_currency.application.service import CurrencyApplicationService
from src.pm_gateway.auth.dependencies import get_current_user
from src.pm_market.application.service import get_registry

router = APIRouter(prefix="/currency", tags=["currency"])

_service = CurrencyApplicationService()


@router.get("/balance")
async def get_balance(
    current_user: Annotated[str, Depends(get_current_user)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_balance(current_user)
    return success_response(data.model_dump(), request)


@router.post("/approve")
async def approve(
    body: ApproveRequest,
    current_user: Annotated[str, Depends(get_current_user)],
    request: Request,
) -> ApiResponse:
    if body.market_id is not None:
        spender = get_registry().get_ledger(body.market_id).config.escrow_account
    else:
        spender = str(body.spender)
    data = await _service.approve(current_user, spender, body.amount)
    return success_response(data.model_dump(), request)


@router.post("/faucet")
async def faucet(
    body: FaucetRequest,
    current_user: Annotated[str, Depends(get_current_user)],
    request: Request,
) -> ApiResponse:
    if not settings.DEBUG:
        raise DevFeatureDisabledError()
    data = await _service.faucet(current_user, body.amount)
    return success_response(data.model_dump(), request)
