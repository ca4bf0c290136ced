"""pm_market REST endpoints.

POST /markets                              — create a market (admin)
GET  /markets                              — list, optional status filter
GET  /markets/exposure/me                  — caller's cross-market net units
GET  /markets/{market_id}                  — config, reserve and settlement snapshot
GET  /markets/{market_id}/holders/{side}   — holder index for one side
GET  /markets/{market_id}/position         — caller's unit balances
GET  /markets/{market_id}/telemetry        — registry trade aggregates
POST /markets/{market_id}/buy|sell|swap    — trading
POST /markets/{market_id}/reward           — collect winnings after resolution
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status

from src.pm_common.enums import MarketStatus, Side
from src.pm_common.response import ApiResponse, success_response
from src.pm_gateway.auth.dependencies import get_current_user, require_admin
from src.pm_market.application.schemas import CreateMarketRequest, SwapRequest, TradeRequest
from src.pm_market.application.service import MarketApplicationService

router = APIRouter(prefix="/markets", tags=["markets"])

_service = MarketApplicationService()


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_market(
    body: CreateMarketRequest,
    request: Request,
    admin: Annotated[str, Depends(require_admin)],
) -> ApiResponse:
    result = await _service.create_market(body)
    return success_response(result.model_dump(mode="json"), request)


@router.get("")
async def list_markets(
    request: Request,
    current_user: Annotated[str, Depends(get_current_user)],
    status_filter: MarketStatus | None = Query(None, alias="status"),
) -> ApiResponse:
    result = _service.list_markets(status_filter)
    return success_response(result.model_dump(mode="json"), request)


@router.get("/exposure/me")
async def get_my_exposure(
    request: Request,
    current_user: Annotated[str, Depends(get_current_user)],
) -> ApiResponse:
    result = _service.get_exposure(current_user)
    return success_response(result.model_dump(mode="json"), request)


@router.get("/{market_id}")
async def get_market(
    market_id: str,
    request: Request,
    current_user: Annotated[str, Depends(get_current_user)],
) -> ApiResponse:
    result = _service.get_market(market_id)
    return success_response(result.model_dump(mode="json"), request)


@router.get("/{market_id}/holders/{side}")
async def get_holders(
    market_id: str,
    side: Side,
    request: Request,
    current_user: Annotated[str, Depends(get_current_user)],
) -> ApiResponse:
    result = _service.get_holders(market_id, side)
    return success_response(result.model_dump(mode="json"), request)


@router.get("/{market_id}/position")
async def get_position(
    market_id: str,
    request: Request,
    current_user: Annotated[str, Depends(get_current_user)],
) -> ApiResponse:
    result = _service.get_position(market_id, current_user)
    return success_response(result.model_dump(mode="json"), request)


@router.get("/{market_id}/telemetry")
async def get_telemetry(
    market_id: str,
    request: Request,
    current_user: Annotated[str, Depends(get_current_user)],
) -> ApiResponse:
    result = _service.get_telemetry(market_id)
    return success_response(result.model_dump(mode="json"), request)


@router.post("/{market_id}/buy")
async def buy(
    market_id: str,
    body: TradeRequest,
    request: Request,
    current_user: Annotated[str, Depends(get_current_user)],
) -> ApiResponse:
    result = await _service.buy(market_id, current_user, body.side, body.amount)
    return success_response(result.model_dump(mode="json"), request)


@router.post("/{market_id}/sell")
async def sell(
    market_id: str,
    body: TradeRequest,
    request: Request,
    current_user: Annotated[str, Depends(get_current_user)],
) -> ApiResponse:
    result = await _service.sell(market_id, current_user, body.side, body.amount)
    return success_response(result.model_dump(mode="json"), request)


@router.post("/{market_id}/swap")
async def swap(
    market_id: str,
    body: SwapRequest,
    request: Request,
    current_user: Annotated[str, Depends(get_current_user)],
) -> ApiResponse:
    result = await _service.swap(market_id, current_user, body.from_side, body.amount)
    return success_response(result.model_dump(mode="json"), request)


@router.post("/{market_id}/reward")
async def collect_reward(
    market_id: str,
    request: Request,
    current_user: Annotated[str, Depends(get_current_user)],
) -> ApiResponse:
    result = await _service.collect_reward(market_id, current_user)
    return success_response(result.model_dump(mode="json"), request)
