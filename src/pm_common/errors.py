"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Auth / caller identity
  2xxx: Reference currency (allowance, transfers)
  3xxx: Market / clock
  4xxx: Trading
  5xxx: Settlement / rewards
  9xxx: System
"""


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- 1xxx: Auth ---

class InvalidCredentialsError(AppError):
    def __init__(self) -> None:
        super().__init__(1003, "Invalid or expired credentials", 401)


class UnauthorizedError(AppError):
    def __init__(self, caller: str) -> None:
        super().__init__(1006, f"Caller is not authorized: {caller}", 403)


class AdminRequiredError(AppError):
    def __init__(self) -> None:
        super().__init__(1007, "Registry admin account required", 403)


class DevFeatureDisabledError(AppError):
    def __init__(self) -> None:
        super().__init__(1008, "Development endpoints are disabled", 403)


# --- 2xxx: Currency ---

class InsufficientAllowanceError(AppError):
    def __init__(self, required: int, allowed: int) -> None:
        super().__init__(
            2001,
            f"Insufficient allowance: required {required}, approved {allowed}",
            422,
        )


class TransferFailedError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(2002, f"Currency transfer failed: {detail}", 422)


class RefundFailedError(AppError):
    def __init__(self, participant: str, amount: int) -> None:
        super().__init__(
            2003,
            f"Refund of {amount} to {participant} failed; amount held in escrow",
            500,
        )


# --- 3xxx: Market ---

class MarketNotFoundError(AppError):
    def __init__(self, market_id: str) -> None:
        super().__init__(3001, f"Market not found: {market_id}", 404)


class MarketClosedError(AppError):
    def __init__(self, market_id: str) -> None:
        super().__init__(3002, f"Market is closed for trading: {market_id}", 422)


class MarketStillOpenError(AppError):
    def __init__(self, market_id: str) -> None:
        super().__init__(3003, f"Market is still open: {market_id}", 422)


class InvalidMarketConfigError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(3004, f"Invalid market configuration: {detail}", 422)


# --- 4xxx: Trading ---

class InvalidAmountError(AppError):
    def __init__(self, amount: object) -> None:
        super().__init__(4001, f"Amount must be a positive integer, got {amount!r}", 422)


class InsufficientBalanceError(AppError):
    def __init__(self, side: str, required: int, available: int) -> None:
        super().__init__(
            4002,
            f"Insufficient {side} units: required {required}, available {available}",
            422,
        )


# --- 5xxx: Settlement / rewards ---

class AlreadyResolvedError(AppError):
    def __init__(self, market_id: str) -> None:
        super().__init__(5001, f"Market already resolved: {market_id}", 409)


class RewardsNotAvailableError(AppError):
    def __init__(self, market_id: str) -> None:
        super().__init__(5002, f"Rewards not available before resolution: {market_id}", 422)


class AlreadyCollectedError(AppError):
    def __init__(self, participant: str) -> None:
        super().__init__(5003, f"Reward already collected by {participant}", 409)


class NotAWinnerError(AppError):
    def __init__(self, participant: str) -> None:
        super().__init__(5004, f"No winning-side units held by {participant}", 422)


class OutcomeNotAvailableError(AppError):
    def __init__(self, market_id: str) -> None:
        super().__init__(5005, f"Oracle has no outcome for market {market_id}", 422)


# --- 9xxx: System ---

class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)


class ReserveInvariantError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(9003, f"Reserve invariant violated: {detail}", 500)
