from __future__ import annotations

from .project_constants import MAX_BETTING_NUMBER, MIN_BETTING_NUMBER, TIER_COUNT


class SettlementError(RuntimeError):
    """Base class for every rejected engine call. The call left no state behind."""

    reason = "Settlement failed"

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail
        message = self.reason if detail is None else f"{self.reason} ({detail})"
        super().__init__(message)


class InvalidLotteryNumber(SettlementError):
    reason = "Invalid lottery number is provided"


class InvalidResultLength(SettlementError):
    reason = "Invalid length of drawing results array"


class NumberOutOfRange(SettlementError):
    reason = f"Number must be between {MIN_BETTING_NUMBER} and {MAX_BETTING_NUMBER}"

    def __init__(self, position: int, value: int) -> None:
        self.position = position
        self.value = value
        super().__init__(f"tier position {position} has {value}")


class DeadlineNotReached(SettlementError):
    reason = "Cannot finish result drawing before a deadline"


class InsufficientFunds(SettlementError):
    reason = "Insufficient fund to be withdrawed"


class InsufficientSystemFunds(SettlementError):
    reason = "Sorry, system is having insufficient fund. Please contact admin"


class InvalidScheduleLength(SettlementError):
    reason = f"Prize schedule must have exactly {TIER_COUNT} multipliers"


class InvalidSchedule(SettlementError):
    reason = "Prize multipliers must be positive integers"


class InvalidStateTransition(SettlementError):
    reason = "Result drawing already finished for this cycle"


class InvalidLotteryState(SettlementError):
    reason = "Operation is not allowed in the current lottery state"


class InvalidAmount(SettlementError):
    reason = "Amount must be a positive integer"


class InvalidIdentity(SettlementError):
    reason = "Identity must be a base58 encoded 32-byte address"


class Unauthorized(SettlementError):
    reason = "Only the administrator can do this"
