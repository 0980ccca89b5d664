from __future__ import annotations

from enum import Enum


class ErrorCode(Enum):
    """Validation failures reported by pot operations, numbered from 6000."""

    GAME_INACTIVE = (6000, "Game is not active")
    MIN_DEPOSIT = (6001, "Deposit is below the minimum")
    INVALID_STATE = (6002, "Operation not allowed in the current round state")
    COOLDOWN_ACTIVE = (6003, "Timing precondition not met")
    NO_DEPOSITS = (6004, "No deposits in this round")
    RANDOMNESS_NOT_AVAILABLE = (6005, "Randomness not available")
    INVALID_WINNER_ACCOUNT = (6006, "Winner account does not match")
    INVALID_CALLER_ACCOUNT = (6007, "Round closer account does not match")
    INVALID_BUYBACK_ACCOUNT = (6008, "Buyback account does not match")
    INVALID_FEE_ACCOUNT = (6009, "Fee account does not match")
    POT_NOT_EMPTY = (6010, "Pot still holds deposits")
    CANNOT_WITHDRAW_DURING_ACTIVE = (6011, "Cannot withdraw during an active round")
    INSUFFICIENT_FUNDS_FOR_RENT = (6012, "Pot cannot cover its reserve floor")
    UNAUTHORIZED = (6013, "Caller is not the pot authority")
    ALREADY_INITIALIZED = (6014, "Pot already exists")
    NOT_INITIALIZED = (6015, "Pot does not exist")

    def __init__(self, number: int, message: str) -> None:
        self.number = number
        self.message = message


class JackpotError(RuntimeError):
    def __init__(self, code: ErrorCode, detail: str = "") -> None:
        self.code = code
        self.detail = detail
        text = f"{code.name} ({code.number}): {code.message}"
        if detail:
            text = f"{text}: {detail}"
        super().__init__(text)


def require(condition: bool, code: ErrorCode, detail: str = "") -> None:
    if not condition:
        raise JackpotError(code, detail)
