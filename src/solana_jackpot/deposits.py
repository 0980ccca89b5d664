from __future__ import annotations

import logging

from .config import Settings
from .errors import ErrorCode, require
from .ledger import Ledger
from .store import DepositRecord, Pot, RoundState

log = logging.getLogger(__name__)


def deposit(
    pot: Pot,
    ledger: Ledger,
    caller: str,
    amount: int,
    now: int,
    settings: Settings,
) -> DepositRecord:
    """
    Move `amount` from the caller into the pot and record it.

    The record is only appended once the transfer went through; repeat
    depositors get one entry per deposit.
    """
    require(pot.round_state is RoundState.ACTIVE, ErrorCode.GAME_INACTIVE)
    require(
        isinstance(amount, int) and amount >= settings.min_deposit,
        ErrorCode.MIN_DEPOSIT,
        f"{amount!r} < {settings.min_deposit}",
    )
    require(
        caller != pot.address,
        ErrorCode.INVALID_CALLER_ACCOUNT,
        "the pot cannot deposit into itself",
    )

    ledger.transfer(caller, pot.address, amount, signer=caller)

    record = DepositRecord(depositor=caller, amount=amount, timestamp=now)
    pot.deposits.append(record)
    pot.total_amount += amount
    log.info("Deposit of %d lamports accepted from %s", amount, caller)
    return record
