from __future__ import annotations

import logging

from .config import Settings
from .errors import ErrorCode, require
from .ledger import Ledger
from .store import Pot, RoundState

log = logging.getLogger(__name__)


def admin_withdraw(pot: Pot, ledger: Ledger, caller: str, settings: Settings) -> int:
    """
    Sweep everything above the reserve floor to the fee address.

    Deposits and total are cleared whether or not anything moved. The draw
    outcome (randomness, winner, closer) is left in place: a pot drained
    during Cooldown is then closed out by `distribute_rewards`, which sees an
    empty ledger and resets without paying anyone.
    """
    require(caller == pot.authority, ErrorCode.UNAUTHORIZED, caller)
    require(
        pot.round_state is not RoundState.ACTIVE,
        ErrorCode.CANNOT_WITHDRAW_DURING_ACTIVE,
    )

    floor = settings.reserve_floor
    balance = ledger.balance(pot.address)
    withdrawn = 0
    if balance > floor:
        withdrawn = balance - floor
        ledger.transfer(pot.address, settings.fee_address, withdrawn, signer=pot.address)

    pot.deposits.clear()
    pot.total_amount = 0
    log.info("Admin withdrew %d lamports to %s (floor %d kept)", withdrawn, settings.fee_address, floor)
    return withdrawn
