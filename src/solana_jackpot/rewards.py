from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from .config import Settings
from .errors import ErrorCode, require
from .ledger import Ledger
from .project_constants import PERMILLE_DENOM
from .store import Pot, RoundState

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class RewardSplit:
    distributable: int
    winner: int
    buyback: int
    fee: int
    closer: int

    @property
    def paid(self) -> int:
        return self.winner + self.buyback + self.fee + self.closer

    @property
    def remainder(self) -> int:
        """Truncation dust left in the pot for the next round."""
        return self.distributable - self.paid


@dataclass(frozen=True)
class Recipients:
    winner: str
    buyback: str
    fee: str
    closer: str


def distributable_amount(total_amount: int, settings: Settings) -> int:
    floor = settings.reserve_floor
    require(
        total_amount >= floor,
        ErrorCode.INSUFFICIENT_FUNDS_FOR_RENT,
        f"total {total_amount} below reserve floor {floor}",
    )
    return total_amount - floor


def compute_split(distributable: int, settings: Settings) -> RewardSplit:
    return RewardSplit(
        distributable=distributable,
        winner=distributable * settings.winner_permille // PERMILLE_DENOM,
        buyback=distributable * settings.buyback_permille // PERMILLE_DENOM,
        fee=distributable * settings.fee_permille // PERMILLE_DENOM,
        closer=distributable * settings.closer_permille // PERMILLE_DENOM,
    )


def check_recipients(pot: Pot, recipients: Recipients, settings: Settings) -> None:
    require(
        recipients.winner == pot.selected_winner,
        ErrorCode.INVALID_WINNER_ACCOUNT,
        f"got {recipients.winner}, drawn {pot.selected_winner}",
    )
    require(
        recipients.closer == pot.round_closer,
        ErrorCode.INVALID_CALLER_ACCOUNT,
        f"got {recipients.closer}, closed by {pot.round_closer}",
    )
    require(
        recipients.buyback == settings.buyback_address,
        ErrorCode.INVALID_BUYBACK_ACCOUNT,
        recipients.buyback,
    )
    require(
        recipients.fee == settings.fee_address,
        ErrorCode.INVALID_FEE_ACCOUNT,
        recipients.fee,
    )


def distribute_rewards(
    pot: Pot,
    ledger: Ledger,
    recipients: Recipients,
    now: int,
    settings: Settings,
) -> Optional[RewardSplit]:
    """
    Pay out a closed round and reset the pot to Inactive.

    Returns None when the round had nothing to pay (no deposits or no winner).
    A failing transfer aborts the whole payout; the caller's transaction
    rolls back whatever already moved.
    """
    require(
        pot.round_state is RoundState.COOLDOWN,
        ErrorCode.INVALID_STATE,
        f"distribute needs cooldown, pot is {pot.round_state.value}",
    )
    require(pot.random_seed_result is not None, ErrorCode.RANDOMNESS_NOT_AVAILABLE)

    if pot.total_amount == 0 or not pot.deposits or pot.selected_winner is None:
        pot.clear_round(now)
        log.info("Empty round reset at %d; nothing distributed", now)
        return None

    check_recipients(pot, recipients, settings)
    split = compute_split(distributable_amount(pot.total_amount, settings), settings)

    transfers: List[Tuple[str, int]] = [
        (recipients.winner, split.winner),
        (recipients.buyback, split.buyback),
        (recipients.fee, split.fee),
        (recipients.closer, split.closer),
    ]
    for recipient, amount in transfers:
        ledger.transfer(pot.address, recipient, amount, signer=pot.address)

    log.info(
        "Rewards distributed: winner %s=%d buyback=%d fee=%d closer %s=%d (kept %d)",
        recipients.winner,
        split.winner,
        split.buyback,
        split.fee,
        recipients.closer,
        split.closer,
        split.remainder,
    )
    pot.clear_round(now)
    return split
