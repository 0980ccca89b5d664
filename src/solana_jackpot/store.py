from __future__ import annotations

import copy
import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Optional

from .errors import ErrorCode, JackpotError, require
from .ledger import Ledger

log = logging.getLogger(__name__)


class RoundState(Enum):
    ACTIVE = "active"
    COOLDOWN = "cooldown"
    INACTIVE = "inactive"


@dataclass(frozen=True)
class DepositRecord:
    depositor: str
    amount: int
    timestamp: int


@dataclass
class Pot:
    """The singleton round record: state, deposit ledger and draw outcome."""

    address: str
    bump: int
    authority: str
    round_state: RoundState = RoundState.INACTIVE
    last_transition_time: int = 0
    total_amount: int = 0
    deposits: List[DepositRecord] = field(default_factory=list)
    random_seed_result: Optional[bytes] = None
    selected_winner: Optional[str] = None
    round_closer: Optional[str] = None

    def check_invariants(self) -> None:
        deposited = sum(d.amount for d in self.deposits)
        if deposited != self.total_amount:
            raise RuntimeError(
                f"Pot invariant violated: total_amount={self.total_amount} "
                f"but deposits sum to {deposited}"
            )
        in_cooldown = self.round_state is RoundState.COOLDOWN
        if self.random_seed_result is not None and not in_cooldown:
            raise RuntimeError(
                f"Pot invariant violated: randomness present in {self.round_state.value} state"
            )
        if in_cooldown and self.random_seed_result is None:
            raise RuntimeError("Pot invariant violated: cooldown without randomness")
        if self.selected_winner is not None and self.random_seed_result is None:
            raise RuntimeError("Pot invariant violated: winner recorded without randomness")

    def clear_round(self, now: int) -> None:
        self.deposits.clear()
        self.total_amount = 0
        self.random_seed_result = None
        self.selected_winner = None
        self.round_closer = None
        self.round_state = RoundState.INACTIVE
        self.last_transition_time = now


class PotStore:
    """
    Holds the one Pot and serializes every state-changing operation.

    Operations mutate a working copy inside `transaction()`. The copy replaces
    the stored Pot only if the block finishes; otherwise the ledger is rolled
    back too, so a failed operation leaves no trace.
    """

    def __init__(self, ledger: Ledger) -> None:
        self.ledger = ledger
        self._pot: Optional[Pot] = None
        self._lock = ledger.lock

    @property
    def initialized(self) -> bool:
        return self._pot is not None

    def create(self, pot: Pot, payer: Optional[str] = None, rent: int = 0) -> None:
        """Store the Pot once; `payer` funds its account with `rent` first."""
        with self._lock:
            require(self._pot is None, ErrorCode.ALREADY_INITIALIZED, pot.address)
            pot.check_invariants()
            if payer is not None and rent > 0:
                self.ledger.transfer(payer, pot.address, rent, signer=payer)
            self._pot = copy.deepcopy(pot)

    def load(self) -> Pot:
        with self._lock:
            if self._pot is None:
                raise JackpotError(ErrorCode.NOT_INITIALIZED)
            return copy.deepcopy(self._pot)

    @contextmanager
    def transaction(self) -> Iterator[Pot]:
        with self._lock:
            working = self.load()
            snap = self.ledger.snapshot()
            try:
                yield working
                working.check_invariants()
            except BaseException:
                self.ledger.restore(snap)
                log.debug("Transaction rolled back")
                raise
            self._pot = working
