from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from . import admin, deposits, rewards, rounds
from .config import Settings
from .errors import JackpotError
from .ledger import Ledger, ManualClock, SystemClock
from .rewards import Recipients, RewardSplit
from .store import DepositRecord, Pot, PotStore

log = logging.getLogger(__name__)


class JackpotProgram:
    """
    The pot's public operations.

    Each call is one atomic transaction against the store: it either applies
    every effect (ledger movement, record changes, state transition) or, on
    any error, none of them.
    """

    def __init__(
        self,
        settings: Settings,
        ledger: Ledger,
        clock: ManualClock | SystemClock | None = None,
        store: Optional[PotStore] = None,
    ) -> None:
        self.settings = settings
        self.ledger = ledger
        self.clock = clock or SystemClock()
        self.store = store or PotStore(ledger)
        if self.store.ledger is not ledger:
            raise ValueError("Store and program must share one ledger")

    @property
    def pot(self) -> Pot:
        return self.store.load()

    @property
    def pot_address(self) -> str:
        address, _ = self.settings.pot_seed
        return address

    def pot_balance(self) -> int:
        return self.ledger.balance(self.pot_address)

    def initialize(self, authority: str) -> Pot:
        address, bump = self.settings.pot_seed
        pot = Pot(
            address=address,
            bump=bump,
            authority=authority,
            last_transition_time=self.clock.now(),
        )
        self.store.create(pot, payer=authority, rent=self.settings.rent_minimum)
        log.info("Initialized pot %s (bump %d) for authority %s", address, bump, authority)
        return self.pot

    def start_round(self, caller: str) -> None:
        with self._transaction("start_round") as pot:
            rounds.start_round(pot, caller, self.clock.now(), self.settings)

    def deposit(self, caller: str, amount: int) -> DepositRecord:
        with self._transaction("deposit") as pot:
            return deposits.deposit(
                pot, self.ledger, caller, amount, self.clock.now(), self.settings
            )

    def end_round(self, caller: str) -> None:
        with self._transaction("end_round") as pot:
            rounds.end_round(pot, caller, self.clock.now(), self.settings)

    def reset_if_no_winner(self, caller: str) -> None:
        with self._transaction("reset_if_no_winner") as pot:
            rounds.reset_if_no_winner(pot, caller, self.clock.now(), self.settings)

    def distribute_rewards(
        self, winner: str, buyback: str, fee: str, closer: str
    ) -> Optional[RewardSplit]:
        recipients = Recipients(winner=winner, buyback=buyback, fee=fee, closer=closer)
        with self._transaction("distribute_rewards") as pot:
            return rewards.distribute_rewards(
                pot, self.ledger, recipients, self.clock.now(), self.settings
            )

    def admin_withdraw(self, caller: str) -> int:
        with self._transaction("admin_withdraw") as pot:
            return admin.admin_withdraw(pot, self.ledger, caller, self.settings)

    @contextmanager
    def _transaction(self, op: str) -> Iterator[Pot]:
        try:
            with self.store.transaction() as pot:
                yield pot
        except JackpotError as e:
            log.debug("%s rejected: %s", op, e)
            raise
