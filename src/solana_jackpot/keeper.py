from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Optional

from .errors import JackpotError
from .program import JackpotProgram
from .store import RoundState

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class KeeperAction:
    name: str
    result: Any = None


class Keeper:
    """
    Drives rounds forward by submitting whichever operation is due.

    The pot never advances on its own; something has to call it. The keeper
    is that caller: it starts rounds as `caller` (so `caller` should be the
    authority), closes them, and pays them out.
    """

    def __init__(self, program: JackpotProgram, caller: str) -> None:
        self.program = program
        self.caller = caller

    def step(self) -> KeeperAction:
        pot = self.program.pot
        settings = self.program.settings
        now = self.program.clock.now()
        elapsed = now - pot.last_transition_time
        log.debug(
            "Game state: %s | last transition: %d | now: %d",
            pot.round_state.value,
            pot.last_transition_time,
            now,
        )

        if pot.round_state is RoundState.INACTIVE:
            if elapsed < settings.cooldown_duration:
                return KeeperAction("wait")
            log.info("Cooldown complete. Starting new round...")
            self.program.start_round(self.caller)
            return KeeperAction("start_round")

        if pot.round_state is RoundState.ACTIVE:
            if elapsed < settings.active_duration:
                return KeeperAction("wait")
            log.info("Active duration complete. Ending round...")
            self.program.end_round(self.caller)
            return KeeperAction("end_round")

        if pot.random_seed_result is None:
            return KeeperAction("wait")
        if pot.selected_winner is None and not pot.deposits:
            log.info("No winner this round. Resetting...")
            self.program.reset_if_no_winner(self.caller)
            return KeeperAction("reset_if_no_winner")

        log.info("Randomness available. Distributing rewards...")
        split = self.program.distribute_rewards(
            winner=pot.selected_winner,
            buyback=settings.buyback_address,
            fee=settings.fee_address,
            closer=pot.round_closer,
        )
        return KeeperAction("distribute_rewards", split)

    def run(self, poll_s: float = 5.0, max_steps: Optional[int] = None) -> None:
        steps = 0
        while max_steps is None or steps < max_steps:
            try:
                self.step()
            except JackpotError as e:
                log.warning("Keeper step rejected: %s", e)
            steps += 1
            time.sleep(poll_s)
