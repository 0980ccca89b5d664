from __future__ import annotations

import logging

from .config import Settings
from .errors import ErrorCode, require
from .randomness import draw
from .store import Pot, RoundState

log = logging.getLogger(__name__)


def start_round(pot: Pot, caller: str, now: int, settings: Settings) -> None:
    """Inactive -> Active, once the cooldown since the last round has passed."""
    require(caller == pot.authority, ErrorCode.UNAUTHORIZED, caller)
    require(
        pot.round_state is RoundState.INACTIVE,
        ErrorCode.INVALID_STATE,
        f"start_round needs inactive, pot is {pot.round_state.value}",
    )
    elapsed = now - pot.last_transition_time
    require(
        elapsed >= settings.cooldown_duration,
        ErrorCode.COOLDOWN_ACTIVE,
        f"{elapsed}s of {settings.cooldown_duration}s cooldown elapsed",
    )

    pot.round_state = RoundState.ACTIVE
    pot.last_transition_time = now
    log.info("Round started at %d", now)


def end_round(pot: Pot, caller: str, now: int, settings: Settings) -> None:
    """Active -> Cooldown. Permissionless; the caller is recorded as closer."""
    require(
        pot.round_state is RoundState.ACTIVE,
        ErrorCode.INVALID_STATE,
        f"end_round needs active, pot is {pot.round_state.value}",
    )
    elapsed = now - pot.last_transition_time
    require(
        elapsed >= settings.active_duration,
        ErrorCode.COOLDOWN_ACTIVE,
        f"round open {elapsed}s of {settings.active_duration}s",
    )
    require(
        caller != pot.address,
        ErrorCode.INVALID_CALLER_ACCOUNT,
        "the pot cannot close its own round",
    )

    digest, winner = draw(pot.address, pot.bump, now, pot.total_amount, pot.deposits)
    pot.random_seed_result = digest
    pot.selected_winner = winner
    pot.round_closer = caller
    pot.round_state = RoundState.COOLDOWN
    pot.last_transition_time = now
    log.info(
        "Round ended at %d by %s; entrants=%d winner=%s",
        now,
        caller,
        len(pot.deposits),
        winner or "-",
    )
    log.debug("Pseudo-random hash: %s", digest.hex())


def reset_if_no_winner(pot: Pot, caller: str, now: int, settings: Settings) -> None:
    """Cooldown -> Inactive for a round that produced no winner."""
    if settings.reset_requires_authority:
        require(caller == pot.authority, ErrorCode.UNAUTHORIZED, caller)
    require(
        pot.round_state is RoundState.COOLDOWN,
        ErrorCode.INVALID_STATE,
        f"reset needs cooldown, pot is {pot.round_state.value}",
    )
    require(
        pot.selected_winner is None,
        ErrorCode.INVALID_WINNER_ACCOUNT,
        f"round has a winner ({pot.selected_winner})",
    )
    require(
        not pot.deposits and pot.total_amount == 0,
        ErrorCode.POT_NOT_EMPTY,
        f"{len(pot.deposits)} deposits totalling {pot.total_amount}",
    )

    pot.clear_round(now)
    log.info("Round without winner reset at %d", now)
